"""
Digest composition for downstream channels.

Two projections of the same ordered review list:
- build_digest_message: human-readable text for the notifier
- build_digest_payload: compact JSON for the chat relay
"""

from __future__ import annotations

import json

from .types import ArticleReview


def build_digest_message(reviews: list[ArticleReview]) -> str:
    """Render reviews as blank-line separated text blocks.

    Each block holds the title, the score with two decimals, the summary
    and the article URL. Order follows the input list.
    """
    blocks = []
    for review in reviews:
        blocks.append(
            f"- {review.article.title}\n"
            f"Score: {review.score:.2f}\n"
            f"{review.summary}\n"
            f"{review.article.url}\n\n"
        )
    return "".join(blocks)


def build_digest_payload(reviews: list[ArticleReview]) -> bytes:
    """Serialize the minimal per-item projection sent to the chat relay."""
    items = [
        {
            "id": review.article.id,
            "url": review.article.url,
            "summary": review.summary,
            "source": review.article.source,
            "title": review.article.title,
        }
        for review in reviews
    ]
    return json.dumps(items, ensure_ascii=False).encode("utf-8")
