"""Shared builders for listing pages and articles used across tests."""

from __future__ import annotations

from datetime import datetime, timezone

from article_scanner.core.types import Article


def listing_entry(
    arxiv_id: str,
    date: str,
    title: str = "Sample Title",
    abstract: str = "Sample abstract.",
    link_text: str | None = None,
) -> str:
    text = f"arXiv:{arxiv_id}" if link_text is None else link_text
    return f"""
  <dt>
    <span class="list-identifier"><a href="/abs/{arxiv_id}">{text}</a></span>
  </dt>
  <dd>
    <div class="list-date">Date: {date}</div>
    <div class="list-title mathjax">Title: {title}</div>
    <p class="mathjax">Abstract: {abstract}</p>
  </dd>"""


def listing_page(*entries: str) -> str:
    return "<html><body><dl>" + "".join(entries) + "</dl></body></html>"


def make_article(article_id: str, source: str = "arxiv/cs.AI", **overrides) -> Article:
    fields = {
        "id": article_id,
        "title": f"Title {article_id}",
        "abstract": f"Abstract {article_id}",
        "url": f"https://arxiv.org/abs/{article_id}",
        "source": source,
        "published_at": datetime(2025, 11, 8, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return Article(**fields)
