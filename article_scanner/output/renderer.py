from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, PackageLoader, select_autoescape

from ..core.types import ArticleReview


def _slugify(value: str) -> str:
    lowered = value.strip().lower()
    cleaned = []
    last_dash = False
    for ch in lowered:
        if ch.isalnum():
            cleaned.append(ch)
            last_dash = False
        else:
            if not last_dash:
                cleaned.append("-")
                last_dash = True
    slug = "".join(cleaned).strip("-")
    return slug or "section"


def group_by_source(reviews: list[ArticleReview]) -> list[tuple[str, list[ArticleReview]]]:
    """Group reviews by provenance, keeping first-seen group and item order."""
    grouped: dict[str, list[ArticleReview]] = {}
    for review in reviews:
        grouped.setdefault(review.article.source or "unknown", []).append(review)
    return list(grouped.items())


def render_html(reviews: list[ArticleReview], output_path: Path, title: str) -> None:
    env = Environment(
        loader=PackageLoader("article_scanner", "output/templates"),
        autoescape=select_autoescape(["html"]),
    )
    template = env.get_template("digest.html")

    used_ids: dict[str, int] = {}
    groups = []
    for source, items in group_by_source(reviews):
        base_id = _slugify(source)
        count = used_ids.get(base_id, 0)
        used_ids[base_id] = count + 1
        group_id = f"{base_id}-{count + 1}" if count else base_id
        groups.append({"id": group_id, "name": source, "reviews": items, "count": len(items)})

    html = template.render(
        title=title,
        generated_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC"),
        groups=groups,
        total=len(reviews),
    )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")


def render_markdown(reviews: list[ArticleReview], output_path: Path, title: str) -> None:
    lines = [f"# {title}", "", f"Total: {len(reviews)}", ""]
    for source, items in group_by_source(reviews):
        lines.append(f"## {source}")
        lines.append("")
        for review in items:
            art = review.article
            lines.append(f"### {art.title}")
            lines.append(f"- ID: {art.id}")
            lines.append(f"- Score: {review.score:.2f}")
            if review.topics:
                lines.append(f"- Topics: {', '.join(review.topics)}")
            lines.append(f"- Link: {art.url}")
            if review.summary:
                lines.append(f"- Summary: {review.summary}")
            lines.append("")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text("\n".join(lines), encoding="utf-8")
