"""
Listing page extraction for arxiv-style category indexes.

A listing page is a sequence of `dl > dt` / `dd` pairs in descending
publication order. The extractor turns one page into articles matching
the requested day plus a flag telling the scanner whether the next page
can still hold matching entries.
"""

from __future__ import annotations

from datetime import datetime, timezone
import re
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import Tag

from ..core.errors import ConfigurationError, ListingParseError
from ..core.types import Article, truncate_day

ARXIV_BASE_URL = "https://arxiv.org"
ABS_LINK_SELECTOR = 'a[href*="/abs/"]'

DATE_RE = re.compile(r"\d{1,2} [A-Za-z]{3} \d{4}")


def extract_articles(
    html: str,
    target_day: datetime,
    site_name: str,
    category: str,
    page_size: int,
    now: datetime | None = None,
) -> tuple[list[Article], bool]:
    """Parse one listing page and keep the entries of the target day.

    Entries are classified against the target day in page order:
    same day entries are collected, newer entries are skipped, and the
    first older entry stops the page since everything below it is older.
    A page holding fewer raw entries than page_size is the last one.

    Args:
        html: The fetched listing document
        target_day: Requested day, truncated to UTC midnight here
        site_name: Site label used for provenance
        category: Category label used for provenance
        page_size: Number of entries requested per page
        now: Fallback timestamp for entries without a parseable date,
            defaults to midnight UTC of the current day

    Returns:
        Tuple of (matching articles in page order, continue_paging)

    Raises:
        ListingParseError: If the document cannot be parsed
    """
    soup = _parse_document(html)
    target = truncate_day(target_day)
    if now is None:
        now = truncate_day(datetime.now(timezone.utc))

    collected: list[Article] = []
    continue_paging = True
    processed = 0

    for dt in soup.select("dl > dt"):
        dd = dt.find_next_sibling()
        processed += 1

        article = parse_entry(dt, dd, site_name, category, now=now)
        article_day = truncate_day(article.published_at)
        if article_day == target:
            collected.append(article)
        elif article_day < target:
            continue_paging = False
            break

    if processed < page_size:
        continue_paging = False

    return collected, continue_paging


def parse_entry(
    dt: Tag,
    dd: Tag | None,
    site_name: str,
    category: str,
    now: datetime | None = None,
) -> Article:
    """Build an Article from one `dt`/`dd` pair.

    The id prefers the visible link text, then the link path after
    "/abs/", then the canonical URL, so it is never empty.
    """
    link = dt.select_one(ABS_LINK_SELECTOR)
    href = str(link.get("href") or "") if link is not None else ""

    article_id = link.get_text(strip=True) if link is not None else ""
    if not article_id and href:
        article_id = _abs_suffix(href)

    url = href
    if not url.startswith("http"):
        url = ARXIV_BASE_URL.rstrip("/") + url

    title = _node_text(dd, ".list-title").removeprefix("Title:").strip()
    abstract = _abstract_text(dd).removeprefix("Abstract:").strip()

    date_text = _node_text(dd, ".list-date") or _node_text(dd, ".list-dateline")
    published_at = parse_listing_date(date_text)
    if published_at is None:
        published_at = now or truncate_day(datetime.now(timezone.utc))

    if not article_id:
        article_id = url

    source = f"{site_name}/{category}" if category else site_name

    return Article(
        id=article_id,
        title=title,
        abstract=abstract,
        url=url,
        source=source,
        published_at=published_at,
    )


def parse_listing_date(text: str) -> datetime | None:
    """Parse the first "8 Nov 2025" style token, returning a UTC datetime."""
    match = DATE_RE.search(text or "")
    if not match:
        return None
    try:
        parsed = datetime.strptime(match.group(0), "%d %b %Y")
    except ValueError:
        return None
    return parsed.replace(tzinfo=timezone.utc)


def build_page_url(base: str, skip: int, page_size: int) -> str:
    """Set the skip/show query parameters, keeping any others on the URL."""
    try:
        parts = urlsplit(base)
    except ValueError as exc:
        raise ConfigurationError(f"invalid category url {base!r}: {exc}") from exc
    if not parts.scheme or not parts.netloc:
        raise ConfigurationError(f"invalid category url {base!r}")

    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key not in ("skip", "show")
    ]
    query.append(("skip", str(skip)))
    query.append(("show", str(page_size)))
    return urlunsplit(parts._replace(query=urlencode(query)))


def _parse_document(html: str) -> BeautifulSoup:
    if not isinstance(html, str):
        raise ListingParseError(f"expected markup text, got {type(html).__name__}")
    try:
        return BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as exc:
        raise ListingParseError(f"parse document: {exc}") from exc


def _abs_suffix(href: str) -> str:
    path = urlsplit(href).path
    if "/abs/" in path:
        return path.split("/abs/", 1)[1].strip("/")
    return path.rstrip("/").rsplit("/", 1)[-1]


def _node_text(node: Tag | None, selector: str) -> str:
    if node is None:
        return ""
    found = node.select_one(selector)
    if found is None:
        return ""
    return found.get_text(" ", strip=True)


def _abstract_text(dd: Tag | None) -> str:
    if dd is None:
        return ""
    node = dd.select_one("p.mathjax")
    if node is None:
        candidates = dd.select(".mathjax")
        node = candidates[-1] if candidates else None
    if node is None:
        return ""
    return node.get_text(" ", strip=True)
