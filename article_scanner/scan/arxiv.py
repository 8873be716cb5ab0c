"""
Arxiv category scanner.

Walks each category listing page by page, collecting the entries of the
requested day. Paging within a category stops as soon as the extractor
sees an older entry or a short page.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging

import httpx

from ..core.errors import ArticleScannerError, ConfigurationError, with_context
from ..core.types import Article, ScanRequest, truncate_day
from ..fetch.fetcher import DEFAULT_USER_AGENT, fetch_document
from ..logging_utils import get_logger, log_debug
from .listing import build_page_url, extract_articles
from .registry import Scanner

DEFAULT_PAGE_SIZE = 200


class ArxivScanner(Scanner):
    name = "arxiv"

    def __init__(
        self,
        client: httpx.AsyncClient,
        page_size: int = DEFAULT_PAGE_SIZE,
        user_agent: str = DEFAULT_USER_AGENT,
        logger: logging.Logger | None = None,
    ):
        self.client = client
        self.page_size = _positive_page_size(page_size, "fetch.page_size")
        self.user_agent = user_agent
        self.logger = logger or get_logger("scanner.arxiv")

    async def scan(self, request: ScanRequest) -> list[Article]:
        """Scan every category of the request for articles of request.day.

        Raises:
            ConfigurationError: If the request has no categories
            ArticleScannerError: If any category fails; the whole scan fails
        """
        if not request.categories:
            raise ConfigurationError(f"no categories provided for site {request.site_name}")

        target_day = truncate_day(request.day)
        # one fallback date for undated entries across the whole scan
        now = truncate_day(datetime.now(timezone.utc))
        page_size = self._page_size(request)
        log_debug(
            self.logger,
            "scan start",
            site=request.site_name,
            categories=len(request.categories),
            target_day=target_day.date().isoformat(),
        )

        results: list[Article] = []
        seen: set[str] = set()

        for category in request.categories:
            skip = 0
            while True:
                try:
                    page_url = build_page_url(category.url, skip, page_size)
                    log_debug(self.logger, "fetching", category=category.name, skip=skip, url=page_url)
                    html = await fetch_document(self.client, page_url, self.user_agent)
                    page_articles, continue_paging = extract_articles(
                        html,
                        target_day,
                        request.site_name,
                        category.name,
                        page_size,
                        now=now,
                    )
                except ArticleScannerError as exc:
                    raise with_context(exc, f"category {category.name}") from exc

                log_debug(
                    self.logger,
                    "page processed",
                    category=category.name,
                    skip=skip,
                    articles=len(page_articles),
                    continue_paging=continue_paging,
                )
                for article in page_articles:
                    if article.id in seen:
                        continue
                    seen.add(article.id)
                    results.append(article)

                if not continue_paging:
                    break
                skip += page_size

        log_debug(self.logger, "scan finished", site=request.site_name, total=len(results))
        return results

    def _page_size(self, request: ScanRequest) -> int:
        raw = request.options.get("page_size")
        if not raw:
            return self.page_size
        return _positive_page_size(raw, f"site {request.site_name} page_size option")


def _positive_page_size(raw: object, label: str) -> int:
    """Parse a page size, rejecting anything that is not a positive integer."""
    try:
        value = int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{label}: invalid page_size {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{label}: page_size must be positive, got {value}")
    return value
