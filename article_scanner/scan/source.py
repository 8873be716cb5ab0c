from __future__ import annotations

from dataclasses import replace
from datetime import datetime
import logging

from ..config import SiteConfig
from ..core.errors import ArticleScannerError, ConfigurationError, with_context
from ..core.types import Article, ScanRequest
from ..logging_utils import get_logger, log_debug
from ..providers.base import ArticleSource
from .registry import ScannerRegistry


class StrategySource(ArticleSource):
    """Runs the registered scanner of every configured site.

    Results are concatenated in site order. Articles without provenance
    get the site name. Duplicates across sites are kept.
    """

    def __init__(
        self,
        registry: ScannerRegistry | None,
        sites: list[SiteConfig],
        logger: logging.Logger | None = None,
    ):
        self.registry = registry
        self.sites = sites
        self.logger = logger or get_logger("source")

    async def fetch_daily(self, day: datetime) -> list[Article]:
        if self.registry is None:
            raise ConfigurationError("scanner registry is not configured")

        log_debug(self.logger, "fetch daily", sites=len(self.sites), day=day.date().isoformat())

        aggregated: list[Article] = []
        for site in self.sites:
            log_debug(
                self.logger,
                "process site",
                site=site.name,
                scanner=site.scanner,
                categories=len(site.categories),
            )
            try:
                strategy = self.registry.resolve(site.scanner)
            except ConfigurationError as exc:
                raise with_context(exc, f"site {site.name}") from exc

            request = ScanRequest(
                day=day,
                site_name=site.name,
                categories=site.scan_categories(),
                options=dict(site.options),
            )
            try:
                results = await strategy.scan(request)
            except ArticleScannerError as exc:
                raise with_context(exc, f"scan site {site.name}") from exc

            results = [
                article if article.source else replace(article, source=site.name)
                for article in results
            ]
            log_debug(self.logger, "site produced articles", site=site.name, count=len(results))
            aggregated.extend(results)

        log_debug(self.logger, "strategy source done", total_articles=len(aggregated))
        return aggregated
