"""
Ingestion pipeline for one day of articles.

A cycle runs these stages strictly in order:
1. Fetch candidate articles from the source
2. Load the ids already processed from the repository
3. Enrich each new article (rank, download, summarize)
4. Persist each enriched article
5. Send the JSON digest to the chat relay
6. Publish the text digest through the notifier

The first failing stage aborts the cycle with a PipelineError naming the
stage and article. Earlier side effects are not rolled back. Stages whose
collaborator is not configured are skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Awaitable, TypeVar

from .core.digest import build_digest_message, build_digest_payload
from .core.errors import PipelineError
from .core.types import Article, ArticleReview, ProcessedArticle, ProcessingStatus
from .logging_utils import get_logger, log_debug, log_event
from .providers.base import (
    Analyzer,
    ArticleRepository,
    ArticleSource,
    ChatClient,
    Downloader,
    Notifier,
    Summarizer,
)

T = TypeVar("T")


@dataclass
class PipelineDeps:
    """Collaborators wired into the pipeline. Every one is optional."""

    source: ArticleSource | None = None
    repository: ArticleRepository | None = None
    analyzer: Analyzer | None = None
    summarizer: Summarizer | None = None
    downloader: Downloader | None = None
    notifier: Notifier | None = None
    chat_client: ChatClient | None = None
    logger: logging.Logger | None = None


class Pipeline:
    """Orchestrates fetching, ranking, summarizing, persisting and delivery."""

    def __init__(self, deps: PipelineDeps):
        self.source = deps.source
        self.repository = deps.repository
        self.analyzer = deps.analyzer
        self.summarizer = deps.summarizer
        self.downloader = deps.downloader
        self.notifier = deps.notifier
        self.chat_client = deps.chat_client
        self.logger = deps.logger or get_logger("pipeline")

    async def process_day(self, day: datetime) -> list[ArticleReview]:
        """Run one ingestion cycle for the given day.

        Args:
            day: Any timestamp within the requested day

        Returns:
            The digest: reviews of newly processed articles, in fetch order

        Raises:
            PipelineError: On the first failing stage
        """
        if self.source is None:
            return []

        log_debug(self.logger, "starting pipeline", day=day.date().isoformat())

        articles = await self._stage("fetch", self.source.fetch_daily(day))
        log_debug(self.logger, "source returned articles", count=len(articles))

        known: set[str] = set()
        if self.repository is not None and articles:
            ids = [article.id for article in articles]
            known = await self._stage("load_processed", self.repository.already_processed(ids))

        digest: list[ArticleReview] = []
        for article in articles:
            if article.id in known:
                log_debug(self.logger, "skip article (already processed)", article_id=article.id)
                continue

            review = await self._enrich(article)
            digest.append(review)

            if self.repository is not None:
                # status is written before delivery runs
                processed = ProcessedArticle.from_review(review, ProcessingStatus.DELIVERED)
                await self._stage(
                    "persist", self.repository.save_processed(processed), article.id
                )

        if not digest:
            log_debug(self.logger, "no articles processed", day=day.date().isoformat())
            return digest

        if self.chat_client is not None:
            payload = build_digest_payload(digest)
            await self._stage("chat", self.chat_client.send_digest(payload))
            log_debug(self.logger, "sent digest to chat relay", count=len(digest))

        if self.notifier is not None:
            message = build_digest_message(digest)
            log_debug(self.logger, "publishing digest to notifier", size=len(message))
            await self._stage("notify", self.notifier.publish_digest(message))

        log_event(
            self.logger,
            "Pipeline complete",
            event="pipeline_complete",
            day=day.date().isoformat(),
            fetched=len(articles),
            processed=len(digest),
        )
        return digest

    async def _enrich(self, article: Article) -> ArticleReview:
        log_debug(self.logger, "processing article", article_id=article.id)

        review = ArticleReview(article=article, summary=article.abstract)

        if self.analyzer is not None:
            review = await self._stage("rank", self.analyzer.rank(article), article.id)

        payload = b""
        if self.downloader is not None:
            content = await self._stage("download", self.downloader.download(article), article.id)
            payload = content or b""

        if self.summarizer is not None:
            review.summary = await self._stage(
                "summarize", self.summarizer.summarize(article, payload), article.id
            )

        return review

    async def _stage(self, stage: str, step: Awaitable[T], article_id: str | None = None) -> T:
        try:
            return await step
        except PipelineError:
            raise
        except Exception as exc:  # noqa: BLE001
            self.logger.error(
                "Stage %s failed: %s",
                stage,
                exc,
                extra={"event": "stage_failed", "stage": stage, "article_id": article_id},
            )
            raise PipelineError(stage, str(exc), article_id) from exc
