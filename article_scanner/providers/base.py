"""
Abstract collaborator interfaces consumed by the ingestion pipeline.

Every method is a coroutine so that cancelling the cycle's task aborts
whatever network or database call is in flight. Concrete adapters live
next to this module; any of them may be left unconfigured, in which case
the pipeline skips the corresponding step.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable

from ..core.types import Article, ArticleReview, ProcessedArticle


class ArticleSource(ABC):
    """Pulls the candidate articles of one day from upstream sites."""

    @abstractmethod
    async def fetch_daily(self, day: datetime) -> list[Article]:
        raise NotImplementedError


class ArticleRepository(ABC):
    """Persists processed articles for dedup and history."""

    @abstractmethod
    async def already_processed(self, ids: Iterable[str]) -> set[str]:
        """Return the subset of ids already present in storage."""
        raise NotImplementedError

    @abstractmethod
    async def save_processed(self, article: ProcessedArticle) -> None:
        """Upsert a processed article keyed by its external id."""
        raise NotImplementedError


class Analyzer(ABC):
    """Scores an article and detects its topics."""

    @abstractmethod
    async def rank(self, article: Article) -> ArticleReview:
        raise NotImplementedError


class Summarizer(ABC):
    """Produces the final summary from downloaded content."""

    @abstractmethod
    async def summarize(self, article: Article, content: bytes) -> str:
        raise NotImplementedError


class Downloader(ABC):
    """Fetches full-text payloads. None means no content."""

    @abstractmethod
    async def download(self, article: Article) -> bytes | None:
        raise NotImplementedError


class ChatClient(ABC):
    """Pushes the structured digest to a chat service."""

    @abstractmethod
    async def send_digest(self, payload: bytes) -> None:
        raise NotImplementedError


class Notifier(ABC):
    """Delivers the human-readable digest."""

    @abstractmethod
    async def publish_digest(self, digest: str) -> None:
        raise NotImplementedError
