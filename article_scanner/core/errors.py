"""Exception hierarchy shared by scanners, adapters and the pipeline."""

from __future__ import annotations


class ArticleScannerError(Exception):
    """Base class for all errors raised by article_scanner."""


class ConfigurationError(ArticleScannerError, ValueError):
    """Missing or invalid wiring, e.g. an unregistered scanner name."""


class TransportError(ArticleScannerError):
    """Non-success response or connection failure from an HTTP service."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ListingParseError(ArticleScannerError):
    """A listing document could not be parsed."""


class PersistenceError(ArticleScannerError):
    """Query or write failure in the article repository."""


class PipelineError(ArticleScannerError):
    """First failure of an ingestion cycle.

    Attributes:
        stage: Name of the failing stage ("fetch", "rank", "persist", ...)
        article_id: Article being processed when the stage failed, if any
    """

    def __init__(self, stage: str, message: str, article_id: str | None = None):
        if article_id:
            text = f"{stage} article {article_id}: {message}"
        else:
            text = f"{stage}: {message}"
        super().__init__(text)
        self.stage = stage
        self.article_id = article_id


def with_context(exc: ArticleScannerError, context: str) -> ArticleScannerError:
    """Return a copy of exc of the same type with context prefixed to its message."""
    if isinstance(exc, TransportError):
        return TransportError(f"{context}: {exc}", status_code=exc.status_code)
    return type(exc)(f"{context}: {exc}")
