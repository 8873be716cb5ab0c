"""
Core domain models and business logic.

This package contains data types, errors and digest composition that
are independent of any specific adapter.
"""

from .types import (
    Article,
    ArticleReview,
    Category,
    ProcessedArticle,
    ProcessingStatus,
    ScanRequest,
    truncate_day,
)
from .errors import (
    ArticleScannerError,
    ConfigurationError,
    ListingParseError,
    PersistenceError,
    PipelineError,
    TransportError,
)
from .digest import build_digest_message, build_digest_payload

__all__ = [
    "Article",
    "ArticleReview",
    "Category",
    "ProcessedArticle",
    "ProcessingStatus",
    "ScanRequest",
    "truncate_day",
    "ArticleScannerError",
    "ConfigurationError",
    "ListingParseError",
    "PersistenceError",
    "PipelineError",
    "TransportError",
    "build_digest_message",
    "build_digest_payload",
]
