"""
Core data types for the Article Scanner.

This module defines the structures passed between pipeline stages:
- Article: One entry detected on a listing page
- Category / ScanRequest: Parameters of a single site scan
- ArticleReview: Article with score, topics and summary
- ProcessedArticle: Snapshot persisted after enrichment
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


@dataclass(frozen=True)
class Article:
    """Represents one entry found on a paginated listing page.

    Attributes:
        id: Stable external identifier (never empty)
        title: The article title
        abstract: Abstract text shown on the listing
        url: Canonical URL of the article page
        source: Provenance label, "site/category" or just "site"
        published_at: Publication timestamp in UTC
    """
    id: str
    title: str
    abstract: str
    url: str
    source: str
    published_at: datetime


@dataclass(frozen=True)
class Category:
    """A concrete listing endpoint of a site (e.g. one arxiv category)."""
    name: str
    url: str


@dataclass
class ScanRequest:
    """Parameters required to execute one site scan.

    Attributes:
        day: The requested day; truncated to UTC midnight by scanners
        site_name: Name of the configured site
        categories: Ordered categories to walk
        options: Free-form strategy options from config
    """
    day: datetime
    site_name: str
    categories: list[Category] = field(default_factory=list)
    options: dict[str, str] = field(default_factory=dict)


@dataclass
class ArticleReview:
    """Article with scoring and enrichment results.

    Attributes:
        article: The source article
        score: Ranking score, range defined by the ranking service
        topics: Topic labels assigned by the ranking service
        summary: Summary text (defaults to the abstract)
        ranked_at: When the ranking service scored the article
    """
    article: Article
    score: float = 0.0
    topics: list[str] = field(default_factory=list)
    summary: str = ""
    ranked_at: datetime | None = None


class ProcessingStatus(str, Enum):
    """Pipeline milestones, in forward-only order."""

    FETCHED = "fetched"
    RANKED = "ranked"
    SUMMARIZED = "summarized"
    DELIVERED = "delivered"


@dataclass
class ProcessedArticle:
    """Snapshot stored in the repository for dedup and audit."""
    article: Article
    summary: str
    score: float
    status: ProcessingStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_review(cls, review: ArticleReview, status: ProcessingStatus) -> ProcessedArticle:
        return cls(
            article=review.article,
            summary=review.summary,
            score=review.score,
            status=status,
        )


def truncate_day(value: datetime) -> datetime:
    """Normalize a timestamp to midnight UTC of its UTC day.

    Naive datetimes are treated as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.replace(hour=0, minute=0, second=0, microsecond=0)
