"""Persistence of processed articles."""

from .repository import SqlArticleRepository, metadata, processed_articles

__all__ = ["SqlArticleRepository", "metadata", "processed_articles"]
