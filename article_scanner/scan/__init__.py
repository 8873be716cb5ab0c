"""
Listing scanners.

This package holds the listing page extractor, the scanner strategy
registry, the arxiv scanner and the multi-site source that feeds the
ingestion pipeline.
"""

from .listing import build_page_url, extract_articles, parse_entry, parse_listing_date
from .registry import Scanner, ScannerRegistry
from .arxiv import ArxivScanner
from .source import StrategySource

__all__ = [
    "build_page_url",
    "extract_articles",
    "parse_entry",
    "parse_listing_date",
    "Scanner",
    "ScannerRegistry",
    "ArxivScanner",
    "StrategySource",
]
