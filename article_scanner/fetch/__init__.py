"""
Listing and article fetching.

This package handles HTTP transport, full-article downloads and text
extraction from downloaded pages.
"""

from .fetcher import DEFAULT_USER_AGENT, build_client, fetch_bytes, fetch_document
from .extractor import content_to_text, extract_text
from .downloader import HttpDownloader

__all__ = [
    "DEFAULT_USER_AGENT",
    "build_client",
    "fetch_bytes",
    "fetch_document",
    "content_to_text",
    "extract_text",
    "HttpDownloader",
]
