"""
HTML content extraction with multiple fallback strategies.

This module provides a chain of extraction methods used to reduce a
downloaded article page to plain text before summarization:
1. trafilatura: Fast, purpose-built for article content (default)
2. readability: Mozilla's readability algorithm (fallback)
3. bs4: BeautifulSoup plain text extraction (last resort)
"""

from __future__ import annotations

from typing import Callable

from bs4 import BeautifulSoup
import trafilatura
from readability import Document

DEFAULT_ORDER = ["trafilatura", "readability", "bs4"]


def extract_text(html: str, order: list[str] | None = None) -> str | None:
    """Extract plain text from HTML using a chain of extractors.

    Tries each extraction method in order until one produces non-empty
    output.

    Args:
        html: The HTML content to extract text from
        order: Extraction method names to try, defaults to DEFAULT_ORDER

    Returns:
        Extracted plain text, or None if all methods fail
    """
    for method in order or DEFAULT_ORDER:
        extractor = _get_extractor(method)
        if not extractor:
            continue
        text = extractor(html)
        if text:
            return text.strip()
    return None


def looks_like_html(content: str) -> bool:
    head = content.lstrip()[:512].lower()
    return head.startswith("<!doctype html") or "<html" in head or "<body" in head


def content_to_text(content: bytes) -> str:
    """Decode a downloaded payload, reducing HTML pages to their main text."""
    if not content:
        return ""
    decoded = content.decode("utf-8", errors="replace")
    if looks_like_html(decoded):
        return extract_text(decoded) or ""
    return decoded


def _get_extractor(name: str) -> Callable[[str], str | None] | None:
    if name == "trafilatura":
        return _extract_trafilatura
    if name == "readability":
        return _extract_readability
    if name == "bs4":
        return _extract_bs4
    return None


def _extract_trafilatura(html: str) -> str | None:
    return trafilatura.extract(html)


def _extract_readability(html: str) -> str | None:
    doc = Document(html)
    content_html = doc.summary()
    # readability returns simplified HTML
    return _extract_bs4(content_html)


def _extract_bs4(html: str) -> str | None:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    text = soup.get_text(separator="\n")
    cleaned = "\n".join([line.strip() for line in text.splitlines() if line.strip()])
    return cleaned if cleaned else None
