from __future__ import annotations

import httpx

from ..core.types import Article
from ..providers.base import Downloader
from .fetcher import DEFAULT_USER_AGENT, fetch_bytes


class HttpDownloader(Downloader):
    """Downloads the full article page for summarization."""

    def __init__(self, client: httpx.AsyncClient, user_agent: str = DEFAULT_USER_AGENT):
        self.client = client
        self.user_agent = user_agent

    async def download(self, article: Article) -> bytes | None:
        if not article.url:
            return None
        body = await fetch_bytes(self.client, article.url, self.user_agent)
        return body or None
