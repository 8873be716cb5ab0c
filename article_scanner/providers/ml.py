from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx

from ..config import MLConfig
from ..core.errors import ConfigurationError, TransportError
from ..core.types import Article, ArticleReview
from ..fetch.extractor import content_to_text
from .base import Analyzer, Summarizer


class MLClient(Analyzer, Summarizer):
    """Talks to the external ML service for ranking and summarization.

    Endpoints (relative to inference_url):
        POST /rank       {title, abstract}  -> {score, topics, summary}
        POST /summarize  {title, content}   -> {summary}
    """

    def __init__(self, cfg: MLConfig, client: httpx.AsyncClient | None = None):
        if not cfg.inference_url:
            raise ConfigurationError("ML inference_url is not configured")
        self.cfg = cfg
        self.client = client or httpx.AsyncClient(timeout=cfg.timeout_seconds)

    async def rank(self, article: Article) -> ArticleReview:
        data = await self._post("/rank", {"title": article.title, "abstract": article.abstract})
        topics = data.get("topics") or []
        return ArticleReview(
            article=article,
            score=float(data.get("score") or 0.0),
            topics=[str(t) for t in topics],
            summary=str(data.get("summary") or article.abstract),
            ranked_at=datetime.now(timezone.utc),
        )

    async def summarize(self, article: Article, content: bytes) -> str:
        data = await self._post(
            "/summarize",
            {"title": article.title, "content": content_to_text(content)},
        )
        return str(data.get("summary") or "")

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = self.cfg.inference_url.rstrip("/") + path
        headers = {"Content-Type": "application/json"}
        if self.cfg.api_key:
            headers["Authorization"] = f"Bearer {self.cfg.api_key}"
        try:
            resp = await self.client.post(
                url, json=payload, headers=headers, timeout=self.cfg.timeout_seconds
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"ml {path}: {type(exc).__name__}: {exc}") from exc
        if resp.status_code != 200:
            raise TransportError(
                f"ml {path}: unexpected status {resp.status_code}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise TransportError(f"ml {path}: decode response: {exc}") from exc
