from __future__ import annotations

import httpx

from ..config import ChatGPTConfig
from ..core.errors import ConfigurationError, TransportError
from .base import ChatClient

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant that receives article digests."


class ChatGPTClient(ChatClient):
    """Sends digests to an OpenAI-compatible chat completions endpoint."""

    def __init__(self, cfg: ChatGPTConfig, client: httpx.AsyncClient | None = None):
        self.cfg = cfg
        self.client = client or httpx.AsyncClient(timeout=cfg.timeout_seconds)

    async def send_digest(self, payload: bytes) -> None:
        if not self.cfg.api_key or not self.cfg.endpoint or not self.cfg.model:
            raise ConfigurationError("chatgpt client misconfigured")

        body = {
            "model": self.cfg.model,
            "messages": [
                {"role": "system", "content": _safe_prompt(self.cfg.system_prompt)},
                {"role": "user", "content": payload.decode("utf-8")},
            ],
        }
        headers = {
            "Authorization": f"Bearer {self.cfg.api_key}",
            "Content-Type": "application/json",
        }
        try:
            resp = await self.client.post(
                self.cfg.endpoint, json=body, headers=headers, timeout=self.cfg.timeout_seconds
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"send digest: {type(exc).__name__}: {exc}") from exc

        if resp.status_code >= 400:
            detail = resp.content[:1024].decode("utf-8", errors="replace").strip()
            raise TransportError(
                f"chatgpt error {resp.status_code}: {detail}",
                status_code=resp.status_code,
            )


def _safe_prompt(prompt: str) -> str:
    prompt = (prompt or "").strip()
    return prompt or DEFAULT_SYSTEM_PROMPT
