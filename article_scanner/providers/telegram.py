from __future__ import annotations

import httpx

from ..config import TelegramConfig
from ..core.errors import ConfigurationError, TransportError
from .base import Notifier


class TelegramNotifier(Notifier):
    """Posts digests to a Telegram chat through the bot API."""

    def __init__(self, cfg: TelegramConfig, client: httpx.AsyncClient | None = None):
        self.cfg = cfg
        self.client = client or httpx.AsyncClient(timeout=cfg.timeout_seconds)

    async def publish_digest(self, digest: str) -> None:
        if not self.cfg.bot_token or not self.cfg.chat_id:
            raise ConfigurationError("telegram notifier misconfigured")

        endpoint = f"{self.cfg.base_url.rstrip('/')}/bot{self.cfg.bot_token}/sendMessage"
        form = {
            "chat_id": self.cfg.chat_id,
            "text": digest,
            "parse_mode": "Markdown",
        }
        try:
            resp = await self.client.post(endpoint, data=form, timeout=self.cfg.timeout_seconds)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            # the bot token is part of the URL, keep it out of the message
            raise TransportError(f"telegram request failed: {type(exc).__name__}") from exc

        if resp.status_code != 200:
            raise TransportError(
                f"telegram error: {resp.status_code} {resp.reason_phrase}",
                status_code=resp.status_code,
            )
