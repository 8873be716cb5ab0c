"""
HTTP fetching for listing pages and article payloads.

Listing pages are fetched with a fixed identifying User-Agent. Any
non-2xx status or connection failure is raised as TransportError; there
is no retry loop, callers decide what a failure means for the cycle.
"""

from __future__ import annotations

import httpx

from ..config import FetchConfig
from ..core.errors import TransportError

DEFAULT_USER_AGENT = "ArticlesScanner/1.0"


def build_client(cfg: FetchConfig) -> httpx.AsyncClient:
    """Create the shared async client used for listing and article requests."""
    return httpx.AsyncClient(
        timeout=cfg.timeout_seconds,
        headers={"User-Agent": cfg.user_agent or DEFAULT_USER_AGENT},
        follow_redirects=True,
        trust_env=cfg.trust_env,
    )


async def fetch_bytes(
    client: httpx.AsyncClient,
    url: str,
    user_agent: str = DEFAULT_USER_AGENT,
) -> bytes:
    """GET a URL and return the raw body.

    Args:
        client: Async HTTP client (owned by the caller)
        url: The URL to fetch
        user_agent: User-Agent header sent with the request

    Returns:
        Response body bytes

    Raises:
        TransportError: On invalid URLs, connection failures and non-2xx responses
    """
    try:
        resp = await client.get(url, headers={"User-Agent": user_agent})
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise TransportError(f"request {url}: {type(exc).__name__}: {exc}") from exc

    if not resp.is_success:
        raise TransportError(
            f"{url} returned {resp.status_code} {resp.reason_phrase}",
            status_code=resp.status_code,
        )
    return resp.content


async def fetch_document(
    client: httpx.AsyncClient,
    url: str,
    user_agent: str = DEFAULT_USER_AGENT,
) -> str:
    """GET a markup document and return it decoded as text."""
    body = await fetch_bytes(client, url, user_agent)
    return body.decode("utf-8", errors="replace")
