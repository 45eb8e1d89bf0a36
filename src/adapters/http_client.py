"""httpx wrapper.

- Standardizes timeouts, headers and redirects for every remote source.
- `HttpxFetcher` implements `core.interfaces.fetcher.RemoteFetcher`; tests
  swap the transport with `httpx.MockTransport`.
"""

from __future__ import annotations

import logging

import httpx

from core.config import AppSettings
from core.domain.errors import RemoteFetchError
from core.interfaces.fetcher import FetchResponse, RemoteFetcher

logger = logging.getLogger(__name__)


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with safe defaults (timeout, User-Agent, JSON accept)."""

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


class HttpxFetcher(RemoteFetcher):
    """Fetch primitive over a shared `httpx.AsyncClient`.

    Use as an async context manager; the client is closed on exit unless it
    was supplied by the caller.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "HttpxFetcher":
        if self._client is None:
            self._client = build_async_client(self._settings)
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str, headers: dict[str, str] | None = None) -> FetchResponse:
        if self._client is None:
            raise RuntimeError("HttpxFetcher used outside of 'async with'")
        try:
            resp = await self._client.get(url, headers=headers)
        except httpx.TimeoutException as exc:
            logger.warning("Timeout fetching %s", url)
            raise RemoteFetchError(url, f"timed out after {self._settings.http_timeout_seconds}s") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Network error fetching %s: %s", url, exc)
            raise RemoteFetchError(url, str(exc) or exc.__class__.__name__) from exc

        logger.debug("GET %s -> %s", url, resp.status_code)
        return FetchResponse(status_code=resp.status_code, text=resp.text, url=str(resp.url))
