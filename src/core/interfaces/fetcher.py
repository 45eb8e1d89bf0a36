"""Remote fetch contract used by the source resolver."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field


class FetchResponse(BaseModel):
    status_code: int = Field(..., ge=100, le=599)
    text: str = Field(default="", description="Decoded response body.")
    url: str = Field(default="", description="Final URL after redirects.")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@runtime_checkable
class RemoteFetcher(Protocol):
    """Minimal fetch primitive.

    - `fetch` raises `RemoteFetchError` on network failure or timeout.
    - Non-success statuses are returned, not raised; the caller decides.
    """

    async def fetch(self, url: str, headers: dict[str, str] | None = None) -> FetchResponse:
        ...
