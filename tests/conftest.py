"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import asyncio
from typing import Any, Callable

import httpx
import pytest

from adapters.http_client import HttpxFetcher
from adapters.memory_repository import InMemoryProjectRepository
from core.config import AppSettings
from core.services.data_store import ProjectDataStore
from core.services.source_resolver import SourceResolver

Route = Any  # httpx.Response | Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def settings(tmp_path):
    """Hermetic settings: no .env files, short timeout."""
    return AppSettings(
        _env_file=None,
        http_timeout_seconds=2.0,
        resolve_max_concurrency=4,
        store_path=tmp_path / "projects.json",
    )


@pytest.fixture
def routes() -> dict[str, Route]:
    """URL -> canned response (or handler). Unknown URLs answer 404."""
    return {}


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    return []


@pytest.fixture
def fetcher(settings, routes, requests_seen):
    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        route = routes.get(str(request.url))
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        if callable(route):
            return route(request)
        return route

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxFetcher(settings, client=client)


@pytest.fixture
def repository():
    return InMemoryProjectRepository()


@pytest.fixture
def resolver(fetcher, settings):
    return SourceResolver(fetcher, settings)


@pytest.fixture
def store(repository, resolver, settings):
    return ProjectDataStore(repository, resolver, settings)


@pytest.fixture
def run() -> Callable[..., Any]:
    """Drive a coroutine to completion."""
    return asyncio.run
