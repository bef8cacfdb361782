from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping

import httpx
import pytest

from agent_readiness.config import Settings
from agent_readiness.fetcher import Fetcher

TEST_SETTINGS = Settings(
    user_agent="agent-readiness-tests/1.0",
    fetch_timeout=2.0,
    fetch_retries=0,
    retry_backoff=0.0,
    probe_timeout=1.0,
    batch_delay=0.0,
)


class FakeSite:
    """Serves fixed bodies keyed by ``host + path`` (``"acme.com/"``, ``"docs.acme.com/"``).

    Anything else is answered with ``default`` (a status code) or, when
    ``default`` is an exception class, by raising it.
    """

    def __init__(self, routes: Mapping[str, str | tuple[int, str]], default: int | type[Exception] = 404):
        self.routes = dict(routes)
        self.default = default
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(f"{request.url.host}{request.url.path}")
        if route is None:
            if isinstance(self.default, type) and issubclass(self.default, Exception):
                raise self.default("unreachable", request=request)
            return httpx.Response(self.default, text="not found")
        status, body = route if isinstance(route, tuple) else (200, route)
        return httpx.Response(status, text=body, headers={"content-type": "text/html"})

    def paths_requested(self) -> list[str]:
        return [f"{r.url.host}{r.url.path}" for r in self.requests]


@pytest.fixture
def settings() -> Settings:
    return TEST_SETTINGS


@pytest.fixture
def with_fetcher(settings):
    """Run ``fn(fetcher)`` against a mock transport inside a fresh event loop."""

    def run(handler, fn: Callable[[Fetcher], Awaitable], *, settings: Settings = settings):
        async def go():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                return await fn(Fetcher(client, settings))

        return asyncio.run(go())

    return run


@pytest.fixture
def fake_site():
    return FakeSite
