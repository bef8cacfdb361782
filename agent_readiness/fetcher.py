from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import httpx

from .config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    body: str
    status: int


class Fetcher:
    """Bounded HTTP GET with per-request timeout and linear-backoff retries.

    A page that can't be fetched yields ``None`` rather than an exception, so a
    single unreachable URL never aborts a crawl. Status codes >= 400 are
    returned as-is; callers decide whether the page is usable.
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self._client = client
        self._settings = settings
        self._headers = {
            "user-agent": settings.user_agent,
            "accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "accept-language": "en-US,en;q=0.9",
        }

    async def fetch(self, url: str, timeout: float | None = None, retries: int | None = None) -> FetchResult | None:
        timeout = self._settings.fetch_timeout if timeout is None else timeout
        retries = self._settings.fetch_retries if retries is None else retries

        for attempt in range(retries + 1):
            try:
                res = await asyncio.wait_for(
                    self._client.get(url, headers=self._headers, timeout=timeout, follow_redirects=True),
                    timeout=timeout,
                )
                return FetchResult(body=res.text, status=res.status_code)
            except (httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError) as e:
                logger.debug("fetch %s failed (attempt %d/%d): %r", url, attempt + 1, retries + 1, e)
                if attempt < retries:
                    await asyncio.sleep(self._settings.retry_backoff * (attempt + 1))
        return None
