from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from contextlib import aclosing
from dataclasses import dataclass, field
from typing import TypeVar
from urllib.parse import urlparse

from .config import Settings
from .fetcher import Fetcher, FetchResult
from .links import extract_links
from .urls import DEFAULT_PORTS, Target, same_site

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# Tried on every site, relative to the origin.
SEED_PATHS = (
    "", "/docs", "/api", "/pricing", "/developers", "/developer",
    "/api-docs", "/documentation", "/swagger", "/openapi",
    "/terms", "/tos", "/terms-of-service", "/legal",
    "/sla", "/status", "/security",
    "/sandbox", "/playground", "/test",
    "/integrations", "/plugins", "/marketplace",
)

SUBDOMAIN_PREFIXES = ("docs", "developer", "developers", "api", "status")

# A discovered path has to look like one of these topics to be worth a fetch.
RELEVANT_PATTERNS = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\b(api|docs?|documentation|developer|reference|sdk)\b",
        r"\b(pric|plan|billing|subscription|cost)\b",
        r"\b(terms|tos|legal|privacy|policy|compliance)\b",
        r"\b(integrat|plugin|marketplace|partner|connect)\b",
        r"\b(security|sla|status|uptime|trust)\b",
        r"\b(sandbox|playground|test|demo|trial|get-?started)\b",
        r"\b(sign-?up|register|onboard|quick-?start)\b",
        r"\b(openapi|swagger|graphql|rest|webhook)\b",
        r"\b(kyc|identity|verif|aml|comply)\b",
    )
)

_SKIP_EXTENSION_RE = re.compile(r"\.(png|jpg|jpeg|gif|svg|css|js|woff|ico|pdf|mp4|webm)$", re.IGNORECASE)
_SKIP_SECTION_RE = re.compile(
    r"/(blog|press|news|careers|jobs|about-us|team|contact-us|events|podcast|webinar)\b", re.IGNORECASE
)


@dataclass(frozen=True)
class Page:
    url: str
    body: str
    status: int


@dataclass
class CrawlState:
    """Everything one crawl has learned so far.

    ``pages`` is keyed by path for the main origin and by absolute URL for
    other hosts. ``crawled`` keeps fetch order; only membership is scored.
    """

    pages: dict[str, Page] = field(default_factory=dict)
    visited: set[str] = field(default_factory=set)
    crawled: list[str] = field(default_factory=list)

    def fork(self) -> CrawlState:
        return CrawlState(dict(self.pages), set(self.visited), list(self.crawled))

    def record(self, target: Target, url: str, result: FetchResult | None) -> bool:
        if result is None or result.status >= 400:
            return False
        self.pages[page_key(url, target)] = Page(url=url, body=result.body, status=result.status)
        self.crawled.append(url)
        return True


class BatchPool:
    """Runs work in fixed-size concurrent batches with a pause between batches.

    Every item in a batch settles before the batch is yielded. The pause only
    happens when the consumer asks for the next batch, so breaking out of the
    loop stops both fetching and waiting.
    """

    def __init__(self, size: int, delay: float):
        self.size = max(1, size)
        self.delay = max(0.0, delay)

    async def run(
        self, items: Sequence[T], worker: Callable[[T], Awaitable[R]]
    ) -> AsyncIterator[list[tuple[T, R]]]:
        for start in range(0, len(items), self.size):
            if start and self.delay:
                await asyncio.sleep(self.delay)
            chunk = items[start:start + self.size]
            results = await asyncio.gather(*(worker(item) for item in chunk))
            yield list(zip(chunk, results))


def page_key(url: str, target: Target) -> str:
    p = urlparse(url)
    if f"{p.scheme}://{p.netloc}".lower() == target.origin:
        return p.path or "/"
    return url


def subdomain_seeds(target: Target) -> list[str]:
    return [f"https://{prefix}.{target.base_domain}" for prefix in SUBDOMAIN_PREFIXES]


def seed_urls(target: Target) -> list[str]:
    urls = [target.origin + path for path in SEED_PATHS] + subdomain_seeds(target)
    return list(dict.fromkeys(urls))


def is_relevant_url(url: str) -> bool:
    path = urlparse(url).path.lower()
    if _SKIP_EXTENSION_RE.search(path) or _SKIP_SECTION_RE.search(path):
        return False
    return any(p.search(path) for p in RELEVANT_PATTERNS)


def _normalize_link(link: str, target: Target) -> str | None:
    try:
        p = urlparse(link)
        host = (p.hostname or "").lower()
        port = p.port
    except ValueError:
        return None
    if p.scheme not in ("http", "https") or not host:
        return None
    if not same_site(host, target.base_domain):
        return None

    netloc = host if port in (None, DEFAULT_PORTS[p.scheme]) else f"{host}:{port}"
    path = p.path[:-1] if p.path.endswith("/") else p.path
    return f"{p.scheme}://{netloc}{path}"


def discover_links(state: CrawlState, target: Target, limit: int) -> list[str]:
    """Relevant same-site links not yet visited, in first-seen order, at most ``limit``."""
    if limit <= 0:
        return []

    found: dict[str, None] = {}
    for page in state.pages.values():
        for link in extract_links(page.body, page.url):
            normalized = _normalize_link(link, target)
            if not normalized or normalized in state.visited or normalized in found:
                continue
            if is_relevant_url(normalized):
                found[normalized] = None
    return list(found)[:limit]


async def _fetch_batched(
    state: CrawlState,
    target: Target,
    urls: Sequence[str],
    fetcher: Fetcher,
    pool: BatchPool,
    max_pages: int,
) -> CrawlState:
    state = state.fork()
    if len(state.crawled) >= max_pages:
        return state

    async def worker(url: str) -> FetchResult | None:
        state.visited.add(url)
        return await fetcher.fetch(url)

    async with aclosing(pool.run(urls, worker)) as batches:
        async for batch in batches:
            for url, result in batch:
                if len(state.crawled) >= max_pages:
                    break
                state.record(target, url, result)
            if len(state.crawled) >= max_pages:
                break
    return state


async def crawl_seeds(
    state: CrawlState, target: Target, fetcher: Fetcher, pool: BatchPool, max_pages: int
) -> CrawlState:
    seeds = [u for u in seed_urls(target) if u not in state.visited]
    state = state.fork()
    state.visited.update(seeds)
    state = await _fetch_batched(state, target, seeds, fetcher, pool, max_pages)
    logger.info("seed crawl of %s: %d/%d seeds usable", target.origin, len(state.crawled), len(seeds))
    return state


async def crawl_discovered(
    state: CrawlState, target: Target, fetcher: Fetcher, pool: BatchPool, max_pages: int
) -> CrawlState:
    candidates = discover_links(state, target, max_pages - len(state.crawled))
    before = len(state.crawled)
    state = await _fetch_batched(state, target, candidates, fetcher, pool, max_pages)
    logger.info(
        "discovery crawl of %s: %d candidates, %d usable", target.origin, len(candidates), len(state.crawled) - before
    )
    return state


async def crawl(target: Target, fetcher: Fetcher, settings: Settings) -> CrawlState:
    """Seed crawl followed by one round of link discovery, never more than ``max_pages`` pages."""
    pool = BatchPool(settings.batch_size, settings.batch_delay)
    state = await crawl_seeds(CrawlState(), target, fetcher, pool, settings.max_pages)
    return await crawl_discovered(state, target, fetcher, pool, settings.max_pages)
