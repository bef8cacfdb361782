from __future__ import annotations

import logging
import time

import httpx

from .aggregator import aggregate
from .config import Settings, load_settings
from .corpus import build_corpus
from .crawler import crawl
from .fetcher import Fetcher
from .models import ScoringResult
from .rubric import RubricContext, evaluate_rubric
from .urls import Target, normalize_url

logger = logging.getLogger(__name__)

NO_PAGES_ERROR = "Could not fetch any pages from this URL"


async def score(raw_url: str, *, settings: Settings | None = None, fetcher: Fetcher | None = None) -> ScoringResult:
    """Crawl ``raw_url`` and grade how ready it is for autonomous agents.

    Raises InvalidUrl / NotAFullUrl before touching the network. Anything that
    goes wrong afterwards is absorbed: an unreachable site still gets a
    (low) score, with the problem listed in ``errors``.
    """
    target = normalize_url(raw_url)
    settings = settings or load_settings()

    if fetcher is not None:
        return await _score_target(target, fetcher, settings)

    async with httpx.AsyncClient(follow_redirects=True) as client:
        return await _score_target(target, Fetcher(client, settings), settings)


async def _score_target(target: Target, fetcher: Fetcher, settings: Settings) -> ScoringResult:
    t0 = time.perf_counter()

    state = await crawl(target, fetcher, settings)
    errors: list[str] = []
    if not state.pages:
        errors.append(NO_PAGES_ERROR)
        logger.warning("no pages fetched for %s", target.origin)

    corpus = build_corpus(state.pages)
    ctx = RubricContext(corpus=corpus, target=target, fetcher=fetcher, settings=settings)
    sub_scores = await evaluate_rubric(ctx)

    result = aggregate(target.origin, sub_scores, state.crawled, errors)
    logger.info(
        "scored %s: %d/%d (%s) from %d pages in %dms",
        result.url, result.total_score, result.max_score, result.grade,
        len(result.crawled_pages), int((time.perf_counter() - t0) * 1000),
    )
    return result
