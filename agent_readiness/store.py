from __future__ import annotations

import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

from .models import ScoringResult


@dataclass(frozen=True)
class _Entry:
    result: ScoringResult
    stored_at: float


class ReportStore:
    """In-process report store: lookup by result id, plus a fresh-result cache per origin.

    At most ``max_reports`` results are kept; the oldest is evicted first. The
    origin cache additionally expires after ``ttl_seconds``.
    """

    def __init__(self, ttl_seconds: float, max_reports: int = 1000, clock: Callable[[], float] = time.time):
        self._ttl = ttl_seconds
        self._max_reports = max(1, max_reports)
        self._clock = clock
        self._by_id: OrderedDict[str, ScoringResult] = OrderedDict()
        self._latest_by_origin: dict[str, _Entry] = {}

    def put(self, result: ScoringResult) -> None:
        self._by_id[result.id] = result
        self._by_id.move_to_end(result.id)
        self._latest_by_origin[result.url] = _Entry(result, self._clock())

        while len(self._by_id) > self._max_reports:
            _, evicted = self._by_id.popitem(last=False)
            entry = self._latest_by_origin.get(evicted.url)
            if entry is not None and entry.result.id == evicted.id:
                del self._latest_by_origin[evicted.url]

    def get(self, result_id: str) -> ScoringResult | None:
        return self._by_id.get(result_id)

    def fresh(self, origin: str) -> ScoringResult | None:
        entry = self._latest_by_origin.get(origin)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self._ttl:
            del self._latest_by_origin[origin]
            return None
        return entry.result
