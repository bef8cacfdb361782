from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone

from .models import CategoryScore, FrictionSummary, ScoringResult, SubScore
from .rubric import CATEGORIES, Category

MAX_SCORE = 40

_GRADE_FLOORS = ((35, "A"), (28, "B"), (20, "C"), (10, "D"))


def grade_for(total: int) -> str:
    for floor, grade in _GRADE_FLOORS:
        if total >= floor:
            return grade
    return "F"


def category_score(category: Category, sub_scores: Sequence[SubScore]) -> CategoryScore:
    return CategoryScore(
        name=category.name,
        description=category.description,
        max_points=category.max_points,
        score=min(category.max_points, sum(s.score for s in sub_scores)),
        sub_scores=list(sub_scores),
    )


def summarize_friction(sub_scores: Iterable[SubScore]) -> FrictionSummary:
    voluntary: list[str] = []
    regulatory: list[str] = []
    for sub in sub_scores:
        if sub.friction_type == "voluntary":
            voluntary.append(sub.friction_note or sub.name)
        elif sub.friction_type == "regulatory":
            regulatory.append(sub.friction_note or sub.name)
    return FrictionSummary(
        voluntary_friction=voluntary,
        regulatory_friction=regulatory,
        agent_ready_pending=bool(regulatory),
    )


def new_result_id() -> str:
    return uuid.uuid4().hex[:8]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def aggregate(
    origin: str,
    sub_scores: Mapping[str, Sequence[SubScore]],
    crawled_pages: Sequence[str],
    errors: Sequence[str],
    *,
    result_id: str | None = None,
    timestamp: str | None = None,
) -> ScoringResult:
    categories = [category_score(c, sub_scores.get(c.name, ())) for c in CATEGORIES]
    total = sum(c.score for c in categories)
    return ScoringResult(
        id=result_id or new_result_id(),
        url=origin,
        timestamp=timestamp or utc_timestamp(),
        total_score=total,
        max_score=MAX_SCORE,
        grade=grade_for(total),
        categories=categories,
        friction_summary=summarize_friction(s for c in categories for s in c.sub_scores),
        crawled_pages=list(crawled_pages),
        errors=list(errors),
    )
