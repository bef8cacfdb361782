from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

FrictionType = Literal["voluntary", "regulatory", "none"]
Grade = Literal["A", "B", "C", "D", "F"]


class _Record(BaseModel):
    # Serialized records use camelCase keys; attributes stay snake_case.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ScoreRequest(BaseModel):
    url: str | None = None


class SubScore(_Record):
    name: str
    max_points: int = Field(..., ge=0)
    score: int = Field(..., ge=0)
    findings: list[str] = Field(default_factory=list)
    friction_type: FrictionType = "none"
    friction_note: str | None = None

    @model_validator(mode="after")
    def _within_max(self) -> SubScore:
        if self.score > self.max_points:
            raise ValueError(f"{self.name}: score {self.score} exceeds max {self.max_points}")
        return self


class CategoryScore(_Record):
    name: str
    description: str
    max_points: int = 10
    score: int = Field(..., ge=0)
    sub_scores: list[SubScore]

    @model_validator(mode="after")
    def _capped_sum(self) -> CategoryScore:
        expected = min(self.max_points, sum(s.score for s in self.sub_scores))
        if self.score != expected:
            raise ValueError(f"{self.name}: score {self.score} != min({self.max_points}, sum of sub-scores)")
        return self


class FrictionSummary(_Record):
    voluntary_friction: list[str] = Field(default_factory=list)
    regulatory_friction: list[str] = Field(default_factory=list)
    agent_ready_pending: bool = False

    @model_validator(mode="after")
    def _pending_when_regulatory(self) -> FrictionSummary:
        if self.agent_ready_pending != bool(self.regulatory_friction):
            raise ValueError("agent_ready_pending must be true exactly when regulatory friction exists")
        return self


class ScoringResult(_Record):
    id: str
    url: str
    timestamp: str
    total_score: int = Field(..., ge=0, le=40)
    max_score: int = 40
    grade: Grade
    categories: list[CategoryScore]
    friction_summary: FrictionSummary
    crawled_pages: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _total_is_sum(self) -> ScoringResult:
        if self.total_score != sum(c.score for c in self.categories):
            raise ValueError("total_score must equal the sum of category scores")
        return self

    def category(self, name: str) -> CategoryScore | None:
        for cat in self.categories:
            if cat.name == name:
                return cat
        return None

    def sub_score(self, name: str) -> SubScore | None:
        for cat in self.categories:
            for sub in cat.sub_scores:
                if sub.name == name:
                    return sub
        return None
