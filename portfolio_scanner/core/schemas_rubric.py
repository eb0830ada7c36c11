"""Pydantic schemas for entry-level rubric scoring."""

import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from portfolio_scanner.core.ladder import LadderPath
from portfolio_scanner.core.schemas_dimensions import Tier, clamp_score

RUBRIC_CATEGORY_NAMES = (
    "voice_integrity",
    "specificity_evidence",
    "transformative_impact",
    "role_clarity_ownership",
    "narrative_arc_stakes",
    "initiative_leadership",
    "community_collaboration",
    "reflection_meaning",
    "craft_language_quality",
    "fit_trajectory",
    "time_investment_consistency",
)

ReaderImpression = Literal[
    "captivating_grounded",
    "strong_distinct_voice",
    "solid_needs_polish",
    "patchy_narrative",
    "generic_unclear",
]


class ScoreEntryOptions(BaseModel):
    """Optional context for scoring a single activity description."""

    model_config = ConfigDict(extra="ignore")

    activity_id: str | None = None
    title: str | None = None
    role: str | None = None
    category: str | None = Field(
        default=None, description="Activity category; adjusts rubric weights"
    )


class RubricCategoryScore(BaseModel):
    name: str
    score: float = Field(..., ge=0.0, le=10.0)
    evidence_snippets: list[str] = Field(default_factory=list)
    notes: str = ""


class AuthenticitySignal(BaseModel):
    score: float = Field(..., ge=0.0, le=10.0)
    voice_type: Literal["conversational", "factual", "resume", "essay"] = "factual"
    red_flags: list[str] = Field(default_factory=list)
    green_flags: list[str] = Field(default_factory=list)


class RubricReport(BaseModel):
    """Result of scoring one free-text entry. Never mutated after construction."""

    model_config = ConfigDict(frozen=True)

    entry_id: str | None = None
    score: float = Field(..., ge=0.0, le=10.0)
    tier: Tier
    categories: list[RubricCategoryScore]
    weights: dict[str, float]
    narrative_quality_index: int = Field(..., ge=0, le=100)
    reader_impression_label: ReaderImpression
    authenticity: AuthenticitySignal
    suggested_fixes: list[str] = Field(default_factory=list)
    word_count: int = Field(..., ge=0)
    flags: list[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)
    path: LadderPath


# =======================
# Reasoning service output
# =======================


class CategoryScoreOutput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    score: float
    evidence_snippets: list[str] = Field(default_factory=list)
    notes: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _normalize_name(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("score", mode="before")
    @classmethod
    def _numeric_score(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("score must be a number")
        if math.isnan(value) or math.isinf(value):
            raise ValueError("score must be finite")
        return clamp_score(value)

    @field_validator("evidence_snippets", mode="before")
    @classmethod
    def _snippets(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            return [value]
        if not isinstance(value, list):
            return []
        return [str(v) for v in value]

    @field_validator("notes", mode="before")
    @classmethod
    def _notes(cls, value: Any) -> str:
        return "" if value is None else str(value)


class AuthenticityOutput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    score: float | None = None
    voice_type: str | None = None
    red_flags: list[str] = Field(default_factory=list)
    green_flags: list[str] = Field(default_factory=list)


class EntryRubricOutput(BaseModel):
    """Every rubric category must be scored; other fields are optional."""

    model_config = ConfigDict(extra="ignore")

    categories: list[CategoryScoreOutput]
    suggested_fixes: list[str] = Field(default_factory=list)
    flags: list[str] = Field(default_factory=list)
    authenticity: AuthenticityOutput | None = None

    @model_validator(mode="after")
    def _covers_rubric(self) -> "EntryRubricOutput":
        present = {c.name for c in self.categories}
        missing = [name for name in RUBRIC_CATEGORY_NAMES if name not in present]
        if missing:
            raise ValueError(f"categories missing: {', '.join(missing)}")
        return self

    def scores_by_name(self) -> dict[str, CategoryScoreOutput]:
        """First occurrence of each known category."""
        by_name: dict[str, CategoryScoreOutput] = {}
        for category in self.categories:
            if category.name in RUBRIC_CATEGORY_NAMES and category.name not in by_name:
                by_name[category.name] = category
        return by_name
