"""Pydantic schemas for dimension analysis."""

import math
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from portfolio_scanner.core.ladder import LadderPath

SCORE_MIN = 0.0
SCORE_MAX = 10.0

Severity = Literal["critical", "moderate", "minor"]


class Dimension(str, Enum):
    """The six scored facets of a portfolio."""

    ACADEMIC_EXCELLENCE = "academic_excellence"
    LEADERSHIP_INITIATIVE = "leadership_initiative"
    INTELLECTUAL_CURIOSITY = "intellectual_curiosity"
    COMMUNITY_IMPACT = "community_impact"
    AUTHENTICITY_VOICE = "authenticity_voice"
    FUTURE_READINESS = "future_readiness"


class Tier(str, Enum):
    EXCEPTIONAL = "exceptional"
    STRONG = "strong"
    DEVELOPING = "developing"
    FOUNDATIONAL = "foundational"


def clamp_score(value: float) -> float:
    """Clamp a score into [0, 10]."""
    return max(SCORE_MIN, min(SCORE_MAX, float(value)))


def clamp_confidence(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def _as_text_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return [str(value)]


def _note_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return "; ".join(str(v) for v in value)
    return str(value)


def _normalize_severity(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in ("critical", "moderate", "minor"):
        return value.strip().lower()
    return "moderate"


# =======================
# Result models
# =======================


class Evidence(BaseModel):
    """A strength, traceable to the applicant's own material."""

    text: str = Field(..., description="The strength, stated plainly")
    supporting_quotes: list[str] = Field(
        default_factory=list, description="Quotes or facts from the portfolio"
    )
    rarity: str = Field(default="common", description="How rare this is among applicants")


class Gap(BaseModel):
    """A growth area, traceable to the applicant's own material."""

    text: str = Field(..., description="The gap, stated plainly")
    supporting_quotes: list[str] = Field(default_factory=list)
    severity: Severity = Field(default="moderate")
    how_to_improve: str = Field(default="", description="Concrete next step")


class ComparativeContext(BaseModel):
    model_config = ConfigDict(extra="ignore")

    vs_typical_applicant: str = ""
    vs_top_10_percent: str = ""
    campus_alignment: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return "" if value is None else str(value)


class DimensionResult(BaseModel):
    """Normalized outcome of one dimension analyzer. Immutable once returned."""

    model_config = ConfigDict(frozen=True)

    dimension: Dimension
    score: float = Field(..., ge=SCORE_MIN, le=SCORE_MAX)
    tier: Tier
    reasoning: dict[str, str] = Field(default_factory=dict, description="Structured notes")
    strengths: list[Evidence] = Field(default_factory=list)
    growth_areas: list[Gap] = Field(default_factory=list)
    comparative_context: ComparativeContext = Field(default_factory=ComparativeContext)
    percentile_estimate: str = Field(default="Not estimated")
    strategic_pivot: str = Field(default="")
    confidence: float = Field(..., ge=0.0, le=1.0)
    path: LadderPath
    flags: list[str] = Field(default_factory=list)


# =======================
# Reasoning service output
# =======================


class ReasoningNotes(BaseModel):
    """Free-form notes; every field is optional text."""

    model_config = ConfigDict(extra="allow")

    @model_validator(mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"summary": value}
        if not isinstance(value, dict):
            return {}
        return {str(k): _note_text(v) for k, v in value.items()}

    def as_notes(self) -> dict[str, str]:
        return {k: str(v) for k, v in self.model_dump().items() if v}


class StrengthItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    strength: str
    evidence: list[str] = Field(default_factory=list)
    rarity_factor: str = "common"
    why_impressive: str = ""

    @model_validator(mode="before")
    @classmethod
    def _from_text(cls, value: Any) -> Any:
        return {"strength": value} if isinstance(value, str) else value

    @field_validator("evidence", mode="before")
    @classmethod
    def _evidence_list(cls, value: Any) -> list[str]:
        return _as_text_list(value)


class WeaknessItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    weakness: str
    evidence: list[str] = Field(default_factory=list)
    severity: Severity = "moderate"
    how_to_improve: str = ""

    @model_validator(mode="before")
    @classmethod
    def _from_text(cls, value: Any) -> Any:
        return {"weakness": value} if isinstance(value, str) else value

    @field_validator("evidence", mode="before")
    @classmethod
    def _evidence_list(cls, value: Any) -> list[str]:
        return _as_text_list(value)

    @field_validator("severity", mode="before")
    @classmethod
    def _severity_default(cls, value: Any) -> str:
        return _normalize_severity(value)


class DimensionAnalysisOutput(BaseModel):
    """Fields every dimension's response must carry.

    ``dimension_score``, ``tier``, ``strengths`` and ``weaknesses`` are
    required; the rest fall back to defaults. The tier is advisory only.
    """

    model_config = ConfigDict(extra="ignore")

    dimension_score: float
    tier: Tier
    strengths: list[StrengthItem]
    weaknesses: list[WeaknessItem]
    reasoning: ReasoningNotes = Field(default_factory=ReasoningNotes)
    percentile_estimate: str = "Not estimated"
    comparative_context: ComparativeContext = Field(default_factory=ComparativeContext)
    strategic_pivot: str = ""
    key_evidence: list[str] = Field(default_factory=list)
    confidence: float = 0.8

    @field_validator("dimension_score", mode="before")
    @classmethod
    def _numeric_score(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("dimension_score must be a number")
        if math.isnan(value) or math.isinf(value):
            raise ValueError("dimension_score must be finite")
        return clamp_score(value)

    @field_validator("tier", mode="before")
    @classmethod
    def _normalize_tier(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("confidence", mode="before")
    @classmethod
    def _bounded_confidence(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0.8
        if math.isnan(value):
            return 0.8
        return clamp_confidence(value)

    @field_validator("percentile_estimate", "strategic_pivot", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Any:
        return value if isinstance(value, str) else ("" if value is None else str(value))

    @field_validator("key_evidence", mode="before")
    @classmethod
    def _key_evidence_list(cls, value: Any) -> list[str]:
        return _as_text_list(value)
