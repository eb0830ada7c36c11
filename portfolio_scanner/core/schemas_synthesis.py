"""Pydantic schemas for portfolio synthesis and the full analysis report."""

import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from portfolio_scanner.core.calibration import Archetype
from portfolio_scanner.core.ladder import LadderPath
from portfolio_scanner.core.schemas_dimensions import (
    Dimension,
    DimensionResult,
    Tier,
    clamp_confidence,
    clamp_score,
)
from portfolio_scanner.core.schemas_holistic import HolisticContext


def _bounded_score(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        return default
    return clamp_score(value)


def _text_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(v) for v in value if v is not None]
    return [str(value)]


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


# =======================
# Narrative components
# =======================


class HiddenStrength(_Lenient):
    strength: str
    evidence: list[str] = Field(default_factory=list)
    rarity_factor: str = "uncommon"
    why_it_matters: str = ""

    @model_validator(mode="before")
    @classmethod
    def _from_text(cls, value: Any) -> Any:
        return {"strength": value} if isinstance(value, str) else value

    @field_validator("evidence", mode="before")
    @classmethod
    def _evidence(cls, value: Any) -> list[str]:
        return _text_list(value)


class DimensionalInteractions(_Lenient):
    synergies: list[str] = Field(default_factory=list)
    tensions: list[str] = Field(default_factory=list)
    coherence: float = Field(default=6.0, description="0-10")

    @field_validator("synergies", "tensions", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> list[str]:
        return _text_list(value)

    @field_validator("coherence", mode="before")
    @classmethod
    def _coherence(cls, value: Any) -> float:
        return _bounded_score(value, 6.0)


class ComparativeBenchmarking(_Lenient):
    vs_typical_applicant: str = ""
    vs_top_10_percent: str = ""
    competitive_advantages: list[str] = Field(default_factory=list)
    competitive_weaknesses: list[str] = Field(default_factory=list)
    percentile_estimate: str = ""

    @field_validator("competitive_advantages", "competitive_weaknesses", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> list[str]:
        return _text_list(value)


class CampusFit(_Lenient):
    fit_score: float = Field(default=5.0, description="0-10")
    rationale: str = ""
    campuses: list[str] = Field(default_factory=list)

    @field_validator("fit_score", mode="before")
    @classmethod
    def _fit(cls, value: Any) -> float:
        return _bounded_score(value, 5.0)


class CampusAlignment(_Lenient):
    top_tier: CampusFit = Field(default_factory=CampusFit)
    mid_tier: CampusFit = Field(default_factory=CampusFit)
    likely_admits: list[str] = Field(default_factory=list)
    possible_admits: list[str] = Field(default_factory=list)
    reaches: list[str] = Field(default_factory=list)

    @field_validator("likely_admits", "possible_admits", "reaches", mode="before")
    @classmethod
    def _lists(cls, value: Any) -> list[str]:
        return _text_list(value)


class AdmissionsOfficerPerspective(_Lenient):
    first_10_seconds: str = ""
    memorability: str = ""
    likely_reaction: str = ""
    campus_specific_appeal: str = ""


class DimensionContribution(BaseModel):
    dimension: Dimension
    score: float
    weight: float
    contribution: float


# =======================
# Synthesis
# =======================


class PortfolioSynthesis(BaseModel):
    """Weighted overall assessment.

    ``overall_score``, ``overall_tier``, ``archetype`` and the percentile in
    ``comparative_benchmarking`` are computed locally from the dimension
    scores; only the narrative fields come from the reasoning service.
    """

    model_config = ConfigDict(frozen=True)

    mode: str
    overall_score: float = Field(..., ge=0.0, le=10.0)
    overall_tier: Tier
    archetype: Archetype
    archetype_explanation: str
    narrative_summary: str
    hidden_strengths: list[HiddenStrength] = Field(default_factory=list)
    dimensional_interactions: DimensionalInteractions = Field(
        default_factory=DimensionalInteractions
    )
    comparative_benchmarking: ComparativeBenchmarking = Field(
        default_factory=ComparativeBenchmarking
    )
    campus_alignment: CampusAlignment = Field(default_factory=CampusAlignment)
    admissions_officer_perspective: AdmissionsOfficerPerspective = Field(
        default_factory=AdmissionsOfficerPerspective
    )
    key_insights: list[str] = Field(default_factory=list)
    score_breakdown: list[DimensionContribution] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)
    path: LadderPath
    flags: list[str] = Field(default_factory=list)


class SynthesisNarrativeOutput(_Lenient):
    """Reasoning service response for the synthesis narrative.

    Any score, tier or archetype the service returns is ignored.
    """

    archetype_explanation: str
    narrative_summary: str
    hidden_strengths: list[HiddenStrength] = Field(default_factory=list)
    dimensional_interactions: DimensionalInteractions = Field(
        default_factory=DimensionalInteractions
    )
    comparative_benchmarking: ComparativeBenchmarking = Field(
        default_factory=ComparativeBenchmarking
    )
    campus_alignment: CampusAlignment | None = None
    admissions_officer_perspective: AdmissionsOfficerPerspective = Field(
        default_factory=AdmissionsOfficerPerspective
    )
    key_insights: list[str] = Field(default_factory=list)
    confidence: float = 0.8

    @field_validator("key_insights", mode="before")
    @classmethod
    def _insights(cls, value: Any) -> list[str]:
        return _text_list(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def _bounded_confidence(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
            return 0.8
        return clamp_confidence(value)


# =======================
# Strategic guidance
# =======================


class GuidanceItem(_Lenient):
    dimension: str = ""
    action: str
    rationale: str = ""
    timeline: str = ""
    expected_gain: float = Field(default=0.0, description="Estimated dimension points, 0-10")

    @model_validator(mode="before")
    @classmethod
    def _from_text(cls, value: Any) -> Any:
        return {"action": value} if isinstance(value, str) else value

    @field_validator("expected_gain", mode="before")
    @classmethod
    def _gain(cls, value: Any) -> float:
        return _bounded_score(value, 0.0)


class StrategicGuidance(BaseModel):
    model_config = ConfigDict(frozen=True)

    priorities: list[GuidanceItem] = Field(default_factory=list)
    quick_wins: list[GuidanceItem] = Field(default_factory=list)
    long_term: list[GuidanceItem] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)
    path: LadderPath
    flags: list[str] = Field(default_factory=list)


class GuidanceOutput(_Lenient):
    priorities: list[GuidanceItem]
    quick_wins: list[GuidanceItem] = Field(default_factory=list)
    long_term: list[GuidanceItem] = Field(default_factory=list)
    confidence: float = 0.8

    @field_validator("confidence", mode="before")
    @classmethod
    def _bounded_confidence(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
            return 0.8
        return clamp_confidence(value)


# =======================
# Full report
# =======================


class PerformanceMetadata(BaseModel):
    total_duration_ms: int
    stage_durations_ms: dict[str, int] = Field(default_factory=dict)
    llm_calls: int = 0
    estimated_cost_usd: float = 0.0


class PortfolioAnalysisResult(BaseModel):
    """Everything produced for one portfolio: every stage plus timing and cost."""

    model_config = ConfigDict(frozen=True)

    analysis_id: str
    portfolio_id: str | None = None
    mode: str
    created_at: datetime
    holistic: HolisticContext
    dimensions: dict[Dimension, DimensionResult]
    synthesis: PortfolioSynthesis
    guidance: StrategicGuidance | None = None
    performance: PerformanceMetadata
    confidence: float = Field(..., ge=0.0, le=1.0)
