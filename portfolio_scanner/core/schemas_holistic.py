"""Pydantic schemas for the holistic first-impression stage."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portfolio_scanner.core.ladder import LadderPath
from portfolio_scanner.core.schemas_dimensions import clamp_confidence, clamp_score


class ContextFactor(BaseModel):
    model_config = ConfigDict(extra="ignore")

    applies: bool = False
    impact: str = ""


class ContextFactors(BaseModel):
    model_config = ConfigDict(extra="ignore")

    first_generation: ContextFactor = Field(default_factory=ContextFactor)
    low_income: ContextFactor = Field(default_factory=ContextFactor)
    under_resourced_school: ContextFactor = Field(default_factory=ContextFactor)

    def active(self) -> list[str]:
        return [name for name, factor in self if factor.applies]


class CentralThread(BaseModel):
    model_config = ConfigDict(extra="ignore")

    narrative: str = ""
    signature_elements: list[str] = Field(default_factory=list)
    thematic_coherence: float = Field(default=5.0, description="0-10")

    @field_validator("thematic_coherence", mode="before")
    @classmethod
    def _bounded(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 5.0
        return clamp_score(value)


class HolisticOutput(BaseModel):
    """Reasoning service response for the holistic stage."""

    model_config = ConfigDict(extra="ignore")

    central_thread: CentralThread
    overall_first_impression: str
    context_factors: ContextFactors = Field(default_factory=ContextFactors)
    hidden_strengths: list[str] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)
    key_insights: list[str] = Field(default_factory=list)
    confidence: float = 0.8

    @field_validator("confidence", mode="before")
    @classmethod
    def _bounded_confidence(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0.8
        return clamp_confidence(value)


class HolisticContext(BaseModel):
    """Read-only first impression shared by every dimension analyzer."""

    model_config = ConfigDict(frozen=True)

    central_thread: CentralThread
    overall_first_impression: str
    context_factors: ContextFactors
    hidden_strengths: list[str] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)
    key_insights: list[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)
    path: LadderPath
    flags: list[str] = Field(default_factory=list)
