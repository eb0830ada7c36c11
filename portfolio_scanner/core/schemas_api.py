"""Pydantic schemas for the HTTP request bodies."""

from typing import Any

from pydantic import BaseModel, Field

from portfolio_scanner.core.schemas_rubric import ScoreEntryOptions


class EvaluatePortfolioRequest(BaseModel):
    """Request body for portfolio evaluation."""

    portfolio: dict[str, Any] = Field(..., description="Portfolio snapshot")
    mode: str | None = Field(
        default=None, description="Evaluation mode (general, berkeley, ucla); defaults from settings"
    )
    include_narrative: bool = Field(
        default=True, description="Ask the reasoning service for the synthesis narrative"
    )


class AnalyzePortfolioRequest(EvaluatePortfolioRequest):
    """Request body for the full analysis report."""

    include_guidance: bool = Field(default=True, description="Also produce strategic guidance")


class EvaluateDimensionRequest(BaseModel):
    """Request body for single-dimension scoring."""

    portfolio: dict[str, Any] = Field(..., description="Portfolio snapshot")
    mode: str | None = Field(default=None, description="Evaluation mode")


class ScoreEntryRequest(BaseModel):
    """Request body for entry-level rubric scoring."""

    text: str = Field(default="", description="Activity description to score")
    options: ScoreEntryOptions = Field(default_factory=ScoreEntryOptions)
