"""Portfolio scanner: the public scoring entry points.

Pipeline for a full analysis:
    holistic first impression -> six dimension analyzers (concurrent)
    -> weighted synthesis -> optional strategic guidance

Mode and input problems are raised before any reasoning call. After that,
every stage degrades to its heuristic instead of failing.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable
from uuid import uuid4

from portfolio_scanner.chains.analyze_academics import analyze_academics
from portfolio_scanner.chains.analyze_authenticity import analyze_authenticity
from portfolio_scanner.chains.analyze_community import analyze_community
from portfolio_scanner.chains.analyze_curiosity import analyze_curiosity
from portfolio_scanner.chains.analyze_future_readiness import analyze_future_readiness
from portfolio_scanner.chains.analyze_holistic import analyze_holistic, heuristic_holistic_context
from portfolio_scanner.chains.analyze_leadership import analyze_leadership
from portfolio_scanner.chains.generate_guidance import generate_guidance
from portfolio_scanner.chains.score_entry import score_entry_text
from portfolio_scanner.chains.synthesize_portfolio import synthesize_portfolio
from portfolio_scanner.core.calibration import DEFAULT_CALIBRATION, CalibrationProfile
from portfolio_scanner.core.config import Settings, get_settings
from portfolio_scanner.core.exceptions import InputError
from portfolio_scanner.core.llm import ReasoningClient, ReasoningParams, get_reasoning_client
from portfolio_scanner.core.llm_usage import estimate_pipeline_cost
from portfolio_scanner.core.logging import get_logger, log_with_context
from portfolio_scanner.core.schemas_dimensions import Dimension, DimensionResult
from portfolio_scanner.core.schemas_portfolio import (
    DimensionSlice,
    PortfolioData,
    load_portfolio,
    slice_all,
    slice_portfolio,
)
from portfolio_scanner.core.schemas_rubric import RubricReport, ScoreEntryOptions
from portfolio_scanner.core.schemas_synthesis import (
    PerformanceMetadata,
    PortfolioAnalysisResult,
    PortfolioSynthesis,
)

logger = get_logger(__name__)

DEFAULT_CONFIDENCE = 0.7

# Sentinel: build the client from settings unless the caller passes one (or None)
DEFAULT_CLIENT: Any = object()

DimensionAnalyzerFn = Callable[..., Awaitable[DimensionResult]]

ANALYZERS: dict[Dimension, DimensionAnalyzerFn] = {
    Dimension.ACADEMIC_EXCELLENCE: analyze_academics,
    Dimension.LEADERSHIP_INITIATIVE: analyze_leadership,
    Dimension.INTELLECTUAL_CURIOSITY: analyze_curiosity,
    Dimension.COMMUNITY_IMPACT: analyze_community,
    Dimension.AUTHENTICITY_VOICE: analyze_authenticity,
    Dimension.FUTURE_READINESS: analyze_future_readiness,
}

DIMENSION_ALIASES = {
    "academic": Dimension.ACADEMIC_EXCELLENCE,
    "academics": Dimension.ACADEMIC_EXCELLENCE,
    "leadership": Dimension.LEADERSHIP_INITIATIVE,
    "curiosity": Dimension.INTELLECTUAL_CURIOSITY,
    "community": Dimension.COMMUNITY_IMPACT,
    "authenticity": Dimension.AUTHENTICITY_VOICE,
    "voice": Dimension.AUTHENTICITY_VOICE,
    "future": Dimension.FUTURE_READINESS,
    "future_readiness": Dimension.FUTURE_READINESS,
}


class CountingClient:
    """Wraps a reasoning client and counts the calls made through it."""

    def __init__(self, inner: ReasoningClient):
        self.inner = inner
        self.calls = 0

    async def call(self, system_instructions: str, user_payload: str, params: ReasoningParams) -> str:
        self.calls += 1
        return await self.inner.call(system_instructions, user_payload, params)


def parse_dimension(value: Dimension | str) -> Dimension:
    """
    Resolve a dimension id or short alias.

    Raises:
        InputError: If the name matches no dimension
    """
    if isinstance(value, Dimension):
        return value
    if isinstance(value, str):
        key = value.strip().lower().replace("-", "_")
        if key in DIMENSION_ALIASES:
            return DIMENSION_ALIASES[key]
        try:
            return Dimension(key)
        except ValueError:
            pass
    known = ", ".join(d.value for d in Dimension)
    raise InputError(f"Unknown dimension '{value}'. Known dimensions: {known}", "dimension")


def _resolve_client(client: Any, settings: Settings) -> ReasoningClient | None:
    if client is DEFAULT_CLIENT:
        return get_reasoning_client(settings)
    return client


def _cost_model(settings: Settings) -> str:
    if settings.REASONING_PROVIDER.lower() == "openai":
        return settings.OPENAI_MODEL
    return settings.DIMENSION_MODEL


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


async def _run_dimensions(
    slices: dict[Dimension, DimensionSlice],
    holistic: Any,
    mode: str,
    client: ReasoningClient | None,
    settings: Settings,
    calibration: CalibrationProfile,
    analysis_id: str,
) -> dict[Dimension, DimensionResult]:
    dimensions = list(Dimension)
    results = await asyncio.gather(
        *(
            ANALYZERS[d](slices[d], holistic, mode, client, settings, calibration, analysis_id)
            for d in dimensions
        )
    )
    return dict(zip(dimensions, results))


async def analyze_portfolio(
    portfolio: PortfolioData | dict[str, Any],
    mode: str | None = None,
    client: ReasoningClient | None = DEFAULT_CLIENT,
    *,
    include_narrative: bool = True,
    include_guidance: bool = True,
    settings: Settings | None = None,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
) -> PortfolioAnalysisResult:
    """
    Run the full pipeline for one portfolio.

    Args:
        portfolio: Portfolio snapshot (dict or PortfolioData)
        mode: Evaluation mode; defaults to DEFAULT_EVALUATION_MODE
        client: Reasoning client; None forces heuristic scoring, omitted builds one from settings
        include_narrative: Ask the service for the synthesis narrative
        include_guidance: Also run the strategic guidance stage
        settings: Settings override
        calibration: Weights, tiers and archetype rules

    Returns:
        PortfolioAnalysisResult with every stage plus timing and cost

    Raises:
        ConfigurationError: If the mode is unknown
        InputError: If the portfolio is malformed or missing required fields
    """
    settings = settings or get_settings()
    resolved_mode = calibration.normalize_mode(mode or settings.DEFAULT_EVALUATION_MODE)
    data = load_portfolio(portfolio)
    slices = slice_all(data)

    inner = _resolve_client(client, settings)
    counting = CountingClient(inner) if inner is not None else None
    analysis_id = str(uuid4())
    stage_durations: dict[str, int] = {}
    start = time.perf_counter()

    log_with_context(
        logger, logging.INFO, "Starting portfolio analysis",
        analysis_id=analysis_id, mode=resolved_mode, portfolio_id=data.portfolio_id,
        client_configured=counting is not None,
    )

    stage_start = time.perf_counter()
    holistic = await analyze_holistic(data, resolved_mode, counting, settings, analysis_id)
    stage_durations["holistic"] = _elapsed_ms(stage_start)

    stage_start = time.perf_counter()
    dimensions = await _run_dimensions(
        slices, holistic, resolved_mode, counting, settings, calibration, analysis_id
    )
    stage_durations["dimensions"] = _elapsed_ms(stage_start)

    stage_start = time.perf_counter()
    synthesis = await synthesize_portfolio(
        dimensions,
        holistic,
        resolved_mode,
        counting,
        settings,
        calibration,
        include_narrative=include_narrative,
        analysis_id=analysis_id,
    )
    stage_durations["synthesis"] = _elapsed_ms(stage_start)

    guidance = None
    if include_guidance:
        stage_start = time.perf_counter()
        guidance = await generate_guidance(
            dimensions, synthesis, counting, settings, calibration, analysis_id
        )
        stage_durations["guidance"] = _elapsed_ms(stage_start)

    confidences = [holistic.confidence, synthesis.confidence]
    confidences.extend(r.confidence for r in dimensions.values())
    if guidance is not None:
        confidences.append(guidance.confidence)
    confidence = round(sum(confidences) / len(confidences), 2) if confidences else DEFAULT_CONFIDENCE

    llm_calls = counting.calls if counting is not None else 0
    performance = PerformanceMetadata(
        total_duration_ms=_elapsed_ms(start),
        stage_durations_ms=stage_durations,
        llm_calls=llm_calls,
        estimated_cost_usd=estimate_pipeline_cost(_cost_model(settings), llm_calls),
    )

    log_with_context(
        logger, logging.INFO, "Portfolio analysis complete",
        analysis_id=analysis_id, overall_score=synthesis.overall_score,
        tier=synthesis.overall_tier.value, archetype=synthesis.archetype.value,
        llm_calls=llm_calls, duration_ms=performance.total_duration_ms,
    )

    return PortfolioAnalysisResult(
        analysis_id=analysis_id,
        portfolio_id=data.portfolio_id,
        mode=resolved_mode,
        created_at=datetime.now(timezone.utc),
        holistic=holistic,
        dimensions=dimensions,
        synthesis=synthesis,
        guidance=guidance,
        performance=performance,
        confidence=confidence,
    )


async def evaluate_portfolio(
    portfolio: PortfolioData | dict[str, Any],
    mode: str | None = None,
    client: ReasoningClient | None = DEFAULT_CLIENT,
    *,
    include_narrative: bool = True,
    settings: Settings | None = None,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
) -> PortfolioSynthesis:
    """Score a whole portfolio and return the weighted synthesis."""
    result = await analyze_portfolio(
        portfolio,
        mode,
        client,
        include_narrative=include_narrative,
        include_guidance=False,
        settings=settings,
        calibration=calibration,
    )
    return result.synthesis


async def evaluate_dimension(
    portfolio: PortfolioData | dict[str, Any],
    dimension: Dimension | str,
    mode: str | None = None,
    client: ReasoningClient | None = DEFAULT_CLIENT,
    *,
    settings: Settings | None = None,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
) -> DimensionResult:
    """
    Score a single dimension.

    The holistic context is built from structured fields only, so this makes
    at most two reasoning calls.

    Raises:
        ConfigurationError: If the mode is unknown
        InputError: If the dimension is unknown or its required input is missing
    """
    settings = settings or get_settings()
    resolved_mode = calibration.normalize_mode(mode or settings.DEFAULT_EVALUATION_MODE)
    target = parse_dimension(dimension)
    data = load_portfolio(portfolio)
    slice_ = slice_portfolio(data, target)

    holistic = heuristic_holistic_context(data)
    return await ANALYZERS[target](
        slice_,
        holistic,
        resolved_mode,
        _resolve_client(client, settings),
        settings,
        calibration,
        None,
    )


async def score_entry(
    text: Any,
    options: ScoreEntryOptions | dict[str, Any] | None = None,
    client: ReasoningClient | None = DEFAULT_CLIENT,
    *,
    settings: Settings | None = None,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
) -> RubricReport:
    """Score one activity description against the 11-category rubric."""
    settings = settings or get_settings()
    return await score_entry_text(
        text, options, _resolve_client(client, settings), settings, calibration
    )
