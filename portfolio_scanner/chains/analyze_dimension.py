"""Shared runner for the six dimension analyzers."""

from dataclasses import dataclass
from typing import Any, Callable

from portfolio_scanner.core.calibration import DEFAULT_CALIBRATION, CalibrationProfile, round_score
from portfolio_scanner.core.config import Settings, get_settings
from portfolio_scanner.core.dimension_heuristics import heuristic_dimension_result
from portfolio_scanner.core.exceptions import InputError
from portfolio_scanner.core.ladder import LadderPath, LadderRequest, run_ladder
from portfolio_scanner.core.llm import ReasoningClient, ReasoningParams, parse_llm_json
from portfolio_scanner.core.schemas_dimensions import (
    Dimension,
    DimensionAnalysisOutput,
    DimensionResult,
    Evidence,
    Gap,
)
from portfolio_scanner.core.schemas_holistic import HolisticContext

OUTPUT_SCHEMA = """Return JSON only, in this shape:
{{
  "dimension_score": <number 0-10>,
  "tier": "exceptional" | "strong" | "developing" | "foundational",
  "percentile_estimate": "<e.g. Top 15% of UC applicants>",
  "strengths": [
    {{"strength": "...", "evidence": ["quote or fact from the portfolio"], "rarity_factor": "common|uncommon|rare|exceptional", "why_impressive": "..."}}
  ],
  "weaknesses": [
    {{"weakness": "...", "evidence": ["..."], "severity": "critical|moderate|minor", "how_to_improve": "..."}}
  ],
  "reasoning": {{{reasoning_fields}}},
  "comparative_context": {{"vs_typical_applicant": "...", "vs_top_10_percent": "...", "campus_alignment": "..."}},
  "strategic_pivot": "<the single highest-leverage change>",
  "key_evidence": ["..."],
  "confidence": <number 0-1>
}}"""


def output_schema(reasoning_fields: tuple[str, ...]) -> str:
    """Render the shared JSON contract with a dimension's reasoning keys."""
    fields = ", ".join(f'"{name}": "..."' for name in reasoning_fields)
    return OUTPUT_SCHEMA.format(reasoning_fields=fields)


@dataclass(frozen=True)
class DimensionAnalyzer:
    """Everything that differs between two dimension analyzers."""

    dimension: Dimension
    system_prompt: str
    output_model: type[DimensionAnalysisOutput]
    build_prompt: Callable[[Any, HolisticContext | None, str], str]


def to_dimension_result(
    output: DimensionAnalysisOutput,
    dimension: Dimension,
    path: LadderPath,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
) -> DimensionResult:
    """
    Normalize a validated service response into a DimensionResult.

    The score is already clamped by the output model. The service's tier is
    discarded and re-derived from the score; a disagreement is noted.
    """
    score = round_score(output.dimension_score)
    tier = calibration.tier_for(dimension, score)
    reasoning = output.reasoning.as_notes()
    flags: list[str] = []
    if output.tier != tier:
        reasoning["service_tier"] = output.tier.value
        flags.append("tier_rederived")

    return DimensionResult(
        dimension=dimension,
        score=score,
        tier=tier,
        reasoning=reasoning,
        strengths=[
            Evidence(text=s.strength, supporting_quotes=s.evidence, rarity=s.rarity_factor)
            for s in output.strengths
        ],
        growth_areas=[
            Gap(
                text=w.weakness,
                supporting_quotes=w.evidence,
                severity=w.severity,
                how_to_improve=w.how_to_improve,
            )
            for w in output.weaknesses
        ],
        comparative_context=output.comparative_context,
        percentile_estimate=output.percentile_estimate or "Not estimated",
        strategic_pivot=output.strategic_pivot,
        confidence=output.confidence,
        path=path,
        flags=flags,
    )


async def run_dimension_analyzer(
    analyzer: DimensionAnalyzer,
    slice_: Any,
    holistic: HolisticContext | None,
    mode: str,
    client: ReasoningClient | None,
    settings: Settings | None = None,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
    analysis_id: str | None = None,
) -> DimensionResult:
    """
    Score one dimension: primary call, one retry, then the heuristic.

    Args:
        analyzer: The dimension's prompts and output schema
        slice_: Validated input slice for this dimension
        holistic: Read-only first impression (may be None)
        mode: Normalized evaluation mode
        client: Reasoning client, or None for heuristic-only scoring
        settings: Settings override
        calibration: Tier breakpoints
        analysis_id: Correlation id for logs

    Returns:
        DimensionResult; never raises for service failures

    Raises:
        InputError: If the slice belongs to a different dimension
    """
    if getattr(slice_, "kind", None) != analyzer.dimension.value:
        raise InputError(
            f"{analyzer.dimension.value} analyzer received a "
            f"{getattr(slice_, 'kind', type(slice_).__name__)} slice"
        )
    settings = settings or get_settings()

    request = LadderRequest(
        system_instructions=analyzer.system_prompt,
        user_payload=analyzer.build_prompt(slice_, holistic, mode),
        params=ReasoningParams(
            model=settings.DIMENSION_MODEL,
            max_tokens=settings.DIMENSION_MAX_TOKENS,
            temperature=settings.DIMENSION_TEMPERATURE,
            workflow=f"dimension:{analyzer.dimension.value}",
        ),
    )

    outcome = await run_ladder(
        client,
        request,
        parse=lambda raw: parse_llm_json(raw, analyzer.output_model),
        fallback=lambda: heuristic_dimension_result(slice_, calibration, mode=mode),
        label=analyzer.dimension.value,
        timeout_s=settings.REASONING_TIMEOUT_S,
        analysis_id=analysis_id,
        mode=mode,
    )

    if outcome.used_heuristic:
        return outcome.flagged_value()
    return to_dimension_result(outcome.value, analyzer.dimension, outcome.path, calibration)
