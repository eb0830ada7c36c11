"""Strategic guidance: where an applicant's next hours pay off most."""

from typing import Mapping

from portfolio_scanner.core.calibration import DEFAULT_CALIBRATION, CalibrationProfile
from portfolio_scanner.core.config import Settings, get_settings
from portfolio_scanner.core.ladder import LadderPath, LadderRequest, run_ladder
from portfolio_scanner.core.llm import ReasoningClient, ReasoningParams, parse_llm_json
from portfolio_scanner.core.schemas_dimensions import Dimension, DimensionResult
from portfolio_scanner.core.schemas_synthesis import (
    GuidanceItem,
    GuidanceOutput,
    PortfolioSynthesis,
    StrategicGuidance,
)

HEURISTIC_CONFIDENCE = 0.4
MAX_PRIORITIES = 3
MAX_EXPECTED_GAIN = 1.5

DEFAULT_ACTIONS = {
    Dimension.ACADEMIC_EXCELLENCE: "Take the most rigorous course available in your intended field",
    Dimension.LEADERSHIP_INITIATIVE: "Take ownership of one project end to end and document its outcome",
    Dimension.INTELLECTUAL_CURIOSITY: "Pursue one question independently for a semester and write it up",
    Dimension.COMMUNITY_IMPACT: "Commit to one service effort weekly and track who it helps",
    Dimension.AUTHENTICITY_VOICE: "Rewrite one essay around a specific moment only you could describe",
    Dimension.FUTURE_READINESS: "Connect your intended major to one concrete experience you already have",
}

SYSTEM_PROMPT = """You are a UC admissions strategist advising a student after a portfolio review.

Given scored dimensions with their weights, recommend where effort raises the weighted score most.
- priorities: up to three actions, highest leverage first
- quick_wins: things doable within a month
- long_term: things that take a semester or more
Each item: {"dimension": "<dimension id>", "action": "...", "rationale": "...", "timeline": "...",
"expected_gain": <estimated dimension points 0-10>}

Return JSON only: {"priorities": [...], "quick_wins": [...], "long_term": [...], "confidence": <0-1>}"""


def _leverage(result: DimensionResult, weight: float) -> float:
    return weight * (10.0 - result.score)


def heuristic_guidance(
    dimensions: Mapping[Dimension, DimensionResult],
    synthesis: PortfolioSynthesis,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
) -> StrategicGuidance:
    """Rank dimensions by weight times headroom and template an action for each."""
    weights = calibration.resolve_weights(synthesis.mode)
    ranked = sorted(
        Dimension, key=lambda d: (-_leverage(dimensions[d], weights[d]), d.value)
    )

    priorities = []
    for dimension in ranked[:MAX_PRIORITIES]:
        result = dimensions[dimension]
        gaps = [g for g in result.growth_areas if g.how_to_improve and g.severity != "minor"]
        action = result.strategic_pivot or (
            gaps[0].how_to_improve if gaps else DEFAULT_ACTIONS[dimension]
        )
        priorities.append(
            GuidanceItem(
                dimension=dimension.value,
                action=action,
                rationale=f"Weight {weights[dimension]:g} with score {result.score:g}",
                timeline="This semester",
                expected_gain=min(MAX_EXPECTED_GAIN, 10.0 - result.score),
            )
        )

    quick_wins = [
        GuidanceItem(
            dimension=dimension.value,
            action=gap.how_to_improve,
            rationale=gap.text,
            timeline="Within a month",
        )
        for dimension in ranked
        for gap in dimensions[dimension].growth_areas
        if gap.severity == "minor" and gap.how_to_improve and gap.text != "Automated analysis unavailable"
    ][:3]

    weakest = ranked[0]
    long_term = [
        GuidanceItem(
            dimension=weakest.value,
            action=DEFAULT_ACTIONS[weakest],
            rationale="Largest weighted headroom",
            timeline="Next two semesters",
            expected_gain=min(MAX_EXPECTED_GAIN, 10.0 - dimensions[weakest].score),
        )
    ]

    return StrategicGuidance(
        priorities=priorities,
        quick_wins=quick_wins,
        long_term=long_term,
        confidence=HEURISTIC_CONFIDENCE,
        path=LadderPath.HEURISTIC,
        flags=["heuristic_scoring"],
    )


def build_guidance_prompt(
    dimensions: Mapping[Dimension, DimensionResult],
    synthesis: PortfolioSynthesis,
) -> str:
    lines = ["=== OVERALL ==="]
    lines.append(f"mode: {synthesis.mode}")
    lines.append(f"overall_score: {synthesis.overall_score:g} ({synthesis.overall_tier.value})")
    lines.append(f"archetype: {synthesis.archetype.value}")
    lines.append("")
    lines.append("=== DIMENSIONS ===")
    for item in synthesis.score_breakdown:
        result = dimensions[item.dimension]
        lines.append(f"[{item.dimension.value}] score={item.score:g} weight={item.weight:g}")
        for gap in result.growth_areas[:3]:
            lines.append(f"    gap: {gap.text} ({gap.severity}) -> {gap.how_to_improve}")
        if result.strategic_pivot:
            lines.append(f"    pivot: {result.strategic_pivot}")
    return "\n".join(lines)


async def generate_guidance(
    dimensions: Mapping[Dimension, DimensionResult],
    synthesis: PortfolioSynthesis,
    client: ReasoningClient | None,
    settings: Settings | None = None,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
    analysis_id: str | None = None,
) -> StrategicGuidance:
    """Recommend next steps; never raises for service failures."""
    settings = settings or get_settings()
    request = LadderRequest(
        system_instructions=SYSTEM_PROMPT,
        user_payload=build_guidance_prompt(dimensions, synthesis),
        params=ReasoningParams(
            model=settings.GUIDANCE_MODEL,
            max_tokens=settings.GUIDANCE_MAX_TOKENS,
            temperature=settings.GUIDANCE_TEMPERATURE,
            workflow="guidance",
        ),
    )
    outcome = await run_ladder(
        client,
        request,
        parse=lambda raw: parse_llm_json(raw, GuidanceOutput),
        fallback=lambda: heuristic_guidance(dimensions, synthesis, calibration),
        label="guidance",
        timeout_s=settings.REASONING_TIMEOUT_S,
        analysis_id=analysis_id,
    )
    if outcome.used_heuristic:
        return outcome.flagged_value()

    output = outcome.value
    return StrategicGuidance(
        priorities=output.priorities[:MAX_PRIORITIES],
        quick_wins=output.quick_wins,
        long_term=output.long_term,
        confidence=output.confidence,
        path=outcome.path,
    )
