"""Portfolio synthesis: weighted score, tier, archetype and narrative.

The numbers are fixed first and locally (weighted sum, tier, archetype,
percentile bucket). The reasoning service is only asked to explain them,
and its answer cannot change them.
"""

from dataclasses import dataclass
from itertools import combinations
from typing import Mapping

from portfolio_scanner.core.calibration import (
    ACCESSIBLE_CAMPUSES,
    DEFAULT_CALIBRATION,
    MID_TIER_CAMPUSES,
    TOP_TIER_CAMPUSES,
    Archetype,
    CalibrationProfile,
    compute_overall_score,
)
from portfolio_scanner.core.config import Settings, get_settings
from portfolio_scanner.core.exceptions import InputError
from portfolio_scanner.core.ladder import LadderPath, LadderRequest, run_ladder
from portfolio_scanner.core.llm import ReasoningClient, ReasoningParams, parse_llm_json
from portfolio_scanner.core.logging import get_logger
from portfolio_scanner.core.schemas_dimensions import Dimension, DimensionResult, Tier
from portfolio_scanner.core.schemas_holistic import HolisticContext
from portfolio_scanner.core.schemas_synthesis import (
    AdmissionsOfficerPerspective,
    CampusAlignment,
    CampusFit,
    ComparativeBenchmarking,
    DimensionalInteractions,
    DimensionContribution,
    HiddenStrength,
    PortfolioSynthesis,
    SynthesisNarrativeOutput,
)

logger = get_logger(__name__)

HEURISTIC_CONFIDENCE = 0.4
SKIPPED_NARRATIVE_CONFIDENCE = 0.3
HEURISTIC_COHERENCE = 6.0
SYNERGY_FLOOR = 7.0
TENSION_GAP = 3.0

DIMENSION_LABELS = {
    Dimension.ACADEMIC_EXCELLENCE: "Academic excellence",
    Dimension.LEADERSHIP_INITIATIVE: "Leadership",
    Dimension.INTELLECTUAL_CURIOSITY: "Intellectual curiosity",
    Dimension.COMMUNITY_IMPACT: "Community impact",
    Dimension.AUTHENTICITY_VOICE: "Authentic voice",
    Dimension.FUTURE_READINESS: "Future readiness",
}

ARCHETYPE_TEMPLATES = {
    Archetype.SCHOLAR: "Strong academics paired with curiosity that reaches past the classroom.",
    Archetype.LEADER: "Leadership that shows up as real benefit to a community.",
    Archetype.WELL_ROUNDED: "Consistent strength across every dimension without a single weak spot.",
    Archetype.SPECIALIST: "A clear spike in one area that stands out from the rest of the profile.",
    Archetype.EMERGING: "A profile still taking shape; no dimension yet stands out.",
}

SYSTEM_PROMPT = """You are a senior UC admissions reader writing the synthesis of a scored portfolio.

The overall score, tier, archetype and percentile have already been computed and are FINAL.
Explain them; never restate a different number or label.

Write:
- archetype_explanation: why this applicant fits the given archetype, citing dimension evidence
- narrative_summary: three to five sentences a committee member could read aloud
- hidden_strengths: strengths the individual dimension scores under-credit
- dimensional_interactions: synergies, tensions, coherence (0-10)
- comparative_benchmarking: vs_typical_applicant, vs_top_10_percent, competitive_advantages,
  competitive_weaknesses
- campus_alignment: top_tier and mid_tier {fit_score 0-10, rationale, campuses}, likely_admits,
  possible_admits, reaches
- admissions_officer_perspective: first_10_seconds, memorability, likely_reaction,
  campus_specific_appeal
- key_insights: three to five short statements

Return JSON only, with exactly those keys plus "confidence" (0-1)."""


@dataclass(frozen=True)
class SynthesisCore:
    """The locally computed, reproducible part of a synthesis."""

    mode: str
    scores: dict[Dimension, float]
    overall_score: float
    overall_tier: Tier
    archetype: Archetype
    percentile: str
    breakdown: list[DimensionContribution]


def compute_synthesis_core(
    dimensions: Mapping[Dimension, DimensionResult],
    mode: str,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
) -> SynthesisCore:
    """
    Weighted score, tier, archetype and percentile bucket.

    Raises:
        ConfigurationError: If the mode is unknown
        InputError: If any dimension result is missing
    """
    missing = [d.value for d in Dimension if d not in dimensions]
    if missing:
        raise InputError(f"Missing dimension results: {', '.join(missing)}")

    mode = calibration.normalize_mode(mode)
    weights = calibration.resolve_weights(mode)
    scores = {d: dimensions[d].score for d in Dimension}
    overall = compute_overall_score(scores, weights)

    breakdown = [
        DimensionContribution(
            dimension=d,
            score=scores[d],
            weight=weights[d],
            contribution=round(scores[d] * weights[d], 3),
        )
        for d in Dimension
    ]
    return SynthesisCore(
        mode=mode,
        scores=scores,
        overall_score=overall,
        overall_tier=calibration.overall_tier(overall),
        archetype=calibration.archetype_for(scores),
        percentile=calibration.percentile_for(overall),
        breakdown=breakdown,
    )


def _heuristic_campus_alignment(score: float) -> CampusAlignment:
    top = list(TOP_TIER_CAMPUSES)
    mid = list(MID_TIER_CAMPUSES)
    accessible = list(ACCESSIBLE_CAMPUSES)
    if score >= 8.5:
        likely, possible, reaches = mid, top, []
    elif score >= 7.5:
        likely, possible, reaches = mid, [], top
    elif score >= 6.5:
        likely, possible, reaches = accessible, mid, top
    else:
        likely, possible, reaches = accessible, [], top + mid

    return CampusAlignment(
        top_tier=CampusFit(
            fit_score=min(score, 7.0),
            rationale="Estimated from the weighted score only",
            campuses=top,
        ),
        mid_tier=CampusFit(
            fit_score=min(score + 1.0, 9.0),
            rationale="Estimated from the weighted score only",
            campuses=mid,
        ),
        likely_admits=likely,
        possible_admits=possible,
        reaches=reaches,
    )


def _heuristic_interactions(scores: Mapping[Dimension, float]) -> DimensionalInteractions:
    synergies = [
        f"{DIMENSION_LABELS[a]} and {DIMENSION_LABELS[b].lower()} reinforce each other"
        for a, b in combinations(Dimension, 2)
        if scores[a] >= SYNERGY_FLOOR and scores[b] >= SYNERGY_FLOOR
    ]
    strongest = max(Dimension, key=lambda d: scores[d])
    weakest = min(Dimension, key=lambda d: scores[d])
    tensions = []
    if scores[strongest] - scores[weakest] >= TENSION_GAP:
        tensions.append(
            f"{DIMENSION_LABELS[strongest]} ({scores[strongest]:g}) outpaces "
            f"{DIMENSION_LABELS[weakest].lower()} ({scores[weakest]:g})"
        )
    return DimensionalInteractions(
        synergies=synergies[:3], tensions=tensions, coherence=HEURISTIC_COHERENCE
    )


def heuristic_synthesis(
    core: SynthesisCore,
    dimensions: Mapping[Dimension, DimensionResult],
    holistic: HolisticContext | None,
    confidence: float = HEURISTIC_CONFIDENCE,
    flags: list[str] | None = None,
) -> PortfolioSynthesis:
    """Templated narrative around the already-computed numbers."""
    scores = core.scores
    strongest = max(Dimension, key=lambda d: scores[d])
    weakest = min(Dimension, key=lambda d: scores[d])

    hidden: list[HiddenStrength] = []
    if holistic is not None:
        for factor in holistic.context_factors.active():
            hidden.append(
                HiddenStrength(
                    strength=f"Achievement in context: {factor.replace('_', ' ')}",
                    rarity_factor="uncommon",
                    why_it_matters="Readers weigh accomplishments against available opportunity",
                )
            )
        hidden.extend(HiddenStrength(strength=s) for s in holistic.hidden_strengths[:2])

    advantages = [s.text for s in dimensions[strongest].strengths[:2]]
    weaknesses = [g.text for g in dimensions[weakest].growth_areas[:2]]

    return PortfolioSynthesis(
        mode=core.mode,
        overall_score=core.overall_score,
        overall_tier=core.overall_tier,
        archetype=core.archetype,
        archetype_explanation=ARCHETYPE_TEMPLATES[core.archetype],
        narrative_summary=(
            f"Weighted score {core.overall_score:g}/10 ({core.overall_tier.value}). "
            f"Strongest dimension: {DIMENSION_LABELS[strongest].lower()} ({scores[strongest]:g}). "
            f"Largest opportunity: {DIMENSION_LABELS[weakest].lower()} ({scores[weakest]:g})."
        ),
        hidden_strengths=hidden,
        dimensional_interactions=_heuristic_interactions(scores),
        comparative_benchmarking=ComparativeBenchmarking(
            vs_typical_applicant="Above average" if core.overall_score >= 7 else "Average",
            vs_top_10_percent="Not estimated",
            competitive_advantages=advantages,
            competitive_weaknesses=weaknesses,
            percentile_estimate=core.percentile,
        ),
        campus_alignment=_heuristic_campus_alignment(core.overall_score),
        admissions_officer_perspective=AdmissionsOfficerPerspective(
            first_10_seconds=f"{core.archetype.value} profile",
            memorability="Not assessed",
            likely_reaction="Not assessed",
            campus_specific_appeal="Not assessed",
        ),
        key_insights=[
            f"{DIMENSION_LABELS[strongest]} is the profile's anchor",
            f"{DIMENSION_LABELS[weakest]} has the most room to grow",
        ],
        score_breakdown=core.breakdown,
        confidence=confidence,
        path=LadderPath.HEURISTIC,
        flags=list(flags) if flags else ["heuristic_scoring"],
    )


def build_synthesis_prompt(
    core: SynthesisCore,
    dimensions: Mapping[Dimension, DimensionResult],
    holistic: HolisticContext | None,
) -> str:
    lines = ["=== FIXED RESULTS (do not change) ==="]
    lines.append(f"mode: {core.mode}")
    lines.append(f"overall_score: {core.overall_score:g}")
    lines.append(f"overall_tier: {core.overall_tier.value}")
    lines.append(f"archetype: {core.archetype.value}")
    lines.append(f"percentile: {core.percentile}")
    lines.append("")

    lines.append("=== DIMENSIONS ===")
    for item in core.breakdown:
        result = dimensions[item.dimension]
        lines.append(
            f"[{item.dimension.value}] score={item.score:g} weight={item.weight:g} "
            f"tier={result.tier.value} confidence={result.confidence:g}"
        )
        for strength in result.strengths[:3]:
            lines.append(f"    + {strength.text}")
        for gap in result.growth_areas[:2]:
            lines.append(f"    - {gap.text} ({gap.severity})")
    lines.append("")

    if holistic is not None:
        lines.append("=== HOLISTIC CONTEXT ===")
        lines.append(f"first_impression: {holistic.overall_first_impression}")
        lines.append(f"central_thread: {holistic.central_thread.narrative}")
        active = holistic.context_factors.active()
        lines.append("context_factors: " + (", ".join(active) if active else "none"))
    return "\n".join(lines)


def _from_narrative(
    core: SynthesisCore, output: SynthesisNarrativeOutput, path: LadderPath
) -> PortfolioSynthesis:
    benchmarking = output.comparative_benchmarking.model_copy(
        update={"percentile_estimate": core.percentile}
    )
    return PortfolioSynthesis(
        mode=core.mode,
        overall_score=core.overall_score,
        overall_tier=core.overall_tier,
        archetype=core.archetype,
        archetype_explanation=output.archetype_explanation,
        narrative_summary=output.narrative_summary,
        hidden_strengths=output.hidden_strengths,
        dimensional_interactions=output.dimensional_interactions,
        comparative_benchmarking=benchmarking,
        campus_alignment=output.campus_alignment
        or _heuristic_campus_alignment(core.overall_score),
        admissions_officer_perspective=output.admissions_officer_perspective,
        key_insights=output.key_insights,
        score_breakdown=core.breakdown,
        confidence=output.confidence,
        path=path,
    )


async def synthesize_portfolio(
    dimensions: Mapping[Dimension, DimensionResult],
    holistic: HolisticContext | None,
    mode: str,
    client: ReasoningClient | None,
    settings: Settings | None = None,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
    include_narrative: bool = True,
    analysis_id: str | None = None,
) -> PortfolioSynthesis:
    """
    Combine six dimension results into a PortfolioSynthesis.

    Args:
        dimensions: One result per dimension
        holistic: First-impression context (may be None)
        mode: Evaluation mode selecting the weight table
        client: Reasoning client, or None for templated narrative
        settings: Settings override
        calibration: Weights, tiers and archetype rules
        include_narrative: When False, skip the service and template the narrative
        analysis_id: Correlation id for logs

    Returns:
        PortfolioSynthesis; the numeric fields never depend on the service

    Raises:
        ConfigurationError: If the mode is unknown
        InputError: If a dimension result is missing
    """
    core = compute_synthesis_core(dimensions, mode, calibration)

    if not include_narrative:
        logger.debug(f"Narrative skipped for mode={core.mode}, overall={core.overall_score}")
        return heuristic_synthesis(
            core,
            dimensions,
            holistic,
            confidence=SKIPPED_NARRATIVE_CONFIDENCE,
            flags=["narrative_skipped"],
        )

    settings = settings or get_settings()
    request = LadderRequest(
        system_instructions=SYSTEM_PROMPT,
        user_payload=build_synthesis_prompt(core, dimensions, holistic),
        params=ReasoningParams(
            model=settings.SYNTHESIS_MODEL,
            max_tokens=settings.SYNTHESIS_MAX_TOKENS,
            temperature=settings.SYNTHESIS_TEMPERATURE,
            workflow="synthesis",
        ),
    )
    outcome = await run_ladder(
        client,
        request,
        parse=lambda raw: _from_narrative(
            core, parse_llm_json(raw, SynthesisNarrativeOutput), LadderPath.PRIMARY
        ),
        fallback=lambda: heuristic_synthesis(core, dimensions, holistic),
        label="synthesis",
        timeout_s=settings.REASONING_TIMEOUT_S,
        analysis_id=analysis_id,
        overall_score=core.overall_score,
    )
    if outcome.used_heuristic:
        return outcome.flagged_value()
    if outcome.path is not LadderPath.PRIMARY:
        return outcome.value.model_copy(update={"path": outcome.path})
    return outcome.value
