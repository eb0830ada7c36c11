"""Heuristic fallback scoring for the six dimensions.

Used when the reasoning service is unavailable or returns unusable output
twice. Every function here is pure and total: it reads only its input slice
and the calibration profile, and always returns a valid DimensionResult.

Scoring policy per dimension:
    score = min(structural_base + signal_bonus, length_cap)

structural_base  rule ladder over structured fields (GPA, activity counts, ...)
signal_bonus     +0.5 each for quantified metrics, named beneficiaries,
                 reflection markers and sustained-duration language
length_cap       thin evidence text caps the score (see *_LENGTH_CAPS)
"""

from dataclasses import dataclass
from typing import Callable

from portfolio_scanner.core.calibration import (
    DEFAULT_CALIBRATION,
    CalibrationProfile,
    GpaBands,
    round_score,
)
from portfolio_scanner.core.ladder import LadderPath
from portfolio_scanner.core.rubric import heuristic_nqi
from portfolio_scanner.core.schemas_dimensions import (
    ComparativeContext,
    Dimension,
    DimensionResult,
    Evidence,
    Gap,
    clamp_score,
)
from portfolio_scanner.core.schemas_portfolio import (
    AcademicSlice,
    Activity,
    AuthenticitySlice,
    CommunitySlice,
    CuriositySlice,
    DimensionSlice,
    FutureReadinessSlice,
    LeadershipSlice,
)
from portfolio_scanner.core.text_signals import TextSignals, detect_signals, snippet

HEURISTIC_CONFIDENCE = 0.4
AUTHENTICITY_HEURISTIC_CONFIDENCE = 0.3

SIGNAL_INCREMENTS: dict[str, float] = {
    "metrics": 0.5,
    "beneficiaries": 0.5,
    "reflection": 0.5,
    "sustained_duration": 0.5,
}

# (evidence words below, max score)
DEFAULT_LENGTH_CAPS: tuple[tuple[int, float], ...] = ((25, 3.0), (75, 5.0), (150, 7.5))
# Academic evidence is mostly structured; only an empty course list is capped
ACADEMIC_LENGTH_CAPS: tuple[tuple[int, float], ...] = ((3, 6.0),)

UNDER_RESOURCED_OFFERINGS = 10

CURIOSITY_CATEGORIES = ("stem", "academic_prep", "research")
COMMUNITY_CATEGORIES = ("service", "volunteer", "community", "family")


@dataclass(frozen=True)
class StructuralAssessment:
    base: float
    basis: str
    strengths: list[Evidence]


def signal_bonus(signals: TextSignals) -> tuple[float, list[str]]:
    """Sum the fixed increments for every lexical signal present."""
    hits = [name for name in SIGNAL_INCREMENTS if getattr(signals, name)]
    return sum(SIGNAL_INCREMENTS[name] for name in hits), hits


def length_cap(word_count: int, caps: tuple[tuple[int, float], ...]) -> float | None:
    for threshold, cap in caps:
        if word_count < threshold:
            return cap
    return None


def _activity_evidence(activity: Activity, label: str) -> Evidence:
    quotes = [snippet(activity.description)] if activity.description else []
    title = f"{activity.role} in {activity.name}" if activity.role else activity.name
    return Evidence(text=f"{label}: {title}", supporting_quotes=quotes, rarity="unassessed")


def _matches_category(activity: Activity, categories: tuple[str, ...], keyword: str) -> bool:
    category = activity.category.strip().lower()
    return category in categories or keyword in activity.text().lower()


# =======================
# Structural bases
# =======================


def _academic_base(slice_: AcademicSlice, bands: GpaBands = GpaBands()) -> StructuralAssessment:
    academic = slice_.academic
    gpa = academic.best_gpa or 0.0
    advanced = academic.advanced_course_count
    rank = academic.class_rank_percentile or 0.0

    if (gpa >= bands.top or rank >= 90) and advanced >= 10:
        base, basis = 9.5, "top GPA band with 10+ advanced courses"
    elif (gpa >= bands.mid or rank >= 75) and advanced >= 6:
        base, basis = 7.5, "upper GPA band with 6+ advanced courses"
    elif gpa >= bands.floor:
        base, basis = 5.5, f"GPA at or above {bands.floor:g}"
    else:
        base, basis = 3.0, f"GPA below {bands.floor:g}"

    offered = academic.advanced_courses_offered
    if offered is not None and 0 < offered < UNDER_RESOURCED_OFFERINGS and advanced >= 0.8 * offered:
        base += 1.0
        basis += "; took most of the limited rigor offered"

    strengths = []
    if gpa:
        strengths.append(Evidence(text=f"GPA {gpa:.2f}", supporting_quotes=[], rarity="unassessed"))
    if advanced:
        names = [c.name for c in academic.courses if c.is_advanced][:5]
        strengths.append(
            Evidence(text=f"{advanced} advanced courses", supporting_quotes=names, rarity="unassessed")
        )
    return StructuralAssessment(base, basis, strengths)


def _leadership_base(slice_: LeadershipSlice) -> StructuralAssessment:
    activities = slice_.activities
    count = len(activities)
    has_achievements = any(a.achievements for a in activities)

    if has_achievements and count >= 3:
        base, basis = 7.0, "achievements across 3+ activities"
    elif count >= 5:
        base, basis = 6.0, "5+ activities"
    elif count < 2:
        base, basis = 4.0, "fewer than 2 activities"
    else:
        base, basis = 5.0, "2-4 activities"

    leaders = [a for a in activities if a.leadership_position]
    strengths = [_activity_evidence(a, "Leadership role") for a in leaders[:3]]
    if slice_.personal_context.family_responsibilities:
        strengths.append(
            Evidence(
                text="Family responsibilities",
                supporting_quotes=[snippet(slice_.personal_context.family_responsibilities)],
                rarity="unassessed",
            )
        )
    return StructuralAssessment(base, basis, strengths)


def _curiosity_base(slice_: CuriositySlice) -> StructuralAssessment:
    matches = [
        a for a in slice_.activities if _matches_category(a, CURIOSITY_CATEGORIES, "research")
    ]
    if len(matches) >= 3:
        base, basis = 7.0, "3+ academic or research activities"
    elif matches:
        base, basis = 5.5, "at least one academic or research activity"
    else:
        base, basis = 3.5, "no academic or research activities"
    strengths = [_activity_evidence(a, "Intellectual pursuit") for a in matches[:3]]
    return StructuralAssessment(base, basis, strengths)


def _community_base(slice_: CommunitySlice) -> StructuralAssessment:
    matches = [
        a for a in slice_.activities if _matches_category(a, COMMUNITY_CATEGORIES, "volunteer")
    ]
    family = slice_.personal_context.family_responsibilities
    if len(matches) >= 3 or family:
        base, basis = 7.0, "3+ service activities or family responsibilities"
    elif matches:
        base, basis = 5.5, "at least one service activity"
    else:
        base, basis = 3.5, "no service activities"
    strengths = [_activity_evidence(a, "Service") for a in matches[:3]]
    if family:
        strengths.append(
            Evidence(text="Family responsibilities", supporting_quotes=[snippet(family)], rarity="unassessed")
        )
    return StructuralAssessment(base, basis, strengths)


def _authenticity_base(slice_: AuthenticitySlice) -> StructuralAssessment:
    samples = [w for w in slice_.writing_samples if w.text.strip()]
    if not samples:
        return StructuralAssessment(5.0, "no writing samples", [])

    nqis = [
        w.narrative_quality_index if w.narrative_quality_index is not None else heuristic_nqi(w.text)
        for w in samples
    ]
    avg = sum(nqis) / len(nqis)
    if avg >= 80:
        base = 9.0
    elif avg >= 70:
        base = 7.5
    elif avg >= 60:
        base = 5.5
    else:
        base = 3.5
    strengths = []
    if avg >= 70:
        strengths.append(
            Evidence(
                text=f"Writing quality index averages {avg:.0f}",
                supporting_quotes=[snippet(samples[0].text)],
                rarity="unassessed",
            )
        )
    return StructuralAssessment(base, f"average narrative quality index {avg:.0f}", strengths)


def _future_base(slice_: FutureReadinessSlice) -> StructuralAssessment:
    goals = slice_.goals
    count = len(slice_.activities)
    if goals.intended_major and len(goals.why_major) > 50 and count >= 3:
        base, basis = 7.0, "declared major with explained motivation and 3+ activities"
    elif goals.intended_major or count >= 2:
        base, basis = 5.5, "declared major or 2+ activities"
    else:
        base, basis = 4.0, "no declared direction"
    strengths = []
    if goals.intended_major:
        quotes = [snippet(goals.why_major)] if goals.why_major else []
        strengths.append(
            Evidence(text=f"Intended major: {goals.intended_major}", supporting_quotes=quotes, rarity="unassessed")
        )
    return StructuralAssessment(base, basis, strengths)


_STRUCTURAL: dict[Dimension, Callable[..., StructuralAssessment]] = {
    Dimension.ACADEMIC_EXCELLENCE: _academic_base,
    Dimension.LEADERSHIP_INITIATIVE: _leadership_base,
    Dimension.INTELLECTUAL_CURIOSITY: _curiosity_base,
    Dimension.COMMUNITY_IMPACT: _community_base,
    Dimension.AUTHENTICITY_VOICE: _authenticity_base,
    Dimension.FUTURE_READINESS: _future_base,
}

_SLICE_DIMENSION = {
    "academic_excellence": Dimension.ACADEMIC_EXCELLENCE,
    "leadership_initiative": Dimension.LEADERSHIP_INITIATIVE,
    "intellectual_curiosity": Dimension.INTELLECTUAL_CURIOSITY,
    "community_impact": Dimension.COMMUNITY_IMPACT,
    "authenticity_voice": Dimension.AUTHENTICITY_VOICE,
    "future_readiness": Dimension.FUTURE_READINESS,
}


def heuristic_dimension_result(
    slice_: DimensionSlice,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
    flags: list[str] | None = None,
    mode: str | None = None,
) -> DimensionResult:
    """
    Score one dimension without the reasoning service.

    Args:
        slice_: The dimension's validated input slice
        calibration: Tier breakpoints to apply
        flags: Degradation flags to attach (defaults to ["heuristic_scoring"])
        mode: Evaluation mode; selects the GPA bands for academics

    Returns:
        DimensionResult on the heuristic path with reduced confidence
    """
    dimension = _SLICE_DIMENSION[slice_.kind]
    if dimension is Dimension.ACADEMIC_EXCELLENCE:
        assessment = _academic_base(slice_, calibration.gpa_bands_for(mode))
    else:
        assessment = _STRUCTURAL[dimension](slice_)
    signals = detect_signals(slice_.evidence_text())
    bonus, hits = signal_bonus(signals)

    caps = ACADEMIC_LENGTH_CAPS if dimension is Dimension.ACADEMIC_EXCELLENCE else DEFAULT_LENGTH_CAPS
    cap = length_cap(signals.word_count, caps)
    raw = assessment.base + bonus
    capped = cap is not None and raw > cap
    score = round_score(clamp_score(min(raw, cap) if capped else raw))

    result_flags = list(flags) if flags else ["heuristic_scoring"]
    growth_areas = [
        Gap(
            text="Automated analysis unavailable",
            severity="minor",
            how_to_improve="Reasoning analysis failed; manual review recommended",
        )
    ]
    if capped:
        result_flags.append("too_short")
        growth_areas.insert(
            0,
            Gap(
                text="Thin evidence",
                supporting_quotes=[snippet(slice_.evidence_text(), 120)] if signals.word_count else [],
                severity="moderate",
                how_to_improve="Describe specifics: numbers, who benefited, how long, what changed",
            ),
        )

    notes = {
        "method": "heuristic",
        "basis": assessment.basis,
        "signals": ", ".join(hits) if hits else "none",
        "evidence_words": str(signals.word_count),
    }
    if capped:
        notes["length_cap"] = f"{cap} (below threshold for {signals.word_count} words)"

    confidence = (
        AUTHENTICITY_HEURISTIC_CONFIDENCE
        if dimension is Dimension.AUTHENTICITY_VOICE
        else HEURISTIC_CONFIDENCE
    )
    return DimensionResult(
        dimension=dimension,
        score=score,
        tier=calibration.tier_for(dimension, score),
        reasoning=notes,
        strengths=assessment.strengths,
        growth_areas=growth_areas,
        comparative_context=ComparativeContext(
            vs_typical_applicant="Heuristic estimate; not compared against the applicant pool"
        ),
        percentile_estimate="Not estimated (heuristic)",
        strategic_pivot="",
        confidence=confidence,
        path=LadderPath.HEURISTIC,
        flags=result_flags,
    )
