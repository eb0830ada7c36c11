"""Entry-level rubric: weights, length caps and the heuristic scorer."""

from decimal import ROUND_HALF_UP, Decimal

from portfolio_scanner.core.schemas_rubric import (
    RUBRIC_CATEGORY_NAMES,
    AuthenticitySignal,
    RubricCategoryScore,
)
from portfolio_scanner.core.text_signals import TextSignals, detect_signals

RUBRIC_WEIGHTS: dict[str, float] = {
    "voice_integrity": 0.10,
    "specificity_evidence": 0.09,
    "transformative_impact": 0.12,
    "role_clarity_ownership": 0.08,
    "narrative_arc_stakes": 0.10,
    "initiative_leadership": 0.10,
    "community_collaboration": 0.08,
    "reflection_meaning": 0.12,
    "craft_language_quality": 0.07,
    "fit_trajectory": 0.07,
    "time_investment_consistency": 0.07,
}

# Per activity category overrides; tables are renormalized to sum to 1
CATEGORY_WEIGHT_OVERRIDES: dict[str, dict[str, float]] = {
    "work": {
        "initiative_leadership": 0.06,
        "fit_trajectory": 0.04,
        "voice_integrity": 0.13,
        "reflection_meaning": 0.15,
        "community_collaboration": 0.10,
    },
    "arts": {
        "initiative_leadership": 0.05,
        "role_clarity_ownership": 0.05,
        "craft_language_quality": 0.10,
        "reflection_meaning": 0.15,
        "fit_trajectory": 0.09,
    },
    "research": {
        "specificity_evidence": 0.12,
        "community_collaboration": 0.05,
        "initiative_leadership": 0.12,
    },
    "athletics": {
        "reflection_meaning": 0.08,
        "time_investment_consistency": 0.11,
        "community_collaboration": 0.11,
    },
}

# (word count below, max score)
ENTRY_LENGTH_CAPS: tuple[tuple[int, float], ...] = ((25, 1.0), (50, 2.0), (100, 4.0))
UNCAPPED_MAX = 10.0

BASE_SCORE = 1.5
STORY_INCREMENT = 1.0
EMOTION_INCREMENT = 1.5
DIALOGUE_INCREMENT = 1.0
REFLECTION_INCREMENT = 1.0

HEURISTIC_CONFIDENCE = 0.4

READER_LABELS: tuple[tuple[int, str], ...] = (
    (90, "captivating_grounded"),
    (80, "strong_distinct_voice"),
    (70, "solid_needs_polish"),
    (60, "patchy_narrative"),
)


def weights_for_category(category: str | None) -> dict[str, float]:
    """Rubric weights for an activity category, always summing to 1."""
    weights = dict(RUBRIC_WEIGHTS)
    overrides = CATEGORY_WEIGHT_OVERRIDES.get((category or "").strip().lower())
    if not overrides:
        return weights
    weights.update(overrides)
    total = sum(weights.values())
    return {name: weight / total for name, weight in weights.items()}


def max_score_for(word_count: int) -> float:
    for threshold, cap in ENTRY_LENGTH_CAPS:
        if word_count < threshold:
            return cap
    return UNCAPPED_MAX


def heuristic_base(signals: TextSignals) -> float:
    """Resume-bullet default plus fixed increments for narrative markers, then capped."""
    base = BASE_SCORE
    if signals.story:
        base += STORY_INCREMENT
    if signals.emotion:
        base += EMOTION_INCREMENT
    if signals.dialogue:
        base += DIALOGUE_INCREMENT
    if signals.entry_reflection:
        base += REFLECTION_INCREMENT
    return min(base, max_score_for(signals.word_count))


def heuristic_category_scores(signals: TextSignals, base: float) -> dict[str, float]:
    cap = max_score_for(signals.word_count)
    raw = {
        "voice_integrity": base,
        "specificity_evidence": max(1.0, base - 0.5 + (1.0 if signals.number_count > 2 else 0.0)),
        "transformative_impact": max(1.0, base - 0.5 + (1.0 if signals.impact else 0.0)),
        "role_clarity_ownership": max(
            1.0, base - 0.3 + (0.5 if signals.first_person_count > 3 else 0.0)
        ),
        "narrative_arc_stakes": max(1.0, base - 1.0 + (1.5 if signals.stakes else 0.0)),
        "initiative_leadership": max(1.0, base - 0.5 + (1.0 if signals.leadership else 0.0)),
        "community_collaboration": max(1.0, base - 0.5 + (0.5 if signals.community else 0.0)),
        "reflection_meaning": max(0.0, base - 1.0 + (1.0 if signals.entry_reflection else 0.0)),
        "craft_language_quality": max(
            1.0,
            base
            - 0.5
            + (1.0 if signals.dialogue else 0.0)
            + (0.5 if signals.word_count > 150 else 0.0),
        ),
        "fit_trajectory": max(1.0, base - 0.5),
        "time_investment_consistency": max(1.0, base - 0.3),
    }
    return {name: round(min(score, cap), 1) for name, score in raw.items()}


def weighted_average(scores: dict[str, float], weights: dict[str, float]) -> float:
    return sum(scores[name] * weights[name] for name in RUBRIC_CATEGORY_NAMES)


def narrative_quality_index(weighted_avg: float) -> int:
    nqi = int(Decimal(str(weighted_avg * 10)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return max(0, min(100, nqi))


def reader_impression_label(nqi: int) -> str:
    for floor, label in READER_LABELS:
        if nqi >= floor:
            return label
    return "generic_unclear"


def heuristic_authenticity(signals: TextSignals, base: float) -> AuthenticitySignal:
    if signals.word_count < 50:
        voice_type = "resume"
    elif signals.story or signals.emotion:
        voice_type = "conversational"
    else:
        voice_type = "factual"

    red_flags = []
    if signals.word_count < 80:
        red_flags.append("too_short")
    if not signals.entry_reflection:
        red_flags.append("no_reflection")

    green_flags = []
    if signals.story:
        green_flags.append("story_elements")
    if signals.emotion:
        green_flags.append("emotional_depth")

    return AuthenticitySignal(
        score=max(3.0, min(7.0, base)),
        voice_type=voice_type,
        red_flags=red_flags,
        green_flags=green_flags,
    )


def length_flags(word_count: int) -> list[str]:
    flags = []
    if word_count < 100:
        flags.append("too_short")
    if word_count < 50:
        flags.append("critically_short")
    return flags


def suggested_fixes(signals: TextSignals) -> list[str]:
    fixes = []
    if signals.word_count < 100:
        fixes.append("Expand the description with a concrete moment: what happened, who was there")
    if signals.number_count <= 2:
        fixes.append("Add numbers: hours, people reached, money raised, results")
    if not signals.entry_reflection:
        fixes.append("Say what you learned or how your thinking changed")
    if not signals.stakes:
        fixes.append("Show what was at stake or what nearly went wrong")
    return fixes


def heuristic_categories(signals: TextSignals, base: float) -> list[RubricCategoryScore]:
    scores = heuristic_category_scores(signals, base)
    return [
        RubricCategoryScore(
            name=name, score=scores[name], notes="Estimated from narrative markers"
        )
        for name in RUBRIC_CATEGORY_NAMES
    ]


def heuristic_nqi(text: str) -> int:
    """Narrative quality index of a text under the heuristic rubric with default weights."""
    signals = detect_signals(text)
    base = heuristic_base(signals)
    scores = heuristic_category_scores(signals, base)
    return narrative_quality_index(weighted_average(scores, RUBRIC_WEIGHTS))
