"""Entry-level rubric scoring for a single activity description.

Same ladder as the dimension analyzers, on an 11-category rubric. Length
caps apply on every path: a 20-word entry cannot score above 1 no matter
who scored it.
"""

from typing import Any

from pydantic import ValidationError

from portfolio_scanner.core.calibration import DEFAULT_CALIBRATION, CalibrationProfile, round_score
from portfolio_scanner.core.config import Settings, get_settings
from portfolio_scanner.core.exceptions import InputError
from portfolio_scanner.core.ladder import LadderPath, LadderRequest, run_ladder
from portfolio_scanner.core.llm import ReasoningClient, ReasoningParams, parse_llm_json
from portfolio_scanner.core.logging import get_logger
from portfolio_scanner.core.rubric import (
    HEURISTIC_CONFIDENCE,
    heuristic_authenticity,
    heuristic_base,
    heuristic_categories,
    length_flags,
    max_score_for,
    narrative_quality_index,
    reader_impression_label,
    suggested_fixes,
    weighted_average,
    weights_for_category,
)
from portfolio_scanner.core.schemas_rubric import (
    RUBRIC_CATEGORY_NAMES,
    AuthenticitySignal,
    EntryRubricOutput,
    RubricCategoryScore,
    RubricReport,
    ScoreEntryOptions,
)
from portfolio_scanner.core.text_signals import TextSignals, detect_signals

logger = get_logger(__name__)

SERVICE_CONFIDENCE = 0.8
MAX_ENTRY_CHARS = 6000
VOICE_TYPES = ("conversational", "factual", "resume", "essay")

SYSTEM_PROMPT = """You are a UC admissions reader scoring ONE activity description against an
11-category rubric. Score each category 0-10:

voice_integrity              sounds like a real teenager, not a resume
specificity_evidence         numbers, names, concrete details
transformative_impact        what changed because of the applicant
role_clarity_ownership       what the applicant personally did
narrative_arc_stakes         tension, obstacles, something at risk
initiative_leadership        started, led or reshaped something
community_collaboration      worked with and for others
reflection_meaning           what the applicant learned or how they changed
craft_language_quality       sentence-level writing quality
fit_trajectory               connection to interests and future direction
time_investment_consistency  sustained commitment over time

Short, generic entries must score low. Quote the entry in evidence_snippets; never invent details.

Return JSON only:
{
  "categories": [{"name": "<category>", "score": <0-10>, "evidence_snippets": ["..."], "notes": "..."}],
  "authenticity": {"score": <0-10>, "voice_type": "conversational|factual|resume|essay",
                   "red_flags": ["..."], "green_flags": ["..."]},
  "suggested_fixes": ["..."],
  "flags": ["..."]
}
Every one of the 11 categories must appear exactly once."""


def coerce_entry_text(text: Any) -> str:
    """Turn any submitted value into text without raising."""
    if text is None:
        return ""
    if isinstance(text, (bytes, bytearray)):
        return bytes(text).decode("utf-8", errors="replace")
    if not isinstance(text, str):
        return str(text)
    return text


def load_entry_options(options: ScoreEntryOptions | dict[str, Any] | None) -> ScoreEntryOptions:
    """
    Validate entry options.

    Raises:
        InputError: If options are present but malformed
    """
    if options is None:
        return ScoreEntryOptions()
    if isinstance(options, ScoreEntryOptions):
        return options
    try:
        return ScoreEntryOptions.model_validate(options)
    except ValidationError as e:
        raise InputError(f"Invalid entry options: {e.errors()[0].get('msg')}", "options") from e


def build_entry_prompt(text: str, options: ScoreEntryOptions) -> str:
    lines = ["=== ACTIVITY ==="]
    lines.append(f"title: {options.title or 'untitled'}")
    lines.append(f"role: {options.role or 'unspecified'}")
    lines.append(f"category: {options.category or 'unspecified'}")
    lines.append("")
    lines.append("=== DESCRIPTION ===")
    lines.append(text[:MAX_ENTRY_CHARS])
    return "\n".join(lines)


def _tier(score: float, calibration: CalibrationProfile):
    return calibration.overall_tier(score)


def heuristic_report(
    text: str,
    options: ScoreEntryOptions,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
) -> RubricReport:
    """Score an entry from narrative markers and length alone."""
    signals = detect_signals(text)
    base = heuristic_base(signals)
    weights = weights_for_category(options.category)
    categories = heuristic_categories(signals, base)
    nqi = narrative_quality_index(weighted_average({c.name: c.score for c in categories}, weights))
    score = round_score(base)

    flags = ["heuristic_scoring", *length_flags(signals.word_count)]
    if not text.strip():
        flags.append("empty_submission")

    return RubricReport(
        entry_id=options.activity_id,
        score=score,
        tier=_tier(score, calibration),
        categories=categories,
        weights=weights,
        narrative_quality_index=nqi,
        reader_impression_label=reader_impression_label(nqi),
        authenticity=heuristic_authenticity(signals, base),
        suggested_fixes=suggested_fixes(signals),
        word_count=signals.word_count,
        flags=flags,
        confidence=HEURISTIC_CONFIDENCE,
        path=LadderPath.HEURISTIC,
    )


def _authenticity_from_output(
    output: EntryRubricOutput, signals: TextSignals, base: float
) -> AuthenticitySignal:
    fallback = heuristic_authenticity(signals, base)
    given = output.authenticity
    if given is None:
        return fallback
    score = fallback.score
    if isinstance(given.score, (int, float)):
        score = max(0.0, min(10.0, float(given.score)))
    voice_type = given.voice_type if given.voice_type in VOICE_TYPES else fallback.voice_type
    return AuthenticitySignal(
        score=score,
        voice_type=voice_type,
        red_flags=given.red_flags,
        green_flags=given.green_flags,
    )


def report_from_output(
    output: EntryRubricOutput,
    text: str,
    options: ScoreEntryOptions,
    path: LadderPath,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
) -> RubricReport:
    """Apply length caps and weights to a validated service response."""
    signals = detect_signals(text)
    cap = max_score_for(signals.word_count)
    weights = weights_for_category(options.category)
    by_name = output.scores_by_name()

    categories = []
    capped = False
    for name in RUBRIC_CATEGORY_NAMES:
        scored = by_name[name]
        if scored.score > cap:
            capped = True
        categories.append(
            RubricCategoryScore(
                name=name,
                score=round(min(scored.score, cap), 1),
                evidence_snippets=scored.evidence_snippets,
                notes=scored.notes,
            )
        )

    avg = weighted_average({c.name: c.score for c in categories}, weights)
    nqi = narrative_quality_index(avg)
    score = round_score(avg)

    flags = [f for f in output.flags if isinstance(f, str)]
    for flag in length_flags(signals.word_count):
        if flag not in flags:
            flags.append(flag)
    if capped:
        flags.append("length_capped")

    return RubricReport(
        entry_id=options.activity_id,
        score=score,
        tier=_tier(score, calibration),
        categories=categories,
        weights=weights,
        narrative_quality_index=nqi,
        reader_impression_label=reader_impression_label(nqi),
        authenticity=_authenticity_from_output(output, signals, heuristic_base(signals)),
        suggested_fixes=output.suggested_fixes or suggested_fixes(signals),
        word_count=signals.word_count,
        flags=flags,
        confidence=SERVICE_CONFIDENCE,
        path=path,
    )


async def score_entry_text(
    text: Any,
    options: ScoreEntryOptions | dict[str, Any] | None,
    client: ReasoningClient | None,
    settings: Settings | None = None,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
) -> RubricReport:
    """
    Score one free-text activity description.

    Args:
        text: The description; any value is accepted (bytes are decoded leniently)
        options: Activity id, title, role and category
        client: Reasoning client, or None for heuristic-only
        settings: Settings override
        calibration: Tier breakpoints for the overall entry score

    Returns:
        RubricReport; never raises for service failures or odd text

    Raises:
        InputError: If options are malformed
    """
    entry_options = load_entry_options(options)
    entry_text = coerce_entry_text(text)

    if not entry_text.strip():
        logger.info(f"Empty entry {entry_options.activity_id}, scoring without a reasoning call")
        return heuristic_report(entry_text, entry_options, calibration)

    settings = settings or get_settings()
    request = LadderRequest(
        system_instructions=SYSTEM_PROMPT,
        user_payload=build_entry_prompt(entry_text, entry_options),
        params=ReasoningParams(
            model=settings.ENTRY_MODEL,
            max_tokens=settings.ENTRY_MAX_TOKENS,
            temperature=settings.ENTRY_TEMPERATURE,
            workflow="entry_rubric",
        ),
    )
    outcome = await run_ladder(
        client,
        request,
        parse=lambda raw: parse_llm_json(raw, EntryRubricOutput),
        fallback=lambda: heuristic_report(entry_text, entry_options, calibration),
        label="entry_rubric",
        timeout_s=settings.REASONING_TIMEOUT_S,
        entry_id=entry_options.activity_id,
    )
    if outcome.used_heuristic:
        return outcome.flagged_value()
    return report_from_output(outcome.value, entry_text, entry_options, outcome.path, calibration)
