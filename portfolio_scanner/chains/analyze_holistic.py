"""Holistic first-impression stage.

Runs once per portfolio before the dimension analyzers and produces the
read-only context they all share: the applicant's central thread and the
circumstances (first-generation, low-income, under-resourced school) a
reader must account for.
"""

from collections import Counter

from portfolio_scanner.core.config import Settings, get_settings
from portfolio_scanner.core.ladder import LadderPath, LadderRequest, run_ladder
from portfolio_scanner.core.llm import ReasoningClient, ReasoningParams, parse_llm_json
from portfolio_scanner.core.schemas_holistic import (
    CentralThread,
    ContextFactor,
    ContextFactors,
    HolisticContext,
    HolisticOutput,
)
from portfolio_scanner.core.schemas_portfolio import PortfolioData

HEURISTIC_CONFIDENCE = 0.4
UNDER_RESOURCED_OFFERINGS = 10

SYSTEM_PROMPT = """You are a senior UC admissions reader forming a first impression of an applicant.

Read the whole portfolio once, as a reader would in the first few minutes, and report:
- central_thread: the story that ties the activities together, its signature elements, and
  how coherent it is (thematic_coherence 0-10)
- context_factors: whether first_generation, low_income and under_resourced_school apply and
  how each should change the bar for later readers
- hidden_strengths, red_flags, key_insights: short statements grounded in the portfolio
- overall_first_impression: two sentences

Return JSON only:
{
  "central_thread": {"narrative": "...", "signature_elements": ["..."], "thematic_coherence": <0-10>},
  "context_factors": {
    "first_generation": {"applies": true|false, "impact": "..."},
    "low_income": {"applies": true|false, "impact": "..."},
    "under_resourced_school": {"applies": true|false, "impact": "..."}
  },
  "hidden_strengths": ["..."],
  "red_flags": ["..."],
  "key_insights": ["..."],
  "overall_first_impression": "...",
  "confidence": <0-1>
}"""


def build_holistic_prompt(portfolio: PortfolioData, mode: str) -> str:
    lines = ["=== EVALUATION MODE ===", f"mode: {mode}", ""]

    profile = portfolio.profile
    lines.append("=== PROFILE ===")
    lines.append(f"grade_level: {profile.grade_level or 'unknown'}")
    lines.append(f"school: {profile.school_name or 'unknown'}")
    lines.append(f"intended_major: {portfolio.goals.intended_major or 'undeclared'}")
    lines.append("")

    academic = portfolio.academic
    lines.append("=== ACADEMICS ===")
    if academic is None:
        lines.append("(no academic record)")
    else:
        lines.append(f"gpa: {academic.best_gpa if academic.best_gpa is not None else 'unknown'}")
        lines.append(f"advanced_courses_taken: {academic.advanced_course_count}")
        offered = academic.advanced_courses_offered
        lines.append(f"advanced_courses_offered: {offered if offered is not None else 'unknown'}")
    lines.append("")

    context = portfolio.personal_context
    lines.append("=== CONTEXT ===")
    lines.append(f"first_generation: {'yes' if context.first_generation else 'no'}")
    lines.append(f"low_income: {'yes' if context.low_income else 'no'}")
    if context.family_responsibilities:
        lines.append(f"family_responsibilities: {context.family_responsibilities}")
    if context.challenges:
        lines.append(f"challenges: {context.challenges}")
    lines.append("")

    lines.append(f"=== ACTIVITIES ({len(portfolio.activities)}) ===")
    for activity in portfolio.activities:
        role = f", {activity.role}" if activity.role else ""
        lines.append(f"- {activity.name} ({activity.category}{role}): {activity.description}")
    lines.append("")

    lines.append(f"=== WRITING ({len(portfolio.writing_samples)} samples) ===")
    for sample in portfolio.writing_samples:
        lines.append(f"- {sample.prompt or 'untitled'}: {sample.text[:1500]}")
    return "\n".join(lines)


def heuristic_holistic_context(portfolio: PortfolioData) -> HolisticContext:
    """First impression built from structured fields only."""
    context = portfolio.personal_context
    academic = portfolio.academic
    offered = academic.advanced_courses_offered if academic else None
    under_resourced = offered is not None and offered < UNDER_RESOURCED_OFFERINGS

    factors = ContextFactors(
        first_generation=ContextFactor(
            applies=context.first_generation,
            impact="First in family to attend college" if context.first_generation else "",
        ),
        low_income=ContextFactor(
            applies=context.low_income,
            impact="Financial constraints may limit paid opportunities" if context.low_income else "",
        ),
        under_resourced_school=ContextFactor(
            applies=under_resourced,
            impact=f"Only {offered} advanced courses offered" if under_resourced else "",
        ),
    )

    categories = Counter(a.category.strip().lower() for a in portfolio.activities)
    if categories:
        top_category, count = categories.most_common(1)[0]
        narrative = f"Sustained involvement in {top_category} ({count} activities)"
        coherence = min(10.0, 4.0 + count)
    else:
        narrative = "No clear thread yet"
        coherence = 3.0

    red_flags = []
    if not portfolio.activities:
        red_flags.append("No activities listed")
    if not portfolio.writing_samples:
        red_flags.append("No writing samples provided")

    return HolisticContext(
        central_thread=CentralThread(
            narrative=narrative,
            signature_elements=[a.name for a in portfolio.activities[:3]],
            thematic_coherence=coherence,
        ),
        overall_first_impression=(
            f"{len(portfolio.activities)} activities and {len(portfolio.writing_samples)} "
            "writing samples; automated first impression only."
        ),
        context_factors=factors,
        red_flags=red_flags,
        confidence=HEURISTIC_CONFIDENCE,
        path=LadderPath.HEURISTIC,
        flags=["heuristic_scoring"],
    )


def _to_context(output: HolisticOutput, path: LadderPath) -> HolisticContext:
    return HolisticContext(
        central_thread=output.central_thread,
        overall_first_impression=output.overall_first_impression,
        context_factors=output.context_factors,
        hidden_strengths=output.hidden_strengths,
        red_flags=output.red_flags,
        key_insights=output.key_insights,
        confidence=output.confidence,
        path=path,
    )


async def analyze_holistic(
    portfolio: PortfolioData,
    mode: str,
    client: ReasoningClient | None,
    settings: Settings | None = None,
    analysis_id: str | None = None,
) -> HolisticContext:
    """
    Form the first impression shared by all dimension analyzers.

    Args:
        portfolio: Validated portfolio snapshot
        mode: Normalized evaluation mode
        client: Reasoning client, or None for heuristic-only
        settings: Settings override
        analysis_id: Correlation id for logs

    Returns:
        HolisticContext; never raises for service failures
    """
    settings = settings or get_settings()
    request = LadderRequest(
        system_instructions=SYSTEM_PROMPT,
        user_payload=build_holistic_prompt(portfolio, mode),
        params=ReasoningParams(
            model=settings.HOLISTIC_MODEL,
            max_tokens=settings.HOLISTIC_MAX_TOKENS,
            temperature=settings.HOLISTIC_TEMPERATURE,
            workflow="holistic",
        ),
    )
    outcome = await run_ladder(
        client,
        request,
        parse=lambda raw: parse_llm_json(raw, HolisticOutput),
        fallback=lambda: heuristic_holistic_context(portfolio),
        label="holistic",
        timeout_s=settings.REASONING_TIMEOUT_S,
        analysis_id=analysis_id,
    )
    if outcome.used_heuristic:
        return outcome.flagged_value()
    return _to_context(outcome.value, outcome.path)
