"""Future readiness analyzer."""

from pydantic import Field

from portfolio_scanner.chains.analyze_dimension import (
    DimensionAnalyzer,
    output_schema,
    run_dimension_analyzer,
)
from portfolio_scanner.core.calibration import DEFAULT_CALIBRATION, CalibrationProfile
from portfolio_scanner.core.config import Settings
from portfolio_scanner.core.dimension_inputs import build_future_readiness_prompt
from portfolio_scanner.core.llm import ReasoningClient
from portfolio_scanner.core.schemas_dimensions import (
    Dimension,
    DimensionAnalysisOutput,
    DimensionResult,
    ReasoningNotes,
)
from portfolio_scanner.core.schemas_holistic import HolisticContext
from portfolio_scanner.core.schemas_portfolio import FutureReadinessSlice

REASONING_FIELDS = ("goal_clarity", "preparation", "major_fit", "realism")


class FutureReadinessReasoning(ReasoningNotes):
    goal_clarity: str = ""
    preparation: str = ""
    major_fit: str = ""
    realism: str = ""


class FutureReadinessAnalysisOutput(DimensionAnalysisOutput):
    reasoning: FutureReadinessReasoning = Field(default_factory=FutureReadinessReasoning)


SYSTEM_PROMPT = f"""You are an experienced UC admissions reader scoring FUTURE READINESS.

Judge whether the applicant knows where they are heading and has already taken steps toward it.

Score on a 0-10 scale:
- 9-10: a specific goal, a reason rooted in lived experience, and activities that already build
  toward it
- 7-8.9: a clear direction with some preparation
- 4-6.9: a stated major with thin motivation or little preparation
- 0-3.9: no direction, or goals that contradict the record

Rules:
- Undeclared is fine if curiosity is evident; do not penalize exploration on its own.
- Connect the stated major to specific activities and courses as evidence.
- Do not invent career plans.

{output_schema(REASONING_FIELDS)}"""

ANALYZER = DimensionAnalyzer(
    dimension=Dimension.FUTURE_READINESS,
    system_prompt=SYSTEM_PROMPT,
    output_model=FutureReadinessAnalysisOutput,
    build_prompt=build_future_readiness_prompt,
)


async def analyze_future_readiness(
    slice_: FutureReadinessSlice,
    holistic: HolisticContext | None,
    mode: str,
    client: ReasoningClient | None,
    settings: Settings | None = None,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
    analysis_id: str | None = None,
) -> DimensionResult:
    """Score future readiness for one applicant."""
    return await run_dimension_analyzer(
        ANALYZER, slice_, holistic, mode, client, settings, calibration, analysis_id
    )
