"""Intellectual curiosity analyzer."""

from pydantic import Field

from portfolio_scanner.chains.analyze_dimension import (
    DimensionAnalyzer,
    output_schema,
    run_dimension_analyzer,
)
from portfolio_scanner.core.calibration import DEFAULT_CALIBRATION, CalibrationProfile
from portfolio_scanner.core.config import Settings
from portfolio_scanner.core.dimension_inputs import build_curiosity_prompt
from portfolio_scanner.core.llm import ReasoningClient
from portfolio_scanner.core.schemas_dimensions import (
    Dimension,
    DimensionAnalysisOutput,
    DimensionResult,
    ReasoningNotes,
)
from portfolio_scanner.core.schemas_holistic import HolisticContext
from portfolio_scanner.core.schemas_portfolio import CuriositySlice

REASONING_FIELDS = ("beyond_classroom", "depth_of_inquiry", "self_direction", "major_connection")


class CuriosityReasoning(ReasoningNotes):
    beyond_classroom: str = ""
    depth_of_inquiry: str = ""
    self_direction: str = ""
    major_connection: str = ""


class CuriosityAnalysisOutput(DimensionAnalysisOutput):
    reasoning: CuriosityReasoning = Field(default_factory=CuriosityReasoning)


SYSTEM_PROMPT = f"""You are an experienced UC admissions reader scoring INTELLECTUAL CURIOSITY.

Look for learning the applicant chose rather than learning that was assigned: independent
research, self-taught skills, questions pursued across months, reading or projects that go past
the syllabus.

Score on a 0-10 scale:
- 9-10: original inquiry (research, a built artifact, a published or presented result) with
  visible depth
- 7-8.9: sustained self-directed learning in one area, with specifics
- 4-6.9: interest shown through courses and clubs, little independent pursuit
- 0-3.9: no evidence of learning beyond requirements

Rules:
- Depth beats breadth. One question chased for two years outranks five one-week camps.
- Writing that shows how the applicant thinks is strong evidence; cite it.
- Do not infer curiosity from grades alone.

{output_schema(REASONING_FIELDS)}"""

ANALYZER = DimensionAnalyzer(
    dimension=Dimension.INTELLECTUAL_CURIOSITY,
    system_prompt=SYSTEM_PROMPT,
    output_model=CuriosityAnalysisOutput,
    build_prompt=build_curiosity_prompt,
)


async def analyze_curiosity(
    slice_: CuriositySlice,
    holistic: HolisticContext | None,
    mode: str,
    client: ReasoningClient | None,
    settings: Settings | None = None,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
    analysis_id: str | None = None,
) -> DimensionResult:
    """Score intellectual curiosity for one applicant."""
    return await run_dimension_analyzer(
        ANALYZER, slice_, holistic, mode, client, settings, calibration, analysis_id
    )
