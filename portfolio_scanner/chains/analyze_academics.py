"""Academic excellence analyzer.

Weighs GPA and rigor against what the applicant's school actually offered.
"""

from pydantic import Field

from portfolio_scanner.chains.analyze_dimension import (
    DimensionAnalyzer,
    output_schema,
    run_dimension_analyzer,
)
from portfolio_scanner.core.calibration import DEFAULT_CALIBRATION, CalibrationProfile
from portfolio_scanner.core.config import Settings
from portfolio_scanner.core.dimension_inputs import build_academic_prompt
from portfolio_scanner.core.llm import ReasoningClient
from portfolio_scanner.core.schemas_dimensions import (
    Dimension,
    DimensionAnalysisOutput,
    DimensionResult,
    ReasoningNotes,
)
from portfolio_scanner.core.schemas_holistic import HolisticContext
from portfolio_scanner.core.schemas_portfolio import AcademicSlice

REASONING_FIELDS = ("gpa_analysis", "rigor_analysis", "context_adjustment", "trajectory")


class AcademicReasoning(ReasoningNotes):
    gpa_analysis: str = ""
    rigor_analysis: str = ""
    context_adjustment: str = ""
    trajectory: str = ""


class AcademicAnalysisOutput(DimensionAnalysisOutput):
    reasoning: AcademicReasoning = Field(default_factory=AcademicReasoning)


SYSTEM_PROMPT = f"""You are an experienced UC admissions reader scoring ACADEMIC EXCELLENCE.

Score on a 0-10 scale:
- 9-10: top of class, near-maximum rigor available at the school, sustained upward or flat-high trajectory
- 7-8.9: strong GPA with substantial rigor; a few gaps relative to what was offered
- 4-6.9: solid grades OR meaningful rigor, not both
- 0-3.9: grades or rigor below the typical UC applicant

Rules:
- Judge rigor relative to the school's offerings. Taking 6 of 7 offered AP courses outranks 8 of 25.
- First-generation, low-income and under-resourced context changes the bar; say how in context_adjustment.
- Test scores are optional and must never lower the score on their own.
- Cite specific courses, grades or honors as evidence. Do not invent any.

{output_schema(REASONING_FIELDS)}"""

ANALYZER = DimensionAnalyzer(
    dimension=Dimension.ACADEMIC_EXCELLENCE,
    system_prompt=SYSTEM_PROMPT,
    output_model=AcademicAnalysisOutput,
    build_prompt=build_academic_prompt,
)


async def analyze_academics(
    slice_: AcademicSlice,
    holistic: HolisticContext | None,
    mode: str,
    client: ReasoningClient | None,
    settings: Settings | None = None,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
    analysis_id: str | None = None,
) -> DimensionResult:
    """Score academic excellence for one applicant."""
    return await run_dimension_analyzer(
        ANALYZER, slice_, holistic, mode, client, settings, calibration, analysis_id
    )
