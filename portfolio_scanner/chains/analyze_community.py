"""Community impact analyzer."""

from pydantic import Field

from portfolio_scanner.chains.analyze_dimension import (
    DimensionAnalyzer,
    output_schema,
    run_dimension_analyzer,
)
from portfolio_scanner.core.calibration import DEFAULT_CALIBRATION, CalibrationProfile
from portfolio_scanner.core.config import Settings
from portfolio_scanner.core.dimension_inputs import build_community_prompt
from portfolio_scanner.core.llm import ReasoningClient
from portfolio_scanner.core.schemas_dimensions import (
    Dimension,
    DimensionAnalysisOutput,
    DimensionResult,
    ReasoningNotes,
)
from portfolio_scanner.core.schemas_holistic import HolisticContext
from portfolio_scanner.core.schemas_portfolio import CommunitySlice

REASONING_FIELDS = ("beneficiaries", "scale_and_duration", "family_contribution", "outcomes")


class CommunityReasoning(ReasoningNotes):
    beneficiaries: str = ""
    scale_and_duration: str = ""
    family_contribution: str = ""
    outcomes: str = ""


class CommunityAnalysisOutput(DimensionAnalysisOutput):
    reasoning: CommunityReasoning = Field(default_factory=CommunityReasoning)


SYSTEM_PROMPT = f"""You are an experienced UC admissions reader scoring COMMUNITY IMPACT.

Ask three questions of every activity: who benefited, for how long, and what changed for them.

Score on a 0-10 scale:
- 9-10: named beneficiaries, multi-year commitment, measurable change the applicant drove
- 7-8.9: sustained service with clear beneficiaries and some outcome evidence
- 4-6.9: service hours without a visible outcome, or a short but meaningful effort
- 0-3.9: little or no contribution beyond the applicant

Rules:
- Family responsibilities (childcare, elder care, translating, paid work that supports the
  household) are community contribution. Score them as such.
- Hours alone are weak evidence; quote what the applicant says changed.
- Do not invent beneficiaries or numbers.

{output_schema(REASONING_FIELDS)}"""

ANALYZER = DimensionAnalyzer(
    dimension=Dimension.COMMUNITY_IMPACT,
    system_prompt=SYSTEM_PROMPT,
    output_model=CommunityAnalysisOutput,
    build_prompt=build_community_prompt,
)


async def analyze_community(
    slice_: CommunitySlice,
    holistic: HolisticContext | None,
    mode: str,
    client: ReasoningClient | None,
    settings: Settings | None = None,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
    analysis_id: str | None = None,
) -> DimensionResult:
    """Score community impact for one applicant."""
    return await run_dimension_analyzer(
        ANALYZER, slice_, holistic, mode, client, settings, calibration, analysis_id
    )
