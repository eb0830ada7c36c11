"""Leadership and initiative analyzer."""

from pydantic import Field

from portfolio_scanner.chains.analyze_dimension import (
    DimensionAnalyzer,
    output_schema,
    run_dimension_analyzer,
)
from portfolio_scanner.core.calibration import DEFAULT_CALIBRATION, CalibrationProfile
from portfolio_scanner.core.config import Settings
from portfolio_scanner.core.dimension_inputs import build_leadership_prompt
from portfolio_scanner.core.llm import ReasoningClient
from portfolio_scanner.core.schemas_dimensions import (
    Dimension,
    DimensionAnalysisOutput,
    DimensionResult,
    ReasoningNotes,
)
from portfolio_scanner.core.schemas_holistic import HolisticContext
from portfolio_scanner.core.schemas_portfolio import LeadershipSlice

REASONING_FIELDS = ("ec_inventory", "spike_analysis", "initiative_evidence", "informal_leadership")


class LeadershipReasoning(ReasoningNotes):
    ec_inventory: str = ""
    spike_analysis: str = ""
    initiative_evidence: str = ""
    informal_leadership: str = ""


class LeadershipAnalysisOutput(DimensionAnalysisOutput):
    reasoning: LeadershipReasoning = Field(default_factory=LeadershipReasoning)


SYSTEM_PROMPT = f"""You are an experienced UC admissions reader scoring LEADERSHIP AND INITIATIVE.

Place each activity in a tier before scoring:
- Tier 1: founded or built something that outlasted the applicant, or led at regional/state scale
- Tier 2: elected or appointed leadership with a measurable outcome
- Tier 3: sustained membership with growing responsibility
- Tier 4: participation only

Score on a 0-10 scale:
- 9-10: at least one Tier 1 activity with documented impact, plus a coherent spike
- 7-8.9: Tier 2 leadership across multiple activities, or one standout Tier 1
- 4-6.9: mostly Tier 3, some initiative
- 0-3.9: participation without ownership

Rules:
- Informal leadership counts: caring for siblings, translating for family, running a household
  task, organizing peers outside formal clubs.
- Titles without outcomes are weak evidence. Outcomes without titles can be strong evidence.
- Cite the applicant's own words or listed achievements. Do not invent any.

{output_schema(REASONING_FIELDS)}"""

ANALYZER = DimensionAnalyzer(
    dimension=Dimension.LEADERSHIP_INITIATIVE,
    system_prompt=SYSTEM_PROMPT,
    output_model=LeadershipAnalysisOutput,
    build_prompt=build_leadership_prompt,
)


async def analyze_leadership(
    slice_: LeadershipSlice,
    holistic: HolisticContext | None,
    mode: str,
    client: ReasoningClient | None,
    settings: Settings | None = None,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
    analysis_id: str | None = None,
) -> DimensionResult:
    """Score leadership and initiative for one applicant."""
    return await run_dimension_analyzer(
        ANALYZER, slice_, holistic, mode, client, settings, calibration, analysis_id
    )
