"""Authenticity and voice analyzer."""

from pydantic import Field

from portfolio_scanner.chains.analyze_dimension import (
    DimensionAnalyzer,
    output_schema,
    run_dimension_analyzer,
)
from portfolio_scanner.core.calibration import DEFAULT_CALIBRATION, CalibrationProfile
from portfolio_scanner.core.config import Settings
from portfolio_scanner.core.dimension_inputs import build_authenticity_prompt
from portfolio_scanner.core.llm import ReasoningClient
from portfolio_scanner.core.schemas_dimensions import (
    Dimension,
    DimensionAnalysisOutput,
    DimensionResult,
    ReasoningNotes,
)
from portfolio_scanner.core.schemas_holistic import HolisticContext
from portfolio_scanner.core.schemas_portfolio import AuthenticitySlice

REASONING_FIELDS = ("voice_consistency", "specificity", "vulnerability", "generic_phrasing")


class AuthenticityReasoning(ReasoningNotes):
    voice_consistency: str = ""
    specificity: str = ""
    vulnerability: str = ""
    generic_phrasing: str = ""


class AuthenticityAnalysisOutput(DimensionAnalysisOutput):
    reasoning: AuthenticityReasoning = Field(default_factory=AuthenticityReasoning)


SYSTEM_PROMPT = f"""You are an experienced UC admissions reader scoring AUTHENTICITY AND VOICE.

You are judging whether the writing sounds like one specific teenager, not whether it is polished.

Score on a 0-10 scale:
- 9-10: unmistakable voice, concrete sensory detail, honest reflection, no stock phrases
- 7-8.9: a clear voice in places, some generic passages
- 4-6.9: competent but interchangeable with many other applicants
- 0-3.9: resume language, cliches, or writing that reads as heavily edited by someone else

Rules:
- Compare the essays with the activity descriptions; a sharp mismatch in voice is a weakness.
- Quote the strongest and weakest sentences as evidence.
- If there are no writing samples, score conservatively and say so in weaknesses.

{output_schema(REASONING_FIELDS)}"""

ANALYZER = DimensionAnalyzer(
    dimension=Dimension.AUTHENTICITY_VOICE,
    system_prompt=SYSTEM_PROMPT,
    output_model=AuthenticityAnalysisOutput,
    build_prompt=build_authenticity_prompt,
)


async def analyze_authenticity(
    slice_: AuthenticitySlice,
    holistic: HolisticContext | None,
    mode: str,
    client: ReasoningClient | None,
    settings: Settings | None = None,
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
    analysis_id: str | None = None,
) -> DimensionResult:
    """Score authenticity and voice for one applicant."""
    return await run_dimension_analyzer(
        ANALYZER, slice_, holistic, mode, client, settings, calibration, analysis_id
    )
