"""API endpoints for portfolio and entry scoring."""

from fastapi import APIRouter, Depends, HTTPException

from portfolio_scanner.core.exceptions import ConfigurationError, InputError
from portfolio_scanner.core.llm import ReasoningClient, get_reasoning_client
from portfolio_scanner.core.logging import get_logger
from portfolio_scanner.core.schemas_api import (
    AnalyzePortfolioRequest,
    EvaluateDimensionRequest,
    EvaluatePortfolioRequest,
    ScoreEntryRequest,
)
from portfolio_scanner.core.schemas_dimensions import DimensionResult
from portfolio_scanner.core.schemas_rubric import RubricReport
from portfolio_scanner.core.schemas_synthesis import PortfolioAnalysisResult, PortfolioSynthesis
from portfolio_scanner.services.portfolio_scanner import (
    analyze_portfolio,
    evaluate_dimension,
    score_entry,
)

logger = get_logger(__name__)

router = APIRouter()


def get_client() -> ReasoningClient | None:
    """Reasoning client dependency (None means heuristic scoring only)."""
    try:
        return get_reasoning_client()
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _to_http(error: InputError | ConfigurationError) -> HTTPException:
    if isinstance(error, InputError):
        detail = {"message": str(error), "field": error.field}
        return HTTPException(status_code=422, detail=detail)
    return HTTPException(status_code=400, detail=str(error))


@router.post("/portfolio/evaluate", response_model=PortfolioSynthesis)
async def evaluate_portfolio_endpoint(
    request: EvaluatePortfolioRequest,
    client: ReasoningClient | None = Depends(get_client),
) -> PortfolioSynthesis:
    """
    Score a portfolio and return its weighted synthesis.

    Raises:
        HTTPException 422: If the portfolio is malformed
        HTTPException 400: If the evaluation mode is unknown
    """
    try:
        result = await analyze_portfolio(
            request.portfolio,
            request.mode,
            client,
            include_narrative=request.include_narrative,
            include_guidance=False,
        )
    except (InputError, ConfigurationError) as e:
        logger.warning(f"Rejected portfolio evaluation: {e}")
        raise _to_http(e) from e
    return result.synthesis


@router.post("/portfolio/analyze", response_model=PortfolioAnalysisResult)
async def analyze_portfolio_endpoint(
    request: AnalyzePortfolioRequest,
    client: ReasoningClient | None = Depends(get_client),
) -> PortfolioAnalysisResult:
    """Run every stage and return the full report with timing and cost."""
    try:
        return await analyze_portfolio(
            request.portfolio,
            request.mode,
            client,
            include_narrative=request.include_narrative,
            include_guidance=request.include_guidance,
        )
    except (InputError, ConfigurationError) as e:
        logger.warning(f"Rejected portfolio analysis: {e}")
        raise _to_http(e) from e


@router.post("/portfolio/dimensions/{dimension}", response_model=DimensionResult)
async def evaluate_dimension_endpoint(
    dimension: str,
    request: EvaluateDimensionRequest,
    client: ReasoningClient | None = Depends(get_client),
) -> DimensionResult:
    """Score a single dimension; short aliases such as ``leadership`` are accepted."""
    try:
        return await evaluate_dimension(request.portfolio, dimension, request.mode, client)
    except (InputError, ConfigurationError) as e:
        logger.warning(f"Rejected dimension evaluation: {e}")
        raise _to_http(e) from e


@router.post("/entries/score", response_model=RubricReport)
async def score_entry_endpoint(
    request: ScoreEntryRequest,
    client: ReasoningClient | None = Depends(get_client),
) -> RubricReport:
    """Score one activity description against the rubric."""
    return await score_entry(request.text, request.options, client)
