"""Mocked tests for the six dimension analyzers."""

import json

import pytest

from portfolio_scanner.chains.analyze_academics import analyze_academics
from portfolio_scanner.chains.analyze_authenticity import analyze_authenticity
from portfolio_scanner.chains.analyze_community import analyze_community
from portfolio_scanner.chains.analyze_curiosity import analyze_curiosity
from portfolio_scanner.chains.analyze_future_readiness import analyze_future_readiness
from portfolio_scanner.chains.analyze_holistic import heuristic_holistic_context
from portfolio_scanner.chains.analyze_leadership import analyze_leadership
from portfolio_scanner.core.exceptions import InputError
from portfolio_scanner.core.ladder import LadderPath
from portfolio_scanner.core.schemas_dimensions import Dimension, Tier
from portfolio_scanner.core.schemas_portfolio import load_portfolio, slice_all
from tests.fakes.fake_reasoning import ScriptedReasoningClient, dimension_response

ANALYZERS = {
    Dimension.ACADEMIC_EXCELLENCE: analyze_academics,
    Dimension.LEADERSHIP_INITIATIVE: analyze_leadership,
    Dimension.INTELLECTUAL_CURIOSITY: analyze_curiosity,
    Dimension.COMMUNITY_IMPACT: analyze_community,
    Dimension.AUTHENTICITY_VOICE: analyze_authenticity,
    Dimension.FUTURE_READINESS: analyze_future_readiness,
}


@pytest.fixture
def portfolio(strong_portfolio):
    return load_portfolio(strong_portfolio)


@pytest.fixture
def slices(portfolio):
    return slice_all(portfolio)


@pytest.fixture
def holistic(portfolio):
    return heuristic_holistic_context(portfolio)


class TestPrimaryPath:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("dimension", list(Dimension))
    async def test_every_analyzer_parses_valid_response(self, dimension, slices, holistic):
        client = ScriptedReasoningClient([dimension_response(7.5, "strong")])
        result = await ANALYZERS[dimension](slices[dimension], holistic, "general", client)

        assert result.dimension is dimension
        assert result.score == 7.5
        assert result.tier is Tier.STRONG
        assert result.path is LadderPath.PRIMARY
        assert result.flags == []
        assert result.confidence == 0.85
        assert result.strengths[0].text == "Sustained commitment"
        assert result.growth_areas[0].how_to_improve == "Add numbers"
        assert result.strategic_pivot == "Quantify the tutoring program's reach"
        assert len(client.calls) == 1
        assert client.calls[0]["params"].workflow == f"dimension:{dimension.value}"

    @pytest.mark.asyncio
    async def test_prompt_carries_holistic_context_and_mode(self, slices, holistic):
        client = ScriptedReasoningClient([dimension_response()])
        await analyze_community(slices[Dimension.COMMUNITY_IMPACT], holistic, "ucla", client)

        user = client.calls[0]["user"]
        assert "mode: ucla" in user
        assert "=== HOLISTIC CONTEXT ===" in user
        assert "first_generation" in user
        assert "Neighborhood Tutoring" in user

    @pytest.mark.asyncio
    async def test_tier_is_rederived_from_score(self, slices, holistic):
        client = ScriptedReasoningClient([dimension_response(8.0, "exceptional")])
        result = await analyze_leadership(
            slices[Dimension.LEADERSHIP_INITIATIVE], holistic, "general", client
        )
        assert result.tier is Tier.STRONG
        assert result.flags == ["tier_rederived"]
        assert result.reasoning["service_tier"] == "exceptional"

    @pytest.mark.asyncio
    async def test_out_of_range_score_is_clamped(self, slices, holistic):
        client = ScriptedReasoningClient([dimension_response(12, "exceptional")])
        result = await analyze_curiosity(
            slices[Dimension.INTELLECTUAL_CURIOSITY], holistic, "general", client
        )
        assert result.score == 10.0
        assert result.tier is Tier.EXCEPTIONAL

    @pytest.mark.asyncio
    async def test_fenced_response_with_commentary(self, slices, holistic):
        body = json.dumps(dimension_response(6.2, "developing"))
        raw = f"Here is my analysis.\n```json\n{body}\n```\nDone."
        client = ScriptedReasoningClient([raw])
        result = await analyze_future_readiness(
            slices[Dimension.FUTURE_READINESS], holistic, "general", client
        )
        assert result.score == 6.2
        assert result.tier is Tier.DEVELOPING


class TestFallbackPath:
    @pytest.mark.asyncio
    async def test_retry_then_success(self, slices, holistic):
        client = ScriptedReasoningClient(["no json", dimension_response(7.1, "strong")])
        result = await analyze_academics(
            slices[Dimension.ACADEMIC_EXCELLENCE], holistic, "general", client
        )
        assert result.path is LadderPath.RETRY
        assert result.score == 7.1
        assert len(client.calls) == 2

    @pytest.mark.asyncio
    async def test_two_failures_use_heuristic(self, slices, holistic):
        client = ScriptedReasoningClient(default='{"dimension_score": "high"}')
        result = await analyze_academics(
            slices[Dimension.ACADEMIC_EXCELLENCE], holistic, "general", client
        )
        assert len(client.calls) == 2
        assert result.path is LadderPath.HEURISTIC
        assert result.flags == ["heuristic_scoring"]
        assert result.confidence == 0.4
        assert result.score == 9.5

    @pytest.mark.asyncio
    async def test_no_client_flags_missing_key(self, slices, holistic):
        result = await analyze_authenticity(
            slices[Dimension.AUTHENTICITY_VOICE], holistic, "general", None
        )
        assert result.path is LadderPath.HEURISTIC
        assert "no_api_key" in result.flags
        assert result.confidence == 0.3

    @pytest.mark.asyncio
    async def test_credit_error_flagged(self, slices, holistic):
        error = RuntimeError("authentication_error: invalid x-api-key")
        client = ScriptedReasoningClient([error, error])
        result = await analyze_leadership(
            slices[Dimension.LEADERSHIP_INITIATIVE], holistic, "general", client
        )
        assert "credit_error" in result.flags

    @pytest.mark.asyncio
    async def test_holistic_context_is_optional(self, slices):
        client = ScriptedReasoningClient([dimension_response()])
        result = await analyze_community(slices[Dimension.COMMUNITY_IMPACT], None, "general", client)
        assert result.path is LadderPath.PRIMARY
        assert "(none)" in client.calls[0]["user"]

    @pytest.mark.asyncio
    async def test_wrong_slice_rejected_before_any_call(self, slices, holistic):
        client = ScriptedReasoningClient([dimension_response()])
        with pytest.raises(InputError):
            await analyze_academics(
                slices[Dimension.LEADERSHIP_INITIATIVE], holistic, "general", client
            )
        assert client.calls == []
