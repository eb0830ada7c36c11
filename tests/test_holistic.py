"""Tests for the holistic first-impression stage."""

import pytest

from portfolio_scanner.chains.analyze_holistic import analyze_holistic, heuristic_holistic_context
from portfolio_scanner.core.ladder import LadderPath
from portfolio_scanner.core.schemas_portfolio import load_portfolio
from tests.fakes.fake_reasoning import HOLISTIC_RESPONSE, ScriptedReasoningClient

class TestHeuristicHolisticContext:
    def test_context_factors_from_fields(self, strong_portfolio):
        context = heuristic_holistic_context(load_portfolio(strong_portfolio))
        assert context.context_factors.first_generation.applies is True
        assert context.context_factors.low_income.applies is False
        assert context.context_factors.under_resourced_school.applies is False
        assert context.path is LadderPath.HEURISTIC
        assert context.confidence == 0.4

    def test_under_resourced_school(self):
        raw = {"academic": {"gpa_unweighted": 3.9, "advanced_courses_offered": 4}}
        context = heuristic_holistic_context(load_portfolio(raw))
        assert context.context_factors.active() == ["under_resourced_school"]

    def test_empty_portfolio_red_flags(self):
        context = heuristic_holistic_context(load_portfolio({}))
        assert "No activities listed" in context.red_flags
        assert "No writing samples provided" in context.red_flags
        assert context.central_thread.thematic_coherence == 3.0

    def test_repeated_category_is_the_thread(self):
        raw = {
            "activities": [
                {"name": "Food Bank", "category": "service"},
                {"name": "Shelter", "category": "Service"},
                {"name": "Band", "category": "arts"},
            ]
        }
        context = heuristic_holistic_context(load_portfolio(raw))
        assert "service (2 activities)" in context.central_thread.narrative
        assert context.central_thread.thematic_coherence == 6.0


class TestAnalyzeHolistic:
    @pytest.mark.asyncio
    async def test_primary(self, strong_portfolio):
        client = ScriptedReasoningClient([HOLISTIC_RESPONSE])
        context = await analyze_holistic(load_portfolio(strong_portfolio), "general", client)
        assert context.path is LadderPath.PRIMARY
        assert context.central_thread.narrative == "Engineering as care for family"
        assert context.central_thread.thematic_coherence == 8.0
        assert context.context_factors.active() == ["first_generation"]
        assert context.confidence == 0.9
        assert "=== ACTIVITIES (3) ===" in client.calls[0]["user"]

    @pytest.mark.asyncio
    async def test_missing_required_field_falls_back(self, strong_portfolio):
        broken = {k: v for k, v in HOLISTIC_RESPONSE.items() if k != "central_thread"}
        client = ScriptedReasoningClient([broken, broken])
        context = await analyze_holistic(load_portfolio(strong_portfolio), "general", client)
        assert context.path is LadderPath.HEURISTIC
        assert context.flags == ["heuristic_scoring"]
        assert len(client.calls) == 2

    @pytest.mark.asyncio
    async def test_no_client(self, strong_portfolio):
        context = await analyze_holistic(load_portfolio(strong_portfolio), "general", None)
        assert context.flags == ["heuristic_scoring", "no_api_key"]
