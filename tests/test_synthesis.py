"""Tests for portfolio synthesis and strategic guidance."""

import pytest

from portfolio_scanner.chains.generate_guidance import generate_guidance, heuristic_guidance
from portfolio_scanner.chains.synthesize_portfolio import (
    compute_synthesis_core,
    synthesize_portfolio,
)
from portfolio_scanner.core.calibration import DEFAULT_CALIBRATION, Archetype
from portfolio_scanner.core.exceptions import ConfigurationError, InputError
from portfolio_scanner.core.ladder import LadderPath
from portfolio_scanner.core.schemas_dimensions import (
    Dimension,
    DimensionResult,
    Evidence,
    Gap,
    Tier,
)
from tests.fakes.fake_reasoning import NARRATIVE_RESPONSE, ScriptedReasoningClient

REFERENCE_SCORES = [8, 7, 9, 5, 6, 7]

def make_results(scores, confidence=0.8):
    results = {}
    for dimension, score in zip(Dimension, scores):
        results[dimension] = DimensionResult(
            dimension=dimension,
            score=score,
            tier=DEFAULT_CALIBRATION.tier_for(dimension, score),
            strengths=[Evidence(text=f"{dimension.value} strength")],
            growth_areas=[
                Gap(
                    text=f"{dimension.value} gap",
                    severity="moderate",
                    how_to_improve=f"Improve {dimension.value}",
                )
            ],
            confidence=confidence,
            path=LadderPath.PRIMARY,
        )
    return results


# ============================================================================
# Local numbers
# ============================================================================


class TestSynthesisCore:
    def test_reference_portfolio(self):
        core = compute_synthesis_core(make_results(REFERENCE_SCORES), "general")
        assert core.overall_score == 7.4
        assert core.overall_tier is Tier.STRONG
        assert core.archetype is Archetype.SCHOLAR
        assert core.percentile == "Top 25-40%"

    def test_breakdown_contributions(self):
        core = compute_synthesis_core(make_results(REFERENCE_SCORES), "general")
        by_dimension = {item.dimension: item for item in core.breakdown}
        assert by_dimension[Dimension.ACADEMIC_EXCELLENCE].weight == 0.3
        assert by_dimension[Dimension.ACADEMIC_EXCELLENCE].contribution == 2.4
        assert [item.dimension for item in core.breakdown] == list(Dimension)

    def test_mode_changes_weights(self):
        core = compute_synthesis_core(make_results(REFERENCE_SCORES), "ucla")
        assert core.mode == "ucla"
        assert core.overall_score == 7.1

    def test_missing_dimension(self):
        results = make_results(REFERENCE_SCORES)
        del results[Dimension.FUTURE_READINESS]
        with pytest.raises(InputError):
            compute_synthesis_core(results, "general")

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError):
            compute_synthesis_core(make_results(REFERENCE_SCORES), "ivy")


# ============================================================================
# Synthesis ladder
# ============================================================================


class TestSynthesizePortfolio:
    @pytest.mark.asyncio
    async def test_narrative_cannot_change_numbers(self):
        client = ScriptedReasoningClient([NARRATIVE_RESPONSE])
        synthesis = await synthesize_portfolio(
            make_results(REFERENCE_SCORES), None, "general", client
        )
        assert synthesis.path is LadderPath.PRIMARY
        assert synthesis.overall_score == 7.4
        assert synthesis.overall_tier is Tier.STRONG
        assert synthesis.archetype is Archetype.SCHOLAR
        assert synthesis.comparative_benchmarking.percentile_estimate == "Top 25-40%"
        assert synthesis.narrative_summary == NARRATIVE_RESPONSE["narrative_summary"]
        assert synthesis.hidden_strengths[0].strength == "Mentors younger students"
        assert synthesis.confidence == 0.75

    @pytest.mark.asyncio
    async def test_fixed_numbers_are_in_the_prompt(self):
        client = ScriptedReasoningClient([NARRATIVE_RESPONSE])
        await synthesize_portfolio(make_results(REFERENCE_SCORES), None, "general", client)
        user = client.calls[0]["user"]
        assert "overall_score: 7.4" in user
        assert "archetype: Scholar" in user

    @pytest.mark.asyncio
    async def test_retry_path(self):
        client = ScriptedReasoningClient(["sorry", NARRATIVE_RESPONSE])
        synthesis = await synthesize_portfolio(
            make_results(REFERENCE_SCORES), None, "general", client
        )
        assert synthesis.path is LadderPath.RETRY
        assert synthesis.overall_score == 7.4

    @pytest.mark.asyncio
    async def test_heuristic_narrative(self):
        synthesis = await synthesize_portfolio(
            make_results(REFERENCE_SCORES), None, "general", None
        )
        assert synthesis.path is LadderPath.HEURISTIC
        assert synthesis.confidence == 0.4
        assert synthesis.flags == ["heuristic_scoring", "no_api_key"]
        assert synthesis.overall_score == 7.4
        assert synthesis.campus_alignment.top_tier.fit_score == 7.0
        assert synthesis.campus_alignment.mid_tier.fit_score == 8.4
        assert synthesis.key_insights == [
            "Intellectual curiosity is the profile's anchor",
            "Community impact has the most room to grow",
        ]

    @pytest.mark.asyncio
    async def test_skip_narrative_makes_no_call(self):
        client = ScriptedReasoningClient([NARRATIVE_RESPONSE])
        synthesis = await synthesize_portfolio(
            make_results(REFERENCE_SCORES), None, "general", client, include_narrative=False
        )
        assert client.calls == []
        assert synthesis.confidence == 0.3
        assert synthesis.flags == ["narrative_skipped"]
        assert synthesis.overall_score == 7.4

    @pytest.mark.asyncio
    async def test_unknown_mode_raises_before_call(self):
        client = ScriptedReasoningClient([NARRATIVE_RESPONSE])
        with pytest.raises(ConfigurationError):
            await synthesize_portfolio(make_results(REFERENCE_SCORES), None, "harvard", client)
        assert client.calls == []


# ============================================================================
# Strategic guidance
# ============================================================================


GUIDANCE_SCORES = [9, 5, 9, 5, 6, 7]


class TestGuidance:
    @pytest.mark.asyncio
    async def test_heuristic_ranks_by_weighted_headroom(self):
        results = make_results(GUIDANCE_SCORES)
        synthesis = await synthesize_portfolio(
            results, None, "general", None, include_narrative=False
        )
        guidance = heuristic_guidance(results, synthesis)

        assert [item.dimension for item in guidance.priorities] == [
            "leadership_initiative",
            "community_impact",
            "authenticity_voice",
        ]
        assert guidance.priorities[0].action == "Improve leadership_initiative"
        assert guidance.priorities[0].expected_gain == 1.5
        assert guidance.long_term[0].dimension == "leadership_initiative"
        assert guidance.confidence == 0.4
        assert guidance.path is LadderPath.HEURISTIC

    @pytest.mark.asyncio
    async def test_no_client(self):
        results = make_results(GUIDANCE_SCORES)
        synthesis = await synthesize_portfolio(
            results, None, "general", None, include_narrative=False
        )
        guidance = await generate_guidance(results, synthesis, None)
        assert guidance.flags == ["heuristic_scoring", "no_api_key"]

    @pytest.mark.asyncio
    async def test_service_guidance(self):
        results = make_results(GUIDANCE_SCORES)
        synthesis = await synthesize_portfolio(
            results, None, "general", None, include_narrative=False
        )
        client = ScriptedReasoningClient(
            [
                {
                    "priorities": [
                        "Start a peer tutoring program",
                        {"dimension": "community_impact", "action": "Track families served"},
                        "Third",
                        "Fourth",
                    ],
                    "quick_wins": ["Rewrite the activities list with numbers"],
                    "confidence": 0.7,
                }
            ]
        )
        guidance = await generate_guidance(results, synthesis, client)
        assert guidance.path is LadderPath.PRIMARY
        assert len(guidance.priorities) == 3
        assert guidance.priorities[0].action == "Start a peer tutoring program"
        assert guidance.priorities[1].dimension == "community_impact"
        assert guidance.confidence == 0.7
        assert client.calls[0]["params"].workflow == "guidance"
