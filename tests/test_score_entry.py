"""Tests for entry-level rubric scoring."""

import pytest

from portfolio_scanner.chains.score_entry import score_entry_text
from portfolio_scanner.core.exceptions import InputError
from portfolio_scanner.core.ladder import LadderPath
from portfolio_scanner.core.rubric import (
    CATEGORY_WEIGHT_OVERRIDES,
    RUBRIC_WEIGHTS,
    max_score_for,
    narrative_quality_index,
    reader_impression_label,
    weights_for_category,
)
from portfolio_scanner.core.schemas_dimensions import Tier
from portfolio_scanner.core.schemas_rubric import RUBRIC_CATEGORY_NAMES
from tests.fakes.fake_reasoning import ScriptedReasoningClient, rubric_response

FIFTEEN_WORDS = "I learned to fix bikes at the shop with my uncle every single Saturday morning."
TWENTY_WORDS = (
    "Volunteered at the food bank sorting cans and boxes for local families on weekends "
    "during the school year with friends."
)
NARRATIVE = 'I felt nervous when my coach said "you lead today." I learned to listen. ' * 15


# ============================================================================
# Rubric tables
# ============================================================================


class TestRubricTables:
    def test_default_weights_sum_to_one(self):
        assert set(RUBRIC_WEIGHTS) == set(RUBRIC_CATEGORY_NAMES)
        assert abs(sum(RUBRIC_WEIGHTS.values()) - 1.0) <= 1e-9

    @pytest.mark.parametrize("category", [None, "other", *CATEGORY_WEIGHT_OVERRIDES])
    def test_category_weights_sum_to_one(self, category):
        weights = weights_for_category(category)
        assert set(weights) == set(RUBRIC_CATEGORY_NAMES)
        assert abs(sum(weights.values()) - 1.0) <= 1e-9

    def test_category_lookup_ignores_case(self):
        assert weights_for_category(" Research ") == weights_for_category("research")
        assert weights_for_category("research") != RUBRIC_WEIGHTS

    @pytest.mark.parametrize(
        "words,cap", [(0, 1.0), (24, 1.0), (25, 2.0), (49, 2.0), (50, 4.0), (99, 4.0), (100, 10.0)]
    )
    def test_length_caps(self, words, cap):
        assert max_score_for(words) == cap

    @pytest.mark.parametrize(
        "nqi,label",
        [
            (95, "captivating_grounded"),
            (90, "captivating_grounded"),
            (85, "strong_distinct_voice"),
            (70, "solid_needs_polish"),
            (60, "patchy_narrative"),
            (59, "generic_unclear"),
        ],
    )
    def test_reader_labels(self, nqi, label):
        assert reader_impression_label(nqi) == label

    def test_nqi_rounds_half_up_and_clamps(self):
        assert narrative_quality_index(7.25) == 73
        assert narrative_quality_index(12.0) == 100
        assert narrative_quality_index(0.0) == 0


# ============================================================================
# Heuristic path
# ============================================================================


class TestHeuristicEntryScoring:
    @pytest.mark.asyncio
    async def test_fifteen_word_entry(self):
        """Test that a 15-word entry scores 1.0 even with narrative markers."""
        report = await score_entry_text(FIFTEEN_WORDS, None, None)
        assert report.word_count == 15
        assert report.score == 1.0
        assert report.path is LadderPath.HEURISTIC
        assert report.confidence == 0.4
        assert {"heuristic_scoring", "no_api_key", "too_short", "critically_short"} <= set(
            report.flags
        )
        assert all(c.score <= 1.0 for c in report.categories)

    @pytest.mark.asyncio
    async def test_twenty_word_entry_is_capped(self):
        report = await score_entry_text(TWENTY_WORDS, None, None)
        assert report.word_count == 20
        assert report.score <= 1.0

    @pytest.mark.asyncio
    async def test_long_narrative_scores_higher(self):
        short = await score_entry_text(FIFTEEN_WORDS, None, None)
        long = await score_entry_text(NARRATIVE, None, None)
        # base 1.5 + story 1.0 + emotion 1.5 + dialogue 1.0 + reflection 1.0
        assert long.score == 6.0
        assert long.score > short.score
        assert long.tier is Tier.DEVELOPING
        assert "too_short" not in long.flags
        assert long.authenticity.voice_type == "conversational"
        assert long.narrative_quality_index > short.narrative_quality_index

    @pytest.mark.asyncio
    async def test_lowercase_reflection_counts(self):
        """Test that informal "i learned" earns the same reflection credit as "I learned"."""
        body = "We repaired donated bikes at the shop and gave them to kids nearby. " * 8
        upper = await score_entry_text(body + "I learned patience.", None, None)
        lower = await score_entry_text(body + "i learned patience.", None, None)
        assert lower.word_count == upper.word_count == 107
        assert lower.score == upper.score
        assert lower.narrative_quality_index == upper.narrative_quality_index
        assert "no_reflection" not in lower.authenticity.red_flags
        assert lower.suggested_fixes == upper.suggested_fixes

    @pytest.mark.asyncio
    async def test_empty_text_never_calls_service(self):
        client = ScriptedReasoningClient([rubric_response()])
        report = await score_entry_text("   ", None, client)
        assert client.calls == []
        assert report.word_count == 0
        assert report.score == 1.0
        assert "empty_submission" in report.flags

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "text", [None, b"\xff\xfeI learned a lot", 12345, "\u0000​", "🙂" * 500]
    )
    async def test_total_on_odd_text(self, text):
        report = await score_entry_text(text, None, None)
        assert 0.0 <= report.score <= 10.0
        assert 0 <= report.narrative_quality_index <= 100
        assert len(report.categories) == 11

    @pytest.mark.asyncio
    async def test_options_carried_through(self):
        report = await score_entry_text(
            NARRATIVE, {"activity_id": "act-7", "category": "athletics"}, None
        )
        assert report.entry_id == "act-7"
        assert report.weights == weights_for_category("athletics")

    @pytest.mark.asyncio
    async def test_malformed_options(self):
        with pytest.raises(InputError):
            await score_entry_text(NARRATIVE, {"category": 5}, None)


# ============================================================================
# Reasoning path
# ============================================================================


class TestServiceEntryScoring:
    @pytest.mark.asyncio
    async def test_service_scores_used_for_long_entry(self):
        client = ScriptedReasoningClient([rubric_response(8.0)])
        report = await score_entry_text(NARRATIVE, {"title": "Soccer"}, client)

        assert report.path is LadderPath.PRIMARY
        assert report.score == 8.0
        assert report.tier is Tier.STRONG
        assert report.narrative_quality_index == 80
        assert report.reader_impression_label == "strong_distinct_voice"
        assert report.authenticity.voice_type == "conversational"
        assert report.suggested_fixes == ["Name the people you helped"]
        assert report.confidence == 0.8
        assert "title: Soccer" in client.calls[0]["user"]
        assert client.calls[0]["params"].temperature == 0.3

    @pytest.mark.asyncio
    async def test_cap_applies_to_service_scores(self):
        """Test that a 20-word entry cannot exceed 1 even when the service says 8."""
        client = ScriptedReasoningClient([rubric_response(8.0)])
        report = await score_entry_text(TWENTY_WORDS, None, client)

        assert report.path is LadderPath.PRIMARY
        assert report.score <= 1.0
        assert all(c.score <= 1.0 for c in report.categories)
        assert "length_capped" in report.flags
        assert "critically_short" in report.flags

    @pytest.mark.asyncio
    async def test_missing_category_falls_back(self):
        partial = rubric_response(8.0)
        partial["categories"] = partial["categories"][:10]
        client = ScriptedReasoningClient([partial, partial])
        report = await score_entry_text(NARRATIVE, None, client)

        assert len(client.calls) == 2
        assert report.path is LadderPath.HEURISTIC
        assert report.score == 6.0

    @pytest.mark.asyncio
    async def test_credit_error_flag(self):
        error = RuntimeError("Error code: 400 - Your credit balance is too low")
        client = ScriptedReasoningClient([error, error])
        report = await score_entry_text(NARRATIVE, None, client)
        assert "credit_error" in report.flags
        assert "no_api_key" not in report.flags
