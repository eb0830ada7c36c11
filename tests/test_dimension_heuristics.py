"""Tests for heuristic dimension scoring."""

import pytest

from portfolio_scanner.core.calibration import DEFAULT_CALIBRATION
from portfolio_scanner.core.dimension_heuristics import heuristic_dimension_result
from portfolio_scanner.core.ladder import LadderPath
from portfolio_scanner.core.schemas_dimensions import Dimension, Tier
from portfolio_scanner.core.schemas_portfolio import load_portfolio, slice_all, slice_portfolio

FILLER = "We met at the library after school to review homework. "
TUTORING = "I tutored 30 students for three years and I learned patience with children. "


def _slice(raw: dict, dimension: Dimension):
    return slice_portfolio(load_portfolio(raw), dimension)


# ============================================================================
# Structural bases and caps
# ============================================================================


class TestStructuralBases:
    def test_low_gpa_without_courses(self, minimal_portfolio):
        result = heuristic_dimension_result(
            _slice(minimal_portfolio, Dimension.ACADEMIC_EXCELLENCE)
        )
        assert result.score == 3.0
        assert result.tier is Tier.FOUNDATIONAL
        assert "too_short" not in result.flags

    def test_top_band_academics(self, strong_portfolio):
        result = heuristic_dimension_result(
            _slice(strong_portfolio, Dimension.ACADEMIC_EXCELLENCE)
        )
        assert result.score == 9.5
        assert result.tier is Tier.EXCEPTIONAL

    def test_under_resourced_school_bonus(self):
        raw = {
            "academic": {
                "gpa_unweighted": 3.8,
                "advanced_courses_offered": 5,
                "courses": [{"name": f"Course {i}", "level": "ap"} for i in range(4)],
            }
        }
        result = heuristic_dimension_result(_slice(raw, Dimension.ACADEMIC_EXCELLENCE))
        assert result.score == 6.5
        assert "limited rigor" in result.reasoning["basis"]

    def test_gpa_bands_follow_mode(self):
        """Test that selective campuses expect a higher GPA on the fallback path."""
        raw = {
            "academic": {
                "gpa_weighted": 4.1,
                "courses": [{"name": f"AP Course {i}", "level": "ap"} for i in range(7)],
            }
        }
        slice_ = _slice(raw, Dimension.ACADEMIC_EXCELLENCE)
        general = heuristic_dimension_result(slice_, mode="general")
        berkeley = heuristic_dimension_result(slice_, mode="berkeley")
        ucla = heuristic_dimension_result(slice_, mode="UCLA")
        assert general.score == 7.5
        assert berkeley.score == ucla.score == 5.5
        assert berkeley.reasoning["basis"] == "GPA at or above 3.9"
        assert heuristic_dimension_result(slice_).score == general.score

    def test_signal_increments(self):
        raw = {
            "activities": [
                {"name": "Tutoring", "description": TUTORING + FILLER * 7},
                {"name": "Chess Club"},
            ]
        }
        result = heuristic_dimension_result(_slice(raw, Dimension.LEADERSHIP_INITIATIVE))
        # 5.0 base for two activities plus four +0.5 signals
        assert result.score == 7.0
        assert result.tier is Tier.STRONG
        for signal in ("metrics", "beneficiaries", "reflection", "sustained_duration"):
            assert signal in result.reasoning["signals"]

    def test_thin_evidence_is_capped(self):
        result = heuristic_dimension_result(
            _slice({"activities": []}, Dimension.LEADERSHIP_INITIATIVE)
        )
        assert result.score == 3.0
        assert "too_short" in result.flags
        assert result.growth_areas[0].text == "Thin evidence"

    def test_authenticity_without_samples(self):
        result = heuristic_dimension_result(_slice({}, Dimension.AUTHENTICITY_VOICE))
        assert result.score == 3.0
        assert result.confidence == 0.3

    def test_authenticity_uses_supplied_nqi(self):
        raw = {
            "writing_samples": [
                {"text": "word " * 200, "narrative_quality_index": 85},
            ]
        }
        result = heuristic_dimension_result(_slice(raw, Dimension.AUTHENTICITY_VOICE))
        assert result.score == 9.0
        assert result.tier is Tier.EXCEPTIONAL


# ============================================================================
# Contract
# ============================================================================


ODD_PORTFOLIOS = [
    {"academic": {"gpa_weighted": 0.0}},
    {
        "academic": {"gpa_unweighted": 4.0, "courses": [{"name": "", "level": ""}]},
        "activities": [{"name": "", "description": b"\xff\xfe caf\xc3\xa9"}],
        "writing_samples": [{"text": "   "}],
    },
    {
        "academic": {"gpa_weighted": 6.0, "class_rank_percentile": 100},
        "activities": [{"name": "x" * 5000, "description": "🙂 " * 3000}],
        "goals": {"intended_major": "", "why_major": "?" * 10000},
        "writing_samples": [{"text": '"' * 500}],
    },
]


class TestHeuristicContract:
    @pytest.mark.parametrize("raw", ODD_PORTFOLIOS)
    def test_total_on_odd_input(self, raw):
        """Test that every dimension scores without raising, whatever the text."""
        portfolio = load_portfolio(raw)
        for dimension, slice_ in slice_all(portfolio).items():
            result = heuristic_dimension_result(slice_)
            assert result.dimension is dimension
            assert 0.0 <= result.score <= 10.0
            assert result.tier is DEFAULT_CALIBRATION.tier_for(dimension, result.score)
            assert result.path is LadderPath.HEURISTIC
            assert "heuristic_scoring" in result.flags

    def test_confidence_reduced(self, strong_portfolio):
        for dimension, slice_ in slice_all(load_portfolio(strong_portfolio)).items():
            result = heuristic_dimension_result(slice_)
            expected = 0.3 if dimension is Dimension.AUTHENTICITY_VOICE else 0.4
            assert result.confidence == expected

    def test_deterministic(self, strong_portfolio):
        slices = slice_all(load_portfolio(strong_portfolio))
        first = [heuristic_dimension_result(s) for s in slices.values()]
        second = [heuristic_dimension_result(s) for s in slices.values()]
        assert first == second

    def test_always_flags_manual_review(self, strong_portfolio):
        slice_ = _slice(strong_portfolio, Dimension.COMMUNITY_IMPACT)
        result = heuristic_dimension_result(slice_)
        assert any(g.text == "Automated analysis unavailable" for g in result.growth_areas)

    def test_custom_flags(self, minimal_portfolio):
        slice_ = _slice(minimal_portfolio, Dimension.ACADEMIC_EXCELLENCE)
        result = heuristic_dimension_result(slice_, flags=["heuristic_scoring", "credit_error"])
        assert result.flags == ["heuristic_scoring", "credit_error"]
