"""Pytest configuration and fixtures."""

import os

import pytest


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["SCANNER_ENV"] = "test"
    os.environ["REASONING_PROVIDER"] = "anthropic"
    os.environ.pop("ANTHROPIC_API_KEY", None)
    os.environ.pop("OPENAI_API_KEY", None)

    from portfolio_scanner.core.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def strong_portfolio() -> dict:
    """A complete portfolio with solid evidence in every dimension."""
    return {
        "portfolio_id": "pf-strong",
        "profile": {"name": "Test Applicant", "grade_level": 12, "school_name": "Lincoln High"},
        "academic": {
            "gpa_unweighted": 3.95,
            "gpa_weighted": 4.35,
            "class_rank_percentile": 96,
            "advanced_courses_offered": 22,
            "courses": [
                {"name": f"AP Course {i}", "level": "ap", "grade": "A"} for i in range(11)
            ],
            "honors": ["National Merit Commended"],
        },
        "activities": [
            {
                "name": "Robotics Club",
                "category": "stem",
                "role": "Captain",
                "description": "Led a team of 14 students for three years and grew the club.",
                "leadership_position": True,
                "achievements": ["Regional finalist"],
            },
            {
                "name": "Neighborhood Tutoring",
                "category": "service",
                "role": "Founder",
                "description": "Tutored 30 children every week since sophomore year.",
                "leadership_position": True,
                "achievements": ["Raised $2,000 for books"],
            },
            {
                "name": "Protein Folding Research",
                "category": "research",
                "description": "Summer research project at the university lab.",
            },
        ],
        "personal_context": {"first_generation": True},
        "goals": {
            "intended_major": "Bioengineering",
            "why_major": (
                "Watching my grandmother manage diabetes made me want to build cheaper "
                "medical devices for families like mine."
            ),
        },
        "writing_samples": [
            {
                "prompt": "Leadership",
                "text": "I learned that leading means listening. I felt nervous the first day.",
                "narrative_quality_index": 78,
            }
        ],
    }


@pytest.fixture
def minimal_portfolio() -> dict:
    """Only the fields the academic dimension requires."""
    return {"academic": {"gpa_unweighted": 3.2}}
