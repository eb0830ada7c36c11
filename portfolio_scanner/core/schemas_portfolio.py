"""Pydantic schemas for the applicant portfolio and per-dimension input slices."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from portfolio_scanner.core.exceptions import InputError
from portfolio_scanner.core.schemas_dimensions import Dimension

ADVANCED_COURSE_LEVELS = ("ap", "ib", "honors", "college", "dual_enrollment")


class _PortfolioModel(BaseModel):
    """Base for applicant-supplied records: unknown keys are ignored, bytes decoded."""

    model_config = ConfigDict(extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _decode_bytes(cls, value: Any) -> Any:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("utf-8", errors="replace")
        return value


# =======================
# Portfolio snapshot
# =======================


class StudentProfile(_PortfolioModel):
    name: str | None = None
    grade_level: int | None = None
    graduation_year: int | None = None
    school_name: str | None = None


class Course(_PortfolioModel):
    name: str
    level: str = Field(default="standard", description="standard, honors, ap, ib, college")
    grade: str | None = None

    @property
    def is_advanced(self) -> bool:
        return self.level.strip().lower() in ADVANCED_COURSE_LEVELS


class AcademicRecord(_PortfolioModel):
    gpa_unweighted: float | None = Field(default=None, ge=0.0, le=5.0)
    gpa_weighted: float | None = Field(default=None, ge=0.0, le=6.0)
    class_rank_percentile: float | None = Field(
        default=None, ge=0.0, le=100.0, description="Percent of class ranked below the student"
    )
    courses: list[Course] = Field(default_factory=list)
    advanced_courses_offered: int | None = Field(
        default=None, ge=0, description="Advanced courses the school offers"
    )
    test_scores: dict[str, float] = Field(default_factory=dict)
    honors: list[str] = Field(default_factory=list)
    notes: str = ""

    @property
    def advanced_course_count(self) -> int:
        return sum(1 for course in self.courses if course.is_advanced)

    @property
    def best_gpa(self) -> float | None:
        if self.gpa_weighted is not None:
            return self.gpa_weighted
        return self.gpa_unweighted


class Activity(_PortfolioModel):
    name: str
    category: str = Field(
        default="other",
        description="e.g. stem, research, academic_prep, service, arts, athletics, work, family",
    )
    role: str = ""
    description: str = ""
    years_involved: float | None = Field(default=None, ge=0.0)
    hours_per_week: float | None = Field(default=None, ge=0.0)
    leadership_position: bool = False
    achievements: list[str] = Field(default_factory=list)

    def text(self) -> str:
        parts = [self.name, self.role, self.description, *self.achievements]
        return " ".join(p for p in parts if p)


class PersonalContext(_PortfolioModel):
    first_generation: bool = False
    low_income: bool = False
    family_responsibilities: str = ""
    challenges: str = ""


class Goals(_PortfolioModel):
    intended_major: str | None = None
    why_major: str = ""
    career_goals: str = ""
    target_campuses: list[str] = Field(default_factory=list)


class WritingSample(_PortfolioModel):
    prompt: str = ""
    text: str = ""
    narrative_quality_index: float | None = Field(
        default=None, ge=0.0, le=100.0, description="NQI from a prior entry-level scoring pass"
    )


class PortfolioData(_PortfolioModel):
    """Read-only snapshot of one applicant, as supplied by the data provider."""

    portfolio_id: str | None = None
    profile: StudentProfile = Field(default_factory=StudentProfile)
    academic: AcademicRecord | None = None
    activities: list[Activity] = Field(default_factory=list)
    personal_context: PersonalContext = Field(default_factory=PersonalContext)
    goals: Goals = Field(default_factory=Goals)
    writing_samples: list[WritingSample] = Field(default_factory=list)


# =======================
# Per-dimension input slices
# =======================


class AcademicSlice(BaseModel):
    kind: Literal["academic_excellence"] = "academic_excellence"
    academic: AcademicRecord
    personal_context: PersonalContext
    intended_major: str | None = None

    def evidence_text(self) -> str:
        courses = " ".join(f"{c.level} {c.name}" for c in self.academic.courses)
        return " ".join(p for p in (courses, *self.academic.honors, self.academic.notes) if p)


class LeadershipSlice(BaseModel):
    kind: Literal["leadership_initiative"] = "leadership_initiative"
    activities: list[Activity]
    personal_context: PersonalContext

    def evidence_text(self) -> str:
        texts = [a.text() for a in self.activities]
        texts.append(self.personal_context.family_responsibilities)
        return " ".join(t for t in texts if t)


class CuriositySlice(BaseModel):
    kind: Literal["intellectual_curiosity"] = "intellectual_curiosity"
    activities: list[Activity]
    courses: list[Course]
    writing_samples: list[WritingSample]
    intended_major: str | None = None

    def evidence_text(self) -> str:
        texts = [a.text() for a in self.activities] + [w.text for w in self.writing_samples]
        return " ".join(t for t in texts if t)


class CommunitySlice(BaseModel):
    kind: Literal["community_impact"] = "community_impact"
    activities: list[Activity]
    personal_context: PersonalContext

    def evidence_text(self) -> str:
        texts = [a.text() for a in self.activities]
        texts.append(self.personal_context.family_responsibilities)
        return " ".join(t for t in texts if t)


class AuthenticitySlice(BaseModel):
    kind: Literal["authenticity_voice"] = "authenticity_voice"
    writing_samples: list[WritingSample]
    activities: list[Activity]

    def evidence_text(self) -> str:
        return " ".join(w.text for w in self.writing_samples if w.text)


class FutureReadinessSlice(BaseModel):
    kind: Literal["future_readiness"] = "future_readiness"
    goals: Goals
    activities: list[Activity]

    def evidence_text(self) -> str:
        texts = [self.goals.why_major, self.goals.career_goals]
        texts.extend(a.text() for a in self.activities)
        return " ".join(t for t in texts if t)


DimensionSlice = Annotated[
    Union[
        AcademicSlice,
        LeadershipSlice,
        CuriositySlice,
        CommunitySlice,
        AuthenticitySlice,
        FutureReadinessSlice,
    ],
    Field(discriminator="kind"),
]


def load_portfolio(raw: PortfolioData | dict[str, Any]) -> PortfolioData:
    """
    Validate a raw portfolio snapshot.

    Raises:
        InputError: If the snapshot does not match PortfolioData
    """
    if isinstance(raw, PortfolioData):
        return raw
    if not isinstance(raw, dict):
        raise InputError(f"Portfolio must be an object, got {type(raw).__name__}")
    try:
        return PortfolioData.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise InputError(f"Invalid portfolio field '{field}': {first.get('msg')}", field) from e


def slice_portfolio(portfolio: PortfolioData, dimension: Dimension) -> DimensionSlice:
    """
    Cut the input slice one dimension analyzer needs.

    Raises:
        InputError: If a field the dimension requires is missing
    """
    if dimension is Dimension.ACADEMIC_EXCELLENCE:
        academic = portfolio.academic
        if academic is None:
            raise InputError("Academic record is required for academic analysis", "academic")
        if academic.best_gpa is None:
            raise InputError("A weighted or unweighted GPA is required", "academic.gpa_weighted")
        return AcademicSlice(
            academic=academic,
            personal_context=portfolio.personal_context,
            intended_major=portfolio.goals.intended_major,
        )
    if dimension is Dimension.LEADERSHIP_INITIATIVE:
        return LeadershipSlice(
            activities=portfolio.activities, personal_context=portfolio.personal_context
        )
    if dimension is Dimension.INTELLECTUAL_CURIOSITY:
        return CuriositySlice(
            activities=portfolio.activities,
            courses=portfolio.academic.courses if portfolio.academic else [],
            writing_samples=portfolio.writing_samples,
            intended_major=portfolio.goals.intended_major,
        )
    if dimension is Dimension.COMMUNITY_IMPACT:
        return CommunitySlice(
            activities=portfolio.activities, personal_context=portfolio.personal_context
        )
    if dimension is Dimension.AUTHENTICITY_VOICE:
        return AuthenticitySlice(
            writing_samples=portfolio.writing_samples, activities=portfolio.activities
        )
    return FutureReadinessSlice(goals=portfolio.goals, activities=portfolio.activities)


def slice_all(portfolio: PortfolioData) -> dict[Dimension, DimensionSlice]:
    """Cut every slice up front so input errors surface before any service call."""
    return {dimension: slice_portfolio(portfolio, dimension) for dimension in Dimension}
