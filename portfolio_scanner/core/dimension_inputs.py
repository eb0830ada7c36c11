"""Prompt building for the dimension analyzers.

One explicit builder per dimension: each renders exactly the fields its
input slice carries, so the payload sent to the reasoning service is fixed
by the slice type rather than by whatever keys a portfolio happens to have.
"""

from portfolio_scanner.core.schemas_holistic import HolisticContext
from portfolio_scanner.core.schemas_portfolio import (
    AcademicSlice,
    Activity,
    AuthenticitySlice,
    CommunitySlice,
    CuriositySlice,
    FutureReadinessSlice,
    LeadershipSlice,
    PersonalContext,
    WritingSample,
)

MAX_ACTIVITIES = 15
MAX_SAMPLE_CHARS = 4000


def _holistic_lines(holistic: HolisticContext | None) -> list[str]:
    lines = ["=== HOLISTIC CONTEXT ==="]
    if holistic is None:
        lines.append("(none)")
        lines.append("")
        return lines
    thread = holistic.central_thread
    lines.append(f"first_impression: {holistic.overall_first_impression}")
    lines.append(f"central_thread: {thread.narrative or 'unclear'}")
    if thread.signature_elements:
        lines.append("signature_elements: " + "; ".join(thread.signature_elements))
    active = holistic.context_factors.active()
    lines.append("context_factors: " + (", ".join(active) if active else "none"))
    if holistic.red_flags:
        lines.append("red_flags: " + "; ".join(holistic.red_flags))
    lines.append("")
    return lines


def _mode_lines(mode: str) -> list[str]:
    return ["=== EVALUATION MODE ===", f"mode: {mode}", ""]


def _activity_lines(activities: list[Activity]) -> list[str]:
    lines = [f"=== ACTIVITIES ({len(activities)}) ==="]
    if not activities:
        lines.append("(none listed)")
    for idx, activity in enumerate(activities[:MAX_ACTIVITIES], start=1):
        lines.append(f"[{idx}] {activity.name} ({activity.category})")
        if activity.role:
            lines.append(f"    role: {activity.role}")
        if activity.leadership_position:
            lines.append("    leadership_position: yes")
        if activity.years_involved is not None:
            lines.append(f"    years_involved: {activity.years_involved:g}")
        if activity.hours_per_week is not None:
            lines.append(f"    hours_per_week: {activity.hours_per_week:g}")
        if activity.description:
            lines.append(f"    description: {activity.description}")
        for achievement in activity.achievements:
            lines.append(f"    achievement: {achievement}")
    lines.append("")
    return lines


def _context_lines(context: PersonalContext) -> list[str]:
    lines = ["=== PERSONAL CONTEXT ==="]
    lines.append(f"first_generation: {'yes' if context.first_generation else 'no'}")
    lines.append(f"low_income: {'yes' if context.low_income else 'no'}")
    if context.family_responsibilities:
        lines.append(f"family_responsibilities: {context.family_responsibilities}")
    if context.challenges:
        lines.append(f"challenges: {context.challenges}")
    lines.append("")
    return lines


def _writing_lines(samples: list[WritingSample]) -> list[str]:
    lines = [f"=== WRITING SAMPLES ({len(samples)}) ==="]
    if not samples:
        lines.append("(none provided)")
    for idx, sample in enumerate(samples, start=1):
        lines.append(f"[{idx}] prompt: {sample.prompt or 'unspecified'}")
        if sample.narrative_quality_index is not None:
            lines.append(f"    narrative_quality_index: {sample.narrative_quality_index:g}")
        lines.append(sample.text[:MAX_SAMPLE_CHARS] or "(empty)")
        lines.append("")
    return lines


def _output_lines(dimension: str) -> list[str]:
    return [
        "=== OUTPUT ===",
        f"Score the {dimension} dimension. Output ONLY valid JSON matching the schema in your "
        "instructions. Every strength and weakness must cite evidence from the material above.",
    ]


def build_academic_prompt(slice_: AcademicSlice, holistic: HolisticContext | None, mode: str) -> str:
    academic = slice_.academic
    lines = _mode_lines(mode) + _holistic_lines(holistic)
    lines.append("=== ACADEMIC RECORD ===")
    if academic.gpa_unweighted is not None:
        lines.append(f"gpa_unweighted: {academic.gpa_unweighted:.2f}")
    if academic.gpa_weighted is not None:
        lines.append(f"gpa_weighted: {academic.gpa_weighted:.2f}")
    if academic.class_rank_percentile is not None:
        lines.append(f"class_rank_percentile: {academic.class_rank_percentile:g}")
    offered = academic.advanced_courses_offered
    lines.append(f"advanced_courses_offered: {offered if offered is not None else 'unknown'}")
    lines.append(f"advanced_courses_taken: {academic.advanced_course_count}")
    for course in academic.courses:
        grade = f" [{course.grade}]" if course.grade else ""
        lines.append(f"- {course.name} ({course.level}){grade}")
    for name, score in sorted(academic.test_scores.items()):
        lines.append(f"test {name}: {score:g}")
    for honor in academic.honors:
        lines.append(f"honor: {honor}")
    if academic.notes:
        lines.append(f"notes: {academic.notes}")
    lines.append(f"intended_major: {slice_.intended_major or 'undeclared'}")
    lines.append("")
    lines += _context_lines(slice_.personal_context)
    lines += _output_lines("academic excellence")
    return "\n".join(lines)


def build_leadership_prompt(slice_: LeadershipSlice, holistic: HolisticContext | None, mode: str) -> str:
    lines = _mode_lines(mode) + _holistic_lines(holistic)
    lines += _activity_lines(slice_.activities)
    lines += _context_lines(slice_.personal_context)
    lines += _output_lines("leadership and initiative")
    return "\n".join(lines)


def build_curiosity_prompt(slice_: CuriositySlice, holistic: HolisticContext | None, mode: str) -> str:
    lines = _mode_lines(mode) + _holistic_lines(holistic)
    lines.append("=== COURSEWORK ===")
    if not slice_.courses:
        lines.append("(none listed)")
    for course in slice_.courses:
        lines.append(f"- {course.name} ({course.level})")
    lines.append(f"intended_major: {slice_.intended_major or 'undeclared'}")
    lines.append("")
    lines += _activity_lines(slice_.activities)
    lines += _writing_lines(slice_.writing_samples)
    lines += _output_lines("intellectual curiosity")
    return "\n".join(lines)


def build_community_prompt(slice_: CommunitySlice, holistic: HolisticContext | None, mode: str) -> str:
    lines = _mode_lines(mode) + _holistic_lines(holistic)
    lines += _activity_lines(slice_.activities)
    lines += _context_lines(slice_.personal_context)
    lines += _output_lines("community impact")
    return "\n".join(lines)


def build_authenticity_prompt(
    slice_: AuthenticitySlice, holistic: HolisticContext | None, mode: str
) -> str:
    lines = _mode_lines(mode) + _holistic_lines(holistic)
    lines += _writing_lines(slice_.writing_samples)
    lines.append("=== ACTIVITY DESCRIPTIONS (voice consistency) ===")
    for activity in slice_.activities[:MAX_ACTIVITIES]:
        if activity.description:
            lines.append(f"- {activity.name}: {activity.description}")
    lines.append("")
    lines += _output_lines("authenticity and voice")
    return "\n".join(lines)


def build_future_readiness_prompt(
    slice_: FutureReadinessSlice, holistic: HolisticContext | None, mode: str
) -> str:
    goals = slice_.goals
    lines = _mode_lines(mode) + _holistic_lines(holistic)
    lines.append("=== GOALS ===")
    lines.append(f"intended_major: {goals.intended_major or 'undeclared'}")
    lines.append(f"why_major: {goals.why_major or '(not provided)'}")
    lines.append(f"career_goals: {goals.career_goals or '(not provided)'}")
    if goals.target_campuses:
        lines.append("target_campuses: " + ", ".join(goals.target_campuses))
    lines.append("")
    lines += _activity_lines(slice_.activities)
    lines += _output_lines("future readiness")
    return "\n".join(lines)
