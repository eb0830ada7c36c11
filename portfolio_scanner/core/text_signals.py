"""Deterministic lexical signals read from applicant text."""

import re
from dataclasses import dataclass

# Dimension heuristics
METRIC_RE = re.compile(
    r"(\$\s?\d|\b\d[\d,]*(\.\d+)?\s*(%|percent|hours?|students?|people|members|kids|children"
    r"|families|volunteers|participants|dollars|donations|meals|books|users|attendees|events)\b)",
    re.IGNORECASE,
)
BENEFICIARY_RE = re.compile(
    r"\b(students|children|kids|families|seniors|residents|patients|veterans|neighbors|peers"
    r"|classmates|refugees|immigrants|elderly|tutees|younger siblings|community members)\b",
    re.IGNORECASE,
)
REFLECTION_RE = re.compile(
    r"\b(I (learned|realized|understood|discovered)|taught me|made me realize|looking back)\b",
    re.IGNORECASE,
)
DURATION_RE = re.compile(
    r"\b((\d+|two|three|four|five|six|several)\s+(years?|seasons?|summers?|semesters?)"
    r"|since (freshman|sophomore|middle school|ninth grade|\d{4})"
    r"|every (week|weekend|day|summer|saturday|sunday)|weekly|daily)\b",
    re.IGNORECASE,
)

# Entry rubric narrative markers
STORY_RE = re.compile(r"\b(felt|realized|learned|discovered|struggled|wondered)\b", re.IGNORECASE)
EMOTION_RE = re.compile(
    r"\b(nervous|excited|frustrated|proud|afraid|confused)\b", re.IGNORECASE
)
# Straight and curly double quotes only; apostrophes are not dialogue
DIALOGUE_RE = re.compile(r"[\"“”]")
ENTRY_REFLECTION_RE = re.compile(r"\bI (learned|realized|understood|discovered)\b", re.IGNORECASE)
STAKES_RE = re.compile(
    r"\b(risk|fail(ed|ure)?|challenge|pressure|deadline|almost|struggl\w*)\b", re.IGNORECASE
)
IMPACT_RE = re.compile(
    r"\b(impact\w*|changed|helped|improved|increased|raised|grew|reduced)\b", re.IGNORECASE
)
LEADERSHIP_RE = re.compile(
    r"\b(led|lead|founded|organized|started|created|launched|directed|captain\w*)\b",
    re.IGNORECASE,
)
COMMUNITY_RE = re.compile(r"\b(team|together|community|we|our|volunteer\w*)\b", re.IGNORECASE)
NUMBER_RE = re.compile(r"\d+")
FIRST_PERSON_RE = re.compile(r"\b(I|my|My)\b")


@dataclass(frozen=True)
class TextSignals:
    word_count: int
    metrics: bool
    beneficiaries: bool
    reflection: bool
    sustained_duration: bool
    story: bool
    emotion: bool
    dialogue: bool
    entry_reflection: bool
    stakes: bool
    impact: bool
    leadership: bool
    community: bool
    number_count: int
    first_person_count: int


def word_count(text: str) -> int:
    return len(text.split())


def detect_signals(text: str) -> TextSignals:
    """Scan text once for every signal the heuristics use."""
    text = text or ""
    return TextSignals(
        word_count=word_count(text),
        metrics=bool(METRIC_RE.search(text)),
        beneficiaries=bool(BENEFICIARY_RE.search(text)),
        reflection=bool(REFLECTION_RE.search(text)),
        sustained_duration=bool(DURATION_RE.search(text)),
        story=bool(STORY_RE.search(text)),
        emotion=bool(EMOTION_RE.search(text)),
        dialogue=bool(DIALOGUE_RE.search(text)),
        entry_reflection=bool(ENTRY_REFLECTION_RE.search(text)),
        stakes=bool(STAKES_RE.search(text)),
        impact=bool(IMPACT_RE.search(text)),
        leadership=bool(LEADERSHIP_RE.search(text)),
        community=bool(COMMUNITY_RE.search(text)),
        number_count=len(NUMBER_RE.findall(text)),
        first_person_count=len(FIRST_PERSON_RE.findall(text)),
    )


def snippet(text: str, limit: int = 200) -> str:
    """Trim text to a quotable snippet on a word boundary."""
    text = " ".join((text or "").split())
    if len(text) <= limit:
        return text
    return text[:limit].rsplit(" ", 1)[0] + "..."
