from typing import Iterable

from app.schemas.comparison import (
    CourseResult,
    CourseStatus,
    CreditLine,
    CreditSummary,
    EquivalenceMatch,
    ReconciliationResult,
)
from app.schemas.equivalence import EquivalenceRecord
from app.schemas.study_plan import Curriculum, CurriculumCourse
from app.schemas.transcript import TranscriptEntry, TranscriptStatus
from app.services.categories import BUDGETED_CATEGORIES
from app.services.equivalence_index import EquivalenceIndex, build_equivalence_index


def reconcile(
    curriculum: Curriculum,
    equivalences: Iterable[EquivalenceRecord],
    transcript_entries: Iterable[TranscriptEntry],
) -> ReconciliationResult:
    """Compare a transcript with a study plan.

    Only approved transcript rows count; failed or in-progress ones are ignored.
    """
    index = build_equivalence_index((c.code for c in curriculum.courses), equivalences)
    return reconcile_courses(curriculum, index, approved_codes(transcript_entries))


def approved_codes(transcript_entries: Iterable[TranscriptEntry]) -> set[str]:
    return {e.code for e in transcript_entries if e.status == TranscriptStatus.APPROVED}


def reconcile_courses(
    curriculum: Curriculum,
    index: EquivalenceIndex,
    approved: set[str],
) -> ReconciliationResult:
    satisfied: list[CourseResult] = []
    pending: list[CourseResult] = []
    completed = {category: 0 for category in BUDGETED_CATEGORIES}

    for course in curriculum.courses:
        found, match = _match_course(course, index, approved)
        result = CourseResult(
            code=course.code,
            name=course.name,
            credits=course.credits,
            category=course.category,
            status=CourseStatus.SATISFIED if found else CourseStatus.PENDING,
            equivalence=match,
        )
        if found:
            satisfied.append(result)
            completed[course.category] += course.credits
        else:
            pending.append(result)

    return ReconciliationResult(
        satisfied=satisfied,
        pending=pending,
        credits=_credit_summary(curriculum, completed),
    )


def _match_course(
    course: CurriculumCourse,
    index: EquivalenceIndex,
    approved: set[str],
) -> tuple[bool, EquivalenceMatch | None]:
    if course.code in approved:
        return True, None
    for link in index.accepted_for(course.code):
        if link.code in approved:
            return True, EquivalenceMatch(
                matched_code=link.code,
                kind=link.record.kind,
                notes=link.record.notes,
                direction=link.direction,
            )
    return False, None


def _credit_summary(curriculum: Curriculum, completed: dict) -> CreditSummary:
    requirements = curriculum.requirements
    lines = {
        category: _credit_line(requirements.for_category(category), completed[category])
        for category in BUDGETED_CATEGORIES
    }
    # Total is the sum of the category tallies, measured against the plan's own total
    total_completed = sum(completed.values())
    return CreditSummary(
        categories=lines,
        total=_credit_line(requirements.total, total_completed),
    )


def _credit_line(required: int, completed: int) -> CreditLine:
    return CreditLine(required=required, completed=completed, missing=max(0, required - completed))
