import logging
from typing import Iterable

from sqlalchemy.orm import Session

from app.core.config import settings
from app.schemas.comparison import CompareRequest, CompareTextRequest, ComparisonResponse
from app.schemas.equivalence import EquivalenceRecord
from app.schemas.study_plan import Curriculum
from app.schemas.transcript import (
    TranscriptCreditTally,
    TranscriptEntry,
    TranscriptParseResponse,
    TranscriptStatus,
)
from app.services.categories import Category
from app.services.equivalences import get_equivalences_for_plan
from app.services.reconciliation import reconcile
from app.services.result_assembler import assemble_result
from app.services.study_plans import get_active_study_plan, get_study_plan, load_curriculum
from app.services.transcript_parser import parse_transcript_text

logger = logging.getLogger(__name__)


def compare_transcript(db: Session, payload: CompareRequest) -> ComparisonResponse:
    curriculum, equivalences = resolve_curriculum(db, payload.study_plan_id, payload.career_code)
    return _compare(curriculum, equivalences, payload.subjects)


def compare_transcript_text(db: Session, payload: CompareTextRequest) -> ComparisonResponse:
    entries = parse_transcript_text(payload.text, tolerant=_tolerant(payload.tolerant))
    curriculum, equivalences = resolve_curriculum(db, payload.study_plan_id, payload.career_code)
    return _compare(curriculum, equivalences, entries)


def preview_transcript(entries: Iterable[TranscriptEntry]) -> TranscriptParseResponse:
    rows = list(entries)
    return TranscriptParseResponse(
        entries=rows,
        count=len(rows),
        approved_count=sum(1 for e in rows if e.status == TranscriptStatus.APPROVED),
        weighted_average=weighted_average(rows, (TranscriptStatus.APPROVED, TranscriptStatus.FAILED)),
        approved_average=weighted_average(rows, (TranscriptStatus.APPROVED,)),
        credits_by_category=credit_tallies(rows),
    )


def weighted_average(entries: Iterable[TranscriptEntry], statuses: tuple[TranscriptStatus, ...]) -> float:
    total_points = 0.0
    total_credits = 0
    for entry in entries:
        # ungraded rows (in progress, no grade printed) do not weigh in
        if entry.status not in statuses or not entry.credits or not entry.grade:
            continue
        total_points += entry.grade * entry.credits
        total_credits += entry.credits
    if total_credits == 0:
        return 0.0
    return round(total_points / total_credits, 2)


def credit_tallies(entries: Iterable[TranscriptEntry]) -> dict[Category, TranscriptCreditTally]:
    """Approved, in-progress and taken credits per category, in first-seen order."""
    tallies: dict[Category, TranscriptCreditTally] = {}
    for entry in entries:
        tally = tallies.setdefault(entry.category, TranscriptCreditTally())
        if entry.status == TranscriptStatus.APPROVED:
            tally.approved += entry.credits
            tally.taken += entry.credits
        elif entry.status == TranscriptStatus.FAILED:
            tally.taken += entry.credits
        elif entry.status == TranscriptStatus.IN_PROGRESS:
            tally.in_progress += entry.credits
    return tallies


def parse_preview(text: str, tolerant: bool | None = None) -> TranscriptParseResponse:
    return preview_transcript(parse_transcript_text(text, tolerant=_tolerant(tolerant)))


def resolve_curriculum(
    db: Session,
    study_plan_id: int | None,
    career_code: str | None,
) -> tuple[Curriculum, list[EquivalenceRecord]]:
    """Load the requested plan; an explicit id wins over the career's active plan."""
    if study_plan_id is not None:
        plan = get_study_plan(db, study_plan_id)
    else:
        plan = get_active_study_plan(db, career_code)
    return load_curriculum(plan), get_equivalences_for_plan(db, plan)


def _compare(
    curriculum: Curriculum,
    equivalences: list[EquivalenceRecord],
    entries: Iterable[TranscriptEntry],
) -> ComparisonResponse:
    response = assemble_result(curriculum, reconcile(curriculum, equivalences, entries))
    logger.info(
        "Compared transcript with plan %s (%s v%s): %d satisfied, %d pending, %.2f%% complete",
        curriculum.id,
        curriculum.career_code,
        curriculum.version,
        response.satisfied_count,
        response.pending_count,
        response.completion_percentage,
    )
    return response


def _tolerant(requested: bool | None) -> bool:
    return settings.parser_tolerant if requested is None else requested
