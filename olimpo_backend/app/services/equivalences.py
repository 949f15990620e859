from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from app.core.errors import NotFoundError
from app.models.equivalence import Equivalence
from app.models.study_plan import StudyPlan
from app.models.subject import Subject
from app.schemas.equivalence import EquivalenceCreate, EquivalenceRecord, EquivalenceResponse


def bulk_create_equivalences(db: Session, items: list[EquivalenceCreate]) -> list[EquivalenceResponse]:
    codes = {i.source_code for i in items} | {i.target_code for i in items}
    subjects = {s.code: s for s in db.query(Subject).filter(Subject.code.in_(codes)).all()}
    missing = sorted(codes - subjects.keys())
    if missing:
        raise NotFoundError(f"Unknown subject code(s): {', '.join(missing)}")

    for plan_id in {i.study_plan_id for i in items if i.study_plan_id is not None}:
        if db.get(StudyPlan, plan_id) is None:
            raise NotFoundError(f"Study plan {plan_id} not found.")

    created: list[Equivalence] = []
    for item in items:
        row = Equivalence(
            source_subject_id=subjects[item.source_code].id,
            target_subject_id=subjects[item.target_code].id,
            kind=item.kind,
            notes=item.notes,
            study_plan_id=item.study_plan_id,
        )
        db.add(row)
        created.append(row)
    db.commit()
    return [
        EquivalenceResponse(
            id=row.id,
            source_code=item.source_code,
            target_code=item.target_code,
            kind=item.kind,
            notes=item.notes,
            study_plan_id=item.study_plan_id,
        )
        for row, item in zip(created, items)
    ]


def get_equivalences_for_plan(db: Session, plan: StudyPlan) -> list[EquivalenceRecord]:
    """Equivalences touching any plan subject, either end, in creation order.

    Records scoped to another study plan are left out; unscoped ones apply everywhere.
    """
    subject_ids = [s.id for s in plan.subjects]
    if not subject_ids:
        return []
    rows = (
        db.query(Equivalence)
        .options(selectinload(Equivalence.source_subject), selectinload(Equivalence.target_subject))
        .filter(
            or_(
                Equivalence.source_subject_id.in_(subject_ids),
                Equivalence.target_subject_id.in_(subject_ids),
            ),
            or_(Equivalence.study_plan_id.is_(None), Equivalence.study_plan_id == plan.id),
        )
        .order_by(Equivalence.id)
        .all()
    )
    return [
        EquivalenceRecord(
            source_code=row.source_subject.code,
            target_code=row.target_subject.code,
            kind=row.kind,
            notes=row.notes or "",
        )
        for row in rows
    ]
