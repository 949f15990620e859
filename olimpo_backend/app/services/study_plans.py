import logging

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session, selectinload

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.career import Career
from app.models.study_plan import StudyPlan
from app.models.subject import Subject
from app.schemas.study_plan import (
    CareerCreateRequest,
    CreditRequirements,
    Curriculum,
    CurriculumCourse,
    StudyPlanCreateRequest,
    StudyPlanResponse,
)
from app.services.categories import BUDGETED_CATEGORIES

logger = logging.getLogger(__name__)


def create_career(db: Session, payload: CareerCreateRequest) -> Career:
    if db.query(Career).filter(Career.code == payload.code).first():
        raise ConflictError(f"Career '{payload.code}' already exists.")
    career = Career(**payload.model_dump())
    db.add(career)
    db.commit()
    db.refresh(career)
    return career


def get_career(db: Session, code: str) -> Career:
    career = db.query(Career).filter(Career.code == code).first()
    if career is None:
        logger.warning("Career %s not found", code)
        raise NotFoundError(f"Career '{code}' not found.")
    return career


def create_study_plan(db: Session, payload: StudyPlanCreateRequest) -> StudyPlan:
    career = get_career(db, payload.career_code)
    requirements = payload.requirements or _requirements_from_subjects(payload.subjects)

    plan = StudyPlan(
        career_id=career.id,
        version=payload.version,
        is_active=payload.is_active,
        fund_required_credits=requirements.fund_required,
        fund_elective_credits=requirements.fund_elective,
        disc_required_credits=requirements.disc_required,
        disc_elective_credits=requirements.disc_elective,
        free_elective_credits=requirements.free_elective,
        total_credits=requirements.total,
    )
    plan.subjects = [_upsert_subject(db, course) for course in payload.subjects]
    db.add(plan)
    db.commit()
    db.refresh(plan)
    logger.info(
        "Created study plan %s v%s with %d subjects", career.code, plan.version, len(plan.subjects)
    )
    return plan


def get_study_plan(db: Session, study_plan_id: int) -> StudyPlan:
    plan = (
        db.query(StudyPlan)
        .options(selectinload(StudyPlan.subjects), selectinload(StudyPlan.career))
        .filter(StudyPlan.id == study_plan_id)
        .first()
    )
    if plan is None:
        logger.warning("Study plan %s not found", study_plan_id)
        raise NotFoundError(f"Study plan {study_plan_id} not found.")
    return plan


def get_active_study_plan(db: Session, career_code: str) -> StudyPlan:
    plan = (
        db.query(StudyPlan)
        .join(Career, StudyPlan.career_id == Career.id)
        .options(selectinload(StudyPlan.subjects), selectinload(StudyPlan.career))
        .filter(Career.code == career_code, StudyPlan.is_active.is_(True))
        .order_by(StudyPlan.id.desc())
        .first()
    )
    if plan is None:
        logger.warning("No active study plan for career %s", career_code)
        raise NotFoundError(f"No active study plan found for career '{career_code}'.")
    return plan


def load_curriculum(plan: StudyPlan) -> Curriculum:
    """Snapshot a stored study plan as an immutable Curriculum value."""
    try:
        return Curriculum(
            id=plan.id,
            career_code=plan.career.code if plan.career else None,
            version=plan.version,
            courses=[CurriculumCourse.model_validate(s) for s in plan.subjects],
            requirements=plan_requirements(plan),
        )
    except PydanticValidationError as exc:
        raise ValidationError(f"Study plan {plan.id} is not a valid curriculum: {exc}") from exc


def plan_requirements(plan: StudyPlan) -> CreditRequirements:
    return CreditRequirements(
        fund_required=plan.fund_required_credits or 0,
        fund_elective=plan.fund_elective_credits or 0,
        disc_required=plan.disc_required_credits or 0,
        disc_elective=plan.disc_elective_credits or 0,
        free_elective=plan.free_elective_credits or 0,
        total=plan.total_credits or 0,
    )


def study_plan_response(plan: StudyPlan) -> StudyPlanResponse:
    return StudyPlanResponse(
        id=plan.id,
        career_code=plan.career.code,
        version=plan.version,
        is_active=bool(plan.is_active),
        subject_count=len(plan.subjects),
        requirements=plan_requirements(plan),
    )


def _requirements_from_subjects(subjects: list[CurriculumCourse]) -> CreditRequirements:
    sums = {category: 0 for category in BUDGETED_CATEGORIES}
    for subject in subjects:
        sums[subject.category] += subject.credits
    return CreditRequirements(
        **{category.value.replace("-", "_"): credits for category, credits in sums.items()},
        total=sum(sums.values()),
    )


def _upsert_subject(db: Session, course: CurriculumCourse) -> Subject:
    # Subjects are shared between plans; an existing code keeps its stored data
    existing = db.query(Subject).filter(Subject.code == course.code).first()
    if existing:
        return existing
    subject = Subject(
        code=course.code,
        name=course.name,
        credits=course.credits,
        category=course.category.value,
    )
    db.add(subject)
    db.flush()
    return subject
