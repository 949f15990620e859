from enum import Enum

from pydantic import BaseModel, Field, model_validator

from app.schemas.transcript import TranscriptEntry
from app.services.categories import Category


class CourseStatus(str, Enum):
    SATISFIED = "satisfied"
    PENDING = "pending"


class EquivalenceMatch(BaseModel):
    """The equivalence link through which a course was satisfied."""

    matched_code: str
    kind: str
    notes: str
    # "forward" when the plan course is the source of the stored record
    direction: str


class CourseResult(BaseModel):
    code: str
    name: str
    credits: int
    category: Category
    status: CourseStatus
    equivalence: EquivalenceMatch | None = None


class CreditLine(BaseModel):
    required: int
    completed: int
    missing: int


class CreditSummary(BaseModel):
    categories: dict[Category, CreditLine]
    total: CreditLine


class ReconciliationResult(BaseModel):
    satisfied: list[CourseResult] = []
    pending: list[CourseResult] = []
    credits: CreditSummary


class ComparisonResponse(BaseModel):
    study_plan_id: int | None = None
    career_code: str | None = None
    version: str = ""
    satisfied: list[CourseResult]
    pending: list[CourseResult]
    satisfied_count: int
    pending_count: int
    credits_summary: CreditSummary
    completion_percentage: float


class _PlanSelector(BaseModel):
    study_plan_id: int | None = None
    career_code: str | None = None

    @model_validator(mode="after")
    def _one_plan_reference(self):
        if self.study_plan_id is None and not self.career_code:
            raise ValueError("Either study_plan_id or career_code is required")
        return self


class CompareRequest(_PlanSelector):
    subjects: list[TranscriptEntry] = Field(default_factory=list)


class CompareTextRequest(_PlanSelector):
    text: str
    tolerant: bool | None = None
