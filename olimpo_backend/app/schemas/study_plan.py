from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from app.services.categories import BUDGETED_CATEGORIES, Category, normalize_category


class CurriculumCourse(BaseModel):
    code: str = Field(..., min_length=1)
    name: str
    credits: int = Field(..., ge=0)
    category: Category

    model_config = {"frozen": True, "from_attributes": True}

    @field_validator("category", mode="before")
    @classmethod
    def _budgeted_category(cls, value):
        category = normalize_category(value)
        if category not in BUDGETED_CATEGORIES:
            raise ValueError(f"Category '{category.value}' has no credit budget in a study plan")
        return category


class CreditRequirements(BaseModel):
    """Required credits per category plus the plan-wide total.

    The category thresholds do not have to add up to ``total``.
    """

    fund_required: int = Field(0, ge=0)
    fund_elective: int = Field(0, ge=0)
    disc_required: int = Field(0, ge=0)
    disc_elective: int = Field(0, ge=0)
    free_elective: int = Field(0, ge=0)
    total: int = Field(0, ge=0)

    model_config = {"frozen": True}

    def for_category(self, category: Category) -> int:
        return getattr(self, category.value.replace("-", "_"))


def _check_unique_codes(courses: list[CurriculumCourse]) -> None:
    seen: set[str] = set()
    for course in courses:
        if course.code in seen:
            raise ValueError(f"Duplicate course code '{course.code}' in curriculum")
        seen.add(course.code)


class Curriculum(BaseModel):
    id: int | None = None
    career_code: str | None = None
    version: str = ""
    courses: list[CurriculumCourse] = []
    requirements: CreditRequirements = CreditRequirements()

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _unique_codes(self):
        _check_unique_codes(self.courses)
        return self


class CareerCreateRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None


class CareerResponse(CareerCreateRequest):
    id: int
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class StudyPlanCreateRequest(BaseModel):
    career_code: str
    version: str = Field(..., min_length=1, max_length=20)  # e.g. "2023-1"
    is_active: bool = True
    subjects: list[CurriculumCourse] = []
    # When omitted, thresholds are the credit sums of the plan's subjects
    requirements: CreditRequirements | None = None

    @model_validator(mode="after")
    def _unique_codes(self):
        _check_unique_codes(self.subjects)
        return self


class StudyPlanResponse(BaseModel):
    id: int
    career_code: str
    version: str
    is_active: bool
    subject_count: int
    requirements: CreditRequirements
