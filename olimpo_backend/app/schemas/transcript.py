from enum import Enum

from pydantic import AliasChoices, BaseModel, Field, field_validator

from app.services.categories import Category, normalize_category


class TranscriptStatus(str, Enum):
    APPROVED = "approved"
    FAILED = "failed"
    IN_PROGRESS = "in-progress"
    OTHER = "other"


_STATUS_ALIASES = {
    "approved": TranscriptStatus.APPROVED,
    "aprobada": TranscriptStatus.APPROVED,
    "aprobado": TranscriptStatus.APPROVED,
    "failed": TranscriptStatus.FAILED,
    "reprobada": TranscriptStatus.FAILED,
    "reprobado": TranscriptStatus.FAILED,
    "perdida": TranscriptStatus.FAILED,
    "in-progress": TranscriptStatus.IN_PROGRESS,
    "en curso": TranscriptStatus.IN_PROGRESS,
    "cursando": TranscriptStatus.IN_PROGRESS,
    "inscrita": TranscriptStatus.IN_PROGRESS,
}


class TranscriptEntry(BaseModel):
    """One row of a student's academic record."""

    code: str = Field(..., min_length=1)
    name: str = ""
    credits: int = Field(0, ge=0)
    # "type" and "semester" are the labels used by structured transcript exports
    category: Category = Field(Category.FREE_ELECTIVE, validation_alias=AliasChoices("category", "type"))
    grade: float = 0.0
    term: str = Field("", validation_alias=AliasChoices("term", "semester"))
    status: TranscriptStatus = TranscriptStatus.APPROVED

    model_config = {"frozen": True}

    @field_validator("code", mode="before")
    @classmethod
    def _strip_code(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value):
        return normalize_category(value)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        if isinstance(value, TranscriptStatus):
            return value
        return _STATUS_ALIASES.get(str(value).strip().lower(), TranscriptStatus.OTHER)


class TranscriptParseRequest(BaseModel):
    text: str
    # Falls back to the server default when omitted
    tolerant: bool | None = None


class TranscriptCreditTally(BaseModel):
    approved: int = 0
    in_progress: int = 0
    # approved plus failed
    taken: int = 0


class TranscriptParseResponse(BaseModel):
    entries: list[TranscriptEntry]
    count: int
    approved_count: int
    # Credit-weighted grades; 0.0 when no entry carries a grade
    weighted_average: float = 0.0
    approved_average: float = 0.0
    credits_by_category: dict[Category, TranscriptCreditTally] = Field(default_factory=dict)
