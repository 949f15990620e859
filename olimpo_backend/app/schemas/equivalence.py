from pydantic import BaseModel, Field


class EquivalenceRecord(BaseModel):
    """Directed equivalence: passing ``source_code`` stands in for ``target_code``."""

    source_code: str
    target_code: str
    kind: str = "total"
    notes: str = ""

    model_config = {"frozen": True}


class EquivalenceCreate(EquivalenceRecord):
    # Unscoped equivalences apply to every study plan
    study_plan_id: int | None = None


class EquivalenceCreateRequest(BaseModel):
    equivalences: list[EquivalenceCreate] = Field(..., min_length=1)


class EquivalenceResponse(EquivalenceCreate):
    id: int
