"""
Shared fixtures: in-memory database, API client and a small curriculum.
"""

import os

import pytest

# Point the app at an in-memory database before any app module is imported
os.environ["DATABASE_URL"] = "sqlite://"

from fastapi.testclient import TestClient  # noqa: E402

from app.core.database import engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models.base import Base  # noqa: E402
from app.schemas.equivalence import EquivalenceRecord  # noqa: E402
from app.schemas.study_plan import CreditRequirements, Curriculum, CurriculumCourse  # noqa: E402
from app.schemas.transcript import TranscriptEntry  # noqa: E402


@pytest.fixture
def client():
    Base.metadata.drop_all(bind=engine)
    with TestClient(app) as test_client:
        yield test_client
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def curriculum() -> Curriculum:
    """Four-course plan touching three categories."""
    return Curriculum(
        id=1,
        career_code="ISIS",
        version="2023-1",
        courses=[
            CurriculumCourse(code="1000004-M", name="Cálculo Diferencial", credits=4, category="fund-required"),
            CurriculumCourse(code="3010651", name="Estadística I", credits=3, category="fund-required"),
            CurriculumCourse(code="3010435", name="Fundamentos de Programación", credits=3, category="disc-required"),
            CurriculumCourse(code="3007862", name="Visión Artificial", credits=3, category="disc-elective"),
        ],
        requirements=CreditRequirements(
            fund_required=7,
            fund_elective=4,
            disc_required=3,
            disc_elective=6,
            free_elective=2,
            total=25,
        ),
    )


@pytest.fixture
def equivalences() -> list[EquivalenceRecord]:
    """Old-plan codes pointing at the new ones, as stored."""
    return [
        EquivalenceRecord(source_code="3006914", target_code="3010651", notes="3006914 → 3010651"),
        EquivalenceRecord(source_code="3007742", target_code="3010435", notes="3007742 → 3010435"),
        EquivalenceRecord(source_code="3007862", target_code="3009550", kind="partial"),
    ]


@pytest.fixture
def make_entry():
    def _make(code: str, status: str = "approved", credits: int = 3) -> TranscriptEntry:
        return TranscriptEntry(code=code, name=code, credits=credits, status=status)

    return _make
