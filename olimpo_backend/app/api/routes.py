from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.schemas.comparison import CompareRequest, CompareTextRequest, ComparisonResponse
from app.schemas.equivalence import EquivalenceCreateRequest, EquivalenceResponse
from app.schemas.study_plan import (
    CareerCreateRequest,
    CareerResponse,
    StudyPlanCreateRequest,
    StudyPlanResponse,
)
from app.schemas.transcript import TranscriptParseRequest, TranscriptParseResponse
from app.services.comparison import compare_transcript, compare_transcript_text, parse_preview, preview_transcript
from app.services.equivalences import bulk_create_equivalences
from app.services.pdf_parser import extract_text_from_pdf
from app.services.study_plans import (
    create_career,
    create_study_plan,
    get_active_study_plan,
    get_career,
    get_study_plan,
    study_plan_response,
)
from app.services.transcript_parser import parse_transcript_csv

router = APIRouter(prefix="/api")


# ── Careers & study plans ─────────────────────────────────────────────────────

@router.post("/careers", response_model=CareerResponse, status_code=201)
def create_career_endpoint(payload: CareerCreateRequest, db: Session = Depends(get_db)):
    return create_career(db, payload)


@router.get("/careers/{career_code}", response_model=CareerResponse)
def get_career_endpoint(career_code: str, db: Session = Depends(get_db)):
    return get_career(db, career_code)


@router.get("/careers/{career_code}/study-plan", response_model=StudyPlanResponse)
def get_active_study_plan_endpoint(career_code: str, db: Session = Depends(get_db)):
    return study_plan_response(get_active_study_plan(db, career_code))


@router.post("/study-plans", response_model=StudyPlanResponse, status_code=201)
def create_study_plan_endpoint(payload: StudyPlanCreateRequest, db: Session = Depends(get_db)):
    return study_plan_response(create_study_plan(db, payload))


@router.get("/study-plans/{study_plan_id}", response_model=StudyPlanResponse)
def get_study_plan_endpoint(study_plan_id: int, db: Session = Depends(get_db)):
    return study_plan_response(get_study_plan(db, study_plan_id))


@router.post("/equivalences", response_model=list[EquivalenceResponse], status_code=201)
def create_equivalences_endpoint(payload: EquivalenceCreateRequest, db: Session = Depends(get_db)):
    return bulk_create_equivalences(db, payload.equivalences)


# ── Transcripts ───────────────────────────────────────────────────────────────

@router.post("/transcripts/parse", response_model=TranscriptParseResponse)
def parse_transcript_endpoint(payload: TranscriptParseRequest):
    return parse_preview(payload.text, payload.tolerant)


@router.post("/transcripts/upload", response_model=TranscriptParseResponse)
def upload_transcript_endpoint(
    file: UploadFile = File(...),
    tolerant: bool | None = Query(None),
):
    data = file.file.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="File exceeds the upload size limit.")
    filename = (file.filename or "").lower()
    if filename.endswith(".csv"):
        return preview_transcript(parse_transcript_csv(data.decode("utf-8", errors="ignore")))
    if filename.endswith(".pdf"):
        return parse_preview(extract_text_from_pdf(data), tolerant)
    return parse_preview(data.decode("utf-8", errors="ignore"), tolerant)


# ── Comparison ────────────────────────────────────────────────────────────────

@router.post("/compare", response_model=ComparisonResponse)
def compare_endpoint(payload: CompareRequest, db: Session = Depends(get_db)):
    return compare_transcript(db, payload)


@router.post("/compare/text", response_model=ComparisonResponse)
def compare_text_endpoint(payload: CompareTextRequest, db: Session = Depends(get_db)):
    return compare_transcript_text(db, payload)
