import csv
import logging
import re
import unicodedata
from io import StringIO
from typing import Iterator

from pydantic import ValidationError as PydanticValidationError

from app.core.errors import ParseError
from app.schemas.transcript import TranscriptEntry, TranscriptStatus
from app.services.categories import infer_category

logger = logging.getLogger(__name__)


class ParsedTranscript:
    """Lazily parsed transcript text.

    Iterating re-scans the normalized text, so the sequence can be walked as
    many times as needed without holding the entries in memory.
    """

    def __init__(self, text: str, tolerant: bool = True):
        self.text = text
        self.tolerant = tolerant

    def __iter__(self) -> Iterator[TranscriptEntry]:
        return iter_transcript_entries(self.text, tolerant=self.tolerant)

    def approved_codes(self) -> set[str]:
        return {e.code for e in self if e.status == TranscriptStatus.APPROVED}


def parse_transcript_text(content: str, tolerant: bool = True) -> ParsedTranscript:
    """Parse free-text transcript lines of the form

        Calculus (CALC101) 4 FUND. OBLIGATORIA 2024-2S 4.5 APROBADA

    Lines that cannot be read are skipped when ``tolerant`` is set and raise
    ParseError otherwise. Input with no readable line at all always raises
    ParseError.
    """
    parsed = ParsedTranscript(content or "", tolerant=tolerant)
    if next(iter(parsed), None) is None:
        raise ParseError("No course entries were recognized in the transcript text.")
    return parsed


def iter_transcript_entries(content: str, tolerant: bool = True) -> Iterator[TranscriptEntry]:
    for number, line in enumerate(normalize_transcript_text(content).split("\n"), start=1):
        if "(" not in line or ")" not in line:
            continue
        entry = parse_course_line(line)
        if entry is None:
            if not tolerant:
                raise ParseError(f"Unreadable course line {number}: {line!r}", line_number=number)
            logger.debug("Skipping unreadable transcript line %d: %r", number, line)
            continue
        yield entry


def normalize_transcript_text(content: str) -> str:
    text = unicodedata.normalize("NFC", content).replace("\r\n", "\n").replace("\r", "\n")
    lines = [line.strip() for line in text.split("\n")]
    collapsed: list[str] = []
    for line in lines:
        if not line and collapsed and not collapsed[-1]:
            continue
        collapsed.append(line)
    return "\n".join(collapsed).strip()


def parse_course_line(line: str) -> TranscriptEntry | None:
    """Read one candidate line; None when it does not describe a course."""
    open_idx = line.find("(")
    close_idx = line.find(")", open_idx + 1)
    if open_idx == -1 or close_idx == -1:
        return None

    name = line[:open_idx].strip()
    code = line[open_idx + 1:close_idx].strip()
    if not code:
        return None

    tokens = line[close_idx + 1:].split()
    if not tokens:
        return None
    credits = _to_number(tokens[0])
    if credits is None:
        return None
    rest = tokens[1:]

    try:
        return TranscriptEntry(
            code=code,
            name=name,
            credits=int(credits),
            category=infer_category(" ".join(rest)),
            grade=_extract_grade(rest),
            term=_extract_term(rest),
            status=_extract_status(line),
        )
    except PydanticValidationError:
        return None


def parse_transcript_csv(content: str) -> list[TranscriptEntry]:
    """Structured transcript export with a header row; rows without a code are skipped."""
    reader = csv.DictReader(StringIO(content))
    rows: list[TranscriptEntry] = []
    for row in reader:
        code = row.get("code") or row.get("course_code") or row.get("codigo")
        if not code or not code.strip():
            continue
        credits = _to_number(row.get("credits") or row.get("creditos") or "0")
        grade = _to_number(row.get("grade") or row.get("calificacion") or "0")
        try:
            rows.append(
                TranscriptEntry(
                    code=code,
                    name=(row.get("name") or row.get("nombre") or "").strip(),
                    credits=int(credits or 0),
                    category=row.get("category") or row.get("tipologia") or "free-elective",
                    grade=grade or 0.0,
                    term=(row.get("term") or row.get("periodo") or "").strip(),
                    status=row.get("status") or row.get("estado") or "approved",
                )
            )
        except PydanticValidationError:
            logger.debug("Skipping invalid transcript CSV row: %r", row)
    return rows


_NUMBER_RE = re.compile(r"^\d+(?:[.,]\d+)?$")
_FAILED_KEYWORDS = ("REPROBADA", "PERDIDA")
_IN_PROGRESS_KEYWORDS = ("EN CURSO", "CURSANDO", "INSCRITA")


def _to_number(token: str | None) -> float | None:
    if token is None:
        return None
    token = token.strip()
    if not _NUMBER_RE.match(token):
        return None
    return float(token.replace(",", "."))


def _extract_grade(tokens: list[str]) -> float:
    for token in tokens:
        value = _to_number(token)
        if value is not None and 0.0 <= value <= 5.0:
            return value
    return 0.0


def _extract_term(tokens: list[str]) -> str:
    for token in tokens:
        if "-" in token and len(token) >= 6:
            return token
    return ""


def _extract_status(line: str) -> TranscriptStatus:
    # Whole line on purpose: a course name can carry the keyword too
    upper = line.upper()
    if any(keyword in upper for keyword in _FAILED_KEYWORDS):
        return TranscriptStatus.FAILED
    if any(keyword in upper for keyword in _IN_PROGRESS_KEYWORDS):
        return TranscriptStatus.IN_PROGRESS
    return TranscriptStatus.APPROVED
