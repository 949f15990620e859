import logging
from io import BytesIO

from pypdf import PdfReader
from pypdf.errors import DependencyError, PdfReadError

logger = logging.getLogger(__name__)


def extract_text_from_pdf(data: bytes) -> str:
    """Text of every page joined by newlines; empty string when unreadable."""
    try:
        reader = PdfReader(BytesIO(data))
        if reader.is_encrypted:
            reader.decrypt("")
        texts = [page.extract_text() or "" for page in reader.pages]
    except (PdfReadError, DependencyError, NotImplementedError) as exc:
        logger.warning("Could not read transcript PDF: %s", exc)
        return ""
    return "\n".join(texts).strip()
