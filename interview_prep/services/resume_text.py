import io
import re
from pathlib import PurePath

from docx import Document
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from interview_prep.core.errors import ValidationError

PDF_MIME_TYPES = {"application/pdf"}
DOCX_MIME_TYPES = {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"}

METRIC_RE = re.compile(r"\$?\d{1,3}(?:,\d{3})*(?:\.\d+)?\+?%|\$\d+(?:\.\d+)?[kKmMbB]?|\b\d+(?:\.\d+)?x\b")
BULLET_PREFIX = re.compile(r"^[\s\-•●*·]+")


def _extract_pdf_text(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    chunks = []
    for page in reader.pages:
        chunks.append(page.extract_text() or "")
    return "\n".join(chunks)


def _extract_docx_text(data: bytes) -> str:
    document = Document(io.BytesIO(data))
    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append(" | ".join(cell.text for cell in row.cells))
    return "\n".join(lines)


def _normalize_text(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\xa0", " ")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n\s*\n+", "\n", text)
    return text.strip()


def extract_resume_text(data: bytes, *, filename: str | None = None, content_type: str | None = None) -> str:
    """Turn an uploaded résumé into plain text (PDF, DOCX or plain text)."""
    if not data:
        raise ValidationError("Resume file is empty")

    suffix = PurePath(filename or "").suffix.lower()
    mime = (content_type or "").split(";")[0].strip().lower()

    try:
        if suffix == ".pdf" or mime in PDF_MIME_TYPES:
            text = _extract_pdf_text(data)
        elif suffix == ".docx" or mime in DOCX_MIME_TYPES:
            text = _extract_docx_text(data)
        else:
            text = data.decode("utf-8", errors="replace")
    except (PdfReadError, ValueError, KeyError, OSError) as exc:
        raise ValidationError(f"Could not read resume file: {exc}") from exc

    normalized = _normalize_text(text)
    if not normalized:
        raise ValidationError("Resume file contains no readable text")
    return normalized


def resume_lines(resume_text: str) -> list[str]:
    lines = []
    for raw in (resume_text or "").splitlines():
        line = BULLET_PREFIX.sub("", raw).strip()
        if line:
            lines.append(line)
    return lines


def metric_lines(resume_text: str, *, max_items: int = 8) -> list[str]:
    """Résumé lines carrying a number-like achievement, verbatim."""
    found: list[str] = []
    for line in resume_lines(resume_text):
        if METRIC_RE.search(line) and line not in found:
            found.append(line)
        if len(found) >= max_items:
            break
    return found


def lines_mentioning(resume_text: str, term: str, *, max_items: int = 3) -> list[str]:
    term = (term or "").strip()
    if not term:
        return []
    pattern = re.compile(rf"(?<![A-Za-z0-9]){re.escape(term)}(?![A-Za-z0-9])", re.IGNORECASE)
    hits = [line for line in resume_lines(resume_text) if pattern.search(line)]
    return hits[:max_items]
