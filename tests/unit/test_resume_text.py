import io

import pytest
from docx import Document

from interview_prep.core.errors import ValidationError
from interview_prep.services.resume_text import (
    extract_resume_text,
    lines_mentioning,
    metric_lines,
    resume_lines,
)

RESUME = """Jordan Lee
Senior Software Engineer

- Reduced latency by 40% at Acme Corp (2019-2021)
• Migrated billing to Kafka, saving $120k per year
- Mentored four engineers on JavaScript and Go
- Built internal tooling in Java
"""


def test_plain_text_resume_is_normalized():
    text = extract_resume_text(b"Jordan Lee\r\n\r\n\r\nEngineer\xc2\xa0II\n", filename="resume.txt")
    assert text == "Jordan Lee\nEngineer II"


def test_empty_upload_is_rejected():
    with pytest.raises(ValidationError):
        extract_resume_text(b"", filename="resume.pdf")


def test_whitespace_only_upload_is_rejected():
    with pytest.raises(ValidationError):
        extract_resume_text(b"   \n\n  ", filename="resume.txt")


def test_corrupt_pdf_is_rejected():
    with pytest.raises(ValidationError):
        extract_resume_text(b"%PDF-1.4 this is not really a pdf", filename="resume.pdf")


def test_docx_resume_text_is_extracted():
    document = Document()
    document.add_paragraph("Jordan Lee")
    document.add_paragraph("Reduced latency by 40% at Acme Corp (2019-2021)")
    buffer = io.BytesIO()
    document.save(buffer)

    text = extract_resume_text(
        buffer.getvalue(),
        filename="resume.docx",
        content_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    )

    assert "Jordan Lee" in text
    assert "Reduced latency by 40% at Acme Corp (2019-2021)" in text


def test_resume_lines_drop_bullets():
    lines = resume_lines(RESUME)
    assert "Reduced latency by 40% at Acme Corp (2019-2021)" in lines
    assert "Migrated billing to Kafka, saving $120k per year" in lines


def test_metric_lines_are_verbatim():
    metrics = metric_lines(RESUME)
    assert metrics == [
        "Reduced latency by 40% at Acme Corp (2019-2021)",
        "Migrated billing to Kafka, saving $120k per year",
    ]


def test_lines_mentioning_respects_word_boundaries():
    assert lines_mentioning(RESUME, "Java") == ["Built internal tooling in Java"]
    assert lines_mentioning(RESUME, "kafka") == ["Migrated billing to Kafka, saving $120k per year"]
    assert lines_mentioning(RESUME, "") == []
