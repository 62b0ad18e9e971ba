from . import (
    company_researcher,
    failure_recorder,
    finalizer,
    highlighter,
    job_researcher,
    pattern_researcher,
    profile_analyzer,
    quality_checker,
    question_writer,
)

__all__ = [
    "company_researcher",
    "failure_recorder",
    "finalizer",
    "highlighter",
    "job_researcher",
    "pattern_researcher",
    "profile_analyzer",
    "quality_checker",
    "question_writer",
]
