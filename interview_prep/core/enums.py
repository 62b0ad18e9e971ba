from enum import Enum


class Stage(str, Enum):
    JOB_RESEARCH = "JOB_RESEARCH"
    PROFILE_ANALYSIS = "PROFILE_ANALYSIS"
    HIGHLIGHT_GENERATION = "HIGHLIGHT_GENERATION"
    COMPANY_RESEARCH = "COMPANY_RESEARCH"
    INTERVIEW_PATTERN_RESEARCH = "INTERVIEW_PATTERN_RESEARCH"
    QUESTION_GENERATION = "QUESTION_GENERATION"
    QUALITY_CHECK = "QUALITY_CHECK"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


PIPELINE_ORDER = (
    Stage.JOB_RESEARCH,
    Stage.PROFILE_ANALYSIS,
    Stage.HIGHLIGHT_GENERATION,
    Stage.COMPANY_RESEARCH,
    Stage.INTERVIEW_PATTERN_RESEARCH,
    Stage.QUESTION_GENERATION,
    Stage.QUALITY_CHECK,
)

TERMINAL_STAGES = frozenset({Stage.COMPLETED, Stage.FAILED})


class JobStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class OutcomeStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"


STAGE_LABELS = {
    Stage.JOB_RESEARCH: "Job Researcher",
    Stage.PROFILE_ANALYSIS: "Profile Analyzer",
    Stage.HIGHLIGHT_GENERATION: "Highlighter",
    Stage.COMPANY_RESEARCH: "Company Researcher",
    Stage.INTERVIEW_PATTERN_RESEARCH: "Interview Pattern Researcher",
    Stage.QUESTION_GENERATION: "Interview Preparer",
    Stage.QUALITY_CHECK: "Quality Checker",
    Stage.COMPLETED: "Pipeline",
    Stage.FAILED: "Pipeline",
}
