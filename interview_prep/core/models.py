import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from interview_prep.core.enums import TERMINAL_STAGES, JobStatus, Stage


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReasoningStep(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    timestamp: datetime = Field(default_factory=utcnow)
    stage_name: str
    note: str
    sources_consulted: list[str] = Field(default_factory=list)


class JobInputs(CamelModel):
    job_url: str
    linkedin_url: str | None = None
    resume_text: str = ""


class JobDetails(CamelModel):
    company: str = ""
    title: str = ""
    location: str = ""
    required_skills: list[str] = Field(default_factory=list)


class JobInsights(CamelModel):
    responsibilities: list[str] = Field(default_factory=list)
    required_experience: list[str] = Field(default_factory=list)
    preferred_qualifications: list[str] = Field(default_factory=list)
    company_culture: list[str] = Field(default_factory=list)
    hiring_process: list[str] = Field(default_factory=list)
    key_technologies: list[str] = Field(default_factory=list)
    linkedin_notes: str | None = None


class JobResearch(CamelModel):
    details: JobDetails
    insights: JobInsights = Field(default_factory=JobInsights)


class CompanyInfo(CamelModel):
    description: str = ""
    culture: list[str] = Field(default_factory=list)
    business_focus: list[str] = Field(default_factory=list)
    team_info: list[str] = Field(default_factory=list)
    role_details: list[str] = Field(default_factory=list)
    useful_urls: list[str] = Field(default_factory=list)


class ExperienceEntry(CamelModel):
    title: str = ""
    company: str = ""
    period: str = ""
    achievements: list[str] = Field(default_factory=list)
    evidence: str = ""


class ProfileAnalysis(CamelModel):
    summary: str = ""
    experiences: list[ExperienceEntry] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    skill_evidence: dict[str, list[str]] = Field(default_factory=dict)
    linkedin_notes: str | None = None


class CandidateHighlights(CamelModel):
    relevant_points: list[str] = Field(default_factory=list)
    gap_areas: list[str] = Field(default_factory=list)
    specific_metrics: list[str] = Field(default_factory=list)
    suggested_talking_points: list[str] = Field(default_factory=list)


class RoundDescriptor(CamelModel):
    name: str
    focus: str = ""
    format: str = ""


class TalkingPoint(CamelModel):
    id: str = Field(default_factory=new_id)
    text: str


class InterviewQuestion(CamelModel):
    id: str = Field(default_factory=new_id)
    question: str
    talking_points: list[TalkingPoint] = Field(default_factory=list)


class InterviewRound(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str
    focus: str = ""
    format: str = ""
    questions: list[InterviewQuestion] = Field(default_factory=list)


class Artifact(CamelModel):
    job_details: JobDetails
    company_info: CompanyInfo
    candidate_highlights: CandidateHighlights
    interview_rounds: list[InterviewRound] = Field(default_factory=list)
    reasoning_log: list[ReasoningStep] = Field(default_factory=list)

    def find_question(self, question_id: str) -> tuple[InterviewRound, InterviewQuestion] | None:
        for round_ in self.interview_rounds:
            for question in round_.questions:
                if question.id == question_id:
                    return round_, question
        return None


class PipelineJob(CamelModel):
    id: str
    state: Stage = Stage.JOB_RESEARCH
    created_at: datetime = Field(default_factory=utcnow)
    expires_at: datetime
    inputs: JobInputs
    result: Artifact | None = None
    error: str | None = None
    reasoning_log: list[ReasoningStep] = Field(default_factory=list)
    user_id: str | None = None

    @property
    def status(self) -> JobStatus:
        if self.state == Stage.COMPLETED:
            return JobStatus.COMPLETED
        if self.state == Stage.FAILED:
            return JobStatus.FAILED
        return JobStatus.PROCESSING

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STAGES


class PrepSummary(CamelModel):
    id: str
    job_title: str
    company: str
    created_at: datetime
    expires_at: datetime


class UserResponse(CamelModel):
    job_id: str
    question_id: str
    round_id: str
    situation: str = ""
    action: str = ""
    result: str = ""
    updated_at: datetime = Field(default_factory=utcnow)


class SuggestedPoints(CamelModel):
    situation: list[str] = Field(default_factory=list)
    action: list[str] = Field(default_factory=list)
    result: list[str] = Field(default_factory=list)


class GradingResult(CamelModel):
    score: int = 5
    feedback: str = ""
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    suggested_points: SuggestedPoints = Field(default_factory=SuggestedPoints)

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> int:
        try:
            score = int(round(float(value)))
        except (TypeError, ValueError, OverflowError):
            return 5
        return max(1, min(10, score))
