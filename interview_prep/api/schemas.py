from datetime import datetime

from pydantic import BaseModel, Field

from interview_prep.core.enums import JobStatus, Stage
from interview_prep.core.models import Artifact, CamelModel, PrepSummary, ReasoningStep, UserResponse


class LoginRequest(BaseModel):
    api_key: str


class LoginResponse(BaseModel):
    token: str
    user_id: str


class GenerateResponse(CamelModel):
    id: str
    message: str = "Interview preparation started"


class StatusResponse(CamelModel):
    status: JobStatus
    progress: Stage
    result: Artifact | None = None
    error: str | None = None
    reasoning_log: list[ReasoningStep] = Field(default_factory=list)
    expires_at: datetime | None = None


class HistoryResponse(CamelModel):
    history: list[PrepSummary] = Field(default_factory=list)


class SaveResponseRequest(CamelModel):
    job_id: str = Field(min_length=1)
    question_id: str = Field(min_length=1)
    round_id: str = Field(min_length=1)
    situation: str
    action: str
    result: str


class ResponsesListResponse(CamelModel):
    responses: list[UserResponse] = Field(default_factory=list)


class GradeRequest(CamelModel):
    job_id: str = Field(min_length=1)
    question_id: str = Field(min_length=1)
    response_text: str = Field(min_length=1)
    question: str | None = None
