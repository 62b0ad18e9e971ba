from typing import TypedDict

from interview_prep.core.models import (
    Artifact,
    CandidateHighlights,
    CompanyInfo,
    InterviewRound,
    JobResearch,
    ProfileAnalysis,
    RoundDescriptor,
)


class PrepPipelineState(TypedDict, total=False):
    job_id: str
    job_url: str
    linkedin_url: str | None
    resume_text: str

    job_research: JobResearch
    profile: ProfileAnalysis
    highlights: CandidateHighlights
    company_info: CompanyInfo
    round_descriptors: list[RoundDescriptor]
    interview_rounds: list[InterviewRound]
    artifact: Artifact

    degraded_stages: list[str]
    status: str
    error: str
