import json
from collections.abc import Iterable

from pydantic import BaseModel

from interview_prep.core.models import (
    CandidateHighlights,
    CompanyInfo,
    InterviewQuestion,
    InterviewRound,
    JobDetails,
    JobInsights,
    ProfileAnalysis,
    RoundDescriptor,
)
from interview_prep.services.page_fetcher import FetchedPage

TASK_JOB_RESEARCH = "job_research"
TASK_LINKEDIN_JOB = "linkedin_job"
TASK_CAREER_PAGE = "career_page"
TASK_PROFILE_ANALYSIS = "profile_analysis"
TASK_LINKEDIN_PROFILE = "linkedin_profile"
TASK_HIGHLIGHTS = "highlights"
TASK_COMPANY_RESEARCH = "company_research"
TASK_INTERVIEW_PATTERNS = "interview_patterns"
TASK_ROUND_QUESTIONS = "round_questions"
TASK_REPAIR_COMPANY_INFO = "repair_company_info"
TASK_REPAIR_HIGHLIGHTS = "repair_highlights"
TASK_REPAIR_ROUND = "repair_round"
TASK_REPAIR_TALKING_POINTS = "repair_talking_points"
TASK_GRADING = "grading"

GRADING_SYSTEM_PROMPT = (
    "You are an expert interview coach evaluating interview responses with the "
    "Situation-Action-Result (SAR) framework. Judge structure, detail, relevance and impact. "
    "Be constructive, specific and actionable. Respond with a JSON object only."
)


def _bullets(items: Iterable[str], *, empty: str = "- None provided") -> str:
    lines = [f"- {item}" for item in items if str(item).strip()]
    return "\n".join(lines) or empty


def _dump(model: BaseModel) -> str:
    return json.dumps(model.model_dump(mode="json", by_alias=True, exclude_none=True))


def job_research_prompt(job_url: str, page: FetchedPage | None) -> str:
    if page and page.text:
        source_block = f"Posting title: {page.title}\nPosting text:\n{page.text}"
    else:
        source_block = "Posting text: unavailable, analyze the posting at the URL."
    return (
        f"Task: {TASK_JOB_RESEARCH}\n"
        f"Job URL: {job_url}\n"
        "Extract the details of this job posting: company name, exact job title, location "
        "(including remote/hybrid), required technical and soft skills, required experience, "
        "responsibilities, preferred qualifications, company culture, hiring process steps and "
        "key technologies.\n"
        f"{source_block}\n"
        "JSON Format:\n"
        '{"companyName": "", "jobTitle": "", "location": "", "requiredSkills": [], '
        '"requiredExperience": [], "jobResponsibilities": [], "preferredQualifications": [], '
        '"companyCulture": [], "hiringProcess": [], "keyTechnologies": []}'
    )


def linkedin_job_prompt(linkedin_url: str, details: JobDetails) -> str:
    return (
        f"Task: {TASK_LINKEDIN_JOB}\n"
        f"LinkedIn URL: {linkedin_url}\n"
        f"Company: {details.company}\n"
        f"Job Title: {details.title}\n"
        "Extract company culture, hiring process and team context from this LinkedIn page "
        "that would help a candidate prepare for an interview.\n"
        'JSON Format: {"notes": "", "companyCulture": [], "hiringProcess": []}'
    )


def career_page_prompt(details: JobDetails) -> str:
    return (
        f"Task: {TASK_CAREER_PAGE}\n"
        f"Company: {details.company}\n"
        f"Job Title: {details.title}\n"
        "Describe what this company's careers page typically says about this role: extra skills, "
        "culture and hiring process steps. Omit anything you are not confident about.\n"
        'JSON Format: {"requiredSkills": [], "requiredExperience": [], "jobResponsibilities": [], '
        '"preferredQualifications": [], "companyCulture": [], "hiringProcess": [], "keyTechnologies": []}'
    )


def profile_analysis_prompt(resume_text: str) -> str:
    return (
        f"Task: {TASK_PROFILE_ANALYSIS}\n"
        "Break this resume into a structured profile. For every experience quote one line "
        "verbatim from the resume as evidence. Do not invent employers, titles, dates or metrics.\n"
        f"Resume:\n{resume_text}\n"
        'JSON Format: {"summary": "", "experiences": [{"title": "", "company": "", "period": "", '
        '"achievements": [], "evidence": ""}], "skills": []}'
    )


def linkedin_profile_prompt(linkedin_url: str) -> str:
    return (
        f"Task: {TASK_LINKEDIN_PROFILE}\n"
        f"LinkedIn URL: {linkedin_url}\n"
        "Summarize anything on this LinkedIn profile that adds to the resume "
        "(endorsements, recommendations, certifications).\n"
        'JSON Format: {"notes": ""}'
    )


def highlights_prompt(
    resume_text: str,
    details: JobDetails,
    insights: JobInsights,
    profile: ProfileAnalysis,
) -> str:
    return (
        f"Task: {TASK_HIGHLIGHTS}\n"
        f"Company: {details.company}\n"
        f"Job Title: {details.title}\n"
        f"Required skills:\n{_bullets(details.required_skills)}\n"
        f"Responsibilities:\n{_bullets(insights.responsibilities)}\n"
        f"Structured profile: {_dump(profile)}\n"
        f"Resume:\n{resume_text}\n"
        "List the candidate's strongest points for this role and the gaps they should prepare "
        "for. Every relevant point must quote or closely paraphrase a resume line, keeping "
        "employer names and numbers intact. Provide at least 3 relevant points and 2 gap areas.\n"
        'JSON Format: {"relevantPoints": [], "gapAreas": [], "specificMetrics": [], '
        '"suggestedTalkingPoints": []}'
    )


def company_research_prompt(company: str, title: str) -> str:
    return (
        f"Task: {TASK_COMPANY_RESEARCH}\n"
        f"Company: {company}\n"
        f"Job Title: {title}\n"
        "Summarize what a candidate should know about this company and role: business "
        "overview, culture and values, business focus, team structure and role details. "
        "Include 2-3 useful URLs for further research.\n"
        'JSON Format: {"description": "", "culture": [], "businessFocus": [], "teamInfo": [], '
        '"roleDetails": [], "usefulUrls": []}'
    )


def interview_patterns_prompt(company: str, title: str, hiring_process: list[str]) -> str:
    return (
        f"Task: {TASK_INTERVIEW_PATTERNS}\n"
        f"Company: {company}\n"
        f"Job Title: {title}\n"
        f"Known hiring process steps:\n{_bullets(hiring_process)}\n"
        "Describe the interview rounds a candidate for this role at this company should expect, "
        "in order.\n"
        'JSON Format: {"interviewRounds": [{"name": "", "focus": "", "format": ""}]}'
    )


def round_questions_prompt(
    descriptor: RoundDescriptor,
    details: JobDetails,
    company_info: CompanyInfo,
    highlights: CandidateHighlights,
    *,
    min_questions: int,
) -> str:
    return (
        f"Task: {TASK_ROUND_QUESTIONS}\n"
        f"Interview Round: {descriptor.name}\n"
        f"Focus: {descriptor.focus}\n"
        f"Format: {descriptor.format}\n"
        f"Company: {details.company}\n"
        f"Job Title: {details.title}\n"
        f"Needed: {min_questions}\n"
        f"Job details: {_dump(details)}\n"
        f"Company research: {_dump(company_info)}\n"
        f"Candidate highlights: {_dump(highlights)}\n"
        f"Generate at least {min_questions} realistic questions for this round, each with 3-5 "
        "talking points. Talking points must reference verbatim evidence from the candidate "
        "highlights (employers, metrics, projects) and be specific and actionable.\n"
        'JSON Format: {"questions": [{"question": "", "talkingPoints": []}]}'
    )


def repair_company_info_prompt(details: JobDetails, info: CompanyInfo, missing_fields: list[str]) -> str:
    return (
        f"Task: {TASK_REPAIR_COMPANY_INFO}\n"
        f"Company: {details.company}\n"
        f"Job Title: {details.title}\n"
        f"Missing sections: {', '.join(missing_fields)}\n"
        f"Current company research: {_dump(info)}\n"
        "Fill in only the missing sections with specific points about this company.\n"
        'JSON Format: {"culture": [], "businessFocus": [], "teamInfo": [], "roleDetails": []}'
    )


def repair_highlights_prompt(
    details: JobDetails,
    highlights: CandidateHighlights,
    resume_text: str,
    *,
    needed_points: int,
    needed_gaps: int,
) -> str:
    return (
        f"Task: {TASK_REPAIR_HIGHLIGHTS}\n"
        f"Company: {details.company}\n"
        f"Job Title: {details.title}\n"
        f"Needed: {max(needed_points, needed_gaps)}\n"
        f"Existing relevant points:\n{_bullets(highlights.relevant_points)}\n"
        f"Existing gap areas:\n{_bullets(highlights.gap_areas)}\n"
        f"Resume:\n{resume_text}\n"
        f"Add {needed_points} new relevant points and {needed_gaps} new gap areas that do not "
        "repeat the existing ones. Relevant points must be grounded in resume lines.\n"
        'JSON Format: {"relevantPoints": [], "gapAreas": []}'
    )


def repair_round_prompt(
    round_: InterviewRound,
    details: JobDetails,
    highlights: CandidateHighlights,
    *,
    needed: int,
) -> str:
    existing = [question.question for question in round_.questions]
    return (
        f"Task: {TASK_REPAIR_ROUND}\n"
        f"Interview Round: {round_.name}\n"
        f"Focus: {round_.focus}\n"
        f"Company: {details.company}\n"
        f"Job Title: {details.title}\n"
        f"Needed: {needed}\n"
        f"Existing questions:\n{_bullets(existing)}\n"
        f"Candidate highlights: {_dump(highlights)}\n"
        f"Write {needed} additional questions for this round that do not repeat the existing "
        "ones, each with 3-5 talking points grounded in the candidate highlights.\n"
        'JSON Format: {"questions": [{"question": "", "talkingPoints": []}]}'
    )


def repair_talking_points_prompt(
    round_: InterviewRound,
    question: InterviewQuestion,
    highlights: CandidateHighlights,
    *,
    needed: int,
) -> str:
    existing = [point.text for point in question.talking_points]
    return (
        f"Task: {TASK_REPAIR_TALKING_POINTS}\n"
        f"Interview Round: {round_.name}\n"
        f"Question: {question.question}\n"
        f"Needed: {needed}\n"
        f"Existing talking points:\n{_bullets(existing)}\n"
        f"Candidate relevant points:\n{_bullets(highlights.relevant_points)}\n"
        f"Add {needed} new talking points for this question, grounded in the candidate's "
        "relevant points, without repeating existing ones.\n"
        'JSON Format: {"talkingPoints": []}'
    )


def grading_prompt(question: str, response_text: str, highlights: CandidateHighlights | None) -> str:
    highlights = highlights or CandidateHighlights()
    return (
        f"Task: {TASK_GRADING}\n"
        f"Question: {question}\n"
        f"Candidate Response:\n{response_text}\n"
        f"Candidate Highlights from Resume:\n{_bullets(highlights.relevant_points)}\n"
        f"Key Metrics:\n{_bullets(highlights.specific_metrics)}\n"
        f"Suggested Talking Points:\n{_bullets(highlights.suggested_talking_points)}\n"
        "Evaluate this interview response and suggest specific resume points that would "
        "strengthen it.\n"
        'JSON Format: {"score": 1, "feedback": "", "strengths": [], "improvements": [], '
        '"suggestedPoints": {"situation": [], "action": [], "result": []}}'
    )
