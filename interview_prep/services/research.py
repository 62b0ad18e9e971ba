from typing import Any

import httpx

from interview_prep.core.enums import Stage
from interview_prep.core.errors import GenerationError
from interview_prep.core.logging import get_logger
from interview_prep.core.models import (
    CompanyInfo,
    JobDetails,
    JobInsights,
    JobResearch,
    RoundDescriptor,
)
from interview_prep.core.outcome import StageOutcome, StepLog
from interview_prep.services import prompts
from interview_prep.services.generation import GenerationClient
from interview_prep.services.normalize import clean_text, merge_unique, string_list
from interview_prep.services.page_fetcher import FetchedPage, PageFetcher

logger = get_logger(__name__)

DEFAULT_ROUNDS = (
    RoundDescriptor(
        name="Initial Screen",
        focus="Basic qualifications and fit",
        format="Phone or video call with HR or recruiter",
    ),
    RoundDescriptor(
        name="Technical Assessment",
        focus="Technical skills and knowledge",
        format="Technical interview with team members",
    ),
    RoundDescriptor(
        name="Behavioral Interview",
        focus="Soft skills and past behavior",
        format="In-person or video interview with hiring manager",
    ),
    RoundDescriptor(
        name="Culture Fit",
        focus="Values alignment and team fit",
        format="Conversation with team members or leadership",
    ),
)

INSIGHT_FIELDS = {
    "requiredExperience": "required_experience",
    "jobResponsibilities": "responsibilities",
    "preferredQualifications": "preferred_qualifications",
    "companyCulture": "company_culture",
    "hiringProcess": "hiring_process",
    "keyTechnologies": "key_technologies",
}


def _insights_from(payload: dict[str, Any]) -> JobInsights:
    return JobInsights(**{attr: string_list(payload.get(key)) for key, attr in INSIGHT_FIELDS.items()})


def _merge_insights(insights: JobInsights, payload: dict[str, Any]) -> JobInsights:
    updates = {
        attr: merge_unique(getattr(insights, attr), string_list(payload.get(key)))
        for key, attr in INSIGHT_FIELDS.items()
    }
    return insights.model_copy(update=updates)


async def research_job(
    job_url: str,
    linkedin_url: str | None,
    client: GenerationClient,
    *,
    fetcher: PageFetcher | None = None,
) -> StageOutcome[JobResearch]:
    """Extract the job target. Only the primary extraction is fatal."""
    log = StepLog(Stage.JOB_RESEARCH)
    log.note(
        "Starting analysis of the job posting URL to understand role requirements and company context.",
        job_url,
    )

    page: FetchedPage | None = None
    if fetcher is not None:
        try:
            page = await fetcher.fetch(job_url)
            log.note(f"Fetched posting page ({page.board}, {len(page.text)} characters).", page.final_url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.note(f"Could not fetch the posting page ({exc}); analyzing from the URL alone.", job_url)

    try:
        payload = await client.call(
            prompts.job_research_prompt(job_url, page),
            required_keys=("companyName", "jobTitle"),
        )
    except GenerationError as exc:
        raise log.fail(f"Failed to analyze job posting: {exc}") from exc

    details = JobDetails(
        company=clean_text(payload.get("companyName")),
        title=clean_text(payload.get("jobTitle")),
        location=clean_text(payload.get("location")),
        required_skills=string_list(payload.get("requiredSkills")),
    )
    if not details.company and not details.title:
        raise log.fail("Failed to analyze job posting: no company or job title could be identified")

    insights = _insights_from(payload)
    log.note(f"Extracted job details for {details.title or 'the role'} at {details.company or 'the company'}.", job_url)

    if linkedin_url:
        log.note("LinkedIn URL provided. Extracting additional company and role information.", linkedin_url)
        try:
            extra = await client.call(prompts.linkedin_job_prompt(linkedin_url, details))
            insights = _merge_insights(insights, extra)
            insights = insights.model_copy(update={"linkedin_notes": clean_text(extra.get("notes")) or None})
            log.note("Added LinkedIn company and role context.", linkedin_url)
        except GenerationError as exc:
            log.note(
                f"Had difficulty extracting LinkedIn data: {exc}. Continuing with job posting data only.",
                linkedin_url,
            )

    if details.company:
        try:
            career = await client.call(prompts.career_page_prompt(details))
            details = details.model_copy(
                update={"required_skills": merge_unique(details.required_skills, string_list(career.get("requiredSkills")))}
            )
            insights = _merge_insights(insights, career)
            log.note(f"Merged career page information for {details.company}.")
        except GenerationError as exc:
            log.note(f"Career page research unavailable ({exc}); keeping posting data.")

    log.note("Finalized job analysis with all collected information.", job_url)
    return log.ok(JobResearch(details=details, insights=insights))


def placeholder_company_info(company: str, title: str) -> CompanyInfo:
    company = company or "the company"
    title = title or "this role"
    return CompanyInfo(
        description=f"Company research for {company} is unavailable right now.",
        culture=[f"Culture information for {company} is unavailable"],
        business_focus=[f"Business focus information for {company} is unavailable"],
        team_info=[f"Team information for the {title} role is unavailable"],
        role_details=[f"Role details for {title} are unavailable"],
        useful_urls=[],
    )


async def research_company(company: str, title: str, client: GenerationClient) -> StageOutcome[CompanyInfo]:
    log = StepLog(Stage.COMPANY_RESEARCH)
    log.note(f"Researching {company or 'the company'} and the {title or 'target'} role.")
    try:
        payload = await client.call(prompts.company_research_prompt(company, title), required_keys=("description",))
    except GenerationError as exc:
        logger.warning(
            "company research degraded",
            extra={"extra": {"company": company, "error": str(exc)}},
        )
        log.note(f"Company research unavailable ({exc}); using placeholder company information.")
        return log.degraded(placeholder_company_info(company, title))

    info = CompanyInfo(
        description=clean_text(payload.get("description")),
        culture=string_list(payload.get("culture")),
        business_focus=string_list(payload.get("businessFocus")),
        team_info=string_list(payload.get("teamInfo")),
        role_details=string_list(payload.get("roleDetails")),
        useful_urls=string_list(payload.get("usefulUrls"), max_items=5),
    )
    if not info.description:
        info = info.model_copy(update={"description": placeholder_company_info(company, title).description})
    log.note("Compiled research on the company and role.", *info.useful_urls)
    return log.ok(info)


async def research_interview_patterns(
    company: str,
    title: str,
    client: GenerationClient,
    *,
    hiring_process: list[str] | None = None,
) -> StageOutcome[list[RoundDescriptor]]:
    log = StepLog(Stage.INTERVIEW_PATTERN_RESEARCH)
    log.note(f"Researching interview patterns for {title or 'the role'} at {company or 'the company'}.")
    try:
        payload = await client.call(
            prompts.interview_patterns_prompt(company, title, hiring_process or []),
            required_keys=("interviewRounds",),
        )
    except GenerationError as exc:
        log.note(f"Interview pattern research unavailable ({exc}); using the standard interview rounds.")
        return log.degraded(list(DEFAULT_ROUNDS))

    rounds: list[RoundDescriptor] = []
    raw_rounds = payload.get("interviewRounds")
    for item in raw_rounds if isinstance(raw_rounds, list) else []:
        if isinstance(item, dict):
            name = clean_text(item.get("name") or item.get("roundName"), max_len=200)
            focus = clean_text(item.get("focus"))
            fmt = clean_text(item.get("format"))
        else:
            name, focus, fmt = clean_text(item, max_len=200), "", ""
        if name:
            rounds.append(RoundDescriptor(name=name, focus=focus, format=fmt))

    if not rounds:
        log.note("No interview rounds were identified; using the standard interview rounds.")
        return log.degraded(list(DEFAULT_ROUNDS))

    log.note(f"Identified {len(rounds)} interview rounds: {', '.join(r.name for r in rounds)}.")
    return log.ok(rounds)
