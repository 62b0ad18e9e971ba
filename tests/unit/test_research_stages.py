import asyncio

import httpx
import pytest

from interview_prep.core.enums import OutcomeStatus, Stage
from interview_prep.core.outcome import StageFailure
from interview_prep.services.page_fetcher import PageFetcher
from interview_prep.services.research import (
    DEFAULT_ROUNDS,
    research_company,
    research_interview_patterns,
    research_job,
)

JOB_URL = "https://boards.greenhouse.io/acme/jobs/42"

ACME_POSTING = {
    "companyName": "Acme Corp",
    "jobTitle": "Senior Backend Engineer",
    "location": "Remote (US)",
    "requiredSkills": ["Python", "PostgreSQL", "Kafka"],
    "jobResponsibilities": ["Own the payments API"],
    "hiringProcess": ["Recruiter screen", "System design"],
}


def test_research_job_extracts_details_and_merges_career_page(make_client):
    client = make_client(
        {
            "job_research": ACME_POSTING,
            "career_page": {
                "requiredSkills": ["python", "Terraform"],
                "hiringProcess": ["System design", "Onsite loop"],
            },
        }
    )

    outcome = asyncio.run(research_job(JOB_URL, None, client))

    assert outcome.status == OutcomeStatus.OK
    details = outcome.data.details
    assert details.company == "Acme Corp"
    assert details.title == "Senior Backend Engineer"
    assert details.required_skills == ["Python", "PostgreSQL", "Kafka", "Terraform"]
    assert outcome.data.insights.hiring_process == ["Recruiter screen", "System design", "Onsite loop"]
    assert all(step.stage_name == "Job Researcher" for step in outcome.steps)
    assert JOB_URL in outcome.steps[0].sources_consulted


def test_research_job_failure_is_fatal(make_client):
    client = make_client({"job_research": RuntimeError("upstream 500")})

    with pytest.raises(StageFailure) as exc:
        asyncio.run(research_job(JOB_URL, None, client))

    assert exc.value.stage == Stage.JOB_RESEARCH
    assert "upstream 500" in exc.value.message
    assert exc.value.steps[-1].note == exc.value.message


def test_research_job_without_company_or_title_is_fatal(make_client):
    client = make_client({"job_research": {"companyName": "", "jobTitle": ""}})

    with pytest.raises(StageFailure):
        asyncio.run(research_job(JOB_URL, None, client))


def test_research_job_linkedin_failure_is_noted_not_fatal(make_client):
    client = make_client(
        {
            "job_research": ACME_POSTING,
            "linkedin_job": RuntimeError("linkedin blocked"),
            "career_page": RuntimeError("no careers page"),
        }
    )

    outcome = asyncio.run(research_job(JOB_URL, "https://www.linkedin.com/company/acme", client))

    assert outcome.status == OutcomeStatus.OK
    assert outcome.data.insights.linkedin_notes is None
    notes = " ".join(step.note for step in outcome.steps)
    assert "LinkedIn" in notes
    assert "linkedin blocked" in notes
    assert "no careers page" in notes


def test_research_job_includes_fetched_posting_text(make_client):
    client = make_client({"job_research": ACME_POSTING})
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, text="<h1>Senior Backend Engineer</h1><p>Kafka at scale</p>")
    )

    asyncio.run(research_job(JOB_URL, None, client, fetcher=PageFetcher(transport=transport)))

    prompt = client.provider.prompts[0]
    assert "Kafka at scale" in prompt


def test_research_job_fetch_failure_falls_back_to_url(make_client):
    client = make_client({"job_research": ACME_POSTING})

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    outcome = asyncio.run(
        research_job(JOB_URL, None, client, fetcher=PageFetcher(transport=httpx.MockTransport(refuse)))
    )

    assert outcome.data.details.company == "Acme Corp"
    assert any("Could not fetch the posting page" in step.note for step in outcome.steps)
    assert "Posting text: unavailable" in client.provider.prompts[0]


def test_research_company_failure_uses_placeholder_naming_company(make_client):
    client = make_client({"company_research": RuntimeError("timeout")})

    outcome = asyncio.run(research_company("Acme Corp", "Senior Backend Engineer", client))

    assert outcome.degraded
    assert "Acme Corp" in outcome.data.description
    assert outcome.data.culture and outcome.data.business_focus
    assert outcome.data.team_info and outcome.data.role_details
    assert any("timeout" in step.note for step in outcome.steps)


def test_research_company_success(make_client):
    client = make_client(
        {
            "company_research": {
                "description": "Acme Corp builds payments infrastructure.",
                "culture": ["Customer obsession"],
                "businessFocus": ["Payments"],
                "teamInfo": ["Platform team of 12"],
                "roleDetails": ["Owns the ledger service"],
                "usefulUrls": ["https://acme.example.com/about"],
            }
        }
    )

    outcome = asyncio.run(research_company("Acme Corp", "Senior Backend Engineer", client))

    assert outcome.status == OutcomeStatus.OK
    assert outcome.data.business_focus == ["Payments"]
    assert outcome.steps[-1].sources_consulted == ["https://acme.example.com/about"]


def test_research_interview_patterns_defaults_when_empty(make_client):
    client = make_client({"interview_patterns": {"interviewRounds": []}})

    outcome = asyncio.run(research_interview_patterns("Acme Corp", "Senior Backend Engineer", client))

    assert outcome.degraded
    assert [r.name for r in outcome.data] == [
        "Initial Screen",
        "Technical Assessment",
        "Behavioral Interview",
        "Culture Fit",
    ]


def test_research_interview_patterns_defaults_on_failure(make_client):
    client = make_client({"interview_patterns": "not json at all"})

    outcome = asyncio.run(research_interview_patterns("Acme Corp", "Senior Backend Engineer", client))

    assert outcome.degraded
    assert outcome.data == list(DEFAULT_ROUNDS)


def test_research_interview_patterns_parses_rounds(make_client):
    client = make_client(
        {
            "interview_patterns": {
                "interviewRounds": [
                    {"name": "Recruiter Call", "focus": "Motivation", "format": "30 min phone"},
                    {"name": "System Design", "focus": "Architecture", "format": "Whiteboard"},
                    {"name": "", "focus": "ignored"},
                ]
            }
        }
    )

    outcome = asyncio.run(research_interview_patterns("Acme Corp", "Senior Backend Engineer", client))

    assert outcome.status == OutcomeStatus.OK
    assert [r.name for r in outcome.data] == ["Recruiter Call", "System Design"]
