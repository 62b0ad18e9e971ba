import pytest

from interview_prep.core.errors import NotFoundError
from interview_prep.core.models import Artifact, CandidateHighlights, CompanyInfo, JobDetails, JobInputs
from interview_prep.db import crud
from interview_prep.services.job_store import JobStore
from interview_prep.services.responses import list_responses, save_response


def _store_with_prep(session_factory, settings) -> JobStore:
    store = JobStore(session_factory, settings)
    job = store.create("prep-1", JobInputs(job_url="https://acme.example.com/jobs/1"))
    store.save_artifact(
        job,
        Artifact(
            job_details=JobDetails(company="Acme Corp", title="Senior Backend Engineer"),
            company_info=CompanyInfo(),
            candidate_highlights=CandidateHighlights(),
        ),
    )
    return store


def test_saving_twice_keeps_one_record_with_latest_values(session_factory, settings):
    store = _store_with_prep(session_factory, settings)

    save_response(store, job_id="prep-1", question_id="q-1", round_id="r-1", situation="s1", action="a1", result="r1")
    saved = save_response(
        store, job_id="prep-1", question_id="q-1", round_id="r-1", situation="s2", action="a2", result="r2"
    )

    responses = list_responses(store, "prep-1")
    assert len(responses) == 1
    assert responses[0].situation == "s2"
    assert responses[0].action == "a2"
    assert responses[0].result == "r2"
    assert saved.job_id == "prep-1"


def test_distinct_rounds_are_distinct_records(session_factory, settings):
    store = _store_with_prep(session_factory, settings)

    save_response(store, job_id="prep-1", question_id="q-1", round_id="r-1", situation="", action="", result="")
    save_response(store, job_id="prep-1", question_id="q-1", round_id="r-2", situation="", action="", result="")

    assert len(list_responses(store, "prep-1")) == 2


def test_unknown_job_is_not_found(session_factory, settings):
    store = JobStore(session_factory, settings)

    with pytest.raises(NotFoundError):
        save_response(store, job_id="nope", question_id="q", round_id="r", situation="", action="", result="")

    assert list_responses(store, "nope") == []


def test_deleting_prep_removes_its_responses(session_factory, settings):
    store = _store_with_prep(session_factory, settings)
    save_response(store, job_id="prep-1", question_id="q-1", round_id="r-1", situation="s", action="a", result="r")

    with store.session() as db:
        assert crud.delete_interview_prep(db, "prep-1") is True

    assert list_responses(store, "prep-1") == []


def test_listing_another_users_responses_is_not_found(session_factory, settings):
    store = JobStore(session_factory, settings)
    job = store.create("prep-2", JobInputs(job_url="https://acme.example.com/jobs/2"), user_id="owner")
    store.save_artifact(
        job,
        Artifact(
            job_details=JobDetails(company="Acme Corp", title="Staff Engineer"),
            company_info=CompanyInfo(),
            candidate_highlights=CandidateHighlights(),
        ),
    )
    save_response(store, job_id="prep-2", question_id="q-1", round_id="r-1", situation="s", action="a", result="r")

    assert len(list_responses(store, "prep-2", user_id="owner")) == 1
    with pytest.raises(NotFoundError):
        list_responses(store, "prep-2", user_id="someone-else")
