from datetime import timedelta

import pytest

from interview_prep.core.enums import JobStatus, Stage
from interview_prep.core.errors import NotFoundError
from interview_prep.core.models import (
    Artifact,
    CandidateHighlights,
    CompanyInfo,
    JobDetails,
    JobInputs,
    ReasoningStep,
    utcnow,
)
from interview_prep.db import crud
from interview_prep.services.job_store import JobStore


def _inputs() -> JobInputs:
    return JobInputs(job_url="https://acme.example.com/jobs/1", resume_text="Jordan Lee")


def _artifact(title: str = "Senior Backend Engineer") -> Artifact:
    return Artifact(
        job_details=JobDetails(company="Acme Corp", title=title),
        company_info=CompanyInfo(description="Acme Corp builds payments infrastructure."),
        candidate_highlights=CandidateHighlights(relevant_points=["Reduced latency by 40% at Acme Corp"]),
        reasoning_log=[ReasoningStep(stage_name="Pipeline", note="done")],
    )


def _insert(store: JobStore, prep_id: str, *, created_days_ago: int, expires_in_days: int, user_id="local-user"):
    now = utcnow()
    with store.session() as db:
        crud.upsert_interview_prep(
            db,
            prep_id=prep_id,
            user_id=user_id,
            job_title=f"Role {prep_id}",
            company="Acme Corp",
            job_url=None,
            linkedin_url=None,
            resume_text=None,
            data=_artifact(f"Role {prep_id}").model_dump(mode="json", by_alias=True),
            created_at=now - timedelta(days=created_days_ago),
            expires_at=now + timedelta(days=expires_in_days),
        )


def test_create_and_update_in_memory(session_factory, settings):
    store = JobStore(session_factory, settings)
    job = store.create("job-1", _inputs(), user_id="local-user")

    assert job.state == Stage.JOB_RESEARCH
    assert job.status == JobStatus.PROCESSING
    assert job.expires_at - job.created_at == timedelta(days=30)

    updated = store.update("job-1", state=Stage.COMPANY_RESEARCH)
    assert store.get("job-1") is updated
    assert job.state == Stage.JOB_RESEARCH


def test_append_steps_keeps_existing_log(session_factory, settings):
    store = JobStore(session_factory, settings)
    store.create("job-1", _inputs())
    first = ReasoningStep(stage_name="Job Researcher", note="one")
    second = ReasoningStep(stage_name="Job Researcher", note="two")

    store.append_steps("job-1", [first])
    job = store.append_steps("job-1", [second])

    assert [step.note for step in job.reasoning_log] == ["one", "two"]


def test_update_unknown_job_raises(session_factory, settings):
    store = JobStore(session_factory, settings)
    with pytest.raises(NotFoundError):
        store.update("missing", state=Stage.FAILED)


def test_durable_hit_is_reported_completed(session_factory, settings):
    writer = JobStore(session_factory, settings)
    job = writer.create("job-1", _inputs(), user_id="local-user")
    expires_at = writer.save_artifact(job, _artifact())

    reader = JobStore(session_factory, settings)
    loaded = reader.get("job-1")

    assert loaded is not None
    assert loaded.status == JobStatus.COMPLETED
    assert loaded.result.job_details.company == "Acme Corp"
    assert loaded.reasoning_log[0].note == "done"
    assert abs((loaded.expires_at - expires_at).total_seconds()) < 1
    assert reader.get("unknown") is None


def test_history_is_newest_first_and_excludes_expired(session_factory, settings):
    store = JobStore(session_factory, settings)
    _insert(store, "old", created_days_ago=5, expires_in_days=25)
    _insert(store, "new", created_days_ago=1, expires_in_days=29)
    _insert(store, "expired", created_days_ago=31, expires_in_days=-1)
    _insert(store, "someone-else", created_days_ago=0, expires_in_days=30, user_id="other-user")

    history = store.history(user_id="local-user")

    assert [entry.id for entry in history] == ["new", "old"]
    assert history[0].job_title == "Role new"
    assert store.get("expired") is None
    assert len(store.history(1, user_id="local-user")) == 1


def test_sweep_removes_expired_rows_and_terminal_jobs(session_factory, settings):
    store = JobStore(session_factory, settings)
    _insert(store, "expired", created_days_ago=31, expires_in_days=-1)
    _insert(store, "fresh", created_days_ago=1, expires_in_days=29)
    store.create("done", _inputs())
    store.update("done", state=Stage.FAILED, expires_at=utcnow() - timedelta(seconds=1))
    store.create("running", _inputs())
    store.update("running", expires_at=utcnow() - timedelta(seconds=1))

    removed = store.sweep_expired()

    assert removed == 2
    with store.session() as db:
        assert crud.get_interview_prep(db, "expired") is None
        assert crud.get_interview_prep(db, "fresh") is not None
    assert store.get("done") is None
    assert store.get("running") is not None


def test_expired_terminal_job_in_memory_is_not_returned(session_factory, settings):
    store = JobStore(session_factory, settings)
    store.create("done", _inputs())
    store.update("done", state=Stage.COMPLETED, result=_artifact(), expires_at=utcnow() - timedelta(seconds=1))
    store.create("running", _inputs())
    store.update("running", state=Stage.QUALITY_CHECK, expires_at=utcnow() - timedelta(seconds=1))

    assert store.get("done") is None
    assert store.get_artifact("done") is None
    assert store.get("running").state == Stage.QUALITY_CHECK
