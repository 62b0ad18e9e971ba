from datetime import timedelta

from interview_prep.core.models import utcnow
from interview_prep.db import crud
from interview_prep.workers.celery_app import celery
from interview_prep.workers.schedules import CELERY_BEAT_SCHEDULE
from interview_prep.workers.tasks import sweep_expired_preps_sync


def test_beat_schedule_runs_sweep_task():
    entry = CELERY_BEAT_SCHEDULE["sweep-expired-interview-preps"]
    assert entry["task"] == "interview_prep.workers.tasks.sweep_expired_preps"
    assert entry["task"] in celery.tasks


def test_sweep_task_deletes_expired_rows(session_factory):
    now = utcnow()
    db = session_factory()
    try:
        for prep_id, offset in (("expired", -1), ("fresh", 10)):
            crud.upsert_interview_prep(
                db,
                prep_id=prep_id,
                user_id=None,
                job_title="Senior Backend Engineer",
                company="Acme Corp",
                job_url=None,
                linkedin_url=None,
                resume_text=None,
                data={},
                created_at=now - timedelta(days=30),
                expires_at=now + timedelta(days=offset),
            )
        db.commit()
    finally:
        db.close()

    result = sweep_expired_preps_sync(session_factory)

    assert result == {"ok": True, "deleted": 1}
    db = session_factory()
    try:
        assert crud.get_interview_prep(db, "expired") is None
        assert crud.get_interview_prep(db, "fresh") is not None
    finally:
        db.close()
