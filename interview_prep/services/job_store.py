from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from interview_prep.core.config import Settings, get_settings
from interview_prep.core.enums import Stage
from interview_prep.core.errors import NotFoundError, PersistenceError
from interview_prep.core.logging import get_logger
from interview_prep.core.models import (
    Artifact,
    JobInputs,
    PipelineJob,
    PrepSummary,
    ReasoningStep,
    utcnow,
)
from interview_prep.db import crud
from interview_prep.db.models import InterviewPrep

logger = get_logger(__name__)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything stored is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class JobStore:
    """In-flight jobs in memory, completed artifacts in the database.

    Each job id has a single writer (the task running it), so updates are a
    plain copy-and-replace of the job model.
    """

    def __init__(self, session_factory: sessionmaker, settings: Settings | None = None) -> None:
        self.session_factory = session_factory
        self.settings = settings or get_settings()
        self._jobs: dict[str, PipelineJob] = {}

    @property
    def expiry(self) -> timedelta:
        return timedelta(days=self.settings.prep_expiry_days)

    @contextmanager
    def session(self) -> Iterator[Session]:
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError(f"Database operation failed: {exc}") from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def create(self, job_id: str, inputs: JobInputs, *, user_id: str | None = None) -> PipelineJob:
        now = utcnow()
        job = PipelineJob(
            id=job_id,
            state=Stage.JOB_RESEARCH,
            created_at=now,
            expires_at=now + self.expiry,
            inputs=inputs,
            user_id=user_id,
        )
        self._jobs[job_id] = job
        return job

    def update(self, job_id: str, **fields) -> PipelineJob:
        current = self._jobs.get(job_id)
        if current is None:
            raise NotFoundError(f"Job {job_id} not found")
        updated = current.model_copy(update=fields)
        self._jobs[job_id] = updated
        return updated

    def append_steps(self, job_id: str, steps: list[ReasoningStep]) -> PipelineJob:
        current = self._jobs.get(job_id)
        if current is None:
            raise NotFoundError(f"Job {job_id} not found")
        return self.update(job_id, reasoning_log=[*current.reasoning_log, *steps])

    def get(self, job_id: str) -> PipelineJob | None:
        job = self._jobs.get(job_id)
        if job is not None:
            if job.is_terminal and as_utc(job.expires_at) <= utcnow():
                return None
            return job

        with self.session() as db:
            row = crud.get_interview_prep(db, job_id)
            if row is None or as_utc(row.expires_at) <= utcnow():
                return None
            return self._job_from_row(row)

    def get_artifact(self, job_id: str) -> Artifact | None:
        job = self.get(job_id)
        return job.result if job else None

    def has_durable(self, db: Session, job_id: str) -> bool:
        row = crud.get_interview_prep(db, job_id)
        return row is not None and as_utc(row.expires_at) > utcnow()

    def save_artifact(self, job: PipelineJob, artifact: Artifact) -> datetime:
        """Write the finished artifact; returns its expiry."""
        completed_at = utcnow()
        expires_at = completed_at + self.expiry
        with self.session() as db:
            crud.upsert_interview_prep(
                db,
                prep_id=job.id,
                user_id=job.user_id,
                job_title=artifact.job_details.title,
                company=artifact.job_details.company,
                job_url=job.inputs.job_url,
                linkedin_url=job.inputs.linkedin_url,
                resume_text=job.inputs.resume_text,
                data=artifact.model_dump(mode="json", by_alias=True),
                created_at=job.created_at,
                expires_at=expires_at,
            )
        logger.info("artifact saved", extra={"extra": {"job_id": job.id}})
        return expires_at

    def history(self, limit: int | None = None, *, user_id: str | None = None) -> list[PrepSummary]:
        limit = limit or self.settings.history_default_limit
        with self.session() as db:
            rows = crud.list_recent_interview_preps(db, now=utcnow(), limit=limit, user_id=user_id)
            return [
                PrepSummary(
                    id=row.id,
                    job_title=row.job_title,
                    company=row.company,
                    created_at=as_utc(row.created_at),
                    expires_at=as_utc(row.expires_at),
                )
                for row in rows
            ]

    def sweep_expired(self) -> int:
        now = utcnow()
        with self.session() as db:
            deleted = set(crud.delete_expired_interview_preps(db, now=now))

        for job_id, job in list(self._jobs.items()):
            if job.is_terminal and as_utc(job.expires_at) <= now:
                del self._jobs[job_id]
                deleted.add(job_id)

        if deleted:
            logger.info("expired preparations swept", extra={"extra": {"count": len(deleted)}})
        return len(deleted)

    def _job_from_row(self, row: InterviewPrep) -> PipelineJob:
        artifact = Artifact.model_validate(row.data or {})
        return PipelineJob(
            id=row.id,
            state=Stage.COMPLETED,
            created_at=as_utc(row.created_at),
            expires_at=as_utc(row.expires_at),
            inputs=JobInputs(
                job_url=row.job_url or "",
                linkedin_url=row.linkedin_url,
                resume_text=row.resume_text or "",
            ),
            result=artifact,
            reasoning_log=artifact.reasoning_log,
            user_id=row.user_id,
        )
