from interview_prep.core.errors import NotFoundError
from interview_prep.core.models import UserResponse, utcnow
from interview_prep.db import crud
from interview_prep.db.models import UserResponseRecord
from interview_prep.services.job_store import JobStore, as_utc


def _to_response(record: UserResponseRecord) -> UserResponse:
    return UserResponse(
        job_id=record.interview_prep_id,
        question_id=record.question_id,
        round_id=record.round_id,
        situation=record.situation,
        action=record.action,
        result=record.result,
        updated_at=as_utc(record.updated_at),
    )


def save_response(
    store: JobStore,
    *,
    job_id: str,
    question_id: str,
    round_id: str,
    situation: str,
    action: str,
    result: str,
    user_id: str | None = None,
) -> UserResponse:
    """Upsert the answer for ``(job_id, question_id, round_id)``."""
    with store.session() as db:
        if not store.has_durable(db, job_id):
            raise NotFoundError(f"Interview preparation {job_id} not found")
        record = crud.upsert_user_response(
            db,
            prep_id=job_id,
            question_id=question_id,
            round_id=round_id,
            user_id=user_id,
            situation=situation,
            action=action,
            result=result,
            updated_at=utcnow(),
        )
        return _to_response(record)


def list_responses(store: JobStore, job_id: str, *, user_id: str | None = None) -> list[UserResponse]:
    """Answers saved for ``job_id``; a preparation owned by someone else is not found."""
    with store.session() as db:
        prep = crud.get_interview_prep(db, job_id)
        if user_id is not None and prep is not None and prep.user_id and prep.user_id != user_id:
            raise NotFoundError(f"Interview preparation {job_id} not found")
        return [_to_response(record) for record in crud.list_user_responses(db, prep_id=job_id)]
