from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from interview_prep.db import models


def upsert_interview_prep(
    db: Session,
    *,
    prep_id: str,
    user_id: str | None,
    job_title: str,
    company: str,
    job_url: str | None,
    linkedin_url: str | None,
    resume_text: str | None,
    data: dict,
    created_at: datetime,
    expires_at: datetime,
) -> models.InterviewPrep:
    prep = db.get(models.InterviewPrep, prep_id)
    if prep:
        prep.user_id = user_id or prep.user_id
        prep.job_title = job_title
        prep.company = company
        prep.job_url = job_url
        prep.linkedin_url = linkedin_url
        prep.resume_text = resume_text
        prep.data = data
        prep.expires_at = expires_at
        db.flush()
        return prep

    prep = models.InterviewPrep(
        id=prep_id,
        user_id=user_id,
        job_title=job_title,
        company=company,
        job_url=job_url,
        linkedin_url=linkedin_url,
        resume_text=resume_text,
        data=data,
        created_at=created_at,
        expires_at=expires_at,
    )
    db.add(prep)
    db.flush()
    return prep


def get_interview_prep(db: Session, prep_id: str) -> Optional[models.InterviewPrep]:
    return db.get(models.InterviewPrep, prep_id)


def list_recent_interview_preps(
    db: Session,
    *,
    now: datetime,
    limit: int = 10,
    user_id: str | None = None,
) -> list[models.InterviewPrep]:
    stmt = select(models.InterviewPrep).where(models.InterviewPrep.expires_at > now)
    if user_id:
        stmt = stmt.where(models.InterviewPrep.user_id == user_id)
    stmt = stmt.order_by(models.InterviewPrep.created_at.desc()).limit(limit)
    return list(db.scalars(stmt))


def delete_interview_prep(db: Session, prep_id: str) -> bool:
    prep = db.get(models.InterviewPrep, prep_id)
    if not prep:
        return False
    db.execute(delete(models.UserResponseRecord).where(models.UserResponseRecord.interview_prep_id == prep_id))
    db.delete(prep)
    db.flush()
    return True


def delete_expired_interview_preps(db: Session, *, now: datetime) -> list[str]:
    expired_ids = list(
        db.scalars(select(models.InterviewPrep.id).where(models.InterviewPrep.expires_at <= now))
    )
    if not expired_ids:
        return []
    db.execute(
        delete(models.UserResponseRecord).where(models.UserResponseRecord.interview_prep_id.in_(expired_ids))
    )
    db.execute(delete(models.InterviewPrep).where(models.InterviewPrep.id.in_(expired_ids)))
    db.flush()
    return expired_ids


def upsert_user_response(
    db: Session,
    *,
    prep_id: str,
    question_id: str,
    round_id: str,
    user_id: str | None,
    situation: str,
    action: str,
    result: str,
    updated_at: datetime,
) -> models.UserResponseRecord:
    stmt = select(models.UserResponseRecord).where(
        models.UserResponseRecord.interview_prep_id == prep_id,
        models.UserResponseRecord.question_id == question_id,
        models.UserResponseRecord.round_id == round_id,
    )
    record = db.scalar(stmt)
    if record:
        record.situation = situation
        record.action = action
        record.result = result
        record.user_id = user_id or record.user_id
        record.updated_at = updated_at
        db.flush()
        return record

    record = models.UserResponseRecord(
        interview_prep_id=prep_id,
        question_id=question_id,
        round_id=round_id,
        user_id=user_id,
        situation=situation,
        action=action,
        result=result,
        created_at=updated_at,
        updated_at=updated_at,
    )
    db.add(record)
    db.flush()
    return record


def list_user_responses(db: Session, *, prep_id: str) -> list[models.UserResponseRecord]:
    stmt = (
        select(models.UserResponseRecord)
        .where(models.UserResponseRecord.interview_prep_id == prep_id)
        .order_by(models.UserResponseRecord.updated_at.desc(), models.UserResponseRecord.id.desc())
    )
    return list(db.scalars(stmt))
