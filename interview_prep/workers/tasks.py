from sqlalchemy.orm import sessionmaker

from interview_prep.core.config import get_settings
from interview_prep.core.logging import get_logger
from interview_prep.db.session import get_session_factory
from interview_prep.services.job_store import JobStore
from interview_prep.workers.celery_app import celery

logger = get_logger(__name__)


def sweep_expired_preps_sync(session_factory: sessionmaker | None = None) -> dict:
    # the worker has no in-flight jobs; only durable rows are swept here
    store = JobStore(session_factory or get_session_factory(), get_settings())
    deleted = store.sweep_expired()
    logger.info("scheduled sweep finished", extra={"extra": {"deleted": deleted}})
    return {"ok": True, "deleted": deleted}


@celery.task(name="interview_prep.workers.tasks.sweep_expired_preps")
def sweep_expired_preps():
    return sweep_expired_preps_sync()
