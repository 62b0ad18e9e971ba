from celery import Celery

from interview_prep.core.config import get_settings
from interview_prep.workers.schedules import CELERY_BEAT_SCHEDULE

settings = get_settings()

celery = Celery(
    "interview_prep",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["interview_prep.workers.tasks"],
)

celery.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    beat_schedule=CELERY_BEAT_SCHEDULE,
)
