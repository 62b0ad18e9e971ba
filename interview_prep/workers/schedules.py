from celery.schedules import crontab

CELERY_BEAT_SCHEDULE = {
    "sweep-expired-interview-preps": {
        "task": "interview_prep.workers.tasks.sweep_expired_preps",
        "schedule": crontab(minute=0, hour="*/6"),
    },
}
