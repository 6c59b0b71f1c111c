"""Celery application factory"""
from celery import Celery
from celery.schedules import crontab

from tarsit.config.settings import get_settings

settings = get_settings()


def create_celery_app() -> Celery:
    """Create and configure the Celery app used by the worker and the API"""
    app = Celery(
        "tarsit",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=["tarsit.tasks.appointment_tasks"],
    )

    app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer="json",
        accept_content=["json"],
        timezone="UTC",
        enable_utc=True,
        task_acks_late=True,
        worker_prefetch_multiplier=1,
        broker_connection_retry_on_startup=True,
        beat_schedule={
            "send-appointment-reminders": {
                "task": "tarsit.tasks.appointment_tasks.send_appointment_reminders",
                "schedule": crontab(minute=0),  # hourly
            },
        },
    )

    return app


celery_app = create_celery_app()
