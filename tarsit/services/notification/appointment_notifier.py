# ============================================================================
# tarsit/services/notification/appointment_notifier.py
# Fire-and-forget hand-off of appointment emails to the Celery worker
# ============================================================================
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from tarsit.config.settings import settings
from tarsit.models.appointment import Appointment, AppointmentStatus

logger = logging.getLogger(__name__)


class AppointmentEvent(str, Enum):
    REQUESTED = "requested"   # to the business owner
    CONFIRMED = "confirmed"
    CANCELED = "canceled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"
    REMINDER = "reminder"


# Status reached by a transition -> email sent to the customer
STATUS_EVENTS = {
    AppointmentStatus.CONFIRMED: AppointmentEvent.CONFIRMED,
    AppointmentStatus.CANCELED: AppointmentEvent.CANCELED,
    AppointmentStatus.COMPLETED: AppointmentEvent.COMPLETED,
    AppointmentStatus.NO_SHOW: AppointmentEvent.NO_SHOW,
}


class AppointmentNotifier:
    """Queues appointment emails; never lets a delivery problem reach the caller"""

    @staticmethod
    def notify(appointment_id: UUID, event: AppointmentEvent) -> bool:
        """
        Queue an email for an appointment event.

        Returns True when the task was queued. Failures are logged and
        swallowed so the state change that triggered them still stands.
        """
        if not settings.NOTIFICATIONS_ENABLED:
            return False

        try:
            from tarsit.tasks.appointment_tasks import send_appointment_email

            send_appointment_email.delay(str(appointment_id), event.value)
            logger.info(f"Queued '{event.value}' email for appointment {appointment_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to queue '{event.value}' email for appointment {appointment_id}: {e}")
            return False

    @staticmethod
    def notify_status(appointment_id: UUID, status: AppointmentStatus) -> bool:
        """Queue the email matching a new status, if that status has one"""
        event = STATUS_EVENTS.get(status)
        if event is None:
            return False
        return AppointmentNotifier.notify(appointment_id, event)

    @staticmethod
    def queue_due_reminders(db: Session, now: Optional[datetime] = None) -> int:
        """
        Queue reminders for confirmed appointments starting within the
        reminder window that have not had one yet. Returns how many were queued.
        """
        now = now or datetime.now(timezone.utc)
        horizon = now + timedelta(hours=settings.REMINDER_LEAD_HOURS)

        due = db.query(Appointment).filter(
            Appointment.status == AppointmentStatus.CONFIRMED,
            Appointment.date >= now,
            Appointment.date <= horizon,
            Appointment.reminder_sent_at.is_(None)
        ).all()

        queued = 0
        for appointment in due:
            if AppointmentNotifier.notify(appointment.id, AppointmentEvent.REMINDER):
                appointment.reminder_sent_at = now
                queued += 1

        db.commit()
        if queued:
            logger.info(f"Queued {queued} appointment reminders")
        return queued
