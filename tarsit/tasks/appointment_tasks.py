# ===== tarsit/tasks/appointment_tasks.py =====
from uuid import UUID
import logging

from tarsit.config.celery_config import celery_app
from tarsit.config.database import SessionLocal
from tarsit.models.appointment import Appointment
from tarsit.services.email.email_service import EmailService
from tarsit.services.notification.appointment_notifier import AppointmentEvent, AppointmentNotifier
from tarsit.utils.time_utils import ensure_utc, get_zone

logger = logging.getLogger(__name__)


def build_email_details(appointment: Appointment, event: str) -> dict:
    """Recipient and template values for an appointment email"""
    business = appointment.business
    local_start = ensure_utc(appointment.date).astimezone(get_zone(business.timezone))

    if event == AppointmentEvent.REQUESTED.value:
        recipient = business.owner
    else:
        recipient = appointment.user

    return {
        "to_email": recipient.email,
        "details": {
            "recipient_name": recipient.first_name or "",
            "business_name": business.name,
            "when": local_start.strftime("%A, %B %d, %Y at %I:%M %p"),
            "service_name": appointment.service.name if appointment.service else "",
            "reason": appointment.cancel_reason or "",
        },
    }


@celery_app.task(bind=True, max_retries=3)
def send_appointment_email(self, appointment_id: str, event: str):
    """
    Send an appointment lifecycle email

    Args:
        appointment_id: Appointment ID
        event: One of the AppointmentEvent values
    """
    db = SessionLocal()
    try:
        appointment = db.query(Appointment).filter(Appointment.id == UUID(appointment_id)).first()
        if not appointment:
            logger.warning(f"Appointment {appointment_id} no longer exists, skipping '{event}' email")
            return {"status": "skipped", "appointment_id": appointment_id}

        payload = build_email_details(appointment, event)
        logger.info(f"Sending '{event}' email for appointment {appointment_id} to {payload['to_email']}")

        EmailService.send_appointment_email(
            to_email=payload["to_email"],
            event=event,
            details=payload["details"]
        )

        return {"status": "success", "appointment_id": appointment_id, "event": event}

    except Exception as exc:
        logger.error(f"Failed to send '{event}' email for appointment {appointment_id}: {exc}")

        # Retry with exponential backoff: 1min, 2min, 4min
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )
    finally:
        db.close()


@celery_app.task
def send_appointment_reminders():
    """Periodic: queue reminders for confirmed appointments starting soon"""
    db = SessionLocal()
    try:
        queued = AppointmentNotifier.queue_due_reminders(db)
        return {"status": "success", "reminders_queued": queued}
    finally:
        db.close()
