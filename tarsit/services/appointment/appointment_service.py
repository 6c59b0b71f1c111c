# ============================================================================
# tarsit/services/appointment/appointment_service.py
# Appointment lifecycle: booking, status transitions, legacy update, delete
# ============================================================================
"""Service for managing appointments"""
from sqlalchemy.orm import Session
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID
import logging
import math

from tarsit.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from tarsit.models.appointment import Appointment, AppointmentStatus
from tarsit.models.business import Business
from tarsit.models.service import Service
from tarsit.schemas.appointment import AppointmentCreate, AppointmentUpdate
from tarsit.services.notification.appointment_notifier import AppointmentEvent, AppointmentNotifier
from tarsit.services.team.team_service import TeamService
from tarsit.utils.time_utils import ensure_utc, get_zone

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 60


class AppointmentService:
    """Handles appointment operations"""

    @staticmethod
    def create(db: Session, user_id: UUID, data: AppointmentCreate) -> Dict[str, Any]:
        """
        Book an appointment for a customer.

        The booking starts PENDING. Slot conflicts are not re-checked here;
        the available-slots query is the only place overlap is avoided.
        """
        business = db.query(Business).filter(Business.id == data.business_id).first()
        if not business:
            raise NotFoundError("Business not found")

        if data.service_id:
            service = db.query(Service).filter(Service.id == data.service_id).first()
            if not service or service.business_id != data.business_id:
                raise BadRequestError("Invalid service for this business")

        appointment = Appointment(
            user_id=user_id,
            business_id=business.id,
            service_id=data.service_id,
            date=AppointmentService.to_utc(data.date, business),
            duration=data.duration or DEFAULT_DURATION_MINUTES,
            status=AppointmentStatus.PENDING,
            notes=data.notes,
        )

        db.add(appointment)
        db.commit()
        db.refresh(appointment)

        logger.info(f"Appointment {appointment.id} requested by {user_id} at business {business.id}")
        AppointmentNotifier.notify(appointment.id, AppointmentEvent.REQUESTED)

        return AppointmentService.serialize(appointment, include_user=True)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def find_all(
            db: Session,
            business_id: Optional[UUID] = None,
            user_id: Optional[UUID] = None,
            status: Optional[AppointmentStatus] = None,
            page: int = 1,
            limit: int = 20
    ) -> Dict[str, Any]:
        """Paginated listing, newest first"""
        query = db.query(Appointment)

        if business_id:
            query = query.filter(Appointment.business_id == business_id)
        if user_id:
            query = query.filter(Appointment.user_id == user_id)
        if status:
            query = query.filter(Appointment.status == status)

        total = query.count()
        appointments = query.order_by(Appointment.date.desc()) \
            .offset((page - 1) * limit) \
            .limit(limit) \
            .all()

        return {
            "appointments": [
                AppointmentService.serialize(a, include_user=True) for a in appointments
            ],
            "pagination": {
                "total": total,
                "page": page,
                "limit": limit,
                "total_pages": math.ceil(total / limit) if limit else 0,
            }
        }

    @staticmethod
    def get_my_appointments(
            db: Session,
            user_id: UUID,
            status: Optional[AppointmentStatus] = None
    ) -> List[Dict[str, Any]]:
        query = db.query(Appointment).filter(Appointment.user_id == user_id)
        if status:
            query = query.filter(Appointment.status == status)

        return [
            AppointmentService.serialize(a)
            for a in query.order_by(Appointment.date.desc()).all()
        ]

    @staticmethod
    def find_one(db: Session, appointment_id: UUID) -> Dict[str, Any]:
        appointment = AppointmentService._get_appointment(db, appointment_id)
        return AppointmentService.serialize(appointment, include_user=True)

    @staticmethod
    def get_calendar(
            db: Session,
            user_id: UUID,
            business_id: UUID,
            start_date: str,
            end_date: str
    ) -> Dict[str, Any]:
        """
        Appointments of a business within [start_date, end_date], oldest first,
        plus a per-day grouping keyed by the business's local date.

        Bounds are ISO dates or datetimes; a bare end date covers that whole day.
        """
        if not TeamService.can_view_business(db, user_id, business_id):
            raise ForbiddenError("Not authorized to view this calendar")

        business = db.query(Business).filter(Business.id == business_id).first()
        zone = get_zone(business.timezone)

        start = AppointmentService._parse_bound(start_date, zone, end=False)
        end = AppointmentService._parse_bound(end_date, zone, end=True)
        if end <= start:
            raise BadRequestError("endDate must be after startDate")

        appointments = db.query(Appointment).filter(
            Appointment.business_id == business_id,
            Appointment.date >= start,
            Appointment.date < end
        ).order_by(Appointment.date.asc()).all()

        items = [AppointmentService.serialize(a, include_user=True) for a in appointments]

        days: Dict[str, List[Dict[str, Any]]] = {}
        for item in items:
            key = item["date"].astimezone(zone).strftime("%Y-%m-%d")
            days.setdefault(key, []).append(item)

        return {
            "business_id": business_id,
            "start_date": start,
            "end_date": end - timedelta(microseconds=1),
            "appointments": items,
            "days": days,
        }

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    @staticmethod
    def confirm(db: Session, user_id: UUID, appointment_id: UUID) -> Dict[str, Any]:
        """PENDING -> CONFIRMED, business owner only"""
        appointment = AppointmentService._get_appointment(db, appointment_id)
        AppointmentService._require_owner(appointment, user_id)

        if appointment.status != AppointmentStatus.PENDING:
            raise BadRequestError("Only pending appointments can be confirmed")

        return AppointmentService._apply_status(db, appointment, AppointmentStatus.CONFIRMED, user_id)

    @staticmethod
    def cancel(
            db: Session,
            user_id: UUID,
            appointment_id: UUID,
            reason: Optional[str] = None
    ) -> Dict[str, Any]:
        """PENDING/CONFIRMED -> CANCELED, by the customer or the business owner"""
        appointment = AppointmentService._get_appointment(db, appointment_id)
        is_owner, is_customer = AppointmentService._roles(appointment, user_id)

        if not is_owner and not is_customer:
            raise ForbiddenError("Not authorized to cancel this appointment")

        if appointment.status.is_terminal:
            raise BadRequestError(f"Cannot cancel an appointment that is {appointment.status.value}")

        if reason:
            appointment.cancel_reason = reason
            appointment.notes = f"{appointment.notes or ''}\nCancellation reason: {reason}".lstrip("\n")

        return AppointmentService._apply_status(db, appointment, AppointmentStatus.CANCELED, user_id)

    @staticmethod
    def complete(db: Session, user_id: UUID, appointment_id: UUID) -> Dict[str, Any]:
        """CONFIRMED -> COMPLETED, business owner only"""
        appointment = AppointmentService._get_appointment(db, appointment_id)
        AppointmentService._require_owner(appointment, user_id)

        if appointment.status != AppointmentStatus.CONFIRMED:
            raise BadRequestError("Only confirmed appointments can be completed")

        return AppointmentService._apply_status(db, appointment, AppointmentStatus.COMPLETED, user_id)

    @staticmethod
    def mark_no_show(db: Session, user_id: UUID, appointment_id: UUID) -> Dict[str, Any]:
        """-> NO_SHOW, business owner only; any non-terminal appointment qualifies"""
        appointment = AppointmentService._get_appointment(db, appointment_id)
        AppointmentService._require_owner(appointment, user_id)

        if appointment.status.is_terminal:
            raise BadRequestError(
                f"Cannot mark an appointment that is {appointment.status.value} as no-show"
            )

        return AppointmentService._apply_status(db, appointment, AppointmentStatus.NO_SHOW, user_id)

    @staticmethod
    def update(
            db: Session,
            user_id: UUID,
            appointment_id: UUID,
            data: AppointmentUpdate
    ) -> Dict[str, Any]:
        """
        Legacy generic update.

        Business owners may change any field. Customers may only set the
        status to CANCELED. Terminal appointments cannot change status.
        """
        appointment = AppointmentService._get_appointment(db, appointment_id)
        is_owner, is_customer = AppointmentService._roles(appointment, user_id)

        if not is_owner and not is_customer:
            raise ForbiddenError("Not authorized to update this appointment")

        update_data = data.model_dump(exclude_unset=True)

        # Customers can only cancel
        if not is_owner:
            if data.status != AppointmentStatus.CANCELED or set(update_data) - {"status"}:
                raise ForbiddenError("Customers can only cancel appointments")

        new_status = update_data.pop("status", None)
        if new_status is not None and new_status != appointment.status and appointment.status.is_terminal:
            raise BadRequestError(f"Cannot change the status of an appointment that is {appointment.status.value}")

        for field, value in update_data.items():
            if field == "date" and value is not None:
                value = AppointmentService.to_utc(value, appointment.business)
            setattr(appointment, field, value)

        if new_status is not None and new_status != appointment.status:
            return AppointmentService._apply_status(db, appointment, new_status, user_id)

        db.commit()
        db.refresh(appointment)
        logger.info(f"Appointment {appointment.id} updated by {user_id}: {sorted(update_data)}")
        return AppointmentService.serialize(appointment, include_user=True)

    @staticmethod
    def remove(db: Session, user_id: UUID, appointment_id: UUID) -> Dict[str, str]:
        """Hard delete, by the customer or the business owner"""
        appointment = AppointmentService._get_appointment(db, appointment_id)
        is_owner, is_customer = AppointmentService._roles(appointment, user_id)

        if not is_owner and not is_customer:
            raise ForbiddenError("Not authorized to delete this appointment")

        db.delete(appointment)
        db.commit()

        logger.info(f"Appointment {appointment_id} deleted by {user_id}")
        return {"message": "Appointment deleted successfully"}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def to_utc(value: datetime, business: Business) -> datetime:
        """Naive datetimes are read as the business's local time"""
        if value.tzinfo is None:
            value = value.replace(tzinfo=get_zone(business.timezone))
        return value.astimezone(timezone.utc)

    @staticmethod
    def serialize(
            appointment: Appointment,
            include_business: bool = True,
            include_user: bool = False
    ) -> Dict[str, Any]:
        """Convert an Appointment to a response dict with optional summaries"""
        data = {
            "id": appointment.id,
            "user_id": appointment.user_id,
            "business_id": appointment.business_id,
            "service_id": appointment.service_id,
            "date": ensure_utc(appointment.date),
            "duration": appointment.duration,
            "status": appointment.status,
            "notes": appointment.notes,
            "cancel_reason": appointment.cancel_reason,
            "created_at": ensure_utc(appointment.created_at),
            "updated_at": ensure_utc(appointment.updated_at),
        }

        if include_business and appointment.business:
            business = appointment.business
            data["business"] = {
                "id": business.id,
                "name": business.name,
                "slug": business.slug,
                "phone": business.phone,
                "address_line1": business.address_line1,
                "city": business.city,
                "state": business.state,
            }

        if include_user and appointment.user:
            data["user"] = appointment.user.to_summary()

        return data

    @staticmethod
    def _parse_bound(value: str, zone, end: bool) -> datetime:
        """Parse a calendar bound; returns UTC, exclusive when end=True"""
        try:
            if len(value) == 10:
                day = date.fromisoformat(value)
                if end:
                    day += timedelta(days=1)
                parsed = datetime.combine(day, time.min, tzinfo=zone)
            else:
                parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
                if parsed.tzinfo is None:
                    parsed = parsed.replace(tzinfo=zone)
                if end:
                    parsed += timedelta(microseconds=1)
        except ValueError:
            raise BadRequestError(f"Invalid date '{value}'. Use YYYY-MM-DD or ISO 8601")

        return parsed.astimezone(timezone.utc)

    @staticmethod
    def _get_appointment(db: Session, appointment_id: UUID) -> Appointment:
        appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    @staticmethod
    def _roles(appointment: Appointment, user_id: UUID) -> Tuple[bool, bool]:
        """(is business owner, is the booking customer)"""
        return appointment.business.owner_id == user_id, appointment.user_id == user_id

    @staticmethod
    def _require_owner(appointment: Appointment, user_id: UUID) -> None:
        if appointment.business.owner_id != user_id:
            raise ForbiddenError("Only business owners can update appointment status")

    @staticmethod
    def _apply_status(
            db: Session,
            appointment: Appointment,
            status: AppointmentStatus,
            user_id: UUID
    ) -> Dict[str, Any]:
        """Persist a status change, then queue its email"""
        previous = appointment.status
        appointment.status = status

        db.commit()
        db.refresh(appointment)

        logger.info(f"Appointment {appointment.id}: {previous.value} -> {status.value} by {user_id}")
        AppointmentNotifier.notify_status(appointment.id, status)

        return AppointmentService.serialize(appointment, include_user=True)
