# ============================================================================
# tarsit/services/business_hours/business_hours_service.py
# Weekly opening hours and the appointment settings stored on Business
# ============================================================================
"""Service for managing business hours and appointment settings"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Any, Dict, Iterable, List, Optional, Set
from uuid import UUID
import logging

from tarsit.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from tarsit.models.business import Business, BusinessHours
from tarsit.schemas.business_hours import AppointmentSettingsUpdate, BusinessHourEntry
from tarsit.services.team.team_service import TeamService
from tarsit.utils.time_utils import DAY_NAMES, parse_time

logger = logging.getLogger(__name__)

# Mon-Fri 9-5, Sat 10-2, Sun closed
DEFAULT_HOURS = [
    {"day_of_week": 0, "open_time": "00:00", "close_time": "00:00", "is_closed": True},
    {"day_of_week": 1, "open_time": "09:00", "close_time": "17:00", "is_closed": False},
    {"day_of_week": 2, "open_time": "09:00", "close_time": "17:00", "is_closed": False},
    {"day_of_week": 3, "open_time": "09:00", "close_time": "17:00", "is_closed": False},
    {"day_of_week": 4, "open_time": "09:00", "close_time": "17:00", "is_closed": False},
    {"day_of_week": 5, "open_time": "09:00", "close_time": "17:00", "is_closed": False},
    {"day_of_week": 6, "open_time": "10:00", "close_time": "14:00", "is_closed": False},
]

SETTINGS_FIELDS = (
    "appointments_enabled",
    "appointment_duration",
    "appointment_buffer",
    "advance_booking_days",
)


class BusinessHoursService:
    """Handles business hours and appointment settings"""

    # ------------------------------------------------------------------
    # Hours
    # ------------------------------------------------------------------

    @staticmethod
    def get_business_hours(db: Session, business_id: UUID) -> List[Dict[str, Any]]:
        """Get all configured days for a business, each with its day name"""
        BusinessHoursService._get_business(db, business_id)

        hours = db.query(BusinessHours).filter(
            BusinessHours.business_id == business_id
        ).order_by(BusinessHours.day_of_week.asc()).all()

        return [BusinessHoursService._serialize_hours(h) for h in hours]

    @staticmethod
    def get_day_hours(db: Session, business_id: UUID, day_of_week: int) -> Optional[BusinessHours]:
        """Get one day's row, or None when the day is not configured"""
        return db.query(BusinessHours).filter(
            BusinessHours.business_id == business_id,
            BusinessHours.day_of_week == day_of_week
        ).first()

    @staticmethod
    def set_business_hours(
            db: Session,
            user_id: UUID,
            business_id: UUID,
            hours: List[BusinessHourEntry]
    ) -> List[Dict[str, Any]]:
        """Replace the whole weekly schedule in one transaction"""
        BusinessHoursService._require_permission(
            db, user_id, business_id, "canManageHours",
            "Not authorized to manage business hours"
        )

        BusinessHoursService.validate_hours(hours)

        seen = set()
        for entry in hours:
            if entry.day_of_week in seen:
                raise BadRequestError(f"Duplicate hours for day {entry.day_of_week}")
            seen.add(entry.day_of_week)

        try:
            db.query(BusinessHours).filter(
                BusinessHours.business_id == business_id
            ).delete(synchronize_session=False)

            db.add_all([
                BusinessHours(
                    business_id=business_id,
                    day_of_week=entry.day_of_week,
                    open_time=entry.open_time,
                    close_time=entry.close_time,
                    is_closed=entry.is_closed,
                )
                for entry in hours
            ])
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Error replacing hours for business {business_id}: {e}")
            raise

        logger.info(f"Replaced hours for business {business_id}: {len(hours)} days")
        return BusinessHoursService.get_business_hours(db, business_id)

    @staticmethod
    def update_day_hours(
            db: Session,
            user_id: UUID,
            business_id: UUID,
            day_of_week: int,
            entry: BusinessHourEntry
    ) -> Dict[str, Any]:
        """Update a single day's hours, creating the row if it does not exist"""
        BusinessHoursService._require_permission(
            db, user_id, business_id, "canManageHours",
            "Not authorized to manage business hours"
        )

        if not 0 <= day_of_week <= 6:
            raise BadRequestError("Day of week must be between 0 (Sunday) and 6 (Saturday)")

        entry = entry.model_copy(update={"day_of_week": day_of_week})
        BusinessHoursService.validate_hours([entry])

        existing = BusinessHoursService.get_day_hours(db, business_id, day_of_week)

        if existing:
            existing.open_time = entry.open_time
            existing.close_time = entry.close_time
            existing.is_closed = entry.is_closed
            row = existing
        else:
            row = BusinessHours(
                business_id=business_id,
                day_of_week=day_of_week,
                open_time=entry.open_time,
                close_time=entry.close_time,
                is_closed=entry.is_closed,
            )
            db.add(row)

        db.commit()
        db.refresh(row)

        logger.info(f"Updated hours for business {business_id}, day {day_of_week}")
        return BusinessHoursService._serialize_hours(row)

    @staticmethod
    def initialize_default_hours(
            db: Session,
            business_id: UUID,
            user_id: Optional[UUID] = None
    ) -> List[Dict[str, Any]]:
        """
        Seed the default week (Mon-Fri 9-5, Sat 10-2, Sun closed).

        Days that already have a row are left untouched, so calling this
        twice is harmless. When a caller is given, they need canManageHours.
        """
        if user_id is None:
            BusinessHoursService._get_business(db, business_id)
        else:
            BusinessHoursService._require_permission(
                db, user_id, business_id, "canManageHours",
                "Not authorized to manage business hours"
            )

        try:
            BusinessHoursService._seed_missing_days(db, business_id)
        except IntegrityError:
            # Another request seeded some of these days first; keep its rows
            db.rollback()
            logger.warning(f"Default hours for business {business_id} were initialized concurrently")
            BusinessHoursService._seed_missing_days(db, business_id)

        return BusinessHoursService.get_business_hours(db, business_id)

    @staticmethod
    def _seed_missing_days(db: Session, business_id: UUID) -> int:
        existing_days = BusinessHoursService._configured_days(db, business_id)

        missing = [h for h in DEFAULT_HOURS if h["day_of_week"] not in existing_days]
        if missing:
            db.add_all([BusinessHours(business_id=business_id, **h) for h in missing])
            db.commit()
            logger.info(f"Initialized {len(missing)} default days for business {business_id}")
        return len(missing)

    @staticmethod
    def validate_hours(hours: Iterable[BusinessHourEntry]) -> None:
        """Closing time must be after opening time on every open day"""
        for h in hours:
            if h.is_closed:
                continue

            if parse_time(h.close_time) <= parse_time(h.open_time):
                raise BadRequestError(
                    f"Closing time must be after opening time for day {h.day_of_week}"
                )

    # ------------------------------------------------------------------
    # Appointment settings
    # ------------------------------------------------------------------

    @staticmethod
    def get_appointment_settings(db: Session, business_id: UUID) -> Dict[str, Any]:
        business = BusinessHoursService._get_business(db, business_id)
        return BusinessHoursService._serialize_settings(business)

    @staticmethod
    def update_appointment_settings(
            db: Session,
            user_id: UUID,
            business_id: UUID,
            updates: AppointmentSettingsUpdate
    ) -> Dict[str, Any]:
        """Apply only the settings that were sent"""
        business = BusinessHoursService._require_permission(
            db, user_id, business_id, "canManageAppointments",
            "Not authorized to manage appointment settings"
        )

        update_data = updates.model_dump(exclude_none=True)
        for field, value in update_data.items():
            setattr(business, field, value)

        db.commit()
        db.refresh(business)

        if update_data:
            logger.info(f"Updated appointment settings for business {business_id}: {sorted(update_data)}")
        return BusinessHoursService._serialize_settings(business)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _configured_days(db: Session, business_id: UUID) -> Set[int]:
        return {
            day for (day,) in db.query(BusinessHours.day_of_week).filter(
                BusinessHours.business_id == business_id
            ).all()
        }

    @staticmethod
    def _get_business(db: Session, business_id: UUID) -> Business:
        business = db.query(Business).filter(Business.id == business_id).first()
        if not business:
            raise NotFoundError("Business not found")
        return business

    @staticmethod
    def _require_permission(
            db: Session,
            user_id: UUID,
            business_id: UUID,
            permission: str,
            message: str
    ) -> Business:
        business = BusinessHoursService._get_business(db, business_id)
        if not TeamService.has_permission(db, user_id, business_id, permission):
            raise ForbiddenError(message)
        return business

    @staticmethod
    def _serialize_hours(hours: BusinessHours) -> Dict[str, Any]:
        return {
            "id": hours.id,
            "business_id": hours.business_id,
            "day_of_week": hours.day_of_week,
            "day_name": DAY_NAMES[hours.day_of_week],
            "open_time": hours.open_time,
            "close_time": hours.close_time,
            "is_closed": hours.is_closed,
        }

    @staticmethod
    def _serialize_settings(business: Business) -> Dict[str, Any]:
        data = {"id": business.id}
        data.update({field: getattr(business, field) for field in SETTINGS_FIELDS})
        return data
