# ===== tarsit/services/availability/availability_service.py =====
from typing import List, Dict, Optional, Tuple
from datetime import date, datetime, time, timedelta, timezone
from uuid import UUID
from sqlalchemy.orm import Session
import logging

from tarsit.core.exceptions import BadRequestError, NotFoundError
from tarsit.models.appointment import Appointment, FREED_STATUSES
from tarsit.models.business import Business
from tarsit.models.service import Service
from tarsit.services.business_hours.business_hours_service import BusinessHoursService
from tarsit.utils.time_utils import day_of_week, ensure_utc, format_minutes, get_zone, parse_time

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Computes bookable start times from business hours and existing bookings"""

    @staticmethod
    def get_available_slots(
            db: Session,
            business_id: UUID,
            target_date: date,
            service_id: Optional[UUID] = None
    ) -> Dict:
        """
        Get free start times ("HH:MM", business local time) for one day.

        Slots run from opening time, one every duration + buffer minutes,
        and must end by closing time. A slot overlapping any appointment
        that still holds its time is left out.
        """
        business = db.query(Business).filter(Business.id == business_id).first()
        if not business:
            raise NotFoundError("Business not found")

        duration = AvailabilityService._slot_duration(db, business, service_id)
        result = {
            "slots": [],
            "date": target_date.isoformat(),
            "business_id": business.id,
            "duration": duration,
        }

        if not business.appointments_enabled:
            result["message"] = "Appointments are disabled for this business"
            return result

        hours = BusinessHoursService.get_day_hours(db, business.id, day_of_week(target_date))
        if not hours or hours.is_closed:
            result["message"] = "Business is closed on this day"
            return result

        tz = get_zone(business.timezone)
        booked = AvailabilityService._booked_intervals(db, business.id, target_date, tz)

        result["slots"] = AvailabilityService._generate_day_slots(
            target_date,
            tz,
            parse_time(hours.open_time),
            parse_time(hours.close_time),
            duration,
            business.appointment_buffer or 0,
            booked
        )

        logger.debug(f"{len(result['slots'])} free slots for business {business.id} on {target_date}")
        return result

    @staticmethod
    def _slot_duration(db: Session, business: Business, service_id: Optional[UUID]) -> int:
        """A named service's own duration wins over the business default"""
        duration = business.appointment_duration or 60

        if service_id:
            service = db.query(Service).filter(
                Service.id == service_id,
                Service.business_id == business.id
            ).first()

            if not service:
                raise BadRequestError("Invalid service for this business")

            if service.duration:
                duration = service.duration

        return duration

    @staticmethod
    def _booked_intervals(
            db: Session,
            business_id: UUID,
            target_date: date,
            tz
    ) -> List[Tuple[datetime, datetime]]:
        """UTC (start, end) of every appointment on that local day still holding its slot"""
        day_start = datetime.combine(target_date, time.min, tzinfo=tz).astimezone(timezone.utc)
        day_end = day_start + timedelta(days=1)

        appointments = db.query(Appointment).filter(
            Appointment.business_id == business_id,
            Appointment.date >= day_start,
            Appointment.date < day_end,
            Appointment.status.notin_(FREED_STATUSES)
        ).all()

        intervals = []
        for appointment in appointments:
            start = ensure_utc(appointment.date)
            intervals.append((start, start + timedelta(minutes=appointment.duration or 0)))
        return intervals

    @staticmethod
    def _generate_day_slots(
            target_date: date,
            tz,
            open_minutes: int,
            close_minutes: int,
            duration_minutes: int,
            buffer_minutes: int,
            booked: List[Tuple[datetime, datetime]]
    ) -> List[str]:
        """Generate time slots for a single day"""
        slots = []
        step = duration_minutes + buffer_minutes
        current = open_minutes

        while current + duration_minutes <= close_minutes:
            slot_start = datetime.combine(
                target_date, time(current // 60, current % 60), tzinfo=tz
            ).astimezone(timezone.utc)
            slot_end = slot_start + timedelta(minutes=duration_minutes)

            # Check if slot conflicts with existing appointments
            is_available = all(
                not (slot_start < appt_end and slot_end > appt_start)
                for appt_start, appt_end in booked
            )

            if is_available:
                slots.append(format_minutes(current))

            # Move to next slot (including buffer time)
            current += step

        return slots
