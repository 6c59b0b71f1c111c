"""Slot generation from hours, settings and existing bookings"""
import uuid
from datetime import date, datetime, timezone

import pytest

from tarsit.core.exceptions import BadRequestError, NotFoundError
from tarsit.models import AppointmentStatus
from tarsit.services.availability.availability_service import AvailabilityService

MONDAY = date(2024, 3, 4)
FULL_DAY = ["09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00"]


def at(hour, minute=0):
    return datetime(2024, 3, 4, hour, minute, tzinfo=timezone.utc)


def test_no_hours_means_no_slots(db, business):
    result = AvailabilityService.get_available_slots(db, business.id, MONDAY)

    assert result["slots"] == []
    assert result["message"]


def test_confirmed_booking_removes_its_slot(db, business, customer, make_hours, make_appointment):
    make_hours(business, 1, "09:00", "17:00")
    make_appointment(business, customer, when=at(10), status=AppointmentStatus.CONFIRMED)

    result = AvailabilityService.get_available_slots(db, business.id, MONDAY)

    assert "10:00" not in result["slots"]
    assert result["slots"] == [s for s in FULL_DAY if s != "10:00"]
    assert result["date"] == "2024-03-04"
    assert result["duration"] == 60


def test_pending_booking_also_holds_its_slot(db, business, customer, make_hours, make_appointment):
    make_hours(business, 1)
    make_appointment(business, customer, when=at(13), status=AppointmentStatus.PENDING)

    result = AvailabilityService.get_available_slots(db, business.id, MONDAY)

    assert "13:00" not in result["slots"]


@pytest.mark.parametrize("status", [AppointmentStatus.CANCELED, AppointmentStatus.NO_SHOW])
def test_freed_booking_releases_its_slot(db, business, customer, make_hours, make_appointment, status):
    make_hours(business, 1)
    make_appointment(business, customer, when=at(10), status=status)

    result = AvailabilityService.get_available_slots(db, business.id, MONDAY)

    assert result["slots"] == FULL_DAY


def test_partial_overlap_blocks_both_neighbours(db, business, customer, make_hours, make_appointment):
    make_hours(business, 1)
    make_appointment(business, customer, when=at(10, 30), duration=60)

    result = AvailabilityService.get_available_slots(db, business.id, MONDAY)

    assert "10:00" not in result["slots"]
    assert "11:00" not in result["slots"]
    assert "09:00" in result["slots"]
    assert "12:00" in result["slots"]


def test_buffer_spaces_out_slots(db, business, make_hours):
    business.appointment_duration = 30
    business.appointment_buffer = 15
    db.commit()
    make_hours(business, 1, "09:00", "11:00")

    result = AvailabilityService.get_available_slots(db, business.id, MONDAY)

    assert result["slots"] == ["09:00", "09:45", "10:30"]


def test_last_slot_must_end_by_closing(db, business, make_hours):
    make_hours(business, 1, "09:00", "11:30")

    result = AvailabilityService.get_available_slots(db, business.id, MONDAY)

    assert result["slots"] == ["09:00", "10:00"]


def test_service_duration_overrides_default(db, business, make_hours, make_service):
    make_hours(business, 1, "09:00", "12:00")
    service = make_service(business, duration=90)

    result = AvailabilityService.get_available_slots(db, business.id, MONDAY, service.id)

    assert result["duration"] == 90
    assert result["slots"] == ["09:00", "10:30"]


def test_service_of_another_business_rejected(db, business, owner, make_business, make_service, make_hours):
    make_hours(business, 1)
    other_service = make_service(make_business(owner))

    with pytest.raises(BadRequestError):
        AvailabilityService.get_available_slots(db, business.id, MONDAY, other_service.id)


def test_closed_day_has_no_slots(db, business, make_hours):
    make_hours(business, 1, "00:00", "00:00", is_closed=True)

    result = AvailabilityService.get_available_slots(db, business.id, MONDAY)

    assert result["slots"] == []
    assert result["message"] == "Business is closed on this day"


def test_appointments_disabled_has_no_slots(db, business, make_hours):
    business.appointments_enabled = False
    db.commit()
    make_hours(business, 1)

    result = AvailabilityService.get_available_slots(db, business.id, MONDAY)

    assert result["slots"] == []


def test_other_weekday_hours_do_not_apply(db, business, make_hours):
    make_hours(business, 2)

    result = AvailabilityService.get_available_slots(db, business.id, MONDAY)

    assert result["slots"] == []


def test_slots_are_local_to_the_business_timezone(db, make_business, owner, customer, make_hours, make_appointment):
    shop = make_business(owner, timezone="America/New_York")
    make_hours(shop, 1, "09:00", "12:00")
    # 14:00 UTC is 09:00 in New York during EST
    make_appointment(shop, customer, when=at(14), status=AppointmentStatus.CONFIRMED)

    result = AvailabilityService.get_available_slots(db, shop.id, MONDAY)

    assert result["slots"] == ["10:00", "11:00"]


def test_unknown_business_not_found(db):
    with pytest.raises(NotFoundError):
        AvailabilityService.get_available_slots(db, uuid.uuid4(), MONDAY)
