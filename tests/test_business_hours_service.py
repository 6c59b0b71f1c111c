"""Weekly hours and appointment settings"""
import uuid
from unittest.mock import patch

import pytest

from tarsit.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from tarsit.schemas.business_hours import AppointmentSettingsUpdate, BusinessHourEntry
from tarsit.services.business_hours.business_hours_service import BusinessHoursService


def entry(day, open_time="09:00", close_time="17:00", is_closed=False):
    return BusinessHourEntry(day_of_week=day, open_time=open_time, close_time=close_time, is_closed=is_closed)


class TestSetBusinessHours:

    def test_round_trip_annotates_day_names(self, db, business, owner):
        BusinessHoursService.set_business_hours(
            db, owner.id, business.id, [entry(3), entry(1), entry(0, is_closed=True)]
        )

        hours = BusinessHoursService.get_business_hours(db, business.id)

        assert [h["day_of_week"] for h in hours] == [0, 1, 3]
        assert [h["day_name"] for h in hours] == ["Sunday", "Monday", "Wednesday"]
        assert hours[1]["open_time"] == "09:00"
        assert hours[1]["close_time"] == "17:00"
        assert hours[0]["is_closed"] is True

    def test_replaces_previous_schedule(self, db, business, owner):
        BusinessHoursService.set_business_hours(db, owner.id, business.id, [entry(1), entry(2)])
        BusinessHoursService.set_business_hours(db, owner.id, business.id, [entry(5, "10:00", "12:00")])

        hours = BusinessHoursService.get_business_hours(db, business.id)

        assert len(hours) == 1
        assert hours[0]["day_of_week"] == 5

    def test_close_before_open_names_the_day(self, db, business, owner):
        with pytest.raises(BadRequestError) as exc:
            BusinessHoursService.set_business_hours(
                db, owner.id, business.id, [entry(1), entry(4, "17:00", "09:00")]
            )

        assert "day 4" in exc.value.message
        assert BusinessHoursService.get_business_hours(db, business.id) == []

    def test_equal_open_and_close_rejected(self, db, business, owner):
        with pytest.raises(BadRequestError):
            BusinessHoursService.set_business_hours(db, owner.id, business.id, [entry(2, "09:00", "09:00")])

    def test_closed_day_skips_time_check(self, db, business, owner):
        hours = BusinessHoursService.set_business_hours(
            db, owner.id, business.id, [entry(0, "00:00", "00:00", is_closed=True)]
        )
        assert hours[0]["is_closed"] is True

    def test_duplicate_days_rejected(self, db, business, owner):
        with pytest.raises(BadRequestError):
            BusinessHoursService.set_business_hours(db, owner.id, business.id, [entry(1), entry(1)])

    def test_stranger_forbidden(self, db, business, stranger):
        with pytest.raises(ForbiddenError):
            BusinessHoursService.set_business_hours(db, stranger.id, business.id, [entry(1)])

    def test_staff_with_hours_permission_allowed(self, db, business, make_user, make_member):
        staff = make_user()
        make_member(business, staff, can_manage_hours=True)

        hours = BusinessHoursService.set_business_hours(db, staff.id, business.id, [entry(1)])
        assert len(hours) == 1

    def test_staff_without_hours_permission_forbidden(self, db, business, make_user, make_member):
        staff = make_user()
        make_member(business, staff, can_manage_appointments=True)

        with pytest.raises(ForbiddenError):
            BusinessHoursService.set_business_hours(db, staff.id, business.id, [entry(1)])

    def test_unknown_business_not_found(self, db, owner):
        with pytest.raises(NotFoundError):
            BusinessHoursService.set_business_hours(db, owner.id, uuid.uuid4(), [entry(1)])


class TestUpdateDayHours:

    def test_creates_missing_day(self, db, business, owner):
        row = BusinessHoursService.update_day_hours(db, owner.id, business.id, 2, entry(2, "08:00", "12:00"))

        assert row["day_of_week"] == 2
        assert row["day_name"] == "Tuesday"
        assert row["open_time"] == "08:00"

    def test_updates_existing_day(self, db, business, owner, make_hours):
        make_hours(business, 2)

        BusinessHoursService.update_day_hours(db, owner.id, business.id, 2, entry(2, "11:00", "15:00"))
        hours = BusinessHoursService.get_business_hours(db, business.id)

        assert len(hours) == 1
        assert hours[0]["open_time"] == "11:00"

    def test_path_day_wins_over_body_day(self, db, business, owner):
        row = BusinessHoursService.update_day_hours(db, owner.id, business.id, 6, entry(1))
        assert row["day_of_week"] == 6

    def test_out_of_range_day_rejected(self, db, business, owner):
        with pytest.raises(BadRequestError):
            BusinessHoursService.update_day_hours(db, owner.id, business.id, 7, entry(1))

    def test_invalid_window_rejected(self, db, business, owner):
        with pytest.raises(BadRequestError):
            BusinessHoursService.update_day_hours(db, owner.id, business.id, 3, entry(3, "18:00", "08:00"))


class TestInitializeDefaultHours:

    def test_seeds_default_week(self, db, business, owner):
        hours = BusinessHoursService.initialize_default_hours(db, business.id, owner.id)

        by_day = {h["day_of_week"]: h for h in hours}
        assert len(by_day) == 7
        assert by_day[0]["is_closed"] is True
        assert (by_day[1]["open_time"], by_day[1]["close_time"]) == ("09:00", "17:00")
        assert (by_day[6]["open_time"], by_day[6]["close_time"]) == ("10:00", "14:00")

    def test_is_idempotent(self, db, business, owner):
        first = BusinessHoursService.initialize_default_hours(db, business.id, owner.id)
        second = BusinessHoursService.initialize_default_hours(db, business.id, owner.id)

        assert len(second) == 7
        assert first == second

    def test_keeps_days_already_configured(self, db, business, owner, make_hours):
        make_hours(business, 1, "07:00", "11:00")

        hours = BusinessHoursService.initialize_default_hours(db, business.id)
        monday = next(h for h in hours if h["day_of_week"] == 1)

        assert len(hours) == 7
        assert monday["open_time"] == "07:00"

    def test_concurrent_seed_keeps_existing_rows(self, db, business, owner, make_hours):
        make_hours(business, 1, "07:00", "11:00")

        # First read misses the Monday row written by a parallel request
        with patch.object(BusinessHoursService, "_configured_days", side_effect=[set(), {1}]):
            hours = BusinessHoursService.initialize_default_hours(db, business.id, owner.id)

        monday = next(h for h in hours if h["day_of_week"] == 1)
        assert len(hours) == 7
        assert monday["open_time"] == "07:00"

    def test_stranger_forbidden(self, db, business, stranger):
        with pytest.raises(ForbiddenError):
            BusinessHoursService.initialize_default_hours(db, business.id, stranger.id)


class TestAppointmentSettings:

    def test_defaults(self, db, business):
        data = BusinessHoursService.get_appointment_settings(db, business.id)

        assert data["appointments_enabled"] is True
        assert data["appointment_duration"] == 60
        assert data["appointment_buffer"] == 0
        assert data["advance_booking_days"] == 30

    def test_partial_update(self, db, business, owner):
        data = BusinessHoursService.update_appointment_settings(
            db, owner.id, business.id, AppointmentSettingsUpdate(appointment_buffer=15)
        )

        assert data["appointment_buffer"] == 15
        assert data["appointment_duration"] == 60

    def test_staff_needs_appointments_permission(self, db, business, make_user, make_member):
        staff = make_user()
        make_member(business, staff, can_manage_hours=True)

        with pytest.raises(ForbiddenError):
            BusinessHoursService.update_appointment_settings(
                db, staff.id, business.id, AppointmentSettingsUpdate(appointment_duration=30)
            )

    def test_unknown_business_not_found(self, db):
        with pytest.raises(NotFoundError):
            BusinessHoursService.get_appointment_settings(db, uuid.uuid4())
