"""Appointment email rendering and the Celery task body"""
import smtplib
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from tarsit.models import AppointmentStatus
from tarsit.services.email.email_service import EmailService
from tarsit.tasks.appointment_tasks import build_email_details

DETAILS = {
    "recipient_name": "Carl",
    "business_name": "Fresh Cuts",
    "when": "Monday, March 04, 2024 at 10:00 AM",
}


def test_confirmed_email_mentions_business_and_time():
    email = EmailService.render_appointment_email("confirmed", DETAILS)

    assert email["subject"] == "Appointment Confirmed with Fresh Cuts"
    assert "Hi Carl!" in email["html_content"]
    assert "Monday, March 04, 2024 at 10:00 AM" in email["plain_text"]


def test_cancel_reason_is_included():
    email = EmailService.render_appointment_email("canceled", dict(DETAILS, reason="Shop closed early"))

    assert "Reason: Shop closed early" in email["plain_text"]


def test_unknown_event_rejected():
    with pytest.raises(ValueError):
        EmailService.render_appointment_email("rescheduled", DETAILS)


def test_send_email_uses_smtp_connection():
    server = MagicMock()
    with patch.object(EmailService, "_get_smtp_connection", return_value=server):
        assert EmailService.send_email("carl@example.com", "Hello", "<p>Hi</p>", plain_text="Hi")

    server.sendmail.assert_called_once()
    server.quit.assert_called_once()


def test_request_email_goes_to_owner(db, business, owner, customer, make_appointment):
    appointment = make_appointment(business, customer)

    payload = build_email_details(appointment, "requested")

    assert payload["to_email"] == owner.email
    assert payload["details"]["business_name"] == "Fresh Cuts"


def test_status_email_goes_to_customer_in_local_time(db, make_business, owner, customer, make_appointment):
    shop = make_business(owner, name="Uptown", timezone="America/New_York")
    appointment = make_appointment(
        shop, customer,
        when=datetime(2024, 3, 4, 15, 0, tzinfo=timezone.utc),
        status=AppointmentStatus.CONFIRMED
    )

    payload = build_email_details(appointment, "confirmed")

    assert payload["to_email"] == customer.email
    assert payload["details"]["when"] == "Monday, March 04, 2024 at 10:00 AM"


def test_connection_closed_when_send_fails():
    server = MagicMock()
    server.sendmail.side_effect = smtplib.SMTPRecipientsRefused({"carl@example.com": (550, b"no such user")})

    with patch.object(EmailService, "_get_smtp_connection", return_value=server):
        with pytest.raises(smtplib.SMTPRecipientsRefused):
            EmailService.send_email("carl@example.com", "Hello", "<p>Hi</p>")

    server.quit.assert_called_once()


def test_user_supplied_values_are_escaped_in_html():
    details = dict(
        DETAILS,
        business_name="<b>Cuts & Co</b>",
        recipient_name="<script>x</script>",
        reason="<img src=x onerror=alert(1)>",
    )

    email = EmailService.render_appointment_email("canceled", details)

    assert "<script>" not in email["html_content"]
    assert "<img" not in email["html_content"]
    assert "&lt;b&gt;Cuts &amp; Co&lt;/b&gt;" in email["html_content"]
    assert "Reason: <img src=x onerror=alert(1)>" in email["plain_text"]
