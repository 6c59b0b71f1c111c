"""
Shared pytest fixtures: in-memory SQLite schema per test, model factories,
JWT headers and a TestClient wired to the test session.
"""
import os

# Must be set before tarsit.config.settings is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["NOTIFICATIONS_ENABLED"] = "true"
os.environ["DEFAULT_TIMEZONE"] = "UTC"
os.environ["LOG_LEVEL"] = "WARNING"

import uuid
from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from tarsit.api.dependencies import create_access_token
from tarsit.config.database import SessionLocal, engine, get_db
from tarsit.main import app
from tarsit.models import (
    Appointment,
    AppointmentStatus,
    Base,
    Business,
    BusinessHours,
    Service,
    TeamMember,
    TeamRole,
    User,
)
from tarsit.tasks.appointment_tasks import send_appointment_email


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def queued_emails():
    """Replace the Celery hand-off so nothing talks to a broker"""
    with patch.object(send_appointment_email, "delay") as mock_delay:
        yield mock_delay


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============================================================================
# Factories
# ============================================================================

@pytest.fixture
def make_user(db):
    def _make(**kwargs):
        suffix = uuid.uuid4().hex[:8]
        user = User(
            email=kwargs.pop("email", f"user-{suffix}@example.com"),
            first_name=kwargs.pop("first_name", "Test"),
            last_name=kwargs.pop("last_name", "User"),
            **kwargs
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_business(db):
    def _make(owner, **kwargs):
        suffix = uuid.uuid4().hex[:8]
        business = Business(
            owner_id=owner.id,
            name=kwargs.pop("name", f"Shop {suffix}"),
            slug=kwargs.pop("slug", f"shop-{suffix}"),
            **kwargs
        )
        db.add(business)
        db.commit()
        db.refresh(business)
        return business

    return _make


@pytest.fixture
def make_hours(db):
    def _make(business, day_of_week, open_time="09:00", close_time="17:00", is_closed=False):
        hours = BusinessHours(
            business_id=business.id,
            day_of_week=day_of_week,
            open_time=open_time,
            close_time=close_time,
            is_closed=is_closed,
        )
        db.add(hours)
        db.commit()
        return hours

    return _make


@pytest.fixture
def make_service(db):
    def _make(business, **kwargs):
        service = Service(
            business_id=business.id,
            name=kwargs.pop("name", "Haircut"),
            **kwargs
        )
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    return _make


@pytest.fixture
def make_member(db):
    def _make(business, user, role=TeamRole.STAFF, **flags):
        member = TeamMember(business_id=business.id, user_id=user.id, role=role, **flags)
        db.add(member)
        db.commit()
        db.refresh(member)
        return member

    return _make


@pytest.fixture
def make_appointment(db):
    def _make(business, user, when=None, status=AppointmentStatus.PENDING, duration=60, **kwargs):
        appointment = Appointment(
            business_id=business.id,
            user_id=user.id,
            date=when or datetime(2024, 3, 4, 10, 0, tzinfo=timezone.utc),
            duration=duration,
            status=status,
            **kwargs
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make


# ============================================================================
# Common actors
# ============================================================================

@pytest.fixture
def owner(make_user):
    return make_user(email="owner@example.com", first_name="Olivia")


@pytest.fixture
def customer(make_user):
    return make_user(email="customer@example.com", first_name="Carl")


@pytest.fixture
def stranger(make_user):
    return make_user(email="stranger@example.com", first_name="Sam")


@pytest.fixture
def business(make_business, owner):
    return make_business(owner, name="Fresh Cuts", slug="fresh-cuts")


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers
