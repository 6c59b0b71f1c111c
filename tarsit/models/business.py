# tarsit/models/business.py
"""
Business Model
Listing data trimmed to what the booking slice needs, plus the
appointment settings and weekly opening hours
"""
from sqlalchemy import (
    Column, String, Boolean, DateTime, Integer, ForeignKey, Uuid, UniqueConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from tarsit.config.settings import settings
from tarsit.models.base import Base


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), nullable=False, unique=True)
    phone = Column(String(20), nullable=True)
    address_line1 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)

    # IANA zone name; opening hours are interpreted in this zone
    timezone = Column(String(50), default=lambda: settings.DEFAULT_TIMEZONE, nullable=False)

    # Appointment settings
    appointments_enabled = Column(Boolean, default=True, nullable=False)
    appointment_duration = Column(Integer, default=60, nullable=False)  # minutes
    appointment_buffer = Column(Integer, default=0, nullable=False)  # minutes between bookings
    advance_booking_days = Column(Integer, default=30, nullable=False)

    # Technical fields
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    is_active = Column(Boolean, default=True)

    owner = relationship("User", back_populates="owned_businesses")
    hours = relationship(
        "BusinessHours",
        back_populates="business",
        order_by="BusinessHours.day_of_week",
        cascade="all, delete-orphan",
    )
    services = relationship("Service", back_populates="business", cascade="all, delete-orphan")
    team_members = relationship("TeamMember", back_populates="business", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Business(id={self.id}, name={self.name})>"


class BusinessHours(Base):
    __tablename__ = "business_hours"
    __table_args__ = (
        UniqueConstraint("business_id", "day_of_week", name="uq_business_hours_business_day"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    business_id = Column(
        Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False
    )
    day_of_week = Column(Integer, nullable=False)  # 0=Sunday, 6=Saturday
    open_time = Column(String(5), nullable=False)  # HH:MM format
    close_time = Column(String(5), nullable=False)  # HH:MM format
    is_closed = Column(Boolean, default=False, nullable=False)

    business = relationship("Business", back_populates="hours")

    def __repr__(self):
        return f"<BusinessHours(business_id={self.business_id}, day={self.day_of_week})>"
