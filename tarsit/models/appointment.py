# tarsit/models/appointment.py
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Uuid, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from tarsit.models.base import Base
import uuid
import enum


class AppointmentStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"
    NO_SHOW = "NO_SHOW"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({
    AppointmentStatus.COMPLETED,
    AppointmentStatus.CANCELED,
    AppointmentStatus.NO_SHOW,
})

# Statuses that no longer hold their time slot
FREED_STATUSES = (AppointmentStatus.CANCELED, AppointmentStatus.NO_SHOW)


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_business_id_date", "business_id", "date"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False)
    service_id = Column(Uuid(as_uuid=True), ForeignKey("services.id", ondelete="SET NULL"), nullable=True)

    # Appointment details
    date = Column(DateTime(timezone=True), nullable=False)  # scheduled start, UTC
    duration = Column(Integer, default=60, nullable=False)  # minutes
    notes = Column(Text, nullable=True)

    # Status tracking
    status = Column(SQLEnum(AppointmentStatus), default=AppointmentStatus.PENDING, nullable=False, index=True)
    cancel_reason = Column(Text, nullable=True)

    # Reminders & notifications
    reminder_sent_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="appointments")
    business = relationship("Business")
    service = relationship("Service")

    def __repr__(self):
        return f"<Appointment(id={self.id}, status={self.status}, date={self.date})>"
