"""
Pydantic schemas for appointment requests and responses
"""
from pydantic import Field, field_validator
from typing import Dict, List, Optional
from datetime import datetime
from uuid import UUID

from tarsit.models.appointment import AppointmentStatus
from tarsit.schemas.common import CamelModel
from tarsit.utils.time_utils import ensure_utc


# ============================================================================
# Request Schemas
# ============================================================================

class AppointmentCreate(CamelModel):
    """Booking request from a customer"""
    business_id: UUID
    service_id: Optional[UUID] = None
    date: datetime = Field(..., description="Appointment date and time", examples=["2025-12-15T14:00:00Z"])
    duration: Optional[int] = Field(None, ge=1, description="Duration in minutes (defaults to 60)")
    notes: Optional[str] = Field(None, max_length=500)


class AppointmentUpdate(CamelModel):
    """
    Legacy generic update.
    Business owners may change any field; customers may only cancel.
    """
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = Field(None, max_length=500)
    date: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=1)

    @field_validator("status", "date", "duration")
    @classmethod
    def not_null(cls, v, info):
        # Omit a field to leave it unchanged; null would clear a required column
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


# ============================================================================
# Response Schemas
# ============================================================================

class BusinessSummary(CamelModel):
    id: UUID
    name: str
    slug: str
    phone: Optional[str] = None
    address_line1: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None


class CustomerSummary(CamelModel):
    id: UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class AppointmentResponse(CamelModel):
    id: UUID
    user_id: UUID
    business_id: UUID
    service_id: Optional[UUID] = None
    date: datetime
    duration: int
    status: AppointmentStatus
    notes: Optional[str] = None
    cancel_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    business: Optional[BusinessSummary] = None
    user: Optional[CustomerSummary] = None

    @field_validator("date", "created_at", "updated_at")
    @classmethod
    def normalize_utc(cls, v):
        return ensure_utc(v)


class Pagination(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class AppointmentListResponse(CamelModel):
    appointments: List[AppointmentResponse]
    pagination: Pagination


class AvailableSlotsResponse(CamelModel):
    slots: List[str]
    date: str
    business_id: UUID
    duration: Optional[int] = None
    message: Optional[str] = None


class CalendarResponse(CamelModel):
    business_id: UUID
    start_date: datetime
    end_date: datetime
    appointments: List[AppointmentResponse]
    days: Dict[str, List[AppointmentResponse]]
