"""
Pydantic schemas for business hours and appointment settings
"""
from pydantic import Field
from typing import List, Optional
from uuid import UUID

from tarsit.schemas.common import CamelModel

TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


# ============================================================================
# Request Schemas
# ============================================================================

class BusinessHourEntry(CamelModel):
    """One day's opening hours"""
    day_of_week: int = Field(..., ge=0, le=6, description="Day of week (0 = Sunday, 6 = Saturday)")
    open_time: str = Field(..., pattern=TIME_PATTERN, description="Opening time in HH:MM format", examples=["09:00"])
    close_time: str = Field(..., pattern=TIME_PATTERN, description="Closing time in HH:MM format", examples=["17:00"])
    is_closed: bool = Field(default=False, description="Whether the business is closed on this day")


class DayHoursUpdate(CamelModel):
    """Body for updating a single day; the day comes from the path"""
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    open_time: str = Field(..., pattern=TIME_PATTERN, examples=["09:00"])
    close_time: str = Field(..., pattern=TIME_PATTERN, examples=["17:00"])
    is_closed: bool = False


class SetBusinessHoursRequest(CamelModel):
    """Replace the full weekly schedule"""
    hours: List[BusinessHourEntry]


class AppointmentSettingsUpdate(CamelModel):
    """All fields optional - only send what you want to update"""
    appointments_enabled: Optional[bool] = None
    appointment_duration: Optional[int] = Field(None, ge=15, description="Default appointment duration in minutes")
    appointment_buffer: Optional[int] = Field(None, ge=0, description="Buffer time between appointments in minutes")
    advance_booking_days: Optional[int] = Field(None, ge=1, description="How many days in advance customers can book")


# ============================================================================
# Response Schemas
# ============================================================================

class BusinessHourResponse(CamelModel):
    id: int
    business_id: UUID
    day_of_week: int
    day_name: Optional[str] = None
    open_time: str
    close_time: str
    is_closed: bool


class AppointmentSettingsResponse(CamelModel):
    id: UUID
    appointments_enabled: bool
    appointment_duration: int
    appointment_buffer: int
    advance_booking_days: int
