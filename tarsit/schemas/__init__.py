# tarsit/schemas/__init__.py
from .common import CamelModel, MessageResponse

from .business_hours import (
    BusinessHourEntry,
    DayHoursUpdate,
    SetBusinessHoursRequest,
    AppointmentSettingsUpdate,
    BusinessHourResponse,
    AppointmentSettingsResponse,
)

from .appointment import (
    AppointmentCreate,
    AppointmentUpdate,
    BusinessSummary,
    CustomerSummary,
    AppointmentResponse,
    Pagination,
    AppointmentListResponse,
    AvailableSlotsResponse,
    CalendarResponse,
)
