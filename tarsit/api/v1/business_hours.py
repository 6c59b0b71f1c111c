# ============================================================================
# FILE: tarsit/api/v1/business_hours.py
# Weekly hours and appointment settings of a business
# ============================================================================
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from tarsit.config.database import get_db
from tarsit.models.user import User
from tarsit.api.dependencies import get_current_active_user
from tarsit.schemas.business_hours import (
    BusinessHourEntry,
    BusinessHourResponse,
    DayHoursUpdate,
    SetBusinessHoursRequest,
    AppointmentSettingsUpdate,
    AppointmentSettingsResponse,
)
from tarsit.services.business_hours.business_hours_service import BusinessHoursService

router = APIRouter(prefix="/businesses/{business_id}", tags=["Business Hours"])


@router.get("/hours", response_model=List[BusinessHourResponse])
async def get_business_hours(
        business_id: UUID,
        db: Session = Depends(get_db)
):
    """Public - no authentication required."""
    return BusinessHoursService.get_business_hours(db, business_id)


@router.post("/hours", response_model=List[BusinessHourResponse])
async def set_business_hours(
        business_id: UUID,
        data: SetBusinessHoursRequest,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Replace the whole week. Days left out of the request end up unconfigured."""
    return BusinessHoursService.set_business_hours(db, current_user.id, business_id, data.hours)


@router.put("/hours/{day_of_week}", response_model=BusinessHourResponse)
async def update_day_hours(
        business_id: UUID,
        data: DayHoursUpdate,
        day_of_week: int = Path(..., ge=0, le=6, description="0 = Sunday, 6 = Saturday"),
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    entry = BusinessHourEntry(
        day_of_week=day_of_week,
        open_time=data.open_time,
        close_time=data.close_time,
        is_closed=data.is_closed
    )
    return BusinessHoursService.update_day_hours(db, current_user.id, business_id, day_of_week, entry)


@router.post("/hours/initialize", response_model=List[BusinessHourResponse])
async def initialize_default_hours(
        business_id: UUID,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Seed Mon-Fri 09:00-17:00, Sat 10:00-14:00, Sun closed. Existing days are kept."""
    return BusinessHoursService.initialize_default_hours(db, business_id, current_user.id)


@router.get("/appointment-settings", response_model=AppointmentSettingsResponse)
async def get_appointment_settings(
        business_id: UUID,
        db: Session = Depends(get_db)
):
    """Public - no authentication required."""
    return BusinessHoursService.get_appointment_settings(db, business_id)


@router.put("/appointment-settings", response_model=AppointmentSettingsResponse)
async def update_appointment_settings(
        business_id: UUID,
        data: AppointmentSettingsUpdate,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    return BusinessHoursService.update_appointment_settings(db, current_user.id, business_id, data)
