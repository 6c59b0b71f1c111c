# ============================================================================
# FILE: tarsit/api/v1/appointments.py
# Appointment booking and lifecycle endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException, Query, Path, status
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional
from uuid import UUID

from tarsit.config.database import get_db
from tarsit.config.settings import settings
from tarsit.models.appointment import AppointmentStatus
from tarsit.models.user import User
from tarsit.api.dependencies import get_current_active_user
from tarsit.schemas.appointment import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentResponse,
    AppointmentListResponse,
    AvailableSlotsResponse,
    CalendarResponse,
)
from tarsit.schemas.common import MessageResponse
from tarsit.services.appointment.appointment_service import AppointmentService
from tarsit.services.availability.availability_service import AvailabilityService

router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
        data: AppointmentCreate,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Book an appointment. It starts out pending until the business confirms."""
    return AppointmentService.create(db, current_user.id, data)


@router.get("", response_model=AppointmentListResponse)
async def list_appointments(
        business_id: Optional[UUID] = Query(None, alias="businessId"),
        user_id: Optional[UUID] = Query(None, alias="userId"),
        appointment_status: Optional[AppointmentStatus] = Query(None, alias="status"),
        page: int = Query(1, ge=1),
        limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    return AppointmentService.find_all(
        db,
        business_id=business_id,
        user_id=user_id,
        status=appointment_status,
        page=page,
        limit=limit
    )


@router.get("/my", response_model=List[AppointmentResponse])
async def my_appointments(
        appointment_status: Optional[AppointmentStatus] = Query(None, alias="status"),
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Appointments booked by the caller, newest first."""
    return AppointmentService.get_my_appointments(db, current_user.id, appointment_status)


@router.get("/business/{business_id}/slots", response_model=AvailableSlotsResponse)
async def available_slots(
        business_id: UUID = Path(..., description="The business ID"),
        target_date: str = Query(..., alias="date", description="Day to check, YYYY-MM-DD"),
        service_id: Optional[UUID] = Query(None, alias="serviceId"),
        db: Session = Depends(get_db)
):
    """
    Free start times for one day, in the business's local time.
    Public - no authentication required.
    """
    try:
        day = date.fromisoformat(target_date)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid date format. Use YYYY-MM-DD"
        )

    return AvailabilityService.get_available_slots(db, business_id, day, service_id)


@router.get("/business/{business_id}/calendar", response_model=CalendarResponse)
async def business_calendar(
        business_id: UUID = Path(..., description="The business ID"),
        start_date: str = Query(..., alias="startDate"),
        end_date: str = Query(..., alias="endDate"),
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Appointments of a business in a date range, grouped by local day."""
    return AppointmentService.get_calendar(db, current_user.id, business_id, start_date, end_date)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    return AppointmentService.find_one(db, appointment_id)


@router.post("/{appointment_id}/confirm", response_model=AppointmentResponse)
async def confirm_appointment(
        appointment_id: UUID,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    return AppointmentService.confirm(db, current_user.id, appointment_id)


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
        appointment_id: UUID,
        reason: Optional[str] = Query(None, max_length=500),
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    return AppointmentService.cancel(db, current_user.id, appointment_id, reason)


@router.post("/{appointment_id}/complete", response_model=AppointmentResponse)
async def complete_appointment(
        appointment_id: UUID,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    return AppointmentService.complete(db, current_user.id, appointment_id)


@router.post("/{appointment_id}/no-show", response_model=AppointmentResponse)
async def mark_no_show(
        appointment_id: UUID,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    return AppointmentService.mark_no_show(db, current_user.id, appointment_id)


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
        appointment_id: UUID,
        data: AppointmentUpdate,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Legacy update. Prefer the dedicated confirm/cancel/complete/no-show endpoints."""
    return AppointmentService.update(db, current_user.id, appointment_id, data)


@router.delete("/{appointment_id}", response_model=MessageResponse)
async def delete_appointment(
        appointment_id: UUID,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    return AppointmentService.remove(db, current_user.id, appointment_id)
