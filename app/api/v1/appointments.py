from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_session_context, require_doctor_profile, require_patient_profile, require_profile
from app.db.session import get_session
from app.schemas.appointment import (
    AppointmentFilter,
    AppointmentResponse,
    BookingResult,
    BookSlotRequest,
    CancelRequest,
    RescheduleRequest,
)
from app.schemas.auth import SessionContext
from app.services.appointment_service import AppointmentService

router = APIRouter()

async def get_appointment_service(session: AsyncSession = Depends(get_session)) -> AppointmentService:
    return AppointmentService(session)

@router.post("/", response_model=BookingResult, status_code=201)
async def book_appointment(
    request: BookSlotRequest,
    ctx: SessionContext = Depends(require_patient_profile),
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.book_slot(ctx.profile_id, request)

@router.get("/me", response_model=List[AppointmentResponse])
async def read_my_appointments(
    ctx: SessionContext = Depends(require_patient_profile),
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.list_patient_appointments(ctx.profile_id)

@router.get("/doctor", response_model=List[AppointmentResponse])
async def read_doctor_appointments(
    filter_by: AppointmentFilter = Query("all", alias="filter"),
    ctx: SessionContext = Depends(require_doctor_profile),
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.list_doctor_appointments(ctx.profile_id, filter_by)

async def get_visible_appointment(appointment_id: UUID, ctx: SessionContext, service: AppointmentService):
    profile_id = require_profile(ctx)
    if ctx.is_doctor:
        return await service.get_doctor_appointment(profile_id, appointment_id)
    return await service.get_patient_appointment(profile_id, appointment_id)

@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def read_appointment(
    appointment_id: UUID,
    ctx: SessionContext = Depends(get_session_context),
    service: AppointmentService = Depends(get_appointment_service)
):
    return await get_visible_appointment(appointment_id, ctx, service)

@router.post("/{appointment_id}/approve", response_model=AppointmentResponse)
async def approve_appointment(
    appointment_id: UUID,
    ctx: SessionContext = Depends(require_doctor_profile),
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.approve(ctx.profile_id, appointment_id)

@router.post("/{appointment_id}/complete", response_model=AppointmentResponse)
async def complete_appointment(
    appointment_id: UUID,
    ctx: SessionContext = Depends(require_doctor_profile),
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.complete(ctx.profile_id, appointment_id)

@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: UUID,
    request: CancelRequest,
    ctx: SessionContext = Depends(get_session_context),
    service: AppointmentService = Depends(get_appointment_service)
):
    appointment = await get_visible_appointment(appointment_id, ctx, service)
    return await service.cancel(appointment, request.reason)

@router.post("/{appointment_id}/reschedule", response_model=BookingResult, status_code=201)
async def reschedule_appointment(
    appointment_id: UUID,
    request: RescheduleRequest,
    ctx: SessionContext = Depends(require_patient_profile),
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.reschedule(
        ctx.profile_id,
        appointment_id,
        request.slot_date,
        request.start_time,
        request.end_time,
        request.reason
    )
