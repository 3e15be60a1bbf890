from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_session_context, require_doctor, require_doctor_profile
from app.api.v1.appointments import get_appointment_service
from app.db.session import get_session
from app.schemas.auth import SessionContext
from app.schemas.availability import AvailableDaysResponse, AvailableSlotsResponse
from app.schemas.doctor import DoctorCreate, DoctorResponse, DoctorSummary, DoctorUpdate
from app.schemas.patient import PatientResponse
from app.services.appointment_service import AppointmentService
from app.services.availability_service import AvailabilityService
from app.services.doctor_service import DoctorService

router = APIRouter()

async def get_doctor_service(session: AsyncSession = Depends(get_session)) -> DoctorService:
    return DoctorService(session)

@router.post("/me", response_model=DoctorResponse, status_code=201)
async def create_profile(
    data: DoctorCreate,
    ctx: SessionContext = Depends(require_doctor),
    service: DoctorService = Depends(get_doctor_service)
):
    return await service.create_profile(ctx, data)

@router.get("/me", response_model=DoctorResponse)
async def read_profile(
    ctx: SessionContext = Depends(require_doctor_profile),
    service: DoctorService = Depends(get_doctor_service)
):
    return await service.get_doctor(ctx.profile_id)

@router.patch("/me", response_model=DoctorResponse)
async def update_profile(
    data: DoctorUpdate,
    ctx: SessionContext = Depends(require_doctor_profile),
    service: DoctorService = Depends(get_doctor_service)
):
    return await service.update_profile(ctx.profile_id, data)

@router.get("/me/patients", response_model=List[PatientResponse])
async def read_my_patients(
    ctx: SessionContext = Depends(require_doctor_profile),
    service: DoctorService = Depends(get_doctor_service)
):
    return await service.list_patients(ctx.profile_id)

@router.get("/me/patients/{patient_id}", response_model=PatientResponse)
async def read_my_patient(
    patient_id: UUID,
    ctx: SessionContext = Depends(require_doctor_profile),
    service: DoctorService = Depends(get_doctor_service)
):
    return await service.get_patient(ctx.profile_id, patient_id)

@router.get("/", response_model=List[DoctorSummary])
async def read_doctors(
    specialization: Optional[str] = None,
    ctx: SessionContext = Depends(get_session_context),
    service: DoctorService = Depends(get_doctor_service)
):
    return await service.list_doctors(specialization)

@router.get("/specializations", response_model=List[str])
async def read_specializations(
    ctx: SessionContext = Depends(get_session_context),
    service: DoctorService = Depends(get_doctor_service)
):
    return await service.list_specializations()

@router.get("/{doctor_id}", response_model=DoctorResponse)
async def read_doctor(
    doctor_id: UUID,
    ctx: SessionContext = Depends(get_session_context),
    service: DoctorService = Depends(get_doctor_service)
):
    return await service.get_doctor(doctor_id)

@router.get("/{doctor_id}/available-days", response_model=AvailableDaysResponse)
async def read_available_days(
    doctor_id: UUID,
    ctx: SessionContext = Depends(get_session_context),
    service: DoctorService = Depends(get_doctor_service)
):
    await service.get_doctor(doctor_id)
    days = await AvailabilityService(service.session).get_available_days(doctor_id)
    return AvailableDaysResponse(doctor_id=doctor_id, days_of_week=days)

@router.get("/{doctor_id}/slots", response_model=AvailableSlotsResponse)
async def read_available_slots(
    doctor_id: UUID,
    date: date,
    ctx: SessionContext = Depends(get_session_context),
    service: AppointmentService = Depends(get_appointment_service)
):
    slots = await service.get_available_slots(doctor_id, date)
    return AvailableSlotsResponse(
        doctor_id=doctor_id,
        date=date,
        slot_duration_minutes=service.slot_duration,
        slots=slots
    )
