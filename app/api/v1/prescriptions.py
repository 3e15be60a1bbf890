from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_doctor_profile, require_patient_profile
from app.db.session import get_session
from app.schemas.auth import SessionContext
from app.schemas.prescription import PrescriptionCreate, PrescriptionResponse, PrescriptionStatusUpdate
from app.services.prescription_service import PrescriptionService

router = APIRouter()

async def get_prescription_service(session: AsyncSession = Depends(get_session)) -> PrescriptionService:
    return PrescriptionService(session)

@router.post("/", response_model=PrescriptionResponse, status_code=201)
async def create_prescription(
    data: PrescriptionCreate,
    ctx: SessionContext = Depends(require_doctor_profile),
    service: PrescriptionService = Depends(get_prescription_service)
):
    return await service.create(ctx.profile_id, data)

@router.get("/doctor", response_model=List[PrescriptionResponse])
async def read_doctor_prescriptions(
    status: Optional[str] = None,
    ctx: SessionContext = Depends(require_doctor_profile),
    service: PrescriptionService = Depends(get_prescription_service)
):
    return await service.list_for_doctor(ctx.profile_id, status)

@router.get("/me", response_model=List[PrescriptionResponse])
async def read_my_prescriptions(
    status: Optional[str] = None,
    ctx: SessionContext = Depends(require_patient_profile),
    service: PrescriptionService = Depends(get_prescription_service)
):
    return await service.list_for_patient(ctx.profile_id, status)

@router.patch("/{prescription_id}/status", response_model=PrescriptionResponse)
async def update_prescription_status(
    prescription_id: UUID,
    data: PrescriptionStatusUpdate,
    ctx: SessionContext = Depends(require_doctor_profile),
    service: PrescriptionService = Depends(get_prescription_service)
):
    return await service.update_status(ctx.profile_id, prescription_id, data.status)
