from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_patient, require_patient_profile
from app.db.session import get_session
from app.schemas.auth import SessionContext
from app.schemas.patient import PatientCreate, PatientResponse, PatientUpdate
from app.services.patient_service import PatientService

router = APIRouter()

async def get_patient_service(session: AsyncSession = Depends(get_session)) -> PatientService:
    return PatientService(session)

@router.post("/me", response_model=PatientResponse, status_code=201)
async def create_profile(
    data: PatientCreate,
    ctx: SessionContext = Depends(require_patient),
    service: PatientService = Depends(get_patient_service)
):
    return await service.create_profile(ctx, data)

@router.get("/me", response_model=PatientResponse)
async def read_profile(
    ctx: SessionContext = Depends(require_patient_profile),
    service: PatientService = Depends(get_patient_service)
):
    return await service.get_patient(ctx.profile_id)

@router.patch("/me", response_model=PatientResponse)
async def update_profile(
    data: PatientUpdate,
    ctx: SessionContext = Depends(require_patient_profile),
    service: PatientService = Depends(get_patient_service)
):
    return await service.update_profile(ctx.profile_id, data)
