from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_patient_profile
from app.db.session import get_session
from app.schemas.auth import SessionContext
from app.schemas.health_metric import BMIAnalysis, HealthMetricCreate, HealthMetricResponse
from app.services.health_metric_service import HealthMetricService

router = APIRouter()

async def get_health_metric_service(session: AsyncSession = Depends(get_session)) -> HealthMetricService:
    return HealthMetricService(session)

@router.post("/", response_model=HealthMetricResponse, status_code=201)
async def record_metric(
    data: HealthMetricCreate,
    ctx: SessionContext = Depends(require_patient_profile),
    service: HealthMetricService = Depends(get_health_metric_service)
):
    return await service.record(ctx.profile_id, data)

@router.get("/", response_model=List[HealthMetricResponse])
async def read_metrics(
    limit: int = 100,
    ctx: SessionContext = Depends(require_patient_profile),
    service: HealthMetricService = Depends(get_health_metric_service)
):
    return await service.list_metrics(ctx.profile_id, limit)

@router.get("/analysis", response_model=Optional[BMIAnalysis])
async def read_bmi_analysis(
    ctx: SessionContext = Depends(require_patient_profile),
    service: HealthMetricService = Depends(get_health_metric_service)
):
    return await service.latest_analysis(ctx.profile_id)
