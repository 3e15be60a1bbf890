from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_doctor_profile
from app.db.session import get_session
from app.schemas.auth import SessionContext
from app.schemas.availability import AvailabilityCreate, AvailabilityResponse, AvailabilityUpdate
from app.services.availability_service import AvailabilityService

router = APIRouter()

async def get_availability_service(session: AsyncSession = Depends(get_session)) -> AvailabilityService:
    return AvailabilityService(session)

@router.get("/", response_model=List[AvailabilityResponse])
async def read_rules(
    ctx: SessionContext = Depends(require_doctor_profile),
    service: AvailabilityService = Depends(get_availability_service)
):
    return await service.list_rules(ctx.profile_id)

@router.put("/", response_model=List[AvailabilityResponse])
async def replace_rules(
    rules: List[AvailabilityCreate],
    ctx: SessionContext = Depends(require_doctor_profile),
    service: AvailabilityService = Depends(get_availability_service)
):
    return await service.replace_rules(ctx.profile_id, rules)

@router.patch("/{rule_id}", response_model=AvailabilityResponse)
async def update_rule(
    rule_id: UUID,
    rule_update: AvailabilityUpdate,
    ctx: SessionContext = Depends(require_doctor_profile),
    service: AvailabilityService = Depends(get_availability_service)
):
    return await service.update_rule(ctx.profile_id, rule_id, rule_update)

@router.post("/{rule_id}/deactivate")
async def deactivate_rule(
    rule_id: UUID,
    ctx: SessionContext = Depends(require_doctor_profile),
    service: AvailabilityService = Depends(get_availability_service)
):
    return await service.deactivate_rule(ctx.profile_id, rule_id)

@router.delete("/{rule_id}")
async def delete_rule(
    rule_id: UUID,
    ctx: SessionContext = Depends(require_doctor_profile),
    service: AvailabilityService = Depends(get_availability_service)
):
    return await service.delete_rule(ctx.profile_id, rule_id)
