from datetime import datetime
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import PatientProfile
from app.schemas.auth import SessionContext
from app.schemas.patient import PatientCreate, PatientUpdate

class PatientService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_profile(self, ctx: SessionContext, data: PatientCreate) -> PatientProfile:
        if ctx.profile_id is not None:
            raise HTTPException(status_code=400, detail="Patient profile already exists")

        patient = PatientProfile(user_id=ctx.user_id, **data.model_dump())
        self.session.add(patient)
        await self.session.commit()
        await self.session.refresh(patient)
        return patient

    async def get_patient(self, patient_id: UUID) -> PatientProfile:
        patient = await self.session.get(PatientProfile, patient_id)
        if not patient:
            raise HTTPException(status_code=404, detail="Patient not found")
        return patient

    async def update_profile(self, patient_id: UUID, data: PatientUpdate) -> PatientProfile:
        patient = await self.get_patient(patient_id)

        update_data = data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(patient, key, value)
        patient.updated_at = datetime.utcnow()

        self.session.add(patient)
        await self.session.commit()
        await self.session.refresh(patient)
        return patient
