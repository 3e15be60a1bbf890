from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.db.models import Appointment, DoctorProfile, PatientProfile
from app.schemas.auth import SessionContext
from app.schemas.doctor import DoctorCreate, DoctorUpdate

class DoctorService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_profile(self, ctx: SessionContext, data: DoctorCreate) -> DoctorProfile:
        if ctx.profile_id is not None:
            raise HTTPException(status_code=400, detail="Doctor profile already exists")

        doctor = DoctorProfile(user_id=ctx.user_id, **data.model_dump())
        self.session.add(doctor)
        await self.session.commit()
        await self.session.refresh(doctor)
        return doctor

    async def get_doctor(self, doctor_id: UUID) -> DoctorProfile:
        doctor = await self.session.get(DoctorProfile, doctor_id)
        if not doctor:
            raise HTTPException(status_code=404, detail="Doctor not found")
        return doctor

    async def update_profile(self, doctor_id: UUID, data: DoctorUpdate) -> DoctorProfile:
        doctor = await self.get_doctor(doctor_id)

        update_data = data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(doctor, key, value)
        doctor.updated_at = datetime.utcnow()

        self.session.add(doctor)
        await self.session.commit()
        await self.session.refresh(doctor)
        return doctor

    async def list_doctors(self, specialization: Optional[str] = None, only_available: bool = True) -> List[DoctorProfile]:
        query = select(DoctorProfile)
        if only_available:
            query = query.where(DoctorProfile.is_available == True)
        if specialization and specialization != "all":
            query = query.where(DoctorProfile.specialization == specialization)
        query = query.order_by(DoctorProfile.full_name)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def list_specializations(self) -> List[str]:
        query = select(DoctorProfile.specialization).where(
            DoctorProfile.is_available == True
        ).distinct().order_by(DoctorProfile.specialization)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def get_consulted_patient_ids(self, doctor_id: UUID) -> List[UUID]:
        query = select(Appointment.patient_id).where(Appointment.doctor_id == doctor_id).distinct()
        result = await self.session.execute(query)
        return result.scalars().all()

    async def has_consulted(self, doctor_id: UUID, patient_id: UUID) -> bool:
        query = select(Appointment.id).where(
            Appointment.doctor_id == doctor_id,
            Appointment.patient_id == patient_id
        ).limit(1)
        result = await self.session.execute(query)
        return result.scalars().first() is not None

    async def list_patients(self, doctor_id: UUID) -> List[PatientProfile]:
        # Only patients who have booked with this doctor are visible
        patient_ids = await self.get_consulted_patient_ids(doctor_id)
        if not patient_ids:
            return []
        query = select(PatientProfile).where(PatientProfile.id.in_(patient_ids)).order_by(PatientProfile.full_name)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def get_patient(self, doctor_id: UUID, patient_id: UUID) -> PatientProfile:
        if not await self.has_consulted(doctor_id, patient_id):
            raise HTTPException(status_code=403, detail="You can only access patients who have consulted you")
        patient = await self.session.get(PatientProfile, patient_id)
        if not patient:
            raise HTTPException(status_code=404, detail="Patient not found")
        return patient
