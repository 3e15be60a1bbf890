from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.logger import logger
from app.core.redis import redis_client
from app.db.models import PatientProfile, Prescription
from app.schemas.prescription import PrescriptionCreate
from app.services.doctor_service import DoctorService

class PrescriptionService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _notify_patient(self, prescription: Prescription, event: str):
        patient = await self.session.get(PatientProfile, prescription.patient_id)
        if not patient:
            return
        await redis_client.publish(patient.user_id, "prescription", {
            "event": event,
            "prescription_id": str(prescription.id),
            "medication_name": prescription.medication_name,
            "status": prescription.status,
        })

    async def create(self, doctor_id: UUID, data: PrescriptionCreate) -> Prescription:
        # Privacy gate: only patients who have consulted this doctor
        if not await DoctorService(self.session).has_consulted(doctor_id, data.patient_id):
            raise HTTPException(status_code=403, detail="You can only prescribe for patients who have consulted you")

        prescription = Prescription(doctor_id=doctor_id, **data.model_dump())
        self.session.add(prescription)
        await self.session.commit()
        await self.session.refresh(prescription)

        logger.info(f"Prescription {prescription.id} issued by doctor {doctor_id}")
        await self._notify_patient(prescription, "created")
        return prescription

    async def list_for_doctor(self, doctor_id: UUID, status: Optional[str] = None) -> List[Prescription]:
        stmt = select(Prescription).where(Prescription.doctor_id == doctor_id)
        if status and status != "all":
            stmt = stmt.where(Prescription.status == status)
        stmt = stmt.order_by(Prescription.created_at.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_for_patient(self, patient_id: UUID, status: Optional[str] = None) -> List[Prescription]:
        stmt = select(Prescription).where(Prescription.patient_id == patient_id)
        if status and status != "all":
            stmt = stmt.where(Prescription.status == status)
        stmt = stmt.order_by(Prescription.created_at.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def update_status(self, doctor_id: UUID, prescription_id: UUID, status: str) -> Prescription:
        prescription = await self.session.get(Prescription, prescription_id)
        # Doctors may only change their own prescriptions
        if not prescription or prescription.doctor_id != doctor_id:
            raise HTTPException(status_code=404, detail="Prescription not found")

        prescription.status = status
        prescription.updated_at = datetime.utcnow()
        self.session.add(prescription)
        await self.session.commit()
        await self.session.refresh(prescription)

        await self._notify_patient(prescription, "status_changed")
        return prescription
