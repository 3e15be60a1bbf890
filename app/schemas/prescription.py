from pydantic import BaseModel, Field
from uuid import UUID
from datetime import date, datetime
from typing import Literal, Optional

PrescriptionStatus = Literal["active", "completed", "cancelled"]

class PrescriptionCreate(BaseModel):
    patient_id: UUID
    medication_name: str = Field(min_length=1)
    dosage: str = Field(min_length=1)
    frequency: str = Field(min_length=1)
    duration: str = Field(min_length=1)
    instructions: Optional[str] = None
    diagnosis: Optional[str] = None
    notes: Optional[str] = None

class PrescriptionStatusUpdate(BaseModel):
    status: PrescriptionStatus

class PrescriptionResponse(BaseModel):
    id: UUID
    doctor_id: UUID
    patient_id: UUID
    medication_name: str
    dosage: str
    frequency: str
    duration: str
    instructions: Optional[str] = None
    diagnosis: Optional[str] = None
    notes: Optional[str] = None
    status: str
    prescribed_date: date
    created_at: datetime

    class Config:
        from_attributes = True
