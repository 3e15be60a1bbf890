from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import date, datetime
from uuid import UUID, uuid4

class Prescription(SQLModel, table=True):
    __tablename__ = "prescriptions"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    doctor_id: UUID = Field(foreign_key="doctor_profiles.id", index=True)
    patient_id: UUID = Field(foreign_key="patient_profiles.id", index=True)
    medication_name: str
    dosage: str
    frequency: str
    duration: str
    instructions: Optional[str] = None
    diagnosis: Optional[str] = None
    notes: Optional[str] = None
    status: str = Field(default="active") # active, completed, cancelled
    prescribed_date: date = Field(default_factory=date.today)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
