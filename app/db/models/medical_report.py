from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import date, datetime
from uuid import UUID, uuid4

class MedicalReport(SQLModel, table=True):
    __tablename__ = "medical_reports"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    patient_id: UUID = Field(foreign_key="patient_profiles.id", index=True)
    uploaded_by_doctor_id: Optional[UUID] = Field(default=None, foreign_key="doctor_profiles.id")
    title: str
    description: Optional[str] = None
    report_type: str
    report_date: date = Field(default_factory=date.today)
    file_path: str
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    hash: str # sha256 hex digest recorded at upload
    is_verified: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
