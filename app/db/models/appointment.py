from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from .doctor import DoctorProfile
    from .patient import PatientProfile

class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    doctor_id: UUID = Field(foreign_key="doctor_profiles.id", index=True)
    patient_id: UUID = Field(foreign_key="patient_profiles.id", index=True)
    appointment_date: datetime = Field(index=True) # start instant, naive local time
    duration_minutes: int = Field(default=60)
    status: str = Field(default="pending") # pending, confirmed, completed, cancelled
    reason: Optional[str] = None
    notes: Optional[str] = None
    appointment_type: Optional[str] = Field(default="video")
    confirmation_code: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    rescheduled_from: Optional[UUID] = Field(default=None, foreign_key="appointments.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    doctor: "DoctorProfile" = Relationship(back_populates="appointments")
    patient: "PatientProfile" = Relationship(back_populates="appointments")

    @property
    def start_instant(self) -> datetime:
        return self.appointment_date
