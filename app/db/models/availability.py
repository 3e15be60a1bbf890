from sqlmodel import SQLModel, Field, Relationship
from typing import TYPE_CHECKING
from datetime import datetime, time
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from .doctor import DoctorProfile

class DoctorAvailability(SQLModel, table=True):
    __tablename__ = "doctor_availability"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    doctor_id: UUID = Field(foreign_key="doctor_profiles.id", index=True)
    day_of_week: int # 0=Sunday..6=Saturday
    start_time: time
    end_time: time
    is_available: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    doctor: "DoctorProfile" = Relationship(back_populates="availability")

    @property
    def is_active(self) -> bool:
        return self.is_available
