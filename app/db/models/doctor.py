from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import JSON, Column
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from .availability import DoctorAvailability
    from .appointment import Appointment

class DoctorProfile(SQLModel, table=True):
    __tablename__ = "doctor_profiles"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", unique=True, index=True)
    full_name: str
    specialization: str = Field(index=True)
    license_number: str
    experience_years: int = Field(default=0)
    consultation_fee: Optional[float] = None
    bio: Optional[str] = None
    education: Optional[str] = None
    languages: List[str] = Field(default=[], sa_column=Column(JSON))
    clinic_address: Optional[str] = None
    clinic_phone: Optional[str] = None
    phone: Optional[str] = None
    profile_image: Optional[str] = None
    wallet_address: Optional[str] = None
    is_available: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    availability: List["DoctorAvailability"] = Relationship(back_populates="doctor")
    appointments: List["Appointment"] = Relationship(back_populates="doctor")
