from pydantic import BaseModel, Field
from typing import Optional, List
from uuid import UUID
from datetime import datetime

class DoctorBase(BaseModel):
    full_name: str
    specialization: str
    license_number: str
    experience_years: int = Field(default=0, ge=0)
    consultation_fee: Optional[float] = Field(default=None, ge=0)
    bio: Optional[str] = None
    education: Optional[str] = None
    languages: List[str] = []
    clinic_address: Optional[str] = None
    clinic_phone: Optional[str] = None
    phone: Optional[str] = None
    profile_image: Optional[str] = None
    wallet_address: Optional[str] = None
    is_available: bool = True

class DoctorCreate(DoctorBase):
    pass

class DoctorUpdate(BaseModel):
    full_name: Optional[str] = None
    specialization: Optional[str] = None
    license_number: Optional[str] = None
    experience_years: Optional[int] = Field(default=None, ge=0)
    consultation_fee: Optional[float] = Field(default=None, ge=0)
    bio: Optional[str] = None
    education: Optional[str] = None
    languages: Optional[List[str]] = None
    clinic_address: Optional[str] = None
    clinic_phone: Optional[str] = None
    phone: Optional[str] = None
    profile_image: Optional[str] = None
    wallet_address: Optional[str] = None
    is_available: Optional[bool] = None

class DoctorResponse(DoctorBase):
    id: UUID
    user_id: UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class DoctorSummary(BaseModel):
    id: UUID
    user_id: UUID
    full_name: str
    specialization: str
    experience_years: int
    consultation_fee: Optional[float] = None
    is_available: bool

    class Config:
        from_attributes = True
