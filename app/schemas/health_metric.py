from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import Optional

class HealthMetricCreate(BaseModel):
    weight_kg: Optional[float] = Field(default=None, gt=0)
    height_cm: Optional[float] = Field(default=None, gt=0)
    blood_pressure_systolic: Optional[int] = Field(default=None, gt=0)
    blood_pressure_diastolic: Optional[int] = Field(default=None, gt=0)
    heart_rate: Optional[int] = Field(default=None, gt=0)
    blood_sugar: Optional[float] = Field(default=None, gt=0)
    temperature: Optional[float] = Field(default=None, gt=0)
    notes: Optional[str] = None
    recorded_at: Optional[datetime] = None

class HealthMetricResponse(BaseModel):
    id: UUID
    patient_id: UUID
    weight_kg: Optional[float] = None
    height_cm: Optional[float] = None
    bmi: Optional[float] = None
    blood_pressure_systolic: Optional[int] = None
    blood_pressure_diastolic: Optional[int] = None
    heart_rate: Optional[int] = None
    blood_sugar: Optional[float] = None
    temperature: Optional[float] = None
    notes: Optional[str] = None
    recorded_at: datetime

    class Config:
        from_attributes = True

class BMIAnalysis(BaseModel):
    bmi: float
    status: str
    advice: str
