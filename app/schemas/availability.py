from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import date, time
from typing import List, Optional
from uuid import UUID

class AvailabilityCreate(BaseModel):
    day_of_week: int = Field(ge=0, le=6) # 0=Sunday..6=Saturday
    start_time: time
    end_time: time
    is_available: bool = True

    @model_validator(mode="after")
    def check_window(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be later than start_time")
        return self

class AvailabilityUpdate(BaseModel):
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_available: Optional[bool] = None

    @field_validator("day_of_week", "start_time", "end_time", "is_available")
    @classmethod
    def reject_null(cls, value):
        # Omit a field to leave it unchanged; null is not a value for any of them
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

class AvailabilityResponse(BaseModel):
    id: UUID
    doctor_id: UUID
    day_of_week: int
    start_time: time
    end_time: time
    is_available: bool

    class Config:
        from_attributes = True

class CandidateWindow(BaseModel):
    id: str
    start_time: time
    end_time: time

class AvailableSlotsResponse(BaseModel):
    doctor_id: UUID
    date: date
    slot_duration_minutes: int
    slots: List[CandidateWindow]

class AvailableDaysResponse(BaseModel):
    doctor_id: UUID
    days_of_week: List[int]
