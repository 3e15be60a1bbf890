from pydantic import BaseModel, Field, model_validator
from uuid import UUID
from datetime import date, datetime, time
from typing import Literal, Optional

AppointmentFilter = Literal["all", "pending", "today", "upcoming", "past"]

class BookSlotRequest(BaseModel):
    doctor_id: UUID
    slot_date: date
    start_time: time
    end_time: time
    reason: str = Field(min_length=1)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be later than start_time")
        return self

class RescheduleRequest(BaseModel):
    slot_date: date
    start_time: time
    end_time: time
    reason: Optional[str] = None

    @model_validator(mode="after")
    def check_window(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be later than start_time")
        return self

class CancelRequest(BaseModel):
    reason: Optional[str] = None

class BookingResult(BaseModel):
    success: bool
    appointment_id: Optional[UUID] = None
    confirmation_code: Optional[str] = None
    message: str

class AppointmentResponse(BaseModel):
    id: UUID
    doctor_id: UUID
    patient_id: UUID
    appointment_date: datetime
    duration_minutes: int
    status: str
    reason: Optional[str] = None
    notes: Optional[str] = None
    appointment_type: Optional[str] = None
    confirmation_code: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    rescheduled_from: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True
