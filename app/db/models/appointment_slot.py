from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from typing import Optional
from datetime import date, datetime, time
from uuid import UUID, uuid4

class AppointmentSlot(SQLModel, table=True):
    """One booked window. The unique key makes concurrent bookings of the same window fail."""
    __tablename__ = "appointment_slots"
    __table_args__ = (
        UniqueConstraint("doctor_id", "slot_date", "start_time", name="uq_appointment_slot"),
    )
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    doctor_id: UUID = Field(foreign_key="doctor_profiles.id")
    slot_date: date
    start_time: time
    end_time: time
    is_booked: bool = Field(default=True)
    appointment_id: Optional[UUID] = Field(default=None, foreign_key="appointments.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
