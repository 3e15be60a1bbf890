from datetime import date, datetime, time, timedelta
from typing import Callable, List, Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import delete, select

from app.core.config import settings
from app.core.logger import logger
from app.core.utils import generate_confirmation_code, sunday_first_weekday
from app.db.models import Appointment, AppointmentSlot, DoctorProfile, PatientProfile
from app.schemas.appointment import BookSlotRequest, BookingResult
from app.schemas.availability import CandidateWindow
from app.services.availability_service import AvailabilityService
from app.services.slots import Reservation, merge_windows, resolve

ACTIVE_STATES = ["pending", "confirmed"]


def slot_conflict(message: str) -> HTTPException:
    return HTTPException(status_code=409, detail={"code": "slot_unavailable", "message": message})


class AppointmentService:
    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = datetime.now):
        self.session = session
        self.clock = clock
        self.slot_duration = settings.SLOT_DURATION_MINUTES

    async def get_reservations(self, doctor_id: UUID, target_date: date) -> List[Reservation]:
        day_start = datetime.combine(target_date, time.min)
        stmt = select(Appointment).where(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date >= day_start,
            Appointment.appointment_date < day_start + timedelta(days=1),
            Appointment.status != "cancelled"
        )
        result = await self.session.execute(stmt)
        return [
            Reservation(start=appt.appointment_date, duration_minutes=appt.duration_minutes)
            for appt in result.scalars().all()
        ]

    async def resolve_windows(self, doctor_id: UUID, target_date: date, include_reserved: bool = False) -> List[CandidateWindow]:
        now = self.clock()
        if target_date < now.date():
            return []

        rules = await AvailabilityService(self.session).get_rules_for_day(doctor_id, sunday_first_weekday(target_date))
        if not rules:
            return []

        reservations = [] if include_reserved else await self.get_reservations(doctor_id, target_date)
        return merge_windows(
            resolve(rule, target_date, reservations, now, self.slot_duration) for rule in rules
        )

    async def get_available_slots(self, doctor_id: UUID, target_date: date) -> List[CandidateWindow]:
        await self.get_doctor(doctor_id)
        return await self.resolve_windows(doctor_id, target_date)

    async def get_doctor(self, doctor_id: UUID) -> DoctorProfile:
        doctor = await self.session.get(DoctorProfile, doctor_id)
        if not doctor:
            raise HTTPException(status_code=404, detail="Doctor not found")
        return doctor

    async def book_slot(self, patient_id: UUID, data: BookSlotRequest, rescheduled_from: Optional[UUID] = None) -> BookingResult:
        # 1. Validate doctor and patient
        doctor = await self.get_doctor(data.doctor_id)
        if not doctor.is_available:
            raise HTTPException(status_code=400, detail="Doctor is not accepting appointments")

        patient = await self.session.get(PatientProfile, patient_id)
        if not patient:
            raise HTTPException(status_code=404, detail="Patient not found")

        # 2. Validate the window
        appointment_at = datetime.combine(data.slot_date, data.start_time)
        if appointment_at <= self.clock():
            raise HTTPException(status_code=400, detail="Cannot book past time")

        offered = await self.resolve_windows(doctor.id, data.slot_date, include_reserved=True)
        if not any(w.start_time == data.start_time and w.end_time == data.end_time for w in offered):
            raise HTTPException(status_code=400, detail="Requested time is outside the doctor's availability")

        open_windows = await self.resolve_windows(doctor.id, data.slot_date)
        if not any(w.start_time == data.start_time for w in open_windows):
            logger.info(f"Slot {appointment_at.isoformat()} for doctor {doctor.id} already reserved")
            raise slot_conflict("This slot has just been booked. Please choose another time.")

        # 3. Reserve: appointment and slot row in one transaction
        # Plain values only past this point; a rollback expires loaded rows
        doctor_id = doctor.id
        appointment = Appointment(
            doctor_id=doctor_id,
            patient_id=patient.id,
            appointment_date=appointment_at,
            duration_minutes=self.slot_duration,
            status="pending",
            reason=data.reason,
            notes=data.notes,
            confirmation_code=generate_confirmation_code(),
            rescheduled_from=rescheduled_from
        )
        self.session.add(appointment)
        try:
            await self.session.flush()
            self.session.add(AppointmentSlot(
                doctor_id=doctor_id,
                slot_date=data.slot_date,
                start_time=data.start_time,
                end_time=data.end_time,
                appointment_id=appointment.id
            ))
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logger.info(f"Lost booking race for doctor {doctor_id} at {appointment_at.isoformat()}")
            raise slot_conflict("This slot has just been booked. Please choose another time.")

        await self.session.refresh(appointment)
        logger.info(f"Booked appointment {appointment.id} for doctor {doctor_id} at {appointment_at.isoformat()}")

        return BookingResult(
            success=True,
            appointment_id=appointment.id,
            confirmation_code=appointment.confirmation_code,
            message="Appointment booked successfully"
        )

    async def get_appointment(self, appointment_id: UUID) -> Appointment:
        appointment = await self.session.get(Appointment, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return appointment

    async def list_patient_appointments(self, patient_id: UUID) -> List[Appointment]:
        stmt = select(Appointment).where(
            Appointment.patient_id == patient_id
        ).order_by(Appointment.appointment_date.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_doctor_appointments(self, doctor_id: UUID, filter_by: str = "all") -> List[Appointment]:
        now = self.clock()
        stmt = select(Appointment).where(Appointment.doctor_id == doctor_id)

        if filter_by == "pending":
            stmt = stmt.where(Appointment.status == "pending")
        elif filter_by == "today":
            day_start = datetime.combine(now.date(), time.min)
            stmt = stmt.where(
                Appointment.appointment_date >= day_start,
                Appointment.appointment_date < day_start + timedelta(days=1)
            )
        elif filter_by == "upcoming":
            stmt = stmt.where(Appointment.appointment_date >= now)
        elif filter_by == "past":
            stmt = stmt.where(Appointment.appointment_date < now)

        stmt = stmt.order_by(Appointment.appointment_date)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    def _set_status(self, appointment: Appointment, status: str):
        appointment.status = status
        appointment.updated_at = datetime.utcnow()
        self.session.add(appointment)

    async def _release_slot(self, appointment: Appointment):
        stmt = delete(AppointmentSlot).where(AppointmentSlot.appointment_id == appointment.id)
        await self.session.execute(stmt)

    async def approve(self, doctor_id: UUID, appointment_id: UUID) -> Appointment:
        appointment = await self.get_doctor_appointment(doctor_id, appointment_id)
        if appointment.status != "pending":
            raise HTTPException(status_code=400, detail=f"Cannot approve a {appointment.status} appointment")

        self._set_status(appointment, "confirmed")
        await self.session.commit()
        await self.session.refresh(appointment)
        return appointment

    async def complete(self, doctor_id: UUID, appointment_id: UUID) -> Appointment:
        appointment = await self.get_doctor_appointment(doctor_id, appointment_id)
        if appointment.status != "confirmed":
            raise HTTPException(status_code=400, detail=f"Cannot complete a {appointment.status} appointment")

        self._set_status(appointment, "completed")
        await self.session.commit()
        await self.session.refresh(appointment)
        return appointment

    async def cancel(self, appointment: Appointment, reason: Optional[str] = None) -> Appointment:
        if appointment.status not in ACTIVE_STATES:
            raise HTTPException(status_code=400, detail=f"Cannot cancel a {appointment.status} appointment")

        self._set_status(appointment, "cancelled")
        appointment.cancellation_reason = reason
        appointment.cancelled_at = datetime.utcnow()
        # Free the window so it is offered again
        await self._release_slot(appointment)
        await self.session.commit()
        await self.session.refresh(appointment)
        logger.info(f"Cancelled appointment {appointment.id}")
        return appointment

    async def get_doctor_appointment(self, doctor_id: UUID, appointment_id: UUID) -> Appointment:
        appointment = await self.get_appointment(appointment_id)
        if appointment.doctor_id != doctor_id:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return appointment

    async def get_patient_appointment(self, patient_id: UUID, appointment_id: UUID) -> Appointment:
        appointment = await self.get_appointment(appointment_id)
        if appointment.patient_id != patient_id:
            raise HTTPException(status_code=404, detail="Appointment not found")
        return appointment

    async def reschedule(self, patient_id: UUID, appointment_id: UUID, slot_date: date, start_time: time, end_time: time, reason: Optional[str] = None) -> BookingResult:
        original = await self.get_patient_appointment(patient_id, appointment_id)
        if original.status not in ACTIVE_STATES:
            raise HTTPException(status_code=400, detail=f"Cannot reschedule a {original.status} appointment")

        # Book first so a lost race leaves the original untouched
        result = await self.book_slot(
            patient_id,
            BookSlotRequest(
                doctor_id=original.doctor_id,
                slot_date=slot_date,
                start_time=start_time,
                end_time=end_time,
                reason=reason or original.reason or "Rescheduled appointment",
                notes=original.notes
            ),
            rescheduled_from=original.id
        )
        await self.cancel(original, reason="Rescheduled")
        result.message = "Appointment rescheduled successfully"
        return result
