from datetime import date, time, timedelta
from uuid import UUID

from app.db.models import AppointmentSlot
from app.core.utils import sunday_first_weekday
from tests.conftest import book, register


async def open_starts(client, doctor, slot_date):
    response = await client.get(
        f"/api/v1/doctors/{doctor['profile_id']}/slots",
        params={"date": slot_date.isoformat()},
        headers=doctor["headers"],
    )
    assert response.status_code == 200, response.text
    return [s["start_time"] for s in response.json()["slots"]]


async def test_slots_reflect_weekly_rule(client, doctor, booking_date):
    starts = await open_starts(client, doctor, booking_date)

    assert starts == [f"{h:02d}:00:00" for h in range(9, 17)]


async def test_no_slots_on_days_without_rules(client, doctor, booking_date):
    assert await open_starts(client, doctor, booking_date + timedelta(days=1)) == []


async def test_available_days(client, doctor, booking_date):
    response = await client.get(f"/api/v1/doctors/{doctor['profile_id']}/available-days", headers=doctor["headers"])

    assert response.json()["days_of_week"] == [sunday_first_weekday(booking_date)]


async def test_booking_removes_the_window(client, doctor, patient, booking_date):
    response = await book(client, patient, doctor, booking_date)

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["success"] is True
    assert len(body["confirmation_code"]) == 8
    assert "10:00:00" not in await open_starts(client, doctor, booking_date)


async def test_double_booking_is_rejected(client, doctor, patient, booking_date):
    other = await register(client, "john@example.com", "patient")
    await client.post("/api/v1/patients/me", headers=other["headers"], json={"full_name": "John Roe"})

    first = await book(client, patient, doctor, booking_date)
    second = await book(client, other, doctor, booking_date)

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["detail"]["code"] == "slot_unavailable"


async def test_slot_constraint_catches_concurrent_booking(client, session, doctor, patient, booking_date):
    # Simulate a competing transaction that claimed the window first
    session.add(AppointmentSlot(
        doctor_id=UUID(doctor["profile_id"]),
        slot_date=booking_date,
        start_time=time(12),
        end_time=time(13),
    ))
    await session.commit()

    response = await book(client, patient, doctor, booking_date, "12:00:00", "13:00:00")

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "slot_unavailable"

    mine = await client.get("/api/v1/appointments/me", headers=patient["headers"])
    assert mine.json() == []

    # The rolled-back request leaves nothing behind and the next window still books
    assert (await book(client, patient, doctor, booking_date, "13:00:00", "14:00:00")).status_code == 201


async def test_cancel_frees_the_window(client, doctor, patient, booking_date):
    appointment_id = (await book(client, patient, doctor, booking_date)).json()["appointment_id"]

    response = await client.post(
        f"/api/v1/appointments/{appointment_id}/cancel",
        headers=patient["headers"],
        json={"reason": "Feeling better"},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert response.json()["cancellation_reason"] == "Feeling better"
    assert "10:00:00" in await open_starts(client, doctor, booking_date)
    assert (await book(client, patient, doctor, booking_date)).status_code == 201


async def test_cannot_book_past_time(client, doctor, patient):
    yesterday = date.today() - timedelta(days=1)

    response = await book(client, patient, doctor, yesterday)

    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot book past time"


async def test_cannot_book_outside_availability(client, doctor, patient, booking_date):
    late = await book(client, patient, doctor, booking_date, "18:00:00", "19:00:00")
    misaligned = await book(client, patient, doctor, booking_date, "09:30:00", "10:30:00")

    assert late.status_code == 400
    assert misaligned.status_code == 400


async def test_end_before_start_is_invalid(client, doctor, patient, booking_date):
    response = await book(client, patient, doctor, booking_date, "11:00:00", "10:00:00")

    assert response.status_code == 422


async def test_doctor_lifecycle(client, doctor, patient, booking_date):
    appointment_id = (await book(client, patient, doctor, booking_date)).json()["appointment_id"]
    base = f"/api/v1/appointments/{appointment_id}"

    pending = await client.get("/api/v1/appointments/doctor", params={"filter": "pending"}, headers=doctor["headers"])
    assert [a["id"] for a in pending.json()] == [appointment_id]

    assert (await client.post(f"{base}/complete", headers=doctor["headers"])).status_code == 400

    approved = await client.post(f"{base}/approve", headers=doctor["headers"])
    assert approved.json()["status"] == "confirmed"
    assert (await client.post(f"{base}/approve", headers=doctor["headers"])).status_code == 400

    completed = await client.post(f"{base}/complete", headers=doctor["headers"])
    assert completed.json()["status"] == "completed"

    cancel = await client.post(f"{base}/cancel", headers=doctor["headers"], json={})
    assert cancel.status_code == 400


async def test_patient_cannot_approve(client, doctor, patient, booking_date):
    appointment_id = (await book(client, patient, doctor, booking_date)).json()["appointment_id"]

    response = await client.post(f"/api/v1/appointments/{appointment_id}/approve", headers=patient["headers"])

    assert response.status_code == 403


async def test_reschedule_moves_the_booking(client, doctor, patient, booking_date):
    original_id = (await book(client, patient, doctor, booking_date)).json()["appointment_id"]

    response = await client.post(
        f"/api/v1/appointments/{original_id}/reschedule",
        headers=patient["headers"],
        json={"slot_date": booking_date.isoformat(), "start_time": "14:00:00", "end_time": "15:00:00"},
    )

    assert response.status_code == 201, response.text
    assert response.json()["message"] == "Appointment rescheduled successfully"

    starts = await open_starts(client, doctor, booking_date)
    assert "10:00:00" in starts
    assert "14:00:00" not in starts

    mine = {a["id"]: a for a in (await client.get("/api/v1/appointments/me", headers=patient["headers"])).json()}
    assert mine[original_id]["status"] == "cancelled"
    assert mine[response.json()["appointment_id"]]["rescheduled_from"] == original_id


async def test_doctor_sees_booked_patients(client, doctor, patient, booking_date):
    empty = await client.get("/api/v1/doctors/me/patients", headers=doctor["headers"])
    assert empty.json() == []

    denied = await client.get(f"/api/v1/doctors/me/patients/{patient['profile_id']}", headers=doctor["headers"])
    assert denied.status_code == 403

    await book(client, patient, doctor, booking_date)

    listed = await client.get("/api/v1/doctors/me/patients", headers=doctor["headers"])
    assert [p["id"] for p in listed.json()] == [patient["profile_id"]]
