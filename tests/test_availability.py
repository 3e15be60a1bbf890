from tests.conftest import register


async def test_rules_replace_per_day(client, doctor):
    response = await client.put("/api/v1/availability/", headers=doctor["headers"], json=[
        {"day_of_week": 3, "start_time": "08:00:00", "end_time": "12:00:00"},
        {"day_of_week": 3, "start_time": "13:00:00", "end_time": "15:00:00"},
    ])
    assert response.status_code == 200

    response = await client.put("/api/v1/availability/", headers=doctor["headers"], json=[
        {"day_of_week": 3, "start_time": "10:00:00", "end_time": "11:00:00"},
    ])
    assert response.status_code == 200

    rules = (await client.get("/api/v1/availability/", headers=doctor["headers"])).json()
    wednesday = [r for r in rules if r["day_of_week"] == 3]
    assert [(r["start_time"], r["end_time"]) for r in wednesday] == [("10:00:00", "11:00:00")]


async def test_invalid_rules_are_rejected(client, doctor):
    inverted = await client.put("/api/v1/availability/", headers=doctor["headers"], json=[
        {"day_of_week": 2, "start_time": "12:00:00", "end_time": "09:00:00"},
    ])
    bad_day = await client.put("/api/v1/availability/", headers=doctor["headers"], json=[
        {"day_of_week": 7, "start_time": "09:00:00", "end_time": "12:00:00"},
    ])

    assert inverted.status_code == 422
    assert bad_day.status_code == 422


async def test_update_deactivate_and_delete(client, doctor, booking_date):
    rule = (await client.get("/api/v1/availability/", headers=doctor["headers"])).json()[0]
    base = f"/api/v1/availability/{rule['id']}"

    updated = await client.patch(base, headers=doctor["headers"], json={"end_time": "12:00:00"})
    assert updated.json()["end_time"] == "12:00:00"

    inverted = await client.patch(base, headers=doctor["headers"], json={"end_time": "08:00:00"})
    assert inverted.status_code == 400

    assert (await client.post(f"{base}/deactivate", headers=doctor["headers"])).status_code == 200
    slots = await client.get(
        f"/api/v1/doctors/{doctor['profile_id']}/slots",
        params={"date": booking_date.isoformat()},
        headers=doctor["headers"],
    )
    assert slots.json()["slots"] == []

    assert (await client.delete(base, headers=doctor["headers"])).status_code == 200
    assert (await client.get("/api/v1/availability/", headers=doctor["headers"])).json() == []


async def test_rules_of_other_doctors_are_hidden(client, doctor):
    other = await register(client, "wilson@example.com", "doctor")
    await client.post("/api/v1/doctors/me", headers=other["headers"], json={
        "full_name": "James Wilson", "specialization": "Oncology", "license_number": "LIC-002"
    })
    rule = (await client.get("/api/v1/availability/", headers=doctor["headers"])).json()[0]

    response = await client.delete(f"/api/v1/availability/{rule['id']}", headers=other["headers"])

    assert response.status_code == 404


async def test_update_rejects_explicit_nulls(client, doctor):
    rule = (await client.get("/api/v1/availability/", headers=doctor["headers"])).json()[0]
    base = f"/api/v1/availability/{rule['id']}"

    for field in ("start_time", "end_time", "day_of_week", "is_available"):
        response = await client.patch(base, headers=doctor["headers"], json={field: None})
        assert response.status_code == 422, field

    unchanged = (await client.get("/api/v1/availability/", headers=doctor["headers"])).json()[0]
    assert unchanged == rule
