from app.core.security import get_password_hash, verify_password
from tests.conftest import register


def test_password_hashing():
    hashed = get_password_hash("secret-pass")

    assert hashed != "secret-pass"
    assert verify_password("secret-pass", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("secret-pass", "")


async def test_signup_rejects_duplicate_email(client):
    await register(client, "dup@example.com", "patient")

    response = await client.post("/api/v1/auth/signup", json={
        "email": "DUP@example.com", "password": "another-pass", "role": "patient"
    })

    assert response.status_code == 400


async def test_login_with_wrong_password(client):
    await register(client, "amy@example.com", "patient")

    response = await client.post("/api/v1/auth/login", json={"email": "amy@example.com", "password": "nope-nope"})

    assert response.status_code == 401


async def test_login_through_the_wrong_portal(client):
    await register(client, "doc@example.com", "doctor")

    response = await client.post("/api/v1/auth/login", json={
        "email": "doc@example.com", "password": "secret-pass", "role": "patient"
    })

    assert response.status_code == 403


async def test_login_stores_token(client, fake_redis):
    account = await register(client, "amy@example.com", "patient")

    assert await fake_redis.get(f"token:{account['token']}") is not None


async def test_me_reports_profile(client, patient):
    response = await client.get("/api/v1/auth/me", headers=patient["headers"])

    assert response.status_code == 200
    assert response.json()["role"] == "patient"
    assert response.json()["profile_id"] == patient["profile_id"]


async def test_logout_revokes_token(client):
    account = await register(client, "amy@example.com", "patient")

    assert (await client.post("/api/v1/auth/logout", headers=account["headers"])).status_code == 200

    response = await client.get("/api/v1/auth/me", headers=account["headers"])
    assert response.status_code == 401


async def test_missing_and_garbage_tokens(client):
    assert (await client.get("/api/v1/auth/me")).status_code == 401
    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


async def test_role_gates(client, doctor, patient):
    assert (await client.get("/api/v1/patients/me", headers=doctor["headers"])).status_code == 403
    assert (await client.get("/api/v1/availability/", headers=patient["headers"])).status_code == 403


async def test_missing_profile_is_reported(client):
    account = await register(client, "new@example.com", "patient")

    response = await client.get("/api/v1/appointments/me", headers=account["headers"])

    assert response.status_code == 404
    assert "complete your profile" in response.json()["detail"]


async def test_profile_can_only_be_created_once(client, patient):
    response = await client.post("/api/v1/patients/me", headers=patient["headers"], json={"full_name": "Again"})

    assert response.status_code == 400
