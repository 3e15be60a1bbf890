"""Pytest configuration and fixtures."""

import os
import tempfile

# The app engine is only used by tests that run the full lifespan (TestClient)
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{tempfile.mkdtemp()}/intellihealth-test.db")
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import date, timedelta

import fakeredis
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.api.v1.reports import get_report_service
from app.core.redis import redis_client
from app.core.storage import ReportStorage
from app.core.utils import sunday_first_weekday
from app.db import models  # noqa: F401
from app.db.session import get_session
from app.main import app
from app.services.report_service import ReportService


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture(autouse=True)
def fake_redis():
    """Swap the shared Redis connection for an in-memory one."""
    original = redis_client.redis
    fake = fakeredis.FakeAsyncRedis(decode_responses=True)
    redis_client.redis = fake
    yield fake
    redis_client.redis = original


@pytest.fixture
def storage(tmp_path) -> ReportStorage:
    return ReportStorage(str(tmp_path / "reports"))


@pytest.fixture
async def client(session_maker, storage):
    async def override_get_session():
        async with session_maker() as session:
            yield session

    async def override_get_report_service():
        async with session_maker() as session:
            yield ReportService(session, storage)

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_report_service] = override_get_report_service
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def booking_date() -> date:
    """A date one week out, so no window on it has started yet."""
    return date.today() + timedelta(days=7)


async def register(client: AsyncClient, email: str, role: str, password: str = "secret-pass") -> dict:
    response = await client.post("/api/v1/auth/signup", json={"email": email, "password": password, "role": role})
    assert response.status_code == 201, response.text
    response = await client.post("/api/v1/auth/login", json={"email": email, "password": password, "role": role})
    assert response.status_code == 200, response.text
    body = response.json()
    return {
        "user_id": body["user"]["id"],
        "token": body["access_token"],
        "headers": {"Authorization": f"Bearer {body['access_token']}"},
    }


@pytest.fixture
async def doctor(client, booking_date) -> dict:
    account = await register(client, "house@example.com", "doctor")
    response = await client.post("/api/v1/doctors/me", headers=account["headers"], json={
        "full_name": "Gregory House",
        "specialization": "Diagnostics",
        "license_number": "LIC-001",
        "experience_years": 20,
    })
    assert response.status_code == 201, response.text
    account["profile_id"] = response.json()["id"]

    response = await client.put("/api/v1/availability/", headers=account["headers"], json=[{
        "day_of_week": sunday_first_weekday(booking_date),
        "start_time": "09:00:00",
        "end_time": "17:00:00",
    }])
    assert response.status_code == 200, response.text
    return account


@pytest.fixture
async def patient(client) -> dict:
    account = await register(client, "jane@example.com", "patient")
    response = await client.post("/api/v1/patients/me", headers=account["headers"], json={
        "full_name": "Jane Doe",
        "gender": "female",
    })
    assert response.status_code == 201, response.text
    account["profile_id"] = response.json()["id"]
    return account


async def book(client: AsyncClient, patient: dict, doctor: dict, slot_date: date, start: str = "10:00:00", end: str = "11:00:00"):
    return await client.post("/api/v1/appointments/", headers=patient["headers"], json={
        "doctor_id": doctor["profile_id"],
        "slot_date": slot_date.isoformat(),
        "start_time": start,
        "end_time": end,
        "reason": "Persistent cough",
    })
