from pathlib import Path

import pytest
from starlette.datastructures import UploadFile as StarletteUploadFile

from app.core.config import settings
from app.core.storage import ReportStorage
from tests.conftest import book

PDF = b"%PDF-1.4 hemoglobin 13.5 g/dL"


async def upload(client, account, content=PDF, **fields):
    data = {"title": "Blood panel", "report_type": "lab", **fields}
    return await client.post(
        "/api/v1/reports/",
        headers=account["headers"],
        files={"file": ("blood panel.pdf", content, "application/pdf")},
        data=data,
    )


def stored_files(storage):
    return [p for p in Path(storage.root).rglob("*") if p.is_file()]


async def test_upload_records_digest(client, patient, storage):
    response = await upload(client, patient)

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["is_verified"] is True
    assert len(body["hash"]) == 64
    assert body["file_size"] == len(PDF)
    assert [p.name.split("_", 1)[1] for p in stored_files(storage)] == ["blood_panel.pdf"]


async def test_download_returns_verified_bytes(client, patient):
    report_id = (await upload(client, patient)).json()["id"]

    response = await client.get(f"/api/v1/reports/{report_id}/file", params={"action": "download"}, headers=patient["headers"])

    assert response.status_code == 200
    assert response.content == PDF
    assert response.headers["content-disposition"].startswith("attachment")

    log = (await client.get(f"/api/v1/reports/{report_id}/access-log", headers=patient["headers"])).json()
    assert {entry["action"] for entry in log} == {"upload", "download"}


async def test_tampered_file_is_withheld(client, patient, storage):
    report_id = (await upload(client, patient)).json()["id"]
    stored_files(storage)[0].write_bytes(b"%PDF-1.4 hemoglobin 19.9 g/dL")

    response = await client.get(f"/api/v1/reports/{report_id}/file", headers=patient["headers"])

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "integrity_violation"
    assert b"hemoglobin" not in response.content

    log = (await client.get(f"/api/v1/reports/{report_id}/access-log", headers=patient["headers"])).json()
    assert "integrity_failure" in [entry["action"] for entry in log]
    assert "view" not in [entry["action"] for entry in log]


async def test_empty_upload_is_rejected(client, patient):
    response = await upload(client, patient, content=b"")

    assert response.status_code == 400


async def test_oversized_upload_is_rejected(client, patient, monkeypatch):
    monkeypatch.setattr(settings, "MAX_REPORT_SIZE_BYTES", 4)

    response = await upload(client, patient)

    assert response.status_code == 413


async def test_doctor_access_requires_consultation(client, doctor, patient, booking_date):
    report_id = (await upload(client, patient)).json()["id"]

    assert (await client.get(f"/api/v1/reports/{report_id}", headers=doctor["headers"])).status_code == 404
    assert (await client.get("/api/v1/reports/", headers=doctor["headers"])).json() == []

    await book(client, patient, doctor, booking_date)

    assert (await client.get(f"/api/v1/reports/{report_id}", headers=doctor["headers"])).status_code == 200
    listed = (await client.get("/api/v1/reports/", headers=doctor["headers"])).json()
    assert [r["id"] for r in listed] == [report_id]

    # Only the patient reads the access log
    assert (await client.get(f"/api/v1/reports/{report_id}/access-log", headers=doctor["headers"])).status_code == 403


async def test_doctor_uploads_for_consulted_patient(client, doctor, patient, booking_date):
    denied = await upload(client, doctor, patient_id=patient["profile_id"])
    assert denied.status_code == 403

    await book(client, patient, doctor, booking_date)

    response = await upload(client, doctor, patient_id=patient["profile_id"])
    assert response.status_code == 201
    assert response.json()["uploaded_by_doctor_id"] == doctor["profile_id"]
    assert response.json()["patient_id"] == patient["profile_id"]


async def test_storage_rejects_escaping_keys(tmp_path):
    storage = ReportStorage(str(tmp_path))

    with pytest.raises(ValueError):
        await storage.upload("../outside.pdf", b"data")


async def test_upload_reads_at_most_one_byte_past_the_limit(client, patient, monkeypatch):
    monkeypatch.setattr(settings, "MAX_REPORT_SIZE_BYTES", 4)
    sizes = []
    original_read = StarletteUploadFile.read

    async def tracking_read(self, size=-1):
        sizes.append(size)
        return await original_read(self, size)

    monkeypatch.setattr(StarletteUploadFile, "read", tracking_read)

    response = await upload(client, patient)

    assert response.status_code == 413
    assert sizes == [5]
