"""HTTP endpoints, backed by a per-test SQLite store."""

import io

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_job_service
from app.api.endpoints import spreadsheets
from app.main import app


@pytest.fixture
def client(service):
    app.dependency_overrides[get_job_service] = lambda: service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def workbook_bytes(df: pd.DataFrame) -> bytes:
    buffer = io.BytesIO()
    df.to_excel(buffer, index=False)
    return buffer.getvalue()


def post_job(client, valve_id="VLV-001", **extra):
    payload = {"valveId": valve_id, "description": "Leak repair and seal replacement", **extra}
    return client.post("/api/jobs", json=payload)


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_create_and_fetch_job(client):
    response = post_job(client, percentComplete=65, priority="high")

    assert response.status_code == 201
    body = response.json()
    assert body["valveId"] == "VLV-001"
    assert body["status"] == "on-hold"
    assert body["statusLabel"] == "ON-HOLD"
    assert body["statusColor"] == "#ef4444"

    fetched = client.get(f"/api/jobs/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["createdAt"] == body["createdAt"]


def test_create_duplicate_is_rejected(client):
    post_job(client)
    response = post_job(client)

    assert response.status_code == 400
    assert "already exists" in response.json()["detail"]


def test_percent_out_of_range_is_rejected(client):
    assert post_job(client, percentComplete=150).status_code == 422


def test_list_filters(client):
    post_job(client, "A", percentComplete=100)
    post_job(client, "B", percentComplete=10, priority="low")

    assert [j["valveId"] for j in client.get("/api/jobs").json()] == ["A", "B"]
    assert [j["valveId"] for j in client.get("/api/jobs", params={"status": "completed"}).json()] == ["A"]
    assert [j["valveId"] for j in client.get("/api/jobs", params={"priority": "low"}).json()] == ["B"]
    assert client.get("/api/jobs/stats").json()["total"] == 2


def test_update_and_delete(client):
    job_id = post_job(client).json()["id"]

    updated = client.put(f"/api/jobs/{job_id}", json={"percentComplete": 100})
    assert updated.status_code == 200
    assert updated.json()["statusLabel"] == "Shipped"

    assert client.delete(f"/api/jobs/{job_id}").status_code == 200
    assert client.get(f"/api/jobs/{job_id}").status_code == 404
    assert client.delete(f"/api/jobs/{job_id}").status_code == 404


def test_reset_and_sample_data(client):
    created = client.post("/api/sample-data")
    assert created.status_code == 201
    assert len(created.json()) == 5

    assert client.delete("/api/jobs").status_code == 200
    assert client.get("/api/jobs").json() == []


def test_import_spreadsheet(client):
    post_job(client, "VLV-001")
    content = workbook_bytes(pd.DataFrame({
        "Valve ID": ["VLV-001", "VLV-009"],
        "Description": ["Updated from sheet", "New from sheet"],
        "Priority": ["HIGH", "Low"],
    }))

    response = client.post("/api/import", files={"file": ("jobs.xlsx", content)})

    assert response.status_code == 200
    body = response.json()
    assert (body["added"], body["updated"], body["rows_parsed"]) == (1, 1, 2)
    descriptions = {j["valveId"]: j["description"] for j in client.get("/api/jobs").json()}
    assert descriptions == {"VLV-001": "Updated from sheet", "VLV-009": "New from sheet"}


def test_import_empty_sheet_is_rejected(client):
    content = workbook_bytes(pd.DataFrame(columns=["valveId", "description"]))

    response = client.post("/api/import", files={"file": ("empty.xlsx", content)})

    assert response.status_code == 400
    assert "no valid data" in response.json()["detail"]


def test_import_rejects_bad_files(client):
    assert client.post("/api/import", files={"file": ("jobs.pdf", b"%PDF")}).status_code == 400
    assert client.post("/api/import", files={"file": ("jobs.xlsx", b"garbage")}).status_code == 400


def test_export_downloads(client):
    post_job(client)

    csv_response = client.get("/api/export", params={"format": "csv"})
    assert csv_response.status_code == 200
    assert csv_response.headers["content-type"].startswith("text/csv")
    assert csv_response.text.splitlines()[0].startswith("Valve ID,Description,% Complete,Job Status")

    excel_response = client.get("/api/export")
    assert excel_response.status_code == 200
    sheets = pd.read_excel(io.BytesIO(excel_response.content), sheet_name=None)
    assert list(sheets) == ["Valve Repair Jobs", "Statistics"]

    assert client.get("/api/export", params={"format": "pdf"}).status_code == 400


def test_export_file_is_removed_after_download(client, tmp_path, monkeypatch):
    post_job(client)
    export_dir = tmp_path / "export"
    export_dir.mkdir()
    monkeypatch.setattr(spreadsheets.tempfile, "mkdtemp", lambda **kwargs: str(export_dir))

    response = client.get("/api/export", params={"format": "csv"})

    assert response.status_code == 200
    assert response.text.startswith("Valve ID")
    assert not export_dir.exists()


def test_rejected_export_leaves_no_directory(client, tmp_path, monkeypatch):
    export_dir = tmp_path / "export"
    export_dir.mkdir()
    monkeypatch.setattr(spreadsheets.tempfile, "mkdtemp", lambda **kwargs: str(export_dir))

    assert client.get("/api/export", params={"format": "pdf"}).status_code == 400
    assert not export_dir.exists()
