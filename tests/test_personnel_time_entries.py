from __future__ import annotations

from fastapi.testclient import TestClient

MISSING_ID = "00000000-0000-0000-0000-000000000000"


def _create_project(client: TestClient, *, code: str = "OBR-001") -> str:
    response = client.post(
        "/api/v1/projects",
        json={"code": code, "name": f"Obra {code}", "budget_labor": "1000000"},
    )
    assert response.status_code == 201
    return response.json()["id"]


def _create_personnel(client: TestClient, *, document_number: str = "1010101010", **overrides: object) -> str:
    payload: dict[str, object] = {
        "name": "Carlos Perez",
        "document_number": document_number,
        "position": "Oficial de obra",
        "department": "obra",
        "salary_type": "monthly",
        "monthly_salary": "1423500",
        "hire_date": "2025-01-01",
        "arl_risk_class": "iv",
    }
    payload.update(overrides)
    response = client.post("/api/v1/personnel", json=payload)
    assert response.status_code == 201
    return response.json()["id"]


def _create_entry(client: TestClient, personnel_id: str, project_id: str, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "personnel_id": personnel_id,
        "project_id": project_id,
        "work_date": "2025-03-03",
        "arrival_time": "07:00",
        "departure_time": "16:00",
    }
    payload.update(overrides)
    response = client.post("/api/v1/time-entries", json=payload)
    assert response.status_code == 201
    return response.json()


def test_personnel_create_and_validation(client: TestClient) -> None:
    personnel_id = _create_personnel(client)

    body = client.get(f"/api/v1/personnel/{personnel_id}").json()
    assert body["arl_risk_class"] == "IV"
    assert body["status"] == "active"
    assert body["monthly_salary"] == "1423500.00"

    duplicate = client.post(
        "/api/v1/personnel",
        json={
            "name": "Otro",
            "document_number": "1010101010",
            "position": "Ayudante",
            "department": "obra",
            "monthly_salary": "1423500",
            "hire_date": "2025-01-01",
        },
    )
    assert duplicate.status_code == 409

    no_salary = client.post(
        "/api/v1/personnel",
        json={"name": "Sin sueldo", "document_number": "222", "position": "Ayudante", "department": "obra", "hire_date": "2025-01-01"},
    )
    assert no_salary.status_code == 422

    bad_arl = client.post(
        "/api/v1/personnel",
        json={
            "name": "Riesgo",
            "document_number": "333",
            "position": "Soldador",
            "department": "taller",
            "monthly_salary": "2000000",
            "hire_date": "2025-01-01",
            "arl_risk_class": "VII",
        },
    )
    assert bad_arl.status_code == 422


def test_deactivating_personnel_sets_termination_date(client: TestClient) -> None:
    personnel_id = _create_personnel(client)

    response = client.patch(f"/api/v1/personnel/{personnel_id}", json={"status": "inactive"})

    assert response.status_code == 200
    assert response.json()["status"] == "inactive"
    assert response.json()["termination_date"] is not None
    active = client.get("/api/v1/personnel", params={"status": "active"})
    assert active.json()["items"] == []


def test_personnel_with_time_entries_cannot_be_deleted(client: TestClient) -> None:
    project_id = _create_project(client)
    busy_id = _create_personnel(client)
    idle_id = _create_personnel(client, document_number="2020202020", name="Mario Diaz")
    _create_entry(client, busy_id, project_id)

    assert client.delete(f"/api/v1/personnel/{busy_id}").status_code == 409
    assert client.delete(f"/api/v1/personnel/{idle_id}").status_code == 204


def test_time_entry_computes_hours_and_pay(client: TestClient) -> None:
    project_id = _create_project(client)
    personnel_id = _create_personnel(client)

    entry = _create_entry(client, personnel_id, project_id)

    assert entry["status"] == "draft"
    assert entry["arrival_time"] == "07:00"
    assert entry["total_hours"] == "8.00"
    assert entry["regular_hours"] == "7.30"
    assert entry["overtime_hours"] == "0.70"
    assert entry["hourly_rate"] == "8125.00"
    assert entry["regular_pay"] == "59312.50"
    assert entry["overtime_pay"] == "7109.38"
    assert entry["total_pay"] == "66421.88"

    project = client.get(f"/api/v1/projects/{project_id}").json()
    assert project["spent_labor"] == "66421.88"


def test_time_entry_lateness_discount(client: TestClient) -> None:
    project_id = _create_project(client)
    personnel_id = _create_personnel(client, expected_arrival_time="06:30")

    entry = _create_entry(client, personnel_id, project_id, arrival_time="06:50", departure_time="15:50")

    assert entry["late_minutes"] == 20
    assert entry["penalized_late_minutes"] == 15
    assert entry["late_discount"] == "2031.25"


def test_time_entry_rules_and_conflicts(client: TestClient) -> None:
    project_id = _create_project(client)
    personnel_id = _create_personnel(client)
    _create_entry(client, personnel_id, project_id)

    duplicate = client.post(
        "/api/v1/time-entries",
        json={
            "personnel_id": personnel_id,
            "project_id": project_id,
            "work_date": "2025-03-03",
            "arrival_time": "08:00",
            "departure_time": "12:00",
        },
    )
    assert duplicate.status_code == 409

    approved_on_create = client.post(
        "/api/v1/time-entries",
        json={
            "personnel_id": personnel_id,
            "project_id": project_id,
            "work_date": "2025-03-04",
            "arrival_time": "07:00",
            "departure_time": "16:00",
            "status": "approved",
        },
    )
    assert approved_on_create.status_code == 422

    too_long = client.post(
        "/api/v1/time-entries",
        json={
            "personnel_id": personnel_id,
            "project_id": project_id,
            "work_date": "2025-03-05",
            "arrival_time": "05:00",
            "departure_time": "19:00",
            "lunch_deducted": False,
        },
    )
    assert too_long.status_code == 422

    missing_project = client.post(
        "/api/v1/time-entries",
        json={
            "personnel_id": personnel_id,
            "project_id": MISSING_ID,
            "work_date": "2025-03-06",
            "arrival_time": "07:00",
            "departure_time": "16:00",
        },
    )
    assert missing_project.status_code == 404


def test_time_entries_require_active_personnel(client: TestClient) -> None:
    project_id = _create_project(client)
    personnel_id = _create_personnel(client, status="inactive")

    response = client.post(
        "/api/v1/time-entries",
        json={
            "personnel_id": personnel_id,
            "project_id": project_id,
            "work_date": "2025-03-03",
            "arrival_time": "07:00",
            "departure_time": "16:00",
        },
    )

    assert response.status_code == 422


def test_time_entry_update_recomputes_and_blocks_review_status(client: TestClient) -> None:
    project_id = _create_project(client)
    personnel_id = _create_personnel(client)
    entry = _create_entry(client, personnel_id, project_id)

    update = client.patch(
        f"/api/v1/time-entries/{entry['id']}",
        json={"departure_time": "15:18", "status": "submitted"},
    )
    assert update.status_code == 200
    assert update.json()["status"] == "submitted"
    assert update.json()["total_hours"] == "7.30"
    assert update.json()["overtime_hours"] == "0.00"

    review = client.patch(f"/api/v1/time-entries/{entry['id']}", json={"status": "approved"})
    assert review.status_code == 422


def test_bulk_review_and_summaries_exclude_rejected(client: TestClient) -> None:
    project_id = _create_project(client)
    personnel_id = _create_personnel(client)
    kept = _create_entry(client, personnel_id, project_id, status="submitted")
    dropped = _create_entry(client, personnel_id, project_id, work_date="2025-03-04", status="submitted")

    approve = client.post("/api/v1/time-entries/bulk-approve", json={"entry_ids": [kept["id"]]})
    assert approve.status_code == 200
    assert approve.json()["items"][0]["status"] == "approved"

    reject = client.post("/api/v1/time-entries/bulk-reject", json={"entry_ids": [dropped["id"]]})
    assert reject.status_code == 200
    assert reject.json()["items"][0]["status"] == "rejected"

    missing = client.post("/api/v1/time-entries/bulk-approve", json={"entry_ids": [MISSING_ID]})
    assert missing.status_code == 404

    project = client.get(f"/api/v1/projects/{project_id}").json()
    assert project["spent_labor"] == "66421.88"

    personnel_summary = client.get(f"/api/v1/time-entries/personnel/{personnel_id}/summary")
    assert personnel_summary.status_code == 200
    totals = personnel_summary.json()["totals"]
    assert totals["entries"] == 1
    assert totals["total_hours"] == "8.00"
    assert totals["total_pay"] == "66421.88"

    project_summary = client.get(f"/api/v1/time-entries/projects/{project_id}/summary")
    assert project_summary.json()["totals"]["days_worked"] == 1

    listing = client.get("/api/v1/time-entries", params={"status": "rejected"})
    assert [row["id"] for row in listing.json()["items"]] == [dropped["id"]]


def test_project_assignments(client: TestClient) -> None:
    project_id = _create_project(client)
    personnel_id = _create_personnel(client)

    created = client.post(
        f"/api/v1/projects/{project_id}/assignments",
        json={"personnel_id": personnel_id, "start_date": "2025-03-01", "role": "Oficial"},
    )
    assert created.status_code == 201
    assert created.json()["personnel_name"] == "Carlos Perez"

    again = client.post(
        f"/api/v1/projects/{project_id}/assignments",
        json={"personnel_id": personnel_id, "start_date": "2025-03-10"},
    )
    assert again.status_code == 409

    listing = client.get(f"/api/v1/projects/{project_id}/assignments")
    assert len(listing.json()["items"]) == 1

    delete = client.delete(f"/api/v1/projects/{project_id}/assignments/{created.json()['id']}")
    assert delete.status_code == 204
