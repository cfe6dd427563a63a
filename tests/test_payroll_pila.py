from __future__ import annotations

import re
from decimal import Decimal

from fastapi.testclient import TestClient

CODE_SHAPE = re.compile(r"^[0-9A-F]{8}(-[0-9A-F]{8}){3}$")


def _seed_time_entry(
    client: TestClient,
    *,
    status: str = "submitted",
    work_date: str = "2025-03-03",
    arrival: str = "07:00",
    departure: str = "16:00",
) -> tuple[str, str]:
    project = client.post("/api/v1/projects", json={"code": "OBR-100", "name": "Bodega Funza"})
    assert project.status_code == 201
    person = client.post(
        "/api/v1/personnel",
        json={
            "name": "Ana Gomez",
            "document_number": "52000111",
            "position": "Soldadora",
            "department": "taller",
            "monthly_salary": "1423500",
            "hire_date": "2025-01-01",
            "arl_risk_class": "I",
        },
    )
    assert person.status_code == 201
    entry = client.post(
        "/api/v1/time-entries",
        json={
            "personnel_id": person.json()["id"],
            "project_id": project.json()["id"],
            "work_date": work_date,
            "arrival_time": arrival,
            "departure_time": departure,
            "status": status,
        },
    )
    assert entry.status_code == 201
    return person.json()["id"], entry.json()["id"]


def _create_period(client: TestClient, *, year: int = 2025, month: int = 3) -> str:
    response = client.post("/api/v1/payroll/periods", json={"year": year, "month": month})
    assert response.status_code == 201
    return response.json()["id"]


def test_period_creation_rules(client: TestClient) -> None:
    period_id = _create_period(client)

    body = client.get(f"/api/v1/payroll/periods/{period_id}").json()
    assert body["period"] == "2025-03"
    assert body["start_date"] == "2025-03-01"
    assert body["end_date"] == "2025-03-31"
    assert body["status"] == "draft"

    assert client.post("/api/v1/payroll/periods", json={"year": 2025, "month": 3}).status_code == 409
    assert client.post("/api/v1/payroll/periods", json={"year": 2030, "month": 1}).status_code == 422
    assert client.post("/api/v1/payroll/periods", json={"year": 2025, "month": 13}).status_code == 422


def test_processing_requires_reviewed_entries(client: TestClient) -> None:
    _, entry_id = _seed_time_entry(client)
    period_id = _create_period(client)

    readiness = client.get(f"/api/v1/payroll/periods/{period_id}/readiness").json()
    assert readiness["ready"] is False
    assert readiness["pending_entries"] == [entry_id]

    assert client.post(f"/api/v1/payroll/periods/{period_id}/process").status_code == 422

    client.post("/api/v1/time-entries/bulk-approve", json={"entry_ids": [entry_id]})
    readiness = client.get(f"/api/v1/payroll/periods/{period_id}/readiness").json()
    assert readiness["ready"] is True
    assert readiness["approved_entries"] == 1


def test_process_period_locks_entries_and_stores_details(client: TestClient) -> None:
    personnel_id, entry_id = _seed_time_entry(client)
    client.post("/api/v1/time-entries/bulk-approve", json={"entry_ids": [entry_id]})
    period_id = _create_period(client)

    processed = client.post(f"/api/v1/payroll/periods/{period_id}/process")
    assert processed.status_code == 200
    assert processed.json()["status"] == "completed"
    assert processed.json()["employee_count"] == 1
    assert processed.json()["total_gross"] == "1429987.30"

    entry = client.get(f"/api/v1/time-entries/{entry_id}").json()
    assert entry["status"] == "payroll_locked"
    assert entry["payroll_period_id"] == period_id

    details = client.get(f"/api/v1/payroll/periods/{period_id}/details").json()["items"]
    assert len(details) == 1
    detail = details[0]
    assert detail["personnel_id"] == personnel_id
    assert detail["days_worked"] == 1
    assert detail["regular_pay"] == "1423500.00"
    assert detail["overtime_pay"] == "6487.30"
    assert detail["transport_allowance"] == "200000.00"
    # The default company profile qualifies for the Law 1607 exoneration.
    assert detail["law_114_1_applied"] is True
    assert detail["employer_health"] == "0.00"
    assert CODE_SHAPE.match(detail["cune"])

    summary = client.get(f"/api/v1/payroll/periods/{period_id}/summary").json()
    assert summary["employees"] == 1
    assert summary["totals"]["gross_pay"] == "1429987.30"
    assert summary["law_114_1"]["employees"] == 1

    assert client.post(f"/api/v1/payroll/periods/{period_id}/process").status_code == 409

    audit = client.get("/api/v1/audit-events", params={"entity": "payroll_period"}).json()["items"]
    assert [event["action_type"] for event in audit] == ["processed"]


def _process_single_entry(client: TestClient, **entry: str) -> dict[str, object]:
    _, entry_id = _seed_time_entry(client, **entry)
    client.post("/api/v1/time-entries/bulk-approve", json={"entry_ids": [entry_id]})
    period_id = _create_period(client)
    assert client.post(f"/api/v1/payroll/periods/{period_id}/process").status_code == 200
    return client.get(f"/api/v1/payroll/periods/{period_id}/details").json()["items"][0]


def test_sunday_overtime_uses_holiday_surcharge(client: TestClient) -> None:
    detail = _process_single_entry(client, work_date="2025-03-02")

    # 0.70 h at the 100 % rest-day surcharge.
    assert detail["overtime_pay"] == "10379.69"
    assert detail["night_premium_pay"] == "0.00"
    assert detail["gross_pay"] == "1433879.69"


def test_night_overtime_and_ordinary_night_premium(client: TestClient) -> None:
    detail = _process_single_entry(client, work_date="2025-03-04", arrival="14:00", departure="23:00")

    # One night hour: 0.70 h of it is overtime, the remaining 0.30 h is ordinary night work.
    assert Decimal(detail["overtime_hours"]) == Decimal("0.70")
    assert Decimal(detail["night_hours"]) == Decimal("0.30")
    assert detail["overtime_pay"] == "9082.23"
    assert detail["night_premium_pay"] == "778.48"
    assert detail["gross_pay"] == "1433360.71"


def test_company_default_arl_class_used_for_unclassified_staff(client: TestClient) -> None:
    assert client.post("/api/v1/payroll/preview", json={"monthly_salary": "1423500"}).json()["calculation"][
        "arl_risk_class"
    ] == "V"

    updated = client.put("/api/v1/settings/company_profile", json={"value": {"default_arl_risk_class": "I"}})
    assert updated.status_code == 200

    preview = client.post("/api/v1/payroll/preview", json={"monthly_salary": "1423500"}).json()
    assert preview["calculation"]["arl_risk_class"] == "I"
    assert preview["calculation"]["arl"] == "7430.67"
    assert "ARL risk class not set; class I applied." in preview["validation"]["warnings"]

    rejected = client.put("/api/v1/settings/company_profile", json={"value": {"default_arl_risk_class": "VI"}})
    assert rejected.status_code == 422


def test_processed_period_blocks_time_entry_changes(client: TestClient) -> None:
    personnel_id, entry_id = _seed_time_entry(client)
    client.post("/api/v1/time-entries/bulk-approve", json={"entry_ids": [entry_id]})
    period_id = _create_period(client)
    client.post(f"/api/v1/payroll/periods/{period_id}/process")
    project_id = client.get(f"/api/v1/time-entries/{entry_id}").json()["project_id"]

    late_entry = client.post(
        "/api/v1/time-entries",
        json={
            "personnel_id": personnel_id,
            "project_id": project_id,
            "work_date": "2025-03-20",
            "arrival_time": "07:00",
            "departure_time": "16:00",
        },
    )
    assert late_entry.status_code == 409
    assert client.patch(f"/api/v1/time-entries/{entry_id}", json={"description": "x"}).status_code == 409
    assert client.delete(f"/api/v1/time-entries/{entry_id}").status_code == 409
    assert (
        client.post("/api/v1/time-entries/bulk-reject", json={"entry_ids": [entry_id]}).status_code == 409
    )

    assert client.delete(f"/api/v1/payroll/periods/{period_id}").status_code == 204
    released = client.get(f"/api/v1/time-entries/{entry_id}").json()
    assert released["status"] == "approved"
    assert released["payroll_period_id"] is None


def test_payroll_preview_and_config(client: TestClient) -> None:
    preview = client.post(
        "/api/v1/payroll/preview",
        json={"name": "Simulacion", "monthly_salary": "1423500", "arl_risk_class": "I"},
    )
    assert preview.status_code == 200
    body = preview.json()
    assert body["year"] == 2025
    assert body["calculation"]["gross_pay"] == "1423500.00"
    assert body["calculation"]["transport_allowance"] == "200000.00"
    assert body["validation"]["is_valid"] is True

    low = client.post("/api/v1/payroll/preview", json={"monthly_salary": "1000000"})
    assert low.json()["validation"]["compliance"]["minimum_wage"] is False

    config = client.get("/api/v1/payroll/config/2025")
    assert config.status_code == 200
    assert config.json()["minimum_wage"] == "1423500"
    assert client.get("/api/v1/payroll/config/2030").status_code == 404


def test_pila_generation_and_status_flow(client: TestClient) -> None:
    _seed_time_entry(client)

    generated = client.post("/api/v1/pila/submissions", json={"period": "2025-03"})
    assert generated.status_code == 201
    body = generated.json()
    assert body["status"] == "generated"
    assert body["employee_count"] == 1
    row = body["rows"][0]
    assert row["days_worked"] == 1
    assert row["ibc"] == "1423500"
    assert row["health_employee"] == "56940"
    assert row["pension_employer"] == "170820"
    assert row["arl"] == "7431"
    assert row["health_employer"] == "0"
    assert row["novelties"] == ""

    assert client.post("/api/v1/pila/submissions", json={"period": "2025-03"}).status_code == 409
    assert client.post("/api/v1/pila/submissions", json={"period": "2025-13"}).status_code == 422
    assert client.post("/api/v1/pila/submissions", json={"period": "2025-05"}).status_code == 404

    listing = client.get("/api/v1/pila/submissions").json()["items"]
    assert [item["period"] for item in listing] == ["2025-03"]
    assert "rows" not in listing[0]

    download = client.get("/api/v1/pila/submissions/2025-03/download", params={"format": "csv"})
    assert download.status_code == 200
    assert download.headers["content-type"].startswith("text/csv")
    assert "pila_2025-03.csv" in download.headers["content-disposition"]
    assert download.text.splitlines()[0].startswith("document_type,document_number,name")

    submitted = client.put("/api/v1/pila/submissions/2025-03/status", json={"status": "submitted"})
    assert submitted.status_code == 200
    assert submitted.json()["status"] == "submitted"

    backwards = client.put("/api/v1/pila/submissions/2025-03/status", json={"status": "generated"})
    assert backwards.status_code == 409
    assert client.delete("/api/v1/pila/submissions/2025-03").status_code == 409


def test_pila_generated_submission_can_be_deleted(client: TestClient) -> None:
    _seed_time_entry(client)
    client.post("/api/v1/pila/submissions", json={"period": "2025-03"})

    assert client.delete("/api/v1/pila/submissions/2025-03").status_code == 204
    assert client.get("/api/v1/pila/submissions/2025-03").status_code == 404


def test_pila_marks_new_hires(client: TestClient) -> None:
    project = client.post("/api/v1/projects", json={"code": "OBR-200", "name": "Puente"}).json()
    person = client.post(
        "/api/v1/personnel",
        json={
            "name": "Nuevo Ingreso",
            "document_number": "80000222",
            "position": "Ayudante",
            "department": "obra",
            "monthly_salary": "1423500",
            "hire_date": "2025-03-03",
        },
    ).json()
    client.post(
        "/api/v1/time-entries",
        json={
            "personnel_id": person["id"],
            "project_id": project["id"],
            "work_date": "2025-03-03",
            "arrival_time": "07:00",
            "departure_time": "16:00",
        },
    )

    row = client.post("/api/v1/pila/submissions", json={"period": "2025-03"}).json()["rows"][0]

    assert row["novelties"] == "ING"
    assert row["arl_risk_class"] == "V"
