from __future__ import annotations

from fastapi.testclient import TestClient


def test_builtin_defaults_are_listed(client: TestClient) -> None:
    response = client.get("/api/v1/settings")
    assert response.status_code == 200
    items = response.json()["items"]

    assert [item["key"] for item in items] == ["company_profile", "workday_rules"]
    assert all(item["is_default"] for item in items)

    workday = client.get("/api/v1/settings/workday_rules").json()
    assert workday["category"] == "payroll"
    assert workday["value"]["late_tolerance_minutes"] == 5
    assert workday["value"]["night_start"] == "22:00"
    assert workday["updated_at"] is None

    profile = client.get("/api/v1/settings/company_profile").json()
    assert profile["value"]["qualifies_law_114_1"] is True
    assert profile["value"]["nit"] == "900123456-1"

    assert client.get("/api/v1/settings", params={"category": "company"}).json()["items"][0]["key"] == "company_profile"
    assert client.get("/api/v1/settings/unknown_key").status_code == 404


def test_put_workday_rules_normalizes_and_validates(client: TestClient) -> None:
    response = client.put(
        "/api/v1/settings/workday_rules",
        json={"value": {"late_tolerance_minutes": "30", "night_start": "21:00"}},
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["is_default"] is False
    assert body["value"]["late_tolerance_minutes"] == 30
    assert body["value"]["night_start"] == "21:00"
    assert body["value"]["max_daily_hours"] == "12"

    invalid = client.put("/api/v1/settings/workday_rules", json={"value": {"max_daily_hours": "6"}})
    assert invalid.status_code == 422
    assert client.put("/api/v1/settings/workday_rules", json={"value": [1, 2]}).status_code == 422


def test_company_profile_validation(client: TestClient) -> None:
    ok = client.put("/api/v1/settings/company_profile", json={"value": {"employee_count": 42}})
    assert ok.status_code == 200
    assert ok.json()["value"]["employee_count"] == 42
    assert ok.json()["value"]["qualifies_law_114_1"] is True

    assert client.put(
        "/api/v1/settings/company_profile",
        json={"value": {"employee_count": -1}},
    ).status_code == 422
    assert client.put("/api/v1/settings/company_profile", json={"value": "text"}).status_code == 422


def test_custom_setting_delete_and_reset(client: TestClient) -> None:
    created = client.put(
        "/api/v1/settings/bank_account",
        json={"value": {"bank": "Bancolombia"}, "category": "finance"},
    )
    assert created.status_code == 200
    assert created.json()["category"] == "finance"

    assert client.delete("/api/v1/settings/bank_account").status_code == 204
    assert client.get("/api/v1/settings/bank_account").status_code == 404
    assert client.delete("/api/v1/settings/bank_account").status_code == 404

    client.put("/api/v1/settings/workday_rules", json={"value": {"lunch_minutes": 30}})
    reset = client.post("/api/v1/settings/workday_rules/reset")
    assert reset.status_code == 200
    assert reset.json()["is_default"] is True
    assert reset.json()["value"]["lunch_minutes"] == 60
    assert client.post("/api/v1/settings/bank_account/reset").status_code == 404

    actions = [
        row["action_type"]
        for row in client.get("/api/v1/audit-events", params={"entity": "setting"}).json()["items"]
    ]
    assert sorted(actions) == ["deleted", "reset", "updated", "updated"]


def test_stored_workday_rules_drive_time_entries(client: TestClient) -> None:
    client.put("/api/v1/settings/workday_rules", json={"value": {"late_tolerance_minutes": 30}})
    project = client.post("/api/v1/projects", json={"code": "OBR-050", "name": "Bodega", "budget_labor": "500000"})
    person = client.post(
        "/api/v1/personnel",
        json={
            "name": "Marta Diaz",
            "document_number": "52000111",
            "position": "Soldadora",
            "department": "soldadura",
            "monthly_salary": "1423500",
            "hire_date": "2025-01-01",
        },
    )

    entry = client.post(
        "/api/v1/time-entries",
        json={
            "personnel_id": person.json()["id"],
            "project_id": project.json()["id"],
            "work_date": "2025-03-04",
            "arrival_time": "07:20",
            "departure_time": "16:20",
        },
    )
    assert entry.status_code == 201, entry.text
    assert entry.json()["late_minutes"] == 20
    assert entry.json()["penalized_late_minutes"] == 0
    assert entry.json()["late_discount"] == "0.00"
