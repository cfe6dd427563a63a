from __future__ import annotations

from fastapi.testclient import TestClient


def _create_client(client: TestClient, *, name: str = "Constructora Andina", nit: str = "900555111-2") -> str:
    response = client.post("/api/v1/clients", json={"name": name, "nit": nit, "city": "Bogota"})
    assert response.status_code == 201
    return response.json()["id"]


def _create_project(client: TestClient, *, code: str = "OBR-001", **overrides: object) -> str:
    payload: dict[str, object] = {
        "code": code,
        "name": f"Obra {code}",
        "start_date": "2025-03-01",
        "budget_materials": "1000000",
        "budget_labor": "500000",
    }
    payload.update(overrides)
    response = client.post("/api/v1/projects", json=payload)
    assert response.status_code == 201
    return response.json()["id"]


def test_client_crud_and_search(client: TestClient) -> None:
    client_id = _create_client(client)
    _create_client(client, name="Soldaduras del Norte", nit="800111222-3")

    search = client.get("/api/v1/clients", params={"search": "andina"})
    assert search.status_code == 200
    assert [row["id"] for row in search.json()["items"]] == [client_id]

    update = client.patch(f"/api/v1/clients/{client_id}", json={"phone": "3001234567", "active": False})
    assert update.status_code == 200
    assert update.json()["phone"] == "3001234567"
    assert update.json()["active"] is False

    inactive = client.get("/api/v1/clients", params={"active": "false"})
    assert [row["id"] for row in inactive.json()["items"]] == [client_id]

    delete = client.delete(f"/api/v1/clients/{client_id}")
    assert delete.status_code == 204
    assert client.get(f"/api/v1/clients/{client_id}").status_code == 404


def test_client_with_projects_cannot_be_deleted(client: TestClient) -> None:
    client_id = _create_client(client)
    _create_project(client, client_id=client_id)

    response = client.delete(f"/api/v1/clients/{client_id}")
    assert response.status_code == 409

    projects = client.get(f"/api/v1/clients/{client_id}/projects")
    assert len(projects.json()["items"]) == 1

    stats = client.get(f"/api/v1/clients/{client_id}/stats")
    assert stats.status_code == 200
    assert stats.json()["project_count"] == 1
    assert stats.json()["total_budget"] == "1500000.00"


def test_project_create_validations(client: TestClient) -> None:
    project_id = _create_project(client)

    created = client.get(f"/api/v1/projects/{project_id}")
    assert created.status_code == 200
    body = created.json()
    assert body["budget_total"] == "1500000.00"
    assert body["spent_total"] == "0.00"
    assert body["status"] == "planned"
    assert body["budget_status"] == "normal"

    duplicate = client.post("/api/v1/projects", json={"code": "OBR-001", "name": "Otra"})
    assert duplicate.status_code == 409

    bad_dates = client.post(
        "/api/v1/projects",
        json={"code": "OBR-002", "name": "Fechas", "start_date": "2025-05-01", "end_date": "2025-04-01"},
    )
    assert bad_dates.status_code == 422

    missing_client = client.post(
        "/api/v1/projects",
        json={"code": "OBR-003", "name": "Sin cliente", "client_id": "00000000-0000-0000-0000-000000000000"},
    )
    assert missing_client.status_code == 404


def test_project_update_recomputes_budget_total(client: TestClient) -> None:
    project_id = _create_project(client)

    response = client.patch(
        f"/api/v1/projects/{project_id}",
        json={"budget_equipment": "250000", "status": "in_progress", "progress": 40},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["budget_total"] == "1750000.00"
    assert body["status"] == "in_progress"
    assert body["progress"] == 40


def test_expenses_update_project_spending_and_budget_status(client: TestClient) -> None:
    project_id = _create_project(client)

    first = client.post(
        "/api/v1/expenses",
        json={
            "project_id": project_id,
            "expense_date": "2025-03-05",
            "category": "materials",
            "description": "Cemento",
            "amount": "1400000",
            "vendor": "Ferreteria Central",
        },
    )
    assert first.status_code == 201

    project = client.get(f"/api/v1/projects/{project_id}").json()
    assert project["spent_materials"] == "1400000.00"
    assert project["spent_total"] == "1400000.00"
    assert project["budget_status"] == "warning"

    second = client.post(
        "/api/v1/expenses",
        json={
            "project_id": project_id,
            "expense_date": "2025-04-02",
            "category": "equipment",
            "description": "Alquiler mezcladora",
            "amount": "200000",
        },
    )
    assert second.status_code == 201
    assert client.get(f"/api/v1/projects/{project_id}").json()["budget_status"] == "over_budget"

    financials = client.get(f"/api/v1/projects/{project_id}/financials")
    assert financials.status_code == 200
    by_category = {row["category"]: row for row in financials.json()["categories"]}
    assert by_category["materials"]["status"] == "over_budget"
    assert by_category["equipment"]["status"] == "normal"
    assert financials.json()["remaining_budget"] == "-100000.00"

    delete = client.delete(f"/api/v1/expenses/{second.json()['id']}")
    assert delete.status_code == 204
    assert client.get(f"/api/v1/projects/{project_id}").json()["spent_total"] == "1400000.00"


def test_expense_amount_must_be_positive(client: TestClient) -> None:
    response = client.post(
        "/api/v1/expenses",
        json={"expense_date": "2025-03-05", "category": "overhead", "description": "Papeleria", "amount": "0"},
    )

    assert response.status_code == 422


def test_expense_summary_groups_totals(client: TestClient) -> None:
    project_id = _create_project(client)
    for expense_date, category, amount, vendor in (
        ("2025-03-05", "materials", "100000", "Ferreteria Central"),
        ("2025-03-20", "materials", "50000", "Ferreteria Central"),
        ("2025-04-01", "overhead", "30000", None),
    ):
        response = client.post(
            "/api/v1/expenses",
            json={
                "project_id": project_id if category == "materials" else None,
                "expense_date": expense_date,
                "category": category,
                "description": "Compra",
                "amount": amount,
                "vendor": vendor,
            },
        )
        assert response.status_code == 201

    summary = client.get("/api/v1/expenses/summary")

    assert summary.status_code == 200
    body = summary.json()
    assert body["count"] == 3
    assert body["total"] == "180000.00"
    assert body["by_category"]["materials"] == "150000.00"
    assert body["by_project"] == {project_id: "150000.00", "unassigned": "30000.00"}
    assert body["by_vendor"]["unspecified"] == "30000.00"
    assert body["by_month"] == {"2025-03": "150000.00", "2025-04": "30000.00"}


def test_incomes_update_project_income(client: TestClient) -> None:
    project_id = _create_project(client)

    income = client.post(
        f"/api/v1/projects/{project_id}/incomes",
        json={"income_date": "2025-03-15", "concept": "Anticipo 30%", "amount": "450000"},
    )
    assert income.status_code == 201
    assert client.get(f"/api/v1/projects/{project_id}").json()["total_income"] == "450000.00"

    negative = client.post(
        f"/api/v1/projects/{project_id}/incomes",
        json={"income_date": "2025-03-15", "concept": "Error", "amount": "-1"},
    )
    assert negative.status_code == 422

    listing = client.get(f"/api/v1/projects/{project_id}/incomes")
    assert len(listing.json()["items"]) == 1

    summary = client.get("/api/v1/incomes/summary", params={"year": 2025})
    assert summary.json()["total"] == "450000.00"

    delete = client.delete(f"/api/v1/projects/{project_id}/incomes/{income.json()['id']}")
    assert delete.status_code == 204
    assert client.get(f"/api/v1/projects/{project_id}").json()["total_income"] == "0.00"


def test_budget_items_are_detail_only(client: TestClient) -> None:
    project_id = _create_project(client)

    item = client.post(
        f"/api/v1/projects/{project_id}/budget-items",
        json={"category": "materials", "description": "Concreto 3000 psi", "unit": "m3", "quantity": "4", "unit_price": "320000"},
    )
    assert item.status_code == 201
    assert item.json()["total"] == "1280000.00"
    assert client.get(f"/api/v1/projects/{project_id}").json()["budget_total"] == "1500000.00"

    delete = client.delete(f"/api/v1/projects/{project_id}/budget-items/{item.json()['id']}")
    assert delete.status_code == 204
    assert client.get(f"/api/v1/projects/{project_id}/budget-items").json()["items"] == []


def test_project_with_expenses_cannot_be_deleted(client: TestClient) -> None:
    project_id = _create_project(client)
    empty_project_id = _create_project(client, code="OBR-009")
    client.post(
        "/api/v1/expenses",
        json={
            "project_id": project_id,
            "expense_date": "2025-03-05",
            "category": "materials",
            "description": "Arena",
            "amount": "10000",
        },
    )

    assert client.delete(f"/api/v1/projects/{project_id}").status_code == 409
    assert client.delete(f"/api/v1/projects/{empty_project_id}").status_code == 204
    assert client.get(f"/api/v1/projects/{empty_project_id}").status_code == 404
