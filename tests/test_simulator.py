from __future__ import annotations

from fastapi.testclient import TestClient

HOUSE = {
    "template_type": "construction",
    "items": [
        {"category": "materials", "subcategory": "concrete", "quantity": "10"},
        {"category": "labor", "subcategory": "mason", "quantity": "100"},
        {"category": "equipment", "subcategory": "mixer", "quantity": "5"},
    ],
}


def _create_estimation(client: TestClient, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {"name": "Casa dos plantas", **HOUSE}
    payload.update(overrides)
    response = client.post("/api/v1/simulator/estimations", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_templates_and_presets(client: TestClient) -> None:
    templates = client.get("/api/v1/simulator/templates").json()
    assert {"construction", "welding"} <= set(templates["templates"])
    assert templates["calculation_factors"]["profit_margin"] == "0.20"

    presets = client.get("/api/v1/simulator/presets/construction")
    assert presets.status_code == 200
    assert presets.json()["items"]

    assert client.get("/api/v1/simulator/presets/mining").status_code == 404


def test_calculate_returns_breakdown(client: TestClient) -> None:
    response = client.post("/api/v1/simulator/calculate", json={**HOUSE, "duration_days": 15})
    assert response.status_code == 200
    body = response.json()

    assert body["cost_breakdown"]["total"] == "10615995.00"
    assert body["summary"]["cost_per_day"] == "707733.00"

    bad_item = client.post(
        "/api/v1/simulator/calculate",
        json={"template_type": "construction", "items": [{"category": "materials", "subcategory": "gold", "quantity": "1"}]},
    )
    assert bad_item.status_code == 422
    assert client.post("/api/v1/simulator/calculate", json={**HOUSE, "template_type": "mining"}).status_code == 422
    assert client.post("/api/v1/simulator/calculate", json={"template_type": "construction", "items": []}).status_code == 422


def test_saved_estimation_lifecycle(client: TestClient) -> None:
    estimation = _create_estimation(client, apply_benefits=False)

    assert estimation["status"] == "draft"
    assert estimation["total_cost"] == "8708375.00"
    assert estimation["breakdown"]["calculation_factors"]["benefits_applied"] is False
    assert len(estimation["items"]) == 3

    copy = client.post(f"/api/v1/simulator/estimations/{estimation['id']}/duplicate")
    assert copy.status_code == 201
    assert copy.json()["name"] == "Casa dos plantas - Copia"
    assert copy.json()["total_cost"] == "8708375.00"
    assert len(client.get("/api/v1/simulator/estimations").json()["items"]) == 2

    assert client.delete(f"/api/v1/simulator/estimations/{copy.json()['id']}").status_code == 204
    assert client.get(f"/api/v1/simulator/estimations/{copy.json()['id']}").status_code == 404


def test_convert_estimation_to_project(client: TestClient) -> None:
    estimation = _create_estimation(client)

    response = client.post(
        f"/api/v1/simulator/estimations/{estimation['id']}/convert",
        json={"code": "OBR-SIM-01", "start_date": "2025-04-01"},
    )
    assert response.status_code == 201, response.text
    project = response.json()

    assert project["name"] == "Casa dos plantas"
    assert project["status"] == "planned"
    assert project["budget_materials"] == "3200000.00"
    assert project["budget_labor"] == "3476000.00"
    assert project["budget_equipment"] == "425000.00"
    assert project["budget_overhead"] == "1065150.00"
    assert project["budget_total"] == "8166150.00"

    items = client.get(f"/api/v1/projects/{project['id']}/budget-items").json()["items"]
    assert len(items) == 3
    assert {item["category"] for item in items} == {"materials", "labor", "equipment"}

    saved = client.get(f"/api/v1/simulator/estimations/{estimation['id']}").json()
    assert saved["status"] == "converted"
    assert saved["project_id"] == project["id"]

    again = client.post(
        f"/api/v1/simulator/estimations/{estimation['id']}/convert",
        json={"code": "OBR-SIM-02"},
    )
    assert again.status_code == 409


def test_convert_with_taken_code_keeps_estimation_draft(client: TestClient) -> None:
    client.post("/api/v1/projects", json={"code": "OBR-TAKEN", "name": "Existente"})
    estimation = _create_estimation(client)

    response = client.post(
        f"/api/v1/simulator/estimations/{estimation['id']}/convert",
        json={"code": "OBR-TAKEN"},
    )
    assert response.status_code == 409

    saved = client.get(f"/api/v1/simulator/estimations/{estimation['id']}").json()
    assert saved["status"] == "draft"
    assert saved["project_id"] is None
