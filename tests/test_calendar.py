from __future__ import annotations

from datetime import date

from fastapi.testclient import TestClient

from hyr_admin.models.entities import Recurrence
from hyr_admin.services.calendar_service import next_occurrence, statutory_obligations


def _create_event(client: TestClient, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "title": "Pago arriendo bodega",
        "event_date": "2025-01-31",
        "event_type": "payment",
        "amount": "2500000",
        "event_time": "09:30",
    }
    payload.update(overrides)
    response = client.post("/api/v1/calendar/events", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_next_occurrence_clamps_month_end() -> None:
    assert next_occurrence(date(2025, 1, 31), Recurrence.MONTHLY) == date(2025, 2, 28)
    assert next_occurrence(date(2025, 3, 3), Recurrence.WEEKLY) == date(2025, 3, 10)
    assert next_occurrence(date(2024, 2, 29), Recurrence.YEARLY) == date(2025, 2, 28)
    assert next_occurrence(date(2025, 3, 3), Recurrence.NONE) is None


def test_statutory_obligations_in_range() -> None:
    rows = statutory_obligations(date(2025, 1, 1), date(2025, 2, 28))

    assert [row["event_date"] for row in rows] == ["2025-01-10", "2025-01-31", "2025-02-10", "2025-02-14"]
    assert all(row["statutory"] for row in rows)
    assert rows[0]["title"] == "Pago PILA 2025-01"


def test_event_crud(client: TestClient) -> None:
    event = _create_event(client)
    assert event["event_time"] == "09:30"
    assert event["status"] == "pending"
    assert event["amount"] == "2500000.00"
    assert event["recurrence"] == "none"

    updated = client.patch(f"/api/v1/calendar/events/{event['id']}", json={"title": "Arriendo", "status": "cancelled"})
    assert updated.status_code == 200
    assert updated.json()["title"] == "Arriendo"
    assert updated.json()["status"] == "cancelled"

    assert client.delete(f"/api/v1/calendar/events/{event['id']}").status_code == 204
    assert client.get(f"/api/v1/calendar/events/{event['id']}").status_code == 404


def test_event_validation(client: TestClient) -> None:
    negative = client.post(
        "/api/v1/calendar/events",
        json={"title": "Pago", "event_date": "2025-03-01", "amount": "-5"},
    )
    assert negative.status_code == 422

    missing_project = client.post(
        "/api/v1/calendar/events",
        json={"title": "Visita", "event_date": "2025-03-01", "project_id": "00000000-0000-0000-0000-000000000000"},
    )
    assert missing_project.status_code == 404

    inverted = client.get(
        "/api/v1/calendar/events",
        params={"date_from": "2025-03-10", "date_to": "2025-03-01"},
    )
    assert inverted.status_code == 422


def test_completing_recurring_event_schedules_next(client: TestClient) -> None:
    event = _create_event(client, recurrence="monthly")

    response = client.post(f"/api/v1/calendar/events/{event['id']}/complete")
    assert response.status_code == 200
    body = response.json()
    assert body["event"]["status"] == "completed"
    assert body["event"]["completed_at"] is not None
    assert body["next_event"]["event_date"] == "2025-02-28"
    assert body["next_event"]["status"] == "pending"
    assert body["next_event"]["amount"] == "2500000.00"

    assert client.post(f"/api/v1/calendar/events/{event['id']}/complete").status_code == 409

    single = _create_event(client, title="Pago unico", event_date="2025-03-05")
    assert client.post(f"/api/v1/calendar/events/{single['id']}/complete").json()["next_event"] is None


def test_list_filters_and_summary(client: TestClient) -> None:
    _create_event(client, event_date="2025-03-05")
    _create_event(client, title="Pago proveedor", event_date="2025-03-20", amount="500000")
    _create_event(client, title="Reunion de obra", event_date="2025-03-12", event_type="meeting", amount=None)
    _create_event(client, title="Pago abril", event_date="2025-04-02")

    march = client.get(
        "/api/v1/calendar/events",
        params={"date_from": "2025-03-01", "date_to": "2025-03-31", "event_type": "payment"},
    ).json()["items"]
    assert [row["event_date"] for row in march] == ["2025-03-05", "2025-03-20"]

    summary = client.get("/api/v1/calendar/summary", params={"year": 2025, "month": 3}).json()
    assert summary["total"] == 3
    assert summary["by_type"]["payment"] == 2
    assert summary["by_type"]["meeting"] == 1
    assert summary["by_status"]["pending"] == 3
    assert summary["pending_payments"] == 2
    assert summary["pending_payment_total"] == "3000000.00"

    assert client.get("/api/v1/calendar/summary", params={"year": 2025}).json()["total"] == 4


def test_upcoming_includes_statutory_deadlines(client: TestClient) -> None:
    response = client.get("/api/v1/calendar/upcoming", params={"days": 45})
    assert response.status_code == 200
    body = response.json()

    assert body["events"] == []
    assert any(row["title"].startswith("Pago PILA") for row in body["statutory"])

    assert client.get("/api/v1/calendar/upcoming", params={"days": 0}).status_code == 422
