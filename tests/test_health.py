import json
import logging

from fastapi.testclient import TestClient

from hyr_admin.core.logging import JSONFormatter


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_database_health_endpoint(client: TestClient) -> None:
    response = client.get("/api/v1/health/db")

    assert response.status_code == 200
    assert response.json()["database"] == "reachable"


def test_root_endpoint(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_json_formatter_keeps_domain_extras() -> None:
    record = logging.LogRecord("hyr_admin.test", logging.INFO, __file__, 1, "Invoice issued", None, None)
    record.invoice_number = "SETP990000001"
    record.project_id = "8c1d"
    record.unrelated = "dropped"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "Invoice issued"
    assert payload["invoice_number"] == "SETP990000001"
    assert payload["project_id"] == "8c1d"
    assert "unrelated" not in payload
