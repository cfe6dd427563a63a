from __future__ import annotations

import re
from decimal import Decimal

from fastapi.testclient import TestClient

CODE_PATTERN = re.compile(r"^[0-9A-F]{8}(-[0-9A-F]{8}){3}$")


def _issue_invoice(client: TestClient, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "city": "Bogotá",
        "client_name": "Inversiones Andinas S.A.S.",
        "client_nit": "901555444-2",
        "issue_date": "2025-03-10",
        "items": [{"description": "Estructura metalica", "quantity": "2", "unit_price": "500000"}],
    }
    payload.update(overrides)
    response = client.post("/api/v1/invoices", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def _create_contractor(client: TestClient, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "document_number": "79888777",
        "name": "Jorge Pardo",
        "service_type": "construction",
    }
    payload.update(overrides)
    response = client.post("/api/v1/contractors", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_invoice_totals_include_vat_and_city_reteica(client: TestClient) -> None:
    invoice = _issue_invoice(client)

    assert invoice["invoice_number"] == "SETT000001"
    assert invoice["status"] == "issued"
    assert invoice["city"] == "Bogotá"
    assert invoice["due_date"] == "2025-04-09"
    assert Decimal(invoice["subtotal"]) == Decimal("1000000")
    assert Decimal(invoice["vat_amount"]) == Decimal("190000")
    assert Decimal(invoice["reteica_amount"]) == Decimal("6900")
    assert Decimal(invoice["total_amount"]) == Decimal("1183100")
    assert invoice["line_items"][0]["line_total"] == "1000000.00"
    assert CODE_PATTERN.match(invoice["cufe"])

    second = _issue_invoice(client, city="Pasto")
    assert second["invoice_number"] == "SETT000002"
    assert Decimal(second["reteica_amount"]) == Decimal("0")
    assert second["cufe"] != invoice["cufe"]


def test_invoice_requires_a_customer(client: TestClient) -> None:
    response = client.post(
        "/api/v1/invoices",
        json={"city": "Cali", "items": [{"description": "Soldadura", "quantity": "1", "unit_price": "100"}]},
    )
    assert response.status_code == 422


def test_invoice_rejects_unknown_activity_and_tax_year(client: TestClient) -> None:
    base = {
        "city": "Cali",
        "client_name": "Cliente",
        "items": [{"description": "Soldadura", "quantity": "1", "unit_price": "100"}],
    }
    assert client.post("/api/v1/invoices", json={**base, "activity": "mining"}).status_code == 422
    assert client.post("/api/v1/invoices", json={**base, "issue_date": "2030-01-15"}).status_code == 422
    assert client.post("/api/v1/invoices", json={**base, "items": []}).status_code == 422


def test_invoice_for_registered_client_uses_client_data(client: TestClient) -> None:
    created = client.post("/api/v1/clients", json={"name": "Constructora Norte", "nit": "800111222-3"})
    assert created.status_code == 201, created.text

    invoice = _issue_invoice(client, client_name=None, client_nit=None, client_id=created.json()["id"])

    assert invoice["client_name"] == "Constructora Norte"
    assert invoice["client_nit"] == "800111222-3"


def test_invoice_xml_download_and_code_validation(client: TestClient) -> None:
    invoice = _issue_invoice(client)

    xml = client.get(f"/api/v1/invoices/{invoice['id']}/xml")
    assert xml.status_code == 200
    assert xml.headers["content-type"].startswith("application/xml")
    assert 'filename="SETT000001.xml"' in xml.headers["content-disposition"]
    assert invoice["cufe"] in xml.text

    found = client.get(f"/api/v1/invoices/validate/{invoice['cufe'].lower()}").json()
    assert found["valid"] is True
    assert found["found"] is True
    assert found["invoice_number"] == "SETT000001"

    unknown = client.get("/api/v1/invoices/validate/not-a-code").json()
    assert unknown["valid"] is False
    assert unknown["found"] is False


def test_cancel_invoice_once(client: TestClient) -> None:
    invoice = _issue_invoice(client)

    cancelled = client.post(f"/api/v1/invoices/{invoice['id']}/cancel")
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"
    assert cancelled.json()["cancelled_at"] is not None

    assert client.post(f"/api/v1/invoices/{invoice['id']}/cancel").status_code == 409

    listed = client.get("/api/v1/invoices", params={"status": "cancelled"}).json()["items"]
    assert [row["id"] for row in listed] == [invoice["id"]]
    assert client.get("/api/v1/invoices", params={"status": "issued"}).json()["items"] == []


def test_contractor_crud_and_duplicates(client: TestClient) -> None:
    contractor = _create_contractor(client)
    assert contractor["service_type"] == "construction"
    assert contractor["active"] is True

    assert client.post(
        "/api/v1/contractors",
        json={"document_number": "79888777", "name": "Otro"},
    ).status_code == 409
    assert client.post(
        "/api/v1/contractors",
        json={"document_number": "1", "name": "Otro", "service_type": "mining"},
    ).status_code == 422

    updated = client.patch(f"/api/v1/contractors/{contractor['id']}", json={"active": False, "city": "Medellin"})
    assert updated.status_code == 200
    assert updated.json()["active"] is False
    assert updated.json()["city"] == "Medellin"

    assert client.get("/api/v1/contractors", params={"active": True}).json()["items"] == []
    assert client.get(f"/api/v1/contractors/{contractor['id']}").json()["name"] == "Jorge Pardo"


def test_contractor_duplicate_document_ignores_padding_and_status(client: TestClient) -> None:
    contractor = _create_contractor(client)
    client.patch(f"/api/v1/contractors/{contractor['id']}", json={"active": False})
    _create_contractor(client, document_number="80111222", name="Luis Mora")

    response = client.post("/api/v1/contractors", json={"document_number": " 79888777 ", "name": "Otro"})

    assert response.status_code == 409
    assert len(client.get("/api/v1/contractors").json()["items"]) == 2


def test_construction_support_document_withholds_source_and_social_security(client: TestClient) -> None:
    contractor = _create_contractor(client)

    response = client.post(
        "/api/v1/contractors/support-documents",
        json={
            "contractor_id": contractor["id"],
            "concept": "Montaje de cubierta",
            "base_amount": "4000000",
            "issue_date": "2025-03-15",
        },
    )
    assert response.status_code == 201, response.text
    document = response.json()

    assert document["ds_number"] == "DS-HYR-2025-000001"
    assert document["withholdings"]["retencion_fuente"]["amount"] == "80000"
    assert document["withholdings"]["seguridad_social"]["health"] == "200000"
    assert document["withholdings"]["seguridad_social"]["pension"] == "256000"
    assert Decimal(document["total_withholdings"]) == Decimal("536000")
    assert Decimal(document["net_amount"]) == Decimal("3464000")


def test_support_document_without_withholding_and_below_threshold(client: TestClient) -> None:
    contractor = _create_contractor(client, service_type="general")

    plain = client.post(
        "/api/v1/contractors/support-documents",
        json={
            "contractor_id": contractor["id"],
            "concept": "Transporte",
            "base_amount": "4000000",
            "issue_date": "2025-03-15",
            "apply_withholding": False,
        },
    ).json()
    assert plain["withholdings"] == {}
    assert Decimal(plain["net_amount"]) == Decimal("4000000")

    small = client.post(
        "/api/v1/contractors/support-documents",
        json={
            "contractor_id": contractor["id"],
            "concept": "Mandado",
            "base_amount": "100000",
            "issue_date": "2025-03-16",
        },
    ).json()
    assert small["ds_number"] == "DS-HYR-2025-000002"
    assert small["withholdings"] == {}

    listed = client.get("/api/v1/contractors/support-documents", params={"year": 2025}).json()["items"]
    assert len(listed) == 2


def test_support_document_rejections(client: TestClient) -> None:
    invoicing = _create_contractor(client, document_number="900800700", obligated_to_invoice=True)
    regular = _create_contractor(client, document_number="1020304050")

    base = {"concept": "Servicio", "base_amount": "500000", "issue_date": "2025-03-15"}
    assert client.post(
        "/api/v1/contractors/support-documents",
        json={**base, "contractor_id": invoicing["id"]},
    ).status_code == 422
    assert client.post(
        "/api/v1/contractors/support-documents",
        json={**base, "contractor_id": regular["id"], "base_amount": "0"},
    ).status_code == 422
    assert client.post(
        "/api/v1/contractors/support-documents",
        json={**base, "contractor_id": regular["id"], "service_type": "mining"},
    ).status_code == 422
    assert client.post(
        "/api/v1/contractors/support-documents",
        json={**base, "contractor_id": "00000000-0000-0000-0000-000000000000"},
    ).status_code == 404
