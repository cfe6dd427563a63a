from __future__ import annotations

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from io import BytesIO

from fastapi.testclient import TestClient
from openpyxl import load_workbook

from hyr_admin.services.tabular_export import XLSX_MEDIA_TYPE


def _seed_ledger(client: TestClient) -> str:
    project = client.post(
        "/api/v1/projects",
        json={"code": "OBR-100", "name": "Edificio Calle 80", "budget_materials": "1000000", "status": "in_progress"},
    )
    assert project.status_code == 201
    project_id = project.json()["id"]

    client.post(
        "/api/v1/expenses",
        json={
            "project_id": project_id,
            "expense_date": "2025-03-05",
            "category": "materials",
            "description": "Varilla corrugada",
            "amount": "1200000",
        },
    )
    client.post(
        "/api/v1/expenses",
        json={"expense_date": "2025-05-10", "category": "overhead", "description": "Papeleria", "amount": "50000"},
    )
    client.post(
        f"/api/v1/projects/{project_id}/incomes",
        json={"income_date": "2025-03-20", "concept": "Anticipo", "amount": "2000000"},
    )
    return project_id


def test_dashboard_figures(client: TestClient) -> None:
    _seed_ledger(client)
    client.post(
        "/api/v1/personnel",
        json={
            "name": "Sofia Ruiz",
            "document_number": "1030555666",
            "position": "Almacenista",
            "department": "administracion",
            "monthly_salary": "1800000",
            "hire_date": "2025-01-01",
        },
    )
    soon = (date.today() + timedelta(days=3)).isoformat()
    client.post(
        "/api/v1/calendar/events",
        json={"title": "Pago proveedor", "event_date": soon, "event_type": "payment", "amount": "100000"},
    )

    response = client.get("/api/v1/reports/dashboard")
    assert response.status_code == 200
    body = response.json()

    assert body["projects"]["total"] == 1
    assert body["projects"]["by_status"]["in_progress"] == 1
    assert body["projects"]["over_budget"] == ["OBR-100"]
    assert Decimal(body["finance"]["spent_total"]) == Decimal("1200000")
    assert Decimal(body["finance"]["income_total"]) == Decimal("2000000")
    assert Decimal(body["finance"]["margin"]) == Decimal("800000")
    assert body["active_personnel"] == 1
    assert body["pending_payments"] == 1
    assert body["last_payroll_period"] is None


def test_cashflow_by_month(client: TestClient) -> None:
    _seed_ledger(client)

    response = client.get("/api/v1/reports/cashflow", params={"year": 2025})
    assert response.status_code == 200
    body = response.json()

    assert len(body["months"]) == 12
    march = body["months"][2]
    assert march["month"] == "2025-03"
    assert Decimal(march["income"]) == Decimal("2000000")
    assert Decimal(march["expenses"]) == Decimal("1200000")
    assert Decimal(march["net"]) == Decimal("800000")
    assert Decimal(body["months"][4]["net"]) == Decimal("-50000")
    assert Decimal(body["totals"]["net"]) == Decimal("750000")

    assert client.get("/api/v1/reports/cashflow").status_code == 422


def test_projects_csv_export(client: TestClient) -> None:
    _seed_ledger(client)

    response = client.get("/api/v1/exports/projects", params={"format": "csv"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="projects.csv"' in response.headers["content-disposition"]

    lines = response.text.splitlines()
    assert lines[0].startswith("code,name,status")
    assert lines[1].startswith("OBR-100,Edificio Calle 80,in_progress")


def test_expenses_xlsx_export(client: TestClient) -> None:
    _seed_ledger(client)

    response = client.get("/api/v1/exports/expenses")
    assert response.status_code == 200
    assert response.headers["content-type"] == XLSX_MEDIA_TYPE
    assert 'filename="expenses.xlsx"' in response.headers["content-disposition"]

    workbook = load_workbook(BytesIO(response.content))
    rows = list(workbook.active.iter_rows(values_only=True))
    assert rows[0][:3] == ("expense_date", "category", "description")
    assert len(rows) == 3


def test_cashflow_export_uses_year(client: TestClient) -> None:
    response = client.get("/api/v1/exports/cashflow", params={"format": "csv", "year": 2025})
    assert response.status_code == 200
    assert 'filename="cashflow-2025.csv"' in response.headers["content-disposition"]
    assert len(response.text.splitlines()) == 13


def test_export_errors(client: TestClient) -> None:
    assert client.get("/api/v1/exports/unknown").status_code == 404
    assert client.get("/api/v1/exports/projects", params={"format": "pdf"}).status_code == 422
    assert client.get("/api/v1/exports/payroll-details").status_code == 422


def test_audit_events_listing(client: TestClient) -> None:
    client.put("/api/v1/settings/company_profile", json={"value": {"employee_count": 12}})

    response = client.get("/api/v1/audit-events", params={"limit": 10})
    assert response.status_code == 200
    items = response.json()["items"]
    assert items[0]["entity_name"] == "setting"
    assert items[0]["entity_id"] == "company_profile"
    assert items[0]["payload"]["value"]["employee_count"] == 12

    assert client.get("/api/v1/audit-events", params={"entity": "electronic_invoice"}).json()["items"] == []


def _process_march_payroll(client: TestClient) -> str:
    project_id = client.post("/api/v1/projects", json={"code": "OBR-300", "name": "Nave industrial"}).json()["id"]
    entry_ids = []
    for name, document, department, salary, work_date in (
        ("Ana Gomez", "52000111", "taller", "1423500", "2025-03-03"),
        ("Luis Rojas", "79000222", "obra", "1000000", "2025-03-04"),
    ):
        person = client.post(
            "/api/v1/personnel",
            json={
                "name": name,
                "document_number": document,
                "position": "Soldador",
                "department": department,
                "monthly_salary": salary,
                "hire_date": "2025-01-01",
                "arl_risk_class": "I",
            },
        ).json()
        entry = client.post(
            "/api/v1/time-entries",
            json={
                "personnel_id": person["id"],
                "project_id": project_id,
                "work_date": work_date,
                "arrival_time": "07:00",
                "departure_time": "16:00",
                "status": "submitted",
            },
        )
        entry_ids.append(entry.json()["id"])
    client.post("/api/v1/time-entries/bulk-approve", json={"entry_ids": entry_ids})
    period_id = client.post("/api/v1/payroll/periods", json={"year": 2025, "month": 3}).json()["id"]
    assert client.post(f"/api/v1/payroll/periods/{period_id}/process").status_code == 200
    return period_id


def test_project_profitability_ranks_by_profit(client: TestClient) -> None:
    _seed_ledger(client)
    client.post("/api/v1/projects", json={"code": "OBR-101", "name": "Cerramiento"})

    response = client.get("/api/v1/reports/project-profitability")
    assert response.status_code == 200
    body = response.json()

    assert [item["code"] for item in body["items"]] == ["OBR-100", "OBR-101"]
    leader = body["items"][0]
    assert Decimal(leader["profit"]) == Decimal("800000")
    assert leader["margin_percentage"] == "40.00"
    assert Decimal(leader["remaining_budget"]) == Decimal("-200000")
    assert leader["budget_status"] == "over_budget"
    assert Decimal(leader["labor_cost"]) == Decimal("0")
    assert Decimal(body["totals"]["profit"]) == Decimal("800000")


def test_department_costs_from_processed_payroll(client: TestClient) -> None:
    _process_march_payroll(client)

    response = client.get("/api/v1/reports/department-costs", params={"year": 2025, "month": 3})
    assert response.status_code == 200
    items = {item["department"]: item for item in response.json()["items"]}

    assert set(items) == {"taller", "obra"}
    assert items["taller"]["employees"] == 1
    assert Decimal(items["taller"]["hours"]) == Decimal("8.00")
    assert items["taller"]["gross_pay"] == "1429987.30"
    assert items["obra"]["gross_pay"] == "1004557.29"
    taller = items["taller"]
    expected_rate = (Decimal(taller["employer_cost"]) / Decimal("8")).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    assert Decimal(taller["cost_per_hour"]) == expected_rate

    empty = client.get("/api/v1/reports/department-costs", params={"year": 2024}).json()
    assert empty["items"] == []
    assert client.get("/api/v1/reports/department-costs").status_code == 422


def test_payroll_compliance_flags_salary_below_minimum(client: TestClient) -> None:
    _process_march_payroll(client)

    response = client.get("/api/v1/reports/payroll-compliance", params={"year": 2025, "month": 3})
    assert response.status_code == 200
    body = response.json()

    assert body["period"] == "2025-03"
    by_name = {item["personnel_name"]: item for item in body["items"]}
    assert by_name["Ana Gomez"]["compliant"] is True
    assert by_name["Luis Rojas"]["compliant"] is False
    assert by_name["Luis Rojas"]["checks"]["minimum_wage"] is False
    assert by_name["Luis Rojas"]["checks"]["health"] is True
    assert body["summary"]["employees"] == 2
    assert body["summary"]["compliant"] == 1
    assert body["summary"]["violations"]["minimum_wage"] == 1
    assert body["summary"]["violations"]["solidarity_fund"] == 0

    missing = client.get("/api/v1/reports/payroll-compliance", params={"year": 2025, "month": 4})
    assert missing.status_code == 404


def test_payslip_download(client: TestClient) -> None:
    period_id = _process_march_payroll(client)
    details = client.get(f"/api/v1/payroll/periods/{period_id}/details").json()["items"]
    ana = next(detail for detail in details if detail["personnel_name"] == "Ana Gomez")

    response = client.get(
        f"/api/v1/payroll/periods/{period_id}/details/{ana['id']}/payslip",
        params={"format": "csv"},
    )
    assert response.status_code == 200
    assert 'filename="payslip-2025-03-52000111.csv"' in response.headers["content-disposition"]
    lines = response.text.splitlines()
    assert lines[0] == "section,concept,amount"
    assert "employee,name,Ana Gomez" in lines
    assert "earnings,overtime_pay,6487.30" in lines
    assert f"totals,net_pay,{ana['net_pay']}" in lines

    workbook = client.get(f"/api/v1/payroll/periods/{period_id}/details/{ana['id']}/payslip")
    assert workbook.headers["content-type"] == XLSX_MEDIA_TYPE
    rows = list(load_workbook(BytesIO(workbook.content)).active.iter_rows(values_only=True))
    assert rows[0] == ("section", "concept", "amount")

    unknown = client.get(f"/api/v1/payroll/periods/{period_id}/details/{period_id}/payslip")
    assert unknown.status_code == 404


def test_department_costs_export(client: TestClient) -> None:
    _process_march_payroll(client)

    response = client.get("/api/v1/exports/department-costs", params={"format": "csv", "year": 2025})
    assert response.status_code == 200
    assert 'filename="department-costs-2025.csv"' in response.headers["content-disposition"]
    lines = response.text.splitlines()
    assert lines[0].startswith("department,employees,hours")
    assert len(lines) == 3
