"""Dashboard figures, cash flow, management reports and tabular exports."""

from __future__ import annotations

from collections import Counter
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from hyr_admin.core.payroll_config import PayrollConfig
from hyr_admin.models.entities import ProjectStatus
from hyr_admin.repositories.office_repository import OfficeRepository
from hyr_admin.repositories.payroll_repository import PayrollRepository
from hyr_admin.repositories.project_repository import ProjectRepository
from hyr_admin.services.ledger_service import LedgerService
from hyr_admin.services.payroll_rules import (
    EmployeeProfile,
    HoursWorked,
    PayrollCalculation,
    fsp_rate,
    validate_payroll,
)
from hyr_admin.services.payroll_service import PayrollService, calculation_from_detail
from hyr_admin.services.personnel_service import employee_profile
from hyr_admin.services.project_service import ProjectService, budget_status
from hyr_admin.services.tabular_export import ExportFilePayload, normalize_format, render_table

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")
PENDING_PAYMENT_WINDOW_DAYS = 30

PROJECT_COLUMNS = (
    "code",
    "name",
    "status",
    "project_type",
    "start_date",
    "end_date",
    "progress",
    "budget_total",
    "spent_total",
    "total_income",
    "budget_status",
)
EXPENSE_COLUMNS = (
    "expense_date",
    "category",
    "description",
    "amount",
    "vendor",
    "invoice_number",
    "payment_method",
    "project_id",
)
CASHFLOW_COLUMNS = ("month", "income", "expenses", "payroll_cost", "net")
PAYROLL_DETAIL_COLUMNS = (
    "personnel_name",
    "document_number",
    "department",
    "days_worked",
    "regular_hours",
    "overtime_hours",
    "night_hours",
    "base_salary",
    "gross_pay",
    "transport_allowance",
    "connectivity_allowance",
    "total_deductions",
    "net_pay",
    "employer_cost",
    "cune",
)
PROFITABILITY_COLUMNS = (
    "code",
    "name",
    "status",
    "budget_total",
    "spent_total",
    "total_income",
    "labor_cost",
    "profit",
    "margin_percentage",
    "budget_status",
)
DEPARTMENT_COST_COLUMNS = (
    "department",
    "employees",
    "hours",
    "overtime_hours",
    "gross_pay",
    "net_pay",
    "employer_cost",
    "cost_per_hour",
)


COMPLIANCE_CHECKS = (
    "minimum_wage",
    "transport_allowance",
    "health",
    "pension",
    "solidarity_fund",
    "employer_contributions",
)


def _q2(value: Decimal) -> Decimal:
    return value.quantize(Q2, rounding=ROUND_HALF_UP)


def _percentage(part: Decimal, total: Decimal) -> str:
    if total == ZERO:
        return "0.00"
    return str(_q2(part / total * 100))


def contribution_checks(
    employee: EmployeeProfile,
    calc: PayrollCalculation,
    config: PayrollConfig,
) -> dict[str, bool]:
    """Stored social-security amounts against the legal rates for the period."""

    gross = calc.gross_pay
    expected_fsp = ZERO if employee.fsp_exempt else fsp_rate(calc.base_salary, config)
    employer_health_ok = calc.law_114_1_applied or calc.employer_health >= _q2(gross * config.employer_health_rate)
    return {
        "health": calc.health_deduction >= _q2(gross * config.employee_health_rate),
        "pension": calc.pension_deduction >= _q2(gross * config.employee_pension_rate),
        "solidarity_fund": calc.solidarity_fund >= _q2(calc.base_salary * expected_fsp),
        "employer_contributions": employer_health_ok
        and calc.employer_pension >= _q2(gross * config.employer_pension_rate),
    }


class ReportService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.projects = ProjectRepository(db)
        self.payroll = PayrollRepository(db)
        self.office = OfficeRepository(db)

    def dashboard(self, *, today: date | None = None) -> dict[str, object]:
        today = today or date.today()
        projects = self.projects.list_projects()
        by_status = Counter(project.status.value for project in projects)
        budget_total = sum((project.budget_total for project in projects), ZERO)
        spent_total = sum((project.spent_total for project in projects), ZERO)
        income_total = sum((project.total_income for project in projects), ZERO)
        over_budget = [
            project.code
            for project in projects
            if project.budget_total > ZERO and project.spent_total > project.budget_total
        ]

        latest = self.payroll.get_latest_completed_period()
        return {
            "projects": {
                "total": len(projects),
                "by_status": {value.value: by_status.get(value.value, 0) for value in ProjectStatus},
                "over_budget": over_budget,
            },
            "finance": {
                "budget_total": str(budget_total),
                "spent_total": str(spent_total),
                "income_total": str(income_total),
                "margin": str(income_total - spent_total),
            },
            "active_personnel": self.payroll.count_active_personnel(),
            "pending_payments": self.office.count_pending_payment_events(
                today, today + timedelta(days=PENDING_PAYMENT_WINDOW_DAYS)
            ),
            "last_payroll_period": PayrollService.serialize_period(latest) if latest else None,
        }

    def cashflow(self, *, year: int) -> dict[str, object]:
        months = {month: {"income": ZERO, "expenses": ZERO, "payroll_cost": ZERO} for month in range(1, 13)}
        date_from, date_to = date(year, 1, 1), date(year, 12, 31)

        for income in self.projects.list_incomes(date_from=date_from, date_to=date_to):
            months[income.income_date.month]["income"] += income.amount
        for expense in self.projects.list_expenses(date_from=date_from, date_to=date_to):
            months[expense.expense_date.month]["expenses"] += expense.amount
        for detail, period in self.payroll.details_in_year(year):
            months[period.month]["payroll_cost"] += detail.employer_cost

        rows = []
        totals = {"income": ZERO, "expenses": ZERO, "payroll_cost": ZERO, "net": ZERO}
        for month, values in months.items():
            net = values["income"] - values["expenses"] - values["payroll_cost"]
            for key in ("income", "expenses", "payroll_cost"):
                totals[key] += values[key]
            totals["net"] += net
            rows.append(
                {
                    "month": f"{year}-{month:02d}",
                    "income": str(values["income"]),
                    "expenses": str(values["expenses"]),
                    "payroll_cost": str(values["payroll_cost"]),
                    "net": str(net),
                }
            )
        return {"year": year, "months": rows, "totals": {key: str(value) for key, value in totals.items()}}

    def project_profitability(self) -> dict[str, object]:
        items = []
        totals = {"budget_total": ZERO, "spent_total": ZERO, "total_income": ZERO, "labor_cost": ZERO, "profit": ZERO}
        for project in self.projects.list_projects():
            budget = Decimal(project.budget_total)
            spent = Decimal(project.spent_total)
            income = Decimal(project.total_income)
            labor = self.projects.time_entry_pay_total(project.id)
            profit = income - spent
            for key, value in (
                ("budget_total", budget),
                ("spent_total", spent),
                ("total_income", income),
                ("labor_cost", labor),
                ("profit", profit),
            ):
                totals[key] += value
            items.append(
                {
                    "project_id": str(project.id),
                    "code": project.code,
                    "name": project.name,
                    "status": project.status.value,
                    "budget_total": str(budget),
                    "spent_total": str(spent),
                    "remaining_budget": str(budget - spent),
                    "budget_status": budget_status(spent, budget),
                    "total_income": str(income),
                    "labor_cost": str(labor),
                    "profit": str(profit),
                    "margin_percentage": _percentage(profit, income),
                }
            )
        items.sort(key=lambda row: Decimal(str(row["profit"])), reverse=True)
        return {"items": items, "totals": {key: str(value) for key, value in totals.items()}}

    def department_costs(self, *, year: int, month: int | None = None) -> dict[str, object]:
        buckets: dict[str, dict[str, object]] = {}
        for detail, _, person in self.payroll.details_with_personnel(year, month):
            bucket = buckets.setdefault(
                person.department,
                {
                    "personnel": set(),
                    "hours": ZERO,
                    "overtime_hours": ZERO,
                    "gross_pay": ZERO,
                    "net_pay": ZERO,
                    "employer_cost": ZERO,
                },
            )
            bucket["personnel"].add(person.id)
            bucket["hours"] += Decimal(detail.regular_hours) + Decimal(detail.overtime_hours)
            bucket["overtime_hours"] += Decimal(detail.overtime_hours)
            for key in ("gross_pay", "net_pay", "employer_cost"):
                bucket[key] += Decimal(getattr(detail, key))

        items = [
            {
                "department": department,
                "employees": len(values["personnel"]),
                "hours": str(values["hours"]),
                "overtime_hours": str(values["overtime_hours"]),
                "gross_pay": str(values["gross_pay"]),
                "net_pay": str(values["net_pay"]),
                "employer_cost": str(values["employer_cost"]),
                "cost_per_hour": str(_q2(values["employer_cost"] / values["hours"])) if values["hours"] else "0.00",
            }
            for department, values in buckets.items()
        ]
        items.sort(key=lambda row: Decimal(row["employer_cost"]), reverse=True)
        total_cost = sum((Decimal(row["employer_cost"]) for row in items), ZERO)
        return {"year": year, "month": month, "items": items, "total_employer_cost": str(total_cost)}

    def payroll_compliance(self, *, year: int, month: int) -> dict[str, object]:
        rows = self.payroll.details_with_personnel(year, month)
        if not rows:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No processed payroll for {year}-{month:02d}.",
            )
        config = PayrollService.get_config(year)

        items = []
        violations: Counter[str] = Counter()
        for detail, _, person in rows:
            profile = employee_profile(person)
            calc = calculation_from_detail(detail, config)
            hours = HoursWorked(
                regular_hours=calc.regular_hours,
                overtime_day_hours=calc.overtime_hours,
                night_hours=calc.night_hours,
                days_worked=detail.days_worked,
            )
            validation = validate_payroll(profile, hours, calc, config)
            checks = {
                "minimum_wage": validation.compliance["minimum_wage"],
                "transport_allowance": validation.compliance["transport_allowance"],
                **contribution_checks(profile, calc, config),
            }
            failed = [name for name, passed in checks.items() if not passed]
            violations.update(failed)
            items.append(
                {
                    "personnel_id": str(person.id),
                    "personnel_name": person.name,
                    "document_number": person.document_number,
                    "base_salary": str(detail.base_salary),
                    "checks": checks,
                    "compliant": not failed,
                    "warnings": validation.warnings,
                }
            )

        return {
            "period": f"{year}-{month:02d}",
            "items": items,
            "summary": {
                "employees": len(items),
                "compliant": sum(1 for item in items if item["compliant"]),
                "violations": {name: violations.get(name, 0) for name in COMPLIANCE_CHECKS},
            },
        }

    # ---------- Exports ----------
    def _project_rows(self) -> list[dict[str, object]]:
        return [ProjectService.serialize_project(project) for project in self.projects.list_projects()]

    def _expense_rows(self) -> list[dict[str, object]]:
        return [LedgerService.serialize_expense(expense) for expense in self.projects.list_expenses()]

    def _payroll_detail_rows(self, period_id: UUID | None) -> list[dict[str, object]]:
        if period_id is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="period_id is required for the payroll-details export.",
            )
        service = PayrollService(self.db)
        return [service.serialize_detail(detail, person) for detail, person in service.list_details(period_id)]

    def export_report(
        self,
        *,
        report_key: str,
        format_name: str,
        year: int | None = None,
        period_id: UUID | None = None,
    ) -> ExportFilePayload:
        normalized_key = report_key.strip().lower()
        normalized_format = normalize_format(format_name)

        if normalized_key == "projects":
            columns, rows, filename = PROJECT_COLUMNS, self._project_rows(), "projects"
        elif normalized_key == "expenses":
            columns, rows, filename = EXPENSE_COLUMNS, self._expense_rows(), "expenses"
        elif normalized_key == "cashflow":
            year = year or date.today().year
            columns, rows, filename = CASHFLOW_COLUMNS, self.cashflow(year=year)["months"], f"cashflow-{year}"
        elif normalized_key == "project-profitability":
            columns, rows = PROFITABILITY_COLUMNS, self.project_profitability()["items"]
            filename = "project-profitability"
        elif normalized_key == "department-costs":
            year = year or date.today().year
            columns, rows = DEPARTMENT_COST_COLUMNS, self.department_costs(year=year)["items"]
            filename = f"department-costs-{year}"
        elif normalized_key == "payroll-details":
            columns, rows = PAYROLL_DETAIL_COLUMNS, self._payroll_detail_rows(period_id)
            filename = f"payroll-details-{period_id}"
        else:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Unknown report_key for export.",
            )

        return render_table(
            base_filename=filename,
            format_name=normalized_format,
            columns=columns,
            rows=rows,
            sheet_title=normalized_key,
        )
