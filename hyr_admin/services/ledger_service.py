"""Expenses and project incomes, with the project totals they feed."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from hyr_admin.models.entities import CostCategory, Expense, ProjectIncome
from hyr_admin.repositories.project_repository import ProjectRepository
from hyr_admin.services.project_service import ProjectService

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")


def _q2(value: Decimal) -> Decimal:
    return value.quantize(Q2)


def _month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


@dataclass(slots=True)
class ExpenseCreateData:
    expense_date: date
    category: CostCategory
    description: str
    amount: Decimal
    project_id: UUID | None = None
    vendor: str | None = None
    invoice_number: str | None = None
    payment_method: str | None = None
    notes: str | None = None


@dataclass(slots=True)
class ExpenseUpdateData:
    expense_date: date | None = None
    category: CostCategory | None = None
    description: str | None = None
    amount: Decimal | None = None
    project_id: UUID | None = None
    vendor: str | None = None
    invoice_number: str | None = None
    payment_method: str | None = None
    notes: str | None = None


@dataclass(slots=True)
class IncomeCreateData:
    income_date: date
    concept: str
    amount: Decimal
    payment_method: str = "transfer"
    invoice_number: str | None = None
    notes: str | None = None


class LedgerService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = ProjectRepository(db)
        self.projects = ProjectService(db)

    @staticmethod
    def serialize_expense(expense: Expense) -> dict[str, object]:
        return {
            "id": str(expense.id),
            "project_id": str(expense.project_id) if expense.project_id else None,
            "expense_date": expense.expense_date.isoformat(),
            "category": expense.category.value,
            "description": expense.description,
            "amount": str(expense.amount),
            "vendor": expense.vendor,
            "invoice_number": expense.invoice_number,
            "payment_method": expense.payment_method,
            "notes": expense.notes,
            "created_at": expense.created_at.isoformat(),
        }

    @staticmethod
    def serialize_income(income: ProjectIncome) -> dict[str, object]:
        return {
            "id": str(income.id),
            "project_id": str(income.project_id),
            "income_date": income.income_date.isoformat(),
            "concept": income.concept,
            "amount": str(income.amount),
            "payment_method": income.payment_method,
            "invoice_number": income.invoice_number,
            "notes": income.notes,
            "created_at": income.created_at.isoformat(),
        }

    @staticmethod
    def _check_amount(amount: Decimal) -> Decimal:
        if amount <= ZERO:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="amount must be greater than zero.",
            )
        return _q2(amount)

    # ---------- Expenses ----------
    def list_expenses(
        self,
        *,
        project_id: UUID | None = None,
        category: CostCategory | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        vendor: str | None = None,
    ) -> list[Expense]:
        return self.repo.list_expenses(
            project_id=project_id,
            category=category,
            date_from=date_from,
            date_to=date_to,
            vendor=vendor,
        )

    def get_expense(self, expense_id: UUID) -> Expense:
        expense = self.repo.get_expense(expense_id)
        if expense is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found.")
        return expense

    def create_expense(self, data: ExpenseCreateData) -> Expense:
        amount = self._check_amount(data.amount)
        if data.project_id is not None:
            self.projects.get_project(data.project_id)

        now = datetime.utcnow()
        expense = Expense(
            project_id=data.project_id,
            expense_date=data.expense_date,
            category=data.category,
            description=data.description.strip(),
            amount=amount,
            vendor=data.vendor,
            invoice_number=data.invoice_number,
            payment_method=data.payment_method,
            notes=data.notes,
            created_at=now,
            updated_at=now,
        )
        self.repo.add_expense(expense)
        if expense.project_id is not None:
            self.projects.refresh_project_totals(expense.project_id)
        self.db.commit()
        self.db.refresh(expense)
        return expense

    def update_expense(self, expense_id: UUID, data: ExpenseUpdateData) -> Expense:
        expense = self.get_expense(expense_id)
        previous_project = expense.project_id

        if data.amount is not None:
            expense.amount = self._check_amount(data.amount)
        if data.project_id is not None:
            self.projects.get_project(data.project_id)
            expense.project_id = data.project_id
        if data.description is not None:
            expense.description = data.description.strip()
        for field_name in ("expense_date", "category", "vendor", "invoice_number", "payment_method", "notes"):
            value = getattr(data, field_name)
            if value is not None:
                setattr(expense, field_name, value)
        expense.updated_at = datetime.utcnow()

        for project_id in {previous_project, expense.project_id} - {None}:
            self.projects.refresh_project_totals(project_id)
        self.db.commit()
        self.db.refresh(expense)
        return expense

    def delete_expense(self, expense_id: UUID) -> None:
        expense = self.get_expense(expense_id)
        project_id = expense.project_id
        self.repo.delete_expense(expense)
        if project_id is not None:
            self.projects.refresh_project_totals(project_id)
        self.db.commit()

    def expense_summary(
        self,
        *,
        project_id: UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> dict[str, object]:
        expenses = self.repo.list_expenses(project_id=project_id, date_from=date_from, date_to=date_to)
        by_category: dict[str, Decimal] = {category.value: ZERO for category in CostCategory}
        by_project: dict[str, Decimal] = defaultdict(lambda: ZERO)
        by_vendor: dict[str, Decimal] = defaultdict(lambda: ZERO)
        by_month: dict[str, Decimal] = defaultdict(lambda: ZERO)
        total = ZERO
        for expense in expenses:
            amount = Decimal(expense.amount)
            total += amount
            by_category[expense.category.value] += amount
            by_project[str(expense.project_id) if expense.project_id else "unassigned"] += amount
            by_vendor[expense.vendor or "unspecified"] += amount
            by_month[_month_key(expense.expense_date)] += amount

        return {
            "count": len(expenses),
            "total": str(_q2(total)),
            "by_category": {key: str(_q2(value)) for key, value in by_category.items()},
            "by_project": {key: str(_q2(value)) for key, value in sorted(by_project.items())},
            "by_vendor": {key: str(_q2(value)) for key, value in sorted(by_vendor.items())},
            "by_month": {key: str(_q2(value)) for key, value in sorted(by_month.items())},
        }

    # ---------- Incomes ----------
    def list_incomes(self, project_id: UUID) -> list[ProjectIncome]:
        project = self.projects.get_project(project_id)
        return self.repo.list_incomes(project_id=project.id)

    def create_income(self, project_id: UUID, data: IncomeCreateData) -> ProjectIncome:
        project = self.projects.get_project(project_id)
        income = ProjectIncome(
            project_id=project.id,
            income_date=data.income_date,
            concept=data.concept.strip(),
            amount=self._check_amount(data.amount),
            payment_method=data.payment_method or "transfer",
            invoice_number=data.invoice_number,
            notes=data.notes,
            created_at=datetime.utcnow(),
        )
        self.repo.add_income(income)
        self.projects.refresh_project_totals(project.id)
        self.db.commit()
        self.db.refresh(income)
        return income

    def delete_income(self, project_id: UUID, income_id: UUID) -> None:
        income = self.repo.get_income(income_id)
        if income is None or income.project_id != project_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Income not found.")
        self.repo.delete_income(income)
        self.projects.refresh_project_totals(project_id)
        self.db.commit()

    def income_summary(self, *, year: int | None = None) -> dict[str, object]:
        date_from = date(year, 1, 1) if year else None
        date_to = date(year, 12, 31) if year else None
        incomes = self.repo.list_incomes(date_from=date_from, date_to=date_to)
        by_project: dict[str, Decimal] = defaultdict(lambda: ZERO)
        by_month: dict[str, Decimal] = defaultdict(lambda: ZERO)
        total = ZERO
        for income in incomes:
            amount = Decimal(income.amount)
            total += amount
            by_project[str(income.project_id)] += amount
            by_month[_month_key(income.income_date)] += amount
        return {
            "year": year,
            "count": len(incomes),
            "total": str(_q2(total)),
            "by_project": {key: str(_q2(value)) for key, value in sorted(by_project.items())},
            "by_month": {key: str(_q2(value)) for key, value in sorted(by_month.items())},
        }
