"""Repository helpers for clients, projects and their cost/income ledgers."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from hyr_admin.models.entities import (
    BudgetItem,
    Client,
    CostCategory,
    Expense,
    Personnel,
    Project,
    ProjectAssignment,
    ProjectIncome,
    ProjectStatus,
    TimeEntry,
    TimeEntryStatus,
)


class ProjectRepository:
    """Persistence operations used by client, project and ledger services."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Clients ----------
    def list_clients(self, *, active: bool | None = None, search: str | None = None) -> list[Client]:
        statement = select(Client)
        if active is not None:
            statement = statement.where(Client.active.is_(active))
        if search:
            statement = statement.where(Client.name.ilike(f"%{search}%"))
        return self.db.scalars(statement.order_by(Client.name.asc())).all()

    def get_client(self, client_id: UUID) -> Client | None:
        return self.db.scalar(select(Client).where(Client.id == client_id))

    def add_client(self, client: Client) -> Client:
        self.db.add(client)
        self.db.flush()
        return client

    def delete_client(self, client: Client) -> None:
        self.db.delete(client)
        self.db.flush()

    def client_project_count(self, client_id: UUID) -> int:
        return int(self.db.scalar(select(func.count(Project.id)).where(Project.client_id == client_id)) or 0)

    # ---------- Projects ----------
    def list_projects(
        self,
        *,
        status: ProjectStatus | None = None,
        client_id: UUID | None = None,
    ) -> list[Project]:
        statement = select(Project)
        if status is not None:
            statement = statement.where(Project.status == status)
        if client_id is not None:
            statement = statement.where(Project.client_id == client_id)
        return self.db.scalars(statement.order_by(Project.created_at.desc(), Project.code.asc())).all()

    def get_project(self, project_id: UUID) -> Project | None:
        return self.db.scalar(select(Project).where(Project.id == project_id))

    def get_project_by_code(self, code: str) -> Project | None:
        return self.db.scalar(select(Project).where(Project.code == code))

    def add_project(self, project: Project) -> Project:
        self.db.add(project)
        self.db.flush()
        return project

    def delete_project(self, project: Project) -> None:
        self.db.delete(project)
        self.db.flush()

    def project_dependency_counts(self, project_id: UUID) -> dict[str, int]:
        counts: dict[str, int] = {}
        for label, model in (
            ("expenses", Expense),
            ("incomes", ProjectIncome),
            ("time_entries", TimeEntry),
            ("budget_items", BudgetItem),
        ):
            counts[label] = int(
                self.db.scalar(select(func.count(model.id)).where(model.project_id == project_id)) or 0
            )
        return counts

    def expense_totals_by_category(self, project_id: UUID) -> dict[CostCategory, Decimal]:
        rows = self.db.execute(
            select(Expense.category, func.coalesce(func.sum(Expense.amount), 0))
            .where(Expense.project_id == project_id)
            .group_by(Expense.category)
        ).all()
        return {category: Decimal(str(total)) for category, total in rows}

    def time_entry_pay_total(self, project_id: UUID) -> Decimal:
        total = self.db.scalar(
            select(func.coalesce(func.sum(TimeEntry.total_pay), 0)).where(
                TimeEntry.project_id == project_id,
                TimeEntry.status != TimeEntryStatus.REJECTED,
            )
        )
        return Decimal(str(total or 0))

    def income_total(self, project_id: UUID) -> Decimal:
        total = self.db.scalar(
            select(func.coalesce(func.sum(ProjectIncome.amount), 0)).where(ProjectIncome.project_id == project_id)
        )
        return Decimal(str(total or 0))

    # ---------- Budget items ----------
    def list_budget_items(self, project_id: UUID) -> list[BudgetItem]:
        return self.db.scalars(
            select(BudgetItem)
            .where(BudgetItem.project_id == project_id)
            .order_by(BudgetItem.category.asc(), BudgetItem.created_at.asc())
        ).all()

    def get_budget_item(self, item_id: UUID) -> BudgetItem | None:
        return self.db.scalar(select(BudgetItem).where(BudgetItem.id == item_id))

    def add_budget_item(self, item: BudgetItem) -> BudgetItem:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_budget_item(self, item: BudgetItem) -> None:
        self.db.delete(item)
        self.db.flush()

    # ---------- Assignments ----------
    def list_assignments(self, project_id: UUID) -> list[tuple[ProjectAssignment, Personnel]]:
        rows = self.db.execute(
            select(ProjectAssignment, Personnel)
            .join(Personnel, Personnel.id == ProjectAssignment.personnel_id)
            .where(ProjectAssignment.project_id == project_id)
            .order_by(ProjectAssignment.start_date.asc(), Personnel.name.asc())
        ).all()
        return [(assignment, person) for assignment, person in rows]

    def get_assignment(self, assignment_id: UUID) -> ProjectAssignment | None:
        return self.db.scalar(select(ProjectAssignment).where(ProjectAssignment.id == assignment_id))

    def get_open_assignment(self, project_id: UUID, personnel_id: UUID) -> ProjectAssignment | None:
        return self.db.scalar(
            select(ProjectAssignment).where(
                and_(
                    ProjectAssignment.project_id == project_id,
                    ProjectAssignment.personnel_id == personnel_id,
                    ProjectAssignment.active.is_(True),
                )
            )
        )

    def add_assignment(self, assignment: ProjectAssignment) -> ProjectAssignment:
        self.db.add(assignment)
        self.db.flush()
        return assignment

    def delete_assignment(self, assignment: ProjectAssignment) -> None:
        self.db.delete(assignment)
        self.db.flush()

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
        statement = select(Expense)
        if project_id is not None:
            statement = statement.where(Expense.project_id == project_id)
        if category is not None:
            statement = statement.where(Expense.category == category)
        if date_from is not None:
            statement = statement.where(Expense.expense_date >= date_from)
        if date_to is not None:
            statement = statement.where(Expense.expense_date <= date_to)
        if vendor:
            statement = statement.where(Expense.vendor.ilike(f"%{vendor}%"))
        return self.db.scalars(statement.order_by(Expense.expense_date.desc(), Expense.created_at.desc())).all()

    def get_expense(self, expense_id: UUID) -> Expense | None:
        return self.db.scalar(select(Expense).where(Expense.id == expense_id))

    def add_expense(self, expense: Expense) -> Expense:
        self.db.add(expense)
        self.db.flush()
        return expense

    def delete_expense(self, expense: Expense) -> None:
        self.db.delete(expense)
        self.db.flush()

    # ---------- Incomes ----------
    def list_incomes(
        self,
        *,
        project_id: UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[ProjectIncome]:
        statement = select(ProjectIncome)
        if project_id is not None:
            statement = statement.where(ProjectIncome.project_id == project_id)
        if date_from is not None:
            statement = statement.where(ProjectIncome.income_date >= date_from)
        if date_to is not None:
            statement = statement.where(ProjectIncome.income_date <= date_to)
        return self.db.scalars(
            statement.order_by(ProjectIncome.income_date.desc(), ProjectIncome.created_at.desc())
        ).all()

    def get_income(self, income_id: UUID) -> ProjectIncome | None:
        return self.db.scalar(select(ProjectIncome).where(ProjectIncome.id == income_id))

    def add_income(self, income: ProjectIncome) -> ProjectIncome:
        self.db.add(income)
        self.db.flush()
        return income

    def delete_income(self, income: ProjectIncome) -> None:
        self.db.delete(income)
        self.db.flush()
