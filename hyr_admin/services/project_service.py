"""Application service for clients, projects, budget items and staff assignments."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hyr_admin.models.entities import (
    BudgetItem,
    Client,
    ClientType,
    CostCategory,
    Personnel,
    PersonnelStatus,
    Project,
    ProjectAssignment,
    ProjectStatus,
    ProjectType,
)
from hyr_admin.repositories.payroll_repository import PayrollRepository
from hyr_admin.repositories.project_repository import ProjectRepository

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")
WARNING_RATIO = Decimal("0.90")

BUDGET_FIELDS = {
    CostCategory.MATERIALS: ("budget_materials", "spent_materials"),
    CostCategory.LABOR: ("budget_labor", "spent_labor"),
    CostCategory.EQUIPMENT: ("budget_equipment", "spent_equipment"),
    CostCategory.OVERHEAD: ("budget_overhead", "spent_overhead"),
}


def _q2(value: Decimal) -> Decimal:
    return value.quantize(Q2)


def budget_status(spent: Decimal, budget: Decimal) -> str:
    if budget <= ZERO:
        return "normal"
    if spent > budget:
        return "over_budget"
    if spent > budget * WARNING_RATIO:
        return "warning"
    return "normal"


def _percentage(part: Decimal, total: Decimal) -> str:
    if total == ZERO:
        return "0.00"
    return str(_q2(part / total * 100))


@dataclass(slots=True)
class ClientCreateData:
    name: str
    nit: str | None = None
    client_type: ClientType = ClientType.COMPANY
    contact_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    notes: str | None = None
    active: bool = True


@dataclass(slots=True)
class ClientUpdateData:
    name: str | None = None
    nit: str | None = None
    client_type: ClientType | None = None
    contact_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    notes: str | None = None
    active: bool | None = None


@dataclass(slots=True)
class ProjectCreateData:
    code: str
    name: str
    client_id: UUID | None = None
    description: str | None = None
    location: str | None = None
    project_type: ProjectType = ProjectType.CONSTRUCTION
    status: ProjectStatus = ProjectStatus.PLANNED
    start_date: date | None = None
    end_date: date | None = None
    progress: int = 0
    budget_materials: Decimal = ZERO
    budget_labor: Decimal = ZERO
    budget_equipment: Decimal = ZERO
    budget_overhead: Decimal = ZERO


@dataclass(slots=True)
class ProjectUpdateData:
    code: str | None = None
    name: str | None = None
    client_id: UUID | None = None
    description: str | None = None
    location: str | None = None
    project_type: ProjectType | None = None
    status: ProjectStatus | None = None
    start_date: date | None = None
    end_date: date | None = None
    progress: int | None = None
    budget_materials: Decimal | None = None
    budget_labor: Decimal | None = None
    budget_equipment: Decimal | None = None
    budget_overhead: Decimal | None = None


@dataclass(slots=True)
class BudgetItemCreateData:
    category: CostCategory
    description: str
    quantity: Decimal
    unit_price: Decimal
    unit: str | None = None


@dataclass(slots=True)
class AssignmentCreateData:
    personnel_id: UUID
    start_date: date
    role: str | None = None
    end_date: date | None = None


class ProjectService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = ProjectRepository(db)

    # ---------- Serialization ----------
    @staticmethod
    def serialize_client(client: Client) -> dict[str, object]:
        return {
            "id": str(client.id),
            "name": client.name,
            "nit": client.nit,
            "client_type": client.client_type.value,
            "contact_name": client.contact_name,
            "email": client.email,
            "phone": client.phone,
            "address": client.address,
            "city": client.city,
            "notes": client.notes,
            "active": client.active,
            "created_at": client.created_at.isoformat(),
            "updated_at": client.updated_at.isoformat(),
        }

    @staticmethod
    def serialize_project(project: Project) -> dict[str, object]:
        return {
            "id": str(project.id),
            "code": project.code,
            "name": project.name,
            "client_id": str(project.client_id) if project.client_id else None,
            "description": project.description,
            "location": project.location,
            "project_type": project.project_type.value,
            "status": project.status.value,
            "start_date": project.start_date.isoformat() if project.start_date else None,
            "end_date": project.end_date.isoformat() if project.end_date else None,
            "progress": project.progress,
            "budget_materials": str(project.budget_materials),
            "budget_labor": str(project.budget_labor),
            "budget_equipment": str(project.budget_equipment),
            "budget_overhead": str(project.budget_overhead),
            "budget_total": str(project.budget_total),
            "spent_materials": str(project.spent_materials),
            "spent_labor": str(project.spent_labor),
            "spent_equipment": str(project.spent_equipment),
            "spent_overhead": str(project.spent_overhead),
            "spent_total": str(project.spent_total),
            "total_income": str(project.total_income),
            "budget_status": budget_status(project.spent_total, project.budget_total),
            "created_at": project.created_at.isoformat(),
            "updated_at": project.updated_at.isoformat(),
        }

    @staticmethod
    def serialize_budget_item(item: BudgetItem) -> dict[str, object]:
        return {
            "id": str(item.id),
            "project_id": str(item.project_id),
            "category": item.category.value,
            "description": item.description,
            "unit": item.unit,
            "quantity": str(item.quantity),
            "unit_price": str(item.unit_price),
            "total": str(item.total),
        }

    @staticmethod
    def serialize_assignment(assignment: ProjectAssignment, person: Personnel) -> dict[str, object]:
        return {
            "id": str(assignment.id),
            "project_id": str(assignment.project_id),
            "personnel_id": str(assignment.personnel_id),
            "personnel_name": person.name,
            "position": person.position,
            "role": assignment.role,
            "start_date": assignment.start_date.isoformat(),
            "end_date": assignment.end_date.isoformat() if assignment.end_date else None,
            "active": assignment.active,
        }

    # ---------- Derived totals ----------
    def refresh_project_totals(self, project_id: UUID) -> Project:
        project = self.repo.get_project(project_id)
        if project is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found.")

        self.db.flush()
        by_category = self.repo.expense_totals_by_category(project_id)
        project.spent_materials = _q2(by_category.get(CostCategory.MATERIALS, ZERO))
        project.spent_labor = _q2(by_category.get(CostCategory.LABOR, ZERO) + self.repo.time_entry_pay_total(project_id))
        project.spent_equipment = _q2(by_category.get(CostCategory.EQUIPMENT, ZERO))
        project.spent_overhead = _q2(by_category.get(CostCategory.OVERHEAD, ZERO))
        project.spent_total = (
            project.spent_materials + project.spent_labor + project.spent_equipment + project.spent_overhead
        )
        project.total_income = _q2(self.repo.income_total(project_id))
        project.budget_total = _q2(
            Decimal(project.budget_materials)
            + Decimal(project.budget_labor)
            + Decimal(project.budget_equipment)
            + Decimal(project.budget_overhead)
        )
        return project

    # ---------- Clients ----------
    def list_clients(self, *, active: bool | None = None, search: str | None = None) -> list[Client]:
        return self.repo.list_clients(active=active, search=search)

    def get_client(self, client_id: UUID) -> Client:
        client = self.repo.get_client(client_id)
        if client is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found.")
        return client

    def create_client(self, data: ClientCreateData) -> Client:
        now = datetime.utcnow()
        client = Client(
            name=data.name.strip(),
            nit=data.nit.strip() if data.nit else None,
            client_type=data.client_type,
            contact_name=data.contact_name,
            email=data.email,
            phone=data.phone,
            address=data.address,
            city=data.city,
            notes=data.notes,
            active=data.active,
            created_at=now,
            updated_at=now,
        )
        try:
            self.repo.add_client(client)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Client NIT already exists.") from exc
        self.db.refresh(client)
        return client

    def update_client(self, client_id: UUID, data: ClientUpdateData) -> Client:
        client = self.get_client(client_id)
        if data.name is not None:
            client.name = data.name.strip()
        if data.nit is not None:
            client.nit = data.nit.strip() or None
        if data.client_type is not None:
            client.client_type = data.client_type
        for field_name in ("contact_name", "email", "phone", "address", "city", "notes", "active"):
            value = getattr(data, field_name)
            if value is not None:
                setattr(client, field_name, value)
        client.updated_at = datetime.utcnow()
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Client NIT already exists.") from exc
        self.db.refresh(client)
        return client

    def delete_client(self, client_id: UUID) -> None:
        client = self.get_client(client_id)
        if self.repo.client_project_count(client.id) > 0:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot delete client with existing projects; deactivate it instead.",
            )
        self.repo.delete_client(client)
        self.db.commit()

    def list_client_projects(self, client_id: UUID) -> list[Project]:
        client = self.get_client(client_id)
        return self.repo.list_projects(client_id=client.id)

    def client_stats(self, client_id: UUID) -> dict[str, object]:
        projects = self.list_client_projects(client_id)
        budget = sum((Decimal(project.budget_total) for project in projects), ZERO)
        spent = sum((Decimal(project.spent_total) for project in projects), ZERO)
        income = sum((Decimal(project.total_income) for project in projects), ZERO)
        return {
            "client_id": str(client_id),
            "project_count": len(projects),
            "active_projects": sum(1 for project in projects if project.status == ProjectStatus.IN_PROGRESS),
            "completed_projects": sum(1 for project in projects if project.status == ProjectStatus.COMPLETED),
            "total_budget": str(_q2(budget)),
            "total_spent": str(_q2(spent)),
            "total_income": str(_q2(income)),
        }

    # ---------- Projects ----------
    def list_projects(
        self,
        *,
        status_filter: ProjectStatus | None = None,
        client_id: UUID | None = None,
    ) -> list[Project]:
        return self.repo.list_projects(status=status_filter, client_id=client_id)

    def get_project(self, project_id: UUID) -> Project:
        project = self.repo.get_project(project_id)
        if project is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found.")
        return project

    @staticmethod
    def _check_dates(start_date: date | None, end_date: date | None) -> None:
        if start_date is not None and end_date is not None and end_date < start_date:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="end_date must be greater than or equal to start_date.",
            )

    def create_project(self, data: ProjectCreateData, *, commit: bool = True) -> Project:
        self._check_dates(data.start_date, data.end_date)
        if data.client_id is not None:
            self.get_client(data.client_id)
        if self.repo.get_project_by_code(data.code.strip()) is not None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Project code already exists.")

        now = datetime.utcnow()
        project = Project(
            code=data.code.strip(),
            name=data.name.strip(),
            client_id=data.client_id,
            description=data.description,
            location=data.location,
            project_type=data.project_type,
            status=data.status,
            start_date=data.start_date,
            end_date=data.end_date,
            progress=data.progress,
            budget_materials=_q2(data.budget_materials),
            budget_labor=_q2(data.budget_labor),
            budget_equipment=_q2(data.budget_equipment),
            budget_overhead=_q2(data.budget_overhead),
            budget_total=_q2(data.budget_materials + data.budget_labor + data.budget_equipment + data.budget_overhead),
            spent_materials=ZERO,
            spent_labor=ZERO,
            spent_equipment=ZERO,
            spent_overhead=ZERO,
            spent_total=ZERO,
            total_income=ZERO,
            created_at=now,
            updated_at=now,
        )
        self.repo.add_project(project)
        if not commit:
            return project
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Project code already exists.") from exc
        self.db.refresh(project)
        return project

    def update_project(self, project_id: UUID, data: ProjectUpdateData) -> Project:
        project = self.get_project(project_id)
        self._check_dates(
            data.start_date if data.start_date is not None else project.start_date,
            data.end_date if data.end_date is not None else project.end_date,
        )
        if data.client_id is not None:
            self.get_client(data.client_id)
            project.client_id = data.client_id

        if data.code is not None:
            project.code = data.code.strip()
        if data.name is not None:
            project.name = data.name.strip()
        for field_name in (
            "description",
            "location",
            "project_type",
            "status",
            "start_date",
            "end_date",
            "progress",
        ):
            value = getattr(data, field_name)
            if value is not None:
                setattr(project, field_name, value)
        for budget_field, _ in BUDGET_FIELDS.values():
            value = getattr(data, budget_field)
            if value is not None:
                setattr(project, budget_field, _q2(value))

        project.updated_at = datetime.utcnow()
        self.refresh_project_totals(project.id)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Project code already exists.") from exc
        self.db.refresh(project)
        return project

    def delete_project(self, project_id: UUID) -> None:
        project = self.get_project(project_id)
        counts = self.repo.project_dependency_counts(project.id)
        blocking = [label.replace("_", " ") for label, count in counts.items() if count > 0]
        if blocking:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Cannot delete project with existing {', '.join(blocking)}.",
            )
        for assignment, _ in self.repo.list_assignments(project.id):
            self.repo.delete_assignment(assignment)
        self.repo.delete_project(project)
        self.db.commit()

    def project_financials(self, project_id: UUID) -> dict[str, object]:
        project = self.get_project(project_id)
        categories = []
        for category, (budget_field, spent_field) in BUDGET_FIELDS.items():
            budget = Decimal(getattr(project, budget_field))
            spent = Decimal(getattr(project, spent_field))
            categories.append(
                {
                    "category": category.value,
                    "budget": str(budget),
                    "spent": str(spent),
                    "variance": str(_q2(budget - spent)),
                    "used_percentage": _percentage(spent, budget),
                    "status": budget_status(spent, budget),
                }
            )
        income = Decimal(project.total_income)
        spent_total = Decimal(project.spent_total)
        profit = _q2(income - spent_total)
        return {
            "project": self.serialize_project(project),
            "categories": categories,
            "budget_total": str(project.budget_total),
            "spent_total": str(project.spent_total),
            "remaining_budget": str(_q2(Decimal(project.budget_total) - spent_total)),
            "budget_status": budget_status(spent_total, Decimal(project.budget_total)),
            "total_income": str(project.total_income),
            "profit": str(profit),
            "margin_percentage": _percentage(profit, income),
        }

    # ---------- Budget items ----------
    def list_budget_items(self, project_id: UUID) -> list[BudgetItem]:
        project = self.get_project(project_id)
        return self.repo.list_budget_items(project.id)

    def create_budget_item(self, project_id: UUID, data: BudgetItemCreateData) -> BudgetItem:
        project = self.get_project(project_id)
        item = BudgetItem(
            project_id=project.id,
            category=data.category,
            description=data.description.strip(),
            unit=data.unit,
            quantity=data.quantity,
            unit_price=_q2(data.unit_price),
            total=_q2(data.quantity * data.unit_price),
            created_at=datetime.utcnow(),
        )
        self.repo.add_budget_item(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete_budget_item(self, project_id: UUID, item_id: UUID) -> None:
        item = self.repo.get_budget_item(item_id)
        if item is None or item.project_id != project_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget item not found.")
        self.repo.delete_budget_item(item)
        self.db.commit()

    # ---------- Assignments ----------
    def list_assignments(self, project_id: UUID) -> list[tuple[ProjectAssignment, Personnel]]:
        project = self.get_project(project_id)
        return self.repo.list_assignments(project.id)

    def create_assignment(self, project_id: UUID, data: AssignmentCreateData) -> tuple[ProjectAssignment, Personnel]:
        project = self.get_project(project_id)
        person = PayrollRepository(self.db).get_personnel(data.personnel_id)
        if person is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Personnel not found.")
        if person.status != PersonnelStatus.ACTIVE:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Only active personnel can be assigned to a project.",
            )
        self._check_dates(data.start_date, data.end_date)
        if self.repo.get_open_assignment(project.id, person.id) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Personnel already has an open assignment on this project.",
            )

        assignment = ProjectAssignment(
            project_id=project.id,
            personnel_id=person.id,
            role=data.role,
            start_date=data.start_date,
            end_date=data.end_date,
            active=True,
            created_at=datetime.utcnow(),
        )
        self.repo.add_assignment(assignment)
        self.db.commit()
        self.db.refresh(assignment)
        return assignment, person

    def delete_assignment(self, project_id: UUID, assignment_id: UUID) -> None:
        assignment = self.repo.get_assignment(assignment_id)
        if assignment is None or assignment.project_id != project_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignment not found.")
        self.repo.delete_assignment(assignment)
        self.db.commit()
