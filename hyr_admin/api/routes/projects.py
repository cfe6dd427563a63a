"""Project lifecycle, budget items, assignments and incomes."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hyr_admin.db.dependencies import get_db_session
from hyr_admin.models.entities import CostCategory, ProjectStatus, ProjectType
from hyr_admin.services.ledger_service import IncomeCreateData, LedgerService
from hyr_admin.services.project_service import (
    AssignmentCreateData,
    BudgetItemCreateData,
    ProjectCreateData,
    ProjectService,
    ProjectUpdateData,
)

router = APIRouter(tags=["projects"])


class ProjectCreatePayload(BaseModel):
    code: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=255)
    client_id: UUID | None = None
    description: str | None = Field(default=None, max_length=2000)
    location: str | None = Field(default=None, max_length=255)
    project_type: ProjectType = ProjectType.CONSTRUCTION
    status: ProjectStatus = ProjectStatus.PLANNED
    start_date: date | None = None
    end_date: date | None = None
    progress: int = Field(default=0, ge=0, le=100)
    budget_materials: Decimal = Field(default=Decimal("0"), ge=0)
    budget_labor: Decimal = Field(default=Decimal("0"), ge=0)
    budget_equipment: Decimal = Field(default=Decimal("0"), ge=0)
    budget_overhead: Decimal = Field(default=Decimal("0"), ge=0)


class ProjectUpdatePayload(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=64)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    client_id: UUID | None = None
    description: str | None = Field(default=None, max_length=2000)
    location: str | None = Field(default=None, max_length=255)
    project_type: ProjectType | None = None
    status: ProjectStatus | None = None
    start_date: date | None = None
    end_date: date | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    budget_materials: Decimal | None = Field(default=None, ge=0)
    budget_labor: Decimal | None = Field(default=None, ge=0)
    budget_equipment: Decimal | None = Field(default=None, ge=0)
    budget_overhead: Decimal | None = Field(default=None, ge=0)


class BudgetItemCreatePayload(BaseModel):
    category: CostCategory
    description: str = Field(min_length=1, max_length=500)
    unit: str | None = Field(default=None, max_length=32)
    quantity: Decimal = Field(gt=0)
    unit_price: Decimal = Field(ge=0)


class AssignmentCreatePayload(BaseModel):
    personnel_id: UUID
    start_date: date
    end_date: date | None = None
    role: str | None = Field(default=None, max_length=128)


class IncomeCreatePayload(BaseModel):
    income_date: date
    concept: str = Field(min_length=1, max_length=500)
    amount: Decimal
    payment_method: str = Field(default="transfer", min_length=1, max_length=32)
    invoice_number: str | None = Field(default=None, max_length=64)
    notes: str | None = Field(default=None, max_length=2000)


def _project_service(db: Session) -> ProjectService:
    return ProjectService(db)


@router.get("/projects")
def list_projects(
    status_filter: ProjectStatus | None = Query(default=None, alias="status"),
    client_id: UUID | None = Query(default=None),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    service = _project_service(db)
    items = service.list_projects(status_filter=status_filter, client_id=client_id)
    return {"items": [service.serialize_project(project) for project in items]}


@router.post("/projects", status_code=status.HTTP_201_CREATED)
def create_project(payload: ProjectCreatePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _project_service(db)
    project = service.create_project(ProjectCreateData(**payload.model_dump()))
    return service.serialize_project(project)


@router.get("/projects/{project_id}")
def get_project(project_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _project_service(db)
    return service.serialize_project(service.get_project(project_id))


@router.patch("/projects/{project_id}")
def update_project(
    project_id: UUID,
    payload: ProjectUpdatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _project_service(db)
    project = service.update_project(project_id, ProjectUpdateData(**payload.model_dump()))
    return service.serialize_project(project)


@router.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(project_id: UUID, db: Session = Depends(get_db_session)) -> Response:
    _project_service(db).delete_project(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/projects/{project_id}/financials")
def project_financials(project_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    return _project_service(db).project_financials(project_id)


@router.get("/projects/{project_id}/budget-items")
def list_budget_items(project_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _project_service(db)
    return {"items": [service.serialize_budget_item(item) for item in service.list_budget_items(project_id)]}


@router.post("/projects/{project_id}/budget-items", status_code=status.HTTP_201_CREATED)
def create_budget_item(
    project_id: UUID,
    payload: BudgetItemCreatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _project_service(db)
    item = service.create_budget_item(project_id, BudgetItemCreateData(**payload.model_dump()))
    return service.serialize_budget_item(item)


@router.delete("/projects/{project_id}/budget-items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget_item(project_id: UUID, item_id: UUID, db: Session = Depends(get_db_session)) -> Response:
    _project_service(db).delete_budget_item(project_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/projects/{project_id}/assignments")
def list_assignments(project_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _project_service(db)
    rows = service.list_assignments(project_id)
    return {"items": [service.serialize_assignment(assignment, person) for assignment, person in rows]}


@router.post("/projects/{project_id}/assignments", status_code=status.HTTP_201_CREATED)
def create_assignment(
    project_id: UUID,
    payload: AssignmentCreatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _project_service(db)
    assignment, person = service.create_assignment(project_id, AssignmentCreateData(**payload.model_dump()))
    return service.serialize_assignment(assignment, person)


@router.delete("/projects/{project_id}/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assignment(project_id: UUID, assignment_id: UUID, db: Session = Depends(get_db_session)) -> Response:
    _project_service(db).delete_assignment(project_id, assignment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/projects/{project_id}/incomes")
def list_incomes(project_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = LedgerService(db)
    return {"items": [service.serialize_income(income) for income in service.list_incomes(project_id)]}


@router.post("/projects/{project_id}/incomes", status_code=status.HTTP_201_CREATED)
def create_income(
    project_id: UUID,
    payload: IncomeCreatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = LedgerService(db)
    income = service.create_income(project_id, IncomeCreateData(**payload.model_dump()))
    return service.serialize_income(income)


@router.delete("/projects/{project_id}/incomes/{income_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_income(project_id: UUID, income_id: UUID, db: Session = Depends(get_db_session)) -> Response:
    LedgerService(db).delete_income(project_id, income_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/incomes/summary")
def income_summary(
    year: int | None = Query(default=None, ge=2000, le=2100),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return LedgerService(db).income_summary(year=year)
