"""Expense ledger endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hyr_admin.db.dependencies import get_db_session
from hyr_admin.models.entities import CostCategory
from hyr_admin.services.ledger_service import ExpenseCreateData, ExpenseUpdateData, LedgerService

router = APIRouter(prefix="/expenses", tags=["expenses"])


class ExpenseCreatePayload(BaseModel):
    expense_date: date
    category: CostCategory
    description: str = Field(min_length=1, max_length=500)
    amount: Decimal
    project_id: UUID | None = None
    vendor: str | None = Field(default=None, max_length=255)
    invoice_number: str | None = Field(default=None, max_length=64)
    payment_method: str | None = Field(default=None, max_length=32)
    notes: str | None = Field(default=None, max_length=2000)


class ExpenseUpdatePayload(BaseModel):
    expense_date: date | None = None
    category: CostCategory | None = None
    description: str | None = Field(default=None, min_length=1, max_length=500)
    amount: Decimal | None = None
    project_id: UUID | None = None
    vendor: str | None = Field(default=None, max_length=255)
    invoice_number: str | None = Field(default=None, max_length=64)
    payment_method: str | None = Field(default=None, max_length=32)
    notes: str | None = Field(default=None, max_length=2000)


def _ledger_service(db: Session) -> LedgerService:
    return LedgerService(db)


@router.get("")
def list_expenses(
    project_id: UUID | None = Query(default=None),
    category: CostCategory | None = Query(default=None),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    vendor: str | None = Query(default=None, max_length=255),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    service = _ledger_service(db)
    items = service.list_expenses(
        project_id=project_id,
        category=category,
        date_from=date_from,
        date_to=date_to,
        vendor=vendor,
    )
    return {"items": [service.serialize_expense(expense) for expense in items]}


@router.get("/summary")
def expense_summary(
    project_id: UUID | None = Query(default=None),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return _ledger_service(db).expense_summary(project_id=project_id, date_from=date_from, date_to=date_to)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_expense(payload: ExpenseCreatePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _ledger_service(db)
    expense = service.create_expense(ExpenseCreateData(**payload.model_dump()))
    return service.serialize_expense(expense)


@router.get("/{expense_id}")
def get_expense(expense_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _ledger_service(db)
    return service.serialize_expense(service.get_expense(expense_id))


@router.patch("/{expense_id}")
def update_expense(
    expense_id: UUID,
    payload: ExpenseUpdatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _ledger_service(db)
    expense = service.update_expense(expense_id, ExpenseUpdateData(**payload.model_dump()))
    return service.serialize_expense(expense)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(expense_id: UUID, db: Session = Depends(get_db_session)) -> Response:
    _ledger_service(db).delete_expense(expense_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
