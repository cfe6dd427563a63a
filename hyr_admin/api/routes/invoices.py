"""Electronic invoicing endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hyr_admin.db.dependencies import get_db_session
from hyr_admin.models.entities import InvoiceStatus
from hyr_admin.services.invoicing_service import InvoiceCreateData, InvoiceLineData, InvoicingService

router = APIRouter(prefix="/invoices", tags=["invoices"])


class InvoiceLinePayload(BaseModel):
    description: str = Field(min_length=1, max_length=500)
    quantity: Decimal = Field(gt=0)
    unit_price: Decimal = Field(ge=0)


class InvoiceCreatePayload(BaseModel):
    city: str = Field(min_length=1, max_length=128)
    items: list[InvoiceLinePayload] = Field(min_length=1)
    client_id: UUID | None = None
    client_name: str | None = Field(default=None, max_length=255)
    client_nit: str | None = Field(default=None, max_length=32)
    project_id: UUID | None = None
    activity: str = Field(default="construction", max_length=32)
    issue_date: date | None = None
    due_days: int | None = Field(default=None, ge=0, le=365)
    notes: str | None = Field(default=None, max_length=2000)


def _invoicing_service(db: Session) -> InvoicingService:
    return InvoicingService(db)


@router.get("")
def list_invoices(
    status_filter: InvoiceStatus | None = Query(default=None, alias="status"),
    project_id: UUID | None = Query(default=None),
    city: str | None = Query(default=None, max_length=128),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    service = _invoicing_service(db)
    items = service.list_invoices(status_filter=status_filter, project_id=project_id, city=city)
    return {"items": [service.serialize_invoice(invoice) for invoice in items]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_invoice(payload: InvoiceCreatePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _invoicing_service(db)
    invoice = service.create_invoice(
        InvoiceCreateData(
            city=payload.city,
            items=[InvoiceLineData(**item.model_dump()) for item in payload.items],
            client_id=payload.client_id,
            client_name=payload.client_name,
            client_nit=payload.client_nit,
            project_id=payload.project_id,
            activity=payload.activity,
            issue_date=payload.issue_date,
            due_days=payload.due_days,
            notes=payload.notes,
        )
    )
    return service.serialize_invoice(invoice)


@router.get("/validate/{code}")
def validate_code(code: str, db: Session = Depends(get_db_session)) -> dict[str, object]:
    return _invoicing_service(db).validate_code(code)


@router.get("/{invoice_id}")
def get_invoice(invoice_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _invoicing_service(db)
    return service.serialize_invoice(service.get_invoice(invoice_id))


@router.get("/{invoice_id}/xml")
def get_invoice_xml(invoice_id: UUID, db: Session = Depends(get_db_session)) -> Response:
    invoice = _invoicing_service(db).get_invoice(invoice_id)
    return Response(
        content=invoice.xml_content,
        media_type="application/xml",
        headers={"Content-Disposition": f'attachment; filename="{invoice.invoice_number}.xml"'},
    )


@router.post("/{invoice_id}/cancel")
def cancel_invoice(invoice_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _invoicing_service(db)
    return service.serialize_invoice(service.cancel_invoice(invoice_id))
