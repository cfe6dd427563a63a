"""Electronic invoices: totals, CUFE, UBL document and cancellation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hyr_admin.core.config import get_settings
from hyr_admin.core.tax_config import UnknownTaxYearError, get_tax_config
from hyr_admin.models.entities import ElectronicInvoice, InvoiceStatus
from hyr_admin.repositories.office_repository import OfficeRepository
from hyr_admin.repositories.project_repository import ProjectRepository
from hyr_admin.services.audit_service import record_audit_event
from hyr_admin.services.dian import (
    FINAL_CONSUMER_NIT,
    UblLine,
    UblParty,
    generate_cufe,
    invoice_number,
    is_valid_code,
    render_invoice_xml,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")
ACTIVITIES = ("construction", "welding")


def _q2(value: Decimal) -> Decimal:
    return value.quantize(Q2, rounding=ROUND_HALF_UP)


@dataclass(slots=True)
class InvoiceLineData:
    description: str
    quantity: Decimal
    unit_price: Decimal


@dataclass(slots=True)
class InvoiceCreateData:
    city: str
    items: list[InvoiceLineData] = field(default_factory=list)
    client_id: UUID | None = None
    client_name: str | None = None
    client_nit: str | None = None
    project_id: UUID | None = None
    activity: str = "construction"
    issue_date: date | None = None
    due_days: int | None = None
    notes: str | None = None


class InvoicingService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = OfficeRepository(db)
        self.projects = ProjectRepository(db)
        self.settings = get_settings()

    @staticmethod
    def serialize_invoice(invoice: ElectronicInvoice) -> dict[str, object]:
        return {
            "id": str(invoice.id),
            "invoice_number": invoice.invoice_number,
            "client_id": str(invoice.client_id) if invoice.client_id else None,
            "project_id": str(invoice.project_id) if invoice.project_id else None,
            "client_name": invoice.client_name,
            "client_nit": invoice.client_nit,
            "city": invoice.city,
            "activity": invoice.activity,
            "issue_date": invoice.issue_date.isoformat(),
            "due_date": invoice.due_date.isoformat(),
            "subtotal": str(invoice.subtotal),
            "vat_rate": str(invoice.vat_rate),
            "vat_amount": str(invoice.vat_amount),
            "reteica_rate": str(invoice.reteica_rate),
            "reteica_amount": str(invoice.reteica_amount),
            "total_amount": str(invoice.total_amount),
            "line_items": list(invoice.line_items or []),
            "cufe": invoice.cufe,
            "status": invoice.status.value,
            "notes": invoice.notes,
            "cancelled_at": invoice.cancelled_at.isoformat() if invoice.cancelled_at else None,
            "created_at": invoice.created_at.isoformat(),
        }

    def list_invoices(
        self,
        *,
        status_filter: InvoiceStatus | None = None,
        project_id: UUID | None = None,
        city: str | None = None,
    ) -> list[ElectronicInvoice]:
        return self.repo.list_invoices(status=status_filter, project_id=project_id, city=city)

    def get_invoice(self, invoice_id: UUID) -> ElectronicInvoice:
        invoice = self.repo.get_invoice(invoice_id)
        if invoice is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found.")
        return invoice

    def _resolve_customer(self, data: InvoiceCreateData) -> tuple[str, str | None]:
        if data.client_id is not None:
            client = self.projects.get_client(data.client_id)
            if client is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found.")
            return client.name, data.client_nit or client.nit
        if not data.client_name or not data.client_name.strip():
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="client_id or client_name is required.",
            )
        return data.client_name.strip(), data.client_nit

    def create_invoice(self, data: InvoiceCreateData) -> ElectronicInvoice:
        if not data.items:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="An invoice needs at least one item.",
            )
        if data.activity not in ACTIVITIES:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"activity must be one of {', '.join(ACTIVITIES)}.",
            )
        if not data.city or not data.city.strip():
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="city is required.")
        if data.project_id is not None and self.projects.get_project(data.project_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found.")

        client_name, client_nit = self._resolve_customer(data)
        issue_date = data.issue_date or date.today()
        due_days = self.settings.invoice_due_days if data.due_days is None else data.due_days
        if due_days < 0:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="due_days must be >= 0.")

        try:
            tax = get_tax_config(issue_date.year)
        except UnknownTaxYearError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

        lines: list[UblLine] = []
        for item in data.items:
            if item.quantity <= 0:
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail="Item quantity must be greater than zero.",
                )
            if item.unit_price < 0:
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail="Item unit_price cannot be negative.",
                )
            lines.append(
                UblLine(
                    description=item.description.strip(),
                    quantity=item.quantity,
                    unit_price=_q2(item.unit_price),
                    line_total=_q2(item.quantity * item.unit_price),
                )
            )

        subtotal = sum((line.line_total for line in lines), ZERO)
        vat_rate = tax.vat_rate("19")
        vat_amount = _q2(subtotal * vat_rate)
        reteica_rate = tax.ica_rate(data.city, data.activity) or Decimal("0")
        reteica_amount = _q2(subtotal * reteica_rate)
        total_amount = subtotal + vat_amount - reteica_amount

        sequence = self.repo.next_invoice_sequence()
        number = invoice_number(self.settings.invoice_prefix, sequence)
        cufe = generate_cufe(
            invoice_number=number,
            issue_date=issue_date,
            total_amount=total_amount,
            supplier_nit=self.settings.company_nit,
            customer_nit=client_nit,
        )
        due_date = issue_date + timedelta(days=due_days)
        xml_content = render_invoice_xml(
            number=number,
            cufe=cufe,
            issue_date=issue_date,
            due_date=due_date,
            supplier=UblParty(nit=self.settings.company_nit, name=self.settings.company_name),
            customer=UblParty(nit=client_nit or FINAL_CONSUMER_NIT, name=client_name, city=data.city.strip()),
            lines=lines,
            subtotal=subtotal,
            vat_amount=vat_amount,
            reteica_amount=reteica_amount,
            total_amount=total_amount,
        )

        invoice = ElectronicInvoice(
            invoice_number=number,
            sequence=sequence,
            client_id=data.client_id,
            project_id=data.project_id,
            client_name=client_name,
            client_nit=client_nit,
            city=data.city.strip(),
            activity=data.activity,
            issue_date=issue_date,
            due_date=due_date,
            subtotal=subtotal,
            vat_rate=vat_rate,
            vat_amount=vat_amount,
            reteica_rate=reteica_rate,
            reteica_amount=reteica_amount,
            total_amount=total_amount,
            line_items=[
                {
                    "description": line.description,
                    "quantity": str(line.quantity),
                    "unit_price": str(line.unit_price),
                    "line_total": str(line.line_total),
                }
                for line in lines
            ],
            cufe=cufe,
            xml_content=xml_content,
            status=InvoiceStatus.ISSUED,
            notes=data.notes,
            created_at=datetime.utcnow(),
        )
        self.repo.add_invoice(invoice)
        record_audit_event(
            self.db,
            entity_name="electronic_invoice",
            entity_id=invoice.id,
            action_type="issued",
            payload={"invoice_number": number, "cufe": cufe, "total_amount": str(total_amount)},
        )
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Invoice number or CUFE already exists.",
            ) from exc
        logger.info("invoice issued", extra={"invoice_number": number, "entity_id": str(invoice.id)})
        self.db.refresh(invoice)
        return invoice

    def cancel_invoice(self, invoice_id: UUID) -> ElectronicInvoice:
        invoice = self.get_invoice(invoice_id)
        if invoice.status == InvoiceStatus.CANCELLED:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Invoice is already cancelled.")
        invoice.status = InvoiceStatus.CANCELLED
        invoice.cancelled_at = datetime.utcnow()
        record_audit_event(
            self.db,
            entity_name="electronic_invoice",
            entity_id=invoice.id,
            action_type="cancelled",
            payload={"invoice_number": invoice.invoice_number},
        )
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    def validate_code(self, code: str) -> dict[str, object]:
        valid = is_valid_code(code)
        invoice = None
        if valid:
            compact = code.replace("-", "").upper()
            formatted = "-".join(compact[index : index + 8] for index in range(0, 32, 8))
            invoice = self.repo.get_invoice_by_cufe(formatted)
        return {
            "code": code,
            "valid": valid,
            "found": invoice is not None,
            "invoice_number": invoice.invoice_number if invoice else None,
            "status": invoice.status.value if invoice else None,
        }
