"""Repository helpers for settings, calendar, estimations, invoicing and audit rows."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from hyr_admin.models.entities import (
    AuditEvent,
    CalendarEvent,
    CalendarEventStatus,
    CalendarEventType,
    Contractor,
    CostEstimation,
    ElectronicInvoice,
    InvoiceStatus,
    Setting,
    SupportDocument,
)


class OfficeRepository:
    """Persistence operations for back-office records."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Settings ----------
    def list_settings(self, category: str | None = None) -> list[Setting]:
        statement = select(Setting)
        if category:
            statement = statement.where(Setting.category == category)
        return self.db.scalars(statement.order_by(Setting.category.asc(), Setting.key.asc())).all()

    def get_setting(self, key: str) -> Setting | None:
        return self.db.scalar(select(Setting).where(Setting.key == key))

    def add_setting(self, setting: Setting) -> Setting:
        self.db.add(setting)
        self.db.flush()
        return setting

    def delete_setting(self, setting: Setting) -> None:
        self.db.delete(setting)
        self.db.flush()

    # ---------- Calendar ----------
    def list_events(
        self,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
        event_type: CalendarEventType | None = None,
        status: CalendarEventStatus | None = None,
        project_id: UUID | None = None,
    ) -> list[CalendarEvent]:
        statement = select(CalendarEvent)
        if date_from is not None:
            statement = statement.where(CalendarEvent.event_date >= date_from)
        if date_to is not None:
            statement = statement.where(CalendarEvent.event_date <= date_to)
        if event_type is not None:
            statement = statement.where(CalendarEvent.event_type == event_type)
        if status is not None:
            statement = statement.where(CalendarEvent.status == status)
        if project_id is not None:
            statement = statement.where(CalendarEvent.project_id == project_id)
        return self.db.scalars(
            statement.order_by(CalendarEvent.event_date.asc(), CalendarEvent.event_time.asc())
        ).all()

    def get_event(self, event_id: UUID) -> CalendarEvent | None:
        return self.db.scalar(select(CalendarEvent).where(CalendarEvent.id == event_id))

    def add_event(self, event: CalendarEvent) -> CalendarEvent:
        self.db.add(event)
        self.db.flush()
        return event

    def delete_event(self, event: CalendarEvent) -> None:
        self.db.delete(event)
        self.db.flush()

    # ---------- Cost estimations ----------
    def list_estimations(self) -> list[CostEstimation]:
        return self.db.scalars(select(CostEstimation).order_by(CostEstimation.created_at.desc())).all()

    def get_estimation(self, estimation_id: UUID) -> CostEstimation | None:
        return self.db.scalar(select(CostEstimation).where(CostEstimation.id == estimation_id))

    def add_estimation(self, estimation: CostEstimation) -> CostEstimation:
        self.db.add(estimation)
        self.db.flush()
        return estimation

    def delete_estimation(self, estimation: CostEstimation) -> None:
        self.db.delete(estimation)
        self.db.flush()

    # ---------- Electronic invoices ----------
    def list_invoices(
        self,
        *,
        status: InvoiceStatus | None = None,
        project_id: UUID | None = None,
        city: str | None = None,
    ) -> list[ElectronicInvoice]:
        statement = select(ElectronicInvoice)
        if status is not None:
            statement = statement.where(ElectronicInvoice.status == status)
        if project_id is not None:
            statement = statement.where(ElectronicInvoice.project_id == project_id)
        if city:
            statement = statement.where(ElectronicInvoice.city.ilike(city))
        return self.db.scalars(statement.order_by(ElectronicInvoice.sequence.desc())).all()

    def get_invoice(self, invoice_id: UUID) -> ElectronicInvoice | None:
        return self.db.scalar(select(ElectronicInvoice).where(ElectronicInvoice.id == invoice_id))

    def get_invoice_by_cufe(self, cufe: str) -> ElectronicInvoice | None:
        return self.db.scalar(select(ElectronicInvoice).where(ElectronicInvoice.cufe == cufe))

    def next_invoice_sequence(self) -> int:
        current = self.db.scalar(select(func.max(ElectronicInvoice.sequence)))
        return int(current or 0) + 1

    def add_invoice(self, invoice: ElectronicInvoice) -> ElectronicInvoice:
        self.db.add(invoice)
        self.db.flush()
        return invoice

    # ---------- Contractors ----------
    def list_contractors(self, *, active: bool | None = None) -> list[Contractor]:
        statement = select(Contractor)
        if active is not None:
            statement = statement.where(Contractor.active.is_(active))
        return self.db.scalars(statement.order_by(Contractor.name.asc())).all()

    def get_contractor(self, contractor_id: UUID) -> Contractor | None:
        return self.db.scalar(select(Contractor).where(Contractor.id == contractor_id))

    def get_contractor_by_document(self, document_number: str) -> Contractor | None:
        return self.db.scalar(select(Contractor).where(Contractor.document_number == document_number))

    def add_contractor(self, contractor: Contractor) -> Contractor:
        self.db.add(contractor)
        self.db.flush()
        return contractor

    # ---------- Support documents ----------
    def list_support_documents(
        self,
        *,
        contractor_id: UUID | None = None,
        year: int | None = None,
    ) -> list[SupportDocument]:
        statement = select(SupportDocument)
        if contractor_id is not None:
            statement = statement.where(SupportDocument.contractor_id == contractor_id)
        if year is not None:
            statement = statement.where(SupportDocument.year == year)
        return self.db.scalars(
            statement.order_by(SupportDocument.year.desc(), SupportDocument.sequence.desc())
        ).all()

    def get_support_document(self, document_id: UUID) -> SupportDocument | None:
        return self.db.scalar(select(SupportDocument).where(SupportDocument.id == document_id))

    def next_support_document_sequence(self, year: int) -> int:
        current = self.db.scalar(select(func.max(SupportDocument.sequence)).where(SupportDocument.year == year))
        return int(current or 0) + 1

    def add_support_document(self, document: SupportDocument) -> SupportDocument:
        self.db.add(document)
        self.db.flush()
        return document

    # ---------- Audit ----------
    def add_audit_event(self, event: AuditEvent) -> AuditEvent:
        self.db.add(event)
        self.db.flush()
        return event

    def list_audit_events(self, *, entity_name: str | None = None, limit: int = 100) -> list[AuditEvent]:
        statement = select(AuditEvent)
        if entity_name:
            statement = statement.where(AuditEvent.entity_name == entity_name)
        return self.db.scalars(statement.order_by(AuditEvent.created_at.desc()).limit(limit)).all()

    def count_pending_payment_events(self, date_from: date, date_to: date) -> int:
        return int(
            self.db.scalar(
                select(func.count(CalendarEvent.id)).where(
                    and_(
                        CalendarEvent.event_type == CalendarEventType.PAYMENT,
                        CalendarEvent.status == CalendarEventStatus.PENDING,
                        CalendarEvent.event_date >= date_from,
                        CalendarEvent.event_date <= date_to,
                    )
                )
            )
            or 0
        )
