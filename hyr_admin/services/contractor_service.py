"""Independent contractors and the DIAN support documents issued for them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hyr_admin.core.tax_config import TaxConfig, UnknownTaxYearError, get_tax_config
from hyr_admin.models.entities import Contractor, SupportDocument
from hyr_admin.repositories.office_repository import OfficeRepository
from hyr_admin.services.audit_service import record_audit_event
from hyr_admin.services.dian import support_document_number

ZERO = Decimal("0")
PESO = Decimal("1")
SERVICE_TYPES = ("general", "construction", "professional")


def _pesos(value: Decimal) -> Decimal:
    return value.quantize(PESO, rounding=ROUND_HALF_UP)


def compute_withholdings(base_amount: Decimal, service_type: str, tax: TaxConfig) -> dict[str, dict[str, str]]:
    """Withholdings for a support document.

    Service withholding applies once the base reaches the minimum in UVT.
    Construction services above the social security threshold also withhold
    health and pension on a fraction of the base.
    """

    rule = tax.service_withholding.get(service_type)
    if rule is None:
        raise ValueError(f"Unknown service type '{service_type}'.")

    withholdings: dict[str, dict[str, str]] = {}
    if base_amount >= rule.min_base_uvt * tax.uvt:
        withholdings["retencion_fuente"] = {
            "rate": str(rule.rate),
            "amount": str(_pesos(base_amount * rule.rate)),
            "concept": service_type,
            "description": rule.description,
        }

    if service_type == "construction" and base_amount > tax.contractor_social_security_min_uvt * tax.uvt:
        ss_base = base_amount * tax.contractor_social_security_base
        health = ss_base * tax.contractor_health_rate
        pension = ss_base * tax.contractor_pension_rate
        withholdings["seguridad_social"] = {
            "base": str(_pesos(ss_base)),
            "health": str(_pesos(health)),
            "pension": str(_pesos(pension)),
            "amount": str(_pesos(health + pension)),
        }
    return withholdings


@dataclass(slots=True)
class ContractorCreateData:
    document_number: str
    name: str
    document_type: str = "CC"
    email: str | None = None
    phone: str | None = None
    city: str | None = None
    obligated_to_invoice: bool = False
    service_type: str = "general"
    active: bool = True


@dataclass(slots=True)
class ContractorUpdateData:
    document_type: str | None = None
    document_number: str | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    city: str | None = None
    obligated_to_invoice: bool | None = None
    service_type: str | None = None
    active: bool | None = None


@dataclass(slots=True)
class SupportDocumentCreateData:
    contractor_id: UUID
    concept: str
    base_amount: Decimal
    issue_date: date | None = None
    service_type: str | None = None
    apply_withholding: bool = True


class ContractorService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = OfficeRepository(db)

    @staticmethod
    def serialize_contractor(contractor: Contractor) -> dict[str, object]:
        return {
            "id": str(contractor.id),
            "document_type": contractor.document_type,
            "document_number": contractor.document_number,
            "name": contractor.name,
            "email": contractor.email,
            "phone": contractor.phone,
            "city": contractor.city,
            "obligated_to_invoice": contractor.obligated_to_invoice,
            "service_type": contractor.service_type,
            "active": contractor.active,
            "created_at": contractor.created_at.isoformat(),
            "updated_at": contractor.updated_at.isoformat(),
        }

    @staticmethod
    def serialize_support_document(document: SupportDocument) -> dict[str, object]:
        return {
            "id": str(document.id),
            "ds_number": document.ds_number,
            "year": document.year,
            "contractor_id": str(document.contractor_id),
            "concept": document.concept,
            "issue_date": document.issue_date.isoformat(),
            "service_type": document.service_type,
            "base_amount": str(document.base_amount),
            "withholdings": document.withholdings,
            "total_withholdings": str(document.total_withholdings),
            "net_amount": str(document.net_amount),
            "created_at": document.created_at.isoformat(),
        }

    @staticmethod
    def _check_service_type(service_type: str) -> None:
        if service_type not in SERVICE_TYPES:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"service_type must be one of {', '.join(SERVICE_TYPES)}.",
            )

    def _commit_contractor(self, contractor: Contractor) -> Contractor:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Contractor document number already exists.",
            ) from exc
        self.db.refresh(contractor)
        return contractor

    # ---------- Contractors ----------
    def list_contractors(self, *, active: bool | None = None) -> list[Contractor]:
        return self.repo.list_contractors(active=active)

    def get_contractor(self, contractor_id: UUID) -> Contractor:
        contractor = self.repo.get_contractor(contractor_id)
        if contractor is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contractor not found.")
        return contractor

    def create_contractor(self, data: ContractorCreateData) -> Contractor:
        self._check_service_type(data.service_type)
        if self.repo.get_contractor_by_document(data.document_number.strip()) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Contractor document number already exists.",
            )
        now = datetime.utcnow()
        contractor = Contractor(
            document_type=data.document_type,
            document_number=data.document_number.strip(),
            name=data.name.strip(),
            email=data.email,
            phone=data.phone,
            city=data.city,
            obligated_to_invoice=data.obligated_to_invoice,
            service_type=data.service_type,
            active=data.active,
            created_at=now,
            updated_at=now,
        )
        self.repo.add_contractor(contractor)
        return self._commit_contractor(contractor)

    def update_contractor(self, contractor_id: UUID, data: ContractorUpdateData) -> Contractor:
        contractor = self.get_contractor(contractor_id)
        if data.service_type is not None:
            self._check_service_type(data.service_type)
        if data.document_number is not None:
            contractor.document_number = data.document_number.strip()
        if data.name is not None:
            contractor.name = data.name.strip()
        for field_name in ("document_type", "email", "phone", "city", "obligated_to_invoice", "service_type", "active"):
            value = getattr(data, field_name)
            if value is not None:
                setattr(contractor, field_name, value)
        contractor.updated_at = datetime.utcnow()
        return self._commit_contractor(contractor)

    # ---------- Support documents ----------
    def list_support_documents(
        self,
        *,
        contractor_id: UUID | None = None,
        year: int | None = None,
    ) -> list[SupportDocument]:
        return self.repo.list_support_documents(contractor_id=contractor_id, year=year)

    def get_support_document(self, document_id: UUID) -> SupportDocument:
        document = self.repo.get_support_document(document_id)
        if document is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Support document not found.")
        return document

    def create_support_document(self, data: SupportDocumentCreateData) -> SupportDocument:
        contractor = self.get_contractor(data.contractor_id)
        if contractor.obligated_to_invoice:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Contractor is obligated to invoice; a support document cannot be issued.",
            )
        if data.base_amount <= ZERO:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="base_amount must be greater than zero.",
            )

        issue_date = data.issue_date or date.today()
        service_type = data.service_type or contractor.service_type
        try:
            tax = get_tax_config(issue_date.year)
        except UnknownTaxYearError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
        if service_type not in tax.service_withholding:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown service type '{service_type}'.",
            )

        withholdings = compute_withholdings(data.base_amount, service_type, tax) if data.apply_withholding else {}
        total_withholdings = sum((Decimal(row["amount"]) for row in withholdings.values()), ZERO)

        sequence = self.repo.next_support_document_sequence(issue_date.year)
        document = SupportDocument(
            ds_number=support_document_number(issue_date.year, sequence),
            year=issue_date.year,
            sequence=sequence,
            contractor_id=contractor.id,
            concept=data.concept.strip(),
            issue_date=issue_date,
            service_type=service_type,
            base_amount=data.base_amount,
            withholdings=withholdings,
            total_withholdings=total_withholdings,
            net_amount=data.base_amount - total_withholdings,
            created_at=datetime.utcnow(),
        )
        self.repo.add_support_document(document)
        record_audit_event(
            self.db,
            entity_name="support_document",
            entity_id=document.id,
            action_type="issued",
            payload={
                "ds_number": document.ds_number,
                "contractor": contractor.name,
                "base_amount": str(data.base_amount),
                "total_withholdings": str(total_withholdings),
            },
        )
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Support document number already exists.",
            ) from exc
        self.db.refresh(document)
        return document
