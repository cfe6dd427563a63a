"""Contractors and support documents."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hyr_admin.db.dependencies import get_db_session
from hyr_admin.services.contractor_service import (
    ContractorCreateData,
    ContractorService,
    ContractorUpdateData,
    SupportDocumentCreateData,
)

router = APIRouter(prefix="/contractors", tags=["contractors"])


class ContractorCreatePayload(BaseModel):
    document_type: str = Field(default="CC", min_length=1, max_length=8)
    document_number: str = Field(min_length=1, max_length=32)
    name: str = Field(min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=64)
    city: str | None = Field(default=None, max_length=128)
    obligated_to_invoice: bool = False
    service_type: str = Field(default="general", max_length=32)
    active: bool = True


class ContractorUpdatePayload(BaseModel):
    document_type: str | None = Field(default=None, min_length=1, max_length=8)
    document_number: str | None = Field(default=None, min_length=1, max_length=32)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=64)
    city: str | None = Field(default=None, max_length=128)
    obligated_to_invoice: bool | None = None
    service_type: str | None = Field(default=None, max_length=32)
    active: bool | None = None


class SupportDocumentCreatePayload(BaseModel):
    contractor_id: UUID
    concept: str = Field(min_length=1, max_length=500)
    base_amount: Decimal
    issue_date: date | None = None
    service_type: str | None = Field(default=None, max_length=32)
    apply_withholding: bool = True


def _contractor_service(db: Session) -> ContractorService:
    return ContractorService(db)


@router.get("")
def list_contractors(
    active: bool | None = Query(default=None),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    service = _contractor_service(db)
    return {"items": [service.serialize_contractor(row) for row in service.list_contractors(active=active)]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_contractor(payload: ContractorCreatePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _contractor_service(db)
    return service.serialize_contractor(service.create_contractor(ContractorCreateData(**payload.model_dump())))


@router.get("/support-documents")
def list_support_documents(
    contractor_id: UUID | None = Query(default=None),
    year: int | None = Query(default=None, ge=2000, le=2100),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    service = _contractor_service(db)
    items = service.list_support_documents(contractor_id=contractor_id, year=year)
    return {"items": [service.serialize_support_document(document) for document in items]}


@router.post("/support-documents", status_code=status.HTTP_201_CREATED)
def create_support_document(
    payload: SupportDocumentCreatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _contractor_service(db)
    document = service.create_support_document(SupportDocumentCreateData(**payload.model_dump()))
    return service.serialize_support_document(document)


@router.get("/support-documents/{document_id}")
def get_support_document(document_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _contractor_service(db)
    return service.serialize_support_document(service.get_support_document(document_id))


@router.get("/{contractor_id}")
def get_contractor(contractor_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _contractor_service(db)
    return service.serialize_contractor(service.get_contractor(contractor_id))


@router.patch("/{contractor_id}")
def update_contractor(
    contractor_id: UUID,
    payload: ContractorUpdatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _contractor_service(db)
    contractor = service.update_contractor(contractor_id, ContractorUpdateData(**payload.model_dump()))
    return service.serialize_contractor(contractor)
