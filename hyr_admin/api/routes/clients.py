"""Client registry endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hyr_admin.db.dependencies import get_db_session
from hyr_admin.models.entities import ClientType
from hyr_admin.services.project_service import ClientCreateData, ClientUpdateData, ProjectService

router = APIRouter(prefix="/clients", tags=["clients"])


class ClientCreatePayload(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    nit: str | None = Field(default=None, max_length=32)
    client_type: ClientType = ClientType.COMPANY
    contact_name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=64)
    address: str | None = Field(default=None, max_length=500)
    city: str | None = Field(default=None, max_length=128)
    notes: str | None = Field(default=None, max_length=2000)
    active: bool = True


class ClientUpdatePayload(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    nit: str | None = Field(default=None, max_length=32)
    client_type: ClientType | None = None
    contact_name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=64)
    address: str | None = Field(default=None, max_length=500)
    city: str | None = Field(default=None, max_length=128)
    notes: str | None = Field(default=None, max_length=2000)
    active: bool | None = None


def _project_service(db: Session) -> ProjectService:
    return ProjectService(db)


@router.get("")
def list_clients(
    active: bool | None = Query(default=None),
    search: str | None = Query(default=None, max_length=255),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    service = _project_service(db)
    items = service.list_clients(active=active, search=search)
    return {"items": [service.serialize_client(client) for client in items]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_client(payload: ClientCreatePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _project_service(db)
    client = service.create_client(ClientCreateData(**payload.model_dump()))
    return service.serialize_client(client)


@router.get("/{client_id}")
def get_client(client_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _project_service(db)
    return service.serialize_client(service.get_client(client_id))


@router.patch("/{client_id}")
def update_client(
    client_id: UUID,
    payload: ClientUpdatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _project_service(db)
    client = service.update_client(client_id, ClientUpdateData(**payload.model_dump()))
    return service.serialize_client(client)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(client_id: UUID, db: Session = Depends(get_db_session)) -> Response:
    _project_service(db).delete_client(client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{client_id}/projects")
def list_client_projects(client_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _project_service(db)
    return {"items": [service.serialize_project(project) for project in service.list_client_projects(client_id)]}


@router.get("/{client_id}/stats")
def client_stats(client_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    return _project_service(db).client_stats(client_id)
