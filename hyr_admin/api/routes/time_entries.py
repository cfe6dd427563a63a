"""Daily time entries: capture, review and summaries."""

from __future__ import annotations

from datetime import date, time
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hyr_admin.db.dependencies import get_db_session
from hyr_admin.models.entities import TimeEntryStatus
from hyr_admin.services.time_entry_service import TimeEntryCreateData, TimeEntryService, TimeEntryUpdateData

router = APIRouter(prefix="/time-entries", tags=["time-entries"])


class TimeEntryCreatePayload(BaseModel):
    personnel_id: UUID
    project_id: UUID
    work_date: date
    arrival_time: time
    departure_time: time
    lunch_deducted: bool = True
    expected_arrival_time: time | None = None
    description: str | None = Field(default=None, max_length=1000)
    status: TimeEntryStatus = TimeEntryStatus.DRAFT


class TimeEntryUpdatePayload(BaseModel):
    project_id: UUID | None = None
    work_date: date | None = None
    arrival_time: time | None = None
    departure_time: time | None = None
    lunch_deducted: bool | None = None
    expected_arrival_time: time | None = None
    description: str | None = Field(default=None, max_length=1000)
    status: TimeEntryStatus | None = None


class BulkReviewPayload(BaseModel):
    entry_ids: list[UUID] = Field(min_length=1, max_length=500)


def _time_entry_service(db: Session) -> TimeEntryService:
    return TimeEntryService(db)


@router.get("")
def list_time_entries(
    personnel_id: UUID | None = Query(default=None),
    project_id: UUID | None = Query(default=None),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    status_filter: TimeEntryStatus | None = Query(default=None, alias="status"),
    limit: int | None = Query(default=None, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    service = _time_entry_service(db)
    items = service.list_entries(
        personnel_id=personnel_id,
        project_id=project_id,
        date_from=date_from,
        date_to=date_to,
        status_filter=status_filter,
        limit=limit,
        offset=offset,
    )
    return {"items": [service.serialize_entry(entry) for entry in items]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_time_entry(payload: TimeEntryCreatePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _time_entry_service(db)
    entry = service.create_entry(TimeEntryCreateData(**payload.model_dump()))
    return service.serialize_entry(entry)


@router.post("/bulk-approve")
def bulk_approve(payload: BulkReviewPayload, db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _time_entry_service(db)
    return {"items": [service.serialize_entry(entry) for entry in service.bulk_approve(payload.entry_ids)]}


@router.post("/bulk-reject")
def bulk_reject(payload: BulkReviewPayload, db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _time_entry_service(db)
    return {"items": [service.serialize_entry(entry) for entry in service.bulk_reject(payload.entry_ids)]}


@router.get("/personnel/{personnel_id}/summary")
def personnel_summary(
    personnel_id: UUID,
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return _time_entry_service(db).personnel_summary(personnel_id, date_from=date_from, date_to=date_to)


@router.get("/projects/{project_id}/summary")
def project_summary(
    project_id: UUID,
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return _time_entry_service(db).project_summary(project_id, date_from=date_from, date_to=date_to)


@router.get("/{entry_id}")
def get_time_entry(entry_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _time_entry_service(db)
    return service.serialize_entry(service.get_entry(entry_id))


@router.patch("/{entry_id}")
def update_time_entry(
    entry_id: UUID,
    payload: TimeEntryUpdatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _time_entry_service(db)
    entry = service.update_entry(entry_id, TimeEntryUpdateData(**payload.model_dump()))
    return service.serialize_entry(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_time_entry(entry_id: UUID, db: Session = Depends(get_db_session)) -> Response:
    _time_entry_service(db).delete_entry(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
