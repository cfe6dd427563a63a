"""Calendar events and statutory deadlines."""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from hyr_admin.db.dependencies import get_db_session
from hyr_admin.models.entities import CalendarEventStatus, CalendarEventType, Recurrence
from hyr_admin.services.calendar_service import CalendarService, EventCreateData, EventUpdateData

router = APIRouter(prefix="/calendar", tags=["calendar"])


class EventCreatePayload(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    event_date: date
    event_type: CalendarEventType = CalendarEventType.OTHER
    description: str | None = Field(default=None, max_length=2000)
    event_time: time | None = None
    status: CalendarEventStatus = CalendarEventStatus.PENDING
    amount: Decimal | None = None
    category: str | None = Field(default=None, max_length=64)
    recurrence: Recurrence = Recurrence.NONE
    project_id: UUID | None = None
    personnel_id: UUID | None = None
    notify_days_before: int = Field(default=1, ge=0, le=365)


class EventUpdatePayload(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    event_date: date | None = None
    event_type: CalendarEventType | None = None
    description: str | None = Field(default=None, max_length=2000)
    event_time: time | None = None
    status: CalendarEventStatus | None = None
    amount: Decimal | None = None
    category: str | None = Field(default=None, max_length=64)
    recurrence: Recurrence | None = None
    project_id: UUID | None = None
    personnel_id: UUID | None = None
    notify_days_before: int | None = Field(default=None, ge=0, le=365)


def _calendar_service(db: Session) -> CalendarService:
    return CalendarService(db)


@router.get("/events")
def list_events(
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    event_type: CalendarEventType | None = Query(default=None),
    status_filter: CalendarEventStatus | None = Query(default=None, alias="status"),
    project_id: UUID | None = Query(default=None),
    db: Session = Depends(get_db_session),
) -> dict[str, list[object]]:
    service = _calendar_service(db)
    items = service.list_events(
        date_from=date_from,
        date_to=date_to,
        event_type=event_type,
        status_filter=status_filter,
        project_id=project_id,
    )
    return {"items": [service.serialize_event(event) for event in items]}


@router.post("/events", status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreatePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _calendar_service(db)
    return service.serialize_event(service.create_event(EventCreateData(**payload.model_dump())))


@router.get("/events/{event_id}")
def get_event(event_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _calendar_service(db)
    return service.serialize_event(service.get_event(event_id))


@router.patch("/events/{event_id}")
def update_event(
    event_id: UUID,
    payload: EventUpdatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _calendar_service(db)
    return service.serialize_event(service.update_event(event_id, EventUpdateData(**payload.model_dump())))


@router.delete("/events/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(event_id: UUID, db: Session = Depends(get_db_session)) -> Response:
    _calendar_service(db).delete_event(event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/events/{event_id}/complete")
def complete_event(event_id: UUID, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _calendar_service(db)
    event, follow_up = service.complete_event(event_id)
    return {
        "event": service.serialize_event(event),
        "next_event": service.serialize_event(follow_up) if follow_up else None,
    }


@router.get("/upcoming")
def upcoming_events(
    days: int = Query(default=30, ge=1, le=366),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return _calendar_service(db).upcoming(days=days)


@router.get("/summary")
def calendar_summary(
    year: int = Query(ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    return _calendar_service(db).summary(year=year, month=month)
