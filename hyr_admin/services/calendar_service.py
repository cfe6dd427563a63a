"""Company calendar: payments, deadlines and statutory obligations."""

from __future__ import annotations

import calendar
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from hyr_admin.models.entities import CalendarEvent, CalendarEventStatus, CalendarEventType, Recurrence
from hyr_admin.repositories.office_repository import OfficeRepository
from hyr_admin.repositories.payroll_repository import PayrollRepository
from hyr_admin.repositories.project_repository import ProjectRepository

ZERO = Decimal("0.00")

# (month, day, title, event type); PILA is handled separately because it repeats monthly.
STATUTORY_DATES = (
    (1, 31, "Pago intereses sobre cesantias", CalendarEventType.PAYROLL),
    (2, 14, "Consignacion de cesantias al fondo", CalendarEventType.PAYROLL),
    (6, 30, "Pago prima de servicios (primer semestre)", CalendarEventType.PAYROLL),
    (12, 20, "Pago prima de servicios (segundo semestre)", CalendarEventType.PAYROLL),
)
PILA_DAY = 10


def _add_months(value: date, months: int) -> date:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def next_occurrence(value: date, recurrence: Recurrence) -> date | None:
    if recurrence == Recurrence.WEEKLY:
        return value + timedelta(days=7)
    if recurrence == Recurrence.MONTHLY:
        return _add_months(value, 1)
    if recurrence == Recurrence.YEARLY:
        return _add_months(value, 12)
    return None


def statutory_obligations(date_from: date, date_to: date) -> list[dict[str, object]]:
    """Legal payroll deadlines that fall inside ``[date_from, date_to]``."""

    rows: list[dict[str, object]] = []
    for year in range(date_from.year, date_to.year + 1):
        for month, day, title, event_type in STATUTORY_DATES:
            due = date(year, month, day)
            if date_from <= due <= date_to:
                rows.append({"title": title, "event_date": due.isoformat(), "event_type": event_type.value})

    cursor = date(date_from.year, date_from.month, 1)
    while cursor <= date_to:
        due = cursor.replace(day=PILA_DAY)
        if date_from <= due <= date_to:
            rows.append(
                {
                    "title": f"Pago PILA {cursor.year}-{cursor.month:02d}",
                    "event_date": due.isoformat(),
                    "event_type": CalendarEventType.PAYROLL.value,
                }
            )
        cursor = _add_months(cursor, 1)

    for row in rows:
        row["statutory"] = True
    return sorted(rows, key=lambda row: str(row["event_date"]))


@dataclass(slots=True)
class EventCreateData:
    title: str
    event_date: date
    event_type: CalendarEventType = CalendarEventType.OTHER
    description: str | None = None
    event_time: time | None = None
    status: CalendarEventStatus = CalendarEventStatus.PENDING
    amount: Decimal | None = None
    category: str | None = None
    recurrence: Recurrence = Recurrence.NONE
    project_id: UUID | None = None
    personnel_id: UUID | None = None
    notify_days_before: int = 1


@dataclass(slots=True)
class EventUpdateData:
    title: str | None = None
    event_date: date | None = None
    event_type: CalendarEventType | None = None
    description: str | None = None
    event_time: time | None = None
    status: CalendarEventStatus | None = None
    amount: Decimal | None = None
    category: str | None = None
    recurrence: Recurrence | None = None
    project_id: UUID | None = None
    personnel_id: UUID | None = None
    notify_days_before: int | None = None


class CalendarService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = OfficeRepository(db)
        self.projects = ProjectRepository(db)

    @staticmethod
    def serialize_event(event: CalendarEvent) -> dict[str, object]:
        return {
            "id": str(event.id),
            "title": event.title,
            "description": event.description,
            "event_date": event.event_date.isoformat(),
            "event_time": event.event_time.strftime("%H:%M") if event.event_time else None,
            "event_type": event.event_type.value,
            "status": event.status.value,
            "amount": str(event.amount) if event.amount is not None else None,
            "category": event.category,
            "recurrence": event.recurrence.value,
            "project_id": str(event.project_id) if event.project_id else None,
            "personnel_id": str(event.personnel_id) if event.personnel_id else None,
            "notify_days_before": event.notify_days_before,
            "completed_at": event.completed_at.isoformat() if event.completed_at else None,
            "created_at": event.created_at.isoformat(),
            "updated_at": event.updated_at.isoformat(),
        }

    def _check_links(self, project_id: UUID | None, personnel_id: UUID | None) -> None:
        if project_id is not None and self.projects.get_project(project_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found.")
        if personnel_id is not None and PayrollRepository(self.db).get_personnel(personnel_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Personnel not found.")

    @staticmethod
    def _check_amount(amount: Decimal | None) -> None:
        if amount is not None and amount < ZERO:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="amount cannot be negative.",
            )

    def list_events(
        self,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
        event_type: CalendarEventType | None = None,
        status_filter: CalendarEventStatus | None = None,
        project_id: UUID | None = None,
    ) -> list[CalendarEvent]:
        if date_from is not None and date_to is not None and date_to < date_from:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="date_to must be greater than or equal to date_from.",
            )
        return self.repo.list_events(
            date_from=date_from,
            date_to=date_to,
            event_type=event_type,
            status=status_filter,
            project_id=project_id,
        )

    def get_event(self, event_id: UUID) -> CalendarEvent:
        event = self.repo.get_event(event_id)
        if event is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Calendar event not found.")
        return event

    def create_event(self, data: EventCreateData) -> CalendarEvent:
        self._check_amount(data.amount)
        self._check_links(data.project_id, data.personnel_id)
        now = datetime.utcnow()
        event = CalendarEvent(
            title=data.title.strip(),
            description=data.description,
            event_date=data.event_date,
            event_time=data.event_time,
            event_type=data.event_type,
            status=data.status,
            amount=data.amount,
            category=data.category,
            recurrence=data.recurrence,
            project_id=data.project_id,
            personnel_id=data.personnel_id,
            notify_days_before=data.notify_days_before,
            completed_at=now if data.status == CalendarEventStatus.COMPLETED else None,
            created_at=now,
            updated_at=now,
        )
        self.repo.add_event(event)
        self.db.commit()
        self.db.refresh(event)
        return event

    def update_event(self, event_id: UUID, data: EventUpdateData) -> CalendarEvent:
        event = self.get_event(event_id)
        self._check_amount(data.amount)
        self._check_links(data.project_id, data.personnel_id)
        if data.title is not None:
            event.title = data.title.strip()
        for field_name in (
            "event_date",
            "event_type",
            "description",
            "event_time",
            "amount",
            "category",
            "recurrence",
            "project_id",
            "personnel_id",
            "notify_days_before",
        ):
            value = getattr(data, field_name)
            if value is not None:
                setattr(event, field_name, value)
        if data.status is not None and data.status != event.status:
            event.status = data.status
            event.completed_at = datetime.utcnow() if data.status == CalendarEventStatus.COMPLETED else None
        event.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(event)
        return event

    def delete_event(self, event_id: UUID) -> None:
        event = self.get_event(event_id)
        self.repo.delete_event(event)
        self.db.commit()

    def complete_event(self, event_id: UUID) -> tuple[CalendarEvent, CalendarEvent | None]:
        """Mark an event done; recurring events get their next occurrence created."""

        event = self.get_event(event_id)
        if event.status != CalendarEventStatus.PENDING:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Only pending events can be completed (current status: {event.status.value}).",
            )
        now = datetime.utcnow()
        event.status = CalendarEventStatus.COMPLETED
        event.completed_at = now
        event.updated_at = now

        follow_up = None
        next_date = next_occurrence(event.event_date, event.recurrence)
        if next_date is not None:
            follow_up = CalendarEvent(
                title=event.title,
                description=event.description,
                event_date=next_date,
                event_time=event.event_time,
                event_type=event.event_type,
                status=CalendarEventStatus.PENDING,
                amount=event.amount,
                category=event.category,
                recurrence=event.recurrence,
                project_id=event.project_id,
                personnel_id=event.personnel_id,
                notify_days_before=event.notify_days_before,
                created_at=now,
                updated_at=now,
            )
            self.repo.add_event(follow_up)
        self.db.commit()
        self.db.refresh(event)
        if follow_up is not None:
            self.db.refresh(follow_up)
        return event, follow_up

    def upcoming(self, *, days: int = 30, today: date | None = None) -> dict[str, object]:
        if days < 1 or days > 366:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="days must be between 1 and 366.",
            )
        start = today or date.today()
        end = start + timedelta(days=days)
        events = self.repo.list_events(date_from=start, date_to=end, status=CalendarEventStatus.PENDING)
        return {
            "date_from": start.isoformat(),
            "date_to": end.isoformat(),
            "events": [self.serialize_event(event) for event in events],
            "statutory": statutory_obligations(start, end),
        }

    def summary(self, *, year: int, month: int | None = None) -> dict[str, object]:
        if month is not None:
            date_from = date(year, month, 1)
            date_to = date(year, month, calendar.monthrange(year, month)[1])
        else:
            date_from = date(year, 1, 1)
            date_to = date(year, 12, 31)
        events = self.repo.list_events(date_from=date_from, date_to=date_to)

        by_type = Counter(event.event_type.value for event in events)
        by_status = Counter(event.status.value for event in events)
        pending_payments = [
            event
            for event in events
            if event.event_type == CalendarEventType.PAYMENT and event.status == CalendarEventStatus.PENDING
        ]
        return {
            "year": year,
            "month": month,
            "total": len(events),
            "by_type": {event_type.value: by_type.get(event_type.value, 0) for event_type in CalendarEventType},
            "by_status": {
                event_status.value: by_status.get(event_status.value, 0) for event_status in CalendarEventStatus
            },
            "pending_payments": len(pending_payments),
            "pending_payment_total": str(
                sum((Decimal(event.amount) for event in pending_payments if event.amount is not None), ZERO)
            ),
        }
