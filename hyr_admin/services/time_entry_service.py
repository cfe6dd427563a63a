"""Application service for daily time entries.

Each entry stores its computed hours and pay so that payroll processing and
project labor totals read persisted values instead of recomputing them.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hyr_admin.models.entities import Personnel, PersonnelStatus, SalaryType, TimeEntry, TimeEntryStatus
from hyr_admin.repositories.payroll_repository import PayrollRepository
from hyr_admin.services.project_service import ProjectService
from hyr_admin.services.settings_service import SettingsService
from hyr_admin.services.time_rules import TimeRuleError, WorkdayRules, compute_hours, compute_pay, resolve_hourly_rate

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
EDITABLE_STATUSES = {TimeEntryStatus.DRAFT, TimeEntryStatus.SUBMITTED}


@dataclass(slots=True)
class TimeEntryCreateData:
    personnel_id: UUID
    project_id: UUID
    work_date: date
    arrival_time: time
    departure_time: time
    lunch_deducted: bool = True
    expected_arrival_time: time | None = None
    description: str | None = None
    status: TimeEntryStatus = TimeEntryStatus.DRAFT


@dataclass(slots=True)
class TimeEntryUpdateData:
    project_id: UUID | None = None
    work_date: date | None = None
    arrival_time: time | None = None
    departure_time: time | None = None
    lunch_deducted: bool | None = None
    expected_arrival_time: time | None = None
    description: str | None = None
    status: TimeEntryStatus | None = None


def apply_computation(entry: TimeEntry, person: Personnel, rules: WorkdayRules) -> None:
    """Fill hour and pay columns of ``entry`` from its times and the employee's rate."""

    hours = compute_hours(
        entry.arrival_time,
        entry.departure_time,
        rules=rules,
        lunch_deducted=entry.lunch_deducted,
        expected_arrival=entry.expected_arrival_time or person.expected_arrival_time,
    )
    rate = resolve_hourly_rate(
        is_hourly=person.salary_type == SalaryType.HOURLY,
        monthly_salary=Decimal(person.monthly_salary) if person.monthly_salary is not None else None,
        hourly_rate=Decimal(person.hourly_rate) if person.hourly_rate is not None else None,
        daily_rate=Decimal(person.daily_rate) if person.daily_rate is not None else None,
        rules=rules,
    )
    pay = compute_pay(hours, rate, rules)

    entry.late_minutes = hours.late_minutes
    entry.penalized_late_minutes = hours.penalized_late_minutes
    entry.regular_hours = hours.regular_hours
    entry.overtime_hours = hours.overtime_hours
    entry.night_hours = hours.night_hours
    entry.total_hours = hours.worked_hours
    entry.hourly_rate = pay.hourly_rate
    entry.regular_pay = pay.regular_pay
    entry.overtime_pay = pay.overtime_pay
    entry.night_pay = pay.night_pay
    entry.late_discount = pay.late_discount
    entry.total_pay = pay.total_pay


class TimeEntryService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = PayrollRepository(db)
        self.projects = ProjectService(db)

    @staticmethod
    def serialize_entry(entry: TimeEntry) -> dict[str, object]:
        return {
            "id": str(entry.id),
            "personnel_id": str(entry.personnel_id),
            "project_id": str(entry.project_id),
            "work_date": entry.work_date.isoformat(),
            "arrival_time": entry.arrival_time.strftime("%H:%M"),
            "departure_time": entry.departure_time.strftime("%H:%M"),
            "lunch_deducted": entry.lunch_deducted,
            "expected_arrival_time": (
                entry.expected_arrival_time.strftime("%H:%M") if entry.expected_arrival_time else None
            ),
            "late_minutes": entry.late_minutes,
            "penalized_late_minutes": entry.penalized_late_minutes,
            "regular_hours": str(entry.regular_hours),
            "overtime_hours": str(entry.overtime_hours),
            "night_hours": str(entry.night_hours),
            "total_hours": str(entry.total_hours),
            "hourly_rate": str(entry.hourly_rate),
            "regular_pay": str(entry.regular_pay),
            "overtime_pay": str(entry.overtime_pay),
            "night_pay": str(entry.night_pay),
            "late_discount": str(entry.late_discount),
            "total_pay": str(entry.total_pay),
            "status": entry.status.value,
            "payroll_period_id": str(entry.payroll_period_id) if entry.payroll_period_id else None,
            "description": entry.description,
            "created_at": entry.created_at.isoformat(),
            "updated_at": entry.updated_at.isoformat(),
        }

    def _active_personnel(self, personnel_id: UUID) -> Personnel:
        person = self.repo.get_personnel(personnel_id)
        if person is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Personnel not found.")
        if person.status != PersonnelStatus.ACTIVE:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Time entries can only be recorded for active personnel.",
            )
        return person

    def _ensure_open_date(self, work_date: date) -> None:
        period = self.repo.find_closed_period_for_date(work_date)
        if period is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Payroll period {period.year}-{period.month:02d} is already processed for this date.",
            )

    def _ensure_unique(
        self,
        *,
        personnel_id: UUID,
        project_id: UUID,
        work_date: date,
        exclude_id: UUID | None = None,
    ) -> None:
        duplicate = self.repo.find_duplicate_entry(
            personnel_id=personnel_id,
            project_id=project_id,
            work_date=work_date,
            exclude_id=exclude_id,
        )
        if duplicate is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A time entry already exists for this personnel, project and date.",
            )

    @staticmethod
    def _ensure_not_locked(entry: TimeEntry) -> None:
        if entry.status == TimeEntryStatus.PAYROLL_LOCKED:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Time entry is locked by a processed payroll period.",
            )

    def _compute(self, entry: TimeEntry, person: Personnel) -> None:
        rules = SettingsService(self.db).get_workday_rules()
        try:
            apply_computation(entry, person, rules)
        except TimeRuleError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A time entry already exists for this personnel, project and date.",
            ) from exc

    # ---------- CRUD ----------
    def list_entries(
        self,
        *,
        personnel_id: UUID | None = None,
        project_id: UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        status_filter: TimeEntryStatus | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[TimeEntry]:
        return self.repo.list_time_entries(
            personnel_id=personnel_id,
            project_id=project_id,
            date_from=date_from,
            date_to=date_to,
            status=status_filter,
            limit=limit,
            offset=offset,
        )

    def get_entry(self, entry_id: UUID) -> TimeEntry:
        entry = self.repo.get_time_entry(entry_id)
        if entry is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Time entry not found.")
        return entry

    def create_entry(self, data: TimeEntryCreateData) -> TimeEntry:
        if data.status not in EDITABLE_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="New time entries must be draft or submitted.",
            )
        person = self._active_personnel(data.personnel_id)
        project = self.projects.get_project(data.project_id)
        self._ensure_open_date(data.work_date)
        self._ensure_unique(personnel_id=person.id, project_id=project.id, work_date=data.work_date)

        now = datetime.utcnow()
        entry = TimeEntry(
            personnel_id=person.id,
            project_id=project.id,
            work_date=data.work_date,
            arrival_time=data.arrival_time,
            departure_time=data.departure_time,
            lunch_deducted=data.lunch_deducted,
            expected_arrival_time=data.expected_arrival_time,
            description=data.description,
            status=data.status,
            created_at=now,
            updated_at=now,
        )
        self._compute(entry, person)
        self.repo.add_time_entry(entry)
        self.projects.refresh_project_totals(project.id)
        self._commit()
        self.db.refresh(entry)
        return entry

    def update_entry(self, entry_id: UUID, data: TimeEntryUpdateData) -> TimeEntry:
        entry = self.get_entry(entry_id)
        self._ensure_not_locked(entry)
        previous_project = entry.project_id

        if data.status is not None and data.status not in EDITABLE_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Use bulk-approve or bulk-reject to review time entries.",
            )

        if data.project_id is not None:
            entry.project_id = self.projects.get_project(data.project_id).id
        if data.work_date is not None:
            entry.work_date = data.work_date
        self._ensure_open_date(entry.work_date)
        self._ensure_unique(
            personnel_id=entry.personnel_id,
            project_id=entry.project_id,
            work_date=entry.work_date,
            exclude_id=entry.id,
        )

        for field_name in ("arrival_time", "departure_time", "lunch_deducted", "expected_arrival_time", "description"):
            value = getattr(data, field_name)
            if value is not None:
                setattr(entry, field_name, value)
        if data.status is not None:
            entry.status = data.status

        person = self.repo.get_personnel(entry.personnel_id)
        self._compute(entry, person)
        entry.updated_at = datetime.utcnow()

        for project_id in {previous_project, entry.project_id}:
            self.projects.refresh_project_totals(project_id)
        self._commit()
        self.db.refresh(entry)
        return entry

    def delete_entry(self, entry_id: UUID) -> None:
        entry = self.get_entry(entry_id)
        self._ensure_not_locked(entry)
        project_id = entry.project_id
        self.repo.delete_time_entry(entry)
        self.projects.refresh_project_totals(project_id)
        self.db.commit()

    # ---------- Review ----------
    def _review(self, entry_ids: list[UUID], target: TimeEntryStatus) -> list[TimeEntry]:
        unique_ids = list(dict.fromkeys(entry_ids))
        entries = self.repo.get_time_entries(unique_ids)
        found = {entry.id for entry in entries}
        missing = [str(entry_id) for entry_id in unique_ids if entry_id not in found]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Time entries not found: {', '.join(missing)}.",
            )
        locked = [str(entry.id) for entry in entries if entry.status == TimeEntryStatus.PAYROLL_LOCKED]
        if locked:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Time entries are locked by payroll: {', '.join(locked)}.",
            )

        now = datetime.utcnow()
        for entry in entries:
            entry.status = target
            entry.updated_at = now
        for project_id in {entry.project_id for entry in entries}:
            self.projects.refresh_project_totals(project_id)
        self.db.commit()
        logger.info("%d time entries marked %s", len(entries), target.value)
        return entries

    def bulk_approve(self, entry_ids: list[UUID]) -> list[TimeEntry]:
        return self._review(entry_ids, TimeEntryStatus.APPROVED)

    def bulk_reject(self, entry_ids: list[UUID]) -> list[TimeEntry]:
        return self._review(entry_ids, TimeEntryStatus.REJECTED)

    # ---------- Summaries ----------
    @staticmethod
    def _totals(entries: list[TimeEntry]) -> dict[str, object]:
        totals = {
            "regular_hours": ZERO,
            "overtime_hours": ZERO,
            "night_hours": ZERO,
            "total_hours": ZERO,
            "regular_pay": ZERO,
            "overtime_pay": ZERO,
            "night_pay": ZERO,
            "late_discount": ZERO,
            "total_pay": ZERO,
        }
        by_status: dict[str, int] = defaultdict(int)
        late_entries = 0
        for entry in entries:
            for key in totals:
                totals[key] += Decimal(getattr(entry, key))
            by_status[entry.status.value] += 1
            if entry.penalized_late_minutes:
                late_entries += 1
        return {
            "entries": len(entries),
            "days_worked": len({entry.work_date for entry in entries}),
            "late_entries": late_entries,
            "by_status": dict(by_status),
            **{key: str(value) for key, value in totals.items()},
        }

    def personnel_summary(
        self,
        personnel_id: UUID,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> dict[str, object]:
        person = self.repo.get_personnel(personnel_id)
        if person is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Personnel not found.")
        entries = self.repo.list_time_entries(personnel_id=person.id, date_from=date_from, date_to=date_to)
        counted = [entry for entry in entries if entry.status != TimeEntryStatus.REJECTED]
        by_project: dict[str, list[TimeEntry]] = defaultdict(list)
        for entry in counted:
            by_project[str(entry.project_id)].append(entry)
        return {
            "personnel_id": str(person.id),
            "name": person.name,
            "date_from": date_from.isoformat() if date_from else None,
            "date_to": date_to.isoformat() if date_to else None,
            "totals": self._totals(counted),
            "by_project": {key: self._totals(rows) for key, rows in sorted(by_project.items())},
        }

    def project_summary(
        self,
        project_id: UUID,
        *,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> dict[str, object]:
        project = self.projects.get_project(project_id)
        entries = self.repo.list_time_entries(project_id=project.id, date_from=date_from, date_to=date_to)
        counted = [entry for entry in entries if entry.status != TimeEntryStatus.REJECTED]
        by_personnel: dict[str, list[TimeEntry]] = defaultdict(list)
        for entry in counted:
            by_personnel[str(entry.personnel_id)].append(entry)
        return {
            "project_id": str(project.id),
            "code": project.code,
            "date_from": date_from.isoformat() if date_from else None,
            "date_to": date_to.isoformat() if date_to else None,
            "totals": self._totals(counted),
            "by_personnel": {key: self._totals(rows) for key, rows in sorted(by_personnel.items())},
        }
