"""Repository helpers for personnel, time entries, payroll and PILA."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.orm import Session

from hyr_admin.models.entities import (
    PayrollDetail,
    PayrollPeriod,
    PayrollPeriodStatus,
    Personnel,
    PersonnelStatus,
    PilaSubmission,
    ProjectAssignment,
    TimeEntry,
    TimeEntryStatus,
)


class PayrollRepository:
    """Persistence operations used by personnel, time-entry and payroll services."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Personnel ----------
    def list_personnel(
        self,
        *,
        status: PersonnelStatus | None = None,
        department: str | None = None,
    ) -> list[Personnel]:
        statement = select(Personnel)
        if status is not None:
            statement = statement.where(Personnel.status == status)
        if department:
            statement = statement.where(Personnel.department == department)
        return self.db.scalars(statement.order_by(Personnel.name.asc())).all()

    def get_personnel(self, personnel_id: UUID) -> Personnel | None:
        return self.db.scalar(select(Personnel).where(Personnel.id == personnel_id))

    def add_personnel(self, person: Personnel) -> Personnel:
        self.db.add(person)
        self.db.flush()
        return person

    def delete_personnel(self, person: Personnel) -> None:
        self.db.delete(person)
        self.db.flush()

    def delete_personnel_assignments(self, personnel_id: UUID) -> None:
        self.db.execute(delete(ProjectAssignment).where(ProjectAssignment.personnel_id == personnel_id))
        self.db.flush()

    def personnel_history_counts(self, personnel_id: UUID) -> tuple[int, int]:
        entries = self.db.scalar(select(func.count(TimeEntry.id)).where(TimeEntry.personnel_id == personnel_id))
        details = self.db.scalar(
            select(func.count(PayrollDetail.id)).where(PayrollDetail.personnel_id == personnel_id)
        )
        return int(entries or 0), int(details or 0)

    def count_active_personnel(self) -> int:
        return int(
            self.db.scalar(select(func.count(Personnel.id)).where(Personnel.status == PersonnelStatus.ACTIVE)) or 0
        )

    # ---------- Time entries ----------
    def list_time_entries(
        self,
        *,
        personnel_id: UUID | None = None,
        project_id: UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        status: TimeEntryStatus | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[TimeEntry]:
        statement = select(TimeEntry)
        if personnel_id is not None:
            statement = statement.where(TimeEntry.personnel_id == personnel_id)
        if project_id is not None:
            statement = statement.where(TimeEntry.project_id == project_id)
        if date_from is not None:
            statement = statement.where(TimeEntry.work_date >= date_from)
        if date_to is not None:
            statement = statement.where(TimeEntry.work_date <= date_to)
        if status is not None:
            statement = statement.where(TimeEntry.status == status)
        statement = statement.order_by(TimeEntry.work_date.desc(), TimeEntry.created_at.desc()).offset(offset)
        if limit is not None:
            statement = statement.limit(limit)
        return self.db.scalars(statement).all()

    def get_time_entry(self, entry_id: UUID) -> TimeEntry | None:
        return self.db.scalar(select(TimeEntry).where(TimeEntry.id == entry_id))

    def get_time_entries(self, entry_ids: list[UUID]) -> list[TimeEntry]:
        if not entry_ids:
            return []
        return self.db.scalars(select(TimeEntry).where(TimeEntry.id.in_(entry_ids))).all()

    def find_duplicate_entry(
        self,
        *,
        personnel_id: UUID,
        project_id: UUID,
        work_date: date,
        exclude_id: UUID | None = None,
    ) -> TimeEntry | None:
        conditions = [
            TimeEntry.personnel_id == personnel_id,
            TimeEntry.project_id == project_id,
            TimeEntry.work_date == work_date,
        ]
        if exclude_id is not None:
            conditions.append(TimeEntry.id != exclude_id)
        return self.db.scalar(select(TimeEntry).where(and_(*conditions)))

    def add_time_entry(self, entry: TimeEntry) -> TimeEntry:
        self.db.add(entry)
        self.db.flush()
        return entry

    def delete_time_entry(self, entry: TimeEntry) -> None:
        self.db.delete(entry)
        self.db.flush()

    def entries_in_range(self, date_from: date, date_to: date) -> list[TimeEntry]:
        return self.db.scalars(
            select(TimeEntry)
            .where(and_(TimeEntry.work_date >= date_from, TimeEntry.work_date <= date_to))
            .order_by(TimeEntry.personnel_id.asc(), TimeEntry.work_date.asc())
        ).all()

    def release_period_entries(self, period_id: UUID) -> int:
        result = self.db.execute(
            update(TimeEntry)
            .where(TimeEntry.payroll_period_id == period_id)
            .values(status=TimeEntryStatus.APPROVED, payroll_period_id=None)
        )
        self.db.flush()
        return int(result.rowcount or 0)

    # ---------- Payroll periods ----------
    def list_periods(
        self,
        *,
        year: int | None = None,
        status: PayrollPeriodStatus | None = None,
    ) -> list[PayrollPeriod]:
        statement = select(PayrollPeriod)
        if year is not None:
            statement = statement.where(PayrollPeriod.year == year)
        if status is not None:
            statement = statement.where(PayrollPeriod.status == status)
        return self.db.scalars(statement.order_by(PayrollPeriod.year.desc(), PayrollPeriod.month.desc())).all()

    def get_period(self, period_id: UUID) -> PayrollPeriod | None:
        return self.db.scalar(select(PayrollPeriod).where(PayrollPeriod.id == period_id))

    def get_latest_completed_period(self) -> PayrollPeriod | None:
        return self.db.scalar(
            select(PayrollPeriod)
            .where(PayrollPeriod.status == PayrollPeriodStatus.COMPLETED)
            .order_by(PayrollPeriod.year.desc(), PayrollPeriod.month.desc())
            .limit(1)
        )

    def find_closed_period_for_date(self, work_date: date) -> PayrollPeriod | None:
        return self.db.scalar(
            select(PayrollPeriod).where(
                and_(
                    PayrollPeriod.start_date <= work_date,
                    PayrollPeriod.end_date >= work_date,
                    PayrollPeriod.status.in_([PayrollPeriodStatus.PROCESSING, PayrollPeriodStatus.COMPLETED]),
                )
            )
        )

    def add_period(self, period: PayrollPeriod) -> PayrollPeriod:
        self.db.add(period)
        self.db.flush()
        return period

    def delete_period(self, period: PayrollPeriod) -> None:
        self.db.delete(period)
        self.db.flush()

    # ---------- Payroll details ----------
    def list_details(self, period_id: UUID) -> list[tuple[PayrollDetail, Personnel]]:
        rows = self.db.execute(
            select(PayrollDetail, Personnel)
            .join(Personnel, Personnel.id == PayrollDetail.personnel_id)
            .where(PayrollDetail.period_id == period_id)
            .order_by(Personnel.name.asc())
        ).all()
        return [(detail, person) for detail, person in rows]

    def details_in_year(self, year: int) -> list[tuple[PayrollDetail, PayrollPeriod]]:
        rows = self.db.execute(
            select(PayrollDetail, PayrollPeriod)
            .join(PayrollPeriod, PayrollPeriod.id == PayrollDetail.period_id)
            .where(PayrollPeriod.year == year)
        ).all()
        return [(detail, period) for detail, period in rows]

    def details_with_personnel(
        self,
        year: int,
        month: int | None = None,
    ) -> list[tuple[PayrollDetail, PayrollPeriod, Personnel]]:
        statement = (
            select(PayrollDetail, PayrollPeriod, Personnel)
            .join(PayrollPeriod, PayrollPeriod.id == PayrollDetail.period_id)
            .join(Personnel, Personnel.id == PayrollDetail.personnel_id)
            .where(PayrollPeriod.year == year)
        )
        if month is not None:
            statement = statement.where(PayrollPeriod.month == month)
        rows = self.db.execute(statement.order_by(PayrollPeriod.month.asc(), Personnel.name.asc())).all()
        return [(detail, period, person) for detail, period, person in rows]

    def add_detail(self, detail: PayrollDetail) -> PayrollDetail:
        self.db.add(detail)
        self.db.flush()
        return detail

    def delete_details(self, period_id: UUID) -> None:
        for detail in self.db.scalars(select(PayrollDetail).where(PayrollDetail.period_id == period_id)).all():
            self.db.delete(detail)
        self.db.flush()

    # ---------- PILA ----------
    def list_pila_submissions(self) -> list[PilaSubmission]:
        return self.db.scalars(select(PilaSubmission).order_by(PilaSubmission.period.desc())).all()

    def get_pila_submission(self, period: str) -> PilaSubmission | None:
        return self.db.scalar(select(PilaSubmission).where(PilaSubmission.period == period))

    def add_pila_submission(self, submission: PilaSubmission) -> PilaSubmission:
        self.db.add(submission)
        self.db.flush()
        return submission

    def delete_pila_submission(self, submission: PilaSubmission) -> None:
        self.db.delete(submission)
        self.db.flush()
