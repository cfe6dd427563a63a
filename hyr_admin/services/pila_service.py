"""PILA contribution sheets built from a month of time entries."""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hyr_admin.core.payroll_config import UnknownPayrollYearError, get_payroll_config
from hyr_admin.models.entities import Personnel, PilaStatus, PilaSubmission, TimeEntryStatus
from hyr_admin.repositories.payroll_repository import PayrollRepository
from hyr_admin.services.audit_service import record_audit_event
from hyr_admin.services.payroll_rules import PayrollRuleError, PilaRow, build_pila_row
from hyr_admin.services.personnel_service import employee_profile
from hyr_admin.services.settings_service import SettingsService
from hyr_admin.services.tabular_export import ExportFilePayload, render_table

logger = logging.getLogger(__name__)

PERIOD_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")
STATUS_ORDER = (PilaStatus.GENERATED, PilaStatus.SUBMITTED, PilaStatus.PAID)
ROW_COLUMNS = (
    "document_type",
    "document_number",
    "name",
    "days_worked",
    "ibc",
    "health_employee",
    "health_employer",
    "pension_employee",
    "pension_employer",
    "solidarity_fund",
    "arl_risk_class",
    "arl",
    "compensation_fund",
    "sena",
    "icbf",
    "novelties",
    "total_contributions",
)


def parse_period(period: str) -> tuple[int, int]:
    match = PERIOD_PATTERN.match(period.strip())
    if match is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="period must use the YYYY-MM format.",
        )
    return int(match.group(1)), int(match.group(2))


def _month_bounds(year: int, month: int) -> tuple[date, date]:
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, date.fromordinal(end.toordinal() - 1)


def period_novelties(person: Personnel, start: date, end: date) -> list[str]:
    codes = []
    if start <= person.hire_date <= end:
        codes.append("ING")
    if person.termination_date is not None and start <= person.termination_date <= end:
        codes.append("RET")
    return codes


class PilaService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = PayrollRepository(db)

    @staticmethod
    def serialize_submission(submission: PilaSubmission, *, include_rows: bool = True) -> dict[str, object]:
        payload: dict[str, object] = {
            "id": str(submission.id),
            "period": submission.period,
            "year": submission.year,
            "month": submission.month,
            "status": submission.status.value,
            "employee_count": submission.employee_count,
            "total_ibc": str(submission.total_ibc),
            "total_contributions": str(submission.total_contributions),
            "created_at": submission.created_at.isoformat(),
            "updated_at": submission.updated_at.isoformat(),
        }
        if include_rows:
            payload["rows"] = list(submission.rows or [])
        return payload

    def list_submissions(self) -> list[PilaSubmission]:
        return self.repo.list_pila_submissions()

    def get_submission(self, period: str) -> PilaSubmission:
        parse_period(period)
        submission = self.repo.get_pila_submission(period.strip())
        if submission is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="PILA submission not found.")
        return submission

    def _build_rows(self, year: int, month: int) -> list[PilaRow]:
        try:
            config = get_payroll_config(year)
        except UnknownPayrollYearError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

        start, end = _month_bounds(year, month)
        hours_by_person: dict[UUID, Decimal] = defaultdict(lambda: Decimal("0"))
        for entry in self.repo.entries_in_range(start, end):
            if entry.status == TimeEntryStatus.REJECTED:
                continue
            hours_by_person[entry.personnel_id] += Decimal(entry.total_hours)

        employer = SettingsService(self.db).get_employer_profile()
        rows: list[PilaRow] = []
        for personnel_id, total_hours in hours_by_person.items():
            person = self.repo.get_personnel(personnel_id)
            try:
                rows.append(
                    build_pila_row(
                        employee_profile(person),
                        document_type=person.document_type,
                        document_number=person.document_number,
                        total_hours=total_hours,
                        config=config,
                        employer=employer,
                        novelties=period_novelties(person, start, end),
                    )
                )
            except PayrollRuleError as exc:
                raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
        rows.sort(key=lambda row: row.name)
        return rows

    def generate(self, period: str) -> PilaSubmission:
        year, month = parse_period(period)
        period = period.strip()
        if self.repo.get_pila_submission(period) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"PILA for {period} was already generated.",
            )

        rows = self._build_rows(year, month)
        if not rows:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No time entries found for {period}.",
            )

        now = datetime.utcnow()
        submission = PilaSubmission(
            period=period,
            year=year,
            month=month,
            status=PilaStatus.GENERATED,
            employee_count=len(rows),
            total_ibc=sum((row.ibc for row in rows), Decimal("0")),
            total_contributions=sum((row.total_contributions for row in rows), Decimal("0")),
            rows=[row.as_dict() for row in rows],
            created_at=now,
            updated_at=now,
        )
        self.repo.add_pila_submission(submission)
        record_audit_event(
            self.db,
            entity_name="pila_submission",
            entity_id=submission.id,
            action_type="generated",
            payload={
                "period": period,
                "employees": len(rows),
                "total_contributions": str(submission.total_contributions),
            },
        )
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"PILA for {period} was already generated.",
            ) from exc
        logger.info("pila generated", extra={"period": period, "entity_id": str(submission.id)})
        self.db.refresh(submission)
        return submission

    def update_status(self, period: str, new_status: PilaStatus) -> PilaSubmission:
        submission = self.get_submission(period)
        current = STATUS_ORDER.index(submission.status)
        target = STATUS_ORDER.index(new_status)
        if target < current:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Cannot move PILA from {submission.status.value} back to {new_status.value}.",
            )
        if target == current:
            return submission

        previous = submission.status
        submission.status = new_status
        submission.updated_at = datetime.utcnow()
        record_audit_event(
            self.db,
            entity_name="pila_submission",
            entity_id=submission.id,
            action_type="status_changed",
            payload={"period": submission.period, "from": previous.value, "to": new_status.value},
        )
        self.db.commit()
        self.db.refresh(submission)
        return submission

    def delete_submission(self, period: str) -> None:
        submission = self.get_submission(period)
        if submission.status != PilaStatus.GENERATED:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"PILA in status {submission.status.value} cannot be deleted.",
            )
        record_audit_event(
            self.db,
            entity_name="pila_submission",
            entity_id=submission.id,
            action_type="deleted",
            payload={"period": submission.period},
        )
        self.repo.delete_pila_submission(submission)
        self.db.commit()

    def download(self, period: str, *, format_name: str) -> ExportFilePayload:
        submission = self.get_submission(period)
        return render_table(
            base_filename=f"pila_{submission.period}",
            format_name=format_name,
            columns=ROW_COLUMNS,
            rows=list(submission.rows or []),
            sheet_title=f"PILA {submission.period}",
        )
