"""Monthly payroll periods: readiness checks, processing, details and summaries."""

from __future__ import annotations

import calendar
import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hyr_admin.core.config import get_settings
from hyr_admin.core.payroll_config import PayrollConfig, UnknownPayrollYearError, get_payroll_config, serialize_config
from hyr_admin.models.entities import (
    PayrollDetail,
    PayrollPeriod,
    PayrollPeriodStatus,
    Personnel,
    PersonnelStatus,
    TimeEntry,
    TimeEntryStatus,
)
from hyr_admin.repositories.payroll_repository import PayrollRepository
from hyr_admin.services.audit_service import record_audit_event
from hyr_admin.services.dian import generate_cune
from hyr_admin.services.payroll_rules import (
    EmployeeProfile,
    HoursWorked,
    PayrollCalculation,
    PayrollRuleError,
    calculate_payroll,
    summarize_payroll,
    validate_payroll,
)
from hyr_admin.services.personnel_service import employee_profile
from hyr_admin.services.settings_service import SettingsService
from hyr_admin.services.tabular_export import ExportFilePayload, render_table

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
PENDING_STATUSES = {TimeEntryStatus.DRAFT, TimeEntryStatus.SUBMITTED}

PAYSLIP_COLUMNS = ("section", "concept", "amount")
PAYSLIP_SECTIONS = (
    ("earnings", ("regular_pay", "overtime_pay", "night_premium_pay", "transport_allowance", "connectivity_allowance")),
    ("deductions", ("health_deduction", "pension_deduction", "solidarity_fund", "withholding_tax")),
    ("totals", ("gross_pay", "total_deductions", "net_pay")),
)


@dataclass(slots=True)
class PayrollPreviewData:
    year: int | None = None
    personnel_id: UUID | None = None
    name: str = "Preview"
    salary_type: str = "monthly"
    monthly_salary: Decimal | None = None
    hourly_rate: Decimal | None = None
    department: str = "general"
    arl_risk_class: str | None = None
    transport_allowance_eligible: bool = True
    teleworking: bool = False
    fsp_exempt: bool = False
    regular_hours: Decimal = Decimal("192")
    overtime_day_hours: Decimal = ZERO
    overtime_night_hours: Decimal = ZERO
    overtime_holiday_day_hours: Decimal = ZERO
    overtime_holiday_night_hours: Decimal = ZERO
    night_hours: Decimal = ZERO
    days_worked: int = 30


def aggregate_hours(entries: Iterable[TimeEntry], config: PayrollConfig) -> HoursWorked:
    """Fold approved daily entries into monthly payroll hours.

    Overtime is attributed to the night window first; overtime on Sundays and
    holidays uses the holiday surcharges.
    """

    regular = ZERO
    day_ot = ZERO
    night_ot = ZERO
    holiday_day_ot = ZERO
    holiday_night_ot = ZERO
    ordinary_night = ZERO
    dates: set[date] = set()

    for entry in entries:
        overtime = Decimal(entry.overtime_hours)
        night = Decimal(entry.night_hours)
        overtime_at_night = min(overtime, night)
        overtime_by_day = overtime - overtime_at_night
        regular += Decimal(entry.regular_hours)
        ordinary_night += night - overtime_at_night
        if config.is_rest_day(entry.work_date):
            holiday_day_ot += overtime_by_day
            holiday_night_ot += overtime_at_night
        else:
            day_ot += overtime_by_day
            night_ot += overtime_at_night
        dates.add(entry.work_date)

    return HoursWorked(
        regular_hours=regular,
        overtime_day_hours=day_ot,
        overtime_night_hours=night_ot,
        overtime_holiday_day_hours=holiday_day_ot,
        overtime_holiday_night_hours=holiday_night_ot,
        night_hours=ordinary_night,
        days_worked=min(len(dates), 30),
    )


def calculation_from_detail(detail: PayrollDetail, config: PayrollConfig) -> PayrollCalculation:
    """Rebuild a calculation from stored detail columns for summaries."""

    gross = Decimal(detail.gross_pay)
    return PayrollCalculation(
        base_salary=Decimal(detail.base_salary),
        hourly_value=Decimal(detail.base_salary) / config.monthly_hours,
        regular_hours=Decimal(detail.regular_hours),
        overtime_hours=Decimal(detail.overtime_hours),
        night_hours=Decimal(detail.night_hours),
        regular_pay=Decimal(detail.regular_pay),
        overtime_pay=Decimal(detail.overtime_pay),
        night_premium_pay=Decimal(detail.night_premium_pay),
        gross_pay=gross,
        transport_allowance=Decimal(detail.transport_allowance),
        connectivity_allowance=Decimal(detail.connectivity_allowance),
        health_deduction=Decimal(detail.health_deduction),
        pension_deduction=Decimal(detail.pension_deduction),
        fsp_rate=Decimal(detail.solidarity_fund) / Decimal(detail.base_salary) if detail.base_salary else ZERO,
        solidarity_fund=Decimal(detail.solidarity_fund),
        withholding_tax=Decimal(detail.withholding_tax),
        employer_health=Decimal(detail.employer_health),
        employer_pension=Decimal(detail.employer_pension),
        arl_risk_class=detail.arl_risk_class,
        arl_rate=config.arl_rates.get(detail.arl_risk_class, ZERO),
        arl=Decimal(detail.arl),
        severance=Decimal(detail.severance),
        severance_interest=Decimal(detail.severance_interest),
        service_bonus=Decimal(detail.service_bonus),
        vacation=Decimal(detail.vacation),
        sena=Decimal(detail.sena),
        icbf=Decimal(detail.icbf),
        compensation_fund=Decimal(detail.compensation_fund),
        law_114_1_applied=detail.law_114_1_applied,
        ibc_smmlv=gross / config.minimum_wage,
    )


class PayrollService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = PayrollRepository(db)
        self.settings = get_settings()

    # ---------- Serialization ----------
    @staticmethod
    def serialize_period(period: PayrollPeriod) -> dict[str, object]:
        return {
            "id": str(period.id),
            "year": period.year,
            "month": period.month,
            "period": f"{period.year}-{period.month:02d}",
            "period_type": period.period_type,
            "start_date": period.start_date.isoformat(),
            "end_date": period.end_date.isoformat(),
            "status": period.status.value,
            "employee_count": period.employee_count,
            "total_gross": str(period.total_gross),
            "total_net": str(period.total_net),
            "total_employer_cost": str(period.total_employer_cost),
            "processed_at": period.processed_at.isoformat() if period.processed_at else None,
            "created_at": period.created_at.isoformat(),
        }

    @staticmethod
    def serialize_detail(detail: PayrollDetail, person: Personnel) -> dict[str, object]:
        money_fields = (
            "base_salary",
            "regular_pay",
            "overtime_pay",
            "night_premium_pay",
            "gross_pay",
            "transport_allowance",
            "connectivity_allowance",
            "health_deduction",
            "pension_deduction",
            "solidarity_fund",
            "withholding_tax",
            "total_deductions",
            "net_pay",
            "employer_health",
            "employer_pension",
            "arl",
            "severance",
            "severance_interest",
            "service_bonus",
            "vacation",
            "sena",
            "icbf",
            "compensation_fund",
            "employer_cost",
        )
        payload: dict[str, object] = {
            "id": str(detail.id),
            "period_id": str(detail.period_id),
            "personnel_id": str(detail.personnel_id),
            "personnel_name": person.name,
            "document_number": person.document_number,
            "department": person.department,
            "days_worked": detail.days_worked,
            "regular_hours": str(detail.regular_hours),
            "overtime_hours": str(detail.overtime_hours),
            "night_hours": str(detail.night_hours),
            "arl_risk_class": detail.arl_risk_class,
            "law_114_1_applied": detail.law_114_1_applied,
            "cune": detail.cune,
        }
        payload.update({field_name: str(getattr(detail, field_name)) for field_name in money_fields})
        return payload

    # ---------- Config ----------
    @staticmethod
    def get_config(year: int) -> PayrollConfig:
        try:
            return get_payroll_config(year)
        except UnknownPayrollYearError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    def config_payload(self, year: int) -> dict[str, object]:
        return serialize_config(self.get_config(year))

    # ---------- Periods ----------
    def list_periods(
        self,
        *,
        year: int | None = None,
        status_filter: PayrollPeriodStatus | None = None,
    ) -> list[PayrollPeriod]:
        return self.repo.list_periods(year=year, status=status_filter)

    def get_period(self, period_id: UUID) -> PayrollPeriod:
        period = self.repo.get_period(period_id)
        if period is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payroll period not found.")
        return period

    def create_period(self, *, year: int, month: int) -> PayrollPeriod:
        try:
            get_payroll_config(year)
        except UnknownPayrollYearError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

        last_day = calendar.monthrange(year, month)[1]
        now = datetime.utcnow()
        period = PayrollPeriod(
            year=year,
            month=month,
            period_type="monthly",
            start_date=date(year, month, 1),
            end_date=date(year, month, last_day),
            status=PayrollPeriodStatus.DRAFT,
            employee_count=0,
            total_gross=ZERO,
            total_net=ZERO,
            total_employer_cost=ZERO,
            created_at=now,
            updated_at=now,
        )
        try:
            self.repo.add_period(period)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Payroll period {year}-{month:02d} already exists.",
            ) from exc
        self.db.refresh(period)
        return period

    def delete_period(self, period_id: UUID) -> None:
        period = self.get_period(period_id)
        released = 0
        if period.status != PayrollPeriodStatus.DRAFT:
            released = self.repo.release_period_entries(period.id)
            self.repo.delete_details(period.id)
        record_audit_event(
            self.db,
            entity_name="payroll_period",
            entity_id=period.id,
            action_type="deleted",
            payload={"period": f"{period.year}-{period.month:02d}", "released_entries": released},
        )
        self.repo.delete_period(period)
        self.db.commit()

    # ---------- Processing ----------
    def _approved_entries_by_person(self, period: PayrollPeriod) -> tuple[dict[UUID, list[TimeEntry]], list[TimeEntry]]:
        entries = self.repo.entries_in_range(period.start_date, period.end_date)
        by_person: dict[UUID, list[TimeEntry]] = defaultdict(list)
        pending: list[TimeEntry] = []
        for entry in entries:
            if entry.status in PENDING_STATUSES:
                pending.append(entry)
            elif entry.status == TimeEntryStatus.APPROVED:
                by_person[entry.personnel_id].append(entry)
        return by_person, pending

    def readiness(self, period_id: UUID) -> dict[str, object]:
        period = self.get_period(period_id)
        by_person, pending = self._approved_entries_by_person(period)
        active = self.repo.list_personnel(status=PersonnelStatus.ACTIVE)
        without_hours = [
            {"personnel_id": str(person.id), "name": person.name}
            for person in active
            if person.id not in by_person and person.hire_date <= period.end_date
        ]
        return {
            "period_id": str(period.id),
            "status": period.status.value,
            "ready": period.status == PayrollPeriodStatus.DRAFT and not pending and not without_hours and bool(by_person),
            "approved_entries": sum(len(rows) for rows in by_person.values()),
            "employees_with_hours": len(by_person),
            "pending_entries": [str(entry.id) for entry in pending],
            "personnel_without_hours": without_hours,
        }

    def process_period(self, period_id: UUID) -> PayrollPeriod:
        period = self.get_period(period_id)
        if period.status == PayrollPeriodStatus.COMPLETED:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Payroll period is already processed.")

        report = self.readiness(period.id)
        if report["pending_entries"]:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"{len(report['pending_entries'])} time entries are not approved or rejected yet.",
            )
        if report["personnel_without_hours"]:
            names = ", ".join(str(row["name"]) for row in report["personnel_without_hours"])
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Active personnel without approved hours in the period: {names}.",
            )

        config = self.get_config(period.year)
        employer = SettingsService(self.db).get_employer_profile()
        by_person, _ = self._approved_entries_by_person(period)
        if not by_person:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="No approved time entries in the period.",
            )

        period_code = f"{period.year}-{period.month:02d}"
        totals = {"gross": ZERO, "net": ZERO, "cost": ZERO}
        now = datetime.utcnow()
        try:
            with self.db.begin_nested():
                period.status = PayrollPeriodStatus.PROCESSING
                for personnel_id, entries in by_person.items():
                    person = self.repo.get_personnel(personnel_id)
                    hours = aggregate_hours(entries, config)
                    try:
                        calc = calculate_payroll(employee_profile(person), hours, config=config, employer=employer)
                    except PayrollRuleError as exc:
                        raise HTTPException(
                            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                            detail=str(exc),
                        ) from exc

                    self.repo.add_detail(
                        PayrollDetail(
                            period_id=period.id,
                            personnel_id=person.id,
                            days_worked=hours.days_worked,
                            regular_hours=calc.regular_hours,
                            overtime_hours=calc.overtime_hours,
                            night_hours=calc.night_hours,
                            base_salary=calc.base_salary,
                            regular_pay=calc.regular_pay,
                            overtime_pay=calc.overtime_pay,
                            night_premium_pay=calc.night_premium_pay,
                            gross_pay=calc.gross_pay,
                            transport_allowance=calc.transport_allowance,
                            connectivity_allowance=calc.connectivity_allowance,
                            health_deduction=calc.health_deduction,
                            pension_deduction=calc.pension_deduction,
                            solidarity_fund=calc.solidarity_fund,
                            withholding_tax=calc.withholding_tax,
                            total_deductions=calc.total_deductions,
                            net_pay=calc.net_pay,
                            employer_health=calc.employer_health,
                            employer_pension=calc.employer_pension,
                            arl_risk_class=calc.arl_risk_class,
                            arl=calc.arl,
                            severance=calc.severance,
                            severance_interest=calc.severance_interest,
                            service_bonus=calc.service_bonus,
                            vacation=calc.vacation,
                            sena=calc.sena,
                            icbf=calc.icbf,
                            compensation_fund=calc.compensation_fund,
                            employer_cost=calc.employer_cost,
                            law_114_1_applied=calc.law_114_1_applied,
                            cune=generate_cune(
                                period=period_code,
                                employee_document=person.document_number,
                                employee_name=person.name,
                                base_salary=calc.base_salary,
                                worked_days=hours.days_worked,
                            ),
                            created_at=now,
                        )
                    )
                    for entry in entries:
                        entry.status = TimeEntryStatus.PAYROLL_LOCKED
                        entry.payroll_period_id = period.id
                        entry.updated_at = now

                    totals["gross"] += calc.gross_pay
                    totals["net"] += calc.net_pay
                    totals["cost"] += calc.employer_cost

                period.employee_count = len(by_person)
                period.total_gross = totals["gross"]
                period.total_net = totals["net"]
                period.total_employer_cost = totals["cost"]
                period.status = PayrollPeriodStatus.COMPLETED
                period.processed_at = now
                period.updated_at = now
                record_audit_event(
                    self.db,
                    entity_name="payroll_period",
                    entity_id=period.id,
                    action_type="processed",
                    payload={
                        "period": period_code,
                        "employees": len(by_person),
                        "total_gross": str(totals["gross"]),
                        "total_employer_cost": str(totals["cost"]),
                    },
                )
            self.db.commit()
        except HTTPException:
            self.db.rollback()
            raise
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Payroll details already exist for this period.",
            ) from exc

        logger.info("payroll processed", extra={"period": period_code, "entity_id": str(period.id)})
        self.db.refresh(period)
        return period

    # ---------- Reads ----------
    def list_details(self, period_id: UUID) -> list[tuple[PayrollDetail, Personnel]]:
        period = self.get_period(period_id)
        return self.repo.list_details(period.id)

    def period_summary(self, period_id: UUID) -> dict[str, object]:
        period = self.get_period(period_id)
        config = self.get_config(period.year)
        rows: list[tuple[EmployeeProfile, PayrollCalculation]] = []
        for detail, person in self.repo.list_details(period.id):
            calc = calculation_from_detail(detail, config)
            rows.append((employee_profile(person), calc))
        summary = summarize_payroll(rows, config)
        return {"period": self.serialize_period(period), **summary}

    def payslip(self, period_id: UUID, detail_id: UUID, *, format_name: str) -> ExportFilePayload:
        """Render one employee's payslip as a section/concept/amount table."""

        period = self.get_period(period_id)
        found = [(detail, person) for detail, person in self.repo.list_details(period.id) if detail.id == detail_id]
        if not found:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payroll detail not found.")
        detail, person = found[0]
        period_code = f"{period.year}-{period.month:02d}"

        rows: list[dict[str, object]] = [
            {"section": "employee", "concept": "name", "amount": person.name},
            {"section": "employee", "concept": "document_number", "amount": person.document_number},
            {"section": "employee", "concept": "period", "amount": period_code},
            {"section": "employee", "concept": "days_worked", "amount": detail.days_worked},
        ]
        for section, concepts in PAYSLIP_SECTIONS:
            rows.extend(
                {"section": section, "concept": concept, "amount": str(getattr(detail, concept))} for concept in concepts
            )
        rows.append({"section": "dian", "concept": "cune", "amount": detail.cune})

        return render_table(
            base_filename=f"payslip-{period_code}-{person.document_number}",
            format_name=format_name,
            columns=PAYSLIP_COLUMNS,
            rows=rows,
            sheet_title=f"Payslip {period_code}",
        )

    def preview(self, data: PayrollPreviewData) -> dict[str, object]:
        year = data.year or self.settings.payroll_year
        try:
            config = get_payroll_config(year)
        except UnknownPayrollYearError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

        if data.personnel_id is not None:
            person = self.repo.get_personnel(data.personnel_id)
            if person is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Personnel not found.")
            profile = employee_profile(person)
        else:
            profile = EmployeeProfile(
                name=data.name,
                salary_type=data.salary_type,
                monthly_salary=data.monthly_salary,
                hourly_rate=data.hourly_rate,
                department=data.department,
                arl_risk_class=data.arl_risk_class,
                transport_allowance_eligible=data.transport_allowance_eligible,
                teleworking=data.teleworking,
                fsp_exempt=data.fsp_exempt,
            )
        hours = HoursWorked(
            regular_hours=data.regular_hours,
            overtime_day_hours=data.overtime_day_hours,
            overtime_night_hours=data.overtime_night_hours,
            overtime_holiday_day_hours=data.overtime_holiday_day_hours,
            overtime_holiday_night_hours=data.overtime_holiday_night_hours,
            night_hours=data.night_hours,
            days_worked=data.days_worked,
        )
        employer = SettingsService(self.db).get_employer_profile()
        try:
            calc = calculate_payroll(profile, hours, config=config, employer=employer)
        except PayrollRuleError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
        validation = validate_payroll(profile, hours, calc, config)
        return {
            "year": year,
            "employee": profile.name,
            "calculation": calc.as_dict(),
            "validation": validation.as_dict(),
        }
