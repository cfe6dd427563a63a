"""Application service for employee records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hyr_admin.models.entities import Personnel, PersonnelStatus, SalaryType
from hyr_admin.repositories.payroll_repository import PayrollRepository
from hyr_admin.services.payroll_rules import EmployeeProfile

ARL_CLASSES = ("I", "II", "III", "IV", "V")


@dataclass(slots=True)
class PersonnelCreateData:
    document_number: str
    name: str
    position: str
    department: str
    hire_date: date
    salary_type: SalaryType = SalaryType.MONTHLY
    document_type: str = "CC"
    monthly_salary: Decimal | None = None
    hourly_rate: Decimal | None = None
    daily_rate: Decimal | None = None
    expected_arrival_time: time | None = None
    arl_risk_class: str | None = None
    transport_allowance_eligible: bool = True
    teleworking: bool = False
    fsp_exempt: bool = False
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    eps: str | None = None
    pension_fund: str | None = None
    compensation_fund: str | None = None
    bank_name: str | None = None
    bank_account: str | None = None
    status: PersonnelStatus = PersonnelStatus.ACTIVE


@dataclass(slots=True)
class PersonnelUpdateData:
    document_type: str | None = None
    document_number: str | None = None
    name: str | None = None
    position: str | None = None
    department: str | None = None
    hire_date: date | None = None
    termination_date: date | None = None
    status: PersonnelStatus | None = None
    salary_type: SalaryType | None = None
    monthly_salary: Decimal | None = None
    hourly_rate: Decimal | None = None
    daily_rate: Decimal | None = None
    expected_arrival_time: time | None = None
    arl_risk_class: str | None = None
    transport_allowance_eligible: bool | None = None
    teleworking: bool | None = None
    fsp_exempt: bool | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    eps: str | None = None
    pension_fund: str | None = None
    compensation_fund: str | None = None
    bank_name: str | None = None
    bank_account: str | None = None


OPTIONAL_FIELDS = (
    "document_type",
    "position",
    "department",
    "hire_date",
    "termination_date",
    "status",
    "salary_type",
    "monthly_salary",
    "hourly_rate",
    "daily_rate",
    "expected_arrival_time",
    "transport_allowance_eligible",
    "teleworking",
    "fsp_exempt",
    "phone",
    "email",
    "address",
    "eps",
    "pension_fund",
    "compensation_fund",
    "bank_name",
    "bank_account",
)


def employee_profile(person: Personnel) -> EmployeeProfile:
    return EmployeeProfile(
        name=person.name,
        salary_type=person.salary_type.value,
        monthly_salary=Decimal(person.monthly_salary) if person.monthly_salary is not None else None,
        hourly_rate=Decimal(person.hourly_rate) if person.hourly_rate is not None else None,
        department=person.department,
        arl_risk_class=person.arl_risk_class,
        transport_allowance_eligible=person.transport_allowance_eligible,
        teleworking=person.teleworking,
        fsp_exempt=person.fsp_exempt,
    )


class PersonnelService:
    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = PayrollRepository(db)

    @staticmethod
    def serialize_personnel(person: Personnel) -> dict[str, object]:
        return {
            "id": str(person.id),
            "document_type": person.document_type,
            "document_number": person.document_number,
            "name": person.name,
            "position": person.position,
            "department": person.department,
            "phone": person.phone,
            "email": person.email,
            "address": person.address,
            "hire_date": person.hire_date.isoformat(),
            "termination_date": person.termination_date.isoformat() if person.termination_date else None,
            "status": person.status.value,
            "salary_type": person.salary_type.value,
            "monthly_salary": str(person.monthly_salary) if person.monthly_salary is not None else None,
            "hourly_rate": str(person.hourly_rate) if person.hourly_rate is not None else None,
            "daily_rate": str(person.daily_rate) if person.daily_rate is not None else None,
            "expected_arrival_time": (
                person.expected_arrival_time.strftime("%H:%M") if person.expected_arrival_time else None
            ),
            "arl_risk_class": person.arl_risk_class,
            "transport_allowance_eligible": person.transport_allowance_eligible,
            "teleworking": person.teleworking,
            "fsp_exempt": person.fsp_exempt,
            "eps": person.eps,
            "pension_fund": person.pension_fund,
            "compensation_fund": person.compensation_fund,
            "bank_name": person.bank_name,
            "bank_account": person.bank_account,
            "created_at": person.created_at.isoformat(),
            "updated_at": person.updated_at.isoformat(),
        }

    @staticmethod
    def _check_salary(person: Personnel) -> None:
        if person.salary_type == SalaryType.MONTHLY and not person.monthly_salary:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="monthly_salary is required for monthly personnel.",
            )
        if person.salary_type == SalaryType.HOURLY and not person.hourly_rate:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="hourly_rate is required for hourly personnel.",
            )
        if person.arl_risk_class is not None and person.arl_risk_class not in ARL_CLASSES:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"arl_risk_class must be one of {', '.join(ARL_CLASSES)}.",
            )

    def list_personnel(
        self,
        *,
        status_filter: PersonnelStatus | None = None,
        department: str | None = None,
    ) -> list[Personnel]:
        return self.repo.list_personnel(status=status_filter, department=department)

    def get_personnel(self, personnel_id: UUID) -> Personnel:
        person = self.repo.get_personnel(personnel_id)
        if person is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Personnel not found.")
        return person

    def create_personnel(self, data: PersonnelCreateData) -> Personnel:
        now = datetime.utcnow()
        person = Personnel(
            document_type=data.document_type,
            document_number=data.document_number.strip(),
            name=data.name.strip(),
            position=data.position.strip(),
            department=data.department.strip(),
            phone=data.phone,
            email=data.email,
            address=data.address,
            hire_date=data.hire_date,
            status=data.status,
            salary_type=data.salary_type,
            monthly_salary=data.monthly_salary,
            hourly_rate=data.hourly_rate,
            daily_rate=data.daily_rate,
            expected_arrival_time=data.expected_arrival_time,
            arl_risk_class=data.arl_risk_class.upper() if data.arl_risk_class else None,
            transport_allowance_eligible=data.transport_allowance_eligible,
            teleworking=data.teleworking,
            fsp_exempt=data.fsp_exempt,
            eps=data.eps,
            pension_fund=data.pension_fund,
            compensation_fund=data.compensation_fund,
            bank_name=data.bank_name,
            bank_account=data.bank_account,
            created_at=now,
            updated_at=now,
        )
        self._check_salary(person)
        try:
            self.repo.add_personnel(person)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Personnel document number already exists.",
            ) from exc
        self.db.refresh(person)
        return person

    def update_personnel(self, personnel_id: UUID, data: PersonnelUpdateData) -> Personnel:
        person = self.get_personnel(personnel_id)
        if data.document_number is not None:
            person.document_number = data.document_number.strip()
        if data.name is not None:
            person.name = data.name.strip()
        if data.arl_risk_class is not None:
            person.arl_risk_class = data.arl_risk_class.upper()
        for field_name in OPTIONAL_FIELDS:
            value = getattr(data, field_name)
            if value is not None:
                setattr(person, field_name, value)
        if data.status == PersonnelStatus.INACTIVE and person.termination_date is None:
            person.termination_date = date.today()
        self._check_salary(person)
        person.updated_at = datetime.utcnow()
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Personnel document number already exists.",
            ) from exc
        self.db.refresh(person)
        return person

    def delete_personnel(self, personnel_id: UUID) -> None:
        person = self.get_personnel(personnel_id)
        entries, details = self.repo.personnel_history_counts(person.id)
        if entries or details:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot delete personnel with time entries or payroll history; deactivate instead.",
            )
        self.repo.delete_personnel_assignments(person.id)
        self.repo.delete_personnel(person)
        self.db.commit()
