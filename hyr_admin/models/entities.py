"""ORM entities for the HYR administration schema."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, time
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from hyr_admin.db.base import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class ClientType(str, enum.Enum):
    COMPANY = "company"
    PERSON = "person"


class ProjectType(str, enum.Enum):
    CONSTRUCTION = "construction"
    WELDING = "welding"
    MIXED = "mixed"


class ProjectStatus(str, enum.Enum):
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CostCategory(str, enum.Enum):
    MATERIALS = "materials"
    LABOR = "labor"
    EQUIPMENT = "equipment"
    OVERHEAD = "overhead"


class PersonnelStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class SalaryType(str, enum.Enum):
    MONTHLY = "monthly"
    HOURLY = "hourly"


class TimeEntryStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAYROLL_LOCKED = "payroll_locked"


class PayrollPeriodStatus(str, enum.Enum):
    DRAFT = "draft"
    PROCESSING = "processing"
    COMPLETED = "completed"


class CalendarEventType(str, enum.Enum):
    PAYMENT = "payment"
    DEADLINE = "deadline"
    MEETING = "meeting"
    TAX = "tax"
    PAYROLL = "payroll"
    OTHER = "other"


class CalendarEventStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Recurrence(str, enum.Enum):
    NONE = "none"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class TemplateType(str, enum.Enum):
    CONSTRUCTION = "construction"
    WELDING = "welding"


class EstimationStatus(str, enum.Enum):
    DRAFT = "draft"
    CONVERTED = "converted"


class InvoiceStatus(str, enum.Enum):
    ISSUED = "issued"
    CANCELLED = "cancelled"


class PilaStatus(str, enum.Enum):
    GENERATED = "generated"
    SUBMITTED = "submitted"
    PAID = "paid"


def _enum_column(enum_cls: type[enum.Enum], name: str) -> SQLEnum:
    return SQLEnum(enum_cls, name=name, values_callable=_enum_values)


class Client(Base):
    __tablename__ = "clients"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    nit: Mapped[str | None] = mapped_column(String(32), unique=True, nullable=True)
    client_type: Mapped[ClientType] = mapped_column(
        _enum_column(ClientType, "client_type"), nullable=False, default=ClientType.COMPANY
    )
    contact_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    city: Mapped[str | None] = mapped_column(String(128), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint("progress >= 0 AND progress <= 100", name="ck_projects_progress_range"),
        Index("ix_projects_client_id", "client_id"),
        Index("ix_projects_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("clients.id"), nullable=True
    )
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    project_type: Mapped[ProjectType] = mapped_column(
        _enum_column(ProjectType, "project_type"), nullable=False, default=ProjectType.CONSTRUCTION
    )
    status: Mapped[ProjectStatus] = mapped_column(
        _enum_column(ProjectStatus, "project_status"), nullable=False, default=ProjectStatus.PLANNED
    )
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    budget_materials: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    budget_labor: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    budget_equipment: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    budget_overhead: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    budget_total: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))

    spent_materials: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    spent_labor: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    spent_equipment: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    spent_overhead: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    spent_total: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    total_income: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class BudgetItem(Base):
    __tablename__ = "budget_items"
    __table_args__ = (Index("ix_budget_items_project_id", "project_id"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("projects.id"), nullable=False)
    category: Mapped[CostCategory] = mapped_column(_enum_column(CostCategory, "cost_category"), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    unit: Mapped[str | None] = mapped_column(String(32), nullable=True)
    quantity: Mapped[Decimal] = mapped_column(Numeric(14, 3), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class Personnel(Base):
    __tablename__ = "personnel"
    __table_args__ = (
        CheckConstraint(
            "(salary_type = 'monthly' AND monthly_salary IS NOT NULL) "
            "OR (salary_type = 'hourly' AND hourly_rate IS NOT NULL)",
            name="ck_personnel_salary_matches_type",
        ),
        Index("ix_personnel_status", "status"),
        Index("ix_personnel_department", "department"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    document_type: Mapped[str] = mapped_column(String(8), nullable=False, default="CC")
    document_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[str] = mapped_column(String(128), nullable=False)
    department: Mapped[str] = mapped_column(String(128), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    hire_date: Mapped[date] = mapped_column(Date, nullable=False)
    termination_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[PersonnelStatus] = mapped_column(
        _enum_column(PersonnelStatus, "personnel_status"), nullable=False, default=PersonnelStatus.ACTIVE
    )
    salary_type: Mapped[SalaryType] = mapped_column(
        _enum_column(SalaryType, "salary_type"), nullable=False, default=SalaryType.MONTHLY
    )
    monthly_salary: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    daily_rate: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    expected_arrival_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    arl_risk_class: Mapped[str | None] = mapped_column(String(3), nullable=True)
    transport_allowance_eligible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    teleworking: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    fsp_exempt: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    eps: Mapped[str | None] = mapped_column(String(128), nullable=True)
    pension_fund: Mapped[str | None] = mapped_column(String(128), nullable=True)
    compensation_fund: Mapped[str | None] = mapped_column(String(128), nullable=True)
    bank_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    bank_account: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class ProjectAssignment(Base):
    __tablename__ = "project_assignments"
    __table_args__ = (
        Index("ix_project_assignments_project_id", "project_id"),
        Index("ix_project_assignments_personnel_id", "personnel_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("projects.id"), nullable=False)
    personnel_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("personnel.id"), nullable=False)
    role: Mapped[str | None] = mapped_column(String(128), nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class Expense(Base):
    __tablename__ = "expenses"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
        Index("ix_expenses_project_id", "project_id"),
        Index("ix_expenses_expense_date", "expense_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id"), nullable=True
    )
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)
    category: Mapped[CostCategory] = mapped_column(_enum_column(CostCategory, "cost_category"), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    vendor: Mapped[str | None] = mapped_column(String(255), nullable=True)
    invoice_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    payment_method: Mapped[str | None] = mapped_column(String(32), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class ProjectIncome(Base):
    __tablename__ = "project_incomes"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_project_incomes_amount_positive"),
        Index("ix_project_incomes_project_id", "project_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("projects.id"), nullable=False)
    income_date: Mapped[date] = mapped_column(Date, nullable=False)
    concept: Mapped[str] = mapped_column(String(500), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(32), nullable=False, default="transfer")
    invoice_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class PayrollPeriod(Base):
    __tablename__ = "payroll_periods"
    __table_args__ = (
        UniqueConstraint("year", "month", name="uq_payroll_periods_year_month"),
        CheckConstraint("month >= 1 AND month <= 12", name="ck_payroll_periods_month_range"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    period_type: Mapped[str] = mapped_column(String(16), nullable=False, default="monthly")
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[PayrollPeriodStatus] = mapped_column(
        _enum_column(PayrollPeriodStatus, "payroll_period_status"),
        nullable=False,
        default=PayrollPeriodStatus.DRAFT,
    )
    employee_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_gross: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    total_net: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    total_employer_cost: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class TimeEntry(Base):
    __tablename__ = "time_entries"
    __table_args__ = (
        UniqueConstraint("personnel_id", "project_id", "work_date", name="uq_time_entries_personnel_project_date"),
        Index("ix_time_entries_work_date", "work_date"),
        Index("ix_time_entries_personnel_id", "personnel_id"),
        Index("ix_time_entries_project_id", "project_id"),
        Index("ix_time_entries_payroll_period_id", "payroll_period_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    personnel_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("personnel.id"), nullable=False)
    project_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("projects.id"), nullable=False)
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    arrival_time: Mapped[time] = mapped_column(Time, nullable=False)
    departure_time: Mapped[time] = mapped_column(Time, nullable=False)
    lunch_deducted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expected_arrival_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    late_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    penalized_late_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    regular_hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False, default=Decimal("0.00"))
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False, default=Decimal("0.00"))
    night_hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False, default=Decimal("0.00"))
    total_hours: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False, default=Decimal("0.00"))
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    regular_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    overtime_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    night_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    late_discount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    total_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    status: Mapped[TimeEntryStatus] = mapped_column(
        _enum_column(TimeEntryStatus, "time_entry_status"), nullable=False, default=TimeEntryStatus.DRAFT
    )
    payroll_period_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("payroll_periods.id"), nullable=True
    )
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class PayrollDetail(Base):
    __tablename__ = "payroll_details"
    __table_args__ = (
        UniqueConstraint("period_id", "personnel_id", name="uq_payroll_details_period_personnel"),
        Index("ix_payroll_details_period_id", "period_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    period_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("payroll_periods.id"), nullable=False)
    personnel_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("personnel.id"), nullable=False)
    days_worked: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    regular_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0.00"))
    overtime_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0.00"))
    night_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0.00"))
    base_salary: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    regular_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    overtime_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    night_premium_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    gross_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    transport_allowance: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    connectivity_allowance: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    health_deduction: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    pension_deduction: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    solidarity_fund: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    withholding_tax: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    employer_health: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    employer_pension: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    arl_risk_class: Mapped[str] = mapped_column(String(3), nullable=False)
    arl: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    severance: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    severance_interest: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    service_bonus: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    vacation: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    sena: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    icbf: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    compensation_fund: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    employer_cost: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    law_114_1_applied: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    cune: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class PilaSubmission(Base):
    __tablename__ = "pila_submissions"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    period: Mapped[str] = mapped_column(String(7), unique=True, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[PilaStatus] = mapped_column(
        _enum_column(PilaStatus, "pila_status"), nullable=False, default=PilaStatus.GENERATED
    )
    employee_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_ibc: Mapped[Decimal] = mapped_column(Numeric(16, 2), nullable=False, default=Decimal("0.00"))
    total_contributions: Mapped[Decimal] = mapped_column(Numeric(16, 2), nullable=False, default=Decimal("0.00"))
    rows: Mapped[list[dict[str, object]]] = mapped_column(JSONType, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class ElectronicInvoice(Base):
    __tablename__ = "electronic_invoices"
    __table_args__ = (
        Index("ix_electronic_invoices_project_id", "project_id"),
        Index("ix_electronic_invoices_issue_date", "issue_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    invoice_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    client_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), ForeignKey("clients.id"), nullable=True)
    project_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id"), nullable=True
    )
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_nit: Mapped[str | None] = mapped_column(String(32), nullable=True)
    city: Mapped[str] = mapped_column(String(128), nullable=False)
    activity: Mapped[str] = mapped_column(String(32), nullable=False, default="construction")
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    vat_rate: Mapped[Decimal] = mapped_column(Numeric(6, 4), nullable=False)
    vat_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    reteica_rate: Mapped[Decimal] = mapped_column(Numeric(8, 5), nullable=False)
    reteica_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    line_items: Mapped[list[dict[str, object]]] = mapped_column(JSONType, nullable=False, default=list)
    cufe: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    xml_content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[InvoiceStatus] = mapped_column(
        _enum_column(InvoiceStatus, "invoice_status"), nullable=False, default=InvoiceStatus.ISSUED
    )
    notes: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class Contractor(Base):
    __tablename__ = "contractors"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    document_type: Mapped[str] = mapped_column(String(8), nullable=False, default="CC")
    document_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    city: Mapped[str | None] = mapped_column(String(128), nullable=True)
    obligated_to_invoice: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    service_type: Mapped[str] = mapped_column(String(32), nullable=False, default="general")
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class SupportDocument(Base):
    __tablename__ = "support_documents"
    __table_args__ = (
        UniqueConstraint("year", "sequence", name="uq_support_documents_year_sequence"),
        Index("ix_support_documents_contractor_id", "contractor_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    ds_number: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    contractor_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("contractors.id"), nullable=False)
    concept: Mapped[str] = mapped_column(String(500), nullable=False)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    service_type: Mapped[str] = mapped_column(String(32), nullable=False)
    base_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    withholdings: Mapped[dict[str, object]] = mapped_column(JSONType, nullable=False, default=dict)
    total_withholdings: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    net_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class CalendarEvent(Base):
    __tablename__ = "calendar_events"
    __table_args__ = (
        Index("ix_calendar_events_event_date", "event_date"),
        Index("ix_calendar_events_status", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    event_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    event_type: Mapped[CalendarEventType] = mapped_column(
        _enum_column(CalendarEventType, "calendar_event_type"), nullable=False, default=CalendarEventType.OTHER
    )
    status: Mapped[CalendarEventStatus] = mapped_column(
        _enum_column(CalendarEventStatus, "calendar_event_status"),
        nullable=False,
        default=CalendarEventStatus.PENDING,
    )
    amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    recurrence: Mapped[Recurrence] = mapped_column(
        _enum_column(Recurrence, "recurrence"), nullable=False, default=Recurrence.NONE
    )
    project_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id"), nullable=True
    )
    personnel_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("personnel.id"), nullable=True
    )
    notify_days_before: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class Setting(Base):
    __tablename__ = "settings"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    value: Mapped[object] = mapped_column(JSONType, nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False, default="general")
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class CostEstimation(Base):
    __tablename__ = "cost_estimations"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    template_type: Mapped[TemplateType] = mapped_column(
        _enum_column(TemplateType, "template_type"), nullable=False
    )
    client_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), ForeignKey("clients.id"), nullable=True)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    apply_benefits: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    items: Mapped[list[dict[str, object]]] = mapped_column(JSONType, nullable=False, default=list)
    factors: Mapped[dict[str, object]] = mapped_column(JSONType, nullable=False, default=dict)
    breakdown: Mapped[dict[str, object]] = mapped_column(JSONType, nullable=False, default=dict)
    total_cost: Mapped[Decimal] = mapped_column(Numeric(16, 2), nullable=False)
    status: Mapped[EstimationStatus] = mapped_column(
        _enum_column(EstimationStatus, "estimation_status"), nullable=False, default=EstimationStatus.DRAFT
    )
    project_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("projects.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)


class AuditEvent(Base):
    __tablename__ = "audit_events"
    __table_args__ = (Index("ix_audit_events_entity", "entity_name", "entity_id"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    entity_name: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False)
    action_type: Mapped[str] = mapped_column(String(64), nullable=False)
    payload: Mapped[dict[str, object]] = mapped_column(JSONType, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
