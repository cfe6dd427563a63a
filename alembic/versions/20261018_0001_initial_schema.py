"""initial schema

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


client_type = postgresql.ENUM("company", "person", name="client_type", create_type=False)
project_type = postgresql.ENUM("construction", "welding", "mixed", name="project_type", create_type=False)
project_status = postgresql.ENUM(
    "planned", "in_progress", "paused", "completed", "cancelled", name="project_status", create_type=False
)
cost_category = postgresql.ENUM(
    "materials", "labor", "equipment", "overhead", name="cost_category", create_type=False
)
personnel_status = postgresql.ENUM("active", "inactive", name="personnel_status", create_type=False)
salary_type = postgresql.ENUM("monthly", "hourly", name="salary_type", create_type=False)
time_entry_status = postgresql.ENUM(
    "draft", "submitted", "approved", "rejected", "payroll_locked", name="time_entry_status", create_type=False
)
payroll_period_status = postgresql.ENUM(
    "draft", "processing", "completed", name="payroll_period_status", create_type=False
)
calendar_event_type = postgresql.ENUM(
    "payment", "deadline", "meeting", "tax", "payroll", "other", name="calendar_event_type", create_type=False
)
calendar_event_status = postgresql.ENUM(
    "pending", "completed", "cancelled", name="calendar_event_status", create_type=False
)
recurrence = postgresql.ENUM("none", "weekly", "monthly", "yearly", name="recurrence", create_type=False)
template_type = postgresql.ENUM("construction", "welding", name="template_type", create_type=False)
estimation_status = postgresql.ENUM("draft", "converted", name="estimation_status", create_type=False)
invoice_status = postgresql.ENUM("issued", "cancelled", name="invoice_status", create_type=False)
pila_status = postgresql.ENUM("generated", "submitted", "paid", name="pila_status", create_type=False)

ENUM_TYPES = (
    client_type,
    project_type,
    project_status,
    cost_category,
    personnel_status,
    salary_type,
    time_entry_status,
    payroll_period_status,
    calendar_event_type,
    calendar_event_status,
    recurrence,
    template_type,
    estimation_status,
    invoice_status,
    pila_status,
)


def _money(name: str, *, nullable: bool = False, default: bool = True) -> sa.Column:
    return sa.Column(
        name,
        sa.Numeric(14, 2),
        nullable=nullable,
        server_default=sa.text("0") if default and not nullable else None,
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    for enum_type in ENUM_TYPES:
        enum_type.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "clients",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("nit", sa.String(length=32), nullable=True, unique=True),
        sa.Column("client_type", client_type, nullable=False),
        sa.Column("contact_name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("city", sa.String(length=128), nullable=True),
        sa.Column("notes", sa.String(length=2000), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )

    op.create_table(
        "projects",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("client_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("clients.id"), nullable=True),
        sa.Column("description", sa.String(length=2000), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("project_type", project_type, nullable=False),
        sa.Column("status", project_status, nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("progress", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _money("budget_materials"),
        _money("budget_labor"),
        _money("budget_equipment"),
        _money("budget_overhead"),
        _money("budget_total"),
        _money("spent_materials"),
        _money("spent_labor"),
        _money("spent_equipment"),
        _money("spent_overhead"),
        _money("spent_total"),
        _money("total_income"),
        *_timestamps(),
        sa.CheckConstraint("progress >= 0 AND progress <= 100", name="ck_projects_progress_range"),
    )
    op.create_index("ix_projects_client_id", "projects", ["client_id"])
    op.create_index("ix_projects_status", "projects", ["status"])

    op.create_table(
        "budget_items",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("category", cost_category, nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("unit", sa.String(length=32), nullable=True),
        sa.Column("quantity", sa.Numeric(14, 3), nullable=False),
        _money("unit_price", default=False),
        _money("total", default=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_budget_items_project_id", "budget_items", ["project_id"])

    op.create_table(
        "personnel",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("document_type", sa.String(length=8), nullable=False, server_default="CC"),
        sa.Column("document_number", sa.String(length=32), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("position", sa.String(length=128), nullable=False),
        sa.Column("department", sa.String(length=128), nullable=False),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("hire_date", sa.Date(), nullable=False),
        sa.Column("termination_date", sa.Date(), nullable=True),
        sa.Column("status", personnel_status, nullable=False),
        sa.Column("salary_type", salary_type, nullable=False),
        _money("monthly_salary", nullable=True),
        _money("hourly_rate", nullable=True),
        _money("daily_rate", nullable=True),
        sa.Column("expected_arrival_time", sa.Time(), nullable=True),
        sa.Column("arl_risk_class", sa.String(length=3), nullable=True),
        sa.Column("transport_allowance_eligible", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("teleworking", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("fsp_exempt", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("eps", sa.String(length=128), nullable=True),
        sa.Column("pension_fund", sa.String(length=128), nullable=True),
        sa.Column("compensation_fund", sa.String(length=128), nullable=True),
        sa.Column("bank_name", sa.String(length=128), nullable=True),
        sa.Column("bank_account", sa.String(length=64), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "(salary_type = 'monthly' AND monthly_salary IS NOT NULL) "
            "OR (salary_type = 'hourly' AND hourly_rate IS NOT NULL)",
            name="ck_personnel_salary_matches_type",
        ),
    )
    op.create_index("ix_personnel_status", "personnel", ["status"])
    op.create_index("ix_personnel_department", "personnel", ["department"])

    op.create_table(
        "project_assignments",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("personnel_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("personnel.id"), nullable=False),
        sa.Column("role", sa.String(length=128), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_project_assignments_project_id", "project_assignments", ["project_id"])
    op.create_index("ix_project_assignments_personnel_id", "project_assignments", ["personnel_id"])

    op.create_table(
        "expenses",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id"), nullable=True),
        sa.Column("expense_date", sa.Date(), nullable=False),
        sa.Column("category", cost_category, nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        _money("amount", default=False),
        sa.Column("vendor", sa.String(length=255), nullable=True),
        sa.Column("invoice_number", sa.String(length=64), nullable=True),
        sa.Column("payment_method", sa.String(length=32), nullable=True),
        sa.Column("notes", sa.String(length=2000), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
    )
    op.create_index("ix_expenses_project_id", "expenses", ["project_id"])
    op.create_index("ix_expenses_expense_date", "expenses", ["expense_date"])

    op.create_table(
        "project_incomes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("income_date", sa.Date(), nullable=False),
        sa.Column("concept", sa.String(length=500), nullable=False),
        _money("amount", default=False),
        sa.Column("payment_method", sa.String(length=32), nullable=False, server_default="transfer"),
        sa.Column("invoice_number", sa.String(length=64), nullable=True),
        sa.Column("notes", sa.String(length=2000), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_project_incomes_amount_positive"),
    )
    op.create_index("ix_project_incomes_project_id", "project_incomes", ["project_id"])

    op.create_table(
        "payroll_periods",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("period_type", sa.String(length=16), nullable=False, server_default="monthly"),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", payroll_period_status, nullable=False),
        sa.Column("employee_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _money("total_gross"),
        _money("total_net"),
        _money("total_employer_cost"),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("year", "month", name="uq_payroll_periods_year_month"),
        sa.CheckConstraint("month >= 1 AND month <= 12", name="ck_payroll_periods_month_range"),
    )

    op.create_table(
        "time_entries",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("personnel_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("personnel.id"), nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("work_date", sa.Date(), nullable=False),
        sa.Column("arrival_time", sa.Time(), nullable=False),
        sa.Column("departure_time", sa.Time(), nullable=False),
        sa.Column("lunch_deducted", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("expected_arrival_time", sa.Time(), nullable=True),
        sa.Column("late_minutes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("penalized_late_minutes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("regular_hours", sa.Numeric(6, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("overtime_hours", sa.Numeric(6, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("night_hours", sa.Numeric(6, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("total_hours", sa.Numeric(6, 2), nullable=False, server_default=sa.text("0")),
        _money("hourly_rate"),
        _money("regular_pay"),
        _money("overtime_pay"),
        _money("night_pay"),
        _money("late_discount"),
        _money("total_pay"),
        sa.Column("status", time_entry_status, nullable=False),
        sa.Column(
            "payroll_period_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("payroll_periods.id"),
            nullable=True,
        ),
        sa.Column("description", sa.String(length=1000), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "personnel_id", "project_id", "work_date", name="uq_time_entries_personnel_project_date"
        ),
    )
    op.create_index("ix_time_entries_work_date", "time_entries", ["work_date"])
    op.create_index("ix_time_entries_personnel_id", "time_entries", ["personnel_id"])
    op.create_index("ix_time_entries_project_id", "time_entries", ["project_id"])
    op.create_index("ix_time_entries_payroll_period_id", "time_entries", ["payroll_period_id"])

    op.create_table(
        "payroll_details",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("period_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("payroll_periods.id"), nullable=False),
        sa.Column("personnel_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("personnel.id"), nullable=False),
        sa.Column("days_worked", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("regular_hours", sa.Numeric(8, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("overtime_hours", sa.Numeric(8, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("night_hours", sa.Numeric(8, 2), nullable=False, server_default=sa.text("0")),
        *[
            _money(name, default=False)
            for name in (
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
            )
        ],
        sa.Column("arl_risk_class", sa.String(length=3), nullable=False),
        *[
            _money(name, default=False)
            for name in (
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
        ],
        sa.Column("law_114_1_applied", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("cune", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("period_id", "personnel_id", name="uq_payroll_details_period_personnel"),
    )
    op.create_index("ix_payroll_details_period_id", "payroll_details", ["period_id"])

    op.create_table(
        "pila_submissions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("period", sa.String(length=7), nullable=False, unique=True),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("status", pila_status, nullable=False),
        sa.Column("employee_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_ibc", sa.Numeric(16, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("total_contributions", sa.Numeric(16, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("rows", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        *_timestamps(),
    )

    op.create_table(
        "electronic_invoices",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("invoice_number", sa.String(length=32), nullable=False, unique=True),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("client_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("clients.id"), nullable=True),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id"), nullable=True),
        sa.Column("client_name", sa.String(length=255), nullable=False),
        sa.Column("client_nit", sa.String(length=32), nullable=True),
        sa.Column("city", sa.String(length=128), nullable=False),
        sa.Column("activity", sa.String(length=32), nullable=False, server_default="construction"),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        _money("subtotal", default=False),
        sa.Column("vat_rate", sa.Numeric(6, 4), nullable=False),
        _money("vat_amount", default=False),
        sa.Column("reteica_rate", sa.Numeric(8, 5), nullable=False),
        _money("reteica_amount", default=False),
        _money("total_amount", default=False),
        sa.Column("line_items", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("cufe", sa.String(length=64), nullable=False, unique=True),
        sa.Column("xml_content", sa.Text(), nullable=False),
        sa.Column("status", invoice_status, nullable=False),
        sa.Column("notes", sa.String(length=2000), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_electronic_invoices_project_id", "electronic_invoices", ["project_id"])
    op.create_index("ix_electronic_invoices_issue_date", "electronic_invoices", ["issue_date"])

    op.create_table(
        "contractors",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("document_type", sa.String(length=8), nullable=False, server_default="CC"),
        sa.Column("document_number", sa.String(length=32), nullable=False, unique=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("city", sa.String(length=128), nullable=True),
        sa.Column("obligated_to_invoice", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("service_type", sa.String(length=32), nullable=False, server_default="general"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )

    op.create_table(
        "support_documents",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("ds_number", sa.String(length=32), nullable=False, unique=True),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("contractor_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("contractors.id"), nullable=False),
        sa.Column("concept", sa.String(length=500), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("service_type", sa.String(length=32), nullable=False),
        _money("base_amount", default=False),
        sa.Column("withholdings", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        _money("total_withholdings", default=False),
        _money("net_amount", default=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("year", "sequence", name="uq_support_documents_year_sequence"),
    )
    op.create_index("ix_support_documents_contractor_id", "support_documents", ["contractor_id"])

    op.create_table(
        "calendar_events",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=2000), nullable=True),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("event_time", sa.Time(), nullable=True),
        sa.Column("event_type", calendar_event_type, nullable=False),
        sa.Column("status", calendar_event_status, nullable=False),
        _money("amount", nullable=True),
        sa.Column("category", sa.String(length=64), nullable=True),
        sa.Column("recurrence", recurrence, nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id"), nullable=True),
        sa.Column("personnel_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("personnel.id"), nullable=True),
        sa.Column("notify_days_before", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_calendar_events_event_date", "calendar_events", ["event_date"])
    op.create_index("ix_calendar_events_status", "calendar_events", ["status"])

    op.create_table(
        "settings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("key", sa.String(length=100), nullable=False, unique=True),
        sa.Column("value", postgresql.JSONB(), nullable=False),
        sa.Column("category", sa.String(length=64), nullable=False, server_default="general"),
        sa.Column("description", sa.String(length=500), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "cost_estimations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=2000), nullable=True),
        sa.Column("template_type", template_type, nullable=False),
        sa.Column("client_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("clients.id"), nullable=True),
        sa.Column("duration_days", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("apply_benefits", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("items", postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("factors", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("breakdown", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("total_cost", sa.Numeric(16, 2), nullable=False),
        sa.Column("status", estimation_status, nullable=False),
        sa.Column("project_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("projects.id"), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "audit_events",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("entity_name", sa.String(length=64), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=False),
        sa.Column("action_type", sa.String(length=64), nullable=False),
        sa.Column("payload", postgresql.JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_events_entity", "audit_events", ["entity_name", "entity_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_events_entity", table_name="audit_events")
    op.drop_table("audit_events")
    op.drop_table("cost_estimations")
    op.drop_table("settings")

    op.drop_index("ix_calendar_events_status", table_name="calendar_events")
    op.drop_index("ix_calendar_events_event_date", table_name="calendar_events")
    op.drop_table("calendar_events")

    op.drop_index("ix_support_documents_contractor_id", table_name="support_documents")
    op.drop_table("support_documents")
    op.drop_table("contractors")

    op.drop_index("ix_electronic_invoices_issue_date", table_name="electronic_invoices")
    op.drop_index("ix_electronic_invoices_project_id", table_name="electronic_invoices")
    op.drop_table("electronic_invoices")
    op.drop_table("pila_submissions")

    op.drop_index("ix_payroll_details_period_id", table_name="payroll_details")
    op.drop_table("payroll_details")

    op.drop_index("ix_time_entries_payroll_period_id", table_name="time_entries")
    op.drop_index("ix_time_entries_project_id", table_name="time_entries")
    op.drop_index("ix_time_entries_personnel_id", table_name="time_entries")
    op.drop_index("ix_time_entries_work_date", table_name="time_entries")
    op.drop_table("time_entries")
    op.drop_table("payroll_periods")

    op.drop_index("ix_project_incomes_project_id", table_name="project_incomes")
    op.drop_table("project_incomes")
    op.drop_index("ix_expenses_expense_date", table_name="expenses")
    op.drop_index("ix_expenses_project_id", table_name="expenses")
    op.drop_table("expenses")

    op.drop_index("ix_project_assignments_personnel_id", table_name="project_assignments")
    op.drop_index("ix_project_assignments_project_id", table_name="project_assignments")
    op.drop_table("project_assignments")

    op.drop_index("ix_personnel_department", table_name="personnel")
    op.drop_index("ix_personnel_status", table_name="personnel")
    op.drop_table("personnel")

    op.drop_index("ix_budget_items_project_id", table_name="budget_items")
    op.drop_table("budget_items")
    op.drop_index("ix_projects_status", table_name="projects")
    op.drop_index("ix_projects_client_id", table_name="projects")
    op.drop_table("projects")
    op.drop_table("clients")

    for enum_type in reversed(ENUM_TYPES):
        enum_type.drop(op.get_bind(), checkfirst=True)
