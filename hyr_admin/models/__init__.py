"""ORM model package."""

from hyr_admin.models.entities import (
    AuditEvent,
    BudgetItem,
    CalendarEvent,
    Client,
    Contractor,
    CostEstimation,
    ElectronicInvoice,
    Expense,
    PayrollDetail,
    PayrollPeriod,
    Personnel,
    PilaSubmission,
    Project,
    ProjectAssignment,
    ProjectIncome,
    Setting,
    SupportDocument,
    TimeEntry,
)

__all__ = [
    "AuditEvent",
    "BudgetItem",
    "CalendarEvent",
    "Client",
    "Contractor",
    "CostEstimation",
    "ElectronicInvoice",
    "Expense",
    "PayrollDetail",
    "PayrollPeriod",
    "Personnel",
    "PilaSubmission",
    "Project",
    "ProjectAssignment",
    "ProjectIncome",
    "Setting",
    "SupportDocument",
    "TimeEntry",
]
