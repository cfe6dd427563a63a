"""Top-level API router."""

from fastapi import APIRouter

from hyr_admin.api.routes.calendar import router as calendar_router
from hyr_admin.api.routes.clients import router as clients_router
from hyr_admin.api.routes.contractors import router as contractors_router
from hyr_admin.api.routes.expenses import router as expenses_router
from hyr_admin.api.routes.exports import router as exports_router
from hyr_admin.api.routes.health import router as health_router
from hyr_admin.api.routes.invoices import router as invoices_router
from hyr_admin.api.routes.payroll import router as payroll_router
from hyr_admin.api.routes.personnel import router as personnel_router
from hyr_admin.api.routes.pila import router as pila_router
from hyr_admin.api.routes.projects import router as projects_router
from hyr_admin.api.routes.reports import router as reports_router
from hyr_admin.api.routes.settings import router as settings_router
from hyr_admin.api.routes.simulator import router as simulator_router
from hyr_admin.api.routes.time_entries import router as time_entries_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(clients_router)
api_router.include_router(projects_router)
api_router.include_router(expenses_router)
api_router.include_router(personnel_router)
api_router.include_router(time_entries_router)
api_router.include_router(payroll_router)
api_router.include_router(pila_router)
api_router.include_router(invoices_router)
api_router.include_router(contractors_router)
api_router.include_router(calendar_router)
api_router.include_router(settings_router)
api_router.include_router(simulator_router)
api_router.include_router(reports_router)
api_router.include_router(exports_router)
