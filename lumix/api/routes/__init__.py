"""API route modules."""

from lumix.api.routes.health import router as health_router
from lumix.api.routes.invoices import router as invoices_router
from lumix.api.routes.payroll import router as payroll_router
from lumix.api.routes.reports import router as reports_router

__all__ = [
    "health_router",
    "invoices_router",
    "payroll_router",
    "reports_router",
]
