"""API routes."""

from payroll_admin.api.routes.activities import router as activities_router
from payroll_admin.api.routes.approvals import router as approvals_router
from payroll_admin.api.routes.health import router as health_router
from payroll_admin.api.routes.payroll import router as payroll_router

__all__ = ["activities_router", "approvals_router", "health_router", "payroll_router"]
