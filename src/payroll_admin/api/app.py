"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from payroll_admin import __version__
from payroll_admin.api.routes import (
    activities_router,
    approvals_router,
    health_router,
    payroll_router,
)
from payroll_admin.database import dispose_db, init_db
from payroll_admin.exceptions import (
    DuplicatePayrollItemError,
    EntityNotFoundError,
    InvalidApprovalPayloadError,
    InvalidInputError,
    InvalidTransitionError,
    MissingReasonError,
    PayrollError,
    PayrollPeriodLockedError,
)

logger = logging.getLogger(__name__)

# Domain error → HTTP status; anything else derived from PayrollError is a 400.
# 422 is a literal: its Starlette constant was renamed across releases.
ERROR_STATUS: list[tuple[type[PayrollError], int]] = [
    (EntityNotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicatePayrollItemError, status.HTTP_409_CONFLICT),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (PayrollPeriodLockedError, status.HTTP_409_CONFLICT),
    (InvalidInputError, 422),
    (InvalidApprovalPayloadError, 422),
    (MissingReasonError, 422),
]


def status_for(exc: PayrollError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    init_db()
    yield
    # Shutdown
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Payroll Admin API",
        description="Payroll computation and approval workflow",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(PayrollError)
    async def payroll_error_handler(request: Request, exc: PayrollError) -> JSONResponse:
        """Map typed domain failures to JSON error responses."""
        status_code = status_for(exc)
        logger.info("%s %s failed with %s: %s", request.method, request.url.path, exc.code, exc)
        return JSONResponse(
            status_code=status_code,
            content={"detail": str(exc), "code": exc.code},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(payroll_router, prefix="/api/v1")
    app.include_router(approvals_router, prefix="/api/v1")
    app.include_router(activities_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
