"""School billing and payroll FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import DBAPIError, IntegrityError

from src.core.config import settings
from src.core.database import engine
from src.core.exceptions import AppException
from src.core.exceptions.handlers import (
    app_exception_handler,
    http_exception_handler,
    sqlalchemy_db_error_handler,
    validation_exception_handler,
)
from src.core.logging_utils import configure_logging
from src.modules.dashboard.router import router as dashboard_router
from src.modules.expenses.router import router as expenses_router
from src.modules.fees.router import router as fees_router
from src.modules.invoices.router import router as invoices_router
from src.modules.payments.router import router as payments_router
from src.modules.payroll.router import router as payroll_router
from src.modules.students.router import router as students_router
from src.modules.terms.router import router as terms_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting School Billing (%s), currency %s", settings.app_env, settings.currency)
    yield
    await engine.dispose()
    logger.info("Database connections closed")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    configure_logging(settings.log_level)

    app = FastAPI(
        title="School Billing",
        description="Fees, invoices, admissions and payroll for a school in Ghana",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, sqlalchemy_db_error_handler)
    app.add_exception_handler(DBAPIError, sqlalchemy_db_error_handler)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    # Routers
    app.include_router(terms_router, prefix="/api/v1")
    app.include_router(students_router, prefix="/api/v1")
    app.include_router(fees_router, prefix="/api/v1")
    app.include_router(payments_router, prefix="/api/v1")
    app.include_router(invoices_router, prefix="/api/v1")
    app.include_router(payroll_router, prefix="/api/v1")
    app.include_router(expenses_router, prefix="/api/v1")
    app.include_router(dashboard_router, prefix="/api/v1")

    return app


app = create_app()
