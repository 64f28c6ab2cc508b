import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.core.config import settings
from src.core.exceptions import AppException
from src.shared.schemas import ErrorResponse, ErrorDetail

logger = logging.getLogger(__name__)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render an AppException in the error envelope, keeping its reason."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s", exc.message, request.method, request.url.path)
    field = exc.details.get("field")
    errors = [ErrorDetail(field=field, message=exc.message)]

    response = ErrorResponse(
        message=exc.message,
        errors=errors,
        reason=exc.details.get("reason"),
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=response.model_dump(),
    )


def _format_validation_errors(errors: list[dict]) -> list[ErrorDetail]:
    details: list[ErrorDetail] = []
    for error in errors:
        loc = error.get("loc", ())
        # Drop top-level "body" for cleaner field paths
        if loc and loc[0] == "body":
            loc = loc[1:]
        field = ".".join(str(part) for part in loc) if loc else None
        details.append(ErrorDetail(field=field, message=error.get("msg", "Invalid value")))
    return details


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI validation errors."""
    response = ErrorResponse(
        message="Validation error",
        errors=_format_validation_errors(exc.errors()),
    )
    return JSONResponse(
        status_code=422,
        content=response.model_dump(),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle generic HTTP exceptions."""
    errors = [ErrorDetail(field=None, message=str(exc.detail) if exc.detail else "HTTP error")]
    response = ErrorResponse(
        message=str(exc.detail) if exc.detail else "HTTP error",
        errors=errors,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=response.model_dump(),
    )


# Constraint name -> (message, reason, status)
_CONSTRAINT_MESSAGES: dict[str, tuple[str, str | None, int]] = {
    "uq_payroll_run_period": ("Payroll for this period has already been processed", "duplicate period", 409),
    "uq_fee_structure_class_term": ("A fee structure for this class and term already exists", None, 409),
    "uq_fee_structure_item": ("Each fee item may appear only once in a structure", None, 409),
    "uq_academic_term_year_session": ("This academic term already exists", None, 409),
    "uq_expense_category_name_type": ("An expense category with this name already exists", None, 409),
}


def _friendly_db_error(exc: Exception) -> tuple[str, str | None, int]:
    """
    Map a database error to (message, reason, status code).

    Full DB error details are only exposed when debug is enabled.
    """
    raw = str(getattr(exc, "orig", exc))
    lower = raw.lower()

    for constraint, mapped in _CONSTRAINT_MESSAGES.items():
        if constraint in lower:
            return mapped

    if "does not exist" in lower and ("column" in lower or "relation" in lower):
        return (
            "Database schema is out of date. Run the latest migrations and try again.",
            None,
            500,
        )

    if "unique" in lower or "duplicate key" in lower:
        return ("A record with the same unique value already exists", None, 409)

    if "foreign key" in lower:
        return ("A referenced record does not exist", None, 422)

    if settings.debug:
        return (raw, None, 500)

    return ("Database error", None, 500)


async def sqlalchemy_db_error_handler(request: Request, exc: Exception) -> JSONResponse:
    message, reason, status_code = _friendly_db_error(exc)
    if status_code >= 500:
        logger.error("Unhandled database error on %s %s", request.method, request.url.path, exc_info=exc)
    else:
        logger.info("Database rejected %s %s: %s", request.method, request.url.path, message)
    response = ErrorResponse(
        message=message,
        errors=[ErrorDetail(message=message)],
        reason=reason,
    )
    return JSONResponse(status_code=status_code, content=response.model_dump())
