from typing import Any


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with id={identifier} not found"
        super().__init__(message=message, status_code=404)


class ValidationError(AppException):
    """Validation error."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, status_code=422, details=details)


class DuplicateError(AppException):
    """Duplicate resource."""

    def __init__(self, resource: str, field: str, value: Any):
        message = f"{resource} with {field}={value} already exists"
        super().__init__(message=message, status_code=409, details={"field": field, "value": value})


class NoCurrentTermError(AppException):
    """An operation needs the current academic term and none is set."""

    def __init__(self, message: str = "No academic term is set as current"):
        super().__init__(message=message, status_code=422)


class PreconditionFailedError(AppException):
    """A named precondition failed before any side effect took place."""

    def __init__(self, reason: str, message: str, status_code: int = 409, **details: Any):
        self.reason = reason
        super().__init__(
            message=message,
            status_code=status_code,
            details={"reason": reason, **details},
        )


class DuplicatePayrollPeriodError(PreconditionFailedError):
    """A payroll run already exists for the requested period."""

    def __init__(self, month: int, year: int):
        super().__init__(
            reason="duplicate period",
            message=f"Payroll for {year}-{month:02d} has already been processed",
            month=month,
            year=year,
        )


class EmptyRosterError(PreconditionFailedError):
    """There is nobody to pay."""

    def __init__(self):
        super().__init__(
            reason="no active staff",
            message="There are no active staff members to process payroll for",
            status_code=422,
        )


class AllocationConflictError(AppException):
    """Sequential id allocation kept conflicting with concurrent writers."""

    def __init__(self, prefix: str, attempts: int):
        message = f"Could not allocate an id for prefix '{prefix}' after {attempts} attempts"
        super().__init__(
            message=message,
            status_code=409,
            details={"prefix": prefix, "attempts": attempts},
        )


class PayrollCommitError(AppException):
    """The payroll commit failed and was rolled back as a whole."""

    def __init__(self, month: int, year: int):
        message = f"Payroll for {year}-{month:02d} could not be saved; no changes were made"
        super().__init__(message=message, status_code=500, details={"month": month, "year": year})
