from src.core.exceptions.base import (
    AppException,
    NotFoundError,
    ValidationError,
    DuplicateError,
    NoCurrentTermError,
    PreconditionFailedError,
    DuplicatePayrollPeriodError,
    EmptyRosterError,
    AllocationConflictError,
    PayrollCommitError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "ValidationError",
    "DuplicateError",
    "NoCurrentTermError",
    "PreconditionFailedError",
    "DuplicatePayrollPeriodError",
    "EmptyRosterError",
    "AllocationConflictError",
    "PayrollCommitError",
]
