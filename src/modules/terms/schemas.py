import re
from datetime import date, datetime

from pydantic import field_validator, model_validator

from src.modules.terms.models import parse_term_number
from src.shared.schemas import BaseSchema

_ACADEMIC_YEAR = re.compile(r"^(\d{4})-(\d{4})$")


def _validate_academic_year(v: str) -> str:
    match = _ACADEMIC_YEAR.match(v.strip())
    if not match:
        raise ValueError("Academic year must look like YYYY-YYYY")
    first, second = int(match.group(1)), int(match.group(2))
    if second != first + 1:
        raise ValueError("Academic year must span two consecutive years")
    return v.strip()


def _validate_session(v: str) -> str:
    number = parse_term_number(v)
    if number is None or number < 1:
        raise ValueError("Session must start with a positive term number, e.g. '1st Term'")
    return v.strip()


class TermCreate(BaseSchema):
    """Schema for creating a new academic term."""

    academic_year: str
    session: str
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("academic_year")
    @classmethod
    def validate_academic_year(cls, v: str) -> str:
        return _validate_academic_year(v)

    @field_validator("session")
    @classmethod
    def validate_session(cls, v: str) -> str:
        return _validate_session(v)

    @model_validator(mode="after")
    def validate_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date must not be before start date")
        return self


class TermUpdate(BaseSchema):
    """Schema for updating term dates. Year and session are fixed once created."""

    start_date: date | None = None
    end_date: date | None = None


class TermResponse(BaseSchema):
    """Schema for term response."""

    id: int
    academic_year: str
    session: str
    term_number: int
    display_name: str
    start_date: date | None
    end_date: date | None
    is_current: bool
    created_at: datetime
    updated_at: datetime
