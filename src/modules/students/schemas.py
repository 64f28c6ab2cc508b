"""Schemas for Students module."""

import re
from datetime import date

from pydantic import BaseModel, Field, field_validator

from src.modules.students.models import Gender, StudentStatus


# Ghana phone: +233 followed by 9 digits
GHANA_PHONE_REGEX = re.compile(r"^\+233[0-9]{9}$")


def normalize_ghana_phone(v: str) -> str:
    normalized = v.replace(" ", "").replace("-", "")

    # 0241234567 -> +233241234567
    if normalized.startswith("0") and len(normalized) == 10:
        normalized = "+233" + normalized[1:]

    if normalized.startswith("233") and len(normalized) == 12:
        normalized = "+" + normalized

    if not GHANA_PHONE_REGEX.match(normalized):
        raise ValueError("Phone must be in Ghana format: +233XXXXXXXXX (e.g., +233241234567)")
    return normalized


# --- School Class Schemas ---


class SchoolClassCreate(BaseModel):
    """Schema for creating a class."""

    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=100)
    category: str | None = Field(None, max_length=50)
    display_order: int = Field(0, ge=0)


class SchoolClassResponse(BaseModel):
    """Schema for class response."""

    id: int
    code: str
    name: str
    category: str | None
    display_order: int
    is_active: bool

    model_config = {"from_attributes": True}


# --- Student Schemas ---


class StudentAdmit(BaseModel):
    """
    Schema for admitting a student into the current term.

    ``admission_prefix`` overrides the term-derived prefix ("24-T1-").
    """

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: date | None = None
    gender: Gender
    class_id: int
    guardian_name: str = Field(..., min_length=1, max_length=200)
    guardian_phone: str = Field(..., min_length=10, max_length=20)
    guardian_email: str | None = Field(None, max_length=255)
    previous_school: str | None = Field(None, max_length=200)
    notes: str | None = None
    admission_prefix: str | None = Field(None, min_length=1, max_length=30)

    @field_validator("guardian_phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return normalize_ghana_phone(v)


class StudentResponse(BaseModel):
    """Schema for student response."""

    id: int
    admission_id: str
    first_name: str
    last_name: str
    full_name: str
    date_of_birth: date | None
    gender: str
    class_id: int
    class_name: str | None = None
    admission_year: str
    admission_term: str
    admission_date: date
    previous_school: str | None
    guardian_name: str
    guardian_phone: str
    guardian_email: str | None
    status: StudentStatus
    notes: str | None

    model_config = {"from_attributes": True}
