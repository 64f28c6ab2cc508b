"""SchoolClass and Student models."""

from datetime import date, datetime
from enum import StrEnum

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.database.base import Base, BigIntPK


class Gender(StrEnum):
    """Gender enumeration."""

    MALE = "Male"
    FEMALE = "Female"


class StudentStatus(StrEnum):
    """Student lifecycle status."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    GRADUATED = "Graduated"


class SchoolClass(Base):
    """School class a student is enrolled in and fees are configured for.

    Examples: Creche, KG 1, Basic 1-6, JHS 1-3
    """

    __tablename__ = "school_classes"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)  # e.g. "B1"
    name: Mapped[str] = mapped_column(String(100), nullable=False)  # e.g. "Basic 1"
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)  # e.g. "Primary"
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    students: Mapped[list["Student"]] = relationship("Student", back_populates="school_class")


class Student(Base):
    """Admitted student."""

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    admission_id: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True
    )  # PREFIX-0001

    # Personal info
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)

    # Academic info
    class_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("school_classes.id"), nullable=False, index=True
    )
    admission_year: Mapped[str] = mapped_column(String(9), nullable=False, index=True)  # "2024-2025"
    admission_term: Mapped[str] = mapped_column(String(50), nullable=False)  # "1st Term"
    admission_date: Mapped[date] = mapped_column(Date, nullable=False)
    previous_school: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Guardian info
    guardian_name: Mapped[str] = mapped_column(String(200), nullable=False)
    guardian_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    guardian_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=StudentStatus.ACTIVE.value, index=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    school_class: Mapped["SchoolClass"] = relationship("SchoolClass", back_populates="students")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self) -> bool:
        return self.status == StudentStatus.ACTIVE.value

    def is_new_for(self, academic_year: str, session: str) -> bool:
        """A student is new in the term they were admitted in, continuing afterwards."""
        return self.admission_term == session and self.admission_year == academic_year
