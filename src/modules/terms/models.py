import re
from datetime import date

from sqlalchemy import Boolean, Date, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.core.database.base import BaseModel

_LEADING_NUMBER = re.compile(r"^\s*(\d+)")


def parse_term_number(session: str) -> int | None:
    """
    Leading integer of a session label.

    "1st Term" -> 1, "2nd Term" -> 2, "Third Term" -> None.
    """
    match = _LEADING_NUMBER.match(session or "")
    if not match:
        return None
    return int(match.group(1))


class AcademicTerm(BaseModel):
    """
    Academic term within an academic year (e.g. "2024-2025", "2nd Term").

    At most one term is current system-wide; TermService.set_current_term
    switches it in a single transaction. Terms referenced by payments should
    only have their is_current flag changed.
    """

    __tablename__ = "academic_terms"

    academic_year: Mapped[str] = mapped_column(String(9), nullable=False, index=True)  # "2024-2025"
    session: Mapped[str] = mapped_column(String(50), nullable=False)  # "1st Term"

    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    __table_args__ = (
        UniqueConstraint("academic_year", "session", name="uq_academic_term_year_session"),
    )

    @property
    def term_number(self) -> int:
        number = parse_term_number(self.session)
        if number is None:
            raise ValueError(f"Session label {self.session!r} has no term number")
        return number

    @property
    def display_name(self) -> str:
        return f"{self.session} {self.academic_year}"

    @property
    def first_year(self) -> int:
        return int(self.academic_year[:4])
