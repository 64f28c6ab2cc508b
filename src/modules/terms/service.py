import logging

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import (
    DuplicateError,
    NoCurrentTermError,
    NotFoundError,
    ValidationError,
)
from src.modules.terms.models import AcademicTerm
from src.modules.terms.schemas import TermCreate, TermUpdate

logger = logging.getLogger(__name__)


class TermService:
    """Service for academic term management."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_term_by_id(self, term_id: int) -> AcademicTerm | None:
        result = await self.session.execute(select(AcademicTerm).where(AcademicTerm.id == term_id))
        return result.scalar_one_or_none()

    async def get_current_term(self) -> AcademicTerm | None:
        """Get the term flagged as current, if any."""
        result = await self.session.execute(
            select(AcademicTerm).where(AcademicTerm.is_current == True)
        )
        return result.scalar_one_or_none()

    async def require_current_term(self) -> AcademicTerm:
        term = await self.get_current_term()
        if not term:
            raise NoCurrentTermError()
        return term

    async def list_terms(self, academic_year: str | None = None) -> list[AcademicTerm]:
        """List terms, newest academic year first."""
        stmt = select(AcademicTerm).order_by(
            AcademicTerm.academic_year.desc(), AcademicTerm.session.desc()
        )
        if academic_year:
            stmt = stmt.where(AcademicTerm.academic_year == academic_year)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create_term(self, data: TermCreate) -> AcademicTerm:
        """Create a new term. New terms are never current until switched explicitly."""
        stmt = select(AcademicTerm).where(
            AcademicTerm.academic_year == data.academic_year,
            AcademicTerm.session == data.session,
        )
        result = await self.session.execute(stmt)
        if result.scalar_one_or_none():
            raise DuplicateError(
                "AcademicTerm", "academic_year/session", f"{data.academic_year} {data.session}"
            )

        term = AcademicTerm(
            academic_year=data.academic_year,
            session=data.session,
            start_date=data.start_date,
            end_date=data.end_date,
            is_current=False,
        )
        self.session.add(term)
        await self.session.flush()
        return term

    async def update_term(self, term_id: int, data: TermUpdate) -> AcademicTerm:
        """Update term dates."""
        term = await self.get_term_by_id(term_id)
        if not term:
            raise NotFoundError("AcademicTerm", term_id)

        start_date = data.start_date if data.start_date is not None else term.start_date
        end_date = data.end_date if data.end_date is not None else term.end_date
        if start_date and end_date and end_date < start_date:
            raise ValidationError("End date must not be before start date", field="end_date")

        term.start_date = start_date
        term.end_date = end_date
        await self.session.flush()
        await self.session.refresh(term)
        return term

    async def set_current_term(self, term_id: int) -> AcademicTerm:
        """
        Make a term the single current term.

        Clears the flag on every other term and sets it on the target within
        the caller's transaction, then checks exactly one term is current.
        Nothing is committed here; a failed check rolls the whole switch back.
        """
        term = await self.get_term_by_id(term_id)
        if not term:
            raise NotFoundError("AcademicTerm", term_id)

        await self.session.execute(
            update(AcademicTerm)
            .where(AcademicTerm.id != term_id, AcademicTerm.is_current == True)
            .values(is_current=False)
            .execution_options(synchronize_session="fetch")
        )
        term.is_current = True
        await self.session.flush()
        await self.session.refresh(term)

        current_count = await self.session.scalar(
            select(func.count()).select_from(AcademicTerm).where(AcademicTerm.is_current == True)
        )
        if current_count != 1:
            raise ValidationError(f"Expected exactly one current term, found {current_count}")

        logger.info("Current term set to %s (id=%s)", term.display_name, term.id)
        return term
