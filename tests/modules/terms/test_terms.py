from datetime import date

import pytest
from httpx import AsyncClient
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import DuplicateError, NoCurrentTermError, ValidationError
from src.modules.terms.models import AcademicTerm, parse_term_number
from src.modules.terms.schemas import TermCreate, TermUpdate
from src.modules.terms.service import TermService


class TestTermNumber:
    """Tests for parsing the term number out of a session label."""

    def test_leading_integer(self):
        assert parse_term_number("1st Term") == 1
        assert parse_term_number("2nd Term") == 2
        assert parse_term_number(" 3rd Term") == 3

    def test_unparsable(self):
        assert parse_term_number("Third Term") is None
        assert parse_term_number("") is None

    def test_term_number_not_assumed_for_unparsable_label(self):
        term = AcademicTerm(academic_year="2024-2025", session="Third Term")

        with pytest.raises(ValueError, match="Third Term"):
            term.term_number


class TestTermSchemas:
    def test_academic_year_must_be_consecutive(self):
        with pytest.raises(PydanticValidationError):
            TermCreate(academic_year="2024-2026", session="1st Term")

    def test_session_needs_term_number(self):
        with pytest.raises(PydanticValidationError):
            TermCreate(academic_year="2024-2025", session="Third Term")

    def test_dates_in_order(self):
        with pytest.raises(PydanticValidationError):
            TermCreate(
                academic_year="2024-2025",
                session="1st Term",
                start_date=date(2024, 12, 1),
                end_date=date(2024, 9, 1),
            )


class TestTermService:
    """Tests for TermService."""

    async def test_create_term(self, db_session: AsyncSession):
        service = TermService(db_session)

        term = await service.create_term(TermCreate(academic_year="2024-2025", session="2nd Term"))

        assert term.id is not None
        assert term.term_number == 2
        assert term.display_name == "2nd Term 2024-2025"
        assert term.is_current is False

    async def test_create_term_duplicate(self, db_session: AsyncSession):
        service = TermService(db_session)
        await service.create_term(TermCreate(academic_year="2024-2025", session="1st Term"))

        with pytest.raises(DuplicateError):
            await service.create_term(TermCreate(academic_year="2024-2025", session="1st Term"))

    async def test_set_current_clears_others(self, db_session: AsyncSession):
        service = TermService(db_session)
        first = await service.create_term(TermCreate(academic_year="2024-2025", session="1st Term"))
        second = await service.create_term(TermCreate(academic_year="2024-2025", session="2nd Term"))

        await service.set_current_term(first.id)
        await service.set_current_term(second.id)

        current = (
            await db_session.execute(select(AcademicTerm).where(AcademicTerm.is_current == True))
        ).scalars().all()
        assert [t.id for t in current] == [second.id]
        assert (await service.get_current_term()).id == second.id

    async def test_set_current_twice_is_stable(self, db_session: AsyncSession):
        service = TermService(db_session)
        term = await service.create_term(TermCreate(academic_year="2024-2025", session="1st Term"))

        await service.set_current_term(term.id)
        again = await service.set_current_term(term.id)

        assert again.is_current is True

    async def test_require_current_term_when_none(self, db_session: AsyncSession):
        service = TermService(db_session)

        with pytest.raises(NoCurrentTermError):
            await service.require_current_term()

    async def test_update_rejects_inverted_dates(self, db_session: AsyncSession):
        service = TermService(db_session)
        term = await service.create_term(
            TermCreate(academic_year="2024-2025", session="1st Term", start_date=date(2024, 9, 9))
        )

        with pytest.raises(ValidationError):
            await service.update_term(term.id, TermUpdate(end_date=date(2024, 8, 1)))


class TestTermsAPI:
    async def test_create_and_switch_current(self, client: AsyncClient):
        created = await client.post(
            "/api/v1/terms",
            json={"academic_year": "2024-2025", "session": "1st Term"},
        )
        assert created.status_code == 201
        term_id = created.json()["data"]["id"]

        switched = await client.post(f"/api/v1/terms/{term_id}/set-current")
        assert switched.status_code == 200
        assert switched.json()["data"]["is_current"] is True

        current = await client.get("/api/v1/terms/current")
        assert current.json()["data"]["id"] == term_id
        assert current.json()["data"]["term_number"] == 1

    async def test_invalid_session_label(self, client: AsyncClient):
        response = await client.post(
            "/api/v1/terms",
            json={"academic_year": "2024-2025", "session": "Third Term"},
        )
        assert response.status_code == 422
        assert response.json()["success"] is False

    async def test_unknown_term(self, client: AsyncClient):
        response = await client.get("/api/v1/terms/999")
        assert response.status_code == 404
