from datetime import date

import pytest
from httpx import AsyncClient
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import DuplicateError, NoCurrentTermError, ValidationError
from src.modules.students.models import SchoolClass, Student
from src.modules.students.schemas import SchoolClassCreate, StudentAdmit, normalize_ghana_phone
from src.modules.students.service import StudentService, admission_prefix_for_term
from src.modules.terms.models import AcademicTerm


def _admit_data(class_id: int, **overrides) -> StudentAdmit:
    values = {
        "first_name": "Akosua",
        "last_name": "Boateng",
        "gender": "Female",
        "class_id": class_id,
        "guardian_name": "Yaw Boateng",
        "guardian_phone": "0241234567",
    }
    values.update(overrides)
    return StudentAdmit(**values)


class TestAdmissionPrefix:
    def test_prefix_from_term(self):
        term = AcademicTerm(academic_year="2024-2025", session="2nd Term")
        assert admission_prefix_for_term(term) == "24-T2-"

    def test_prefix_first_term(self):
        term = AcademicTerm(academic_year="2025-2026", session="1st Term")
        assert admission_prefix_for_term(term) == "25-T1-"


class TestPhoneNormalization:
    def test_local_format(self):
        assert normalize_ghana_phone("024 123 4567") == "+233241234567"

    def test_without_plus(self):
        assert normalize_ghana_phone("233241234567") == "+233241234567"

    def test_rejects_foreign(self):
        with pytest.raises(ValueError):
            normalize_ghana_phone("+254712345678")

    def test_schema_rejects_bad_phone(self):
        with pytest.raises(PydanticValidationError):
            _admit_data(1, guardian_phone="12345678901")


class TestStudentService:
    """Tests for StudentService."""

    async def test_create_class_duplicate_code(self, db_session: AsyncSession):
        service = StudentService(db_session)
        await service.create_class(SchoolClassCreate(code="KG1", name="KG 1"))

        with pytest.raises(DuplicateError):
            await service.create_class(SchoolClassCreate(code="KG1", name="Kindergarten 1"))

    async def test_admit_allocates_term_prefixed_ids(
        self, db_session: AsyncSession, session_factory, current_term, basic_one
    ):
        service = StudentService(db_session)

        first = await service.admit_student(
            _admit_data(basic_one.id), session_factory, admission_date=date(2025, 1, 8)
        )
        second = await service.admit_student(
            _admit_data(basic_one.id, first_name="Kwame"), session_factory
        )

        assert first.admission_id == "24-T2-0001"
        assert second.admission_id == "24-T2-0002"
        assert first.admission_year == "2024-2025"
        assert first.admission_term == "2nd Term"
        assert first.admission_date == date(2025, 1, 8)
        assert first.guardian_phone == "+233241234567"
        assert first.school_class.name == "Basic 1"

    async def test_admit_with_custom_prefix(
        self, db_session: AsyncSession, session_factory, current_term, basic_one
    ):
        service = StudentService(db_session)

        student = await service.admit_student(
            _admit_data(basic_one.id, admission_prefix="STU-"), session_factory
        )

        assert student.admission_id == "STU-0001"

    async def test_admit_without_current_term(
        self, db_session: AsyncSession, session_factory, basic_one
    ):
        service = StudentService(db_session)

        with pytest.raises(NoCurrentTermError):
            await service.admit_student(_admit_data(basic_one.id), session_factory)

    async def test_admit_into_inactive_class(
        self, db_session: AsyncSession, session_factory, current_term
    ):
        closed = SchoolClass(code="JHS4", name="JHS 4", is_active=False)
        db_session.add(closed)
        await db_session.commit()
        service = StudentService(db_session)

        with pytest.raises(ValidationError):
            await service.admit_student(_admit_data(closed.id), session_factory)

    def test_new_student_flag(self):
        student = Student(admission_year="2024-2025", admission_term="2nd Term")

        assert student.is_new_for("2024-2025", "2nd Term") is True
        assert student.is_new_for("2024-2025", "3rd Term") is False
        assert student.is_new_for("2025-2026", "2nd Term") is False


class TestStudentsAPI:
    async def test_admit_and_fetch(self, client: AsyncClient, current_term, basic_one):
        payload = {
            "first_name": "Efua",
            "last_name": "Asante",
            "gender": "Female",
            "class_id": basic_one.id,
            "guardian_name": "Ama Asante",
            "guardian_phone": "+233201112223",
        }

        first = await client.post("/api/v1/students", json=payload)
        second = await client.post("/api/v1/students", json={**payload, "first_name": "Esi"})

        assert first.status_code == 201
        assert first.json()["data"]["admission_id"] == "24-T2-0001"
        assert second.json()["data"]["admission_id"] == "24-T2-0002"
        assert first.json()["data"]["class_name"] == "Basic 1"

        student_id = first.json()["data"]["id"]
        fetched = await client.get(f"/api/v1/students/{student_id}")
        assert fetched.json()["data"]["full_name"] == "Efua Asante"

        listed = await client.get("/api/v1/students", params={"search": "Esi"})
        assert listed.json()["data"]["total"] == 1

    async def test_admit_without_current_term(self, client: AsyncClient, basic_one):
        response = await client.post(
            "/api/v1/students",
            json={
                "first_name": "Efua",
                "last_name": "Asante",
                "gender": "Female",
                "class_id": basic_one.id,
                "guardian_name": "Ama Asante",
                "guardian_phone": "+233201112223",
            },
        )
        assert response.status_code == 422
        assert response.json()["success"] is False
