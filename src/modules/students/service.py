"""Service for Students module."""

import logging
from datetime import date

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from src.core.documents import SequentialIdAllocator
from src.core.exceptions import DuplicateError, NotFoundError, ValidationError
from src.modules.students.models import SchoolClass, Student, StudentStatus
from src.modules.students.schemas import SchoolClassCreate, StudentAdmit
from src.modules.terms.models import AcademicTerm
from src.modules.terms.service import TermService

logger = logging.getLogger(__name__)


def admission_prefix_for_term(term: AcademicTerm) -> str:
    """
    Admission id prefix for students admitted in ``term``.

    "2024-2025" / "2nd Term" -> "24-T2-", so ids read 24-T2-0001, 24-T2-0002, ...
    """
    return f"{term.academic_year[2:4]}-T{term.term_number}-"


class StudentService:
    """Service for managing classes, students and admissions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # --- Class Methods ---

    async def create_class(self, data: SchoolClassCreate) -> SchoolClass:
        """Create a new class."""
        existing = await self.db.execute(
            select(SchoolClass).where(SchoolClass.code == data.code)
        )
        if existing.scalar_one_or_none():
            raise DuplicateError("SchoolClass", "code", data.code)

        school_class = SchoolClass(
            code=data.code,
            name=data.name,
            category=data.category,
            display_order=data.display_order,
        )
        self.db.add(school_class)
        await self.db.commit()
        await self.db.refresh(school_class)
        return school_class

    async def get_class_by_id(self, class_id: int) -> SchoolClass:
        result = await self.db.execute(select(SchoolClass).where(SchoolClass.id == class_id))
        school_class = result.scalar_one_or_none()
        if not school_class:
            raise NotFoundError("SchoolClass", class_id)
        return school_class

    async def list_classes(self, include_inactive: bool = False) -> list[SchoolClass]:
        """List classes ordered by display_order."""
        query = select(SchoolClass).order_by(SchoolClass.display_order, SchoolClass.code)
        if not include_inactive:
            query = query.where(SchoolClass.is_active == True)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    # --- Student Methods ---

    async def _validate_class(self, class_id: int) -> SchoolClass:
        school_class = await self.get_class_by_id(class_id)
        if not school_class.is_active:
            raise ValidationError(f"Class '{school_class.name}' is not active", field="class_id")
        return school_class

    async def admit_student(
        self,
        data: StudentAdmit,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        admission_date: date | None = None,
    ) -> Student:
        """
        Admit a student into the current term.

        The admission id is allocated and the student row inserted in one
        transaction opened by the allocator, so concurrent admissions never
        share an id. The request session only reads here.
        """
        term = await TermService(self.db).require_current_term()
        await self._validate_class(data.class_id)
        prefix = data.admission_prefix or admission_prefix_for_term(term)

        def build_student(admission_id: str) -> Student:
            return Student(
                admission_id=admission_id,
                first_name=data.first_name,
                last_name=data.last_name,
                date_of_birth=data.date_of_birth,
                gender=data.gender.value,
                class_id=data.class_id,
                admission_year=term.academic_year,
                admission_term=term.session,
                admission_date=admission_date or date.today(),
                previous_school=data.previous_school,
                guardian_name=data.guardian_name,
                guardian_phone=data.guardian_phone,
                guardian_email=data.guardian_email,
                status=StudentStatus.ACTIVE.value,
                notes=data.notes,
            )

        allocator = SequentialIdAllocator(session_factory)
        student = await allocator.allocate(prefix, Student.admission_id, build_student)
        logger.info("Admitted student %s into %s", student.admission_id, term.display_name)

        return await self.get_student_by_id(student.id, with_relations=True)

    async def get_student_by_id(self, student_id: int, with_relations: bool = False) -> Student:
        """Get student by ID."""
        query = select(Student).where(Student.id == student_id)
        if with_relations:
            query = query.options(selectinload(Student.school_class))
        result = await self.db.execute(query)
        student = result.scalar_one_or_none()
        if not student:
            raise NotFoundError("Student", student_id)
        return student

    async def get_student_by_admission_id(self, admission_id: str) -> Student:
        result = await self.db.execute(
            select(Student)
            .where(Student.admission_id == admission_id)
            .options(selectinload(Student.school_class))
        )
        student = result.scalar_one_or_none()
        if not student:
            raise NotFoundError(f"Student with admission id '{admission_id}'")
        return student

    async def list_students(
        self,
        status: StudentStatus | None = None,
        class_id: int | None = None,
        admission_year: str | None = None,
        admission_term: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 100,
    ) -> tuple[list[Student], int]:
        """List students with optional filters."""
        query = (
            select(Student)
            .options(selectinload(Student.school_class))
            .order_by(Student.admission_id)
        )

        if status is not None:
            query = query.where(Student.status == status.value)
        if class_id is not None:
            query = query.where(Student.class_id == class_id)
        if admission_year is not None:
            query = query.where(Student.admission_year == admission_year)
        if admission_term is not None:
            query = query.where(Student.admission_term == admission_term)
        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(
                    Student.first_name.ilike(search_term),
                    Student.last_name.ilike(search_term),
                    Student.admission_id.ilike(search_term),
                    Student.guardian_name.ilike(search_term),
                    Student.guardian_phone.ilike(search_term),
                )
            )

        count_query = select(func.count()).select_from(query.subquery())
        total = (await self.db.execute(count_query)).scalar() or 0

        offset = (page - 1) * limit
        result = await self.db.execute(query.offset(offset).limit(limit))
        return list(result.scalars().all()), total

    async def list_active_students(self, class_id: int | None = None) -> list[Student]:
        """List all active students (for invoice lists and dashboards)."""
        query = (
            select(Student)
            .where(Student.status == StudentStatus.ACTIVE.value)
            .options(selectinload(Student.school_class))
            .order_by(Student.class_id, Student.last_name, Student.first_name)
        )
        if class_id is not None:
            query = query.where(Student.class_id == class_id)
        result = await self.db.execute(query)
        return list(result.scalars().all())
