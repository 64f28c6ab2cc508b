"""API endpoints for Students module."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.database.session import get_db, get_session_factory
from src.modules.students.models import Student, StudentStatus
from src.modules.students.schemas import (
    SchoolClassCreate,
    SchoolClassResponse,
    StudentAdmit,
    StudentResponse,
)
from src.modules.students.service import StudentService
from src.shared.schemas.base import ApiResponse, PaginatedResponse

router = APIRouter(prefix="/students", tags=["Students"])


# --- Class Endpoints ---


@router.post(
    "/classes",
    response_model=ApiResponse[SchoolClassResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_class(data: SchoolClassCreate, db: AsyncSession = Depends(get_db)):
    """Create a new class."""
    service = StudentService(db)
    school_class = await service.create_class(data)
    return ApiResponse(
        success=True,
        message="Class created successfully",
        data=SchoolClassResponse.model_validate(school_class),
    )


@router.get("/classes", response_model=ApiResponse[list[SchoolClassResponse]])
async def list_classes(
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """List all classes."""
    service = StudentService(db)
    classes = await service.list_classes(include_inactive=include_inactive)
    return ApiResponse(
        success=True,
        data=[SchoolClassResponse.model_validate(c) for c in classes],
    )


# --- Student Endpoints ---


def _student_to_response(student: Student) -> StudentResponse:
    return StudentResponse(
        id=student.id,
        admission_id=student.admission_id,
        first_name=student.first_name,
        last_name=student.last_name,
        full_name=student.full_name,
        date_of_birth=student.date_of_birth,
        gender=student.gender,
        class_id=student.class_id,
        class_name=student.school_class.name if student.school_class else None,
        admission_year=student.admission_year,
        admission_term=student.admission_term,
        admission_date=student.admission_date,
        previous_school=student.previous_school,
        guardian_name=student.guardian_name,
        guardian_phone=student.guardian_phone,
        guardian_email=student.guardian_email,
        status=student.status,
        notes=student.notes,
    )


@router.post(
    "",
    response_model=ApiResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def admit_student(
    data: StudentAdmit,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Admit a student into the current term and allocate the next admission id."""
    service = StudentService(db)
    student = await service.admit_student(data, session_factory)
    return ApiResponse(
        success=True,
        message=f"Student admitted as {student.admission_id}",
        data=_student_to_response(student),
    )


@router.get("", response_model=ApiResponse[PaginatedResponse[StudentResponse]])
async def list_students(
    status_filter: StudentStatus | None = Query(None, alias="status"),
    class_id: int | None = Query(None),
    admission_year: str | None = Query(None),
    admission_term: str | None = Query(None),
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """List students with optional filters and pagination."""
    service = StudentService(db)
    students, total = await service.list_students(
        status=status_filter,
        class_id=class_id,
        admission_year=admission_year,
        admission_term=admission_term,
        search=search,
        page=page,
        limit=limit,
    )
    return ApiResponse(
        success=True,
        data=PaginatedResponse.create(
            items=[_student_to_response(s) for s in students],
            total=total,
            page=page,
            limit=limit,
        ),
    )


@router.get("/{student_id}", response_model=ApiResponse[StudentResponse])
async def get_student(student_id: int, db: AsyncSession = Depends(get_db)):
    """Get student by ID."""
    service = StudentService(db)
    student = await service.get_student_by_id(student_id, with_relations=True)
    return ApiResponse(success=True, data=_student_to_response(student))
