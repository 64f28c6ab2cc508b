from collections.abc import AsyncGenerator
from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.core.database.base import Base
from src.core.database import get_db, get_session_factory
from src.main import app
from src.modules.students.models import SchoolClass, Student
from src.modules.terms.models import AcademicTerm

# Test database URL (in-memory SQLite for speed, or use test PostgreSQL)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
test_async_session = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test and drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get test database session."""
    async with test_async_session() as session:
        yield session


@pytest.fixture
def session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Factory for code that opens its own transactions (admission ids).

    The in-memory database is a single shared connection, so commit
    db_session before handing this to the allocator.
    """
    return test_async_session


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Get test HTTP client with overridden database dependencies."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: test_async_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def current_term(db_session: AsyncSession) -> AcademicTerm:
    """2024-2025 2nd Term, set as current and committed."""
    term = AcademicTerm(
        academic_year="2024-2025",
        session="2nd Term",
        start_date=date(2025, 1, 7),
        end_date=date(2025, 4, 11),
        is_current=True,
    )
    db_session.add(term)
    await db_session.commit()
    return term


@pytest.fixture
async def basic_one(db_session: AsyncSession) -> SchoolClass:
    school_class = SchoolClass(code="B1", name="Basic 1", category="Primary", display_order=5)
    db_session.add(school_class)
    await db_session.commit()
    return school_class


@pytest.fixture
def make_student(db_session: AsyncSession):
    """Insert a student directly, bypassing admission id allocation."""
    counter = {"n": 0}

    async def _make(
        school_class: SchoolClass,
        *,
        admission_year: str = "2024-2025",
        admission_term: str = "2nd Term",
        first_name: str = "Ama",
        status: str = "Active",
    ) -> Student:
        counter["n"] += 1
        student = Student(
            admission_id=f"TEST-{counter['n']:04d}",
            first_name=first_name,
            last_name="Owusu",
            gender="Female",
            class_id=school_class.id,
            admission_year=admission_year,
            admission_term=admission_term,
            admission_date=date(2024, 9, 10),
            guardian_name="Kojo Owusu",
            guardian_phone="+233241234567",
            status=status,
        )
        db_session.add(student)
        await db_session.commit()
        return student

    return _make
