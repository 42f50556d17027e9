# exam_logistics/tests/conftest.py

import os

os.environ.setdefault("ENVIRONMENT", "testing")

import random
import pytest
import pytest_asyncio
from typing import AsyncGenerator, Optional
from uuid import uuid4
from datetime import date

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from ..main import app
from ..api.deps import db_session as db_session_dependency
from ..config import TestingSettings
from ..database import db_manager
from ..engine import (
    Designation,
    ExamSlotRecord,
    ProfessorRecord,
    RoomRecord,
    Shift,
    StudentRecord,
)
from ..models import (
    Base,
    ExamSchedule,
    Professor,
    Room,
    Student,
    Subject,
)


TEST_DATABASE_URL = TestingSettings().DATABASE_URL


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source so randomized paths are reproducible."""
    return random.Random(1234)


# ---------------------------------------------------------------------------
# In-memory engine records for allocator unit tests
# ---------------------------------------------------------------------------


def make_professor(
    name: str, designation: Optional[Designation], duty_count: int = 0
) -> ProfessorRecord:
    return ProfessorRecord(
        id=uuid4(), name=name, designation=designation, duty_count=duty_count
    )


def make_room(number: str, capacity: int, is_active: bool = True) -> RoomRecord:
    return RoomRecord(id=uuid4(), number=number, capacity=capacity, is_active=is_active)


def make_slot(
    day: date, shift: Shift = Shift.MORNING, is_active: bool = True
) -> ExamSlotRecord:
    return ExamSlotRecord(
        id=uuid4(),
        date=day,
        shift=shift,
        start_time="09:00",
        end_time="12:00",
        is_active=is_active,
    )


def make_students(
    count: int, section: str = "A", semester: int = 3, branch: str = "CSE", start: int = 1
):
    return [
        StudentRecord(
            id=uuid4(),
            usn=f"1XX{branch}{semester}{section}{i:03d}",
            section=section,
            semester=semester,
            branch=branch,
        )
        for i in range(start, start + count)
    ]


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory database with every table created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    async_session_maker = async_sessionmaker(
        test_engine, expire_on_commit=False, class_=AsyncSession
    )
    async with async_session_maker() as session:
        yield session


class RosterFactory:
    """Creates committed rows for integration tests."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def professor(
        self,
        designation: str = Designation.ASSISTANT_PROFESSOR.value,
        name: Optional[str] = None,
        duty_count: int = 0,
    ) -> Professor:
        n = self._next()
        professor = Professor(
            name=name or f"Professor {n}",
            email=f"prof{n}@college.edu",
            designation=designation,
            department="CSE",
            duty_count=duty_count,
        )
        return await self._save(professor)

    async def room(self, number: str, capacity: int, is_active: bool = True) -> Room:
        return await self._save(
            Room(number=number, capacity=capacity, building="Main", is_active=is_active)
        )

    async def schedule(
        self, day: date, shift: Shift = Shift.MORNING, is_active: bool = True
    ) -> ExamSchedule:
        return await self._save(
            ExamSchedule(
                date=day,
                shift=shift,
                start_time="09:30",
                end_time="12:30",
                is_active=is_active,
            )
        )

    async def subject(self, code: str, semester: int, branch: str = "CSE") -> Subject:
        return await self._save(
            Subject(code=code, name=f"Subject {code}", semester=semester, branch=branch)
        )

    async def students(
        self,
        count: int,
        section: str = "A",
        semester: int = 3,
        branch: str = "CSE",
    ):
        created = []
        for _ in range(count):
            n = self._next()
            created.append(
                Student(
                    name=f"Student {n}",
                    usn=f"1XX{semester}{branch}{section}{n:04d}",
                    branch=branch,
                    section=section,
                    semester=semester,
                )
            )
        self.session.add_all(created)
        await self.session.commit()
        return created

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj


@pytest_asyncio.fixture
async def factory(db_session: AsyncSession) -> RosterFactory:
    return RosterFactory(db_session)


@pytest_asyncio.fixture
async def client(
    test_engine, db_session: AsyncSession
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client whose requests share the test session."""
    db_manager.bind(test_engine)

    async def override_db_session():
        yield db_session

    app.dependency_overrides[db_session_dependency] = override_db_session

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://testserver"
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    db_manager._is_initialized = False
    db_manager.engine = None
    db_manager.AsyncSessionLocal = None
