import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["ACADEMY_TIMEZONE"] = "UTC"

from datetime import datetime, timezone
from typing import AsyncGenerator, Dict, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from academy.auth.models import User
from academy.auth.schemas import CurrentUser
from academy.auth.security import create_access_token, hash_password
from academy.core.enums import UserRole
from academy.core.models import Batch, BatchFacultyAssignment, Enrollment
from academy.db.session import Base, get_db
from academy.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "StrongPass123"
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)

# 2026-10-19 is a Monday
MONDAY_MORNING = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)
TUESDAY_MORNING = datetime(2026, 10, 20, 9, 30, tzinfo=timezone.utc)

WEEKDAY_SCHEDULE = {
    "monday": {"startTime": "10:00:00", "endTime": "12:00:00"},
    "wednesday": {"startTime": "14:00", "endTime": "16:30"},
}


@pytest_asyncio.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test; also overrides the FastAPI dependency."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest_asyncio.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_user(db_session: AsyncSession):
    counter = {"n": 0}

    async def _make(role: UserRole = UserRole.FACULTY, name: Optional[str] = None, status: str = "ACTIVE") -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"{role.value.title()} {n}",
            email=f"{role.value.lower()}{n}@example.com",
            password_hash=TEST_PASSWORD_HASH,
            role=role.value,
            status=status,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture()
def make_batch(db_session: AsyncSession):
    async def _make(title: str = "AutoCAD Morning", schedule: Optional[Dict] = None) -> Batch:
        batch = Batch(title=title, software="AutoCAD", mode="offline", schedule=schedule)
        db_session.add(batch)
        await db_session.commit()
        return batch

    return _make


@pytest.fixture()
def enroll(db_session: AsyncSession):
    async def _enroll(batch: Batch, *students: User) -> None:
        for student in students:
            db_session.add(Enrollment(batch_id=batch.id, student_id=student.id, status="active"))
        await db_session.commit()

    return _enroll


@pytest.fixture()
def assign(db_session: AsyncSession):
    async def _assign(batch: Batch, faculty: User) -> None:
        db_session.add(BatchFacultyAssignment(batch_id=batch.id, faculty_id=faculty.id))
        await db_session.commit()

    return _assign


@pytest_asyncio.fixture()
async def faculty(make_user) -> User:
    return await make_user(UserRole.FACULTY, name="Priya Faculty")


@pytest_asyncio.fixture()
async def admin(make_user) -> User:
    return await make_user(UserRole.ADMIN, name="Arun Admin")


def principal(user: User) -> CurrentUser:
    return CurrentUser(id=user.id, role=UserRole(user.role))


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(subject={"sub": str(user.id), "user_id": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}
