import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from academy.auth.models import User
from academy.core.enums import SessionStatus
from academy.core.models import Batch, BatchFacultyAssignment, Enrollment, Session
from academy.db.schema_check import ensure_tables
from academy.db.seed_demo import DEMO_BATCH_TITLE, seed_demo


@pytest.mark.asyncio
async def test_ensure_tables_creates_only_missing_tables() -> None:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    try:
        created = await ensure_tables(engine)
        assert {"users", "batches", "enrollments", "batch_faculty_assignments", "sessions", "attendances"} <= set(
            created
        )
        assert await ensure_tables(engine) == []
    finally:
        await engine.dispose()


async def _count(db: AsyncSession, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.asyncio
async def test_seed_demo_is_idempotent(db_session: AsyncSession) -> None:
    await seed_demo(db_session)
    await seed_demo(db_session)

    assert await _count(db_session, User) == 5
    assert await _count(db_session, Batch) == 1
    assert await _count(db_session, Enrollment) == 3
    assert await _count(db_session, BatchFacultyAssignment) == 1

    sessions = (await db_session.execute(select(Session))).scalars().all()
    assert len(sessions) == 1
    assert sessions[0].status == SessionStatus.SCHEDULED.value
    assert sessions[0].actual_start_at is None
    batch = (await db_session.execute(select(Batch))).scalar_one()
    assert batch.title == DEMO_BATCH_TITLE
