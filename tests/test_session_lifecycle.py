from datetime import date, time, timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.api.v1.sessions import service
from academy.core.enums import SessionStatus, UserRole
from academy.core.exceptions import ConflictError, InvalidStateError, NotFoundError, UnauthorizedBatchError
from academy.core.models import Batch, Session

from conftest import MONDAY_MORNING, TUESDAY_MORNING, WEEKDAY_SCHEDULE, principal


async def _running_count(db: AsyncSession, faculty_id: int) -> int:
    result = await db.execute(
        select(func.count(Session.id)).where(
            Session.faculty_id == faculty_id,
            Session.actual_start_at.is_not(None),
            Session.actual_end_at.is_(None),
        )
    )
    return result.scalar_one()


@pytest.mark.asyncio
async def test_start_creates_ongoing_session_with_scheduled_times(
    db_session: AsyncSession, faculty, make_batch, assign
) -> None:
    batch = await make_batch(schedule=WEEKDAY_SCHEDULE)
    await assign(batch, faculty)

    session = await service.start_session(
        db_session, batch.id, principal(faculty), topic="Layers and blocks", now=MONDAY_MORNING
    )

    assert session.batch_id == batch.id
    assert session.faculty_id == faculty.id
    assert session.status == SessionStatus.ONGOING.value
    assert session.date == date(2026, 10, 19)
    assert session.start_time == time(10, 0)
    assert session.end_time == time(12, 0)
    assert session.topic == "Layers and blocks"
    assert session.actual_start_at is not None
    assert session.actual_end_at is None


@pytest.mark.asyncio
async def test_short_time_format_in_schedule_is_accepted(
    db_session: AsyncSession, faculty, make_batch, assign
) -> None:
    batch = await make_batch(schedule=WEEKDAY_SCHEDULE)
    await assign(batch, faculty)
    wednesday = MONDAY_MORNING + timedelta(days=2)

    session = await service.start_session(db_session, batch.id, principal(faculty), now=wednesday)

    assert session.start_time == time(14, 0)
    assert session.end_time == time(16, 30)


@pytest.mark.asyncio
@pytest.mark.parametrize("schedule", [None, {"tuesday": {"startTime": "10:00:00", "endTime": "12:00:00"}}])
async def test_unscheduled_day_defaults_to_midnight(
    db_session: AsyncSession, faculty, make_batch, assign, schedule
) -> None:
    batch = await make_batch(schedule=schedule)
    await assign(batch, faculty)

    session = await service.start_session(db_session, batch.id, principal(faculty), now=MONDAY_MORNING)

    assert session.start_time == time(0, 0, 0)
    assert session.end_time == time(0, 0, 0)
    assert session.status == SessionStatus.ONGOING.value


def test_unparsable_schedule_time_falls_back_to_midnight() -> None:
    batch = Batch(id=1, title="Broken", schedule={"monday": {"startTime": "ten o'clock", "endTime": "12:00"}})
    start, end = service.scheduled_times_for(batch, date(2026, 10, 19))
    assert start == time(0, 0)
    assert end == time(12, 0)


@pytest.mark.asyncio
async def test_second_batch_start_conflicts_naming_running_batch(
    db_session: AsyncSession, faculty, make_batch, assign
) -> None:
    first = await make_batch("AutoCAD Morning")
    second = await make_batch("Revit Evening")
    await assign(first, faculty)
    await assign(second, faculty)
    await service.start_session(db_session, first.id, principal(faculty), now=MONDAY_MORNING)

    with pytest.raises(ConflictError) as exc_info:
        await service.start_session(db_session, second.id, principal(faculty), now=MONDAY_MORNING)

    assert exc_info.value.status_code == 400
    assert '"AutoCAD Morning"' in exc_info.value.message
    assert f"Batch #{first.id}" in exc_info.value.message
    assert await _running_count(db_session, faculty.id) == 1


@pytest.mark.asyncio
async def test_starting_same_batch_twice_is_rejected(
    db_session: AsyncSession, faculty, make_batch, assign
) -> None:
    batch = await make_batch()
    await assign(batch, faculty)
    await service.start_session(db_session, batch.id, principal(faculty), now=MONDAY_MORNING)

    with pytest.raises(ConflictError):
        await service.start_session(db_session, batch.id, principal(faculty), now=MONDAY_MORNING)

    total = (await db_session.execute(select(func.count(Session.id)))).scalar_one()
    assert total == 1


@pytest.mark.asyncio
async def test_scheduled_session_is_resumed_in_place(
    db_session: AsyncSession, faculty, make_batch, assign
) -> None:
    batch = await make_batch(schedule=WEEKDAY_SCHEDULE)
    await assign(batch, faculty)
    scheduled = Session(
        batch_id=batch.id,
        faculty_id=faculty.id,
        date=date(2026, 10, 19),
        start_time=time(0, 0),
        end_time=time(0, 0),
        topic="Dimensioning",
        status=SessionStatus.SCHEDULED.value,
    )
    db_session.add(scheduled)
    await db_session.commit()

    session = await service.start_session(db_session, batch.id, principal(faculty), now=MONDAY_MORNING)

    assert session.id == scheduled.id
    assert session.status == SessionStatus.ONGOING.value
    assert session.actual_start_at is not None
    assert session.start_time == time(10, 0)
    assert session.end_time == time(12, 0)
    assert session.topic == "Dimensioning"
    total = (await db_session.execute(select(func.count(Session.id)))).scalar_one()
    assert total == 1


@pytest.mark.asyncio
async def test_start_after_end_creates_a_new_session(
    db_session: AsyncSession, faculty, make_batch, assign
) -> None:
    batch = await make_batch()
    await assign(batch, faculty)
    first = await service.start_session(db_session, batch.id, principal(faculty), now=MONDAY_MORNING)
    await service.end_session(db_session, first.id, principal(faculty), now=MONDAY_MORNING + timedelta(hours=2))

    second = await service.start_session(
        db_session, batch.id, principal(faculty), now=MONDAY_MORNING + timedelta(hours=3)
    )

    assert second.id != first.id
    assert await _running_count(db_session, faculty.id) == 1


@pytest.mark.asyncio
async def test_running_session_from_another_day_does_not_block(
    db_session: AsyncSession, faculty, make_batch, assign
) -> None:
    batch = await make_batch()
    await assign(batch, faculty)
    await service.start_session(db_session, batch.id, principal(faculty), now=MONDAY_MORNING)

    session = await service.start_session(db_session, batch.id, principal(faculty), now=TUESDAY_MORNING)
    assert session.date == date(2026, 10, 20)


@pytest.mark.asyncio
async def test_end_completes_session_and_second_end_fails(
    db_session: AsyncSession, faculty, make_batch, assign
) -> None:
    batch = await make_batch()
    await assign(batch, faculty)
    started = await service.start_session(db_session, batch.id, principal(faculty), now=MONDAY_MORNING)

    ended = await service.end_session(db_session, started.id, principal(faculty))
    assert ended.status == SessionStatus.COMPLETED.value
    assert ended.actual_end_at is not None
    assert ended.actual_start_at is not None

    with pytest.raises(InvalidStateError) as exc_info:
        await service.end_session(db_session, started.id, principal(faculty))
    assert exc_info.value.message == "Session already ended"


@pytest.mark.asyncio
async def test_end_requires_started_session(
    db_session: AsyncSession, faculty, make_batch, assign
) -> None:
    batch = await make_batch()
    await assign(batch, faculty)
    scheduled = Session(
        batch_id=batch.id,
        faculty_id=faculty.id,
        date=date(2026, 10, 19),
        start_time=time(0, 0),
        end_time=time(0, 0),
    )
    db_session.add(scheduled)
    await db_session.commit()

    with pytest.raises(InvalidStateError) as exc_info:
        await service.end_session(db_session, scheduled.id, principal(faculty))
    assert exc_info.value.message == "Session has not been started yet"
    await db_session.refresh(scheduled)
    assert scheduled.actual_end_at is None


@pytest.mark.asyncio
async def test_missing_session_and_batch_are_not_found(db_session: AsyncSession, admin) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        await service.end_session(db_session, 404, principal(admin))
    assert exc_info.value.message == "Session not found"

    with pytest.raises(NotFoundError) as exc_info:
        await service.start_session(db_session, 404, principal(admin), now=MONDAY_MORNING)
    assert exc_info.value.message == "Batch not found"


@pytest.mark.asyncio
async def test_unassigned_faculty_cannot_start_or_end(
    db_session: AsyncSession, faculty, make_user, make_batch, assign
) -> None:
    batch = await make_batch()
    owner = await make_user(UserRole.FACULTY)
    await assign(batch, owner)
    started = await service.start_session(db_session, batch.id, principal(owner), now=MONDAY_MORNING)

    with pytest.raises(UnauthorizedBatchError):
        await service.start_session(db_session, batch.id, principal(faculty), now=MONDAY_MORNING)
    with pytest.raises(UnauthorizedBatchError):
        await service.end_session(db_session, started.id, principal(faculty))


@pytest.mark.asyncio
async def test_admin_starts_session_as_themselves(db_session: AsyncSession, admin, make_batch) -> None:
    batch = await make_batch()

    session = await service.start_session(db_session, batch.id, principal(admin), now=MONDAY_MORNING)

    assert session.faculty_id == admin.id


@pytest.mark.asyncio
async def test_database_rejects_two_running_sessions_for_one_faculty_day(
    db_session: AsyncSession, faculty, make_batch
) -> None:
    first = await make_batch("AutoCAD Morning")
    second = await make_batch("Revit Evening")
    for batch in (first, second):
        db_session.add(Session(
            batch_id=batch.id,
            faculty_id=faculty.id,
            date=date(2026, 10, 19),
            start_time=time(0, 0),
            end_time=time(0, 0),
            status=SessionStatus.ONGOING.value,
            actual_start_at=MONDAY_MORNING,
        ))

    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()


@pytest.mark.asyncio
async def test_start_racing_past_the_check_is_reported_as_conflict(
    db_session: AsyncSession, faculty, make_batch, assign, monkeypatch
) -> None:
    first = await make_batch("AutoCAD Morning")
    second = await make_batch("Revit Evening")
    await assign(first, faculty)
    await assign(second, faculty)
    faculty_id = faculty.id
    await service.start_session(db_session, first.id, principal(faculty), now=MONDAY_MORNING)

    # Simulate a concurrent request that read before the first start was committed
    async def _nothing_running(db, faculty_id, day):
        return None

    monkeypatch.setattr(service, "find_running_session", _nothing_running)

    with pytest.raises(ConflictError):
        await service.start_session(db_session, second.id, principal(faculty), now=MONDAY_MORNING)
    assert await _running_count(db_session, faculty_id) == 1


@pytest.mark.asyncio
async def test_session_requires_a_faculty_member(db_session: AsyncSession, make_batch) -> None:
    batch = await make_batch()
    db_session.add(Session(
        batch_id=batch.id,
        date=date(2026, 10, 19),
        start_time=time(0, 0),
        end_time=time(0, 0),
        status=SessionStatus.ONGOING.value,
        actual_start_at=MONDAY_MORNING,
    ))

    with pytest.raises(IntegrityError):
        await db_session.commit()
    await db_session.rollback()
