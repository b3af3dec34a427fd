"""Session lifecycle: start (or resume) and end a faculty member's teaching session."""

import logging
from datetime import date, datetime, time
from typing import Any, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from academy.auth.schemas import CurrentUser
from academy.core.clock import local_today, utcnow, weekday_name
from academy.core.enums import SessionStatus
from academy.core.exceptions import ConflictError, InvalidStateError, NotFoundError
from academy.core.models import Batch, Session

from .access import ensure_batch_access

logger = logging.getLogger(__name__)

DEFAULT_SCHEDULE_TIME = time(0, 0, 0)


# ----- Schedule helpers -----
def _parse_schedule_time(value: Any, batch_id: int, field: str) -> time:
    if value is None:
        return DEFAULT_SCHEDULE_TIME
    try:
        return time.fromisoformat(str(value).strip())
    except ValueError:
        logger.warning("Batch %s has unparsable schedule %s %r; using 00:00:00", batch_id, field, value)
        return DEFAULT_SCHEDULE_TIME


def scheduled_times_for(batch: Batch, day: date) -> Tuple[time, time]:
    """Start/end for the batch on the given day; midnight for both when the day is not scheduled."""
    schedule = batch.schedule if isinstance(batch.schedule, dict) else None
    entry = schedule.get(weekday_name(day)) if schedule else None
    if not isinstance(entry, dict):
        return DEFAULT_SCHEDULE_TIME, DEFAULT_SCHEDULE_TIME
    return (
        _parse_schedule_time(entry.get("startTime"), batch.id, "startTime"),
        _parse_schedule_time(entry.get("endTime"), batch.id, "endTime"),
    )


# ----- Lookups -----
async def _get_batch(db: AsyncSession, batch_id: int) -> Batch:
    batch = await db.get(Batch, batch_id)
    if not batch:
        raise NotFoundError("Batch not found")
    return batch


async def get_session(db: AsyncSession, session_id: int) -> Session:
    session = await db.get(Session, session_id)
    if not session:
        raise NotFoundError("Session not found")
    return session


async def find_running_session(db: AsyncSession, faculty_id: int, day: date) -> Optional[Session]:
    """The faculty member's running session on the given day, in any batch."""
    result = await db.execute(
        select(Session)
        .options(selectinload(Session.batch))
        .where(
            Session.faculty_id == faculty_id,
            Session.date == day,
            Session.actual_start_at.is_not(None),
            Session.actual_end_at.is_(None),
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _find_open_session_for_batch(
    db: AsyncSession, batch_id: int, faculty_id: int, day: date
) -> Optional[Session]:
    result = await db.execute(
        select(Session)
        .where(
            Session.batch_id == batch_id,
            Session.faculty_id == faculty_id,
            Session.date == day,
            Session.actual_end_at.is_(None),
        )
        .order_by(Session.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


# ----- Transitions -----
async def start_session(
    db: AsyncSession,
    batch_id: int,
    current_user: CurrentUser,
    topic: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Session:
    """Start today's session for the batch, resuming a scheduled one if it exists.

    A faculty member may only have one running session per day across all
    batches. The check runs in the application first so the caller gets a
    message naming the running batch; the partial unique index on sessions
    catches concurrent starts that slip between the check and the write.
    """
    now = now or utcnow()
    today = local_today(now)

    await ensure_batch_access(db, current_user.id, batch_id, current_user.role)
    batch = await _get_batch(db, batch_id)
    start_time, end_time = scheduled_times_for(batch, today)

    running = await find_running_session(db, current_user.id, today)
    if running:
        title = running.batch.title if running.batch else "Unknown"
        raise ConflictError(
            f'You already have an active session running for batch "{title}" '
            f"(Batch #{running.batch_id}). Please end that session before starting a new one."
        )

    session = await _find_open_session_for_batch(db, batch_id, current_user.id, today)
    if session is not None and session.is_running:
        raise ConflictError("You already have an ongoing session for this batch today")

    if session is not None:
        resumed = True
        session.actual_start_at = now
        session.status = SessionStatus.ONGOING.value
        session.start_time = start_time
        session.end_time = end_time
    else:
        resumed = False
        session = Session(
            batch_id=batch_id,
            faculty_id=current_user.id,
            date=today,
            start_time=start_time,
            end_time=end_time,
            topic=topic,
            status=SessionStatus.ONGOING.value,
            actual_start_at=now,
        )
        db.add(session)

    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning("Concurrent start rejected for faculty %s on batch %s", current_user.id, batch_id)
        raise ConflictError(
            "You already have an active session running. Please end that session before starting a new one."
        ) from e
    await db.refresh(session)

    logger.info(
        "Session %s %s for batch %s by user %s",
        session.id,
        "resumed" if resumed else "started",
        batch_id,
        current_user.id,
    )
    return session


async def end_session(
    db: AsyncSession,
    session_id: int,
    current_user: CurrentUser,
    now: Optional[datetime] = None,
) -> Session:
    """Complete a running session. Completed sessions are terminal."""
    session = await get_session(db, session_id)
    await ensure_batch_access(db, current_user.id, session.batch_id, current_user.role)

    if session.actual_start_at is None:
        raise InvalidStateError("Session has not been started yet")
    if session.actual_end_at is not None:
        raise InvalidStateError("Session already ended")

    session.actual_end_at = now or utcnow()
    session.status = SessionStatus.COMPLETED.value
    await db.commit()
    await db.refresh(session)

    logger.info("Session %s ended for batch %s by user %s", session.id, session.batch_id, current_user.id)
    return session
