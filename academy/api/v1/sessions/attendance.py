"""Attendance recording against a running (or finished) session."""

import logging
from datetime import datetime
from typing import Iterable, List, NamedTuple, Optional

from fastapi import status
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from academy.auth.schemas import CurrentUser
from academy.core.clock import utcnow
from academy.core.enums import StoredAttendanceStatus
from academy.core.exceptions import InvalidStateError, ServiceError, ValidationError
from academy.core.models import Attendance, Enrollment

from .access import ensure_batch_access
from .schemas import AttendanceEntry, AttendanceResult, AttendanceSubmitResult
from .service import get_session
from .status_map import resolve_ui_status, to_stored_status

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class RosterFilterResult(NamedTuple):
    accepted: List[AttendanceEntry]
    discarded: List[AttendanceEntry]


async def filter_roster(
    db: AsyncSession,
    batch_id: int,
    records: Iterable[AttendanceEntry],
) -> RosterFilterResult:
    """Split submitted records into enrolled and not-enrolled students, keeping input order."""
    records = list(records)
    student_ids = {r.student_id for r in records}
    if not student_ids:
        return RosterFilterResult([], [])

    result = await db.execute(
        select(Enrollment.student_id).where(
            Enrollment.batch_id == batch_id,
            Enrollment.student_id.in_(student_ids),
        )
    )
    allowed = set(result.scalars().all())

    accepted = [r for r in records if r.student_id in allowed]
    discarded = [r for r in records if r.student_id not in allowed]
    return RosterFilterResult(accepted, discarded)


async def _upsert_attendance(
    db: AsyncSession,
    session_id: int,
    student_id: int,
    stored_status: StoredAttendanceStatus,
    marked_by: int,
    marked_at: datetime,
) -> None:
    """Single-statement insert-or-update on (session_id, student_id); the last writer wins."""
    insert = _UPSERT_INSERTS[db.get_bind().dialect.name]
    values = {
        "status": stored_status.value,
        "is_manual": True,
        "marked_by": marked_by,
        "marked_at": marked_at,
        "updated_at": marked_at,
    }
    stmt = insert(Attendance).values(session_id=session_id, student_id=student_id, **values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Attendance.session_id, Attendance.student_id],
        set_=values,
    )
    await db.execute(stmt)


async def submit_attendance(
    db: AsyncSession,
    session_id: int,
    current_user: CurrentUser,
    records: List[AttendanceEntry],
    now: Optional[datetime] = None,
) -> AttendanceSubmitResult:
    """Record attendance for enrolled students of the session's batch.

    Students not enrolled in the batch are skipped without error. All writes
    of one submission commit together or not at all.
    """
    if not records:
        raise ValidationError("Attendance payload required")

    session = await get_session(db, session_id)
    await ensure_batch_access(db, current_user.id, session.batch_id, current_user.role)
    if session.actual_start_at is None:
        raise InvalidStateError("Start the session before marking attendance")

    roster = await filter_roster(db, session.batch_id, records)
    discarded_ids = [r.student_id for r in roster.discarded]
    if discarded_ids:
        logger.info(
            "Session %s: skipped %d record(s) for students not enrolled in batch %s: %s",
            session.id,
            len(discarded_ids),
            session.batch_id,
            discarded_ids,
        )

    marked_at = now or utcnow()
    written: List[AttendanceResult] = []
    try:
        for entry in roster.accepted:
            ui_status = resolve_ui_status(entry.status, entry.present)
            await _upsert_attendance(
                db,
                session.id,
                entry.student_id,
                to_stored_status(ui_status),
                current_user.id,
                marked_at,
            )
            written.append(AttendanceResult(student_id=entry.student_id, status=ui_status))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Attendance submission for session %s rolled back", session_id)
        raise ServiceError("Failed to submit attendance", status.HTTP_500_INTERNAL_SERVER_ERROR) from e

    logger.info(
        "Session %s: attendance recorded for %d student(s) by user %s",
        session.id,
        len(written),
        current_user.id,
    )
    return AttendanceSubmitResult(records=written, discarded_student_ids=discarded_ids)
