"""Read-only session history for a batch, with per-session attendance summaries."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from academy.auth.schemas import CurrentUser
from academy.core.config import settings
from academy.core.enums import UiAttendanceStatus
from academy.core.exceptions import NotFoundError
from academy.core.models import Attendance, Batch, Session

from .access import ensure_batch_access
from .schemas import HistoryAttendanceSummary, HistoryStudentEntry, SessionHistoryItem
from .status_map import to_ui_status


def _summarize(session: Session) -> HistoryAttendanceSummary:
    students: List[HistoryStudentEntry] = []
    counts = {status: 0 for status in UiAttendanceStatus}
    for a in sorted(session.attendances, key=lambda a: a.student_id):
        ui_status = to_ui_status(a.status)
        counts[ui_status] += 1
        students.append(HistoryStudentEntry(
            student_id=a.student_id,
            student_name=a.student.name if a.student else "Unknown",
            student_email=a.student.email if a.student else "",
            status=ui_status,
            marked_at=a.marked_at,
        ))
    late = counts[UiAttendanceStatus.LATE]
    return HistoryAttendanceSummary(
        total=len(students),
        present=counts[UiAttendanceStatus.PRESENT] + late,
        absent=counts[UiAttendanceStatus.ABSENT],
        late=late,
        students=students,
    )


async def get_batch_history(
    db: AsyncSession,
    batch_id: int,
    current_user: CurrentUser,
    limit: Optional[int] = None,
) -> List[SessionHistoryItem]:
    """Most recent sessions the current user ran for the batch, newest first."""
    await ensure_batch_access(db, current_user.id, batch_id, current_user.role)
    if await db.get(Batch, batch_id) is None:
        raise NotFoundError("Batch not found")

    result = await db.execute(
        select(Session)
        .options(selectinload(Session.attendances).selectinload(Attendance.student))
        .where(
            Session.batch_id == batch_id,
            Session.faculty_id == current_user.id,
        )
        .order_by(Session.date.desc(), Session.actual_start_at.desc(), Session.id.desc())
        .limit(limit or settings.session_history_limit)
        .execution_options(populate_existing=True)
    )
    sessions = result.scalars().all()
    return [
        SessionHistoryItem(
            id=s.id,
            date=s.date,
            topic=s.topic,
            status=s.status,
            actual_start_at=s.actual_start_at,
            actual_end_at=s.actual_end_at,
            attendance=_summarize(s),
        )
        for s in sessions
    ]
