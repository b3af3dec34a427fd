"""Faculty-facing views of batch assignments."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from academy.auth.models import User
from academy.auth.schemas import CurrentUser
from academy.core.clock import local_today
from academy.core.enums import SessionStatus, UserRole
from academy.core.exceptions import NotFoundError
from academy.core.models import Batch, BatchFacultyAssignment, Session

from .schemas import (
    AssignedBatchItem,
    BatchSummary,
    FacultyAssignmentItem,
    FacultyAssignmentsResponse,
    FacultyInfo,
    SessionResponse,
)

logger = logging.getLogger(__name__)


async def list_assigned_batches(
    db: AsyncSession,
    current_user: CurrentUser,
    now: Optional[datetime] = None,
) -> List[AssignedBatchItem]:
    """Batches assigned to the current user, newest assignment first, each with today's running session."""
    assignments = (
        await db.execute(
            select(BatchFacultyAssignment)
            .where(BatchFacultyAssignment.faculty_id == current_user.id)
            .order_by(BatchFacultyAssignment.created_at.desc(), BatchFacultyAssignment.id.desc())
        )
    ).scalars().all()
    if not assignments:
        return []

    batch_ids = [a.batch_id for a in assignments]
    batches = (await db.execute(select(Batch).where(Batch.id.in_(batch_ids)))).scalars().all()
    batch_map = {b.id: b for b in batches}
    missing = [bid for bid in batch_ids if bid not in batch_map]
    if missing:
        logger.warning("Assignments for user %s reference missing batches: %s", current_user.id, missing)

    today = local_today(now)
    active_sessions = (
        await db.execute(
            select(Session).where(
                Session.batch_id.in_(batch_ids),
                Session.faculty_id == current_user.id,
                Session.status == SessionStatus.ONGOING.value,
                Session.actual_end_at.is_(None),
                Session.date == today,
            )
        )
    ).scalars().all()
    active_by_batch = {s.batch_id: s for s in active_sessions}

    items: List[AssignedBatchItem] = []
    for a in assignments:
        batch = batch_map.get(a.batch_id)
        if not batch:
            continue
        session = active_by_batch.get(a.batch_id)
        items.append(AssignedBatchItem(
            batch=BatchSummary.model_validate(batch),
            active_session=SessionResponse.model_validate(session) if session else None,
        ))
    return items


async def list_faculty_assignments(db: AsyncSession, faculty_id: int) -> FacultyAssignmentsResponse:
    """Admin view of one faculty member's assignments, including dangling ones."""
    faculty = (
        await db.execute(
            select(User).where(User.id == faculty_id, User.role == UserRole.FACULTY.value)
        )
    ).scalar_one_or_none()
    if not faculty:
        raise NotFoundError("Faculty not found")

    assignments = (
        await db.execute(
            select(BatchFacultyAssignment)
            .options(selectinload(BatchFacultyAssignment.batch))
            .where(BatchFacultyAssignment.faculty_id == faculty_id)
            .order_by(BatchFacultyAssignment.id)
        )
    ).scalars().all()

    return FacultyAssignmentsResponse(
        faculty=FacultyInfo(id=faculty.id, email=faculty.email, name=faculty.name),
        assignments=[
            FacultyAssignmentItem(
                assignment_id=a.id,
                batch_id=a.batch_id,
                faculty_id=a.faculty_id,
                batch=BatchSummary.model_validate(a.batch) if a.batch else None,
            )
            for a in assignments
        ],
        total_assignments=len(assignments),
    )
