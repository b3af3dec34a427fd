"""Batch-level authorization shared by every session and attendance operation."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academy.auth.rbac import role_can_bypass_assignment
from academy.core.enums import UserRole
from academy.core.exceptions import UnauthorizedBatchError
from academy.core.models import BatchFacultyAssignment

logger = logging.getLogger(__name__)


async def ensure_batch_access(
    db: AsyncSession,
    principal_id: int,
    batch_id: int,
    role: UserRole,
) -> None:
    """Admins pass; everyone else needs a faculty assignment to the batch."""
    if role_can_bypass_assignment(role):
        return

    result = await db.execute(
        select(BatchFacultyAssignment.id)
        .where(
            BatchFacultyAssignment.faculty_id == principal_id,
            BatchFacultyAssignment.batch_id == batch_id,
        )
        .limit(1)
    )
    if result.scalar_one_or_none() is None:
        logger.warning("User %s (%s) denied access to batch %s", principal_id, role.value, batch_id)
        raise UnauthorizedBatchError()
