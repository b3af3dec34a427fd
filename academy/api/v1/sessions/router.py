"""Class session API router: start/end sessions, mark attendance, view history."""

from typing import List, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy.auth.rbac import require_roles
from academy.auth.schemas import CurrentUser
from academy.core.enums import UserRole
from academy.core.exceptions import ServiceError
from academy.db.session import get_db

from . import assignments, attendance, history, service
from .schemas import (
    AssignedBatchItem,
    AttendanceSubmitRequest,
    AttendanceSubmitResponse,
    FacultyAssignmentsResponse,
    SessionHistoryItem,
    SessionResponse,
    SessionStartRequest,
)

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])

require_faculty = require_roles(UserRole.FACULTY, UserRole.ADMIN, UserRole.SUPERADMIN)
require_admin = require_roles(UserRole.ADMIN, UserRole.SUPERADMIN)


def _raise_http(e: ServiceError) -> NoReturn:
    if e.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        raise HTTPException(status_code=e.status_code, detail="Internal server error")
    raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/faculty/assigned", response_model=List[AssignedBatchItem])
async def get_faculty_assigned_batches(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_faculty),
):
    """Batches assigned to the caller, with today's running session per batch."""
    try:
        return await assignments.list_assigned_batches(db, current_user)
    except ServiceError as e:
        _raise_http(e)


@router.get("/faculty/{faculty_id}/assignments", response_model=FacultyAssignmentsResponse)
async def get_faculty_assignments(
    faculty_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """Admin only: every assignment row of one faculty member."""
    try:
        return await assignments.list_faculty_assignments(db, faculty_id)
    except ServiceError as e:
        _raise_http(e)


@router.get("/batch/{batch_id}/history", response_model=List[SessionHistoryItem])
async def get_batch_history(
    batch_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_faculty),
):
    """Last sessions the caller ran for this batch, newest first."""
    try:
        return await history.get_batch_history(db, batch_id, current_user)
    except ServiceError as e:
        _raise_http(e)


@router.post("/{batch_id}/start", response_model=SessionResponse)
async def start_session(
    batch_id: int,
    payload: Optional[SessionStartRequest] = Body(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_faculty),
):
    """Start (or resume) today's session for the batch."""
    try:
        return await service.start_session(
            db,
            batch_id,
            current_user,
            topic=payload.topic if payload else None,
        )
    except ServiceError as e:
        _raise_http(e)


@router.post("/{session_id}/end", response_model=SessionResponse)
async def end_session(
    session_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_faculty),
):
    try:
        return await service.end_session(db, session_id, current_user)
    except ServiceError as e:
        _raise_http(e)


@router.post("/{session_id}/attendance", response_model=AttendanceSubmitResponse)
async def submit_session_attendance(
    session_id: int,
    payload: AttendanceSubmitRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_faculty),
):
    """Mark attendance for enrolled students. Students outside the batch are skipped."""
    try:
        result = await attendance.submit_attendance(db, session_id, current_user, payload.attendance)
    except ServiceError as e:
        _raise_http(e)
    return AttendanceSubmitResponse(
        message="Attendance submitted",
        data=result.records,
        discarded=len(result.discarded_student_ids),
    )
