from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from academy.core.enums import UiAttendanceStatus


# ----- Session lifecycle -----
class SessionStartRequest(BaseModel):
    """Optional body for starting a session."""

    topic: Optional[str] = Field(None, max_length=255)


class SessionResponse(BaseModel):
    id: int
    batch_id: int
    faculty_id: int
    date: date
    start_time: time
    end_time: time
    topic: Optional[str] = None
    is_backup: bool = False
    status: str  # scheduled, ongoing, completed
    actual_start_at: Optional[datetime] = None
    actual_end_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ----- Attendance -----
class AttendanceEntry(BaseModel):
    """One student's mark. status wins over present when both are sent."""

    student_id: int
    status: Optional[str] = Field(None, description="present, absent, late, online")
    present: Optional[bool] = None


class AttendanceSubmitRequest(BaseModel):
    attendance: List[AttendanceEntry] = Field(..., min_length=1)


class AttendanceResult(BaseModel):
    student_id: int
    status: UiAttendanceStatus


class AttendanceSubmitResult(BaseModel):
    """Outcome of a submission: rows written and students skipped as not enrolled."""

    records: List[AttendanceResult]
    discarded_student_ids: List[int] = []


class AttendanceSubmitResponse(BaseModel):
    message: str
    data: List[AttendanceResult]
    discarded: int = 0


# ----- History -----
class HistoryStudentEntry(BaseModel):
    student_id: int
    student_name: str
    student_email: str
    status: UiAttendanceStatus
    marked_at: Optional[datetime] = None


class HistoryAttendanceSummary(BaseModel):
    total: int
    present: int  # includes late/online
    absent: int
    late: int
    students: List[HistoryStudentEntry]


class SessionHistoryItem(BaseModel):
    id: int
    date: date
    topic: Optional[str] = None
    status: str
    actual_start_at: Optional[datetime] = None
    actual_end_at: Optional[datetime] = None
    attendance: HistoryAttendanceSummary


# ----- Faculty assignments -----
class BatchSummary(BaseModel):
    id: int
    title: str
    software: Optional[str] = None
    mode: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    max_capacity: Optional[int] = None
    schedule: Optional[Dict[str, Any]] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AssignedBatchItem(BaseModel):
    """A batch the faculty member teaches, with today's running session if any."""

    batch: BatchSummary
    active_session: Optional[SessionResponse] = None


class FacultyInfo(BaseModel):
    id: int
    email: str
    name: str


class FacultyAssignmentItem(BaseModel):
    assignment_id: int
    batch_id: int
    faculty_id: int
    batch: Optional[BatchSummary] = None


class FacultyAssignmentsResponse(BaseModel):
    faculty: FacultyInfo
    assignments: List[FacultyAssignmentItem]
    total_assignments: int
