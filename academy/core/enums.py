from enum import Enum


class UserRole(str, Enum):
    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    FACULTY = "FACULTY"
    STUDENT = "STUDENT"


class SessionStatus(str, Enum):
    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    COMPLETED = "completed"


class StoredAttendanceStatus(str, Enum):
    """Attendance status as persisted in the attendances table."""

    PRESENT = "present"
    ABSENT = "absent"
    MANUAL_PRESENT = "manual_present"


class UiAttendanceStatus(str, Enum):
    """Attendance status vocabulary used by the faculty attendance screen."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    ONLINE = "online"


class BatchMode(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
