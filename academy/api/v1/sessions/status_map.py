"""Translation between the attendance vocabulary of the UI and the stored one.

The stored vocabulary has no separate value for "online": both "late" and
"online" are kept as MANUAL_PRESENT and read back as "late".
"""

from typing import Optional, Union

from academy.core.enums import StoredAttendanceStatus, UiAttendanceStatus

_UI_TO_STORED = {
    UiAttendanceStatus.PRESENT: StoredAttendanceStatus.PRESENT,
    UiAttendanceStatus.ABSENT: StoredAttendanceStatus.ABSENT,
    UiAttendanceStatus.LATE: StoredAttendanceStatus.MANUAL_PRESENT,
    UiAttendanceStatus.ONLINE: StoredAttendanceStatus.MANUAL_PRESENT,
}

_STORED_TO_UI = {
    StoredAttendanceStatus.PRESENT: UiAttendanceStatus.PRESENT,
    StoredAttendanceStatus.ABSENT: UiAttendanceStatus.ABSENT,
    StoredAttendanceStatus.MANUAL_PRESENT: UiAttendanceStatus.LATE,
}


def normalize_ui_status(raw: Optional[str]) -> UiAttendanceStatus:
    """Unknown or empty values count as present."""
    if raw is None:
        return UiAttendanceStatus.PRESENT
    try:
        return UiAttendanceStatus(raw.strip().lower())
    except ValueError:
        return UiAttendanceStatus.PRESENT


def resolve_ui_status(status: Optional[str], present: Optional[bool]) -> UiAttendanceStatus:
    """Explicit status wins; otherwise the present flag decides (missing flag means absent)."""
    if status is not None:
        return normalize_ui_status(status)
    return UiAttendanceStatus.PRESENT if present else UiAttendanceStatus.ABSENT


def to_stored_status(status: UiAttendanceStatus) -> StoredAttendanceStatus:
    return _UI_TO_STORED[status]


def to_ui_status(status: Union[str, StoredAttendanceStatus]) -> UiAttendanceStatus:
    try:
        stored = StoredAttendanceStatus(status)
    except ValueError:
        return UiAttendanceStatus.PRESENT
    return _STORED_TO_UI[stored]
