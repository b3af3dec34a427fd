from academy.core.models.batch import Batch
from academy.core.models.enrollment import Enrollment
from academy.core.models.batch_faculty_assignment import BatchFacultyAssignment
from academy.core.models.session import Session
from academy.core.models.attendance import Attendance

__all__ = [
    "Attendance",
    "Batch",
    "BatchFacultyAssignment",
    "Enrollment",
    "Session",
]
