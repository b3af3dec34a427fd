from sqlalchemy import JSON, Column, Date, DateTime, Integer, String
from sqlalchemy.orm import relationship

from academy.core.clock import utcnow
from academy.core.enums import BatchMode
from academy.db.session import Base


class Batch(Base):
    """A cohort of students taking a course together on a weekly schedule."""

    __tablename__ = "batches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    software = Column(String(255), nullable=True)
    mode = Column(String(20), nullable=False, default=BatchMode.OFFLINE.value)  # online | offline
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    max_capacity = Column(Integer, nullable=True)
    # Example shape:
    # {
    #   "monday": {"startTime": "10:00:00", "endTime": "12:00:00"},
    #   "wednesday": {"startTime": "10:00", "endTime": "12:00"}
    # }
    schedule = Column(JSON, nullable=True)
    status = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    enrollments = relationship("Enrollment", back_populates="batch", cascade="all, delete-orphan")
    faculty_assignments = relationship(
        "BatchFacultyAssignment", back_populates="batch", cascade="all, delete-orphan"
    )
    sessions = relationship("Session", back_populates="batch")
