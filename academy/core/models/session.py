"""Teaching session for a batch on one calendar day.

A session is open while actual_end_at is NULL. It is running (ongoing) once
actual_start_at is set, and terminal once actual_end_at is set.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Time, text
from sqlalchemy.orm import relationship

from academy.core.clock import utcnow
from academy.core.enums import SessionStatus
from academy.db.session import Base

# At most one running session per faculty per day, across all batches.
_RUNNING = text("actual_start_at IS NOT NULL AND actual_end_at IS NULL")


class Session(Base):
    __tablename__ = "sessions"
    __table_args__ = (
        Index(
            "uq_sessions_faculty_day_active",
            "faculty_id",
            "date",
            unique=True,
            postgresql_where=_RUNNING,
            sqlite_where=_RUNNING,
        ),
        Index("ix_sessions_batch_faculty_date", "batch_id", "faculty_id", "date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    batch_id = Column(Integer, ForeignKey("batches.id"), nullable=False)
    faculty_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(Date, nullable=False)
    # Scheduled times copied from the batch's weekly schedule
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    topic = Column(String(255), nullable=True)
    is_backup = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default=SessionStatus.SCHEDULED.value)
    actual_start_at = Column(DateTime(timezone=True), nullable=True)
    actual_end_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    batch = relationship("Batch", back_populates="sessions")
    faculty = relationship("User", foreign_keys=[faculty_id])
    attendances = relationship("Attendance", back_populates="session")

    @property
    def is_running(self) -> bool:
        return self.actual_start_at is not None and self.actual_end_at is None
