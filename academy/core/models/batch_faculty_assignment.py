from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from academy.core.clock import utcnow
from academy.db.session import Base


class BatchFacultyAssignment(Base):
    """Links a faculty member to a batch they are allowed to teach and mark attendance for."""

    __tablename__ = "batch_faculty_assignments"
    __table_args__ = (
        UniqueConstraint("batch_id", "faculty_id", name="uq_batch_faculty_assignment"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    batch_id = Column(Integer, ForeignKey("batches.id", ondelete="CASCADE"), nullable=False)
    faculty_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    batch = relationship("Batch", back_populates="faculty_assignments")
    faculty = relationship("User", back_populates="batch_assignments")
