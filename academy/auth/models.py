from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship

from academy.core.clock import utcnow
from academy.db.session import Base


class User(Base):
    """Academy user. Faculty run sessions; students are enrolled into batches."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    # SUPERADMIN, ADMIN, FACULTY, STUDENT
    role = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default="ACTIVE")
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    enrollments = relationship("Enrollment", back_populates="student", cascade="all, delete-orphan")
    batch_assignments = relationship(
        "BatchFacultyAssignment", back_populates="faculty", cascade="all, delete-orphan"
    )
