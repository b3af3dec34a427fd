"""
Seed script for a demo academy: one admin, one faculty member, a batch with a
weekly schedule, three enrolled students, the faculty assignment and an open
(scheduled) session for today that the faculty member can start.

Run after schema_check with env set:
  SEED_ADMIN_EMAIL=admin@academy.example.com
  SEED_ADMIN_PASSWORD=YourSecurePassword

Idempotent: existing users/batch/enrollments are reused.
"""
import asyncio
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academy.api.v1.sessions.service import scheduled_times_for
from academy.auth.models import User
from academy.auth.security import hash_password
from academy.core.clock import local_today
from academy.core.config import settings
from academy.core.enums import BatchMode, SessionStatus, UserRole
from academy.core.models import Batch, BatchFacultyAssignment, Enrollment, Session
from academy.db.session import AsyncSessionLocal

DEFAULT_ADMIN_EMAIL = "admin@academy.example.com"
DEFAULT_ADMIN_PASSWORD = "Admin@12345"
FACULTY_EMAIL = "faculty@academy.example.com"
FACULTY_PASSWORD = "Faculty@12345"
DEMO_BATCH_TITLE = "AutoCAD Weekday Morning"
DEMO_SCHEDULE = {
    day: {"startTime": "10:00:00", "endTime": "12:00:00"}
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
}
DEMO_STUDENTS = [
    ("Asha Nair", "asha@academy.example.com"),
    ("Ravi Menon", "ravi@academy.example.com"),
    ("Meera Pillai", "meera@academy.example.com"),
]


async def _get_or_create_user(
    db: AsyncSession, name: str, email: str, password: str, role: UserRole
) -> User:
    user = (await db.execute(select(User).where(User.email == email))).scalar_one_or_none()
    if user:
        print(f"User already exists: {email}")
        return user
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role.value,
        status="ACTIVE",
    )
    db.add(user)
    await db.flush()
    print(f"Created {role.value} user: {email}")
    return user


async def seed_demo(db: AsyncSession) -> None:
    # 1. Users
    await _get_or_create_user(
        db,
        "Academy Admin",
        settings.seed_admin_email or DEFAULT_ADMIN_EMAIL,
        settings.seed_admin_password or DEFAULT_ADMIN_PASSWORD,
        UserRole.ADMIN,
    )
    faculty = await _get_or_create_user(db, "Demo Faculty", FACULTY_EMAIL, FACULTY_PASSWORD, UserRole.FACULTY)
    students = [
        await _get_or_create_user(db, name, email, "Student@12345", UserRole.STUDENT)
        for name, email in DEMO_STUDENTS
    ]

    # 2. Batch
    batch: Optional[Batch] = (
        await db.execute(select(Batch).where(Batch.title == DEMO_BATCH_TITLE))
    ).scalar_one_or_none()
    if not batch:
        batch = Batch(title=DEMO_BATCH_TITLE, software="AutoCAD", mode=BatchMode.OFFLINE.value, schedule=DEMO_SCHEDULE)
        db.add(batch)
        await db.flush()
        print(f"Created batch #{batch.id}: {batch.title}")

    # 3. Enrollments and faculty assignment
    for student in students:
        exists = (
            await db.execute(
                select(Enrollment.id).where(Enrollment.batch_id == batch.id, Enrollment.student_id == student.id)
            )
        ).scalar_one_or_none()
        if exists is None:
            db.add(Enrollment(batch_id=batch.id, student_id=student.id, status="active"))
    assigned = (
        await db.execute(
            select(BatchFacultyAssignment.id).where(
                BatchFacultyAssignment.batch_id == batch.id,
                BatchFacultyAssignment.faculty_id == faculty.id,
            )
        )
    ).scalar_one_or_none()
    if assigned is None:
        db.add(BatchFacultyAssignment(batch_id=batch.id, faculty_id=faculty.id))
        print(f"Assigned {faculty.email} to batch #{batch.id}")

    # 4. Open session for today (both actual timestamps empty)
    today = local_today()
    open_session = (
        await db.execute(
            select(Session.id).where(
                Session.batch_id == batch.id,
                Session.faculty_id == faculty.id,
                Session.date == today,
                Session.actual_end_at.is_(None),
            )
            .limit(1)
        )
    ).scalar_one_or_none()
    if open_session is None:
        start_time, end_time = scheduled_times_for(batch, today)
        db.add(Session(
            batch_id=batch.id,
            faculty_id=faculty.id,
            date=today,
            start_time=start_time,
            end_time=end_time,
            status=SessionStatus.SCHEDULED.value,
        ))
        print(f"Scheduled session for batch #{batch.id} on {today}")

    await db.commit()
    print("Demo seed done.")


async def main() -> None:
    async with AsyncSessionLocal() as db:
        try:
            await seed_demo(db)
        except Exception as e:
            await db.rollback()
            print("Error:", e)
            raise


if __name__ == "__main__":
    asyncio.run(main())
