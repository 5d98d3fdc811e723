from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from roomwise.db.base import Base


class TimetableEntry(Base):
    __tablename__ = "timetable_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    faculty_id: Mapped[int] = mapped_column(ForeignKey("faculty.id"), index=True, nullable=False)
    classroom_id: Mapped[int] = mapped_column(ForeignKey("classrooms.id"), index=True, nullable=False)
    slot_id: Mapped[int] = mapped_column(ForeignKey("time_slots.id"), index=True, nullable=False)
    subject_id: Mapped[int] = mapped_column(ForeignKey("subjects.id"), index=True, nullable=False)
    section: Mapped[str] = mapped_column(String(10), nullable=False, default="A")
    semester: Mapped[int] = mapped_column(Integer, nullable=False)
    academic_year: Mapped[str] = mapped_column(String(9), index=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())


# Storage-level backstop for the exclusivity invariants; soft-deleted rows are exempt.
Index(
    "uq_timetable_faculty_slot_term",
    TimetableEntry.faculty_id,
    TimetableEntry.slot_id,
    TimetableEntry.semester,
    TimetableEntry.academic_year,
    unique=True,
    sqlite_where=TimetableEntry.is_active.is_(True),
    postgresql_where=TimetableEntry.is_active.is_(True),
)
Index(
    "uq_timetable_classroom_slot_term",
    TimetableEntry.classroom_id,
    TimetableEntry.slot_id,
    TimetableEntry.semester,
    TimetableEntry.academic_year,
    unique=True,
    sqlite_where=TimetableEntry.is_active.is_(True),
    postgresql_where=TimetableEntry.is_active.is_(True),
)
