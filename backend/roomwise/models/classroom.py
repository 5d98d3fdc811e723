from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, DateTime, Enum as SAEnum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from roomwise.db.base import Base


class ClassroomType(str, Enum):
    lecture = "lecture"
    lab = "lab"
    seminar = "seminar"
    auditorium = "auditorium"


class ClassroomStatus(str, Enum):
    available = "available"
    maintenance = "maintenance"
    reserved = "reserved"
    closed = "closed"


class Classroom(Base):
    __tablename__ = "classrooms"
    __table_args__ = (CheckConstraint("capacity > 0", name="ck_classrooms_capacity_positive"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    room_number: Mapped[str] = mapped_column(String(50), nullable=False)
    building: Mapped[str] = mapped_column(String(200), index=True, nullable=False)
    floor: Mapped[int | None] = mapped_column(Integer, nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    type: Mapped[ClassroomType] = mapped_column(SAEnum(ClassroomType, name="classroom_type"), nullable=False)
    department_id: Mapped[int | None] = mapped_column(ForeignKey("departments.id"), index=True, nullable=True)
    status: Mapped[ClassroomStatus] = mapped_column(
        SAEnum(ClassroomStatus, name="classroom_status"),
        nullable=False,
        default=ClassroomStatus.available,
    )
    facilities: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
