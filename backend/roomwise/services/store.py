"""Read-only storage interface consumed by the conflict validator and utilization analyzer.

The engine never touches ORM objects directly: every query goes through a
:class:`SchedulingStore` and comes back as frozen view records, so the same
logic runs against SQLAlchemy in production and an in-memory fake in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Protocol

from roomwise.models.time_slot import DayOfWeek
from roomwise.services.thresholds import CapacityBand


def format_clock(value: time) -> str:
    return value.strftime("%I:%M %p").lstrip("0")


@dataclass(frozen=True)
class DepartmentView:
    id: int
    code: str
    name: str


@dataclass(frozen=True)
class FacultyView:
    id: int
    employee_id: str
    first_name: str
    last_name: str
    department_id: int | None
    status: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class ClassroomView:
    id: int
    room_number: str
    building: str
    floor: int | None
    capacity: int
    type: str
    department_id: int | None
    department_name: str | None
    status: str
    is_active: bool

    @property
    def display_name(self) -> str:
        return f"{self.room_number} ({self.building})"


@dataclass(frozen=True)
class TimeSlotView:
    id: int
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    slot_name: str | None
    is_active: bool

    @property
    def label(self) -> str:
        return f"{self.day_of_week.value} {format_clock(self.start_time)} - {format_clock(self.end_time)}"


@dataclass(frozen=True)
class SubjectView:
    id: int
    code: str
    name: str
    department_id: int | None


@dataclass(frozen=True)
class ScheduledClass:
    """An active timetable entry joined with the names needed for diagnostics."""

    entry_id: int
    faculty_id: int
    faculty_name: str
    classroom_id: int
    room_number: str
    building: str
    slot_id: int
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    slot_name: str | None
    subject_id: int
    subject_code: str
    subject_name: str
    section: str

    @property
    def room(self) -> str:
        return f"{self.room_number} ({self.building})"


@dataclass(frozen=True)
class EntryFilter:
    semester: int
    academic_year: str
    faculty_id: int | None = None
    classroom_id: int | None = None
    slot_id: int | None = None
    day_of_week: DayOfWeek | None = None
    exclude_entry_id: int | None = None
    exclude_slot_id: int | None = None


@dataclass(frozen=True)
class UsageFilters:
    building: str | None = None
    floor: int | None = None
    department: str | None = None
    capacity_band: CapacityBand | None = None
    semester: int | None = None
    academic_year: str | None = None


@dataclass(frozen=True)
class RoomOccupancyRow:
    entry_id: int
    classroom_id: int
    subject_id: int
    faculty_id: int
    day_of_week: DayOfWeek
    enrolled_count: int


@dataclass(frozen=True)
class SlotUsageRow:
    slot_id: int
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    slot_name: str | None
    class_count: int
    rooms_in_use: int
    average_room_capacity: float | None


@dataclass(frozen=True)
class DepartmentUsageRow:
    department_id: int
    code: str
    name: str
    owned_classrooms: int
    average_room_capacity: float | None
    own_room_classes: int
    external_room_classes: int
    student_hours: int


@dataclass(frozen=True)
class FacetOptions:
    buildings: tuple[str, ...]
    floors: tuple[int, ...]
    departments: tuple[DepartmentView, ...]


class SchedulingStore(Protocol):
    def find_faculty(self, faculty_id: int) -> FacultyView | None: ...

    def find_classroom(self, classroom_id: int) -> ClassroomView | None: ...

    def find_time_slot(self, slot_id: int) -> TimeSlotView | None: ...

    def find_subject(self, subject_id: int) -> SubjectView | None: ...

    def list_active_entries(self, entry_filter: EntryFilter) -> list[ScheduledClass]: ...

    def count_active_entries(self, entry_filter: EntryFilter) -> int: ...

    def count_enrolled(self, subject_id: int, section: str, semester: int, academic_year: str) -> int: ...

    def list_classrooms(self, filters: UsageFilters) -> list[ClassroomView]: ...

    def list_room_occupancy(self, filters: UsageFilters) -> list[RoomOccupancyRow]: ...

    def aggregate_weekly_slot_usage(self, filters: UsageFilters) -> list[SlotUsageRow]: ...

    def aggregate_department_usage(self, filters: UsageFilters) -> list[DepartmentUsageRow]: ...

    def list_filter_options(self) -> FacetOptions: ...
