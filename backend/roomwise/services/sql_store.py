from __future__ import annotations

from sqlalchemy import and_, case, distinct, func, select
from sqlalchemy.orm import Session

from roomwise.models.classroom import Classroom
from roomwise.models.department import Department
from roomwise.models.enrollment import Enrollment, EnrollmentStatus
from roomwise.models.faculty import Faculty
from roomwise.models.subject import Subject
from roomwise.models.time_slot import DAY_ORDER, TimeSlot
from roomwise.models.timetable_entry import TimetableEntry
from roomwise.services.store import (
    ClassroomView,
    DepartmentUsageRow,
    DepartmentView,
    EntryFilter,
    FacetOptions,
    FacultyView,
    RoomOccupancyRow,
    ScheduledClass,
    SlotUsageRow,
    SubjectView,
    TimeSlotView,
    UsageFilters,
)


def _enum_value(value: object) -> str:
    if hasattr(value, "value"):
        return str(getattr(value, "value"))
    return str(value)


def _classroom_view(room: Classroom, department_name: str | None) -> ClassroomView:
    return ClassroomView(
        id=room.id,
        room_number=room.room_number,
        building=room.building,
        floor=room.floor,
        capacity=room.capacity,
        type=_enum_value(room.type),
        department_id=room.department_id,
        department_name=department_name,
        status=_enum_value(room.status),
        is_active=bool(room.is_active),
    )


def _scheduled_class(
    entry: TimetableEntry,
    subject: Subject,
    faculty: Faculty,
    classroom: Classroom,
    slot: TimeSlot,
) -> ScheduledClass:
    return ScheduledClass(
        entry_id=entry.id,
        faculty_id=faculty.id,
        faculty_name=faculty.full_name,
        classroom_id=classroom.id,
        room_number=classroom.room_number,
        building=classroom.building,
        slot_id=slot.id,
        day_of_week=slot.day_of_week,
        start_time=slot.start_time,
        end_time=slot.end_time,
        slot_name=slot.slot_name,
        subject_id=subject.id,
        subject_code=subject.code,
        subject_name=subject.name,
        section=entry.section,
    )


def _enrolled_counts():
    return (
        select(
            Enrollment.subject_id,
            Enrollment.section,
            Enrollment.semester,
            Enrollment.academic_year,
            func.count(Enrollment.id).label("enrolled_count"),
        )
        .where(Enrollment.status == EnrollmentStatus.enrolled)
        .group_by(Enrollment.subject_id, Enrollment.section, Enrollment.semester, Enrollment.academic_year)
        .subquery("enrolled_counts")
    )


def _matches_offering(enrolled):
    return and_(
        enrolled.c.subject_id == TimetableEntry.subject_id,
        enrolled.c.section == TimetableEntry.section,
        enrolled.c.semester == TimetableEntry.semester,
        enrolled.c.academic_year == TimetableEntry.academic_year,
    )


class SqlAlchemySchedulingStore:
    """SchedulingStore backed by the relational schema in :mod:`roomwise.models`."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_faculty(self, faculty_id: int) -> FacultyView | None:
        faculty = self.db.get(Faculty, faculty_id)
        if faculty is None:
            return None
        return FacultyView(
            id=faculty.id,
            employee_id=faculty.employee_id,
            first_name=faculty.first_name,
            last_name=faculty.last_name,
            department_id=faculty.department_id,
            status=_enum_value(faculty.status),
        )

    def find_classroom(self, classroom_id: int) -> ClassroomView | None:
        row = self.db.execute(
            select(Classroom, Department.name)
            .outerjoin(Department, Department.id == Classroom.department_id)
            .where(Classroom.id == classroom_id)
        ).first()
        if row is None:
            return None
        room, department_name = row
        return _classroom_view(room, department_name)

    def find_time_slot(self, slot_id: int) -> TimeSlotView | None:
        slot = self.db.get(TimeSlot, slot_id)
        if slot is None:
            return None
        return TimeSlotView(
            id=slot.id,
            day_of_week=slot.day_of_week,
            start_time=slot.start_time,
            end_time=slot.end_time,
            slot_name=slot.slot_name,
            is_active=bool(slot.is_active),
        )

    def find_subject(self, subject_id: int) -> SubjectView | None:
        subject = self.db.get(Subject, subject_id)
        if subject is None:
            return None
        return SubjectView(id=subject.id, code=subject.code, name=subject.name, department_id=subject.department_id)

    def _entry_conditions(self, entry_filter: EntryFilter) -> list:
        conditions = [
            TimetableEntry.is_active.is_(True),
            TimetableEntry.semester == entry_filter.semester,
            TimetableEntry.academic_year == entry_filter.academic_year,
        ]
        if entry_filter.faculty_id is not None:
            conditions.append(TimetableEntry.faculty_id == entry_filter.faculty_id)
        if entry_filter.classroom_id is not None:
            conditions.append(TimetableEntry.classroom_id == entry_filter.classroom_id)
        if entry_filter.slot_id is not None:
            conditions.append(TimetableEntry.slot_id == entry_filter.slot_id)
        if entry_filter.day_of_week is not None:
            conditions.append(TimeSlot.day_of_week == entry_filter.day_of_week)
        if entry_filter.exclude_entry_id is not None:
            conditions.append(TimetableEntry.id != entry_filter.exclude_entry_id)
        if entry_filter.exclude_slot_id is not None:
            conditions.append(TimetableEntry.slot_id != entry_filter.exclude_slot_id)
        return conditions

    def list_active_entries(self, entry_filter: EntryFilter) -> list[ScheduledClass]:
        stmt = (
            select(TimetableEntry, Subject, Faculty, Classroom, TimeSlot)
            .join(Subject, Subject.id == TimetableEntry.subject_id)
            .join(Faculty, Faculty.id == TimetableEntry.faculty_id)
            .join(Classroom, Classroom.id == TimetableEntry.classroom_id)
            .join(TimeSlot, TimeSlot.id == TimetableEntry.slot_id)
            .where(*self._entry_conditions(entry_filter))
            .order_by(TimeSlot.start_time, TimetableEntry.id)
        )
        return [_scheduled_class(*row) for row in self.db.execute(stmt).all()]

    def count_active_entries(self, entry_filter: EntryFilter) -> int:
        stmt = (
            select(func.count(TimetableEntry.id))
            .select_from(TimetableEntry)
            .join(TimeSlot, TimeSlot.id == TimetableEntry.slot_id)
            .where(*self._entry_conditions(entry_filter))
        )
        return int(self.db.execute(stmt).scalar_one() or 0)

    def count_enrolled(self, subject_id: int, section: str, semester: int, academic_year: str) -> int:
        stmt = select(func.count(Enrollment.id)).where(
            Enrollment.subject_id == subject_id,
            Enrollment.section == section,
            Enrollment.semester == semester,
            Enrollment.academic_year == academic_year,
            Enrollment.status == EnrollmentStatus.enrolled,
        )
        return int(self.db.execute(stmt).scalar_one() or 0)

    def _classroom_conditions(self, filters: UsageFilters) -> list:
        conditions = [Classroom.is_active.is_(True)]
        if filters.building:
            conditions.append(Classroom.building == filters.building)
        if filters.floor is not None:
            conditions.append(Classroom.floor == filters.floor)
        if filters.department:
            department_id = select(Department.id).where(Department.code == filters.department).scalar_subquery()
            conditions.append(Classroom.department_id == department_id)
        if filters.capacity_band is not None:
            lower, upper = filters.capacity_band.bounds
            if lower is not None:
                conditions.append(Classroom.capacity >= lower)
            if upper is not None:
                conditions.append(Classroom.capacity <= upper)
        return conditions

    def _term_conditions(self, filters: UsageFilters) -> list:
        conditions = [TimetableEntry.is_active.is_(True)]
        if filters.semester is not None:
            conditions.append(TimetableEntry.semester == filters.semester)
        if filters.academic_year:
            conditions.append(TimetableEntry.academic_year == filters.academic_year)
        return conditions

    def list_classrooms(self, filters: UsageFilters) -> list[ClassroomView]:
        stmt = (
            select(Classroom, Department.name)
            .outerjoin(Department, Department.id == Classroom.department_id)
            .where(*self._classroom_conditions(filters))
            .order_by(Classroom.building, Classroom.room_number, Classroom.id)
        )
        return [_classroom_view(room, department_name) for room, department_name in self.db.execute(stmt).all()]

    def list_room_occupancy(self, filters: UsageFilters) -> list[RoomOccupancyRow]:
        enrolled = _enrolled_counts()
        stmt = (
            select(
                TimetableEntry.id,
                TimetableEntry.classroom_id,
                TimetableEntry.subject_id,
                TimetableEntry.faculty_id,
                TimeSlot.day_of_week,
                func.coalesce(enrolled.c.enrolled_count, 0),
            )
            .select_from(TimetableEntry)
            .join(Classroom, Classroom.id == TimetableEntry.classroom_id)
            .join(TimeSlot, TimeSlot.id == TimetableEntry.slot_id)
            .outerjoin(enrolled, _matches_offering(enrolled))
            .where(*self._classroom_conditions(filters), *self._term_conditions(filters))
            .order_by(TimetableEntry.classroom_id, TimetableEntry.id)
        )
        return [
            RoomOccupancyRow(
                entry_id=entry_id,
                classroom_id=classroom_id,
                subject_id=subject_id,
                faculty_id=faculty_id,
                day_of_week=day_of_week,
                enrolled_count=int(enrolled_count or 0),
            )
            for entry_id, classroom_id, subject_id, faculty_id, day_of_week, enrolled_count in self.db.execute(stmt).all()
        ]

    def aggregate_weekly_slot_usage(self, filters: UsageFilters) -> list[SlotUsageRow]:
        rooms_in_scope = select(Classroom.id).where(*self._classroom_conditions(filters))
        entry_in_scope = and_(
            TimetableEntry.slot_id == TimeSlot.id,
            TimetableEntry.classroom_id.in_(rooms_in_scope),
            *self._term_conditions(filters),
        )
        stmt = (
            select(
                TimeSlot.id,
                TimeSlot.day_of_week,
                TimeSlot.start_time,
                TimeSlot.end_time,
                TimeSlot.slot_name,
                func.count(TimetableEntry.id),
                func.count(distinct(TimetableEntry.classroom_id)),
                func.avg(Classroom.capacity),
            )
            .select_from(TimeSlot)
            .outerjoin(TimetableEntry, entry_in_scope)
            .outerjoin(Classroom, Classroom.id == TimetableEntry.classroom_id)
            .where(TimeSlot.is_active.is_(True))
            .group_by(TimeSlot.id, TimeSlot.day_of_week, TimeSlot.start_time, TimeSlot.end_time, TimeSlot.slot_name)
        )
        rows = [
            SlotUsageRow(
                slot_id=slot_id,
                day_of_week=day_of_week,
                start_time=start_time,
                end_time=end_time,
                slot_name=slot_name,
                class_count=int(class_count or 0),
                rooms_in_use=int(rooms_in_use or 0),
                average_room_capacity=float(average_capacity) if average_capacity is not None else None,
            )
            for (
                slot_id,
                day_of_week,
                start_time,
                end_time,
                slot_name,
                class_count,
                rooms_in_use,
                average_capacity,
            ) in self.db.execute(stmt).all()
        ]
        return sorted(rows, key=lambda row: (DAY_ORDER[row.day_of_week], row.start_time, row.slot_id))

    def aggregate_department_usage(self, filters: UsageFilters) -> list[DepartmentUsageRow]:
        owned_stmt = (
            select(
                Department.id,
                Department.code,
                Department.name,
                func.count(Classroom.id),
                func.avg(Classroom.capacity),
            )
            .select_from(Department)
            .outerjoin(Classroom, and_(Classroom.department_id == Department.id, Classroom.is_active.is_(True)))
            .where(Department.is_active.is_(True))
            .group_by(Department.id, Department.code, Department.name)
            .order_by(Department.id)
        )

        enrolled = _enrolled_counts()
        in_own_room = case((Classroom.department_id == Subject.department_id, 1), else_=0)
        usage_stmt = (
            select(
                Subject.department_id,
                func.count(TimetableEntry.id),
                func.coalesce(func.sum(in_own_room), 0),
                func.coalesce(func.sum(func.coalesce(enrolled.c.enrolled_count, 0)), 0),
            )
            .select_from(TimetableEntry)
            .join(Subject, Subject.id == TimetableEntry.subject_id)
            .join(Classroom, Classroom.id == TimetableEntry.classroom_id)
            .outerjoin(enrolled, _matches_offering(enrolled))
            .where(Subject.department_id.is_not(None), *self._term_conditions(filters))
            .group_by(Subject.department_id)
        )
        usage = {
            department_id: (int(total or 0), int(own or 0), int(student_hours or 0))
            for department_id, total, own, student_hours in self.db.execute(usage_stmt).all()
        }

        rows: list[DepartmentUsageRow] = []
        for department_id, code, name, owned, average_capacity in self.db.execute(owned_stmt).all():
            total, own, student_hours = usage.get(department_id, (0, 0, 0))
            rows.append(
                DepartmentUsageRow(
                    department_id=department_id,
                    code=code,
                    name=name,
                    owned_classrooms=int(owned or 0),
                    average_room_capacity=float(average_capacity) if average_capacity is not None else None,
                    own_room_classes=own,
                    external_room_classes=total - own,
                    student_hours=student_hours,
                )
            )
        return rows

    def list_filter_options(self) -> FacetOptions:
        buildings = self.db.execute(
            select(Classroom.building).where(Classroom.is_active.is_(True)).distinct().order_by(Classroom.building)
        ).scalars()
        floors = self.db.execute(
            select(Classroom.floor)
            .where(Classroom.is_active.is_(True), Classroom.floor.is_not(None))
            .distinct()
            .order_by(Classroom.floor)
        ).scalars()
        departments = self.db.execute(
            select(Department).where(Department.is_active.is_(True)).order_by(Department.name, Department.id)
        ).scalars()
        return FacetOptions(
            buildings=tuple(buildings),
            floors=tuple(int(floor) for floor in floors),
            departments=tuple(DepartmentView(id=item.id, code=item.code, name=item.name) for item in departments),
        )
