from __future__ import annotations

import logging
from collections import Counter, defaultdict
from collections.abc import Callable
from datetime import date
from typing import TypeVar

from roomwise.core.exceptions import InvalidArgumentError
from roomwise.models.time_slot import DAY_ORDER
from roomwise.schemas.utilization import (
    DepartmentOption,
    DepartmentUtilizationOut,
    FilterOptionsOut,
    PeakHourOut,
    ReportFiltersOut,
    ReportingWindowOut,
    RoomUtilizationOut,
    UnderutilizedRoomOut,
    UtilizationReport,
    UtilizationSummaryOut,
    WeeklyTrendOut,
)
from roomwise.services.conflict_service import validate_academic_year
from roomwise.services.reporting_window import ReportPeriod, resolve_reporting_window
from roomwise.services.store import (
    ClassroomView,
    DepartmentUsageRow,
    RoomOccupancyRow,
    SchedulingStore,
    SlotUsageRow,
    UsageFilters,
    format_clock,
)
from roomwise.services.thresholds import (
    WEEKLY_AVAILABLE_HOURS,
    CapacityBand,
    RoomStatus,
    bounded_percentage,
    classify_room,
    classify_usage,
    needs_review,
    recommend,
)

logger = logging.getLogger(__name__)

SECTION_WEEKLY_TRENDS = "weekly_trends"
SECTION_PEAK_HOURS = "peak_hours"
SECTION_DEPARTMENTS = "departments"
SHARED_POOL_LABEL = "Shared"

T = TypeVar("T")


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def parse_capacity_band(value: CapacityBand | str | None) -> CapacityBand | None:
    if value is None or isinstance(value, CapacityBand):
        return value
    normalized = value.strip().lower()
    if not normalized:
        return None
    try:
        return CapacityBand(normalized)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in CapacityBand)
        raise InvalidArgumentError(
            f"Unknown capacity band '{value}'. Expected one of: {allowed}",
            details={"capacity_band": value},
        ) from exc


def build_usage_filters(
    *,
    building: str | None = None,
    floor: int | None = None,
    department: str | None = None,
    capacity_band: CapacityBand | str | None = None,
    semester: int | None = None,
    academic_year: str | None = None,
) -> UsageFilters:
    """Validate raw facet values and return the filter set shared by every report section."""
    if semester is not None and semester <= 0:
        raise InvalidArgumentError("Semester must be a positive integer", details={"semester": semester})
    academic_year = _clean(academic_year)
    if academic_year is not None:
        academic_year = validate_academic_year(academic_year)
    return UsageFilters(
        building=_clean(building),
        floor=floor,
        department=_clean(department),
        capacity_band=parse_capacity_band(capacity_band),
        semester=semester,
        academic_year=academic_year,
    )


def _slot_label(row: SlotUsageRow) -> str:
    return f"{format_clock(row.start_time)} - {format_clock(row.end_time)}"


def _most_used_day(rows: list[RoomOccupancyRow]) -> str | None:
    if not rows:
        return None
    counts = Counter(row.day_of_week for row in rows)
    day, _ = min(counts.items(), key=lambda item: (-item[1], DAY_ORDER[item[0]]))
    return day.value


class UtilizationAnalyzer:
    """Descriptive analytics over the active timetable.

    The per-room table is the primary section and its failures propagate. The
    weekly trend, peak hour and department sections are advisory: when their
    aggregation fails they come back empty and are listed in
    ``unavailable_sections``.
    """

    def __init__(self, store: SchedulingStore) -> None:
        self.store = store

    def build_report(
        self,
        period: ReportPeriod | str,
        filters: UsageFilters,
        today: date,
    ) -> UtilizationReport:
        window = resolve_reporting_window(period, today)
        classrooms = self.store.list_classrooms(filters)
        occupancy = self.store.list_room_occupancy(filters)
        rooms = self.room_utilization(classrooms, occupancy)

        unavailable: list[str] = []
        slot_usage = self._advisory(
            "weekly slot usage",
            lambda: self.store.aggregate_weekly_slot_usage(filters),
        )
        if slot_usage is None:
            unavailable.extend([SECTION_WEEKLY_TRENDS, SECTION_PEAK_HOURS])
            weekly_trends: list[WeeklyTrendOut] = []
            peak_hours: list[PeakHourOut] = []
        else:
            weekly_trends = self.weekly_trends(slot_usage, total_rooms=len(classrooms))
            peak_hours = self.peak_hours(slot_usage)

        department_usage = self._advisory(
            "department usage",
            lambda: self.store.aggregate_department_usage(filters),
        )
        if department_usage is None:
            unavailable.append(SECTION_DEPARTMENTS)
            departments: list[DepartmentUtilizationOut] = []
        else:
            departments = self.department_utilization(department_usage)

        return UtilizationReport(
            window=ReportingWindowOut(period=window.period.value, start=window.start, end=window.end),
            filters=ReportFiltersOut(
                building=filters.building,
                floor=filters.floor,
                department=filters.department,
                capacity_band=filters.capacity_band.value if filters.capacity_band else None,
                semester=filters.semester,
                academic_year=filters.academic_year,
            ),
            summary=self.summarize(rooms),
            rooms=rooms,
            weekly_trends=weekly_trends,
            departments=departments,
            peak_hours=peak_hours,
            underutilized_rooms=self.underutilized_rooms(classrooms, occupancy),
            unavailable_sections=unavailable,
        )

    def _advisory(self, name: str, compute: Callable[[], T]) -> T | None:
        try:
            return compute()
        except Exception:
            logger.warning("Utilization section '%s' failed; returning it empty", name, exc_info=True)
            return None

    @staticmethod
    def _group_by_room(occupancy: list[RoomOccupancyRow]) -> dict[int, list[RoomOccupancyRow]]:
        grouped: dict[int, list[RoomOccupancyRow]] = defaultdict(list)
        for row in occupancy:
            grouped[row.classroom_id].append(row)
        return grouped

    @staticmethod
    def _average_enrolled(rows: list[RoomOccupancyRow]) -> float:
        if not rows:
            return 0.0
        return sum(row.enrolled_count for row in rows) / len(rows)

    def room_utilization(
        self,
        classrooms: list[ClassroomView],
        occupancy: list[RoomOccupancyRow],
    ) -> list[RoomUtilizationOut]:
        grouped = self._group_by_room(occupancy)
        results: list[tuple[ClassroomView, RoomUtilizationOut]] = []
        for room in classrooms:
            rows = grouped.get(room.id, [])
            scheduled_hours = len({row.entry_id for row in rows})
            utilization = bounded_percentage(scheduled_hours, WEEKLY_AVAILABLE_HOURS)
            enrolled = [row.enrolled_count for row in rows]
            results.append(
                (
                    room,
                    RoomUtilizationOut(
                        classroom_id=room.id,
                        room_number=room.room_number,
                        building=room.building,
                        floor=room.floor,
                        capacity=room.capacity,
                        type=room.type,
                        department=room.department_name or SHARED_POOL_LABEL,
                        scheduled_hours=scheduled_hours,
                        available_hours=WEEKLY_AVAILABLE_HOURS,
                        utilization_percentage=utilization,
                        average_occupancy_percentage=bounded_percentage(self._average_enrolled(rows), room.capacity),
                        peak_occupancy=max(enrolled, default=0),
                        min_occupancy=min(enrolled, default=0),
                        most_used_day=_most_used_day(rows),
                        unique_subjects=len({row.subject_id for row in rows}),
                        unique_faculty=len({row.faculty_id for row in rows}),
                        status=classify_room(scheduled_hours, utilization),
                    ),
                )
            )
        results.sort(key=lambda item: (-item[1].utilization_percentage, item[0].building, item[0].room_number, item[0].id))
        return [item for _, item in results]

    def weekly_trends(self, slot_usage: list[SlotUsageRow], *, total_rooms: int) -> list[WeeklyTrendOut]:
        ordered = sorted(slot_usage, key=lambda row: (DAY_ORDER[row.day_of_week], row.start_time, row.slot_id))
        return [
            WeeklyTrendOut(
                slot_id=row.slot_id,
                day_of_week=row.day_of_week.value,
                time_slot=_slot_label(row),
                scheduled_classes=row.class_count,
                rooms_in_use=row.rooms_in_use,
                total_rooms=total_rooms,
                room_utilization_percentage=bounded_percentage(row.rooms_in_use, total_rooms),
            )
            for row in ordered
        ]

    def peak_hours(self, slot_usage: list[SlotUsageRow]) -> list[PeakHourOut]:
        busy = [row for row in slot_usage if row.class_count > 0]
        if not busy:
            return []
        # Aggregate first: every slot is classified against the same mean.
        mean_class_count = sum(row.class_count for row in busy) / len(busy)
        busy.sort(key=lambda row: (-row.class_count, row.start_time, DAY_ORDER[row.day_of_week], row.slot_id))
        return [
            PeakHourOut(
                slot_id=row.slot_id,
                day_of_week=row.day_of_week.value,
                time_slot=_slot_label(row),
                total_classes=row.class_count,
                rooms_in_use=row.rooms_in_use,
                average_room_capacity=round(row.average_room_capacity) if row.average_room_capacity is not None else None,
                demand_intensity=round(row.class_count / row.rooms_in_use, 2) if row.rooms_in_use else 0.0,
                usage_level=classify_usage(row.class_count, mean_class_count),
            )
            for row in busy
        ]

    def department_utilization(self, usage: list[DepartmentUsageRow]) -> list[DepartmentUtilizationOut]:
        ordered = sorted(usage, key=lambda row: (row.name, row.code, row.department_id))
        return [
            DepartmentUtilizationOut(
                department_code=row.code,
                department_name=row.name,
                owned_classrooms=row.owned_classrooms,
                total_classes_scheduled=row.own_room_classes + row.external_room_classes,
                own_room_usage=row.own_room_classes,
                external_room_usage=row.external_room_classes,
                own_room_utilization_rate=bounded_percentage(
                    row.own_room_classes, row.owned_classrooms * WEEKLY_AVAILABLE_HOURS
                ),
                average_room_capacity=round(row.average_room_capacity) if row.average_room_capacity is not None else None,
                total_student_hours=row.student_hours,
            )
            for row in ordered
        ]

    def underutilized_rooms(
        self,
        classrooms: list[ClassroomView],
        occupancy: list[RoomOccupancyRow],
    ) -> list[UnderutilizedRoomOut]:
        grouped = self._group_by_room(occupancy)
        flagged: list[tuple[int, UnderutilizedRoomOut]] = []
        for room in classrooms:
            rows = grouped.get(room.id, [])
            scheduled_hours = len({row.entry_id for row in rows})
            utilization = bounded_percentage(scheduled_hours, WEEKLY_AVAILABLE_HOURS)
            average_occupancy = self._average_enrolled(rows)
            if not needs_review(utilization, average_occupancy, room.capacity):
                continue
            flagged.append(
                (
                    room.id,
                    UnderutilizedRoomOut(
                        classroom_id=room.id,
                        room_number=room.room_number,
                        building=room.building,
                        floor=room.floor,
                        capacity=room.capacity,
                        type=room.type,
                        department=room.department_name or SHARED_POOL_LABEL,
                        scheduled_hours=scheduled_hours,
                        utilization_rate=utilization,
                        potential_student_hours=room.capacity * scheduled_hours,
                        average_actual_occupancy=round(average_occupancy, 2),
                        recommendation=recommend(scheduled_hours, average_occupancy, room.capacity).value,
                        capacity_efficiency_ratio=(
                            round(room.capacity / average_occupancy, 2) if average_occupancy > 0 else None
                        ),
                    ),
                )
            )

        def sort_key(item: tuple[int, UnderutilizedRoomOut]) -> tuple:
            room_id, out = item
            ratio = out.capacity_efficiency_ratio
            return (out.utilization_rate, ratio is None, -(ratio or 0.0), room_id)

        flagged.sort(key=sort_key)
        return [out for _, out in flagged]

    def summarize(self, rooms: list[RoomUtilizationOut]) -> UtilizationSummaryOut:
        if not rooms:
            return UtilizationSummaryOut(total_rooms=0, average_utilization=0.0, average_occupancy=0.0, underutilized_count=0)
        return UtilizationSummaryOut(
            total_rooms=len(rooms),
            average_utilization=round(sum(room.utilization_percentage for room in rooms) / len(rooms), 2),
            average_occupancy=round(sum(room.average_occupancy_percentage for room in rooms) / len(rooms), 2),
            underutilized_count=sum(
                1 for room in rooms if room.status in (RoomStatus.underutilized, RoomStatus.unused)
            ),
        )

    def filter_options(self) -> FilterOptionsOut:
        options = self.store.list_filter_options()
        return FilterOptionsOut(
            buildings=list(options.buildings),
            floors=list(options.floors),
            departments=[DepartmentOption(code=item.code, name=item.name) for item in options.departments],
            capacity_bands=[band.value for band in CapacityBand],
            periods=[period.value for period in ReportPeriod],
        )
