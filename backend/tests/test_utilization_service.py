from datetime import date, time

import pytest

from fakes import InMemorySchedulingStore
from roomwise.core.exceptions import InvalidArgumentError
from roomwise.models.time_slot import DayOfWeek
from roomwise.services.store import SlotUsageRow, UsageFilters
from roomwise.services.thresholds import CapacityBand, Recommendation, RoomStatus, UsageLevel
from roomwise.services.utilization_service import UtilizationAnalyzer, build_usage_filters

TODAY = date(2026, 10, 14)
WORK_DAYS = [DayOfWeek.monday, DayOfWeek.tuesday, DayOfWeek.wednesday, DayOfWeek.thursday, DayOfWeek.friday]


def full_week_store() -> InMemorySchedulingStore:
    store = InMemorySchedulingStore()
    store.add_department(1, "CS", "Computer Science")
    store.add_faculty(1, "Grace", "Hopper", department_id=1)
    store.add_subject(1, "CS101", "Intro to Programming", department_id=1)
    slot_id = 1
    for day in WORK_DAYS:
        for hour in range(9, 17):
            store.add_slot(slot_id, day, time(hour, 0), time(hour + 1, 0))
            slot_id += 1
    return store


def schedule(store: InMemorySchedulingStore, classroom_id: int, hours: int, *, first_entry_id: int, section: str = "A"):
    for offset in range(hours):
        store.add_entry(
            first_entry_id + offset,
            faculty_id=1,
            classroom_id=classroom_id,
            slot_id=offset + 1,
            subject_id=1,
            section=section,
        )


def slot_row(slot_id: int, class_count: int, hour: int, rooms_in_use: int | None = None) -> SlotUsageRow:
    return SlotUsageRow(
        slot_id=slot_id,
        day_of_week=DayOfWeek.monday,
        start_time=time(hour, 0),
        end_time=time(hour + 1, 0),
        slot_name=None,
        class_count=class_count,
        rooms_in_use=class_count if rooms_in_use is None else rooms_in_use,
        average_room_capacity=30.0 if class_count else None,
    )


def test_room_status_follows_utilization_boundaries():
    store = full_week_store()
    for classroom_id in range(1, 5):
        store.add_classroom(classroom_id, f"R{classroom_id}", capacity=30, department_id=1)
    schedule(store, 2, 10, first_entry_id=100)
    schedule(store, 3, 20, first_entry_id=200)
    schedule(store, 4, 35, first_entry_id=300)

    report = UtilizationAnalyzer(store).build_report("current_week", UsageFilters(), TODAY)

    assert [(room.classroom_id, room.utilization_percentage, room.status) for room in report.rooms] == [
        (4, 87.5, RoomStatus.overutilized),
        (3, 50.0, RoomStatus.optimal),
        (2, 25.0, RoomStatus.underutilized),
        (1, 0.0, RoomStatus.unused),
    ]
    assert all(room.available_hours == 40 for room in report.rooms)
    assert report.summary.total_rooms == 4
    assert report.summary.underutilized_count == 2
    assert report.summary.average_utilization == 40.62


def test_room_metrics_describe_occupancy_and_mix():
    store = full_week_store()
    store.add_faculty(2, "Alan", "Turing", department_id=1)
    store.add_subject(2, "CS102", "Data Structures", department_id=1)
    store.add_classroom(1, "R1", capacity=40, department_id=1)
    # Slots 1 and 2 are Monday, slot 9 is Tuesday.
    store.add_entry(1, faculty_id=1, classroom_id=1, slot_id=1, subject_id=1, section="A")
    store.add_entry(2, faculty_id=2, classroom_id=1, slot_id=9, subject_id=2, section="A")
    store.add_entry(3, faculty_id=2, classroom_id=1, slot_id=2, subject_id=2, section="B")
    store.set_enrolled(1, "A", 30)
    store.set_enrolled(2, "A", 10)

    room = UtilizationAnalyzer(store).build_report("today", UsageFilters(), TODAY).rooms[0]

    assert room.scheduled_hours == 3
    assert room.peak_occupancy == 30
    assert room.min_occupancy == 0
    assert room.average_occupancy_percentage == pytest.approx(33.33)
    assert room.most_used_day == "Monday"
    assert room.unique_subjects == 2
    assert room.unique_faculty == 2
    assert room.department == "Computer Science"


def test_peak_classification_uses_mean_of_busy_slots():
    rows = [slot_row(1, 10, 9), slot_row(2, 10, 10), slot_row(3, 10, 11), slot_row(4, 1, 12), slot_row(5, 1, 13)]
    rows.append(slot_row(6, 0, 14))

    peak_hours = UtilizationAnalyzer(InMemorySchedulingStore()).peak_hours(rows)

    assert [(item.slot_id, item.usage_level) for item in peak_hours] == [
        (1, UsageLevel.peak),
        (2, UsageLevel.peak),
        (3, UsageLevel.peak),
        (4, UsageLevel.low),
        (5, UsageLevel.low),
    ]
    assert peak_hours[0].demand_intensity == 1.0
    assert peak_hours[0].time_slot == "9:00 AM - 10:00 AM"


def test_peak_hours_report_demand_per_room_in_use():
    rows = [slot_row(1, 6, 9, rooms_in_use=4), slot_row(2, 6, 10, rooms_in_use=6)]

    peak_hours = UtilizationAnalyzer(InMemorySchedulingStore()).peak_hours(rows)

    assert [item.demand_intensity for item in peak_hours] == [1.5, 1.0]
    assert {item.usage_level for item in peak_hours} == {UsageLevel.normal}


def test_weekly_trends_are_ordered_by_day_then_time():
    store = InMemorySchedulingStore()
    store.add_faculty(1)
    store.add_subject(1, "CS101", "Intro to Programming")
    store.add_classroom(1, capacity=30)
    store.add_classroom(2, capacity=30)
    store.add_slot(1, DayOfWeek.tuesday, time(9, 0), time(10, 0))
    store.add_slot(2, DayOfWeek.monday, time(10, 0), time(11, 0))
    store.add_slot(3, DayOfWeek.monday, time(9, 0), time(10, 0))
    store.add_slot(4, DayOfWeek.friday, time(9, 0), time(10, 0), is_active=False)
    store.add_entry(1, faculty_id=1, classroom_id=1, slot_id=3, subject_id=1)

    trends = UtilizationAnalyzer(store).build_report("current_week", UsageFilters(), TODAY).weekly_trends

    assert [(item.slot_id, item.day_of_week) for item in trends] == [(3, "Monday"), (2, "Monday"), (1, "Tuesday")]
    assert trends[0].scheduled_classes == 1
    assert trends[0].total_rooms == 2
    assert trends[0].room_utilization_percentage == 50.0
    assert trends[1].room_utilization_percentage == 0.0


def test_underutilized_rooms_get_recommendations_and_ordering():
    store = full_week_store()
    store.add_classroom(1, "A", capacity=30)
    store.add_classroom(2, "B", capacity=30)
    store.add_classroom(3, "C", capacity=60)
    store.add_classroom(4, "D", capacity=30)
    schedule(store, 1, 3, first_entry_id=100, section="A")
    schedule(store, 3, 25, first_entry_id=300, section="C")
    schedule(store, 4, 25, first_entry_id=400, section="D")
    store.set_enrolled(1, "A", 20)
    store.set_enrolled(1, "C", 10)
    store.set_enrolled(1, "D", 25)

    flagged = UtilizationAnalyzer(store).build_report("current_week", UsageFilters(), TODAY).underutilized_rooms

    assert [item.classroom_id for item in flagged] == [2, 1, 3]
    by_id = {item.classroom_id: item for item in flagged}
    assert by_id[2].recommendation == Recommendation.repurpose.value
    assert by_id[2].capacity_efficiency_ratio is None
    assert by_id[1].recommendation == Recommendation.schedule_more.value
    assert by_id[1].capacity_efficiency_ratio == 1.5
    assert by_id[1].potential_student_hours == 90
    assert by_id[3].recommendation == Recommendation.smaller_room.value
    assert by_id[3].capacity_efficiency_ratio == 6.0
    assert by_id[3].utilization_rate == 62.5


def test_zero_enrollment_yields_null_efficiency_ratio():
    store = full_week_store()
    store.add_classroom(1, capacity=45)
    schedule(store, 1, 8, first_entry_id=1)

    flagged = UtilizationAnalyzer(store).build_report("current_week", UsageFilters(), TODAY).underutilized_rooms

    assert len(flagged) == 1
    assert flagged[0].average_actual_occupancy == 0.0
    assert flagged[0].capacity_efficiency_ratio is None
    assert flagged[0].recommendation == Recommendation.smaller_room.value


def test_ties_in_underutilized_ordering_fall_back_to_room_id():
    store = full_week_store()
    store.add_classroom(9, "Z", capacity=30)
    store.add_classroom(3, "Y", capacity=30)

    flagged = UtilizationAnalyzer(store).build_report("current_week", UsageFilters(), TODAY).underutilized_rooms

    assert [item.classroom_id for item in flagged] == [3, 9]


def test_department_split_between_own_and_external_rooms():
    store = full_week_store()
    store.add_department(2, "MATH", "Mathematics")
    store.add_subject(2, "MATH201", "Linear Algebra", department_id=2)
    store.add_classroom(1, capacity=30, department_id=1)
    store.add_classroom(2, capacity=50, department_id=1)
    store.add_classroom(3, capacity=80)
    store.add_entry(1, faculty_id=1, classroom_id=1, slot_id=1, subject_id=1, section="A")
    store.add_entry(2, faculty_id=1, classroom_id=2, slot_id=2, subject_id=1, section="A")
    store.add_entry(3, faculty_id=1, classroom_id=3, slot_id=3, subject_id=1, section="A")
    store.add_entry(4, faculty_id=1, classroom_id=1, slot_id=4, subject_id=2, section="A")
    store.set_enrolled(1, "A", 25)
    store.set_enrolled(2, "A", 12)

    departments = UtilizationAnalyzer(store).build_report("current_week", UsageFilters(), TODAY).departments

    cs, math = departments
    assert (cs.department_code, cs.total_classes_scheduled, cs.own_room_usage, cs.external_room_usage) == ("CS", 3, 2, 1)
    assert cs.own_room_utilization_rate == 2.5
    assert cs.average_room_capacity == 40
    assert cs.total_student_hours == 75
    assert (math.department_code, math.owned_classrooms, math.external_room_usage) == ("MATH", 0, 1)
    assert math.own_room_utilization_rate == 0.0
    assert math.average_room_capacity is None
    assert math.total_student_hours == 12


def test_facets_and_term_scope_restrict_the_population():
    store = full_week_store()
    store.add_classroom(1, "S1", building="North", capacity=25)
    store.add_classroom(2, "M1", building="North", capacity=45)
    store.add_classroom(3, "L1", building="South", capacity=90)
    store.add_entry(1, faculty_id=1, classroom_id=1, slot_id=1, subject_id=1, semester=1)
    store.add_entry(2, faculty_id=1, classroom_id=1, slot_id=2, subject_id=1, semester=2)
    analyzer = UtilizationAnalyzer(store)

    north = analyzer.build_report("current_week", build_usage_filters(building="North"), TODAY)
    small = analyzer.build_report("current_week", build_usage_filters(capacity_band="small"), TODAY)
    first_term = analyzer.build_report(
        "current_week",
        build_usage_filters(semester=1, academic_year="2025-2026"),
        TODAY,
    )

    assert sorted(room.classroom_id for room in north.rooms) == [1, 2]
    assert [room.classroom_id for room in small.rooms] == [1]
    assert small.rooms[0].scheduled_hours == 2
    assert small.filters.capacity_band == "small"
    room_one = next(room for room in first_term.rooms if room.classroom_id == 1)
    assert room_one.scheduled_hours == 1


def test_failed_slot_aggregation_empties_trend_and_peak_sections():
    store = full_week_store()
    store.add_classroom(1)
    schedule(store, 1, 4, first_entry_id=1)
    store.failing.add("aggregate_weekly_slot_usage")

    report = UtilizationAnalyzer(store).build_report("current_week", UsageFilters(), TODAY)

    assert report.weekly_trends == []
    assert report.peak_hours == []
    assert report.unavailable_sections == ["weekly_trends", "peak_hours"]
    assert report.rooms[0].scheduled_hours == 4
    assert report.departments


def test_failed_department_aggregation_empties_department_section():
    store = full_week_store()
    store.add_classroom(1)
    store.failing.add("aggregate_department_usage")

    report = UtilizationAnalyzer(store).build_report("current_week", UsageFilters(), TODAY)

    assert report.departments == []
    assert report.unavailable_sections == ["departments"]


def test_failed_room_occupancy_propagates():
    store = full_week_store()
    store.failing.add("list_room_occupancy")

    with pytest.raises(RuntimeError):
        UtilizationAnalyzer(store).build_report("current_week", UsageFilters(), TODAY)


def test_identical_inputs_produce_identical_reports():
    store = full_week_store()
    for classroom_id in range(1, 4):
        store.add_classroom(classroom_id, capacity=30 * classroom_id)
    schedule(store, 2, 6, first_entry_id=10)
    schedule(store, 3, 6, first_entry_id=20)
    store.set_enrolled(1, "A", 18)
    analyzer = UtilizationAnalyzer(store)

    first = analyzer.build_report("current_month", UsageFilters(), TODAY)
    second = analyzer.build_report("current_month", UsageFilters(), TODAY)

    assert first.model_dump_json(by_alias=True) == second.model_dump_json(by_alias=True)


def test_report_carries_resolved_window():
    report = UtilizationAnalyzer(InMemorySchedulingStore()).build_report("current_week", UsageFilters(), TODAY)

    assert report.window.period == "current_week"
    assert report.window.start == date(2026, 10, 12)
    assert report.window.end == date(2026, 10, 18)
    assert report.summary.total_rooms == 0
    assert report.summary.average_utilization == 0.0


def test_filter_options_list_facets():
    store = InMemorySchedulingStore()
    store.add_department(2, "MATH", "Mathematics")
    store.add_department(1, "CS", "Computer Science")
    store.add_classroom(1, building="South", floor=2)
    store.add_classroom(2, building="North", floor=None)
    store.add_classroom(3, building="East", floor=1, is_active=False)

    options = UtilizationAnalyzer(store).filter_options()

    assert options.buildings == ["North", "South"]
    assert options.floors == [2]
    assert [item.code for item in options.departments] == ["CS", "MATH"]
    assert options.capacity_bands == ["small", "medium", "large"]
    assert "current_semester" in options.periods


def test_build_usage_filters_normalizes_and_validates():
    filters = build_usage_filters(building="  ", department=" CS ", capacity_band="Large")

    assert filters.building is None
    assert filters.department == "CS"
    assert filters.capacity_band is CapacityBand.large

    with pytest.raises(InvalidArgumentError):
        build_usage_filters(capacity_band="huge")
    with pytest.raises(InvalidArgumentError):
        build_usage_filters(semester=0)
    with pytest.raises(InvalidArgumentError):
        build_usage_filters(academic_year="2025-2030")
    with pytest.raises(InvalidArgumentError):
        build_usage_filters(academic_year="٢٠٢٥-٢٠٢٦")
