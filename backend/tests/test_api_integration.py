from datetime import date

import pytest

from campus import seed_campus
from roomwise.api.deps import get_scheduling_store
from roomwise.main import app
from fakes import InMemorySchedulingStore


@pytest.fixture()
def seeded(db):
    return seed_campus(db)


def check(client, **payload):
    return client.post("/api/conflicts/check", json=payload)


def test_conflict_check_reports_existing_class(client, seeded):
    response = check(
        client,
        facultyId=seeded["faculty"]["ada"],
        classroomId=seeded["classrooms"]["r7"],
        slotId=seeded["slots"]["mon_9"],
        semester=1,
        academicYear="2025-2026",
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["hasConflict"] is True
    assert "CS101 - Intro to Programming (Section A) in R5 (Main)" in body["message"]
    assert body["conflicts"][0]["conflictType"] == "faculty"
    assert body["details"]["employeeId"] == "F101"


def test_conflict_check_accepts_snake_case_and_reports_capacity(client, seeded):
    response = check(
        client,
        faculty_id=seeded["faculty"]["alan"],
        classroom_id=seeded["classrooms"]["r7"],
        slot_id=seeded["slots"]["mon_10"],
        semester=1,
        academic_year="2025-2026",
        subject_id=seeded["subjects"]["cs101"],
        section="A",
    )

    assert response.status_code == 200
    body = response.json()
    assert body["hasConflict"] is False
    assert body["warnings"] == [
        "HIGH OCCUPANCY: Classroom R7 (Main) is at 25/30 students",
    ]
    assert body["additionalInfo"]["capacity"]["enrolled"] == 25
    assert "slot_usage" not in body["additionalInfo"]


def test_conflict_check_next_year_is_free(client, seeded):
    response = check(
        client,
        facultyId=seeded["faculty"]["ada"],
        classroomId=seeded["classrooms"]["r7"],
        slotId=seeded["slots"]["mon_9"],
        semester=1,
        academicYear="2026-2027",
    )

    assert response.status_code == 200
    assert response.json()["hasConflict"] is False


def test_invalid_academic_year_returns_fail_closed_envelope(client, seeded):
    response = check(
        client,
        facultyId=seeded["faculty"]["ada"],
        classroomId=seeded["classrooms"]["r7"],
        slotId=seeded["slots"]["mon_9"],
        semester=1,
        academicYear="2025-2027",
    )

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "hasConflict": True,
        "message": "Error checking conflicts: Academic year end year must be exactly one year after start year",
        "details": {},
        "warnings": [],
        "additionalInfo": {},
    }


def test_unknown_resources_return_not_found_envelope(client, seeded):
    response = check(client, facultyId=9001, classroomId=9002, slotId=seeded["slots"]["mon_9"], semester=1, academicYear="2025-2026")

    assert response.status_code == 404
    body = response.json()
    assert body["hasConflict"] is True
    assert body["message"] == "Error checking conflicts: Not found: faculty with id 9001, classroom with id 9002"


def test_store_failure_returns_service_unavailable_envelope(client):
    store = InMemorySchedulingStore()
    store.add_faculty(1)
    store.add_classroom(1)
    store.add_slot(1)
    store.failing.add("list_active_entries")
    app.dependency_overrides[get_scheduling_store] = lambda: store

    response = check(client, facultyId=1, classroomId=1, slotId=1, semester=1, academicYear="2025-2026")

    assert response.status_code == 503
    body = response.json()
    assert body["success"] is False
    assert body["hasConflict"] is True


def test_utilization_report_endpoint(client, seeded):
    response = client.get("/api/utilization/report", params={"period": "current_month", "building": "Main"})

    assert response.status_code == 200
    body = response.json()
    assert body["window"]["period"] == "current_month"
    assert date.fromisoformat(body["window"]["start"]).day == 1
    assert [room["roomNumber"] for room in body["rooms"]] == ["R5", "R7"]
    r5 = body["rooms"][0]
    assert r5["scheduledHours"] == 2
    assert r5["utilizationPercentage"] == 5.0
    assert r5["status"] == "underutilized"
    assert [trend["dayOfWeek"] for trend in body["weeklyTrends"]] == ["Monday", "Monday", "Tuesday"]
    assert {item["departmentCode"] for item in body["departments"]} == {"CS", "MATH"}
    assert body["unavailableSections"] == []
    assert body["summary"]["totalRooms"] == 2


def test_utilization_report_defaults_period_and_scopes_term(client, seeded):
    response = client.get("/api/utilization/report", params={"semester": 2, "academicYear": "2025-2026"})

    assert response.status_code == 200
    body = response.json()
    assert body["window"]["period"] == "current_week"
    assert body["filters"]["semester"] == 2
    assert all(room["scheduledHours"] == 0 for room in body["rooms"])
    assert body["peakHours"] == []


@pytest.mark.parametrize("params", [{"period": "fortnight"}, {"capacityBand": "huge"}, {"academicYear": "2025"}])
def test_utilization_report_rejects_bad_filters(client, params):
    response = client.get("/api/utilization/report", params=params)

    assert response.status_code == 400
    assert "message" in response.json()
    assert "details" in response.json()


def test_utilization_filters_endpoint(client, seeded):
    response = client.get("/api/utilization/filters")

    assert response.status_code == 200
    body = response.json()
    assert body["buildings"] == ["Annex", "Main"]
    assert body["floors"] == [1, 2]
    assert body["departments"][0] == {"code": "CS", "name": "Computer Science"}
    assert body["capacityBands"] == ["small", "medium", "large"]
