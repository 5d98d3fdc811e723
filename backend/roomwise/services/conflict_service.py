from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import TypeVar

from roomwise.core.exceptions import AppError, ConflictCheckError, InvalidArgumentError, ResourceNotFoundError
from roomwise.schemas.conflict import ClassSummary, ConflictCheckRequest, ConflictDetail, ConflictVerdict, VerdictDetails
from roomwise.services.store import (
    ClassroomView,
    EntryFilter,
    FacultyView,
    ScheduledClass,
    SchedulingStore,
    TimeSlotView,
)
from roomwise.services.thresholds import CapacityLevel, classify_capacity

logger = logging.getLogger(__name__)

ACADEMIC_YEAR_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{4}$")
DEFAULT_SECTION = "A"
REVIEW_WARNINGS_MESSAGE = "Schedule is available but please review the warnings below"

T = TypeVar("T")


def fail_closed_payload(exc: AppError) -> dict:
    """Envelope returned when a conflict check fails; it always reports a conflict."""
    return {
        "success": False,
        "hasConflict": True,
        "message": f"Error checking conflicts: {exc.message}",
        "details": {},
        "warnings": [],
        "additionalInfo": {},
    }


def validate_academic_year(value: str) -> str:
    academic_year = (value or "").strip()
    if not ACADEMIC_YEAR_PATTERN.match(academic_year):
        raise InvalidArgumentError(
            "Academic year must be in YYYY-YYYY format (e.g., 2025-2026)",
            details={"academic_year": value},
        )
    start_year, end_year = (int(part) for part in academic_year.split("-"))
    if end_year != start_year + 1:
        raise InvalidArgumentError(
            "Academic year end year must be exactly one year after start year",
            details={"academic_year": value},
        )
    return academic_year


def validate_request(request: ConflictCheckRequest) -> ConflictCheckRequest:
    """Return a normalized copy of ``request`` or raise InvalidArgumentError."""
    invalid = {
        name: value
        for name, value in (
            ("faculty_id", request.faculty_id),
            ("classroom_id", request.classroom_id),
            ("slot_id", request.slot_id),
            ("semester", request.semester),
        )
        if value <= 0
    }
    for name in ("exclude_entry_id", "subject_id"):
        value = getattr(request, name)
        if value is not None and value <= 0:
            invalid[name] = value
    if invalid:
        raise InvalidArgumentError("Invalid ID values provided", details={"invalid": invalid})

    section = request.section
    if section is not None:
        section = section.strip() or DEFAULT_SECTION
    return request.model_copy(
        update={"academic_year": validate_academic_year(request.academic_year), "section": section}
    )


def _summarize(scheduled: ScheduledClass) -> ClassSummary:
    return ClassSummary(
        subject_code=scheduled.subject_code,
        subject_name=scheduled.subject_name,
        section=scheduled.section,
        faculty_name=scheduled.faculty_name,
        room=scheduled.room,
        slot_name=scheduled.slot_name,
        start_time=scheduled.start_time.strftime("%H:%M"),
        end_time=scheduled.end_time.strftime("%H:%M"),
    )


def _conflict_detail(conflict_type: str, scheduled: ScheduledClass) -> ConflictDetail:
    return ConflictDetail(
        conflict_type=conflict_type,
        entry_id=scheduled.entry_id,
        subject_code=scheduled.subject_code,
        subject_name=scheduled.subject_name,
        section=scheduled.section,
        faculty_name=scheduled.faculty_name,
        room=scheduled.room,
    )


def capacity_warning(level: CapacityLevel | None, enrolled: int, classroom: ClassroomView) -> str | None:
    if level is CapacityLevel.capacity_exceeded:
        return (
            f"CAPACITY EXCEEDED: {enrolled} students enrolled but classroom {classroom.display_name} "
            f"only has capacity for {classroom.capacity}"
        )
    if level is CapacityLevel.near_capacity:
        return f"NEAR CAPACITY: Classroom {classroom.display_name} is nearly full ({enrolled}/{classroom.capacity} students)"
    if level is CapacityLevel.high_occupancy:
        return f"HIGH OCCUPANCY: Classroom {classroom.display_name} is at {enrolled}/{classroom.capacity} students"
    return None


def availability_warnings(faculty: FacultyView, classroom: ClassroomView, slot: TimeSlotView) -> list[str]:
    warnings: list[str] = []
    if not classroom.is_active:
        warnings.append(f"CLASSROOM INACTIVE: {classroom.display_name} is not active")
    elif classroom.status != "available":
        warnings.append(f"CLASSROOM UNAVAILABLE: {classroom.display_name} is currently {classroom.status}")
    if not slot.is_active:
        warnings.append(f"TIME SLOT INACTIVE: {slot.label} is not active")
    if faculty.status != "active":
        warnings.append(f"FACULTY UNAVAILABLE: {faculty.full_name} is currently {faculty.status.replace('_', ' ')}")
    return warnings


class ConflictValidator:
    """Pre-commit check for one proposed (faculty, classroom, slot, term) assignment.

    The verdict is decided by the two exclusivity lookups alone. Everything
    computed afterwards (capacity, day context, slot popularity, department and
    availability notes) is advisory: a failing advisory lookup is logged, named
    in ``additionalInfo["unavailable_checks"]`` and skipped.
    """

    def __init__(self, store: SchedulingStore) -> None:
        self.store = store

    def check(self, request: ConflictCheckRequest) -> ConflictVerdict:
        request = validate_request(request)
        faculty, classroom, slot = self._resolve_resources(request)
        details = VerdictDetails(
            faculty_name=faculty.full_name,
            employee_id=faculty.employee_id,
            classroom=classroom.display_name,
            time_slot=slot.label,
            semester=request.semester,
            academic_year=request.academic_year,
        )

        faculty_conflicts, classroom_conflicts = self._find_conflicts(request)
        if faculty_conflicts or classroom_conflicts:
            return ConflictVerdict(
                has_conflict=True,
                message=self._conflict_message(faculty, classroom, faculty_conflicts, classroom_conflicts),
                details=details,
                conflicts=[_conflict_detail("faculty", item) for item in faculty_conflicts]
                + [_conflict_detail("classroom", item) for item in classroom_conflicts],
            )

        warnings, additional_info = self._collect_advisories(request, faculty, classroom, slot)
        if warnings:
            message = REVIEW_WARNINGS_MESSAGE
        else:
            message = (
                f"No conflicts detected. Schedule is available for {faculty.full_name} "
                f"in {classroom.display_name} on {slot.label}"
            )
        return ConflictVerdict(
            has_conflict=False,
            message=message,
            details=details,
            warnings=warnings,
            additional_info=additional_info,
        )

    def _resolve_resources(self, request: ConflictCheckRequest) -> tuple[FacultyView, ClassroomView, TimeSlotView]:
        try:
            faculty = self.store.find_faculty(request.faculty_id)
            classroom = self.store.find_classroom(request.classroom_id)
            slot = self.store.find_time_slot(request.slot_id)
        except Exception as exc:
            logger.exception("Resource lookup failed for conflict check")
            raise ConflictCheckError("Unable to load scheduling resources; assume the slot is taken") from exc

        missing: dict[str, int] = {}
        if faculty is None:
            missing["faculty"] = request.faculty_id
        if classroom is None:
            missing["classroom"] = request.classroom_id
        if slot is None:
            missing["time_slot"] = request.slot_id
        if missing:
            raise ResourceNotFoundError(missing)
        return faculty, classroom, slot

    def _find_conflicts(self, request: ConflictCheckRequest) -> tuple[list[ScheduledClass], list[ScheduledClass]]:
        try:
            faculty_conflicts = self.store.list_active_entries(
                EntryFilter(
                    semester=request.semester,
                    academic_year=request.academic_year,
                    faculty_id=request.faculty_id,
                    slot_id=request.slot_id,
                    exclude_entry_id=request.exclude_entry_id,
                )
            )
            classroom_conflicts = self.store.list_active_entries(
                EntryFilter(
                    semester=request.semester,
                    academic_year=request.academic_year,
                    classroom_id=request.classroom_id,
                    slot_id=request.slot_id,
                    exclude_entry_id=request.exclude_entry_id,
                )
            )
        except AppError:
            raise
        except Exception as exc:
            logger.exception(
                "Conflict lookup failed for faculty %s, classroom %s, slot %s",
                request.faculty_id,
                request.classroom_id,
                request.slot_id,
            )
            raise ConflictCheckError("Unable to verify scheduling conflicts; assume the slot is taken") from exc
        return faculty_conflicts, classroom_conflicts

    def _conflict_message(
        self,
        faculty: FacultyView,
        classroom: ClassroomView,
        faculty_conflicts: list[ScheduledClass],
        classroom_conflicts: list[ScheduledClass],
    ) -> str:
        parts: list[str] = []
        if faculty_conflicts:
            existing = faculty_conflicts[0]
            parts.append(
                f"Faculty conflict: {faculty.full_name} is already teaching {existing.subject_code} - "
                f"{existing.subject_name} (Section {existing.section}) in {existing.room}"
            )
        if classroom_conflicts:
            existing = classroom_conflicts[0]
            parts.append(
                f"Classroom conflict: {classroom.display_name} is already booked for {existing.subject_code} - "
                f"{existing.subject_name} with {existing.faculty_name} (Section {existing.section})"
            )
        return ". ".join(parts)

    def _advisory(self, name: str, compute: Callable[[], T], unavailable: list[str]) -> T | None:
        try:
            return compute()
        except Exception:
            logger.warning("Advisory check '%s' failed; continuing without it", name, exc_info=True)
            unavailable.append(name)
            return None

    def _collect_advisories(
        self,
        request: ConflictCheckRequest,
        faculty: FacultyView,
        classroom: ClassroomView,
        slot: TimeSlotView,
    ) -> tuple[list[str], dict]:
        warnings: list[str] = []
        info: dict = {}
        unavailable: list[str] = []

        if request.subject_id is not None and request.section is not None:
            assessment = self._advisory(
                "capacity",
                lambda: self._assess_capacity(request, classroom),
                unavailable,
            )
            if assessment is not None:
                warning, info["capacity"] = assessment
                if warning:
                    warnings.append(warning)

            department_warning = self._advisory(
                "department_consistency",
                lambda: self._department_warning(request.subject_id, faculty),
                unavailable,
            )
            if department_warning:
                warnings.append(department_warning)

        warnings.extend(availability_warnings(faculty, classroom, slot))

        faculty_day = self._advisory(
            "faculty_schedule",
            lambda: self.store.list_active_entries(
                EntryFilter(
                    semester=request.semester,
                    academic_year=request.academic_year,
                    faculty_id=request.faculty_id,
                    day_of_week=slot.day_of_week,
                    exclude_slot_id=request.slot_id,
                )
            ),
            unavailable,
        )
        if faculty_day:
            info["faculty_schedule"] = {
                "message": f"Faculty member has {len(faculty_day)} other class(es) on {slot.day_of_week.value}",
                "classes": [_summarize(item).model_dump() for item in faculty_day],
            }

        classroom_day = self._advisory(
            "classroom_usage",
            lambda: self.store.list_active_entries(
                EntryFilter(
                    semester=request.semester,
                    academic_year=request.academic_year,
                    classroom_id=request.classroom_id,
                    day_of_week=slot.day_of_week,
                    exclude_slot_id=request.slot_id,
                )
            ),
            unavailable,
        )
        if classroom_day:
            info["classroom_usage"] = {
                "message": f"Classroom has {len(classroom_day)} other class(es) on {slot.day_of_week.value}",
                "classes": [_summarize(item).model_dump() for item in classroom_day],
            }

        slot_count = self._advisory(
            "slot_usage",
            lambda: self.store.count_active_entries(
                EntryFilter(
                    semester=request.semester,
                    academic_year=request.academic_year,
                    slot_id=request.slot_id,
                    exclude_entry_id=request.exclude_entry_id,
                )
            ),
            unavailable,
        )
        if slot_count:
            info["slot_usage"] = {
                "message": f"This time slot is used by {slot_count} other class(es)",
                "count": slot_count,
            }

        if unavailable:
            info["unavailable_checks"] = unavailable
        return warnings, info

    def _assess_capacity(self, request: ConflictCheckRequest, classroom: ClassroomView) -> tuple[str | None, dict]:
        enrolled = self.store.count_enrolled(
            request.subject_id,
            request.section,
            request.semester,
            request.academic_year,
        )
        level = classify_capacity(enrolled, classroom.capacity)
        return capacity_warning(level, enrolled, classroom), {
            "level": level.value if level else None,
            "enrolled": enrolled,
            "capacity": classroom.capacity,
        }

    def _department_warning(self, subject_id: int, faculty: FacultyView) -> str | None:
        subject = self.store.find_subject(subject_id)
        if subject is None:
            raise LookupError(f"Subject {subject_id} not found")
        if subject.department_id is None or faculty.department_id is None:
            return None
        if subject.department_id == faculty.department_id:
            return None
        return (
            f"CROSS-DEPARTMENT: {faculty.full_name} is scheduled to teach {subject.code} - {subject.name}, "
            "a subject owned by another department"
        )
