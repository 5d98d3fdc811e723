from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ConflictCheckRequest(BaseModel):
    faculty_id: int = Field(validation_alias=AliasChoices("facultyId", "faculty_id"))
    classroom_id: int = Field(validation_alias=AliasChoices("classroomId", "classroom_id"))
    slot_id: int = Field(validation_alias=AliasChoices("slotId", "slot_id"))
    semester: int
    academic_year: str = Field(validation_alias=AliasChoices("academicYear", "academic_year"))
    exclude_entry_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices("excludeEntryId", "exclude_entry_id", "exclude_timetable_id"),
    )
    subject_id: int | None = Field(default=None, validation_alias=AliasChoices("subjectId", "subject_id"))
    section: str | None = None


class ConflictDetail(BaseModel):
    conflict_type: Literal["faculty", "classroom"] = Field(alias="conflictType")
    entry_id: int = Field(alias="entryId")
    subject_code: str = Field(alias="subjectCode")
    subject_name: str = Field(alias="subjectName")
    section: str
    faculty_name: str = Field(alias="facultyName")
    room: str

    model_config = ConfigDict(populate_by_name=True)


class VerdictDetails(BaseModel):
    faculty_name: str = Field(alias="facultyName")
    employee_id: str = Field(alias="employeeId")
    classroom: str
    time_slot: str = Field(alias="timeSlot")
    semester: int
    academic_year: str = Field(alias="academicYear")

    model_config = ConfigDict(populate_by_name=True)


class ClassSummary(BaseModel):
    subject_code: str
    subject_name: str
    section: str
    faculty_name: str
    room: str
    slot_name: str | None = None
    start_time: str
    end_time: str


class ConflictVerdict(BaseModel):
    success: bool = True
    has_conflict: bool = Field(alias="hasConflict")
    message: str
    details: VerdictDetails
    warnings: list[str] = Field(default_factory=list)
    additional_info: dict[str, Any] = Field(default_factory=dict, alias="additionalInfo")
    conflicts: list[ConflictDetail] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)
