from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from roomwise.services.thresholds import RoomStatus, UsageLevel


class ReportingWindowOut(BaseModel):
    period: str
    start: date
    end: date


class ReportFiltersOut(BaseModel):
    building: str | None = None
    floor: int | None = None
    department: str | None = None
    capacity_band: str | None = Field(default=None, alias="capacityBand")
    semester: int | None = None
    academic_year: str | None = Field(default=None, alias="academicYear")

    model_config = ConfigDict(populate_by_name=True)


class RoomUtilizationOut(BaseModel):
    classroom_id: int = Field(alias="classroomId")
    room_number: str = Field(alias="roomNumber")
    building: str
    floor: int | None = None
    capacity: int
    type: str
    department: str
    scheduled_hours: int = Field(alias="scheduledHours")
    available_hours: int = Field(alias="availableHours")
    utilization_percentage: float = Field(alias="utilizationPercentage")
    average_occupancy_percentage: float = Field(alias="averageOccupancyPercentage")
    peak_occupancy: int = Field(alias="peakOccupancy")
    min_occupancy: int = Field(alias="minOccupancy")
    most_used_day: str | None = Field(default=None, alias="mostUsedDay")
    unique_subjects: int = Field(alias="uniqueSubjects")
    unique_faculty: int = Field(alias="uniqueFaculty")
    status: RoomStatus

    model_config = ConfigDict(populate_by_name=True)


class WeeklyTrendOut(BaseModel):
    slot_id: int = Field(alias="slotId")
    day_of_week: str = Field(alias="dayOfWeek")
    time_slot: str = Field(alias="timeSlot")
    scheduled_classes: int = Field(alias="scheduledClasses")
    rooms_in_use: int = Field(alias="roomsInUse")
    total_rooms: int = Field(alias="totalRooms")
    room_utilization_percentage: float = Field(alias="roomUtilizationPercentage")

    model_config = ConfigDict(populate_by_name=True)


class DepartmentUtilizationOut(BaseModel):
    department_code: str = Field(alias="departmentCode")
    department_name: str = Field(alias="departmentName")
    owned_classrooms: int = Field(alias="ownedClassrooms")
    total_classes_scheduled: int = Field(alias="totalClassesScheduled")
    own_room_usage: int = Field(alias="ownRoomUsage")
    external_room_usage: int = Field(alias="externalRoomUsage")
    own_room_utilization_rate: float = Field(alias="ownRoomUtilizationRate")
    average_room_capacity: int | None = Field(default=None, alias="averageRoomCapacity")
    total_student_hours: int = Field(alias="totalStudentHours")

    model_config = ConfigDict(populate_by_name=True)


class PeakHourOut(BaseModel):
    slot_id: int = Field(alias="slotId")
    day_of_week: str = Field(alias="dayOfWeek")
    time_slot: str = Field(alias="timeSlot")
    total_classes: int = Field(alias="totalClasses")
    rooms_in_use: int = Field(alias="roomsInUse")
    average_room_capacity: int | None = Field(default=None, alias="averageRoomCapacity")
    demand_intensity: float = Field(alias="demandIntensity")
    usage_level: UsageLevel = Field(alias="usageLevel")

    model_config = ConfigDict(populate_by_name=True)


class UnderutilizedRoomOut(BaseModel):
    classroom_id: int = Field(alias="classroomId")
    room_number: str = Field(alias="roomNumber")
    building: str
    floor: int | None = None
    capacity: int
    type: str
    department: str
    scheduled_hours: int = Field(alias="scheduledHours")
    utilization_rate: float = Field(alias="utilizationRate")
    potential_student_hours: int = Field(alias="potentialStudentHours")
    average_actual_occupancy: float = Field(alias="averageActualOccupancy")
    recommendation: str
    capacity_efficiency_ratio: float | None = Field(default=None, alias="capacityEfficiencyRatio")

    model_config = ConfigDict(populate_by_name=True)


class UtilizationSummaryOut(BaseModel):
    total_rooms: int = Field(alias="totalRooms")
    average_utilization: float = Field(alias="averageUtilization")
    average_occupancy: float = Field(alias="averageOccupancy")
    underutilized_count: int = Field(alias="underutilizedCount")

    model_config = ConfigDict(populate_by_name=True)


class UtilizationReport(BaseModel):
    window: ReportingWindowOut
    filters: ReportFiltersOut
    summary: UtilizationSummaryOut
    rooms: list[RoomUtilizationOut] = Field(default_factory=list)
    weekly_trends: list[WeeklyTrendOut] = Field(default_factory=list, alias="weeklyTrends")
    departments: list[DepartmentUtilizationOut] = Field(default_factory=list)
    peak_hours: list[PeakHourOut] = Field(default_factory=list, alias="peakHours")
    underutilized_rooms: list[UnderutilizedRoomOut] = Field(default_factory=list, alias="underutilizedRooms")
    unavailable_sections: list[str] = Field(default_factory=list, alias="unavailableSections")

    model_config = ConfigDict(populate_by_name=True)


class DepartmentOption(BaseModel):
    code: str
    name: str


class FilterOptionsOut(BaseModel):
    buildings: list[str] = Field(default_factory=list)
    floors: list[int] = Field(default_factory=list)
    departments: list[DepartmentOption] = Field(default_factory=list)
    capacity_bands: list[str] = Field(default_factory=list, alias="capacityBands")
    periods: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)
