"""Shared thresholds and classification rules for conflict warnings and room analytics.

Every percentage the engine reports goes through :func:`bounded_percentage`, so
results stay inside ``[0, 100]`` and a zero denominator never raises.
"""

from __future__ import annotations

from enum import Enum

WORKING_DAYS_PER_WEEK = 5
SLOTS_PER_DAY = 8
# Single weekly denominator for every utilization figure.
WEEKLY_AVAILABLE_HOURS = WORKING_DAYS_PER_WEEK * SLOTS_PER_DAY

UNDERUTILIZED_BELOW_PERCENT = 30.0
OVERUTILIZED_ABOVE_PERCENT = 80.0
PEAK_FACTOR = 1.5
LOW_FACTOR = 0.5
REVIEW_UTILIZATION_BELOW_PERCENT = 50.0
REVIEW_OCCUPANCY_BELOW_RATIO = 0.4
SMALLER_ROOM_OCCUPANCY_BELOW_RATIO = 0.3
HIGH_SCHEDULING_POTENTIAL_BELOW_HOURS = 5


class CapacityLevel(str, Enum):
    capacity_exceeded = "capacity_exceeded"
    near_capacity = "near_capacity"
    high_occupancy = "high_occupancy"


class RoomStatus(str, Enum):
    unused = "unused"
    underutilized = "underutilized"
    optimal = "optimal"
    overutilized = "overutilized"


class UsageLevel(str, Enum):
    peak = "peak"
    normal = "normal"
    low = "low"


class CapacityBand(str, Enum):
    small = "small"
    medium = "medium"
    large = "large"

    @property
    def bounds(self) -> tuple[int | None, int | None]:
        if self is CapacityBand.small:
            return None, 30
        if self is CapacityBand.medium:
            return 31, 60
        return 61, None

    def contains(self, capacity: int) -> bool:
        lower, upper = self.bounds
        if lower is not None and capacity < lower:
            return False
        if upper is not None and capacity > upper:
            return False
        return True


class Recommendation(str, Enum):
    repurpose = "Consider repurposing or maintenance"
    schedule_more = "High potential for additional scheduling"
    smaller_room = "Consider smaller capacity alternative"
    monitor = "Monitor for optimization opportunities"


def bounded_percentage(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    value = numerator * 100.0 / denominator
    return round(min(100.0, max(0.0, value)), 2)


def classify_capacity(enrolled: int, capacity: int) -> CapacityLevel | None:
    """Return the single most severe capacity level, or None below 80% occupancy."""
    # Integer comparisons keep the 90% and 80% boundaries exact.
    if enrolled > capacity:
        return CapacityLevel.capacity_exceeded
    if enrolled * 10 > capacity * 9:
        return CapacityLevel.near_capacity
    if enrolled * 10 > capacity * 8:
        return CapacityLevel.high_occupancy
    return None


def classify_room(scheduled_hours: int, utilization_percentage: float) -> RoomStatus:
    if scheduled_hours == 0:
        return RoomStatus.unused
    if utilization_percentage < UNDERUTILIZED_BELOW_PERCENT:
        return RoomStatus.underutilized
    if utilization_percentage > OVERUTILIZED_ABOVE_PERCENT:
        return RoomStatus.overutilized
    return RoomStatus.optimal


def classify_usage(class_count: int, mean_class_count: float) -> UsageLevel:
    if class_count > PEAK_FACTOR * mean_class_count:
        return UsageLevel.peak
    if class_count < LOW_FACTOR * mean_class_count:
        return UsageLevel.low
    return UsageLevel.normal


def needs_review(utilization_percentage: float, average_occupancy: float, capacity: int) -> bool:
    return (
        utilization_percentage < REVIEW_UTILIZATION_BELOW_PERCENT
        or average_occupancy < capacity * REVIEW_OCCUPANCY_BELOW_RATIO
    )


def recommend(scheduled_hours: int, average_occupancy: float, capacity: int) -> Recommendation:
    if scheduled_hours == 0:
        return Recommendation.repurpose
    if scheduled_hours < HIGH_SCHEDULING_POTENTIAL_BELOW_HOURS:
        return Recommendation.schedule_more
    if average_occupancy < capacity * SMALLER_ROOM_OCCUPANCY_BELOW_RATIO:
        return Recommendation.smaller_room
    return Recommendation.monitor
