from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from roomwise.core.exceptions import InvalidArgumentError

SEMESTER_LOOKBACK_MONTHS = 3


class ReportPeriod(str, Enum):
    today = "today"
    current_week = "current_week"
    current_month = "current_month"
    last_month = "last_month"
    current_semester = "current_semester"


@dataclass(frozen=True)
class ReportingWindow:
    period: ReportPeriod
    start: date
    end: date


def parse_report_period(value: ReportPeriod | str) -> ReportPeriod:
    if isinstance(value, ReportPeriod):
        return value
    normalized = (value or "").strip().lower().replace("-", "_")
    try:
        return ReportPeriod(normalized)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in ReportPeriod)
        raise InvalidArgumentError(
            f"Unknown reporting period '{value}'. Expected one of: {allowed}",
            details={"period": value},
        ) from exc


def _month_end(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def _shift_months(day: date, months: int) -> date:
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def resolve_reporting_window(period: ReportPeriod | str, today: date) -> ReportingWindow:
    resolved = parse_report_period(period)
    if resolved is ReportPeriod.today:
        return ReportingWindow(resolved, today, today)
    if resolved is ReportPeriod.current_week:
        monday = today - timedelta(days=today.weekday())
        return ReportingWindow(resolved, monday, monday + timedelta(days=6))
    if resolved is ReportPeriod.current_month:
        first = today.replace(day=1)
        return ReportingWindow(resolved, first, _month_end(first))
    if resolved is ReportPeriod.last_month:
        last_of_previous = today.replace(day=1) - timedelta(days=1)
        return ReportingWindow(resolved, last_of_previous.replace(day=1), last_of_previous)
    return ReportingWindow(resolved, _shift_months(today, -SEMESTER_LOOKBACK_MONTHS), today)
