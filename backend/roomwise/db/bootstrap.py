from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

import roomwise.models  # noqa: F401
from roomwise.db.base import Base
from roomwise.db.session import engine as default_engine

logger = logging.getLogger(__name__)

# Columns the conflict validator and utilization analyzer read directly.
REQUIRED_COLUMNS: dict[str, set[str]] = {
    "departments": {"id", "code", "name", "is_active"},
    "classrooms": {"id", "room_number", "building", "floor", "capacity", "department_id", "status", "is_active"},
    "faculty": {"id", "employee_id", "first_name", "last_name", "department_id", "status"},
    "subjects": {"id", "code", "name", "department_id"},
    "time_slots": {"id", "day_of_week", "start_time", "end_time", "is_active"},
    "timetable_entries": {
        "id",
        "faculty_id",
        "classroom_id",
        "slot_id",
        "subject_id",
        "section",
        "semester",
        "academic_year",
        "is_active",
    },
    "enrollments": {"id", "subject_id", "section", "semester", "academic_year", "status"},
}


def find_schema_gaps(engine: Engine) -> tuple[list[str], dict[str, list[str]]]:
    with engine.connect() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = sorted(name for name in REQUIRED_COLUMNS if name not in table_names)
        missing_columns: dict[str, list[str]] = {}
        for table_name, required in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            missing = sorted(required - existing)
            if missing:
                missing_columns[table_name] = missing
    return missing_tables, missing_columns


def _assert_required_columns(engine: Engine) -> None:
    missing_tables, missing_columns = find_schema_gaps(engine)
    if missing_tables:
        raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
    if missing_columns:
        described = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
        raise RuntimeError(f"Missing required columns: {', '.join(described)}")


def ensure_runtime_schema_compatibility(engine: Engine | None = None) -> None:
    target = engine or default_engine
    try:
        Base.metadata.create_all(bind=target)
        _assert_required_columns(target)
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
