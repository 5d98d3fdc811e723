"""create scheduling tables

Revision ID: 20261018_0001
Revises: None
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


classroom_type_enum = sa.Enum("lecture", "lab", "seminar", "auditorium", name="classroom_type")
classroom_status_enum = sa.Enum("available", "maintenance", "reserved", "closed", name="classroom_status")
faculty_status_enum = sa.Enum("active", "inactive", "on_leave", name="faculty_status")
day_of_week_enum = sa.Enum(
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday", name="day_of_week"
)
enrollment_status_enum = sa.Enum("enrolled", "dropped", "completed", name="enrollment_status")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "departments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_departments_code", "departments", ["code"], unique=True)

    op.create_table(
        "classrooms",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("room_number", sa.String(length=50), nullable=False),
        sa.Column("building", sa.String(length=200), nullable=False),
        sa.Column("floor", sa.Integer(), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("type", classroom_type_enum, nullable=False),
        sa.Column("department_id", sa.Integer(), sa.ForeignKey("departments.id"), nullable=True),
        sa.Column("status", classroom_status_enum, nullable=False, server_default="available"),
        sa.Column("facilities", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint("capacity > 0", name="ck_classrooms_capacity_positive"),
    )
    op.create_index("ix_classrooms_building", "classrooms", ["building"])
    op.create_index("ix_classrooms_department_id", "classrooms", ["department_id"])

    op.create_table(
        "faculty",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("employee_id", sa.String(length=50), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("department_id", sa.Integer(), sa.ForeignKey("departments.id"), nullable=True),
        sa.Column("status", faculty_status_enum, nullable=False, server_default="active"),
        *_timestamps(),
    )
    op.create_index("ix_faculty_employee_id", "faculty", ["employee_id"], unique=True)
    op.create_index("ix_faculty_department_id", "faculty", ["department_id"])

    op.create_table(
        "subjects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("department_id", sa.Integer(), sa.ForeignKey("departments.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"], unique=True)
    op.create_index("ix_subjects_department_id", "subjects", ["department_id"])

    op.create_table(
        "time_slots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("day_of_week", day_of_week_enum, nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("slot_name", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_time_slots_day_of_week", "time_slots", ["day_of_week"])

    op.create_table(
        "timetable_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("faculty_id", sa.Integer(), sa.ForeignKey("faculty.id"), nullable=False),
        sa.Column("classroom_id", sa.Integer(), sa.ForeignKey("classrooms.id"), nullable=False),
        sa.Column("slot_id", sa.Integer(), sa.ForeignKey("time_slots.id"), nullable=False),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("section", sa.String(length=10), nullable=False, server_default="A"),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("academic_year", sa.String(length=9), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    for column in ("faculty_id", "classroom_id", "slot_id", "subject_id", "academic_year"):
        op.create_index(f"ix_timetable_entries_{column}", "timetable_entries", [column])
    active_only = sa.text("is_active")
    op.create_index(
        "uq_timetable_faculty_slot_term",
        "timetable_entries",
        ["faculty_id", "slot_id", "semester", "academic_year"],
        unique=True,
        sqlite_where=active_only,
        postgresql_where=active_only,
    )
    op.create_index(
        "uq_timetable_classroom_slot_term",
        "timetable_entries",
        ["classroom_id", "slot_id", "semester", "academic_year"],
        unique=True,
        sqlite_where=active_only,
        postgresql_where=active_only,
    )

    op.create_table(
        "enrollments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.Integer(), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("section", sa.String(length=10), nullable=False, server_default="A"),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("academic_year", sa.String(length=9), nullable=False),
        sa.Column("status", enrollment_status_enum, nullable=False, server_default="enrolled"),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])
    op.create_index("ix_enrollments_offering", "enrollments", ["subject_id", "section", "semester", "academic_year"])


def downgrade() -> None:
    op.drop_index("ix_enrollments_offering", table_name="enrollments")
    op.drop_index("ix_enrollments_student_id", table_name="enrollments")
    op.drop_table("enrollments")

    op.drop_index("uq_timetable_classroom_slot_term", table_name="timetable_entries")
    op.drop_index("uq_timetable_faculty_slot_term", table_name="timetable_entries")
    for column in ("faculty_id", "classroom_id", "slot_id", "subject_id", "academic_year"):
        op.drop_index(f"ix_timetable_entries_{column}", table_name="timetable_entries")
    op.drop_table("timetable_entries")

    op.drop_index("ix_time_slots_day_of_week", table_name="time_slots")
    op.drop_table("time_slots")
    op.drop_index("ix_subjects_department_id", table_name="subjects")
    op.drop_index("ix_subjects_code", table_name="subjects")
    op.drop_table("subjects")
    op.drop_index("ix_faculty_department_id", table_name="faculty")
    op.drop_index("ix_faculty_employee_id", table_name="faculty")
    op.drop_table("faculty")
    op.drop_index("ix_classrooms_department_id", table_name="classrooms")
    op.drop_index("ix_classrooms_building", table_name="classrooms")
    op.drop_table("classrooms")
    op.drop_index("ix_departments_code", table_name="departments")
    op.drop_table("departments")

    bind = op.get_bind()
    for enum in (
        enrollment_status_enum,
        day_of_week_enum,
        faculty_status_enum,
        classroom_status_enum,
        classroom_type_enum,
    ):
        enum.drop(bind, checkfirst=True)
