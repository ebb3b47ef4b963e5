"""Initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

Creates the full school administration schema:

1. users (with the user_role enum)
2. Academic structure: academic_years, courses, school_classes, subjects,
   rooms, periods, class_groups, curriculum_entries
3. Teaching staff: specialties, teachers, teacher_subjects,
   class_directors, teacher_class_groups
4. Enrollments: students, enrollments, confirmations
5. Billing data read by the SAFT export: service_types, payments

Foreign keys between records default to ON DELETE RESTRICT; dependent
rows are removed explicitly by the application's cascade deletes.
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

USER_ROLES = ("admin", "secretary", "teacher", "finance_officer")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def _designation_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("designation", sa.String(45), nullable=False, unique=True),
        *_timestamps(),
    )


def upgrade() -> None:
    # ============================================
    # Users
    # ============================================
    user_role = postgresql.ENUM(*USER_ROLES, name="user_role", create_type=False)
    user_role.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("role", user_role, nullable=False, server_default="secretary"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ============================================
    # Academic structure
    # ============================================
    op.create_table(
        "academic_years",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("designation", sa.String(45), nullable=False, unique=True),
        sa.Column("start_month", sa.String(45), nullable=False),
        sa.Column("end_month", sa.String(45), nullable=False),
        sa.Column("start_year", sa.Integer(), nullable=False),
        sa.Column("end_year", sa.Integer(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "courses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("designation", sa.String(45), nullable=False, unique=True),
        sa.Column("status", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )

    op.create_table(
        "school_classes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("designation", sa.String(45), nullable=False, unique=True),
        sa.Column("status", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("max_grade", sa.Float(), nullable=False, server_default="0"),
        sa.Column("has_exam", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "subjects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("designation", sa.String(45), nullable=False),
        sa.Column(
            "course_id",
            sa.Integer(),
            sa.ForeignKey("courses.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("status", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_specific", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint("designation", "course_id", name="uq_subjects_designation_course"),
    )
    op.create_index("ix_subjects_course_id", "subjects", ["course_id"])

    _designation_table("rooms")
    _designation_table("periods")

    op.create_table(
        "class_groups",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("designation", sa.String(45), nullable=False, unique=True),
        sa.Column(
            "school_class_id",
            sa.Integer(),
            sa.ForeignKey("school_classes.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "course_id",
            sa.Integer(),
            sa.ForeignKey("courses.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "room_id", sa.Integer(), sa.ForeignKey("rooms.id", ondelete="RESTRICT"), nullable=False
        ),
        sa.Column(
            "period_id",
            sa.Integer(),
            sa.ForeignKey("periods.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "academic_year_id",
            sa.Integer(),
            sa.ForeignKey("academic_years.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("status", sa.String(45), nullable=False, server_default="Activo"),
        sa.Column("max_students", sa.Integer(), nullable=False, server_default="30"),
        *_timestamps(),
    )
    for column in ("school_class_id", "course_id", "room_id", "period_id", "academic_year_id"):
        op.create_index(f"ix_class_groups_{column}", "class_groups", [column])

    op.create_table(
        "curriculum_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "subject_id",
            sa.Integer(),
            sa.ForeignKey("subjects.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "school_class_id",
            sa.Integer(),
            sa.ForeignKey("school_classes.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "course_id",
            sa.Integer(),
            sa.ForeignKey("courses.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("grade_type", sa.Integer(), nullable=True),
        sa.Column("status", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "created_by",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
        sa.UniqueConstraint(
            "subject_id",
            "school_class_id",
            "course_id",
            name="uq_curriculum_subject_class_course",
        ),
    )
    for column in ("subject_id", "school_class_id", "course_id"):
        op.create_index(f"ix_curriculum_entries_{column}", "curriculum_entries", [column])

    # ============================================
    # Teaching staff
    # ============================================
    _designation_table("specialties")

    op.create_table(
        "teachers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("status", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("contact", sa.String(45), nullable=True),
        sa.Column(
            "specialty_id",
            sa.Integer(),
            sa.ForeignKey("specialties.id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column(
            "subject_id",
            sa.Integer(),
            sa.ForeignKey("subjects.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
            unique=True,
        ),
        *_timestamps(),
    )
    op.create_index("ix_teachers_name", "teachers", ["name"])
    op.create_index("ix_teachers_specialty_id", "teachers", ["specialty_id"])

    op.create_table(
        "teacher_subjects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "teacher_id",
            sa.Integer(),
            sa.ForeignKey("teachers.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "course_id",
            sa.Integer(),
            sa.ForeignKey("courses.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "subject_id",
            sa.Integer(),
            sa.ForeignKey("subjects.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint(
            "teacher_id",
            "course_id",
            "subject_id",
            name="uq_teacher_subjects_teacher_course_subject",
        ),
    )
    op.create_index("ix_teacher_subjects_teacher_id", "teacher_subjects", ["teacher_id"])
    op.create_index("ix_teacher_subjects_subject_id", "teacher_subjects", ["subject_id"])

    op.create_table(
        "class_directors",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("designation", sa.String(45), nullable=True),
        sa.Column(
            "academic_year_id",
            sa.Integer(),
            sa.ForeignKey("academic_years.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "class_group_id",
            sa.Integer(),
            sa.ForeignKey("class_groups.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "teacher_id",
            sa.Integer(),
            sa.ForeignKey("teachers.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint(
            "academic_year_id", "class_group_id", name="uq_class_directors_year_class_group"
        ),
    )
    for column in ("academic_year_id", "class_group_id", "teacher_id"):
        op.create_index(f"ix_class_directors_{column}", "class_directors", [column])

    op.create_table(
        "teacher_class_groups",
        sa.Column(
            "teacher_id",
            sa.Integer(),
            sa.ForeignKey("teachers.id", ondelete="RESTRICT"),
            primary_key=True,
        ),
        sa.Column(
            "class_group_id",
            sa.Integer(),
            sa.ForeignKey("class_groups.id", ondelete="RESTRICT"),
            primary_key=True,
        ),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index(
        "ix_teacher_class_groups_class_group_id", "teacher_class_groups", ["class_group_id"]
    )

    # ============================================
    # Enrollments
    # ============================================
    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("document_number", sa.String(45), nullable=True, unique=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(45), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(1), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_students_name", "students", ["name"])

    op.create_table(
        "enrollments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "student_id",
            sa.Integer(),
            sa.ForeignKey("students.id", ondelete="RESTRICT"),
            nullable=False,
            unique=True,
        ),
        sa.Column(
            "course_id",
            sa.Integer(),
            sa.ForeignKey("courses.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("enrollment_date", sa.Date(), nullable=False),
        sa.Column("status", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "created_by",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])

    op.create_table(
        "confirmations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "enrollment_id",
            sa.Integer(),
            sa.ForeignKey("enrollments.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "class_group_id",
            sa.Integer(),
            sa.ForeignKey("class_groups.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "academic_year_id",
            sa.Integer(),
            sa.ForeignKey("academic_years.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("confirmation_date", sa.Date(), nullable=False),
        sa.Column("classification", sa.String(45), nullable=True),
        sa.Column("status", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "created_by",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
        sa.UniqueConstraint(
            "enrollment_id", "academic_year_id", name="uq_confirmations_enrollment_year"
        ),
    )
    for column in ("enrollment_id", "class_group_id", "academic_year_id"):
        op.create_index(f"ix_confirmations_{column}", "confirmations", [column])

    # ============================================
    # Billing
    # ============================================
    op.create_table(
        "service_types",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("designation", sa.String(100), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False, server_default="0.00"),
        sa.Column("status", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
    )

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "student_id",
            sa.Integer(),
            sa.ForeignKey("students.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "service_type_id",
            sa.Integer(),
            sa.ForeignKey("service_types.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reference", sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_payments_student_id", "payments", ["student_id"])
    op.create_index("ix_payments_paid_at", "payments", ["paid_at"])


def downgrade() -> None:
    # Reverse dependency order
    for table in (
        "payments",
        "service_types",
        "confirmations",
        "enrollments",
        "students",
        "teacher_class_groups",
        "class_directors",
        "teacher_subjects",
        "teachers",
        "specialties",
        "curriculum_entries",
        "class_groups",
        "periods",
        "rooms",
        "subjects",
        "school_classes",
        "courses",
        "academic_years",
        "users",
    ):
        op.drop_table(table)

    postgresql.ENUM(name="user_role").drop(op.get_bind(), checkfirst=True)
