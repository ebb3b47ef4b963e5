"""
Academic Structure Models

Academic years, courses, grade levels, subjects, rooms, periods,
class-groups and the curriculum grid.
"""

from sqlalchemy import Boolean, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_admin.modules.shared import BaseModel

DESIGNATION_LENGTH = 45

ACTIVE_CLASS_GROUP_STATUSES = ("Activo", "Ativo")


class AcademicYear(BaseModel):
    """A school year, e.g. "2024/2025" running from September to July."""

    __tablename__ = "academic_years"

    designation: Mapped[str] = mapped_column(
        String(DESIGNATION_LENGTH),
        unique=True,
        nullable=False,
    )
    start_month: Mapped[str] = mapped_column(String(DESIGNATION_LENGTH), nullable=False)
    end_month: Mapped[str] = mapped_column(String(DESIGNATION_LENGTH), nullable=False)
    start_year: Mapped[int] = mapped_column(Integer, nullable=False)
    end_year: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<AcademicYear(id={self.id}, designation={self.designation})>"


class Course(BaseModel):
    """A course of study (e.g. Ciências Físicas e Biológicas)."""

    __tablename__ = "courses"

    designation: Mapped[str] = mapped_column(
        String(DESIGNATION_LENGTH),
        unique=True,
        nullable=False,
    )
    # 1 = active, 0 = inactive
    status: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, designation={self.designation})>"


class SchoolClass(BaseModel):
    """A grade level (e.g. "10ª Classe")."""

    __tablename__ = "school_classes"

    designation: Mapped[str] = mapped_column(
        String(DESIGNATION_LENGTH),
        unique=True,
        nullable=False,
    )
    status: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    max_grade: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    has_exam: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<SchoolClass(id={self.id}, designation={self.designation})>"


class Subject(BaseModel):
    """A subject taught within a course."""

    __tablename__ = "subjects"
    __table_args__ = (
        UniqueConstraint("designation", "course_id", name="uq_subjects_designation_course"),
    )

    designation: Mapped[str] = mapped_column(String(DESIGNATION_LENGTH), nullable=False)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    # 1 = active; 0 and 4 are both treated as inactive
    status: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    is_specific: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    course: Mapped["Course"] = relationship("Course", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Subject(id={self.id}, designation={self.designation})>"


class Room(BaseModel):
    """A physical classroom."""

    __tablename__ = "rooms"

    designation: Mapped[str] = mapped_column(
        String(DESIGNATION_LENGTH),
        unique=True,
        nullable=False,
    )


class Period(BaseModel):
    """A teaching shift (Manhã, Tarde, Noite)."""

    __tablename__ = "periods"

    designation: Mapped[str] = mapped_column(
        String(DESIGNATION_LENGTH),
        unique=True,
        nullable=False,
    )


class ClassGroup(BaseModel):
    """
    A concrete group of students (turma) for one grade level, course,
    room and period within an academic year.
    """

    __tablename__ = "class_groups"

    designation: Mapped[str] = mapped_column(
        String(DESIGNATION_LENGTH),
        unique=True,
        nullable=False,
    )
    school_class_id: Mapped[int] = mapped_column(
        ForeignKey("school_classes.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[int] = mapped_column(
        ForeignKey("rooms.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    period_id: Mapped[int] = mapped_column(
        ForeignKey("periods.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    academic_year_id: Mapped[int] = mapped_column(
        ForeignKey("academic_years.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(String(DESIGNATION_LENGTH), default="Activo", nullable=False)
    max_students: Mapped[int] = mapped_column(Integer, default=30, nullable=False)

    school_class: Mapped["SchoolClass"] = relationship("SchoolClass", lazy="selectin")
    course: Mapped["Course"] = relationship("Course", lazy="selectin")
    room: Mapped["Room"] = relationship("Room", lazy="selectin")
    period: Mapped["Period"] = relationship("Period", lazy="selectin")
    academic_year: Mapped["AcademicYear"] = relationship("AcademicYear", lazy="selectin")

    def __repr__(self) -> str:
        return f"<ClassGroup(id={self.id}, designation={self.designation})>"


class CurriculumEntry(BaseModel):
    """One row of the curriculum grid: a subject taught in a class of a course."""

    __tablename__ = "curriculum_entries"
    __table_args__ = (
        UniqueConstraint(
            "subject_id",
            "school_class_id",
            "course_id",
            name="uq_curriculum_subject_class_course",
        ),
    )

    subject_id: Mapped[int] = mapped_column(
        ForeignKey("subjects.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    school_class_id: Mapped[int] = mapped_column(
        ForeignKey("school_classes.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    grade_type: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    subject: Mapped["Subject"] = relationship("Subject", lazy="selectin")
    school_class: Mapped["SchoolClass"] = relationship("SchoolClass", lazy="selectin")
    course: Mapped["Course"] = relationship("Course", lazy="selectin")
