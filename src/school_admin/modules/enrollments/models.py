"""
Enrollment Models

Students, their one-time enrollment (matrícula) in a course and the yearly
confirmation that places them in a class-group.
"""

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_admin.modules.shared import BaseModel

if TYPE_CHECKING:
    from school_admin.modules.academics.models import AcademicYear, ClassGroup, Course


class Student(BaseModel):
    """A student registered at the school."""

    __tablename__ = "students"

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    document_number: Mapped[str | None] = mapped_column(
        String(45),
        unique=True,
        nullable=True,
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(45), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(1), nullable=True)

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, name={self.name})>"


class Enrollment(BaseModel):
    """A student's enrollment in a course. Each student has at most one."""

    __tablename__ = "enrollments"

    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="RESTRICT"),
        unique=True,
        nullable=False,
    )
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    enrollment_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    student: Mapped["Student"] = relationship("Student", lazy="selectin")
    course: Mapped["Course"] = relationship("Course", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Enrollment(id={self.id}, student_id={self.student_id})>"


class Confirmation(BaseModel):
    """A yearly confirmation placing an enrolled student in a class-group."""

    __tablename__ = "confirmations"
    __table_args__ = (
        UniqueConstraint(
            "enrollment_id",
            "academic_year_id",
            name="uq_confirmations_enrollment_year",
        ),
    )

    enrollment_id: Mapped[int] = mapped_column(
        ForeignKey("enrollments.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    class_group_id: Mapped[int] = mapped_column(
        ForeignKey("class_groups.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    academic_year_id: Mapped[int] = mapped_column(
        ForeignKey("academic_years.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    confirmation_date: Mapped[date] = mapped_column(Date, nullable=False)
    classification: Mapped[str | None] = mapped_column(String(45), nullable=True)
    # 1 = active
    status: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    enrollment: Mapped["Enrollment"] = relationship("Enrollment", lazy="selectin")
    class_group: Mapped["ClassGroup"] = relationship("ClassGroup", lazy="selectin")
    academic_year: Mapped["AcademicYear"] = relationship("AcademicYear", lazy="selectin")
