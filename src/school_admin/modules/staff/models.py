"""
Teaching Staff Models

Specialties, teachers and their links to subjects and class-groups.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_admin.core.database import Base
from school_admin.modules.shared import BaseModel

if TYPE_CHECKING:
    from school_admin.modules.academics.models import (
        AcademicYear,
        ClassGroup,
        Course,
        Subject,
    )


class Specialty(BaseModel):
    """A teacher's area of specialty (e.g. Matemática)."""

    __tablename__ = "specialties"

    designation: Mapped[str] = mapped_column(String(45), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Specialty(id={self.id}, designation={self.designation})>"


class Teacher(BaseModel):
    """A member of the teaching staff."""

    __tablename__ = "teachers"

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    status: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact: Mapped[str | None] = mapped_column(String(45), nullable=True)

    specialty_id: Mapped[int | None] = mapped_column(
        ForeignKey("specialties.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    # Main subject taught
    subject_id: Mapped[int | None] = mapped_column(
        ForeignKey("subjects.id", ondelete="SET NULL"),
        nullable=True,
    )
    # Login account, when the teacher has one
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )

    specialty: Mapped["Specialty | None"] = relationship("Specialty", lazy="selectin")
    subject: Mapped["Subject | None"] = relationship("Subject", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Teacher(id={self.id}, name={self.name})>"


class TeacherSubject(BaseModel):
    """Which subject a teacher teaches in which course."""

    __tablename__ = "teacher_subjects"
    __table_args__ = (
        UniqueConstraint(
            "teacher_id",
            "course_id",
            "subject_id",
            name="uq_teacher_subjects_teacher_course_subject",
        ),
    )

    teacher_id: Mapped[int] = mapped_column(
        ForeignKey("teachers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="RESTRICT"),
        nullable=False,
    )
    subject_id: Mapped[int] = mapped_column(
        ForeignKey("subjects.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    teacher: Mapped["Teacher"] = relationship("Teacher", lazy="selectin")
    course: Mapped["Course"] = relationship("Course", lazy="selectin")
    subject: Mapped["Subject"] = relationship("Subject", lazy="selectin")


class ClassDirector(BaseModel):
    """The teacher directing a class-group in a given academic year."""

    __tablename__ = "class_directors"
    __table_args__ = (
        UniqueConstraint(
            "academic_year_id",
            "class_group_id",
            name="uq_class_directors_year_class_group",
        ),
    )

    designation: Mapped[str | None] = mapped_column(String(45), nullable=True)
    academic_year_id: Mapped[int] = mapped_column(
        ForeignKey("academic_years.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    class_group_id: Mapped[int] = mapped_column(
        ForeignKey("class_groups.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    teacher_id: Mapped[int] = mapped_column(
        ForeignKey("teachers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    academic_year: Mapped["AcademicYear"] = relationship("AcademicYear", lazy="selectin")
    class_group: Mapped["ClassGroup"] = relationship("ClassGroup", lazy="selectin")
    teacher: Mapped["Teacher"] = relationship("Teacher", lazy="selectin")


class TeacherClassGroup(Base):
    """Assignment of a teacher to a class-group, keyed by the pair."""

    __tablename__ = "teacher_class_groups"

    teacher_id: Mapped[int] = mapped_column(
        ForeignKey("teachers.id", ondelete="RESTRICT"),
        primary_key=True,
    )
    class_group_id: Mapped[int] = mapped_column(
        ForeignKey("class_groups.id", ondelete="RESTRICT"),
        primary_key=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    teacher: Mapped["Teacher"] = relationship("Teacher", lazy="selectin")
    class_group: Mapped["ClassGroup"] = relationship("ClassGroup", lazy="selectin")
