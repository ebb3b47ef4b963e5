"""
Academics module - Academic years, courses, grade levels, subjects, rooms,
periods, class-groups and the curriculum grid.
"""

from school_admin.modules.academics.models import (
    AcademicYear,
    ClassGroup,
    Course,
    CurriculumEntry,
    Period,
    Room,
    SchoolClass,
    Subject,
)
from school_admin.modules.academics.router import router

__all__ = [
    "router",
    "AcademicYear",
    "ClassGroup",
    "Course",
    "CurriculumEntry",
    "Period",
    "Room",
    "SchoolClass",
    "Subject",
]
