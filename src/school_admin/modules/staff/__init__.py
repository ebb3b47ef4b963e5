"""
Staff module - Specialties, teachers and their subject, director and
class-group assignments.
"""

from school_admin.modules.staff.models import (
    ClassDirector,
    Specialty,
    Teacher,
    TeacherClassGroup,
    TeacherSubject,
)
from school_admin.modules.staff.router import router

__all__ = [
    "router",
    "ClassDirector",
    "Specialty",
    "Teacher",
    "TeacherClassGroup",
    "TeacherSubject",
]
