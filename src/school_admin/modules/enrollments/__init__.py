"""
Enrollments module - Students, their enrollment in a course and the
yearly confirmation in a class-group.
"""

from school_admin.modules.enrollments.models import Confirmation, Enrollment, Student
from school_admin.modules.enrollments.router import router

__all__ = ["router", "Confirmation", "Enrollment", "Student"]
