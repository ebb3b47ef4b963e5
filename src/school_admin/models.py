"""
Model registry.

Importing this module registers every table on ``Base.metadata`` so that
string relationship targets resolve and Alembic sees the full schema.
"""

from school_admin.core.database import Base
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
from school_admin.modules.enrollments.models import Confirmation, Enrollment, Student
from school_admin.modules.saft.models import Payment, ServiceType
from school_admin.modules.staff.models import (
    ClassDirector,
    Specialty,
    Teacher,
    TeacherClassGroup,
    TeacherSubject,
)
from school_admin.modules.users.models import User

__all__ = [
    "Base",
    "AcademicYear",
    "ClassDirector",
    "ClassGroup",
    "Confirmation",
    "Course",
    "CurriculumEntry",
    "Enrollment",
    "Payment",
    "Period",
    "Room",
    "SchoolClass",
    "ServiceType",
    "Specialty",
    "Student",
    "Subject",
    "Teacher",
    "TeacherClassGroup",
    "TeacherSubject",
    "User",
]
