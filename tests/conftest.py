"""
Shared fixtures for the School Admin API tests.
"""

from datetime import UTC, date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

import school_admin.models  # noqa: F401 - registers every mapper before tests build models
from school_admin.modules.academics.models import (
    AcademicYear,
    ClassGroup,
    Course,
    Room,
    SchoolClass,
    Subject,
)
from school_admin.modules.enrollments.models import Confirmation, Enrollment, Student
from school_admin.modules.saft.models import Payment, ServiceType
from school_admin.modules.staff.models import ClassDirector, Specialty, Teacher


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def mock_redis():
    """Create a mock Redis client with a pipeline."""
    redis = AsyncMock()
    redis.pipeline = MagicMock()
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[0, 0, 1, True])
    redis.pipeline.return_value = pipe
    return redis


# ============================================
# Academic structure
# ============================================


@pytest.fixture
def sample_academic_year():
    year = MagicMock(spec=AcademicYear)
    year.id = 1
    year.designation = "2024/2025"
    year.start_month = "Setembro"
    year.end_month = "Julho"
    year.start_year = 2024
    year.end_year = 2025
    return year


@pytest.fixture
def sample_course():
    course = MagicMock(spec=Course)
    course.id = 3
    course.designation = "Ciências Físicas e Biológicas"
    course.status = 1
    return course


@pytest.fixture
def sample_school_class():
    school_class = MagicMock(spec=SchoolClass)
    school_class.id = 10
    school_class.designation = "10ª Classe"
    school_class.status = 1
    school_class.max_grade = 20.0
    school_class.has_exam = False
    return school_class


@pytest.fixture
def sample_subject(sample_course):
    subject = MagicMock(spec=Subject)
    subject.id = 7
    subject.designation = "Matemática"
    subject.course_id = sample_course.id
    subject.status = 1
    subject.is_specific = False
    return subject


@pytest.fixture
def sample_room():
    room = MagicMock(spec=Room)
    room.id = 2
    room.designation = "Sala 12"
    return room


@pytest.fixture
def sample_class_group(sample_academic_year, sample_course, sample_school_class):
    group = MagicMock(spec=ClassGroup)
    group.id = 5
    group.designation = "10A-CFB"
    group.school_class_id = sample_school_class.id
    group.course_id = sample_course.id
    group.room_id = 2
    group.period_id = 1
    group.academic_year_id = sample_academic_year.id
    group.status = "Activo"
    group.max_students = 30
    return group


# ============================================
# Staff
# ============================================


@pytest.fixture
def sample_specialty():
    specialty = MagicMock(spec=Specialty)
    specialty.id = 4
    specialty.designation = "Matemática"
    return specialty


@pytest.fixture
def sample_teacher(sample_specialty):
    teacher = MagicMock(spec=Teacher)
    teacher.id = 12
    teacher.name = "Ana Domingos"
    teacher.status = 1
    teacher.email = "ana.domingos@school.ao"
    teacher.contact = "923000111"
    teacher.specialty_id = sample_specialty.id
    teacher.subject_id = None
    teacher.user_id = None
    return teacher


@pytest.fixture
def sample_class_director(sample_teacher, sample_class_group):
    director = MagicMock(spec=ClassDirector)
    director.id = 8
    director.designation = None
    director.academic_year_id = sample_class_group.academic_year_id
    director.class_group_id = sample_class_group.id
    director.teacher_id = sample_teacher.id
    return director


# ============================================
# Enrollments
# ============================================


@pytest.fixture
def sample_student():
    student = MagicMock(spec=Student)
    student.id = 100
    student.name = "João Manuel"
    student.document_number = "004512378LA041"
    student.email = None
    student.phone = None
    student.birth_date = date(2008, 3, 14)
    student.gender = "M"
    return student


@pytest.fixture
def sample_enrollment(sample_student, sample_course):
    enrollment = MagicMock(spec=Enrollment)
    enrollment.id = 200
    enrollment.student_id = sample_student.id
    enrollment.course_id = sample_course.id
    enrollment.enrollment_date = date(2024, 9, 2)
    enrollment.status = 1
    enrollment.created_by = 1
    return enrollment


@pytest.fixture
def sample_confirmation(sample_enrollment, sample_class_group):
    confirmation = MagicMock(spec=Confirmation)
    confirmation.id = 300
    confirmation.enrollment_id = sample_enrollment.id
    confirmation.class_group_id = sample_class_group.id
    confirmation.academic_year_id = sample_class_group.academic_year_id
    confirmation.confirmation_date = date(2024, 9, 10)
    confirmation.classification = None
    confirmation.status = 1
    return confirmation


# ============================================
# Payments
# ============================================


@pytest.fixture
def sample_service_type():
    service_type = MagicMock(spec=ServiceType)
    service_type.id = 3
    service_type.designation = "Propina"
    service_type.price = Decimal("15000.00")
    service_type.status = 1
    return service_type


def make_payment(
    payment_id: int,
    student_id: int,
    student_name: str,
    amount: str,
    paid_at: datetime,
    service: str | None = "Propina",
):
    """Build a payment mock with its student and service type loaded."""
    payment = MagicMock(spec=Payment)
    payment.id = payment_id
    payment.student_id = student_id
    payment.student = MagicMock(spec=Student)
    payment.student.id = student_id
    payment.student.name = student_name
    payment.amount = Decimal(amount)
    payment.paid_at = paid_at
    if service is None:
        payment.service_type = None
        payment.service_type_id = None
    else:
        payment.service_type = MagicMock(spec=ServiceType)
        payment.service_type.designation = service
        payment.service_type_id = 1
    return payment


@pytest.fixture
def sample_payments():
    """Three payments by two students, oldest first."""
    return [
        make_payment(1, 100, "João Manuel", "15000.00", datetime(2025, 1, 5, 9, 30, tzinfo=UTC)),
        make_payment(
            2, 101, "Maria & Filhos", "15000.50", datetime(2025, 1, 12, 14, 0, tzinfo=UTC)
        ),
        make_payment(
            3, 100, "João Manuel", "2500", datetime(2025, 1, 20, 8, 15, tzinfo=UTC), service=None
        ),
    ]
