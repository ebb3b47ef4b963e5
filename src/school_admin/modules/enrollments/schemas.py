"""
Enrollment Schemas

Request/response models for students, enrollments and yearly confirmations.
"""

from datetime import date
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from school_admin.modules.academics.schemas import EntityId, EntityRef

StudentName = Annotated[str, Field(min_length=1, max_length=200)]


class _Input(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


class StudentRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


# ============================================
# Students
# ============================================


class StudentCreate(_Input):
    name: StudentName
    document_number: str | None = Field(None, max_length=45)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=45)
    birth_date: date | None = None
    gender: Literal["M", "F"] | None = None


class StudentUpdate(_Input):
    name: StudentName | None = None
    document_number: str | None = Field(None, max_length=45)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=45)
    birth_date: date | None = None
    gender: Literal["M", "F"] | None = None


class StudentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    document_number: str | None = None
    email: str | None = None
    phone: str | None = None
    birth_date: date | None = None
    gender: str | None = None


# ============================================
# Enrollments
# ============================================


class EnrollmentCreate(_Input):
    student_id: EntityId
    course_id: EntityId
    enrollment_date: date = Field(default_factory=date.today)
    status: int = Field(1, ge=0)


class EnrollmentUpdate(_Input):
    course_id: EntityId | None = None
    enrollment_date: date | None = None
    status: int | None = Field(None, ge=0)


class EnrollmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    course_id: int
    enrollment_date: date
    status: int
    created_by: int | None = None
    student: StudentRef | None = None
    course: EntityRef | None = None


# ============================================
# Confirmations
# ============================================


class ConfirmationCreate(_Input):
    enrollment_id: EntityId
    class_group_id: EntityId
    academic_year_id: EntityId
    confirmation_date: date = Field(default_factory=date.today)
    classification: str | None = Field(None, max_length=45)
    status: int = Field(1, ge=0)


class ConfirmationUpdate(_Input):
    class_group_id: EntityId | None = None
    confirmation_date: date | None = None
    classification: str | None = Field(None, max_length=45)
    status: int | None = Field(None, ge=0)


class ConfirmationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    enrollment_id: int
    class_group_id: int
    academic_year_id: int
    confirmation_date: date
    classification: str | None = None
    status: int
    created_by: int | None = None
    class_group: EntityRef | None = None
    academic_year: EntityRef | None = None


# ============================================
# Statistics
# ============================================


class StatusStatistics(BaseModel):
    total: int
    active: int
    inactive: int


class EnrollmentStatistics(BaseModel):
    course_id: int | None = None
    academic_year_id: int | None = None
    enrollments: StatusStatistics
    confirmations: StatusStatistics
