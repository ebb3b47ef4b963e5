"""
Teaching Staff Schemas
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from school_admin.modules.academics.schemas import Designation, EntityId, EntityRef


class _Input(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


TeacherName = Annotated[str, Field(min_length=1, max_length=100)]


class TeacherRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


# ============================================
# Specialties
# ============================================


class SpecialtyCreate(_Input):
    designation: Designation


class SpecialtyUpdate(_Input):
    designation: Designation | None = None


class SpecialtyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    designation: str


class SpecialtyDetail(SpecialtyResponse):
    teachers: list[TeacherRef] = Field(default_factory=list)


# ============================================
# Teachers
# ============================================


class TeacherCreate(_Input):
    name: TeacherName
    status: int = Field(1, ge=0)
    email: EmailStr | None = None
    contact: str | None = Field(None, max_length=45)
    specialty_id: EntityId | None = None
    subject_id: EntityId | None = None
    user_id: EntityId | None = None


class TeacherUpdate(_Input):
    name: TeacherName | None = None
    status: int | None = Field(None, ge=0)
    email: EmailStr | None = None
    contact: str | None = Field(None, max_length=45)
    specialty_id: EntityId | None = None
    subject_id: EntityId | None = None
    user_id: EntityId | None = None


class TeacherResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    status: int
    email: str | None = None
    contact: str | None = None
    specialty_id: int | None = None
    subject_id: int | None = None
    user_id: int | None = None
    specialty: EntityRef | None = None
    subject: EntityRef | None = None


# ============================================
# Teacher ↔ Subject links
# ============================================


class TeacherSubjectCreate(_Input):
    teacher_id: EntityId
    course_id: EntityId
    subject_id: EntityId


class TeacherSubjectUpdate(_Input):
    teacher_id: EntityId | None = None
    course_id: EntityId | None = None
    subject_id: EntityId | None = None


class TeacherSubjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    teacher_id: int
    course_id: int
    subject_id: int
    teacher: TeacherRef | None = None
    course: EntityRef | None = None
    subject: EntityRef | None = None


class TeacherSubjectStatistics(BaseModel):
    total_links: int
    teachers_with_subjects: int
    subjects_covered: int


# ============================================
# Class Directors
# ============================================


class ClassDirectorCreate(_Input):
    designation: Designation | None = None
    academic_year_id: EntityId
    class_group_id: EntityId
    teacher_id: EntityId


class ClassDirectorUpdate(_Input):
    designation: Designation | None = None
    academic_year_id: EntityId | None = None
    class_group_id: EntityId | None = None
    teacher_id: EntityId | None = None


class ClassDirectorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    designation: str | None = None
    academic_year_id: int
    class_group_id: int
    teacher_id: int
    academic_year: EntityRef | None = None
    class_group: EntityRef | None = None
    teacher: TeacherRef | None = None


# ============================================
# Teacher ↔ Class-group assignments
# ============================================


class TeacherClassGroupCreate(_Input):
    teacher_id: EntityId
    class_group_id: EntityId


class TeacherClassGroupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    teacher_id: int
    class_group_id: int
    created_at: datetime
    teacher: TeacherRef | None = None
    class_group: EntityRef | None = None


# ============================================
# Reports
# ============================================


class SpecialtyCount(BaseModel):
    specialty_id: int | None
    specialty: str
    teachers: int


class StaffReport(BaseModel):
    total_teachers: int
    active_teachers: int
    total_specialties: int
    total_class_directors: int
    teachers_by_specialty: list[SpecialtyCount]
