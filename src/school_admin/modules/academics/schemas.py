"""
Academic Structure Schemas

Request/response models for academic years, courses, grade levels,
subjects, rooms, periods, class-groups and the curriculum grid.

All string inputs are stripped of surrounding whitespace.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

Designation = Annotated[str, Field(min_length=1, max_length=45)]
EntityId = Annotated[int, Field(gt=0)]

MAX_COURSE_BATCH = 50
MAX_SUBJECT_BATCH = 50
MAX_CLASS_GROUP_BATCH = 20


class _Input(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


class EntityRef(BaseModel):
    """Compact reference to a related entity."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    designation: str


# ============================================
# Academic Years
# ============================================


class AcademicYearCreate(_Input):
    designation: Designation
    start_month: Designation
    end_month: Designation
    start_year: int = Field(..., ge=1900, le=2200)
    end_year: int = Field(..., ge=1900, le=2200)


class AcademicYearUpdate(_Input):
    designation: Designation | None = None
    start_month: Designation | None = None
    end_month: Designation | None = None
    start_year: int | None = Field(None, ge=1900, le=2200)
    end_year: int | None = Field(None, ge=1900, le=2200)


class AcademicYearResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    designation: str
    start_month: str
    end_month: str
    start_year: int
    end_year: int


# ============================================
# Courses
# ============================================


class CourseCreate(_Input):
    designation: Designation
    status: int = Field(1, ge=0)


class CourseUpdate(_Input):
    designation: Designation | None = None
    status: int | None = Field(None, ge=0)


class CourseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    designation: str
    status: int


class CourseStatistics(BaseModel):
    total: int
    active: int
    inactive: int


class CourseBatchCreate(_Input):
    items: list[CourseCreate] = Field(..., min_length=1, max_length=MAX_COURSE_BATCH)


# ============================================
# Grade Levels (classes)
# ============================================


class SchoolClassCreate(_Input):
    designation: Designation
    status: int = Field(1, ge=0)
    max_grade: float = Field(0, ge=0)
    has_exam: bool = False


class SchoolClassUpdate(_Input):
    designation: Designation | None = None
    status: int | None = Field(None, ge=0)
    max_grade: float | None = Field(None, ge=0)
    has_exam: bool | None = None


class SchoolClassResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    designation: str
    status: int
    max_grade: float
    has_exam: bool


# ============================================
# Subjects
# ============================================


class SubjectCreate(_Input):
    designation: Designation
    course_id: EntityId
    status: int = Field(1, ge=0)
    is_specific: bool = False


class SubjectUpdate(_Input):
    designation: Designation | None = None
    course_id: EntityId | None = None
    status: int | None = Field(None, ge=0)
    is_specific: bool | None = None


class SubjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    designation: str
    course_id: int
    status: int
    is_specific: bool
    course: EntityRef | None = None


class SubjectStatistics(BaseModel):
    total: int
    active: int
    inactive: int
    specific: int


class SubjectBatchCreate(_Input):
    items: list[SubjectCreate] = Field(..., min_length=1, max_length=MAX_SUBJECT_BATCH)


# ============================================
# Rooms & Periods
# ============================================


class RoomCreate(_Input):
    designation: Designation


class RoomUpdate(_Input):
    designation: Designation | None = None


class PeriodCreate(_Input):
    designation: Designation


class PeriodUpdate(_Input):
    designation: Designation | None = None


class NamedEntityResponse(BaseModel):
    """Response for rooms and periods."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    designation: str


# ============================================
# Class Groups
# ============================================


class ClassGroupCreate(_Input):
    designation: Designation
    school_class_id: EntityId
    course_id: EntityId
    room_id: EntityId
    period_id: EntityId
    academic_year_id: EntityId
    status: Designation = "Activo"
    max_students: int = Field(30, gt=0)


class ClassGroupUpdate(_Input):
    designation: Designation | None = None
    school_class_id: EntityId | None = None
    course_id: EntityId | None = None
    room_id: EntityId | None = None
    period_id: EntityId | None = None
    academic_year_id: EntityId | None = None
    status: Designation | None = None
    max_students: int | None = Field(None, gt=0)


class ClassGroupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    designation: str
    school_class_id: int
    course_id: int
    room_id: int
    period_id: int
    academic_year_id: int
    status: str
    max_students: int
    school_class: EntityRef | None = None
    course: EntityRef | None = None
    room: EntityRef | None = None
    period: EntityRef | None = None
    academic_year: EntityRef | None = None


class ClassGroupBatchCreate(_Input):
    items: list[ClassGroupCreate] = Field(..., min_length=1, max_length=MAX_CLASS_GROUP_BATCH)


class ClassGroupStudent(BaseModel):
    """A student placed in a class-group through an active confirmation."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    document_number: str | None = None
    gender: str | None = None


class ClassGroupReportItem(BaseModel):
    class_group: ClassGroupResponse
    students: list[ClassGroupStudent]
    total_students: int


# ============================================
# Curriculum Grid
# ============================================


class CurriculumEntryCreate(_Input):
    subject_id: EntityId
    school_class_id: EntityId
    course_id: EntityId
    grade_type: int | None = None
    status: int = Field(1, ge=0)


class CurriculumEntryUpdate(_Input):
    subject_id: EntityId | None = None
    school_class_id: EntityId | None = None
    course_id: EntityId | None = None
    grade_type: int | None = None
    status: int | None = Field(None, ge=0)


class CurriculumEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    subject_id: int
    school_class_id: int
    course_id: int
    grade_type: int | None = None
    status: int
    created_by: int | None = None
    subject: EntityRef | None = None
    school_class: EntityRef | None = None
    course: EntityRef | None = None
