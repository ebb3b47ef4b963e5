"""
Academic Structure Router

Endpoints for academic years, courses, grade levels (classes), subjects,
rooms, periods, class-groups and the curriculum grid.

Access:
- Reads: any authenticated user
- Writes: admin or secretary
- Cascading deletes (academic years, courses, classes, subjects,
  class-groups): admin only

Service errors are converted to structured responses by the application's
ServiceError handler.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.auth import CurrentUser, get_current_user, require_admin, require_staff
from school_admin.core.database import get_db
from school_admin.modules.academics import service
from school_admin.modules.academics.schemas import (
    AcademicYearCreate,
    AcademicYearResponse,
    AcademicYearUpdate,
    ClassGroupBatchCreate,
    ClassGroupCreate,
    ClassGroupReportItem,
    ClassGroupResponse,
    ClassGroupStudent,
    ClassGroupUpdate,
    CourseBatchCreate,
    CourseCreate,
    CourseResponse,
    CourseStatistics,
    CourseUpdate,
    CurriculumEntryCreate,
    CurriculumEntryResponse,
    CurriculumEntryUpdate,
    NamedEntityResponse,
    PeriodCreate,
    PeriodUpdate,
    RoomCreate,
    RoomUpdate,
    SchoolClassCreate,
    SchoolClassResponse,
    SchoolClassUpdate,
    SubjectBatchCreate,
    SubjectCreate,
    SubjectResponse,
    SubjectStatistics,
    SubjectUpdate,
)
from school_admin.modules.shared.params import ListParams
from school_admin.modules.shared.schemas import BatchResult, DeleteResult, Page

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================
# Academic Years
# ============================================


@router.post(
    "/academic-years",
    response_model=AcademicYearResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_academic_year(
    data: AcademicYearCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    """Create an academic year. 409 if the designation exists, 400 if start > end year."""
    return await service.create_academic_year(db, data)


@router.get("/academic-years", response_model=Page[AcademicYearResponse])
async def list_academic_years(
    params: ListParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.list_academic_years(db, **params.as_kwargs())


@router.get("/academic-years/{academic_year_id}", response_model=AcademicYearResponse)
async def get_academic_year(
    academic_year_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_academic_year(db, academic_year_id)


@router.get(
    "/academic-years/{academic_year_id}/class-groups",
    response_model=list[ClassGroupResponse],
)
async def get_class_groups_by_academic_year(
    academic_year_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_class_groups_by_academic_year(db, academic_year_id)


@router.put("/academic-years/{academic_year_id}", response_model=AcademicYearResponse)
async def update_academic_year(
    academic_year_id: int,
    data: AcademicYearUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.update_academic_year(db, academic_year_id, data)


@router.delete("/academic-years/{academic_year_id}", response_model=DeleteResult)
async def delete_academic_year(
    academic_year_id: int,
    force_cascade: bool = Query(False, description="Also delete dependent records"),
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """
    Delete an academic year.

    Without ``force_cascade`` the delete is refused (400 HAS_DEPENDENCIES)
    while class-groups, confirmations or class directors reference the year.
    """
    logger.info(
        f"User {admin.id} deleting academic year {academic_year_id} "
        f"(force_cascade={force_cascade})"
    )
    return await service.delete_academic_year(db, academic_year_id, force_cascade=force_cascade)


# ============================================
# Courses
# ============================================


@router.post("/courses", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    data: CourseCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.create_course(db, data)


@router.post("/courses/batch", response_model=BatchResult[CourseResponse])
async def create_courses_batch(
    data: CourseBatchCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    """Create up to 50 courses; each item succeeds or fails independently."""
    return await service.create_courses_batch(db, data.items)


@router.get("/courses", response_model=Page[CourseResponse])
async def list_courses(
    params: ListParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.list_courses(db, **params.as_kwargs())


@router.get("/courses/statistics", response_model=CourseStatistics)
async def get_course_statistics(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_course_statistics(db)


@router.get("/courses/{course_id}", response_model=CourseResponse)
async def get_course(
    course_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_course(db, course_id)


@router.get("/courses/{course_id}/subjects", response_model=list[SubjectResponse])
async def get_subjects_by_course(
    course_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_subjects_by_course(db, course_id)


@router.get(
    "/courses/{course_id}/classes/{school_class_id}/curriculum",
    response_model=list[CurriculumEntryResponse],
)
async def get_curriculum_by_course_and_class(
    course_id: int,
    school_class_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_curriculum_by_course_and_class(db, course_id, school_class_id)


@router.get(
    "/courses/{course_id}/classes/{school_class_id}/class-groups",
    response_model=list[ClassGroupResponse],
)
async def get_class_groups_by_class_and_course(
    course_id: int,
    school_class_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_class_groups_by_class_and_course(db, school_class_id, course_id)


@router.put("/courses/{course_id}", response_model=CourseResponse)
async def update_course(
    course_id: int,
    data: CourseUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.update_course(db, course_id, data)


@router.delete("/courses/{course_id}", response_model=DeleteResult)
async def delete_course(
    course_id: int,
    force_cascade: bool = Query(False, description="Also delete dependent records"),
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """Delete a course; refused while subjects, class-groups or enrollments exist."""
    logger.info(f"User {admin.id} deleting course {course_id} (force_cascade={force_cascade})")
    return await service.delete_course(db, course_id, force_cascade=force_cascade)


# ============================================
# Grade Levels (classes)
# ============================================


@router.post(
    "/classes",
    response_model=SchoolClassResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_school_class(
    data: SchoolClassCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.create_school_class(db, data)


@router.get("/classes", response_model=Page[SchoolClassResponse])
async def list_school_classes(
    params: ListParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.list_school_classes(db, **params.as_kwargs())


@router.get("/classes/{school_class_id}", response_model=SchoolClassResponse)
async def get_school_class(
    school_class_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_school_class(db, school_class_id)


@router.put("/classes/{school_class_id}", response_model=SchoolClassResponse)
async def update_school_class(
    school_class_id: int,
    data: SchoolClassUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.update_school_class(db, school_class_id, data)


@router.delete("/classes/{school_class_id}", response_model=DeleteResult)
async def delete_school_class(
    school_class_id: int,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """Delete a grade level together with its class-groups and curriculum rows."""
    logger.info(f"User {admin.id} deleting class {school_class_id}")
    return await service.delete_school_class(db, school_class_id)


# ============================================
# Subjects
# ============================================


@router.post("/subjects", response_model=SubjectResponse, status_code=status.HTTP_201_CREATED)
async def create_subject(
    data: SubjectCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.create_subject(db, data)


@router.post("/subjects/batch", response_model=BatchResult[SubjectResponse])
async def create_subjects_batch(
    data: SubjectBatchCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.create_subjects_batch(db, data.items)


@router.get("/subjects", response_model=Page[SubjectResponse])
async def list_subjects(
    params: ListParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.list_subjects(db, **params.as_kwargs())


@router.get("/subjects/statistics", response_model=SubjectStatistics)
async def get_subject_statistics(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_subject_statistics(db)


@router.get("/subjects/{subject_id}", response_model=SubjectResponse)
async def get_subject(
    subject_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_subject(db, subject_id)


@router.put("/subjects/{subject_id}", response_model=SubjectResponse)
async def update_subject(
    subject_id: int,
    data: SubjectUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.update_subject(db, subject_id, data)


@router.delete("/subjects/{subject_id}", response_model=DeleteResult)
async def delete_subject(
    subject_id: int,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    logger.info(f"User {admin.id} deleting subject {subject_id}")
    return await service.delete_subject(db, subject_id)


# ============================================
# Rooms
# ============================================


@router.post("/rooms", response_model=NamedEntityResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    data: RoomCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.create_room(db, data)


@router.get("/rooms", response_model=Page[NamedEntityResponse])
async def list_rooms(
    params: ListParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.list_rooms(db, **params.as_kwargs())


@router.get("/rooms/{room_id}", response_model=NamedEntityResponse)
async def get_room(
    room_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_room(db, room_id)


@router.put("/rooms/{room_id}", response_model=NamedEntityResponse)
async def update_room(
    room_id: int,
    data: RoomUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.update_room(db, room_id, data)


@router.delete("/rooms/{room_id}", response_model=DeleteResult)
async def delete_room(
    room_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.delete_room(db, room_id)


# ============================================
# Periods
# ============================================


@router.post("/periods", response_model=NamedEntityResponse, status_code=status.HTTP_201_CREATED)
async def create_period(
    data: PeriodCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.create_period(db, data)


@router.get("/periods", response_model=Page[NamedEntityResponse])
async def list_periods(
    params: ListParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.list_periods(db, **params.as_kwargs())


@router.get("/periods/{period_id}", response_model=NamedEntityResponse)
async def get_period(
    period_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_period(db, period_id)


@router.put("/periods/{period_id}", response_model=NamedEntityResponse)
async def update_period(
    period_id: int,
    data: PeriodUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.update_period(db, period_id, data)


@router.delete("/periods/{period_id}", response_model=DeleteResult)
async def delete_period(
    period_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.delete_period(db, period_id)


# ============================================
# Class Groups
# ============================================


@router.post(
    "/class-groups",
    response_model=ClassGroupResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_class_group(
    data: ClassGroupCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.create_class_group(db, data)


@router.post("/class-groups/batch", response_model=BatchResult[ClassGroupResponse])
async def create_class_groups_batch(
    data: ClassGroupBatchCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    """Create up to 20 class-groups; each item succeeds or fails independently."""
    return await service.create_class_groups_batch(db, data.items)


@router.get("/class-groups", response_model=Page[ClassGroupResponse])
async def list_class_groups(
    params: ListParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.list_class_groups(db, **params.as_kwargs())


@router.get("/class-groups/report", response_model=list[ClassGroupReportItem])
async def get_class_groups_report(
    academic_year_id: int | None = Query(None, gt=0),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """Active class-groups with their confirmed students."""
    return await service.get_class_groups_report(db, academic_year_id)


@router.get("/class-groups/{class_group_id}", response_model=ClassGroupResponse)
async def get_class_group(
    class_group_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_class_group(db, class_group_id)


@router.get(
    "/class-groups/{class_group_id}/students",
    response_model=list[ClassGroupStudent],
)
async def get_students_by_class_group(
    class_group_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_students_by_class_group(db, class_group_id)


@router.put("/class-groups/{class_group_id}", response_model=ClassGroupResponse)
async def update_class_group(
    class_group_id: int,
    data: ClassGroupUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.update_class_group(db, class_group_id, data)


@router.delete("/class-groups/{class_group_id}", response_model=DeleteResult)
async def delete_class_group(
    class_group_id: int,
    db: AsyncSession = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    logger.info(f"User {admin.id} deleting class group {class_group_id}")
    return await service.delete_class_group(db, class_group_id)


# ============================================
# Curriculum Grid
# ============================================


@router.post(
    "/curriculum",
    response_model=CurriculumEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_curriculum_entry(
    data: CurriculumEntryCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.create_curriculum_entry(db, data, created_by=user.id)


@router.get("/curriculum", response_model=Page[CurriculumEntryResponse])
async def list_curriculum_entries(
    params: ListParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.list_curriculum_entries(db, **params.as_kwargs())


@router.get("/curriculum/{entry_id}", response_model=CurriculumEntryResponse)
async def get_curriculum_entry(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_curriculum_entry(db, entry_id)


@router.put("/curriculum/{entry_id}", response_model=CurriculumEntryResponse)
async def update_curriculum_entry(
    entry_id: int,
    data: CurriculumEntryUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.update_curriculum_entry(db, entry_id, data)


@router.delete("/curriculum/{entry_id}", response_model=DeleteResult)
async def delete_curriculum_entry(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.delete_curriculum_entry(db, entry_id)
