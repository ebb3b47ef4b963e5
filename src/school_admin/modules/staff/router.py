"""
Teaching Staff Router

Endpoints for specialties, teachers, teacher-subject links, class
directors and teacher/class-group assignments.

Access:
- Reads: any authenticated user
- Writes: admin or secretary
- Teacher deletion (cascades its links): admin only
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.auth import CurrentUser, get_current_user, require_admin, require_staff
from school_admin.core.database import get_db
from school_admin.modules.academics.schemas import ClassGroupResponse
from school_admin.modules.shared.params import ListParams
from school_admin.modules.shared.schemas import DeleteResult, Page
from school_admin.modules.staff import service
from school_admin.modules.staff.schemas import (
    ClassDirectorCreate,
    ClassDirectorResponse,
    ClassDirectorUpdate,
    SpecialtyCreate,
    SpecialtyDetail,
    SpecialtyResponse,
    SpecialtyUpdate,
    StaffReport,
    TeacherClassGroupCreate,
    TeacherClassGroupResponse,
    TeacherCreate,
    TeacherResponse,
    TeacherSubjectCreate,
    TeacherSubjectResponse,
    TeacherSubjectStatistics,
    TeacherSubjectUpdate,
    TeacherUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================
# Specialties
# ============================================


@router.post("/specialties", response_model=SpecialtyResponse, status_code=status.HTTP_201_CREATED)
async def create_specialty(
    data: SpecialtyCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.create_specialty(db, data)


@router.get("/specialties", response_model=Page[SpecialtyResponse])
async def list_specialties(
    params: ListParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.list_specialties(db, **params.as_kwargs())


@router.get("/specialties/{specialty_id}", response_model=SpecialtyDetail)
async def get_specialty(
    specialty_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """Get a specialty with the teachers holding it."""
    return await service.get_specialty(db, specialty_id)


@router.get("/specialties/{specialty_id}/teachers", response_model=list[TeacherResponse])
async def get_teachers_by_specialty(
    specialty_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_teachers_by_specialty(db, specialty_id)


@router.put("/specialties/{specialty_id}", response_model=SpecialtyResponse)
async def update_specialty(
    specialty_id: int,
    data: SpecialtyUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.update_specialty(db, specialty_id, data)


@router.delete("/specialties/{specialty_id}", response_model=DeleteResult)
async def delete_specialty(
    specialty_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    """Delete a specialty. 400 HAS_DEPENDENCIES while teachers hold it."""
    return await service.delete_specialty(db, specialty_id)


# ============================================
# Teachers
# ============================================


@router.post("/teachers", response_model=TeacherResponse, status_code=status.HTTP_201_CREATED)
async def create_teacher(
    data: TeacherCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.create_teacher(db, data)


@router.get("/teachers", response_model=Page[TeacherResponse])
async def list_teachers(
    params: ListParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """List teachers. Search matches name, email or contact."""
    return await service.list_teachers(db, **params.as_kwargs())


@router.get("/teachers/active", response_model=list[TeacherResponse])
async def get_active_teachers(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_active_teachers(db)


@router.get("/teachers/{teacher_id}", response_model=TeacherResponse)
async def get_teacher(
    teacher_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_teacher(db, teacher_id)


@router.get("/teachers/{teacher_id}/class-groups", response_model=list[ClassGroupResponse])
async def get_class_groups_by_teacher(
    teacher_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_class_groups_by_teacher(db, teacher_id)


@router.put("/teachers/{teacher_id}", response_model=TeacherResponse)
async def update_teacher(
    teacher_id: int,
    data: TeacherUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.update_teacher(db, teacher_id, data)


@router.delete("/teachers/{teacher_id}", response_model=DeleteResult)
async def delete_teacher(
    teacher_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_admin),
):
    """
    Delete a teacher together with their subject links, class director
    rows and class-group assignments. The response lists deleted counts.
    """
    logger.info(f"Teacher {teacher_id} delete requested by {user.email}")
    return await service.delete_teacher(db, teacher_id)


# ============================================
# Teacher ↔ Subject links
# ============================================


@router.post(
    "/teacher-subjects",
    response_model=TeacherSubjectResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_teacher_subject(
    data: TeacherSubjectCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.create_teacher_subject(db, data)


@router.get("/teacher-subjects", response_model=Page[TeacherSubjectResponse])
async def list_teacher_subjects(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    teacher_id: int | None = Query(None, gt=0),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.list_teacher_subjects(db, page=page, limit=limit, teacher_id=teacher_id)


@router.get("/teacher-subjects/statistics", response_model=TeacherSubjectStatistics)
async def get_teacher_subject_statistics(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_teacher_subject_statistics(db)


@router.get("/teacher-subjects/{link_id}", response_model=TeacherSubjectResponse)
async def get_teacher_subject(
    link_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_teacher_subject(db, link_id)


@router.put("/teacher-subjects/{link_id}", response_model=TeacherSubjectResponse)
async def update_teacher_subject(
    link_id: int,
    data: TeacherSubjectUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.update_teacher_subject(db, link_id, data)


@router.delete("/teacher-subjects/{link_id}", response_model=DeleteResult)
async def delete_teacher_subject(
    link_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.delete_teacher_subject(db, link_id)


# ============================================
# Class Directors
# ============================================


@router.post(
    "/class-directors",
    response_model=ClassDirectorResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_class_director(
    data: ClassDirectorCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    """Assign a director. 409 if the class-group already has one for that year."""
    return await service.create_class_director(db, data)


@router.get("/class-directors", response_model=Page[ClassDirectorResponse])
async def list_class_directors(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    academic_year_id: int | None = Query(None, gt=0),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.list_class_directors(
        db, page=page, limit=limit, academic_year_id=academic_year_id
    )


@router.get(
    "/class-directors/academic-year/{academic_year_id}",
    response_model=list[ClassDirectorResponse],
)
async def get_directors_by_academic_year(
    academic_year_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_directors_by_academic_year(db, academic_year_id)


@router.get("/class-directors/{director_id}", response_model=ClassDirectorResponse)
async def get_class_director(
    director_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_class_director(db, director_id)


@router.put("/class-directors/{director_id}", response_model=ClassDirectorResponse)
async def update_class_director(
    director_id: int,
    data: ClassDirectorUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.update_class_director(db, director_id, data)


@router.delete("/class-directors/{director_id}", response_model=DeleteResult)
async def delete_class_director(
    director_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.delete_class_director(db, director_id)


# ============================================
# Teacher ↔ Class-group assignments
# ============================================


@router.post(
    "/assignments",
    response_model=TeacherClassGroupResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_teacher_class_group(
    data: TeacherClassGroupCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.create_teacher_class_group(db, data)


@router.get("/assignments", response_model=list[TeacherClassGroupResponse])
async def list_teacher_class_groups(
    teacher_id: int | None = Query(None, gt=0),
    class_group_id: int | None = Query(None, gt=0),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.list_teacher_class_groups(
        db, teacher_id=teacher_id, class_group_id=class_group_id
    )


@router.get("/class-groups/{class_group_id}/teachers", response_model=list[TeacherResponse])
async def get_teachers_by_class_group(
    class_group_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_teachers_by_class_group(db, class_group_id)


@router.delete("/assignments/{teacher_id}/{class_group_id}", response_model=DeleteResult)
async def delete_teacher_class_group(
    teacher_id: int,
    class_group_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.delete_teacher_class_group(db, teacher_id, class_group_id)


# ============================================
# Reports
# ============================================


@router.get("/report", response_model=StaffReport)
async def get_staff_report(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """Teacher counts overall and per specialty."""
    return await service.get_staff_report(db)
