"""
Enrollment Router

Endpoints for students, enrollments (matrícula) and yearly confirmations.

Access:
- Reads: any authenticated user
- Writes: admin or secretary
- Student and enrollment deletion (cascading confirmations): admin only
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.auth import CurrentUser, get_current_user, require_admin, require_staff
from school_admin.core.database import get_db
from school_admin.modules.enrollments import service
from school_admin.modules.enrollments.schemas import (
    ConfirmationCreate,
    ConfirmationResponse,
    ConfirmationUpdate,
    EnrollmentCreate,
    EnrollmentResponse,
    EnrollmentStatistics,
    EnrollmentUpdate,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
)
from school_admin.modules.shared.params import ListParams
from school_admin.modules.shared.schemas import MAX_PAGE_SIZE, DeleteResult, Page

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================
# Students
# ============================================


@router.post("/students", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    data: StudentCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.create_student(db, data)


@router.get("/students", response_model=Page[StudentResponse])
async def list_students(
    params: ListParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """List students. Search matches name or document number."""
    return await service.list_students(db, **params.as_kwargs())


@router.get("/students/without-enrollment", response_model=list[StudentResponse])
async def get_students_without_enrollment(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_students_without_enrollment(db)


@router.get("/students/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_student(db, student_id)


@router.put("/students/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: int,
    data: StudentUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.update_student(db, student_id, data)


@router.delete("/students/{student_id}", response_model=DeleteResult)
async def delete_student(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_admin),
):
    """
    Delete a student with their enrollment and confirmations.
    400 HAS_DEPENDENCIES if payments are recorded for the student.
    """
    logger.info(f"Student {student_id} delete requested by {user.email}")
    return await service.delete_student(db, student_id)


# ============================================
# Enrollments
# ============================================


@router.post("", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
async def create_enrollment(
    data: EnrollmentCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    """Enroll a student in a course. 409 if the student is already enrolled."""
    return await service.create_enrollment(db, data, created_by=user.id)


@router.get("", response_model=Page[EnrollmentResponse])
async def list_enrollments(
    params: ListParams = Depends(),
    course_id: int | None = Query(None, gt=0),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.list_enrollments(db, **params.as_kwargs(), course_id=course_id)


@router.get("/without-confirmation", response_model=list[EnrollmentResponse])
async def get_enrollments_without_confirmation(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_enrollments_without_confirmation(db)


@router.get("/statistics", response_model=EnrollmentStatistics)
async def get_enrollment_statistics(
    course_id: int | None = Query(None, gt=0),
    academic_year_id: int | None = Query(None, gt=0),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_enrollment_statistics(
        db, course_id=course_id, academic_year_id=academic_year_id
    )


# ============================================
# Confirmations
# ============================================


@router.post(
    "/confirmations",
    response_model=ConfirmationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_confirmation(
    data: ConfirmationCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    """
    Confirm an enrollment for an academic year in a class-group.
    409 if already confirmed that year, 400 CLASS_GROUP_FULL at capacity.
    """
    return await service.create_confirmation(db, data, created_by=user.id)


@router.get("/confirmations", response_model=Page[ConfirmationResponse])
async def list_confirmations(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    enrollment_id: int | None = Query(None, gt=0),
    academic_year_id: int | None = Query(None, gt=0),
    class_group_id: int | None = Query(None, gt=0),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.list_confirmations(
        db,
        page=page,
        limit=limit,
        enrollment_id=enrollment_id,
        academic_year_id=academic_year_id,
        class_group_id=class_group_id,
    )


@router.get("/confirmations/{confirmation_id}", response_model=ConfirmationResponse)
async def get_confirmation(
    confirmation_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_confirmation(db, confirmation_id)


@router.put("/confirmations/{confirmation_id}", response_model=ConfirmationResponse)
async def update_confirmation(
    confirmation_id: int,
    data: ConfirmationUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.update_confirmation(db, confirmation_id, data)


@router.delete("/confirmations/{confirmation_id}", response_model=DeleteResult)
async def delete_confirmation(
    confirmation_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.delete_confirmation(db, confirmation_id)


# ============================================
# Single enrollment
# ============================================


@router.get("/{enrollment_id}", response_model=EnrollmentResponse)
async def get_enrollment(
    enrollment_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_enrollment(db, enrollment_id)


@router.put("/{enrollment_id}", response_model=EnrollmentResponse)
async def update_enrollment(
    enrollment_id: int,
    data: EnrollmentUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_staff),
):
    return await service.update_enrollment(db, enrollment_id, data)


@router.delete("/{enrollment_id}", response_model=DeleteResult)
async def delete_enrollment(
    enrollment_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_admin),
):
    """Delete an enrollment; confirmations are removed with it."""
    return await service.delete_enrollment(db, enrollment_id)
