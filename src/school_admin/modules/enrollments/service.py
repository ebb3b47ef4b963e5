"""
Enrollment Service Layer

Business rules:
- A student has at most one enrollment (409 on a second one)
- A confirmation is unique per (enrollment, academic year)
- A class-group accepts confirmations up to its max_students
- Deleting a student removes their enrollment and its confirmations,
  unless payments reference the student
"""

import logging
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.errors import (
    BusinessRuleError,
    ConflictError,
    DependencyError,
    NotFoundError,
)
from school_admin.modules.academics.models import AcademicYear, ClassGroup, Course
from school_admin.modules.enrollments import repository
from school_admin.modules.enrollments.models import Confirmation, Enrollment, Student
from school_admin.modules.enrollments.schemas import (
    ConfirmationCreate,
    ConfirmationUpdate,
    EnrollmentCreate,
    EnrollmentUpdate,
    StudentCreate,
    StudentUpdate,
)
from school_admin.modules.shared.schemas import DeleteResult
from school_admin.modules.shared.service import (
    cascade_result,
    changes,
    page_result,
    run_cascade,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _get_or_404(db: AsyncSession, model: type[T], entity_id: int, label: str) -> T:
    obj = await repository.get_by_id(db, model, entity_id)
    if obj is None:
        raise NotFoundError(label, entity_id)
    return obj


# ============================================
# Students
# ============================================


async def _ensure_unique_document(
    db: AsyncSession, document_number: str | None, *, exclude_id: int | None = None
) -> None:
    if document_number and await repository.get_student_by_document(
        db, document_number, exclude_id=exclude_id
    ):
        raise ConflictError(
            f"A student with document '{document_number}' already exists.",
            error_code="STUDENT_EXISTS",
        )


async def create_student(db: AsyncSession, data: StudentCreate) -> Student:
    await _ensure_unique_document(db, data.document_number)
    student = await repository.add(db, Student(**data.model_dump()))
    logger.info(f"Student created: {student.id} - {student.name}")
    return student


async def update_student(db: AsyncSession, student_id: int, data: StudentUpdate) -> Student:
    student = await _get_or_404(db, Student, student_id, "Student")
    values = changes(data)
    await _ensure_unique_document(db, values.get("document_number"), exclude_id=student_id)
    return await repository.update(db, student, values)


async def get_student(db: AsyncSession, student_id: int) -> Student:
    return await _get_or_404(db, Student, student_id, "Student")


async def list_students(
    db: AsyncSession, *, page: int = 1, limit: int = 10, search: str | None = None
) -> dict[str, Any]:
    items, total = await repository.list_students(db, page=page, limit=limit, search=search)
    return page_result(items, total, page, limit)


async def get_students_without_enrollment(db: AsyncSession) -> list[Student]:
    return await repository.get_students_without_enrollment(db)


async def delete_student(db: AsyncSession, student_id: int) -> DeleteResult:
    """
    Delete a student with their enrollment and confirmations.

    Payments are fiscal records and are never cascaded: a student with
    payments cannot be deleted.
    """
    student = await _get_or_404(db, Student, student_id, "Student")

    payments = await repository.count_student_payments(db, student_id)
    if payments:
        raise DependencyError(
            f"Cannot delete student '{student.name}': {payments} payments are recorded.",
            {"payments": payments},
        )

    deleted = await run_cascade(db, "student", student_id, repository.delete_student_cascade)
    return cascade_result("student", student.name, deleted)


# ============================================
# Enrollments
# ============================================


async def create_enrollment(
    db: AsyncSession, data: EnrollmentCreate, *, created_by: int | None = None
) -> Enrollment:
    await _get_or_404(db, Student, data.student_id, "Student")
    await _get_or_404(db, Course, data.course_id, "Course")

    if await repository.get_enrollment_by_student(db, data.student_id):
        raise ConflictError(
            f"Student {data.student_id} is already enrolled.",
            error_code="ENROLLMENT_EXISTS",
        )

    enrollment = await repository.add(
        db, Enrollment(**data.model_dump(), created_by=created_by)
    )
    logger.info(
        f"Enrollment created: {enrollment.id} (student {data.student_id}, course {data.course_id})"
    )
    return enrollment


async def update_enrollment(
    db: AsyncSession, enrollment_id: int, data: EnrollmentUpdate
) -> Enrollment:
    enrollment = await _get_or_404(db, Enrollment, enrollment_id, "Enrollment")
    values = changes(data)
    if "course_id" in values:
        await _get_or_404(db, Course, values["course_id"], "Course")
    return await repository.update(db, enrollment, values)


async def get_enrollment(db: AsyncSession, enrollment_id: int) -> Enrollment:
    return await _get_or_404(db, Enrollment, enrollment_id, "Enrollment")


async def list_enrollments(
    db: AsyncSession,
    *,
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    course_id: int | None = None,
) -> dict[str, Any]:
    items, total = await repository.list_enrollments(
        db, page=page, limit=limit, search=search, course_id=course_id
    )
    return page_result(items, total, page, limit)


async def get_enrollments_without_confirmation(db: AsyncSession) -> list[Enrollment]:
    return await repository.get_enrollments_without_confirmation(db)


async def delete_enrollment(db: AsyncSession, enrollment_id: int) -> DeleteResult:
    """
    Delete an enrollment. When it has confirmations they are removed in
    the same transaction and the result is a cascade delete.
    """
    enrollment = await _get_or_404(db, Enrollment, enrollment_id, "Enrollment")
    confirmations = await repository.count_enrollment_confirmations(db, enrollment_id)

    if confirmations:
        deleted = await run_cascade(
            db, "enrollment", enrollment_id, repository.delete_enrollment_cascade
        )
        return DeleteResult(
            message=f"Enrollment {enrollment_id} and its confirmations were deleted.",
            kind="cascade_delete",
            details={"student_id": enrollment.student_id, **deleted},
        )

    await repository.remove(db, enrollment)
    logger.info(f"Enrollment deleted: {enrollment_id}")
    return DeleteResult(
        message=f"Enrollment {enrollment_id} was deleted.",
        kind="hard_delete",
        details={"student_id": enrollment.student_id},
    )


# ============================================
# Confirmations
# ============================================


async def _ensure_class_group_capacity(db: AsyncSession, class_group: ClassGroup) -> None:
    active = await repository.count_active_confirmations(db, class_group.id)
    if active >= class_group.max_students:
        raise BusinessRuleError(
            f"Class group '{class_group.designation}' is full "
            f"({active}/{class_group.max_students} students).",
            error_code="CLASS_GROUP_FULL",
        )


async def create_confirmation(
    db: AsyncSession, data: ConfirmationCreate, *, created_by: int | None = None
) -> Confirmation:
    await _get_or_404(db, Enrollment, data.enrollment_id, "Enrollment")
    class_group = await _get_or_404(db, ClassGroup, data.class_group_id, "Class group")
    await _get_or_404(db, AcademicYear, data.academic_year_id, "Academic year")

    if await repository.get_confirmation_for(db, data.enrollment_id, data.academic_year_id):
        raise ConflictError(
            "This enrollment is already confirmed for this academic year.",
            error_code="CONFIRMATION_EXISTS",
        )

    if data.status == 1:
        await _ensure_class_group_capacity(db, class_group)

    confirmation = await repository.add(
        db, Confirmation(**data.model_dump(), created_by=created_by)
    )
    logger.info(
        f"Confirmation created: enrollment {data.enrollment_id} in class group "
        f"{data.class_group_id} (year {data.academic_year_id})"
    )
    return confirmation


async def update_confirmation(
    db: AsyncSession, confirmation_id: int, data: ConfirmationUpdate
) -> Confirmation:
    confirmation = await _get_or_404(db, Confirmation, confirmation_id, "Confirmation")
    values = changes(data)

    target_id = values.get("class_group_id", confirmation.class_group_id)
    becomes_active = values.get("status", confirmation.status) == 1
    moves = target_id != confirmation.class_group_id or confirmation.status != 1
    if becomes_active and moves:
        class_group = await _get_or_404(db, ClassGroup, target_id, "Class group")
        await _ensure_class_group_capacity(db, class_group)
    elif "class_group_id" in values:
        await _get_or_404(db, ClassGroup, target_id, "Class group")

    return await repository.update(db, confirmation, values)


async def get_confirmation(db: AsyncSession, confirmation_id: int) -> Confirmation:
    return await _get_or_404(db, Confirmation, confirmation_id, "Confirmation")


async def list_confirmations(
    db: AsyncSession,
    *,
    page: int = 1,
    limit: int = 10,
    enrollment_id: int | None = None,
    academic_year_id: int | None = None,
    class_group_id: int | None = None,
) -> dict[str, Any]:
    items, total = await repository.list_confirmations(
        db,
        page=page,
        limit=limit,
        enrollment_id=enrollment_id,
        academic_year_id=academic_year_id,
        class_group_id=class_group_id,
    )
    return page_result(items, total, page, limit)


async def delete_confirmation(db: AsyncSession, confirmation_id: int) -> DeleteResult:
    confirmation = await _get_or_404(db, Confirmation, confirmation_id, "Confirmation")
    enrollment_id = confirmation.enrollment_id

    await repository.remove(db, confirmation)
    remaining = await repository.count_enrollment_confirmations(db, enrollment_id)
    logger.info(f"Confirmation deleted: {confirmation_id} ({remaining} left for enrollment)")

    return DeleteResult(
        message=f"Confirmation {confirmation_id} was deleted.",
        kind="hard_delete",
        details={
            "enrollment_id": enrollment_id,
            "was_last_confirmation": remaining == 0,
        },
    )


# ============================================
# Statistics
# ============================================


async def get_enrollment_statistics(
    db: AsyncSession,
    *,
    course_id: int | None = None,
    academic_year_id: int | None = None,
) -> dict[str, Any]:
    counts = await repository.get_enrollment_statistics(
        db, course_id=course_id, academic_year_id=academic_year_id
    )
    return {"course_id": course_id, "academic_year_id": academic_year_id, **counts}
