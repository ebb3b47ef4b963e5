"""
Enrollment Repository

Database operations for students, enrollments and confirmations.
"""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.modules.enrollments.models import Confirmation, Enrollment, Student
from school_admin.modules.saft.models import Payment
# Generic CRUD helpers are re-exported for the service layer
from school_admin.modules.shared.repository import (  # noqa: F401
    add,
    count_where,
    delete_where,
    get_by_id,
    paginate,
    remove,
    update,
)

logger = logging.getLogger(__name__)


# ============================================
# Students
# ============================================


async def list_students(
    db: AsyncSession,
    *,
    page: int,
    limit: int,
    search: str | None = None,
) -> tuple[list[Student], int]:
    """List students by name; search matches name or document number."""
    query = select(Student)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(Student.name.ilike(pattern), Student.document_number.ilike(pattern))
        )
    query = query.order_by(Student.name.asc())
    return await paginate(db, query, page=page, limit=limit)


async def get_student_by_document(
    db: AsyncSession, document_number: str, *, exclude_id: int | None = None
) -> Student | None:
    query = select(Student).where(Student.document_number == document_number)
    if exclude_id is not None:
        query = query.where(Student.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalars().first()


async def count_student_payments(db: AsyncSession, student_id: int) -> int:
    return await count_where(db, Payment, Payment.student_id == student_id)


async def get_students_without_enrollment(db: AsyncSession) -> list[Student]:
    result = await db.execute(
        select(Student)
        .outerjoin(Enrollment, Enrollment.student_id == Student.id)
        .where(Enrollment.id.is_(None))
        .order_by(Student.name.asc())
    )
    return list(result.scalars().all())


async def delete_student_cascade(db: AsyncSession, student_id: int) -> dict[str, int]:
    """
    Delete a student with their enrollment and its confirmations.

    Does not commit.
    """
    enrollment = await get_enrollment_by_student(db, student_id)
    counts = {"enrollments": 0, "confirmations": 0}
    if enrollment is not None:
        counts["confirmations"] = await delete_where(
            db, Confirmation, Confirmation.enrollment_id == enrollment.id
        )
        counts["enrollments"] = await delete_where(
            db, Enrollment, Enrollment.id == enrollment.id
        )
    await delete_where(db, Student, Student.id == student_id)

    logger.info(f"Cascade deleted student {student_id}: {counts}")
    return counts


# ============================================
# Enrollments
# ============================================


async def get_enrollment_by_student(
    db: AsyncSession, student_id: int
) -> Enrollment | None:
    result = await db.execute(
        select(Enrollment).where(Enrollment.student_id == student_id).limit(1)
    )
    return result.scalars().first()


async def list_enrollments(
    db: AsyncSession,
    *,
    page: int,
    limit: int,
    search: str | None = None,
    course_id: int | None = None,
) -> tuple[list[Enrollment], int]:
    """List enrollments, newest first; search matches the student's name."""
    query = select(Enrollment)
    if search:
        query = query.join(Student, Enrollment.student_id == Student.id).where(
            Student.name.ilike(f"%{search}%")
        )
    if course_id is not None:
        query = query.where(Enrollment.course_id == course_id)
    query = query.order_by(Enrollment.enrollment_date.desc(), Enrollment.id.desc())
    return await paginate(db, query, page=page, limit=limit)


async def count_enrollment_confirmations(db: AsyncSession, enrollment_id: int) -> int:
    return await count_where(db, Confirmation, Confirmation.enrollment_id == enrollment_id)


async def get_enrollments_without_confirmation(db: AsyncSession) -> list[Enrollment]:
    result = await db.execute(
        select(Enrollment)
        .outerjoin(Confirmation, Confirmation.enrollment_id == Enrollment.id)
        .where(Confirmation.id.is_(None))
        .order_by(Enrollment.enrollment_date.desc())
    )
    return list(result.scalars().all())


async def delete_enrollment_cascade(db: AsyncSession, enrollment_id: int) -> dict[str, int]:
    """Delete an enrollment and its confirmations. Does not commit."""
    counts = {
        "confirmations": await delete_where(
            db, Confirmation, Confirmation.enrollment_id == enrollment_id
        ),
    }
    await delete_where(db, Enrollment, Enrollment.id == enrollment_id)

    logger.info(f"Cascade deleted enrollment {enrollment_id}: {counts}")
    return counts


# ============================================
# Confirmations
# ============================================


async def get_confirmation_for(
    db: AsyncSession,
    enrollment_id: int,
    academic_year_id: int,
    *,
    exclude_id: int | None = None,
) -> Confirmation | None:
    query = select(Confirmation).where(
        Confirmation.enrollment_id == enrollment_id,
        Confirmation.academic_year_id == academic_year_id,
    )
    if exclude_id is not None:
        query = query.where(Confirmation.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalars().first()


async def list_confirmations(
    db: AsyncSession,
    *,
    page: int,
    limit: int,
    enrollment_id: int | None = None,
    academic_year_id: int | None = None,
    class_group_id: int | None = None,
) -> tuple[list[Confirmation], int]:
    query = select(Confirmation)
    if enrollment_id is not None:
        query = query.where(Confirmation.enrollment_id == enrollment_id)
    if academic_year_id is not None:
        query = query.where(Confirmation.academic_year_id == academic_year_id)
    if class_group_id is not None:
        query = query.where(Confirmation.class_group_id == class_group_id)
    query = query.order_by(Confirmation.confirmation_date.desc(), Confirmation.id.desc())
    return await paginate(db, query, page=page, limit=limit)


async def count_active_confirmations(db: AsyncSession, class_group_id: int) -> int:
    return await count_where(
        db,
        Confirmation,
        Confirmation.class_group_id == class_group_id,
        Confirmation.status == 1,
    )


# ============================================
# Statistics
# ============================================


async def _status_counts(db: AsyncSession, model, *filters) -> dict[str, int]:
    result = await db.execute(
        select(
            func.count(model.id),
            func.count(model.id).filter(model.status == 1),
        ).where(*filters)
    )
    total, active = result.one()
    total = total or 0
    active = active or 0
    return {"total": total, "active": active, "inactive": total - active}


async def get_enrollment_statistics(
    db: AsyncSession,
    *,
    course_id: int | None = None,
    academic_year_id: int | None = None,
) -> dict[str, dict[str, int]]:
    """
    Status counts for enrollments and confirmations.

    ``course_id`` narrows both; ``academic_year_id`` narrows confirmations.
    """
    enrollment_filters = []
    confirmation_filters = []
    if course_id is not None:
        enrollment_filters.append(Enrollment.course_id == course_id)
        confirmation_filters.append(
            Confirmation.enrollment_id.in_(
                select(Enrollment.id).where(Enrollment.course_id == course_id)
            )
        )
    if academic_year_id is not None:
        confirmation_filters.append(Confirmation.academic_year_id == academic_year_id)

    return {
        "enrollments": await _status_counts(db, Enrollment, *enrollment_filters),
        "confirmations": await _status_counts(db, Confirmation, *confirmation_filters),
    }
