"""
Teaching Staff Repository

Database operations for specialties, teachers, subject links, class
directors and class-group assignments.
"""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.modules.academics.models import ClassGroup
# Generic CRUD helpers are re-exported for the service layer
from school_admin.modules.shared.repository import (  # noqa: F401
    add,
    count_where,
    delete_where,
    get_by_designation,
    get_by_id,
    list_paginated,
    paginate,
    remove,
    update,
)
from school_admin.modules.staff.models import (
    ClassDirector,
    Specialty,
    Teacher,
    TeacherClassGroup,
    TeacherSubject,
)

logger = logging.getLogger(__name__)


# ============================================
# Teachers
# ============================================


async def list_teachers(
    db: AsyncSession,
    *,
    page: int,
    limit: int,
    search: str | None = None,
) -> tuple[list[Teacher], int]:
    """List teachers by name; search matches name, email or contact."""
    query = select(Teacher)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(
                Teacher.name.ilike(pattern),
                Teacher.email.ilike(pattern),
                Teacher.contact.ilike(pattern),
            )
        )
    query = query.order_by(Teacher.name.asc())
    return await paginate(db, query, page=page, limit=limit)


async def get_active_teachers(db: AsyncSession) -> list[Teacher]:
    result = await db.execute(
        select(Teacher).where(Teacher.status == 1).order_by(Teacher.name.asc())
    )
    return list(result.scalars().all())


async def get_teachers_by_specialty(db: AsyncSession, specialty_id: int) -> list[Teacher]:
    result = await db.execute(
        select(Teacher).where(Teacher.specialty_id == specialty_id).order_by(Teacher.name.asc())
    )
    return list(result.scalars().all())


async def count_teachers_with_specialty(db: AsyncSession, specialty_id: int) -> int:
    return await count_where(db, Teacher, Teacher.specialty_id == specialty_id)


async def get_teacher_by_user(
    db: AsyncSession, user_id: int, *, exclude_id: int | None = None
) -> Teacher | None:
    query = select(Teacher).where(Teacher.user_id == user_id)
    if exclude_id is not None:
        query = query.where(Teacher.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalars().first()


async def delete_teacher_cascade(db: AsyncSession, teacher_id: int) -> dict[str, int]:
    """
    Delete a teacher and the rows that reference it.

    Order: subject links, class director rows, class-group assignments,
    then the teacher. Does not commit.
    """
    counts = {
        "teacher_subjects": await delete_where(
            db, TeacherSubject, TeacherSubject.teacher_id == teacher_id
        ),
        "class_directors": await delete_where(
            db, ClassDirector, ClassDirector.teacher_id == teacher_id
        ),
        "teacher_assignments": await delete_where(
            db, TeacherClassGroup, TeacherClassGroup.teacher_id == teacher_id
        ),
    }
    await delete_where(db, Teacher, Teacher.id == teacher_id)

    logger.info(f"Cascade deleted teacher {teacher_id}: {counts}")
    return counts


# ============================================
# Teacher ↔ Subject links
# ============================================


async def get_teacher_subject(
    db: AsyncSession,
    teacher_id: int,
    course_id: int,
    subject_id: int,
    *,
    exclude_id: int | None = None,
) -> TeacherSubject | None:
    query = select(TeacherSubject).where(
        TeacherSubject.teacher_id == teacher_id,
        TeacherSubject.course_id == course_id,
        TeacherSubject.subject_id == subject_id,
    )
    if exclude_id is not None:
        query = query.where(TeacherSubject.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalars().first()


async def list_teacher_subjects(
    db: AsyncSession,
    *,
    page: int,
    limit: int,
    teacher_id: int | None = None,
) -> tuple[list[TeacherSubject], int]:
    query = select(TeacherSubject)
    if teacher_id is not None:
        query = query.where(TeacherSubject.teacher_id == teacher_id)
    query = query.order_by(TeacherSubject.id.asc())
    return await paginate(db, query, page=page, limit=limit)


async def get_teacher_subject_statistics(db: AsyncSession) -> dict[str, int]:
    result = await db.execute(
        select(
            func.count(TeacherSubject.id),
            func.count(func.distinct(TeacherSubject.teacher_id)),
            func.count(func.distinct(TeacherSubject.subject_id)),
        )
    )
    total, teachers, subjects = result.one()
    return {
        "total_links": total or 0,
        "teachers_with_subjects": teachers or 0,
        "subjects_covered": subjects or 0,
    }


# ============================================
# Class Directors
# ============================================


async def get_class_director_for(
    db: AsyncSession,
    academic_year_id: int,
    class_group_id: int,
    *,
    exclude_id: int | None = None,
) -> ClassDirector | None:
    query = select(ClassDirector).where(
        ClassDirector.academic_year_id == academic_year_id,
        ClassDirector.class_group_id == class_group_id,
    )
    if exclude_id is not None:
        query = query.where(ClassDirector.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalars().first()


async def list_class_directors(
    db: AsyncSession,
    *,
    page: int,
    limit: int,
    academic_year_id: int | None = None,
) -> tuple[list[ClassDirector], int]:
    query = select(ClassDirector)
    if academic_year_id is not None:
        query = query.where(ClassDirector.academic_year_id == academic_year_id)
    query = query.order_by(ClassDirector.id.asc())
    return await paginate(db, query, page=page, limit=limit)


async def get_directors_by_academic_year(
    db: AsyncSession, academic_year_id: int
) -> list[ClassDirector]:
    result = await db.execute(
        select(ClassDirector)
        .where(ClassDirector.academic_year_id == academic_year_id)
        .order_by(ClassDirector.id.asc())
    )
    return list(result.scalars().all())


# ============================================
# Teacher ↔ Class-group assignments
# ============================================


async def get_teacher_class_group(
    db: AsyncSession, teacher_id: int, class_group_id: int
) -> TeacherClassGroup | None:
    return await db.get(TeacherClassGroup, (teacher_id, class_group_id))


async def list_teacher_class_groups(
    db: AsyncSession,
    *,
    teacher_id: int | None = None,
    class_group_id: int | None = None,
) -> list[TeacherClassGroup]:
    query = select(TeacherClassGroup)
    if teacher_id is not None:
        query = query.where(TeacherClassGroup.teacher_id == teacher_id)
    if class_group_id is not None:
        query = query.where(TeacherClassGroup.class_group_id == class_group_id)
    result = await db.execute(
        query.order_by(TeacherClassGroup.teacher_id, TeacherClassGroup.class_group_id)
    )
    return list(result.scalars().all())


async def get_class_groups_by_teacher(db: AsyncSession, teacher_id: int) -> list[ClassGroup]:
    result = await db.execute(
        select(ClassGroup)
        .join(TeacherClassGroup, TeacherClassGroup.class_group_id == ClassGroup.id)
        .where(TeacherClassGroup.teacher_id == teacher_id)
        .order_by(ClassGroup.designation.asc())
    )
    return list(result.scalars().all())


async def get_teachers_by_class_group(db: AsyncSession, class_group_id: int) -> list[Teacher]:
    result = await db.execute(
        select(Teacher)
        .join(TeacherClassGroup, TeacherClassGroup.teacher_id == Teacher.id)
        .where(TeacherClassGroup.class_group_id == class_group_id)
        .order_by(Teacher.name.asc())
    )
    return list(result.scalars().all())


# ============================================
# Reports
# ============================================


async def get_staff_counts(db: AsyncSession) -> dict[str, int]:
    return {
        "total_teachers": await count_where(db, Teacher),
        "active_teachers": await count_where(db, Teacher, Teacher.status == 1),
        "total_specialties": await count_where(db, Specialty),
        "total_class_directors": await count_where(db, ClassDirector),
    }


async def count_teachers_by_specialty(db: AsyncSession) -> list[tuple[int | None, str | None, int]]:
    """Return ``(specialty_id, designation, teacher_count)`` rows, largest first."""
    result = await db.execute(
        select(Teacher.specialty_id, Specialty.designation, func.count(Teacher.id))
        .outerjoin(Specialty, Teacher.specialty_id == Specialty.id)
        .group_by(Teacher.specialty_id, Specialty.designation)
        .order_by(func.count(Teacher.id).desc())
    )
    return [tuple(row) for row in result.all()]
