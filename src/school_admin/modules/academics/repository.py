"""
Academic Structure Repository

Database operations for the academic structure. Cascade helpers execute
their deletes in dependency order on the caller's session and return the
number of rows removed per table; committing or rolling back is left to
the service layer so that a cascade runs as one transaction.
"""

import logging
from typing import Any

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from school_admin.modules.academics.models import (
    ACTIVE_CLASS_GROUP_STATUSES,
    AcademicYear,
    ClassGroup,
    Course,
    CurriculumEntry,
    SchoolClass,
    Subject,
)
from school_admin.modules.enrollments.models import Confirmation, Enrollment, Student
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
from school_admin.modules.staff.models import ClassDirector, TeacherClassGroup, TeacherSubject

logger = logging.getLogger(__name__)


# ============================================
# Uniqueness lookups
# ============================================


async def get_subject_by_designation_and_course(
    db: AsyncSession,
    designation: str,
    course_id: int,
    *,
    exclude_id: int | None = None,
) -> Subject | None:
    query = select(Subject).where(
        Subject.designation == designation,
        Subject.course_id == course_id,
    )
    if exclude_id is not None:
        query = query.where(Subject.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalars().first()


async def get_curriculum_entry(
    db: AsyncSession,
    subject_id: int,
    school_class_id: int,
    course_id: int,
    *,
    exclude_id: int | None = None,
) -> CurriculumEntry | None:
    query = select(CurriculumEntry).where(
        CurriculumEntry.subject_id == subject_id,
        CurriculumEntry.school_class_id == school_class_id,
        CurriculumEntry.course_id == course_id,
    )
    if exclude_id is not None:
        query = query.where(CurriculumEntry.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalars().first()


# ============================================
# Listing & queries
# ============================================


async def list_curriculum_entries(
    db: AsyncSession,
    *,
    page: int,
    limit: int,
    search: str | None = None,
) -> tuple[list[CurriculumEntry], int]:
    """List curriculum rows; search matches subject, class or course designation."""
    query = select(CurriculumEntry)
    if search:
        pattern = f"%{search}%"
        subject = aliased(Subject)
        school_class = aliased(SchoolClass)
        course = aliased(Course)
        query = (
            query.join(subject, CurriculumEntry.subject_id == subject.id)
            .join(school_class, CurriculumEntry.school_class_id == school_class.id)
            .join(course, CurriculumEntry.course_id == course.id)
            .where(
                or_(
                    subject.designation.ilike(pattern),
                    school_class.designation.ilike(pattern),
                    course.designation.ilike(pattern),
                )
            )
        )
    query = query.order_by(CurriculumEntry.id.asc())
    return await paginate(db, query, page=page, limit=limit)


async def get_curriculum_by_course_and_class(
    db: AsyncSession, course_id: int, school_class_id: int
) -> list[CurriculumEntry]:
    result = await db.execute(
        select(CurriculumEntry)
        .where(
            CurriculumEntry.course_id == course_id,
            CurriculumEntry.school_class_id == school_class_id,
        )
        .order_by(CurriculumEntry.id.asc())
    )
    return list(result.scalars().all())


async def get_class_groups_by_academic_year(
    db: AsyncSession, academic_year_id: int
) -> list[ClassGroup]:
    result = await db.execute(
        select(ClassGroup)
        .where(ClassGroup.academic_year_id == academic_year_id)
        .order_by(ClassGroup.designation.asc())
    )
    return list(result.scalars().all())


async def get_subjects_by_course(db: AsyncSession, course_id: int) -> list[Subject]:
    result = await db.execute(
        select(Subject).where(Subject.course_id == course_id).order_by(Subject.designation.asc())
    )
    return list(result.scalars().all())


async def get_class_groups_by_class_and_course(
    db: AsyncSession, school_class_id: int, course_id: int
) -> list[ClassGroup]:
    result = await db.execute(
        select(ClassGroup)
        .where(
            ClassGroup.school_class_id == school_class_id,
            ClassGroup.course_id == course_id,
        )
        .order_by(ClassGroup.designation.asc())
    )
    return list(result.scalars().all())


async def get_active_class_groups(
    db: AsyncSession, academic_year_id: int | None = None
) -> list[ClassGroup]:
    query = select(ClassGroup).where(ClassGroup.status.in_(ACTIVE_CLASS_GROUP_STATUSES))
    if academic_year_id is not None:
        query = query.where(ClassGroup.academic_year_id == academic_year_id)
    result = await db.execute(query.order_by(ClassGroup.designation.asc()))
    return list(result.scalars().all())


async def get_students_by_class_groups(
    db: AsyncSession, class_group_ids: list[int]
) -> dict[int, list[Student]]:
    """
    Map each class-group ID to the distinct students holding an active
    confirmation in it, sorted by name.
    """
    if not class_group_ids:
        return {}

    result = await db.execute(
        select(Confirmation.class_group_id, Student)
        .join(Enrollment, Confirmation.enrollment_id == Enrollment.id)
        .join(Student, Enrollment.student_id == Student.id)
        .where(
            Confirmation.class_group_id.in_(class_group_ids),
            Confirmation.status == 1,
        )
        .distinct()
        .order_by(Confirmation.class_group_id, Student.name.asc())
    )

    students: dict[int, list[Student]] = {group_id: [] for group_id in class_group_ids}
    for class_group_id, student in result.all():
        students[class_group_id].append(student)
    return students


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


async def get_course_statistics(db: AsyncSession) -> dict[str, int]:
    result = await db.execute(
        select(
            func.count(Course.id),
            func.count(Course.id).filter(Course.status == 1),
            func.count(Course.id).filter(Course.status == 0),
        )
    )
    total, active, inactive = result.one()
    return {"total": total or 0, "active": active or 0, "inactive": inactive or 0}


async def get_subject_statistics(db: AsyncSession) -> dict[str, int]:
    result = await db.execute(
        select(
            func.count(Subject.id),
            func.count(Subject.id).filter(Subject.status == 1),
            func.count(Subject.id).filter(Subject.status.in_((0, 4))),
            func.count(Subject.id).filter(Subject.is_specific.is_(True)),
        )
    )
    total, active, inactive, specific = result.one()
    return {
        "total": total or 0,
        "active": active or 0,
        "inactive": inactive or 0,
        "specific": specific or 0,
    }


# ============================================
# Dependency counts
# ============================================


async def count_academic_year_dependencies(db: AsyncSession, academic_year_id: int) -> dict[str, int]:
    return {
        "class_groups": await count_where(
            db, ClassGroup, ClassGroup.academic_year_id == academic_year_id
        ),
        "confirmations": await count_where(
            db, Confirmation, Confirmation.academic_year_id == academic_year_id
        ),
        "class_directors": await count_where(
            db, ClassDirector, ClassDirector.academic_year_id == academic_year_id
        ),
    }


async def count_course_dependencies(db: AsyncSession, course_id: int) -> dict[str, int]:
    return {
        "subjects": await count_where(db, Subject, Subject.course_id == course_id),
        "teacher_subjects": await count_where(
            db, TeacherSubject, TeacherSubject.course_id == course_id
        ),
        "class_groups": await count_where(db, ClassGroup, ClassGroup.course_id == course_id),
        "curriculum_entries": await count_where(
            db, CurriculumEntry, CurriculumEntry.course_id == course_id
        ),
        "enrollments": await count_where(db, Enrollment, Enrollment.course_id == course_id),
    }


async def count_class_groups_referencing(db: AsyncSession, column: Any, value: int) -> int:
    """Count class-groups whose ``column`` (room_id, period_id...) equals ``value``."""
    return await count_where(db, ClassGroup, column == value)


# ============================================
# Cascade deletes (no commit)
# ============================================


async def _delete_class_group_dependents(db: AsyncSession, class_group_ids: Select) -> dict[str, int]:
    """Delete confirmations, teacher assignments and directors of the selected class-groups."""
    return {
        "confirmations": await delete_where(
            db, Confirmation, Confirmation.class_group_id.in_(class_group_ids)
        ),
        "teacher_assignments": await delete_where(
            db, TeacherClassGroup, TeacherClassGroup.class_group_id.in_(class_group_ids)
        ),
        "class_directors": await delete_where(
            db, ClassDirector, ClassDirector.class_group_id.in_(class_group_ids)
        ),
    }


def _merge_counts(target: dict[str, int], extra: dict[str, int]) -> dict[str, int]:
    for key, value in extra.items():
        target[key] = target.get(key, 0) + value
    return target


async def delete_academic_year_cascade(db: AsyncSession, academic_year_id: int) -> dict[str, int]:
    """
    Delete an academic year and everything hanging off it.

    Order: confirmations of the year, class-group dependents, class directors
    of the year, class-groups, then the year itself.
    """
    group_ids = select(ClassGroup.id).where(ClassGroup.academic_year_id == academic_year_id)

    counts = {
        "confirmations": await delete_where(
            db, Confirmation, Confirmation.academic_year_id == academic_year_id
        )
    }
    _merge_counts(counts, await _delete_class_group_dependents(db, group_ids))
    counts["class_directors"] += await delete_where(
        db, ClassDirector, ClassDirector.academic_year_id == academic_year_id
    )
    counts["class_groups"] = await delete_where(
        db, ClassGroup, ClassGroup.academic_year_id == academic_year_id
    )
    await delete_where(db, AcademicYear, AcademicYear.id == academic_year_id)

    logger.info(f"Cascade deleted academic year {academic_year_id}: {counts}")
    return counts


async def delete_course_cascade(db: AsyncSession, course_id: int) -> dict[str, int]:
    """
    Delete a course with its subjects, class-groups and enrollments.

    Order: curriculum entries, teacher-subject links, class-group dependents,
    class-groups, confirmations of enrollments, enrollments, subjects, course.
    """
    subject_ids = select(Subject.id).where(Subject.course_id == course_id)
    group_ids = select(ClassGroup.id).where(ClassGroup.course_id == course_id)
    enrollment_ids = select(Enrollment.id).where(Enrollment.course_id == course_id)

    counts = {
        "curriculum_entries": await delete_where(
            db,
            CurriculumEntry,
            or_(
                CurriculumEntry.course_id == course_id,
                CurriculumEntry.subject_id.in_(subject_ids),
            ),
        ),
        "teacher_subjects": await delete_where(
            db,
            TeacherSubject,
            or_(
                TeacherSubject.course_id == course_id,
                TeacherSubject.subject_id.in_(subject_ids),
            ),
        ),
    }
    _merge_counts(counts, await _delete_class_group_dependents(db, group_ids))
    counts["class_groups"] = await delete_where(db, ClassGroup, ClassGroup.course_id == course_id)
    counts["confirmations"] += await delete_where(
        db, Confirmation, Confirmation.enrollment_id.in_(enrollment_ids)
    )
    counts["enrollments"] = await delete_where(db, Enrollment, Enrollment.course_id == course_id)
    counts["subjects"] = await delete_where(db, Subject, Subject.course_id == course_id)
    await delete_where(db, Course, Course.id == course_id)

    logger.info(f"Cascade deleted course {course_id}: {counts}")
    return counts


async def delete_school_class_cascade(db: AsyncSession, school_class_id: int) -> dict[str, int]:
    """
    Delete a grade level with its class-groups and curriculum rows.

    Order: class-group dependents, curriculum entries, class-groups, class.
    """
    group_ids = select(ClassGroup.id).where(ClassGroup.school_class_id == school_class_id)

    counts = await _delete_class_group_dependents(db, group_ids)
    counts["curriculum_entries"] = await delete_where(
        db, CurriculumEntry, CurriculumEntry.school_class_id == school_class_id
    )
    counts["class_groups"] = await delete_where(
        db, ClassGroup, ClassGroup.school_class_id == school_class_id
    )
    await delete_where(db, SchoolClass, SchoolClass.id == school_class_id)

    logger.info(f"Cascade deleted class {school_class_id}: {counts}")
    return counts


async def delete_subject_cascade(db: AsyncSession, subject_id: int) -> dict[str, int]:
    """Delete a subject with its curriculum rows and teacher links."""
    counts = {
        "curriculum_entries": await delete_where(
            db, CurriculumEntry, CurriculumEntry.subject_id == subject_id
        ),
        "teacher_subjects": await delete_where(
            db, TeacherSubject, TeacherSubject.subject_id == subject_id
        ),
    }
    await delete_where(db, Subject, Subject.id == subject_id)

    logger.info(f"Cascade deleted subject {subject_id}: {counts}")
    return counts


async def delete_class_group_cascade(db: AsyncSession, class_group_id: int) -> dict[str, int]:
    """Delete a class-group with its confirmations, assignments and directors."""
    group_ids = select(ClassGroup.id).where(ClassGroup.id == class_group_id)

    counts = await _delete_class_group_dependents(db, group_ids)
    await delete_where(db, ClassGroup, ClassGroup.id == class_group_id)

    logger.info(f"Cascade deleted class group {class_group_id}: {counts}")
    return counts
