"""
Teaching Staff Service Layer

Business rules for specialties, teachers and their assignments:
- Every referenced entity must exist (404)
- A teacher-subject triple, a director per (academic year, class-group)
  and a teacher/class-group pair are each unique (409)
- A specialty cannot be deleted while teachers hold it
- Deleting a teacher removes their links in one transaction
"""

import logging
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.errors import ConflictError, DependencyError, NotFoundError
from school_admin.modules.academics.models import AcademicYear, ClassGroup, Course, Subject
from school_admin.modules.shared.schemas import DeleteResult
from school_admin.modules.shared.service import (
    cascade_result,
    changes,
    hard_delete_result,
    page_result,
    run_cascade,
)
from school_admin.modules.staff import repository
from school_admin.modules.staff.models import (
    ClassDirector,
    Specialty,
    Teacher,
    TeacherClassGroup,
    TeacherSubject,
)
from school_admin.modules.staff.schemas import (
    ClassDirectorCreate,
    ClassDirectorUpdate,
    SpecialtyCount,
    SpecialtyCreate,
    SpecialtyDetail,
    SpecialtyUpdate,
    StaffReport,
    TeacherClassGroupCreate,
    TeacherCreate,
    TeacherRef,
    TeacherSubjectCreate,
    TeacherSubjectUpdate,
    TeacherUpdate,
)
from school_admin.modules.users.models import User

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _get_or_404(db: AsyncSession, model: type[T], entity_id: int, label: str) -> T:
    obj = await repository.get_by_id(db, model, entity_id)
    if obj is None:
        raise NotFoundError(label, entity_id)
    return obj


# ============================================
# Specialties
# ============================================


async def create_specialty(db: AsyncSession, data: SpecialtyCreate) -> Specialty:
    if await repository.get_by_designation(db, Specialty, data.designation, case_insensitive=True):
        raise ConflictError(
            f"Specialty '{data.designation}' already exists.", error_code="SPECIALTY_EXISTS"
        )
    return await repository.add(db, Specialty(designation=data.designation))


async def update_specialty(db: AsyncSession, specialty_id: int, data: SpecialtyUpdate) -> Specialty:
    specialty = await _get_or_404(db, Specialty, specialty_id, "Specialty")
    values = changes(data)
    if "designation" in values and await repository.get_by_designation(
        db, Specialty, values["designation"], exclude_id=specialty_id, case_insensitive=True
    ):
        raise ConflictError(
            f"Specialty '{values['designation']}' already exists.", error_code="SPECIALTY_EXISTS"
        )
    return await repository.update(db, specialty, values)


async def get_specialty(db: AsyncSession, specialty_id: int) -> SpecialtyDetail:
    """Return a specialty with the teachers holding it."""
    specialty = await _get_or_404(db, Specialty, specialty_id, "Specialty")
    teachers = await repository.get_teachers_by_specialty(db, specialty_id)
    return SpecialtyDetail(
        id=specialty.id,
        designation=specialty.designation,
        teachers=[TeacherRef.model_validate(t) for t in teachers],
    )


async def list_specialties(
    db: AsyncSession, *, page: int = 1, limit: int = 10, search: str | None = None
) -> dict[str, Any]:
    items, total = await repository.list_paginated(
        db, Specialty, page=page, limit=limit, search=search
    )
    return page_result(items, total, page, limit)


async def delete_specialty(db: AsyncSession, specialty_id: int) -> DeleteResult:
    specialty = await _get_or_404(db, Specialty, specialty_id, "Specialty")
    teachers = await repository.count_teachers_with_specialty(db, specialty_id)
    if teachers:
        raise DependencyError(
            f"Cannot delete specialty '{specialty.designation}': {teachers} teachers hold it.",
            {"teachers": teachers},
        )
    await repository.remove(db, specialty)
    logger.info(f"Specialty deleted: {specialty_id}")
    return hard_delete_result("specialty", specialty.designation)


async def get_teachers_by_specialty(db: AsyncSession, specialty_id: int) -> list[Teacher]:
    await _get_or_404(db, Specialty, specialty_id, "Specialty")
    return await repository.get_teachers_by_specialty(db, specialty_id)


# ============================================
# Teachers
# ============================================


async def _check_teacher_references(
    db: AsyncSession, values: dict[str, Any], *, teacher_id: int | None = None
) -> None:
    if values.get("specialty_id") is not None:
        await _get_or_404(db, Specialty, values["specialty_id"], "Specialty")
    if values.get("subject_id") is not None:
        await _get_or_404(db, Subject, values["subject_id"], "Subject")
    if values.get("user_id") is not None:
        await _get_or_404(db, User, values["user_id"], "User")
        if await repository.get_teacher_by_user(db, values["user_id"], exclude_id=teacher_id):
            raise ConflictError(
                "This user account is already linked to another teacher.",
                error_code="USER_ALREADY_LINKED",
            )


async def create_teacher(db: AsyncSession, data: TeacherCreate) -> Teacher:
    values = data.model_dump()
    await _check_teacher_references(db, values)
    teacher = await repository.add(db, Teacher(**values))
    logger.info(f"Teacher created: {teacher.id} - {teacher.name}")
    return teacher


async def update_teacher(db: AsyncSession, teacher_id: int, data: TeacherUpdate) -> Teacher:
    teacher = await _get_or_404(db, Teacher, teacher_id, "Teacher")
    values = changes(data)
    await _check_teacher_references(db, values, teacher_id=teacher_id)
    return await repository.update(db, teacher, values)


async def get_teacher(db: AsyncSession, teacher_id: int) -> Teacher:
    return await _get_or_404(db, Teacher, teacher_id, "Teacher")


async def list_teachers(
    db: AsyncSession, *, page: int = 1, limit: int = 10, search: str | None = None
) -> dict[str, Any]:
    items, total = await repository.list_teachers(db, page=page, limit=limit, search=search)
    return page_result(items, total, page, limit)


async def get_active_teachers(db: AsyncSession) -> list[Teacher]:
    return await repository.get_active_teachers(db)


async def delete_teacher(db: AsyncSession, teacher_id: int) -> DeleteResult:
    """
    Delete a teacher with their subject links, director rows and
    class-group assignments, as one transaction.
    """
    teacher = await _get_or_404(db, Teacher, teacher_id, "Teacher")
    deleted = await run_cascade(db, "teacher", teacher_id, repository.delete_teacher_cascade)
    return cascade_result("teacher", teacher.name, deleted)


# ============================================
# Teacher ↔ Subject links
# ============================================


async def _check_teacher_subject(
    db: AsyncSession,
    teacher_id: int,
    course_id: int,
    subject_id: int,
    *,
    exclude_id: int | None = None,
) -> None:
    await _get_or_404(db, Teacher, teacher_id, "Teacher")
    await _get_or_404(db, Course, course_id, "Course")
    await _get_or_404(db, Subject, subject_id, "Subject")
    if await repository.get_teacher_subject(
        db, teacher_id, course_id, subject_id, exclude_id=exclude_id
    ):
        raise ConflictError(
            "This teacher is already linked to this subject in this course.",
            error_code="TEACHER_SUBJECT_EXISTS",
        )


async def create_teacher_subject(db: AsyncSession, data: TeacherSubjectCreate) -> TeacherSubject:
    await _check_teacher_subject(db, data.teacher_id, data.course_id, data.subject_id)
    return await repository.add(db, TeacherSubject(**data.model_dump()))


async def update_teacher_subject(
    db: AsyncSession, link_id: int, data: TeacherSubjectUpdate
) -> TeacherSubject:
    link = await _get_or_404(db, TeacherSubject, link_id, "Teacher subject")
    values = changes(data)
    if values:
        await _check_teacher_subject(
            db,
            values.get("teacher_id", link.teacher_id),
            values.get("course_id", link.course_id),
            values.get("subject_id", link.subject_id),
            exclude_id=link_id,
        )
    return await repository.update(db, link, values)


async def get_teacher_subject(db: AsyncSession, link_id: int) -> TeacherSubject:
    return await _get_or_404(db, TeacherSubject, link_id, "Teacher subject")


async def list_teacher_subjects(
    db: AsyncSession, *, page: int = 1, limit: int = 10, teacher_id: int | None = None
) -> dict[str, Any]:
    items, total = await repository.list_teacher_subjects(
        db, page=page, limit=limit, teacher_id=teacher_id
    )
    return page_result(items, total, page, limit)


async def delete_teacher_subject(db: AsyncSession, link_id: int) -> DeleteResult:
    link = await _get_or_404(db, TeacherSubject, link_id, "Teacher subject")
    await repository.remove(db, link)
    return DeleteResult(
        message="Teacher subject link was deleted.", kind="hard_delete", details={"id": link_id}
    )


async def get_teacher_subject_statistics(db: AsyncSession) -> dict[str, int]:
    return await repository.get_teacher_subject_statistics(db)


# ============================================
# Class Directors
# ============================================


async def _check_class_director(
    db: AsyncSession, values: dict[str, Any], *, exclude_id: int | None = None
) -> None:
    await _get_or_404(db, AcademicYear, values["academic_year_id"], "Academic year")
    await _get_or_404(db, ClassGroup, values["class_group_id"], "Class group")
    await _get_or_404(db, Teacher, values["teacher_id"], "Teacher")
    if await repository.get_class_director_for(
        db, values["academic_year_id"], values["class_group_id"], exclude_id=exclude_id
    ):
        raise ConflictError(
            "This class group already has a director for this academic year.",
            error_code="CLASS_DIRECTOR_EXISTS",
        )


async def create_class_director(db: AsyncSession, data: ClassDirectorCreate) -> ClassDirector:
    values = data.model_dump()
    await _check_class_director(db, values)
    director = await repository.add(db, ClassDirector(**values))
    logger.info(
        f"Class director created: teacher {director.teacher_id} for class group "
        f"{director.class_group_id} (year {director.academic_year_id})"
    )
    return director


async def update_class_director(
    db: AsyncSession, director_id: int, data: ClassDirectorUpdate
) -> ClassDirector:
    director = await _get_or_404(db, ClassDirector, director_id, "Class director")
    values = changes(data)
    if any(key in values for key in ("academic_year_id", "class_group_id", "teacher_id")):
        merged = {
            "academic_year_id": values.get("academic_year_id", director.academic_year_id),
            "class_group_id": values.get("class_group_id", director.class_group_id),
            "teacher_id": values.get("teacher_id", director.teacher_id),
        }
        await _check_class_director(db, merged, exclude_id=director_id)
    return await repository.update(db, director, values)


async def get_class_director(db: AsyncSession, director_id: int) -> ClassDirector:
    return await _get_or_404(db, ClassDirector, director_id, "Class director")


async def list_class_directors(
    db: AsyncSession, *, page: int = 1, limit: int = 10, academic_year_id: int | None = None
) -> dict[str, Any]:
    items, total = await repository.list_class_directors(
        db, page=page, limit=limit, academic_year_id=academic_year_id
    )
    return page_result(items, total, page, limit)


async def delete_class_director(db: AsyncSession, director_id: int) -> DeleteResult:
    director = await _get_or_404(db, ClassDirector, director_id, "Class director")
    await repository.remove(db, director)
    return DeleteResult(
        message="Class director was deleted.", kind="hard_delete", details={"id": director_id}
    )


async def get_directors_by_academic_year(
    db: AsyncSession, academic_year_id: int
) -> list[ClassDirector]:
    await _get_or_404(db, AcademicYear, academic_year_id, "Academic year")
    return await repository.get_directors_by_academic_year(db, academic_year_id)


# ============================================
# Teacher ↔ Class-group assignments
# ============================================


async def create_teacher_class_group(
    db: AsyncSession, data: TeacherClassGroupCreate
) -> TeacherClassGroup:
    await _get_or_404(db, Teacher, data.teacher_id, "Teacher")
    await _get_or_404(db, ClassGroup, data.class_group_id, "Class group")
    if await repository.get_teacher_class_group(db, data.teacher_id, data.class_group_id):
        raise ConflictError(
            "This teacher is already assigned to this class group.",
            error_code="TEACHER_ASSIGNMENT_EXISTS",
        )
    assignment = await repository.add(db, TeacherClassGroup(**data.model_dump()))
    logger.info(f"Teacher {data.teacher_id} assigned to class group {data.class_group_id}")
    return assignment


async def list_teacher_class_groups(
    db: AsyncSession, *, teacher_id: int | None = None, class_group_id: int | None = None
) -> list[TeacherClassGroup]:
    return await repository.list_teacher_class_groups(
        db, teacher_id=teacher_id, class_group_id=class_group_id
    )


async def delete_teacher_class_group(
    db: AsyncSession, teacher_id: int, class_group_id: int
) -> DeleteResult:
    assignment = await repository.get_teacher_class_group(db, teacher_id, class_group_id)
    if assignment is None:
        raise NotFoundError("Teacher assignment", f"{teacher_id}/{class_group_id}")
    await repository.remove(db, assignment)
    logger.info(f"Teacher {teacher_id} unassigned from class group {class_group_id}")
    return DeleteResult(
        message="Teacher assignment was deleted.",
        kind="hard_delete",
        details={"teacher_id": teacher_id, "class_group_id": class_group_id},
    )


async def get_class_groups_by_teacher(db: AsyncSession, teacher_id: int) -> list[ClassGroup]:
    await _get_or_404(db, Teacher, teacher_id, "Teacher")
    return await repository.get_class_groups_by_teacher(db, teacher_id)


async def get_teachers_by_class_group(db: AsyncSession, class_group_id: int) -> list[Teacher]:
    await _get_or_404(db, ClassGroup, class_group_id, "Class group")
    return await repository.get_teachers_by_class_group(db, class_group_id)


# ============================================
# Reports
# ============================================


async def get_staff_report(db: AsyncSession) -> StaffReport:
    counts = await repository.get_staff_counts(db)
    by_specialty = await repository.count_teachers_by_specialty(db)
    return StaffReport(
        **counts,
        teachers_by_specialty=[
            SpecialtyCount(
                specialty_id=specialty_id,
                specialty=designation or "Sem especialidade",
                teachers=total,
            )
            for specialty_id, designation, total in by_specialty
        ],
    )
