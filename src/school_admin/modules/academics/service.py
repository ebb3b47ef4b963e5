"""
Academic Structure Service Layer

Business rules for the academic structure:

1. Validation:
   - Designations are unique (rooms and periods case-insensitively)
   - Referenced entities must exist (404 naming the missing entity)
   - Academic years cannot start after they end

2. Deletion policy:
   - Academic years and courses refuse to delete while dependents exist,
     unless ``force_cascade`` is set
   - Grade levels, subjects and class-groups always cascade
   - Rooms and periods refuse to delete while class-groups use them
   - Cascades run as a single transaction; any database error rolls the
     whole delete back
"""

import logging
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.errors import (
    BusinessRuleError,
    ConflictError,
    DependencyError,
    NotFoundError,
    describe_dependencies,
)
from school_admin.modules.academics import repository
from school_admin.modules.academics.models import (
    AcademicYear,
    ClassGroup,
    Course,
    CurriculumEntry,
    Period,
    Room,
    SchoolClass,
    Subject,
)
from school_admin.modules.academics.schemas import (
    AcademicYearCreate,
    AcademicYearUpdate,
    ClassGroupCreate,
    ClassGroupReportItem,
    ClassGroupResponse,
    ClassGroupStudent,
    ClassGroupUpdate,
    CourseCreate,
    CourseUpdate,
    CurriculumEntryCreate,
    CurriculumEntryUpdate,
    PeriodCreate,
    PeriodUpdate,
    RoomCreate,
    RoomUpdate,
    SchoolClassCreate,
    SchoolClassUpdate,
    SubjectCreate,
    SubjectUpdate,
)
from school_admin.modules.shared.schemas import DeleteResult
from school_admin.modules.shared.service import (
    cascade_result,
    changes,
    create_batch,
    hard_delete_result,
    page_result,
    run_cascade,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ============================================
# Helpers
# ============================================


async def get_or_404(db: AsyncSession, model: type[T], entity_id: int, label: str) -> T:
    """Load a row by primary key or raise NotFoundError labelled ``label``."""
    obj = await repository.get_by_id(db, model, entity_id)
    if obj is None:
        raise NotFoundError(label, entity_id)
    return obj


async def _ensure_exists(db: AsyncSession, references: list[tuple[type, int | None, str]]) -> None:
    for model, entity_id, label in references:
        if entity_id is not None:
            await get_or_404(db, model, entity_id, label)


async def _ensure_unique_designation(
    db: AsyncSession,
    model: type,
    designation: str,
    label: str,
    *,
    exclude_id: int | None = None,
    case_insensitive: bool = False,
) -> None:
    existing = await repository.get_by_designation(
        db, model, designation, exclude_id=exclude_id, case_insensitive=case_insensitive
    )
    if existing is not None:
        raise ConflictError(
            f"A {label} named '{designation}' already exists.",
            error_code=f"{label.upper().replace(' ', '_')}_EXISTS",
        )


# ============================================
# Academic Years
# ============================================


def _validate_year_range(start_year: int, end_year: int) -> None:
    if start_year > end_year:
        raise BusinessRuleError(
            f"Start year ({start_year}) cannot be after end year ({end_year}).",
            error_code="INVALID_YEAR_RANGE",
        )


async def create_academic_year(db: AsyncSession, data: AcademicYearCreate) -> AcademicYear:
    _validate_year_range(data.start_year, data.end_year)
    await _ensure_unique_designation(db, AcademicYear, data.designation, "academic year")

    year = await repository.add(db, AcademicYear(**data.model_dump()))
    logger.info(f"Academic year created: {year.id} - {year.designation}")
    return year


async def update_academic_year(
    db: AsyncSession, academic_year_id: int, data: AcademicYearUpdate
) -> AcademicYear:
    year = await get_or_404(db, AcademicYear, academic_year_id, "Academic year")
    values = changes(data)

    _validate_year_range(
        values.get("start_year", year.start_year),
        values.get("end_year", year.end_year),
    )
    if "designation" in values:
        await _ensure_unique_designation(
            db, AcademicYear, values["designation"], "academic year", exclude_id=academic_year_id
        )

    return await repository.update(db, year, values)


async def get_academic_year(db: AsyncSession, academic_year_id: int) -> AcademicYear:
    return await get_or_404(db, AcademicYear, academic_year_id, "Academic year")


async def list_academic_years(
    db: AsyncSession, *, page: int = 1, limit: int = 10, search: str | None = None
) -> dict[str, Any]:
    items, total = await repository.list_paginated(
        db, AcademicYear, page=page, limit=limit, search=search
    )
    return page_result(items, total, page, limit)


async def delete_academic_year(
    db: AsyncSession, academic_year_id: int, *, force_cascade: bool = False
) -> DeleteResult:
    """
    Delete an academic year.

    Raises:
        NotFoundError: If the year does not exist
        DependencyError: If dependents exist and ``force_cascade`` is False
        DeleteFailedError: If the cascade transaction fails
    """
    year = await get_or_404(db, AcademicYear, academic_year_id, "Academic year")
    counts = await repository.count_academic_year_dependencies(db, academic_year_id)

    if any(counts.values()):
        if not force_cascade:
            raise DependencyError(
                f"Cannot delete academic year '{year.designation}': it has "
                f"{describe_dependencies(counts)}. Pass force_cascade=true to delete them too.",
                counts,
            )
        deleted = await run_cascade(
            db, "academic year", academic_year_id, repository.delete_academic_year_cascade
        )
        return cascade_result("academic year", year.designation, deleted)

    await repository.remove(db, year)
    logger.info(f"Academic year deleted: {academic_year_id}")
    return hard_delete_result("academic year", year.designation)


# ============================================
# Courses
# ============================================


async def create_course(db: AsyncSession, data: CourseCreate) -> Course:
    await _ensure_unique_designation(db, Course, data.designation, "course")
    course = await repository.add(db, Course(**data.model_dump()))
    logger.info(f"Course created: {course.id} - {course.designation}")
    return course


async def update_course(db: AsyncSession, course_id: int, data: CourseUpdate) -> Course:
    course = await get_or_404(db, Course, course_id, "Course")
    values = changes(data)
    if "designation" in values:
        await _ensure_unique_designation(
            db, Course, values["designation"], "course", exclude_id=course_id
        )
    return await repository.update(db, course, values)


async def get_course(db: AsyncSession, course_id: int) -> Course:
    return await get_or_404(db, Course, course_id, "Course")


async def list_courses(
    db: AsyncSession, *, page: int = 1, limit: int = 10, search: str | None = None
) -> dict[str, Any]:
    items, total = await repository.list_paginated(
        db, Course, page=page, limit=limit, search=search
    )
    return page_result(items, total, page, limit)


async def delete_course(
    db: AsyncSession, course_id: int, *, force_cascade: bool = False
) -> DeleteResult:
    """Delete a course; blocked by dependents unless ``force_cascade``."""
    course = await get_or_404(db, Course, course_id, "Course")
    counts = await repository.count_course_dependencies(db, course_id)

    if any(counts.values()):
        if not force_cascade:
            raise DependencyError(
                f"Cannot delete course '{course.designation}': it has "
                f"{describe_dependencies(counts)}. Pass force_cascade=true to delete them too.",
                counts,
            )
        deleted = await run_cascade(db, "course", course_id, repository.delete_course_cascade)
        return cascade_result("course", course.designation, deleted)

    await repository.remove(db, course)
    logger.info(f"Course deleted: {course_id}")
    return hard_delete_result("course", course.designation)


async def get_course_statistics(db: AsyncSession) -> dict[str, int]:
    return await repository.get_course_statistics(db)


async def create_courses_batch(db: AsyncSession, items: list[CourseCreate]) -> dict[str, list]:
    return await create_batch(items, lambda item: create_course(db, item))


# ============================================
# Grade Levels
# ============================================


async def create_school_class(db: AsyncSession, data: SchoolClassCreate) -> SchoolClass:
    await _ensure_unique_designation(db, SchoolClass, data.designation, "class")
    school_class = await repository.add(db, SchoolClass(**data.model_dump()))
    logger.info(f"Class created: {school_class.id} - {school_class.designation}")
    return school_class


async def update_school_class(
    db: AsyncSession, school_class_id: int, data: SchoolClassUpdate
) -> SchoolClass:
    school_class = await get_or_404(db, SchoolClass, school_class_id, "Class")
    values = changes(data)
    if "designation" in values:
        await _ensure_unique_designation(
            db, SchoolClass, values["designation"], "class", exclude_id=school_class_id
        )
    return await repository.update(db, school_class, values)


async def get_school_class(db: AsyncSession, school_class_id: int) -> SchoolClass:
    return await get_or_404(db, SchoolClass, school_class_id, "Class")


async def list_school_classes(
    db: AsyncSession, *, page: int = 1, limit: int = 10, search: str | None = None
) -> dict[str, Any]:
    items, total = await repository.list_paginated(
        db, SchoolClass, page=page, limit=limit, search=search
    )
    return page_result(items, total, page, limit)


async def delete_school_class(db: AsyncSession, school_class_id: int) -> DeleteResult:
    """Delete a grade level and, in the same transaction, everything using it."""
    school_class = await get_or_404(db, SchoolClass, school_class_id, "Class")
    deleted = await run_cascade(db, "class", school_class_id, repository.delete_school_class_cascade)
    return cascade_result("class", school_class.designation, deleted)


# ============================================
# Subjects
# ============================================


async def create_subject(db: AsyncSession, data: SubjectCreate) -> Subject:
    await get_or_404(db, Course, data.course_id, "Course")

    existing = await repository.get_subject_by_designation_and_course(
        db, data.designation, data.course_id
    )
    if existing is not None:
        raise ConflictError(
            f"Subject '{data.designation}' already exists in this course.",
            error_code="SUBJECT_EXISTS",
        )

    subject = await repository.add(db, Subject(**data.model_dump()))
    logger.info(f"Subject created: {subject.id} - {subject.designation}")
    return subject


async def update_subject(db: AsyncSession, subject_id: int, data: SubjectUpdate) -> Subject:
    subject = await get_or_404(db, Subject, subject_id, "Subject")
    values = changes(data)

    if "course_id" in values:
        await get_or_404(db, Course, values["course_id"], "Course")

    if "designation" in values or "course_id" in values:
        existing = await repository.get_subject_by_designation_and_course(
            db,
            values.get("designation", subject.designation),
            values.get("course_id", subject.course_id),
            exclude_id=subject_id,
        )
        if existing is not None:
            raise ConflictError(
                "A subject with this designation already exists in this course.",
                error_code="SUBJECT_EXISTS",
            )

    return await repository.update(db, subject, values)


async def get_subject(db: AsyncSession, subject_id: int) -> Subject:
    return await get_or_404(db, Subject, subject_id, "Subject")


async def list_subjects(
    db: AsyncSession, *, page: int = 1, limit: int = 10, search: str | None = None
) -> dict[str, Any]:
    items, total = await repository.list_paginated(
        db, Subject, page=page, limit=limit, search=search
    )
    return page_result(items, total, page, limit)


async def delete_subject(db: AsyncSession, subject_id: int) -> DeleteResult:
    subject = await get_or_404(db, Subject, subject_id, "Subject")
    deleted = await run_cascade(db, "subject", subject_id, repository.delete_subject_cascade)
    return cascade_result("subject", subject.designation, deleted)


async def get_subject_statistics(db: AsyncSession) -> dict[str, int]:
    return await repository.get_subject_statistics(db)


async def get_subjects_by_course(db: AsyncSession, course_id: int) -> list[Subject]:
    await get_or_404(db, Course, course_id, "Course")
    return await repository.get_subjects_by_course(db, course_id)


async def create_subjects_batch(db: AsyncSession, items: list[SubjectCreate]) -> dict[str, list]:
    return await create_batch(items, lambda item: create_subject(db, item))


# ============================================
# Rooms & Periods
# ============================================


async def _create_named(db: AsyncSession, model: type[T], designation: str, label: str) -> T:
    await _ensure_unique_designation(db, model, designation, label, case_insensitive=True)
    obj = await repository.add(db, model(designation=designation))
    logger.info(f"{label.capitalize()} created: {obj.id} - {designation}")
    return obj


async def _update_named(
    db: AsyncSession, model: type[T], entity_id: int, values: dict[str, Any], label: str
) -> T:
    obj = await get_or_404(db, model, entity_id, label.capitalize())
    if "designation" in values:
        await _ensure_unique_designation(
            db, model, values["designation"], label, exclude_id=entity_id, case_insensitive=True
        )
    return await repository.update(db, obj, values)


async def _delete_unreferenced(
    db: AsyncSession, model: type, entity_id: int, column: Any, label: str
) -> DeleteResult:
    obj = await get_or_404(db, model, entity_id, label.capitalize())
    in_use = await repository.count_class_groups_referencing(db, column, entity_id)
    if in_use:
        raise DependencyError(
            f"Cannot delete {label} '{obj.designation}': it is used by {in_use} class groups.",
            {"class_groups": in_use},
        )
    await repository.remove(db, obj)
    logger.info(f"{label.capitalize()} deleted: {entity_id}")
    return hard_delete_result(label, obj.designation)


async def create_room(db: AsyncSession, data: RoomCreate) -> Room:
    return await _create_named(db, Room, data.designation, "room")


async def update_room(db: AsyncSession, room_id: int, data: RoomUpdate) -> Room:
    return await _update_named(db, Room, room_id, changes(data), "room")


async def get_room(db: AsyncSession, room_id: int) -> Room:
    return await get_or_404(db, Room, room_id, "Room")


async def list_rooms(
    db: AsyncSession, *, page: int = 1, limit: int = 10, search: str | None = None
) -> dict[str, Any]:
    items, total = await repository.list_paginated(db, Room, page=page, limit=limit, search=search)
    return page_result(items, total, page, limit)


async def delete_room(db: AsyncSession, room_id: int) -> DeleteResult:
    return await _delete_unreferenced(db, Room, room_id, ClassGroup.room_id, "room")


async def create_period(db: AsyncSession, data: PeriodCreate) -> Period:
    return await _create_named(db, Period, data.designation, "period")


async def update_period(db: AsyncSession, period_id: int, data: PeriodUpdate) -> Period:
    return await _update_named(db, Period, period_id, changes(data), "period")


async def get_period(db: AsyncSession, period_id: int) -> Period:
    return await get_or_404(db, Period, period_id, "Period")


async def list_periods(
    db: AsyncSession, *, page: int = 1, limit: int = 10, search: str | None = None
) -> dict[str, Any]:
    items, total = await repository.list_paginated(
        db, Period, page=page, limit=limit, search=search
    )
    return page_result(items, total, page, limit)


async def delete_period(db: AsyncSession, period_id: int) -> DeleteResult:
    return await _delete_unreferenced(db, Period, period_id, ClassGroup.period_id, "period")


# ============================================
# Class Groups
# ============================================


def _class_group_references(values: dict[str, Any]) -> list[tuple[type, int | None, str]]:
    return [
        (SchoolClass, values.get("school_class_id"), "Class"),
        (Course, values.get("course_id"), "Course"),
        (Room, values.get("room_id"), "Room"),
        (Period, values.get("period_id"), "Period"),
        (AcademicYear, values.get("academic_year_id"), "Academic year"),
    ]


async def create_class_group(db: AsyncSession, data: ClassGroupCreate) -> ClassGroup:
    values = data.model_dump()
    await _ensure_exists(db, _class_group_references(values))
    await _ensure_unique_designation(db, ClassGroup, data.designation, "class group")

    class_group = await repository.add(db, ClassGroup(**values))
    logger.info(f"Class group created: {class_group.id} - {class_group.designation}")
    return class_group


async def update_class_group(
    db: AsyncSession, class_group_id: int, data: ClassGroupUpdate
) -> ClassGroup:
    class_group = await get_or_404(db, ClassGroup, class_group_id, "Class group")
    values = changes(data)

    await _ensure_exists(db, _class_group_references(values))
    if "designation" in values:
        await _ensure_unique_designation(
            db, ClassGroup, values["designation"], "class group", exclude_id=class_group_id
        )

    return await repository.update(db, class_group, values)


async def get_class_group(db: AsyncSession, class_group_id: int) -> ClassGroup:
    return await get_or_404(db, ClassGroup, class_group_id, "Class group")


async def list_class_groups(
    db: AsyncSession, *, page: int = 1, limit: int = 10, search: str | None = None
) -> dict[str, Any]:
    items, total = await repository.list_paginated(
        db, ClassGroup, page=page, limit=limit, search=search
    )
    return page_result(items, total, page, limit)


async def delete_class_group(db: AsyncSession, class_group_id: int) -> DeleteResult:
    class_group = await get_or_404(db, ClassGroup, class_group_id, "Class group")
    deleted = await run_cascade(
        db, "class group", class_group_id, repository.delete_class_group_cascade
    )
    return cascade_result("class group", class_group.designation, deleted)


async def create_class_groups_batch(
    db: AsyncSession, items: list[ClassGroupCreate]
) -> dict[str, list]:
    return await create_batch(items, lambda item: create_class_group(db, item))


async def get_class_groups_by_academic_year(
    db: AsyncSession, academic_year_id: int
) -> list[ClassGroup]:
    await get_or_404(db, AcademicYear, academic_year_id, "Academic year")
    return await repository.get_class_groups_by_academic_year(db, academic_year_id)


async def get_class_groups_by_class_and_course(
    db: AsyncSession, school_class_id: int, course_id: int
) -> list[ClassGroup]:
    return await repository.get_class_groups_by_class_and_course(db, school_class_id, course_id)


async def get_students_by_class_group(db: AsyncSession, class_group_id: int) -> list:
    """Distinct students actively confirmed in a class-group, sorted by name."""
    await get_or_404(db, ClassGroup, class_group_id, "Class group")
    students = await repository.get_students_by_class_groups(db, [class_group_id])
    return students.get(class_group_id, [])


async def get_class_groups_report(
    db: AsyncSession, academic_year_id: int | None = None
) -> list[ClassGroupReportItem]:
    """Active class-groups, optionally for one academic year, each with its students."""
    class_groups = await repository.get_active_class_groups(db, academic_year_id)
    students = await repository.get_students_by_class_groups(db, [g.id for g in class_groups])

    report = []
    for group in class_groups:
        group_students = students.get(group.id, [])
        report.append(
            ClassGroupReportItem(
                class_group=ClassGroupResponse.model_validate(group),
                students=[ClassGroupStudent.model_validate(s) for s in group_students],
                total_students=len(group_students),
            )
        )

    logger.info(f"Class group report: {len(report)} groups (academic_year={academic_year_id})")
    return report


# ============================================
# Curriculum Grid
# ============================================


def _curriculum_references(values: dict[str, Any]) -> list[tuple[type, int | None, str]]:
    return [
        (Subject, values.get("subject_id"), "Subject"),
        (SchoolClass, values.get("school_class_id"), "Class"),
        (Course, values.get("course_id"), "Course"),
    ]


async def create_curriculum_entry(
    db: AsyncSession, data: CurriculumEntryCreate, *, created_by: int | None = None
) -> CurriculumEntry:
    await _ensure_exists(db, _curriculum_references(data.model_dump()))

    existing = await repository.get_curriculum_entry(
        db, data.subject_id, data.school_class_id, data.course_id
    )
    if existing is not None:
        raise ConflictError(
            "This subject is already in the curriculum for this class and course.",
            error_code="CURRICULUM_ENTRY_EXISTS",
        )

    entry = await repository.add(db, CurriculumEntry(**data.model_dump(), created_by=created_by))
    logger.info(f"Curriculum entry created: {entry.id}")
    return entry


async def update_curriculum_entry(
    db: AsyncSession, entry_id: int, data: CurriculumEntryUpdate
) -> CurriculumEntry:
    entry = await get_or_404(db, CurriculumEntry, entry_id, "Curriculum entry")
    values = changes(data)

    await _ensure_exists(db, _curriculum_references(values))
    key_fields = ("subject_id", "school_class_id", "course_id")
    if any(field in values for field in key_fields):
        existing = await repository.get_curriculum_entry(
            db,
            values.get("subject_id", entry.subject_id),
            values.get("school_class_id", entry.school_class_id),
            values.get("course_id", entry.course_id),
            exclude_id=entry_id,
        )
        if existing is not None:
            raise ConflictError(
                "This subject is already in the curriculum for this class and course.",
                error_code="CURRICULUM_ENTRY_EXISTS",
            )

    return await repository.update(db, entry, values)


async def get_curriculum_entry(db: AsyncSession, entry_id: int) -> CurriculumEntry:
    return await get_or_404(db, CurriculumEntry, entry_id, "Curriculum entry")


async def list_curriculum_entries(
    db: AsyncSession, *, page: int = 1, limit: int = 10, search: str | None = None
) -> dict[str, Any]:
    items, total = await repository.list_curriculum_entries(
        db, page=page, limit=limit, search=search
    )
    return page_result(items, total, page, limit)


async def delete_curriculum_entry(db: AsyncSession, entry_id: int) -> DeleteResult:
    entry = await get_or_404(db, CurriculumEntry, entry_id, "Curriculum entry")
    await repository.remove(db, entry)
    logger.info(f"Curriculum entry deleted: {entry_id}")
    return DeleteResult(
        message="Curriculum entry was deleted.",
        kind="hard_delete",
        details={"id": entry_id},
    )


async def get_curriculum_by_course_and_class(
    db: AsyncSession, course_id: int, school_class_id: int
) -> list[CurriculumEntry]:
    await get_or_404(db, Course, course_id, "Course")
    await get_or_404(db, SchoolClass, school_class_id, "Class")
    return await repository.get_curriculum_by_course_and_class(db, course_id, school_class_id)
