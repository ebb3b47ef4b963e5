"""
Cascade deletes against a real database with foreign keys enforced.

Every foreign key in the schema is RESTRICT or SET NULL, so a cascade that
misses a dependent table fails here with an IntegrityError instead of
passing silently as it would against a mocked session.
"""

from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from school_admin.core.database import Base
from school_admin.core.errors import DependencyError
from school_admin.modules.academics import repository as academics_repository
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
from school_admin.modules.academics.service import delete_course
from school_admin.modules.enrollments import repository as enrollments_repository
from school_admin.modules.enrollments.models import Confirmation, Enrollment, Student
from school_admin.modules.shared.repository import count_where
from school_admin.modules.staff import repository as staff_repository
from school_admin.modules.staff.models import (
    ClassDirector,
    Specialty,
    Teacher,
    TeacherClassGroup,
    TeacherSubject,
)

GROUP_DEPENDENTS = {"confirmations": 1, "teacher_assignments": 1, "class_directors": 1}


@pytest_asyncio.fixture
async def db():
    """In-memory SQLite session with the full schema and PRAGMA foreign_keys=ON."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        await _seed(session)
        yield session

    await engine.dispose()


async def _add(db: AsyncSession, *rows) -> None:
    db.add_all(rows)
    await db.flush()


async def _seed(db: AsyncSession) -> None:
    """
    Two independent branches of the academic graph.

    Branch 1 hangs off year 1, course 1, class 1, subject 1, class-group 1,
    teacher 1, student 1 and enrollment 1; branch 2 mirrors it with id 2.
    """
    await _add(
        db,
        AcademicYear(id=1, designation="2024/2025", start_month="Setembro", end_month="Julho",
                     start_year=2024, end_year=2025),
        AcademicYear(id=2, designation="2025/2026", start_month="Setembro", end_month="Julho",
                     start_year=2025, end_year=2026),
        Course(id=1, designation="Informática"),
        Course(id=2, designation="Ciências Físicas e Biológicas"),
        SchoolClass(id=1, designation="10ª Classe"),
        SchoolClass(id=2, designation="11ª Classe"),
        Room(id=1, designation="Sala 1"),
        Period(id=1, designation="Manhã"),
        Specialty(id=1, designation="Matemática"),
        Student(id=1, name="João Manuel"),
        Student(id=2, name="Maria Domingos"),
    )
    await _add(
        db,
        Subject(id=1, designation="Matemática", course_id=1),
        Subject(id=2, designation="Física", course_id=2),
        ClassGroup(id=1, designation="INF10A", school_class_id=1, course_id=1, room_id=1,
                   period_id=1, academic_year_id=1),
        ClassGroup(id=2, designation="CFB11A", school_class_id=2, course_id=2, room_id=1,
                   period_id=1, academic_year_id=2),
        Enrollment(id=1, student_id=1, course_id=1, enrollment_date=date(2024, 9, 2)),
        Enrollment(id=2, student_id=2, course_id=2, enrollment_date=date(2025, 9, 1)),
    )
    await _add(
        db,
        Teacher(id=1, name="Ana Domingos", specialty_id=1, subject_id=1),
        Teacher(id=2, name="Carlos Neto", specialty_id=1, subject_id=2),
        CurriculumEntry(id=1, subject_id=1, school_class_id=1, course_id=1),
        CurriculumEntry(id=2, subject_id=2, school_class_id=2, course_id=2),
        Confirmation(id=1, enrollment_id=1, class_group_id=1, academic_year_id=1,
                     confirmation_date=date(2024, 9, 10)),
        Confirmation(id=2, enrollment_id=2, class_group_id=2, academic_year_id=2,
                     confirmation_date=date(2025, 9, 10)),
    )
    await _add(
        db,
        TeacherSubject(id=1, teacher_id=1, course_id=1, subject_id=1),
        TeacherSubject(id=2, teacher_id=2, course_id=2, subject_id=2),
        ClassDirector(id=1, academic_year_id=1, class_group_id=1, teacher_id=1),
        ClassDirector(id=2, academic_year_id=2, class_group_id=2, teacher_id=2),
        TeacherClassGroup(teacher_id=1, class_group_id=1),
        TeacherClassGroup(teacher_id=2, class_group_id=2),
    )
    await db.commit()


async def _remaining(db: AsyncSession) -> dict[str, int]:
    """Row count of every table touched by a cascade."""
    models = {
        "academic_years": AcademicYear,
        "courses": Course,
        "school_classes": SchoolClass,
        "subjects": Subject,
        "class_groups": ClassGroup,
        "curriculum_entries": CurriculumEntry,
        "teachers": Teacher,
        "teacher_subjects": TeacherSubject,
        "class_directors": ClassDirector,
        "teacher_assignments": TeacherClassGroup,
        "students": Student,
        "enrollments": Enrollment,
        "confirmations": Confirmation,
    }
    return {name: await count_where(db, model) for name, model in models.items()}


def _after_delete(**removed: int) -> dict[str, int]:
    """Expected table sizes: two seeded rows per table minus ``removed``."""
    full = {
        "academic_years": 2,
        "courses": 2,
        "school_classes": 2,
        "subjects": 2,
        "class_groups": 2,
        "curriculum_entries": 2,
        "teachers": 2,
        "teacher_subjects": 2,
        "class_directors": 2,
        "teacher_assignments": 2,
        "students": 2,
        "enrollments": 2,
        "confirmations": 2,
    }
    return {name: n - removed.get(name, 0) for name, n in full.items()}


async def _teacher_subject_id(db: AsyncSession, teacher_id: int) -> int | None:
    result = await db.execute(select(Teacher.subject_id).where(Teacher.id == teacher_id))
    return result.scalar_one()


class TestAcademicCascades:
    @pytest.mark.asyncio
    async def test_academic_year(self, db):
        assert await academics_repository.count_academic_year_dependencies(db, 1) == {
            "class_groups": 1,
            "confirmations": 1,
            "class_directors": 1,
        }

        counts = await academics_repository.delete_academic_year_cascade(db, 1)
        await db.commit()

        assert counts == {**GROUP_DEPENDENTS, "class_groups": 1}
        assert await _remaining(db) == _after_delete(
            academic_years=1, class_groups=1, **GROUP_DEPENDENTS
        )

    @pytest.mark.asyncio
    async def test_course(self, db):
        assert await academics_repository.count_course_dependencies(db, 1) == {
            "subjects": 1,
            "teacher_subjects": 1,
            "class_groups": 1,
            "curriculum_entries": 1,
            "enrollments": 1,
        }

        counts = await academics_repository.delete_course_cascade(db, 1)
        await db.commit()

        assert counts == {
            **GROUP_DEPENDENTS,
            "curriculum_entries": 1,
            "teacher_subjects": 1,
            "class_groups": 1,
            "enrollments": 1,
            "subjects": 1,
        }
        assert await _remaining(db) == _after_delete(
            courses=1,
            subjects=1,
            curriculum_entries=1,
            teacher_subjects=1,
            class_groups=1,
            enrollments=1,
            **GROUP_DEPENDENTS,
        )
        # Teachers survive; their main subject is cleared by SET NULL
        assert await _teacher_subject_id(db, 1) is None
        assert await _teacher_subject_id(db, 2) == 2

    @pytest.mark.asyncio
    async def test_course_with_rows_tied_to_another_courses_subject(self, db):
        """Links naming the course but a subject of course 2 are removed too."""
        await _add(
            db,
            CurriculumEntry(id=3, subject_id=2, school_class_id=1, course_id=1),
            TeacherSubject(id=3, teacher_id=2, course_id=1, subject_id=2),
        )
        await db.commit()

        counts = await academics_repository.delete_course_cascade(db, 1)
        await db.commit()

        assert counts["curriculum_entries"] == 2
        assert counts["teacher_subjects"] == 2
        assert await count_where(db, Subject, Subject.id == 2) == 1
        assert await count_where(db, TeacherSubject, TeacherSubject.course_id == 1) == 0

    @pytest.mark.asyncio
    async def test_school_class(self, db):
        counts = await academics_repository.delete_school_class_cascade(db, 1)
        await db.commit()

        assert counts == {**GROUP_DEPENDENTS, "curriculum_entries": 1, "class_groups": 1}
        assert await _remaining(db) == _after_delete(
            school_classes=1, curriculum_entries=1, class_groups=1, **GROUP_DEPENDENTS
        )

    @pytest.mark.asyncio
    async def test_subject(self, db):
        counts = await academics_repository.delete_subject_cascade(db, 1)
        await db.commit()

        assert counts == {"curriculum_entries": 1, "teacher_subjects": 1}
        assert await _remaining(db) == _after_delete(
            subjects=1, curriculum_entries=1, teacher_subjects=1
        )
        assert await _teacher_subject_id(db, 1) is None

    @pytest.mark.asyncio
    async def test_class_group(self, db):
        counts = await academics_repository.delete_class_group_cascade(db, 1)
        await db.commit()

        assert counts == GROUP_DEPENDENTS
        assert await _remaining(db) == _after_delete(class_groups=1, **GROUP_DEPENDENTS)


class TestCourseOnlyLinkedByTeacherSubjects:
    """A course whose sole dependents are teacher-subject links."""

    @pytest_asyncio.fixture
    async def linked_course(self, db):
        await _add(db, Course(id=3, designation="Ciências Económicas e Jurídicas"))
        await _add(db, TeacherSubject(id=3, teacher_id=1, course_id=3, subject_id=2))
        await db.commit()
        return 3

    @pytest.mark.asyncio
    async def test_links_are_counted(self, db, linked_course):
        counts = await academics_repository.count_course_dependencies(db, linked_course)

        assert counts == {
            "subjects": 0,
            "teacher_subjects": 1,
            "class_groups": 0,
            "curriculum_entries": 0,
            "enrollments": 0,
        }

    @pytest.mark.asyncio
    async def test_plain_delete_is_blocked(self, db, linked_course):
        with pytest.raises(DependencyError) as exc_info:
            await delete_course(db, linked_course)

        assert exc_info.value.details["teacher_subjects"] == 1
        assert await count_where(db, Course, Course.id == linked_course) == 1

    @pytest.mark.asyncio
    async def test_forced_delete_removes_links(self, db, linked_course):
        result = await delete_course(db, linked_course, force_cascade=True)

        assert result.kind == "cascade_delete"
        assert result.details["teacher_subjects"] == 1
        assert await count_where(db, Course, Course.id == linked_course) == 0
        assert await _remaining(db) == _after_delete()


class TestStaffAndEnrollmentCascades:
    @pytest.mark.asyncio
    async def test_teacher(self, db):
        counts = await staff_repository.delete_teacher_cascade(db, 1)
        await db.commit()

        assert counts == {"teacher_subjects": 1, "class_directors": 1, "teacher_assignments": 1}
        assert await _remaining(db) == _after_delete(
            teachers=1, teacher_subjects=1, class_directors=1, teacher_assignments=1
        )

    @pytest.mark.asyncio
    async def test_student(self, db):
        counts = await enrollments_repository.delete_student_cascade(db, 1)
        await db.commit()

        assert counts == {"enrollments": 1, "confirmations": 1}
        assert await _remaining(db) == _after_delete(students=1, enrollments=1, confirmations=1)

    @pytest.mark.asyncio
    async def test_student_without_enrollment(self, db):
        await _add(db, Student(id=3, name="Pedro Kiala"))
        await db.commit()

        counts = await enrollments_repository.delete_student_cascade(db, 3)
        await db.commit()

        assert counts == {"enrollments": 0, "confirmations": 0}
        assert await _remaining(db) == _after_delete()

    @pytest.mark.asyncio
    async def test_enrollment(self, db):
        counts = await enrollments_repository.delete_enrollment_cascade(db, 1)
        await db.commit()

        assert counts == {"confirmations": 1}
        assert await _remaining(db) == _after_delete(enrollments=1, confirmations=1)
