"""
Unit tests for the teaching staff service layer.
"""

from unittest.mock import AsyncMock, patch

import pytest

from school_admin.core.errors import ConflictError, DependencyError, NotFoundError
from school_admin.modules.staff.schemas import (
    ClassDirectorCreate,
    TeacherClassGroupCreate,
    TeacherCreate,
    TeacherSubjectCreate,
)
from school_admin.modules.staff.service import (
    create_class_director,
    create_teacher,
    create_teacher_class_group,
    create_teacher_subject,
    delete_specialty,
    delete_teacher,
    delete_teacher_class_group,
    get_specialty,
    get_staff_report,
)

REPO = "school_admin.modules.staff.service.repository"


class TestSpecialties:
    @pytest.mark.asyncio
    async def test_delete_blocked_while_teachers_hold_it(self, mock_db, sample_specialty):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=sample_specialty)
            mock_repo.count_teachers_with_specialty = AsyncMock(return_value=4)
            mock_repo.remove = AsyncMock()

            with pytest.raises(DependencyError) as exc_info:
                await delete_specialty(mock_db, sample_specialty.id)

            assert exc_info.value.details == {"teachers": 4}
            mock_repo.remove.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_includes_teachers(self, mock_db, sample_specialty, sample_teacher):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=sample_specialty)
            mock_repo.get_teachers_by_specialty = AsyncMock(return_value=[sample_teacher])

            result = await get_specialty(mock_db, sample_specialty.id)

            assert result.designation == "Matemática"
            assert [t.name for t in result.teachers] == ["Ana Domingos"]


class TestTeachers:
    """Teacher creation checks and cascade delete."""

    @pytest.mark.asyncio
    async def test_create_with_unknown_specialty(self, mock_db):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=None)

            with pytest.raises(NotFoundError) as exc_info:
                await create_teacher(mock_db, TeacherCreate(name="Carlos", specialty_id=77))

            assert exc_info.value.error_code == "SPECIALTY_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_create_with_user_already_linked(self, mock_db, sample_teacher):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=object())
            mock_repo.get_teacher_by_user = AsyncMock(return_value=sample_teacher)

            with pytest.raises(ConflictError) as exc_info:
                await create_teacher(mock_db, TeacherCreate(name="Carlos", user_id=3))

            assert exc_info.value.error_code == "USER_ALREADY_LINKED"

    @pytest.mark.asyncio
    async def test_create_success(self, mock_db, sample_teacher):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=object())
            mock_repo.add = AsyncMock(return_value=sample_teacher)

            result = await create_teacher(
                mock_db, TeacherCreate(name="Ana Domingos", specialty_id=4)
            )

            assert result is sample_teacher

    @pytest.mark.asyncio
    async def test_delete_cascades_links(self, mock_db, sample_teacher):
        deleted = {"teacher_subjects": 3, "class_directors": 1, "teacher_assignments": 5}
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=sample_teacher)
            mock_repo.delete_teacher_cascade = AsyncMock(return_value=deleted)

            result = await delete_teacher(mock_db, sample_teacher.id)

            assert result.kind == "cascade_delete"
            assert result.details == {"designation": "Ana Domingos", **deleted}
            mock_db.commit.assert_awaited_once()


class TestTeacherSubjects:
    @pytest.mark.asyncio
    async def test_duplicate_link(self, mock_db):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=object())
            mock_repo.get_teacher_subject = AsyncMock(return_value=object())

            with pytest.raises(ConflictError) as exc_info:
                await create_teacher_subject(
                    mock_db, TeacherSubjectCreate(teacher_id=12, course_id=3, subject_id=7)
                )

            assert exc_info.value.error_code == "TEACHER_SUBJECT_EXISTS"


class TestClassDirectors:
    @pytest.mark.asyncio
    async def test_one_director_per_class_group_and_year(
        self, mock_db, sample_class_director
    ):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=object())
            mock_repo.get_class_director_for = AsyncMock(return_value=sample_class_director)
            mock_repo.add = AsyncMock()

            with pytest.raises(ConflictError) as exc_info:
                await create_class_director(
                    mock_db,
                    ClassDirectorCreate(academic_year_id=1, class_group_id=5, teacher_id=13),
                )

            assert exc_info.value.status_code == 409
            mock_repo.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_success(self, mock_db, sample_class_director):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=object())
            mock_repo.get_class_director_for = AsyncMock(return_value=None)
            mock_repo.add = AsyncMock(return_value=sample_class_director)

            result = await create_class_director(
                mock_db,
                ClassDirectorCreate(academic_year_id=1, class_group_id=5, teacher_id=12),
            )

            assert result.teacher_id == 12


class TestAssignments:
    @pytest.mark.asyncio
    async def test_duplicate_assignment(self, mock_db):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=object())
            mock_repo.get_teacher_class_group = AsyncMock(return_value=object())

            with pytest.raises(ConflictError) as exc_info:
                await create_teacher_class_group(
                    mock_db, TeacherClassGroupCreate(teacher_id=12, class_group_id=5)
                )

            assert exc_info.value.error_code == "TEACHER_ASSIGNMENT_EXISTS"

    @pytest.mark.asyncio
    async def test_delete_missing_assignment(self, mock_db):
        with patch(REPO) as mock_repo:
            mock_repo.get_teacher_class_group = AsyncMock(return_value=None)

            with pytest.raises(NotFoundError):
                await delete_teacher_class_group(mock_db, 12, 5)


class TestStaffReport:
    @pytest.mark.asyncio
    async def test_report_labels_missing_specialty(self, mock_db):
        with patch(REPO) as mock_repo:
            mock_repo.get_staff_counts = AsyncMock(
                return_value={
                    "total_teachers": 10,
                    "active_teachers": 8,
                    "total_specialties": 3,
                    "total_class_directors": 4,
                }
            )
            mock_repo.count_teachers_by_specialty = AsyncMock(
                return_value=[(4, "Matemática", 6), (None, None, 4)]
            )

            report = await get_staff_report(mock_db)

            assert report.total_teachers == 10
            assert report.teachers_by_specialty[1].specialty == "Sem especialidade"
            assert report.teachers_by_specialty[0].teachers == 6
