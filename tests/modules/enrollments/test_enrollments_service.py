"""
Unit tests for the enrollment service layer.

Repository calls are mocked; these tests cover the business rules:
one enrollment per student, one confirmation per enrollment and year,
class-group capacity, and what a delete removes.
"""

from unittest.mock import AsyncMock, patch

import pytest

from school_admin.core.errors import (
    BusinessRuleError,
    ConflictError,
    DependencyError,
    NotFoundError,
)
from school_admin.modules.enrollments.schemas import (
    ConfirmationCreate,
    ConfirmationUpdate,
    EnrollmentCreate,
    StudentCreate,
)
from school_admin.modules.enrollments.service import (
    create_confirmation,
    create_enrollment,
    create_student,
    delete_confirmation,
    delete_enrollment,
    delete_student,
    get_enrollment_statistics,
    update_confirmation,
)

REPO = "school_admin.modules.enrollments.service.repository"


class TestStudents:
    @pytest.mark.asyncio
    async def test_duplicate_document_number(self, mock_db, sample_student):
        with patch(REPO) as mock_repo:
            mock_repo.get_student_by_document = AsyncMock(return_value=sample_student)

            with pytest.raises(ConflictError) as exc_info:
                await create_student(
                    mock_db, StudentCreate(name="Outro", document_number="004512378LA041")
                )

            assert exc_info.value.error_code == "STUDENT_EXISTS"

    @pytest.mark.asyncio
    async def test_student_without_document_skips_uniqueness(self, mock_db, sample_student):
        with patch(REPO) as mock_repo:
            mock_repo.get_student_by_document = AsyncMock()
            mock_repo.add = AsyncMock(return_value=sample_student)

            await create_student(mock_db, StudentCreate(name="João Manuel"))

            mock_repo.get_student_by_document.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_blocked_by_payments(self, mock_db, sample_student):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=sample_student)
            mock_repo.count_student_payments = AsyncMock(return_value=2)
            mock_repo.delete_student_cascade = AsyncMock()

            with pytest.raises(DependencyError) as exc_info:
                await delete_student(mock_db, sample_student.id)

            assert exc_info.value.details == {"payments": 2}
            mock_repo.delete_student_cascade.assert_not_called()
            mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_cascades_enrollment(self, mock_db, sample_student):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=sample_student)
            mock_repo.count_student_payments = AsyncMock(return_value=0)
            mock_repo.delete_student_cascade = AsyncMock(
                return_value={"enrollments": 1, "confirmations": 2}
            )

            result = await delete_student(mock_db, sample_student.id)

            assert result.kind == "cascade_delete"
            assert result.details == {
                "designation": "João Manuel",
                "enrollments": 1,
                "confirmations": 2,
            }
            mock_db.commit.assert_awaited_once()


class TestEnrollments:
    @pytest.mark.asyncio
    async def test_second_enrollment_rejected(self, mock_db, sample_enrollment):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=object())
            mock_repo.get_enrollment_by_student = AsyncMock(return_value=sample_enrollment)
            mock_repo.add = AsyncMock()

            with pytest.raises(ConflictError) as exc_info:
                await create_enrollment(mock_db, EnrollmentCreate(student_id=100, course_id=3))

            assert exc_info.value.error_code == "ENROLLMENT_EXISTS"
            mock_repo.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_course(self, mock_db, sample_student):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(side_effect=[sample_student, None])

            with pytest.raises(NotFoundError) as exc_info:
                await create_enrollment(mock_db, EnrollmentCreate(student_id=100, course_id=99))

            assert exc_info.value.error_code == "COURSE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_create_records_author(self, mock_db, sample_enrollment):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=object())
            mock_repo.get_enrollment_by_student = AsyncMock(return_value=None)
            mock_repo.add = AsyncMock(return_value=sample_enrollment)

            await create_enrollment(
                mock_db, EnrollmentCreate(student_id=100, course_id=3), created_by=1
            )

            added = mock_repo.add.call_args.args[1]
            assert added.created_by == 1
            assert added.status == 1

    @pytest.mark.asyncio
    async def test_delete_without_confirmations_is_hard_delete(self, mock_db, sample_enrollment):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=sample_enrollment)
            mock_repo.count_enrollment_confirmations = AsyncMock(return_value=0)
            mock_repo.remove = AsyncMock()
            mock_repo.delete_enrollment_cascade = AsyncMock()

            result = await delete_enrollment(mock_db, sample_enrollment.id)

            assert result.kind == "hard_delete"
            assert result.details == {"student_id": 100}
            mock_repo.remove.assert_awaited_once_with(mock_db, sample_enrollment)
            mock_repo.delete_enrollment_cascade.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_with_confirmations_cascades(self, mock_db, sample_enrollment):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=sample_enrollment)
            mock_repo.count_enrollment_confirmations = AsyncMock(return_value=2)
            mock_repo.delete_enrollment_cascade = AsyncMock(return_value={"confirmations": 2})
            mock_repo.remove = AsyncMock()

            result = await delete_enrollment(mock_db, sample_enrollment.id)

            assert result.kind == "cascade_delete"
            assert result.details == {"student_id": 100, "confirmations": 2}
            mock_repo.remove.assert_not_called()
            mock_db.commit.assert_awaited_once()


class TestConfirmations:
    """Confirmation uniqueness and class-group capacity."""

    @pytest.mark.asyncio
    async def test_duplicate_for_academic_year(self, mock_db, sample_confirmation):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=object())
            mock_repo.get_confirmation_for = AsyncMock(return_value=sample_confirmation)

            with pytest.raises(ConflictError) as exc_info:
                await create_confirmation(
                    mock_db,
                    ConfirmationCreate(enrollment_id=200, class_group_id=5, academic_year_id=1),
                )

            assert exc_info.value.error_code == "CONFIRMATION_EXISTS"

    @pytest.mark.asyncio
    async def test_full_class_group(
        self, mock_db, sample_enrollment, sample_class_group, sample_academic_year
    ):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(
                side_effect=[sample_enrollment, sample_class_group, sample_academic_year]
            )
            mock_repo.get_confirmation_for = AsyncMock(return_value=None)
            mock_repo.count_active_confirmations = AsyncMock(return_value=30)
            mock_repo.add = AsyncMock()

            with pytest.raises(BusinessRuleError) as exc_info:
                await create_confirmation(
                    mock_db,
                    ConfirmationCreate(enrollment_id=200, class_group_id=5, academic_year_id=1),
                )

            assert exc_info.value.error_code == "CLASS_GROUP_FULL"
            assert "30/30" in exc_info.value.message
            mock_repo.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_inactive_confirmation_ignores_capacity(
        self, mock_db, sample_enrollment, sample_class_group, sample_academic_year,
        sample_confirmation,
    ):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(
                side_effect=[sample_enrollment, sample_class_group, sample_academic_year]
            )
            mock_repo.get_confirmation_for = AsyncMock(return_value=None)
            mock_repo.count_active_confirmations = AsyncMock(return_value=30)
            mock_repo.add = AsyncMock(return_value=sample_confirmation)

            result = await create_confirmation(
                mock_db,
                ConfirmationCreate(
                    enrollment_id=200, class_group_id=5, academic_year_id=1, status=0
                ),
            )

            assert result is sample_confirmation
            mock_repo.count_active_confirmations.assert_not_called()

    @pytest.mark.asyncio
    async def test_move_into_full_class_group(
        self, mock_db, sample_confirmation, sample_class_group
    ):
        sample_class_group.id = 6
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(side_effect=[sample_confirmation, sample_class_group])
            mock_repo.count_active_confirmations = AsyncMock(return_value=30)
            mock_repo.update = AsyncMock()

            with pytest.raises(BusinessRuleError):
                await update_confirmation(
                    mock_db, sample_confirmation.id, ConfirmationUpdate(class_group_id=6)
                )

            mock_repo.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_classification_skips_capacity(self, mock_db, sample_confirmation):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=sample_confirmation)
            mock_repo.count_active_confirmations = AsyncMock()
            mock_repo.update = AsyncMock(return_value=sample_confirmation)

            await update_confirmation(
                mock_db, sample_confirmation.id, ConfirmationUpdate(classification="Aprovado")
            )

            mock_repo.count_active_confirmations.assert_not_called()
            mock_repo.update.assert_awaited_once_with(
                mock_db, sample_confirmation, {"classification": "Aprovado"}
            )

    @pytest.mark.asyncio
    async def test_delete_reports_last_confirmation(self, mock_db, sample_confirmation):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=sample_confirmation)
            mock_repo.remove = AsyncMock()
            mock_repo.count_enrollment_confirmations = AsyncMock(return_value=0)

            result = await delete_confirmation(mock_db, sample_confirmation.id)

            assert result.details == {"enrollment_id": 200, "was_last_confirmation": True}

    @pytest.mark.asyncio
    async def test_delete_with_remaining_confirmations(self, mock_db, sample_confirmation):
        with patch(REPO) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=sample_confirmation)
            mock_repo.remove = AsyncMock()
            mock_repo.count_enrollment_confirmations = AsyncMock(return_value=1)

            result = await delete_confirmation(mock_db, sample_confirmation.id)

            assert result.details["was_last_confirmation"] is False


class TestStatistics:
    @pytest.mark.asyncio
    async def test_filters_echoed(self, mock_db):
        counts = {
            "enrollments": {"total": 5, "active": 4, "inactive": 1},
            "confirmations": {"total": 3, "active": 3, "inactive": 0},
        }
        with patch(REPO) as mock_repo:
            mock_repo.get_enrollment_statistics = AsyncMock(return_value=counts)

            result = await get_enrollment_statistics(mock_db, course_id=3)

            assert result["course_id"] == 3
            assert result["academic_year_id"] is None
            assert result["enrollments"]["active"] == 4
