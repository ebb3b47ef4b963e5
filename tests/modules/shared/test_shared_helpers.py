"""
Unit tests for the shared pagination, repository and service helpers.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from school_admin.core.errors import ConflictError, DeleteFailedError
from school_admin.modules.academics.models import Course, Subject
from school_admin.modules.academics.schemas import CourseUpdate
from school_admin.modules.shared.repository import count_where, delete_where
from school_admin.modules.shared.schemas import PaginationMeta
from school_admin.modules.shared.service import changes, create_batch, run_cascade


class TestPaginationMeta:
    """Tests for PaginationMeta.build."""

    def test_middle_page(self):
        meta = PaginationMeta.build(page=2, limit=10, total=35)
        assert meta.total_pages == 4
        assert meta.has_next_page is True
        assert meta.has_previous_page is True

    def test_last_page(self):
        meta = PaginationMeta.build(page=4, limit=10, total=35)
        assert meta.has_next_page is False

    def test_empty_result(self):
        meta = PaginationMeta.build(page=1, limit=10, total=0)
        assert meta.total_pages == 0
        assert meta.has_next_page is False
        assert meta.has_previous_page is False


class TestChanges:
    def test_only_provided_non_null_fields(self):
        data = CourseUpdate(designation="  Informática  ", status=None)
        assert changes(data) == {"designation": "Informática"}


class TestRepositoryHelpers:
    """count_where / delete_where read the scalar and rowcount."""

    @pytest.mark.asyncio
    async def test_count_where_returns_scalar(self, mock_db):
        result = MagicMock()
        result.scalar.return_value = 4
        mock_db.execute.return_value = result
        assert await count_where(mock_db, Course, Course.status == 1) == 4

    @pytest.mark.asyncio
    async def test_delete_where_returns_rowcount(self, mock_db):
        result = MagicMock()
        result.rowcount = 3
        mock_db.execute.return_value = result
        assert await delete_where(mock_db, Subject, Subject.course_id == 1) == 3


class TestRunCascade:
    """Tests for the cascade transaction wrapper."""

    @pytest.mark.asyncio
    async def test_commits_and_returns_counts(self, mock_db):
        cascade = AsyncMock(return_value={"subjects": 2})

        counts = await run_cascade(mock_db, "course", 1, cascade)

        assert counts == {"subjects": 2}
        cascade.assert_awaited_once_with(mock_db, 1)
        mock_db.commit.assert_awaited_once()
        mock_db.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rolls_back_on_database_error(self, mock_db):
        cascade = AsyncMock(side_effect=IntegrityError("DELETE", {}, Exception("fk")))

        with pytest.raises(DeleteFailedError):
            await run_cascade(mock_db, "course", 1, cascade)

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_awaited()


class TestCreateBatch:
    """Batch creation keeps going past failing items."""

    @pytest.mark.asyncio
    async def test_collects_errors_by_index(self):
        async def create(item):
            if item == "dup":
                raise ConflictError("Course 'dup' already exists.")
            return item.upper()

        result = await create_batch(["a", "dup", "b"], create)

        assert result["created"] == ["A", "B"]
        assert len(result["errors"]) == 1
        assert result["errors"][0].index == 1
        assert "dup" in result["errors"][0].message
