"""
Unit tests for service errors and their HTTP rendering.
"""

import json

import pytest

from school_admin.core.errors import (
    BusinessRuleError,
    ConflictError,
    DeleteFailedError,
    DependencyError,
    NotFoundError,
    describe_dependencies,
    service_error_handler,
)


class TestErrorCodes:
    """Error classes map to the expected codes and statuses."""

    def test_not_found_builds_code_from_entity(self):
        error = NotFoundError("Academic year", 9)
        assert error.error_code == "ACADEMIC_YEAR_NOT_FOUND"
        assert error.status_code == 404
        assert "9" in error.message

    def test_conflict_is_409(self):
        error = ConflictError("exists", error_code="COURSE_EXISTS")
        assert error.status_code == 409
        assert error.error_code == "COURSE_EXISTS"

    def test_dependency_error_carries_counts(self):
        error = DependencyError("blocked", {"class_groups": 2, "confirmations": 0})
        assert error.error_code == "HAS_DEPENDENCIES"
        assert error.status_code == 400
        assert error.details == {"class_groups": 2, "confirmations": 0}

    def test_business_rule_default_code(self):
        assert BusinessRuleError("nope").error_code == "INVALID_OPERATION"

    def test_delete_failed_is_500(self):
        error = DeleteFailedError("course")
        assert error.status_code == 500
        assert error.error_code == "DELETE_FAILED"


class TestDescribeDependencies:
    def test_skips_zero_counts(self):
        text = describe_dependencies({"class_groups": 2, "confirmations": 0, "class_directors": 1})
        assert text == "2 class groups, 1 class directors"


class TestServiceErrorHandler:
    """Tests for the ServiceError exception handler."""

    @pytest.mark.asyncio
    async def test_renders_structured_body(self):
        response = await service_error_handler(None, DependencyError("blocked", {"subjects": 3}))

        assert response.status_code == 400
        body = json.loads(response.body)
        assert body == {
            "detail": {
                "error": "HAS_DEPENDENCIES",
                "message": "blocked",
                "details": {"subjects": 3},
            }
        }

    @pytest.mark.asyncio
    async def test_omits_empty_details(self):
        response = await service_error_handler(None, NotFoundError("Course", 1))

        body = json.loads(response.body)
        assert "details" not in body["detail"]
        assert body["detail"]["error"] == "COURSE_NOT_FOUND"
