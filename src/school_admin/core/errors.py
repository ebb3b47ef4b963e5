"""
Service Errors

Base exception hierarchy raised by the service layer and the FastAPI
handler that converts them into structured JSON error responses:

    {"detail": {"error": "<CODE>", "message": "...", "details": {...}}}
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(ServiceError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity: str, entity_id: Any = None):
        message = f"{entity} {entity_id} not found" if entity_id is not None else f"{entity} not found"
        super().__init__(
            message=message,
            error_code=f"{_to_code(entity)}_NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
        )


class ConflictError(ServiceError):
    """Raised when a uniqueness rule would be violated."""

    def __init__(self, message: str, error_code: str = "DUPLICATE_ENTRY"):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_409_CONFLICT,
        )


class DependencyError(ServiceError):
    """Raised when a delete is blocked by dependent records."""

    def __init__(self, message: str, counts: dict[str, int]):
        super().__init__(
            message=message,
            error_code="HAS_DEPENDENCIES",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=counts,
        )


class BusinessRuleError(ServiceError):
    """Raised when input is well-formed but violates a business rule."""

    def __init__(self, message: str, error_code: str = "INVALID_OPERATION"):
        super().__init__(message=message, error_code=error_code, status_code=400)


class DeleteFailedError(ServiceError):
    """Raised when a cascade delete transaction fails and was rolled back."""

    def __init__(self, entity: str):
        super().__init__(
            message=f"Failed to delete {entity}. No changes were made.",
            error_code="DELETE_FAILED",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


def _to_code(entity: str) -> str:
    return entity.upper().replace(" ", "_").replace("-", "_")


def describe_dependencies(counts: dict[str, int]) -> str:
    """Render non-zero dependency counts as a readable list."""
    parts = [f"{count} {name.replace('_', ' ')}" for name, count in counts.items() if count]
    return ", ".join(parts)


async def service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    """Convert a ServiceError into the API's structured error body."""
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code}: {exc.message}")
    else:
        logger.warning(f"{exc.error_code}: {exc.message}")

    body: dict[str, Any] = {"error": exc.error_code, "message": exc.message}
    if exc.details:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content={"detail": body})


def register_exception_handlers(app: FastAPI) -> None:
    """Attach service error handlers to the application."""
    app.add_exception_handler(ServiceError, service_error_handler)
