"""
Shared Schemas

Pagination envelope, delete summaries and batch-create results.
"""

import math
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

MAX_PAGE_SIZE = 100


class PaginationMeta(BaseModel):
    """Pagination metadata returned with every list endpoint."""

    current_page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    total_items: int = Field(..., ge=0)
    items_per_page: int = Field(..., ge=1, le=MAX_PAGE_SIZE)
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_items=total,
            items_per_page=limit,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        )


class Page(BaseModel, Generic[T]):
    """A page of items plus its pagination metadata."""

    items: list[T]
    pagination: PaginationMeta


class DeleteResult(BaseModel):
    """
    Summary of a delete operation.

    ``kind`` is ``hard_delete`` when the row had no dependents and
    ``cascade_delete`` when dependent rows were removed in the same
    transaction. ``details`` carries the deleted entity's name and the
    per-table row counts.
    """

    message: str
    kind: Literal["hard_delete", "cascade_delete"]
    details: dict[str, Any] = Field(default_factory=dict)


class BatchError(BaseModel):
    """A single failed item in a batch create."""

    index: int
    message: str


class BatchResult(BaseModel, Generic[T]):
    """Outcome of a batch create: created rows and per-item errors."""

    created: list[T] = Field(default_factory=list)
    errors: list[BatchError] = Field(default_factory=list)
