"""
Shared Service Helpers

Pagination envelopes, partial-update extraction, delete summaries and the
transaction wrapper used by every cascading delete.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.errors import DeleteFailedError, ServiceError
from school_admin.modules.shared.schemas import BatchError, DeleteResult, PaginationMeta

logger = logging.getLogger(__name__)


def changes(data: BaseModel) -> dict[str, Any]:
    """Fields explicitly provided (and not null) in a partial update."""
    return data.model_dump(exclude_unset=True, exclude_none=True)


def page_result(items: list[Any], total: int, page: int, limit: int) -> dict[str, Any]:
    return {"items": items, "pagination": PaginationMeta.build(page, limit, total)}


async def run_cascade(
    db: AsyncSession,
    label: str,
    entity_id: int,
    cascade: Callable[[AsyncSession, int], Awaitable[dict[str, int]]],
) -> dict[str, int]:
    """
    Run a repository cascade and commit it as one transaction.

    Raises:
        DeleteFailedError: If any statement fails; the transaction is rolled back
    """
    try:
        counts = await cascade(db, entity_id)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception(f"Cascade delete of {label} {entity_id} failed, rolled back: {e}")
        raise DeleteFailedError(label) from e
    return counts


def cascade_result(label: str, name: str, counts: dict[str, int]) -> DeleteResult:
    return DeleteResult(
        message=f"{label.capitalize()} '{name}' and its dependent records were deleted.",
        kind="cascade_delete",
        details={"designation": name, **counts},
    )


def hard_delete_result(label: str, name: str) -> DeleteResult:
    return DeleteResult(
        message=f"{label.capitalize()} '{name}' was deleted.",
        kind="hard_delete",
        details={"designation": name},
    )


async def create_batch(
    items: list[Any], create: Callable[[Any], Awaitable[Any]]
) -> dict[str, list]:
    """Create each item independently, collecting per-item failures."""
    created: list[Any] = []
    errors: list[BatchError] = []

    for index, item in enumerate(items):
        try:
            created.append(await create(item))
        except ServiceError as e:
            errors.append(BatchError(index=index, message=e.message))

    logger.info(f"Batch create: {len(created)} created, {len(errors)} failed")
    return {"created": created, "errors": errors}
