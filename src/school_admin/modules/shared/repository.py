"""
Shared Repository Helpers

Generic query helpers reused by the domain repositories: pagination with a
total count, counting rows by condition and bulk deletes that report the
number of rows removed.
"""

import logging
from typing import Any, TypeVar

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


async def paginate(
    db: AsyncSession,
    query: Select,
    *,
    page: int,
    limit: int,
) -> tuple[list[Any], int]:
    """
    Run a select with offset/limit and return ``(rows, total)``.

    The total is computed from the unpaginated query via a subquery.
    """
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    result = await db.execute(query.offset((page - 1) * limit).limit(limit))
    return list(result.scalars().unique().all()), total


async def count_where(db: AsyncSession, model: type, *conditions: Any) -> int:
    """Count rows of ``model`` matching all ``conditions``."""
    query = select(func.count()).select_from(model)
    if conditions:
        query = query.where(*conditions)
    result = await db.execute(query)
    return result.scalar() or 0


async def delete_where(db: AsyncSession, model: type, *conditions: Any) -> int:
    """Delete rows of ``model`` matching ``conditions``; return the rowcount."""
    result = await db.execute(delete(model).where(*conditions))
    return result.rowcount or 0


async def get_by_id(db: AsyncSession, model: type[ModelT], entity_id: Any) -> ModelT | None:
    return await db.get(model, entity_id)


async def add(db: AsyncSession, obj: ModelT) -> ModelT:
    """Insert a row, commit and reload it."""
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    logger.info(f"Created {obj!r}")
    return obj


async def update(db: AsyncSession, obj: ModelT, values: dict[str, Any]) -> ModelT:
    """Apply ``values`` to ``obj``, commit and reload it."""
    for field, value in values.items():
        setattr(obj, field, value)
    await db.commit()
    await db.refresh(obj)
    logger.info(f"Updated {type(obj).__name__} {obj.id}: {sorted(values)}")
    return obj


async def remove(db: AsyncSession, obj: Any) -> None:
    """Delete a single row and commit."""
    await db.delete(obj)
    await db.commit()


async def get_by_designation(
    db: AsyncSession,
    model: type[ModelT],
    designation: str,
    *,
    exclude_id: int | None = None,
    case_insensitive: bool = False,
) -> ModelT | None:
    """Find a row by designation, optionally ignoring case and one row ID."""
    if case_insensitive:
        condition = func.lower(model.designation) == designation.lower()
    else:
        condition = model.designation == designation

    query = select(model).where(condition)
    if exclude_id is not None:
        query = query.where(model.id != exclude_id)

    result = await db.execute(query.limit(1))
    return result.scalars().first()


async def list_paginated(
    db: AsyncSession,
    model: type[ModelT],
    *,
    page: int,
    limit: int,
    search: str | None = None,
) -> tuple[list[ModelT], int]:
    """List rows ordered by designation with optional case-insensitive search."""
    query = select(model)
    if search:
        query = query.where(model.designation.ilike(f"%{search}%"))
    query = query.order_by(model.designation.asc())
    return await paginate(db, query, page=page, limit=limit)
