"""
SAFT Repository

Database operations for service types and payments, and the payment
query behind an export period.
"""

from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.modules.saft.models import Payment, ServiceType
# Generic CRUD helpers are re-exported for the service layer
from school_admin.modules.shared.repository import (  # noqa: F401
    add,
    count_where,
    get_by_designation,
    get_by_id,
    list_paginated,
    paginate,
    remove,
    update,
)


def period_bounds(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    """Half-open UTC range covering both dates in full."""
    start = datetime.combine(start_date, time.min, tzinfo=timezone.utc)
    end = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return start, end


# ============================================
# Service Types
# ============================================


async def get_active_service_types(db: AsyncSession) -> list[ServiceType]:
    result = await db.execute(
        select(ServiceType).where(ServiceType.status == 1).order_by(ServiceType.designation.asc())
    )
    return list(result.scalars().all())


async def count_service_type_payments(db: AsyncSession, service_type_id: int) -> int:
    return await count_where(db, Payment, Payment.service_type_id == service_type_id)


# ============================================
# Payments
# ============================================


async def list_payments(
    db: AsyncSession,
    *,
    page: int,
    limit: int,
    student_id: int | None = None,
    service_type_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> tuple[list[Payment], int]:
    """List payments, newest first, optionally filtered by student, service and dates."""
    query = select(Payment)
    if student_id is not None:
        query = query.where(Payment.student_id == student_id)
    if service_type_id is not None:
        query = query.where(Payment.service_type_id == service_type_id)
    if start_date is not None:
        query = query.where(Payment.paid_at >= period_bounds(start_date, start_date)[0])
    if end_date is not None:
        query = query.where(Payment.paid_at < period_bounds(end_date, end_date)[1])
    query = query.order_by(Payment.paid_at.desc(), Payment.id.desc())
    return await paginate(db, query, page=page, limit=limit)


async def get_payments_in_period(
    db: AsyncSession, start_date: date, end_date: date
) -> list[Payment]:
    """Payments paid between the two dates (inclusive), oldest first."""
    start, end = period_bounds(start_date, end_date)
    result = await db.execute(
        select(Payment)
        .where(Payment.paid_at >= start, Payment.paid_at < end)
        .order_by(Payment.paid_at.asc(), Payment.id.asc())
    )
    return list(result.scalars().all())
