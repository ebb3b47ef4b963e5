"""
SAFT Router

SAFT-AO export and the billing records it is built from. Admin and finance
officers only, except reading service types.

Endpoints:
- CRUD /service-types   Billable services (GET /service-types/active)
- POST /payments        Record a payment
- GET  /payments        List payments (student, service type, date filters)
- GET  /payments/{id}   Get a payment
- POST /validate      Check an export request without generating anything
- POST /export        Download the SAFT-AO XML for a period
- GET  /company-info  Company identity written to the file header
- GET  /statistics    Payment totals for a period
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.auth import CurrentUser, get_current_user, require_finance
from school_admin.core.database import get_db
from school_admin.core.rate_limit import enforce_rate_limit
from school_admin.modules.saft import service
from school_admin.modules.saft.schemas import (
    MAX_PERIOD_END,
    CompanyInfoResponse,
    PaymentCreate,
    PaymentResponse,
    SaftExportRequest,
    SaftStatistics,
    SaftValidationRequest,
    SaftValidationResponse,
    ServiceTypeCreate,
    ServiceTypeResponse,
    ServiceTypeUpdate,
)
from school_admin.modules.shared.params import ListParams
from school_admin.modules.shared.schemas import MAX_PAGE_SIZE, DeleteResult, Page

logger = logging.getLogger(__name__)

router = APIRouter()

# Exports are expensive; limit per user
EXPORT_RATE_LIMIT = 5
EXPORT_RATE_WINDOW_SECONDS = 60


@router.post("/validate", response_model=SaftValidationResponse)
async def validate_export(
    data: SaftValidationRequest,
    user: CurrentUser = Depends(require_finance),
):
    return service.validate_export_request(data)


@router.post(
    "/export",
    response_class=Response,
    responses={200: {"content": {"application/xml": {}}}},
)
async def export_saft(
    data: SaftExportRequest,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_finance),
):
    """
    Generate the SAFT-AO file for the payments in [start_date, end_date].

    Returns the XML as an attachment named SAFT_{YYYY}{MM}_{DD}.xml.
    """
    await enforce_rate_limit(
        f"saft_export:{user.id}", EXPORT_RATE_LIMIT, EXPORT_RATE_WINDOW_SECONDS
    )
    logger.info(f"SAFT export requested by {user.email}: {data.start_date} to {data.end_date}")

    export = await service.export_saft(db, data.start_date, data.end_date)
    return Response(
        content=export.content,
        media_type="application/xml",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.get("/company-info", response_model=CompanyInfoResponse)
async def get_company_info(user: CurrentUser = Depends(require_finance)):
    return service.get_company_info()


@router.get("/statistics", response_model=SaftStatistics)
async def get_statistics(
    start_date: date = Query(..., description="First day of the period"),
    end_date: date = Query(..., le=MAX_PERIOD_END, description="Last day of the period"),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_finance),
):
    return await service.get_saft_statistics(db, start_date, end_date)


# ============================================
# Service Types
# ============================================


@router.post(
    "/service-types", response_model=ServiceTypeResponse, status_code=status.HTTP_201_CREATED
)
async def create_service_type(
    data: ServiceTypeCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_finance),
):
    return await service.create_service_type(db, data)


@router.get("/service-types", response_model=Page[ServiceTypeResponse])
async def list_service_types(
    params: ListParams = Depends(),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.list_service_types(db, **params.as_kwargs())


@router.get("/service-types/active", response_model=list[ServiceTypeResponse])
async def get_active_service_types(
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_active_service_types(db)


@router.get("/service-types/{service_type_id}", response_model=ServiceTypeResponse)
async def get_service_type(
    service_type_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return await service.get_service_type(db, service_type_id)


@router.put("/service-types/{service_type_id}", response_model=ServiceTypeResponse)
async def update_service_type(
    service_type_id: int,
    data: ServiceTypeUpdate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_finance),
):
    return await service.update_service_type(db, service_type_id, data)


@router.delete("/service-types/{service_type_id}", response_model=DeleteResult)
async def delete_service_type(
    service_type_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_finance),
):
    """Delete a service type. 400 HAS_DEPENDENCIES once payments use it."""
    return await service.delete_service_type(db, service_type_id)


# ============================================
# Payments
# ============================================


@router.post("/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    data: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_finance),
):
    logger.info(f"Payment recorded by {user.email} for student {data.student_id}")
    return await service.create_payment(db, data)


@router.get("/payments", response_model=Page[PaymentResponse])
async def list_payments(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    student_id: int | None = Query(None, gt=0),
    service_type_id: int | None = Query(None, gt=0),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None, le=MAX_PERIOD_END),
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_finance),
):
    return await service.list_payments(
        db,
        page=page,
        limit=limit,
        student_id=student_id,
        service_type_id=service_type_id,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/payments/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(require_finance),
):
    return await service.get_payment(db, payment_id)
