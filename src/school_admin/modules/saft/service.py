"""
SAFT Service Layer

Records the billable service types and student payments, validates
export requests, builds the SAFT-AO file for a period and computes period
statistics from the recorded payments.

Payments are fiscal records: they are created and read, never edited or
deleted.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from school_admin.core.config import Settings, settings
from school_admin.core.errors import (
    BusinessRuleError,
    ConflictError,
    DependencyError,
    NotFoundError,
)
from school_admin.modules.enrollments.models import Student
from school_admin.modules.saft import repository
from school_admin.modules.saft.generator import (
    CompanyInfo,
    InvoiceSource,
    SaftGenerator,
    export_filename,
    format_amount,
)
from school_admin.modules.saft.models import Payment, ServiceType
from school_admin.modules.saft.schemas import (
    MAX_PERIOD_END,
    CompanyAddress,
    CompanyInfoResponse,
    PaymentCreate,
    SaftValidationRequest,
    ServiceTypeCreate,
    ServiceTypeUpdate,
)
from school_admin.modules.shared.schemas import DeleteResult
from school_admin.modules.shared.service import changes, hard_delete_result, page_result

logger = logging.getLogger(__name__)

OTHER_SERVICES = "Outros"


@dataclass
class SaftExport:
    filename: str
    content: bytes
    invoices: int


def company_from_settings(config: Settings = settings) -> CompanyInfo:
    return CompanyInfo(
        company_id=config.saft_company_id,
        tax_registration_number=config.saft_tax_registration_number,
        company_name=config.saft_company_name,
        business_name=config.saft_business_name,
        address_detail=config.saft_address_detail,
        city=config.saft_city,
        postal_code=config.saft_postal_code,
        region=config.saft_region,
        country=config.saft_country,
        product_id=config.saft_product_id,
        product_version=config.saft_product_version,
        software_validation_number=config.saft_software_validation_number,
        customer_default_tax_id=config.saft_customer_default_tax_id,
    )


def get_company_info() -> CompanyInfoResponse:
    company = company_from_settings()
    return CompanyInfoResponse(
        company_id=company.company_id,
        tax_registration_number=company.tax_registration_number,
        company_name=company.company_name,
        business_name=company.business_name,
        address=CompanyAddress(
            address_detail=company.address_detail,
            city=company.city,
            postal_code=company.postal_code,
            region=company.region,
            country=company.country,
        ),
        product_id=company.product_id,
        product_version=company.product_version,
    )


# ============================================
# Service Types
# ============================================


async def _get_service_type_or_404(db: AsyncSession, service_type_id: int) -> ServiceType:
    service_type = await repository.get_by_id(db, ServiceType, service_type_id)
    if service_type is None:
        raise NotFoundError("Service type", service_type_id)
    return service_type


async def _ensure_unique_service_type(
    db: AsyncSession, designation: str, *, exclude_id: int | None = None
) -> None:
    if await repository.get_by_designation(
        db, ServiceType, designation, exclude_id=exclude_id, case_insensitive=True
    ):
        raise ConflictError(
            f"Service type '{designation}' already exists.", error_code="SERVICE_TYPE_EXISTS"
        )


async def create_service_type(db: AsyncSession, data: ServiceTypeCreate) -> ServiceType:
    await _ensure_unique_service_type(db, data.designation)
    service_type = await repository.add(db, ServiceType(**data.model_dump()))
    logger.info(f"Service type created: {service_type.id} - {service_type.designation}")
    return service_type


async def update_service_type(
    db: AsyncSession, service_type_id: int, data: ServiceTypeUpdate
) -> ServiceType:
    service_type = await _get_service_type_or_404(db, service_type_id)
    values = changes(data)
    if "designation" in values:
        await _ensure_unique_service_type(db, values["designation"], exclude_id=service_type_id)
    return await repository.update(db, service_type, values)


async def get_service_type(db: AsyncSession, service_type_id: int) -> ServiceType:
    return await _get_service_type_or_404(db, service_type_id)


async def list_service_types(
    db: AsyncSession, *, page: int = 1, limit: int = 10, search: str | None = None
) -> dict[str, Any]:
    items, total = await repository.list_paginated(
        db, ServiceType, page=page, limit=limit, search=search
    )
    return page_result(items, total, page, limit)


async def get_active_service_types(db: AsyncSession) -> list[ServiceType]:
    return await repository.get_active_service_types(db)


async def delete_service_type(db: AsyncSession, service_type_id: int) -> DeleteResult:
    """Delete a service type that no payment has used."""
    service_type = await _get_service_type_or_404(db, service_type_id)
    payments = await repository.count_service_type_payments(db, service_type_id)
    if payments:
        raise DependencyError(
            f"Cannot delete service type '{service_type.designation}': "
            f"{payments} payments reference it.",
            {"payments": payments},
        )
    await repository.remove(db, service_type)
    logger.info(f"Service type deleted: {service_type_id}")
    return hard_delete_result("service type", service_type.designation)


# ============================================
# Payments
# ============================================


async def create_payment(db: AsyncSession, data: PaymentCreate) -> Payment:
    """
    Record a payment.

    Raises:
        NotFoundError: If the student or service type does not exist
        BusinessRuleError: If no amount is given and none can be taken
            from the service type
    """
    student = await repository.get_by_id(db, Student, data.student_id)
    if student is None:
        raise NotFoundError("Student", data.student_id)

    amount = data.amount
    if data.service_type_id is not None:
        service_type = await _get_service_type_or_404(db, data.service_type_id)
        if amount is None:
            amount = service_type.price
    if amount is None or amount <= 0:
        raise BusinessRuleError(
            "A positive amount is required when the service type has no price.",
            error_code="AMOUNT_REQUIRED",
        )

    payment = await repository.add(
        db,
        Payment(
            student_id=data.student_id,
            service_type_id=data.service_type_id,
            amount=amount,
            paid_at=data.paid_at or datetime.now(UTC),
            reference=data.reference,
        ),
    )
    logger.info(f"Payment recorded: {payment.id} ({amount} for student {data.student_id})")
    return payment


async def get_payment(db: AsyncSession, payment_id: int) -> Payment:
    payment = await repository.get_by_id(db, Payment, payment_id)
    if payment is None:
        raise NotFoundError("Payment", payment_id)
    return payment


async def list_payments(
    db: AsyncSession,
    *,
    page: int = 1,
    limit: int = 10,
    student_id: int | None = None,
    service_type_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> dict[str, Any]:
    items, total = await repository.list_payments(
        db,
        page=page,
        limit=limit,
        student_id=student_id,
        service_type_id=service_type_id,
        start_date=start_date,
        end_date=end_date,
    )
    return page_result(items, total, page, limit)


# ============================================
# Export
# ============================================


def validate_export_request(data: SaftValidationRequest) -> dict:
    """Report every problem with an export request instead of failing on the first."""
    errors: list[str] = []
    if data.start_date is None:
        errors.append("start_date is required")
    if data.end_date is None:
        errors.append("end_date is required")
    if not data.company_info:
        errors.append("company_info is required")
    if data.start_date and data.end_date and data.start_date > data.end_date:
        errors.append("start_date must be on or before end_date")
    if data.end_date and data.end_date > MAX_PERIOD_END:
        errors.append(f"end_date must be on or before {MAX_PERIOD_END}")

    valid = not errors
    return {
        "valid": valid,
        "errors": errors,
        "message": "Configuration is valid" if valid else "Configuration is invalid",
    }


def _check_period(start_date: date, end_date: date) -> None:
    if end_date > MAX_PERIOD_END:
        raise BusinessRuleError(
            f"end_date must be on or before {MAX_PERIOD_END}.", error_code="INVALID_DATE_RANGE"
        )
    if start_date > end_date:
        raise BusinessRuleError(
            f"start_date ({start_date}) must be on or before end_date ({end_date}).",
            error_code="INVALID_DATE_RANGE",
        )


def _invoice_source(payment: Payment) -> InvoiceSource:
    return InvoiceSource(
        customer_id=payment.student_id,
        customer_name=payment.student.name,
        amount=payment.amount,
        paid_at=payment.paid_at,
        description=payment.service_type.designation if payment.service_type else None,
    )


async def export_saft(
    db: AsyncSession, start_date: date, end_date: date, *, today: date | None = None
) -> SaftExport:
    """Build the SAFT-AO file for the payments between the two dates."""
    _check_period(start_date, end_date)

    payments = await repository.get_payments_in_period(db, start_date, end_date)
    logger.info(f"SAFT export {start_date} to {end_date}: {len(payments)} payments")

    generator = SaftGenerator(
        company_from_settings(), series_prefix=settings.saft_invoice_series_prefix
    )
    content = generator.build(
        (_invoice_source(p) for p in payments), start_date, end_date, today=today
    )
    filename = export_filename(start_date, end_date)

    logger.info(f"SAFT file generated: {filename} ({len(content)} bytes)")
    return SaftExport(filename=filename, content=content, invoices=len(payments))


async def get_saft_statistics(db: AsyncSession, start_date: date, end_date: date) -> dict:
    """Invoice, customer and amount totals for the period, broken down by service type."""
    _check_period(start_date, end_date)
    payments = await repository.get_payments_in_period(db, start_date, end_date)

    total_amount = Decimal("0")
    customers: set[int] = set()
    products: set[str | None] = set()
    by_service_type: dict[str, dict] = {}

    for payment in payments:
        designation = payment.service_type.designation if payment.service_type else None
        total_amount += payment.amount
        customers.add(payment.student_id)
        products.add(designation)

        bucket = by_service_type.setdefault(
            designation or OTHER_SERVICES, {"count": 0, "amount": Decimal("0")}
        )
        bucket["count"] += 1
        bucket["amount"] += payment.amount

    total_invoices = len(payments)
    average = total_amount / total_invoices if total_invoices else Decimal("0")

    return {
        "total_invoices": total_invoices,
        "total_customers": len(customers),
        "total_products": len(products),
        "total_payments": total_invoices,
        "total_amount": Decimal(format_amount(total_amount)),
        "period": {"start_date": start_date, "end_date": end_date},
        "breakdown": {
            "by_service_type": by_service_type,
            "average_invoice_value": Decimal(format_amount(average)),
        },
    }
