"""
SAFT Schemas

Billing input (service types, payments) and the export request/response models.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

EntityId = Annotated[int, Field(gt=0)]
Money = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]
Price = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]

# Last day an export period may end on; the period end bound is the following midnight
MAX_PERIOD_END = date(9999, 12, 30)


class _Input(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


# ============================================
# Service Types
# ============================================


class ServiceTypeCreate(_Input):
    designation: str = Field(..., min_length=1, max_length=100)
    price: Price = Decimal("0.00")
    status: int = Field(1, ge=0)


class ServiceTypeUpdate(_Input):
    designation: str | None = Field(None, min_length=1, max_length=100)
    price: Price | None = None
    status: int | None = Field(None, ge=0)


class ServiceTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    designation: str
    price: Decimal
    status: int


# ============================================
# Payments
# ============================================


class PayerRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class PaymentCreate(_Input):
    """
    A payment by a student.

    ``amount`` defaults to the service type's price when omitted and
    ``paid_at`` to the time of recording.
    """

    student_id: EntityId
    service_type_id: EntityId | None = None
    amount: Money | None = None
    paid_at: datetime | None = None
    reference: str | None = Field(None, max_length=100)


class PaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    service_type_id: int | None = None
    amount: Decimal
    paid_at: datetime
    reference: str | None = None
    student: PayerRef | None = None
    service_type: ServiceTypeResponse | None = None


# ============================================
# Export
# ============================================


class CompanyAddress(BaseModel):
    address_detail: str
    city: str
    postal_code: str
    region: str
    country: str


class CompanyInfoResponse(BaseModel):
    company_id: str
    tax_registration_number: str
    company_name: str
    business_name: str
    tax_accounting_basis: str = "F"
    address: CompanyAddress
    product_id: str
    product_version: str


class SaftExportRequest(BaseModel):
    start_date: date
    end_date: date = Field(..., le=MAX_PERIOD_END)
    company_info: CompanyInfoResponse | None = None


class SaftValidationRequest(BaseModel):
    """Loose input: missing fields are reported, not rejected with 422."""

    start_date: date | None = None
    end_date: date | None = None
    company_info: dict | None = None


class SaftValidationResponse(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
    message: str


class ServiceTypeBreakdown(BaseModel):
    count: int
    amount: Decimal


class SaftPeriod(BaseModel):
    start_date: date
    end_date: date


class SaftBreakdown(BaseModel):
    by_service_type: dict[str, ServiceTypeBreakdown]
    average_invoice_value: Decimal


class SaftStatistics(BaseModel):
    total_invoices: int
    total_customers: int
    total_products: int
    total_payments: int
    total_amount: Decimal
    period: SaftPeriod
    breakdown: SaftBreakdown
