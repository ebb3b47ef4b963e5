"""
Billing Models

Service types and the student payments exported in the SAFT-AO report.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_admin.modules.shared import BaseModel

if TYPE_CHECKING:
    from school_admin.modules.enrollments.models import Student


class ServiceType(BaseModel):
    """A billable service (tuition, enrollment fee, certificate...)."""

    __tablename__ = "service_types"

    designation: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    status: Mapped[int] = mapped_column(Integer, default=1, nullable=False)


class Payment(BaseModel):
    """A payment made by a student for a service."""

    __tablename__ = "payments"

    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    service_type_id: Mapped[int | None] = mapped_column(
        ForeignKey("service_types.id", ondelete="SET NULL"),
        nullable=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    paid_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)

    student: Mapped["Student"] = relationship("Student", lazy="selectin")
    service_type: Mapped["ServiceType | None"] = relationship("ServiceType", lazy="selectin")
