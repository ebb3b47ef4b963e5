"""
Tests for the SAFT service layer.
"""

from datetime import UTC, date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from school_admin.core.errors import BusinessRuleError
from school_admin.modules.saft.repository import period_bounds
from school_admin.modules.saft.schemas import SaftValidationRequest
from school_admin.modules.saft.service import (
    export_saft,
    get_company_info,
    get_saft_statistics,
    validate_export_request,
)

REPO = "school_admin.modules.saft.service.repository"


class TestValidateExportRequest:
    def test_valid_request(self):
        result = validate_export_request(
            SaftValidationRequest(
                start_date=date(2025, 1, 1),
                end_date=date(2025, 1, 31),
                company_info={"company_name": "Colégio"},
            )
        )

        assert result == {"valid": True, "errors": [], "message": "Configuration is valid"}

    def test_reports_every_missing_field(self):
        result = validate_export_request(SaftValidationRequest())

        assert result["valid"] is False
        assert result["message"] == "Configuration is invalid"
        assert len(result["errors"]) == 3

    def test_inverted_period(self):
        result = validate_export_request(
            SaftValidationRequest(
                start_date=date(2025, 2, 1),
                end_date=date(2025, 1, 1),
                company_info={"company_name": "Colégio"},
            )
        )

        assert result["errors"] == ["start_date must be on or before end_date"]


class TestExport:
    @pytest.mark.asyncio
    async def test_export_builds_file(self, mock_db, sample_payments):
        with patch(REPO) as mock_repo:
            mock_repo.get_payments_in_period = AsyncMock(return_value=sample_payments)

            export = await export_saft(
                mock_db, date(2025, 1, 1), date(2025, 1, 31), today=date(2025, 2, 1)
            )

            assert export.filename == "SAFT_202501_31.xml"
            assert export.invoices == 3
            assert b"<InvoiceNo>FT JM2025/000003</InvoiceNo>" in export.content
            assert b"Maria  Filhos" in export.content

    @pytest.mark.asyncio
    async def test_export_rejects_inverted_period(self, mock_db):
        with patch(REPO) as mock_repo:
            mock_repo.get_payments_in_period = AsyncMock()

            with pytest.raises(BusinessRuleError) as exc_info:
                await export_saft(mock_db, date(2025, 2, 1), date(2025, 1, 1))

            assert exc_info.value.error_code == "INVALID_DATE_RANGE"
            mock_repo.get_payments_in_period.assert_not_called()


class TestStatistics:
    @pytest.mark.asyncio
    async def test_totals_and_breakdown(self, mock_db, sample_payments):
        with patch(REPO) as mock_repo:
            mock_repo.get_payments_in_period = AsyncMock(return_value=sample_payments)

            stats = await get_saft_statistics(mock_db, date(2025, 1, 1), date(2025, 1, 31))

            assert stats["total_invoices"] == 3
            assert stats["total_payments"] == 3
            assert stats["total_customers"] == 2
            assert stats["total_products"] == 2
            assert stats["total_amount"] == Decimal("32500.50")
            assert stats["breakdown"]["average_invoice_value"] == Decimal("10833.50")

            by_type = stats["breakdown"]["by_service_type"]
            assert by_type["Propina"] == {"count": 2, "amount": Decimal("30000.50")}
            assert by_type["Outros"]["count"] == 1

    @pytest.mark.asyncio
    async def test_empty_period(self, mock_db):
        with patch(REPO) as mock_repo:
            mock_repo.get_payments_in_period = AsyncMock(return_value=[])

            stats = await get_saft_statistics(mock_db, date(2025, 1, 1), date(2025, 1, 31))

            assert stats["total_invoices"] == 0
            assert stats["total_amount"] == Decimal("0.00")
            assert stats["breakdown"]["by_service_type"] == {}


def test_company_info_from_settings():
    info = get_company_info()

    assert info.address.country == "AO"
    assert info.company_name


def test_period_bounds_cover_end_day():
    start, end = period_bounds(date(2025, 1, 1), date(2025, 1, 31))

    assert start == datetime(2025, 1, 1, tzinfo=UTC)
    assert end == datetime(2025, 2, 1, tzinfo=UTC)
