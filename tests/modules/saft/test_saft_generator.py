"""
Tests for the SAFT-AO XML generator.
"""

import hashlib
import xml.etree.ElementTree as ET
from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from school_admin.modules.saft.generator import (
    SAFT_NAMESPACE,
    CompanyInfo,
    InvoiceSource,
    SaftGenerator,
    export_filename,
    format_amount,
    invoice_hash,
    invoice_number,
    strip_unsafe,
)

NS = {"s": SAFT_NAMESPACE}


@pytest.fixture
def company():
    return CompanyInfo(
        company_id="5417000000",
        tax_registration_number="5417000000",
        company_name="Colégio Teste",
        business_name="Colégio Teste",
        address_detail="Rua 1",
        city="Luanda",
        postal_code="0000",
        region="Luanda",
        country="AO",
        product_id="School Admin API/Software",
        product_version="1.0.0",
        software_validation_number="0",
    )


@pytest.fixture
def invoices():
    return [
        InvoiceSource(100, "João Manuel", Decimal("15000.00"), datetime(2025, 1, 5, 9, 30, tzinfo=UTC)),
        InvoiceSource(
            101, "Maria & Filhos", Decimal("15000.50"), datetime(2025, 1, 12, 14, 0, tzinfo=UTC),
            description="Propina <Janeiro>",
        ),
        InvoiceSource(100, "João Manuel", Decimal("2500"), datetime(2025, 1, 20, 8, 15, tzinfo=UTC)),
    ]


def _build(company, invoices, **kwargs) -> ET.Element:
    content = SaftGenerator(company, series_prefix="JM").build(
        invoices, date(2025, 1, 1), date(2025, 1, 31), **kwargs
    )
    return ET.fromstring(content)


class TestHelpers:
    def test_format_amount_rounds_half_up(self):
        assert format_amount(Decimal("10.005")) == "10.01"
        assert format_amount(2500) == "2500.00"
        assert format_amount(0.1) == "0.10"

    def test_strip_unsafe(self):
        assert strip_unsafe("Maria & \"Filhos\" <Lda> 'x'") == "Maria  Filhos Lda x"

    def test_invoice_number(self):
        assert invoice_number("JM", 2025, 7) == "FT JM2025/000007"

    def test_invoice_hash_is_uppercase_sha256(self):
        expected = hashlib.sha256(b"FT JM2025/000001;2025-01-05;15000.00;").hexdigest().upper()
        assert invoice_hash("FT JM2025/000001", "2025-01-05", "15000.00", "") == expected
        assert len(expected) == 64

    def test_export_filename(self):
        assert export_filename(date(2025, 1, 1), date(2025, 1, 31)) == "SAFT_202501_31.xml"
        assert export_filename(date(2024, 9, 1), date(2025, 3, 5)) == "SAFT_202409_05.xml"


class TestSaftGenerator:
    def test_declaration_and_namespace(self, company, invoices):
        content = SaftGenerator(company, series_prefix="JM").build(
            invoices, date(2025, 1, 1), date(2025, 1, 31)
        )

        assert content.startswith(b"<?xml")
        assert ET.fromstring(content).tag == f"{{{SAFT_NAMESPACE}}}AuditFile"

    def test_header(self, company, invoices):
        root = _build(company, invoices, today=date(2025, 2, 3))

        assert root.findtext("s:Header/s:FiscalYear", namespaces=NS) == "2025"
        assert root.findtext("s:Header/s:StartDate", namespaces=NS) == "2025-01-01"
        assert root.findtext("s:Header/s:CurrencyCode", namespaces=NS) == "AOA"
        assert root.findtext("s:Header/s:DateCreated", namespaces=NS) == "2025-02-03"

    def test_date_created_never_before_end_date(self, company, invoices):
        root = _build(company, invoices, today=date(2025, 1, 15))

        assert root.findtext("s:Header/s:DateCreated", namespaces=NS) == "2025-01-31"

    def test_customers_deduplicated_in_first_payment_order(self, company, invoices):
        root = _build(company, invoices)

        customers = root.findall("s:MasterFiles/s:Customers/s:Customer", NS)
        assert [c.findtext("s:CustomerID", namespaces=NS) for c in customers] == ["100", "101"]
        assert customers[1].findtext("s:CompanyName", namespaces=NS) == "Maria  Filhos"
        assert customers[0].findtext("s:CustomerTaxID", namespaces=NS) == "999999999"

    def test_sales_totals(self, company, invoices):
        root = _build(company, invoices)

        sales = root.find("s:SourceDocuments/s:SalesInvoices", NS)
        assert sales.findtext("s:NumberOfEntries", namespaces=NS) == "3"
        assert sales.findtext("s:TotalDebit", namespaces=NS) == "0.00"
        assert sales.findtext("s:TotalCredit", namespaces=NS) == "32500.50"

    def test_invoices_numbered_and_hash_chained(self, company, invoices):
        root = _build(company, invoices)

        previous = ""
        elements = root.findall("s:SourceDocuments/s:SalesInvoices/s:Invoice", NS)
        for sequence, element in enumerate(elements, start=1):
            number = element.findtext("s:InvoiceNo", namespaces=NS)
            invoice_date = element.findtext("s:InvoiceDate", namespaces=NS)
            gross = element.findtext("s:DocumentTotals/s:GrossTotal", namespaces=NS)

            assert number == f"FT JM2025/{sequence:06d}"
            assert element.findtext("s:Hash", namespaces=NS) == invoice_hash(
                number, invoice_date, gross, previous
            )
            previous = element.findtext("s:Hash", namespaces=NS)

        assert [e.findtext("s:InvoiceDate", namespaces=NS) for e in elements] == [
            "2025-01-05",
            "2025-01-12",
            "2025-01-20",
        ]

    def test_line_description(self, company, invoices):
        root = _build(company, invoices)

        lines = root.findall("s:SourceDocuments/s:SalesInvoices/s:Invoice/s:Line", NS)
        assert lines[0].findtext("s:Description", namespaces=NS) == "Propina Escolar"
        assert lines[1].findtext("s:Description", namespaces=NS) == "Propina Janeiro"
        assert lines[2].findtext("s:CreditAmount", namespaces=NS) == "2500.00"

    def test_empty_period(self, company):
        root = _build(company, [])

        sales = root.find("s:SourceDocuments/s:SalesInvoices", NS)
        assert sales.findtext("s:NumberOfEntries", namespaces=NS) == "0"
        assert sales.findtext("s:TotalCredit", namespaces=NS) == "0.00"
        assert root.findall("s:MasterFiles/s:Customers/s:Customer", NS) == []
        assert root.findtext(
            "s:SourceDocuments/s:Payments/s:NumberOfEntries", namespaces=NS
        ) == "0"
