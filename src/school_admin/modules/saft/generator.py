"""
SAFT-AO Generator

Builds the SAFT-AO 1.04_01 ``AuditFile`` XML for a set of payments.

Every payment becomes one single-line, tax-exempt invoice. Invoices are
chained: each ``Hash`` is the upper-case hex SHA-256 of
``"{InvoiceNo};{InvoiceDate};{GrossTotal};{previous hash}"``, the first
invoice using an empty previous hash.

This module does no I/O; the service loads payments and passes them in.
"""

import hashlib
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

SAFT_NAMESPACE = "urn:OECD:StandardAuditFile-Tax:AO_1.04_01"
AUDIT_FILE_VERSION = "1.04_01"
CURRENCY_CODE = "AOA"
PRODUCT_CODE = "PROPINA"
DEFAULT_DESCRIPTION = "Propina Escolar"
EXEMPTION_CODE = "M01"
EXEMPTION_REASON = "Isento"

_CENTS = Decimal("0.01")
_UNSAFE_CHARS = re.compile(r"[&<>\"']")


@dataclass(frozen=True)
class CompanyInfo:
    """Company identity written to the Header."""

    company_id: str
    tax_registration_number: str
    company_name: str
    business_name: str
    address_detail: str
    city: str
    postal_code: str
    region: str
    country: str
    product_id: str
    product_version: str
    software_validation_number: str
    customer_default_tax_id: str = "999999999"


@dataclass(frozen=True)
class InvoiceSource:
    """The payment data needed to write one invoice."""

    customer_id: int
    customer_name: str
    amount: Decimal
    paid_at: datetime
    description: str | None = None


def format_amount(value: Decimal | int | float) -> str:
    """Render a monetary value with exactly two decimals."""
    return str(Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))


def strip_unsafe(text: str) -> str:
    """Drop the characters ``& < > " '`` from free text."""
    return _UNSAFE_CHARS.sub("", text)


def invoice_number(series_prefix: str, fiscal_year: int, sequence: int) -> str:
    return f"FT {series_prefix}{fiscal_year}/{sequence:06d}"


def invoice_hash(number: str, invoice_date: str, gross_total: str, previous_hash: str) -> str:
    payload = f"{number};{invoice_date};{gross_total};{previous_hash}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest().upper()


def export_filename(start_date: date, end_date: date) -> str:
    """``SAFT_{start year}{start month}_{end day}.xml``"""
    return f"SAFT_{start_date.year}{start_date.month:02d}_{end_date.day:02d}.xml"


def _sub(parent: ET.Element, tag: str, text: str | int | None = None) -> ET.Element:
    element = ET.SubElement(parent, tag)
    if text is not None:
        element.text = str(text)
    return element


def _address(parent: ET.Element, tag: str, company: CompanyInfo) -> None:
    address = _sub(parent, tag)
    _sub(address, "AddressDetail", company.address_detail)
    _sub(address, "City", company.city)
    _sub(address, "PostalCode", company.postal_code)
    _sub(address, "Country", company.country)
    _sub(address, "Region", company.region)


def _tax(parent: ET.Element, tag: str, company: CompanyInfo, *, with_amount: bool) -> None:
    tax = _sub(parent, tag)
    _sub(tax, "TaxType", "IVA")
    _sub(tax, "TaxCountryRegion", company.country)
    _sub(tax, "TaxCode", "ISE")
    if not with_amount:
        _sub(tax, "Description", EXEMPTION_REASON)
    _sub(tax, "TaxPercentage", "0.00")
    if with_amount:
        _sub(tax, "TaxAmount", "0.00")


class SaftGenerator:
    """
    Renders one AuditFile.

    Usage:
        generator = SaftGenerator(company, series_prefix="JM")
        xml_bytes = generator.build(payments, start_date, end_date)
    """

    def __init__(self, company: CompanyInfo, *, series_prefix: str):
        self.company = company
        self.series_prefix = series_prefix

    def build(
        self,
        invoices: Iterable[InvoiceSource],
        start_date: date,
        end_date: date,
        *,
        today: date | None = None,
    ) -> bytes:
        """Return the UTF-8 encoded XML document, declaration included."""
        invoices = list(invoices)
        today = today or date.today()

        root = ET.Element("AuditFile", {"xmlns": SAFT_NAMESPACE})
        self._header(root, start_date, end_date, today)
        self._master_files(root, invoices)
        self._source_documents(root, invoices, fiscal_year=start_date.year)

        ET.indent(root, space="  ")
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)

    # ============================================
    # Header
    # ============================================

    def _header(self, root: ET.Element, start_date: date, end_date: date, today: date) -> None:
        company = self.company
        header = _sub(root, "Header")
        _sub(header, "AuditFileVersion", AUDIT_FILE_VERSION)
        _sub(header, "CompanyID", company.company_id)
        _sub(header, "TaxRegistrationNumber", company.tax_registration_number)
        _sub(header, "TaxAccountingBasis", "F")
        _sub(header, "CompanyName", company.company_name)
        _sub(header, "BusinessName", company.business_name)
        _address(header, "CompanyAddress", company)
        _sub(header, "FiscalYear", start_date.year)
        _sub(header, "StartDate", start_date.isoformat())
        _sub(header, "EndDate", end_date.isoformat())
        _sub(header, "CurrencyCode", CURRENCY_CODE)
        _sub(header, "DateCreated", max(end_date, today).isoformat())
        _sub(header, "TaxEntity", "Global")
        _sub(header, "ProductCompanyTaxID", company.tax_registration_number)
        _sub(header, "ProductID", company.product_id)
        _sub(header, "ProductVersion", company.product_version)
        _sub(header, "SoftwareValidationNumber", company.software_validation_number)

    # ============================================
    # MasterFiles
    # ============================================

    def _master_files(self, root: ET.Element, invoices: list[InvoiceSource]) -> None:
        master = _sub(root, "MasterFiles")

        tax_table = _sub(master, "TaxTable")
        _tax(tax_table, "TaxTableEntry", self.company, with_amount=False)

        # One customer per student, in order of first payment
        customers: dict[int, str] = {}
        for invoice in invoices:
            customers.setdefault(invoice.customer_id, invoice.customer_name)

        customers_el = _sub(master, "Customers")
        for customer_id, name in customers.items():
            customer = _sub(customers_el, "Customer")
            _sub(customer, "CustomerID", customer_id)
            _sub(customer, "AccountID", "Desconhecido")
            _sub(customer, "CustomerTaxID", self.company.customer_default_tax_id)
            _sub(customer, "CompanyName", strip_unsafe(name))
            _address(customer, "BillingAddress", self.company)
            _sub(customer, "SelfBillingIndicator", 0)

        products = _sub(master, "Products")
        product = _sub(products, "Product")
        _sub(product, "ProductType", "S")
        _sub(product, "ProductCode", PRODUCT_CODE)
        _sub(product, "ProductDescription", DEFAULT_DESCRIPTION)
        _sub(product, "ProductNumberCode", PRODUCT_CODE)

    # ============================================
    # SourceDocuments
    # ============================================

    def _source_documents(
        self, root: ET.Element, invoices: list[InvoiceSource], *, fiscal_year: int
    ) -> None:
        documents = _sub(root, "SourceDocuments")
        sales = _sub(documents, "SalesInvoices")
        _sub(sales, "NumberOfEntries", len(invoices))
        _sub(sales, "TotalDebit", "0.00")
        _sub(sales, "TotalCredit", format_amount(sum((i.amount for i in invoices), Decimal(0))))

        previous_hash = ""
        for sequence, source in enumerate(invoices, start=1):
            previous_hash = self._invoice(sales, source, sequence, fiscal_year, previous_hash)

        payments = _sub(documents, "Payments")
        _sub(payments, "NumberOfEntries", 0)
        _sub(payments, "TotalDebit", "0.00")
        _sub(payments, "TotalCredit", "0.00")

    def _invoice(
        self,
        sales: ET.Element,
        source: InvoiceSource,
        sequence: int,
        fiscal_year: int,
        previous_hash: str,
    ) -> str:
        """Append one invoice and return its hash for the next link."""
        number = invoice_number(self.series_prefix, fiscal_year, sequence)
        invoice_date = source.paid_at.date().isoformat()
        amount = format_amount(source.amount)
        digest = invoice_hash(number, invoice_date, amount, previous_hash)
        description = strip_unsafe(source.description or DEFAULT_DESCRIPTION)

        invoice = _sub(sales, "Invoice")
        _sub(invoice, "InvoiceNo", number)
        status = _sub(invoice, "DocumentStatus")
        _sub(status, "InvoiceStatus", "N")
        _sub(status, "InvoiceStatusDate", source.paid_at.strftime("%Y-%m-%dT%H:%M:%S"))
        _sub(status, "SourceID", 1)
        _sub(status, "SourceBilling", "P")
        _sub(invoice, "Hash", digest)
        _sub(invoice, "HashControl", 1)
        _sub(invoice, "InvoiceDate", invoice_date)
        _sub(invoice, "InvoiceType", "FT")
        regimes = _sub(invoice, "SpecialRegimes")
        _sub(regimes, "SelfBillingIndicator", 0)
        _sub(regimes, "CashVATSchemeIndicator", 0)
        _sub(regimes, "ThirdPartiesBillingIndicator", 0)
        _sub(invoice, "SourceID", 1)
        _sub(invoice, "SystemEntryDate", source.paid_at.strftime("%Y-%m-%dT%H:%M:%S"))
        _sub(invoice, "CustomerID", source.customer_id)

        line = _sub(invoice, "Line")
        _sub(line, "LineNumber", 1)
        _sub(line, "ProductCode", PRODUCT_CODE)
        _sub(line, "ProductDescription", description)
        _sub(line, "Quantity", 1)
        _sub(line, "UnitOfMeasure", "UN")
        _sub(line, "UnitPrice", amount)
        _sub(line, "TaxPointDate", invoice_date)
        _sub(line, "Description", description)
        _sub(line, "CreditAmount", amount)
        _tax(line, "Tax", self.company, with_amount=True)
        _sub(line, "TaxExemptionReason", EXEMPTION_REASON)
        _sub(line, "TaxExemptionCode", EXEMPTION_CODE)
        _sub(line, "SettlementAmount", "0.00")

        totals = _sub(invoice, "DocumentTotals")
        _sub(totals, "TaxPayable", "0.00")
        _sub(totals, "NetTotal", amount)
        _sub(totals, "GrossTotal", amount)

        return digest
