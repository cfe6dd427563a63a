"""DIAN document identifiers (CUFE, CUNE, document numbers) and UBL XML rendering."""

from __future__ import annotations

import hashlib
import re
import unicodedata
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from xml.etree import ElementTree as ET

FINAL_CONSUMER_NIT = "22222222222222"
CUFE_SUFFIX = "HYR2025"
CUNE_SUFFIX = "PAYROLL2025"
_CODE_PATTERN = re.compile(r"^[A-F0-9]{32}$")

UBL_NS = "urn:oasis:names:specification:ubl:schema:xsd:Invoice-2"
CBC_NS = "urn:oasis:names:specification:ubl:schema:xsd:CommonBasicComponents-2"
CAC_NS = "urn:oasis:names:specification:ubl:schema:xsd:CommonAggregateComponents-2"


def _format_code(digest: str) -> str:
    code = digest[:32].upper()
    return "-".join(code[index : index + 8] for index in range(0, 32, 8))


def _hash(parts: Sequence[str]) -> str:
    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()


def normalize_name(value: str) -> str:
    stripped = unicodedata.normalize("NFD", value)
    stripped = "".join(char for char in stripped if unicodedata.category(char) != "Mn")
    return " ".join(stripped.upper().split())


def generate_cufe(
    *,
    invoice_number: str,
    issue_date: date,
    total_amount: Decimal,
    supplier_nit: str,
    customer_nit: str | None = None,
) -> str:
    if not invoice_number or not supplier_nit:
        raise ValueError("invoice_number and supplier_nit are required to generate a CUFE.")
    return _format_code(
        _hash(
            [
                invoice_number,
                issue_date.strftime("%Y%m%d"),
                f"{total_amount:.2f}",
                supplier_nit,
                customer_nit or FINAL_CONSUMER_NIT,
                CUFE_SUFFIX,
            ]
        )
    )


def generate_cune(
    *,
    period: str,
    employee_document: str,
    employee_name: str,
    base_salary: Decimal,
    worked_days: int | None = None,
) -> str:
    if not period or not employee_document or not employee_name:
        raise ValueError("period, employee_document and employee_name are required to generate a CUNE.")
    return _format_code(
        _hash(
            [
                period.replace("-", ""),
                employee_document,
                normalize_name(employee_name),
                f"{base_salary:.2f}",
                str(worked_days or 30),
                CUNE_SUFFIX,
            ]
        )
    )


def is_valid_code(value: str | None) -> bool:
    """Check CUFE/CUNE shape: 32 hex characters once dashes are removed."""

    if not value:
        return False
    return bool(_CODE_PATTERN.match(value.replace("-", "").upper()))


def invoice_number(prefix: str, sequence: int) -> str:
    return f"{prefix}{sequence:06d}"


def support_document_number(year: int, sequence: int) -> str:
    return f"DS-HYR-{year}-{sequence:06d}"


@dataclass(frozen=True, slots=True)
class UblParty:
    nit: str
    name: str
    city: str | None = None


@dataclass(frozen=True, slots=True)
class UblLine:
    description: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal


def render_invoice_xml(
    *,
    number: str,
    cufe: str,
    issue_date: date,
    due_date: date,
    supplier: UblParty,
    customer: UblParty,
    lines: Sequence[UblLine],
    subtotal: Decimal,
    vat_amount: Decimal,
    reteica_amount: Decimal,
    total_amount: Decimal,
) -> str:
    ET.register_namespace("", UBL_NS)
    ET.register_namespace("cbc", CBC_NS)
    ET.register_namespace("cac", CAC_NS)

    def cbc(parent: ET.Element, tag: str, text: str, **attrs: str) -> ET.Element:
        element = ET.SubElement(parent, f"{{{CBC_NS}}}{tag}", attrs)
        element.text = text
        return element

    def party(parent: ET.Element, tag: str, data: UblParty) -> None:
        wrapper = ET.SubElement(parent, f"{{{CAC_NS}}}{tag}")
        node = ET.SubElement(wrapper, f"{{{CAC_NS}}}Party")
        scheme = ET.SubElement(node, f"{{{CAC_NS}}}PartyTaxScheme")
        cbc(scheme, "RegistrationName", data.name)
        cbc(scheme, "CompanyID", data.nit)
        if data.city:
            address = ET.SubElement(node, f"{{{CAC_NS}}}PhysicalLocation")
            cbc(address, "CityName", data.city)

    root = ET.Element(f"{{{UBL_NS}}}Invoice")
    cbc(root, "UBLVersionID", "UBL 2.1")
    cbc(root, "ID", number)
    cbc(root, "UUID", cufe, schemeName="CUFE-SHA256")
    cbc(root, "IssueDate", issue_date.isoformat())
    cbc(root, "DueDate", due_date.isoformat())
    cbc(root, "InvoiceTypeCode", "01")
    cbc(root, "DocumentCurrencyCode", "COP")
    party(root, "AccountingSupplierParty", supplier)
    party(root, "AccountingCustomerParty", customer)

    tax_total = ET.SubElement(root, f"{{{CAC_NS}}}TaxTotal")
    cbc(tax_total, "TaxAmount", f"{vat_amount:.2f}", currencyID="COP")
    withholding = ET.SubElement(root, f"{{{CAC_NS}}}WithholdingTaxTotal")
    cbc(withholding, "TaxAmount", f"{reteica_amount:.2f}", currencyID="COP")

    totals = ET.SubElement(root, f"{{{CAC_NS}}}LegalMonetaryTotal")
    cbc(totals, "LineExtensionAmount", f"{subtotal:.2f}", currencyID="COP")
    cbc(totals, "TaxInclusiveAmount", f"{subtotal + vat_amount:.2f}", currencyID="COP")
    cbc(totals, "PayableAmount", f"{total_amount:.2f}", currencyID="COP")

    for index, line in enumerate(lines, start=1):
        node = ET.SubElement(root, f"{{{CAC_NS}}}InvoiceLine")
        cbc(node, "ID", str(index))
        cbc(node, "InvoicedQuantity", str(line.quantity))
        cbc(node, "LineExtensionAmount", f"{line.line_total:.2f}", currencyID="COP")
        item = ET.SubElement(node, f"{{{CAC_NS}}}Item")
        cbc(item, "Description", line.description)
        price = ET.SubElement(node, f"{{{CAC_NS}}}Price")
        cbc(price, "PriceAmount", f"{line.unit_price:.2f}", currencyID="COP")

    return ET.tostring(root, encoding="unicode", xml_declaration=True)
