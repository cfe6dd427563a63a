from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from xml.etree import ElementTree as ET

import pytest

from hyr_admin.services.dian import (
    UblLine,
    UblParty,
    generate_cufe,
    generate_cune,
    invoice_number,
    is_valid_code,
    normalize_name,
    render_invoice_xml,
    support_document_number,
)

CODE_SHAPE = re.compile(r"^[0-9A-F]{8}(-[0-9A-F]{8}){3}$")


def test_cufe_is_deterministic_and_well_formed() -> None:
    kwargs = {
        "invoice_number": "SETT000001",
        "issue_date": date(2025, 3, 1),
        "total_amount": Decimal("1190000"),
        "supplier_nit": "900123456-1",
        "customer_nit": "900555111-2",
    }
    cufe = generate_cufe(**kwargs)

    assert CODE_SHAPE.match(cufe)
    assert cufe == generate_cufe(**kwargs)
    assert cufe != generate_cufe(**{**kwargs, "total_amount": Decimal("1190001")})
    assert is_valid_code(cufe)


def test_cufe_requires_number_and_supplier() -> None:
    with pytest.raises(ValueError):
        generate_cufe(invoice_number="", issue_date=date(2025, 3, 1), total_amount=Decimal("1"), supplier_nit="9001")


def test_cune_ignores_accents_in_employee_name() -> None:
    first = generate_cune(
        period="2025-03",
        employee_document="1010101010",
        employee_name="José Núñez",
        base_salary=Decimal("1423500"),
    )
    second = generate_cune(
        period="2025-03",
        employee_document="1010101010",
        employee_name="jose  nunez",
        base_salary=Decimal("1423500"),
        worked_days=30,
    )

    assert CODE_SHAPE.match(first)
    assert first == second


def test_code_validation() -> None:
    assert is_valid_code("0123456789abcdef0123456789ABCDEF")
    assert not is_valid_code(None)
    assert not is_valid_code("")
    assert not is_valid_code("XYZ")


def test_document_numbers() -> None:
    assert invoice_number("SETT", 1) == "SETT000001"
    assert support_document_number(2025, 1) == "DS-HYR-2025-000001"
    assert normalize_name("  María   Ángel ") == "MARIA ANGEL"


def test_render_invoice_xml_contains_totals() -> None:
    xml = render_invoice_xml(
        number="SETT000001",
        cufe="ABCDEF01-ABCDEF01-ABCDEF01-ABCDEF01",
        issue_date=date(2025, 3, 1),
        due_date=date(2025, 3, 31),
        supplier=UblParty(nit="900123456-1", name="HYR Constructora"),
        customer=UblParty(nit="900555111-2", name="Constructora Andina", city="Bogota"),
        lines=[UblLine(description="Obra gris", quantity=Decimal("1"), unit_price=Decimal("1000000"), line_total=Decimal("1000000"))],
        subtotal=Decimal("1000000"),
        vat_amount=Decimal("190000"),
        reteica_amount=Decimal("0"),
        total_amount=Decimal("1190000"),
    )

    assert xml.startswith("<?xml")
    assert "SETT000001" in xml
    assert "1190000" in xml
    ET.fromstring(xml.split("?>", 1)[1].strip())
