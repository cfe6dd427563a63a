from __future__ import annotations

from decimal import Decimal

import pytest

from hyr_admin.services.cost_estimator import (
    PRESETS,
    CalculationFactors,
    EstimateError,
    EstimateItem,
    calculate_estimate,
    serialize_templates,
)

HOUSE_ITEMS = [
    EstimateItem(category="materials", subcategory="concrete", quantity=Decimal("10")),
    EstimateItem(category="labor", subcategory="mason", quantity=Decimal("100")),
    EstimateItem(category="equipment", subcategory="mixer", quantity=Decimal("5")),
]


def test_estimate_with_labor_benefits() -> None:
    estimate = calculate_estimate("construction", HOUSE_ITEMS)

    assert estimate.materials == Decimal("3200000.00")
    assert estimate.labor == Decimal("3476000.00")
    assert estimate.equipment == Decimal("425000.00")
    assert estimate.direct_cost == Decimal("7101000.00")
    assert estimate.overhead == Decimal("1065150.00")
    assert estimate.subtotal == Decimal("8166150.00")
    assert estimate.profit == Decimal("1633230.00")
    assert estimate.contingency == Decimal("816615.00")
    assert estimate.total == Decimal("10615995.00")


def test_estimate_without_labor_benefits() -> None:
    estimate = calculate_estimate("construction", HOUSE_ITEMS, apply_benefits=False)

    assert estimate.labor == Decimal("2200000.00")
    assert estimate.total == Decimal("8708375.00")


def test_estimate_payload_shape() -> None:
    payload = calculate_estimate("construction", HOUSE_ITEMS, duration_days=15).as_dict()

    assert payload["project_info"] == {"template_type": "construction", "duration_days": 15, "items_count": 3}
    assert payload["cost_breakdown"]["total"] == "10615995.00"
    assert payload["items_detail"][0]["name"] == "Concreto"
    assert payload["calculation_factors"]["benefits_applied"] is True
    assert payload["summary"]["cost_per_day"] == "707733.00"


def test_custom_items_and_factor_overrides() -> None:
    estimate = calculate_estimate(
        "welding",
        [
            EstimateItem(category="overhead", quantity=Decimal("1"), name="Transporte", unit_cost=Decimal("500000")),
            EstimateItem(category="labor", subcategory="welder_certified", quantity=Decimal("10")),
        ],
        apply_benefits=False,
        factors=CalculationFactors.from_overrides({"overhead_percentage": "0", "profit_margin": "0", "contingency": "0"}),
    )

    assert estimate.overhead_items == Decimal("500000.00")
    assert estimate.labor == Decimal("250000.00")
    assert estimate.total == Decimal("750000.00")


def test_unknown_template_item_is_rejected() -> None:
    with pytest.raises(EstimateError):
        calculate_estimate("construction", [EstimateItem(category="materials", subcategory="gold", quantity=Decimal("1"))])


def test_custom_item_requires_name() -> None:
    with pytest.raises(EstimateError):
        calculate_estimate("construction", [EstimateItem(category="materials", quantity=Decimal("1"), unit_cost=Decimal("10"))])


def test_unknown_template_and_empty_items() -> None:
    with pytest.raises(EstimateError):
        calculate_estimate("plumbing", HOUSE_ITEMS)
    with pytest.raises(EstimateError):
        calculate_estimate("construction", [])


def test_negative_factor_override_is_rejected() -> None:
    with pytest.raises(EstimateError):
        CalculationFactors.from_overrides({"profit_margin": "-0.1"})


def test_templates_and_presets_cover_both_trades() -> None:
    templates = serialize_templates()

    assert set(templates["templates"]) == {"construction", "welding"}
    assert templates["calculation_factors"]["labor_benefit_factor"] == "1.58"
    assert set(PRESETS) == {"construction", "welding"}
    for template_type, presets in PRESETS.items():
        for preset in presets:
            items = [EstimateItem(**{**item, "quantity": Decimal(str(item["quantity"]))}) for item in preset["items"]]
            assert calculate_estimate(template_type, items).total > 0
