"""Cost templates and estimate arithmetic for the project simulator."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")
CATEGORIES = ("materials", "labor", "equipment", "overhead")


class EstimateError(ValueError):
    """Raised for unknown templates, unknown items or invalid quantities."""


def _q2(value: Decimal) -> Decimal:
    return value.quantize(Q2, rounding=ROUND_HALF_UP)


def _percent(part: Decimal, total: Decimal) -> int:
    if total == ZERO:
        return 0
    return int((part / total * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True, slots=True)
class TemplateItem:
    name: str
    unit: str
    unit_cost: Decimal


@dataclass(frozen=True, slots=True)
class CostTemplate:
    key: str
    name: str
    categories: dict[str, dict[str, TemplateItem]]


@dataclass(frozen=True, slots=True)
class CalculationFactors:
    labor_benefit_factor: Decimal = Decimal("1.58")
    overhead_percentage: Decimal = Decimal("0.15")
    profit_margin: Decimal = Decimal("0.20")
    contingency: Decimal = Decimal("0.10")

    @classmethod
    def from_overrides(cls, overrides: Mapping[str, object] | None) -> CalculationFactors:
        defaults = cls()
        if not overrides:
            return defaults
        values = {}
        for name in ("labor_benefit_factor", "overhead_percentage", "profit_margin", "contingency"):
            raw = overrides.get(name)
            value = getattr(defaults, name) if raw is None else Decimal(str(raw))
            if value < 0:
                raise EstimateError(f"{name} must be non-negative.")
            values[name] = value
        return cls(**values)

    def as_dict(self) -> dict[str, str]:
        return {
            "labor_benefit_factor": str(self.labor_benefit_factor),
            "overhead_percentage": str(self.overhead_percentage),
            "profit_margin": str(self.profit_margin),
            "contingency": str(self.contingency),
        }


@dataclass(frozen=True, slots=True)
class EstimateItem:
    """A line either referencing a template entry or carrying its own unit cost."""

    category: str
    quantity: Decimal
    subcategory: str | None = None
    name: str | None = None
    unit: str | None = None
    unit_cost: Decimal | None = None


@dataclass(slots=True)
class EstimateLine:
    category: str
    subcategory: str | None
    name: str
    unit: str | None
    quantity: Decimal
    unit_cost: Decimal
    total_cost: Decimal

    def as_dict(self) -> dict[str, object]:
        return {
            "category": self.category,
            "subcategory": self.subcategory,
            "name": self.name,
            "unit": self.unit,
            "quantity": str(self.quantity),
            "unit_cost": str(self.unit_cost),
            "total_cost": str(self.total_cost),
        }


@dataclass(slots=True)
class Estimate:
    template_type: str
    duration_days: int
    apply_benefits: bool
    factors: CalculationFactors
    lines: list[EstimateLine] = field(default_factory=list)
    materials: Decimal = ZERO
    labor: Decimal = ZERO
    equipment: Decimal = ZERO
    overhead_items: Decimal = ZERO
    direct_cost: Decimal = ZERO
    overhead: Decimal = ZERO
    subtotal: Decimal = ZERO
    profit: Decimal = ZERO
    contingency: Decimal = ZERO
    total: Decimal = ZERO

    def as_dict(self) -> dict[str, object]:
        return {
            "project_info": {
                "template_type": self.template_type,
                "duration_days": self.duration_days,
                "items_count": len(self.lines),
            },
            "cost_breakdown": {
                "materials": str(self.materials),
                "labor": str(self.labor),
                "equipment": str(self.equipment),
                "overhead_items": str(self.overhead_items),
                "direct_cost": str(self.direct_cost),
                "overhead": str(self.overhead),
                "subtotal": str(self.subtotal),
                "profit": str(self.profit),
                "contingency": str(self.contingency),
                "total": str(self.total),
            },
            "items_detail": [line.as_dict() for line in self.lines],
            "calculation_factors": {**self.factors.as_dict(), "benefits_applied": self.apply_benefits},
            "summary": {
                "cost_per_day": str(_q2(self.total / self.duration_days)),
                "materials_percentage": _percent(self.materials, self.total),
                "labor_percentage": _percent(self.labor, self.total),
                "equipment_percentage": _percent(self.equipment, self.total),
                "overhead_percentage": _percent(self.overhead_items + self.overhead, self.total),
                "margin_percentage": _percent(self.profit + self.contingency, self.total),
            },
        }


def _items(**entries: tuple[str, str, str]) -> dict[str, TemplateItem]:
    return {key: TemplateItem(name=name, unit=unit, unit_cost=Decimal(cost)) for key, (name, unit, cost) in entries.items()}


COST_TEMPLATES: dict[str, CostTemplate] = {
    "construction": CostTemplate(
        key="construction",
        name="Construccion General",
        categories={
            "materials": _items(
                concrete=("Concreto", "m3", "320000"),
                steel=("Acero de refuerzo", "ton", "3200000"),
                brick=("Ladrillo", "und", "350"),
                sand=("Arena", "m3", "45000"),
                gravel=("Grava", "m3", "55000"),
                cement=("Cemento", "bulto", "18000"),
            ),
            "labor": _items(
                mason=("Maestro de obra", "hora", "22000"),
                helper=("Ayudante", "hora", "15000"),
                supervisor=("Supervisor", "hora", "35000"),
            ),
            "equipment": _items(
                mixer=("Mezcladora", "dia", "85000"),
                crane=("Grua", "dia", "450000"),
                tools=("Herramientas menores", "mes", "180000"),
            ),
        },
    ),
    "welding": CostTemplate(
        key="welding",
        name="Soldadura Especializada",
        categories={
            "materials": _items(
                steel_plate=("Lamina de acero", "kg", "3500"),
                electrode=("Electrodo E6013", "kg", "12000"),
                gas=("Gas de proteccion", "m3", "15000"),
                primer=("Primer anticorrosivo", "galon", "85000"),
            ),
            "labor": _items(
                welder_certified=("Soldador certificado", "hora", "25000"),
                welder_helper=("Ayudante soldador", "hora", "18000"),
                inspector=("Inspector de soldadura", "hora", "45000"),
            ),
            "equipment": _items(
                welding_machine=("Maquina de soldar", "dia", "120000"),
                grinder=("Pulidora", "dia", "25000"),
                crane_welding=("Grua para montaje", "dia", "380000"),
            ),
        },
    ),
}


PRESETS: dict[str, list[dict[str, object]]] = {
    "construction": [
        {
            "name": "Casa pequena (80 m2)",
            "items": [
                {"category": "materials", "subcategory": "concrete", "quantity": 12},
                {"category": "materials", "subcategory": "steel", "quantity": 2},
                {"category": "materials", "subcategory": "brick", "quantity": 8000},
                {"category": "labor", "subcategory": "mason", "quantity": 200},
                {"category": "labor", "subcategory": "helper", "quantity": 300},
                {"category": "equipment", "subcategory": "mixer", "quantity": 15},
            ],
        },
        {
            "name": "Bodega industrial (200 m2)",
            "items": [
                {"category": "materials", "subcategory": "concrete", "quantity": 35},
                {"category": "materials", "subcategory": "steel", "quantity": 8},
                {"category": "labor", "subcategory": "mason", "quantity": 400},
                {"category": "labor", "subcategory": "supervisor", "quantity": 100},
                {"category": "equipment", "subcategory": "crane", "quantity": 10},
            ],
        },
    ],
    "welding": [
        {
            "name": "Tanque 1000 L",
            "items": [
                {"category": "materials", "subcategory": "steel_plate", "quantity": 500},
                {"category": "materials", "subcategory": "electrode", "quantity": 15},
                {"category": "labor", "subcategory": "welder_certified", "quantity": 80},
                {"category": "labor", "subcategory": "inspector", "quantity": 8},
                {"category": "equipment", "subcategory": "welding_machine", "quantity": 10},
            ],
        },
        {
            "name": "Estructura metalica 10 ton",
            "items": [
                {"category": "materials", "subcategory": "steel_plate", "quantity": 10000},
                {"category": "materials", "subcategory": "electrode", "quantity": 80},
                {"category": "labor", "subcategory": "welder_certified", "quantity": 300},
                {"category": "labor", "subcategory": "welder_helper", "quantity": 200},
                {"category": "equipment", "subcategory": "crane_welding", "quantity": 15},
            ],
        },
    ],
}


def get_template(template_type: str) -> CostTemplate:
    template = COST_TEMPLATES.get(template_type)
    if template is None:
        raise EstimateError(f"Unknown template type '{template_type}'.")
    return template


def serialize_templates() -> dict[str, object]:
    return {
        "templates": {
            key: {
                "name": template.name,
                "categories": {
                    category: {
                        item_key: {"name": item.name, "unit": item.unit, "unit_cost": str(item.unit_cost)}
                        for item_key, item in items.items()
                    }
                    for category, items in template.categories.items()
                },
            }
            for key, template in COST_TEMPLATES.items()
        },
        "calculation_factors": CalculationFactors().as_dict(),
    }


def _resolve_line(template: CostTemplate, item: EstimateItem) -> EstimateLine:
    if item.category not in CATEGORIES:
        raise EstimateError(f"Unknown category '{item.category}'.")
    if item.quantity <= 0:
        raise EstimateError("Item quantity must be greater than zero.")

    if item.unit_cost is not None:
        if item.unit_cost < 0:
            raise EstimateError("Item unit cost must be non-negative.")
        name = item.name or item.subcategory
        if not name:
            raise EstimateError("Custom items need a name.")
        return EstimateLine(
            category=item.category,
            subcategory=item.subcategory,
            name=name,
            unit=item.unit,
            quantity=item.quantity,
            unit_cost=item.unit_cost,
            total_cost=_q2(item.quantity * item.unit_cost),
        )

    entry = template.categories.get(item.category, {}).get(item.subcategory or "")
    if entry is None:
        raise EstimateError(
            f"Item '{item.subcategory}' is not part of the {template.key} {item.category} template."
        )
    return EstimateLine(
        category=item.category,
        subcategory=item.subcategory,
        name=entry.name,
        unit=entry.unit,
        quantity=item.quantity,
        unit_cost=entry.unit_cost,
        total_cost=_q2(item.quantity * entry.unit_cost),
    )


def calculate_estimate(
    template_type: str,
    items: Sequence[EstimateItem],
    *,
    duration_days: int = 30,
    apply_benefits: bool = True,
    factors: CalculationFactors | None = None,
) -> Estimate:
    template = get_template(template_type)
    if not items:
        raise EstimateError("At least one item is required.")
    if duration_days <= 0:
        raise EstimateError("duration_days must be greater than zero.")
    factors = factors or CalculationFactors()

    estimate = Estimate(
        template_type=template_type,
        duration_days=duration_days,
        apply_benefits=apply_benefits,
        factors=factors,
    )
    for item in items:
        line = _resolve_line(template, item)
        estimate.lines.append(line)
        if line.category == "materials":
            estimate.materials += line.total_cost
        elif line.category == "labor":
            estimate.labor += line.total_cost
        elif line.category == "equipment":
            estimate.equipment += line.total_cost
        else:
            estimate.overhead_items += line.total_cost

    if apply_benefits:
        estimate.labor = _q2(estimate.labor * factors.labor_benefit_factor)

    estimate.direct_cost = estimate.materials + estimate.labor + estimate.equipment + estimate.overhead_items
    estimate.overhead = _q2(estimate.direct_cost * factors.overhead_percentage)
    estimate.subtotal = estimate.direct_cost + estimate.overhead
    estimate.profit = _q2(estimate.subtotal * factors.profit_margin)
    estimate.contingency = _q2(estimate.subtotal * factors.contingency)
    estimate.total = estimate.subtotal + estimate.profit + estimate.contingency
    return estimate
