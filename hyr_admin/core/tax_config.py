"""Tax parameters for invoicing and support documents, keyed by year."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from decimal import Decimal


class UnknownTaxYearError(ValueError):
    """Raised when no tax parameters are registered for a year."""


@dataclass(frozen=True, slots=True)
class ServiceWithholding:
    rate: Decimal
    min_base_uvt: Decimal
    description: str


@dataclass(frozen=True, slots=True)
class TaxConfig:
    year: int
    uvt: Decimal
    vat_rates: dict[str, Decimal]
    # city key -> activity -> ReteICA retention rate
    ica_rates: dict[str, dict[str, Decimal]]
    service_withholding: dict[str, ServiceWithholding]
    contractor_social_security_base: Decimal
    contractor_health_rate: Decimal
    contractor_pension_rate: Decimal
    contractor_social_security_min_uvt: Decimal

    def vat_rate(self, rate_key: str = "19") -> Decimal:
        rate = self.vat_rates.get(rate_key)
        if rate is None:
            raise UnknownTaxYearError(f"VAT rate '{rate_key}' is not configured for {self.year}.")
        return rate

    def ica_rate(self, city: str, activity: str = "construction") -> Decimal | None:
        by_activity = self.ica_rates.get(normalize_city(city))
        if by_activity is None:
            return None
        return by_activity.get(activity)


def normalize_city(value: str) -> str:
    stripped = unicodedata.normalize("NFD", value)
    stripped = "".join(char for char in stripped if unicodedata.category(char) != "Mn")
    return "_".join(stripped.strip().lower().split())


TAX_2025 = TaxConfig(
    year=2025,
    uvt=Decimal("47065"),
    vat_rates={"19": Decimal("0.19"), "5": Decimal("0.05"), "0": Decimal("0")},
    ica_rates={
        "bogota": {"construction": Decimal("0.00690"), "welding": Decimal("0.00966")},
        "medellin": {"construction": Decimal("0.00700"), "welding": Decimal("0.00700")},
        "cali": {"construction": Decimal("0.00880"), "welding": Decimal("0.00880")},
        "barranquilla": {"construction": Decimal("0.00800"), "welding": Decimal("0.00800")},
        "bucaramanga": {"construction": Decimal("0.00600"), "welding": Decimal("0.00800")},
    },
    service_withholding={
        "general": ServiceWithholding(Decimal("0.04"), Decimal("4"), "Servicios generales"),
        "construction": ServiceWithholding(Decimal("0.02"), Decimal("4"), "Contratos de construccion"),
        "professional": ServiceWithholding(Decimal("0.11"), Decimal("0"), "Honorarios y consultoria"),
    },
    contractor_social_security_base=Decimal("0.40"),
    contractor_health_rate=Decimal("0.125"),
    contractor_pension_rate=Decimal("0.16"),
    contractor_social_security_min_uvt=Decimal("4"),
)

TAX_CONFIGS: dict[int, TaxConfig] = {2025: TAX_2025}


def get_tax_config(year: int) -> TaxConfig:
    config = TAX_CONFIGS.get(year)
    if config is None:
        raise UnknownTaxYearError(f"No tax parameters registered for year {year}.")
    return config
