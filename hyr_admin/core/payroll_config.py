"""Colombian labor-law parameters used by the payroll engine, keyed by year."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


class UnknownPayrollYearError(ValueError):
    """Raised when no legal parameters are registered for a year."""


@dataclass(frozen=True, slots=True)
class FspBracket:
    """Solidarity pension fund rate for a salary range expressed in SMMLV."""

    min_smmlv: Decimal
    max_smmlv: Decimal | None
    rate: Decimal


@dataclass(frozen=True, slots=True)
class WithholdingBracket:
    """Monthly income-tax withholding bracket (UVT based, upper bound inclusive)."""

    from_uvt: Decimal
    to_uvt: Decimal | None
    marginal_rate: Decimal
    base_uvt: Decimal


@dataclass(frozen=True, slots=True)
class PayrollConfig:
    year: int
    minimum_wage: Decimal
    transport_allowance: Decimal
    connectivity_allowance: Decimal
    uvt: Decimal
    monthly_hours: Decimal

    employee_health_rate: Decimal
    employee_pension_rate: Decimal

    employer_health_rate: Decimal
    employer_pension_rate: Decimal
    arl_rates: dict[str, Decimal]

    severance_rate: Decimal
    severance_interest_rate: Decimal
    service_bonus_rate: Decimal
    vacation_rate: Decimal

    sena_rate: Decimal
    icbf_rate: Decimal
    compensation_fund_rate: Decimal

    fsp_brackets: tuple[FspBracket, ...]
    withholding_brackets: tuple[WithholdingBracket, ...]

    law_114_1_enabled: bool
    law_114_1_max_ibc_smmlv: Decimal
    law_114_1_min_employees: int

    overtime_day_surcharge: Decimal
    overtime_night_surcharge: Decimal
    overtime_holiday_day_surcharge: Decimal
    overtime_holiday_night_surcharge: Decimal
    night_surcharge: Decimal

    ibc_min_smmlv: Decimal
    ibc_max_smmlv: Decimal
    transport_allowance_max_smmlv: Decimal

    holidays: frozenset[date] = field(default_factory=frozenset)
    pila_novelties: dict[str, str] = field(default_factory=dict)

    def is_rest_day(self, value: date) -> bool:
        return value.weekday() == 6 or value in self.holidays


PILA_NOVELTIES = {
    "ING": "Ingreso",
    "RET": "Retiro",
    "TDE": "Traslado desde otra EPS",
    "TAE": "Traslado a otra EPS",
    "TDP": "Traslado desde otra administradora de pensiones",
    "VAR": "Variacion permanente de salario",
    "SLN": "Suspension temporal del contrato",
    "IGE": "Incapacidad temporal por enfermedad general",
    "LMA": "Licencia de maternidad o paternidad",
    "VAC": "Vacaciones",
    "IRP": "Incapacidad por riesgo profesional",
}


PAYROLL_2025 = PayrollConfig(
    year=2025,
    minimum_wage=Decimal("1423500"),
    transport_allowance=Decimal("200000"),
    connectivity_allowance=Decimal("200000"),
    uvt=Decimal("47065"),
    monthly_hours=Decimal("192"),
    employee_health_rate=Decimal("0.04"),
    employee_pension_rate=Decimal("0.04"),
    employer_health_rate=Decimal("0.085"),
    employer_pension_rate=Decimal("0.12"),
    arl_rates={
        "I": Decimal("0.00522"),
        "II": Decimal("0.01044"),
        "III": Decimal("0.02436"),
        "IV": Decimal("0.0435"),
        "V": Decimal("0.0696"),
    },
    severance_rate=Decimal("0.0833"),
    severance_interest_rate=Decimal("0.01"),
    service_bonus_rate=Decimal("0.0833"),
    vacation_rate=Decimal("0.0417"),
    sena_rate=Decimal("0.02"),
    icbf_rate=Decimal("0.03"),
    compensation_fund_rate=Decimal("0.04"),
    fsp_brackets=(
        FspBracket(Decimal("4"), Decimal("16"), Decimal("0.01")),
        FspBracket(Decimal("16"), Decimal("17"), Decimal("0.012")),
        FspBracket(Decimal("17"), Decimal("18"), Decimal("0.014")),
        FspBracket(Decimal("18"), Decimal("19"), Decimal("0.016")),
        FspBracket(Decimal("19"), Decimal("20"), Decimal("0.018")),
        FspBracket(Decimal("20"), None, Decimal("0.02")),
    ),
    # Article 383 E.T. monthly table.
    withholding_brackets=(
        WithholdingBracket(Decimal("0"), Decimal("95"), Decimal("0"), Decimal("0")),
        WithholdingBracket(Decimal("95"), Decimal("150"), Decimal("0.19"), Decimal("0")),
        WithholdingBracket(Decimal("150"), Decimal("360"), Decimal("0.28"), Decimal("10")),
        WithholdingBracket(Decimal("360"), Decimal("640"), Decimal("0.33"), Decimal("69")),
        WithholdingBracket(Decimal("640"), Decimal("945"), Decimal("0.35"), Decimal("162")),
        WithholdingBracket(Decimal("945"), Decimal("2300"), Decimal("0.37"), Decimal("268")),
        WithholdingBracket(Decimal("2300"), None, Decimal("0.39"), Decimal("770")),
    ),
    law_114_1_enabled=True,
    law_114_1_max_ibc_smmlv=Decimal("10"),
    law_114_1_min_employees=2,
    overtime_day_surcharge=Decimal("0.25"),
    overtime_night_surcharge=Decimal("0.75"),
    overtime_holiday_day_surcharge=Decimal("1.00"),
    overtime_holiday_night_surcharge=Decimal("1.50"),
    night_surcharge=Decimal("0.35"),
    ibc_min_smmlv=Decimal("1"),
    ibc_max_smmlv=Decimal("25"),
    transport_allowance_max_smmlv=Decimal("2"),
    holidays=frozenset(
        date.fromisoformat(day)
        for day in (
            "2025-01-01",
            "2025-01-06",
            "2025-03-24",
            "2025-04-17",
            "2025-04-18",
            "2025-05-01",
            "2025-06-02",
            "2025-06-23",
            "2025-06-30",
            "2025-07-20",
            "2025-08-07",
            "2025-08-18",
            "2025-10-13",
            "2025-11-03",
            "2025-11-17",
            "2025-12-08",
            "2025-12-25",
        )
    ),
    pila_novelties=PILA_NOVELTIES,
)

PAYROLL_CONFIGS: dict[int, PayrollConfig] = {2025: PAYROLL_2025}


def get_payroll_config(year: int) -> PayrollConfig:
    config = PAYROLL_CONFIGS.get(year)
    if config is None:
        raise UnknownPayrollYearError(f"No payroll parameters registered for year {year}.")
    return config


def available_years() -> list[int]:
    return sorted(PAYROLL_CONFIGS)


def serialize_config(config: PayrollConfig) -> dict[str, object]:
    return {
        "year": config.year,
        "minimum_wage": str(config.minimum_wage),
        "transport_allowance": str(config.transport_allowance),
        "connectivity_allowance": str(config.connectivity_allowance),
        "uvt": str(config.uvt),
        "monthly_hours": str(config.monthly_hours),
        "employee": {
            "health": str(config.employee_health_rate),
            "pension": str(config.employee_pension_rate),
        },
        "employer": {
            "health": str(config.employer_health_rate),
            "pension": str(config.employer_pension_rate),
            "arl": {risk_class: str(rate) for risk_class, rate in config.arl_rates.items()},
        },
        "benefits": {
            "severance": str(config.severance_rate),
            "severance_interest": str(config.severance_interest_rate),
            "service_bonus": str(config.service_bonus_rate),
            "vacation": str(config.vacation_rate),
        },
        "parafiscales": {
            "sena": str(config.sena_rate),
            "icbf": str(config.icbf_rate),
            "compensation_fund": str(config.compensation_fund_rate),
        },
        "fsp_brackets": [
            {
                "min_smmlv": str(bracket.min_smmlv),
                "max_smmlv": str(bracket.max_smmlv) if bracket.max_smmlv is not None else None,
                "rate": str(bracket.rate),
            }
            for bracket in config.fsp_brackets
        ],
        "law_114_1": {
            "enabled": config.law_114_1_enabled,
            "max_ibc_smmlv": str(config.law_114_1_max_ibc_smmlv),
            "min_employees": config.law_114_1_min_employees,
        },
        "surcharges": {
            "overtime_day": str(config.overtime_day_surcharge),
            "overtime_night": str(config.overtime_night_surcharge),
            "overtime_holiday_day": str(config.overtime_holiday_day_surcharge),
            "overtime_holiday_night": str(config.overtime_holiday_night_surcharge),
            "night": str(config.night_surcharge),
        },
        "ibc_limits_smmlv": {"min": str(config.ibc_min_smmlv), "max": str(config.ibc_max_smmlv)},
        "holidays": sorted(day.isoformat() for day in config.holidays),
        "pila_novelties": dict(config.pila_novelties),
    }
