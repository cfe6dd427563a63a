"""Colombian payroll engine.

Pure functions turning an employee profile, worked hours and the legal
parameters of a year into pay, deductions, employer contributions and PILA
figures. Amounts are quantized to cents; PILA amounts to whole pesos.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from hyr_admin.core.payroll_config import PayrollConfig

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")
PESO = Decimal("1")
NO_PESOS = Decimal("0")
MAX_MONTHLY_OVERTIME_HOURS = Decimal("48")


class PayrollRuleError(ValueError):
    """Raised when an employee cannot be liquidated with the given data."""


def _q2(value: Decimal) -> Decimal:
    return value.quantize(Q2, rounding=ROUND_HALF_UP)


def round_pila(value: Decimal) -> Decimal:
    return value.quantize(PESO, rounding=ROUND_HALF_UP)


@dataclass(frozen=True, slots=True)
class EmployeeProfile:
    name: str
    salary_type: str
    monthly_salary: Decimal | None = None
    hourly_rate: Decimal | None = None
    department: str = "general"
    arl_risk_class: str | None = None
    transport_allowance_eligible: bool = True
    teleworking: bool = False
    fsp_exempt: bool = False


@dataclass(frozen=True, slots=True)
class HoursWorked:
    regular_hours: Decimal = ZERO
    overtime_day_hours: Decimal = ZERO
    overtime_night_hours: Decimal = ZERO
    overtime_holiday_day_hours: Decimal = ZERO
    overtime_holiday_night_hours: Decimal = ZERO
    # Ordinary (non-overtime) hours worked inside the night window.
    night_hours: Decimal = ZERO
    days_worked: int = 30

    @property
    def overtime_hours(self) -> Decimal:
        return (
            self.overtime_day_hours
            + self.overtime_night_hours
            + self.overtime_holiday_day_hours
            + self.overtime_holiday_night_hours
        )


@dataclass(frozen=True, slots=True)
class EmployerProfile:
    is_legal_entity: bool = True
    employee_count: int = 1
    qualifies_law_114_1: bool = False
    # Applied to staff without an ARL class of their own.
    default_arl_risk_class: str = "V"


@dataclass(frozen=True, slots=True)
class WorkCenter:
    arl_risk_class: str | None = None
    arl_rate: Decimal | None = None


@dataclass(frozen=True, slots=True)
class PayrollCalculation:
    base_salary: Decimal
    hourly_value: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    night_hours: Decimal
    regular_pay: Decimal
    overtime_pay: Decimal
    night_premium_pay: Decimal
    gross_pay: Decimal
    transport_allowance: Decimal
    connectivity_allowance: Decimal
    health_deduction: Decimal
    pension_deduction: Decimal
    fsp_rate: Decimal
    solidarity_fund: Decimal
    withholding_tax: Decimal
    employer_health: Decimal
    employer_pension: Decimal
    arl_risk_class: str
    arl_rate: Decimal
    arl: Decimal
    severance: Decimal
    severance_interest: Decimal
    service_bonus: Decimal
    vacation: Decimal
    sena: Decimal
    icbf: Decimal
    compensation_fund: Decimal
    law_114_1_applied: bool
    ibc_smmlv: Decimal

    @property
    def total_allowances(self) -> Decimal:
        return self.transport_allowance + self.connectivity_allowance

    @property
    def total_deductions(self) -> Decimal:
        return self.health_deduction + self.pension_deduction + self.solidarity_fund + self.withholding_tax

    @property
    def total_employer_contributions(self) -> Decimal:
        return self.employer_health + self.employer_pension + self.arl

    @property
    def total_benefits(self) -> Decimal:
        return self.severance + self.severance_interest + self.service_bonus + self.vacation

    @property
    def total_parafiscales(self) -> Decimal:
        return self.sena + self.icbf + self.compensation_fund

    @property
    def net_pay(self) -> Decimal:
        return self.gross_pay + self.total_allowances - self.total_deductions

    @property
    def employer_cost(self) -> Decimal:
        return (
            self.gross_pay
            + self.total_allowances
            + self.total_employer_contributions
            + self.total_benefits
            + self.total_parafiscales
        )

    @property
    def benefit_factor(self) -> Decimal:
        if self.gross_pay == ZERO:
            return ZERO
        return (self.employer_cost / self.gross_pay).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)

    def as_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {}
        for name in self.__dataclass_fields__:
            value = getattr(self, name)
            payload[name] = str(value) if isinstance(value, Decimal) else value
        payload.update(
            {
                "total_allowances": str(self.total_allowances),
                "total_deductions": str(self.total_deductions),
                "total_employer_contributions": str(self.total_employer_contributions),
                "total_benefits": str(self.total_benefits),
                "total_parafiscales": str(self.total_parafiscales),
                "net_pay": str(self.net_pay),
                "employer_cost": str(self.employer_cost),
                "benefit_factor": str(self.benefit_factor),
            }
        )
        return payload


@dataclass(slots=True)
class PayrollValidation:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    compliance: dict[str, bool] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def as_dict(self) -> dict[str, object]:
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "compliance": dict(self.compliance),
        }


def base_salary(employee: EmployeeProfile, config: PayrollConfig) -> Decimal:
    if employee.salary_type == "monthly":
        if employee.monthly_salary is None:
            raise PayrollRuleError(f"Monthly salary is missing for {employee.name}.")
        return employee.monthly_salary
    if employee.hourly_rate is None:
        raise PayrollRuleError(f"Hourly rate is missing for {employee.name}.")
    return employee.hourly_rate * config.monthly_hours


def fsp_rate(ibc: Decimal, config: PayrollConfig) -> Decimal:
    """Solidarity pension fund rate for an IBC; zero below 4 SMMLV."""

    in_smmlv = ibc / config.minimum_wage
    for bracket in config.fsp_brackets:
        if in_smmlv >= bracket.min_smmlv and (bracket.max_smmlv is None or in_smmlv < bracket.max_smmlv):
            return bracket.rate
    return Decimal("0")


def withholding_tax(taxable_income: Decimal, config: PayrollConfig) -> Decimal:
    if taxable_income <= ZERO:
        return ZERO
    in_uvt = taxable_income / config.uvt
    for bracket in config.withholding_brackets:
        if in_uvt > bracket.from_uvt and (bracket.to_uvt is None or in_uvt <= bracket.to_uvt):
            if bracket.marginal_rate == 0:
                return ZERO
            tax_uvt = (in_uvt - bracket.from_uvt) * bracket.marginal_rate + bracket.base_uvt
            return _q2(tax_uvt * config.uvt)
    return ZERO


def law_114_1_applies(ibc: Decimal, employer: EmployerProfile, config: PayrollConfig) -> bool:
    if not config.law_114_1_enabled or not employer.qualifies_law_114_1:
        return False
    if ibc >= config.minimum_wage * config.law_114_1_max_ibc_smmlv:
        return False
    return employer.is_legal_entity or employer.employee_count >= config.law_114_1_min_employees


def resolve_arl(
    employee: EmployeeProfile,
    work_center: WorkCenter | None,
    config: PayrollConfig,
    default_class: str = "V",
) -> tuple[str, Decimal]:
    risk_class = (work_center.arl_risk_class if work_center else None) or employee.arl_risk_class or default_class
    if risk_class not in config.arl_rates:
        raise PayrollRuleError(f"Unknown ARL risk class '{risk_class}'.")
    if work_center is not None and work_center.arl_rate is not None:
        return risk_class, work_center.arl_rate
    return risk_class, config.arl_rates[risk_class]


def calculate_payroll(
    employee: EmployeeProfile,
    hours: HoursWorked,
    *,
    config: PayrollConfig,
    employer: EmployerProfile | None = None,
    work_center: WorkCenter | None = None,
) -> PayrollCalculation:
    employer = employer or EmployerProfile()
    base = base_salary(employee, config)
    hourly_value = base / config.monthly_hours

    regular_hours = min(hours.regular_hours, config.monthly_hours)
    if employee.salary_type == "monthly":
        regular_pay = _q2(base)
    else:
        regular_pay = _q2(hourly_value * regular_hours)

    overtime_pay = _q2(
        hourly_value
        * (
            hours.overtime_day_hours * (1 + config.overtime_day_surcharge)
            + hours.overtime_night_hours * (1 + config.overtime_night_surcharge)
            + hours.overtime_holiday_day_hours * (1 + config.overtime_holiday_day_surcharge)
            + hours.overtime_holiday_night_hours * (1 + config.overtime_holiday_night_surcharge)
        )
    )
    night_premium_pay = _q2(hourly_value * hours.night_hours * config.night_surcharge)
    gross = regular_pay + overtime_pay + night_premium_pay

    below_allowance_cap = base <= config.minimum_wage * config.transport_allowance_max_smmlv
    transport = ZERO
    connectivity = ZERO
    if below_allowance_cap and employee.teleworking:
        connectivity = _q2(config.connectivity_allowance)
    elif below_allowance_cap and employee.transport_allowance_eligible:
        transport = _q2(config.transport_allowance)

    health = _q2(gross * config.employee_health_rate)
    pension = _q2(gross * config.employee_pension_rate)
    # FSP bracket and Law 114-1 eligibility follow the base salary, not the month's gross.
    rate = ZERO if employee.fsp_exempt else fsp_rate(base, config)
    solidarity = _q2(base * rate)
    withholding = withholding_tax(gross - health - pension - solidarity, config)

    exempt = law_114_1_applies(base, employer, config)
    risk_class, arl_rate = resolve_arl(employee, work_center, config, employer.default_arl_risk_class)

    # Transport allowance is part of the base for severance and service bonus.
    benefit_base = gross + transport + connectivity

    return PayrollCalculation(
        base_salary=_q2(base),
        hourly_value=_q2(hourly_value),
        regular_hours=regular_hours,
        overtime_hours=hours.overtime_hours,
        night_hours=hours.night_hours,
        regular_pay=regular_pay,
        overtime_pay=overtime_pay,
        night_premium_pay=night_premium_pay,
        gross_pay=gross,
        transport_allowance=transport,
        connectivity_allowance=connectivity,
        health_deduction=health,
        pension_deduction=pension,
        fsp_rate=rate,
        solidarity_fund=solidarity,
        withholding_tax=withholding,
        employer_health=ZERO if exempt else _q2(gross * config.employer_health_rate),
        employer_pension=_q2(gross * config.employer_pension_rate),
        arl_risk_class=risk_class,
        arl_rate=arl_rate,
        arl=_q2(gross * arl_rate),
        severance=_q2(benefit_base * config.severance_rate),
        severance_interest=_q2(benefit_base * config.severance_interest_rate),
        service_bonus=_q2(benefit_base * config.service_bonus_rate),
        vacation=_q2(gross * config.vacation_rate),
        sena=ZERO if exempt else _q2(gross * config.sena_rate),
        icbf=ZERO if exempt else _q2(gross * config.icbf_rate),
        compensation_fund=_q2(gross * config.compensation_fund_rate),
        law_114_1_applied=exempt,
        ibc_smmlv=(gross / config.minimum_wage).quantize(Q2, rounding=ROUND_HALF_UP),
    )


def validate_payroll(
    employee: EmployeeProfile,
    hours: HoursWorked,
    calculation: PayrollCalculation,
    config: PayrollConfig,
) -> PayrollValidation:
    result = PayrollValidation()

    minimum_ok = True
    if employee.salary_type == "monthly" and calculation.base_salary < config.minimum_wage:
        minimum_ok = False
        result.errors.append(
            f"Monthly salary {calculation.base_salary} is below the minimum wage {config.minimum_wage}."
        )
    if employee.salary_type == "hourly" and calculation.hourly_value < _q2(config.minimum_wage / config.monthly_hours):
        minimum_ok = False
        result.errors.append("Hourly rate is below the minimum wage hourly equivalent.")
    if hours.regular_hours > config.monthly_hours:
        result.errors.append(f"Regular hours exceed the monthly limit of {config.monthly_hours}.")
    if calculation.net_pay < ZERO:
        result.errors.append("Net pay is negative.")

    if hours.overtime_hours > MAX_MONTHLY_OVERTIME_HOURS:
        result.warnings.append(f"Overtime above {MAX_MONTHLY_OVERTIME_HOURS} hours in the month.")
    if employee.arl_risk_class is None:
        result.warnings.append(f"ARL risk class not set; class {calculation.arl_risk_class} applied.")
    if calculation.gross_pay == ZERO:
        result.warnings.append("No payable hours in the period.")

    below_cap = calculation.base_salary <= config.minimum_wage * config.transport_allowance_max_smmlv
    expected_allowance = below_cap and (employee.transport_allowance_eligible or employee.teleworking)
    result.compliance = {
        "minimum_wage": minimum_ok,
        "transport_allowance": expected_allowance == (calculation.total_allowances > ZERO),
        "social_security": calculation.health_deduction > ZERO or calculation.gross_pay == ZERO,
        "law_114_1": calculation.law_114_1_applied,
    }
    return result


def summarize_payroll(
    rows: Sequence[tuple[EmployeeProfile, PayrollCalculation]],
    config: PayrollConfig,
) -> dict[str, object]:
    totals = {
        "gross_pay": ZERO,
        "total_allowances": ZERO,
        "total_deductions": ZERO,
        "net_pay": ZERO,
        "employer_contributions": ZERO,
        "benefits": ZERO,
        "parafiscales": ZERO,
        "employer_cost": ZERO,
    }
    by_department: dict[str, dict[str, object]] = {}
    alerts: list[dict[str, str]] = []
    law_employees = 0
    law_savings = ZERO

    for employee, calc in rows:
        totals["gross_pay"] += calc.gross_pay
        totals["total_allowances"] += calc.total_allowances
        totals["total_deductions"] += calc.total_deductions
        totals["net_pay"] += calc.net_pay
        totals["employer_contributions"] += calc.total_employer_contributions
        totals["benefits"] += calc.total_benefits
        totals["parafiscales"] += calc.total_parafiscales
        totals["employer_cost"] += calc.employer_cost

        bucket = by_department.setdefault(
            employee.department,
            {"employees": 0, "gross_pay": ZERO, "net_pay": ZERO, "employer_cost": ZERO},
        )
        bucket["employees"] = int(bucket["employees"]) + 1
        bucket["gross_pay"] = bucket["gross_pay"] + calc.gross_pay
        bucket["net_pay"] = bucket["net_pay"] + calc.net_pay
        bucket["employer_cost"] = bucket["employer_cost"] + calc.employer_cost

        if calc.law_114_1_applied:
            law_employees += 1
            law_savings += _q2(calc.gross_pay * (config.employer_health_rate + config.sena_rate + config.icbf_rate))

        if employee.salary_type == "monthly" and calc.base_salary < config.minimum_wage:
            alerts.append(
                {"level": "critical", "employee": employee.name, "message": "Salary below the minimum wage."}
            )
        if calc.overtime_hours > MAX_MONTHLY_OVERTIME_HOURS:
            alerts.append(
                {"level": "warning", "employee": employee.name, "message": "Overtime above the monthly limit."}
            )

    count = len(rows)
    average_net = _q2(totals["net_pay"] / count) if count else ZERO
    average_cost = _q2(totals["employer_cost"] / count) if count else ZERO
    factor = (
        (totals["employer_cost"] / totals["gross_pay"]).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)
        if totals["gross_pay"]
        else ZERO
    )

    return {
        "employees": count,
        "totals": {key: str(value) for key, value in totals.items()},
        "averages": {"net_pay": str(average_net), "employer_cost": str(average_cost)},
        "benefit_factor": str(factor),
        "by_department": {
            name: {
                "employees": values["employees"],
                "gross_pay": str(values["gross_pay"]),
                "net_pay": str(values["net_pay"]),
                "employer_cost": str(values["employer_cost"]),
            }
            for name, values in sorted(by_department.items())
        },
        "law_114_1": {"employees": law_employees, "savings": str(law_savings)},
        "alerts": alerts,
    }


@dataclass(frozen=True, slots=True)
class PilaRow:
    document_type: str
    document_number: str
    name: str
    days_worked: int
    ibc: Decimal
    health_employee: Decimal
    health_employer: Decimal
    pension_employee: Decimal
    pension_employer: Decimal
    solidarity_fund: Decimal
    arl_risk_class: str
    arl: Decimal
    compensation_fund: Decimal
    sena: Decimal
    icbf: Decimal
    novelties: tuple[str, ...] = ()

    @property
    def total_contributions(self) -> Decimal:
        return (
            self.health_employee
            + self.health_employer
            + self.pension_employee
            + self.pension_employer
            + self.solidarity_fund
            + self.arl
            + self.compensation_fund
            + self.sena
            + self.icbf
        )

    def as_dict(self) -> dict[str, object]:
        return {
            "document_type": self.document_type,
            "document_number": self.document_number,
            "name": self.name,
            "days_worked": self.days_worked,
            "ibc": str(self.ibc),
            "health_employee": str(self.health_employee),
            "health_employer": str(self.health_employer),
            "pension_employee": str(self.pension_employee),
            "pension_employer": str(self.pension_employer),
            "solidarity_fund": str(self.solidarity_fund),
            "arl_risk_class": self.arl_risk_class,
            "arl": str(self.arl),
            "compensation_fund": str(self.compensation_fund),
            "sena": str(self.sena),
            "icbf": str(self.icbf),
            "novelties": ",".join(self.novelties),
            "total_contributions": str(self.total_contributions),
        }


def pila_days_worked(total_hours: Decimal) -> int:
    return min(30, math.ceil(total_hours / Decimal(8)))


def pila_ibc(salary: Decimal, config: PayrollConfig) -> Decimal:
    floor = config.minimum_wage * config.ibc_min_smmlv
    ceiling = config.minimum_wage * config.ibc_max_smmlv
    return round_pila(min(max(salary, floor), ceiling))


def build_pila_row(
    employee: EmployeeProfile,
    *,
    document_type: str,
    document_number: str,
    total_hours: Decimal,
    config: PayrollConfig,
    employer: EmployerProfile | None = None,
    work_center: WorkCenter | None = None,
    novelties: Sequence[str] = (),
) -> PilaRow:
    employer = employer or EmployerProfile()
    ibc = pila_ibc(base_salary(employee, config), config)
    exempt = law_114_1_applies(ibc, employer, config)
    risk_class, arl_rate = resolve_arl(employee, work_center, config, employer.default_arl_risk_class)
    unknown = [code for code in novelties if code not in config.pila_novelties]
    if unknown:
        raise PayrollRuleError(f"Unknown PILA novelty codes: {', '.join(unknown)}.")

    return PilaRow(
        document_type=document_type,
        document_number=document_number,
        name=employee.name,
        days_worked=pila_days_worked(total_hours),
        ibc=ibc,
        health_employee=round_pila(ibc * config.employee_health_rate),
        health_employer=NO_PESOS if exempt else round_pila(ibc * config.employer_health_rate),
        pension_employee=round_pila(ibc * config.employee_pension_rate),
        pension_employer=round_pila(ibc * config.employer_pension_rate),
        solidarity_fund=NO_PESOS if employee.fsp_exempt else round_pila(ibc * fsp_rate(ibc, config)),
        arl_risk_class=risk_class,
        arl=round_pila(ibc * arl_rate),
        compensation_fund=round_pila(ibc * config.compensation_fund_rate),
        sena=NO_PESOS if exempt else round_pila(ibc * config.sena_rate),
        icbf=NO_PESOS if exempt else round_pila(ibc * config.icbf_rate),
        novelties=tuple(novelties),
    )
