from __future__ import annotations

from decimal import Decimal

import pytest

from hyr_admin.core.payroll_config import PAYROLL_2025, UnknownPayrollYearError, get_payroll_config
from hyr_admin.services.payroll_rules import (
    EmployeeProfile,
    EmployerProfile,
    HoursWorked,
    PayrollRuleError,
    build_pila_row,
    calculate_payroll,
    fsp_rate,
    pila_days_worked,
    pila_ibc,
    summarize_payroll,
    validate_payroll,
    withholding_tax,
)

MINIMUM_WAGE = Decimal("1423500")


def _monthly(salary: Decimal = MINIMUM_WAGE, **overrides: object) -> EmployeeProfile:
    values: dict[str, object] = {
        "name": "Ana Gomez",
        "salary_type": "monthly",
        "monthly_salary": salary,
        "department": "obra",
        "arl_risk_class": "I",
    }
    values.update(overrides)
    return EmployeeProfile(**values)


def test_minimum_wage_employee_deductions_and_net_pay() -> None:
    calc = calculate_payroll(_monthly(), HoursWorked(regular_hours=Decimal("192")), config=PAYROLL_2025)

    assert calc.gross_pay == Decimal("1423500.00")
    assert calc.transport_allowance == Decimal("200000.00")
    assert calc.connectivity_allowance == Decimal("0.00")
    assert calc.health_deduction == Decimal("56940.00")
    assert calc.pension_deduction == Decimal("56940.00")
    assert calc.solidarity_fund == Decimal("0.00")
    assert calc.withholding_tax == Decimal("0.00")
    assert calc.net_pay == Decimal("1509620.00")


def test_minimum_wage_employer_contributions_and_benefits() -> None:
    calc = calculate_payroll(_monthly(), HoursWorked(regular_hours=Decimal("192")), config=PAYROLL_2025)

    assert calc.employer_health == Decimal("120997.50")
    assert calc.employer_pension == Decimal("170820.00")
    assert calc.arl == Decimal("7430.67")
    # Transport allowance enters the severance and bonus base.
    assert calc.severance == Decimal("135237.55")
    assert calc.severance_interest == Decimal("16235.00")
    assert calc.service_bonus == Decimal("135237.55")
    assert calc.vacation == Decimal("59359.95")
    assert calc.sena == Decimal("28470.00")
    assert calc.icbf == Decimal("42705.00")
    assert calc.compensation_fund == Decimal("56940.00")
    assert calc.employer_cost == Decimal("2396933.22")
    assert calc.law_114_1_applied is False


def test_law_114_1_exonerates_health_sena_and_icbf() -> None:
    calc = calculate_payroll(
        _monthly(),
        HoursWorked(regular_hours=Decimal("192")),
        config=PAYROLL_2025,
        employer=EmployerProfile(qualifies_law_114_1=True),
    )

    assert calc.law_114_1_applied is True
    assert calc.employer_health == Decimal("0.00")
    assert calc.sena == Decimal("0.00")
    assert calc.icbf == Decimal("0.00")
    assert calc.employer_pension == Decimal("170820.00")


def test_law_114_1_not_applied_above_ten_minimum_wages() -> None:
    calc = calculate_payroll(
        _monthly(MINIMUM_WAGE * 10),
        HoursWorked(regular_hours=Decimal("192")),
        config=PAYROLL_2025,
        employer=EmployerProfile(qualifies_law_114_1=True),
    )

    assert calc.law_114_1_applied is False
    assert calc.sena > Decimal("0")


def test_daytime_overtime_uses_hourly_value_of_monthly_salary() -> None:
    calc = calculate_payroll(
        _monthly(),
        HoursWorked(regular_hours=Decimal("192"), overtime_day_hours=Decimal("4")),
        config=PAYROLL_2025,
    )

    assert calc.overtime_hours == Decimal("4")
    assert calc.overtime_pay == Decimal("37070.31")


def test_teleworker_gets_connectivity_instead_of_transport() -> None:
    calc = calculate_payroll(
        _monthly(teleworking=True),
        HoursWorked(regular_hours=Decimal("192")),
        config=PAYROLL_2025,
    )

    assert calc.transport_allowance == Decimal("0.00")
    assert calc.connectivity_allowance == Decimal("200000.00")


def test_no_transport_allowance_above_two_minimum_wages() -> None:
    calc = calculate_payroll(
        _monthly(Decimal("4270500")),
        HoursWorked(regular_hours=Decimal("192")),
        config=PAYROLL_2025,
    )

    assert calc.transport_allowance == Decimal("0.00")
    assert calc.total_allowances == Decimal("0.00")


def test_hourly_employee_paid_for_registered_hours() -> None:
    employee = EmployeeProfile(name="Luis Rojas", salary_type="hourly", hourly_rate=Decimal("10000"), arl_risk_class="II")
    calc = calculate_payroll(employee, HoursWorked(regular_hours=Decimal("100")), config=PAYROLL_2025)

    assert calc.regular_pay == Decimal("1000000.00")
    assert calc.arl_risk_class == "II"


def test_missing_salary_is_a_rule_error() -> None:
    with pytest.raises(PayrollRuleError):
        calculate_payroll(_monthly(None), HoursWorked(), config=PAYROLL_2025)


def test_unknown_arl_class_is_a_rule_error() -> None:
    with pytest.raises(PayrollRuleError):
        calculate_payroll(_monthly(arl_risk_class="VI"), HoursWorked(), config=PAYROLL_2025)


def test_fsp_rate_brackets() -> None:
    assert fsp_rate(Decimal("4000000"), PAYROLL_2025) == Decimal("0")
    assert fsp_rate(Decimal("5694000"), PAYROLL_2025) == Decimal("0.01")
    assert fsp_rate(MINIMUM_WAGE * 20, PAYROLL_2025) == Decimal("0.02")


def test_solidarity_fund_charged_above_four_minimum_wages() -> None:
    calc = calculate_payroll(_monthly(Decimal("6000000")), HoursWorked(regular_hours=Decimal("192")), config=PAYROLL_2025)

    assert calc.fsp_rate == Decimal("0.01")
    assert calc.solidarity_fund == Decimal("60000.00")


def test_overtime_does_not_push_salary_into_solidarity_bracket() -> None:
    calc = calculate_payroll(
        _monthly(Decimal("5600000")),
        HoursWorked(regular_hours=Decimal("192"), overtime_day_hours=Decimal("10")),
        config=PAYROLL_2025,
    )

    assert calc.gross_pay == Decimal("5964583.33")
    assert calc.fsp_rate == Decimal("0")
    assert calc.solidarity_fund == Decimal("0.00")


def test_part_month_hourly_worker_pays_solidarity_on_base_salary() -> None:
    employee = EmployeeProfile(name="Marta Diaz", salary_type="hourly", hourly_rate=Decimal("40000"), arl_risk_class="I")
    calc = calculate_payroll(employee, HoursWorked(regular_hours=Decimal("40")), config=PAYROLL_2025)

    assert calc.base_salary == Decimal("7680000.00")
    assert calc.gross_pay == Decimal("1600000.00")
    assert calc.fsp_rate == Decimal("0.01")
    assert calc.solidarity_fund == Decimal("76800.00")


def test_law_114_1_eligibility_follows_base_salary() -> None:
    employee = EmployeeProfile(name="Marta Diaz", salary_type="hourly", hourly_rate=Decimal("80000"), arl_risk_class="I")
    calc = calculate_payroll(
        employee,
        HoursWorked(regular_hours=Decimal("40")),
        config=PAYROLL_2025,
        employer=EmployerProfile(qualifies_law_114_1=True),
    )

    assert calc.gross_pay == Decimal("3200000.00")
    assert calc.law_114_1_applied is False
    assert calc.sena == Decimal("64000.00")


def test_employer_default_arl_class_applies_when_employee_has_none() -> None:
    employee = _monthly(arl_risk_class=None)
    hours = HoursWorked(regular_hours=Decimal("192"))
    employer = EmployerProfile(default_arl_risk_class="I")
    calc = calculate_payroll(employee, hours, config=PAYROLL_2025, employer=employer)

    validation = validate_payroll(employee, hours, calc, PAYROLL_2025)

    assert calc.arl_risk_class == "I"
    assert calc.arl == Decimal("7430.67")
    assert "ARL risk class not set; class I applied." in validation.warnings

    row = build_pila_row(
        employee,
        document_type="CC",
        document_number="1010101010",
        total_hours=Decimal("240"),
        config=PAYROLL_2025,
        employer=employer,
    )
    assert row.arl_risk_class == "I"
    assert row.arl == Decimal("7431")


def test_withholding_tax_uses_article_383_table() -> None:
    assert withholding_tax(Decimal("3000000"), PAYROLL_2025) == Decimal("0.00")
    assert withholding_tax(Decimal("7059750"), PAYROLL_2025) == Decimal("491829.25")


def test_validation_flags_salary_below_minimum_wage() -> None:
    employee = _monthly(Decimal("1000000"))
    hours = HoursWorked(regular_hours=Decimal("192"))
    calc = calculate_payroll(employee, hours, config=PAYROLL_2025)

    validation = validate_payroll(employee, hours, calc, PAYROLL_2025)

    assert validation.is_valid is False
    assert validation.compliance["minimum_wage"] is False


def test_validation_warns_on_missing_arl_class() -> None:
    employee = _monthly(arl_risk_class=None)
    hours = HoursWorked(regular_hours=Decimal("192"))
    calc = calculate_payroll(employee, hours, config=PAYROLL_2025)

    validation = validate_payroll(employee, hours, calc, PAYROLL_2025)

    assert validation.is_valid is True
    assert calc.arl_risk_class == "V"
    assert any("ARL" in warning for warning in validation.warnings)


def test_summarize_payroll_totals_rows() -> None:
    hours = HoursWorked(regular_hours=Decimal("192"))
    rows = [
        (_monthly(), calculate_payroll(_monthly(), hours, config=PAYROLL_2025)),
        (_monthly(name="Pedro"), calculate_payroll(_monthly(name="Pedro"), hours, config=PAYROLL_2025)),
    ]

    summary = summarize_payroll(rows, PAYROLL_2025)

    assert summary["employees"] == 2
    assert summary["totals"]["gross_pay"] == "2847000.00"
    assert summary["by_department"]["obra"]["employees"] == 2
    assert summary["alerts"] == []


def test_pila_days_and_ibc_bounds() -> None:
    assert pila_days_worked(Decimal("100")) == 13
    assert pila_days_worked(Decimal("300")) == 30
    assert pila_ibc(Decimal("1000000"), PAYROLL_2025) == Decimal("1423500")
    assert pila_ibc(MINIMUM_WAGE * 30, PAYROLL_2025) == MINIMUM_WAGE * 25


def test_pila_row_rounds_to_whole_pesos() -> None:
    row = build_pila_row(
        _monthly(),
        document_type="CC",
        document_number="1010101010",
        total_hours=Decimal("240"),
        config=PAYROLL_2025,
        novelties=["ING"],
    )

    assert row.days_worked == 30
    assert row.health_employee == Decimal("56940")
    assert row.health_employer == Decimal("120998")
    assert row.pension_employee == Decimal("56940")
    assert row.pension_employer == Decimal("170820")
    assert row.arl == Decimal("7431")
    assert row.compensation_fund == Decimal("56940")
    assert row.sena == Decimal("28470")
    assert row.icbf == Decimal("42705")
    assert row.as_dict()["novelties"] == "ING"


def test_pila_row_rejects_unknown_novelty() -> None:
    with pytest.raises(PayrollRuleError):
        build_pila_row(
            _monthly(),
            document_type="CC",
            document_number="1010101010",
            total_hours=Decimal("240"),
            config=PAYROLL_2025,
            novelties=["XYZ"],
        )


def test_unknown_payroll_year() -> None:
    assert get_payroll_config(2025) is PAYROLL_2025
    with pytest.raises(UnknownPayrollYearError):
        get_payroll_config(1999)
