from __future__ import annotations

from datetime import time
from decimal import Decimal

import pytest

from hyr_admin.services.time_rules import (
    TimeRuleError,
    WorkdayRules,
    compute_hours,
    compute_pay,
    late_minutes,
    resolve_hourly_rate,
)

RULES = WorkdayRules()


def test_regular_day_with_lunch_splits_overtime() -> None:
    hours = compute_hours(time(7, 0), time(17, 0), rules=RULES)

    assert hours.worked_minutes == 540
    assert hours.worked_hours == Decimal("9.00")
    assert hours.regular_hours == Decimal("7.30")
    assert hours.overtime_hours == Decimal("1.70")
    assert hours.night_hours == Decimal("0.00")
    assert hours.crosses_midnight is False


def test_night_shift_crossing_midnight_counts_night_hours() -> None:
    hours = compute_hours(time(22, 0), time(6, 0), rules=RULES, lunch_deducted=False)

    assert hours.crosses_midnight is True
    assert hours.worked_hours == Decimal("8.00")
    assert hours.regular_hours == Decimal("7.30")
    assert hours.overtime_hours == Decimal("0.70")
    assert hours.night_hours == Decimal("8.00")


def test_short_night_overlap_below_minimum_is_ignored() -> None:
    hours = compute_hours(time(21, 0), time(22, 20), rules=RULES, lunch_deducted=False)

    assert hours.night_hours == Decimal("0.00")


def test_shift_over_daily_maximum_is_rejected() -> None:
    with pytest.raises(TimeRuleError):
        compute_hours(time(5, 0), time(19, 0), rules=RULES, lunch_deducted=False)


def test_shift_shorter_than_lunch_is_rejected() -> None:
    with pytest.raises(TimeRuleError):
        compute_hours(time(8, 0), time(8, 30), rules=RULES)


def test_late_minutes_respect_tolerance_and_cap() -> None:
    assert late_minutes(time(7, 20), time(7, 0), RULES) == (20, 15)
    assert late_minutes(time(7, 4), None, RULES) == (4, 0)
    assert late_minutes(time(6, 50), None, RULES) == (0, 0)
    # Arrivals beyond the cap are treated as a different shift.
    assert late_minutes(time(12, 0), time(7, 0), RULES) == (0, 0)


def test_compute_pay_applies_overtime_multiplier() -> None:
    hours = compute_hours(time(7, 0), time(17, 0), rules=RULES)
    pay = compute_pay(hours, Decimal("10000"), RULES)

    assert pay.regular_pay == Decimal("73000.00")
    assert pay.overtime_pay == Decimal("21250.00")
    assert pay.night_pay == Decimal("0.00")
    assert pay.late_discount == Decimal("0.00")
    assert pay.total_pay == Decimal("94250.00")


def test_compute_pay_discounts_penalized_lateness() -> None:
    hours = compute_hours(time(7, 20), time(16, 20), rules=RULES)
    pay = compute_pay(hours, Decimal("10000"), RULES)

    assert hours.penalized_late_minutes == 15
    assert pay.late_discount == Decimal("2500.00")
    assert pay.regular_pay == Decimal("70500.00")
    assert pay.overtime_pay == Decimal("8750.00")
    assert pay.total_pay == Decimal("79250.00")


def test_hourly_rate_derived_from_monthly_salary() -> None:
    rate = resolve_hourly_rate(
        is_hourly=False,
        monthly_salary=Decimal("1423500"),
        hourly_rate=None,
        daily_rate=None,
        rules=RULES,
    )

    assert rate == Decimal("8125.00")


def test_hourly_rate_requires_salary_information() -> None:
    with pytest.raises(TimeRuleError):
        resolve_hourly_rate(is_hourly=False, monthly_salary=None, hourly_rate=None, daily_rate=None, rules=RULES)


def test_rules_from_mapping_validates_limits() -> None:
    rules = WorkdayRules.from_mapping({"late_tolerance_minutes": "10", "night_start": "21:00"})
    assert rules.late_tolerance_minutes == 10
    assert rules.night_start == time(21, 0)

    with pytest.raises(TimeRuleError):
        WorkdayRules.from_mapping({"max_daily_hours": "6"})
