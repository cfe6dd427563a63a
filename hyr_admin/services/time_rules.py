"""Workday arithmetic for time entries: worked hours, night hours, lateness and pay.

All functions are pure. Times are wall-clock ``datetime.time`` values; a
departure at or before the arrival means the shift ends on the next day.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from datetime import time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0.00")
Q2 = Decimal("0.01")
MINUTES_PER_DAY = 24 * 60


class TimeRuleError(ValueError):
    """Raised when a time entry violates workday rules."""


def _q2(value: Decimal) -> Decimal:
    return value.quantize(Q2, rounding=ROUND_HALF_UP)


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _parse_time(value: object, field_name: str) -> time:
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value))
    except ValueError as exc:
        raise TimeRuleError(f"{field_name} must be a HH:MM time.") from exc


def _parse_decimal(value: object, field_name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise TimeRuleError(f"{field_name} must be numeric.") from exc


@dataclass(frozen=True, slots=True)
class WorkdayRules:
    daily_legal_hours: Decimal = Decimal("7.3")
    max_daily_hours: Decimal = Decimal("12")
    overtime_multiplier: Decimal = Decimal("1.25")
    late_tolerance_minutes: int = 5
    # Arrivals later than this are treated as a different shift, not lateness.
    max_late_minutes: int = 240
    lunch_minutes: int = 60
    night_start: time = time(22, 0)
    night_end: time = time(6, 0)
    night_premium_rate: Decimal = Decimal("0.35")
    min_night_hours: Decimal = Decimal("0.5")
    default_expected_arrival: time = time(7, 0)
    monthly_working_days: int = 24

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> WorkdayRules:
        defaults = cls()
        values: dict[str, object] = {}
        for field_name in (
            "daily_legal_hours",
            "max_daily_hours",
            "overtime_multiplier",
            "night_premium_rate",
            "min_night_hours",
        ):
            raw = data.get(field_name)
            values[field_name] = getattr(defaults, field_name) if raw is None else _parse_decimal(raw, field_name)
        for field_name in ("late_tolerance_minutes", "max_late_minutes", "lunch_minutes", "monthly_working_days"):
            raw = data.get(field_name)
            values[field_name] = getattr(defaults, field_name) if raw is None else int(_parse_decimal(raw, field_name))
        for field_name in ("night_start", "night_end", "default_expected_arrival"):
            raw = data.get(field_name)
            values[field_name] = getattr(defaults, field_name) if raw is None else _parse_time(raw, field_name)

        rules = cls(**values)
        rules.validate()
        return rules

    def validate(self) -> None:
        if self.daily_legal_hours <= 0:
            raise TimeRuleError("daily_legal_hours must be greater than zero.")
        if self.max_daily_hours < self.daily_legal_hours:
            raise TimeRuleError("max_daily_hours must be greater than or equal to daily_legal_hours.")
        if self.overtime_multiplier < 1:
            raise TimeRuleError("overtime_multiplier must be at least 1.")
        if self.night_premium_rate < 0 or self.min_night_hours < 0:
            raise TimeRuleError("Night premium settings must be non-negative.")
        if self.late_tolerance_minutes < 0 or self.lunch_minutes < 0:
            raise TimeRuleError("Minute settings must be non-negative.")
        if self.monthly_working_days <= 0:
            raise TimeRuleError("monthly_working_days must be greater than zero.")
        if self.night_start == self.night_end:
            raise TimeRuleError("night_start and night_end must differ.")

    def to_mapping(self) -> dict[str, object]:
        payload: dict[str, object] = {}
        for key, value in asdict(self).items():
            if isinstance(value, time):
                payload[key] = value.strftime("%H:%M")
            elif isinstance(value, Decimal):
                payload[key] = str(value)
            else:
                payload[key] = value
        return payload


@dataclass(frozen=True, slots=True)
class WorkedHours:
    span_minutes: int
    worked_minutes: int
    worked_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    night_hours: Decimal
    late_minutes: int
    penalized_late_minutes: int
    crosses_midnight: bool


@dataclass(frozen=True, slots=True)
class EntryPay:
    hourly_rate: Decimal
    regular_pay: Decimal
    overtime_pay: Decimal
    night_pay: Decimal
    late_discount: Decimal
    total_pay: Decimal


def night_windows(rules: WorkdayRules) -> list[tuple[int, int]]:
    """Night intervals in minutes over a two-day timeline starting at 00:00 of the work date."""

    start = _minutes(rules.night_start)
    end = _minutes(rules.night_end)
    if start > end:
        return [
            (0, end),
            (start, MINUTES_PER_DAY + end),
            (MINUTES_PER_DAY + start, 2 * MINUTES_PER_DAY),
        ]
    return [(start, end), (MINUTES_PER_DAY + start, MINUTES_PER_DAY + end)]


def night_minutes(start_minute: int, end_minute: int, rules: WorkdayRules) -> int:
    total = 0
    for window_start, window_end in night_windows(rules):
        overlap = min(end_minute, window_end) - max(start_minute, window_start)
        if overlap > 0:
            total += overlap
    return total


def late_minutes(arrival: time, expected_arrival: time | None, rules: WorkdayRules) -> tuple[int, int]:
    """Return (late, penalized) minutes for an arrival."""

    expected = expected_arrival or rules.default_expected_arrival
    late = _minutes(arrival) - _minutes(expected)
    if late <= 0 or late > rules.max_late_minutes:
        return 0, 0
    return late, max(0, late - rules.late_tolerance_minutes)


def compute_hours(
    arrival: time,
    departure: time,
    *,
    rules: WorkdayRules,
    lunch_deducted: bool = True,
    expected_arrival: time | None = None,
) -> WorkedHours:
    start = _minutes(arrival)
    end = _minutes(departure)
    crosses_midnight = end <= start
    if crosses_midnight:
        end += MINUTES_PER_DAY

    span = end - start
    worked = span - rules.lunch_minutes if lunch_deducted else span
    if worked <= 0:
        raise TimeRuleError("Worked time must be greater than zero after the lunch deduction.")

    worked_hours = _q2(Decimal(worked) / Decimal(60))
    if worked_hours > rules.max_daily_hours:
        raise TimeRuleError(
            f"Worked hours ({worked_hours}) exceed the daily maximum of {rules.max_daily_hours}."
        )

    regular_hours = min(worked_hours, _q2(rules.daily_legal_hours))
    overtime_hours = worked_hours - regular_hours

    night = min(night_minutes(start, end, rules), worked)
    night_hours = _q2(Decimal(night) / Decimal(60))
    if night_hours < rules.min_night_hours:
        night_hours = ZERO

    late, penalized = late_minutes(arrival, expected_arrival, rules)

    return WorkedHours(
        span_minutes=span,
        worked_minutes=worked,
        worked_hours=worked_hours,
        regular_hours=regular_hours,
        overtime_hours=overtime_hours,
        night_hours=night_hours,
        late_minutes=late,
        penalized_late_minutes=penalized,
        crosses_midnight=crosses_midnight,
    )


def resolve_hourly_rate(
    *,
    is_hourly: bool,
    monthly_salary: Decimal | None,
    hourly_rate: Decimal | None,
    daily_rate: Decimal | None,
    rules: WorkdayRules,
) -> Decimal:
    if is_hourly and hourly_rate:
        return _q2(hourly_rate)
    if daily_rate:
        return _q2(daily_rate / rules.daily_legal_hours)
    if monthly_salary:
        return _q2(monthly_salary / (rules.daily_legal_hours * rules.monthly_working_days))
    if hourly_rate:
        return _q2(hourly_rate)
    raise TimeRuleError("Personnel has no salary information to derive an hourly rate.")


def compute_pay(hours: WorkedHours, hourly_rate: Decimal, rules: WorkdayRules) -> EntryPay:
    late_hours = Decimal(hours.penalized_late_minutes) / Decimal(60)
    late_discount = _q2(min(hours.regular_hours, late_hours) * hourly_rate)
    regular_pay = _q2(hours.regular_hours * hourly_rate) - late_discount
    overtime_pay = _q2(hours.overtime_hours * hourly_rate * rules.overtime_multiplier)
    night_pay = _q2(hours.night_hours * hourly_rate * rules.night_premium_rate)
    return EntryPay(
        hourly_rate=hourly_rate,
        regular_pay=regular_pay,
        overtime_pay=overtime_pay,
        night_pay=night_pay,
        late_discount=late_discount,
        total_pay=regular_pay + overtime_pay + night_pay,
    )
