"""
Time-balance arithmetic for leave and overtime accounting.

A balance is tracked per member, organization and calendar year. Nothing here
touches the database; services pass the stored figures in.
"""

from datetime import date, timedelta
from typing import NamedTuple, Optional

from ...shared.validators import minutes_of_day
from ..fairness.calculator import round_half_up


class AccrualConfig(NamedTuple):
    monthly_accrual_hours: float = 2.5
    max_carryover_hours: float = 40.0
    carryover_expiry_months: int = 3
    max_balance_hours: float = 200.0


DEFAULT_ACCRUAL_CONFIG = AccrualConfig()


class BalanceFigures(NamedTuple):
    year: int
    carryover_from_previous_year: float = 0.0
    build_up_hours: float = 0.0
    corrections: float = 0.0
    approved_leave: float = 0.0
    tentative_leave: float = 0.0
    approved_overtime: float = 0.0


def figures_from(balance) -> BalanceFigures:
    """Read the figures off a TimeBalance row"""
    return BalanceFigures(
        year=balance.year,
        carryover_from_previous_year=balance.carryover_from_previous_year or 0.0,
        build_up_hours=balance.build_up_hours or 0.0,
        corrections=balance.corrections or 0.0,
        approved_leave=balance.approved_leave or 0.0,
        tentative_leave=balance.tentative_leave or 0.0,
        approved_overtime=balance.approved_overtime or 0.0,
    )


def calculate_current_balance(figures: BalanceFigures) -> float:
    balance = (
        figures.carryover_from_previous_year
        + figures.build_up_hours
        + figures.corrections
        + figures.approved_overtime
        - figures.approved_leave
    )
    return round_half_up(balance, 2)


def elapsed_fraction_of_year(year: int, as_of: date) -> float:
    """Share of the year that has passed, counting as_of itself, clamped to [0, 1]"""
    start = date(year, 1, 1)
    days_in_year = (date(year, 12, 31) - start).days + 1
    elapsed = (as_of - start).days + 1
    return min(1.0, max(0.0, elapsed / days_in_year))


def calculate_end_of_year_projection(figures: BalanceFigures, as_of: Optional[date] = None) -> float:
    """
    Extrapolate the build-up linearly to 31 December. Everything else in the
    balance is treated as already fixed for the year.
    """
    as_of = as_of or date.today()
    current = calculate_current_balance(figures)
    fraction = elapsed_fraction_of_year(figures.year, as_of)
    if fraction <= 0:
        return current

    projected_build_up = figures.build_up_hours / fraction
    return round_half_up(current - figures.build_up_hours + projected_build_up, 2)


def calculate_monthly_accrual(figures: BalanceFigures, config: AccrualConfig = DEFAULT_ACCRUAL_CONFIG) -> float:
    """Hours to add to build_up this month without exceeding the balance cap"""
    headroom = config.max_balance_hours - calculate_current_balance(figures)
    return round_half_up(max(0.0, min(config.monthly_accrual_hours, headroom)), 2)


def calculate_expired_carryover(figures: BalanceFigures) -> float:
    """Carryover not consumed by approved leave when the expiry month arrives; leave draws on carryover first"""
    return round_half_up(max(0.0, figures.carryover_from_previous_year - figures.approved_leave), 2)


def calculate_year_end_carryover(figures: BalanceFigures, config: AccrualConfig = DEFAULT_ACCRUAL_CONFIG) -> float:
    """Positive balance carried into next year, capped; deficits are not carried"""
    return min(max(calculate_current_balance(figures), 0.0), config.max_carryover_hours)


# ============================================================================
# LEAVE IMPACT
# ============================================================================

HOURS_PER_DEFAULT_WORK_DAY = 8.0

# Used when a member has no work schedule: 8 hours Monday to Friday
DEFAULT_WEEKLY_SCHEDULE = [
    {
        "dayOfWeek": day,
        "startTime": "08:00",
        "hours": HOURS_PER_DEFAULT_WORK_DAY if 1 <= day <= 5 else 0.0,
        "isWorkDay": 1 <= day <= 5,
    }
    for day in range(7)
]


def day_of_week(day: date) -> int:
    """0 = Sunday through 6 = Saturday"""
    return (day.weekday() + 1) % 7


def calculate_impact_hours(
    weekly_schedule: Optional[list],
    first_day: date,
    last_day: date,
    partial_day_type: Optional[str] = None,
    partial_start: Optional[str] = None,
    partial_end: Optional[str] = None,
) -> float:
    """
    Working hours a leave request takes out of the member's schedule.

    Partial days only apply to single-day requests: morning and afternoon
    count half the day, a custom span counts its length capped at the day's hours.
    """
    schedule = weekly_schedule if weekly_schedule else DEFAULT_WEEKLY_SCHEDULE
    hours_by_day = {
        entry["dayOfWeek"]: float(entry.get("hours") or 0)
        for entry in schedule
        if entry.get("isWorkDay")
    }

    total = 0.0
    current = first_day
    while current <= last_day:
        total += hours_by_day.get(day_of_week(current), 0.0)
        current += timedelta(days=1)

    if partial_day_type and first_day == last_day:
        if partial_day_type in ("morning", "afternoon"):
            total = total / 2
        elif partial_day_type == "custom" and partial_start and partial_end:
            span = (minutes_of_day(partial_end) - minutes_of_day(partial_start)) / 60
            total = min(max(span, 0.0), total)

    return round_half_up(total, 2)
