from datetime import date

from equiduty.domain.availability.balance import (
    AccrualConfig,
    BalanceFigures,
    calculate_current_balance,
    calculate_end_of_year_projection,
    calculate_expired_carryover,
    calculate_impact_hours,
    calculate_monthly_accrual,
    calculate_year_end_carryover,
    day_of_week,
    elapsed_fraction_of_year,
)


def test_current_balance_combines_all_figures():
    figures = BalanceFigures(
        year=2024,
        carryover_from_previous_year=10,
        build_up_hours=20,
        corrections=-2,
        approved_leave=8,
        tentative_leave=4,
        approved_overtime=5,
    )
    # Tentative leave does not reduce the balance until approved
    assert calculate_current_balance(figures) == 25.0


def test_elapsed_fraction_counts_as_of_day():
    assert elapsed_fraction_of_year(2024, date(2024, 7, 1)) == 0.5
    assert elapsed_fraction_of_year(2025, date(2024, 12, 31)) == 0.0
    assert elapsed_fraction_of_year(2023, date(2024, 1, 1)) == 1.0


def test_projection_extrapolates_build_up():
    figures = BalanceFigures(year=2024, build_up_hours=10)
    assert calculate_end_of_year_projection(figures, date(2024, 7, 1)) == 20.0


def test_projection_before_year_start_is_current_balance():
    figures = BalanceFigures(year=2025, carryover_from_previous_year=12, build_up_hours=0)
    assert calculate_end_of_year_projection(figures, date(2024, 12, 31)) == 12.0


def test_projection_after_year_end_is_current_balance():
    figures = BalanceFigures(year=2023, build_up_hours=30, approved_leave=5)
    assert calculate_end_of_year_projection(figures, date(2024, 2, 1)) == 25.0


def test_monthly_accrual_respects_balance_cap():
    config = AccrualConfig(monthly_accrual_hours=2.5, max_balance_hours=200)
    assert calculate_monthly_accrual(BalanceFigures(year=2024), config) == 2.5
    assert calculate_monthly_accrual(BalanceFigures(year=2024, build_up_hours=199), config) == 1.0
    assert calculate_monthly_accrual(BalanceFigures(year=2024, build_up_hours=210), config) == 0.0


def test_expired_carryover_is_what_leave_did_not_use():
    assert calculate_expired_carryover(BalanceFigures(year=2024, carryover_from_previous_year=40, approved_leave=15)) == 25
    assert calculate_expired_carryover(BalanceFigures(year=2024, carryover_from_previous_year=40, approved_leave=50)) == 0


def test_year_end_carryover_is_capped_and_never_negative():
    config = AccrualConfig(max_carryover_hours=40)
    assert calculate_year_end_carryover(BalanceFigures(year=2024, build_up_hours=60), config) == 40
    assert calculate_year_end_carryover(BalanceFigures(year=2024, build_up_hours=12.5), config) == 12.5
    assert calculate_year_end_carryover(BalanceFigures(year=2024, approved_leave=5), config) == 0


def test_day_of_week_starts_on_sunday():
    assert day_of_week(date(2024, 3, 3)) == 0
    assert day_of_week(date(2024, 3, 4)) == 1
    assert day_of_week(date(2024, 3, 9)) == 6


def test_impact_hours_default_schedule_full_week():
    assert calculate_impact_hours(None, date(2024, 3, 4), date(2024, 3, 10)) == 40.0


def test_impact_hours_weekend_day_costs_nothing():
    assert calculate_impact_hours(None, date(2024, 3, 9), date(2024, 3, 9)) == 0.0


def test_impact_hours_half_day():
    assert calculate_impact_hours(None, date(2024, 3, 4), date(2024, 3, 4), "morning") == 4.0
    assert calculate_impact_hours(None, date(2024, 3, 4), date(2024, 3, 4), "afternoon") == 4.0


def test_impact_hours_custom_span_is_capped_at_day_hours():
    monday = date(2024, 3, 4)
    assert calculate_impact_hours(None, monday, monday, "custom", "09:00", "11:30") == 2.5
    assert calculate_impact_hours(None, monday, monday, "custom", "06:00", "18:00") == 8.0


def test_impact_hours_partial_day_ignored_for_ranges():
    assert calculate_impact_hours(None, date(2024, 3, 4), date(2024, 3, 5), "morning") == 16.0


def test_impact_hours_member_schedule():
    schedule = [
        {"dayOfWeek": 1, "startTime": "07:00", "hours": 6, "isWorkDay": True},
        {"dayOfWeek": 2, "startTime": "07:00", "hours": 6, "isWorkDay": False},
    ]
    assert calculate_impact_hours(schedule, date(2024, 3, 4), date(2024, 3, 5)) == 6.0
