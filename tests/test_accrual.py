from datetime import date

from equiduty.domain.availability.accrual import run_monthly_balance_maintenance
from equiduty.models import AvailabilitySettings, TimeBalance


def balance_for(db, user, organization, year, **figures):
    balance = TimeBalance(user_id=user.id, organization_id=organization.id, year=year, **figures)
    db.add(balance)
    db.commit()
    return balance


def stored(db, user, organization, year):
    return (
        db.query(TimeBalance)
        .filter(
            TimeBalance.user_id == user.id,
            TimeBalance.organization_id == organization.id,
            TimeBalance.year == year,
        )
        .first()
    )


def test_accrues_once_per_month(db, stable_setup):
    organization = stable_setup["organization"]

    first = run_monthly_balance_maintenance(db, today=date(2026, 3, 1))
    again = run_monthly_balance_maintenance(db, today=date(2026, 3, 1))

    assert first == {"organizations": 1, "rolledOver": 0, "expired": 0, "accrued": 4, "failed": 0}
    assert again["accrued"] == 0
    anna = stored(db, stable_setup["anna"], organization, 2026)
    assert anna.build_up_hours == 2.5
    assert anna.last_accrual_month == "2026-03"

    run_monthly_balance_maintenance(db, today=date(2026, 5, 1))
    assert stored(db, stable_setup["anna"], organization, 2026).build_up_hours == 5.0


def test_accrual_stops_at_balance_cap(db, stable_setup):
    organization = stable_setup["organization"]
    anna = balance_for(db, stable_setup["anna"], organization, 2026, build_up_hours=199.0)

    run_monthly_balance_maintenance(db, today=date(2026, 6, 1))

    assert anna.build_up_hours == 200.0


def test_organization_settings_drive_accrual(db, stable_setup):
    organization = stable_setup["organization"]
    db.add(AvailabilitySettings(organization_id=organization.id, monthly_accrual_hours=4.0))
    db.commit()

    run_monthly_balance_maintenance(db, today=date(2026, 6, 1))

    assert stored(db, stable_setup["bert"], organization, 2026).build_up_hours == 4.0


def test_inactive_members_do_not_accrue(db, stable_setup, make_user, add_member):
    organization = stable_setup["organization"]
    former = make_user("former@example.com")
    add_member(organization, former, status="inactive")

    totals = run_monthly_balance_maintenance(db, today=date(2026, 6, 1))

    assert totals["accrued"] == 4
    assert stored(db, former, organization, 2026) is None


def test_january_carries_capped_balance_forward(db, stable_setup):
    organization = stable_setup["organization"]
    balance_for(db, stable_setup["anna"], organization, 2026, build_up_hours=60.0)
    balance_for(db, stable_setup["bert"], organization, 2026, build_up_hours=5.0, approved_leave=16.0)

    totals = run_monthly_balance_maintenance(db, today=date(2027, 1, 1))

    assert totals["rolledOver"] == 2
    anna = stored(db, stable_setup["anna"], organization, 2027)
    assert anna.carryover_from_previous_year == 40.0
    assert anna.build_up_hours == 2.5
    assert stored(db, stable_setup["bert"], organization, 2027).carryover_from_previous_year == 0.0


def test_unused_carryover_expires_in_april(db, stable_setup):
    organization = stable_setup["organization"]
    anna = balance_for(
        db, stable_setup["anna"], organization, 2026, carryover_from_previous_year=30.0, approved_leave=12.0
    )

    march = run_monthly_balance_maintenance(db, today=date(2026, 3, 1))
    assert march["expired"] == 0
    assert anna.carryover_from_previous_year == 30.0

    april = run_monthly_balance_maintenance(db, today=date(2026, 4, 1))
    assert april["expired"] == 1
    assert anna.carryover_from_previous_year == 12.0

    assert run_monthly_balance_maintenance(db, today=date(2026, 4, 1))["expired"] == 0
    assert anna.carryover_from_previous_year == 12.0
