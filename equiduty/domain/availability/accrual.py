"""
Periodic time-balance maintenance run by the background worker.

Each step is safe to re-run for the same day: accrual is keyed by
last_accrual_month, the year rollover recomputes the same carryover from the
closed year, and expiry leaves nothing more to expire once applied.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...authorization import list_active_members
from ...models import Organization
from ..fairness.calculator import round_half_up
from .balance import (
    DEFAULT_ACCRUAL_CONFIG,
    AccrualConfig,
    calculate_expired_carryover,
    calculate_monthly_accrual,
    calculate_year_end_carryover,
    figures_from,
)
from .repository import AvailabilityRepository
from .service import accrual_config_from

logger = logging.getLogger(__name__)


def _config_for(db: Session, organization_id: int) -> AccrualConfig:
    settings = AvailabilityRepository.get_settings(db, organization_id)
    return accrual_config_from(settings) if settings else DEFAULT_ACCRUAL_CONFIG


def roll_over_year(db: Session, organization: Organization, new_year: int, config: AccrualConfig) -> int:
    """Carry each member's closed-year balance into new_year"""
    repo = AvailabilityRepository()
    rolled = 0
    for member in list_active_members(db, organization.id):
        previous = repo.get_balance(db, member.user_id, organization.id, new_year - 1)
        if not previous:
            continue
        carryover = calculate_year_end_carryover(figures_from(previous), config)
        balance = repo.get_or_add_balance(db, member.user_id, organization.id, new_year)
        balance.carryover_from_previous_year = carryover
        rolled += 1
    return rolled


def expire_carryover(db: Session, organization: Organization, year: int) -> int:
    """Drop the part of last year's carryover that leave has not used up"""
    repo = AvailabilityRepository()
    expired_count = 0
    for member in list_active_members(db, organization.id):
        balance = repo.get_balance(db, member.user_id, organization.id, year)
        if not balance:
            continue
        expired = calculate_expired_carryover(figures_from(balance))
        if expired <= 0:
            continue
        balance.carryover_from_previous_year = round_half_up(balance.carryover_from_previous_year - expired, 2)
        logger.info(f"🔄 Expired {expired}h carryover for user {member.user_id} in organization {organization.id}")
        expired_count += 1
    return expired_count


def accrue_month(db: Session, organization: Organization, today: date, config: AccrualConfig) -> int:
    """Add this month's build-up to every active member, at most once per month"""
    repo = AvailabilityRepository()
    month_key = today.strftime("%Y-%m")
    accrued = 0
    for member in list_active_members(db, organization.id):
        balance = repo.get_or_add_balance(db, member.user_id, organization.id, today.year)
        if balance.last_accrual_month == month_key:
            continue
        hours = calculate_monthly_accrual(figures_from(balance), config)
        balance.build_up_hours = round_half_up((balance.build_up_hours or 0.0) + hours, 2)
        balance.last_accrual_month = month_key
        accrued += 1
    return accrued


def run_monthly_balance_maintenance(db: Session, today: Optional[date] = None) -> dict:
    """
    Rollover (January only), carryover expiry (the month after the expiry
    window closes) and accrual, committed per organization so one failing
    tenant does not block the others.
    """
    today = today or date.today()
    totals = {"organizations": 0, "rolledOver": 0, "expired": 0, "accrued": 0, "failed": 0}

    for organization in db.query(Organization).all():
        config = _config_for(db, organization.id)
        try:
            if today.month == 1:
                totals["rolledOver"] += roll_over_year(db, organization, today.year, config)
            if config.carryover_expiry_months > 0 and today.month == config.carryover_expiry_months + 1:
                totals["expired"] += expire_carryover(db, organization, today.year)
            totals["accrued"] += accrue_month(db, organization, today, config)
            db.commit()
            totals["organizations"] += 1
        except Exception as e:
            db.rollback()
            totals["failed"] += 1
            logger.error(f"❌ Balance maintenance failed for organization {organization.id}: {e}")

    logger.info(
        f"📊 Balance maintenance for {today.isoformat()}: {totals['organizations']} organizations, "
        f"{totals['rolledOver']} rolled over, {totals['expired']} expired, {totals['accrued']} accrued"
    )
    return totals
