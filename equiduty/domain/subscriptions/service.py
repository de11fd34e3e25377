"""Subscription service - Tier definitions and organization subscriptions"""

import copy
import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...authorization import get_organization_or_404, require_organization_access
from ...cache import invalidate_tier_definition_cache
from ...models import User
from ...plan_limits import (
    DEFAULT_TIER_DEFINITIONS,
    VALID_TIERS,
    get_tier_definition,
    get_usage_stats,
    list_tier_definitions,
)
from .repository import TierRepository
from .schemas import SubscriptionUpdate, TierDefinitionUpdate

logger = logging.getLogger(__name__)


def _check_tier(tier: str) -> None:
    if tier not in VALID_TIERS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid tier '{tier}'. Must be one of: {', '.join(VALID_TIERS)}",
        )


class SubscriptionService:
    """Service layer for subscription tiers"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TierRepository()

    def list_tiers(self) -> list[dict]:
        return list_tier_definitions(self.db)

    def update_tier(self, tier: str, data: TierDefinitionUpdate, admin: User) -> dict:
        _check_tier(tier)
        logger.info(f"🔄 System admin {admin.id} updating tier '{tier}'")

        definition = copy.deepcopy(get_tier_definition(self.db, tier))
        if data.name is not None:
            definition["name"] = data.name
        if data.description is not None:
            definition["description"] = data.description
        if data.price is not None:
            definition["price"] = data.price
        if data.limits is not None:
            definition["limits"].update(data.limits)
        if data.modules is not None:
            definition["modules"].update(data.modules)
        if data.enabled is not None:
            definition["enabled"] = data.enabled
        if data.sortOrder is not None:
            definition["sortOrder"] = data.sortOrder

        self.repo.save_override(self.db, tier, definition, admin.id)
        invalidate_tier_definition_cache(tier)
        logger.info(f"✅ Tier '{tier}' updated")
        return get_tier_definition(self.db, tier)

    def reset_tier(self, tier: str, admin: User) -> dict:
        """Drop the stored override so the built-in default applies again"""
        _check_tier(tier)
        self.repo.delete_override(self.db, tier)
        invalidate_tier_definition_cache(tier)
        logger.info(f"🔄 Tier '{tier}' reset to defaults by system admin {admin.id}")
        return copy.deepcopy(DEFAULT_TIER_DEFINITIONS[tier])

    def get_subscription(self, organization_id: int, user: User) -> dict:
        organization = require_organization_access(self.db, user, organization_id)
        return self._subscription(organization)

    def update_subscription(self, organization_id: int, data: SubscriptionUpdate, admin: User) -> dict:
        organization = get_organization_or_404(self.db, organization_id)
        previous = organization.subscription_tier
        organization = self.repo.set_organization_tier(self.db, organization, data.tier)
        logger.info(f"✅ Organization {organization_id} moved from '{previous}' to '{data.tier}'")
        return self._subscription(organization)

    def _subscription(self, organization) -> dict:
        definition = get_tier_definition(self.db, organization.subscription_tier)
        return {
            "organizationId": organization.id,
            "tier": definition["tier"],
            "tierName": definition["name"],
            "limits": definition["limits"],
            "modules": definition["modules"],
            "usage": get_usage_stats(self.db, organization.id),
        }
