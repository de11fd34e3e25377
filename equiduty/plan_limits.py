"""
Subscription tier limits and module flags for organizations.
"""

import copy
import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from .cache import get_tier_definition_cached, set_tier_definition_cached
from .models import Contact, Horse, Organization, OrganizationMember, RoutineTemplate, Stable, TierDefinition

logger = logging.getLogger(__name__)

UNLIMITED = -1

VALID_TIERS = ["free", "standard", "pro", "enterprise"]

_LIMIT_KEYS = [
    "members",
    "stables",
    "horses",
    "routineTemplates",
    "routineSchedules",
    "feedingPlans",
    "facilities",
    "contacts",
    "supportContacts",
]


def _limits(*values: int) -> dict:
    return dict(zip(_LIMIT_KEYS, values))


def _modules(standard: bool, pro: bool) -> dict:
    return {
        "analytics": standard,
        "selectionProcess": standard,
        "locationHistory": standard,
        "photoEvidence": standard,
        "leaveManagement": pro,
        "inventory": pro,
        "lessons": pro,
        "staffMatrix": pro,
        "advancedPermissions": pro,
        "integrations": pro,
        "manure": pro,
        "aiAssistant": pro,
        "supportAccess": pro,
    }


# Prices are in SEK per month
DEFAULT_TIER_DEFINITIONS = {
    "free": {
        "tier": "free",
        "name": "Free",
        "description": "Full core product with tight quantity caps",
        "price": 0,
        "limits": _limits(3, 1, 5, 2, 1, 5, 1, 5, 0),
        "modules": _modules(False, False),
        "enabled": True,
        "sortOrder": 0,
    },
    "standard": {
        "tier": "standard",
        "name": "Standard",
        "description": "Work together, scale up and get visibility",
        "price": 299,
        "limits": _limits(15, 3, 25, 10, 5, 30, 5, 30, 0),
        "modules": _modules(True, False),
        "enabled": True,
        "sortOrder": 1,
    },
    "pro": {
        "tier": "pro",
        "name": "Pro",
        "description": "Complete operational toolkit",
        "price": 799,
        "limits": _limits(50, 10, 75, 50, 25, 100, 20, 100, 2),
        "modules": _modules(True, True),
        "enabled": True,
        "sortOrder": 2,
    },
    "enterprise": {
        "tier": "enterprise",
        "name": "Enterprise",
        "description": "Everything included with custom deals",
        "price": 0,
        "limits": _limits(*([UNLIMITED] * len(_LIMIT_KEYS))),
        "modules": _modules(True, True),
        "enabled": True,
        "sortOrder": 3,
    },
}

# Human-readable names used in limit messages
RESOURCE_LABELS = {
    "members": "members",
    "stables": "stables",
    "horses": "horses",
    "routineTemplates": "routine templates",
    "contacts": "contacts",
}


def _definition_from_row(row: TierDefinition) -> dict:
    defaults = DEFAULT_TIER_DEFINITIONS.get(row.tier, DEFAULT_TIER_DEFINITIONS["free"])
    return {
        "tier": row.tier,
        "name": row.name,
        "description": row.description,
        "price": row.price,
        # Stored overrides may predate newly added keys
        "limits": {**defaults["limits"], **(row.limits or {})},
        "modules": {**defaults["modules"], **(row.modules or {})},
        "enabled": row.enabled,
        "sortOrder": row.sort_order,
    }


def get_tier_definition(db: Session, tier: Optional[str]) -> dict:
    """Resolve a tier definition: cache, then stored override, then built-in default"""
    tier = tier if tier in VALID_TIERS else "free"

    cached = get_tier_definition_cached(tier)
    if cached:
        return cached

    row = db.query(TierDefinition).filter(TierDefinition.tier == tier).first()
    definition = _definition_from_row(row) if row else copy.deepcopy(DEFAULT_TIER_DEFINITIONS[tier])
    set_tier_definition_cached(tier, definition)
    return definition


def list_tier_definitions(db: Session) -> list[dict]:
    definitions = [get_tier_definition(db, tier) for tier in VALID_TIERS]
    return sorted(definitions, key=lambda d: d["sortOrder"])


def get_usage_stats(db: Session, organization_id: int) -> dict:
    """Count the resources an organization's tier limits apply to"""
    return {
        "members": db.query(OrganizationMember)
        .filter(
            OrganizationMember.organization_id == organization_id,
            OrganizationMember.status != "inactive",
        )
        .count(),
        "stables": db.query(Stable).filter(Stable.organization_id == organization_id).count(),
        "horses": db.query(Horse)
        .filter(Horse.organization_id == organization_id, Horse.status == "active")
        .count(),
        "routineTemplates": db.query(RoutineTemplate)
        .filter(RoutineTemplate.organization_id == organization_id, RoutineTemplate.is_active.is_(True))
        .count(),
        "contacts": db.query(Contact).filter(Contact.organization_id == organization_id).count(),
    }


def can_add(db: Session, organization: Organization, resource: str) -> tuple:
    """
    Check if an organization may create another resource of the given kind.
    Returns (can_add, error_message).
    """
    definition = get_tier_definition(db, organization.subscription_tier)
    limit = definition["limits"].get(resource, UNLIMITED)

    if limit == UNLIMITED:
        return (True, "")

    current = get_usage_stats(db, organization.id).get(resource, 0)
    if current >= limit:
        label = RESOURCE_LABELS.get(resource, resource)
        return (
            False,
            f"Your {definition['name']} plan allows {limit} {label}. Upgrade to add more.",
        )

    return (True, "")


def ensure_can_add(db: Session, organization: Organization, resource: str) -> None:
    allowed, message = can_add(db, organization, resource)
    if not allowed:
        logger.warning(f"⚠️ Organization {organization.id} reached {resource} limit")
        raise HTTPException(status_code=403, detail=message)


def has_module(db: Session, organization: Organization, module: str) -> bool:
    definition = get_tier_definition(db, organization.subscription_tier)
    return bool(definition["modules"].get(module, False))


def require_module(db: Session, organization: Organization, module: str) -> None:
    if not has_module(db, organization, module):
        logger.warning(f"⚠️ Organization {organization.id} has no access to module {module}")
        raise HTTPException(
            status_code=403,
            detail=f"The {module} module is not included in your subscription",
        )
