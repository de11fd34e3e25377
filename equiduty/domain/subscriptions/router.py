"""Subscription router - FastAPI endpoints for tiers and organization subscriptions"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_system_admin
from ...database import get_db
from ...models import User
from .schemas import (
    SubscriptionResponse,
    SubscriptionUpdate,
    TierDefinitionResponse,
    TierDefinitionUpdate,
)
from .service import SubscriptionService

router = APIRouter(prefix="/tiers", tags=["Subscriptions"])
organization_subscription_router = APIRouter(prefix="/organizations", tags=["Subscriptions"])


def get_subscription_service(db: Session = Depends(get_db)) -> SubscriptionService:
    """Dependency injection for SubscriptionService"""
    return SubscriptionService(db)


@router.get("", response_model=list[TierDefinitionResponse])
async def list_tiers(
    current_user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return service.list_tiers()


@router.put("/{tier}", response_model=TierDefinitionResponse)
async def update_tier(
    tier: str,
    data: TierDefinitionUpdate,
    admin: User = Depends(require_system_admin),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return service.update_tier(tier, data, admin)


@router.post("/{tier}/reset", response_model=TierDefinitionResponse)
async def reset_tier(
    tier: str,
    admin: User = Depends(require_system_admin),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return service.reset_tier(tier, admin)


@organization_subscription_router.get("/{organization_id}/subscription", response_model=SubscriptionResponse)
async def get_subscription(
    organization_id: int,
    current_user: User = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return service.get_subscription(organization_id, current_user)


@organization_subscription_router.put("/{organization_id}/subscription", response_model=SubscriptionResponse)
async def update_subscription(
    organization_id: int,
    data: SubscriptionUpdate,
    admin: User = Depends(require_system_admin),
    service: SubscriptionService = Depends(get_subscription_service),
):
    return service.update_subscription(organization_id, data, admin)
