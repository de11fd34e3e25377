"""Subscription domain schemas - Pydantic models for tiers"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...plan_limits import VALID_TIERS


class TierDefinitionResponse(BaseModel):
    tier: str
    name: str
    description: Optional[str] = None
    price: int
    limits: dict
    modules: dict
    enabled: bool
    sortOrder: int


class TierDefinitionUpdate(BaseModel):
    """Partial override of a tier; omitted limit or module keys keep their current value"""

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[int] = None
    limits: Optional[dict[str, int]] = None
    modules: Optional[dict[str, bool]] = None
    enabled: Optional[bool] = None
    sortOrder: Optional[int] = None

    @field_validator("price")
    @classmethod
    def check_price(cls, v):
        if v is not None and v < 0:
            raise ValueError("Price cannot be negative")
        return v

    @field_validator("limits")
    @classmethod
    def check_limits(cls, v):
        if v is None:
            return v
        for key, value in v.items():
            if value < -1:
                raise ValueError(f"Limit '{key}' must be -1 (unlimited) or a non-negative number")
        return v


class SubscriptionResponse(BaseModel):
    organizationId: int
    tier: str
    tierName: str
    limits: dict
    modules: dict
    usage: dict


class SubscriptionUpdate(BaseModel):
    tier: str

    @field_validator("tier")
    @classmethod
    def check_tier(cls, v):
        if v not in VALID_TIERS:
            raise ValueError(f"Tier must be one of: {', '.join(VALID_TIERS)}")
        return v
