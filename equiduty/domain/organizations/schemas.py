"""Organization domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...authorization import ORGANIZATION_ROLES
from ...shared.validators import validate_email, validate_phone


def _validate_roles(roles: Optional[list[str]]) -> Optional[list[str]]:
    if roles is None:
        return roles
    unknown = [r for r in roles if r not in ORGANIZATION_ROLES]
    if unknown:
        raise ValueError(f"Unknown roles: {', '.join(unknown)}")
    # Keep order, drop duplicates
    return list(dict.fromkeys(roles))


class OrganizationCreate(BaseModel):
    """Schema for creating a new organization"""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    contactEmail: Optional[str] = None
    phone: Optional[str] = None
    timezone: str = "Europe/Stockholm"

    @field_validator("contactEmail")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)


class OrganizationUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    contactEmail: Optional[str] = None
    phone: Optional[str] = None
    timezone: Optional[str] = None

    @field_validator("contactEmail")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)


class OrganizationResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    ownerId: int
    contactEmail: Optional[str] = None
    phone: Optional[str] = None
    timezone: str
    subscriptionTier: str
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class OrganizationStatsResponse(BaseModel):
    stableCount: int
    memberCount: int
    horseCount: int
    contactCount: int


class MemberResponse(BaseModel):
    id: int
    userId: int
    email: str
    displayName: str
    roles: list[str]
    primaryRole: Optional[str] = None
    status: str
    showInPlanning: bool
    isOwner: bool = False
    joinedAt: Optional[datetime] = None


class MemberUpdate(BaseModel):
    roles: Optional[list[str]] = None
    primaryRole: Optional[str] = None
    status: Optional[str] = None
    showInPlanning: Optional[bool] = None

    @field_validator("roles")
    @classmethod
    def check_roles(cls, v):
        if v is not None and not v:
            raise ValueError("A member needs at least one role")
        return _validate_roles(v)

    @field_validator("primaryRole")
    @classmethod
    def check_primary_role(cls, v):
        if v is not None and v not in ORGANIZATION_ROLES:
            raise ValueError(f"Unknown role: {v}")
        return v

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        if v is not None and v not in ("active", "inactive"):
            raise ValueError("Status must be 'active' or 'inactive'")
        return v
