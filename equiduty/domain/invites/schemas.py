"""Invite domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...authorization import ORGANIZATION_ROLES
from ...shared.validators import validate_email


class InviteCreate(BaseModel):
    email: str
    roles: list[str]
    primaryRole: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("roles")
    @classmethod
    def check_roles(cls, v):
        if not v:
            raise ValueError("At least one role is required")
        unknown = [r for r in v if r not in ORGANIZATION_ROLES]
        if unknown:
            raise ValueError(f"Unknown roles: {', '.join(unknown)}")
        return list(dict.fromkeys(v))


class InviteResponse(BaseModel):
    id: int
    organizationId: int
    organizationName: str
    email: str
    roles: list[str]
    primaryRole: Optional[str] = None
    status: str
    invitedBy: int
    inviterName: Optional[str] = None
    expiresAt: datetime
    createdAt: Optional[datetime] = None


class InviteCreatedResponse(InviteResponse):
    token: str
    inviteUrl: str
