"""Invite service - Organization invitations with signed links"""

import logging
from datetime import datetime, timedelta

from fastapi import HTTPException
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.orm import Session

from ...authorization import get_membership, require_organization_admin
from ...config import FRONTEND_URL, INVITE_TOKEN_ALGORITHM, INVITE_TOKEN_EXPIRE_DAYS, SECRET_KEY
from ...models import Invite, OrganizationMember, User
from ...plan_limits import ensure_can_add
from ..notifications.service import notify
from .schemas import InviteCreate

logger = logging.getLogger(__name__)

INVITE_TOKEN_TYPE = "organization_invite"


def create_invite_token(invite: Invite) -> str:
    payload = {
        "sub": str(invite.id),
        "email": invite.email,
        "type": INVITE_TOKEN_TYPE,
        "exp": invite.expires_at,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=INVITE_TOKEN_ALGORITHM)


def decode_invite_token(token: str) -> int:
    """Return the invite id carried by a token"""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[INVITE_TOKEN_ALGORITHM])
    except ExpiredSignatureError as e:
        raise HTTPException(status_code=410, detail="This invite has expired") from e
    except JWTError as e:
        logger.warning(f"⚠️ Invalid invite token: {e}")
        raise HTTPException(status_code=404, detail="Invite not found") from e

    if payload.get("type") != INVITE_TOKEN_TYPE or not str(payload.get("sub", "")).isdigit():
        raise HTTPException(status_code=404, detail="Invite not found")
    return int(payload["sub"])


def invite_url(token: str) -> str:
    return f"{FRONTEND_URL}/invites/{token}"


class InviteService:
    """Service layer for invite business logic"""

    def __init__(self, db: Session):
        self.db = db

    def _get_by_token(self, token: str) -> Invite:
        invite_id = decode_invite_token(token)
        invite = self.db.query(Invite).filter(Invite.id == invite_id).first()
        if not invite:
            raise HTTPException(status_code=404, detail="Invite not found")
        return invite

    def _get_open_invite_for(self, token: str, user: User) -> Invite:
        invite = self._get_by_token(token)
        if invite.email != user.email.lower():
            raise HTTPException(status_code=403, detail="This invite was sent to a different email address")
        if invite.status != "pending":
            raise HTTPException(status_code=400, detail=f"Invite has already been {invite.status}")
        if invite.expires_at < datetime.utcnow():
            raise HTTPException(status_code=410, detail="This invite has expired")
        return invite

    # ========================================================================
    # INVITEE OPERATIONS
    # ========================================================================

    def get_invite(self, token: str) -> Invite:
        return self._get_by_token(token)

    def list_pending(self, user: User) -> list[Invite]:
        return (
            self.db.query(Invite)
            .filter(
                Invite.email == user.email.lower(),
                Invite.status == "pending",
                Invite.expires_at > datetime.utcnow(),
            )
            .order_by(Invite.created_at.desc())
            .all()
        )

    def accept(self, token: str, user: User) -> OrganizationMember:
        invite = self._get_open_invite_for(token, user)
        organization = invite.organization

        member = get_membership(self.db, user.id, organization.id)
        if member and member.status == "active":
            raise HTTPException(status_code=409, detail="You are already a member of this organization")

        ensure_can_add(self.db, organization, "members")

        primary_role = invite.primary_role or invite.roles[0]
        if member:
            member.roles = invite.roles
            member.primary_role = primary_role
            member.status = "active"
        else:
            member = OrganizationMember(
                organization_id=organization.id,
                user_id=user.id,
                roles=invite.roles,
                primary_role=primary_role,
                status="active",
                invited_by=invite.invited_by,
            )
            self.db.add(member)

        invite.status = "accepted"
        invite.responded_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(member)
        logger.info(f"✅ User {user.id} joined organization {organization.id} via invite {invite.id}")
        return member

    def decline(self, token: str, user: User) -> Invite:
        invite = self._get_open_invite_for(token, user)
        invite.status = "declined"
        invite.responded_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(invite)
        logger.info(f"🔄 Invite {invite.id} declined by user {user.id}")
        return invite

    # ========================================================================
    # ADMIN OPERATIONS
    # ========================================================================

    def list_for_organization(self, organization_id: int, user: User) -> list[Invite]:
        require_organization_admin(self.db, user, organization_id)
        return (
            self.db.query(Invite)
            .filter(Invite.organization_id == organization_id)
            .order_by(Invite.created_at.desc(), Invite.id.desc())
            .all()
        )

    def create_invite(self, organization_id: int, data: InviteCreate, user: User) -> tuple[Invite, str]:
        organization = require_organization_admin(self.db, user, organization_id)
        logger.info(f"📥 Inviting {data.email} to organization {organization_id}")

        invitee = self.db.query(User).filter(User.email == data.email).first()
        if invitee:
            member = get_membership(self.db, invitee.id, organization_id)
            if member and member.status == "active":
                raise HTTPException(status_code=409, detail="This user is already a member")

        existing = (
            self.db.query(Invite)
            .filter(
                Invite.organization_id == organization_id,
                Invite.email == data.email,
                Invite.status == "pending",
                Invite.expires_at > datetime.utcnow(),
            )
            .first()
        )
        if existing:
            raise HTTPException(status_code=409, detail="An invite is already pending for this email")

        ensure_can_add(self.db, organization, "members")

        if data.primaryRole and data.primaryRole not in data.roles:
            raise HTTPException(status_code=400, detail="Primary role must be one of the invited roles")

        invite = Invite(
            organization_id=organization_id,
            email=data.email,
            roles=data.roles,
            primary_role=data.primaryRole or data.roles[0],
            invited_by=user.id,
            expires_at=datetime.utcnow() + timedelta(days=INVITE_TOKEN_EXPIRE_DAYS),
        )
        self.db.add(invite)
        self.db.flush()

        if invitee:
            notify(
                self.db,
                invitee.id,
                "organization_invite",
                f"You have been invited to join {organization.name}",
                message=f"{user.display_name} invited you as {', '.join(data.roles)}.",
                organization_id=organization_id,
                entity_type="invite",
                entity_id=invite.id,
            )

        self.db.commit()
        self.db.refresh(invite)
        logger.info(f"✅ Invite {invite.id} created")
        return invite, create_invite_token(invite)

    def revoke(self, organization_id: int, invite_id: int, user: User) -> None:
        require_organization_admin(self.db, user, organization_id)
        invite = (
            self.db.query(Invite)
            .filter(Invite.id == invite_id, Invite.organization_id == organization_id)
            .first()
        )
        if not invite:
            raise HTTPException(status_code=404, detail="Invite not found")
        if invite.status != "pending":
            raise HTTPException(status_code=400, detail="Only pending invites can be revoked")

        invite.status = "revoked"
        invite.responded_at = datetime.utcnow()
        self.db.commit()
        logger.info(f"🗑️ Invite {invite_id} revoked by user {user.id}")
