"""Invite router - Endpoints for invitees and for organization admins"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Invite, User
from ..organizations.router import member_to_response
from ..organizations.schemas import MemberResponse
from .schemas import InviteCreate, InviteCreatedResponse, InviteResponse
from .service import InviteService, invite_url

router = APIRouter(prefix="/invites", tags=["Invites"])

# Admin endpoints live under the organization they belong to
organization_invites_router = APIRouter(prefix="/organizations", tags=["Invites"])


def get_invite_service(db: Session = Depends(get_db)) -> InviteService:
    """Dependency injection for InviteService"""
    return InviteService(db)


def _to_response(i: Invite) -> InviteResponse:
    return InviteResponse(
        id=i.id,
        organizationId=i.organization_id,
        organizationName=i.organization.name,
        email=i.email,
        roles=i.roles or [],
        primaryRole=i.primary_role,
        status=i.status,
        invitedBy=i.invited_by,
        inviterName=i.inviter.display_name if i.inviter else None,
        expiresAt=i.expires_at,
        createdAt=i.created_at,
    )


@router.get("/pending", response_model=list[InviteResponse])
async def list_pending_invites(
    current_user: User = Depends(get_current_user),
    service: InviteService = Depends(get_invite_service),
):
    """Open invites addressed to the current user's email"""
    return [_to_response(i) for i in service.list_pending(current_user)]


@router.get("/{token}", response_model=InviteResponse)
async def get_invite(
    token: str,
    current_user: User = Depends(get_current_user),
    service: InviteService = Depends(get_invite_service),
):
    return _to_response(service.get_invite(token))


@router.post("/{token}/accept", response_model=MemberResponse)
async def accept_invite(
    token: str,
    current_user: User = Depends(get_current_user),
    service: InviteService = Depends(get_invite_service),
):
    member = service.accept(token, current_user)
    return member_to_response(member, member.organization.owner_id)


@router.post("/{token}/decline", response_model=InviteResponse)
async def decline_invite(
    token: str,
    current_user: User = Depends(get_current_user),
    service: InviteService = Depends(get_invite_service),
):
    return _to_response(service.decline(token, current_user))


# ============================================================================
# ORGANIZATION ADMIN
# ============================================================================


@organization_invites_router.get("/{organization_id}/invites", response_model=list[InviteResponse])
async def list_organization_invites(
    organization_id: int,
    current_user: User = Depends(get_current_user),
    service: InviteService = Depends(get_invite_service),
):
    return [_to_response(i) for i in service.list_for_organization(organization_id, current_user)]


@organization_invites_router.post(
    "/{organization_id}/invites", response_model=InviteCreatedResponse, status_code=201
)
async def create_invite(
    organization_id: int,
    data: InviteCreate,
    current_user: User = Depends(get_current_user),
    service: InviteService = Depends(get_invite_service),
):
    invite, token = service.create_invite(organization_id, data, current_user)
    return InviteCreatedResponse(
        **_to_response(invite).model_dump(),
        token=token,
        inviteUrl=invite_url(token),
    )


@organization_invites_router.delete("/{organization_id}/invites/{invite_id}", status_code=204)
async def revoke_invite(
    organization_id: int,
    invite_id: int,
    current_user: User = Depends(get_current_user),
    service: InviteService = Depends(get_invite_service),
):
    service.revoke(organization_id, invite_id, current_user)
    return Response(status_code=204)
