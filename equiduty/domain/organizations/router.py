"""Organization router - FastAPI endpoints for organizations and members"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Organization, OrganizationMember, User
from .schemas import (
    MemberResponse,
    MemberUpdate,
    OrganizationCreate,
    OrganizationResponse,
    OrganizationStatsResponse,
    OrganizationUpdate,
)
from .service import OrganizationService

router = APIRouter(prefix="/organizations", tags=["Organizations"])


def get_organization_service(db: Session = Depends(get_db)) -> OrganizationService:
    """Dependency injection for OrganizationService"""
    return OrganizationService(db)


def _to_response(o: Organization) -> OrganizationResponse:
    return OrganizationResponse(
        id=o.id,
        name=o.name,
        description=o.description,
        ownerId=o.owner_id,
        contactEmail=o.contact_email,
        phone=o.phone,
        timezone=o.timezone,
        subscriptionTier=o.subscription_tier,
        createdAt=o.created_at,
        updatedAt=o.updated_at,
    )


def member_to_response(m: OrganizationMember, owner_id: int) -> MemberResponse:
    return MemberResponse(
        id=m.id,
        userId=m.user_id,
        email=m.user.email,
        displayName=m.user.display_name,
        roles=m.roles or [],
        primaryRole=m.primary_role,
        status=m.status,
        showInPlanning=m.show_in_planning,
        isOwner=m.user_id == owner_id,
        joinedAt=m.joined_at,
    )


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[OrganizationResponse])
async def list_organizations(
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_organization_service),
):
    """Organizations the current user owns or belongs to"""
    return [_to_response(o) for o in service.list_organizations(current_user)]


@router.post("", response_model=OrganizationResponse, status_code=201)
async def create_organization(
    data: OrganizationCreate,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_organization_service),
):
    return _to_response(service.create_organization(data, current_user))


@router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization(
    organization_id: int,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_organization_service),
):
    return _to_response(service.get_organization(organization_id, current_user))


@router.patch("/{organization_id}", response_model=OrganizationResponse)
async def update_organization(
    organization_id: int,
    data: OrganizationUpdate,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_organization_service),
):
    return _to_response(service.update_organization(organization_id, data, current_user))


@router.delete("/{organization_id}", status_code=204)
async def delete_organization(
    organization_id: int,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_organization_service),
):
    service.delete_organization(organization_id, current_user)
    return Response(status_code=204)


@router.get("/{organization_id}/stats", response_model=OrganizationStatsResponse)
async def get_organization_stats(
    organization_id: int,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_organization_service),
):
    return service.get_stats(organization_id, current_user)


# ============================================================================
# MEMBERS
# ============================================================================


@router.get("/{organization_id}/members", response_model=list[MemberResponse])
async def list_members(
    organization_id: int,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_organization_service),
):
    organization, members = service.list_members(organization_id, current_user)
    return [member_to_response(m, organization.owner_id) for m in members]


@router.patch("/{organization_id}/members/{user_id}", response_model=MemberResponse)
async def update_member(
    organization_id: int,
    user_id: int,
    data: MemberUpdate,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_organization_service),
):
    """Change a member's roles, status or planning visibility"""
    member = service.update_member(organization_id, user_id, data, current_user)
    return member_to_response(member, member.organization.owner_id)


@router.delete("/{organization_id}/members/{user_id}", status_code=204)
async def remove_member(
    organization_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    service: OrganizationService = Depends(get_organization_service),
):
    service.remove_member(organization_id, user_id, current_user)
    return Response(status_code=204)
