"""Organization service - Business logic for organizations and their members"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...authorization import (
    get_organization_or_404,
    is_system_admin,
    require_organization_access,
    require_organization_admin,
)
from ...models import Organization, OrganizationMember, User
from .repository import OrganizationRepository
from .schemas import MemberUpdate, OrganizationCreate, OrganizationUpdate

logger = logging.getLogger(__name__)


class OrganizationService:
    """Service layer for organization business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrganizationRepository()

    # ========================================================================
    # ORGANIZATIONS
    # ========================================================================

    def list_organizations(self, user: User) -> list[Organization]:
        return self.repo.list_for_user(self.db, user.id)

    def get_organization(self, organization_id: int, user: User) -> Organization:
        return require_organization_access(self.db, user, organization_id)

    def create_organization(self, data: OrganizationCreate, user: User) -> Organization:
        logger.info(f"📥 Creating organization '{data.name}' for user {user.id}")
        organization = self.repo.create_organization(
            self.db,
            user.id,
            name=data.name,
            description=data.description,
            contact_email=data.contactEmail,
            phone=data.phone,
            timezone=data.timezone,
            subscription_tier="free",
        )
        logger.info(f"✅ Organization {organization.id} created")
        return organization

    def update_organization(self, organization_id: int, data: OrganizationUpdate, user: User) -> Organization:
        organization = require_organization_admin(self.db, user, organization_id)
        return self.repo.update_organization(
            self.db,
            organization,
            name=data.name,
            description=data.description,
            contact_email=data.contactEmail,
            phone=data.phone,
            timezone=data.timezone,
        )

    def delete_organization(self, organization_id: int, user: User) -> None:
        organization = get_organization_or_404(self.db, organization_id)
        if organization.owner_id != user.id and not is_system_admin(user):
            raise HTTPException(status_code=403, detail="Only the owner can delete an organization")

        self.repo.delete_organization(self.db, organization)
        logger.info(f"🗑️ Organization {organization_id} deleted by user {user.id}")

    def get_stats(self, organization_id: int, user: User) -> dict:
        require_organization_access(self.db, user, organization_id)
        return self.repo.get_stats(self.db, organization_id)

    # ========================================================================
    # MEMBERS
    # ========================================================================

    def list_members(self, organization_id: int, user: User) -> tuple[Organization, list[OrganizationMember]]:
        organization = require_organization_access(self.db, user, organization_id)
        return organization, self.repo.list_members(self.db, organization_id)

    def _get_member_or_404(self, organization_id: int, user_id: int) -> OrganizationMember:
        member = self.repo.get_member(self.db, organization_id, user_id)
        if not member:
            raise HTTPException(status_code=404, detail="Member not found")
        return member

    def update_member(
        self, organization_id: int, member_user_id: int, data: MemberUpdate, user: User
    ) -> OrganizationMember:
        organization = require_organization_admin(self.db, user, organization_id)
        member = self._get_member_or_404(organization_id, member_user_id)

        if member_user_id == organization.owner_id and data.status == "inactive":
            raise HTTPException(status_code=400, detail="The owner cannot be deactivated")

        roles = data.roles if data.roles is not None else list(member.roles or [])
        primary_role = data.primaryRole if data.primaryRole is not None else member.primary_role
        if primary_role and primary_role not in roles:
            if data.primaryRole is not None:
                # Promoting a role to primary also grants it
                roles.append(primary_role)
            else:
                primary_role = roles[0] if roles else None

        logger.info(f"🔄 Updating member {member_user_id} of organization {organization_id}")
        return self.repo.update_member(
            self.db,
            member,
            roles=roles,
            primary_role=primary_role,
            status=data.status,
            show_in_planning=data.showInPlanning,
        )

    def remove_member(self, organization_id: int, member_user_id: int, user: User) -> None:
        organization = get_organization_or_404(self.db, organization_id)
        if member_user_id == organization.owner_id:
            raise HTTPException(status_code=400, detail="The owner cannot be removed from the organization")

        # Members may leave on their own; removing others needs admin rights
        if member_user_id != user.id:
            require_organization_admin(self.db, user, organization_id)

        member = self._get_member_or_404(organization_id, member_user_id)
        self.repo.delete_member(self.db, member)
        logger.info(f"🗑️ Member {member_user_id} removed from organization {organization_id}")
