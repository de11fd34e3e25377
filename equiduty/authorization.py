"""
Organization and stable access checks shared by every domain.

System administrators bypass all checks. Otherwise access derives from
organization ownership or an active OrganizationMember row.
"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from .models import Organization, OrganizationMember, Stable, User

logger = logging.getLogger(__name__)

ORGANIZATION_ROLES = [
    "administrator",
    "schedule_planner",
    "groom",
    "veterinarian",
    "farrier",
    "dentist",
    "trainer",
    "rider",
    "customer",
    "horse_owner",
]


def is_system_admin(user: User) -> bool:
    return user.system_role == "system_admin"


def get_membership(db: Session, user_id: int, organization_id: int) -> Optional[OrganizationMember]:
    return (
        db.query(OrganizationMember)
        .filter(
            OrganizationMember.user_id == user_id,
            OrganizationMember.organization_id == organization_id,
        )
        .first()
    )


def get_active_membership(db: Session, user_id: int, organization_id: int) -> Optional[OrganizationMember]:
    member = get_membership(db, user_id, organization_id)
    if member and member.status == "active":
        return member
    return None


def list_active_members(db: Session, organization_id: int) -> list[OrganizationMember]:
    return (
        db.query(OrganizationMember)
        .filter(
            OrganizationMember.organization_id == organization_id,
            OrganizationMember.status == "active",
        )
        .all()
    )


def member_has_role(member: Optional[OrganizationMember], role: str) -> bool:
    if not member:
        return False
    return role in (member.roles or []) or member.primary_role == role


def has_organization_access(db: Session, user: User, organization: Organization) -> bool:
    if is_system_admin(user) or organization.owner_id == user.id:
        return True
    return get_active_membership(db, user.id, organization.id) is not None


def is_organization_admin(db: Session, user: User, organization: Organization) -> bool:
    if is_system_admin(user) or organization.owner_id == user.id:
        return True
    member = get_active_membership(db, user.id, organization.id)
    return member_has_role(member, "administrator")


def can_manage_schedules(db: Session, user: User, organization: Organization) -> bool:
    if is_organization_admin(db, user, organization):
        return True
    member = get_active_membership(db, user.id, organization.id)
    return member_has_role(member, "schedule_planner")


# ============================================================================
# LOOKUPS THAT RAISE
# ============================================================================


def get_organization_or_404(db: Session, organization_id: int) -> Organization:
    organization = db.query(Organization).filter(Organization.id == organization_id).first()
    if not organization:
        raise HTTPException(status_code=404, detail="Organization not found")
    return organization


def require_organization_access(db: Session, user: User, organization_id: int) -> Organization:
    organization = get_organization_or_404(db, organization_id)
    if not has_organization_access(db, user, organization):
        logger.warning(f"⚠️ User {user.id} denied access to organization {organization_id}")
        raise HTTPException(status_code=403, detail="You do not have access to this organization")
    return organization


def require_organization_admin(db: Session, user: User, organization_id: int) -> Organization:
    organization = get_organization_or_404(db, organization_id)
    if not is_organization_admin(db, user, organization):
        logger.warning(f"⚠️ User {user.id} is not an administrator of organization {organization_id}")
        raise HTTPException(
            status_code=403, detail="Only organization administrators can perform this action"
        )
    return organization


def get_stable_or_404(db: Session, stable_id: int) -> Stable:
    stable = db.query(Stable).filter(Stable.id == stable_id).first()
    if not stable:
        raise HTTPException(status_code=404, detail="Stable not found")
    return stable


def require_stable_access(db: Session, user: User, stable_id: int) -> Stable:
    stable = get_stable_or_404(db, stable_id)
    if not has_organization_access(db, user, stable.organization):
        logger.warning(f"⚠️ User {user.id} denied access to stable {stable_id}")
        raise HTTPException(status_code=403, detail="You do not have permission to access this stable")
    return stable


def require_stable_manager(db: Session, user: User, stable_id: int) -> Stable:
    stable = get_stable_or_404(db, stable_id)
    if not is_organization_admin(db, user, stable.organization):
        raise HTTPException(status_code=403, detail="You do not have permission to manage this stable")
    return stable


def require_schedule_manager(db: Session, user: User, stable_id: int) -> Stable:
    stable = get_stable_or_404(db, stable_id)
    if not can_manage_schedules(db, user, stable.organization):
        raise HTTPException(
            status_code=403, detail="You do not have permission to manage schedules for this stable"
        )
    return stable


def list_organization_admin_ids(db: Session, organization: Organization) -> list[int]:
    """Owner plus every active administrator, without duplicates"""
    admin_ids = [organization.owner_id]
    for member in list_active_members(db, organization.id):
        if member_has_role(member, "administrator") and member.user_id not in admin_ids:
            admin_ids.append(member.user_id)
    return admin_ids
