"""Organization repository - Database operations for organizations and members"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...models import (
    AvailabilitySettings,
    BalanceAdjustment,
    Contact,
    FeedInventory,
    Horse,
    HorseGroup,
    InventoryAlert,
    InventoryTransaction,
    Invite,
    LeaveRequest,
    Notification,
    Organization,
    OrganizationMember,
    RoutineInstance,
    RoutineTemplate,
    SelectionProcess,
    SelectionTurn,
    Stable,
    TimeBalance,
    WorkSchedule,
)


class OrganizationRepository:
    """Repository for organization database operations"""

    @staticmethod
    def list_for_user(db: Session, user_id: int) -> list[Organization]:
        """Organizations the user owns or is an active member of"""
        member_org_ids = db.query(OrganizationMember.organization_id).filter(
            OrganizationMember.user_id == user_id, OrganizationMember.status == "active"
        )
        return (
            db.query(Organization)
            .filter(or_(Organization.owner_id == user_id, Organization.id.in_(member_org_ids)))
            .order_by(Organization.name)
            .all()
        )

    @staticmethod
    def create_organization(db: Session, owner_id: int, **org_data) -> Organization:
        """Create an organization with its owner as first administrator"""
        organization = Organization(owner_id=owner_id, **org_data)
        db.add(organization)
        db.flush()

        db.add(
            OrganizationMember(
                organization_id=organization.id,
                user_id=owner_id,
                roles=["administrator"],
                primary_role="administrator",
                status="active",
            )
        )
        db.commit()
        db.refresh(organization)
        return organization

    @staticmethod
    def update_organization(db: Session, organization: Organization, **updates) -> Organization:
        for key, value in updates.items():
            if value is not None and hasattr(organization, key):
                setattr(organization, key, value)
        db.commit()
        db.refresh(organization)
        return organization

    @staticmethod
    def delete_organization(db: Session, organization: Organization) -> None:
        """Delete an organization and every row that belongs to it"""
        org_id = organization.id
        stable_ids = [s.id for s in db.query(Stable.id).filter(Stable.organization_id == org_id)]
        process_ids = [
            p.id for p in db.query(SelectionProcess.id).filter(SelectionProcess.organization_id == org_id)
        ]

        if process_ids:
            db.query(SelectionTurn).filter(SelectionTurn.process_id.in_(process_ids)).delete(
                synchronize_session=False
            )
        if stable_ids:
            for model in (InventoryAlert, InventoryTransaction):
                db.query(model).filter(model.stable_id.in_(stable_ids)).delete(synchronize_session=False)

        for model in (
            SelectionProcess,
            FeedInventory,
            RoutineInstance,
            RoutineTemplate,
            Horse,
            HorseGroup,
            Contact,
            Invite,
            LeaveRequest,
            TimeBalance,
            BalanceAdjustment,
            WorkSchedule,
            AvailabilitySettings,
            Notification,
        ):
            db.query(model).filter(model.organization_id == org_id).delete(synchronize_session=False)

        db.delete(organization)
        db.commit()

    @staticmethod
    def get_stats(db: Session, organization_id: int) -> dict:
        return {
            "stableCount": db.query(Stable).filter(Stable.organization_id == organization_id).count(),
            "memberCount": db.query(OrganizationMember)
            .filter(
                OrganizationMember.organization_id == organization_id,
                OrganizationMember.status == "active",
            )
            .count(),
            "horseCount": db.query(Horse)
            .filter(Horse.organization_id == organization_id, Horse.status == "active")
            .count(),
            "contactCount": db.query(Contact).filter(Contact.organization_id == organization_id).count(),
        }

    # Member Methods
    @staticmethod
    def list_members(db: Session, organization_id: int) -> list[OrganizationMember]:
        return (
            db.query(OrganizationMember)
            .options(joinedload(OrganizationMember.user))
            .filter(OrganizationMember.organization_id == organization_id)
            .order_by(OrganizationMember.joined_at, OrganizationMember.id)
            .all()
        )

    @staticmethod
    def get_member(db: Session, organization_id: int, user_id: int) -> Optional[OrganizationMember]:
        return (
            db.query(OrganizationMember)
            .filter(
                OrganizationMember.organization_id == organization_id,
                OrganizationMember.user_id == user_id,
            )
            .first()
        )

    @staticmethod
    def update_member(db: Session, member: OrganizationMember, **updates) -> OrganizationMember:
        for key, value in updates.items():
            if value is not None and hasattr(member, key):
                setattr(member, key, value)
        db.commit()
        db.refresh(member)
        return member

    @staticmethod
    def delete_member(db: Session, member: OrganizationMember) -> None:
        db.delete(member)
        db.commit()
