"""Subscription repository - Database operations for stored tier overrides"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Organization, TierDefinition


class TierRepository:
    """Repository for tier definition overrides"""

    @staticmethod
    def get_override(db: Session, tier: str) -> Optional[TierDefinition]:
        return db.query(TierDefinition).filter(TierDefinition.tier == tier).first()

    @staticmethod
    def save_override(db: Session, tier: str, definition: dict, updated_by: int) -> TierDefinition:
        row = db.query(TierDefinition).filter(TierDefinition.tier == tier).first()
        if not row:
            row = TierDefinition(tier=tier)
            db.add(row)

        row.name = definition["name"]
        row.description = definition["description"]
        row.price = definition["price"]
        row.limits = definition["limits"]
        row.modules = definition["modules"]
        row.enabled = definition["enabled"]
        row.sort_order = definition["sortOrder"]
        row.updated_by = updated_by

        db.commit()
        db.refresh(row)
        return row

    @staticmethod
    def delete_override(db: Session, tier: str) -> bool:
        deleted = db.query(TierDefinition).filter(TierDefinition.tier == tier).delete()
        db.commit()
        return deleted > 0

    @staticmethod
    def set_organization_tier(db: Session, organization: Organization, tier: str) -> Organization:
        organization.subscription_tier = tier
        db.commit()
        db.refresh(organization)
        return organization
