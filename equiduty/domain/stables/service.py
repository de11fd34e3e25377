"""Stable service - Business logic for stables"""

import logging

from sqlalchemy.orm import Session

from ...authorization import (
    require_organization_access,
    require_organization_admin,
    require_stable_access,
    require_stable_manager,
)
from ...models import Stable, User
from ...plan_limits import ensure_can_add
from .repository import StableRepository
from .schemas import StableCreate, StableUpdate

logger = logging.getLogger(__name__)


class StableService:
    """Service layer for stable business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = StableRepository()

    def list_stables(self, organization_id: int, user: User) -> list[Stable]:
        require_organization_access(self.db, user, organization_id)
        return self.repo.list_for_organization(self.db, organization_id)

    def get_stable(self, stable_id: int, user: User) -> Stable:
        return require_stable_access(self.db, user, stable_id)

    def create_stable(self, data: StableCreate, user: User) -> Stable:
        logger.info(f"📥 Creating stable '{data.name}' in organization {data.organizationId}")
        organization = require_organization_admin(self.db, user, data.organizationId)
        ensure_can_add(self.db, organization, "stables")

        stable = self.repo.create_stable(
            self.db,
            organization_id=organization.id,
            name=data.name,
            description=data.description,
            address=data.address,
            facility_number=data.facilityNumber,
        )
        logger.info(f"✅ Stable {stable.id} created")
        return stable

    def update_stable(self, stable_id: int, data: StableUpdate, user: User) -> Stable:
        stable = require_stable_manager(self.db, user, stable_id)
        return self.repo.update_stable(
            self.db,
            stable,
            name=data.name,
            description=data.description,
            address=data.address,
            facility_number=data.facilityNumber,
        )

    def delete_stable(self, stable_id: int, user: User) -> None:
        stable = require_stable_manager(self.db, user, stable_id)
        self.repo.delete_stable(self.db, stable)
        logger.info(f"🗑️ Stable {stable_id} deleted by user {user.id}")
