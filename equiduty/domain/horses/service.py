"""Horse service - Business logic for horses and horse groups"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...authorization import (
    get_organization_or_404,
    is_organization_admin,
    require_organization_access,
    require_organization_admin,
)
from ...models import Horse, HorseGroup, Stable, User
from ...plan_limits import ensure_can_add
from .repository import HorseRepository
from .schemas import HorseCreate, HorseGroupCreate, HorseGroupUpdate, HorseUpdate

logger = logging.getLogger(__name__)


class HorseService:
    """Service layer for horse business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = HorseRepository()

    def _check_stable(self, stable_id: Optional[int], organization_id: int) -> None:
        if stable_id is None:
            return
        stable = self.db.query(Stable).filter(Stable.id == stable_id).first()
        if not stable or stable.organization_id != organization_id:
            raise HTTPException(status_code=400, detail="Stable does not belong to this organization")

    def _check_group(self, group_id: Optional[int], organization_id: int) -> None:
        if group_id is None:
            return
        group = self.repo.get_group(self.db, group_id)
        if not group or group.organization_id != organization_id:
            raise HTTPException(status_code=400, detail="Horse group does not belong to this organization")

    # ========================================================================
    # HORSES
    # ========================================================================

    def list_horses(
        self,
        organization_id: int,
        user: User,
        stable_id: Optional[int] = None,
        horse_group_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> list[Horse]:
        require_organization_access(self.db, user, organization_id)
        return self.repo.list_horses(self.db, organization_id, stable_id, horse_group_id, status)

    def get_horse(self, horse_id: int, user: User) -> Horse:
        horse = self.repo.get_horse(self.db, horse_id)
        if not horse:
            raise HTTPException(status_code=404, detail="Horse not found")
        require_organization_access(self.db, user, horse.organization_id)
        return horse

    def _get_editable(self, horse_id: int, user: User) -> Horse:
        """Horse owners and organization admins may change a horse"""
        horse = self.get_horse(horse_id, user)
        organization = get_organization_or_404(self.db, horse.organization_id)
        if horse.owner_id != user.id and not is_organization_admin(self.db, user, organization):
            raise HTTPException(status_code=403, detail="You do not have permission to modify this horse")
        return horse

    def create_horse(self, data: HorseCreate, user: User) -> Horse:
        logger.info(f"📥 Registering horse '{data.name}' in organization {data.organizationId}")
        organization = require_organization_access(self.db, user, data.organizationId)
        ensure_can_add(self.db, organization, "horses")
        self._check_stable(data.stableId, organization.id)
        self._check_group(data.horseGroupId, organization.id)

        return self.repo.create_horse(
            self.db,
            organization_id=organization.id,
            stable_id=data.stableId,
            horse_group_id=data.horseGroupId,
            owner_id=user.id,
            name=data.name,
            breed=data.breed,
            color=data.color,
            gender=data.gender,
            date_of_birth=data.dateOfBirth,
            ueln=data.ueln,
            microchip=data.microchip,
            notes=data.notes,
            status="active",
        )

    def update_horse(self, horse_id: int, data: HorseUpdate, user: User) -> Horse:
        horse = self._get_editable(horse_id, user)
        self._check_stable(data.stableId, horse.organization_id)

        if data.status == "active" and horse.status != "active":
            # Reactivating counts against the horse limit again
            ensure_can_add(self.db, get_organization_or_404(self.db, horse.organization_id), "horses")

        return self.repo.update_horse(
            self.db,
            horse,
            name=data.name,
            stable_id=data.stableId,
            breed=data.breed,
            color=data.color,
            gender=data.gender,
            date_of_birth=data.dateOfBirth,
            ueln=data.ueln,
            microchip=data.microchip,
            notes=data.notes,
            status=data.status,
        )

    def delete_horse(self, horse_id: int, user: User) -> None:
        horse = self._get_editable(horse_id, user)
        self.repo.delete_horse(self.db, horse)
        logger.info(f"🗑️ Horse {horse_id} deleted by user {user.id}")

    def assign_to_group(self, horse_id: int, group_id: int, user: User) -> Horse:
        horse = self._get_editable(horse_id, user)
        self._check_group(group_id, horse.organization_id)
        return self.repo.set_field(self.db, horse, "horse_group_id", group_id)

    def unassign_from_group(self, horse_id: int, user: User) -> Horse:
        horse = self._get_editable(horse_id, user)
        return self.repo.set_field(self.db, horse, "horse_group_id", None)

    def unassign_from_stable(self, horse_id: int, user: User) -> Horse:
        horse = self._get_editable(horse_id, user)
        return self.repo.set_field(self.db, horse, "stable_id", None)

    # ========================================================================
    # HORSE GROUPS
    # ========================================================================

    def list_groups(self, organization_id: int, user: User) -> list[HorseGroup]:
        require_organization_access(self.db, user, organization_id)
        return self.repo.list_groups(self.db, organization_id)

    def _get_group(self, group_id: int) -> HorseGroup:
        group = self.repo.get_group(self.db, group_id)
        if not group:
            raise HTTPException(status_code=404, detail="Horse group not found")
        return group

    def get_group(self, group_id: int, user: User) -> HorseGroup:
        group = self._get_group(group_id)
        require_organization_access(self.db, user, group.organization_id)
        return group

    def create_group(self, data: HorseGroupCreate, user: User) -> HorseGroup:
        require_organization_admin(self.db, user, data.organizationId)
        group = self.repo.create_group(
            self.db,
            organization_id=data.organizationId,
            name=data.name,
            description=data.description,
            color=data.color,
            created_by=user.id,
        )
        logger.info(f"✅ Horse group {group.id} created")
        return group

    def update_group(self, group_id: int, data: HorseGroupUpdate, user: User) -> HorseGroup:
        group = self._get_group(group_id)
        require_organization_admin(self.db, user, group.organization_id)
        return self.repo.update_group(
            self.db, group, name=data.name, description=data.description, color=data.color
        )

    def delete_group(self, group_id: int, user: User) -> dict:
        group = self._get_group(group_id)
        require_organization_admin(self.db, user, group.organization_id)
        unassigned = self.repo.delete_group(self.db, group)
        logger.info(f"🗑️ Horse group {group_id} deleted, {unassigned} horses unassigned")
        return {"success": True, "unassignedHorses": unassigned}
