"""Horse repository - Database operations for horses and horse groups"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Horse, HorseGroup


class HorseRepository:
    """Repository for horse database operations"""

    @staticmethod
    def list_horses(
        db: Session,
        organization_id: int,
        stable_id: Optional[int] = None,
        horse_group_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> list[Horse]:
        query = db.query(Horse).filter(Horse.organization_id == organization_id)
        if stable_id is not None:
            query = query.filter(Horse.stable_id == stable_id)
        if horse_group_id is not None:
            query = query.filter(Horse.horse_group_id == horse_group_id)
        if status:
            query = query.filter(Horse.status == status)
        return query.order_by(Horse.name).all()

    @staticmethod
    def get_horse(db: Session, horse_id: int) -> Optional[Horse]:
        return db.query(Horse).filter(Horse.id == horse_id).first()

    @staticmethod
    def create_horse(db: Session, **horse_data) -> Horse:
        horse = Horse(**horse_data)
        db.add(horse)
        db.commit()
        db.refresh(horse)
        return horse

    @staticmethod
    def update_horse(db: Session, horse: Horse, **updates) -> Horse:
        for key, value in updates.items():
            if value is not None and hasattr(horse, key):
                setattr(horse, key, value)
        db.commit()
        db.refresh(horse)
        return horse

    @staticmethod
    def set_field(db: Session, horse: Horse, field: str, value) -> Horse:
        """Set a nullable field, including clearing it"""
        setattr(horse, field, value)
        db.commit()
        db.refresh(horse)
        return horse

    @staticmethod
    def delete_horse(db: Session, horse: Horse) -> None:
        db.delete(horse)
        db.commit()

    # Horse Group Methods
    @staticmethod
    def list_groups(db: Session, organization_id: int) -> list[HorseGroup]:
        return (
            db.query(HorseGroup)
            .filter(HorseGroup.organization_id == organization_id)
            .order_by(HorseGroup.name)
            .all()
        )

    @staticmethod
    def get_group(db: Session, group_id: int) -> Optional[HorseGroup]:
        return db.query(HorseGroup).filter(HorseGroup.id == group_id).first()

    @staticmethod
    def create_group(db: Session, **group_data) -> HorseGroup:
        group = HorseGroup(**group_data)
        db.add(group)
        db.commit()
        db.refresh(group)
        return group

    @staticmethod
    def update_group(db: Session, group: HorseGroup, **updates) -> HorseGroup:
        for key, value in updates.items():
            if value is not None and hasattr(group, key):
                setattr(group, key, value)
        db.commit()
        db.refresh(group)
        return group

    @staticmethod
    def delete_group(db: Session, group: HorseGroup) -> int:
        """Delete a group and unassign its horses. Returns the number of horses unassigned"""
        unassigned = (
            db.query(Horse)
            .filter(Horse.horse_group_id == group.id)
            .update({"horse_group_id": None}, synchronize_session=False)
        )
        db.delete(group)
        db.commit()
        return unassigned
