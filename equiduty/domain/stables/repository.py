"""Stable repository - Database operations for stables"""

from sqlalchemy.orm import Session

from ...models import (
    FeedInventory,
    Horse,
    InventoryAlert,
    InventoryTransaction,
    RoutineInstance,
    RoutineTemplate,
    SelectionProcess,
    SelectionTurn,
    Stable,
)


class StableRepository:
    """Repository for stable database operations"""

    @staticmethod
    def list_for_organization(db: Session, organization_id: int) -> list[Stable]:
        return (
            db.query(Stable)
            .filter(Stable.organization_id == organization_id)
            .order_by(Stable.name)
            .all()
        )

    @staticmethod
    def create_stable(db: Session, **stable_data) -> Stable:
        stable = Stable(**stable_data)
        db.add(stable)
        db.commit()
        db.refresh(stable)
        return stable

    @staticmethod
    def update_stable(db: Session, stable: Stable, **updates) -> Stable:
        for key, value in updates.items():
            if value is not None and hasattr(stable, key):
                setattr(stable, key, value)
        db.commit()
        db.refresh(stable)
        return stable

    @staticmethod
    def delete_stable(db: Session, stable: Stable) -> None:
        """Delete a stable; horses and organization-wide templates stay with the organization"""
        stable_id = stable.id

        db.query(Horse).filter(Horse.stable_id == stable_id).update(
            {"stable_id": None}, synchronize_session=False
        )
        db.query(RoutineTemplate).filter(RoutineTemplate.stable_id == stable_id).update(
            {"stable_id": None}, synchronize_session=False
        )

        process_ids = [p.id for p in db.query(SelectionProcess.id).filter(SelectionProcess.stable_id == stable_id)]
        if process_ids:
            db.query(SelectionTurn).filter(SelectionTurn.process_id.in_(process_ids)).delete(
                synchronize_session=False
            )
        for model in (SelectionProcess, InventoryAlert, InventoryTransaction, FeedInventory, RoutineInstance):
            db.query(model).filter(model.stable_id == stable_id).delete(synchronize_session=False)

        db.delete(stable)
        db.commit()
