"""Inventory repository - Database operations for feed stock"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import FeedInventory, InventoryAlert, InventoryTransaction


class InventoryRepository:
    """Repository for inventory database operations"""

    # ========================================================================
    # ITEMS
    # ========================================================================

    @staticmethod
    def list_items(db: Session, stable_id: int, status: Optional[str] = None) -> list[FeedInventory]:
        query = db.query(FeedInventory).filter(FeedInventory.stable_id == stable_id)
        if status:
            query = query.filter(FeedInventory.status == status)
        return query.order_by(FeedInventory.feed_type).all()

    @staticmethod
    def get_item(db: Session, item_id: int) -> Optional[FeedInventory]:
        return db.query(FeedInventory).filter(FeedInventory.id == item_id).first()

    @staticmethod
    def find_by_feed_type(db: Session, stable_id: int, feed_type: str) -> Optional[FeedInventory]:
        return (
            db.query(FeedInventory)
            .filter(FeedInventory.stable_id == stable_id, FeedInventory.feed_type == feed_type)
            .first()
        )

    @staticmethod
    def add_item(db: Session, **item_data) -> FeedInventory:
        item = FeedInventory(**item_data)
        db.add(item)
        db.flush()
        return item

    @staticmethod
    def delete_item(db: Session, item: FeedInventory) -> None:
        db.query(InventoryTransaction).filter(InventoryTransaction.inventory_id == item.id).delete()
        db.query(InventoryAlert).filter(InventoryAlert.inventory_id == item.id).delete()
        db.delete(item)
        db.commit()

    @staticmethod
    def list_expiring(db: Session, until: date) -> list[FeedInventory]:
        return (
            db.query(FeedInventory)
            .filter(FeedInventory.expiry_date.isnot(None), FeedInventory.expiry_date <= until)
            .all()
        )

    # ========================================================================
    # TRANSACTIONS
    # ========================================================================

    @staticmethod
    def add_transaction(db: Session, **transaction_data) -> InventoryTransaction:
        transaction = InventoryTransaction(**transaction_data)
        db.add(transaction)
        db.flush()
        return transaction

    @staticmethod
    def list_transactions(db: Session, item_id: int, limit: int = 50) -> list[InventoryTransaction]:
        return (
            db.query(InventoryTransaction)
            .filter(InventoryTransaction.inventory_id == item_id)
            .order_by(InventoryTransaction.created_at.desc(), InventoryTransaction.id.desc())
            .limit(limit)
            .all()
        )

    # ========================================================================
    # ALERTS
    # ========================================================================

    @staticmethod
    def list_alerts(db: Session, stable_id: int, include_resolved: bool = False, limit: Optional[int] = None):
        query = db.query(InventoryAlert).filter(InventoryAlert.stable_id == stable_id)
        if not include_resolved:
            query = query.filter(InventoryAlert.is_resolved.is_(False))
        query = query.order_by(InventoryAlert.created_at.desc(), InventoryAlert.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def get_alert(db: Session, alert_id: int) -> Optional[InventoryAlert]:
        return db.query(InventoryAlert).filter(InventoryAlert.id == alert_id).first()

    @staticmethod
    def open_alerts(db: Session, item_id: int, alert_types: tuple) -> list[InventoryAlert]:
        return (
            db.query(InventoryAlert)
            .filter(
                InventoryAlert.inventory_id == item_id,
                InventoryAlert.is_resolved.is_(False),
                InventoryAlert.alert_type.in_(alert_types),
            )
            .all()
        )

    @staticmethod
    def add_alert(db: Session, **alert_data) -> InventoryAlert:
        alert = InventoryAlert(**alert_data)
        db.add(alert)
        db.flush()
        return alert
