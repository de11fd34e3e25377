"""Inventory service - Feed stock levels, stock movements and alerts"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...authorization import list_organization_admin_ids, require_stable_access, require_stable_manager
from ...config import DEFAULT_CURRENCY
from ...models import FeedInventory, InventoryAlert, InventoryTransaction, Stable, User
from ...plan_limits import require_module
from ..fairness.calculator import round_half_up
from ..notifications.service import notify
from .repository import InventoryRepository
from .schemas import AdjustRequest, InventoryItemCreate, InventoryItemUpdate, RestockRequest, UsageRequest

logger = logging.getLogger(__name__)

INVENTORY_MODULE = "inventory"
STOCK_ALERT_TYPES = ("low-stock", "out-of-stock")
EXPIRY_WARNING_DAYS = 30


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def calculate_inventory_status(current_quantity: float, minimum_stock_level: float) -> str:
    if current_quantity <= 0:
        return "out-of-stock"
    if current_quantity <= minimum_stock_level:
        return "low-stock"
    return "in-stock"


def _notify_admins(db: Session, stable: Stable, alert: InventoryAlert, title: str) -> None:
    for admin_id in list_organization_admin_ids(db, stable.organization):
        notify(
            db,
            admin_id,
            "inventory_alert",
            title,
            message=f"{alert.feed_type}: {alert.current_quantity} left",
            organization_id=stable.organization_id,
            stable_id=stable.id,
            entity_type="inventory_alert",
            entity_id=alert.id,
        )


def scan_expiring_items(db: Session, today: Optional[date] = None) -> int:
    """Raise one expiring alert per item whose expiry date falls within the warning window"""
    today = today or date.today()
    repo = InventoryRepository()
    created = 0

    for item in repo.list_expiring(db, today + timedelta(days=EXPIRY_WARNING_DAYS)):
        if repo.open_alerts(db, item.id, ("expiring",)):
            continue
        alert = repo.add_alert(
            db,
            inventory_id=item.id,
            stable_id=item.stable_id,
            alert_type="expiring",
            feed_type=item.feed_type,
            current_quantity=item.current_quantity,
            threshold=None,
        )
        stable = db.query(Stable).filter(Stable.id == item.stable_id).first()
        _notify_admins(db, stable, alert, f"{item.feed_type} expires on {item.expiry_date.isoformat()}")
        created += 1

    db.commit()
    if created:
        logger.info(f"🔔 Raised {created} expiring inventory alerts")
    return created


class InventoryService:
    """Service layer for inventory business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InventoryRepository()

    def _stable_access(self, stable_id: int, user: User) -> Stable:
        stable = require_stable_access(self.db, user, stable_id)
        require_module(self.db, stable.organization, INVENTORY_MODULE)
        return stable

    def _stable_manager(self, stable_id: int, user: User) -> Stable:
        stable = require_stable_manager(self.db, user, stable_id)
        require_module(self.db, stable.organization, INVENTORY_MODULE)
        return stable

    def _get_item(self, item_id: int) -> FeedInventory:
        item = self.repo.get_item(self.db, item_id)
        if not item:
            raise HTTPException(status_code=404, detail="Inventory item not found")
        return item

    def _sync_stock_alerts(self, item: FeedInventory, stable: Stable) -> None:
        """Open one stock alert while low or out, resolve open ones once back in stock"""
        open_alerts = self.repo.open_alerts(self.db, item.id, STOCK_ALERT_TYPES)

        if item.status == "in-stock":
            now = _utcnow()
            for alert in open_alerts:
                alert.is_resolved = True
                alert.resolved_at = now
            if open_alerts:
                logger.info(f"✅ Resolved {len(open_alerts)} stock alerts for inventory {item.id}")
            return

        if open_alerts:
            return

        alert = self.repo.add_alert(
            self.db,
            inventory_id=item.id,
            stable_id=item.stable_id,
            alert_type=item.status,
            feed_type=item.feed_type,
            current_quantity=item.current_quantity,
            threshold=item.minimum_stock_level,
        )
        label = "is out of stock" if item.status == "out-of-stock" else "is running low"
        _notify_admins(self.db, stable, alert, f"{item.feed_type} {label}")
        logger.warning(f"⚠️ Inventory {item.id} {item.status}, alert {alert.id} raised")

    def _move_stock(
        self,
        item: FeedInventory,
        stable: Stable,
        user: User,
        transaction_type: str,
        quantity: float,
        new_quantity: float,
        **transaction_fields,
    ) -> InventoryTransaction:
        previous = item.current_quantity
        item.current_quantity = new_quantity
        item.status = calculate_inventory_status(new_quantity, item.minimum_stock_level)

        transaction = self.repo.add_transaction(
            self.db,
            inventory_id=item.id,
            stable_id=item.stable_id,
            transaction_type=transaction_type,
            quantity=quantity,
            previous_quantity=previous,
            new_quantity=new_quantity,
            created_by=user.id,
            **transaction_fields,
        )
        self._sync_stock_alerts(item, stable)
        self.db.commit()
        self.db.refresh(transaction)
        self.db.refresh(item)
        return transaction

    # ========================================================================
    # ITEMS
    # ========================================================================

    def list_items(self, stable_id: int, user: User, status: Optional[str]) -> list[FeedInventory]:
        self._stable_access(stable_id, user)
        return self.repo.list_items(self.db, stable_id, status)

    def get_item(self, item_id: int, user: User) -> FeedInventory:
        item = self._get_item(item_id)
        self._stable_access(item.stable_id, user)
        return item

    def create_item(self, data: InventoryItemCreate, user: User) -> FeedInventory:
        logger.info(f"📥 Adding {data.feedType} to inventory of stable {data.stableId}")
        stable = self._stable_manager(data.stableId, user)
        if self.repo.find_by_feed_type(self.db, stable.id, data.feedType):
            raise HTTPException(status_code=409, detail="Inventory for this feed type already exists")

        item = self.repo.add_item(
            self.db,
            organization_id=stable.organization_id,
            stable_id=stable.id,
            feed_type=data.feedType,
            unit=data.unit,
            current_quantity=data.currentQuantity,
            minimum_stock_level=data.minimumStockLevel,
            reorder_point=data.reorderPoint,
            reorder_quantity=data.reorderQuantity,
            unit_cost=data.unitCost,
            currency=data.currency or DEFAULT_CURRENCY,
            supplier=data.supplier,
            storage_location=data.storageLocation,
            expiry_date=data.expiryDate,
            status=calculate_inventory_status(data.currentQuantity, data.minimumStockLevel),
            notes=data.notes,
            created_by=user.id,
        )

        if data.currentQuantity > 0:
            self.repo.add_transaction(
                self.db,
                inventory_id=item.id,
                stable_id=stable.id,
                transaction_type="restock",
                quantity=data.currentQuantity,
                previous_quantity=0,
                new_quantity=data.currentQuantity,
                unit_cost=data.unitCost,
                total_cost=round_half_up(data.currentQuantity * data.unitCost, 2) if data.unitCost else None,
                reason="Initial stock",
                created_by=user.id,
            )
            item.last_purchase_date = _utcnow()

        self._sync_stock_alerts(item, stable)
        self.db.commit()
        self.db.refresh(item)
        logger.info(f"✅ Inventory item {item.id} created ({item.status})")
        return item

    def update_item(self, item_id: int, data: InventoryItemUpdate, user: User) -> FeedInventory:
        item = self._get_item(item_id)
        stable = self._stable_manager(item.stable_id, user)

        updates = {
            "unit": data.unit,
            "minimum_stock_level": data.minimumStockLevel,
            "reorder_point": data.reorderPoint,
            "reorder_quantity": data.reorderQuantity,
            "unit_cost": data.unitCost,
            "currency": data.currency,
            "supplier": data.supplier,
            "storage_location": data.storageLocation,
            "expiry_date": data.expiryDate,
            "notes": data.notes,
        }
        for key, value in updates.items():
            if value is not None:
                setattr(item, key, value)

        item.status = calculate_inventory_status(item.current_quantity, item.minimum_stock_level)
        self._sync_stock_alerts(item, stable)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete_item(self, item_id: int, user: User) -> None:
        item = self._get_item(item_id)
        self._stable_manager(item.stable_id, user)
        self.repo.delete_item(self.db, item)
        logger.info(f"🗑️ Inventory item {item_id} deleted")

    # ========================================================================
    # STOCK MOVEMENTS
    # ========================================================================

    def restock(self, item_id: int, data: RestockRequest, user: User) -> tuple:
        item = self._get_item(item_id)
        stable = self._stable_access(item.stable_id, user)

        unit_cost = data.unitCost if data.unitCost is not None else item.unit_cost
        if data.unitCost is not None:
            item.unit_cost = data.unitCost
        item.last_purchase_date = _utcnow()

        transaction = self._move_stock(
            item,
            stable,
            user,
            "restock",
            data.quantity,
            item.current_quantity + data.quantity,
            unit_cost=unit_cost,
            total_cost=round_half_up(data.quantity * unit_cost, 2) if unit_cost else None,
            notes=data.notes,
        )
        logger.info(f"✅ Restocked inventory {item_id} with {data.quantity} {item.unit}")
        return transaction, item

    def record_usage(self, item_id: int, data: UsageRequest, user: User) -> tuple:
        item = self._get_item(item_id)
        stable = self._stable_access(item.stable_id, user)

        item.last_usage_date = _utcnow()
        transaction = self._move_stock(
            item,
            stable,
            user,
            "usage",
            -data.quantity,
            max(0.0, item.current_quantity - data.quantity),
            notes=data.notes,
        )
        return transaction, item

    def adjust(self, item_id: int, data: AdjustRequest, user: User) -> tuple:
        item = self._get_item(item_id)
        stable = self._stable_manager(item.stable_id, user)

        transaction = self._move_stock(
            item,
            stable,
            user,
            "adjustment",
            data.newQuantity - item.current_quantity,
            data.newQuantity,
            reason=data.reason,
            notes=data.notes,
        )
        logger.info(f"🔄 Inventory {item_id} adjusted to {data.newQuantity}: {data.reason}")
        return transaction, item

    def list_transactions(self, item_id: int, user: User, limit: int) -> list[InventoryTransaction]:
        item = self.get_item(item_id, user)
        return self.repo.list_transactions(self.db, item.id, limit)

    # ========================================================================
    # ALERTS & SUMMARY
    # ========================================================================

    def list_alerts(self, stable_id: int, user: User, include_resolved: bool) -> list[InventoryAlert]:
        self._stable_access(stable_id, user)
        return self.repo.list_alerts(self.db, stable_id, include_resolved)

    def _get_alert(self, alert_id: int) -> InventoryAlert:
        alert = self.repo.get_alert(self.db, alert_id)
        if not alert:
            raise HTTPException(status_code=404, detail="Alert not found")
        return alert

    def acknowledge_alert(self, alert_id: int, user: User) -> InventoryAlert:
        alert = self._get_alert(alert_id)
        self._stable_access(alert.stable_id, user)
        if not alert.is_acknowledged:
            alert.is_acknowledged = True
            alert.acknowledged_by = user.id
            alert.acknowledged_at = _utcnow()
            self.db.commit()
            self.db.refresh(alert)
        return alert

    def resolve_alert(self, alert_id: int, user: User) -> InventoryAlert:
        alert = self._get_alert(alert_id)
        self._stable_manager(alert.stable_id, user)
        if not alert.is_resolved:
            alert.is_resolved = True
            alert.resolved_at = _utcnow()
            self.db.commit()
            self.db.refresh(alert)
        return alert

    def get_summary(self, stable_id: int, user: User) -> dict:
        self._stable_access(stable_id, user)
        items = self.repo.list_items(self.db, stable_id)
        expiry_cutoff = date.today() + timedelta(days=EXPIRY_WARNING_DAYS)

        total_value = sum(
            item.unit_cost * item.current_quantity
            for item in items
            if item.unit_cost and item.current_quantity
        )
        currencies = {item.currency for item in items}
        return {
            "stableId": stable_id,
            "totalItems": len(items),
            "lowStockCount": sum(1 for item in items if item.status == "low-stock"),
            "outOfStockCount": sum(1 for item in items if item.status == "out-of-stock"),
            "expiringSoonCount": sum(
                1 for item in items if item.expiry_date and item.expiry_date <= expiry_cutoff
            ),
            "totalValue": round_half_up(total_value, 2),
            # Mixed currencies are summed as-is and reported in the default currency
            "currency": currencies.pop() if len(currencies) == 1 else DEFAULT_CURRENCY,
            "alerts": self.repo.list_alerts(self.db, stable_id, limit=10),
        }
