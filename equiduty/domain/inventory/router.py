"""Inventory router - FastAPI endpoints for feed stock"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import FeedInventory, InventoryAlert, InventoryTransaction, User
from .schemas import (
    AdjustRequest,
    InventoryAlertResponse,
    InventoryItemCreate,
    InventoryItemResponse,
    InventoryItemUpdate,
    InventorySummaryResponse,
    InventoryTransactionResponse,
    RestockRequest,
    StockMovementResponse,
    UsageRequest,
)
from .service import InventoryService

router = APIRouter(prefix="/inventory", tags=["Inventory"])


def get_inventory_service(db: Session = Depends(get_db)) -> InventoryService:
    """Dependency injection for InventoryService"""
    return InventoryService(db)


def _item_response(i: FeedInventory) -> InventoryItemResponse:
    return InventoryItemResponse(
        id=i.id,
        organizationId=i.organization_id,
        stableId=i.stable_id,
        feedType=i.feed_type,
        unit=i.unit,
        currentQuantity=i.current_quantity,
        minimumStockLevel=i.minimum_stock_level,
        reorderPoint=i.reorder_point,
        reorderQuantity=i.reorder_quantity,
        unitCost=i.unit_cost,
        currency=i.currency,
        supplier=i.supplier,
        storageLocation=i.storage_location,
        expiryDate=i.expiry_date,
        lastPurchaseDate=i.last_purchase_date,
        lastUsageDate=i.last_usage_date,
        status=i.status,
        notes=i.notes,
        createdAt=i.created_at,
        updatedAt=i.updated_at,
    )


def _transaction_response(t: InventoryTransaction) -> InventoryTransactionResponse:
    return InventoryTransactionResponse(
        id=t.id,
        inventoryId=t.inventory_id,
        stableId=t.stable_id,
        type=t.transaction_type,
        quantity=t.quantity,
        previousQuantity=t.previous_quantity,
        newQuantity=t.new_quantity,
        unitCost=t.unit_cost,
        totalCost=t.total_cost,
        reason=t.reason,
        notes=t.notes,
        createdBy=t.created_by,
        createdAt=t.created_at,
    )


def _alert_response(a: InventoryAlert) -> InventoryAlertResponse:
    return InventoryAlertResponse(
        id=a.id,
        inventoryId=a.inventory_id,
        stableId=a.stable_id,
        alertType=a.alert_type,
        feedType=a.feed_type,
        currentQuantity=a.current_quantity,
        threshold=a.threshold,
        isAcknowledged=a.is_acknowledged,
        acknowledgedBy=a.acknowledged_by,
        acknowledgedAt=a.acknowledged_at,
        isResolved=a.is_resolved,
        resolvedAt=a.resolved_at,
        createdAt=a.created_at,
    )


def _movement_response(result: tuple) -> StockMovementResponse:
    transaction, item = result
    return StockMovementResponse(
        transaction=_transaction_response(transaction),
        inventory=_item_response(item),
    )


# ============================================================================
# ITEMS
# ============================================================================


@router.get("", response_model=list[InventoryItemResponse])
async def list_inventory(
    stableId: int = Query(...),
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
):
    return [_item_response(i) for i in service.list_items(stableId, current_user, status)]


@router.post("", response_model=InventoryItemResponse, status_code=201)
async def create_inventory_item(
    data: InventoryItemCreate,
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
):
    return _item_response(service.create_item(data, current_user))


@router.get("/summary", response_model=InventorySummaryResponse)
async def get_inventory_summary(
    stableId: int = Query(...),
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
):
    summary = service.get_summary(stableId, current_user)
    summary["alerts"] = [_alert_response(a) for a in summary["alerts"]]
    return summary


# ============================================================================
# ALERTS
# ============================================================================


@router.get("/alerts", response_model=list[InventoryAlertResponse])
async def list_alerts(
    stableId: int = Query(...),
    includeResolved: bool = Query(False),
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
):
    return [_alert_response(a) for a in service.list_alerts(stableId, current_user, includeResolved)]


@router.post("/alerts/{alert_id}/acknowledge", response_model=InventoryAlertResponse)
async def acknowledge_alert(
    alert_id: int,
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
):
    return _alert_response(service.acknowledge_alert(alert_id, current_user))


@router.post("/alerts/{alert_id}/resolve", response_model=InventoryAlertResponse)
async def resolve_alert(
    alert_id: int,
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
):
    return _alert_response(service.resolve_alert(alert_id, current_user))


# ============================================================================
# SINGLE ITEM
# ============================================================================


@router.get("/{item_id}", response_model=InventoryItemResponse)
async def get_inventory_item(
    item_id: int,
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
):
    return _item_response(service.get_item(item_id, current_user))


@router.put("/{item_id}", response_model=InventoryItemResponse)
async def update_inventory_item(
    item_id: int,
    data: InventoryItemUpdate,
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
):
    return _item_response(service.update_item(item_id, data, current_user))


@router.delete("/{item_id}", status_code=204)
async def delete_inventory_item(
    item_id: int,
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
):
    service.delete_item(item_id, current_user)
    return Response(status_code=204)


@router.post("/{item_id}/restock", response_model=StockMovementResponse)
async def restock_item(
    item_id: int,
    data: RestockRequest,
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
):
    return _movement_response(service.restock(item_id, data, current_user))


@router.post("/{item_id}/usage", response_model=StockMovementResponse)
async def record_usage(
    item_id: int,
    data: UsageRequest,
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
):
    return _movement_response(service.record_usage(item_id, data, current_user))


@router.post("/{item_id}/adjust", response_model=StockMovementResponse)
async def adjust_stock(
    item_id: int,
    data: AdjustRequest,
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
):
    return _movement_response(service.adjust(item_id, data, current_user))


@router.get("/{item_id}/transactions", response_model=list[InventoryTransactionResponse])
async def list_transactions(
    item_id: int,
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
):
    return [_transaction_response(t) for t in service.list_transactions(item_id, current_user, limit)]
