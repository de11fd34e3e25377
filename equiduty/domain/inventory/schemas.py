"""Inventory domain schemas - Feed stock, transactions and alerts"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class InventoryItemCreate(BaseModel):
    stableId: int
    feedType: str = Field(..., min_length=1, max_length=255)
    unit: str = Field("kg", min_length=1, max_length=20)
    currentQuantity: float = Field(0, ge=0)
    minimumStockLevel: float = Field(0, ge=0)
    reorderPoint: Optional[float] = Field(None, ge=0)
    reorderQuantity: Optional[float] = Field(None, ge=0)
    unitCost: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    supplier: Optional[str] = None
    storageLocation: Optional[str] = None
    expiryDate: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def check_currency(cls, v):
        if v is None:
            return v
        if len(v) != 3 or not v.isalpha():
            raise ValueError("Currency must be a three-letter code")
        return v.upper()


class InventoryItemUpdate(BaseModel):
    """Quantities change only through restock, usage and adjust"""

    unit: Optional[str] = Field(None, min_length=1, max_length=20)
    minimumStockLevel: Optional[float] = Field(None, ge=0)
    reorderPoint: Optional[float] = Field(None, ge=0)
    reorderQuantity: Optional[float] = Field(None, ge=0)
    unitCost: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    supplier: Optional[str] = None
    storageLocation: Optional[str] = None
    expiryDate: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def check_currency(cls, v):
        if v is None:
            return v
        if len(v) != 3 or not v.isalpha():
            raise ValueError("Currency must be a three-letter code")
        return v.upper()


class RestockRequest(BaseModel):
    quantity: float = Field(..., gt=0)
    unitCost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class UsageRequest(BaseModel):
    quantity: float = Field(..., gt=0)
    notes: Optional[str] = None


class AdjustRequest(BaseModel):
    newQuantity: float = Field(..., ge=0)
    reason: str = Field(..., min_length=1, max_length=500)
    notes: Optional[str] = None


class InventoryItemResponse(BaseModel):
    id: int
    organizationId: int
    stableId: int
    feedType: str
    unit: str
    currentQuantity: float
    minimumStockLevel: float
    reorderPoint: Optional[float] = None
    reorderQuantity: Optional[float] = None
    unitCost: Optional[float] = None
    currency: str
    supplier: Optional[str] = None
    storageLocation: Optional[str] = None
    expiryDate: Optional[date] = None
    lastPurchaseDate: Optional[datetime] = None
    lastUsageDate: Optional[datetime] = None
    status: str
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class InventoryTransactionResponse(BaseModel):
    id: int
    inventoryId: int
    stableId: int
    type: str
    quantity: float
    previousQuantity: float
    newQuantity: float
    unitCost: Optional[float] = None
    totalCost: Optional[float] = None
    reason: Optional[str] = None
    notes: Optional[str] = None
    createdBy: Optional[int] = None
    createdAt: Optional[datetime] = None


class StockMovementResponse(BaseModel):
    transaction: InventoryTransactionResponse
    inventory: InventoryItemResponse


class InventoryAlertResponse(BaseModel):
    id: int
    inventoryId: int
    stableId: int
    alertType: str
    feedType: str
    currentQuantity: float
    threshold: Optional[float] = None
    isAcknowledged: bool
    acknowledgedBy: Optional[int] = None
    acknowledgedAt: Optional[datetime] = None
    isResolved: bool
    resolvedAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None


class InventorySummaryResponse(BaseModel):
    stableId: int
    totalItems: int
    lowStockCount: int
    outOfStockCount: int
    expiringSoonCount: int
    totalValue: float
    currency: str
    alerts: list[InventoryAlertResponse]
