"""Notification domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: Optional[str] = None
    organizationId: Optional[int] = None
    stableId: Optional[int] = None
    entityType: Optional[str] = None
    entityId: Optional[int] = None
    read: bool
    readAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]


class UnreadCountResponse(BaseModel):
    count: int


class NotificationPreferences(BaseModel):
    leaveUpdates: bool = True
    routineUpdates: bool = True
    selectionTurns: bool = True
    inventoryAlerts: bool = True
    invites: bool = True


class NotificationPreferencesUpdate(BaseModel):
    leaveUpdates: Optional[bool] = None
    routineUpdates: Optional[bool] = None
    selectionTurns: Optional[bool] = None
    inventoryAlerts: Optional[bool] = None
    invites: Optional[bool] = None
