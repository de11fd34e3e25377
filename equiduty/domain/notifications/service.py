"""Notification service - In-app notifications and per-user preferences"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Notification, User
from .repository import NotificationRepository
from .schemas import NotificationPreferences, NotificationPreferencesUpdate

logger = logging.getLogger(__name__)

# Preference name -> User column
PREFERENCE_FIELDS = {
    "leaveUpdates": "notify_leave_updates",
    "routineUpdates": "notify_routine_updates",
    "selectionTurns": "notify_selection_turns",
    "inventoryAlerts": "notify_inventory_alerts",
    "invites": "notify_invites",
}

# Notification type -> preference that silences it
TYPE_PREFERENCES = {
    "leave_request_submitted": "leaveUpdates",
    "leave_request_reviewed": "leaveUpdates",
    "routine_assigned": "routineUpdates",
    "selection_turn_started": "selectionTurns",
    "selection_process_completed": "selectionTurns",
    "inventory_alert": "inventoryAlerts",
    "organization_invite": "invites",
}


def notify(
    db: Session,
    user_id: int,
    notification_type: str,
    title: str,
    message: Optional[str] = None,
    organization_id: Optional[int] = None,
    stable_id: Optional[int] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
) -> Optional[Notification]:
    """
    Queue an in-app notification on the caller's session.
    The caller commits, so the notification lands together with the change it reports.
    """
    recipient = db.query(User).filter(User.id == user_id).first()
    if not recipient:
        logger.warning(f"⚠️ Notification recipient {user_id} not found")
        return None

    preference = TYPE_PREFERENCES.get(notification_type)
    if preference and not getattr(recipient, PREFERENCE_FIELDS[preference]):
        logger.debug(f"🔕 User {user_id} muted {notification_type} notifications")
        return None

    notification = Notification(
        user_id=user_id,
        organization_id=organization_id,
        stable_id=stable_id,
        type=notification_type,
        title=title,
        message=message,
        entity_type=entity_type,
        entity_id=entity_id,
    )
    db.add(notification)
    logger.info(f"🔔 Queued {notification_type} notification for user {user_id}")
    return notification


class NotificationService:
    """Service layer for notification business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository()

    def list_notifications(
        self, user: User, limit: int, unread_only: bool, stable_id: Optional[int]
    ) -> list[Notification]:
        if limit < 1 or limit > 100:
            raise HTTPException(status_code=400, detail="Limit must be between 1 and 100")
        return self.repo.list_for_user(self.db, user.id, limit, unread_only, stable_id)

    def unread_count(self, user: User) -> int:
        return self.repo.count_unread(self.db, user.id)

    def _get_own(self, notification_id: int, user: User) -> Notification:
        notification = self.repo.get_by_id(self.db, notification_id)
        if not notification:
            raise HTTPException(status_code=404, detail="Notification not found")
        if notification.user_id != user.id:
            raise HTTPException(status_code=403, detail="You can only access your own notifications")
        return notification

    def mark_read(self, notification_id: int, user: User) -> Notification:
        notification = self._get_own(notification_id, user)
        return self.repo.mark_read(self.db, notification)

    def mark_all_read(self, user: User) -> dict:
        updated = self.repo.mark_all_read(self.db, user.id)
        logger.info(f"✅ Marked {updated} notifications read for user {user.id}")
        return {"success": True, "updated": updated}

    def delete_notification(self, notification_id: int, user: User) -> None:
        notification = self._get_own(notification_id, user)
        self.repo.delete(self.db, notification)

    def clear_read(self, user: User) -> dict:
        deleted = self.repo.delete_read(self.db, user.id)
        return {"success": True, "deleted": deleted}

    def get_preferences(self, user: User) -> NotificationPreferences:
        return NotificationPreferences(
            **{name: getattr(user, column) for name, column in PREFERENCE_FIELDS.items()}
        )

    def update_preferences(self, user: User, data: NotificationPreferencesUpdate) -> NotificationPreferences:
        for name, value in data.model_dump(exclude_none=True).items():
            setattr(user, PREFERENCE_FIELDS[name], value)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"✅ Updated notification preferences for user {user.id}")
        return self.get_preferences(user)
