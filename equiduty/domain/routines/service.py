"""Routine service - Business logic for routine templates and instances"""

import logging
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...authorization import (
    can_manage_schedules,
    get_active_membership,
    get_organization_or_404,
    get_stable_or_404,
    require_organization_access,
    require_schedule_manager,
    require_stable_access,
)
from ...models import RoutineInstance, RoutineTemplate, User
from ...plan_limits import ensure_can_add
from ..notifications.service import notify
from .repository import RoutineRepository
from .schemas import (
    RoutineInstanceCreate,
    RoutineProgressUpdate,
    RoutineTemplateCreate,
    RoutineTemplateUpdate,
)

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = ("started", "in_progress")
CLOSED_STATUSES = ("completed", "cancelled")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RoutineService:
    """Service layer for routine business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RoutineRepository()

    def _require_template_manager(self, organization_id: int, user: User):
        organization = require_organization_access(self.db, user, organization_id)
        if not can_manage_schedules(self.db, user, organization):
            raise HTTPException(status_code=403, detail="You do not have permission to manage routines")
        return organization

    def _check_stable(self, stable_id: Optional[int], organization_id: int) -> None:
        if stable_id is None:
            return
        stable = get_stable_or_404(self.db, stable_id)
        if stable.organization_id != organization_id:
            raise HTTPException(status_code=400, detail="Stable does not belong to this organization")

    # ========================================================================
    # TEMPLATES
    # ========================================================================

    def list_templates(
        self, organization_id: int, user: User, stable_id: Optional[int], include_inactive: bool
    ) -> list[RoutineTemplate]:
        require_organization_access(self.db, user, organization_id)
        return self.repo.list_templates(self.db, organization_id, stable_id, active_only=not include_inactive)

    def _get_template(self, template_id: int) -> RoutineTemplate:
        template = self.repo.get_template(self.db, template_id)
        if not template:
            raise HTTPException(status_code=404, detail="Routine template not found")
        return template

    def get_template(self, template_id: int, user: User) -> RoutineTemplate:
        template = self._get_template(template_id)
        require_organization_access(self.db, user, template.organization_id)
        return template

    def create_template(self, data: RoutineTemplateCreate, user: User) -> RoutineTemplate:
        logger.info(f"📥 Creating routine template '{data.name}' in organization {data.organizationId}")
        organization = self._require_template_manager(data.organizationId, user)
        ensure_can_add(self.db, organization, "routineTemplates")
        self._check_stable(data.stableId, organization.id)

        template = self.repo.create_template(
            self.db,
            organization_id=organization.id,
            stable_id=data.stableId,
            name=data.name,
            description=data.description,
            routine_type=data.type,
            default_start_time=data.defaultStartTime,
            estimated_duration=data.estimatedDuration,
            points_value=data.pointsValue,
            steps=[step.model_dump() for step in data.steps],
            is_active=True,
            created_by=user.id,
        )
        logger.info(f"✅ Routine template {template.id} created")
        return template

    def update_template(self, template_id: int, data: RoutineTemplateUpdate, user: User) -> RoutineTemplate:
        template = self._get_template(template_id)
        organization = self._require_template_manager(template.organization_id, user)

        if data.isActive and not template.is_active:
            ensure_can_add(self.db, organization, "routineTemplates")

        return self.repo.update_template(
            self.db,
            template,
            name=data.name,
            description=data.description,
            routine_type=data.type,
            default_start_time=data.defaultStartTime,
            estimated_duration=data.estimatedDuration,
            points_value=data.pointsValue,
            steps=[step.model_dump() for step in data.steps] if data.steps is not None else None,
            is_active=data.isActive,
        )

    def delete_template(self, template_id: int, user: User) -> None:
        """Deactivate; instances already scheduled keep their copy of the template"""
        template = self._get_template(template_id)
        self._require_template_manager(template.organization_id, user)
        self.repo.update_template(self.db, template, is_active=False)
        logger.info(f"🗑️ Routine template {template_id} deactivated")

    # ========================================================================
    # INSTANCES
    # ========================================================================

    def _check_assignee(self, user_id: int, organization_id: int) -> None:
        organization = get_organization_or_404(self.db, organization_id)
        if user_id != organization.owner_id and not get_active_membership(self.db, user_id, organization_id):
            raise HTTPException(status_code=400, detail="Assignee is not a member of this organization")

    def _assign(self, instance: RoutineInstance, assignee_id: Optional[int], user: User) -> None:
        instance.assigned_to = assignee_id
        instance.assigned_by = user.id if assignee_id else None
        instance.assigned_at = _utcnow() if assignee_id else None
        if assignee_id and assignee_id != user.id:
            notify(
                self.db,
                assignee_id,
                "routine_assigned",
                f"You have been assigned {instance.template_name}",
                message=f"{instance.scheduled_date.isoformat()} at {instance.scheduled_start_time}",
                organization_id=instance.organization_id,
                stable_id=instance.stable_id,
                entity_type="routine_instance",
                entity_id=instance.id,
            )

    def create_instance(self, data: RoutineInstanceCreate, user: User) -> RoutineInstance:
        stable = require_schedule_manager(self.db, user, data.stableId)
        template = self._get_template(data.templateId)
        if template.organization_id != stable.organization_id:
            raise HTTPException(status_code=400, detail="Template does not belong to this organization")
        if template.stable_id is not None and template.stable_id != stable.id:
            raise HTTPException(status_code=400, detail="Template belongs to a different stable")
        if not template.is_active:
            raise HTTPException(status_code=400, detail="Template is not active")
        if data.assignedTo is not None:
            self._check_assignee(data.assignedTo, stable.organization_id)

        instance = self.repo.create_instance(
            self.db,
            organization_id=stable.organization_id,
            stable_id=stable.id,
            template_id=template.id,
            template_name=template.name,
            routine_type=template.routine_type,
            scheduled_date=data.scheduledDate,
            scheduled_start_time=data.scheduledStartTime or template.default_start_time,
            estimated_duration=template.estimated_duration,
            status="scheduled",
            points_value=template.points_value,
            steps_completed=0,
            steps_total=len(template.steps or []),
            notes=data.notes,
        )
        if data.assignedTo is not None:
            self._assign(instance, data.assignedTo, user)

        instance = self.repo.save(self.db, instance)
        logger.info(f"✅ Routine instance {instance.id} scheduled for {instance.scheduled_date}")
        return instance

    def list_instances(
        self,
        stable_id: int,
        user: User,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
        assigned_to: Optional[int] = None,
    ) -> list[RoutineInstance]:
        require_stable_access(self.db, user, stable_id)
        return self.repo.list_instances(self.db, stable_id, start_date, end_date, status, assigned_to)

    def _get_instance(self, instance_id: int) -> RoutineInstance:
        instance = self.repo.get_instance(self.db, instance_id)
        if not instance:
            raise HTTPException(status_code=404, detail="Routine instance not found")
        return instance

    def get_instance(self, instance_id: int, user: User) -> RoutineInstance:
        instance = self._get_instance(instance_id)
        require_stable_access(self.db, user, instance.stable_id)
        return instance

    def _require_worker(self, instance: RoutineInstance, user: User) -> None:
        """The assignee, anyone when unassigned, or a schedule manager may work on a routine"""
        stable = require_stable_access(self.db, user, instance.stable_id)
        if instance.assigned_to in (None, user.id):
            return
        if not can_manage_schedules(self.db, user, stable.organization):
            raise HTTPException(status_code=403, detail="This routine is assigned to someone else")

    def assign_instance(self, instance_id: int, assignee_id: Optional[int], user: User) -> RoutineInstance:
        instance = self._get_instance(instance_id)
        stable = require_stable_access(self.db, user, instance.stable_id)
        if instance.status in CLOSED_STATUSES:
            raise HTTPException(status_code=400, detail=f"Cannot assign a {instance.status} routine")

        claiming_for_self = assignee_id == user.id and instance.assigned_to is None
        if not claiming_for_self and not can_manage_schedules(self.db, user, stable.organization):
            raise HTTPException(status_code=403, detail="You do not have permission to assign routines")
        if assignee_id is not None:
            self._check_assignee(assignee_id, instance.organization_id)

        self._assign(instance, assignee_id, user)
        logger.info(f"🔄 Routine instance {instance_id} assigned to {assignee_id}")
        return self.repo.save(self.db, instance)

    def start_instance(self, instance_id: int, user: User) -> RoutineInstance:
        instance = self._get_instance(instance_id)
        self._require_worker(instance, user)
        if instance.status != "scheduled":
            raise HTTPException(status_code=400, detail="Only scheduled routines can be started")

        instance.status = "started"
        instance.started_at = _utcnow()
        instance.started_by = user.id
        if instance.assigned_to is None:
            instance.assigned_to = user.id
            instance.assigned_by = user.id
            instance.assigned_at = instance.started_at
        return self.repo.save(self.db, instance)

    def update_progress(self, instance_id: int, data: RoutineProgressUpdate, user: User) -> RoutineInstance:
        instance = self._get_instance(instance_id)
        self._require_worker(instance, user)
        if instance.status not in ACTIVE_STATUSES:
            raise HTTPException(status_code=400, detail="Routine must be started before progress can be recorded")

        instance.status = "in_progress"
        instance.steps_completed = min(data.stepsCompleted, instance.steps_total)
        if data.notes is not None:
            instance.notes = data.notes
        return self.repo.save(self.db, instance)

    def complete_instance(self, instance_id: int, user: User, notes: Optional[str] = None) -> RoutineInstance:
        instance = self._get_instance(instance_id)
        self._require_worker(instance, user)
        if instance.status not in ACTIVE_STATUSES:
            raise HTTPException(status_code=400, detail="Only started routines can be completed")

        instance.status = "completed"
        instance.completed_at = _utcnow()
        instance.completed_by = user.id
        instance.points_awarded = instance.points_value
        instance.steps_completed = instance.steps_total
        if notes is not None:
            instance.notes = notes

        instance = self.repo.save(self.db, instance)
        logger.info(f"✅ Routine instance {instance_id} completed by user {user.id} (+{instance.points_awarded} points)")
        return instance

    def cancel_instance(self, instance_id: int, user: User, reason: Optional[str] = None) -> RoutineInstance:
        instance = self._get_instance(instance_id)
        stable = require_stable_access(self.db, user, instance.stable_id)
        if instance.status in CLOSED_STATUSES:
            raise HTTPException(status_code=400, detail=f"Routine is already {instance.status}")
        if instance.assigned_to != user.id and not can_manage_schedules(self.db, user, stable.organization):
            raise HTTPException(status_code=403, detail="You do not have permission to cancel this routine")

        instance.status = "cancelled"
        instance.cancelled_at = _utcnow()
        instance.cancelled_by = user.id
        instance.cancellation_reason = reason
        logger.info(f"🔄 Routine instance {instance_id} cancelled by user {user.id}")
        return self.repo.save(self.db, instance)

    def delete_instance(self, instance_id: int, user: User) -> None:
        instance = self._get_instance(instance_id)
        require_schedule_manager(self.db, user, instance.stable_id)
        self.repo.delete_instance(self.db, instance)
        logger.info(f"🗑️ Routine instance {instance_id} deleted")
