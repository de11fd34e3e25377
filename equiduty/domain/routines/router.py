"""Routine router - FastAPI endpoints for routine templates and instances"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import RoutineInstance, RoutineTemplate, User
from .schemas import (
    AssignRoutineRequest,
    CancelRoutineRequest,
    CompleteRoutineRequest,
    RoutineInstanceCreate,
    RoutineInstanceResponse,
    RoutineProgressUpdate,
    RoutineTemplateCreate,
    RoutineTemplateResponse,
    RoutineTemplateUpdate,
)
from .service import RoutineService

router = APIRouter(prefix="/routines", tags=["Routines"])


def get_routine_service(db: Session = Depends(get_db)) -> RoutineService:
    """Dependency injection for RoutineService"""
    return RoutineService(db)


def _template_response(t: RoutineTemplate) -> RoutineTemplateResponse:
    return RoutineTemplateResponse(
        id=t.id,
        organizationId=t.organization_id,
        stableId=t.stable_id,
        name=t.name,
        description=t.description,
        type=t.routine_type,
        defaultStartTime=t.default_start_time,
        estimatedDuration=t.estimated_duration,
        pointsValue=t.points_value,
        steps=t.steps or [],
        isActive=t.is_active,
        createdAt=t.created_at,
    )


def instance_to_response(i: RoutineInstance) -> RoutineInstanceResponse:
    return RoutineInstanceResponse(
        id=i.id,
        organizationId=i.organization_id,
        stableId=i.stable_id,
        templateId=i.template_id,
        templateName=i.template_name,
        type=i.routine_type,
        scheduledDate=i.scheduled_date,
        scheduledStartTime=i.scheduled_start_time,
        estimatedDuration=i.estimated_duration,
        status=i.status,
        assignedTo=i.assigned_to,
        assignedToName=i.assignee.display_name if i.assignee else None,
        assignedAt=i.assigned_at,
        pointsValue=i.points_value,
        pointsAwarded=i.points_awarded,
        stepsCompleted=i.steps_completed,
        stepsTotal=i.steps_total,
        startedAt=i.started_at,
        completedAt=i.completed_at,
        completedBy=i.completed_by,
        completedByName=i.completer.display_name if i.completer else None,
        cancelledAt=i.cancelled_at,
        cancellationReason=i.cancellation_reason,
        notes=i.notes,
    )


# ============================================================================
# TEMPLATES
# ============================================================================


@router.get("/templates", response_model=list[RoutineTemplateResponse])
async def list_templates(
    organizationId: int = Query(...),
    stableId: Optional[int] = Query(None),
    includeInactive: bool = Query(False),
    current_user: User = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    templates = service.list_templates(organizationId, current_user, stableId, includeInactive)
    return [_template_response(t) for t in templates]


@router.post("/templates", response_model=RoutineTemplateResponse, status_code=201)
async def create_template(
    data: RoutineTemplateCreate,
    current_user: User = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    return _template_response(service.create_template(data, current_user))


@router.get("/templates/{template_id}", response_model=RoutineTemplateResponse)
async def get_template(
    template_id: int,
    current_user: User = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    return _template_response(service.get_template(template_id, current_user))


@router.patch("/templates/{template_id}", response_model=RoutineTemplateResponse)
async def update_template(
    template_id: int,
    data: RoutineTemplateUpdate,
    current_user: User = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    return _template_response(service.update_template(template_id, data, current_user))


@router.delete("/templates/{template_id}", status_code=204)
async def delete_template(
    template_id: int,
    current_user: User = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    service.delete_template(template_id, current_user)
    return Response(status_code=204)


# ============================================================================
# INSTANCES
# ============================================================================


@router.get("/instances", response_model=list[RoutineInstanceResponse])
async def list_instances(
    stableId: int = Query(...),
    startDate: Optional[date] = Query(None),
    endDate: Optional[date] = Query(None),
    status: Optional[str] = Query(None),
    assignedTo: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    instances = service.list_instances(stableId, current_user, startDate, endDate, status, assignedTo)
    return [instance_to_response(i) for i in instances]


@router.post("/instances", response_model=RoutineInstanceResponse, status_code=201)
async def create_instance(
    data: RoutineInstanceCreate,
    current_user: User = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    return instance_to_response(service.create_instance(data, current_user))


@router.get("/instances/{instance_id}", response_model=RoutineInstanceResponse)
async def get_instance(
    instance_id: int,
    current_user: User = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    return instance_to_response(service.get_instance(instance_id, current_user))


@router.post("/instances/{instance_id}/assign", response_model=RoutineInstanceResponse)
async def assign_instance(
    instance_id: int,
    data: AssignRoutineRequest,
    current_user: User = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    return instance_to_response(service.assign_instance(instance_id, data.userId, current_user))


@router.post("/instances/{instance_id}/start", response_model=RoutineInstanceResponse)
async def start_instance(
    instance_id: int,
    current_user: User = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    return instance_to_response(service.start_instance(instance_id, current_user))


@router.patch("/instances/{instance_id}/progress", response_model=RoutineInstanceResponse)
async def update_progress(
    instance_id: int,
    data: RoutineProgressUpdate,
    current_user: User = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    return instance_to_response(service.update_progress(instance_id, data, current_user))


@router.post("/instances/{instance_id}/complete", response_model=RoutineInstanceResponse)
async def complete_instance(
    instance_id: int,
    data: Optional[CompleteRoutineRequest] = None,
    current_user: User = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    notes = data.notes if data else None
    return instance_to_response(service.complete_instance(instance_id, current_user, notes))


@router.post("/instances/{instance_id}/cancel", response_model=RoutineInstanceResponse)
async def cancel_instance(
    instance_id: int,
    data: Optional[CancelRoutineRequest] = None,
    current_user: User = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    reason = data.reason if data else None
    return instance_to_response(service.cancel_instance(instance_id, current_user, reason))


@router.delete("/instances/{instance_id}", status_code=204)
async def delete_instance(
    instance_id: int,
    current_user: User = Depends(get_current_user),
    service: RoutineService = Depends(get_routine_service),
):
    service.delete_instance(instance_id, current_user)
    return Response(status_code=204)
