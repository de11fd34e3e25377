"""Selection process router - FastAPI endpoints for turn-based routine selection"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import SelectionProcess, User
from ..routines.router import instance_to_response
from ..routines.schemas import RoutineInstanceResponse
from .schemas import (
    SelectInstanceRequest,
    SelectionProcessCreate,
    SelectionProcessResponse,
    SelectionTurnResponse,
)
from .service import SelectionService, current_turn

router = APIRouter(prefix="/selection-processes", tags=["Selection Processes"])


def get_selection_service(db: Session = Depends(get_db)) -> SelectionService:
    """Dependency injection for SelectionService"""
    return SelectionService(db)


def _to_response(p: SelectionProcess) -> SelectionProcessResponse:
    turn = current_turn(p)
    return SelectionProcessResponse(
        id=p.id,
        organizationId=p.organization_id,
        stableId=p.stable_id,
        name=p.name,
        description=p.description,
        algorithm=p.algorithm,
        status=p.status,
        selectionStartDate=p.selection_start_date,
        selectionEndDate=p.selection_end_date,
        currentTurnIndex=p.current_turn_index,
        quotaPerMember=p.quota_per_member,
        currentTurnUserId=turn.user_id if turn else None,
        turns=[
            SelectionTurnResponse(
                userId=t.user_id,
                displayName=t.user.display_name if t.user else "Unknown",
                order=t.order,
                status=t.status,
                selectionsCount=t.selections_count,
                startedAt=t.started_at,
                completedAt=t.completed_at,
            )
            for t in p.turns
        ],
        createdBy=p.created_by,
        startedAt=p.started_at,
        completedAt=p.completed_at,
        cancelledAt=p.cancelled_at,
        createdAt=p.created_at,
    )


@router.get("", response_model=list[SelectionProcessResponse])
async def list_selection_processes(
    stableId: int = Query(...),
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: SelectionService = Depends(get_selection_service),
):
    return [_to_response(p) for p in service.list_processes(stableId, current_user, status)]


@router.post("", response_model=SelectionProcessResponse, status_code=201)
async def create_selection_process(
    data: SelectionProcessCreate,
    current_user: User = Depends(get_current_user),
    service: SelectionService = Depends(get_selection_service),
):
    return _to_response(service.create_process(data, current_user))


@router.get("/{process_id}", response_model=SelectionProcessResponse)
async def get_selection_process(
    process_id: int,
    current_user: User = Depends(get_current_user),
    service: SelectionService = Depends(get_selection_service),
):
    return _to_response(service.get_process(process_id, current_user))


@router.delete("/{process_id}", status_code=204)
async def delete_selection_process(
    process_id: int,
    current_user: User = Depends(get_current_user),
    service: SelectionService = Depends(get_selection_service),
):
    service.delete_process(process_id, current_user)
    return Response(status_code=204)


@router.post("/{process_id}/start", response_model=SelectionProcessResponse)
async def start_selection_process(
    process_id: int,
    current_user: User = Depends(get_current_user),
    service: SelectionService = Depends(get_selection_service),
):
    return _to_response(service.start_process(process_id, current_user))


@router.post("/{process_id}/select", response_model=RoutineInstanceResponse)
async def select_routine(
    process_id: int,
    data: SelectInstanceRequest,
    current_user: User = Depends(get_current_user),
    service: SelectionService = Depends(get_selection_service),
):
    """Claim an unassigned routine during your turn"""
    return instance_to_response(service.select_instance(process_id, data.routineInstanceId, current_user))


@router.post("/{process_id}/complete-turn", response_model=SelectionProcessResponse)
async def complete_turn(
    process_id: int,
    current_user: User = Depends(get_current_user),
    service: SelectionService = Depends(get_selection_service),
):
    return _to_response(service.complete_turn(process_id, current_user))


@router.post("/{process_id}/cancel", response_model=SelectionProcessResponse)
async def cancel_selection_process(
    process_id: int,
    current_user: User = Depends(get_current_user),
    service: SelectionService = Depends(get_selection_service),
):
    return _to_response(service.cancel_process(process_id, current_user))
