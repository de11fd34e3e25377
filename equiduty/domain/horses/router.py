"""Horse router - FastAPI endpoints for horses and horse groups"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Horse, HorseGroup, User
from .schemas import (
    AssignGroupRequest,
    HorseCreate,
    HorseGroupCreate,
    HorseGroupResponse,
    HorseGroupUpdate,
    HorseResponse,
    HorseUpdate,
)
from .service import HorseService

router = APIRouter(prefix="/horses", tags=["Horses"])
groups_router = APIRouter(prefix="/horse-groups", tags=["Horse Groups"])


def get_horse_service(db: Session = Depends(get_db)) -> HorseService:
    """Dependency injection for HorseService"""
    return HorseService(db)


def _to_response(h: Horse) -> HorseResponse:
    return HorseResponse(
        id=h.id,
        organizationId=h.organization_id,
        stableId=h.stable_id,
        horseGroupId=h.horse_group_id,
        horseGroupName=h.group.name if h.group else None,
        ownerId=h.owner_id,
        name=h.name,
        breed=h.breed,
        color=h.color,
        gender=h.gender,
        dateOfBirth=h.date_of_birth,
        ueln=h.ueln,
        microchip=h.microchip,
        notes=h.notes,
        status=h.status,
        createdAt=h.created_at,
    )


def _group_response(g: HorseGroup) -> HorseGroupResponse:
    return HorseGroupResponse(
        id=g.id,
        organizationId=g.organization_id,
        name=g.name,
        description=g.description,
        color=g.color,
        horseCount=len(g.horses),
        createdAt=g.created_at,
    )


# ============================================================================
# HORSES
# ============================================================================


@router.get("", response_model=list[HorseResponse])
async def list_horses(
    organizationId: int = Query(...),
    stableId: Optional[int] = Query(None),
    horseGroupId: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    horses = service.list_horses(organizationId, current_user, stableId, horseGroupId, status)
    return [_to_response(h) for h in horses]


@router.post("", response_model=HorseResponse, status_code=201)
async def create_horse(
    data: HorseCreate,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return _to_response(service.create_horse(data, current_user))


@router.get("/{horse_id}", response_model=HorseResponse)
async def get_horse(
    horse_id: int,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return _to_response(service.get_horse(horse_id, current_user))


@router.patch("/{horse_id}", response_model=HorseResponse)
async def update_horse(
    horse_id: int,
    data: HorseUpdate,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return _to_response(service.update_horse(horse_id, data, current_user))


@router.delete("/{horse_id}", status_code=204)
async def delete_horse(
    horse_id: int,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    service.delete_horse(horse_id, current_user)
    return Response(status_code=204)


@router.post("/{horse_id}/assign-to-group", response_model=HorseResponse)
async def assign_to_group(
    horse_id: int,
    data: AssignGroupRequest,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return _to_response(service.assign_to_group(horse_id, data.horseGroupId, current_user))


@router.post("/{horse_id}/unassign-from-group", response_model=HorseResponse)
async def unassign_from_group(
    horse_id: int,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return _to_response(service.unassign_from_group(horse_id, current_user))


@router.post("/{horse_id}/unassign-from-stable", response_model=HorseResponse)
async def unassign_from_stable(
    horse_id: int,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return _to_response(service.unassign_from_stable(horse_id, current_user))


# ============================================================================
# HORSE GROUPS
# ============================================================================


@groups_router.get("", response_model=list[HorseGroupResponse])
async def list_horse_groups(
    organizationId: int = Query(...),
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return [_group_response(g) for g in service.list_groups(organizationId, current_user)]


@groups_router.post("", response_model=HorseGroupResponse, status_code=201)
async def create_horse_group(
    data: HorseGroupCreate,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return _group_response(service.create_group(data, current_user))


@groups_router.get("/{group_id}", response_model=HorseGroupResponse)
async def get_horse_group(
    group_id: int,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return _group_response(service.get_group(group_id, current_user))


@groups_router.patch("/{group_id}", response_model=HorseGroupResponse)
async def update_horse_group(
    group_id: int,
    data: HorseGroupUpdate,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    return _group_response(service.update_group(group_id, data, current_user))


@groups_router.delete("/{group_id}")
async def delete_horse_group(
    group_id: int,
    current_user: User = Depends(get_current_user),
    service: HorseService = Depends(get_horse_service),
):
    """Delete a group; its horses stay, ungrouped"""
    return service.delete_group(group_id, current_user)
