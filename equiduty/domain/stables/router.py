"""Stable router - FastAPI endpoints for stables"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Stable, User
from .schemas import StableCreate, StableResponse, StableUpdate
from .service import StableService

router = APIRouter(prefix="/stables", tags=["Stables"])


def get_stable_service(db: Session = Depends(get_db)) -> StableService:
    """Dependency injection for StableService"""
    return StableService(db)


def _to_response(s: Stable) -> StableResponse:
    return StableResponse(
        id=s.id,
        organizationId=s.organization_id,
        name=s.name,
        description=s.description,
        address=s.address,
        facilityNumber=s.facility_number,
        createdAt=s.created_at,
        updatedAt=s.updated_at,
    )


@router.get("", response_model=list[StableResponse])
async def list_stables(
    organizationId: int = Query(...),
    current_user: User = Depends(get_current_user),
    service: StableService = Depends(get_stable_service),
):
    return [_to_response(s) for s in service.list_stables(organizationId, current_user)]


@router.post("", response_model=StableResponse, status_code=201)
async def create_stable(
    data: StableCreate,
    current_user: User = Depends(get_current_user),
    service: StableService = Depends(get_stable_service),
):
    return _to_response(service.create_stable(data, current_user))


@router.get("/{stable_id}", response_model=StableResponse)
async def get_stable(
    stable_id: int,
    current_user: User = Depends(get_current_user),
    service: StableService = Depends(get_stable_service),
):
    return _to_response(service.get_stable(stable_id, current_user))


@router.patch("/{stable_id}", response_model=StableResponse)
async def update_stable(
    stable_id: int,
    data: StableUpdate,
    current_user: User = Depends(get_current_user),
    service: StableService = Depends(get_stable_service),
):
    return _to_response(service.update_stable(stable_id, data, current_user))


@router.delete("/{stable_id}", status_code=204)
async def delete_stable(
    stable_id: int,
    current_user: User = Depends(get_current_user),
    service: StableService = Depends(get_stable_service),
):
    service.delete_stable(stable_id, current_user)
    return Response(status_code=204)
