"""Fairness router - FastAPI endpoints for point distribution reports"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .calculator import DEFAULT_PERIOD
from .schemas import (
    AssignmentSuggestionsResponse,
    FairnessDistributionResponse,
    MemberPointsHistoryResponse,
)
from .service import FairnessService

router = APIRouter(prefix="/fairness", tags=["Fairness"])


def get_fairness_service(db: Session = Depends(get_db)) -> FairnessService:
    """Dependency injection for FairnessService"""
    return FairnessService(db)


@router.get("/stables/{stable_id}/distribution", response_model=FairnessDistributionResponse)
async def get_distribution(
    stable_id: int,
    period: str = Query(DEFAULT_PERIOD),
    current_user: User = Depends(get_current_user),
    service: FairnessService = Depends(get_fairness_service),
):
    return service.get_distribution(stable_id, current_user, period)


@router.get(
    "/stables/{stable_id}/members/{user_id}/history",
    response_model=MemberPointsHistoryResponse,
)
async def get_member_history(
    stable_id: int,
    user_id: int,
    days: int = Query(90, ge=1, le=365),
    current_user: User = Depends(get_current_user),
    service: FairnessService = Depends(get_fairness_service),
):
    return service.get_member_history(stable_id, user_id, current_user, days)


@router.get("/stables/{stable_id}/suggestions", response_model=AssignmentSuggestionsResponse)
async def get_assignment_suggestions(
    stable_id: int,
    limit: int = Query(5, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    service: FairnessService = Depends(get_fairness_service),
):
    return service.get_assignment_suggestions(stable_id, current_user, limit)
