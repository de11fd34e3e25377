"""Fairness service - Loads completed routines and feeds the calculator"""

import logging
from datetime import datetime, time, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...authorization import list_active_members, require_stable_access
from ...models import RoutineInstance, User
from .calculator import (
    DEFAULT_PERIOD,
    PERIODS,
    CompletedTask,
    calculate_distribution,
    calculate_points_history,
    get_period_date_range,
    rank_assignment_suggestions,
    task_points,
)

logger = logging.getLogger(__name__)

SUGGESTION_LOOKBACK_DAYS = 90


def load_completed_tasks(
    db: Session,
    stable_id: int,
    start: datetime,
    end: Optional[datetime] = None,
    user_id: Optional[int] = None,
) -> list[CompletedTask]:
    """Completed routine instances of a stable in a window, as calculator input"""
    query = db.query(RoutineInstance).filter(
        RoutineInstance.stable_id == stable_id,
        RoutineInstance.status == "completed",
        RoutineInstance.completed_by.isnot(None),
        RoutineInstance.completed_at >= start,
    )
    if end is not None:
        query = query.filter(RoutineInstance.completed_at <= end)
    if user_id is not None:
        query = query.filter(RoutineInstance.completed_by == user_id)

    return [
        CompletedTask(
            user_id=instance.completed_by,
            display_name=instance.completer.display_name if instance.completer else "Unknown",
            points=task_points(instance.points_awarded, instance.points_value),
            completed_at=instance.completed_at,
        )
        for instance in query.order_by(RoutineInstance.completed_at).all()
    ]


class FairnessService:
    """Service layer for fairness reports"""

    def __init__(self, db: Session):
        self.db = db

    def get_distribution(self, stable_id: int, user: User, period: str = DEFAULT_PERIOD) -> dict:
        if period not in PERIODS:
            raise HTTPException(status_code=400, detail=f"Period must be one of: {', '.join(PERIODS)}")
        stable = require_stable_access(self.db, user, stable_id)

        start, end = get_period_date_range(period)
        tasks = load_completed_tasks(self.db, stable.id, start, end)
        logger.debug(f"📊 Fairness distribution for stable {stable_id}: {len(tasks)} tasks in {period}")

        distribution = calculate_distribution(tasks, start, end)
        distribution.update(
            {
                "stableId": stable.id,
                "stableName": stable.name,
                "period": period,
                "generatedAt": datetime.utcnow(),
            }
        )
        return distribution

    def get_member_history(self, stable_id: int, member_id: int, user: User, days: int) -> dict:
        stable = require_stable_access(self.db, user, stable_id)

        start = datetime.combine((datetime.utcnow() - timedelta(days=days)).date(), time.min)
        tasks = load_completed_tasks(self.db, stable.id, start, user_id=member_id)

        member = self.db.query(User).filter(User.id == member_id).first()
        history = calculate_points_history(tasks, days)
        history.update(
            {
                "userId": member_id,
                "displayName": member.display_name if member else "Unknown",
            }
        )
        return history

    def get_assignment_suggestions(self, stable_id: int, user: User, limit: int) -> dict:
        """Members ordered by who has carried the least load over the last 90 days"""
        stable = require_stable_access(self.db, user, stable_id)

        start = datetime.utcnow() - timedelta(days=SUGGESTION_LOOKBACK_DAYS)
        points_by_member: dict[int, tuple[str, float]] = {}
        for member in list_active_members(self.db, stable.organization_id):
            points_by_member[member.user_id] = (member.user.display_name, 0)

        # completers who have since left still count
        for task in load_completed_tasks(self.db, stable.id, start):
            name, points = points_by_member.get(task.user_id, (task.display_name, 0))
            points_by_member[task.user_id] = (name, points + task.points)

        suggestions = rank_assignment_suggestions(points_by_member)
        return {"suggestions": suggestions[:limit], "totalMembers": len(suggestions)}
