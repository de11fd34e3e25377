"""Selection process service - Turn-based claiming of routine instances"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...authorization import (
    get_active_membership,
    require_schedule_manager,
    require_stable_access,
)
from ...models import RoutineInstance, SelectionProcess, SelectionTurn, Stable, User
from ...plan_limits import require_module
from ..fairness.service import load_completed_tasks
from ..notifications.service import notify
from .ordering import calculate_quota, compute_turn_order
from .repository import SelectionRepository
from .schemas import SelectionProcessCreate

logger = logging.getLogger(__name__)

SELECTION_MODULE = "selectionProcess"
POINTS_LOOKBACK_DAYS = 90


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def current_turn(process: SelectionProcess) -> Optional[SelectionTurn]:
    if process.status != "active" or process.current_turn_index < 0:
        return None
    if process.current_turn_index >= len(process.turns):
        return None
    return process.turns[process.current_turn_index]


class SelectionService:
    """Service layer for selection process business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SelectionRepository()

    def _stable_access(self, stable_id: int, user: User) -> Stable:
        stable = require_stable_access(self.db, user, stable_id)
        require_module(self.db, stable.organization, SELECTION_MODULE)
        return stable

    def _stable_manager(self, stable_id: int, user: User) -> Stable:
        stable = require_schedule_manager(self.db, user, stable_id)
        require_module(self.db, stable.organization, SELECTION_MODULE)
        return stable

    def _get_process(self, process_id: int) -> SelectionProcess:
        process = self.repo.get_process(self.db, process_id)
        if not process:
            raise HTTPException(status_code=404, detail="Selection process not found")
        return process

    def _start_turn(self, process: SelectionProcess, index: int) -> None:
        turn = process.turns[index]
        turn.status = "active"
        turn.started_at = _utcnow()
        process.current_turn_index = index
        notify(
            self.db,
            turn.user_id,
            "selection_turn_started",
            f"It is your turn to pick routines in {process.name}",
            organization_id=process.organization_id,
            stable_id=process.stable_id,
            entity_type="selection_process",
            entity_id=process.id,
        )

    # ========================================================================
    # QUERIES
    # ========================================================================

    def list_processes(self, stable_id: int, user: User, status: Optional[str]) -> list[SelectionProcess]:
        self._stable_access(stable_id, user)
        return self.repo.list_for_stable(self.db, stable_id, status)

    def get_process(self, process_id: int, user: User) -> SelectionProcess:
        process = self._get_process(process_id)
        self._stable_access(process.stable_id, user)
        return process

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def create_process(self, data: SelectionProcessCreate, user: User) -> SelectionProcess:
        logger.info(f"📥 Creating {data.algorithm} selection process '{data.name}' for stable {data.stableId}")
        stable = self._stable_manager(data.stableId, user)

        names: dict[int, str] = {}
        for member_id in data.memberIds:
            member = get_active_membership(self.db, member_id, stable.organization_id)
            if not member:
                raise HTTPException(
                    status_code=400,
                    detail=f"User {member_id} is not an active member of this organization",
                )
            names[member_id] = member.user.display_name

        points = None
        last_order = None
        quota = None
        if data.algorithm == "points_balance":
            start = _utcnow() - timedelta(days=POINTS_LOOKBACK_DAYS)
            points = {}
            for task in load_completed_tasks(self.db, stable.id, start):
                points[task.user_id] = points.get(task.user_id, 0) + task.points
        elif data.algorithm in ("quota_based", "fair_rotation"):
            previous = self.repo.get_last_completed(self.db, stable.id)
            if previous:
                last_order = [turn.user_id for turn in previous.turns]

        if data.algorithm == "quota_based":
            open_points = self.repo.sum_open_points(
                self.db, stable.id, data.selectionStartDate, data.selectionEndDate
            )
            quota = calculate_quota(open_points, len(names))
            logger.info(f"📊 {open_points} open points in window, quota {quota} per member")

        turn_order = compute_turn_order(data.algorithm, data.memberIds, names, points, last_order)

        process = self.repo.create_process(
            self.db,
            turn_order,
            organization_id=stable.organization_id,
            stable_id=stable.id,
            name=data.name,
            description=data.description,
            algorithm=data.algorithm,
            status="draft",
            selection_start_date=data.selectionStartDate,
            selection_end_date=data.selectionEndDate,
            current_turn_index=0,
            quota_per_member=quota,
            created_by=user.id,
        )
        logger.info(f"✅ Selection process {process.id} created with {len(turn_order)} turns")
        return process

    def delete_process(self, process_id: int, user: User) -> None:
        process = self._get_process(process_id)
        self._stable_manager(process.stable_id, user)
        if process.status != "draft":
            raise HTTPException(status_code=400, detail="Only draft selection processes can be deleted")
        self.repo.delete_process(self.db, process)
        logger.info(f"🗑️ Selection process {process_id} deleted")

    def start_process(self, process_id: int, user: User) -> SelectionProcess:
        process = self._get_process(process_id)
        self._stable_manager(process.stable_id, user)
        if process.status != "draft":
            raise HTTPException(status_code=400, detail="Only draft selection processes can be started")
        if not process.turns:
            raise HTTPException(status_code=400, detail="Selection process has no participants")

        process.status = "active"
        process.started_at = _utcnow()
        self._start_turn(process, 0)
        logger.info(f"✅ Selection process {process_id} started")
        return self.repo.save(self.db, process)

    def cancel_process(self, process_id: int, user: User) -> SelectionProcess:
        process = self._get_process(process_id)
        self._stable_manager(process.stable_id, user)
        if process.status not in ("draft", "active"):
            raise HTTPException(status_code=400, detail=f"Selection process is already {process.status}")

        process.status = "cancelled"
        process.cancelled_at = _utcnow()
        process.current_turn_index = -1
        for turn in process.turns:
            if turn.status == "active":
                turn.status = "pending"
        logger.info(f"🔄 Selection process {process_id} cancelled")
        return self.repo.save(self.db, process)

    # ========================================================================
    # TURNS
    # ========================================================================

    def _require_turn_holder(self, process: SelectionProcess, user: User) -> SelectionTurn:
        if process.status != "active":
            raise HTTPException(status_code=400, detail="Selection process is not active")
        turn = current_turn(process)
        if not turn or turn.user_id != user.id:
            raise HTTPException(status_code=403, detail="It is not your turn")
        return turn

    def select_instance(self, process_id: int, instance_id: int, user: User) -> RoutineInstance:
        process = self._get_process(process_id)
        self._stable_access(process.stable_id, user)
        turn = self._require_turn_holder(process, user)

        instance = self.db.query(RoutineInstance).filter(RoutineInstance.id == instance_id).first()
        if not instance or instance.stable_id != process.stable_id:
            raise HTTPException(status_code=404, detail="Routine instance not found")
        if not (process.selection_start_date <= instance.scheduled_date <= process.selection_end_date):
            raise HTTPException(status_code=400, detail="Routine is outside the selection window")
        if instance.status != "scheduled":
            raise HTTPException(status_code=400, detail="Only scheduled routines can be selected")
        if instance.assigned_to is not None:
            raise HTTPException(status_code=409, detail="Routine has already been taken")

        now = _utcnow()
        instance.assigned_to = user.id
        instance.assigned_by = user.id
        instance.assigned_at = now
        turn.selections_count += 1

        self.db.commit()
        self.db.refresh(instance)
        logger.info(f"✅ User {user.id} selected routine {instance_id} in process {process_id}")
        return instance

    def complete_turn(self, process_id: int, user: User) -> SelectionProcess:
        process = self._get_process(process_id)
        self._stable_access(process.stable_id, user)
        turn = self._require_turn_holder(process, user)

        turn.status = "completed"
        turn.completed_at = _utcnow()

        next_index = process.current_turn_index + 1
        if next_index < len(process.turns):
            self._start_turn(process, next_index)
            logger.info(f"🔄 Process {process_id} advanced to turn {next_index}")
        else:
            process.status = "completed"
            process.completed_at = turn.completed_at
            process.current_turn_index = -1
            for participant in process.turns:
                notify(
                    self.db,
                    participant.user_id,
                    "selection_process_completed",
                    f"{process.name} is complete",
                    organization_id=process.organization_id,
                    stable_id=process.stable_id,
                    entity_type="selection_process",
                    entity_id=process.id,
                )
            logger.info(f"✅ Selection process {process_id} completed")

        return self.repo.save(self.db, process)
