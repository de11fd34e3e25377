"""Selection process repository - Database operations for processes and turns"""

from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import RoutineInstance, SelectionProcess, SelectionTurn


class SelectionRepository:
    """Repository for selection process database operations"""

    @staticmethod
    def list_for_stable(db: Session, stable_id: int, status: Optional[str] = None) -> list[SelectionProcess]:
        query = db.query(SelectionProcess).filter(SelectionProcess.stable_id == stable_id)
        if status:
            query = query.filter(SelectionProcess.status == status)
        return query.order_by(SelectionProcess.created_at.desc(), SelectionProcess.id.desc()).all()

    @staticmethod
    def get_process(db: Session, process_id: int) -> Optional[SelectionProcess]:
        return db.query(SelectionProcess).filter(SelectionProcess.id == process_id).first()

    @staticmethod
    def get_last_completed(db: Session, stable_id: int) -> Optional[SelectionProcess]:
        return (
            db.query(SelectionProcess)
            .filter(
                SelectionProcess.stable_id == stable_id,
                SelectionProcess.status == "completed",
            )
            .order_by(SelectionProcess.completed_at.desc(), SelectionProcess.id.desc())
            .first()
        )

    @staticmethod
    def sum_open_points(db: Session, stable_id: int, start_date: date, end_date: date) -> int:
        """Points still up for grabs: unassigned, scheduled instances in the window"""
        total = (
            db.query(func.coalesce(func.sum(RoutineInstance.points_value), 0))
            .filter(
                RoutineInstance.stable_id == stable_id,
                RoutineInstance.scheduled_date >= start_date,
                RoutineInstance.scheduled_date <= end_date,
                RoutineInstance.assigned_to.is_(None),
                RoutineInstance.status == "scheduled",
            )
            .scalar()
        )
        return int(total or 0)

    @staticmethod
    def create_process(db: Session, turn_order: list[int], **process_data) -> SelectionProcess:
        process = SelectionProcess(**process_data)
        process.turns = [
            SelectionTurn(user_id=user_id, order=index, status="pending", selections_count=0)
            for index, user_id in enumerate(turn_order)
        ]
        db.add(process)
        db.commit()
        db.refresh(process)
        return process

    @staticmethod
    def save(db: Session, process: SelectionProcess) -> SelectionProcess:
        db.commit()
        db.refresh(process)
        return process

    @staticmethod
    def delete_process(db: Session, process: SelectionProcess) -> None:
        db.delete(process)
        db.commit()
