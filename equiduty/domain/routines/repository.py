"""Routine repository - Database operations for routine templates and instances"""

from datetime import date
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import RoutineInstance, RoutineTemplate


class RoutineRepository:
    """Repository for routine database operations"""

    # ========================================================================
    # TEMPLATES
    # ========================================================================

    @staticmethod
    def list_templates(
        db: Session,
        organization_id: int,
        stable_id: Optional[int] = None,
        active_only: bool = True,
    ) -> list[RoutineTemplate]:
        query = db.query(RoutineTemplate).filter(RoutineTemplate.organization_id == organization_id)
        if stable_id is not None:
            # Organization-wide templates apply to every stable
            query = query.filter(
                or_(RoutineTemplate.stable_id == stable_id, RoutineTemplate.stable_id.is_(None))
            )
        if active_only:
            query = query.filter(RoutineTemplate.is_active.is_(True))
        return query.order_by(RoutineTemplate.default_start_time, RoutineTemplate.name).all()

    @staticmethod
    def get_template(db: Session, template_id: int) -> Optional[RoutineTemplate]:
        return db.query(RoutineTemplate).filter(RoutineTemplate.id == template_id).first()

    @staticmethod
    def create_template(db: Session, **template_data) -> RoutineTemplate:
        template = RoutineTemplate(**template_data)
        db.add(template)
        db.commit()
        db.refresh(template)
        return template

    @staticmethod
    def update_template(db: Session, template: RoutineTemplate, **updates) -> RoutineTemplate:
        for key, value in updates.items():
            if value is not None and hasattr(template, key):
                setattr(template, key, value)
        db.commit()
        db.refresh(template)
        return template

    # ========================================================================
    # INSTANCES
    # ========================================================================

    @staticmethod
    def list_instances(
        db: Session,
        stable_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[str] = None,
        assigned_to: Optional[int] = None,
    ) -> list[RoutineInstance]:
        query = db.query(RoutineInstance).filter(RoutineInstance.stable_id == stable_id)
        if start_date:
            query = query.filter(RoutineInstance.scheduled_date >= start_date)
        if end_date:
            query = query.filter(RoutineInstance.scheduled_date <= end_date)
        if status:
            query = query.filter(RoutineInstance.status == status)
        if assigned_to is not None:
            query = query.filter(RoutineInstance.assigned_to == assigned_to)
        return query.order_by(
            RoutineInstance.scheduled_date, RoutineInstance.scheduled_start_time, RoutineInstance.id
        ).all()

    @staticmethod
    def get_instance(db: Session, instance_id: int) -> Optional[RoutineInstance]:
        return db.query(RoutineInstance).filter(RoutineInstance.id == instance_id).first()

    @staticmethod
    def create_instance(db: Session, **instance_data) -> RoutineInstance:
        instance = RoutineInstance(**instance_data)
        db.add(instance)
        db.flush()
        return instance

    @staticmethod
    def save(db: Session, instance: RoutineInstance) -> RoutineInstance:
        db.commit()
        db.refresh(instance)
        return instance

    @staticmethod
    def delete_instance(db: Session, instance: RoutineInstance) -> None:
        db.delete(instance)
        db.commit()
