"""Availability repository - Database operations for leave, schedules and balances"""

from datetime import date
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import (
    AvailabilitySettings,
    BalanceAdjustment,
    LeaveRequest,
    TimeBalance,
    WorkSchedule,
)


class AvailabilityRepository:
    """
    Repository for availability database operations.

    Balance helpers only stage changes on the session; the service commits them
    together with the leave request they belong to.
    """

    # ========================================================================
    # SETTINGS
    # ========================================================================

    @staticmethod
    def get_settings(db: Session, organization_id: int) -> Optional[AvailabilitySettings]:
        return (
            db.query(AvailabilitySettings)
            .filter(AvailabilitySettings.organization_id == organization_id)
            .first()
        )

    @staticmethod
    def save_settings(db: Session, organization_id: int, **updates) -> AvailabilitySettings:
        settings = (
            db.query(AvailabilitySettings)
            .filter(AvailabilitySettings.organization_id == organization_id)
            .first()
        )
        if not settings:
            settings = AvailabilitySettings(organization_id=organization_id)
            db.add(settings)

        for key, value in updates.items():
            if value is not None and hasattr(settings, key):
                setattr(settings, key, value)

        db.commit()
        db.refresh(settings)
        return settings

    # ========================================================================
    # WORK SCHEDULES
    # ========================================================================

    @staticmethod
    def get_schedule_on(db: Session, user_id: int, organization_id: int, on_date: date) -> Optional[WorkSchedule]:
        """Latest schedule version that started on or before the date"""
        return (
            db.query(WorkSchedule)
            .filter(
                WorkSchedule.user_id == user_id,
                WorkSchedule.organization_id == organization_id,
                WorkSchedule.effective_from <= on_date,
            )
            .order_by(WorkSchedule.effective_from.desc(), WorkSchedule.id.desc())
            .first()
        )

    @staticmethod
    def get_active_schedule(db: Session, user_id: int, organization_id: int, on_date: date) -> Optional[WorkSchedule]:
        return (
            db.query(WorkSchedule)
            .filter(
                WorkSchedule.user_id == user_id,
                WorkSchedule.organization_id == organization_id,
                WorkSchedule.effective_from <= on_date,
                or_(WorkSchedule.effective_until.is_(None), WorkSchedule.effective_until >= on_date),
            )
            .order_by(WorkSchedule.effective_from.desc(), WorkSchedule.id.desc())
            .first()
        )

    @staticmethod
    def create_schedule(db: Session, **schedule_data) -> WorkSchedule:
        schedule = WorkSchedule(**schedule_data)
        db.add(schedule)
        db.commit()
        db.refresh(schedule)
        return schedule

    @staticmethod
    def close_open_schedules(db: Session, user_id: int, organization_id: int, before: date, until: date) -> int:
        """End every open-ended version that started before a new version takes over"""
        open_schedules = (
            db.query(WorkSchedule)
            .filter(
                WorkSchedule.user_id == user_id,
                WorkSchedule.organization_id == organization_id,
                WorkSchedule.effective_from < before,
                WorkSchedule.effective_until.is_(None),
            )
            .all()
        )
        for schedule in open_schedules:
            schedule.effective_until = until
        return len(open_schedules)

    # ========================================================================
    # LEAVE REQUESTS
    # ========================================================================

    @staticmethod
    def list_leave_requests(
        db: Session,
        organization_id: int,
        user_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> list[LeaveRequest]:
        query = db.query(LeaveRequest).filter(LeaveRequest.organization_id == organization_id)
        if user_id is not None:
            query = query.filter(LeaveRequest.user_id == user_id)
        if status:
            query = query.filter(LeaveRequest.status == status)
        return query.order_by(LeaveRequest.first_day.desc(), LeaveRequest.id.desc()).all()

    @staticmethod
    def get_leave_request(db: Session, request_id: int) -> Optional[LeaveRequest]:
        return db.query(LeaveRequest).filter(LeaveRequest.id == request_id).first()

    @staticmethod
    def add_leave_request(db: Session, **request_data) -> LeaveRequest:
        leave_request = LeaveRequest(**request_data)
        db.add(leave_request)
        db.flush()
        return leave_request

    # ========================================================================
    # TIME BALANCES
    # ========================================================================

    @staticmethod
    def get_balance(db: Session, user_id: int, organization_id: int, year: int) -> Optional[TimeBalance]:
        return (
            db.query(TimeBalance)
            .filter(
                TimeBalance.user_id == user_id,
                TimeBalance.organization_id == organization_id,
                TimeBalance.year == year,
            )
            .first()
        )

    @staticmethod
    def get_or_add_balance(db: Session, user_id: int, organization_id: int, year: int) -> TimeBalance:
        balance = AvailabilityRepository.get_balance(db, user_id, organization_id, year)
        if balance:
            return balance

        balance = TimeBalance(
            user_id=user_id,
            organization_id=organization_id,
            year=year,
            carryover_from_previous_year=0.0,
            build_up_hours=0.0,
            corrections=0.0,
            approved_leave=0.0,
            tentative_leave=0.0,
            approved_overtime=0.0,
        )
        db.add(balance)
        db.flush()
        return balance

    @staticmethod
    def list_balances_for_year(db: Session, year: int) -> list[TimeBalance]:
        return db.query(TimeBalance).filter(TimeBalance.year == year).all()

    @staticmethod
    def add_adjustment(db: Session, **adjustment_data) -> BalanceAdjustment:
        adjustment = BalanceAdjustment(**adjustment_data)
        db.add(adjustment)
        return adjustment
