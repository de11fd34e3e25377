"""Availability service - Leave requests, work schedules and time balances"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...authorization import (
    get_active_membership,
    is_system_admin,
    list_active_members,
    list_organization_admin_ids,
    require_organization_access,
    require_organization_admin,
)
from ...models import AvailabilitySettings, LeaveRequest, Organization, TimeBalance, User, WorkSchedule
from ...plan_limits import require_module
from ..notifications.service import notify
from .balance import (
    AccrualConfig,
    BalanceFigures,
    calculate_current_balance,
    calculate_end_of_year_projection,
    calculate_impact_hours,
    figures_from,
)
from .repository import AvailabilityRepository
from .schemas import (
    AvailabilitySettingsUpdate,
    BalanceAdjustmentRequest,
    LeaveRequestCreate,
    LeaveReview,
    SickLeaveReport,
    WorkScheduleUpdate,
)

logger = logging.getLogger(__name__)

LEAVE_MODULE = "leaveManagement"
MAX_LEAVE_DURATION_DAYS = 365
MAX_YEARS_AHEAD = 2

DEFAULT_SETTINGS = {
    "require_approval": True,
    "sick_leave_auto_approve": True,
    "max_consecutive_leave_days": 30,
    "min_advance_notice_days": 0,
    "monthly_accrual_hours": 2.5,
    "max_carryover_hours": 40.0,
    "carryover_expiry_months": 3,
    "max_balance_hours": 200.0,
}

SETTINGS_FIELDS = {
    "requireApproval": "require_approval",
    "sickLeaveAutoApprove": "sick_leave_auto_approve",
    "maxConsecutiveLeaveDays": "max_consecutive_leave_days",
    "minAdvanceNoticeDays": "min_advance_notice_days",
    "monthlyAccrualHours": "monthly_accrual_hours",
    "maxCarryoverHours": "max_carryover_hours",
    "carryoverExpiryMonths": "carryover_expiry_months",
    "maxBalanceHours": "max_balance_hours",
}


def accrual_config_from(settings: AvailabilitySettings) -> AccrualConfig:
    return AccrualConfig(
        monthly_accrual_hours=settings.monthly_accrual_hours,
        max_carryover_hours=settings.max_carryover_hours,
        carryover_expiry_months=settings.carryover_expiry_months,
        max_balance_hours=settings.max_balance_hours,
    )


def balance_to_dict(
    balance: Optional[TimeBalance],
    user_id: int,
    organization_id: int,
    year: int,
    as_of: Optional[date] = None,
) -> dict:
    """Serialize a balance with its derived figures; a missing balance reads as all zeros"""
    figures = figures_from(balance) if balance else BalanceFigures(year=year)
    return {
        "id": balance.id if balance else None,
        "organizationId": organization_id,
        "userId": user_id,
        "year": year,
        "carryoverFromPreviousYear": figures.carryover_from_previous_year,
        "buildUpHours": figures.build_up_hours,
        "corrections": figures.corrections,
        "approvedLeave": figures.approved_leave,
        "tentativeLeave": figures.tentative_leave,
        "approvedOvertime": figures.approved_overtime,
        "currentBalance": calculate_current_balance(figures),
        "endOfYearProjection": calculate_end_of_year_projection(figures, as_of),
    }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AvailabilityService:
    """Service layer for leave and time-balance business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AvailabilityRepository()

    def _member_access(self, organization_id: int, user: User) -> Organization:
        organization = require_organization_access(self.db, user, organization_id)
        require_module(self.db, organization, LEAVE_MODULE)
        return organization

    def _admin_access(self, organization_id: int, user: User) -> Organization:
        organization = require_organization_admin(self.db, user, organization_id)
        require_module(self.db, organization, LEAVE_MODULE)
        return organization

    def get_settings_or_default(self, organization_id: int) -> AvailabilitySettings:
        settings = self.repo.get_settings(self.db, organization_id)
        if settings:
            return settings
        # Transient row, never added to the session
        return AvailabilitySettings(organization_id=organization_id, **DEFAULT_SETTINGS)

    # ========================================================================
    # LEAVE REQUESTS
    # ========================================================================

    def list_my_leave_requests(self, organization_id: int, user: User, status: Optional[str]) -> list[LeaveRequest]:
        self._member_access(organization_id, user)
        return self.repo.list_leave_requests(self.db, organization_id, user_id=user.id, status=status)

    def create_leave_request(self, data: LeaveRequestCreate, user: User) -> LeaveRequest:
        logger.info(f"📥 Leave request from user {user.id}: {data.type} {data.firstDay} - {data.lastDay}")
        organization = self._member_access(data.organizationId, user)
        settings = self.get_settings_or_default(organization.id)

        today = date.today()
        if data.lastDay < data.firstDay:
            raise HTTPException(status_code=400, detail="Last day must be on or after first day")
        if data.firstDay < today:
            raise HTTPException(status_code=400, detail="Cannot create leave requests for past dates")
        try:
            max_future = today.replace(year=today.year + MAX_YEARS_AHEAD)
        except ValueError:
            # 29 February
            max_future = today.replace(year=today.year + MAX_YEARS_AHEAD, day=28)
        if data.lastDay > max_future:
            raise HTTPException(status_code=400, detail="Leave requests cannot be more than 2 years in advance")

        duration_days = (data.lastDay - data.firstDay).days + 1
        if duration_days > MAX_LEAVE_DURATION_DAYS:
            raise HTTPException(status_code=400, detail="Leave request duration cannot exceed 365 days")

        if data.type != "sick":
            if duration_days > settings.max_consecutive_leave_days:
                raise HTTPException(
                    status_code=400,
                    detail=f"Leave cannot exceed {settings.max_consecutive_leave_days} consecutive days",
                )
            notice_days = (data.firstDay - today).days
            if notice_days < settings.min_advance_notice_days:
                raise HTTPException(
                    status_code=400,
                    detail=f"Leave must be requested at least {settings.min_advance_notice_days} days in advance",
                )

        auto_approve = not settings.require_approval or (data.type == "sick" and settings.sick_leave_auto_approve)
        return self._submit(organization, user, data, auto_approve)

    def report_sick_leave(self, data: SickLeaveReport, user: User) -> LeaveRequest:
        """Single-day sick report, always approved on the spot"""
        organization = self._member_access(data.organizationId, user)
        request = LeaveRequestCreate(
            organizationId=data.organizationId,
            type="sick",
            firstDay=data.firstDay,
            lastDay=data.firstDay,
            note=data.note,
        )
        return self._submit(organization, user, request, auto_approve=True)

    def _submit(self, organization: Organization, user: User, data: LeaveRequestCreate, auto_approve: bool) -> LeaveRequest:
        schedule = self.repo.get_schedule_on(self.db, user.id, organization.id, data.firstDay)
        impact_hours = calculate_impact_hours(
            schedule.weekly_schedule if schedule else None,
            data.firstDay,
            data.lastDay,
            data.partialDayType if data.isPartialDay else None,
            data.partialDayStartTime,
            data.partialDayEndTime,
        )

        now = _utcnow()
        review_fields = {}
        if auto_approve:
            review_fields = {
                "reviewed_by": "system",
                "reviewed_at": now,
                "review_note": "Auto-approved sick leave" if data.type == "sick" else "Auto-approved",
            }

        try:
            leave_request = self.repo.add_leave_request(
                self.db,
                organization_id=organization.id,
                user_id=user.id,
                leave_type=data.type,
                status="approved" if auto_approve else "pending",
                first_day=data.firstDay,
                last_day=data.lastDay,
                is_partial_day=data.isPartialDay,
                partial_day_type=data.partialDayType if data.isPartialDay else None,
                partial_day_start_time=data.partialDayStartTime if data.isPartialDay else None,
                partial_day_end_time=data.partialDayEndTime if data.isPartialDay else None,
                note=data.note,
                impact_hours=impact_hours,
                requested_at=now,
                **review_fields,
            )

            balance = self.repo.get_or_add_balance(self.db, user.id, organization.id, data.firstDay.year)
            if auto_approve:
                balance.approved_leave = (balance.approved_leave or 0.0) + impact_hours
            else:
                balance.tentative_leave = (balance.tentative_leave or 0.0) + impact_hours
                for admin_id in list_organization_admin_ids(self.db, organization):
                    if admin_id == user.id:
                        continue
                    notify(
                        self.db,
                        admin_id,
                        "leave_request_submitted",
                        f"{user.display_name} requested {data.type} leave",
                        message=f"{data.firstDay.isoformat()} to {data.lastDay.isoformat()} ({impact_hours}h)",
                        organization_id=organization.id,
                        entity_type="leave_request",
                        entity_id=leave_request.id,
                    )

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(leave_request)
        logger.info(f"✅ Leave request {leave_request.id} created with status {leave_request.status}")
        return leave_request

    def _release_tentative(self, leave_request: LeaveRequest) -> None:
        balance = self.repo.get_balance(
            self.db, leave_request.user_id, leave_request.organization_id, leave_request.first_day.year
        )
        if balance:
            balance.tentative_leave = max(0.0, (balance.tentative_leave or 0.0) - leave_request.impact_hours)

    def _get_leave_request(self, request_id: int) -> LeaveRequest:
        leave_request = self.repo.get_leave_request(self.db, request_id)
        if not leave_request:
            raise HTTPException(status_code=404, detail="Leave request not found")
        return leave_request

    def cancel_leave_request(self, request_id: int, user: User) -> LeaveRequest:
        leave_request = self._get_leave_request(request_id)
        if leave_request.user_id != user.id:
            raise HTTPException(status_code=403, detail="You can only cancel your own leave requests")
        self._member_access(leave_request.organization_id, user)
        if leave_request.status != "pending":
            raise HTTPException(status_code=400, detail="Only pending leave requests can be cancelled")

        leave_request.status = "cancelled"
        leave_request.cancelled_at = _utcnow()
        self._release_tentative(leave_request)
        self.db.commit()
        self.db.refresh(leave_request)
        logger.info(f"✅ Leave request {request_id} cancelled")
        return leave_request

    def delete_leave_request(self, request_id: int, user: User) -> None:
        leave_request = self._get_leave_request(request_id)
        if leave_request.user_id != user.id and not is_system_admin(user):
            raise HTTPException(status_code=403, detail="You can only delete your own leave requests")
        if leave_request.status != "pending":
            raise HTTPException(status_code=400, detail="Only pending leave requests can be deleted")

        self._release_tentative(leave_request)
        self.db.delete(leave_request)
        self.db.commit()
        logger.info(f"🗑️ Leave request {request_id} deleted by user {user.id}")

    # ========================================================================
    # SCHEDULE & BALANCE (SELF)
    # ========================================================================

    def get_my_schedule(self, organization_id: int, user: User) -> Optional[WorkSchedule]:
        self._member_access(organization_id, user)
        return self.repo.get_active_schedule(self.db, user.id, organization_id, date.today())

    def get_my_balance(self, organization_id: int, user: User, year: Optional[int]) -> dict:
        self._member_access(organization_id, user)
        target_year = year or date.today().year
        balance = self.repo.get_balance(self.db, user.id, organization_id, target_year)
        return balance_to_dict(balance, user.id, organization_id, target_year)

    # ========================================================================
    # ADMIN
    # ========================================================================

    def list_members_with_schedules(self, organization_id: int, user: User) -> list[dict]:
        self._admin_access(organization_id, user)
        today = date.today()

        members = []
        for member in list_active_members(self.db, organization_id):
            schedule = self.repo.get_active_schedule(self.db, member.user_id, organization_id, today)
            balance = self.repo.get_balance(self.db, member.user_id, organization_id, today.year)
            members.append(
                {
                    "member": member,
                    "schedule": schedule,
                    "balance": balance_to_dict(balance, member.user_id, organization_id, today.year, today),
                }
            )
        return members

    def set_schedule(self, user_id: int, data: WorkScheduleUpdate, admin: User) -> WorkSchedule:
        self._admin_access(data.organizationId, admin)
        if not get_active_membership(self.db, user_id, data.organizationId):
            raise HTTPException(status_code=404, detail="User is not a member of this organization")

        closed = self.repo.close_open_schedules(
            self.db,
            user_id,
            data.organizationId,
            before=data.effectiveFrom,
            until=data.effectiveFrom - timedelta(days=1),
        )
        schedule = self.repo.create_schedule(
            self.db,
            organization_id=data.organizationId,
            user_id=user_id,
            weekly_schedule=[day.model_dump() for day in data.weeklySchedule],
            effective_from=data.effectiveFrom,
            effective_until=data.effectiveUntil,
            created_by=admin.id,
        )
        logger.info(f"✅ Work schedule {schedule.id} set for user {user_id} ({closed} previous versions closed)")
        return schedule

    def list_leave_requests(
        self, organization_id: int, admin: User, status: Optional[str], user_id: Optional[int]
    ) -> list[LeaveRequest]:
        self._admin_access(organization_id, admin)
        return self.repo.list_leave_requests(self.db, organization_id, user_id=user_id, status=status)

    def review_leave_request(self, request_id: int, data: LeaveReview, admin: User) -> LeaveRequest:
        leave_request = self._get_leave_request(request_id)
        self._admin_access(leave_request.organization_id, admin)
        if leave_request.status != "pending":
            raise HTTPException(status_code=400, detail="Only pending leave requests can be reviewed")

        logger.info(f"🔄 Reviewing leave request {request_id}: {data.status}")
        try:
            balance = self.repo.get_or_add_balance(
                self.db, leave_request.user_id, leave_request.organization_id, leave_request.first_day.year
            )
            balance.tentative_leave = max(0.0, (balance.tentative_leave or 0.0) - leave_request.impact_hours)
            if data.status == "approved":
                balance.approved_leave = (balance.approved_leave or 0.0) + leave_request.impact_hours

            leave_request.status = data.status
            leave_request.reviewed_by = str(admin.id)
            leave_request.reviewed_at = _utcnow()
            leave_request.review_note = data.reviewNote

            notify(
                self.db,
                leave_request.user_id,
                "leave_request_reviewed",
                f"Your leave request was {data.status}",
                message=data.reviewNote,
                organization_id=leave_request.organization_id,
                entity_type="leave_request",
                entity_id=leave_request.id,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(leave_request)
        logger.info(f"✅ Leave request {request_id} {data.status} by user {admin.id}")
        return leave_request

    def adjust_balance(self, user_id: int, data: BalanceAdjustmentRequest, admin: User) -> dict:
        self._admin_access(data.organizationId, admin)
        if not get_active_membership(self.db, user_id, data.organizationId):
            raise HTTPException(status_code=404, detail="User is not a member of this organization")

        try:
            balance = self.repo.get_or_add_balance(self.db, user_id, data.organizationId, data.year)
            balance.corrections = (balance.corrections or 0.0) + data.hours
            self.repo.add_adjustment(
                self.db,
                organization_id=data.organizationId,
                user_id=user_id,
                year=data.year,
                hours=data.hours,
                reason=data.reason,
                adjusted_by=admin.id,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(balance)
        logger.info(f"✅ Balance of user {user_id} for {data.year} adjusted by {data.hours}h")
        return balance_to_dict(balance, user_id, data.organizationId, data.year)

    def get_settings(self, organization_id: int, admin: User) -> AvailabilitySettings:
        self._admin_access(organization_id, admin)
        return self.get_settings_or_default(organization_id)

    def update_settings(self, organization_id: int, data: AvailabilitySettingsUpdate, admin: User) -> AvailabilitySettings:
        organization = self._admin_access(organization_id, admin)
        existing = self.repo.get_settings(self.db, organization.id)

        updates = {} if existing else dict(DEFAULT_SETTINGS)
        for field, column in SETTINGS_FIELDS.items():
            value = getattr(data, field)
            if value is not None:
                updates[column] = value

        settings = self.repo.save_settings(self.db, organization.id, **updates)
        logger.info(f"✅ Availability settings updated for organization {organization.id}")
        return settings
