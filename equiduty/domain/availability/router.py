"""Availability router - FastAPI endpoints for leave, schedules and balances"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import AvailabilitySettings, LeaveRequest, User, WorkSchedule
from .schemas import (
    AvailabilitySettingsResponse,
    AvailabilitySettingsUpdate,
    BalanceAdjustmentRequest,
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveReview,
    MemberWithScheduleResponse,
    SickLeaveReport,
    TimeBalanceResponse,
    WorkScheduleResponse,
    WorkScheduleUpdate,
)
from .service import AvailabilityService

router = APIRouter(prefix="/availability", tags=["Availability"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


def _leave_response(r: LeaveRequest) -> LeaveRequestResponse:
    return LeaveRequestResponse(
        id=r.id,
        organizationId=r.organization_id,
        userId=r.user_id,
        userName=r.user.display_name if r.user else None,
        type=r.leave_type,
        status=r.status,
        firstDay=r.first_day,
        lastDay=r.last_day,
        isPartialDay=r.is_partial_day,
        partialDayType=r.partial_day_type,
        partialDayStartTime=r.partial_day_start_time,
        partialDayEndTime=r.partial_day_end_time,
        note=r.note,
        impactHours=r.impact_hours,
        reviewedBy=r.reviewed_by,
        reviewedAt=r.reviewed_at,
        reviewNote=r.review_note,
        cancelledAt=r.cancelled_at,
        requestedAt=r.requested_at,
    )


def _schedule_response(s: Optional[WorkSchedule]) -> Optional[WorkScheduleResponse]:
    if s is None:
        return None
    return WorkScheduleResponse(
        id=s.id,
        organizationId=s.organization_id,
        userId=s.user_id,
        weeklySchedule=s.weekly_schedule,
        effectiveFrom=s.effective_from,
        effectiveUntil=s.effective_until,
        createdAt=s.created_at,
    )


def _settings_response(s: AvailabilitySettings) -> AvailabilitySettingsResponse:
    return AvailabilitySettingsResponse(
        organizationId=s.organization_id,
        requireApproval=s.require_approval,
        sickLeaveAutoApprove=s.sick_leave_auto_approve,
        maxConsecutiveLeaveDays=s.max_consecutive_leave_days,
        minAdvanceNoticeDays=s.min_advance_notice_days,
        monthlyAccrualHours=s.monthly_accrual_hours,
        maxCarryoverHours=s.max_carryover_hours,
        carryoverExpiryMonths=s.carryover_expiry_months,
        maxBalanceHours=s.max_balance_hours,
    )


# ============================================================================
# LEAVE REQUESTS
# ============================================================================


@router.get("/leave-requests", response_model=list[LeaveRequestResponse])
async def list_my_leave_requests(
    organizationId: int = Query(...),
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    requests = service.list_my_leave_requests(organizationId, current_user, status)
    return [_leave_response(r) for r in requests]


@router.post("/leave-requests", response_model=LeaveRequestResponse, status_code=201)
async def create_leave_request(
    data: LeaveRequestCreate,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return _leave_response(service.create_leave_request(data, current_user))


@router.patch("/leave-requests/{request_id}", response_model=LeaveRequestResponse)
async def cancel_leave_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Cancel one of your own pending requests"""
    return _leave_response(service.cancel_leave_request(request_id, current_user))


@router.delete("/leave-requests/{request_id}", status_code=204)
async def delete_leave_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    service.delete_leave_request(request_id, current_user)
    return Response(status_code=204)


@router.post("/sick-leave", response_model=LeaveRequestResponse, status_code=201)
async def report_sick_leave(
    data: SickLeaveReport,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return _leave_response(service.report_sick_leave(data, current_user))


# ============================================================================
# SCHEDULE & BALANCE
# ============================================================================


@router.get("/schedule", response_model=Optional[WorkScheduleResponse])
async def get_my_schedule(
    organizationId: int = Query(...),
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return _schedule_response(service.get_my_schedule(organizationId, current_user))


@router.get("/balance", response_model=TimeBalanceResponse)
async def get_my_balance(
    organizationId: int = Query(...),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.get_my_balance(organizationId, current_user, year)


# ============================================================================
# ADMIN
# ============================================================================


@router.get("/admin/members-with-schedules", response_model=list[MemberWithScheduleResponse])
async def list_members_with_schedules(
    organizationId: int = Query(...),
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    rows = service.list_members_with_schedules(organizationId, current_user)
    return [
        MemberWithScheduleResponse(
            memberId=row["member"].id,
            userId=row["member"].user_id,
            displayName=row["member"].user.display_name,
            email=row["member"].user.email,
            roles=row["member"].roles or [],
            primaryRole=row["member"].primary_role,
            workSchedule=_schedule_response(row["schedule"]),
            timeBalance=row["balance"],
        )
        for row in rows
    ]


@router.put("/admin/schedules/{user_id}", response_model=WorkScheduleResponse, status_code=201)
async def set_member_schedule(
    user_id: int,
    data: WorkScheduleUpdate,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Start a new schedule version for a member"""
    return _schedule_response(service.set_schedule(user_id, data, current_user))


@router.get("/admin/leave-requests", response_model=list[LeaveRequestResponse])
async def list_organization_leave_requests(
    organizationId: int = Query(...),
    status: Optional[str] = Query(None),
    userId: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    requests = service.list_leave_requests(organizationId, current_user, status, userId)
    return [_leave_response(r) for r in requests]


@router.post("/admin/leave-requests/{request_id}/review", response_model=LeaveRequestResponse)
async def review_leave_request(
    request_id: int,
    data: LeaveReview,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return _leave_response(service.review_leave_request(request_id, data, current_user))


@router.patch("/admin/balance/{user_id}", response_model=TimeBalanceResponse)
async def adjust_member_balance(
    user_id: int,
    data: BalanceAdjustmentRequest,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.adjust_balance(user_id, data, current_user)


@router.get("/admin/settings", response_model=AvailabilitySettingsResponse)
async def get_settings(
    organizationId: int = Query(...),
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return _settings_response(service.get_settings(organizationId, current_user))


@router.put("/admin/settings", response_model=AvailabilitySettingsResponse)
async def update_settings(
    data: AvailabilitySettingsUpdate,
    organizationId: int = Query(...),
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return _settings_response(service.update_settings(organizationId, data, current_user))
