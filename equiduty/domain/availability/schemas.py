"""Availability domain schemas - Leave requests, work schedules and time balances"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import minutes_of_day, validate_time_of_day

LeaveType = Literal["vacation", "sick", "parental", "other"]
PartialDayType = Literal["morning", "afternoon", "custom"]


# ============================================================================
# LEAVE REQUESTS
# ============================================================================


class LeaveRequestCreate(BaseModel):
    organizationId: int
    type: LeaveType
    firstDay: date
    lastDay: date
    isPartialDay: bool = False
    partialDayType: Optional[PartialDayType] = None
    partialDayStartTime: Optional[str] = None
    partialDayEndTime: Optional[str] = None
    note: Optional[str] = Field(None, max_length=1000)

    @field_validator("partialDayStartTime", "partialDayEndTime")
    @classmethod
    def check_time(cls, v):
        return validate_time_of_day(v)

    @model_validator(mode="after")
    def check_partial_day(self):
        if not self.isPartialDay:
            return self
        if self.firstDay != self.lastDay:
            raise ValueError("Partial days are only allowed for single-day requests")
        if not self.partialDayType:
            raise ValueError("partialDayType is required for partial days")
        if self.partialDayType == "custom":
            if not (self.partialDayStartTime and self.partialDayEndTime):
                raise ValueError("Custom partial days need a start and end time")
            if minutes_of_day(self.partialDayEndTime) <= minutes_of_day(self.partialDayStartTime):
                raise ValueError("End time must be after start time")
        return self


class SickLeaveReport(BaseModel):
    organizationId: int
    firstDay: date
    note: Optional[str] = Field(None, max_length=1000)


class LeaveRequestResponse(BaseModel):
    id: int
    organizationId: int
    userId: int
    userName: Optional[str] = None
    type: str
    status: str
    firstDay: date
    lastDay: date
    isPartialDay: bool
    partialDayType: Optional[str] = None
    partialDayStartTime: Optional[str] = None
    partialDayEndTime: Optional[str] = None
    note: Optional[str] = None
    impactHours: float
    reviewedBy: Optional[str] = None
    reviewedAt: Optional[datetime] = None
    reviewNote: Optional[str] = None
    cancelledAt: Optional[datetime] = None
    requestedAt: Optional[datetime] = None


class LeaveReview(BaseModel):
    status: Literal["approved", "rejected"]
    reviewNote: Optional[str] = Field(None, max_length=1000)


# ============================================================================
# WORK SCHEDULES
# ============================================================================


class DaySchedule(BaseModel):
    dayOfWeek: int = Field(..., ge=0, le=6)
    startTime: str = "08:00"
    hours: float = Field(..., ge=0, le=24)
    isWorkDay: bool

    @field_validator("startTime")
    @classmethod
    def check_start(cls, v):
        return validate_time_of_day(v)


class WorkScheduleUpdate(BaseModel):
    organizationId: int
    weeklySchedule: list[DaySchedule]
    effectiveFrom: date
    effectiveUntil: Optional[date] = None

    @field_validator("weeklySchedule")
    @classmethod
    def check_days(cls, v):
        days = [d.dayOfWeek for d in v]
        if len(days) != len(set(days)):
            raise ValueError("Each day of the week may appear only once")
        return v

    @model_validator(mode="after")
    def check_range(self):
        if self.effectiveUntil and self.effectiveUntil < self.effectiveFrom:
            raise ValueError("effectiveUntil must be on or after effectiveFrom")
        return self


class WorkScheduleResponse(BaseModel):
    id: int
    organizationId: int
    userId: int
    weeklySchedule: list[DaySchedule]
    effectiveFrom: date
    effectiveUntil: Optional[date] = None
    createdAt: Optional[datetime] = None


# ============================================================================
# TIME BALANCES
# ============================================================================


class TimeBalanceResponse(BaseModel):
    id: Optional[int] = None
    organizationId: int
    userId: int
    year: int
    carryoverFromPreviousYear: float
    buildUpHours: float
    corrections: float
    approvedLeave: float
    tentativeLeave: float
    approvedOvertime: float
    currentBalance: float
    endOfYearProjection: float


class BalanceAdjustmentRequest(BaseModel):
    organizationId: int
    year: int = Field(..., ge=2000, le=2100)
    hours: float
    reason: str = Field(..., min_length=1, max_length=500)


class MemberWithScheduleResponse(BaseModel):
    memberId: int
    userId: int
    displayName: str
    email: str
    roles: list[str]
    primaryRole: Optional[str] = None
    workSchedule: Optional[WorkScheduleResponse] = None
    timeBalance: TimeBalanceResponse


# ============================================================================
# SETTINGS
# ============================================================================


class AvailabilitySettingsResponse(BaseModel):
    organizationId: int
    requireApproval: bool
    sickLeaveAutoApprove: bool
    maxConsecutiveLeaveDays: int
    minAdvanceNoticeDays: int
    monthlyAccrualHours: float
    maxCarryoverHours: float
    carryoverExpiryMonths: int
    maxBalanceHours: float


class AvailabilitySettingsUpdate(BaseModel):
    requireApproval: Optional[bool] = None
    sickLeaveAutoApprove: Optional[bool] = None
    maxConsecutiveLeaveDays: Optional[int] = Field(None, ge=1, le=365)
    minAdvanceNoticeDays: Optional[int] = Field(None, ge=0, le=365)
    monthlyAccrualHours: Optional[float] = Field(None, ge=0)
    maxCarryoverHours: Optional[float] = Field(None, ge=0)
    carryoverExpiryMonths: Optional[int] = Field(None, ge=0, le=12)
    maxBalanceHours: Optional[float] = Field(None, ge=0)
