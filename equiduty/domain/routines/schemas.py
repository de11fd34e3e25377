"""Routine domain schemas - Templates and scheduled routine instances"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_time_of_day

RoutineType = Literal["morning", "midday", "evening", "custom"]
RoutineStatus = Literal["scheduled", "started", "in_progress", "completed", "missed", "cancelled"]


class RoutineStep(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    estimatedMinutes: Optional[int] = Field(None, ge=0)


# ============================================================================
# TEMPLATES
# ============================================================================


class RoutineTemplateCreate(BaseModel):
    organizationId: int
    stableId: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    type: RoutineType = "custom"
    defaultStartTime: str
    estimatedDuration: int = Field(30, ge=1, le=1440)
    pointsValue: int = Field(1, ge=0, le=100)
    steps: list[RoutineStep] = []

    @field_validator("defaultStartTime")
    @classmethod
    def check_time(cls, v):
        return validate_time_of_day(v)


class RoutineTemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[RoutineType] = None
    defaultStartTime: Optional[str] = None
    estimatedDuration: Optional[int] = Field(None, ge=1, le=1440)
    pointsValue: Optional[int] = Field(None, ge=0, le=100)
    steps: Optional[list[RoutineStep]] = None
    isActive: Optional[bool] = None

    @field_validator("defaultStartTime")
    @classmethod
    def check_time(cls, v):
        return validate_time_of_day(v)


class RoutineTemplateResponse(BaseModel):
    id: int
    organizationId: int
    stableId: Optional[int] = None
    name: str
    description: Optional[str] = None
    type: str
    defaultStartTime: str
    estimatedDuration: int
    pointsValue: int
    steps: list[RoutineStep]
    isActive: bool
    createdAt: Optional[datetime] = None


# ============================================================================
# INSTANCES
# ============================================================================


class RoutineInstanceCreate(BaseModel):
    templateId: int
    stableId: int
    scheduledDate: date
    scheduledStartTime: Optional[str] = None
    assignedTo: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("scheduledStartTime")
    @classmethod
    def check_time(cls, v):
        return validate_time_of_day(v)


class AssignRoutineRequest(BaseModel):
    """userId None clears the assignment"""

    userId: Optional[int] = None


class RoutineProgressUpdate(BaseModel):
    stepsCompleted: int = Field(..., ge=0)
    notes: Optional[str] = None


class CompleteRoutineRequest(BaseModel):
    notes: Optional[str] = None


class CancelRoutineRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class RoutineInstanceResponse(BaseModel):
    id: int
    organizationId: int
    stableId: int
    templateId: int
    templateName: str
    type: str
    scheduledDate: date
    scheduledStartTime: str
    estimatedDuration: int
    status: str
    assignedTo: Optional[int] = None
    assignedToName: Optional[str] = None
    assignedAt: Optional[datetime] = None
    pointsValue: int
    pointsAwarded: Optional[int] = None
    stepsCompleted: int
    stepsTotal: int
    startedAt: Optional[datetime] = None
    completedAt: Optional[datetime] = None
    completedBy: Optional[int] = None
    completedByName: Optional[str] = None
    cancelledAt: Optional[datetime] = None
    cancellationReason: Optional[str] = None
    notes: Optional[str] = None
