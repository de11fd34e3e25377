"""Selection process schemas - Turn-based routine selection"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

SelectionAlgorithm = Literal["manual", "quota_based", "points_balance", "fair_rotation"]


class SelectionProcessCreate(BaseModel):
    stableId: int
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    algorithm: SelectionAlgorithm = "manual"
    selectionStartDate: date
    selectionEndDate: date
    memberIds: list[int] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_window(self):
        if self.selectionEndDate < self.selectionStartDate:
            raise ValueError("selectionEndDate must be on or after selectionStartDate")
        return self


class SelectInstanceRequest(BaseModel):
    routineInstanceId: int


class SelectionTurnResponse(BaseModel):
    userId: int
    displayName: str
    order: int
    status: str
    selectionsCount: int
    startedAt: Optional[datetime] = None
    completedAt: Optional[datetime] = None


class SelectionProcessResponse(BaseModel):
    id: int
    organizationId: int
    stableId: int
    name: str
    description: Optional[str] = None
    algorithm: str
    status: str
    selectionStartDate: date
    selectionEndDate: date
    currentTurnIndex: int
    quotaPerMember: Optional[float] = None
    currentTurnUserId: Optional[int] = None
    turns: list[SelectionTurnResponse]
    createdBy: int
    startedAt: Optional[datetime] = None
    completedAt: Optional[datetime] = None
    cancelledAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None
