"""Fairness domain schemas - Response models for point distribution reports"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel


class MemberFairness(BaseModel):
    userId: int
    displayName: str
    totalPoints: int
    tasksCompleted: int
    estimatedHoursWorked: float
    fairnessScore: int
    percentageOfTotal: float
    deviationFromAverage: float
    trend: Literal["up", "down", "stable"]
    trendValue: float


class FairnessDistributionResponse(BaseModel):
    stableId: int
    stableName: Optional[str] = None
    period: str
    periodStartDate: date
    periodEndDate: date
    totalPoints: int
    totalTasks: int
    averagePointsPerMember: float
    averageTasksPerMember: float
    activeMemberCount: int
    members: list[MemberFairness]
    fairnessIndex: int
    giniCoefficient: float
    generatedAt: datetime


class PointsHistoryEntry(BaseModel):
    date: date
    points: int
    cumulativePoints: int
    tasksCompleted: int


class MemberPointsHistoryResponse(BaseModel):
    userId: int
    displayName: str
    history: list[PointsHistoryEntry]
    totalPoints: int
    averagePointsPerDay: float


class AssignmentSuggestion(BaseModel):
    userId: int
    displayName: str
    historicalPoints: int
    priority: int


class AssignmentSuggestionsResponse(BaseModel):
    suggestions: list[AssignmentSuggestion]
    totalMembers: int
