"""
Fairness calculations over completed routine points.

Pure functions only: callers load the completed tasks and pass them in, so
everything here can be exercised without a database.
"""

import math
from datetime import date, datetime, time, timedelta
from typing import Iterable, NamedTuple, Optional

from dateutil.relativedelta import relativedelta

PERIODS = ("week", "month", "quarter", "year")
DEFAULT_PERIOD = "month"

# Points are estimated at 30 minutes of work each
MINUTES_PER_POINT = 30


class CompletedTask(NamedTuple):
    user_id: int
    display_name: str
    points: int
    completed_at: datetime


def round_half_up(value: float, digits: int = 0) -> float:
    """Round .5 upwards like a spreadsheet would (round() rounds to even)"""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def task_points(points_awarded: Optional[int], points_value: Optional[int]) -> int:
    return points_awarded or points_value or 0


def calculate_gini_coefficient(values: Iterable[float]) -> float:
    """
    Gini coefficient of a point distribution.
    0 = perfect equality, approaching 1 = one member holds everything.
    """
    values = list(values)
    n = len(values)
    if n == 0:
        return 0.0

    mean = sum(values) / n
    if mean == 0:
        return 0.0

    sum_of_absolute_differences = sum(abs(a - b) for a in values for b in values)
    return sum_of_absolute_differences / (2 * n * n * mean)


def calculate_fairness_index(gini: float) -> int:
    """0-100, higher = more fair"""
    return int(round_half_up((1 - gini) * 100))


def calculate_member_fairness_score(member_points: float, average_points: float) -> int:
    """0-100 where 50 = exactly average; 0.5x average = 25, 1.5x average = 75"""
    if average_points == 0:
        return 50

    score = round_half_up(member_points / average_points * 50)
    return int(min(100, max(0, score)))


def calculate_trend(recent_points: float, older_points: float) -> tuple[str, float]:
    diff = recent_points - older_points
    threshold = max(1, older_points * 0.1)

    if abs(diff) < threshold:
        return "stable", 0

    return ("up" if diff > 0 else "down"), abs(diff)


def calculate_assignment_priority(points: float) -> int:
    if points == 0:
        return 1
    return min(10, math.ceil(10 / (points / 10 + 1)))


def get_period_date_range(period: str, now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """Window from the start of the day one period back until the end of today"""
    now = now or datetime.utcnow()
    end = datetime.combine(now.date(), time.max)
    start_day = datetime.combine(now.date(), time.min)

    if period == "week":
        start = start_day - timedelta(days=7)
    elif period == "quarter":
        start = start_day - relativedelta(months=3)
    elif period == "year":
        start = start_day - relativedelta(years=1)
    else:
        start = start_day - relativedelta(months=1)

    return start, end


def get_period_midpoint(start: datetime, end: datetime) -> datetime:
    return start + (end - start) / 2


def calculate_distribution(tasks: Iterable[CompletedTask], start: datetime, end: datetime) -> dict:
    """Aggregate completed tasks per member and score the spread of points"""
    midpoint = get_period_midpoint(start, end)
    members: dict[int, dict] = {}

    for task in tasks:
        member = members.setdefault(
            task.user_id,
            {
                "userId": task.user_id,
                "displayName": task.display_name,
                "totalPoints": 0,
                "recentPoints": 0,
                "olderPoints": 0,
                "tasksCompleted": 0,
            },
        )
        member["totalPoints"] += task.points
        member["tasksCompleted"] += 1
        if task.completed_at >= midpoint:
            member["recentPoints"] += task.points
        else:
            member["olderPoints"] += task.points

    member_count = len(members)
    total_points = sum(m["totalPoints"] for m in members.values())
    total_tasks = sum(m["tasksCompleted"] for m in members.values())
    average_points = total_points / member_count if member_count else 0
    average_tasks = total_tasks / member_count if member_count else 0

    gini = calculate_gini_coefficient(m["totalPoints"] for m in members.values())

    results = []
    for member in members.values():
        trend, trend_value = calculate_trend(member["recentPoints"], member["olderPoints"])
        percentage = member["totalPoints"] / total_points * 100 if total_points > 0 else 0
        results.append(
            {
                "userId": member["userId"],
                "displayName": member["displayName"],
                "totalPoints": member["totalPoints"],
                "tasksCompleted": member["tasksCompleted"],
                "estimatedHoursWorked": round_half_up(
                    member["totalPoints"] * MINUTES_PER_POINT / 60, 1
                ),
                "fairnessScore": calculate_member_fairness_score(member["totalPoints"], average_points),
                "percentageOfTotal": round_half_up(percentage, 1),
                "deviationFromAverage": round_half_up(member["totalPoints"] - average_points, 1),
                "trend": trend,
                "trendValue": trend_value,
            }
        )

    results.sort(key=lambda m: m["totalPoints"], reverse=True)

    return {
        "periodStartDate": start.date(),
        "periodEndDate": end.date(),
        "totalPoints": total_points,
        "totalTasks": total_tasks,
        "averagePointsPerMember": round_half_up(average_points, 1),
        "averageTasksPerMember": round_half_up(average_tasks, 1),
        "activeMemberCount": member_count,
        "members": results,
        "fairnessIndex": calculate_fairness_index(gini),
        "giniCoefficient": round_half_up(gini, 2),
    }


def calculate_points_history(tasks: Iterable[CompletedTask], days: int) -> dict:
    """Per-day points with a running total, oldest day first"""
    by_date: dict[date, dict] = {}
    for task in tasks:
        day = by_date.setdefault(task.completed_at.date(), {"points": 0, "tasks": 0})
        day["points"] += task.points
        day["tasks"] += 1

    history = []
    cumulative = 0
    for day in sorted(by_date):
        cumulative += by_date[day]["points"]
        history.append(
            {
                "date": day,
                "points": by_date[day]["points"],
                "cumulativePoints": cumulative,
                "tasksCompleted": by_date[day]["tasks"],
            }
        )

    return {
        "history": history,
        "totalPoints": cumulative,
        "averagePointsPerDay": round_half_up(cumulative / days, 2) if days > 0 else 0,
    }


def rank_assignment_suggestions(points_by_member: dict[int, tuple[str, float]]) -> list[dict]:
    """Members with the fewest historical points first"""
    suggestions = [
        {
            "userId": user_id,
            "displayName": name,
            "historicalPoints": points,
            "priority": calculate_assignment_priority(points),
        }
        for user_id, (name, points) in points_by_member.items()
    ]
    suggestions.sort(key=lambda s: s["historicalPoints"])
    return suggestions
