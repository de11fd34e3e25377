"""
Turn order algorithms for selection processes.

Every function takes the participating members as {user_id: display_name}
and returns user ids in turn order. Ties and newcomers fall back to
alphabetical order by name.
"""

import math
from typing import Optional

ALGORITHMS = ("manual", "quota_based", "points_balance", "fair_rotation")


def _alphabetical(members: dict[int, str]) -> list[int]:
    return sorted(members, key=lambda user_id: (members[user_id].casefold(), user_id))


def order_manual(member_ids: list[int]) -> list[int]:
    """Keep the order the planner gave, dropping repeats"""
    ordered = []
    for user_id in member_ids:
        if user_id not in ordered:
            ordered.append(user_id)
    return ordered


def order_by_points(members: dict[int, str], points: dict[int, float]) -> list[int]:
    """Fewest recent points picks first"""
    return sorted(
        members,
        key=lambda user_id: (points.get(user_id, 0), members[user_id].casefold(), user_id),
    )


def order_by_rotation(members: dict[int, str], last_order: Optional[list[int]]) -> list[int]:
    """
    Shift the previous process's order by one: whoever went second goes first
    and the previous first goes last. Members who left are skipped, new members
    join at the end.
    """
    if not last_order:
        return _alphabetical(members)

    rotated = last_order[1:] + last_order[:1]
    ordered = [user_id for user_id in rotated if user_id in members]
    newcomers = {user_id: name for user_id, name in members.items() if user_id not in ordered}
    return ordered + _alphabetical(newcomers)


def order_by_reversal(members: dict[int, str], last_order: Optional[list[int]]) -> list[int]:
    """
    Draft pick: reverse the previous process's order so whoever picked last
    picks first. Members who left are skipped, new members join at the end.
    """
    if not last_order:
        return _alphabetical(members)

    ordered = [user_id for user_id in reversed(last_order) if user_id in members]
    newcomers = {user_id: name for user_id, name in members.items() if user_id not in ordered}
    return ordered + _alphabetical(newcomers)


def calculate_quota(total_points: float, member_count: int) -> float:
    """Fair share of the available points per member, rounded half up to one decimal"""
    if member_count <= 0:
        return 0.0
    return math.floor(total_points / member_count * 10 + 0.5) / 10


def compute_turn_order(
    algorithm: str,
    member_ids: list[int],
    names: dict[int, str],
    points: Optional[dict[int, float]] = None,
    last_order: Optional[list[int]] = None,
) -> list[int]:
    if algorithm == "manual":
        return order_manual(member_ids)

    members = {user_id: names.get(user_id, "") for user_id in order_manual(member_ids)}
    if algorithm == "quota_based":
        return order_by_reversal(members, last_order)
    if algorithm == "points_balance":
        return order_by_points(members, points or {})
    if algorithm == "fair_rotation":
        return order_by_rotation(members, last_order)

    raise ValueError(f"Unknown selection algorithm: {algorithm}")
