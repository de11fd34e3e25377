import pytest

from equiduty.domain.selection.ordering import (
    calculate_quota,
    compute_turn_order,
    order_by_points,
    order_by_reversal,
    order_by_rotation,
    order_manual,
)

NAMES = {1: "Cleo", 2: "anna", 3: "Bert"}


def test_manual_order_keeps_planner_order_without_repeats():
    assert order_manual([3, 1, 3, 2]) == [3, 1, 2]


def test_points_order_lowest_first_with_alphabetical_ties():
    assert order_by_points(NAMES, {1: 5, 2: 20}) == [3, 1, 2]
    assert order_by_points(NAMES, {}) == [2, 3, 1]


def test_rotation_without_history_is_alphabetical():
    assert order_by_rotation(NAMES, None) == [2, 3, 1]


def test_rotation_moves_previous_first_to_last():
    assert order_by_rotation(NAMES, [1, 2, 3]) == [2, 3, 1]


def test_rotation_skips_leavers_and_appends_newcomers():
    members = {1: "Cleo", 3: "Bert", 4: "Dora", 5: "Ada"}
    assert order_by_rotation(members, [1, 2, 3]) == [3, 1, 5, 4]


def test_reversal_without_history_is_alphabetical():
    assert order_by_reversal(NAMES, None) == [2, 3, 1]
    assert order_by_reversal(NAMES, []) == [2, 3, 1]


def test_reversal_lets_last_picker_go_first():
    assert order_by_reversal(NAMES, [1, 2, 3]) == [3, 2, 1]


def test_reversal_skips_leavers_and_appends_newcomers():
    members = {1: "Cleo", 3: "Bert", 4: "Dora", 5: "Ada"}
    assert order_by_reversal(members, [1, 2, 3]) == [3, 1, 5, 4]


def test_quota_is_rounded_to_one_decimal():
    assert calculate_quota(9, 2) == 4.5
    assert calculate_quota(10, 3) == 3.3
    assert calculate_quota(20, 3) == 6.7
    assert calculate_quota(0, 4) == 0


def test_quota_without_members_is_zero():
    assert calculate_quota(12, 0) == 0


def test_compute_turn_order_dispatches_by_algorithm():
    assert compute_turn_order("manual", [1, 3, 2], NAMES) == [1, 3, 2]
    assert compute_turn_order("quota_based", [1, 2, 3], NAMES) == [2, 3, 1]
    assert compute_turn_order("quota_based", [1, 2, 3], NAMES, last_order=[3, 2, 1]) == [1, 2, 3]
    assert compute_turn_order("points_balance", [1, 2, 3], NAMES, points={2: 1, 3: 9, 1: 4}) == [2, 1, 3]
    assert compute_turn_order("fair_rotation", [1, 2, 3], NAMES, last_order=[3, 2, 1]) == [2, 1, 3]


def test_compute_turn_order_rejects_unknown_algorithm():
    with pytest.raises(ValueError):
        compute_turn_order("lottery", [1], NAMES)
