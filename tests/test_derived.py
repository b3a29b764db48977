from datetime import datetime, timedelta

import pytest

from modules.common.derived import (
    GoalStatus,
    competency_gap,
    competency_progress_pct,
    default_next_review_date,
    goal_progress_label,
    goal_status,
    performance_average_rating,
    round_half_up,
    to_naive_utc,
)

NOW = datetime(2024, 6, 15, 12, 0, 0)


class TestGoalStatus:
    def test_complete_goal_wins_over_overdue_date(self):
        assert goal_status(100, NOW - timedelta(days=1), NOW) == GoalStatus.COMPLETED

    def test_unfinished_past_due_is_overdue(self):
        assert goal_status(40, NOW - timedelta(seconds=1), NOW) == GoalStatus.OVERDUE

    def test_unfinished_future_due_is_in_progress(self):
        assert goal_status(99.5, NOW + timedelta(days=3), NOW) == GoalStatus.IN_PROGRESS

    def test_due_exactly_now_is_still_in_progress(self):
        assert goal_status(0, NOW, NOW) == GoalStatus.IN_PROGRESS


def test_goal_progress_label():
    assert goal_progress_label(50) == "50%"
    assert goal_progress_label(12.5) == "12.5%"
    assert goal_progress_label(None) == "0%"


def test_competency_gap_can_be_negative():
    assert competency_gap(2, 4) == 2
    assert competency_gap(5, 3) == -2


@pytest.mark.parametrize(
    "current,target,expected",
    [(2, 4, 50), (1, 3, 33), (2, 3, 67), (4, 4, 100), (3, 0, 0)],
)
def test_competency_progress_pct(current, target, expected):
    assert competency_progress_pct(current, target) == expected


def test_round_half_up_rounds_ties_away_from_zero():
    assert round_half_up(12.5) == 13
    assert round_half_up(2.25, 1) == 2.3
    assert round_half_up(3.04, 1) == 3.0


def test_next_review_is_six_months_later_and_clamped_to_month_end():
    assert default_next_review_date(datetime(2024, 1, 15)) == datetime(2024, 7, 15)
    assert default_next_review_date(datetime(2024, 8, 31)) == datetime(2025, 2, 28)


def test_performance_average_rating_is_unrounded():
    assert performance_average_rating([4, 3, 5, 4, 3]) == pytest.approx(3.8)
    assert performance_average_rating([]) == 0.0


def test_to_naive_utc_converts_aware_values():
    from datetime import timezone

    aware = datetime(2024, 1, 1, 9, 0, tzinfo=timezone(timedelta(hours=7)))
    assert to_naive_utc(aware) == datetime(2024, 1, 1, 2, 0)
    assert to_naive_utc(None) is None
