# modules/common/derived.py
"""
Derived (computed) fields.

Nothing here touches the database: every function maps stored values to the
value the API shows. The response schemas call these from `computed_field`s so
list, detail, create and update responses always agree for the same row.
"""
from __future__ import annotations

import enum
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence, Union

from dateutil.relativedelta import relativedelta

REVIEW_INTERVAL_MONTHS = 6


class GoalStatus(str, enum.Enum):
    COMPLETED = "completed"
    OVERDUE = "overdue"
    IN_PROGRESS = "in-progress"


def utcnow() -> datetime:
    """naive UTC, same convention as the stored DateTime columns"""
    return datetime.utcnow()


def to_naive_utc(value: Optional[Union[datetime, date]]) -> Optional[datetime]:
    if value is None:
        return None
    if not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day)
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def round_half_up(value: float, digits: int = 0) -> float:
    """Rounding used for display: 12.5 -> 13 (Python's round() would give 12)."""
    quant = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quant, rounding=ROUND_HALF_UP))


# ---------- goals ----------
def goal_status(progress: float, due_date: datetime, now: Optional[datetime] = None) -> GoalStatus:
    # finished late still counts as completed
    if progress is not None and progress >= 100:
        return GoalStatus.COMPLETED
    now = to_naive_utc(now or utcnow())
    if to_naive_utc(due_date) < now:
        return GoalStatus.OVERDUE
    return GoalStatus.IN_PROGRESS


def goal_progress_label(progress: float) -> str:
    if progress is None:
        progress = 0
    if float(progress).is_integer():
        progress = int(progress)
    return f"{progress}%"


# ---------- competencies ----------
def competency_gap(current: int, target: int) -> int:
    return target - current


def competency_progress_pct(current: int, target: int) -> int:
    # target <= 0 cannot pass validation; 0 is the defined answer if one is stored anyway
    if not target or target <= 0:
        return 0
    return int(round_half_up(current / target * 100))


def default_next_review_date(assessment_date: datetime) -> datetime:
    # relativedelta clamps a missing day to the month's last day (Aug 31 -> Feb 28),
    # it does not roll over into the next month (Aug 31 -> Mar 3)
    return assessment_date + relativedelta(months=REVIEW_INTERVAL_MONTHS)


# ---------- performance ----------
def performance_average_rating(ratings: Sequence[float]) -> float:
    """Unrounded mean of the category ratings."""
    values = [r for r in ratings if r is not None]
    if not values:
        return 0.0
    return sum(values) / len(values)
