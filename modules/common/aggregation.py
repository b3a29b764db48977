# modules/common/aggregation.py
"""Summary statistics over an already-filtered record set (never a single page)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Sequence

from modules.common.derived import round_half_up


def count(items: Sequence[Any]) -> int:
    return len(items)


def mean(values: Iterable[float]) -> float:
    values = [v for v in values if v is not None]
    if not values:
        return 0.0
    return sum(values) / len(values)


def count_where(items: Iterable[Any], predicate: Callable[[Any], bool]) -> int:
    return sum(1 for item in items if predicate(item))


def frequency(values: Iterable[Hashable]) -> Dict[Hashable, int]:
    table: Dict[Hashable, int] = {}
    for v in values:
        if v is None:
            continue
        table[v] = table.get(v, 0) + 1
    return table


def percent_of_means(numerator_mean: float, denominator_mean: float) -> int:
    if not denominator_mean:
        return 0
    return int(round_half_up(numerator_mean / denominator_mean * 100))


def _enum_value(v):
    return getattr(v, "value", v)


@dataclass
class CompetencySummary:
    total: int = 0
    average_current_level: float = 0.0
    average_target_level: float = 0.0
    skills_needing_improvement: int = 0
    overall_progress: int = 0
    category_breakdown: Dict[str, int] = field(default_factory=dict)
    status_breakdown: Dict[str, int] = field(default_factory=dict)


def summarize_competencies(records: Sequence[Any]) -> CompetencySummary:
    """
    records: anything with current_level / target_level / category / status
    (ORM rows or `Query.with_entities` tuples with those names).
    """
    if not records:
        return CompetencySummary()

    avg_current = mean(r.current_level for r in records)
    avg_target = mean(r.target_level for r in records)
    return CompetencySummary(
        total=count(records),
        average_current_level=avg_current,
        average_target_level=avg_target,
        skills_needing_improvement=count_where(records, lambda r: r.current_level < r.target_level),
        overall_progress=percent_of_means(avg_current, avg_target),
        category_breakdown=frequency(_enum_value(r.category) for r in records),
        status_breakdown=frequency(_enum_value(r.status) for r in records),
    )


@dataclass
class StatusSummary:
    total: int = 0
    breakdown: Dict[str, int] = field(default_factory=dict)
    # mean of an accompanying numeric field (progress, rating), if one is tracked
    average: float = 0.0

    def get(self, key: str) -> int:
        return self.breakdown.get(key, 0)


def summarize_statuses(statuses: List[Any], numbers: Optional[Iterable[float]] = None) -> StatusSummary:
    values = [_enum_value(s) for s in statuses]
    return StatusSummary(
        total=len(values),
        breakdown=frequency(values),
        average=mean(numbers) if numbers is not None else 0.0,
    )
