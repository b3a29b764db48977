# modules/dashboard/schemas.py
from typing import Dict

from pydantic import field_validator

from modules.common.derived import round_half_up
from modules.common.schemas import CamelModel
from modules.competencies.schemas import CompetencyStatsOut


class EvaluationCounts(CamelModel):
    total: int = 0
    draft: int = 0
    submitted: int = 0
    approved: int = 0
    rejected: int = 0
    average_overall_rating: float = 0

    @field_validator("average_overall_rating")
    @classmethod
    def _one_decimal(cls, v: float) -> float:
        return round_half_up(v, 1)


class GoalCounts(CamelModel):
    total: int = 0
    status_breakdown: Dict[str, int] = {}
    average_progress: float = 0

    @field_validator("average_progress")
    @classmethod
    def _one_decimal(cls, v: float) -> float:
        return round_half_up(v, 1)


class DashboardSummaryOut(CamelModel):
    employee_count: int
    evaluations: EvaluationCounts
    goals: GoalCounts
    competencies: CompetencyStatsOut
