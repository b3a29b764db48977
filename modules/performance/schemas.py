# modules/performance/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field, computed_field, field_validator, model_validator

from modules.common.derived import performance_average_rating, to_naive_utc
from modules.common.schemas import CamelModel, PageMeta
from modules.employees.schemas import EmployeeRef
from .models import CATEGORY_KEYS, EvaluationStatus, SubGoalStatus

RATING = dict(ge=1, le=5)


def _clean_list(values):
    # free-text lists: trim entries, drop blanks
    if values is None:
        return []
    return [v.strip() for v in values if isinstance(v, str) and v.strip()]


# -------------------------------------------------
# Nested parts
# -------------------------------------------------
class CategoryRating(CamelModel):
    rating: int = Field(..., **RATING)
    comments: Optional[str] = Field(None, max_length=2000)


class Categories(CamelModel):
    technical_skills: CategoryRating
    communication: CategoryRating
    teamwork: CategoryRating
    leadership: CategoryRating
    productivity: CategoryRating


class EvaluationPeriodOut(CamelModel):
    start_date: datetime
    end_date: datetime


class EvaluationPeriod(EvaluationPeriodOut):
    @field_validator("start_date", "end_date")
    @classmethod
    def _naive(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @model_validator(mode="after")
    def _start_before_end(self):
        if self.start_date >= self.end_date:
            raise ValueError("Start date must be before end date")
        return self


class SubGoalIn(CamelModel):
    description: str = Field(..., min_length=1, max_length=500)
    target_date: datetime
    status: SubGoalStatus = SubGoalStatus.PENDING

    @field_validator("description", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("target_date")
    @classmethod
    def _naive(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class SubGoalOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str
    target_date: datetime
    status: SubGoalStatus


# -------------------------------------------------
# Evaluation input
# -------------------------------------------------
class PerformanceBase(CamelModel):
    employee_id: int = Field(..., gt=0, alias="employee")
    evaluator_id: int = Field(..., gt=0, alias="evaluator")
    evaluation_period: EvaluationPeriod
    evaluation_date: Optional[datetime] = None
    overall_rating: int = Field(..., **RATING)
    categories: Categories
    strengths: List[str] = Field(default_factory=list)
    areas_for_improvement: List[str] = Field(default_factory=list)
    goals: List[SubGoalIn] = Field(default_factory=list)
    comments: Optional[str] = Field(None, max_length=5000)

    @field_validator("strengths", "areas_for_improvement", mode="before")
    @classmethod
    def _clean_lists(cls, v):
        return _clean_list(v)

    @field_validator("evaluation_date")
    @classmethod
    def _naive(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class PerformanceCreate(PerformanceBase):
    status: EvaluationStatus = EvaluationStatus.DRAFT


class PerformanceUpdate(PerformanceBase):
    status: Optional[EvaluationStatus] = None


class PerformanceStatusUpdate(CamelModel):
    status: EvaluationStatus


# -------------------------------------------------
# Evaluation output
# -------------------------------------------------
class CategoryRatingOut(CamelModel):
    rating: int
    comments: Optional[str] = None


class CategoriesOut(CamelModel):
    technical_skills: CategoryRatingOut
    communication: CategoryRatingOut
    teamwork: CategoryRatingOut
    leadership: CategoryRatingOut
    productivity: CategoryRatingOut


class PerformanceOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    evaluator_id: int
    employee: Optional[EmployeeRef] = None
    evaluator: Optional[EmployeeRef] = None
    evaluation_period: EvaluationPeriodOut
    evaluation_date: datetime
    overall_rating: int
    categories: CategoriesOut
    strengths: List[str] = []
    areas_for_improvement: List[str] = []
    goals: List[SubGoalOut] = []
    comments: Optional[str] = None
    status: EvaluationStatus
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field(alias="averageCategoryRating")
    @property
    def average_category_rating(self) -> float:
        return performance_average_rating([getattr(self.categories, key).rating for key in CATEGORY_KEYS])


class PerformanceListOut(PageMeta):
    performances: List[PerformanceOut]
