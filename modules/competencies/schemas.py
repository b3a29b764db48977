# modules/competencies/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import ConfigDict, Field, ValidationInfo, computed_field, field_validator

from modules.common.aggregation import CompetencySummary
from modules.common.derived import competency_gap, competency_progress_pct, round_half_up, to_naive_utc
from modules.common.schemas import CamelModel, PageMeta
from modules.employees.schemas import EmployeeRef
from modules.security.schemas import UserRef
from .models import CompetencyCategory, CompetencyStatus

LEVEL = dict(ge=1, le=5)
TARGET_BELOW_CURRENT = "Target level must be greater than or equal to current level"


def _strip(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


# -------------------------------------------------
# Input
# -------------------------------------------------
class CompetencyCreate(CamelModel):
    employee_id: int = Field(..., gt=0, alias="employee")
    skill_name: str = Field(..., min_length=1, max_length=200)
    category: CompetencyCategory = CompetencyCategory.OTHER
    current_level: int = Field(1, **LEVEL)
    target_level: int = Field(3, validate_default=True, **LEVEL)
    assessment_date: Optional[datetime] = None
    next_review_date: Optional[datetime] = None
    description: Optional[str] = Field(None, max_length=500)
    evidence: Optional[str] = Field(None, max_length=1000)
    development_plan: Optional[str] = Field(None, max_length=1000)
    status: CompetencyStatus = CompetencyStatus.DEVELOPING

    @field_validator("skill_name", mode="before")
    @classmethod
    def _strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("description", "evidence", "development_plan", mode="before")
    @classmethod
    def _strip_text(cls, v):
        return _strip(v)

    @field_validator("assessment_date", "next_review_date")
    @classmethod
    def _naive(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    @field_validator("target_level")
    @classmethod
    def _target_not_below_current(cls, v: int, info: ValidationInfo) -> int:
        current = info.data.get("current_level")
        if current is not None and v < current:
            raise ValueError(TARGET_BELOW_CURRENT)
        return v


class CompetencyUpdate(CamelModel):
    """partial update; the level ordering is checked against the merged record"""
    skill_name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[CompetencyCategory] = None
    current_level: Optional[int] = Field(None, **LEVEL)
    target_level: Optional[int] = Field(None, **LEVEL)
    assessment_date: Optional[datetime] = None
    next_review_date: Optional[datetime] = None
    description: Optional[str] = Field(None, max_length=500)
    evidence: Optional[str] = Field(None, max_length=1000)
    development_plan: Optional[str] = Field(None, max_length=1000)
    status: Optional[CompetencyStatus] = None

    @field_validator("skill_name", mode="before")
    @classmethod
    def _strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("description", "evidence", "development_plan", mode="before")
    @classmethod
    def _strip_text(cls, v):
        return _strip(v)

    @field_validator("assessment_date", "next_review_date")
    @classmethod
    def _naive(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


# -------------------------------------------------
# Output
# -------------------------------------------------
class CompetencyOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    employee: Optional[EmployeeRef] = None
    assessed_by: Optional[UserRef] = None
    skill_name: str
    category: CompetencyCategory
    current_level: int
    target_level: int
    assessment_date: datetime
    next_review_date: datetime
    description: Optional[str] = None
    evidence: Optional[str] = None
    development_plan: Optional[str] = None
    status: CompetencyStatus
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def gap(self) -> int:
        return competency_gap(self.current_level, self.target_level)

    @computed_field(alias="progressPercentage")
    @property
    def progress_percentage(self) -> int:
        return competency_progress_pct(self.current_level, self.target_level)


class CompetencyListOut(PageMeta):
    competencies: List[CompetencyOut]


class _LevelAverages(CamelModel):
    average_current_level: float = 0
    average_target_level: float = 0

    @field_validator("average_current_level", "average_target_level")
    @classmethod
    def _one_decimal(cls, v: float) -> float:
        return round_half_up(v, 1)


class EmployeeCompetencySummary(_LevelAverages):
    total_skills: int = 0
    skills_needing_improvement: int = 0
    overall_progress: int = 0

    @classmethod
    def from_summary(cls, s: CompetencySummary) -> "EmployeeCompetencySummary":
        return cls(
            total_skills=s.total,
            average_current_level=s.average_current_level,
            average_target_level=s.average_target_level,
            skills_needing_improvement=s.skills_needing_improvement,
            overall_progress=s.overall_progress,
        )


class EmployeeCompetenciesOut(CamelModel):
    competencies: List[CompetencyOut]
    summary: EmployeeCompetencySummary


class CompetencyStatsOut(_LevelAverages):
    total_competencies: int = 0
    skills_needing_improvement: int = 0
    overall_progress: int = 0
    category_breakdown: Dict[str, int] = {}
    status_breakdown: Dict[str, int] = {}

    @classmethod
    def from_summary(cls, s: CompetencySummary) -> "CompetencyStatsOut":
        return cls(
            total_competencies=s.total,
            average_current_level=s.average_current_level,
            average_target_level=s.average_target_level,
            skills_needing_improvement=s.skills_needing_improvement,
            overall_progress=s.overall_progress,
            category_breakdown=s.category_breakdown,
            status_breakdown=s.status_breakdown,
        )
