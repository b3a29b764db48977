# modules/goals/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field, computed_field, field_validator

from modules.common.derived import GoalStatus, goal_progress_label, goal_status, to_naive_utc, utcnow
from modules.common.schemas import CamelModel, PageMeta
from modules.employees.schemas import EmployeeRef
from .models import GoalTargetType

TITLE_MAX = 200


class GoalCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX)
    target_type: GoalTargetType
    due_date: datetime
    progress: float = Field(0, ge=0, le=100)
    assigned_employee_id: int = Field(..., gt=0, alias="assignedEmployee")

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("due_date")
    @classmethod
    def _naive_due_date(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class GoalUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=TITLE_MAX)
    target_type: Optional[GoalTargetType] = None
    due_date: Optional[datetime] = None
    progress: Optional[float] = Field(None, ge=0, le=100)
    assigned_employee_id: Optional[int] = Field(None, gt=0, alias="assignedEmployee")

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("due_date")
    @classmethod
    def _naive_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class GoalProgressUpdate(CamelModel):
    progress: float = Field(..., ge=0, le=100)


class GoalOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    target_type: GoalTargetType
    due_date: datetime
    progress: float
    user_id: int = Field(..., alias="user")
    assigned_employee_id: int
    assigned_employee: Optional[EmployeeRef] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def status(self) -> GoalStatus:
        return goal_status(self.progress, self.due_date, utcnow())

    @computed_field(alias="progressPercentage")
    @property
    def progress_percentage(self) -> str:
        return goal_progress_label(self.progress)


class GoalListOut(PageMeta):
    goals: List[GoalOut]
