# modules/goals/models.py
import enum

from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from database.base import Base
from modules.common.lifecycle import SoftDeleteMixin, TimestampMixin


class GoalTargetType(str, enum.Enum):
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


class Goal(SoftDeleteMixin, TimestampMixin, Base):
    __tablename__ = "goals"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    target_type = Column(Enum(GoalTargetType), nullable=False, index=True)
    due_date = Column(DateTime, nullable=False, index=True)
    progress = Column(Float, nullable=False, default=0.0)
    # owner: the user who created the goal; only they may change it
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    assigned_employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)

    owner = relationship("User")
    assigned_employee = relationship("Employee")
