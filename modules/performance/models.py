# modules/performance/models.py
import enum
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from database.base import Base
from modules.common.lifecycle import SoftDeleteMixin, TimestampMixin


class EvaluationStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class SubGoalStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


# rated categories; each one is stored as <key>_rating / <key>_comments
CATEGORY_KEYS = ("technical_skills", "communication", "teamwork", "leadership", "productivity")


class Performance(SoftDeleteMixin, TimestampMixin, Base):
    __tablename__ = "performance_evaluations"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    evaluator_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    period_start = Column(DateTime, nullable=False)
    period_end = Column(DateTime, nullable=False)
    evaluation_date = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    overall_rating = Column(Integer, nullable=False)

    technical_skills_rating = Column(Integer, nullable=False)
    technical_skills_comments = Column(Text, nullable=True)
    communication_rating = Column(Integer, nullable=False)
    communication_comments = Column(Text, nullable=True)
    teamwork_rating = Column(Integer, nullable=False)
    teamwork_comments = Column(Text, nullable=True)
    leadership_rating = Column(Integer, nullable=False)
    leadership_comments = Column(Text, nullable=True)
    productivity_rating = Column(Integer, nullable=False)
    productivity_comments = Column(Text, nullable=True)

    strengths = Column(JSON, nullable=False, default=list)
    areas_for_improvement = Column(JSON, nullable=False, default=list)
    comments = Column(Text, nullable=True)
    status = Column(Enum(EvaluationStatus), nullable=False, default=EvaluationStatus.DRAFT, index=True)

    employee = relationship("Employee", foreign_keys=[employee_id])
    evaluator = relationship("Employee", foreign_keys=[evaluator_id])
    goals = relationship(
        "PerformanceGoal",
        back_populates="performance",
        cascade="all, delete-orphan",
        order_by="PerformanceGoal.id",
    )

    # nested shapes the API exposes
    @property
    def evaluation_period(self) -> dict:
        return {"start_date": self.period_start, "end_date": self.period_end}

    @property
    def categories(self) -> dict:
        return {
            key: {"rating": getattr(self, f"{key}_rating"), "comments": getattr(self, f"{key}_comments")}
            for key in CATEGORY_KEYS
        }


class PerformanceGoal(Base):
    """goal embedded in an evaluation (not the standalone Goal record)"""
    __tablename__ = "performance_goals"

    id = Column(Integer, primary_key=True, index=True)
    performance_id = Column(
        Integer, ForeignKey("performance_evaluations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description = Column(String(500), nullable=False)
    target_date = Column(DateTime, nullable=False)
    status = Column(Enum(SubGoalStatus), nullable=False, default=SubGoalStatus.PENDING)

    performance = relationship("Performance", back_populates="goals")
