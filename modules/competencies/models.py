# modules/competencies/models.py
import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from database.base import Base
from modules.common.lifecycle import SoftDeleteMixin, TimestampMixin


class CompetencyCategory(str, enum.Enum):
    TECHNICAL = "Technical"
    SOFT_SKILLS = "Soft Skills"
    LEADERSHIP = "Leadership"
    COMMUNICATION = "Communication"
    PROBLEM_SOLVING = "Problem Solving"
    TEAMWORK = "Teamwork"
    ADAPTABILITY = "Adaptability"
    OTHER = "Other"


class CompetencyStatus(str, enum.Enum):
    DEVELOPING = "Developing"
    PROFICIENT = "Proficient"
    EXPERT = "Expert"
    NEEDS_IMPROVEMENT = "Needs Improvement"


class Competency(SoftDeleteMixin, TimestampMixin, Base):
    __tablename__ = "competencies"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    assessed_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    skill_name = Column(String(200), nullable=False)
    # values_callable: store the display values ("Soft Skills"), not member names
    category = Column(
        Enum(CompetencyCategory, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CompetencyCategory.OTHER,
        index=True,
    )
    current_level = Column(Integer, nullable=False, default=1)
    target_level = Column(Integer, nullable=False, default=3)
    assessment_date = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    next_review_date = Column(DateTime, nullable=False)
    description = Column(String(500), nullable=True)
    evidence = Column(String(1000), nullable=True)
    development_plan = Column(String(1000), nullable=True)
    status = Column(
        Enum(CompetencyStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CompetencyStatus.DEVELOPING,
        index=True,
    )

    employee = relationship("Employee")
    assessed_by = relationship("User")
