# modules/dashboard/services.py
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from modules.common.query import active_only
from modules.competencies import services as competency_services
from modules.competencies.schemas import CompetencyStatsOut
from modules.employees.models import Employee
from modules.goals import services as goal_services
from modules.performance import services as performance_services
from modules.performance.models import EvaluationStatus
from modules.security.deps import Identity
from . import schemas

logger = logging.getLogger(__name__)


def build_summary(db: Session, me: Identity, now: Optional[datetime] = None) -> schemas.DashboardSummaryOut:
    """
    Counts over the full active record sets (not a list page).
    Goals are the caller's own, the same scope as GET /goals.
    """
    employee_count = active_only(db.query(Employee.id), Employee).count()

    evaluations = performance_services.evaluation_summary(db)
    goals = goal_services.goal_status_summary(db, owner_id=me.id, now=now)
    competencies = competency_services.competency_stats(db)

    logger.debug("Dashboard summary for user %s", me.id)
    return schemas.DashboardSummaryOut(
        employee_count=employee_count,
        evaluations=schemas.EvaluationCounts(
            total=evaluations.total,
            average_overall_rating=evaluations.average,
            **{s.value: evaluations.get(s.value) for s in EvaluationStatus},
        ),
        goals=schemas.GoalCounts(
            total=goals.total,
            status_breakdown=goals.breakdown,
            average_progress=goals.average,
        ),
        competencies=CompetencyStatsOut.from_summary(competencies),
    )
