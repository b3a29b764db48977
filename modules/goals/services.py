# modules/goals/services.py
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import and_
from sqlalchemy.orm import Session, joinedload

from modules.common.aggregation import StatusSummary, summarize_statuses
from modules.common.derived import GoalStatus, goal_status, utcnow
from modules.common.errors import not_found
from modules.common.query import (
    ListParams,
    Page,
    SortSpec,
    active_only,
    apply_date_range,
    apply_filters,
    apply_search,
    run_list,
)
from modules.employees.services import require_active_employee
from modules.security.deps import Identity
from modules.security.model import REVIEWER_ROLES
from . import models, schemas

logger = logging.getLogger(__name__)

Goal = models.Goal

GOAL_SORT = SortSpec(
    columns={
        "dueDate": Goal.due_date,
        "createdAt": Goal.created_at,
        "progress": Goal.progress,
        "title": Goal.title,
    },
    default_key="dueDate",
    tiebreak=Goal.id,
)


# -------------------------------------------------
# Status as a query predicate
# -------------------------------------------------
def goal_status_clause(goal_status_value: GoalStatus, now: datetime):
    """
    SQL twin of derived.goal_status, so a status filter runs before
    pagination and `total` stays exact. Both must classify every row the same way.
    """
    if goal_status_value == GoalStatus.COMPLETED:
        return Goal.progress >= 100
    if goal_status_value == GoalStatus.OVERDUE:
        return and_(Goal.progress < 100, Goal.due_date < now)
    return and_(Goal.progress < 100, Goal.due_date >= now)


# -------------------------------------------------
# Helpers
# -------------------------------------------------
def _with_employee(q):
    return q.options(joinedload(Goal.assigned_employee))


def _forbidden(detail: str = "You do not own this goal") -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def get_goal(db: Session, goal_id: int) -> Optional[models.Goal]:
    return _with_employee(db.query(Goal)).filter(Goal.id == goal_id).first()


def get_readable_goal(db: Session, goal_id: int, me: Identity) -> models.Goal:
    goal = get_goal(db, goal_id)
    if not goal:
        raise not_found("Goal")
    if goal.user_id != me.id and not me.has_role(*REVIEWER_ROLES):
        raise _forbidden("You are not allowed to view this goal")
    return goal


def _owned_active_goal(db: Session, goal_id: int, me: Identity) -> models.Goal:
    goal = db.get(Goal, goal_id)
    if not goal or not goal.is_active:
        raise not_found("Goal")
    if goal.user_id != me.id:
        raise _forbidden()
    return goal


# -------------------------------------------------
# Queries
# -------------------------------------------------
def get_goals(
    db: Session,
    owner_id: int,
    params: ListParams,
    target_type: Optional[models.GoalTargetType] = None,
    employee_id: Optional[int] = None,
    goal_status_value: Optional[GoalStatus] = None,
    now: Optional[datetime] = None,
) -> Page:
    q = active_only(_with_employee(db.query(Goal)), Goal).filter(Goal.user_id == owner_id)
    q = apply_filters(q, [(Goal.target_type, target_type), (Goal.assigned_employee_id, employee_id)])
    q = apply_search(q, params.search, [Goal.title])
    q = apply_date_range(q, Goal.due_date, params.date_from, params.date_to)
    if goal_status_value is not None:
        q = q.filter(goal_status_clause(goal_status_value, now or utcnow()))
    return run_list(q, params, GOAL_SORT)


def get_goals_by_type(db: Session, owner_id: int, target_type: models.GoalTargetType) -> List[models.Goal]:
    return (
        active_only(_with_employee(db.query(Goal)), Goal)
        .filter(Goal.user_id == owner_id, Goal.target_type == target_type)
        .order_by(Goal.due_date.desc(), Goal.id.desc())
        .all()
    )


def get_goals_by_employee(db: Session, employee_id: int, params: ListParams) -> Page:
    q = active_only(_with_employee(db.query(Goal)), Goal).filter(Goal.assigned_employee_id == employee_id)
    return run_list(q, params, GOAL_SORT)


def goal_status_summary(db: Session, owner_id: int, now: Optional[datetime] = None) -> StatusSummary:
    rows = (
        active_only(db.query(Goal.progress, Goal.due_date), Goal)
        .filter(Goal.user_id == owner_id)
        .all()
    )
    now = now or utcnow()
    return summarize_statuses(
        [goal_status(r.progress, r.due_date, now) for r in rows],
        numbers=[r.progress for r in rows],
    )


# -------------------------------------------------
# Mutations
# -------------------------------------------------
def create_goal(db: Session, data: schemas.GoalCreate, me: Identity) -> models.Goal:
    require_active_employee(db, data.assigned_employee_id, field="assignedEmployee")

    goal = Goal(**data.model_dump(), user_id=me.id)
    db.add(goal)
    db.commit()
    db.refresh(goal)
    logger.info("User %s created goal %s", me.id, goal.id)
    return get_goal(db, goal.id)


def update_goal(db: Session, goal_id: int, data: schemas.GoalUpdate, me: Identity) -> models.Goal:
    goal = _owned_active_goal(db, goal_id, me)

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    if "assigned_employee_id" in update_data:
        require_active_employee(db, update_data["assigned_employee_id"], field="assignedEmployee")

    for key, value in update_data.items():
        setattr(goal, key, value)
    db.commit()
    logger.info("User %s updated goal %s", me.id, goal_id)
    return get_goal(db, goal_id)


def update_goal_progress(db: Session, goal_id: int, progress: float, me: Identity) -> models.Goal:
    goal = _owned_active_goal(db, goal_id, me)
    goal.progress = progress
    db.commit()
    logger.info("User %s set goal %s progress to %s", me.id, goal_id, progress)
    return get_goal(db, goal_id)


def delete_goal(db: Session, goal_id: int, me: Identity) -> dict:
    goal = _owned_active_goal(db, goal_id, me)
    goal.deactivate()
    db.commit()
    logger.info("User %s deactivated goal %s", me.id, goal_id)
    return {"message": "Goal deleted successfully"}
