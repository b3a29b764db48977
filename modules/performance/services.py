# modules/performance/services.py
import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, aliased, joinedload, selectinload

from modules.common.aggregation import StatusSummary, summarize_statuses
from modules.common.derived import utcnow
from modules.common.errors import FieldValidationError, not_found
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
from modules.employees.models import Employee
from modules.employees.services import require_active_employee
from modules.security.deps import Identity
from modules.security.model import REVIEWER_ROLES
from . import models, schemas
from .workflow import INITIAL_STATUSES, REVIEW_DECISIONS, check_transition

logger = logging.getLogger(__name__)

Performance = models.Performance

PERFORMANCE_SORT = SortSpec(
    columns={
        "evaluationDate": Performance.evaluation_date,
        "createdAt": Performance.created_at,
        "overallRating": Performance.overall_rating,
        "status": Performance.status,
        "periodStart": Performance.period_start,
        "periodEnd": Performance.period_end,
    },
    default_key="evaluationDate",
    tiebreak=Performance.id,
)


# -------------------------------------------------
# Helpers
# -------------------------------------------------
def _with_relations(q):
    return q.options(
        joinedload(Performance.employee),
        joinedload(Performance.evaluator),
        selectinload(Performance.goals),
    )


def _flatten(data: schemas.PerformanceBase) -> Dict[str, Any]:
    """nested request body -> column values"""
    values = {
        "employee_id": data.employee_id,
        "evaluator_id": data.evaluator_id,
        "period_start": data.evaluation_period.start_date,
        "period_end": data.evaluation_period.end_date,
        "overall_rating": data.overall_rating,
        "strengths": list(data.strengths),
        "areas_for_improvement": list(data.areas_for_improvement),
        "comments": data.comments,
    }
    if data.evaluation_date is not None:
        values["evaluation_date"] = data.evaluation_date
    for key in models.CATEGORY_KEYS:
        part = getattr(data.categories, key)
        values[f"{key}_rating"] = part.rating
        values[f"{key}_comments"] = part.comments
    return values


def _sub_goals(data: schemas.PerformanceBase) -> List[models.PerformanceGoal]:
    return [
        models.PerformanceGoal(description=g.description, target_date=g.target_date, status=g.status)
        for g in data.goals
    ]


def _check_references(db: Session, data: schemas.PerformanceBase):
    require_active_employee(db, data.employee_id, field="employee")
    require_active_employee(db, data.evaluator_id, field="evaluator")


def _check_reviewer(new_status: models.EvaluationStatus, me: Identity):
    if new_status in REVIEW_DECISIONS and not me.has_role(*REVIEWER_ROLES):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only a manager, hr or admin can set status '{new_status.value}'",
        )


def _change_status(perf: models.Performance, new_status: models.EvaluationStatus, me: Identity):
    if new_status == perf.status:
        return
    check_transition(perf.status, new_status)
    _check_reviewer(new_status, me)
    logger.info("User %s moved evaluation %s from %s to %s", me.id, perf.id, perf.status.value, new_status.value)
    perf.status = new_status


def _active_performance(db: Session, performance_id: int) -> models.Performance:
    perf = db.get(Performance, performance_id)
    if not perf or not perf.is_active:
        raise not_found("Performance evaluation")
    return perf


# -------------------------------------------------
# Queries
# -------------------------------------------------
def get_performance(db: Session, performance_id: int) -> Optional[models.Performance]:
    return _with_relations(db.query(Performance)).filter(Performance.id == performance_id).first()


def get_performance_or_404(db: Session, performance_id: int) -> models.Performance:
    perf = get_performance(db, performance_id)
    if not perf:
        raise not_found("Performance evaluation")
    return perf


def get_performances(
    db: Session,
    params: ListParams,
    employee_id: Optional[int] = None,
    evaluator_id: Optional[int] = None,
    status_value: Optional[models.EvaluationStatus] = None,
) -> Page:
    q = active_only(_with_relations(db.query(Performance)), Performance)
    q = apply_filters(
        q,
        [
            (Performance.employee_id, employee_id),
            (Performance.evaluator_id, evaluator_id),
            (Performance.status, status_value),
        ],
    )
    if params.search and params.search.strip():
        # names live on the referenced employees
        emp = aliased(Employee)
        ev = aliased(Employee)
        q = q.join(emp, Performance.employee_id == emp.id).join(ev, Performance.evaluator_id == ev.id)
        q = apply_search(
            q,
            params.search,
            [
                emp.first_name,
                emp.last_name,
                emp.first_name + " " + emp.last_name,
                emp.employee_code,
                ev.first_name,
                ev.last_name,
                ev.first_name + " " + ev.last_name,
            ],
        )
    q = apply_date_range(q, Performance.evaluation_date, params.date_from, params.date_to)
    return run_list(q, params, PERFORMANCE_SORT)


def get_performances_by_employee(db: Session, employee_id: int, params: ListParams) -> Page:
    return get_performances(db, params, employee_id=employee_id)


def get_performances_by_evaluator(db: Session, evaluator_id: int, params: ListParams) -> Page:
    return get_performances(db, params, evaluator_id=evaluator_id)


def evaluation_summary(db: Session) -> StatusSummary:
    rows = active_only(db.query(Performance.status, Performance.overall_rating), Performance).all()
    return summarize_statuses([r.status for r in rows], numbers=[r.overall_rating for r in rows])


# -------------------------------------------------
# Mutations
# -------------------------------------------------
def create_performance(db: Session, data: schemas.PerformanceCreate, me: Identity) -> models.Performance:
    if data.status not in INITIAL_STATUSES:
        raise FieldValidationError("status", "A new evaluation must start as draft or submitted")
    _check_references(db, data)

    values = _flatten(data)
    values.setdefault("evaluation_date", utcnow())
    perf = Performance(**values, status=data.status)
    perf.goals = _sub_goals(data)
    db.add(perf)
    db.commit()
    db.refresh(perf)
    logger.info("User %s created evaluation %s for employee %s", me.id, perf.id, perf.employee_id)
    return get_performance(db, perf.id)


def update_performance(
    db: Session, performance_id: int, data: schemas.PerformanceUpdate, me: Identity
) -> models.Performance:
    perf = _active_performance(db, performance_id)
    _check_references(db, data)
    if data.status is not None:
        _change_status(perf, data.status, me)

    for key, value in _flatten(data).items():
        setattr(perf, key, value)
    perf.goals = _sub_goals(data)
    db.commit()
    logger.info("User %s updated evaluation %s", me.id, performance_id)
    return get_performance(db, performance_id)


def update_performance_status(
    db: Session, performance_id: int, new_status: models.EvaluationStatus, me: Identity
) -> models.Performance:
    perf = _active_performance(db, performance_id)
    _change_status(perf, new_status, me)
    db.commit()
    return get_performance(db, performance_id)


def delete_performance(db: Session, performance_id: int, me: Identity) -> dict:
    perf = _active_performance(db, performance_id)
    perf.deactivate()
    db.commit()
    logger.info("User %s deactivated evaluation %s", me.id, performance_id)
    return {"message": "Performance evaluation deleted successfully"}
