# modules/competencies/services.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from modules.common.aggregation import CompetencySummary, summarize_competencies
from modules.common.derived import default_next_review_date, utcnow
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
from modules.employees.services import active_employee_ids_in_department, require_active_employee
from modules.security.deps import Identity
from . import models, schemas

logger = logging.getLogger(__name__)

Competency = models.Competency

COMPETENCY_SORT = SortSpec(
    columns={
        "assessmentDate": Competency.assessment_date,
        "nextReviewDate": Competency.next_review_date,
        "createdAt": Competency.created_at,
        "skillName": Competency.skill_name,
        "category": Competency.category,
        "status": Competency.status,
        "currentLevel": Competency.current_level,
        "targetLevel": Competency.target_level,
    },
    default_key="assessmentDate",
    tiebreak=Competency.id,
)

COMPETENCY_SEARCH = [Competency.skill_name, Competency.description]


# -------------------------------------------------
# Helpers
# -------------------------------------------------
def _with_relations(q):
    return q.options(joinedload(Competency.employee), joinedload(Competency.assessed_by))


def _active_competency(db: Session, competency_id: int) -> models.Competency:
    comp = db.get(Competency, competency_id)
    if not comp or not comp.is_active:
        raise not_found("Competency")
    return comp


def _level_rows(q):
    # only the columns the summary needs
    return q.with_entities(
        Competency.current_level, Competency.target_level, Competency.category, Competency.status
    ).all()


# -------------------------------------------------
# Queries
# -------------------------------------------------
def get_competency(db: Session, competency_id: int) -> Optional[models.Competency]:
    return _with_relations(db.query(Competency)).filter(Competency.id == competency_id).first()


def get_competency_or_404(db: Session, competency_id: int) -> models.Competency:
    comp = get_competency(db, competency_id)
    if not comp:
        raise not_found("Competency")
    return comp


def get_competencies(
    db: Session,
    params: ListParams,
    employee_id: Optional[int] = None,
    category: Optional[models.CompetencyCategory] = None,
    status_value: Optional[models.CompetencyStatus] = None,
) -> Page:
    q = active_only(_with_relations(db.query(Competency)), Competency)
    q = apply_filters(
        q,
        [
            (Competency.employee_id, employee_id),
            (Competency.category, category),
            (Competency.status, status_value),
        ],
    )
    q = apply_search(q, params.search, COMPETENCY_SEARCH)
    q = apply_date_range(q, Competency.assessment_date, params.date_from, params.date_to)
    return run_list(q, params, COMPETENCY_SORT)


def get_employee_competencies(
    db: Session,
    employee_id: int,
    category: Optional[models.CompetencyCategory] = None,
    status_value: Optional[models.CompetencyStatus] = None,
):
    """all active competencies of one employee plus a summary over exactly that set"""
    q = active_only(_with_relations(db.query(Competency)), Competency).filter(Competency.employee_id == employee_id)
    q = apply_filters(q, [(Competency.category, category), (Competency.status, status_value)])
    records: List[models.Competency] = q.order_by(Competency.assessment_date.desc(), Competency.id.desc()).all()
    return records, summarize_competencies(records)


def competency_stats(
    db: Session, employee_id: Optional[int] = None, department: Optional[str] = None
) -> CompetencySummary:
    """employee wins over department when both are given"""
    q = active_only(db.query(Competency), Competency)
    if employee_id is not None:
        q = q.filter(Competency.employee_id == employee_id)
    elif department:
        ids = active_employee_ids_in_department(db, department)
        if not ids:
            return CompetencySummary()
        q = q.filter(Competency.employee_id.in_(ids))
    return summarize_competencies(_level_rows(q))


# -------------------------------------------------
# Mutations
# -------------------------------------------------
def create_competency(db: Session, data: schemas.CompetencyCreate, me: Identity) -> models.Competency:
    require_active_employee(db, data.employee_id, field="employee")

    values = data.model_dump()
    values["assessment_date"] = values["assessment_date"] or utcnow()
    if values["next_review_date"] is None:
        values["next_review_date"] = default_next_review_date(values["assessment_date"])

    comp = Competency(**values, assessed_by_id=me.id)
    db.add(comp)
    db.commit()
    db.refresh(comp)
    logger.info("User %s recorded competency %s for employee %s", me.id, comp.id, comp.employee_id)
    return get_competency(db, comp.id)


def update_competency(
    db: Session, competency_id: int, data: schemas.CompetencyUpdate, me: Identity
) -> models.Competency:
    comp = _active_competency(db, competency_id)
    update_data = data.model_dump(exclude_unset=True, exclude_none=True)

    current = update_data.get("current_level", comp.current_level)
    target = update_data.get("target_level", comp.target_level)
    if target < current:
        raise FieldValidationError("targetLevel", schemas.TARGET_BELOW_CURRENT)

    # a moved assessment date moves the review date unless one was sent
    if (
        "assessment_date" in update_data
        and "next_review_date" not in update_data
        and update_data["assessment_date"] != comp.assessment_date
    ):
        update_data["next_review_date"] = default_next_review_date(update_data["assessment_date"])

    for key, value in update_data.items():
        setattr(comp, key, value)
    db.commit()
    logger.info("User %s updated competency %s", me.id, competency_id)
    return get_competency(db, competency_id)


def delete_competency(db: Session, competency_id: int, me: Identity) -> dict:
    comp = _active_competency(db, competency_id)
    comp.deactivate()
    db.commit()
    logger.info("User %s deactivated competency %s", me.id, competency_id)
    return {"message": "Competency deleted successfully"}
