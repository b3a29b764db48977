# modules/competencies/routes.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database.connection import get_db
from modules.common.query import ListParams, list_params
from modules.common.schemas import MessageOut
from modules.competencies import schemas, services
from modules.competencies.models import CompetencyCategory, CompetencyStatus
from modules.security.deps import Identity, get_current_user

api_router = APIRouter()


@api_router.get("/", response_model=schemas.CompetencyListOut)
def read_competencies_route(
    employee: Optional[int] = Query(None, gt=0),
    category: Optional[CompetencyCategory] = Query(None),
    competency_status: Optional[CompetencyStatus] = Query(None, alias="status"),
    params: ListParams = Depends(list_params),
    db: Session = Depends(get_db),
):
    page = services.get_competencies(
        db, params, employee_id=employee, category=category, status_value=competency_status
    )
    return {"competencies": page.items, **page.meta()}


@api_router.get("/stats/overview", response_model=schemas.CompetencyStatsOut)
def read_competency_stats_route(
    employee: Optional[int] = Query(None, gt=0),
    department: Optional[str] = Query(None, max_length=100),
    db: Session = Depends(get_db),
):
    summary = services.competency_stats(db, employee_id=employee, department=department)
    return schemas.CompetencyStatsOut.from_summary(summary)


@api_router.get("/employee/{employee_id}", response_model=schemas.EmployeeCompetenciesOut)
def read_employee_competencies_route(
    employee_id: int,
    category: Optional[CompetencyCategory] = Query(None),
    competency_status: Optional[CompetencyStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    records, summary = services.get_employee_competencies(
        db, employee_id, category=category, status_value=competency_status
    )
    return {
        "competencies": records,
        "summary": schemas.EmployeeCompetencySummary.from_summary(summary),
    }


@api_router.get("/{competency_id}", response_model=schemas.CompetencyOut)
def read_competency_route(competency_id: int, db: Session = Depends(get_db)):
    return services.get_competency_or_404(db, competency_id)


@api_router.post("/", response_model=schemas.CompetencyOut, status_code=status.HTTP_201_CREATED)
def create_competency_route(
    competency: schemas.CompetencyCreate,
    me: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return services.create_competency(db, competency, me)


@api_router.put("/{competency_id}", response_model=schemas.CompetencyOut)
def update_competency_route(
    competency_id: int,
    competency: schemas.CompetencyUpdate,
    me: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return services.update_competency(db, competency_id, competency, me)


@api_router.delete("/{competency_id}", response_model=MessageOut)
def delete_competency_route(
    competency_id: int,
    me: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return services.delete_competency(db, competency_id, me)
