# modules/performance/routes.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database.connection import get_db
from modules.common.query import ListParams, list_params
from modules.common.schemas import MessageOut
from modules.performance import schemas, services
from modules.performance.models import EvaluationStatus
from modules.security.deps import Identity, get_current_user, require_roles
from modules.security.model import HR_ROLES

api_router = APIRouter()


@api_router.get("/", response_model=schemas.PerformanceListOut)
def read_performances_route(
    employee: Optional[int] = Query(None, gt=0),
    evaluator: Optional[int] = Query(None, gt=0),
    evaluation_status: Optional[EvaluationStatus] = Query(None, alias="status"),
    params: ListParams = Depends(list_params),
    db: Session = Depends(get_db),
):
    page = services.get_performances(
        db, params, employee_id=employee, evaluator_id=evaluator, status_value=evaluation_status
    )
    return {"performances": page.items, **page.meta()}


@api_router.get("/employee/{employee_id}", response_model=schemas.PerformanceListOut)
def read_performances_by_employee_route(
    employee_id: int,
    params: ListParams = Depends(list_params),
    db: Session = Depends(get_db),
):
    page = services.get_performances_by_employee(db, employee_id, params)
    return {"performances": page.items, **page.meta()}


@api_router.get("/evaluator/{evaluator_id}", response_model=schemas.PerformanceListOut)
def read_performances_by_evaluator_route(
    evaluator_id: int,
    params: ListParams = Depends(list_params),
    db: Session = Depends(get_db),
):
    page = services.get_performances_by_evaluator(db, evaluator_id, params)
    return {"performances": page.items, **page.meta()}


@api_router.get("/{performance_id}", response_model=schemas.PerformanceOut)
def read_performance_route(performance_id: int, db: Session = Depends(get_db)):
    return services.get_performance_or_404(db, performance_id)


@api_router.post("/", response_model=schemas.PerformanceOut, status_code=status.HTTP_201_CREATED)
def create_performance_route(
    performance: schemas.PerformanceCreate,
    me: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return services.create_performance(db, performance, me)


@api_router.put("/{performance_id}", response_model=schemas.PerformanceOut)
def update_performance_route(
    performance_id: int,
    performance: schemas.PerformanceUpdate,
    me: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return services.update_performance(db, performance_id, performance, me)


@api_router.patch("/{performance_id}/status", response_model=schemas.PerformanceOut)
def update_performance_status_route(
    performance_id: int,
    body: schemas.PerformanceStatusUpdate,
    me: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return services.update_performance_status(db, performance_id, body.status, me)


@api_router.delete("/{performance_id}", response_model=MessageOut)
def delete_performance_route(
    performance_id: int,
    me: Identity = Depends(require_roles(*HR_ROLES)),
    db: Session = Depends(get_db),
):
    return services.delete_performance(db, performance_id, me)
