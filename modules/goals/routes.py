# modules/goals/routes.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database.connection import get_db
from modules.common.derived import GoalStatus
from modules.common.query import ListParams, list_params
from modules.common.schemas import MessageOut
from modules.goals import schemas, services
from modules.goals.models import GoalTargetType
from modules.security.deps import Identity, get_current_user

api_router = APIRouter()


@api_router.get("/", response_model=schemas.GoalListOut)
def read_goals_route(
    target_type: Optional[GoalTargetType] = Query(None, alias="targetType"),
    employee: Optional[int] = Query(None, gt=0),
    goal_status: Optional[GoalStatus] = Query(None, alias="status"),
    params: ListParams = Depends(list_params),
    me: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    page = services.get_goals(
        db,
        owner_id=me.id,
        params=params,
        target_type=target_type,
        employee_id=employee,
        goal_status_value=goal_status,
    )
    return {"goals": page.items, **page.meta()}


@api_router.get("/type/{target_type}", response_model=List[schemas.GoalOut])
def read_goals_by_type_route(
    target_type: GoalTargetType,
    me: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return services.get_goals_by_type(db, owner_id=me.id, target_type=target_type)


@api_router.get("/employee/{employee_id}", response_model=schemas.GoalListOut)
def read_goals_by_employee_route(
    employee_id: int,
    params: ListParams = Depends(list_params),
    db: Session = Depends(get_db),
):
    page = services.get_goals_by_employee(db, employee_id=employee_id, params=params)
    return {"goals": page.items, **page.meta()}


@api_router.get("/{goal_id}", response_model=schemas.GoalOut)
def read_goal_route(goal_id: int, me: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    return services.get_readable_goal(db, goal_id, me)


@api_router.post("/", response_model=schemas.GoalOut, status_code=status.HTTP_201_CREATED)
def create_goal_route(
    goal: schemas.GoalCreate,
    me: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return services.create_goal(db, goal, me)


@api_router.put("/{goal_id}", response_model=schemas.GoalOut)
def update_goal_route(
    goal_id: int,
    goal: schemas.GoalUpdate,
    me: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return services.update_goal(db, goal_id, goal, me)


@api_router.patch("/{goal_id}/progress", response_model=schemas.GoalOut)
def update_goal_progress_route(
    goal_id: int,
    body: schemas.GoalProgressUpdate,
    me: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return services.update_goal_progress(db, goal_id, body.progress, me)


@api_router.delete("/{goal_id}", response_model=MessageOut)
def delete_goal_route(goal_id: int, me: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    return services.delete_goal(db, goal_id, me)
