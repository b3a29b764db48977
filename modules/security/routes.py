# modules/security/routes.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database.connection import get_db
from modules.common.query import ListParams, list_params
from modules.common.schemas import MessageOut
from modules.security import schemas, services
from modules.security.deps import Identity, require_roles
from modules.security.model import HR_ROLES, UserRole

api = APIRouter(prefix="/api/users", tags=["Users"])


@api.get("/", response_model=schemas.UserListOut)
def list_users(
    role: Optional[UserRole] = Query(None),
    params: ListParams = Depends(list_params),
    me: Identity = Depends(require_roles(*HR_ROLES)),
    db: Session = Depends(get_db),
):
    page = services.list_users(db, params, role=role)
    return {"users": page.items, **page.meta()}


@api.patch("/{user_id}/deactivate", response_model=MessageOut)
def deactivate_user(
    user_id: int,
    me: Identity = Depends(require_roles(UserRole.ADMIN)),
    db: Session = Depends(get_db),
):
    return services.deactivate_user(db, user_id, acting_user_id=me.id)


@api.patch("/{user_id}/role", response_model=schemas.UserOut)
def set_user_role(
    user_id: int,
    data: schemas.RoleUpdate,
    me: Identity = Depends(require_roles(UserRole.ADMIN)),
    db: Session = Depends(get_db),
):
    return services.set_user_role(db, user_id, data.role, acting_user_id=me.id)
