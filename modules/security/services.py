# modules/security/services.py
import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from modules.common.errors import FieldValidationError, not_found
from modules.common.query import ListParams, Page, SortSpec, active_only, apply_filters, apply_search, run_list
from modules.security import schemas
from modules.security.model import User, UserRole
from modules.security.passwords import hash_password, needs_rehash, verify_password
from modules.security.tokens import create_access_token

logger = logging.getLogger(__name__)

USER_SORT = SortSpec(
    columns={
        "createdAt": User.created_at,
        "username": User.username,
        "lastName": User.last_name,
        "lastLogin": User.last_login,
    },
    default_key="createdAt",
    tiebreak=User.id,
)


# -------------------------------------------------
# Lookups
# -------------------------------------------------
def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_login(db: Session, login: str) -> Optional[User]:
    login = (login or "").strip().lower()
    return (
        db.query(User)
        .filter(or_(func.lower(User.email) == login, func.lower(User.username) == login))
        .first()
    )


def _conflict(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def _ensure_unique(db: Session, *, username=None, email=None, employee_code=None, exclude_id=None):
    # uniqueness is global: deactivated users still hold their username / email.
    # username and email are compared case-insensitively, as login does
    checks = (
        (func.lower(User.username), username and username.lower(), "Username already exists"),
        (func.lower(User.email), email and email.lower(), "Email already exists"),
        (User.employee_code, employee_code, "Employee ID already exists"),
    )
    for column, value, message in checks:
        if not value:
            continue
        q = db.query(User.id).filter(column == value)
        if exclude_id is not None:
            q = q.filter(User.id != exclude_id)
        if q.first():
            raise _conflict(message)


def issue_token(user: User) -> str:
    return create_access_token(user.id, user.role.value)


# -------------------------------------------------
# Auth flows
# -------------------------------------------------
def register_user(db: Session, data: schemas.RegisterIn) -> User:
    _ensure_unique(db, username=data.username, email=data.email, employee_code=data.employee_code)

    user = User(
        username=data.username,
        email=data.email,
        password_hash=hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        role=data.role,
        department=data.department,
        employee_code=data.employee_code,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _conflict("User with this username, email or employee ID already exists")
    db.refresh(user)
    logger.info("Registered user %s (%s)", user.username, user.role.value)
    return user


def authenticate(db: Session, login: str, password: str) -> User:
    user = get_user_by_login(db, login)
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is deactivated")

    # old bcrypt hash -> current scheme
    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        logger.info("Rehashed legacy password for user %s", user.id)

    user.last_login = datetime.utcnow()
    db.commit()
    db.refresh(user)
    return user


def update_profile(db: Session, user_id: int, data: schemas.ProfileUpdate) -> User:
    user = get_user(db, user_id)
    if not user:
        raise not_found("User")

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in update_data and update_data["email"] != user.email:
        _ensure_unique(db, email=update_data["email"], exclude_id=user.id)

    for key, value in update_data.items():
        setattr(user, key, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _conflict("Update failed due to unique constraint")
    db.refresh(user)
    return user


def change_password(db: Session, user_id: int, data: schemas.ChangePasswordIn) -> None:
    user = get_user(db, user_id)
    if not user:
        raise not_found("User")
    if not verify_password(data.current_password, user.password_hash):
        raise FieldValidationError("currentPassword", "Current password is incorrect")

    user.password_hash = hash_password(data.new_password)
    db.commit()
    logger.info("Password changed for user %s", user.id)


# -------------------------------------------------
# Administration
# -------------------------------------------------
def list_users(db: Session, params: ListParams, role: Optional[UserRole] = None) -> Page:
    q = active_only(db.query(User), User)
    q = apply_filters(q, [(User.role, role)])
    q = apply_search(q, params.search, [User.username, User.email, User.first_name, User.last_name])
    return run_list(q, params, USER_SORT)


def deactivate_user(db: Session, user_id: int, acting_user_id: int) -> dict:
    user = get_user(db, user_id)
    if not user or not user.is_active:
        raise not_found("User")
    if user.id == acting_user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot deactivate your own account")
    user.deactivate()
    db.commit()
    logger.info("Deactivated user %s", user.id)
    return {"message": "User deactivated successfully"}


def set_user_role(db: Session, user_id: int, role: UserRole, acting_user_id: int) -> User:
    user = get_user(db, user_id)
    if not user or not user.is_active:
        raise not_found("User")
    if user.id == acting_user_id and role != user.role:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot change your own role")
    if role != user.role:
        logger.info("User %s role %s -> %s (by %s)", user.id, user.role.value, role.value, acting_user_id)
        user.role = role
        db.commit()
        db.refresh(user)
    return user
