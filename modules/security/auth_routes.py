# modules/security/auth_routes.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database.connection import get_db
from modules.common.errors import not_found
from modules.common.schemas import MessageOut
from modules.security import schemas, services
from modules.security.deps import Identity, get_current_user

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", response_model=schemas.AuthOut, status_code=status.HTTP_201_CREATED)
def register(data: schemas.RegisterIn, db: Session = Depends(get_db)):
    user = services.register_user(db, data)
    return {"token": services.issue_token(user), "user": user, "message": "User registered successfully"}


@router.post("/login", response_model=schemas.AuthOut)
def login(data: schemas.LoginIn, db: Session = Depends(get_db)):
    user = services.authenticate(db, data.email, data.password)
    return {"token": services.issue_token(user), "user": user, "message": "Login successful"}


@router.post("/logout", response_model=MessageOut)
def logout(me: Identity = Depends(get_current_user)):
    # tokens are stateless; the client drops its copy
    return {"message": "Logged out successfully"}


@router.get("/profile", response_model=schemas.UserOut)
def get_profile(me: Identity = Depends(get_current_user), db: Session = Depends(get_db)):
    user = services.get_user(db, me.id)
    if not user:
        raise not_found("User")
    return user


@router.put("/profile", response_model=schemas.UserOut)
def update_profile(
    data: schemas.ProfileUpdate,
    me: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return services.update_profile(db, me.id, data)


@router.put("/change-password", response_model=MessageOut)
def change_password(
    data: schemas.ChangePasswordIn,
    me: Identity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    services.change_password(db, me.id, data)
    return {"message": "Password changed successfully"}
