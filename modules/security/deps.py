# modules/security/deps.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from database.connection import get_db
from modules.security.model import User, UserRole
from modules.security.tokens import InvalidToken, decode_access_token, token_user_id

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """who is calling; passed explicitly into every protected handler"""
    id: int
    username: str
    email: str
    role: UserRole

    def has_role(self, *roles: UserRole) -> bool:
        return self.role in roles


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# ------------------------------------------------------------
# Current user
# ------------------------------------------------------------
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Identity:
    """
    missing token -> 401, bad/expired token -> 401,
    token for a deleted or deactivated user -> 401
    """
    if credentials is None or not credentials.credentials:
        raise _unauthenticated("Access token required")

    try:
        claims = decode_access_token(credentials.credentials)
        user_id = token_user_id(claims)
    except InvalidToken as e:
        logger.info("Rejected bearer token: %s", e)
        raise _unauthenticated("Invalid or expired token")

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise _unauthenticated("Invalid or expired token")

    return Identity(id=user.id, username=user.username, email=user.email, role=user.role)


def require_roles(*roles: UserRole) -> Callable:
    """
    FastAPI dependency:
      @router.post(..., dependencies=[Depends(require_roles(UserRole.HR, UserRole.ADMIN))])
    """
    allowed = ", ".join(r.value for r in roles)

    def _dep(me: Identity = Depends(get_current_user)) -> Identity:
        if not me.has_role(*roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient role: requires one of {allowed}",
            )
        return me

    return _dep
