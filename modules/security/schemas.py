# modules/security/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, EmailStr, Field, computed_field, field_validator

from modules.common.schemas import CamelModel, PageMeta
from modules.security.model import UserRole
from modules.security.passwords import MIN_PASSWORD_LENGTH


def _strip(v):
    return v.strip() if isinstance(v, str) else v


# -------------------------------------------------
# Input
# -------------------------------------------------
class RegisterIn(CamelModel):
    username: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: UserRole = UserRole.EMPLOYEE
    department: str = Field(..., min_length=1, max_length=100)
    employee_code: Optional[str] = Field(None, max_length=50, alias="employeeId")

    @field_validator("username", "first_name", "last_name", "department", "employee_code", mode="before")
    @classmethod
    def _strip_text(cls, v):
        return _strip(v)

    @field_validator("username")
    @classmethod
    def _plain_username(cls, v: str) -> str:
        # login accepts email or username, so a username must never look like an email
        if "@" in v:
            raise ValueError("Username cannot contain @")
        return v.lower()

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("employee_code")
    @classmethod
    def _blank_code(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("role")
    @classmethod
    def _employee_only(cls, v: UserRole) -> UserRole:
        # manager / hr / admin are granted by an admin
        if v != UserRole.EMPLOYEE:
            raise ValueError(f"Role {v.value} cannot be self-assigned")
        return v


class LoginIn(CamelModel):
    email: str = Field(..., min_length=1, description="email or username")
    password: str = Field(..., min_length=1)


class ProfileUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    department: Optional[str] = Field(None, min_length=1, max_length=100)

    @field_validator("first_name", "last_name", "department", mode="before")
    @classmethod
    def _strip_text(cls, v):
        return _strip(v)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v


class ChangePasswordIn(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)


class RoleUpdate(CamelModel):
    role: UserRole


# -------------------------------------------------
# Output
# -------------------------------------------------
class UserOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    department: str
    employee_code: Optional[str] = Field(None, alias="employeeId")
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @computed_field(alias="fullName")
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class UserRef(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: Optional[str] = None


class AuthOut(CamelModel):
    token: str
    user: UserOut
    message: str = "OK"


class UserListOut(PageMeta):
    users: List[UserOut]
