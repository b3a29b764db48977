# modules/employees/schemas.py
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import ConfigDict, EmailStr, Field, computed_field, field_validator

from modules.common.schemas import CamelModel, PageMeta

PHONE_PATTERN = r"^\+?[0-9\- ]{7,20}$"


def _strip(v):
    return v.strip() if isinstance(v, str) else v


# -------------------------------------------------
# Employee reference (embedded in goals, evaluations, competencies)
# -------------------------------------------------
class EmployeeRef(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_code: Optional[str] = Field(None, alias="employeeId")
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None


# -------------------------------------------------
# Employee input
# -------------------------------------------------
class EmployeeBase(CamelModel):
    employee_code: str = Field(..., min_length=1, max_length=50, alias="employeeId", description="Employee ID / code")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    address: Optional[str] = Field(None, max_length=500)
    department: str = Field(..., min_length=1, max_length=100)
    position: str = Field(..., min_length=1, max_length=100)
    salary: float = Field(..., ge=0)
    hire_date: date = Field(default_factory=date.today)
    manager_id: Optional[int] = Field(None, gt=0, alias="manager")

    @field_validator("employee_code", "first_name", "last_name", "department", "position", mode="before")
    @classmethod
    def _strip_text(cls, v):
        return _strip(v)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("phone_number", "address", "manager_id", mode="before")
    @classmethod
    def _blank_is_none(cls, v):
        # form clients send "" for untouched optional inputs
        if isinstance(v, str) and not v.strip():
            return None
        return v


class EmployeeCreate(EmployeeBase):
    pass


class EmployeeUpdate(CamelModel):
    employee_code: Optional[str] = Field(None, min_length=1, max_length=50, alias="employeeId")
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    address: Optional[str] = Field(None, max_length=500)
    department: Optional[str] = Field(None, min_length=1, max_length=100)
    position: Optional[str] = Field(None, min_length=1, max_length=100)
    salary: Optional[float] = Field(None, ge=0)
    hire_date: Optional[date] = None
    manager_id: Optional[int] = Field(None, gt=0, alias="manager")

    @field_validator("employee_code", "first_name", "last_name", "department", "position", mode="before")
    @classmethod
    def _strip_text(cls, v):
        return _strip(v)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v

    @field_validator("phone_number", "address", "manager_id", mode="before")
    @classmethod
    def _blank_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


# -------------------------------------------------
# Employee output
# -------------------------------------------------
class EmployeeOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_code: str = Field(..., alias="employeeId")
    first_name: str
    last_name: str
    email: str
    phone_number: Optional[str] = None
    address: Optional[str] = None
    department: str
    position: str
    salary: float
    hire_date: Optional[date] = None
    manager_id: Optional[int] = None
    manager: Optional[EmployeeRef] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field(alias="fullName")
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class EmployeeListOut(PageMeta):
    employees: List[EmployeeOut]
