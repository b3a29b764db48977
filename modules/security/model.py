from __future__ import annotations
from enum import Enum

from sqlalchemy import Column, DateTime, Enum as SQLEnum, Integer, String

from database.base import Base
from modules.common.lifecycle import SoftDeleteMixin, TimestampMixin


class UserRole(str, Enum):
    EMPLOYEE = "employee"
    MANAGER = "manager"
    HR = "hr"
    ADMIN = "admin"


# roles allowed to manage employee records
HR_ROLES = (UserRole.HR, UserRole.ADMIN)
# roles allowed to approve / reject evaluations and read others' goals
REVIEWER_ROLES = (UserRole.MANAGER, UserRole.HR, UserRole.ADMIN)


class User(SoftDeleteMixin, TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(30), unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    role = Column(SQLEnum(UserRole), default=UserRole.EMPLOYEE, nullable=False, index=True)
    department = Column(String, nullable=False)
    # employee code of the linked employee record, if any
    employee_code = Column(String, unique=True, index=True, nullable=True)
    last_login = Column(DateTime, nullable=True)
