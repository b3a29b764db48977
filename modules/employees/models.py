# modules/employees/models.py
from datetime import date

from sqlalchemy import Column, Date, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from database.base import Base
from modules.common.lifecycle import SoftDeleteMixin, TimestampMixin


class Employee(SoftDeleteMixin, TimestampMixin, Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    employee_code = Column(String(50), unique=True, index=True, nullable=False)
    first_name = Column(String, index=True, nullable=False)
    last_name = Column(String, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone_number = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    department = Column(String, index=True, nullable=False)
    position = Column(String, nullable=False)
    salary = Column(Float, nullable=False, default=0.0)
    hire_date = Column(Date, nullable=False, default=date.today)
    manager_id = Column(Integer, ForeignKey("employees.id"), nullable=True, index=True)

    # weak back-reference to another employee
    manager = relationship("Employee", remote_side=[id], foreign_keys=[manager_id])
