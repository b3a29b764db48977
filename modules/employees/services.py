# modules/employees/services.py
import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from modules.common.errors import FieldValidationError, not_found
from modules.common.query import (
    ListParams,
    Page,
    SortSpec,
    active_only,
    apply_date_range,
    apply_filters,
    apply_search,
    run_list,
)
from . import models, schemas

logger = logging.getLogger(__name__)

Employee = models.Employee

EMPLOYEE_SORT = SortSpec(
    columns={
        "createdAt": Employee.created_at,
        "hireDate": Employee.hire_date,
        "firstName": Employee.first_name,
        "lastName": Employee.last_name,
        "department": Employee.department,
        "position": Employee.position,
        "salary": Employee.salary,
        "employeeId": Employee.employee_code,
    },
    default_key="createdAt",
    aliases={"employeeCode": "employeeId"},
    tiebreak=Employee.id,
)

# whitelisted free-text search fields, full name included
EMPLOYEE_SEARCH = [
    Employee.first_name,
    Employee.last_name,
    Employee.email,
    Employee.employee_code,
    Employee.first_name + " " + Employee.last_name,
]


# -------------------------------------------------
# Helpers
# -------------------------------------------------
def _with_manager(q):
    return q.options(joinedload(Employee.manager))


def _duplicate() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Employee with this ID or email already exists",
    )


def _ensure_unique(db: Session, employee_code: Optional[str], email: Optional[str], exclude_id: Optional[int] = None):
    # uniqueness spans active and deactivated employees
    conds = []
    if employee_code:
        conds.append(Employee.employee_code == employee_code)
    if email:
        conds.append(Employee.email == email)
    if not conds:
        return
    q = db.query(Employee.id).filter(or_(*conds))
    if exclude_id is not None:
        q = q.filter(Employee.id != exclude_id)
    if q.first():
        raise _duplicate()


def _check_manager(db: Session, manager_id: Optional[int], employee_id: Optional[int] = None):
    if manager_id is None:
        return
    if employee_id is not None and manager_id == employee_id:
        raise FieldValidationError("manager", "An employee cannot be their own manager")
    manager = db.get(Employee, manager_id)
    if manager is None or not manager.is_active:
        raise FieldValidationError("manager", "Manager not found")


# -------------------------------------------------
# Queries
# -------------------------------------------------
def get_employee(db: Session, employee_id: int) -> Optional[models.Employee]:
    """by id, deactivated included"""
    return _with_manager(db.query(Employee)).filter(Employee.id == employee_id).first()


def get_active_employee(db: Session, employee_id: int) -> Optional[models.Employee]:
    emp = db.get(Employee, employee_id)
    return emp if emp is not None and emp.is_active else None


def require_active_employee(db: Session, employee_id: int, field: str = "employee") -> models.Employee:
    """reference check used by goals / evaluations / competencies"""
    emp = get_active_employee(db, employee_id)
    if emp is None:
        raise FieldValidationError(field, "Employee not found")
    return emp


def active_employee_ids_in_department(db: Session, department: str) -> List[int]:
    rows = active_only(db.query(Employee.id), Employee).filter(Employee.department == department).all()
    return [r.id for r in rows]


def get_employees(db: Session, params: ListParams, department: Optional[str] = None) -> Page:
    q = active_only(_with_manager(db.query(Employee)), Employee)
    q = apply_filters(q, [(Employee.department, department)])
    q = apply_search(q, params.search, EMPLOYEE_SEARCH)
    q = apply_date_range(q, Employee.hire_date, params.date_from, params.date_to)
    return run_list(q, params, EMPLOYEE_SORT)


def get_employees_by_department(db: Session, department: str) -> List[models.Employee]:
    return (
        active_only(_with_manager(db.query(Employee)), Employee)
        .filter(Employee.department == department)
        .order_by(Employee.last_name.asc(), Employee.first_name.asc())
        .all()
    )


# -------------------------------------------------
# Mutations
# -------------------------------------------------
def create_employee(db: Session, employee: schemas.EmployeeCreate) -> models.Employee:
    _ensure_unique(db, employee.employee_code, employee.email)
    _check_manager(db, employee.manager_id)

    db_employee = Employee(**employee.model_dump())
    db.add(db_employee)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _duplicate()
    db.refresh(db_employee)
    logger.info("Created employee %s (%s)", db_employee.id, db_employee.employee_code)
    return get_employee(db, db_employee.id)


def update_employee(db: Session, employee_id: int, employee_update: schemas.EmployeeUpdate) -> models.Employee:
    db_employee = get_active_employee(db, employee_id)
    if not db_employee:
        raise not_found("Employee")

    update_data = employee_update.model_dump(exclude_unset=True)
    # required columns cannot be cleared
    for key in ("employee_code", "first_name", "last_name", "email", "department", "position", "salary", "hire_date"):
        if key in update_data and update_data[key] is None:
            update_data.pop(key)

    code = update_data.get("employee_code")
    email = update_data.get("email")
    _ensure_unique(
        db,
        code if code != db_employee.employee_code else None,
        email if email != db_employee.email else None,
        exclude_id=employee_id,
    )
    if "manager_id" in update_data:
        _check_manager(db, update_data["manager_id"], employee_id)

    for key, value in update_data.items():
        setattr(db_employee, key, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise _duplicate()

    logger.info("Updated employee %s", employee_id)
    return get_employee(db, employee_id)


def delete_employee(db: Session, employee_id: int) -> dict:
    db_employee = get_active_employee(db, employee_id)
    if not db_employee:
        raise not_found("Employee")
    db_employee.deactivate()
    db.commit()
    logger.info("Deactivated employee %s", employee_id)
    return {"message": "Employee deleted successfully"}
