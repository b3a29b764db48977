# modules/employees/routes.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database.connection import get_db
from modules.common.errors import not_found
from modules.common.query import ListParams, list_params
from modules.common.schemas import MessageOut
from modules.employees import schemas, services
from modules.security.deps import require_roles
from modules.security.model import HR_ROLES

api_router = APIRouter()

hr_only = [Depends(require_roles(*HR_ROLES))]


@api_router.get("/", response_model=schemas.EmployeeListOut)
def read_employees_route(
    department: Optional[str] = Query(None),
    params: ListParams = Depends(list_params),
    db: Session = Depends(get_db),
):
    page = services.get_employees(db=db, params=params, department=department)
    return {"employees": page.items, **page.meta()}


@api_router.get("/department/{department}", response_model=List[schemas.EmployeeOut])
def read_employees_by_department_route(department: str, db: Session = Depends(get_db)):
    return services.get_employees_by_department(db=db, department=department)


@api_router.get("/{employee_id}", response_model=schemas.EmployeeOut)
def read_employee_route(employee_id: int, db: Session = Depends(get_db)):
    obj = services.get_employee(db=db, employee_id=employee_id)
    if not obj:
        raise not_found("Employee")
    return obj


@api_router.post("/", response_model=schemas.EmployeeOut,
                 status_code=status.HTTP_201_CREATED, dependencies=hr_only)
def create_employee_route(employee: schemas.EmployeeCreate, db: Session = Depends(get_db)):
    return services.create_employee(db=db, employee=employee)


@api_router.put("/{employee_id}", response_model=schemas.EmployeeOut, dependencies=hr_only)
def update_employee_route(employee_id: int, employee: schemas.EmployeeUpdate, db: Session = Depends(get_db)):
    return services.update_employee(db=db, employee_id=employee_id, employee_update=employee)


@api_router.delete("/{employee_id}", response_model=MessageOut, dependencies=hr_only)
def delete_employee_route(employee_id: int, db: Session = Depends(get_db)):
    return services.delete_employee(db=db, employee_id=employee_id)
