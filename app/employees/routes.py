from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from app.core.constants import RoleName, UpdateType
from app.core.database import get_db
from app.core.dependencies import get_current_user, get_current_admin_user, get_current_role
from app.core.exceptions import EmployeeError, InsufficientPermissionsError
from app.core.validators import validate_date_range
from app.auth.models import User
from app.employees.schemas import (
    EmployeeCreate,
    EmployeeUpdate,
    EmployeeFilter,
    EmployeeResponse,
    EmployeeVaccinationCreate,
    CreateEmployeeResponse
)
from app.employees.service import EmployeeService

router = APIRouter(prefix="/employees", tags=["employees"])


def _own_dni(current_user: User) -> Optional[int]:
    employee = current_user.employee
    if employee is None or employee.person is None:
        return None
    return employee.person.dni


@router.post("/", response_model=CreateEmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    employee_data: EmployeeCreate,
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """Create an employee with its person, user account and role."""
    employee_service = EmployeeService(db)
    return employee_service.create_employee(employee_data)


@router.get("/", response_model=List[EmployeeResponse])
async def list_employees(
    filters: EmployeeFilter = Depends(),
    current_user: User = Depends(get_current_admin_user),
    db: Session = Depends(get_db)
):
    """List active employees, optionally filtered."""
    if filters.start_date and filters.finish_date:
        validate_date_range(filters.start_date, filters.finish_date)

    employee_service = EmployeeService(db)
    return employee_service.list_employees(filters)


@router.get("/me", response_model=EmployeeResponse)
async def my_information(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the caller's own employee record."""
    dni = _own_dni(current_user)
    if dni is None:
        raise EmployeeError(EmployeeError.EMPLOYEE_NOT_FOUND)

    employee_service = EmployeeService(db)
    return employee_service.my_information(dni)


@router.patch("/{dni}")
async def update_employee(
    dni: int,
    type: str = Query(..., description=" or ".join(update_type.value for update_type in UpdateType)),
    employee_data: Optional[EmployeeUpdate] = Body(None),
    current_user: User = Depends(get_current_user),
    role: Optional[str] = Depends(get_current_role),
    db: Session = Depends(get_db)
):
    """Update an employee, or soft-delete it when ``type=DELETE`` (administrators only).

    Employees may only update their own record. Unknown types are rejected
    by the service as ``employee-not-found``.
    """
    if role != RoleName.ADMINISTRATOR and _own_dni(current_user) != dni:
        raise InsufficientPermissionsError(
            detail="Employees can only update their own record",
            error_data={"dni": dni}
        )

    employee_service = EmployeeService(db)
    return employee_service.update_employee(dni, role, type, employee_data)


@router.post("/{dni}/vaccinations", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def add_vaccination(
    dni: int,
    vaccination_data: EmployeeVaccinationCreate,
    current_user: User = Depends(get_current_user),
    role: Optional[str] = Depends(get_current_role),
    db: Session = Depends(get_db)
):
    """Register a vaccine dose. Employees may only register their own doses."""
    if role != RoleName.ADMINISTRATOR and _own_dni(current_user) != dni:
        raise InsufficientPermissionsError(
            detail="Employees can only register their own vaccinations",
            error_data={"dni": dni}
        )

    employee_service = EmployeeService(db)
    return employee_service.add_vaccination(dni, vaccination_data)
