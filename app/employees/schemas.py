from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import date


class EmployeeCreate(BaseModel):
    dni: int = Field(..., gt=0)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    birth_date: Optional[date] = None
    home_address: Optional[str] = None
    mobile_phone: Optional[str] = None
    vaccination_status: bool = False
    role: str


class EmployeeUpdate(BaseModel):
    dni: Optional[int] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    birth_date: Optional[date] = None
    home_address: Optional[str] = None
    mobile_phone: Optional[str] = None
    vaccination_status: Optional[bool] = None
    username: Optional[str] = None
    password: Optional[str] = None


class EmployeeFilter(BaseModel):
    dni: Optional[str] = None
    email: Optional[str] = None
    complete_name: Optional[str] = None
    vaccine: Optional[str] = None
    is_vaccinated: Optional[bool] = None
    start_date: Optional[date] = None
    finish_date: Optional[date] = None


class EmployeeVaccinationItem(BaseModel):
    id: Optional[int]
    name: Optional[str]
    dose_number: int
    vaccination_date: date
    employee_vaccination_id: int


class RoleItem(BaseModel):
    id: Optional[int]
    name: Optional[str]


class EmployeeResponse(BaseModel):
    id: int
    dni: Optional[int]
    first_name: Optional[str]
    last_name: Optional[str]
    email: str
    birth_date: Optional[date]
    home_address: Optional[str]
    mobile_phone: Optional[str]
    status: str
    username: Optional[str]
    password: Optional[str]
    vaccination_status: bool
    vaccines: Optional[List[EmployeeVaccinationItem]]
    roles: Optional[List[RoleItem]]


class CreateEmployeeResponse(BaseModel):
    id: int
    dni: int
    first_name: str
    last_name: str
    email: str
    birth_date: Optional[date]
    home_address: Optional[str]
    mobile_phone: Optional[str]
    status: str
    username: Optional[str]
    password: Optional[str]
    role: Optional[str]


class EmployeeDeleteResponse(BaseModel):
    message: str
    id: int
    status: str
    employee_name: str
    dni: Optional[int]
    email: str


class EmployeeUpdateResponse(BaseModel):
    message: str
    employee: dict


class EmployeeVaccinationCreate(BaseModel):
    vaccine_id: int
    dose_number: int = Field(1, ge=1)
    vaccination_date: date
