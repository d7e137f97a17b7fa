import logging
from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy import String, and_, cast, select
from sqlalchemy.orm import Session, contains_eager
from sqlalchemy.sql import Select

from app.auth.models import User, Role, UserRole
from app.auth.service import UserService, RoleService, UserRoleService
from app.core.constants import Status, UpdateType, RoleName, status_label
from app.core.exceptions import EmployeeError
from app.core.logging_config import OperationLogger
from app.core.security import get_password_hash
from app.core.service_base import BaseService
from app.core.validators import validate_dni
from app.employees.models import Employee, EmployeeVaccination
from app.employees.schemas import (
    EmployeeCreate,
    EmployeeUpdate,
    EmployeeFilter,
    EmployeeResponse,
    EmployeeVaccinationItem,
    EmployeeVaccinationCreate,
    RoleItem,
    CreateEmployeeResponse,
    EmployeeDeleteResponse,
    EmployeeUpdateResponse
)
from app.people.models import Person
from app.people.service import PersonService
from app.vaccines.models import Vaccine
from app.vaccines.service import VaccineService

logger = logging.getLogger(__name__)


class EmployeeService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.person_service = PersonService(db)
        self.user_service = UserService(db)
        self.role_service = RoleService(db)
        self.user_role_service = UserRoleService(db)
        self.vaccine_service = VaccineService(db)

    # Queries

    def build_employee_query(self) -> Select:
        """Select active employees with their person, user, roles and vaccinations.

        Every join is a left outer join scoped to active rows of the joined
        table, so an inactive link empties that branch but keeps the employee.
        """
        active = Status.ACTIVE
        return (
            select(Employee)
            .outerjoin(User, and_(User.employee_id == Employee.id, User.status == active))
            .outerjoin(UserRole, and_(UserRole.user_id == User.id, UserRole.status == active))
            .outerjoin(Role, and_(Role.id == UserRole.role_id, Role.status == active))
            .outerjoin(
                EmployeeVaccination,
                and_(EmployeeVaccination.employee_id == Employee.id, EmployeeVaccination.status == active)
            )
            .outerjoin(Vaccine, and_(Vaccine.id == EmployeeVaccination.vaccine_id, Vaccine.status == active))
            .outerjoin(Person, and_(Person.id == Employee.person_id, Person.status == active))
            .options(
                contains_eager(Employee.user)
                .contains_eager(User.user_roles)
                .contains_eager(UserRole.role),
                contains_eager(Employee.employee_vaccinations)
                .contains_eager(EmployeeVaccination.vaccine),
                contains_eager(Employee.person),
            )
            .where(Employee.status == active)
            .order_by(Employee.id, EmployeeVaccination.id, UserRole.id)
            .execution_options(populate_existing=True)
        )

    def filter_employees(self, query: Select, filters: EmployeeFilter) -> Select:
        """Append one predicate per supplied filter."""
        if filters.dni:
            query = query.where(cast(Person.dni, String).ilike(f"%{filters.dni}%"))

        if filters.email:
            query = query.where(Employee.email.ilike(f"%{filters.email}%"))

        if filters.complete_name:
            complete_name = Person.first_name + " " + Person.last_name
            query = query.where(complete_name.ilike(f"%{filters.complete_name}%"))

        if filters.vaccine:
            query = query.where(Vaccine.vaccine_type.ilike(f"%{filters.vaccine}%"))

        if filters.is_vaccinated:
            query = query.where(Employee.vaccination_status == filters.is_vaccinated)

        if filters.start_date and filters.finish_date:
            query = query.where(
                EmployeeVaccination.vaccination_date.between(filters.start_date, filters.finish_date)
            )

        return query

    def get_employees(self, filters: Optional[EmployeeFilter] = None) -> List[Employee]:
        query = self.build_employee_query()

        if filters:
            query = self.filter_employees(query, filters)

        return list(self.db.scalars(query).unique().all())

    def get_employee(
        self,
        dni: Optional[int] = None,
        email: Optional[str] = None,
        employee_id: Optional[int] = None
    ) -> Optional[Employee]:
        """Get one active employee by dni, email and/or id."""
        query = self.build_employee_query()

        if dni:
            query = query.where(Person.dni == dni)
        if email:
            query = query.where(Employee.email == email)
        if employee_id:
            query = query.where(Employee.id == employee_id)

        # Collections span several rows, so read them all before picking one
        employees = self.db.scalars(query).unique().all()
        return employees[0] if employees else None

    # Projections

    def map_employee(self, employee: Employee) -> EmployeeResponse:
        person = employee.person
        user = employee.user
        vaccinations = employee.employee_vaccinations or []
        user_roles = user.user_roles if user and user.user_roles else []

        return EmployeeResponse(
            id=employee.id,
            dni=person.dni if person else None,
            first_name=person.first_name if person else None,
            last_name=person.last_name if person else None,
            email=employee.email,
            birth_date=employee.birth_date,
            home_address=employee.home_address,
            mobile_phone=employee.mobile_phone,
            status=status_label(employee.status),
            username=user.username if user else None,
            password=user.password if user else None,
            vaccination_status=employee.vaccination_status,
            vaccines=[
                EmployeeVaccinationItem(
                    id=vaccination.vaccine.id if vaccination.vaccine else None,
                    name=vaccination.vaccine.vaccine_type if vaccination.vaccine else None,
                    dose_number=vaccination.dose_number,
                    vaccination_date=vaccination.vaccination_date,
                    employee_vaccination_id=vaccination.id
                )
                for vaccination in vaccinations
            ] if vaccinations else None,
            roles=[
                RoleItem(
                    id=user_role.role.id if user_role.role else None,
                    name=user_role.role.name if user_role.role else None
                )
                for user_role in user_roles
            ] if user_roles else None
        )

    def map_employees(self, employees: List[Employee]) -> List[EmployeeResponse]:
        return [self.map_employee(employee) for employee in employees]

    def map_create_employee(self, employee: Employee, user_role: UserRole) -> CreateEmployeeResponse:
        user = user_role.user
        return CreateEmployeeResponse(
            id=employee.id,
            dni=employee.person.dni,
            first_name=employee.person.first_name,
            last_name=employee.person.last_name,
            email=employee.email,
            birth_date=employee.birth_date,
            home_address=employee.home_address,
            mobile_phone=employee.mobile_phone,
            status=status_label(employee.status),
            username=user.username if user else None,
            password=user.password if user else None,
            role=user_role.role.name if user_role.role else None
        )

    def list_employees(self, filters: Optional[EmployeeFilter] = None) -> List[EmployeeResponse]:
        employees = self.get_employees(filters)
        return self.map_employees(employees)

    def my_information(self, dni: int) -> EmployeeResponse:
        employee = self.get_employee(dni=dni)
        if not employee:
            raise EmployeeError(EmployeeError.EMPLOYEE_NOT_FOUND, {"dni": dni})
        return self.map_employee(employee)

    # Mutations

    def create_employee(self, employee_data: EmployeeCreate) -> CreateEmployeeResponse:
        """Create the person, employee, user and role assignment in one transaction."""
        exist_person = self.person_service.get_person(employee_data.dni)
        exist_email_employee = self.get_employee(email=str(employee_data.email))
        is_valid_dni = validate_dni(employee_data.dni)
        role = self.role_service.get_role(employee_data.role)
        current_day = datetime.now(timezone.utc)

        if exist_person:
            raise EmployeeError(EmployeeError.DNI_EXIST, {"dni": employee_data.dni})

        if exist_email_employee:
            raise EmployeeError(EmployeeError.EMAIL_EXIST, {"email": str(employee_data.email)})

        if not is_valid_dni:
            raise EmployeeError(EmployeeError.INVALID_DNI, {"dni": employee_data.dni})

        if not role:
            raise EmployeeError(EmployeeError.ROLE_NOT_FOUND, {"role": employee_data.role})

        with OperationLogger("create_employee", subject=str(employee_data.email), logger=logger) as operation:
            try:
                person = self.person_service.create_person(Person(
                    dni=employee_data.dni,
                    first_name=employee_data.first_name,
                    last_name=employee_data.last_name,
                    status=Status.ACTIVE,
                    created_date=current_day
                ))

                employee = Employee(
                    email=str(employee_data.email),
                    birth_date=employee_data.birth_date,
                    home_address=employee_data.home_address,
                    mobile_phone=employee_data.mobile_phone,
                    vaccination_status=employee_data.vaccination_status,
                    status=Status.ACTIVE,
                    created_date=current_day,
                    person=person
                )
                self.db.add(employee)
                self.safe_flush("Error creating employee")

                # Initial credentials: the email and the dni
                user = self.user_service.create_user(User(
                    username=str(employee_data.email),
                    password=get_password_hash(str(employee_data.dni)),
                    status=Status.ACTIVE,
                    created_date=current_day,
                    employee=employee
                ))

                user_role = self.user_role_service.create_user_role(UserRole(
                    user=user,
                    role=role,
                    status=Status.ACTIVE,
                    created_date=current_day
                ))

                response = self.map_create_employee(employee, user_role)
                self.safe_commit("Error creating employee")
            except Exception:
                self.safe_rollback()
                raise

            operation.add_detail("employee_id", employee.id)
            operation.add_detail("role", role.name)

        self.log_service_action("create_employee", "Employee", response.id)
        return response

    def update_employee(
        self,
        dni: int,
        role: Optional[str] = None,
        update_type: Optional[str] = None,
        employee_data: Optional[EmployeeUpdate] = None
    ) -> Union[EmployeeDeleteResponse, EmployeeUpdateResponse]:
        """Soft-delete (administrators only) or update the employee holding ``dni``."""
        find_employee = self.get_employee(dni=dni)

        if dni and find_employee and update_type == UpdateType.DELETE and role == RoleName.ADMINISTRATOR:
            person = find_employee.person
            response = EmployeeDeleteResponse(
                message="The employee has been deleted successfully",
                id=find_employee.id,
                status=status_label(Status.INACTIVE),
                employee_name=f"{person.first_name} {person.last_name}",
                dni=person.dni,
                email=find_employee.email
            )

            find_employee.status = Status.INACTIVE
            self.safe_commit("Error deleting employee")

            self.log_service_action("delete_employee", "Employee", response.id)
            return response

        if dni and find_employee and update_type == UpdateType.UPDATE:
            employee_data = employee_data or EmployeeUpdate()

            with OperationLogger("update_employee", subject=str(dni), logger=logger) as operation:
                try:
                    applied = self.apply_changes(find_employee, {
                        "birth_date": employee_data.birth_date,
                        "email": str(employee_data.email) if employee_data.email else None,
                        "home_address": employee_data.home_address,
                        "mobile_phone": employee_data.mobile_phone,
                        "vaccination_status": employee_data.vaccination_status,
                    })
                    self.safe_flush("Error updating employee")
                    operation.add_detail("employee_fields", sorted(applied))

                    person_changes = {
                        "first_name": employee_data.first_name,
                        "last_name": employee_data.last_name,
                    }
                    if employee_data.dni is not None:
                        if validate_dni(employee_data.dni):
                            person_changes["dni"] = employee_data.dni
                        else:
                            logger.warning(f"Ignoring invalid dni {employee_data.dni} for employee {find_employee.id}")
                    self.person_service.update_person(find_employee.person_id, person_changes)

                    user_changes = {
                        "username": str(employee_data.email) if employee_data.email else employee_data.username
                    }
                    if employee_data.password:
                        user_changes["password"] = get_password_hash(employee_data.password)
                    if find_employee.user:
                        self.user_service.update_user(find_employee.user.id, user_changes)

                    self.safe_commit("Error updating employee")
                except Exception:
                    self.safe_rollback()
                    raise

            self.log_service_action("update_employee", "Employee", find_employee.id)
            return EmployeeUpdateResponse(
                message="The employee has been updated successfully",
                employee=employee_data.model_dump(mode="json", exclude={"password"}, exclude_none=True)
            )

        raise EmployeeError(EmployeeError.EMPLOYEE_NOT_FOUND, {"dni": dni})

    def add_vaccination(self, dni: int, vaccination_data: EmployeeVaccinationCreate) -> EmployeeResponse:
        """Register a vaccine dose for an employee and mark them vaccinated."""
        employee = self.get_employee(dni=dni)
        if not employee:
            raise EmployeeError(EmployeeError.EMPLOYEE_NOT_FOUND, {"dni": dni})

        vaccine = self.vaccine_service.get_vaccine(vaccination_data.vaccine_id)
        if not vaccine:
            raise EmployeeError(EmployeeError.VACCINE_NOT_FOUND, {"vaccine_id": vaccination_data.vaccine_id})

        employee_id = employee.id
        self.db.add(EmployeeVaccination(
            employee_id=employee_id,
            vaccine_id=vaccine.id,
            dose_number=vaccination_data.dose_number,
            vaccination_date=vaccination_data.vaccination_date,
            status=Status.ACTIVE
        ))
        employee.vaccination_status = True
        self.safe_commit("Error registering vaccination")

        self.log_service_action(
            "add_vaccination", "Employee", employee_id,
            {"vaccine": vaccine.vaccine_type, "dose_number": vaccination_data.dose_number}
        )
        return self.map_employee(self.get_employee(employee_id=employee_id))
