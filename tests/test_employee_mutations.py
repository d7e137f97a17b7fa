from datetime import date

import pytest

from app.auth.models import User, UserRole
from app.auth.service import UserRoleService
from app.core.constants import Status
from app.core.exceptions import EmployeeError, ResourceAlreadyExistsError
from app.core.security import verify_password
from app.employees.models import Employee
from app.employees.schemas import EmployeeUpdate, EmployeeVaccinationCreate
from app.people.models import Person

from conftest import build_employee


def test_create_employee_returns_projection(employee_service):
    result = employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com", role="NURSE"))

    assert result.dni == 12345678
    assert result.first_name == "Ana"
    assert result.last_name == "Diaz"
    assert result.email == "ana@x.com"
    assert result.username == "ana@x.com"
    assert result.role == "NURSE"
    assert result.status == "Active"
    assert result.id is not None


def test_create_employee_writes_every_record(db, employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com", role="NURSE"))

    person = db.query(Person).filter(Person.dni == 12345678).one()
    employee = db.query(Employee).filter(Employee.person_id == person.id).one()
    user = db.query(User).filter(User.employee_id == employee.id).one()
    user_role = db.query(UserRole).filter(UserRole.user_id == user.id).one()

    assert person.status == Status.ACTIVE
    assert person.created_date is not None
    assert employee.status == Status.ACTIVE
    assert user.username == "ana@x.com"
    assert user_role.role.name == "NURSE"


def test_initial_password_is_the_hashed_dni(db, employee_service):
    result = employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))

    user = db.query(User).filter(User.username == "ana@x.com").one()
    assert user.password != "12345678"
    assert verify_password("12345678", user.password)
    assert result.password == user.password


def test_create_with_existing_dni_fails(employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))

    with pytest.raises(EmployeeError) as exc_info:
        employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "other@x.com"))

    assert exc_info.value.kind == "dni-exist"
    assert exc_info.value.status_code == 400


def test_create_with_existing_email_fails(employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))

    with pytest.raises(EmployeeError) as exc_info:
        employee_service.create_employee(build_employee(87654321, "Ana", "Diaz", "ana@x.com"))

    assert exc_info.value.kind == "email-exist"


def test_create_with_invalid_dni_fails(db, employee_service):
    with pytest.raises(EmployeeError) as exc_info:
        employee_service.create_employee(build_employee(123, "Ana", "Diaz", "ana@x.com"))

    assert exc_info.value.kind == "invalid-dni"
    assert db.query(Person).count() == 0


def test_create_with_unknown_role_fails(employee_service):
    with pytest.raises(EmployeeError) as exc_info:
        employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com", role="JANITOR"))

    assert exc_info.value.kind == "role-not-found"


def test_create_is_all_or_nothing(db, employee_service, monkeypatch):
    def broken_assignment(self, user_role):
        raise RuntimeError("role assignment failed")

    monkeypatch.setattr(UserRoleService, "create_user_role", broken_assignment)

    with pytest.raises(RuntimeError):
        employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))

    assert db.query(Person).count() == 0
    assert db.query(Employee).count() == 0
    assert db.query(User).count() == 0


def test_admin_soft_deletes_employee(db, employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com", role="NURSE"))

    result = employee_service.update_employee(12345678, "ADMINISTRATOR", "DELETE")

    assert result.status == "Inactive"
    assert result.employee_name == "Ana Diaz"
    assert result.dni == 12345678
    assert result.email == "ana@x.com"
    assert employee_service.list_employees() == []

    # The row stays, only its status flips
    employee = db.query(Employee).filter(Employee.email == "ana@x.com").one()
    assert employee.status == Status.INACTIVE


def test_soft_delete_does_not_cascade(db, employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))
    employee_service.update_employee(12345678, "ADMINISTRATOR", "DELETE")

    assert db.query(Person).filter(Person.dni == 12345678).one().status == Status.ACTIVE
    assert db.query(User).filter(User.username == "ana@x.com").one().status == Status.ACTIVE


def test_recreate_after_soft_delete_reports_existing_dni(employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))
    employee_service.update_employee(12345678, "ADMINISTRATOR", "DELETE")

    with pytest.raises(EmployeeError) as exc_info:
        employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))

    assert exc_info.value.kind == "dni-exist"


def test_delete_requires_administrator(employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))

    with pytest.raises(EmployeeError) as exc_info:
        employee_service.update_employee(12345678, "EMPLOYEE", "DELETE")

    assert exc_info.value.kind == "employee-not-found"
    assert len(employee_service.list_employees()) == 1


def test_update_unknown_employee_fails(employee_service):
    with pytest.raises(EmployeeError) as exc_info:
        employee_service.update_employee(99999999, "ADMINISTRATOR", "UPDATE", EmployeeUpdate(first_name="X"))

    assert exc_info.value.kind == "employee-not-found"


def test_update_with_unknown_type_fails(employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))

    with pytest.raises(EmployeeError):
        employee_service.update_employee(12345678, "ADMINISTRATOR", "ARCHIVE")


def test_update_overwrites_employee_person_and_user(db, employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))

    result = employee_service.update_employee(12345678, "EMPLOYEE", "UPDATE", EmployeeUpdate(
        first_name="Ana Maria",
        email="ana.diaz@x.com",
        mobile_phone="0987654321",
        birth_date=date(1991, 2, 3),
        vaccination_status=True
    ))

    assert result.message == "The employee has been updated successfully"
    assert result.employee["email"] == "ana.diaz@x.com"

    updated = employee_service.my_information(12345678)
    assert updated.first_name == "Ana Maria"
    assert updated.last_name == "Diaz"
    assert updated.email == "ana.diaz@x.com"
    assert updated.mobile_phone == "0987654321"
    assert updated.birth_date == date(1991, 2, 3)
    assert updated.vaccination_status is True
    assert updated.username == "ana.diaz@x.com"


def test_update_uses_explicit_username_without_email(employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))

    employee_service.update_employee(12345678, "EMPLOYEE", "UPDATE", EmployeeUpdate(username="adiaz"))

    assert employee_service.my_information(12345678).username == "adiaz"


def test_update_hashes_new_password(db, employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))

    result = employee_service.update_employee(
        12345678, "EMPLOYEE", "UPDATE", EmployeeUpdate(password="N3w-secret")
    )

    user = db.query(User).filter(User.username == "ana@x.com").one()
    assert verify_password("N3w-secret", user.password)
    assert not verify_password("12345678", user.password)
    assert "password" not in result.employee


def test_update_changes_dni_when_valid(employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))

    employee_service.update_employee(12345678, "EMPLOYEE", "UPDATE", EmployeeUpdate(dni=87654321))

    assert employee_service.get_employee(dni=12345678) is None
    assert employee_service.my_information(87654321).first_name == "Ana"


def test_update_drops_invalid_dni_but_applies_the_rest(employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))

    employee_service.update_employee(12345678, "EMPLOYEE", "UPDATE", EmployeeUpdate(dni=12, last_name="Diaz Ruiz"))

    result = employee_service.my_information(12345678)
    assert result.dni == 12345678
    assert result.last_name == "Diaz Ruiz"


def test_add_vaccination_marks_employee_vaccinated(db, employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))
    vaccine_id = employee_service.vaccine_service.get_vaccines()[0].id

    result = employee_service.add_vaccination(12345678, EmployeeVaccinationCreate(
        vaccine_id=vaccine_id, dose_number=1, vaccination_date=date(2021, 6, 1)
    ))

    assert result.vaccination_status is True
    assert len(result.vaccines) == 1
    assert result.vaccines[0].id == vaccine_id
    assert result.vaccines[0].vaccination_date == date(2021, 6, 1)


def test_add_vaccination_with_unknown_vaccine_fails(employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))

    with pytest.raises(EmployeeError) as exc_info:
        employee_service.add_vaccination(12345678, EmployeeVaccinationCreate(
            vaccine_id=999, vaccination_date=date(2021, 6, 1)
        ))

    assert exc_info.value.kind == "vaccine-not-found"


def test_my_information_of_unknown_employee_fails(employee_service):
    with pytest.raises(EmployeeError) as exc_info:
        employee_service.my_information(12345678)

    assert exc_info.value.kind == "employee-not-found"


def test_update_to_taken_username_is_reported_as_conflict(employee_service):
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com"))
    employee_service.create_employee(build_employee(87654321, "Luis", "Perez", "luis.perez@kruger.ec"))

    with pytest.raises(ResourceAlreadyExistsError) as exc_info:
        employee_service.update_employee(
            12345678, "EMPLOYEE", "UPDATE", EmployeeUpdate(username="luis.perez@kruger.ec", last_name="Ruiz")
        )

    assert exc_info.value.status_code == 409
    # Nothing from the failed update is kept
    unchanged = employee_service.my_information(12345678)
    assert unchanged.username == "ana@x.com"
    assert unchanged.last_name == "Diaz"
