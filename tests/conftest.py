"""
Shared fixtures: an in-memory SQLite database seeded with roles and vaccines,
helpers to build employees, and an API client bound to the same session.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DEBUG"] = "false"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DNI_STRICT_CHECKSUM"] = "false"

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.auth.models import Role
from app.core.constants import Status
from app.core.database import Base, get_db
from app.core.seed import seed_roles, seed_vaccines
from app.employees.schemas import EmployeeCreate, EmployeeVaccinationCreate
from app.employees.service import EmployeeService
from app.vaccines.models import Vaccine


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    """Session with ADMINISTRATOR, EMPLOYEE and NURSE roles and the vaccine catalog."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    seed_roles(session)
    seed_vaccines(session)
    session.add(Role(name="NURSE", status=Status.ACTIVE))
    session.commit()

    yield session
    session.close()


@pytest.fixture
def employee_service(db):
    return EmployeeService(db)


def build_employee(
    dni,
    first_name,
    last_name,
    email,
    role="EMPLOYEE",
    vaccination_status=False,
    **extra
):
    return EmployeeCreate(
        dni=dni,
        first_name=first_name,
        last_name=last_name,
        email=email,
        role=role,
        vaccination_status=vaccination_status,
        birth_date=extra.get("birth_date", date(1990, 1, 15)),
        home_address=extra.get("home_address", "Av. Amazonas 123"),
        mobile_phone=extra.get("mobile_phone", "0991234567"),
    )


def vaccinate(db, dni, vaccine_type, vaccination_date, dose_number=1):
    vaccine = db.query(Vaccine).filter(Vaccine.vaccine_type == vaccine_type).one()
    return EmployeeService(db).add_vaccination(dni, EmployeeVaccinationCreate(
        vaccine_id=vaccine.id,
        dose_number=dose_number,
        vaccination_date=vaccination_date
    ))


@pytest.fixture
def staff(db, employee_service):
    """Three employees: two vaccinated, one not."""
    employee_service.create_employee(build_employee(12345678, "Ana", "Diaz", "ana@x.com", role="NURSE"))
    employee_service.create_employee(build_employee(87654321, "Luis", "Perez", "luis.perez@kruger.ec"))
    employee_service.create_employee(build_employee(11223344, "Maria", "Lopez", "maria@kruger.ec"))

    vaccinate(db, 12345678, "Pfizer", date(2021, 5, 10))
    vaccinate(db, 87654321, "AstraZeneca", date(2021, 8, 1))
    vaccinate(db, 87654321, "Sputnik", date(2021, 9, 15), dose_number=2)
    return {"ana": 12345678, "luis": 87654321, "maria": 11223344}


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def login(client, username, password):
    response = client.post("/api/v1/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client, employee_service):
    employee_service.create_employee(
        build_employee(17100340, "Root", "Admin", "admin@company.com", role="ADMINISTRATOR")
    )
    return login(client, "admin@company.com", "17100340")
