"""
Reference data loaded at startup: roles, the vaccine catalog and an optional
bootstrap administrator.
"""

import logging
from sqlalchemy.orm import Session

from app.auth.models import Role
from app.core.config import settings
from app.core.constants import RoleName, Status
from app.employees.schemas import EmployeeCreate
from app.employees.service import EmployeeService
from app.vaccines.models import Vaccine

logger = logging.getLogger(__name__)


def seed_roles(db: Session) -> int:
    existing = {name for (name,) in db.query(Role.name).all()}
    created = 0
    for role_name in RoleName:
        if role_name.value not in existing:
            db.add(Role(name=role_name.value, status=Status.ACTIVE))
            created += 1
    db.commit()
    return created


def seed_vaccines(db: Session, vaccine_types=None) -> int:
    vaccine_types = settings.seed_vaccines if vaccine_types is None else vaccine_types
    existing = {vaccine_type for (vaccine_type,) in db.query(Vaccine.vaccine_type).all()}
    created = 0
    for vaccine_type in vaccine_types:
        if vaccine_type not in existing:
            db.add(Vaccine(vaccine_type=vaccine_type, status=Status.ACTIVE))
            created += 1
    db.commit()
    return created


def seed_admin(db: Session) -> bool:
    """Create the bootstrap administrator unless it already exists."""
    if not settings.admin_email or not settings.admin_dni:
        return False

    employee_service = EmployeeService(db)
    if employee_service.get_employee(email=settings.admin_email):
        return False

    employee_service.create_employee(EmployeeCreate(
        dni=settings.admin_dni,
        first_name=settings.admin_first_name,
        last_name=settings.admin_last_name,
        email=settings.admin_email,
        role=RoleName.ADMINISTRATOR.value
    ))
    return True


def seed_database(db: Session):
    roles = seed_roles(db)
    vaccines = seed_vaccines(db)
    admin = seed_admin(db)
    logger.info(f"Seed data loaded: {roles} roles, {vaccines} vaccines, admin created: {admin}")
