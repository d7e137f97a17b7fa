from sqlalchemy import Column, String, Boolean, Date, DateTime, ForeignKey, Integer, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.core.constants import Status
from app.core.database import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    birth_date = Column(Date)
    home_address = Column(String(255))
    mobile_phone = Column(String(20))
    vaccination_status = Column(Boolean, nullable=False, default=False)
    status = Column(Enum(Status), nullable=False, default=Status.ACTIVE)
    person_id = Column(Integer, ForeignKey("people.id"), nullable=False)
    created_date = Column(DateTime(timezone=True), server_default=func.now())
    updated_date = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    person = relationship("Person", back_populates="employee")
    user = relationship("User", back_populates="employee", uselist=False)
    employee_vaccinations = relationship("EmployeeVaccination", back_populates="employee")


class EmployeeVaccination(Base):
    __tablename__ = "employee_vaccinations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    vaccine_id = Column(Integer, ForeignKey("vaccines.id"), nullable=False)
    dose_number = Column(Integer, nullable=False, default=1)
    vaccination_date = Column(Date, nullable=False)
    status = Column(Enum(Status), nullable=False, default=Status.ACTIVE)
    created_date = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    employee = relationship("Employee", back_populates="employee_vaccinations")
    vaccine = relationship("Vaccine", back_populates="employee_vaccinations")
