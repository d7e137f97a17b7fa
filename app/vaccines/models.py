from sqlalchemy import Column, String, DateTime, Integer, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.core.constants import Status
from app.core.database import Base


class Vaccine(Base):
    __tablename__ = "vaccines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vaccine_type = Column(String(100), unique=True, nullable=False)
    status = Column(Enum(Status), nullable=False, default=Status.ACTIVE)
    created_date = Column(DateTime(timezone=True), server_default=func.now())
    updated_date = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    employee_vaccinations = relationship("EmployeeVaccination", back_populates="vaccine")
