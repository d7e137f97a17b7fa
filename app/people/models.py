from sqlalchemy import Column, String, DateTime, Integer, BigInteger, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.core.constants import Status
from app.core.database import Base


class Person(Base):
    __tablename__ = "people"

    id = Column(Integer, primary_key=True, autoincrement=True)
    dni = Column(BigInteger, unique=True, nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    status = Column(Enum(Status), nullable=False, default=Status.ACTIVE)
    created_date = Column(DateTime(timezone=True), server_default=func.now())
    updated_date = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    employee = relationship("Employee", back_populates="person", uselist=False)
