"""
Employee database model.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base
from fuelwale.app.models.enums import RecordStatus


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    emp_code = Column(String(20), unique=True, index=True, nullable=False)
    name = Column(String(200), nullable=False)
    depot_id = Column(Integer, ForeignKey('depots.id'), nullable=True, index=True)
    designation = Column(String(100), nullable=True)
    mobile = Column(String(20), nullable=True)
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Employee(id={self.id}, emp_code='{self.emp_code}')>"
