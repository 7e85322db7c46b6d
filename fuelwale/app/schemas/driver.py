"""
Driver and employee schemas.
"""

from pydantic import Field
from typing import Optional
from fuelwale.app.models.enums import RecordStatus
from fuelwale.app.schemas.base import CamelModel


class DriverCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    peso_license_no: str = Field(..., min_length=1, max_length=50, description="PESO licence number")
    mobile: Optional[str] = Field(None, max_length=20)
    depot_id: Optional[int] = None
    user_id: Optional[int] = Field(None, description="Login account used by the driver")
    status: RecordStatus = RecordStatus.ACTIVE


class DriverUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    peso_license_no: Optional[str] = Field(None, min_length=1, max_length=50)
    mobile: Optional[str] = Field(None, max_length=20)
    depot_id: Optional[int] = None
    user_id: Optional[int] = None
    status: Optional[RecordStatus] = None


class DriverResponse(CamelModel):
    id: int
    name: str
    peso_license_no: str
    mobile: Optional[str]
    depot_id: Optional[int]
    user_id: Optional[int]
    status: RecordStatus


class EmployeeCreate(CamelModel):
    emp_code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=200)
    depot_id: Optional[int] = None
    designation: Optional[str] = Field(None, max_length=100)
    mobile: Optional[str] = Field(None, max_length=20)
    status: RecordStatus = RecordStatus.ACTIVE


class EmployeeUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    depot_id: Optional[int] = None
    designation: Optional[str] = Field(None, max_length=100)
    mobile: Optional[str] = Field(None, max_length=20)
    status: Optional[RecordStatus] = None


class EmployeeResponse(CamelModel):
    id: int
    emp_code: str
    name: str
    depot_id: Optional[int]
    designation: Optional[str]
    mobile: Optional[str]
    status: RecordStatus
