"""
Driver and employee master endpoints.

A driver may be linked to a login user; that link is how a driver's
token is matched to the trips assigned to them.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from fuelwale.app.db.session import get_db
from fuelwale.app.models.depot import Depot
from fuelwale.app.models.driver import Driver
from fuelwale.app.models.employee import Employee
from fuelwale.app.models.user import User
from fuelwale.app.schemas.driver import (
    DriverCreate, DriverUpdate, DriverResponse,
    EmployeeCreate, EmployeeUpdate, EmployeeResponse,
)
from fuelwale.app.core.dependencies import get_current_user
from fuelwale.app.core.exceptions import ConflictError
from fuelwale.app.core.guards import require_role, MASTER_EDITORS
from fuelwale.app.services.lookups import get_or_404, apply_updates

router = APIRouter(prefix="/drivers", tags=["Drivers"])
employees_router = APIRouter(prefix="/employees", tags=["Employees"])


async def _check_driver_refs(db: AsyncSession, changes: dict, exclude_id: Optional[int] = None):
    if changes.get("depot_id"):
        await get_or_404(db, Depot, changes["depot_id"])

    if changes.get("peso_license_no"):
        query = select(Driver.id).where(Driver.peso_license_no == changes["peso_license_no"])
        if exclude_id:
            query = query.where(Driver.id != exclude_id)
        if (await db.execute(query)).scalar_one_or_none() is not None:
            raise ConflictError(f"PESO licence {changes['peso_license_no']} is already registered")

    if changes.get("user_id"):
        await get_or_404(db, User, changes["user_id"])
        query = select(Driver.id).where(Driver.user_id == changes["user_id"])
        if exclude_id:
            query = query.where(Driver.id != exclude_id)
        if (await db.execute(query)).scalar_one_or_none() is not None:
            raise ConflictError("This user is already linked to another driver")


@router.get("", response_model=List[DriverResponse])
async def list_drivers(
    search: Optional[str] = Query(None),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    query = select(Driver).order_by(Driver.name)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Driver.name.ilike(pattern), Driver.peso_license_no.ilike(pattern), Driver.mobile.ilike(pattern)))
    result = await db.execute(query)
    return [DriverResponse.model_validate(d) for d in result.scalars().all()]


@router.post("", response_model=DriverResponse, status_code=status.HTTP_201_CREATED)
async def create_driver(
    data: DriverCreate,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    await _check_driver_refs(db, data.model_dump())
    driver = Driver(**data.model_dump())
    db.add(driver)
    await db.commit()
    await db.refresh(driver)
    return DriverResponse.model_validate(driver)


@router.get("/{driver_id}", response_model=DriverResponse)
async def get_driver(
    driver_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return DriverResponse.model_validate(await get_or_404(db, Driver, driver_id))


@router.put("/{driver_id}", response_model=DriverResponse)
async def update_driver(
    driver_id: int,
    data: DriverUpdate,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    driver = await get_or_404(db, Driver, driver_id)
    changes = data.model_dump(exclude_unset=True)
    await _check_driver_refs(db, changes, exclude_id=driver.id)
    apply_updates(driver, changes)
    await db.commit()
    await db.refresh(driver)
    return DriverResponse.model_validate(driver)


@router.delete("/{driver_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_driver(
    driver_id: int,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    driver = await get_or_404(db, Driver, driver_id)
    await db.delete(driver)
    await db.commit()


@employees_router.get("", response_model=List[EmployeeResponse])
async def list_employees(
    search: Optional[str] = Query(None),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    query = select(Employee).order_by(Employee.emp_code)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Employee.name.ilike(pattern), Employee.emp_code.ilike(pattern)))
    result = await db.execute(query)
    return [EmployeeResponse.model_validate(e) for e in result.scalars().all()]


@employees_router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    data: EmployeeCreate,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    if data.depot_id:
        await get_or_404(db, Depot, data.depot_id)
    result = await db.execute(select(Employee.id).where(Employee.emp_code == data.emp_code))
    if result.scalar_one_or_none() is not None:
        raise ConflictError(f"Employee code {data.emp_code} already exists")

    employee = Employee(**data.model_dump())
    db.add(employee)
    await db.commit()
    await db.refresh(employee)
    return EmployeeResponse.model_validate(employee)


@employees_router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return EmployeeResponse.model_validate(await get_or_404(db, Employee, employee_id))


@employees_router.put("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: int,
    data: EmployeeUpdate,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    employee = await get_or_404(db, Employee, employee_id)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("depot_id"):
        await get_or_404(db, Depot, changes["depot_id"])
    apply_updates(employee, changes)
    await db.commit()
    await db.refresh(employee)
    return EmployeeResponse.model_validate(employee)


@employees_router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(
    employee_id: int,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    employee = await get_or_404(db, Employee, employee_id)
    await db.delete(employee)
    await db.commit()
