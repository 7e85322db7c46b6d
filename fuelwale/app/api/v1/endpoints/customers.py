"""
Customer master endpoints.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from fuelwale.app.db.session import get_db
from fuelwale.app.models.customer import Customer
from fuelwale.app.models.depot import Depot
from fuelwale.app.models.enums import RecordStatus
from fuelwale.app.schemas.customer import CustomerCreate, CustomerUpdate, CustomerResponse
from fuelwale.app.core.dependencies import get_current_user
from fuelwale.app.core.exceptions import ConflictError
from fuelwale.app.core.guards import require_role, MASTER_EDITORS
from fuelwale.app.services.lookups import get_or_404, apply_updates

router = APIRouter(prefix="/customers", tags=["Customers"])


def _clean_ship_to(addresses):
    return [a.strip() for a in addresses if a and a.strip()]


@router.get("", response_model=List[CustomerResponse])
async def list_customers(
    search: Optional[str] = Query(None),
    status_filter: Optional[RecordStatus] = Query(None, alias="status"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    query = select(Customer).order_by(Customer.name)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Customer.name.ilike(pattern), Customer.cust_cd.ilike(pattern), Customer.mobile.ilike(pattern)))
    if status_filter:
        query = query.where(Customer.status == status_filter)
    result = await db.execute(query)
    return [CustomerResponse.model_validate(c) for c in result.scalars().all()]


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def create_customer(
    data: CustomerCreate,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    await get_or_404(db, Depot, data.depot_id)
    if data.cust_cd:
        result = await db.execute(select(Customer.id).where(Customer.cust_cd == data.cust_cd))
        if result.scalar_one_or_none() is not None:
            raise ConflictError(f"Customer code {data.cust_cd} already exists")

    customer = Customer(**data.model_dump(exclude={"ship_to"}), ship_to=_clean_ship_to(data.ship_to))
    db.add(customer)
    await db.commit()
    await db.refresh(customer)
    return CustomerResponse.model_validate(customer)


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return CustomerResponse.model_validate(await get_or_404(db, Customer, customer_id))


@router.put("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: int,
    data: CustomerUpdate,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    customer = await get_or_404(db, Customer, customer_id)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("depot_id"):
        await get_or_404(db, Depot, changes["depot_id"])
    if changes.get("ship_to") is not None:
        changes["ship_to"] = _clean_ship_to(changes["ship_to"])
    apply_updates(customer, changes)
    await db.commit()
    await db.refresh(customer)
    return CustomerResponse.model_validate(customer)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: int,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    customer = await get_or_404(db, Customer, customer_id)
    await db.delete(customer)
    await db.commit()
