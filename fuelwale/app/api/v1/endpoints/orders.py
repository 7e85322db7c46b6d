"""
Order intake endpoints.

Orders are created PENDING; deliveries advance them to
PARTIALLY_COMPLETED or COMPLETED.
"""

from decimal import Decimal
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from fuelwale.app.db.session import get_db
from fuelwale.app.models.customer import Customer
from fuelwale.app.models.enums import RecordStatus
from fuelwale.app.models.order import Order, OrderItem
from fuelwale.app.models.order_enums import OrderStatus
from fuelwale.app.models.trip import Trip
from fuelwale.app.schemas.order import (
    OrderCreate, OrderUpdate, OrderResponse, OrderItemResponse, OrderCustomerOption
)
from fuelwale.app.core.dependencies import get_current_user
from fuelwale.app.core.exceptions import BusinessRuleError, ConflictError
from fuelwale.app.core.guards import require_role, MASTER_EDITORS, ORDER_DESK
from fuelwale.app.services.audit import log_user_action, AuditAction
from fuelwale.app.services.lookups import get_or_404, apply_updates

router = APIRouter(prefix="/orders", tags=["Orders"])


async def _order_response(db: AsyncSession, order: Order, customer_name: Optional[str] = None) -> OrderResponse:
    result = await db.execute(select(OrderItem).where(OrderItem.order_id == order.id).order_by(OrderItem.id))
    items = [OrderItemResponse.model_validate(i) for i in result.scalars().all()]

    if customer_name is None:
        customer = await db.get(Customer, order.customer_id)
        customer_name = customer.name if customer else None

    response = OrderResponse.model_validate(order)
    response.customer_name = customer_name
    response.items = items
    response.total_qty = sum((Decimal(i.qty) for i in items), Decimal("0"))
    return response


@router.get("/customers", response_model=List[OrderCustomerOption])
async def order_customers(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Active customers an order can be placed for."""
    result = await db.execute(
        select(Customer).where(Customer.status == RecordStatus.ACTIVE).order_by(Customer.name)
    )
    return [OrderCustomerOption.model_validate(c) for c in result.scalars().all()]


@router.get("", response_model=List[OrderResponse])
async def list_orders(
    search: Optional[str] = Query(None),
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    query = (
        select(Order, Customer.name)
        .join(Customer, Customer.id == Order.customer_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Customer.name.ilike(pattern), Order.ship_to.ilike(pattern)))
    if status_filter:
        query = query.where(Order.status == status_filter)

    result = await db.execute(query)
    return [await _order_response(db, order, name) for order, name in result.all()]


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    data: OrderCreate,
    current_user: dict = Depends(require_role(ORDER_DESK)),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a PENDING order.

    The customer must exist and be Active; the ship-to address defaults
    to the customer's first one.
    """
    customer = await get_or_404(db, Customer, data.customer_id)
    if customer.status != RecordStatus.ACTIVE:
        raise BusinessRuleError(f"Customer {customer.name} is not active")

    ship_to = data.ship_to.strip() if data.ship_to else None
    if not ship_to and customer.ship_to:
        ship_to = customer.ship_to[0]

    order = Order(
        customer_id=customer.id,
        ship_to=ship_to,
        delivery_date=data.delivery_date,
        time_slot=data.time_slot,
        order_type=data.order_type,
        remarks=data.remarks,
        status=OrderStatus.PENDING,
        created_by=current_user.get("user_id"),
    )
    db.add(order)
    await db.flush()

    for item in data.items:
        db.add(OrderItem(
            order_id=order.id,
            product=item.product.strip(),
            qty=item.qty,
            rate=item.rate,
            uom=item.uom or "L",
        ))

    await db.commit()
    await db.refresh(order)

    await log_user_action(db, current_user, AuditAction.ORDER_CREATED, "order", order.id,
                          {"customer_id": customer.id, "items": len(data.items)})
    return await _order_response(db, order, customer.name)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await _order_response(db, await get_or_404(db, Order, order_id))


@router.put("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: int,
    data: OrderUpdate,
    current_user: dict = Depends(require_role(ORDER_DESK)),
    db: AsyncSession = Depends(get_db)
):
    order = await get_or_404(db, Order, order_id)
    changes = data.model_dump(exclude_unset=True)
    old_status = order.status

    if changes.get("status") == OrderStatus.CANCELLED and old_status == OrderStatus.COMPLETED:
        raise BusinessRuleError("A completed order cannot be cancelled")

    apply_updates(order, changes)
    await db.commit()
    await db.refresh(order)

    await log_user_action(db, current_user, AuditAction.ORDER_UPDATED, "order", order.id,
                          {"old_status": old_status.value, "new_status": order.status.value})
    return await _order_response(db, order)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(
    order_id: int,
    current_user: dict = Depends(require_role(MASTER_EDITORS)),
    db: AsyncSession = Depends(get_db)
):
    """Delete an order that no trip references."""
    order = await get_or_404(db, Order, order_id)
    result = await db.execute(select(Trip.id).where(Trip.order_id == order.id).limit(1))
    if result.scalar_one_or_none() is not None:
        raise ConflictError(f"Order {order.id} is referenced by a trip and cannot be deleted")

    await db.delete(order)
    await db.commit()
    await log_user_action(db, current_user, AuditAction.ORDER_DELETED, "order", order_id)
