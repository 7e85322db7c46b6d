"""
Payment receipt endpoints.

DRAFT payments are editable. Submitting makes a payment read-only until
an admin resets it back to DRAFT.
"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fuelwale.app.db.session import get_db
from fuelwale.app.models.customer import Customer
from fuelwale.app.models.enums import PaymentStatus
from fuelwale.app.models.order import Order
from fuelwale.app.models.payment import Payment
from fuelwale.app.models.trip import Trip
from fuelwale.app.schemas.payment import PaymentCreate, PaymentUpdate, PaymentResponse
from fuelwale.app.core.exceptions import BusinessRuleError, ConflictError
from fuelwale.app.core.guards import require_role, require_admin, PAYMENT_ROLES
from fuelwale.app.services.audit import log_user_action, AuditAction
from fuelwale.app.services.lookups import get_or_404, apply_updates

router = APIRouter(prefix="/payments", tags=["Payments"])


async def _check_trip(db: AsyncSession, trip_id: Optional[int], customer_id: int):
    if not trip_id:
        return
    trip = await get_or_404(db, Trip, trip_id)
    order = await db.get(Order, trip.order_id)
    if order is None or order.customer_id != customer_id:
        raise BusinessRuleError("Trip does not belong to this customer")


def _ensure_draft(payment: Payment):
    if payment.status != PaymentStatus.DRAFT:
        raise ConflictError("Submitted payments are read-only")


@router.get("", response_model=List[PaymentResponse])
async def list_payments(
    customer_id: Optional[int] = Query(None, alias="customerId"),
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    current_user: dict = Depends(require_role(PAYMENT_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    query = select(Payment).order_by(Payment.payment_date.desc(), Payment.id.desc())
    if customer_id:
        query = query.where(Payment.customer_id == customer_id)
    if status_filter:
        query = query.where(Payment.status == status_filter)
    if date_from:
        query = query.where(Payment.payment_date >= date_from)
    if date_to:
        query = query.where(Payment.payment_date <= date_to)
    result = await db.execute(query)
    return [PaymentResponse.model_validate(p) for p in result.scalars().all()]


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    data: PaymentCreate,
    current_user: dict = Depends(require_role(PAYMENT_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    await get_or_404(db, Customer, data.customer_id)
    await _check_trip(db, data.trip_id, data.customer_id)

    payment = Payment(**data.model_dump(), status=PaymentStatus.DRAFT, created_by=current_user.get("user_id"))
    db.add(payment)
    await db.commit()
    await db.refresh(payment)
    return PaymentResponse.model_validate(payment)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: int,
    current_user: dict = Depends(require_role(PAYMENT_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    return PaymentResponse.model_validate(await get_or_404(db, Payment, payment_id))


@router.put("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: int,
    data: PaymentUpdate,
    current_user: dict = Depends(require_role(PAYMENT_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    payment = await get_or_404(db, Payment, payment_id)
    _ensure_draft(payment)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("trip_id"):
        await _check_trip(db, changes["trip_id"], payment.customer_id)
    apply_updates(payment, changes)
    await db.commit()
    await db.refresh(payment)
    return PaymentResponse.model_validate(payment)


@router.post("/{payment_id}/submit", response_model=PaymentResponse)
async def submit_payment(
    payment_id: int,
    current_user: dict = Depends(require_role(PAYMENT_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    payment = await get_or_404(db, Payment, payment_id)
    _ensure_draft(payment)
    payment.status = PaymentStatus.SUBMITTED
    await db.commit()
    await db.refresh(payment)

    await log_user_action(db, current_user, AuditAction.PAYMENT_SUBMITTED, "payment", payment.id,
                          {"amount": str(payment.amount)})
    return PaymentResponse.model_validate(payment)


@router.post("/{payment_id}/reset", response_model=PaymentResponse)
async def reset_payment(
    payment_id: int,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Return a submitted payment to DRAFT (admin only)."""
    payment = await get_or_404(db, Payment, payment_id)
    if payment.status != PaymentStatus.SUBMITTED:
        raise BusinessRuleError("Only submitted payments can be reset")
    payment.status = PaymentStatus.DRAFT
    await db.commit()
    await db.refresh(payment)

    await log_user_action(db, current_user, AuditAction.PAYMENT_RESET, "payment", payment.id)
    return PaymentResponse.model_validate(payment)


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment(
    payment_id: int,
    current_user: dict = Depends(require_role(PAYMENT_ROLES)),
    db: AsyncSession = Depends(get_db)
):
    payment = await get_or_404(db, Payment, payment_id)
    _ensure_draft(payment)
    await db.delete(payment)
    await db.commit()
