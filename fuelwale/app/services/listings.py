"""
Read-side queries for the trip, delivery, invoice and fleet listings.

Rows are joined server-side so the console gets names (driver, route,
vehicle, customer) together with the ids.
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, or_, case
from sqlalchemy.ext.asyncio import AsyncSession

from fuelwale.app.domain.invoicing.invoice_builder import build_lines, invoice_no_for
from fuelwale.app.models.bowser_inventory import BowserInventory
from fuelwale.app.models.customer import Customer
from fuelwale.app.models.delivery import Delivery
from fuelwale.app.models.depot import Depot
from fuelwale.app.models.driver import Driver
from fuelwale.app.models.fleet_allocation import FleetAllocation
from fuelwale.app.models.order import Order
from fuelwale.app.models.pending_delivery import PendingDelivery
from fuelwale.app.models.route import Route
from fuelwale.app.models.trip import Trip
from fuelwale.app.models.trip_enums import TripStatus, PendingDeliveryStatus
from fuelwale.app.models.vehicle import Vehicle
from fuelwale.app.schemas.delivery import DeliveryResponse
from fuelwale.app.schemas.fleet import FleetRow
from fuelwale.app.schemas.invoice import InvoiceListItem
from fuelwale.app.schemas.trip import PendingDeliveryResponse, TripListItem, TripDetail, VehicleSnapshot

# ACTIVE first, then ASSIGNED, then COMPLETED
STATUS_ORDER = case(
    (Trip.status == TripStatus.ACTIVE, 0),
    (Trip.status == TripStatus.ASSIGNED, 1),
    else_=2,
)


async def pending_for_trip(
    db: AsyncSession,
    trip_id: int,
    status: Optional[PendingDeliveryStatus] = PendingDeliveryStatus.PENDING
) -> List[PendingDeliveryResponse]:
    """Pending-delivery entries of a trip (only PENDING ones by default)."""
    query = (
        select(PendingDelivery, Customer.name)
        .join(Customer, Customer.id == PendingDelivery.customer_id)
        .where(PendingDelivery.trip_id == trip_id)
        .order_by(PendingDelivery.id)
    )
    if status is not None:
        query = query.where(PendingDelivery.status == status)

    result = await db.execute(query)
    rows = []
    for pending, customer_name in result.all():
        item = PendingDeliveryResponse.model_validate(pending)
        item.customer_name = customer_name
        rows.append(item)
    return rows


async def completed_for_trip(db: AsyncSession, trip_id: int) -> List[DeliveryResponse]:
    result = await db.execute(
        select(Delivery, Customer.name)
        .join(Customer, Customer.id == Delivery.customer_id)
        .where(Delivery.trip_id == trip_id)
        .order_by(Delivery.id)
    )
    rows = []
    for delivery, customer_name in result.all():
        item = DeliveryResponse.model_validate(delivery)
        item.customer_name = customer_name
        rows.append(item)
    return rows


async def deliveries_of(db: AsyncSession, trip_id: int) -> List[Delivery]:
    result = await db.execute(select(Delivery).where(Delivery.trip_id == trip_id).order_by(Delivery.id))
    return list(result.scalars().all())


async def bowser_for_trip(db: AsyncSession, trip_id: int) -> Optional[BowserInventory]:
    result = await db.execute(select(BowserInventory).where(BowserInventory.trip_id == trip_id))
    return result.scalar_one_or_none()


def _trip_rows_query():
    return (
        select(Trip, Customer.name, Route.name, Driver.name)
        .join(Order, Order.id == Trip.order_id)
        .outerjoin(Customer, Customer.id == Order.customer_id)
        .outerjoin(Route, Route.id == Trip.route_id)
        .outerjoin(Driver, Driver.id == Trip.driver_id)
    )


def _list_item(trip, customer_name, route_name, driver_name, cls=TripListItem):
    return cls(
        id=trip.id,
        trip_no=trip.trip_no,
        status=trip.status,
        order_id=trip.order_id,
        customer_name=customer_name,
        route_id=trip.route_id,
        route_name=route_name,
        vehicle_no=trip.vehicle_no,
        driver_id=trip.driver_id,
        driver_name=driver_name,
        capacity=trip.capacity,
        created_at=trip.created_at,
        completed_at=trip.completed_at,
    )


async def list_trips(
    db: AsyncSession,
    search: Optional[str] = None,
    status: Optional[TripStatus] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    driver_id: Optional[int] = None,
) -> List[TripListItem]:
    """
    Trip listing, ACTIVE first, then ASSIGNED, then COMPLETED,
    newest first within each status.
    """
    query = _trip_rows_query()

    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(
            Trip.trip_no.ilike(pattern),
            Trip.vehicle_no.ilike(pattern),
            Customer.name.ilike(pattern),
            Driver.name.ilike(pattern),
            Route.name.ilike(pattern),
        ))
    if status:
        query = query.where(Trip.status == status)
    if date_from:
        query = query.where(Trip.created_at >= datetime.combine(date_from, time.min))
    if date_to:
        query = query.where(Trip.created_at < datetime.combine(date_to + timedelta(days=1), time.min))
    if driver_id:
        query = query.where(Trip.driver_id == driver_id)

    query = query.order_by(STATUS_ORDER, Trip.created_at.desc(), Trip.id.desc())

    result = await db.execute(query)
    return [_list_item(*row) for row in result.all()]


async def trip_detail(db: AsyncSession, trip_id: int) -> Optional[TripDetail]:
    result = await db.execute(_trip_rows_query().where(Trip.id == trip_id))
    row = result.first()
    if row is None:
        return None

    trip = row[0]
    detail = _list_item(*row, cls=TripDetail)

    vehicle = await db.get(Vehicle, trip.vehicle_id)
    if vehicle:
        detail.vehicle = VehicleSnapshot(id=vehicle.id, vehicle_no=vehicle.vehicle_no, display_no=vehicle.display_no)

    detail.start_km = trip.start_km
    detail.end_km = trip.end_km
    detail.totalizer_start = trip.totalizer_start
    detail.totalizer_end = trip.totalizer_end
    detail.remarks = trip.remarks
    detail.started_at = trip.started_at

    bowser = await bowser_for_trip(db, trip.id)
    if bowser:
        detail.balance_liters = bowser.balance_liters

    return detail


async def list_invoices(db: AsyncSession, search: Optional[str] = None) -> List[InvoiceListItem]:
    """Completed trips with invoice number and exact delivery totals."""
    query = (
        select(Trip, Customer.name)
        .join(Order, Order.id == Trip.order_id)
        .outerjoin(Customer, Customer.id == Order.customer_id)
        .where(Trip.status == TripStatus.COMPLETED)
        .order_by(Trip.completed_at.desc(), Trip.id.desc())
    )
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(Trip.trip_no.ilike(pattern), Customer.name.ilike(pattern)))

    result = await db.execute(query)
    items = []
    for trip, customer_name in result.all():
        lines = build_lines(await deliveries_of(db, trip.id))
        items.append(InvoiceListItem(
            trip_id=trip.id,
            trip_no=trip.trip_no,
            invoice_no=invoice_no_for(trip.trip_no),
            customer_name=customer_name,
            vehicle_no=trip.vehicle_no,
            total_qty=sum((line.qty for line in lines), Decimal("0")),
            total_amount=sum((line.amount for line in lines), Decimal("0")),
            completed_at=trip.completed_at,
        ))
    return items


async def fleet_rows(db: AsyncSession, search: Optional[str] = None) -> List[FleetRow]:
    """Every vehicle with its depot code and current driver / order allotment."""
    query = (
        select(Vehicle, Depot.depot_cd, FleetAllocation, Driver.name, Order, Customer)
        .outerjoin(Depot, Depot.id == Vehicle.depot_id)
        .outerjoin(FleetAllocation, FleetAllocation.vehicle_id == Vehicle.id)
        .outerjoin(Driver, Driver.id == FleetAllocation.driver_id)
        .outerjoin(Order, Order.id == FleetAllocation.order_id)
        .outerjoin(Customer, Customer.id == Order.customer_id)
        .order_by(Vehicle.vehicle_no)
    )
    if search:
        pattern = f"%{search.strip()}%"
        query = query.where(or_(
            Vehicle.vehicle_no.ilike(pattern),
            Vehicle.display_no.ilike(pattern),
            Driver.name.ilike(pattern),
        ))

    result = await db.execute(query)
    rows = []
    for vehicle, depot_cd, allocation, driver_name, order, customer in result.all():
        rows.append(FleetRow(
            vehicle_id=vehicle.id,
            vehicle_no=vehicle.vehicle_no,
            make=vehicle.make,
            model=vehicle.model,
            capacity_liters=vehicle.capacity_liters,
            gross_wt_kgs=vehicle.gross_wt_kgs,
            month_year=vehicle.month_year,
            totaliser_make=vehicle.totaliser_make,
            totaliser_model=vehicle.totaliser_model,
            has_gps=vehicle.has_gps,
            has_volume_sensor=vehicle.has_volume_sensor,
            peso_no=vehicle.peso_no,
            insurance_expiry=vehicle.insurance_expiry,
            fitness_expiry=vehicle.fitness_expiry,
            permit_expiry=vehicle.permit_expiry,
            depot_cd=depot_cd,
            driver_id=allocation.driver_id if allocation else None,
            driver_name=driver_name,
            order_id=order.id if order else None,
            order_delivery_date=order.delivery_date if order else None,
            order_time_slot=order.time_slot if order else None,
            order_customer=" • ".join(filter(None, [customer.cust_cd, customer.name])) if customer else None,
        ))
    return rows
