"""
Trip Lifecycle Service (Domain Logic).

Owns the ASSIGNED -> ACTIVE -> COMPLETED state machine. Every transition
is a conditional UPDATE on the expected current status, so a racing
second request finds zero rows and is rejected instead of applied twice.
"""

import logging
import secrets
from collections import OrderedDict
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, update, delete, func as sql_func
from sqlalchemy.ext.asyncio import AsyncSession

import fuelwale.app.core.redis_client as redis_module
from fuelwale.app.core.config import settings
from fuelwale.app.core.exceptions import (
    BusinessRuleError,
    ConflictError,
    InsufficientPermissionsError,
    InsufficientStockError,
    InvalidTripTransitionError,
    VehicleResolutionError,
)
from fuelwale.app.core.guards import is_trip_supervisor
from fuelwale.app.domain.quantities import format_liters
from fuelwale.app.domain.trips.trip_numbers import compose_trip_no, depot_code, state_code
from fuelwale.app.domain.vehicle_identity import canonical_vehicle_no
from fuelwale.app.models.bowser_inventory import BowserInventory
from fuelwale.app.models.customer import Customer
from fuelwale.app.models.delivery import Delivery
from fuelwale.app.models.depot import Depot
from fuelwale.app.models.driver import Driver
from fuelwale.app.models.enums import RecordStatus
from fuelwale.app.models.fleet_allocation import FleetAllocation
from fuelwale.app.models.loading import Loading
from fuelwale.app.models.loading_station import LoadingStation
from fuelwale.app.models.order import Order, OrderItem
from fuelwale.app.models.order_enums import OrderStatus, ASSIGNABLE_ORDER_STATUSES
from fuelwale.app.models.pending_delivery import PendingDelivery
from fuelwale.app.models.route import Route
from fuelwale.app.models.trip import Trip
from fuelwale.app.models.trip_enums import TripStatus, PendingDeliveryStatus
from fuelwale.app.models.vehicle import Vehicle
from fuelwale.app.schemas.delivery import DeliveryCreate
from fuelwale.app.schemas.loading import LoadingCreate
from fuelwale.app.schemas.trip import TripAssign, TripEnd, TripStart, TripNumberPreview
from fuelwale.app.services.lookups import get_or_404
from fuelwale.app.services.notification_service import notify_delivery, notify_loading_code
from fuelwale.app.services.trip_sequence import allocate_trip_serial, peek_trip_serial
from fuelwale.app.services.vehicle_locking import (
    lock_vehicle, count_driver_active_trips, release_vehicle_lock
)

logger = logging.getLogger("fuelwale.trips")

LOADING_CODE_PREFIX = "loading:code:"
LOADABLE_STATUSES = (TripStatus.ASSIGNED, TripStatus.ACTIVE)


async def _order_parts(db: AsyncSession, order_id: int):
    """Order, its customer, the customer's depot and the line items."""
    order = await get_or_404(db, Order, order_id)
    customer = await db.get(Customer, order.customer_id) if order.customer_id else None
    if customer is None:
        raise BusinessRuleError(f"Order {order.id} has no customer")
    depot = await db.get(Depot, customer.depot_id)

    result = await db.execute(select(OrderItem).where(OrderItem.order_id == order.id).order_by(OrderItem.id))
    items = list(result.scalars().all())
    return order, customer, depot, items


def seed_requirements(order: Order, items: List[OrderItem]) -> List[dict]:
    """
    One pending requirement per ship-to / product of the order.

    Lines of the same product are summed, so the required quantities add
    up to the order total whatever load-to-send was chosen.
    """
    totals = OrderedDict()
    for item in items:
        key = (order.ship_to, item.product)
        totals[key] = totals.get(key, Decimal("0")) + Decimal(item.qty)
    return [
        {"ship_to": ship_to, "product": product, "required_qty": qty}
        for (ship_to, product), qty in totals.items()
    ]


class TripLifecycleService:

    @staticmethod
    async def driver_for_user(db: AsyncSession, user_id: int) -> Optional[Driver]:
        result = await db.execute(select(Driver).where(Driver.user_id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def ensure_trip_access(db: AsyncSession, trip: Trip, current_user: dict) -> None:
        """Supervisors may act on any trip; drivers only on their own."""
        if is_trip_supervisor(current_user):
            return
        driver = await TripLifecycleService.driver_for_user(db, current_user["user_id"])
        if driver is None or driver.id != trip.driver_id:
            raise InsufficientPermissionsError("This trip is not assigned to you")

    @staticmethod
    async def preview_trip_no(db: AsyncSession, order_id: int) -> TripNumberPreview:
        """Candidate number for the order. The server allocates the real one on assignment."""
        order, customer, depot, _ = await _order_parts(db, order_id)
        serial = await peek_trip_serial(db)
        depot_cd = depot.depot_cd if depot else ""
        return TripNumberPreview(
            trip_no=compose_trip_no(customer.bill_state_cd, depot_cd, serial, settings.trip_serial_width),
            state_cd=state_code(customer.bill_state_cd),
            depot_cd=depot_code(depot_cd),
            serial=serial,
        )

    @staticmethod
    async def assign(db: AsyncSession, data: TripAssign, current_user: dict) -> tuple[Trip, int]:
        """
        Bind an order to route, vehicle and driver and create an ASSIGNED trip.

        Flow:
        1. Validate order, route, vehicle (canonical number, on the route) and driver
        2. Allocate the global serial atomically and compose the trip number
        3. Create the trip and seed pending deliveries from the order
        4. Record the fleet allocation (vehicle -> driver, order)
        """
        order, customer, depot, items = await _order_parts(db, data.order_id)
        if order.status not in ASSIGNABLE_ORDER_STATUSES:
            raise BusinessRuleError(f"Order {order.id} is {order.status.value} and cannot be assigned")
        if not items:
            raise BusinessRuleError(f"Order {order.id} has no line items")

        route = await get_or_404(db, Route, data.route_id)
        result = await db.execute(select(Vehicle).where(Vehicle.route_id == route.id))
        route_vehicles = list(result.scalars().all())
        if not route_vehicles:
            raise BusinessRuleError(f"No vehicles are registered on route {route.name}")

        canonical = canonical_vehicle_no(data.vehicle_no)
        vehicle = next((v for v in route_vehicles if v.vehicle_no == canonical), None)
        if vehicle is None:
            result = await db.execute(select(Vehicle.id).where(Vehicle.vehicle_no == canonical))
            if result.scalar_one_or_none() is None:
                raise VehicleResolutionError(data.vehicle_no)
            raise BusinessRuleError(f"Vehicle {canonical} is not registered on route {route.name}")

        driver = await get_or_404(db, Driver, data.driver_id)
        if driver.status != RecordStatus.ACTIVE:
            raise BusinessRuleError(f"Driver {driver.name} is not active")

        serial = await allocate_trip_serial(db)
        trip_no = compose_trip_no(
            customer.bill_state_cd, depot.depot_cd if depot else "", serial, settings.trip_serial_width
        )
        if data.trip_no and data.trip_no != trip_no:
            logger.info("Client proposed trip number %s, allocated %s", data.trip_no, trip_no)

        trip = Trip(
            trip_no=trip_no,
            order_id=order.id,
            route_id=route.id,
            vehicle_id=vehicle.id,
            vehicle_no=vehicle.vehicle_no,
            driver_id=driver.id,
            capacity=data.capacity,
            status=TripStatus.ASSIGNED,
            created_by=current_user.get("user_id"),
        )
        db.add(trip)
        await db.flush()

        requirements = seed_requirements(order, items)
        for req in requirements:
            db.add(PendingDelivery(
                trip_id=trip.id,
                customer_id=customer.id,
                ship_to=req["ship_to"],
                product=req["product"],
                required_qty=req["required_qty"],
                status=PendingDeliveryStatus.PENDING,
            ))

        result = await db.execute(select(FleetAllocation).where(FleetAllocation.vehicle_id == vehicle.id))
        allocation = result.scalar_one_or_none()
        if allocation is None:
            db.add(FleetAllocation(vehicle_id=vehicle.id, driver_id=driver.id, order_id=order.id))
        else:
            allocation.driver_id = driver.id
            allocation.order_id = order.id

        await db.commit()
        await db.refresh(trip)

        logger.info("Trip %s assigned: order=%s vehicle=%s driver=%s", trip.trip_no, order.id, vehicle.vehicle_no, driver.id)
        return trip, len(requirements)

    @staticmethod
    async def start(db: AsyncSession, data: TripStart, current_user: dict) -> tuple[Trip, BowserInventory]:
        """
        ASSIGNED -> ACTIVE.

        Locks the vehicle, records start readings and opens the bowser
        balance from the latest loading of the trip, or from the
        load-to-send capacity when nothing was loaded yet.
        """
        trip = await get_or_404(db, Trip, data.trip_id)
        await TripLifecycleService.ensure_trip_access(db, trip, current_user)
        trip_id = trip.id

        if trip.status != TripStatus.ASSIGNED:
            raise InvalidTripTransitionError(trip.id, trip.status.value, "start", TripStatus.ASSIGNED.value)

        route_id = trip.route_id
        if data.route_id and data.route_id != trip.route_id:
            route_id = (await get_or_404(db, Route, data.route_id)).id

        if await count_driver_active_trips(db, trip.driver_id) > 0:
            raise ConflictError("Driver already has an ACTIVE trip. End it before starting another.")

        result = await db.execute(
            update(Trip)
            .where(Trip.id == trip.id, Trip.status == TripStatus.ASSIGNED)
            .values(
                status=TripStatus.ACTIVE,
                start_km=data.start_km,
                totalizer_start=data.totalizer_start,
                route_id=route_id,
                remarks=data.remarks,
                started_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            raise InvalidTripTransitionError(trip_id, "ACTIVE", "start", TripStatus.ASSIGNED.value)

        await lock_vehicle(db, trip, current_user.get("user_id"))

        result = await db.execute(
            select(Loading.qty)
            .where(Loading.trip_id == trip.id)
            .order_by(Loading.loaded_at.desc(), Loading.id.desc())
            .limit(1)
        )
        last_loaded = result.scalar_one_or_none()
        opening = Decimal(last_loaded if last_loaded is not None else trip.capacity)

        bowser = BowserInventory(trip_id=trip.id, opening_liters=opening, balance_liters=opening)
        db.add(bowser)

        await db.commit()
        await db.refresh(trip)
        await db.refresh(bowser)

        logger.info("Trip %s started, diesel opening %s L", trip.trip_no, format_liters(opening))
        return trip, bowser

    @staticmethod
    async def issue_loading_code(db: AsyncSession, trip_id: int, current_user: dict) -> Trip:
        trip = await get_or_404(db, Trip, trip_id)
        await TripLifecycleService.ensure_trip_access(db, trip, current_user)
        if trip.status not in LOADABLE_STATUSES:
            raise InvalidTripTransitionError(trip.id, trip.status.value, "record loading for", "ASSIGNED or ACTIVE")

        code = f"{secrets.randbelow(10 ** 6):06d}"
        await redis_module.redis_client.setex(f"{LOADING_CODE_PREFIX}{trip.id}", settings.loading_code_ttl_seconds, code)
        notify_loading_code(trip.trip_no, code)
        return trip

    @staticmethod
    async def check_loading_code(trip_id: int, code: Optional[str]) -> bool:
        if not code:
            return False
        stored = await redis_module.redis_client.get(f"{LOADING_CODE_PREFIX}{trip_id}")
        if isinstance(stored, bytes):
            stored = stored.decode()
        return stored is not None and secrets.compare_digest(str(stored), str(code).strip())

    @staticmethod
    async def record_loading(db: AsyncSession, data: LoadingCreate, current_user: dict) -> Loading:
        """
        Record a station fill.

        The vehicle is resolved from the trip snapshot by canonical number;
        an unresolvable number is a data-quality error, never a silent default.
        On an ACTIVE trip the loaded quantity tops up the bowser balance.
        """
        trip = await get_or_404(db, Trip, data.trip_id)
        await TripLifecycleService.ensure_trip_access(db, trip, current_user)
        if trip.status not in LOADABLE_STATUSES:
            raise InvalidTripTransitionError(trip.id, trip.status.value, "record loading for", "ASSIGNED or ACTIVE")

        station = await get_or_404(db, LoadingStation, data.station_id, "Loading station")

        if settings.loading_code_required:
            if not await TripLifecycleService.check_loading_code(trip.id, data.code):
                raise BusinessRuleError("Invalid or expired loading code")

        result = await db.execute(select(Vehicle).where(Vehicle.vehicle_no == canonical_vehicle_no(trip.vehicle_no)))
        vehicle = result.scalar_one_or_none()
        if vehicle is None:
            raise VehicleResolutionError(trip.vehicle_no)

        depot = await db.get(Depot, vehicle.depot_id)

        loading = Loading(
            trip_id=trip.id,
            station_id=station.id,
            product=data.product.strip(),
            qty=data.qty,
            vehicle_id=vehicle.id,
            depot_cd=depot_code(depot.depot_cd) if depot else None,
            recorded_by=current_user.get("user_id"),
        )
        db.add(loading)

        if trip.status == TripStatus.ACTIVE:
            await db.execute(
                update(BowserInventory)
                .where(BowserInventory.trip_id == trip.id)
                .values(balance_liters=BowserInventory.balance_liters + data.qty)
                .execution_options(synchronize_session=False)
            )

        await db.commit()
        await db.refresh(loading)

        if settings.loading_code_required:
            await redis_module.redis_client.delete(f"{LOADING_CODE_PREFIX}{trip.id}")

        logger.info("Loading of %s L %s recorded for trip %s", format_liters(data.qty), loading.product, trip.trip_no)
        return loading

    @staticmethod
    async def deliver(db: AsyncSession, data: DeliveryCreate, current_user: dict) -> Delivery:
        """
        Confirm a delivery against one pending requirement.

        The bowser balance is decremented with a single conditional UPDATE
        (`balance >= qty`), so it can never go negative. The entry is
        fulfilled for the delivered quantity; any shortfall stays pending as
        a new entry, so pending and completed together always cover the
        order. Delivering more than the entry requires is rejected.
        """
        trip = await get_or_404(db, Trip, data.trip_id)
        await TripLifecycleService.ensure_trip_access(db, trip, current_user)
        trip_id = trip.id
        if trip.status != TripStatus.ACTIVE:
            raise InvalidTripTransitionError(trip.id, trip.status.value, "record delivery for", TripStatus.ACTIVE.value)

        pending = await get_or_404(db, PendingDelivery, data.pending_delivery_id, "Pending delivery")
        if pending.trip_id != trip.id:
            raise BusinessRuleError("Pending delivery does not belong to this trip")
        if pending.status != PendingDeliveryStatus.PENDING:
            raise ConflictError("A delivery was already recorded for this entry")

        required = Decimal(pending.required_qty)
        if data.qty > required:
            raise BusinessRuleError(f"Qty exceeds the pending requirement of {format_liters(required)} L")

        result = await db.execute(
            update(BowserInventory)
            .where(BowserInventory.trip_id == trip.id, BowserInventory.balance_liters >= data.qty)
            .values(balance_liters=BowserInventory.balance_liters - data.qty)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            balance = await db.execute(
                select(BowserInventory.balance_liters).where(BowserInventory.trip_id == trip_id)
            )
            raise InsufficientStockError(format_liters(balance.scalar_one_or_none() or 0), format_liters(data.qty))

        result = await db.execute(
            update(PendingDelivery)
            .where(PendingDelivery.id == pending.id, PendingDelivery.status == PendingDeliveryStatus.PENDING)
            .values(status=PendingDeliveryStatus.FULFILLED, required_qty=data.qty)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            raise ConflictError("A delivery was already recorded for this entry")

        # a short delivery leaves the rest of the requirement pending
        if data.qty < required:
            db.add(PendingDelivery(
                trip_id=trip.id,
                customer_id=pending.customer_id,
                ship_to=pending.ship_to,
                product=pending.product,
                required_qty=required - data.qty,
                status=PendingDeliveryStatus.PENDING,
            ))

        result = await db.execute(select(sql_func.count(Delivery.id)).where(Delivery.trip_id == trip.id))
        sequence = result.scalar() + 1

        delivery = Delivery(
            trip_id=trip.id,
            pending_delivery_id=pending.id,
            customer_id=pending.customer_id,
            ship_to=pending.ship_to,
            product=pending.product,
            qty=data.qty,
            rate=data.rate,
            amount=data.qty * data.rate,
            dc_no=f"DC{trip.trip_no}-{sequence:02d}",
            recorded_by=current_user.get("user_id"),
        )
        db.add(delivery)
        await db.flush()

        await TripLifecycleService._advance_order_status(db, trip)

        await db.commit()
        await db.refresh(delivery)

        customer = await db.get(Customer, delivery.customer_id)
        notify_delivery(
            customer.name if customer else "Customer",
            customer.mobile if customer else None,
            trip.trip_no,
            delivery.dc_no,
            Decimal(delivery.qty),
            Decimal(delivery.rate),
            Decimal(delivery.qty) * Decimal(delivery.rate),
        )
        return delivery

    @staticmethod
    async def _advance_order_status(db: AsyncSession, trip: Trip) -> None:
        """COMPLETED once the liters delivered on the order reach the liters ordered, PARTIALLY_COMPLETED before that."""
        ordered = (await db.execute(
            select(sql_func.coalesce(sql_func.sum(OrderItem.qty), 0)).where(OrderItem.order_id == trip.order_id)
        )).scalar()
        delivered = (await db.execute(
            select(sql_func.coalesce(sql_func.sum(Delivery.qty), 0))
            .join(Trip, Trip.id == Delivery.trip_id)
            .where(Trip.order_id == trip.order_id)
        )).scalar()

        delivered, ordered = Decimal(str(delivered)), Decimal(str(ordered))
        if delivered <= 0:
            return
        new_status = OrderStatus.COMPLETED if delivered >= ordered else OrderStatus.PARTIALLY_COMPLETED

        await db.execute(
            update(Order)
            .where(Order.id == trip.order_id, Order.status != OrderStatus.CANCELLED)
            .values(status=new_status)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    async def end(db: AsyncSession, data: TripEnd, current_user: dict) -> tuple[Trip, int]:
        """
        ACTIVE -> COMPLETED.

        End readings may equal but never be below the start readings.
        Requirements still pending become UNDELIVERED when partial
        completion is allowed; otherwise the trip cannot end yet.
        """
        trip = await get_or_404(db, Trip, data.trip_id)
        await TripLifecycleService.ensure_trip_access(db, trip, current_user)
        trip_id = trip.id
        if trip.status != TripStatus.ACTIVE:
            raise InvalidTripTransitionError(trip.id, trip.status.value, "end", TripStatus.ACTIVE.value)

        if trip.start_km is not None and data.end_km < trip.start_km:
            raise BusinessRuleError("End KM cannot be less than Start KM")
        if trip.totalizer_start is not None and data.totalizer_end < trip.totalizer_start:
            raise BusinessRuleError("Totalizer End cannot be less than Start")

        result = await db.execute(
            select(PendingDelivery.id).where(
                PendingDelivery.trip_id == trip.id,
                PendingDelivery.status == PendingDeliveryStatus.PENDING
            )
        )
        remaining = list(result.scalars().all())
        if remaining and not settings.allow_partial_trip_completion:
            raise BusinessRuleError(
                f"{len(remaining)} deliveries are still pending. Complete them before ending the trip."
            )

        completed_at = datetime.utcnow()
        result = await db.execute(
            update(Trip)
            .where(Trip.id == trip.id, Trip.status == TripStatus.ACTIVE)
            .values(
                status=TripStatus.COMPLETED,
                end_km=data.end_km,
                totalizer_end=data.totalizer_end,
                completed_at=completed_at,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            raise InvalidTripTransitionError(trip_id, "COMPLETED", "end", TripStatus.ACTIVE.value)

        if remaining:
            await db.execute(
                update(PendingDelivery)
                .where(PendingDelivery.id.in_(remaining))
                .values(status=PendingDeliveryStatus.UNDELIVERED)
                .execution_options(synchronize_session=False)
            )
            result = await db.execute(
                select(sql_func.count(Delivery.id)).where(Delivery.trip_id == trip.id)
            )
            if result.scalar():
                await db.execute(
                    update(Order)
                    .where(Order.id == trip.order_id, Order.status != OrderStatus.CANCELLED)
                    .values(status=OrderStatus.PARTIALLY_COMPLETED)
                    .execution_options(synchronize_session=False)
                )

        await release_vehicle_lock(db, trip.vehicle_id, trip.id)

        await db.execute(
            update(Vehicle)
            .where(Vehicle.id == trip.vehicle_id)
            .values(last_km=data.end_km, last_totalizer=data.totalizer_end)
            .execution_options(synchronize_session=False)
        )
        await db.execute(
            update(FleetAllocation)
            .where(FleetAllocation.vehicle_id == trip.vehicle_id, FleetAllocation.order_id == trip.order_id)
            .values(order_id=None)
            .execution_options(synchronize_session=False)
        )

        await db.commit()
        await db.refresh(trip)

        logger.info("Trip %s completed, %s requirement(s) undelivered", trip.trip_no, len(remaining))
        return trip, len(remaining)

    @staticmethod
    async def delete_assigned(db: AsyncSession, trip_id: int) -> Trip:
        """Remove a trip that has not started yet, with its seeded requirements and loadings."""
        trip = await get_or_404(db, Trip, trip_id)
        if trip.status != TripStatus.ASSIGNED:
            raise InvalidTripTransitionError(trip.id, trip.status.value, "delete", TripStatus.ASSIGNED.value)

        await db.execute(delete(PendingDelivery).where(PendingDelivery.trip_id == trip.id))
        await db.execute(delete(Loading).where(Loading.trip_id == trip.id))
        await db.execute(
            update(FleetAllocation)
            .where(FleetAllocation.vehicle_id == trip.vehicle_id, FleetAllocation.order_id == trip.order_id)
            .values(order_id=None)
            .execution_options(synchronize_session=False)
        )
        await db.delete(trip)
        await db.commit()
        return trip
