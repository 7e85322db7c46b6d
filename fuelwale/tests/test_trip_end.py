"""
Trip end ("trip logout"): reading checks, undelivered entries and releases.
"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from fuelwale.app.core.config import settings
from fuelwale.app.models.fleet_allocation import FleetAllocation
from fuelwale.app.models.order import Order
from fuelwale.app.models.pending_delivery import PendingDelivery
from fuelwale.app.models.trip import Trip
from fuelwale.app.models.vehicle import Vehicle
from fuelwale.app.models.vehicle_lock import VehicleLock


@pytest.mark.asyncio
async def test_end_km_below_start_is_rejected(world, trips):
    trip_id, _ = await trips.assigned_and_started()
    resp = await trips.end(trip_id, end_km="999")
    assert resp.status_code == 400
    assert resp.json()["message"] == "End KM cannot be less than Start KM"


@pytest.mark.asyncio
async def test_totalizer_below_start_is_rejected(world, trips):
    trip_id, _ = await trips.assigned_and_started()
    resp = await trips.end(trip_id, totalizer_end="499")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Totalizer End cannot be less than Start"


@pytest.mark.asyncio
async def test_end_readings_equal_to_start_are_accepted(world, trips):
    trip_id, _ = await trips.assigned_and_started()
    resp = await trips.end(trip_id, end_km="1000", totalizer_end="500")
    assert resp.status_code == 200
    assert resp.json()["status"] == "COMPLETED"


@pytest.mark.asyncio
async def test_end_after_full_delivery(db_session, world, trips):
    trip_id, started = await trips.assigned_and_started()
    await trips.deliver(trip_id, started["deliveries"][0]["id"], "5000")

    resp = await trips.end(trip_id)
    assert resp.status_code == 200
    data = resp.json()
    assert data["undeliveredCount"] == 0
    assert data["completedAt"] is not None

    trip = await db_session.get(Trip, trip_id)
    assert trip.status.value == "COMPLETED"
    assert trip.end_km == Decimal("1100")


@pytest.mark.asyncio
async def test_end_with_remaining_entries_marks_them_undelivered(db_session, new_order, world, trips):
    order = await new_order([("Diesel", 2000), ("Petrol", 500)])
    trip_id, started = await trips.assigned_and_started(order_id=order.id)
    await trips.deliver(trip_id, started["deliveries"][0]["id"], "2000")

    resp = await trips.end(trip_id)
    assert resp.status_code == 200
    assert resp.json()["undeliveredCount"] == 1

    statuses = (await db_session.execute(
        select(PendingDelivery.status).where(PendingDelivery.trip_id == trip_id).order_by(PendingDelivery.id)
    )).scalars().all()
    assert [s.value for s in statuses] == ["FULFILLED", "UNDELIVERED"]

    status = (await db_session.execute(select(Order.status).where(Order.id == order.id))).scalar_one()
    assert status.value == "PARTIALLY_COMPLETED"


@pytest.mark.asyncio
async def test_end_after_short_delivery_leaves_shortfall_undelivered(db_session, world, trips):
    trip_id, started = await trips.assigned_and_started()
    await trips.deliver(trip_id, started["deliveries"][0]["id"], "3000")

    resp = await trips.end(trip_id)
    assert resp.status_code == 200
    assert resp.json()["undeliveredCount"] == 1

    rows = (await db_session.execute(
        select(PendingDelivery.status, PendingDelivery.required_qty)
        .where(PendingDelivery.trip_id == trip_id)
        .order_by(PendingDelivery.id)
    )).all()
    assert [(s.value, Decimal(q)) for s, q in rows] == [("FULFILLED", Decimal("3000")), ("UNDELIVERED", Decimal("2000"))]

    status = (await db_session.execute(select(Order.status).where(Order.id == world.order.id))).scalar_one()
    assert status.value == "PARTIALLY_COMPLETED"


@pytest.mark.asyncio
async def test_end_without_any_delivery_keeps_order_assignable(db_session, world, trips):
    trip_id, _ = await trips.assigned_and_started()
    resp = await trips.end(trip_id)
    assert resp.json()["undeliveredCount"] == 1

    status = (await db_session.execute(select(Order.status).where(Order.id == world.order.id))).scalar_one()
    assert status.value == "PENDING"


@pytest.mark.asyncio
async def test_end_blocked_when_partial_completion_disallowed(monkeypatch, world, trips):
    monkeypatch.setattr(settings, "allow_partial_trip_completion", False)
    trip_id, _ = await trips.assigned_and_started()

    resp = await trips.end(trip_id)
    assert resp.status_code == 400
    assert "still pending" in resp.json()["message"]


@pytest.mark.asyncio
async def test_end_releases_vehicle_and_records_readings(db_session, world, trips):
    trip_id, _ = await trips.assigned_and_started()
    await trips.end(trip_id, end_km="1250.5", totalizer_end="530")

    lock = (await db_session.execute(select(VehicleLock).where(VehicleLock.trip_id == trip_id))).scalar_one()
    assert lock.released_at is not None

    vehicle = (await db_session.execute(
        select(Vehicle.last_km, Vehicle.last_totalizer).where(Vehicle.id == world.vehicle.id)
    )).one()
    assert vehicle.last_km == Decimal("1250.5")
    assert vehicle.last_totalizer == Decimal("530")

    order_id = (await db_session.execute(
        select(FleetAllocation.order_id).where(FleetAllocation.vehicle_id == world.vehicle.id)
    )).scalar_one()
    assert order_id is None


@pytest.mark.asyncio
async def test_vehicle_can_start_again_after_end(new_order, world, trips):
    trip_id, _ = await trips.assigned_and_started()
    await trips.end(trip_id)

    order = await new_order([("Diesel", 1000)])
    resp = await trips.assign(order_id=order.id)
    assert resp.json()["tripNo"] == "27101002"
    resp = await trips.start(resp.json()["tripId"], start_km="1100", totalizer_start="520")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_end_twice_conflicts(world, trips):
    trip_id, _ = await trips.assigned_and_started()
    assert (await trips.end(trip_id)).status_code == 200
    assert (await trips.end(trip_id)).status_code == 409
