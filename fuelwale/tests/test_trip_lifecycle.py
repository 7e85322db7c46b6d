"""
Trip lifecycle: assignment, start, ordering of transitions and driver access.
"""

from decimal import Decimal

import pytest
from sqlalchemy import select, func

from fuelwale.app.models.audit_log import AuditLog
from fuelwale.app.models.fleet_allocation import FleetAllocation
from fuelwale.app.models.pending_delivery import PendingDelivery
from fuelwale.app.models.trip import Trip
from fuelwale.app.models.vehicle_lock import VehicleLock


# TEST 1: Assignment
@pytest.mark.asyncio
async def test_assign_creates_trip_with_seeded_deliveries(db_session, world, trips):
    resp = await trips.assign()
    assert resp.status_code == 201
    data = resp.json()
    assert data["tripNo"] == "27101001"
    assert data["seededDeliveriesCount"] == 1

    trip = await db_session.get(Trip, data["tripId"])
    assert trip.status.value == "ASSIGNED"
    assert trip.vehicle_no == "MH01AB1234"
    assert trip.capacity == Decimal("5000")

    pending = (await db_session.execute(
        select(PendingDelivery).where(PendingDelivery.trip_id == trip.id)
    )).scalars().all()
    assert len(pending) == 1
    assert pending[0].product == "Diesel"
    assert pending[0].required_qty == Decimal("5000")
    assert pending[0].ship_to == "Site A, Bhiwandi"

    allocation = (await db_session.execute(
        select(FleetAllocation).where(FleetAllocation.vehicle_id == world.vehicle.id)
    )).scalar_one()
    assert allocation.driver_id == world.driver.id
    assert allocation.order_id == world.order.id


@pytest.mark.asyncio
async def test_seeding_groups_lines_by_product(new_order, trips):
    order = await new_order([("Diesel", 2000), ("Diesel", 1000), ("Petrol", 500)])
    resp = await trips.assign(order_id=order.id)
    assert resp.status_code == 201
    assert resp.json()["seededDeliveriesCount"] == 2


@pytest.mark.asyncio
async def test_assign_is_idempotent_with_key(db_session, world, trips):
    key = {"Idempotency-Key": "assign-once"}
    first = await trips.assign(extra_headers=key)
    second = await trips.assign(extra_headers=key)

    assert first.status_code == 201
    assert second.status_code == 201
    assert second.json() == first.json()

    count = (await db_session.execute(select(func.count(Trip.id)))).scalar()
    assert count == 1


@pytest.mark.asyncio
async def test_assign_requires_supervisor(world, trips):
    resp = await trips.assign(user=world.driver_user)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_assign_rejects_non_positive_load(world, trips):
    resp = await trips.assign(capacity="0")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_assign_rejects_completed_order(client, world, trips, headers):
    resp = await client.put(f"/v1/orders/{world.order.id}", json={"status": "COMPLETED"},
                            headers=headers(world.executive))
    assert resp.status_code == 200

    resp = await trips.assign()
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_assign_is_audited(db_session, world, trips):
    resp = await trips.assign()
    trip_id = resp.json()["tripId"]

    entry = (await db_session.execute(
        select(AuditLog).where(AuditLog.action == "TRIP_ASSIGNED", AuditLog.entity_id == trip_id)
    )).scalar_one_or_none()
    assert entry is not None
    assert entry.actor_id == world.executive.id


# TEST 2: Start
@pytest.mark.asyncio
async def test_start_opens_bowser_from_capacity(db_session, world, trips):
    resp = await trips.assign(capacity="4500")
    trip_id = resp.json()["tripId"]

    resp = await trips.start(trip_id)
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ACTIVE"
    assert Decimal(data["dieselOpening"]) == Decimal("4500")
    assert len(data["deliveries"]) == 1
    assert data["deliveries"][0]["customerName"] == "Acme Infra"

    lock = (await db_session.execute(
        select(VehicleLock).where(VehicleLock.trip_id == trip_id)
    )).scalar_one()
    assert lock.released_at is None


@pytest.mark.asyncio
async def test_start_opens_bowser_from_latest_loading(client, world, trips, headers):
    resp = await trips.assign()
    trip_id = resp.json()["tripId"]

    for qty in ("3000", "3200"):
        resp = await client.post("/v1/loadings", json={
            "tripId": trip_id, "stationId": world.station.id, "product": "Diesel", "qty": qty,
        }, headers=headers(world.driver_user))
        assert resp.status_code == 201

    resp = await trips.start(trip_id)
    assert Decimal(resp.json()["dieselOpening"]) == Decimal("3200")


@pytest.mark.asyncio
async def test_start_twice_conflicts(world, trips):
    trip_id, _ = await trips.assigned_and_started()
    resp = await trips.start(trip_id)
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "ERR_TRIP_STATE_001"


@pytest.mark.asyncio
async def test_end_before_start_conflicts(world, trips):
    resp = await trips.assign()
    resp = await trips.end(resp.json()["tripId"])
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_start_rejects_negative_readings(world, trips):
    resp = await trips.assign()
    resp = await trips.start(resp.json()["tripId"], start_km="-1")
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_driver_cannot_start_someone_elses_trip(world, trips):
    resp = await trips.assign()
    resp = await trips.start(resp.json()["tripId"], user=world.other_driver_user)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_driver_with_active_trip_cannot_start_another(new_order, world, trips):
    await trips.assigned_and_started()

    order = await new_order([("Diesel", 1000)])
    resp = await trips.assign(order_id=order.id, vehicle_no="MH04XY9999")
    assert resp.status_code == 201

    resp = await trips.start(resp.json()["tripId"])
    assert resp.status_code == 409
    assert "ACTIVE trip" in resp.json()["message"]


@pytest.mark.asyncio
async def test_locked_vehicle_cannot_start_second_trip(new_order, world, trips):
    await trips.assigned_and_started()

    order = await new_order([("Diesel", 1000)])
    resp = await trips.assign(order_id=order.id, driver_id=world.other_driver.id)
    assert resp.status_code == 201

    resp = await trips.start(resp.json()["tripId"], user=world.other_driver_user)
    assert resp.status_code == 409
    assert "MH01AB1234" in resp.json()["message"]


# TEST 3: Listings and access
@pytest.mark.asyncio
async def test_driver_sees_only_own_trips(client, new_order, world, trips, headers):
    await trips.assign()
    order = await new_order([("Diesel", 1000)])
    await trips.assign(order_id=order.id, vehicle_no="MH04XY9999", driver_id=world.other_driver.id)

    resp = await client.get("/v1/trips", headers=headers(world.driver_user))
    assert resp.status_code == 200
    assert [t["driverId"] for t in resp.json()] == [world.driver.id]

    resp = await client.get("/v1/trips", headers=headers(world.executive))
    assert len(resp.json()) == 2


@pytest.mark.asyncio
async def test_trip_listing_puts_active_first(client, new_order, world, trips, headers):
    first = await trips.assign()
    order = await new_order([("Diesel", 1000)])
    second = await trips.assign(order_id=order.id, vehicle_no="MH04XY9999", driver_id=world.other_driver.id)
    await trips.start(first.json()["tripId"])

    resp = await client.get("/v1/trips", headers=headers(world.executive))
    statuses = [t["status"] for t in resp.json()]
    assert statuses == ["ACTIVE", "ASSIGNED"]
    assert resp.json()[1]["id"] == second.json()["tripId"]


@pytest.mark.asyncio
async def test_assigned_trips_for_other_driver_forbidden(client, world, headers):
    resp = await client.get(f"/v1/trips/assigned/{world.other_driver.id}", headers=headers(world.driver_user))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_trip_detail(client, world, trips, headers):
    trip_id, _ = await trips.assigned_and_started()
    resp = await client.get(f"/v1/trips/{trip_id}", headers=headers(world.driver_user))
    assert resp.status_code == 200
    data = resp.json()
    assert data["tripNo"] == "27101001"
    assert data["vehicle"]["displayNo"] == "MH-01 AB 1234"
    assert Decimal(data["balanceLiters"]) == Decimal("5000")

    resp = await client.get(f"/v1/trips/{trip_id}", headers=headers(world.other_driver_user))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_trip_detail_not_found(client, world, headers):
    resp = await client.get("/v1/trips/999", headers=headers(world.admin))
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "ERR_NOT_FOUND_001"


@pytest.mark.asyncio
async def test_missing_token_is_rejected(client, world):
    resp = await client.get("/v1/trips")
    assert resp.status_code in (401, 403)


# TEST 4: Deleting
@pytest.mark.asyncio
async def test_delete_assigned_trip(client, db_session, world, trips, headers):
    resp = await trips.assign()
    trip_id = resp.json()["tripId"]

    resp = await client.delete(f"/v1/trips/{trip_id}", headers=headers(world.executive))
    assert resp.status_code == 204

    assert (await db_session.execute(select(func.count(Trip.id)))).scalar() == 0
    assert (await db_session.execute(select(func.count(PendingDelivery.id)))).scalar() == 0


@pytest.mark.asyncio
async def test_delete_active_trip_conflicts(client, world, trips, headers):
    trip_id, _ = await trips.assigned_and_started()
    resp = await client.delete(f"/v1/trips/{trip_id}", headers=headers(world.executive))
    assert resp.status_code == 409
