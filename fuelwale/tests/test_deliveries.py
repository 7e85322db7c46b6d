"""
Delivery confirmation against the bowser balance.
"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from fuelwale.app.models.order import Order


async def _first_pending(client, headers, user, trip_id):
    resp = await client.get(f"/v1/deliveries/pending/{trip_id}", headers=headers(user))
    assert resp.status_code == 200
    return resp.json()[0]


# TEST 1: Happy path
@pytest.mark.asyncio
async def test_delivery_decrements_balance(client, world, trips, headers):
    trip_id, started = await trips.assigned_and_started()
    pending_id = started["deliveries"][0]["id"]

    resp = await trips.deliver(trip_id, pending_id, "3000", rate="90.50")
    assert resp.status_code == 201
    data = resp.json()
    assert Decimal(data["amount"]) == Decimal("271500")
    assert data["dcNo"] == "DC27101001-01"
    assert data["customerId"] == world.customer.id

    resp = await client.get(f"/v1/bowserinventories/{trip_id}", headers=headers(world.driver_user))
    assert resp.status_code == 200
    assert Decimal(resp.json()["balanceLiters"]) == Decimal("2000")
    assert Decimal(resp.json()["openingLiters"]) == Decimal("5000")


@pytest.mark.asyncio
async def test_delivery_moves_entry_to_completed(client, world, trips, headers):
    trip_id, started = await trips.assigned_and_started()
    await trips.deliver(trip_id, started["deliveries"][0]["id"], "1000")

    pending = await client.get(f"/v1/deliveries/pending/{trip_id}", headers=headers(world.driver_user))
    completed = await client.get(f"/v1/deliveries/completed/{trip_id}", headers=headers(world.driver_user))
    assert [Decimal(p["requiredQty"]) for p in pending.json()] == [Decimal("4000")]
    assert len(completed.json()) == 1
    assert completed.json()[0]["customerName"] == "Acme Infra"


@pytest.mark.asyncio
async def test_delivery_completes_order(db_session, world, trips):
    trip_id, started = await trips.assigned_and_started()
    await trips.deliver(trip_id, started["deliveries"][0]["id"], "5000")

    status = (await db_session.execute(
        select(Order.status).where(Order.id == world.order.id)
    )).scalar_one()
    assert status.value == "COMPLETED"


@pytest.mark.asyncio
async def test_partial_order_after_first_of_two_deliveries(db_session, new_order, world, trips):
    order = await new_order([("Diesel", 2000), ("Petrol", 500)])
    trip_id, started = await trips.assigned_and_started(order_id=order.id)
    await trips.deliver(trip_id, started["deliveries"][0]["id"], "2000")

    status = (await db_session.execute(select(Order.status).where(Order.id == order.id))).scalar_one()
    assert status.value == "PARTIALLY_COMPLETED"


@pytest.mark.asyncio
async def test_delivery_notification_is_sent(mocker, world, trips):
    notify = mocker.patch("fuelwale.app.domain.trips.lifecycle_service.notify_delivery")
    trip_id, started = await trips.assigned_and_started()
    await trips.deliver(trip_id, started["deliveries"][0]["id"], "1000")

    notify.assert_called_once()
    args = notify.call_args.args
    assert args[0] == "Acme Infra"
    assert args[3] == "DC27101001-01"


# TEST 2: Stock guard
@pytest.mark.asyncio
async def test_delivery_beyond_balance_is_rejected(client, world, trips, headers):
    trip_id, started = await trips.assigned_and_started(capacity="4000")

    resp = await trips.deliver(trip_id, started["deliveries"][0]["id"], "4500")
    assert resp.status_code == 409
    body = resp.json()
    assert body["error_code"] == "ERR_STOCK_001"
    assert body["message"] == "Insufficient stock. Only 4000 L left."

    resp = await client.get(f"/v1/bowserinventories/{trip_id}", headers=headers(world.driver_user))
    assert Decimal(resp.json()["balanceLiters"]) == Decimal("4000")


@pytest.mark.asyncio
async def test_delivery_of_exact_balance_is_accepted(client, world, trips, headers):
    trip_id, started = await trips.assigned_and_started(capacity="4000")

    resp = await trips.deliver(trip_id, started["deliveries"][0]["id"], "4000")
    assert resp.status_code == 201

    resp = await client.get(f"/v1/bowserinventories/{trip_id}", headers=headers(world.driver_user))
    assert Decimal(resp.json()["balanceLiters"]) == Decimal("0")


@pytest.mark.asyncio
async def test_loading_on_active_trip_tops_up_balance(client, world, trips, headers):
    trip_id, _ = await trips.assigned_and_started(capacity="1000")

    resp = await client.post("/v1/loadings", json={
        "tripId": trip_id, "stationId": world.station.id, "product": "Diesel", "qty": "2500",
    }, headers=headers(world.driver_user))
    assert resp.status_code == 201
    assert resp.json()["depotCd"] == "101"

    resp = await client.get(f"/v1/bowserinventories/{trip_id}", headers=headers(world.driver_user))
    assert Decimal(resp.json()["balanceLiters"]) == Decimal("3500")


# TEST 3: Duplicates and invalid requests
@pytest.mark.asyncio
async def test_second_delivery_for_same_entry_conflicts(world, trips):
    trip_id, started = await trips.assigned_and_started()
    pending_id = started["deliveries"][0]["id"]

    first = await trips.deliver(trip_id, pending_id, "1000")
    second = await trips.deliver(trip_id, pending_id, "1000")
    assert first.status_code == 201
    assert second.status_code == 409


@pytest.mark.asyncio
async def test_delivery_replay_with_same_key(client, world, trips, headers):
    trip_id, started = await trips.assigned_and_started()
    pending_id = started["deliveries"][0]["id"]
    key = {"Idempotency-Key": "deliver-1"}

    first = await trips.deliver(trip_id, pending_id, "1000", extra_headers=key)
    second = await trips.deliver(trip_id, pending_id, "1000", extra_headers=key)
    assert second.status_code == 201
    assert second.json()["id"] == first.json()["id"]

    resp = await client.get(f"/v1/bowserinventories/{trip_id}", headers=headers(world.driver_user))
    assert Decimal(resp.json()["balanceLiters"]) == Decimal("4000")


@pytest.mark.asyncio
async def test_delivery_requires_active_trip(client, world, trips, headers):
    resp = await trips.assign()
    trip_id = resp.json()["tripId"]
    pending = await _first_pending(client, headers, world.driver_user, trip_id)

    resp = await trips.deliver(trip_id, pending["id"], "100")
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_delivery_rejects_non_positive_values(world, trips):
    trip_id, started = await trips.assigned_and_started()
    pending_id = started["deliveries"][0]["id"]

    assert (await trips.deliver(trip_id, pending_id, "0")).status_code == 422
    assert (await trips.deliver(trip_id, pending_id, "100", rate="0")).status_code == 422


@pytest.mark.asyncio
async def test_other_driver_cannot_deliver(world, trips):
    trip_id, started = await trips.assigned_and_started()
    resp = await trips.deliver(trip_id, started["deliveries"][0]["id"], "100", user=world.other_driver_user)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_balance_of_unstarted_trip_not_found(client, world, trips, headers):
    resp = await trips.assign()
    resp = await client.get(f"/v1/bowserinventories/{resp.json()['tripId']}", headers=headers(world.executive))
    assert resp.status_code == 404


# TEST 4: Short deliveries
@pytest.mark.asyncio
async def test_short_delivery_keeps_order_partially_completed(client, db_session, world, trips, headers):
    trip_id, started = await trips.assigned_and_started()
    resp = await trips.deliver(trip_id, started["deliveries"][0]["id"], "3000")
    assert resp.status_code == 201

    status = (await db_session.execute(select(Order.status).where(Order.id == world.order.id))).scalar_one()
    assert status.value == "PARTIALLY_COMPLETED"

    pending = (await client.get(f"/v1/deliveries/pending/{trip_id}", headers=headers(world.driver_user))).json()
    completed = (await client.get(f"/v1/deliveries/completed/{trip_id}", headers=headers(world.driver_user))).json()
    outstanding = sum(Decimal(p["requiredQty"]) for p in pending)
    delivered = sum(Decimal(d["qty"]) for d in completed)
    assert outstanding == Decimal("2000")
    assert outstanding + delivered == Decimal("5000")
    assert pending[0]["product"] == "Diesel"
    assert pending[0]["shipTo"] == "Site A, Bhiwandi"


@pytest.mark.asyncio
async def test_delivering_the_remainder_completes_order(client, db_session, world, trips, headers):
    trip_id, started = await trips.assigned_and_started()
    await trips.deliver(trip_id, started["deliveries"][0]["id"], "3000")
    remainder = await _first_pending(client, headers, world.driver_user, trip_id)

    resp = await trips.deliver(trip_id, remainder["id"], "2000")
    assert resp.status_code == 201
    assert resp.json()["dcNo"] == "DC27101001-02"

    pending = await client.get(f"/v1/deliveries/pending/{trip_id}", headers=headers(world.driver_user))
    assert pending.json() == []
    status = (await db_session.execute(select(Order.status).where(Order.id == world.order.id))).scalar_one()
    assert status.value == "COMPLETED"


@pytest.mark.asyncio
async def test_delivery_above_requirement_is_rejected(client, new_order, world, trips, headers):
    order = await new_order([("Diesel", 1000)])
    trip_id, started = await trips.assigned_and_started(order_id=order.id, capacity="5000")

    resp = await trips.deliver(trip_id, started["deliveries"][0]["id"], "1500")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Qty exceeds the pending requirement of 1000 L"

    resp = await client.get(f"/v1/bowserinventories/{trip_id}", headers=headers(world.driver_user))
    assert Decimal(resp.json()["balanceLiters"]) == Decimal("5000")


# TEST 5: Decimal places
@pytest.mark.asyncio
async def test_excess_decimals_are_rejected_without_touching_balance(client, world, trips, headers):
    trip_id, started = await trips.assigned_and_started()
    pending_id = started["deliveries"][0]["id"]

    resp = await trips.deliver(trip_id, pending_id, "1000", rate="90.555")
    assert resp.status_code == 422
    assert resp.json()["error_code"] == "ERR_VALIDATION"
    assert (await trips.deliver(trip_id, pending_id, "1000.0001")).status_code == 422

    resp = await client.get(f"/v1/bowserinventories/{trip_id}", headers=headers(world.driver_user))
    assert Decimal(resp.json()["balanceLiters"]) == Decimal("5000")


@pytest.mark.asyncio
async def test_stored_amount_matches_qty_times_rate(client, world, trips, headers):
    trip_id, started = await trips.assigned_and_started()

    resp = await trips.deliver(trip_id, started["deliveries"][0]["id"], "1234.567", rate="90.55")
    assert resp.status_code == 201
    data = resp.json()
    assert Decimal(data["qty"]) == Decimal("1234.567")
    assert Decimal(data["rate"]) == Decimal("90.55")
    assert Decimal(data["amount"]) == Decimal("1234.567") * Decimal("90.55")

    completed = await client.get(f"/v1/deliveries/completed/{trip_id}", headers=headers(world.driver_user))
    stored = completed.json()[0]
    assert Decimal(stored["amount"]) == Decimal(stored["qty"]) * Decimal(stored["rate"])


@pytest.mark.asyncio
async def test_loading_and_capacity_reject_excess_decimals(client, world, trips, headers):
    resp = await trips.assign(capacity="5000.0001")
    assert resp.status_code == 422

    trip_id, _ = await trips.assigned_and_started()
    resp = await client.post("/v1/loadings", json={
        "tripId": trip_id, "stationId": world.station.id, "product": "Diesel", "qty": "10.1234",
    }, headers=headers(world.driver_user))
    assert resp.status_code == 422

    resp = await trips.end(trip_id, end_km="1100.123")
    assert resp.status_code == 422
