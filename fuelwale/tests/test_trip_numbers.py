"""
Trip number derivation and global serial allocation.
"""

import pytest
from sqlalchemy import select

from fuelwale.app.domain.trips.trip_numbers import (
    compose_trip_no, depot_code, extract_serial, next_serial, state_code
)
from fuelwale.app.models.trip_sequence import TripSequence
from fuelwale.app.services.trip_sequence import TRIP_SERIAL, allocate_trip_serial, peek_trip_serial


def test_state_code_takes_leading_two_digits():
    assert state_code("27 - Maharashtra") == "27"
    assert state_code("27-Maharashtra") == "27"
    assert state_code("7") == "07"
    assert state_code("") == "00"
    assert state_code(None) == "00"


def test_depot_code_is_three_digits():
    assert depot_code("101") == "101"
    assert depot_code("5") == "005"
    assert depot_code("D-12") == "012"
    assert depot_code("12345") == "123"


def test_compose_trip_no():
    assert compose_trip_no("27 - Maharashtra", "101", 1) == "27101001"
    assert compose_trip_no("24", "7", 42) == "24007042"


def test_serial_grows_past_999():
    assert compose_trip_no("27", "101", 1000) == "271011000"
    assert extract_serial("271011000") == 1000
    assert next_serial(["27101999", "271011000"]) == 1001


def test_next_serial_ignores_input_order():
    """Largest serial wins even when the newest trip is not first."""
    assert next_serial(["27101005", "24102009", "27101003"]) == 10
    assert next_serial([]) == 1
    assert next_serial(["", None, "garbage"]) == 1


def test_extract_serial_falls_back_to_last_three_digits():
    assert extract_serial("T-0042") == 42
    assert extract_serial("abc") is None


# TEST: Sequence seeded from existing trips
@pytest.mark.asyncio
async def test_sequence_seeds_from_existing_trips(db_session, world, trips):
    """Numbers keep counting from the highest serial already in the trips table."""
    resp = await trips.assign()
    assert resp.status_code == 201
    assert resp.json()["tripNo"] == "27101001"

    await db_session.execute(TripSequence.__table__.delete())
    await db_session.commit()

    assert await peek_trip_serial(db_session) == 2
    assert await allocate_trip_serial(db_session) == 2
    await db_session.commit()

    row = (await db_session.execute(
        select(TripSequence.last_value).where(TripSequence.name == TRIP_SERIAL)
    )).scalar_one()
    assert row == 2


@pytest.mark.asyncio
async def test_serials_are_unique_across_assignments(new_order, world, trips):
    """Every assignment receives a fresh serial, whatever the customer or depot."""
    second = await new_order([("Diesel", 1000)])

    first = await trips.assign()
    other = await trips.assign(order_id=second.id, vehicle_no="MH04XY9999", driver_id=world.other_driver.id)

    assert first.status_code == 201
    assert other.status_code == 201
    assert first.json()["tripNo"] == "27101001"
    assert other.json()["tripNo"] == "27101002"


@pytest.mark.asyncio
async def test_next_number_preview(client, world, headers, trips):
    resp = await client.get(f"/v1/trips/next-number?orderId={world.order.id}", headers=headers(world.executive))
    assert resp.status_code == 200
    data = resp.json()
    assert data["tripNo"] == "27101001"
    assert data["stateCd"] == "27"
    assert data["depotCd"] == "101"
    assert data["serial"] == 1

    await trips.assign()
    resp = await client.get(f"/v1/trips/next-number?orderId={world.order.id}", headers=headers(world.executive))
    assert resp.json()["tripNo"] == "27101002"


@pytest.mark.asyncio
async def test_client_proposed_number_is_not_authoritative(client, world, headers):
    resp = await client.post("/v1/trips/assign", json={
        "tripNo": "27101999",
        "orderId": world.order.id,
        "routeId": world.route.id,
        "vehicleNo": "MH01AB1234",
        "driverId": world.driver.id,
        "capacity": "5000",
    }, headers=headers(world.executive))
    assert resp.status_code == 201
    assert resp.json()["tripNo"] == "27101001"
