"""
Fleet allocation and CSV export.
"""

import csv
import io
from datetime import date

import pytest

from fuelwale.app.schemas.fleet import FleetRow
from fuelwale.app.services.fleet_export import FLEET_CSV_HEADERS, fleet_to_csv


def test_csv_header_plain_and_fields_quoted():
    row = FleetRow(
        vehicle_id=1,
        vehicle_no="MH01AB1234",
        make="Tata, Motors",
        has_gps=True,
        insurance_expiry=date(2025, 1, 31),
        depot_cd="101",
        order_customer='C001 • Acme "Infra"',
    )
    text = fleet_to_csv([row])
    header, first = text.splitlines()[:2]

    assert header == ",".join(FLEET_CSV_HEADERS)
    assert first.startswith('"MH01AB1234","Tata, Motors",""')

    parsed = list(csv.reader(io.StringIO(text)))
    assert parsed[1][FLEET_CSV_HEADERS.index("GpsYesNo")] == "Yes"
    assert parsed[1][FLEET_CSV_HEADERS.index("VolSensor")] == "No"
    assert parsed[1][FLEET_CSV_HEADERS.index("InsuranceExpiryDt")] == "31-01-2025"
    assert parsed[1][FLEET_CSV_HEADERS.index("OrderCustomer")] == 'C001 • Acme "Infra"'


def test_csv_of_empty_fleet_has_header_only():
    assert fleet_to_csv([]) == ",".join(FLEET_CSV_HEADERS) + "\n"


# TEST: Fleet endpoints
@pytest.mark.asyncio
async def test_assign_and_release_driver(client, world, headers):
    resp = await client.put("/v1/fleets/assign-driver", json={
        "vehicleId": world.vehicle.id, "driverId": world.driver.id,
    }, headers=headers(world.admin))
    assert resp.status_code == 200
    assert resp.json()["driverName"] == "D1"

    resp = await client.put("/v1/fleets/assign-driver", json={
        "vehicleId": world.second_vehicle.id, "driverId": world.driver.id,
    }, headers=headers(world.admin))
    assert resp.status_code == 409

    resp = await client.put("/v1/fleets/release-driver", json={"vehicleId": world.vehicle.id},
                            headers=headers(world.admin))
    assert resp.status_code == 200
    assert resp.json()["driverId"] is None


@pytest.mark.asyncio
async def test_allocate_and_release_order(client, world, headers):
    url = f"/v1/fleets/{world.vehicle.id}"
    resp = await client.put(f"{url}/allocate", json={"orderId": world.order.id}, headers=headers(world.executive))
    assert resp.status_code == 200
    assert resp.json()["orderId"] == world.order.id
    assert resp.json()["orderCustomer"] == "C001 • Acme Infra"

    resp = await client.put(f"{url}/release", headers=headers(world.executive))
    assert resp.json()["orderId"] is None


@pytest.mark.asyncio
async def test_completed_order_cannot_be_allotted(client, world, headers):
    await client.put(f"/v1/orders/{world.order.id}", json={"status": "COMPLETED"}, headers=headers(world.executive))
    resp = await client.put(f"/v1/fleets/{world.vehicle.id}/allocate", json={"orderId": world.order.id},
                            headers=headers(world.executive))
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_fleet_listing_and_export(client, world, headers):
    resp = await client.get("/v1/fleets", headers=headers(world.executive))
    assert resp.status_code == 200
    assert [r["vehicleNo"] for r in resp.json()] == ["MH01AB1234", "MH04XY9999"]

    resp = await client.get("/v1/fleets/export", headers=headers(world.executive))
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert 'filename="fleet_' in resp.headers["content-disposition"]
    lines = resp.text.splitlines()
    assert lines[0].startswith("Vehicle No,Make,Model")
    assert len(lines) == 3


@pytest.mark.asyncio
async def test_fleet_hidden_from_drivers(client, world, headers):
    resp = await client.get("/v1/fleets", headers=headers(world.driver_user))
    assert resp.status_code == 403
