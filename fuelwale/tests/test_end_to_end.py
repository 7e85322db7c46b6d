"""
One trip from assignment to invoice, driven through the operator console
against the in-process API.
"""

from decimal import Decimal

import httpx
import pytest

from fuelwale.app.main import app
from fuelwale.console.client import ApiClient
from fuelwale.console.config import ConsoleSettings
from fuelwale.console.errors import ApiError, ConsoleValidationError
from fuelwale.console.session import AuthService
from fuelwale.console.workflow import Phase, TripWorkflow


@pytest.fixture
async def console(tmp_path):
    settings = ConsoleSettings(
        base_url="http://test/v1",
        session_file=str(tmp_path / "session.json"),
        invoice_dir=str(tmp_path),
    )
    async with ApiClient(settings, transport=httpx.ASGITransport(app=app)) as api:
        yield api


@pytest.mark.asyncio
async def test_trip_from_assignment_to_invoice(console, world, password, tmp_path):
    auth = AuthService(console)
    flow = TripWorkflow(console)

    # executive assigns
    await auth.login("exec", password)
    assigned = await flow.assign(world.order.id, world.route.id, "mh-01 ab 1234", world.driver.id, "5000")
    assert assigned["tripNo"] == "27101001"
    assert flow.phase == Phase.ASSIGNED
    trip_id = flow.trip_id
    await auth.logout()

    # driver loads, starts, delivers and ends
    await auth.login("driver1", password)
    assert "driver-trips" in auth.screens()
    flow.reset()
    await flow.resume(trip_id)
    assert flow.phase == Phase.ASSIGNED

    stations = await flow.stations()
    assert [s["name"] for s in stations] == ["BPCL Wadala"]
    await flow.record_loading(stations[0]["id"], "Diesel", "4000")

    started = await flow.start("1000", "500")
    assert Decimal(started["dieselOpening"]) == Decimal("4000")
    assert flow.balance == Decimal("4000")
    assert len(flow.pending) == 1

    with pytest.raises(ConsoleValidationError, match="Only 4000 L left"):
        await flow.deliver(flow.pending[0]["id"], "4500", "90")

    balance_before = flow.balance
    delivered = await flow.deliver(flow.pending[0]["id"], "2000", "90")
    assert Decimal(delivered["amount"]) == Decimal("180000")
    assert flow.balance == balance_before - Decimal("2000")
    assert len(flow.completed) == 1

    # the 3000 L shortfall stays pending for this trip
    assert [Decimal(p["requiredQty"]) for p in flow.pending] == [Decimal("3000")]

    with pytest.raises(ConsoleValidationError, match="End KM cannot be less than Start KM"):
        await flow.end("900", "520")
    ended = await flow.end("1100", "520")
    assert ended["status"] == "COMPLETED"
    assert ended["undeliveredCount"] == 1
    assert flow.phase == Phase.NEW

    # drivers cannot pull invoices
    with pytest.raises(ApiError) as exc:
        await flow.download_invoice()
    assert exc.value.status_code == 403
    await auth.logout()

    # accounts downloads the invoice
    await auth.login("accounts", password)
    target = await flow.download_invoice()
    assert target == tmp_path / "invoice_27101001.pdf"
    assert target.read_bytes().startswith(b"%PDF")


@pytest.mark.asyncio
async def test_revoked_session_is_rejected_by_server(console, world, password):
    auth = AuthService(console)
    session = await auth.login("exec", password)
    await auth.logout()

    console.session = session
    with pytest.raises(ApiError) as exc:
        await console.get("/trips", fallback="Failed to load trips")
    assert exc.value.status_code == 401
