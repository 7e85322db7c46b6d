"""
Invoice data and PDF of completed trips.
"""

from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from fuelwale.app.domain.invoicing.invoice_builder import (
    build_invoice, format_money, invoice_no_for
)
from fuelwale.app.domain.invoicing.pdf_renderer import render_invoice_pdf


def _trip(**overrides):
    values = dict(trip_no="27101001", vehicle_no="MH01AB1234", completed_at=datetime(2024, 5, 3, 18, 0))
    values.update(overrides)
    return SimpleNamespace(**values)


def _delivery(dc_no, qty, rate, product="Diesel"):
    return SimpleNamespace(dc_no=dc_no, product=product, ship_to="Site A", qty=Decimal(qty), rate=Decimal(rate))


ORDER = SimpleNamespace(id=7, ship_to="Site A")
CUSTOMER = SimpleNamespace(name="Acme Infra", gstin="27AAACA0000A1Z5", bill_address="Plot 4, MIDC, Thane")


def test_invoice_no_from_trip_no():
    assert invoice_no_for("27101001") == "INV27101001"
    assert invoice_no_for("T-42") == "INV000042"


def test_money_is_rounded_only_for_display():
    assert format_money(Decimal("1234567.005")) == "1,234,567.01"
    assert format_money(Decimal("0")) == "0.00"


def test_totals_are_exact():
    deliveries = [_delivery("DC1", "1000.5", "90.33"), _delivery("DC2", "0.333", "3")]
    invoice = build_invoice(_trip(), ORDER, CUSTOMER, deliveries)

    assert invoice.total_qty == Decimal("1000.833")
    assert invoice.total_amount == Decimal("1000.5") * Decimal("90.33") + Decimal("0.999")
    assert invoice.invoice_date == date(2024, 5, 3)
    assert invoice.invoice_no == "INV27101001"


def test_explicit_invoice_date_wins():
    invoice = build_invoice(_trip(), ORDER, CUSTOMER, [], invoice_date=date(2024, 6, 1))
    assert invoice.invoice_date == date(2024, 6, 1)
    assert invoice.total_amount == Decimal("0")


def test_pdf_bytes():
    invoice = build_invoice(_trip(), ORDER, CUSTOMER, [_delivery("DC27101001-01", "5000", "90")])
    content = render_invoice_pdf(invoice)
    assert content.startswith(b"%PDF")


# TEST: Invoice endpoints
@pytest.mark.asyncio
async def test_invoice_download_for_completed_trip(client, world, trips, headers):
    trip_id, started = await trips.assigned_and_started()
    await trips.deliver(trip_id, started["deliveries"][0]["id"], "5000")
    await trips.end(trip_id)

    resp = await client.get(f"/v1/trips/{trip_id}/invoice", headers=headers(world.accounts))
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert 'filename="INV27101001.pdf"' in resp.headers["content-disposition"]
    assert resp.content.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_invoice_of_unfinished_trip_conflicts(client, world, trips, headers):
    trip_id, _ = await trips.assigned_and_started()
    resp = await client.get(f"/v1/trips/{trip_id}/invoice", headers=headers(world.admin))
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_invoice_forbidden_for_driver(client, world, trips, headers):
    trip_id, _ = await trips.assigned_and_started()
    await trips.end(trip_id)
    resp = await client.get(f"/v1/trips/{trip_id}/invoice", headers=headers(world.driver_user))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_invoice_listing_totals(client, world, trips, headers):
    trip_id, started = await trips.assigned_and_started()
    await trips.deliver(trip_id, started["deliveries"][0]["id"], "1500", rate="92.25")
    await trips.end(trip_id)

    resp = await client.get("/v1/invoices", headers=headers(world.accounts))
    assert resp.status_code == 200
    items = resp.json()
    assert len(items) == 1
    assert items[0]["invoiceNo"] == "INV27101001"
    assert Decimal(items[0]["totalQty"]) == Decimal("1500")
    assert Decimal(items[0]["totalAmount"]) == Decimal("138375")
