"""
Invoice builder.

Turns a completed trip and its deliveries into invoice data. Totals are
summed as exact decimals; rounding to two places happens only when a
value is formatted for display.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

from fuelwale.app.domain.trips.trip_numbers import digits_only

TWO_PLACES = Decimal("0.01")


def invoice_no_for(trip_no: str) -> str:
    """Invoice number derived from the trip number, e.g. INV27101001."""
    return f"INV{digits_only(trip_no).rjust(6, '0')}"


def format_money(value: Decimal) -> str:
    """Two-decimal display with thousands separators."""
    return f"{Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP):,.2f}"


def format_qty(value: Decimal) -> str:
    return f"{Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP):,.2f}"


@dataclass
class InvoiceLine:
    dc_no: str
    product: str
    ship_to: Optional[str]
    qty: Decimal
    rate: Decimal

    @property
    def amount(self) -> Decimal:
        return self.qty * self.rate


@dataclass
class Invoice:
    invoice_no: str
    invoice_date: date
    trip_no: str
    vehicle_no: str
    customer_name: str
    customer_gstin: Optional[str]
    bill_address: Optional[str]
    ship_to: Optional[str]
    order_id: int
    lines: List[InvoiceLine] = field(default_factory=list)

    @property
    def total_qty(self) -> Decimal:
        return sum((line.qty for line in self.lines), Decimal("0"))

    @property
    def total_amount(self) -> Decimal:
        return sum((line.amount for line in self.lines), Decimal("0"))


def build_lines(deliveries: Iterable) -> List[InvoiceLine]:
    """Invoice lines from delivery rows (anything with dc_no, product, ship_to, qty, rate)."""
    return [
        InvoiceLine(
            dc_no=d.dc_no,
            product=d.product,
            ship_to=d.ship_to,
            qty=Decimal(d.qty),
            rate=Decimal(d.rate),
        )
        for d in deliveries
    ]


def build_invoice(trip, order, customer, deliveries: Iterable, invoice_date: Optional[date] = None) -> Invoice:
    completed_on = trip.completed_at.date() if trip.completed_at else None
    return Invoice(
        invoice_no=invoice_no_for(trip.trip_no),
        invoice_date=invoice_date or completed_on or date.today(),
        trip_no=trip.trip_no,
        vehicle_no=trip.vehicle_no,
        customer_name=customer.name,
        customer_gstin=customer.gstin,
        bill_address=customer.bill_address,
        ship_to=order.ship_to,
        order_id=order.id,
        lines=build_lines(deliveries),
    )
