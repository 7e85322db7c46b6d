"""
Customer notification formatting.

Delivery confirmations are formatted and written to the notification
logger. No SMS or e-mail integration is wired in.
"""

import logging
from decimal import Decimal

from fuelwale.app.domain.invoicing.invoice_builder import format_money, format_qty

logger = logging.getLogger("fuelwale.notifications")


def delivery_message(customer_name: str, trip_no: str, dc_no: str, qty: Decimal, rate: Decimal, amount: Decimal) -> str:
    return (
        f"Dear {customer_name}, {format_qty(qty)} L delivered against trip {trip_no} "
        f"(DC {dc_no}) at Rs {format_money(rate)}/L. Amount: Rs {format_money(amount)}. "
        "Thank you for choosing FuelWale."
    )


def notify_delivery(customer_name: str, mobile: str, trip_no: str, dc_no: str,
                    qty: Decimal, rate: Decimal, amount: Decimal) -> str:
    """Format the delivery notification, log it and return the text."""
    message = delivery_message(customer_name, trip_no, dc_no, qty, rate, amount)
    logger.info("Customer notification to %s: %s", mobile or "unknown", message)
    return message


def notify_loading_code(trip_no: str, code: str) -> None:
    logger.info("Loading code for trip %s: %s", trip_no, code)
