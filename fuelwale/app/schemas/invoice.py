"""
Invoice listing schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from fuelwale.app.schemas.base import CamelModel


class InvoiceListItem(CamelModel):
    trip_id: int
    trip_no: str
    invoice_no: str
    customer_name: Optional[str]
    vehicle_no: str
    total_qty: Decimal
    total_amount: Decimal
    completed_at: Optional[datetime]
