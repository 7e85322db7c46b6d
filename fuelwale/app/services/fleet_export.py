"""
Fleet listing CSV export.

Column order is fixed. Every data field is double-quoted; the header row
is written plain.
"""

import csv
import io
from datetime import date
from typing import Iterable, Optional

from fuelwale.app.schemas.fleet import FleetRow

FLEET_CSV_HEADERS = [
    "Vehicle No",
    "Make",
    "Model",
    "CapacityLtrs",
    "GrossWtKgs",
    "MonthYear",
    "TotaliserMake",
    "TotaliserModel",
    "GpsYesNo",
    "VolSensor",
    "PESONo",
    "InsuranceExpiryDt",
    "FitnessExpiryDt",
    "PermitExpiryDt",
    "DepotAllottedCd",
    "DriverAllotted",
    "OrderAllotted",
    "OrderDelyDt",
    "OrderDelyTime",
    "OrderCustomer",
]


def _fmt_date(value: Optional[date]) -> str:
    return value.strftime("%d-%m-%Y") if value else ""


def _text(value) -> str:
    return "" if value is None else str(value)


def fleet_csv_row(row: FleetRow) -> list:
    return [
        row.vehicle_no,
        _text(row.make),
        _text(row.model),
        _text(row.capacity_liters),
        _text(row.gross_wt_kgs),
        _text(row.month_year),
        _text(row.totaliser_make),
        _text(row.totaliser_model),
        "Yes" if row.has_gps else "No",
        "Yes" if row.has_volume_sensor else "No",
        _text(row.peso_no),
        _fmt_date(row.insurance_expiry),
        _fmt_date(row.fitness_expiry),
        _fmt_date(row.permit_expiry),
        _text(row.depot_cd),
        _text(row.driver_name),
        _text(row.order_id),
        _fmt_date(row.order_delivery_date),
        _text(row.order_time_slot),
        _text(row.order_customer),
    ]


def fleet_to_csv(rows: Iterable[FleetRow]) -> str:
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(FLEET_CSV_HEADERS)
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow(fleet_csv_row(row))
    return buffer.getvalue()
