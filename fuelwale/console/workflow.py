"""
Trip manager workflow.

Holds the form state of one trip as the operator moves it through
assign -> start -> load -> deliver -> end -> invoice. Every client-side
check runs before a request is sent; after each mutation the affected
lists and the bowser balance are fetched again from the server.
"""

import enum
import logging
import uuid
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from fuelwale.app.domain.quantities import format_liters, parse_decimal
from fuelwale.app.domain.vehicle_identity import match_vehicle
from fuelwale.console.client import ApiClient
from fuelwale.console.errors import ConsoleValidationError, VehicleResolutionError

logger = logging.getLogger("fuelwale.console.trips")


class Phase(str, enum.Enum):
    """Where the console is in one trip. ASSIGNED and ACTIVE match the server trip status."""
    NEW = "NEW"
    ASSIGNED = "ASSIGNED"
    ACTIVE = "ACTIVE"


def _new_key() -> str:
    return uuid.uuid4().hex


class DeliveryStep:
    """Client-side checks of one delivery, in the order the operator sees them."""

    @staticmethod
    def validate(entry: Optional[dict], qty, rate, balance: Optional[Decimal]) -> tuple:
        q = parse_decimal(qty)
        r = parse_decimal(rate)
        if not entry or q is None or r is None:
            raise ConsoleValidationError("Customer, qty and rate are required.")
        if q <= 0:
            raise ConsoleValidationError("Qty must be greater than 0")
        if r <= 0:
            raise ConsoleValidationError("Rate must be greater than 0")
        if balance is not None and q > balance:
            raise ConsoleValidationError(f"Insufficient stock. Only {format_liters(balance)} L left.")
        required = parse_decimal(entry.get("requiredQty"))
        if required is not None and q > required:
            raise ConsoleValidationError(f"Qty exceeds the pending requirement of {format_liters(required)} L")
        return q, r


class TripWorkflow:

    def __init__(self, client: ApiClient):
        self.client = client
        self.last_completed_trip_id: Optional[int] = None
        self.last_completed_trip_no: Optional[str] = None
        self.reset()

    def reset(self) -> None:
        """Back to the pre-assignment shape."""
        self.phase = Phase.NEW
        self.trip_id: Optional[int] = None
        self.trip_no: Optional[str] = None
        self.route_id: Optional[int] = None
        self.vehicle_no: Optional[str] = None
        self.seeded_count = 0
        self.start_km: Optional[Decimal] = None
        self.totalizer_start: Optional[Decimal] = None
        self.diesel_opening: Optional[Decimal] = None
        self.balance: Optional[Decimal] = None
        self.pending: List[dict] = []
        self.completed: List[dict] = []

    def _require(self, *phases: str, message: str) -> None:
        if self.phase not in phases:
            raise ConsoleValidationError(message)

    async def _resolve_vehicle(self, vehicle_no: str, route_id: Optional[int] = None) -> dict:
        params = {"routeId": route_id} if route_id else None
        vehicles = await self.client.get("/vehicles", params=params, fallback="Failed to load vehicles")
        vehicle = match_vehicle(vehicle_no, vehicles, key=lambda v: v.get("vehicleNo"))
        if vehicle is None:
            vehicle = match_vehicle(vehicle_no, vehicles, key=lambda v: v.get("displayNo"))
        if vehicle is None:
            raise VehicleResolutionError(vehicle_no)
        return vehicle

    async def preview_trip_no(self, order_id: int) -> str:
        data = await self.client.get("/trips/next-number", params={"orderId": order_id},
                                     fallback="Failed to compute trip number")
        return data["tripNo"]

    async def resume(self, trip_id: int) -> None:
        """Pick up an ASSIGNED or ACTIVE trip from the listing."""
        detail = await self.client.get(f"/trips/{trip_id}", fallback="Failed to load trip")
        if detail["status"] not in (Phase.ASSIGNED, Phase.ACTIVE):
            raise ConsoleValidationError(f"Trip {detail['tripNo']} is {detail['status']}")

        self.reset()
        self.phase = Phase(detail["status"])
        self.trip_id = detail["id"]
        self.trip_no = detail["tripNo"]
        self.route_id = detail["routeId"]
        self.vehicle_no = detail["vehicleNo"]
        self.start_km = parse_decimal(detail.get("startKm"))
        self.totalizer_start = parse_decimal(detail.get("totalizerStart"))
        if self.phase == Phase.ACTIVE:
            await self.refresh()

    async def assign(self, order_id, route_id, vehicle_no, driver_id, capacity, trip_no: Optional[str] = None) -> dict:
        self._require(Phase.NEW, message="Finish the current trip before assigning another")
        load = parse_decimal(capacity)
        if not order_id or not route_id or not vehicle_no or not driver_id or load is None:
            raise ConsoleValidationError("All fields are required")
        if load <= 0:
            raise ConsoleValidationError("Load to send must be greater than 0")

        vehicle = await self._resolve_vehicle(vehicle_no, route_id)

        result = await self.client.post(
            "/trips/assign",
            json={
                "tripNo": trip_no,
                "orderId": order_id,
                "routeId": route_id,
                "vehicleNo": vehicle["vehicleNo"],
                "driverId": driver_id,
                "capacity": str(load),
            },
            headers={"Idempotency-Key": _new_key()},
            fallback="Assignment failed",
        )

        self.phase = Phase.ASSIGNED
        self.trip_id = result["tripId"]
        self.trip_no = result["tripNo"]
        self.seeded_count = result["seededDeliveriesCount"]
        self.route_id = route_id
        self.vehicle_no = vehicle["vehicleNo"]
        if trip_no and trip_no != self.trip_no:
            logger.info("Server allocated trip number %s instead of %s", self.trip_no, trip_no)
        return result

    async def start(self, start_km, totalizer_start, route_id: Optional[int] = None, remarks: Optional[str] = None) -> dict:
        self._require(Phase.ASSIGNED, message="Assign the trip before starting it")
        km = parse_decimal(start_km)
        tot = parse_decimal(totalizer_start)
        if km is None or tot is None:
            raise ConsoleValidationError("Start KM and totalizer are required")
        if km < 0 or tot < 0:
            raise ConsoleValidationError("Start KM and totalizer must be non-negative")

        result = await self.client.post(
            "/trips/login",
            json={
                "tripId": self.trip_id,
                "startKm": str(km),
                "totalizerStart": str(tot),
                "routeId": route_id or self.route_id,
                "remarks": remarks,
            },
            fallback="Start trip failed",
        )

        self.phase = Phase.ACTIVE
        self.start_km = km
        self.totalizer_start = tot
        self.diesel_opening = parse_decimal(result["dieselOpening"])
        self.balance = self.diesel_opening
        self.pending = result.get("deliveries") or []
        return result

    async def stations(self) -> list:
        if not self.route_id:
            return []
        return await self.client.get(f"/loadings/stations/{self.route_id}", fallback="Failed to load stations")

    async def request_loading_code(self) -> dict:
        self._require(Phase.ASSIGNED, Phase.ACTIVE, message="No trip selected.")
        return await self.client.post("/loadings/generate-code", json={"tripId": self.trip_id},
                                      fallback="Failed to generate code")

    async def record_loading(self, station_id, product, qty, code: Optional[str] = None) -> dict:
        self._require(Phase.ASSIGNED, Phase.ACTIVE, message="No trip selected.")
        q = parse_decimal(qty)
        if not station_id or not product or not str(product).strip() or q is None:
            raise ConsoleValidationError("All fields are required.")
        if q <= 0:
            raise ConsoleValidationError("Qty must be greater than 0")

        await self._resolve_vehicle(self.vehicle_no)

        result = await self.client.post(
            "/loadings",
            json={
                "tripId": self.trip_id,
                "stationId": station_id,
                "product": str(product).strip(),
                "qty": str(q),
                "code": code,
            },
            fallback="Recording failed",
        )
        if self.phase == Phase.ACTIVE:
            await self._refresh_balance()
        return result

    async def _refresh_balance(self) -> None:
        data = await self.client.get(f"/bowserinventories/{self.trip_id}", fallback="Failed to load balance")
        self.balance = parse_decimal(data["balanceLiters"])

    async def refresh(self) -> None:
        """Re-read pending, completed and balance from the server."""
        self.pending = await self.client.get(f"/deliveries/pending/{self.trip_id}",
                                             fallback="Failed to load pending deliveries")
        self.completed = await self.client.get(f"/deliveries/completed/{self.trip_id}",
                                               fallback="Failed to load completed deliveries")
        await self._refresh_balance()

    async def deliver(self, pending_delivery_id, qty, rate) -> dict:
        self._require(Phase.ACTIVE, message="Start the trip before recording deliveries")
        entry = next((p for p in self.pending if p.get("id") == pending_delivery_id), None)
        q, r = DeliveryStep.validate(entry, qty, rate, self.balance)

        result = await self.client.post(
            "/deliveries",
            json={
                "tripId": self.trip_id,
                "pendingDeliveryId": pending_delivery_id,
                "qty": str(q),
                "rate": str(r),
            },
            headers={"Idempotency-Key": _new_key()},
            fallback="Delivery failed",
        )
        await self.refresh()
        return result

    async def end(self, end_km, totalizer_end) -> dict:
        self._require(Phase.ACTIVE, message="Start the trip before ending it")
        km = parse_decimal(end_km)
        tot = parse_decimal(totalizer_end)
        if km is None or tot is None:
            raise ConsoleValidationError("End KM and totalizer are required")
        if self.start_km is not None and km < self.start_km:
            raise ConsoleValidationError("End KM cannot be less than Start KM")
        if self.totalizer_start is not None and tot < self.totalizer_start:
            raise ConsoleValidationError("Totalizer End cannot be less than Start")

        result = await self.client.post(
            "/trips/logout",
            json={"tripId": self.trip_id, "endKm": str(km), "totalizerEnd": str(tot)},
            fallback="End trip failed",
        )

        self.last_completed_trip_id = self.trip_id
        self.last_completed_trip_no = self.trip_no
        self.reset()
        return result

    async def download_invoice(self, trip_id: Optional[int] = None, path: Optional[str] = None) -> Path:
        """Save the invoice PDF of a completed trip and return the file path."""
        trip_id = trip_id or self.last_completed_trip_id
        if not trip_id:
            raise ConsoleValidationError("No completed trip selected")

        content = await self.client.get_bytes(f"/trips/{trip_id}/invoice", fallback="Invoice generation failed")

        if path:
            target = Path(path)
        else:
            name = self.last_completed_trip_no if trip_id == self.last_completed_trip_id else trip_id
            target = Path(self.client.settings.invoice_dir) / f"invoice_{name}.pdf"
        target.write_bytes(content)
        logger.info("Invoice for trip %s saved to %s", trip_id, target)
        return target
