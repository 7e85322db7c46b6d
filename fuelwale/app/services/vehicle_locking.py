"""
Vehicle locks.

A vehicle is locked from trip start to trip end. The partial unique index
on `vehicle_locks(vehicle_id) WHERE released_at IS NULL` makes the second
concurrent start fail at flush time.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update, func as sql_func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fuelwale.app.core.exceptions import ConflictError
from fuelwale.app.models.trip import Trip
from fuelwale.app.models.trip_enums import TripStatus
from fuelwale.app.models.vehicle_lock import VehicleLock

logger = logging.getLogger("fuelwale.trips")


async def locking_trip_no(db: AsyncSession, vehicle_id: int) -> Optional[str]:
    """Trip number holding the vehicle, if any."""
    result = await db.execute(
        select(Trip.trip_no)
        .join(VehicleLock, VehicleLock.trip_id == Trip.id)
        .where(VehicleLock.vehicle_id == vehicle_id, VehicleLock.released_at.is_(None))
    )
    return result.scalar_one_or_none()


async def lock_vehicle(db: AsyncSession, trip: Trip, user_id: Optional[int] = None) -> VehicleLock:
    """
    Lock `trip.vehicle_id` for `trip`, inside the caller's transaction.

    On a clash the whole transaction is rolled back and ConflictError is
    raised naming the vehicle and, when it can be read, the holding trip.
    """
    vehicle_id, vehicle_no = trip.vehicle_id, trip.vehicle_no
    lock = VehicleLock(vehicle_id=vehicle_id, trip_id=trip.id, locked_by_user_id=user_id)
    db.add(lock)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        holder = await locking_trip_no(db, vehicle_id)
        logger.info("Vehicle %s already locked by trip %s", vehicle_no, holder)
        raise ConflictError(
            f"Vehicle {vehicle_no} is already on another ACTIVE trip",
            details={"lockedByTripNo": holder} if holder else None,
        )
    return lock


async def release_vehicle_lock(db: AsyncSession, vehicle_id: int, trip_id: int) -> bool:
    """Release the trip's lock. False when the trip held none."""
    result = await db.execute(
        update(VehicleLock)
        .where(
            VehicleLock.vehicle_id == vehicle_id,
            VehicleLock.trip_id == trip_id,
            VehicleLock.released_at.is_(None),
        )
        .values(released_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0


async def count_driver_active_trips(db: AsyncSession, driver_id: int) -> int:
    result = await db.execute(
        select(sql_func.count(Trip.id)).where(Trip.driver_id == driver_id, Trip.status == TripStatus.ACTIVE)
    )
    return result.scalar()
