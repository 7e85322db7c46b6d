"""
Global trip serial allocation.

The serial lives in one `trip_sequences` row and is advanced with a single
`UPDATE ... RETURNING`, so two concurrent assignments can never receive the
same number. The row is seeded from the largest serial already present in
`trips.trip_no` the first time it is needed.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from fuelwale.app.domain.trips.trip_numbers import max_serial
from fuelwale.app.models.trip import Trip
from fuelwale.app.models.trip_sequence import TripSequence

logger = logging.getLogger("fuelwale.trips")

TRIP_SERIAL = "trip_serial"


def _insert_for(db: AsyncSession):
    if db.get_bind().dialect.name == "postgresql":
        return pg_insert
    return sqlite_insert


async def _existing_max_serial(db: AsyncSession) -> int:
    result = await db.execute(select(Trip.trip_no))
    return max_serial(result.scalars().all())


async def _ensure_sequence(db: AsyncSession) -> None:
    result = await db.execute(select(TripSequence.last_value).where(TripSequence.name == TRIP_SERIAL))
    if result.scalar_one_or_none() is not None:
        return

    seed = await _existing_max_serial(db)
    insert = _insert_for(db)
    await db.execute(
        insert(TripSequence)
        .values(name=TRIP_SERIAL, last_value=seed)
        .on_conflict_do_nothing(index_elements=["name"])
    )
    logger.info("Seeded trip serial sequence at %s", seed)


async def allocate_trip_serial(db: AsyncSession) -> int:
    """Atomically take the next global serial. Runs inside the caller's transaction."""
    await _ensure_sequence(db)
    result = await db.execute(
        update(TripSequence)
        .where(TripSequence.name == TRIP_SERIAL)
        .values(last_value=TripSequence.last_value + 1)
        .returning(TripSequence.last_value)
        .execution_options(synchronize_session=False)
    )
    return result.scalar_one()


async def peek_trip_serial(db: AsyncSession) -> int:
    """Serial the next assignment would most likely receive. Not reserved."""
    result = await db.execute(select(TripSequence.last_value).where(TripSequence.name == TRIP_SERIAL))
    last = result.scalar_one_or_none()
    if last is None:
        last = await _existing_max_serial(db)
    return last + 1
