"""
Row lookup helpers shared by the endpoints.
"""

from typing import Type, TypeVar
from sqlalchemy.ext.asyncio import AsyncSession

from fuelwale.app.core.exceptions import ResourceNotFoundError

M = TypeVar("M")


async def get_or_404(db: AsyncSession, model: Type[M], obj_id: int, resource: str = None) -> M:
    """Fetch a row by primary key or raise ResourceNotFoundError."""
    obj = await db.get(model, obj_id)
    if obj is None:
        raise ResourceNotFoundError(resource or model.__name__, obj_id)
    return obj


def apply_updates(obj, changes: dict) -> None:
    """Copy the explicitly provided fields of an update payload onto a row."""
    for name, value in changes.items():
        setattr(obj, name, value)
