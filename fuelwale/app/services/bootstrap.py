"""
Startup seeding.
"""

import logging
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from fuelwale.app.core.config import settings
from fuelwale.app.core.security import get_password_hash
from fuelwale.app.models.enums import UserRole
from fuelwale.app.models.user import User

logger = logging.getLogger("fuelwale.bootstrap")


async def ensure_bootstrap_admin(db: AsyncSession) -> bool:
    """Create the configured admin account when the user table is empty."""
    result = await db.execute(select(func.count(User.id)))
    if result.scalar():
        return False

    db.add(User(
        email=settings.bootstrap_admin_email,
        username=settings.bootstrap_admin_username,
        full_name="Administrator",
        hashed_password=get_password_hash(settings.bootstrap_admin_password),
        role=UserRole.ADMIN,
        is_active=True,
    ))
    await db.commit()
    logger.warning("Created bootstrap admin '%s'; change its password", settings.bootstrap_admin_username)
    return True
