"""
FastAPI Application Entry Point.

This is the main application file for the FuelWale trip backend.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from fuelwale.app.core.config import settings
from fuelwale.app.api.v1.router import router as api_v1_router
from fuelwale.app.core.observability import ObservabilityMiddleware, configure_logging
from fuelwale.app.core.redis_client import ping_redis
from fuelwale.app.db.session import engine, Base, AsyncSessionLocal
from fuelwale.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    integrity_exception_handler,
    generic_exception_handler
)
from fuelwale.app.services.bootstrap import ensure_bootstrap_admin

# Import models to ensure they are registered with Base
from fuelwale.app.models.user import User
from fuelwale.app.models.audit_log import AuditLog
from fuelwale.app.models.depot import Depot
from fuelwale.app.models.route import Route
from fuelwale.app.models.customer import Customer
from fuelwale.app.models.driver import Driver
from fuelwale.app.models.employee import Employee
from fuelwale.app.models.vehicle import Vehicle
from fuelwale.app.models.loading_station import LoadingStation
from fuelwale.app.models.order import Order, OrderItem
from fuelwale.app.models.trip import Trip
from fuelwale.app.models.trip_sequence import TripSequence
from fuelwale.app.models.pending_delivery import PendingDelivery
from fuelwale.app.models.delivery import Delivery
from fuelwale.app.models.bowser_inventory import BowserInventory
from fuelwale.app.models.loading import Loading
from fuelwale.app.models.vehicle_lock import VehicleLock
from fuelwale.app.models.fleet_allocation import FleetAllocation
from fuelwale.app.models.payment import Payment

logger = logging.getLogger("fuelwale")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Configures logging.
    2. Creates database tables.
    3. Seeds the bootstrap admin when no user exists.
    """
    configure_logging()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as db:
        await ensure_bootstrap_admin(db)
    logger.info("%s %s started", settings.app_name, settings.api_version)
    yield
    await engine.dispose()


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Fuel delivery trip backend: orders, trips, loadings, deliveries and invoices",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(IntegrityError, integrity_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        dict: Status, application information and Redis reachability
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "redis": await ping_redis(),
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": "Welcome to the FuelWale API",
        "docs": "/docs",
        "health": "/health",
    }
