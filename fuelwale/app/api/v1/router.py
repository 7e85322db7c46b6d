"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from fuelwale.app.api.v1.endpoints import (
    auth, users, sales_associates,
    depots, routes, customers, drivers, vehicles, loading_stations,
    orders, payments,
    trips, loadings, deliveries, invoices, fleets,
)

router = APIRouter()

# Session and user management
router.include_router(auth.router)
router.include_router(users.router)
router.include_router(sales_associates.router)

# Reference data
router.include_router(depots.router)
router.include_router(routes.router)
router.include_router(customers.router)
router.include_router(drivers.router)
router.include_router(drivers.employees_router)
router.include_router(vehicles.router)
router.include_router(loading_stations.router)

# Orders and payments
router.include_router(orders.router)
router.include_router(payments.router)

# Trip lifecycle
router.include_router(trips.router)
router.include_router(loadings.router)
router.include_router(deliveries.router)
router.include_router(deliveries.bowser_router)

# Reporting
router.include_router(invoices.router)
router.include_router(fleets.router)
