"""
Shared enumerations for FuelWale records.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        ADMIN: Full access to every screen and endpoint
        EXECUTIVE: Office staff who assign and supervise trips
        DRIVER: Starts, loads, delivers and ends their own trips (default role)
        VEHICLE_ADMIN: Maintains vehicles and fleet allocation
        TRANSPORTER: Read access to fleet and trips
        ACCOUNTS: Payments and invoices
        SALES_ASSOCIATE: Depot sales desk; takes orders and assigns trips
    """
    ADMIN = "a"
    EXECUTIVE = "e"
    DRIVER = "d"
    VEHICLE_ADMIN = "va"
    TRANSPORTER = "tr"
    ACCOUNTS = "ac"
    SALES_ASSOCIATE = "s"


class RecordStatus(str, enum.Enum):
    """Active flag used by the reference-data masters."""
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class PaymentStatus(str, enum.Enum):
    """
    Payment status.

    DRAFT payments are editable; SUBMITTED payments are read-only until reset.
    """
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
