"""
Console error types.

ConsoleValidationError: a client-side rule failed; nothing was sent.
ApiError: the server rejected the request; `message` is its own text.
VehicleResolutionError: a vehicle number matched no known vehicle.
"""

from typing import Optional


class ConsoleError(Exception):
    """Base console error."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConsoleValidationError(ConsoleError):
    pass


class VehicleResolutionError(ConsoleValidationError):

    def __init__(self, vehicle_no: str):
        self.vehicle_no = vehicle_no
        super().__init__(
            f"Vehicle '{vehicle_no}' was not found in the vehicle master. "
            "Fix the vehicle number before continuing."
        )


class ApiError(ConsoleError):

    def __init__(self, message: str, status_code: Optional[int] = None, error_code: Optional[str] = None):
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(message)
