"""Exceptions raised by the dispatch engine."""


class DispatchError(Exception):
    """Base class for recoverable dispatch errors."""

    code = "dispatch_error"

    def __init__(self, message: str, ride_id: str = None):
        super().__init__(message)
        self.message = message
        self.ride_id = ride_id


class RideConflictError(DispatchError):
    """Raised when a ride is accepted while another ride is active."""

    code = "ride_conflict"


class NoActiveRideError(DispatchError):
    """Raised when completing or cancelling with no active ride."""

    code = "no_active_ride"

    def __init__(self, message: str = "No active ride"):
        super().__init__(message)


class RideNotFoundError(DispatchError):
    """Raised when a ride id is not in the pending queue."""

    code = "ride_not_found"
