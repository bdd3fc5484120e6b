"""
Dispatch simulation engine.

This package handles:
    - Generating synthetic ride requests
    - Scheduling ride arrivals at randomized intervals
    - The single-driver dispatch state machine
    - Per-driver engine sessions
"""

from .dispatch_clock import DispatchClock
from .dispatch_engine import DispatchEngine
from .exceptions import (
    DispatchError,
    NoActiveRideError,
    RideConflictError,
    RideNotFoundError,
)
from .ride_factory import RideFactory

__all__ = [
    "DispatchClock",
    "DispatchEngine",
    "RideFactory",
    # Exceptions
    "DispatchError",
    "NoActiveRideError",
    "RideConflictError",
    "RideNotFoundError",
]
