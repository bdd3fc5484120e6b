"""
Helper Utilities
Common utility functions used across the application
"""

import math
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Tuple


def format_amount(amount: float, rounding: str = ROUND_HALF_UP) -> str:
    """
    Render a money amount as a 2-decimal string

    Args:
        amount: Amount in dollars
        rounding: decimal rounding mode (default: half up)

    Returns:
        Amount string such as "12.50"
    """
    return str(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=rounding))


def estimate_duration_minutes(distance_km: float, avg_speed_kmh: float = 30.0) -> int:
    """
    Calculate estimated trip duration in whole minutes

    Args:
        distance_km: Distance in kilometers
        avg_speed_kmh: Average speed in km/h (default: 30, i.e. 0.5 km per minute)

    Returns:
        Duration in minutes, rounded down
    """
    if distance_km <= 0:
        return 0

    km_per_minute = avg_speed_kmh / 60
    return math.floor(distance_km / km_per_minute)


def clamp_coordinates(latitude: float, longitude: float) -> Tuple[float, float]:
    """
    Clamp a coordinate pair into the valid latitude/longitude ranges

    Args:
        latitude: Latitude in degrees
        longitude: Longitude in degrees

    Returns:
        Tuple of (latitude, longitude)
    """
    lat = min(max(latitude, -90.0), 90.0)
    lon = min(max(longitude, -180.0), 180.0)
    return lat, lon


def get_ride_status_message(status: str) -> str:
    """
    Get driver-facing message for a ride status

    Args:
        status: Ride status

    Returns:
        User-friendly status message
    """
    messages = {
        "requested": "New ride request nearby",
        "accepted": "Ride accepted. Head to the pickup point",
        "completed": "Ride completed successfully",
        "cancelled": "Ride was cancelled",
    }

    return messages.get(status, "Unknown status")
