"""
Ride Factory
Generates synthetic ride requests from fixed reference data
"""

import itertools
import random
import string
import time
from decimal import ROUND_DOWN
from typing import Callable, List, Optional

from ..models.ride_model import (
    Coordinates,
    Fare,
    Location,
    Rider,
    RideRequest,
    RideStatus,
    RideType,
)
from ..utils.helpers import clamp_coordinates, estimate_duration_minutes, format_amount

RIDER_NAMES = [
    "Alice Johnson", "Bob Smith", "Charlie Brown", "Diana Prince",
    "Eve Wilson", "Frank Miller", "Grace Lee", "Henry Davis",
    "Ivy Martinez", "Jack Wilson", "Kate Anderson", "Leo Chen",
    "Maria Garcia", "Noah Taylor", "Olivia White", "Paul Harris",
]

PICKUP_LOCATIONS = [
    ("123 Main St, Downtown", 40.7505, -73.9972),
    ("456 Oak Ave, Brooklyn", 40.6501, -73.9496),
    ("789 Pine Rd, Queens", 40.7282, -73.7949),
    ("321 Elm St, Manhattan", 40.7614, -73.9776),
    ("654 Maple Dr, Bronx", 40.8448, -73.8648),
    ("987 Cedar Lane, Staten Island", 40.5757, -74.1502),
    ("111 Park Ave, Upper West", 40.7851, -73.9745),
    ("222 5th Ave, Midtown", 40.7580, -73.9855),
]

DROPOFF_LOCATIONS = [
    ("JFK Airport Terminal 4", 40.6413, -73.7781),
    ("Grand Central Terminal", 40.7527, -73.9772),
    ("Times Square", 40.7580, -73.9855),
    ("Central Park", 40.7829, -73.9654),
    ("Brooklyn Bridge Park", 40.7014, -73.9934),
    ("High Line Park", 40.7505, -74.0021),
    ("Rockefeller Center", 40.7587, -73.9787),
    ("Empire State Building", 40.7484, -73.9857),
    ("Statue of Liberty", 40.6892, -74.0445),
    ("Madison Square Garden", 40.7505, -73.9934),
]

RIDE_TYPES = [RideType.STANDARD, RideType.COMFORT, RideType.PREMIUM]

COORDINATE_JITTER_DEG = 0.025
MIN_DISTANCE_KM = 2.0
DISTANCE_SPREAD_KM = 15.0
MIN_FARE = 12.0
FARE_SPREAD = 20.0
BASE_FARE = 2.50
PRICE_PER_KM = 1.5
PRICE_PER_MINUTE = 0.30
MIN_RATING = 3.5
RATING_SPREAD = 1.5

_ID_ALPHABET = string.digits + string.ascii_lowercase


class RideFactory:
    """Builds ``RideRequest`` records from an injected random source."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ):
        self._rng = rng or random.Random()
        self._clock = clock
        self._wall_clock = wall_clock
        self._sequence = itertools.count(1)

    def generate(self) -> RideRequest:
        """Generate a single ride request in ``requested`` status."""
        rng = self._rng

        rider_name = rng.choice(RIDER_NAMES)
        pickup = rng.choice(PICKUP_LOCATIONS)
        dropoff = rng.choice(DROPOFF_LOCATIONS)

        distance_km = MIN_DISTANCE_KM + rng.random() * DISTANCE_SPREAD_KM
        estimated_duration = estimate_duration_minutes(distance_km)
        total = MIN_FARE + rng.random() * FARE_SPREAD
        rating = round(MIN_RATING + rng.random() * RATING_SPREAD, 1)

        return RideRequest(
            id=self._next_id(),
            rider=Rider(
                name=rider_name,
                phone=f"+1-555-{rng.randrange(1000, 10000)}",
                rating=rating,
            ),
            pickup=self._jittered_location(pickup),
            dropoff=self._jittered_location(dropoff),
            fare=Fare(
                total=format_amount(total, rounding=ROUND_DOWN),
                base_fare=format_amount(BASE_FARE),
                distance_fare=format_amount(distance_km * PRICE_PER_KM),
                time_fare=format_amount(estimated_duration * PRICE_PER_MINUTE),
            ),
            distance_km=distance_km,
            estimated_duration_min=estimated_duration,
            ride_type=rng.choice(RIDE_TYPES),
            status=RideStatus.REQUESTED,
            created_at=self._clock(),
        )

    def generate_many(self, count: int = 5) -> List[RideRequest]:
        """Generate ``count`` independent ride requests."""
        if count < 0:
            raise ValueError("count must be non-negative")
        return [self.generate() for _ in range(count)]

    def _jittered_location(self, reference) -> Location:
        address, lat, lng = reference
        lat += (self._rng.random() - 0.5) * 2 * COORDINATE_JITTER_DEG
        lng += (self._rng.random() - 0.5) * 2 * COORDINATE_JITTER_DEG
        lat, lng = clamp_coordinates(lat, lng)
        return Location(address=address, coordinates=Coordinates(lat=lat, lng=lng))

    def _next_id(self) -> str:
        suffix = "".join(self._rng.choice(_ID_ALPHABET) for _ in range(5))
        return f"ride_{int(self._wall_clock() * 1000)}_{next(self._sequence)}_{suffix}"
