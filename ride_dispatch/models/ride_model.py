"""
Ride Model - Synthetic ride requests presented to a driver
Status flow: requested → accepted → completed/cancelled
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RideType(str, Enum):
    STANDARD = "Standard"
    COMFORT = "Comfort"
    PREMIUM = "Premium"


class RideStatus(str, Enum):
    REQUESTED = "requested"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    coordinates: Coordinates


class Rider(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    phone: str
    rating: float = Field(..., ge=0, le=5)


class Fare(BaseModel):
    """Fare breakdown, every amount a 2-decimal string"""

    model_config = ConfigDict(frozen=True)

    total: str = Field(..., pattern=r"^\d+\.\d{2}$")
    base_fare: str = Field(..., pattern=r"^\d+\.\d{2}$")
    distance_fare: str = Field(..., pattern=r"^\d+\.\d{2}$")
    time_fare: str = Field(default="0.00", pattern=r"^\d+\.\d{2}$")


class RideRequest(BaseModel):
    """
    A ride request as seen by the driver.

    Instances are immutable. The dispatch engine moves a ride through its
    lifecycle by replacing it with a copy carrying the new status.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    rider: Rider
    pickup: Location
    dropoff: Location
    fare: Fare
    distance_km: float = Field(..., gt=0)
    estimated_duration_min: int = Field(..., ge=0)
    ride_type: RideType
    status: RideStatus = RideStatus.REQUESTED

    # Monotonic creation time, used for ordering only
    created_at: float

    # Wall-clock lifecycle timestamps
    requested_at: datetime = Field(default_factory=datetime.utcnow)
    accepted_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    def with_status(self, status: RideStatus) -> "RideRequest":
        """Return a copy moved to ``status`` with the matching timestamp set."""
        update = {"status": status}
        if status == RideStatus.ACCEPTED:
            update["accepted_at"] = datetime.utcnow()
        elif status in (RideStatus.COMPLETED, RideStatus.CANCELLED):
            update["finished_at"] = datetime.utcnow()
        return self.model_copy(update=update)

    def to_dict(self) -> dict:
        """Convert ride to the dictionary shape used by the driver UI"""
        return {
            "id": self.id,
            "rider": {
                "name": self.rider.name,
                "phone": self.rider.phone,
                "rating": self.rider.rating,
            },
            "pickupLocation": {
                "address": self.pickup.address,
                "coordinates": {
                    "lat": self.pickup.coordinates.lat,
                    "lng": self.pickup.coordinates.lng,
                },
            },
            "dropoffLocation": {
                "address": self.dropoff.address,
                "coordinates": {
                    "lat": self.dropoff.coordinates.lat,
                    "lng": self.dropoff.coordinates.lng,
                },
            },
            "fare": {
                "total": self.fare.total,
                "baseFare": self.fare.base_fare,
                "distanceFare": self.fare.distance_fare,
                "timeFare": self.fare.time_fare,
            },
            "distanceKm": self.distance_km,
            "estimatedDurationMin": self.estimated_duration_min,
            "rideType": self.ride_type.value,
            "status": self.status.value,
            "createdAt": self.created_at,
            "requestedAt": self.requested_at.isoformat(),
            "acceptedAt": self.accepted_at.isoformat() if self.accepted_at else None,
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
        }

    def __str__(self):
        return f"RideRequest({self.id}, {self.status.value})"
