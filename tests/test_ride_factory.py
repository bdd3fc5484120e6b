import random
from decimal import ROUND_DOWN

import pytest
from pydantic import ValidationError

from ride_dispatch.engine.ride_factory import (
    DROPOFF_LOCATIONS,
    PICKUP_LOCATIONS,
    RIDER_NAMES,
    RideFactory,
)
from ride_dispatch.models.ride_model import RideStatus, RideType
from ride_dispatch.utils.helpers import format_amount


def _amount(value: str) -> float:
    whole, _, cents = value.partition(".")
    assert len(cents) == 2, value
    return float(value)


def test_generated_ride_fields_are_in_range(factory):
    for ride in factory.generate_many(200):
        assert ride.status == RideStatus.REQUESTED
        assert ride.rider.name in RIDER_NAMES
        assert ride.rider.phone.startswith("+1-555-")
        assert 3.5 <= ride.rider.rating <= 5.0
        assert 2 <= ride.distance_km < 17
        assert ride.estimated_duration_min == int(ride.distance_km // 0.5)
        assert 12 <= _amount(ride.fare.total) <= 32
        assert ride.fare.base_fare == "2.50"
        assert _amount(ride.fare.distance_fare) == pytest.approx(
            ride.distance_km * 1.5, abs=0.0051
        )
        assert ride.ride_type in set(RideType)


def test_coordinates_are_jittered_near_reference_points(factory):
    pickups = {address: (lat, lng) for address, lat, lng in PICKUP_LOCATIONS}
    dropoffs = {address: (lat, lng) for address, lat, lng in DROPOFF_LOCATIONS}

    for ride in factory.generate_many(100):
        ref_lat, ref_lng = pickups[ride.pickup.address]
        assert abs(ride.pickup.coordinates.lat - ref_lat) <= 0.025
        assert abs(ride.pickup.coordinates.lng - ref_lng) <= 0.025

        ref_lat, ref_lng = dropoffs[ride.dropoff.address]
        assert abs(ride.dropoff.coordinates.lat - ref_lat) <= 0.025
        assert abs(ride.dropoff.coordinates.lng - ref_lng) <= 0.025


def test_ids_are_unique(factory):
    rides = factory.generate_many(500)
    assert len({ride.id for ride in rides}) == 500


def test_same_seed_and_clocks_reproduce_rides():
    def build():
        return RideFactory(
            rng=random.Random(7), clock=lambda: 1.0, wall_clock=lambda: 1700000000.0
        )

    first = build().generate()
    second = build().generate()

    assert first.id == second.id
    assert first.id.startswith("ride_1700000000000_1_")
    assert first.rider == second.rider
    assert first.pickup == second.pickup
    assert first.fare == second.fare


def test_created_at_comes_from_injected_clock():
    ticks = iter([10.0, 11.5])
    factory = RideFactory(rng=random.Random(1), clock=lambda: next(ticks))

    assert factory.generate().created_at == 10.0
    assert factory.generate().created_at == 11.5


def test_generate_many_rejects_negative_count(factory):
    assert factory.generate_many(0) == []
    with pytest.raises(ValueError):
        factory.generate_many(-1)


def test_ride_is_immutable(factory):
    ride = factory.generate()
    with pytest.raises(ValidationError):
        ride.status = RideStatus.ACCEPTED

    accepted = ride.with_status(RideStatus.ACCEPTED)
    assert ride.status == RideStatus.REQUESTED
    assert accepted.status == RideStatus.ACCEPTED
    assert accepted.accepted_at is not None
    assert accepted.id == ride.id


def test_to_dict_uses_ui_field_names(factory):
    data = factory.generate().to_dict()

    assert data["status"] == "requested"
    assert set(data["fare"]) == {"total", "baseFare", "distanceFare", "timeFare"}
    assert "lat" in data["pickupLocation"]["coordinates"]
    assert data["acceptedAt"] is None


class _TopOfRangeRandom(random.Random):
    """Draws just below 1.0 so every uniform value sits at its upper bound."""

    def random(self):
        return 0.999999


def test_fare_total_stays_below_upper_bound():
    ride = RideFactory(rng=_TopOfRangeRandom(3)).generate()

    assert ride.fare.total == "31.99"
    assert ride.distance_km < 17


def test_format_amount_rounding_modes():
    assert format_amount(31.999) == "32.00"
    assert format_amount(31.999, rounding=ROUND_DOWN) == "31.99"
    assert format_amount(2.5) == "2.50"
