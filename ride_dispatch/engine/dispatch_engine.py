"""
Dispatch Engine
Single-driver ride dispatch simulation: pending queue, popup and active ride
"""

import logging
from collections import OrderedDict
from typing import Callable, Dict, List, Optional

from ..models.events import DispatchEvent, DispatchEventType
from ..models.ride_model import RideRequest, RideStatus
from ..utils.helpers import get_ride_status_message
from .dispatch_clock import (
    DEFAULT_MAX_INTERVAL_MS,
    DEFAULT_MIN_INTERVAL_MS,
    DispatchClock,
)
from .exceptions import NoActiveRideError, RideConflictError, RideNotFoundError
from .ride_factory import RideFactory

logger = logging.getLogger(__name__)

# Factory ids carry an increasing sequence number, so only recent ids can recur
MAX_RESOLVED_IDS = 1000

Listener = Callable[[DispatchEvent], None]


class DispatchEngine:
    """
    Owns the dispatch state for one driver.

    State is mutated only through the command methods below. Commands are
    synchronous and run to completion on the event loop thread, so clock
    fires and driver commands never interleave.

    Invariants:
        - the popup, when set, is a member of the pending queue
        - at most one active ride; a second accept is rejected
        - a ride removed from the queue never re-enters it
        - going offline never clears the active ride
    """

    def __init__(
        self,
        factory: Optional[RideFactory] = None,
        clock: Optional[DispatchClock] = None,
        min_interval_ms: float = DEFAULT_MIN_INTERVAL_MS,
        max_interval_ms: float = DEFAULT_MAX_INTERVAL_MS,
        driver_id: Optional[str] = None,
    ):
        self.driver_id = driver_id
        self._factory = factory or RideFactory()
        self._clock = clock or DispatchClock()
        self._min_interval_ms = min_interval_ms
        self._max_interval_ms = max_interval_ms

        self._is_online = False
        self._pending: "OrderedDict[str, RideRequest]" = OrderedDict()
        self._popup_id: Optional[str] = None
        self._popup_accepted = False
        self._active_ride: Optional[RideRequest] = None
        self._resolved_ids: "OrderedDict[str, None]" = OrderedDict()
        self.max_resolved_ids = MAX_RESOLVED_IDS
        self._listeners: List[Listener] = []

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def is_online(self) -> bool:
        return self._is_online

    @property
    def pending_rides(self) -> List[RideRequest]:
        return list(self._pending.values())

    @property
    def current_popup(self) -> Optional[RideRequest]:
        if self._popup_id is None:
            return None
        return self._pending.get(self._popup_id)

    @property
    def active_ride(self) -> Optional[RideRequest]:
        return self._active_ride

    @property
    def popup_accepted(self) -> bool:
        """True when the most recent accept resolved the popup."""
        return self._popup_accepted

    def snapshot(self) -> Dict:
        popup = self.current_popup
        return {
            "driver_id": self.driver_id,
            "is_online": self._is_online,
            "pending_rides": [ride.to_dict() for ride in self._pending.values()],
            "popup": popup.to_dict() if popup else None,
            "popup_accepted": self._popup_accepted,
            "active_ride": self._active_ride.to_dict() if self._active_ride else None,
        }

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(
        self,
        event_type: DispatchEventType,
        ride: Optional[RideRequest] = None,
        via_popup: bool = False,
        message: Optional[str] = None,
    ) -> None:
        if not self._listeners:
            return

        event = DispatchEvent(
            event_type=event_type,
            ride=ride.to_dict() if ride else None,
            via_popup=via_popup,
            message=message,
            snapshot=self.snapshot(),
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Dispatch listener failed on {event_type.value}")

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def go_online(self) -> None:
        if self._is_online:
            return

        self._clock.arm(
            self._min_interval_ms, self._max_interval_ms, self._on_clock_fire
        )
        self._is_online = True
        logger.info(f"Driver {self.driver_id} is online")
        self._notify(DispatchEventType.WENT_ONLINE, message="You are online")

        self._add_new_ride()

    def go_offline(self) -> None:
        if not self._is_online:
            return

        self._is_online = False
        self._clock.disarm()
        for ride_id in self._pending:
            self._mark_resolved(ride_id)
        self._pending.clear()
        self._popup_id = None
        self._popup_accepted = False

        logger.info(
            f"Driver {self.driver_id} is offline, active ride: "
            f"{self._active_ride.id if self._active_ride else None}"
        )
        self._notify(DispatchEventType.WENT_OFFLINE, message="You are offline")

    def accept(self, ride_id: str) -> RideRequest:
        """
        Accept a pending ride and make it the active ride.

        Raises:
            RideNotFoundError: ride is not in the pending queue
            RideConflictError: another ride is already active
        """
        ride = self._pending.get(ride_id)
        if ride is None:
            raise RideNotFoundError(f"Ride {ride_id} is not pending", ride_id=ride_id)

        if self._active_ride is not None:
            raise RideConflictError(
                f"Ride {self._active_ride.id} is already active", ride_id=ride_id
            )

        del self._pending[ride_id]
        self._mark_resolved(ride_id)
        self._active_ride = ride.with_status(RideStatus.ACCEPTED)

        via_popup = self._popup_id == ride_id
        if via_popup:
            self._popup_id = None
            self._popup_accepted = True

        logger.info(f"Ride {ride_id} accepted (via_popup={via_popup})")
        self._notify(
            DispatchEventType.RIDE_ACCEPTED,
            ride=self._active_ride,
            via_popup=via_popup,
            message=get_ride_status_message(RideStatus.ACCEPTED.value),
        )
        return self._active_ride

    def decline(self, ride_id: str) -> None:
        """Remove a ride from the queue. Unknown ids are ignored."""
        ride = self._pending.pop(ride_id, None)
        if ride is None:
            logger.debug(f"Decline ignored, ride {ride_id} is not pending")
            return

        self._mark_resolved(ride_id)
        was_popup = self._popup_id == ride_id
        if was_popup:
            self._popup_id = None
            self._popup_accepted = False

        logger.info(f"Ride {ride_id} declined")
        self._notify(DispatchEventType.RIDE_DECLINED, ride=ride, via_popup=was_popup)

    def dismiss_popup(self) -> None:
        """Hide the popup; the ride stays in the pending queue."""
        if self._popup_id is None and not self._popup_accepted:
            return

        self._popup_id = None
        self._popup_accepted = False
        self._notify(DispatchEventType.POPUP_CHANGED)

    def complete_active_ride(self) -> RideRequest:
        return self._finish_active_ride(
            RideStatus.COMPLETED, DispatchEventType.RIDE_COMPLETED
        )

    def cancel_active_ride(self) -> RideRequest:
        return self._finish_active_ride(
            RideStatus.CANCELLED, DispatchEventType.RIDE_CANCELLED
        )

    def shutdown(self) -> None:
        """Release the clock and drop listeners."""
        self._clock.disarm()
        self._listeners.clear()
        logger.debug(f"Dispatch engine for driver {self.driver_id} shut down")

    def __enter__(self) -> "DispatchEngine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _finish_active_ride(
        self, status: RideStatus, event_type: DispatchEventType
    ) -> RideRequest:
        if self._active_ride is None:
            raise NoActiveRideError()

        finished = self._active_ride.with_status(status)
        self._active_ride = None
        self._popup_accepted = False

        logger.info(f"Ride {finished.id} {status.value}")
        self._notify(
            event_type,
            ride=finished,
            message=get_ride_status_message(status.value),
        )
        return finished

    def _mark_resolved(self, ride_id: str) -> None:
        self._resolved_ids[ride_id] = None
        while len(self._resolved_ids) > self.max_resolved_ids:
            self._resolved_ids.popitem(last=False)

    def _on_clock_fire(self) -> None:
        if not self._is_online:
            return
        self._add_new_ride()

    def _add_new_ride(self) -> None:
        ride = self._factory.generate()
        if ride.id in self._pending or ride.id in self._resolved_ids:
            logger.warning(f"Discarding duplicate ride id {ride.id}")
            return

        self._pending[ride.id] = ride
        self._popup_id = ride.id
        self._popup_accepted = False

        logger.info(f"New ride {ride.id} queued and presented")
        self._notify(
            DispatchEventType.RIDE_REQUESTED,
            ride=ride,
            via_popup=True,
            message=get_ride_status_message(RideStatus.REQUESTED.value),
        )
