"""
Dispatch Routes
Driver commands against the ride dispatch simulation
"""

import logging

from fastapi import APIRouter, Depends

from ..engine.dispatch_engine import DispatchEngine
from ..engine.sessions import sessions
from ..models.driver_model import Driver
from ..utils.jwt_utils import get_current_driver

router = APIRouter()
logger = logging.getLogger(__name__)


# Handlers are async so engine commands run on the event loop,
# where the dispatch clock schedules its task.


async def get_driver_engine(
    current_driver: Driver = Depends(get_current_driver),
) -> DispatchEngine:
    return sessions.get_or_create(current_driver.driver_id)


@router.get("/state")
async def get_state(engine: DispatchEngine = Depends(get_driver_engine)):
    """Get the full dispatch state for the current driver"""
    return {"success": True, "state": engine.snapshot()}


@router.post("/online")
async def go_online(engine: DispatchEngine = Depends(get_driver_engine)):
    """Go online and start receiving ride requests"""
    engine.go_online()
    return {"success": True, "message": "You are online", "state": engine.snapshot()}


@router.post("/offline")
async def go_offline(engine: DispatchEngine = Depends(get_driver_engine)):
    """Go offline; an active ride is kept"""
    engine.go_offline()
    return {"success": True, "message": "You are offline", "state": engine.snapshot()}


@router.post("/rides/{ride_id}/accept")
async def accept_ride(ride_id: str, engine: DispatchEngine = Depends(get_driver_engine)):
    """
    Accept a pending ride
    Fails with 404 if the ride is not pending, 409 if a ride is already active
    """
    ride = engine.accept(ride_id)
    return {
        "success": True,
        "message": "Ride accepted successfully",
        "ride": ride.to_dict(),
        "state": engine.snapshot(),
    }


@router.post("/rides/{ride_id}/decline")
async def decline_ride(ride_id: str, engine: DispatchEngine = Depends(get_driver_engine)):
    """Decline a pending ride; unknown rides are ignored"""
    engine.decline(ride_id)
    return {"success": True, "message": "Ride declined", "state": engine.snapshot()}


@router.post("/popup/dismiss")
async def dismiss_popup(engine: DispatchEngine = Depends(get_driver_engine)):
    """Hide the ride popup and keep the ride in the pending list"""
    engine.dismiss_popup()
    return {"success": True, "message": "Popup dismissed", "state": engine.snapshot()}


@router.post("/active/complete")
async def complete_active_ride(engine: DispatchEngine = Depends(get_driver_engine)):
    """Complete the active ride"""
    ride = engine.complete_active_ride()
    return {
        "success": True,
        "message": "Ride completed successfully",
        "ride": ride.to_dict(),
        "state": engine.snapshot(),
    }


@router.post("/active/cancel")
async def cancel_active_ride(engine: DispatchEngine = Depends(get_driver_engine)):
    """Cancel the active ride"""
    ride = engine.cancel_active_ride()
    return {
        "success": True,
        "message": "Ride cancelled",
        "ride": ride.to_dict(),
        "state": engine.snapshot(),
    }
