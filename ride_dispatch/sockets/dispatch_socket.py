"""
WebSocket dispatch feed for drivers.

This module provides:
- One live connection per driver (a new connection replaces the old one)
- Forwarding of dispatch engine events to the driver in emission order
- Driver commands over the socket (go online/offline, accept, decline, ...)
- Server-side heartbeat handling
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from ..engine.dispatch_engine import DispatchEngine
from ..engine.exceptions import DispatchError
from ..engine.sessions import sessions
from ..models.events import DispatchEvent
from .ws_auth import WebSocketAuthError, authenticate_websocket

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# CONFIGURATION
# =============================================================================

HEARTBEAT_INTERVAL_SECONDS = 15
SEND_TIMEOUT_SECONDS = 5
MAX_OUTBOX_SIZE = 256


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class DriverConnection:
    """A driver's WebSocket connection and its outbound queue."""

    websocket: WebSocket
    driver_id: str
    connected_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)
    outbox: asyncio.Queue = field(
        default_factory=lambda: asyncio.Queue(maxsize=MAX_OUTBOX_SIZE)
    )
    is_alive: bool = True
    sender_task: Optional[asyncio.Task] = None
    unsubscribe: Optional[Callable[[], None]] = None

    def update_activity(self) -> None:
        self.last_activity = time.time()

    def enqueue(self, message: dict) -> bool:
        """Queue a message for delivery. Returns False if the queue is full."""
        if not self.is_alive:
            return False
        try:
            self.outbox.put_nowait(message)
            return True
        except asyncio.QueueFull:
            logger.warning(f"Outbox full for driver {self.driver_id}, dropping message")
            return False


# =============================================================================
# CONNECTION MANAGER
# =============================================================================


class ConnectionManager:
    """Tracks driver connections and wires them to their dispatch engines."""

    def __init__(self):
        self._connections: Dict[str, DriverConnection] = {}

    async def connect(
        self, websocket: WebSocket, driver_id: str, engine: DispatchEngine
    ) -> DriverConnection:
        """Accept and register a new driver connection."""
        if driver_id in self._connections:
            logger.info(f"Closing existing connection for driver {driver_id}")
            await self.disconnect(driver_id, reason="New connection established")

        await websocket.accept()

        connection = DriverConnection(websocket=websocket, driver_id=driver_id)
        connection.sender_task = asyncio.create_task(self._sender_loop(connection))

        def forward(event: DispatchEvent) -> None:
            connection.enqueue(event.to_message())

        connection.unsubscribe = engine.subscribe(forward)
        self._connections[driver_id] = connection

        logger.info(f"WebSocket connected: driver_id={driver_id}")
        return connection

    async def disconnect(
        self, driver_id: str, reason: str = "Client disconnected"
    ) -> None:
        """Unsubscribe from the engine and close the connection."""
        connection = self._connections.pop(driver_id, None)
        if connection is None:
            return

        connection.is_alive = False
        if connection.unsubscribe:
            connection.unsubscribe()

        if connection.sender_task:
            connection.sender_task.cancel()
            try:
                await connection.sender_task
            except asyncio.CancelledError:
                pass

        try:
            await connection.websocket.close(
                code=status.WS_1000_NORMAL_CLOSURE, reason=reason
            )
        except Exception as e:
            # Already closed by the client
            logger.debug(f"Close failed for driver {driver_id}: {type(e).__name__}")

        logger.info(f"WebSocket disconnected: driver_id={driver_id}, reason={reason}")

    def get_connection(self, driver_id: str) -> Optional[DriverConnection]:
        return self._connections.get(driver_id)

    def is_connected(self, driver_id: str) -> bool:
        conn = self._connections.get(driver_id)
        return conn is not None and conn.is_alive

    async def _sender_loop(self, connection: DriverConnection) -> None:
        while connection.is_alive:
            message = await connection.outbox.get()
            try:
                await asyncio.wait_for(
                    connection.websocket.send_json(message),
                    timeout=SEND_TIMEOUT_SECONDS,
                )
                connection.update_activity()
            except asyncio.TimeoutError:
                logger.warning(
                    f"Send timeout for driver {connection.driver_id}, marking as dead"
                )
                connection.is_alive = False
            except (RuntimeError, WebSocketDisconnect) as e:
                logger.debug(
                    f"WebSocket not connected for {connection.driver_id}: {str(e)}"
                )
                connection.is_alive = False
            except Exception as e:
                logger.error(
                    f"Error sending to {connection.driver_id}: {type(e).__name__}: {str(e)}"
                )
                connection.is_alive = False

    def get_stats(self) -> dict:
        return {
            "active_connections": len(self._connections),
            "active_sessions": len(sessions),
        }


# =============================================================================
# GLOBAL MANAGER INSTANCE
# =============================================================================

manager = ConnectionManager()


# =============================================================================
# EVENT HANDLERS
# =============================================================================


def _ride_payload(ride) -> Optional[dict]:
    return ride.to_dict() if ride is not None else None


def _require_ride_id(data: dict) -> str:
    ride_id = data.get("ride_id")
    if not isinstance(ride_id, str) or not ride_id:
        raise ValueError("Missing ride_id")
    return ride_id


async def handle_go_online(engine: DispatchEngine, data: dict) -> Any:
    engine.go_online()


async def handle_go_offline(engine: DispatchEngine, data: dict) -> Any:
    engine.go_offline()


async def handle_accept(engine: DispatchEngine, data: dict) -> Any:
    return _ride_payload(engine.accept(_require_ride_id(data)))


async def handle_decline(engine: DispatchEngine, data: dict) -> Any:
    engine.decline(_require_ride_id(data))


async def handle_dismiss_popup(engine: DispatchEngine, data: dict) -> Any:
    engine.dismiss_popup()


async def handle_complete(engine: DispatchEngine, data: dict) -> Any:
    return _ride_payload(engine.complete_active_ride())


async def handle_cancel(engine: DispatchEngine, data: dict) -> Any:
    return _ride_payload(engine.cancel_active_ride())


EVENT_HANDLERS = {
    "go_online": handle_go_online,
    "go_offline": handle_go_offline,
    "accept": handle_accept,
    "decline": handle_decline,
    "dismiss_popup": handle_dismiss_popup,
    "complete": handle_complete,
    "cancel": handle_cancel,
}


def _error(message: str, code: str = "bad_request", command: str = None) -> dict:
    return {
        "event_type": "error",
        "code": code,
        "command": command,
        "message": message,
    }


async def handle_message(
    connection: DriverConnection, engine: DispatchEngine, raw_message: str
) -> None:
    """Parse one inbound message, run the command and queue the reply."""
    try:
        data = json.loads(raw_message)
    except json.JSONDecodeError:
        connection.enqueue(_error("Invalid JSON format"))
        return

    if not isinstance(data, dict):
        connection.enqueue(_error("Message must be a JSON object"))
        return

    event_type = data.get("event_type") or data.get("type")
    if not event_type:
        connection.enqueue(_error("Missing event_type"))
        return

    if event_type == "ping":
        connection.enqueue(
            {"event_type": "pong", "timestamp": datetime.utcnow().isoformat()}
        )
        return

    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        connection.enqueue(_error(f"Unknown event type: {event_type}"))
        return

    try:
        ride = await handler(engine, data)
    except DispatchError as e:
        connection.enqueue(_error(e.message, code=e.code, command=event_type))
        return
    except ValueError as e:
        connection.enqueue(_error(str(e), command=event_type))
        return

    connection.enqueue({"event_type": "ack", "command": event_type, "ride": ride})


# =============================================================================
# WEBSOCKET ENDPOINT
# =============================================================================


@router.websocket("/dispatch")
async def websocket_endpoint(websocket: WebSocket):
    """Driver dispatch feed: engine events out, driver commands in."""
    try:
        driver = await authenticate_websocket(websocket)
    except WebSocketAuthError as e:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(e))
        return

    driver_id = driver.driver_id
    engine = sessions.get_or_create(driver_id)
    connection = await manager.connect(websocket, driver_id, engine)

    connection.enqueue(
        {
            "event_type": "connected",
            "message": "Connected to dispatch feed",
            "driver_id": driver_id,
            "state": engine.snapshot(),
            "timestamp": datetime.utcnow().isoformat(),
        }
    )

    try:
        while connection.is_alive:
            try:
                raw_message = await asyncio.wait_for(
                    websocket.receive_text(), timeout=HEARTBEAT_INTERVAL_SECONDS
                )
            except asyncio.TimeoutError:
                continue

            connection.update_activity()
            await handle_message(connection, engine, raw_message)

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected normally: {driver_id}")
    except RuntimeError as e:
        logger.debug(f"WebSocket receive failed for {driver_id}: {str(e)}")

    finally:
        # Only tear down if this connection was not already replaced
        if manager.get_connection(driver_id) is connection:
            await manager.disconnect(driver_id, reason="Connection ended")


# =============================================================================
# ADMIN ENDPOINT
# =============================================================================


@router.get("/stats")
async def get_websocket_stats():
    """Get WebSocket statistics for monitoring."""
    return {"success": True, "data": manager.get_stats()}
