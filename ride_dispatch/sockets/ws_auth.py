"""
WebSocket Authentication Utility
Handles JWT authentication for WebSocket connections
"""

import logging
from typing import Optional

from fastapi import WebSocket

from ..models.driver_model import Driver
from ..utils.jwt_utils import driver_from_payload, verify_token

logger = logging.getLogger(__name__)


class WebSocketAuthError(Exception):
    """Raised when a WebSocket connection cannot be authenticated"""


def _extract_token(websocket: WebSocket) -> Optional[str]:
    # Query parameter first, then Authorization header
    token = websocket.query_params.get("token")
    if token:
        return token

    auth_header = websocket.headers.get("authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1]

    return None


async def authenticate_websocket(websocket: WebSocket) -> Driver:
    """
    Authenticate WebSocket connection using JWT token

    Returns:
        The authenticated driver

    Raises:
        WebSocketAuthError if authentication fails
    """
    token = _extract_token(websocket)
    if not token:
        logger.warning("WebSocket connection rejected: Missing authentication token")
        raise WebSocketAuthError("Missing authentication token")

    payload = verify_token(token)
    if payload is None:
        logger.warning("WebSocket connection rejected: Invalid or expired token")
        raise WebSocketAuthError("Invalid or expired token")

    driver = driver_from_payload(payload)
    if driver is None:
        logger.warning(
            f"WebSocket connection rejected: not a driver token - "
            f"user_id={payload.get('user_id')}, role={payload.get('role')}"
        )
        raise WebSocketAuthError("Driver access required")

    logger.info(f"WebSocket authenticated: driver_id={driver.driver_id}")
    return driver
