"""
JWT Utilities
Handles JWT token creation, verification, and driver authentication
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from ..config import get_settings
from ..models.driver_model import Driver

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT access token

    Args:
        data: Dictionary containing user information
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    settings = get_settings()
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(hours=settings.access_token_expire_hours)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> Optional[dict]:
    """
    Verify and decode JWT token

    Returns:
        Decoded token payload or None if invalid
    """
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.warning(f"Token verification failed: {str(e)}")
        return None


def driver_from_payload(payload: Optional[dict]) -> Optional[Driver]:
    """Build the driver identity from a token payload, None if not a driver token"""
    if not payload:
        return None

    user_id = payload.get("user_id")
    if not user_id or payload.get("role") != "driver":
        return None

    return Driver(driver_id=user_id, name=payload.get("name"))


async def get_current_driver(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Driver:
    """
    Get current authenticated driver from JWT token
    Used as dependency in protected routes

    Raises:
        HTTPException: If token is invalid or does not belong to a driver
    """
    payload = verify_token(credentials.credentials)
    if payload is None or not payload.get("user_id"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    driver = driver_from_payload(payload)
    if driver is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Driver access required",
        )

    return driver
