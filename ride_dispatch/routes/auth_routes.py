"""
Authentication Routes
Issues driver tokens for the dispatch simulator
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from ..models.driver_model import Driver
from ..utils.jwt_utils import create_access_token, get_current_driver

router = APIRouter()
logger = logging.getLogger(__name__)


class DriverTokenRequest(BaseModel):
    driver_id: str = Field(..., min_length=1, max_length=64)
    name: Optional[str] = Field(default=None, max_length=100)


@router.post("/driver-token", status_code=status.HTTP_201_CREATED)
async def issue_driver_token(data: DriverTokenRequest):
    """
    Issue a driver token
    The simulator has no user store, so any driver id is accepted
    """
    token = create_access_token(
        {"user_id": data.driver_id, "role": "driver", "name": data.name}
    )
    logger.info(f"Issued driver token for {data.driver_id}")

    return {
        "success": True,
        "message": "Token issued",
        "token": token,
        "driver": Driver(driver_id=data.driver_id, name=data.name).model_dump(),
    }


@router.get("/me")
async def get_me(current_driver: Driver = Depends(get_current_driver)):
    """Get the driver identity behind the bearer token"""
    return {"success": True, "driver": current_driver.model_dump()}
