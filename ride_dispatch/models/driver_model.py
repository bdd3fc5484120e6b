"""
Driver Model - Identity of the authenticated driver
"""

from typing import Optional

from pydantic import BaseModel, Field


class Driver(BaseModel):
    driver_id: str = Field(..., min_length=1, max_length=64)
    name: Optional[str] = Field(default=None, max_length=100)
    role: str = "driver"
