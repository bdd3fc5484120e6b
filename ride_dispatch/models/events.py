"""
Dispatch Event Models
Defines the structured events the dispatch engine emits to observers
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class DispatchEventType(str, Enum):
    WENT_ONLINE = "went_online"
    WENT_OFFLINE = "went_offline"
    RIDE_REQUESTED = "ride_requested"
    POPUP_CHANGED = "popup_changed"
    RIDE_ACCEPTED = "ride_accepted"
    RIDE_DECLINED = "ride_declined"
    RIDE_COMPLETED = "ride_completed"
    RIDE_CANCELLED = "ride_cancelled"


class DispatchEvent(BaseModel):
    """Event emitted after every engine state change"""

    event_type: DispatchEventType
    ride: Optional[Dict[str, Any]] = None
    via_popup: bool = False
    message: Optional[str] = None
    snapshot: Dict[str, Any]
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    def to_message(self) -> dict:
        """Serialize for the WebSocket feed"""
        return self.model_dump(mode="json")
