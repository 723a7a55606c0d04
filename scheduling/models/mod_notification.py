from pydantic import BaseModel
from typing import Any, Dict, Optional
from datetime import datetime
from enum import Enum

class NotificationEvent(str, Enum):
    BOOKING_REQUESTED = "booking_requested"
    BOOKING_CONFIRMED = "booking_confirmed"
    BOOKING_REJECTED = "booking_rejected"
    BOOKING_AUTO_CANCELLED = "booking_auto_cancelled"
    BOOKING_CANCELLED = "booking_cancelled"
    BOOKING_COMPLETED = "booking_completed"

class Notification(BaseModel):
    id: Optional[str]
    recipient_id: str
    event: NotificationEvent
    title: str
    message: str
    payload: Dict[str, Any] = {}
    created_at: datetime
    read: bool = False

    class Config:
        from_attributes = True
