from pydantic import BaseModel, model_validator
from typing import List, Optional
from datetime import date, datetime, time
from enum import Enum
from scheduling.models.mod_time import to_minutes

class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

# Allowed status changes; cancelled and completed are terminal
BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
    BookingStatus.CANCELLED: set(),
    BookingStatus.COMPLETED: set(),
}

ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)

class Booking(BaseModel):
    id: Optional[str] = None
    client_id: str
    trainer_id: str
    date: date
    start_time: time
    end_time: time
    duration_minutes: int
    status: BookingStatus = BookingStatus.PENDING
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @model_validator(mode='after')
    def validate_range(self):
        if self.duration_minutes <= 0:
            raise ValueError('duration_minutes must be positive')
        if to_minutes(self.end_time) - to_minutes(self.start_time) != self.duration_minutes:
            raise ValueError('end_time must equal start_time plus duration_minutes')
        return self

    def can_transition_to(self, status: BookingStatus) -> bool:
        return status in BOOKING_TRANSITIONS[self.status]

class CandidateSlot(BaseModel):
    date: date
    start_time: time
    end_time: time
    has_pending_requests: bool = False
    pending_request_count: int = 0

class CascadeError(BaseModel):
    booking_id: str
    error: str

class ConfirmationResult(BaseModel):
    booking: Booking
    confirmed: bool = True
    cascaded: List[Booking] = []
    cascade_errors: List[CascadeError] = []

    @property
    def partial_failure(self) -> bool:
        """Confirmation stands but some overlapping requests could not be cancelled"""
        return bool(self.cascade_errors)
