from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime, time
from scheduling.models.mod_booking import BookingStatus, CascadeError, ConfirmationResult

class BookingRequestCreate(BaseModel):
    client_id: str
    trainer_id: str
    date: date  # ISO 8601, e.g. 2025-03-10
    start_time: time = Field(description="Start time of one of the listed slots (e.g. 09:15)")
    duration_minutes: int = Field(gt=0, description="Session length in minutes")
    notes: Optional[str] = None

class BookingResponse(BaseModel):
    id: str
    client_id: str
    trainer_id: str
    date: date
    start_time: time
    end_time: time
    duration_minutes: int
    status: BookingStatus
    notes: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ConfirmationResponse(BaseModel):
    booking: BookingResponse
    confirmed: bool
    cascaded: List[BookingResponse]
    cascade_errors: List[CascadeError]
    partial_failure: bool

    @classmethod
    def from_result(cls, result: ConfirmationResult) -> "ConfirmationResponse":
        return cls(
            booking=BookingResponse.model_validate(result.booking),
            confirmed=result.confirmed,
            cascaded=[BookingResponse.model_validate(booking) for booking in result.cascaded],
            cascade_errors=result.cascade_errors,
            partial_failure=result.partial_failure
        )
