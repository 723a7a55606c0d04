from pydantic import BaseModel
from typing import List
from datetime import date, time

class SlotResponse(BaseModel):
    start_time: time
    end_time: time
    has_pending_requests: bool
    pending_request_count: int

    class Config:
        from_attributes = True

class SlotListResponse(BaseModel):
    trainer_id: str
    date: date
    duration_minutes: int
    granularity_minutes: int
    slots: List[SlotResponse]

class DurationListResponse(BaseModel):
    trainer_id: str
    date: date
    durations: List[int]
