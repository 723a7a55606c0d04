from pydantic import BaseModel, field_validator, model_validator
from typing import List, Optional
from datetime import date, time
from enum import Enum
from scheduling.configuration.config import Config

class RecurrenceType(str, Enum):
    WEEKLY = "weekly"
    SPECIFIC_DATE = "specific_date"

class AvailabilityWindow(BaseModel):
    id: Optional[str] = None
    trainer_id: str
    start_time: time
    end_time: time
    recurrence_type: RecurrenceType
    day_of_week: Optional[int] = None        # 0-6, Monday first (date.weekday()), weekly windows only
    specific_date: Optional[date] = None     # Only for specific_date windows
    blocked: bool = False                    # True removes availability for the day
    session_durations: Optional[List[int]] = None  # None offers Config.DEFAULT_SESSION_DURATIONS

    class Config:
        from_attributes = True

    @field_validator('day_of_week')
    @classmethod
    def validate_day_of_week(cls, v):
        if v is not None and not (0 <= v <= 6):
            raise ValueError('day_of_week must be between 0 and 6')
        return v

    @field_validator('session_durations')
    @classmethod
    def validate_session_durations(cls, v):
        if v is not None and any(duration <= 0 for duration in v):
            raise ValueError('session_durations must be positive')
        return v

    @model_validator(mode='after')
    def validate_window(self):
        if self.start_time >= self.end_time:
            raise ValueError('end_time must be after start_time')
        if self.recurrence_type == RecurrenceType.WEEKLY:
            if self.day_of_week is None or self.specific_date is not None:
                raise ValueError('Weekly windows require day_of_week and no specific_date')
        elif self.specific_date is None or self.day_of_week is not None:
            raise ValueError('Specific date windows require specific_date and no day_of_week')
        return self

    def applies_to(self, day: date) -> bool:
        if self.recurrence_type == RecurrenceType.WEEKLY:
            return self.day_of_week == day.weekday()
        return self.specific_date == day

    def offered_durations(self) -> List[int]:
        if self.session_durations is None:
            return list(Config.DEFAULT_SESSION_DURATIONS)
        return list(self.session_durations)

    def offers_duration(self, duration_minutes: int) -> bool:
        return duration_minutes in self.offered_durations()
