from datetime import time

MINUTES_PER_DAY = 24 * 60

def to_minutes(value: time) -> int:
    """Minutes since midnight, seconds are dropped"""
    return value.hour * 60 + value.minute

def from_minutes(minutes: int) -> time:
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"{minutes} minutes is outside a single day")
    return time(minutes // 60, minutes % 60)

def add_minutes(value: time, minutes: int) -> time:
    return from_minutes(to_minutes(value) + minutes)
