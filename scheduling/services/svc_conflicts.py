from datetime import time
from typing import Iterable, List, Optional, Sequence
from scheduling.models.mod_booking import Booking, BookingStatus
from scheduling.models.mod_time import to_minutes

class ConflictDetector:
    @staticmethod
    def overlaps(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
        """Half-open ranges: a session ending when another starts does not conflict"""
        return to_minutes(a_start) < to_minutes(b_end) and to_minutes(a_end) > to_minutes(b_start)

    @staticmethod
    def overlapping(
        candidate,
        bookings: Iterable[Booking],
        statuses: Optional[Sequence[BookingStatus]] = None,
        exclude_ids: Iterable[str] = ()
    ) -> List[Booking]:
        """Bookings whose range overlaps the candidate's (any object with start_time/end_time)"""
        excluded = set(exclude_ids)
        return [
            booking for booking in bookings
            if booking.id not in excluded
            and (statuses is None or booking.status in statuses)
            and ConflictDetector.overlaps(candidate.start_time, candidate.end_time,
                                          booking.start_time, booking.end_time)
        ]

    @staticmethod
    def is_free(candidate, active_bookings: Iterable[Booking], exclude_ids: Iterable[str] = ()) -> bool:
        """True when no pending or confirmed booking overlaps the candidate"""
        return not ConflictDetector.overlapping(
            candidate,
            active_bookings,
            statuses=(BookingStatus.PENDING, BookingStatus.CONFIRMED),
            exclude_ids=exclude_ids
        )

    @staticmethod
    def is_bookable(candidate, active_bookings: Iterable[Booking], exclude_ids: Iterable[str] = ()) -> bool:
        """Display rule: only confirmed bookings take a slot away, pending ones are informational"""
        return not ConflictDetector.overlapping(
            candidate,
            active_bookings,
            statuses=(BookingStatus.CONFIRMED,),
            exclude_ids=exclude_ids
        )
