from datetime import date
from typing import Iterable, List, Optional
from scheduling.configuration.config import Config
from scheduling.configuration.monitor import log_event, log_exception, start_span
from scheduling.models.mod_availability import AvailabilityWindow, RecurrenceType
from scheduling.models.mod_booking import BookingStatus, CandidateSlot
from scheduling.models.mod_time import from_minutes, to_minutes
from scheduling.services.svc_conflicts import ConflictDetector
from scheduling.validators.val_booking import BookingValidator

class SlotService:
    @staticmethod
    def active_windows(windows: Iterable[AvailabilityWindow], day: date) -> List[AvailabilityWindow]:
        """
        Windows that make the trainer bookable on the given date.

        A blocked specific-date window suppresses every weekly window for that
        date. Blocked windows never produce slots themselves.
        """
        matching = [window for window in windows if window.applies_to(day)]
        date_windows = [window for window in matching if window.recurrence_type == RecurrenceType.SPECIFIC_DATE]
        if any(window.blocked for window in date_windows):
            matching = date_windows
        return [window for window in matching if not window.blocked]

    @staticmethod
    def generate_candidates(
        windows: Iterable[AvailabilityWindow],
        day: date,
        duration_minutes: int,
        granularity_minutes: int
    ) -> List[CandidateSlot]:
        """Step through each active window; identical start times from overlapping windows appear once"""
        candidates = {}
        for window in SlotService.active_windows(windows, day):
            if not window.offers_duration(duration_minutes):
                continue
            cursor = to_minutes(window.start_time)
            window_end = to_minutes(window.end_time)
            while cursor + duration_minutes <= window_end:
                if cursor not in candidates:
                    candidates[cursor] = CandidateSlot(
                        date=day,
                        start_time=from_minutes(cursor),
                        end_time=from_minutes(cursor + duration_minutes)
                    )
                cursor += granularity_minutes
        return [candidates[start] for start in sorted(candidates)]

    @staticmethod
    def available_durations(windows: Iterable[AvailabilityWindow], day: date) -> List[int]:
        """Session lengths the trainer offers on the date, empty when no window is active"""
        durations = set()
        for window in SlotService.active_windows(windows, day):
            durations.update(window.offered_durations())
        return sorted(durations)

    @staticmethod
    def list_durations(availability_store, trainer_id: str, day: date, timeout: Optional[float] = None) -> List[int]:
        try:
            with start_span("list_durations", attributes={"trainer_id": trainer_id, "date": day.isoformat()}):
                windows = availability_store.list_windows(trainer_id, day, timeout=timeout)
                return SlotService.available_durations(windows, day)
        except Exception as e:
            log_exception(e, {"operation": "list_durations", "trainer_id": trainer_id, "date": day.isoformat()})
            raise

    @staticmethod
    def generate_slots(
        availability_store,
        trainer_id: str,
        day: date,
        duration_minutes: int,
        granularity_minutes: Optional[int] = None,
        timeout: Optional[float] = None
    ) -> List[CandidateSlot]:
        """Candidate slots from the trainer's availability, ignoring existing bookings"""
        if granularity_minutes is None:
            granularity_minutes = Config.SLOT_GRANULARITY_MINUTES
        BookingValidator.validate_positive_minutes("duration_minutes", duration_minutes)
        BookingValidator.validate_positive_minutes("granularity_minutes", granularity_minutes)
        try:
            with start_span("generate_slots", attributes={"trainer_id": trainer_id, "date": day.isoformat()}):
                windows = availability_store.list_windows(trainer_id, day, timeout=timeout)
                slots = SlotService.generate_candidates(windows, day, duration_minutes, granularity_minutes)
                log_event("Slots generated", {
                    "trainer_id": trainer_id,
                    "date": day.isoformat(),
                    "duration_minutes": duration_minutes,
                    "windows": len(windows),
                    "count": len(slots)
                })
                return slots
        except Exception as e:
            log_exception(e, {"operation": "generate_slots", "trainer_id": trainer_id, "date": day.isoformat()})
            raise

    @staticmethod
    def list_bookable_slots(
        availability_store,
        booking_store,
        trainer_id: str,
        day: date,
        duration_minutes: int,
        granularity_minutes: Optional[int] = None,
        timeout: Optional[float] = None
    ) -> List[CandidateSlot]:
        """
        Slots a client can pick from.

        Confirmed bookings remove overlapping slots. Pending requests leave the
        slot on offer but flag it, since several clients may request it.
        """
        slots = SlotService.generate_slots(
            availability_store, trainer_id, day, duration_minutes, granularity_minutes, timeout=timeout
        )
        if not slots:
            return slots
        try:
            with start_span("list_bookable_slots", attributes={"trainer_id": trainer_id, "date": day.isoformat()}):
                active_bookings = booking_store.list_active(trainer_id, day, timeout=timeout)
                bookable = []
                for slot in slots:
                    if not ConflictDetector.is_bookable(slot, active_bookings):
                        continue
                    pending = ConflictDetector.overlapping(slot, active_bookings, statuses=(BookingStatus.PENDING,))
                    bookable.append(slot.model_copy(update={
                        "has_pending_requests": bool(pending),
                        "pending_request_count": len(pending)
                    }))
                log_event("Bookable slots listed", {
                    "trainer_id": trainer_id,
                    "date": day.isoformat(),
                    "generated": len(slots),
                    "bookable": len(bookable)
                })
                return bookable
        except Exception as e:
            log_exception(e, {"operation": "list_bookable_slots", "trainer_id": trainer_id, "date": day.isoformat()})
            raise
