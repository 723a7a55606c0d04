from datetime import date, datetime, time, timezone
from fastapi import HTTPException
from scheduling.models.mod_booking import Booking, BookingStatus

class InvalidSlotError(HTTPException):
    """Requested range is not one of the generated slots"""
    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)

class SlotUnavailableError(HTTPException):
    """Range overlaps a booking the trainer already confirmed"""
    def __init__(self, detail: str):
        super().__init__(status_code=409, detail=detail)

class InvalidStateError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=409, detail=detail)

class BookingNotFoundError(HTTPException):
    def __init__(self, booking_id: str):
        super().__init__(status_code=404, detail=f"Booking {booking_id} not found")
        self.booking_id = booking_id

class BookingValidator:
    @staticmethod
    def _get_current_time():
        """Get current time as UTC timezone-aware datetime"""
        return datetime.now(timezone.utc)

    @staticmethod
    def validate_future_session(day: date, start_time: time):
        """Sessions are requested from tomorrow (UTC) onward, never for today or the past"""
        today = BookingValidator._get_current_time().date()
        if day <= today:
            raise InvalidSlotError(
                f"Sessions must be requested at least one day ahead, "
                f"{day.isoformat()} {start_time.strftime('%H:%M')} is too soon"
            )

    @staticmethod
    def validate_positive_minutes(name: str, value: int):
        """Durations and granularity are whole, positive minute counts"""
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidSlotError(f"{name} must be a positive number of minutes")

    @staticmethod
    def validate_transition(booking: Booking, status: BookingStatus):
        """Validate that the booking may move to the given status"""
        if not booking.can_transition_to(status):
            raise InvalidStateError(
                f"Booking {booking.id} is {booking.status.value} and cannot become {status.value}"
            )

    @staticmethod
    def validate_status(booking: Booking, expected: BookingStatus):
        """Validate that the booking is in the state the action applies to"""
        if booking.status != expected:
            raise InvalidStateError(
                f"Booking {booking.id} is {booking.status.value}, expected {expected.value}"
            )

    @staticmethod
    def validate_pending(booking: Booking):
        """Confirm and reject only act on pending requests"""
        BookingValidator.validate_status(booking, BookingStatus.PENDING)
