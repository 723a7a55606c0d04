import uuid
from datetime import date, time
from typing import List, Optional
from scheduling.configuration.monitor import log_event, log_exception, start_span
from scheduling.models.mod_booking import Booking, BookingStatus
from scheduling.models.mod_notification import NotificationEvent
from scheduling.models.mod_time import add_minutes
from scheduling.services.svc_conflicts import ConflictDetector
from scheduling.services.svc_locks import trainer_date_locks
from scheduling.services.svc_notification import NotificationService, notify_safely
from scheduling.services.svc_slots import SlotService
from scheduling.validators.val_booking import BookingValidator, InvalidSlotError, SlotUnavailableError

class BookingService:
    @staticmethod
    def request_booking(
        availability_store,
        booking_store,
        notifier,
        client_id: str,
        trainer_id: str,
        day: date,
        start_time: time,
        duration_minutes: int,
        notes: Optional[str] = None,
        timeout: Optional[float] = None
    ) -> Booking:
        """
        Create a pending booking for one of the trainer's generated slots.

        Other pending requests for the same range never block the request: the
        trainer picks one of them later. A confirmed booking on the range does.
        """
        try:
            with start_span("request_booking", attributes={
                "client_id": client_id,
                "trainer_id": trainer_id
            }):
                log_event("Booking request started", {
                    "client_id": client_id,
                    "trainer_id": trainer_id,
                    "date": day.isoformat(),
                    "start_time": start_time.isoformat(),
                    "duration_minutes": duration_minutes
                })

                BookingValidator.validate_positive_minutes("duration_minutes", duration_minutes)
                BookingValidator.validate_future_session(day, start_time)

                with trainer_date_locks.hold(trainer_id, day):
                    slots = SlotService.generate_slots(
                        availability_store, trainer_id, day, duration_minutes, timeout=timeout
                    )
                    requested_start = start_time.replace(second=0, microsecond=0)
                    slot = next((s for s in slots if s.start_time == requested_start), None)
                    if slot is None or start_time != requested_start:
                        raise InvalidSlotError(
                            f"{start_time.strftime('%H:%M')} for {duration_minutes} minutes "
                            f"is not an available slot on {day.isoformat()}"
                        )

                    active_bookings = booking_store.list_active(trainer_id, day, timeout=timeout)
                    if not ConflictDetector.is_bookable(slot, active_bookings):
                        raise SlotUnavailableError(
                            f"The trainer already confirmed a session overlapping {slot.start_time.strftime('%H:%M')}"
                        )

                    booking = Booking(
                        id=str(uuid.uuid4()),
                        client_id=client_id,
                        trainer_id=trainer_id,
                        date=day,
                        start_time=slot.start_time,
                        end_time=add_minutes(slot.start_time, duration_minutes),
                        duration_minutes=duration_minutes,
                        status=BookingStatus.PENDING,
                        notes=notes
                    )
                    booking = booking_store.insert(booking, timeout=timeout)

                pending_overlaps = ConflictDetector.overlapping(
                    booking, active_bookings, statuses=(BookingStatus.PENDING,)
                )
                log_event("Booking requested successfully", {
                    "booking_id": booking.id,
                    "client_id": client_id,
                    "trainer_id": trainer_id,
                    "competing_requests": len(pending_overlaps)
                })

                notify_safely(
                    notifier,
                    NotificationEvent.BOOKING_REQUESTED,
                    trainer_id,
                    NotificationService.booking_payload(booking, competing_requests=len(pending_overlaps))
                )
                return booking
        except Exception as e:
            log_exception(e, {
                "operation": "request_booking",
                "client_id": client_id,
                "trainer_id": trainer_id
            })
            raise

    @staticmethod
    def get_booking(booking_store, booking_id: str, timeout: Optional[float] = None) -> Booking:
        try:
            with start_span("get_booking", attributes={"booking_id": booking_id}):
                booking = booking_store.get(booking_id, timeout=timeout)
                log_event("Booking retrieved successfully", {
                    "booking_id": booking_id,
                    "status": booking.status.value
                })
                return booking
        except Exception as e:
            log_exception(e, {"operation": "get_booking", "booking_id": booking_id})
            raise

    @staticmethod
    def list_trainer_bookings(
        booking_store,
        trainer_id: str,
        day: Optional[date] = None,
        status: Optional[BookingStatus] = None,
        timeout: Optional[float] = None
    ) -> List[Booking]:
        """Get a trainer's bookings, optionally for one date and status"""
        try:
            with start_span("list_trainer_bookings", attributes={"trainer_id": trainer_id}):
                bookings = booking_store.list_for_trainer(trainer_id, day=day, status=status, timeout=timeout)
                log_event("Trainer bookings retrieved", {
                    "trainer_id": trainer_id,
                    "count": len(bookings)
                })
                return bookings
        except Exception as e:
            log_exception(e, {"operation": "list_trainer_bookings", "trainer_id": trainer_id})
            raise
