from typing import Optional
from scheduling.configuration.monitor import log_event, log_exception, log_metric, start_span
from scheduling.models.mod_booking import Booking, BookingStatus, CascadeError, ConfirmationResult
from scheduling.models.mod_notification import NotificationEvent
from scheduling.services.svc_conflicts import ConflictDetector
from scheduling.services.svc_locks import trainer_date_locks
from scheduling.services.svc_notification import NotificationService, notify_safely
from scheduling.validators.val_booking import BookingValidator, SlotUnavailableError

AUTO_CANCEL_REASON = "trainer confirmed a conflicting time slot"

class ConfirmationService:
    """Trainer decisions on booking requests, serialized per trainer and date"""

    @staticmethod
    def confirm(booking_store, notifier, booking_id: str, timeout: Optional[float] = None) -> ConfirmationResult:
        """
        Confirm a pending booking and cancel every other pending request of the
        same trainer and date that overlaps it.

        The confirmation is committed first and never rolled back. Cancellations
        that fail are reported in cascade_errors so they can be reconciled later.
        """
        try:
            with start_span("confirm_booking", attributes={"booking_id": booking_id}):
                log_event("Confirm booking started", {"booking_id": booking_id})

                booking = booking_store.get(booking_id, timeout=timeout)
                BookingValidator.validate_pending(booking)

                with trainer_date_locks.hold(booking.trainer_id, booking.date):
                    # State may have moved while waiting for the lock
                    booking = booking_store.get(booking_id, timeout=timeout)
                    BookingValidator.validate_pending(booking)

                    active_bookings = booking_store.list_active(booking.trainer_id, booking.date, timeout=timeout)
                    confirmed_overlaps = ConflictDetector.overlapping(
                        booking, active_bookings,
                        statuses=(BookingStatus.CONFIRMED,),
                        exclude_ids=[booking.id]
                    )
                    if confirmed_overlaps:
                        raise SlotUnavailableError(
                            f"Booking {booking.id} overlaps confirmed booking {confirmed_overlaps[0].id}"
                        )

                    confirmed = booking_store.update_status(
                        booking.id, BookingStatus.CONFIRMED, timeout=timeout, expected_status=BookingStatus.PENDING
                    )

                    conflicting = ConflictDetector.overlapping(
                        confirmed, active_bookings,
                        statuses=(BookingStatus.PENDING,),
                        exclude_ids=[confirmed.id]
                    )
                    cascaded = []
                    cascade_errors = []
                    for pending in conflicting:
                        try:
                            cancelled = booking_store.update_status(
                                pending.id, BookingStatus.CANCELLED, timeout=timeout, expected_status=BookingStatus.PENDING
                            )
                        except Exception as e:
                            log_exception(e, {
                                "operation": "cascade_cancel",
                                "booking_id": pending.id,
                                "confirmed_booking_id": confirmed.id
                            })
                            cascade_errors.append(
                                CascadeError(booking_id=pending.id, error=str(getattr(e, "detail", e)))
                            )
                            continue
                        cascaded.append(cancelled)
                        notify_safely(
                            notifier,
                            NotificationEvent.BOOKING_AUTO_CANCELLED,
                            cancelled.client_id,
                            NotificationService.booking_payload(
                                cancelled, reason=AUTO_CANCEL_REASON, confirmed_booking_id=confirmed.id
                            )
                        )

                notify_safely(
                    notifier,
                    NotificationEvent.BOOKING_CONFIRMED,
                    confirmed.client_id,
                    NotificationService.booking_payload(confirmed, displaced_requests=len(cascaded))
                )

                result = ConfirmationResult(booking=confirmed, cascaded=cascaded, cascade_errors=cascade_errors)
                log_metric("cascade_cancellations", len(cascaded), {"booking_id": confirmed.id})
                log_event("Booking confirmed successfully", {
                    "booking_id": confirmed.id,
                    "trainer_id": confirmed.trainer_id,
                    "cascaded": len(cascaded),
                    "cascade_errors": len(cascade_errors)
                })
                return result
        except Exception as e:
            log_exception(e, {"operation": "confirm_booking", "booking_id": booking_id})
            raise

    @staticmethod
    def _transition(
        booking_store,
        notifier,
        booking_id: str,
        status: BookingStatus,
        event: NotificationEvent,
        required_status: BookingStatus,
        timeout: Optional[float]
    ) -> Booking:
        booking = booking_store.get(booking_id, timeout=timeout)
        BookingValidator.validate_status(booking, required_status)
        with trainer_date_locks.hold(booking.trainer_id, booking.date):
            booking = booking_store.get(booking_id, timeout=timeout)
            BookingValidator.validate_status(booking, required_status)
            BookingValidator.validate_transition(booking, status)
            updated = booking_store.update_status(booking.id, status, timeout=timeout, expected_status=required_status)
        notify_safely(notifier, event, updated.client_id, NotificationService.booking_payload(updated))
        return updated

    @staticmethod
    def reject(booking_store, notifier, booking_id: str, timeout: Optional[float] = None) -> Booking:
        """Decline a pending request. Other requests are unaffected."""
        try:
            with start_span("reject_booking", attributes={"booking_id": booking_id}):
                rejected = ConfirmationService._transition(
                    booking_store, notifier, booking_id,
                    BookingStatus.CANCELLED, NotificationEvent.BOOKING_REJECTED,
                    required_status=BookingStatus.PENDING, timeout=timeout
                )
                log_event("Booking rejected successfully", {
                    "booking_id": booking_id,
                    "client_id": rejected.client_id
                })
                return rejected
        except Exception as e:
            log_exception(e, {"operation": "reject_booking", "booking_id": booking_id})
            raise

    @staticmethod
    def cancel(booking_store, notifier, booking_id: str, timeout: Optional[float] = None) -> Booking:
        """Cancel a confirmed session"""
        try:
            with start_span("cancel_booking", attributes={"booking_id": booking_id}):
                cancelled = ConfirmationService._transition(
                    booking_store, notifier, booking_id,
                    BookingStatus.CANCELLED, NotificationEvent.BOOKING_CANCELLED,
                    required_status=BookingStatus.CONFIRMED, timeout=timeout
                )
                log_event("Booking cancelled successfully", {
                    "booking_id": booking_id,
                    "client_id": cancelled.client_id
                })
                return cancelled
        except Exception as e:
            log_exception(e, {"operation": "cancel_booking", "booking_id": booking_id})
            raise

    @staticmethod
    def complete(booking_store, notifier, booking_id: str, timeout: Optional[float] = None) -> Booking:
        """Mark a confirmed session as held. Whether the session time has passed is not checked."""
        try:
            with start_span("complete_booking", attributes={"booking_id": booking_id}):
                completed = ConfirmationService._transition(
                    booking_store, notifier, booking_id,
                    BookingStatus.COMPLETED, NotificationEvent.BOOKING_COMPLETED,
                    required_status=BookingStatus.CONFIRMED, timeout=timeout
                )
                log_event("Booking completed successfully", {
                    "booking_id": booking_id,
                    "client_id": completed.client_id
                })
                return completed
        except Exception as e:
            log_exception(e, {"operation": "complete_booking", "booking_id": booking_id})
            raise
