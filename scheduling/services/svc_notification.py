import uuid
import httpx
from azure.cosmos import ContainerProxy
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Optional
from scheduling.configuration.config import Config
from scheduling.configuration.monitor import log_event, log_exception, start_span
from scheduling.models.mod_booking import Booking
from scheduling.models.mod_notification import Notification, NotificationEvent

TITLES = {
    NotificationEvent.BOOKING_REQUESTED: "New Booking Request",
    NotificationEvent.BOOKING_CONFIRMED: "Booking Confirmed",
    NotificationEvent.BOOKING_REJECTED: "Booking Declined",
    NotificationEvent.BOOKING_AUTO_CANCELLED: "Booking Cancelled",
    NotificationEvent.BOOKING_CANCELLED: "Booking Cancelled",
    NotificationEvent.BOOKING_COMPLETED: "Session Completed",
}

def _format_session(payload: Dict[str, Any]) -> str:
    session_date = date.fromisoformat(payload["date"]).strftime("%a, %b %d")
    start = time.fromisoformat(payload["start_time"]).strftime("%I:%M %p").lstrip("0")
    return f"{session_date} at {start}"

class NotificationService:
    """
    Records booking events as in-app notifications and forwards them to an
    optional webhook. Delivery problems are logged, never raised.
    """

    def __init__(self, container: Optional[ContainerProxy], webhook_url: Optional[str] = None):
        self.container = container
        self.webhook_url = webhook_url if webhook_url is not None else Config.NOTIFICATION_WEBHOOK_URL

    @staticmethod
    def booking_payload(booking: Booking, **extra) -> Dict[str, Any]:
        payload = {
            "booking_id": booking.id,
            "client_id": booking.client_id,
            "trainer_id": booking.trainer_id,
            "date": booking.date.isoformat(),
            "start_time": booking.start_time.strftime("%H:%M"),
            "end_time": booking.end_time.strftime("%H:%M"),
            "duration_minutes": booking.duration_minutes,
            "status": booking.status.value
        }
        payload.update(extra)
        return payload

    @staticmethod
    def build_message(event: NotificationEvent, payload: Dict[str, Any]) -> str:
        session = _format_session(payload)
        if event == NotificationEvent.BOOKING_REQUESTED:
            return f"You have a new session request for {session}."
        if event == NotificationEvent.BOOKING_CONFIRMED:
            return f"Your session on {session} has been confirmed!"
        if event == NotificationEvent.BOOKING_REJECTED:
            return f"Your session request on {session} was declined."
        if event == NotificationEvent.BOOKING_AUTO_CANCELLED:
            reason = payload.get("reason", "the trainer confirmed another booking for the same time slot")
            return f"Your session request on {session} was cancelled because {reason}."
        if event == NotificationEvent.BOOKING_CANCELLED:
            return f"Your session on {session} has been cancelled."
        return f"Your session on {session} has been marked as completed."

    def notify(self, event: NotificationEvent, recipient_id: str, payload: Dict[str, Any]) -> None:
        with start_span("notify", attributes={"event": event.value, "recipient_id": recipient_id}):
            notification = Notification(
                id=str(uuid.uuid4()),
                recipient_id=recipient_id,
                event=event,
                title=TITLES[event],
                message=self.build_message(event, payload),
                payload=payload,
                created_at=datetime.now(timezone.utc)
            )
            self._store(notification)
            if self.webhook_url:
                self._forward(notification)

    def _store(self, notification: Notification) -> None:
        if self.container is None:
            return
        try:
            body = notification.model_dump(mode="json")
            self.container.create_item(body=body)
            log_event("Notification stored", {
                "notification_id": notification.id,
                "event": notification.event.value,
                "recipient_id": notification.recipient_id
            })
        except Exception as e:
            log_exception(e, {
                "operation": "store_notification",
                "event": notification.event.value,
                "recipient_id": notification.recipient_id
            })

    def _forward(self, notification: Notification) -> None:
        try:
            with httpx.Client(timeout=Config.NOTIFICATION_WEBHOOK_TIMEOUT_SECONDS) as client:
                response = client.post(self.webhook_url, json=notification.model_dump(mode="json"))
                response.raise_for_status()
            log_event("Notification forwarded", {
                "notification_id": notification.id,
                "event": notification.event.value,
                "status_code": response.status_code
            })
        except Exception as e:
            log_exception(e, {
                "operation": "forward_notification",
                "event": notification.event.value,
                "recipient_id": notification.recipient_id
            })

def notify_safely(notifier, event: NotificationEvent, recipient_id: str, payload: Dict[str, Any]) -> None:
    """Booking state changes never wait on or fail because of delivery"""
    try:
        notifier.notify(event, recipient_id, payload)
    except Exception as e:
        log_exception(e, {"operation": "notify", "event": event.value, "recipient_id": recipient_id})
