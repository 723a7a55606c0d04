import pytest
from unittest.mock import MagicMock, patch
from datetime import date, time

from scheduling.models.mod_booking import Booking, BookingStatus
from scheduling.models.mod_notification import NotificationEvent
from scheduling.services.svc_notification import NotificationService, notify_safely

class TestNotificationService:
    @pytest.fixture
    def mock_container(self):
        return MagicMock()

    @pytest.fixture
    def service(self, mock_container):
        with patch('scheduling.services.svc_notification.Config') as mock_config:
            mock_config.NOTIFICATION_WEBHOOK_URL = None
            yield NotificationService(mock_container)

    @pytest.fixture
    def sample_booking(self):
        return Booking(
            id="booking123",
            client_id="client1",
            trainer_id="trainer1",
            date=date(2025, 3, 10),
            start_time=time(9, 0),
            end_time=time(9, 30),
            duration_minutes=30,
            status=BookingStatus.CONFIRMED
        )

    def test_booking_payload(self, sample_booking):
        payload = NotificationService.booking_payload(sample_booking, displaced_requests=2)

        assert payload == {
            "booking_id": "booking123",
            "client_id": "client1",
            "trainer_id": "trainer1",
            "date": "2025-03-10",
            "start_time": "09:00",
            "end_time": "09:30",
            "duration_minutes": 30,
            "status": "confirmed",
            "displaced_requests": 2
        }

    @pytest.mark.parametrize("event,expected", [
        (NotificationEvent.BOOKING_REQUESTED, "You have a new session request for Mon, Mar 10 at 9:00 AM."),
        (NotificationEvent.BOOKING_CONFIRMED, "Your session on Mon, Mar 10 at 9:00 AM has been confirmed!"),
        (NotificationEvent.BOOKING_REJECTED, "Your session request on Mon, Mar 10 at 9:00 AM was declined."),
    ])
    def test_build_message(self, sample_booking, event, expected):
        payload = NotificationService.booking_payload(sample_booking)

        assert NotificationService.build_message(event, payload) == expected

    def test_auto_cancel_message_includes_reason(self, sample_booking):
        payload = NotificationService.booking_payload(sample_booking, reason="the slot was taken")

        message = NotificationService.build_message(NotificationEvent.BOOKING_AUTO_CANCELLED, payload)

        assert message.endswith("was cancelled because the slot was taken.")

    @patch('uuid.uuid4')
    def test_notify_stores_notification(self, mock_uuid, service, mock_container, sample_booking):
        mock_uuid.return_value = "notification-uuid"
        payload = NotificationService.booking_payload(sample_booking)

        service.notify(NotificationEvent.BOOKING_CONFIRMED, "client1", payload)

        body = mock_container.create_item.call_args.kwargs["body"]
        assert body["id"] == "notification-uuid"
        assert body["recipient_id"] == "client1"
        assert body["event"] == "booking_confirmed"
        assert body["title"] == "Booking Confirmed"
        assert body["read"] is False
        assert body["payload"]["booking_id"] == "booking123"

    def test_storage_failure_is_swallowed(self, service, mock_container, sample_booking):
        mock_container.create_item.side_effect = Exception("Database error")

        service.notify(NotificationEvent.BOOKING_CONFIRMED, "client1", NotificationService.booking_payload(sample_booking))

        assert mock_container.create_item.called

    @patch('scheduling.services.svc_notification.httpx.Client')
    def test_forwards_to_webhook(self, mock_client_class, mock_container, sample_booking):
        mock_http = mock_client_class.return_value.__enter__.return_value
        service = NotificationService(mock_container, webhook_url="https://hooks.example.com/bookings")

        service.notify(NotificationEvent.BOOKING_REQUESTED, "trainer1", NotificationService.booking_payload(sample_booking))

        url = mock_http.post.call_args.args[0]
        body = mock_http.post.call_args.kwargs["json"]
        assert url == "https://hooks.example.com/bookings"
        assert body["recipient_id"] == "trainer1"
        assert body["event"] == "booking_requested"
        mock_http.post.return_value.raise_for_status.assert_called_once()

    @patch('scheduling.services.svc_notification.httpx.Client')
    def test_webhook_failure_is_swallowed(self, mock_client_class, mock_container, sample_booking):
        mock_http = mock_client_class.return_value.__enter__.return_value
        mock_http.post.side_effect = Exception("Connection refused")
        service = NotificationService(mock_container, webhook_url="https://hooks.example.com/bookings")

        service.notify(NotificationEvent.BOOKING_CONFIRMED, "client1", NotificationService.booking_payload(sample_booking))

        assert mock_container.create_item.called

    @patch('scheduling.services.svc_notification.httpx.Client')
    def test_no_webhook_configured(self, mock_client_class, service, sample_booking):
        service.notify(NotificationEvent.BOOKING_CONFIRMED, "client1", NotificationService.booking_payload(sample_booking))

        assert not mock_client_class.called

    def test_without_container_nothing_is_stored(self, sample_booking):
        service = NotificationService(None, webhook_url="")

        service.notify(NotificationEvent.BOOKING_CONFIRMED, "client1", NotificationService.booking_payload(sample_booking))

class TestNotifySafely:
    def test_delivers(self):
        notifier = MagicMock()

        notify_safely(notifier, NotificationEvent.BOOKING_REJECTED, "client1", {"booking_id": "booking123"})

        notifier.notify.assert_called_once_with(NotificationEvent.BOOKING_REJECTED, "client1", {"booking_id": "booking123"})

    def test_swallows_delivery_errors(self):
        notifier = MagicMock()
        notifier.notify.side_effect = RuntimeError("delivery failed")

        notify_safely(notifier, NotificationEvent.BOOKING_REJECTED, "client1", {})
