import itertools
import threading
import uuid
import pytest
from datetime import date, datetime, time, timezone
from unittest.mock import patch
from azure.cosmos import exceptions

from scheduling.models.mod_availability import AvailabilityWindow, RecurrenceType
from scheduling.models.mod_booking import Booking, BookingStatus, ACTIVE_STATUSES
from scheduling.models.mod_time import add_minutes
from scheduling.stores.sto_errors import StoreUnavailableError
from scheduling.validators.val_booking import BookingNotFoundError, BookingValidator, InvalidStateError

MONDAY = date(2025, 3, 10)

class InMemoryAvailabilityStore:
    def __init__(self, windows=None):
        self.windows = list(windows or [])
        self.timeouts = []

    def list_windows(self, trainer_id, day, timeout=None):
        self.timeouts.append(timeout)
        return [w for w in self.windows if w.trainer_id == trainer_id and w.applies_to(day)]

class InMemoryBookingStore:
    def __init__(self):
        self.bookings = {}
        self.writes = []
        self.failing_ids = set()
        self.malformed_ids = set()

    def add(self, booking):
        self.bookings[booking.id] = booking
        return booking

    def get(self, booking_id, timeout=None):
        if booking_id not in self.bookings:
            raise BookingNotFoundError(booking_id)
        return self.bookings[booking_id].model_copy()

    def list_active(self, trainer_id, day, timeout=None):
        return sorted(
            (b.model_copy() for b in self.bookings.values()
             if b.trainer_id == trainer_id and b.date == day and b.status in ACTIVE_STATUSES),
            key=lambda b: b.start_time
        )

    def list_for_trainer(self, trainer_id, day=None, status=None, timeout=None):
        return [
            b.model_copy() for b in self.bookings.values()
            if b.trainer_id == trainer_id
            and (day is None or b.date == day)
            and (status is None or b.status == status)
        ]

    def insert(self, booking, timeout=None):
        self.bookings[booking.id] = booking.model_copy()
        self.writes.append(("insert", booking.id))
        return booking

    def update_status(self, booking_id, status, timeout=None, expected_status=None):
        if booking_id in self.failing_ids:
            raise StoreUnavailableError("update_status", "injected failure")
        if booking_id in self.malformed_ids:
            raise ValueError(f"stored document {booking_id} is malformed")
        current = self.get(booking_id)
        if expected_status is not None and current.status != expected_status:
            raise InvalidStateError(f"Booking {booking_id} is {current.status.value}, expected {expected_status.value}")
        updated = current.model_copy(update={"status": status})
        self.bookings[booking_id] = updated
        self.writes.append(("update_status", booking_id, status))
        return updated.model_copy()

    def status_of(self, booking_id):
        return self.bookings[booking_id].status

class InMemoryLeaseContainer:
    """Cosmos container stand-in honouring create conflicts and etag conditions"""
    def __init__(self):
        self.items = {}
        self.deleted = []
        self._guard = threading.Lock()
        self._versions = itertools.count(1)

    def _store(self, body):
        item = dict(body, _etag=f'"{next(self._versions)}"')
        self.items[item["id"]] = item
        return dict(item)

    def _current(self, item, etag):
        current = self.items.get(item)
        if current is None:
            raise exceptions.CosmosResourceNotFoundError(status_code=404, message="Entity not found")
        if etag is not None and current["_etag"] != etag:
            raise exceptions.CosmosAccessConditionFailedError(status_code=412, message="Precondition failed")
        return current

    def create_item(self, body, **kwargs):
        with self._guard:
            if body["id"] in self.items:
                raise exceptions.CosmosResourceExistsError(status_code=409, message="Entity already exists")
            return self._store(body)

    def read_item(self, item, partition_key, **kwargs):
        with self._guard:
            return dict(self._current(item, None))

    def replace_item(self, item, body, etag=None, match_condition=None, **kwargs):
        with self._guard:
            self._current(item, etag)
            return self._store(body)

    def delete_item(self, item, partition_key, etag=None, match_condition=None, **kwargs):
        with self._guard:
            self._current(item, etag)
            del self.items[item]
            self.deleted.append(item)

class RecordingNotifier:
    def __init__(self):
        self.events = []

    def notify(self, event, recipient_id, payload):
        self.events.append((event, recipient_id, payload))

    def recipients_of(self, event):
        return [recipient for recorded, recipient, _ in self.events if recorded == event]

@pytest.fixture
def monday():
    return MONDAY

@pytest.fixture
def weekly_window():
    def _window(start, end, day_of_week=0, trainer_id="trainer1", **extra):
        return AvailabilityWindow(
            trainer_id=trainer_id,
            start_time=start,
            end_time=end,
            recurrence_type=RecurrenceType.WEEKLY,
            day_of_week=day_of_week,
            **extra
        )
    return _window

@pytest.fixture
def date_window():
    def _window(start, end, specific_date=MONDAY, trainer_id="trainer1", **extra):
        return AvailabilityWindow(
            trainer_id=trainer_id,
            start_time=start,
            end_time=end,
            recurrence_type=RecurrenceType.SPECIFIC_DATE,
            specific_date=specific_date,
            **extra
        )
    return _window

@pytest.fixture
def make_booking():
    def _booking(start, duration=30, status=BookingStatus.PENDING, client_id="client1",
                 trainer_id="trainer1", day=MONDAY, booking_id=None):
        return Booking(
            id=booking_id or str(uuid.uuid4()),
            client_id=client_id,
            trainer_id=trainer_id,
            date=day,
            start_time=start,
            end_time=add_minutes(start, duration),
            duration_minutes=duration,
            status=status
        )
    return _booking

@pytest.fixture
def availability_store(weekly_window):
    # Monday 09:00-10:00
    return InMemoryAvailabilityStore([weekly_window(time(9, 0), time(10, 0))])

@pytest.fixture
def booking_store():
    return InMemoryBookingStore()

@pytest.fixture
def notifier():
    return RecordingNotifier()

@pytest.fixture(autouse=True)
def current_time():
    # Booking rules run as of 2025-03-01, before every session date used here
    now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
    with patch.object(BookingValidator, '_get_current_time', return_value=now):
        yield now

@pytest.fixture
def lease_container():
    return InMemoryLeaseContainer()
