import pytest
from datetime import time

from scheduling.models.mod_booking import BookingStatus, CandidateSlot
from scheduling.services.svc_conflicts import ConflictDetector

class TestConflictDetector:
    @pytest.fixture
    def candidate(self, monday):
        return CandidateSlot(date=monday, start_time=time(9, 0), end_time=time(10, 0))

    @pytest.mark.parametrize("start,end,expected", [
        (time(8, 0), time(9, 0), False),     # ends exactly when candidate starts
        (time(10, 0), time(11, 0), False),   # starts exactly when candidate ends
        (time(8, 30), time(9, 1), True),
        (time(9, 59), time(10, 30), True),
        (time(9, 15), time(9, 45), True),    # contained
        (time(8, 0), time(11, 0), True),     # contains
        (time(9, 0), time(10, 0), True),     # identical
        (time(7, 0), time(8, 0), False),
    ])
    def test_overlaps_is_half_open(self, start, end, expected):
        assert ConflictDetector.overlaps(time(9, 0), time(10, 0), start, end) is expected
        assert ConflictDetector.overlaps(start, end, time(9, 0), time(10, 0)) is expected

    def test_is_free_checks_pending_and_confirmed(self, candidate, make_booking):
        assert not ConflictDetector.is_free(candidate, [make_booking(time(9, 30), 30)])
        assert not ConflictDetector.is_free(candidate, [make_booking(time(9, 30), 30, status=BookingStatus.CONFIRMED)])
        assert ConflictDetector.is_free(candidate, [make_booking(time(10, 0), 30)])
        assert ConflictDetector.is_free(candidate, [])

    def test_is_free_ignores_excluded_bookings(self, candidate, make_booking):
        revised = make_booking(time(9, 0), 60, booking_id="revised")

        assert ConflictDetector.is_free(candidate, [revised], exclude_ids=["revised"])

    def test_is_bookable_only_counts_confirmed(self, candidate, make_booking):
        pending = make_booking(time(9, 0), 60)
        confirmed = make_booking(time(9, 45), 30, status=BookingStatus.CONFIRMED)

        assert ConflictDetector.is_bookable(candidate, [pending])
        assert not ConflictDetector.is_bookable(candidate, [pending, confirmed])

    def test_overlapping_filters_by_status(self, candidate, make_booking):
        pending = make_booking(time(9, 0), 30, booking_id="p")
        confirmed = make_booking(time(9, 30), 30, status=BookingStatus.CONFIRMED, booking_id="c")
        cancelled = make_booking(time(9, 0), 60, status=BookingStatus.CANCELLED, booking_id="x")
        later = make_booking(time(11, 0), 30, booking_id="later")
        bookings = [pending, confirmed, cancelled, later]

        assert [b.id for b in ConflictDetector.overlapping(candidate, bookings)] == ["p", "c", "x"]
        assert [b.id for b in ConflictDetector.overlapping(candidate, bookings, statuses=(BookingStatus.PENDING,))] == ["p"]
