import pytest
from unittest.mock import MagicMock
from datetime import date, time
from azure.cosmos.exceptions import CosmosHttpResponseError

from scheduling.models.mod_availability import RecurrenceType
from scheduling.stores.sto_availability import AvailabilityStore
from scheduling.stores.sto_errors import StoreUnavailableError

class TestAvailabilityStore:
    @pytest.fixture
    def mock_container(self):
        return MagicMock()

    @pytest.fixture
    def store(self, mock_container):
        return AvailabilityStore(mock_container)

    @pytest.fixture
    def weekly_document(self):
        return {
            "id": "window1",
            "trainer_id": "trainer1",
            "start_time": "09:00:00",
            "end_time": "10:00:00",
            "recurrence_type": "weekly",
            "day_of_week": 0,
            "session_durations": [30, 60]
        }

    @pytest.fixture
    def blocked_document(self):
        return {
            "id": "window2",
            "trainer_id": "trainer1",
            "start_time": "00:00:00",
            "end_time": "23:59:00",
            "recurrence_type": "specific_date",
            "specific_date": "2025-03-10",
            "blocked": True
        }

    def test_convert_to_model(self, weekly_document, blocked_document):
        weekly = AvailabilityStore._convert_to_model(weekly_document)
        blocked = AvailabilityStore._convert_to_model(blocked_document)

        assert weekly.recurrence_type == RecurrenceType.WEEKLY
        assert weekly.start_time == time(9, 0)
        assert weekly.session_durations == [30, 60]
        assert not weekly.blocked
        assert blocked.specific_date == date(2025, 3, 10)
        assert blocked.blocked

    def test_list_windows(self, store, mock_container, weekly_document, blocked_document):
        mock_container.query_items.return_value = [weekly_document, blocked_document]

        windows = store.list_windows("trainer1", date(2025, 3, 10), timeout=2)

        assert [w.id for w in windows] == ["window1", "window2"]
        kwargs = mock_container.query_items.call_args.kwargs
        assert kwargs["partition_key"] == "trainer1"
        assert kwargs["timeout"] == 2
        assert {"name": "@day_of_week", "value": 0} in kwargs["parameters"]
        assert {"name": "@date", "value": "2025-03-10"} in kwargs["parameters"]

    def test_list_windows_drops_windows_for_other_days(self, store, mock_container, weekly_document):
        tuesday_document = dict(weekly_document, id="window3", day_of_week=1)
        mock_container.query_items.return_value = [weekly_document, tuesday_document]

        windows = store.list_windows("trainer1", date(2025, 3, 10))

        assert [w.id for w in windows] == ["window1"]

    def test_store_failure(self, store, mock_container):
        mock_container.query_items.side_effect = CosmosHttpResponseError(status_code=500, message="Internal error")

        with pytest.raises(StoreUnavailableError):
            store.list_windows("trainer1", date(2025, 3, 10))
