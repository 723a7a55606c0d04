from azure.cosmos import ContainerProxy
from datetime import date, datetime
from typing import List, Optional
from scheduling.configuration.config import Config
from scheduling.models.mod_availability import AvailabilityWindow, RecurrenceType
from scheduling.stores.sto_errors import translate_store_errors

TIME_FORMAT = "%H:%M:%S"

class AvailabilityStore:
    """Read access to the trainer availability windows kept in Cosmos DB (partitioned by trainer_id)"""

    def __init__(self, container: ContainerProxy):
        self.container = container

    @staticmethod
    def _convert_to_model(item: dict) -> AvailabilityWindow:
        """Convert a dictionary from storage format to model format"""
        converted = {
            "id": item.get("id"),
            "trainer_id": item["trainer_id"],
            "start_time": datetime.strptime(item["start_time"], TIME_FORMAT).time(),
            "end_time": datetime.strptime(item["end_time"], TIME_FORMAT).time(),
            "recurrence_type": item["recurrence_type"],
            "day_of_week": item.get("day_of_week"),
            "blocked": item.get("blocked", False),
            "session_durations": item.get("session_durations")
        }
        if item.get("specific_date"):
            converted["specific_date"] = date.fromisoformat(item["specific_date"])
        return AvailabilityWindow(**converted)

    def list_windows(self, trainer_id: str, day: date, timeout: Optional[float] = None) -> List[AvailabilityWindow]:
        """Weekly windows for the day of week plus specific-date windows for the day, blocked ones included"""
        query = (
            "SELECT * FROM c WHERE c.trainer_id = @trainer_id AND ("
            "(c.recurrence_type = @weekly AND c.day_of_week = @day_of_week) OR "
            "(c.recurrence_type = @specific_date AND c.specific_date = @date))"
        )
        parameters = [
            {"name": "@trainer_id", "value": trainer_id},
            {"name": "@weekly", "value": RecurrenceType.WEEKLY.value},
            {"name": "@day_of_week", "value": day.weekday()},
            {"name": "@specific_date", "value": RecurrenceType.SPECIFIC_DATE.value},
            {"name": "@date", "value": day.isoformat()}
        ]
        with translate_store_errors("list_windows"):
            items = list(self.container.query_items(
                query=query,
                parameters=parameters,
                partition_key=trainer_id,
                timeout=timeout if timeout is not None else Config.STORE_TIMEOUT_SECONDS
            ))
        windows = [self._convert_to_model(item) for item in items]
        return [window for window in windows if window.applies_to(day)]
