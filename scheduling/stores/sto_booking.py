from azure.core import MatchConditions
from azure.cosmos import ContainerProxy, exceptions
from datetime import date, datetime, timezone
from typing import List, Optional
from scheduling.configuration.config import Config
from scheduling.models.mod_booking import Booking, BookingStatus, ACTIVE_STATUSES
from scheduling.stores.sto_errors import translate_store_errors
from scheduling.validators.val_booking import BookingNotFoundError, InvalidStateError

TIME_FORMAT = "%H:%M:%S"

class BookingStore:
    """Booking records kept in Cosmos DB, partitioned by trainer_id"""

    def __init__(self, container: ContainerProxy):
        self.container = container

    @staticmethod
    def _timeout(timeout: Optional[float]) -> float:
        return timeout if timeout is not None else Config.STORE_TIMEOUT_SECONDS

    @staticmethod
    def _to_document(booking: Booking) -> dict:
        """Convert a booking to its storage format"""
        return {
            "id": booking.id,
            "client_id": booking.client_id,
            "trainer_id": booking.trainer_id,
            "date": booking.date.isoformat(),
            "start_time": booking.start_time.strftime(TIME_FORMAT),
            "end_time": booking.end_time.strftime(TIME_FORMAT),
            "duration_minutes": booking.duration_minutes,
            "status": booking.status.value,
            "notes": booking.notes,
            "created_at": booking.created_at.isoformat() if booking.created_at else None,
            "updated_at": booking.updated_at.isoformat() if booking.updated_at else None
        }

    @staticmethod
    def _convert_to_model(item: dict) -> Booking:
        """Convert a dictionary from storage format to model format"""
        return Booking(
            id=item["id"],
            client_id=item["client_id"],
            trainer_id=item["trainer_id"],
            date=date.fromisoformat(item["date"]),
            start_time=datetime.strptime(item["start_time"], TIME_FORMAT).time(),
            end_time=datetime.strptime(item["end_time"], TIME_FORMAT).time(),
            duration_minutes=item["duration_minutes"],
            status=item["status"],
            notes=item.get("notes"),
            created_at=datetime.fromisoformat(item["created_at"]) if item.get("created_at") else None,
            updated_at=datetime.fromisoformat(item["updated_at"]) if item.get("updated_at") else None
        )

    def _get_document(self, booking_id: str, timeout: Optional[float]) -> dict:
        query = "SELECT * FROM c WHERE c.id = @id"
        with translate_store_errors("get"):
            items = list(self.container.query_items(
                query=query,
                parameters=[{"name": "@id", "value": booking_id}],
                enable_cross_partition_query=True,
                timeout=self._timeout(timeout)
            ))
        if not items:
            raise BookingNotFoundError(booking_id)
        return items[0]

    def get(self, booking_id: str, timeout: Optional[float] = None) -> Booking:
        return self._convert_to_model(self._get_document(booking_id, timeout))

    def list_active(self, trainer_id: str, day: date, timeout: Optional[float] = None) -> List[Booking]:
        """Pending and confirmed bookings of a trainer on one date"""
        query = (
            "SELECT * FROM c WHERE c.trainer_id = @trainer_id AND c.date = @date "
            "AND ARRAY_CONTAINS(@statuses, c.status) ORDER BY c.start_time ASC"
        )
        parameters = [
            {"name": "@trainer_id", "value": trainer_id},
            {"name": "@date", "value": day.isoformat()},
            {"name": "@statuses", "value": [status.value for status in ACTIVE_STATUSES]}
        ]
        with translate_store_errors("list_active"):
            items = list(self.container.query_items(
                query=query,
                parameters=parameters,
                partition_key=trainer_id,
                timeout=self._timeout(timeout)
            ))
        return [self._convert_to_model(item) for item in items]

    def list_for_trainer(
        self,
        trainer_id: str,
        day: Optional[date] = None,
        status: Optional[BookingStatus] = None,
        timeout: Optional[float] = None
    ) -> List[Booking]:
        """All bookings of a trainer, optionally narrowed to one date and one status"""
        query = "SELECT * FROM c WHERE c.trainer_id = @trainer_id"
        parameters = [{"name": "@trainer_id", "value": trainer_id}]
        if day is not None:
            query += " AND c.date = @date"
            parameters.append({"name": "@date", "value": day.isoformat()})
        if status is not None:
            query += " AND c.status = @status"
            parameters.append({"name": "@status", "value": status.value})
        query += " ORDER BY c.date ASC, c.start_time ASC"
        with translate_store_errors("list_for_trainer"):
            items = list(self.container.query_items(
                query=query,
                parameters=parameters,
                partition_key=trainer_id,
                timeout=self._timeout(timeout)
            ))
        return [self._convert_to_model(item) for item in items]

    def insert(self, booking: Booking, timeout: Optional[float] = None) -> Booking:
        current_time = datetime.now(timezone.utc)
        stored = booking.model_copy(update={"created_at": current_time, "updated_at": current_time})
        with translate_store_errors("insert"):
            self.container.create_item(body=self._to_document(stored), timeout=self._timeout(timeout))
        return stored

    def update_status(
        self,
        booking_id: str,
        status: BookingStatus,
        timeout: Optional[float] = None,
        expected_status: Optional[BookingStatus] = None
    ) -> Booking:
        """
        Write a new status onto the stored document.

        The write is conditioned on the etag read here, so a document changed by
        another writer in between is never overwritten. With expected_status the
        stored status must still be that value.
        """
        item = self._get_document(booking_id, timeout)
        if expected_status is not None and item["status"] != expected_status.value:
            raise InvalidStateError(
                f"Booking {booking_id} is {item['status']}, expected {expected_status.value}"
            )
        item["status"] = status.value
        item["updated_at"] = datetime.now(timezone.utc).isoformat()
        with translate_store_errors("update_status"):
            try:
                self.container.upsert_item(
                    body=item,
                    etag=item.get("_etag"),
                    match_condition=MatchConditions.IfNotModified,
                    timeout=self._timeout(timeout)
                )
            except exceptions.CosmosAccessConditionFailedError:
                raise InvalidStateError(f"Booking {booking_id} was modified by another request")
        return self._convert_to_model(item)
