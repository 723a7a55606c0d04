from scheduling.configuration.database import get_container
from scheduling.services.svc_notification import NotificationService
from scheduling.stores.sto_availability import AvailabilityStore
from scheduling.stores.sto_booking import BookingStore

def get_availability_store() -> AvailabilityStore:
    return AvailabilityStore(get_container("availabilities"))

def get_booking_store() -> BookingStore:
    return BookingStore(get_container("bookings"))

def get_notifier() -> NotificationService:
    return NotificationService(get_container("notifications"))
