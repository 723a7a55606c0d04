import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

def _int_list(value: str):
    return [int(item) for item in value.split(",") if item.strip()]

class Config:
    SERVICE_NAME = os.getenv("SERVICE_NAME", "trainer-scheduling")

    # Azure CosmosDB Configuration
    COSMOSDB_ENDPOINT = os.getenv("COSMOS_DB_ENDPOINT")
    COSMOSDB_KEY = os.getenv("COSMOS_DB_KEY")  # Falls back to DefaultAzureCredential when unset
    COSMOSDB_DATABASE_NAME = os.getenv("COSMOS_DB_DATABASE")
    COSMOSDB_CONTAINER_NAME = {
        "bookings": os.getenv("COSMOS_CONTAINERS_BOOKINGS", "bookings"),
        "availabilities": os.getenv("COSMOS_CONTAINERS_AVAILABILITIES", "availabilities"),
        "notifications": os.getenv("COSMOS_CONTAINERS_NOTIFICATIONS", "notifications"),
        "locks": os.getenv("COSMOS_CONTAINERS_LOCKS", "locks")
    }

    # JWT Configuration
    JWT_SECRET_KEY = os.getenv("AUTH_SECRET_KEY")
    JWT_ALGORITHM = os.getenv("AUTH_ALGORITHM", "HS256")

    # Application Insights
    APPLICATIONINSIGHTS_CONNECTION_STRING = os.getenv("APPINSIGHTS_INSTRUMENTATIONKEY")

    # Scheduling rules
    SLOT_GRANULARITY_MINUTES = int(os.getenv("SLOT_GRANULARITY_MINUTES", "15"))
    DEFAULT_SESSION_DURATIONS = _int_list(os.getenv("DEFAULT_SESSION_DURATIONS", "30,60,90,120"))
    STORE_TIMEOUT_SECONDS = float(os.getenv("STORE_TIMEOUT_SECONDS", "10"))

    # Cross-process trainer/date leases in the locks container (partition key /trainer_id)
    DISTRIBUTED_LOCKS = os.getenv("DISTRIBUTED_LOCKS", "true").lower() == "true"
    LOCK_LEASE_SECONDS = float(os.getenv("LOCK_LEASE_SECONDS", "30"))
    LOCK_ACQUIRE_TIMEOUT_SECONDS = float(os.getenv("LOCK_ACQUIRE_TIMEOUT_SECONDS", "10"))

    # Optional endpoint receiving every booking event (live-update transports subscribe here)
    NOTIFICATION_WEBHOOK_URL = os.getenv("NOTIFICATION_WEBHOOK_URL")
    NOTIFICATION_WEBHOOK_TIMEOUT_SECONDS = float(os.getenv("NOTIFICATION_WEBHOOK_TIMEOUT_SECONDS", "5"))
