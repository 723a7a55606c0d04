from functools import lru_cache
from azure.cosmos import CosmosClient
from azure.identity import DefaultAzureCredential
from scheduling.configuration.config import Config

@lru_cache(maxsize=1)
def get_database():
    """
    Build the Cosmos client on first use and return the database reference.
    Uses the account key when configured, otherwise Azure AD credentials.
    """
    credential = Config.COSMOSDB_KEY or DefaultAzureCredential()
    client = CosmosClient(
        url=Config.COSMOSDB_ENDPOINT,
        credential=credential
    )
    return client.get_database_client(Config.COSMOSDB_DATABASE_NAME)

@lru_cache(maxsize=None)
def get_container(container_key: str):
    """
    Provides the CosmosDB container client
    Args:
        container_key (str): Key of the container to get (bookings, availabilities, notifications, locks)
    Returns:
        Container client for the specified container
    """
    if container_key not in Config.COSMOSDB_CONTAINER_NAME:
        raise ValueError(f"Container {container_key} not found")
    return get_database().get_container_client(Config.COSMOSDB_CONTAINER_NAME[container_key])
