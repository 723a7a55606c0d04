from contextlib import contextmanager
from azure.cosmos import exceptions
from azure.core.exceptions import AzureError, ServiceRequestTimeoutError, ServiceResponseTimeoutError
from fastapi import HTTPException

class StoreError(HTTPException):
    """Base class for failures of the persistence collaborators"""
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)

class StoreTimeoutError(StoreError):
    def __init__(self, operation: str):
        super().__init__(504, f"Store operation '{operation}' timed out")
        self.operation = operation

class StoreUnavailableError(StoreError):
    def __init__(self, operation: str, reason: str = ""):
        detail = f"Store operation '{operation}' failed"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(503, detail)
        self.operation = operation

@contextmanager
def translate_store_errors(operation: str):
    """Map Cosmos SDK and transport failures onto the store error kinds"""
    try:
        yield
    except (exceptions.CosmosClientTimeoutError, ServiceRequestTimeoutError,
            ServiceResponseTimeoutError, TimeoutError) as e:
        raise StoreTimeoutError(operation) from e
    except AzureError as e:
        raise StoreUnavailableError(operation, str(e)) from e
