import time
import uuid
from contextlib import contextmanager
from datetime import date
from typing import Optional
from azure.core import MatchConditions
from azure.cosmos import ContainerProxy, exceptions
from scheduling.configuration.config import Config
from scheduling.configuration.monitor import log_event, log_exception
from scheduling.stores.sto_errors import StoreTimeoutError, translate_store_errors

class LeaseStore:
    """
    Mutual exclusion for one trainer and date across processes, kept as lease
    documents in Cosmos DB (partitioned by trainer_id).

    A lease is taken by creating its document and given back by deleting it.
    A lease whose holder never gave it back may be taken over once it expires,
    with a replace conditioned on the etag that was read.
    """

    def __init__(
        self,
        container: ContainerProxy,
        lease_seconds: Optional[float] = None,
        acquire_timeout: Optional[float] = None,
        poll_interval: float = 0.05
    ):
        self.container = container
        self.lease_seconds = lease_seconds if lease_seconds is not None else Config.LOCK_LEASE_SECONDS
        self.acquire_timeout = acquire_timeout if acquire_timeout is not None else Config.LOCK_ACQUIRE_TIMEOUT_SECONDS
        self.poll_interval = poll_interval

    @staticmethod
    def lease_id(trainer_id: str, day: date) -> str:
        return f"{trainer_id}:{day.isoformat()}"

    def _try_acquire(self, lease_id: str, trainer_id: str, holder: str) -> Optional[str]:
        """Etag of the lease document once it is ours, None while another holder has it"""
        now = time.time()
        body = {
            "id": lease_id,
            "trainer_id": trainer_id,
            "holder": holder,
            "expires_at": now + self.lease_seconds
        }
        with translate_store_errors("acquire_lease"):
            try:
                return self.container.create_item(body=body, timeout=Config.STORE_TIMEOUT_SECONDS)["_etag"]
            except exceptions.CosmosResourceExistsError:
                pass
            try:
                current = self.container.read_item(
                    item=lease_id, partition_key=trainer_id, timeout=Config.STORE_TIMEOUT_SECONDS
                )
            except exceptions.CosmosResourceNotFoundError:
                # Given back between our create and read
                return None
            if current["expires_at"] > now:
                return None
            try:
                taken = self.container.replace_item(
                    item=lease_id,
                    body=body,
                    etag=current["_etag"],
                    match_condition=MatchConditions.IfNotModified,
                    timeout=Config.STORE_TIMEOUT_SECONDS
                )
            except exceptions.CosmosAccessConditionFailedError:
                return None
            log_event("Expired lease taken over", {"lease_id": lease_id, "previous_holder": current.get("holder")})
            return taken["_etag"]

    def _release(self, lease_id: str, trainer_id: str, etag: str):
        try:
            self.container.delete_item(
                item=lease_id,
                partition_key=trainer_id,
                etag=etag,
                match_condition=MatchConditions.IfNotModified,
                timeout=Config.STORE_TIMEOUT_SECONDS
            )
        except (exceptions.CosmosAccessConditionFailedError, exceptions.CosmosResourceNotFoundError) as e:
            # Expired and taken over while held
            log_exception(e, {"operation": "release_lease", "lease_id": lease_id, "reason": "lease lost"})
        except Exception as e:
            # An unreleased lease is taken over once it expires
            log_exception(e, {"operation": "release_lease", "lease_id": lease_id})

    @contextmanager
    def hold(self, trainer_id: str, day: date):
        lease_id = self.lease_id(trainer_id, day)
        holder = str(uuid.uuid4())
        deadline = time.monotonic() + self.acquire_timeout
        etag = self._try_acquire(lease_id, trainer_id, holder)
        while etag is None:
            if time.monotonic() >= deadline:
                raise StoreTimeoutError("acquire_lease")
            time.sleep(self.poll_interval)
            etag = self._try_acquire(lease_id, trainer_id, holder)
        try:
            yield
        finally:
            self._release(lease_id, trainer_id, etag)
