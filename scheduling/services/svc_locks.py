import threading
import weakref
from contextlib import contextmanager, nullcontext
from datetime import date
from typing import Tuple

LockKey = Tuple[str, date]

class TrainerDateLocks:
    """
    One mutual-exclusion scope per (trainer_id, date).

    Threads of this process queue on an in-memory lock, created on demand and
    dropped once no caller holds a reference. With a lease store configured the
    holder also takes the Cosmos lease for the key, which serializes the same
    key across processes.
    """

    def __init__(self, leases=None):
        self._registry_guard = threading.Lock()
        self._locks = weakref.WeakValueDictionary()
        self.leases = leases

    def configure_leases(self, leases):
        self.leases = leases

    def _lock_for(self, key: LockKey):
        with self._registry_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = _KeyLock()
                self._locks[key] = lock
            return lock

    def _lease(self, trainer_id: str, day: date):
        if self.leases is None:
            return nullcontext()
        return self.leases.hold(trainer_id, day)

    @contextmanager
    def hold(self, trainer_id: str, day: date):
        lock = self._lock_for((trainer_id, day))
        with lock.mutex, self._lease(trainer_id, day):
            yield

class _KeyLock:
    # threading.Lock objects cannot be weakly referenced, so wrap one
    __slots__ = ("mutex", "__weakref__")

    def __init__(self):
        self.mutex = threading.Lock()

trainer_date_locks = TrainerDateLocks()
