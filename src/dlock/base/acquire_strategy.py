from abc import ABC, abstractmethod

from src.dlock.base.err_code import LockResult
from src.dlock.base.lock_store import LockStore


class AcquireStrategy(ABC):
    """
    AcquireStrategy makes one attempt at claiming the lock row.
    The polling loop decides whether and when to try again.
    """

    def __init__(self, store: LockStore):
        self.store = store

    @abstractmethod
    def try_acquire(self, resource: str) -> LockResult:
        """
        Return an ok result only when this attempt now owns the row.
        Lost races and store errors come back as failed results.
        """
        pass
