import logging

from src.dlock.base.acquire_strategy import AcquireStrategy
from src.dlock.base.err_code import ErrCode, LockResult
from src.dlock.base.lock_store import IsolationLevel

logger = logging.getLogger("dlock")


class TransactionalStrategy(AcquireStrategy):
    """
    Insert-if-absent inside a REPEATABLE READ transaction.

    The store's isolation and the primary key on resource decide races;
    the loser sees zero rows or a duplicate-key error.
    """

    isolation = IsolationLevel.REPEATABLE_READ

    def try_acquire(self, resource: str) -> LockResult:
        res = self.store.try_insert(resource, isolation=self.isolation)
        if not res.ok:
            return res
        if res.value == 1:
            return LockResult.success(res.value)
        logger.debug("Transactional attempt: resource=%s already held", resource)
        return LockResult.failure(ErrCode.LOCK_CONFLICT, res.value)
