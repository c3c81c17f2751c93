import logging

from src.dlock.base.acquire_strategy import AcquireStrategy
from src.dlock.base.err_code import ErrCode, LockResult

logger = logging.getLogger("dlock")


class UpdateCountStrategy(AcquireStrategy):
    """
    Claim through the updatecount flag, no transaction needed.

    1. best-effort insert (resource, 0); losing the race is fine
    2. UPDATE ... SET updatecount = 1 WHERE updatecount = 0 AND resource = ?
       only one concurrent update can flip the flag
    """

    def try_acquire(self, resource: str) -> LockResult:
        ins = self.store.try_insert(resource, updatecount=0)
        if not ins.ok:
            logger.debug(
                "UpdateCount insert ignored: resource=%s err=%s",
                resource, ins.err.name
            )

        claim = self.store.try_claim(resource)
        if not claim.ok:
            return claim
        if claim.value == 1:
            return LockResult.success(claim.value)
        # row missing (lost the insert race) or already claimed
        return LockResult.failure(ErrCode.LOCK_CONFLICT, claim.value)
