"""
Bounded polling loop shared by both acquisition strategies.

Not exponential: each sleep is the remaining time capped at max_backoff, so
a released lock is noticed within one cap regardless of the timeout.
"""

import logging
import threading
import time
from typing import Callable, Optional

from src.dlock.base.err_code import LockResult
from src.dlock.exceptions import LockCancelledError, LockTimeoutError

logger = logging.getLogger("dlock")

DEFAULT_MAX_BACKOFF = 1.0


def poll_until_acquired(
    resource: str,
    timeout: float,
    attempt: Callable[[], LockResult],
    *,
    max_backoff: float = DEFAULT_MAX_BACKOFF,
    cancel_event: Optional[threading.Event] = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Call attempt() until it succeeds or timeout seconds have passed.

    Returns the number of attempts made. Raises LockTimeoutError on
    exhaustion and LockCancelledError if cancel_event is set during a
    backoff wait.
    """
    start = clock()
    attempts = 0

    while True:
        attempts += 1
        res = attempt()
        if res.ok:
            return attempts

        remaining = timeout - (clock() - start)
        logger.debug(
            "Lock attempt failed: resource=%s attempt=%d err=%s remaining=%.3fs",
            resource, attempts, res.err.name, remaining
        )
        if remaining <= 0:
            break

        delay = min(remaining, max_backoff)
        if delay <= 0:
            break

        if cancel_event is None:
            sleep(delay)
        elif cancel_event.wait(delay):
            logger.warning(
                "Lock wait cancelled: resource=%s attempts=%d", resource, attempts
            )
            raise LockCancelledError(resource)

    logger.warning(
        "Lock timeout: resource=%s attempts=%d timeout=%.3fs",
        resource, attempts, timeout
    )
    raise LockTimeoutError(resource)
