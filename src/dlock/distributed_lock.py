import logging
import math
import threading
import time
from datetime import timedelta
from typing import Any, Callable, Optional, Union

from src.dlock.base.acquire_strategy import AcquireStrategy
from src.dlock.base.lock_store import LockStore
from src.dlock.config import LockConfig
from src.dlock.exceptions import InvalidArgumentError, LockNotHeldError
from src.dlock.impl.mysql_lock_store import MySQLLockStore
from src.dlock.impl.transactional_strategy import TransactionalStrategy
from src.dlock.impl.update_count_strategy import UpdateCountStrategy
from src.dlock.retry import poll_until_acquired
from src.dlock.schema import RESOURCE_MAX_LENGTH

logger = logging.getLogger("dlock")

Timeout = Union[float, int, timedelta, None]


def _to_seconds(timeout: Timeout, config: LockConfig) -> float:
    if timeout is None:
        return float(config.distributed_lock_timeout)
    if isinstance(timeout, timedelta):
        seconds = timeout.total_seconds()
    elif isinstance(timeout, (int, float)) and not isinstance(timeout, bool):
        seconds = float(timeout)
    else:
        raise InvalidArgumentError("timeout", f"expected seconds or timedelta, got {type(timeout).__name__}")
    if math.isnan(seconds):
        raise InvalidArgumentError("timeout", "must be a number")
    if seconds < 0:
        raise InvalidArgumentError("timeout", "must not be negative")
    return seconds


class DistributedLock:
    """
    A lock on a named resource, arbitrated by a row in the shared lock table.

    Construction blocks until the row is claimed or the timeout elapses
    (LockTimeoutError). The instance is the held lock: release it with
    release()/close() or by leaving a ``with`` block.

        with DistributedLock("jobs:sync", 30, conn, config):
            ...

    There is no lease: if the process dies before release, the row stays
    until someone deletes it by hand.
    """

    def __init__(
        self,
        resource: str,
        timeout: Timeout,
        connection: Any,
        config: LockConfig,
        *,
        cancel_event: Optional[threading.Event] = None,
        store_factory: Callable[[Any, str], LockStore] = MySQLLockStore,
    ):
        if not isinstance(resource, str) or not resource:
            raise InvalidArgumentError("resource", "must be a non-empty string")
        if len(resource) > RESOURCE_MAX_LENGTH:
            raise InvalidArgumentError("resource", f"longer than {RESOURCE_MAX_LENGTH} characters")
        if connection is None:
            raise InvalidArgumentError("connection")
        if config is None:
            raise InvalidArgumentError("config")
        seconds = _to_seconds(timeout, config)

        self._resource = resource
        self._connection = connection
        self._config = config
        self._completed = False
        self._store = store_factory(connection, config.schema_name)

        strategy = self._pick_strategy()
        started = time.monotonic()
        attempts = poll_until_acquired(
            resource,
            seconds,
            lambda: strategy.try_acquire(resource),
            max_backoff=config.max_backoff,
            cancel_event=cancel_event,
        )

        logger.info(
            "Lock acquired: resource=%s strategy=%s attempts=%d elapsed=%.3fs",
            resource,
            type(strategy).__name__,
            attempts,
            time.monotonic() - started,
        )

    def _pick_strategy(self) -> AcquireStrategy:
        if self._config.use_native_transactions:
            return TransactionalStrategy(self._store)
        return UpdateCountStrategy(self._store)

    @property
    def resource(self) -> str:
        return self._resource

    @property
    def completed(self) -> bool:
        return self._completed

    def release(self) -> None:
        """
        Delete the lock row. A second call does nothing.

        Raises LockNotHeldError if the row was already gone.
        """
        if self._completed:
            return
        self._completed = True

        rows = self._store.delete(self._resource)
        if rows <= 0:
            logger.error("Lock lost before release: resource=%s", self._resource)
            raise LockNotHeldError(self._resource)

        logger.info("Lock released: resource=%s", self._resource)

    close = release

    def __enter__(self) -> "DistributedLock":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self._completed else "held"
        return f"DistributedLock(resource={self._resource!r}, {state})"


def acquire(
    resource: str,
    timeout: Timeout,
    connection: Any,
    config: LockConfig,
    **kwargs,
) -> DistributedLock:
    """Block until resource is locked and return the held lock."""
    return DistributedLock(resource, timeout, connection, config, **kwargs)
