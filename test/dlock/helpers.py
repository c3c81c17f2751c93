"""
Distributed lock test helpers
Shared connection factories, an in-memory lock table and a fake clock.
"""
import threading
from typing import Optional

import pymysql

from src.dlock.base.err_code import ErrCode, LockResult
from src.dlock.base.lock_store import IsolationLevel, LockStore
from src.dlock.config import LockConfig


# ==================== Config & Connection Factory ====================

def new_config(**overrides) -> LockConfig:
    """Lock config with a short backoff cap so tests stay fast."""
    values = {"max_backoff": 0.05}
    values.update(overrides)
    return LockConfig(**values)


def new_conn(cfg: Optional[LockConfig] = None):
    """Open a MySQL connection from the config's mysql_* settings."""
    cfg = cfg or LockConfig()
    return pymysql.connect(
        host=cfg.mysql_host,
        port=cfg.mysql_port,
        user=cfg.mysql_user,
        password=cfg.mysql_password,
        autocommit=True,
        cursorclass=pymysql.cursors.DictCursor,
        connect_timeout=2,
    )


def try_new_conn(cfg: Optional[LockConfig] = None):
    """Like new_conn, but None when MySQL is unreachable."""
    try:
        return new_conn(cfg)
    except pymysql.err.MySQLError:
        return None


# ==================== In-memory lock table ====================

class InMemoryLockTable:
    """
    Stands in for the shared `lock` table. Every statement runs under one
    mutex, so each one is atomic like a single row operation in InnoDB.
    """

    def __init__(self):
        self.rows: dict[str, int] = {}
        self.mutex = threading.Lock()
        self.log: list[tuple] = []
        self.fail_next: list[ErrCode] = []

    def count(self, op: str) -> int:
        return sum(1 for entry in self.log if entry[0] == op)

    def _injected_failure(self) -> Optional[ErrCode]:
        if self.fail_next:
            return self.fail_next.pop(0)
        return None


class InMemoryLockStore(LockStore):
    """LockStore over an InMemoryLockTable; built like MySQLLockStore(conn, schema)."""

    def __init__(self, table: InMemoryLockTable, schema_name: str):
        self.table = table
        self.schema_name = schema_name

    def try_insert(
        self,
        resource: str,
        *,
        updatecount: Optional[int] = None,
        isolation: Optional[IsolationLevel] = None,
    ) -> LockResult:
        with self.table.mutex:
            self.table.log.append(("insert", resource, updatecount, isolation))
            err = self.table._injected_failure()
            if err is not None:
                return LockResult.failure(err)
            if resource in self.table.rows:
                return LockResult.success(0)
            self.table.rows[resource] = 0 if updatecount is None else updatecount
            return LockResult.success(1)

    def try_claim(self, resource: str) -> LockResult:
        with self.table.mutex:
            self.table.log.append(("claim", resource))
            err = self.table._injected_failure()
            if err is not None:
                return LockResult.failure(err)
            if self.table.rows.get(resource) == 0:
                self.table.rows[resource] = 1
                return LockResult.success(1)
            return LockResult.success(0)

    def delete(self, resource: str) -> int:
        with self.table.mutex:
            self.table.log.append(("delete", resource))
            if self.table.rows.pop(resource, None) is None:
                return 0
            return 1


# ==================== Fake clock ====================

class FakeClock:
    """Monotonic clock whose sleep() only advances time and records the delay."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ==================== Test Data Constants ====================

class TestKeys:
    """Resource names, one per test to avoid cross-test interference."""

    __test__ = False

    JOBS_SYNC = "jobs:sync"
    IMMEDIATE = "lock:immediate"
    BLOCKING = "lock:blocking"
    REACQUIRE = "lock:reacquire"
    LOST = "lock:lost"
    DOUBLE_RELEASE = "lock:double-release"
    SCOPED = "lock:scoped"
    HANDOFF = "lock:handoff"
    EXCLUSION = "lock:exclusion"
    RACE = "lock:race"
    TRANSIENT = "lock:transient"
    CANCEL = "lock:cancel"
    OTHER = "lock:other"
