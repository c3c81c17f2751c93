import enum
from abc import ABC, abstractmethod
from typing import Optional

from src.dlock.base.err_code import LockResult


class IsolationLevel(enum.Enum):
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"


class LockStore(ABC):
    """
    LockStore defines how lock rows are created, claimed and removed in
    the shared relational store.

    Acquisition-side methods never raise on store errors: they return a
    failed LockResult classified by ErrCode, so the polling loop can
    retry. On success, LockResult.value is the affected row count.

    The store works on the caller's connection: its commits and rollbacks
    end whatever transaction that session has open. Hand it a connection
    with no transaction in progress, one per lock.
    """

    @abstractmethod
    def try_insert(
        self,
        resource: str,
        *,
        updatecount: Optional[int] = None,
        isolation: Optional[IsolationLevel] = None,
    ) -> LockResult:
        """
        Insert a row for resource only if none exists.

        updatecount : initial claim flag, or None to leave the column default
        isolation   : run the insert in its own transaction at this level,
                      or None to execute it outside a transaction
        """
        pass

    @abstractmethod
    def try_claim(self, resource: str) -> LockResult:
        """
        Flip updatecount from 0 to 1 on the resource's row.
        """
        pass

    @abstractmethod
    def delete(self, resource: str) -> int:
        """
        Delete the resource's row and return the affected row count.
        Store errors propagate.
        """
        pass
