"""
Distributed lock exceptions

Only these exceptions cross the lock's public boundary. Store errors raised
while polling for a lock are turned into LockResult values inside the loop
and never surface here.
"""

from typing import Optional

from src.dlock.base.err_code import ErrCode


class DistributedLockError(Exception):
    """
    Base exception class for all lock-related errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        err: ErrCode = ErrCode.UNKNOWN_ERROR,
    ):
        """
        Initialize DistributedLockError.

        Args:
            message: Human-readable error message
            resource: Name of the locked resource (optional)
            err: Error code classifying the failure
        """
        super().__init__(message)
        self.message = message
        self.resource = resource
        self.err = err

    def to_dict(self) -> dict:
        """Convert exception to dict for structured logging."""
        result = {
            "error": self.message,
            "code": self.err.name,
        }
        if self.resource:
            result["resource"] = self.resource
        return result


class InvalidArgumentError(DistributedLockError, ValueError):
    """Raised before any store access when a lock is requested with bad arguments."""

    def __init__(self, argument: str, details: Optional[str] = None):
        message = f"Invalid argument: {argument}"
        if details:
            message = f"{message} ({details})"
        super().__init__(
            message=message,
            err=ErrCode.INVALID_ARGUMENT,
        )
        self.argument = argument


class LockTimeoutError(DistributedLockError):
    """
    Raised when the polling loop runs out of time without claiming the row.

    Callers may retry at a higher level.
    """

    def __init__(self, resource: str):
        super().__init__(
            message=f"Could not place a lock on the resource '{resource}': Lock timeout.",
            resource=resource,
            err=ErrCode.TIMEOUT,
        )


class LockNotHeldError(DistributedLockError):
    """
    Raised when release deletes zero rows.

    The row was removed by another party or never inserted, so the critical
    section it guarded may have run without mutual exclusion.
    """

    def __init__(self, resource: str):
        super().__init__(
            message=f"Could not release a lock on the resource '{resource}'. Lock does not exist.",
            resource=resource,
            err=ErrCode.KEY_NOT_FOUND,
        )


class LockCancelledError(DistributedLockError):
    """Raised when the cancel event is set while waiting for the lock."""

    def __init__(self, resource: str):
        super().__init__(
            message=f"Could not place a lock on the resource '{resource}': Cancelled.",
            resource=resource,
            err=ErrCode.CANCELLED,
        )
