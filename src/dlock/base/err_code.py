import enum

class ErrCode(enum.Enum):
    SUCCESS = 0

    # ---------- Caller / release errors (never retried) ----------
    INVALID_ARGUMENT = 10        # empty or too long resource, missing connection/config, bad timeout
    KEY_NOT_FOUND = 12           # release found no row for the resource

    # ---------- Contention (retried by the polling loop) ----------
    KEY_EXISTS = 11              # conditional insert lost a race (duplicate key)
    LOCK_CONFLICT = 31           # row held by someone else, deadlock, lock wait timeout

    # ---------- Store / system ----------
    IO_ERROR = 40                # connection lost or any other driver error
    TIMEOUT = 41                 # polling loop exhausted its timeout
    CANCELLED = 42               # cancel event set while waiting

    UNKNOWN_ERROR = 99


class LockResult:
    def __init__(self, ok: bool, value=None, err=ErrCode.SUCCESS):
        self.ok = ok
        self.value = value
        self.err = err

    @classmethod
    def success(cls, value=None) -> "LockResult":
        return cls(True, value)

    @classmethod
    def failure(cls, err: ErrCode, value=None) -> "LockResult":
        return cls(False, value, err)

    def __repr__(self) -> str:
        return f"LockResult(ok={self.ok}, value={self.value!r}, err={self.err.name})"
