import pymysql
import logging
from typing import Optional
from src.dlock.base.err_code import ErrCode, LockResult
from src.dlock.base.lock_store import IsolationLevel, LockStore
from src.dlock.schema import qualified_table

logger = logging.getLogger("dlock")

# InnoDB contention codes: lock wait timeout, deadlock
_CONTENTION_CODES = (1205, 1213)


class MySQLLockStore(LockStore):
    def __init__(
        self,
        conn: pymysql.connections.Connection,
        schema_name: str,
    ):
        """
        conn        : open MySQL connection, owned by the caller;
                      must have no open transaction (autocommit=True is
                      simplest); SET TRANSACTION fails with error 1568
                      otherwise, and commit/rollback here act on that session
        schema_name : database holding the lock table
        """
        self.conn = conn
        self.schema_name = schema_name
        self.table = qualified_table(schema_name)

    # =========================================================
    # Statements
    # =========================================================
    def _insert_sql(self, with_updatecount: bool) -> str:
        if with_updatecount:
            return f"""
                INSERT INTO {self.table} (resource, updatecount)
                SELECT %s, %s FROM DUAL
                WHERE NOT EXISTS (
                    SELECT 1 FROM {self.table} WHERE resource = %s
                )
            """
        return f"""
            INSERT INTO {self.table} (resource)
            SELECT %s FROM DUAL
            WHERE NOT EXISTS (
                SELECT 1 FROM {self.table} WHERE resource = %s
            )
        """

    def _claim_sql(self) -> str:
        return f"""
            UPDATE {self.table}
            SET updatecount = 1
            WHERE updatecount = 0 AND resource = %s
        """

    def _delete_sql(self) -> str:
        return f"DELETE FROM {self.table} WHERE resource = %s"

    # =========================================================
    # Error classification
    # =========================================================
    def _classify(self, op: str, resource: str, e: pymysql.err.MySQLError) -> LockResult:
        if isinstance(e, pymysql.err.IntegrityError):
            err = ErrCode.KEY_EXISTS
        elif isinstance(e, pymysql.err.OperationalError) and e.args and e.args[0] in _CONTENTION_CODES:
            err = ErrCode.LOCK_CONFLICT
        else:
            err = ErrCode.IO_ERROR
        logger.debug(
            "LockStore.%s failed: resource=%s err=%s detail=%s",
            op, resource, err.name, e
        )
        return LockResult.failure(err)

    def _rollback(self, resource: str) -> None:
        try:
            self.conn.rollback()
        except pymysql.err.MySQLError as e:
            logger.debug("LockStore.rollback failed: resource=%s detail=%s", resource, e)

    # =========================================================
    # LockStore
    # =========================================================
    def try_insert(
        self,
        resource: str,
        *,
        updatecount: Optional[int] = None,
        isolation: Optional[IsolationLevel] = None,
    ) -> LockResult:
        if updatecount is None:
            sql = self._insert_sql(with_updatecount=False)
            params = (resource, resource)
        else:
            sql = self._insert_sql(with_updatecount=True)
            params = (resource, updatecount, resource)

        try:
            with self.conn.cursor() as cursor:
                if isolation is not None:
                    cursor.execute(f"SET TRANSACTION ISOLATION LEVEL {isolation.value}")
                    self.conn.begin()
                rows = cursor.execute(sql, params)
            self.conn.commit()
        except pymysql.err.MySQLError as e:
            self._rollback(resource)
            return self._classify("try_insert", resource, e)

        logger.debug(
            "LockStore.try_insert: resource=%s isolation=%s rows=%s",
            resource, isolation.name if isolation else None, rows
        )
        return LockResult.success(rows)

    def try_claim(self, resource: str) -> LockResult:
        try:
            with self.conn.cursor() as cursor:
                rows = cursor.execute(self._claim_sql(), (resource,))
            self.conn.commit()
        except pymysql.err.MySQLError as e:
            self._rollback(resource)
            return self._classify("try_claim", resource, e)

        logger.debug("LockStore.try_claim: resource=%s rows=%s", resource, rows)
        return LockResult.success(rows)

    def delete(self, resource: str) -> int:
        with self.conn.cursor() as cursor:
            rows = cursor.execute(self._delete_sql(), (resource,))
        self.conn.commit()

        logger.debug("LockStore.delete: resource=%s rows=%s", resource, rows)
        return rows
