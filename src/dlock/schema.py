import logging

import pymysql

from src.dlock.config import LockConfig
from src.dlock.exceptions import InvalidArgumentError

logger = logging.getLogger("dlock")

LOCK_TABLE = "lock"

# resource is compared byte for byte; "A" and "a" are different locks
RESOURCE_MAX_LENGTH = 255


def quote_identifier(name: str) -> str:
    if not name or "`" in name:
        raise InvalidArgumentError("schema_name", f"unusable identifier {name!r}")
    return f"`{name}`"


def qualified_table(schema_name: str) -> str:
    """`schema`.`lock` -- `lock` is a reserved word in MySQL."""
    return f"{quote_identifier(schema_name)}.{quote_identifier(LOCK_TABLE)}"


def create_database_sql(schema_name: str) -> str:
    return f"CREATE DATABASE IF NOT EXISTS {quote_identifier(schema_name)}"


def create_table_sql(schema_name: str) -> str:
    return f"""
        CREATE TABLE IF NOT EXISTS {qualified_table(schema_name)} (
            resource    VARCHAR({RESOURCE_MAX_LENGTH}) CHARACTER SET utf8mb4 COLLATE utf8mb4_bin NOT NULL,
            updatecount INT NOT NULL DEFAULT 0,
            PRIMARY KEY (resource)
        ) ENGINE=InnoDB
    """


def install_schema(conn: pymysql.connections.Connection, config: LockConfig) -> bool:
    """
    Create the lock database and table if they are missing.

    Returns False without touching the store when
    config.prepare_schema_if_necessary is off.
    """
    if not config.prepare_schema_if_necessary:
        logger.info("Schema install skipped: schema=%s", config.schema_name)
        return False

    with conn.cursor() as cursor:
        cursor.execute(create_database_sql(config.schema_name))
        cursor.execute(create_table_sql(config.schema_name))
    conn.commit()

    logger.info("Schema installed: table=%s", qualified_table(config.schema_name))
    return True
