"""
Distributed lock configuration

This module provides configuration management for the lock using Pydantic Settings.
All configuration values can be set via environment variables or .env file.
"""

import logging

from pydantic_settings import BaseSettings
from pydantic import Field


class LockConfig(BaseSettings):
    """
    Distributed lock configuration

    All settings can be overridden via environment variables.
    Example: DLOCK_SCHEMA_NAME=jobs DLOCK_USE_NATIVE_TRANSACTIONS=false
    """

    # ========== Lock Table ==========
    schema_name: str = Field(
        default="dlock",
        description="Database (schema) holding the lock table"
    )
    prepare_schema_if_necessary: bool = Field(
        default=True,
        description="Create the schema and lock table on install_schema()"
    )

    # ========== Acquisition ==========
    use_native_transactions: bool = Field(
        default=True,
        description="Claim locks inside a REPEATABLE READ transaction; "
                    "otherwise use the updatecount claim flag"
    )
    distributed_lock_timeout: float = Field(
        default=600.0,
        ge=0,
        description="Default acquisition timeout in seconds"
    )
    max_backoff: float = Field(
        default=1.0,
        gt=0,
        description="Upper bound in seconds for one sleep between attempts"
    )

    # ========== MySQL Connection (scripts and tests) ==========
    mysql_host: str = Field(
        default="127.0.0.1",
        description="MySQL host"
    )
    mysql_port: int = Field(
        default=33061,
        description="MySQL port"
    )
    mysql_user: str = Field(
        default="root",
        description="MySQL user"
    )
    mysql_password: str = Field(
        default="1234",
        description="MySQL password"
    )
    mysql_database: str = Field(
        default="dlock",
        description="Default database for new connections"
    )

    # ========== Logging Configuration ==========
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    class Config:
        env_prefix = "DLOCK_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global configuration instance
config = LockConfig()


def get_config() -> LockConfig:
    """
    Get the global configuration instance.

    Returns:
        LockConfig: The global configuration instance
    """
    return config


def setup_logging(cfg: LockConfig = None) -> None:
    cfg = cfg or get_config()
    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
