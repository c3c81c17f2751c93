import os
import subprocess
import sys
import time

import pymysql

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from src.dlock.config import get_config, setup_logging  # noqa: E402
from src.dlock.schema import install_schema  # noqa: E402

# ======================
# Global Config
# ======================

MYSQL_IMAGE = "mysql:oraclelinux9"
CONTAINER_NAME = "mysql-dlock"

BASE_DATA_DIR = "./data"
INIT_DIR = "./scripts/db-init/lock"

READY_TIMEOUT = 120

# ======================
# Utils
# ======================

def run(cmd: list[str]):
    print(">>", " ".join(cmd))
    subprocess.run(cmd, check=True)


def remove_container_if_exists(name: str):
    subprocess.run(
        ["docker", "rm", "-f", name],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )


def wait_until_ready(cfg) -> pymysql.connections.Connection:
    deadline = time.monotonic() + READY_TIMEOUT
    while True:
        try:
            return pymysql.connect(
                host=cfg.mysql_host,
                port=cfg.mysql_port,
                user=cfg.mysql_user,
                password=cfg.mysql_password,
                autocommit=True,
            )
        except pymysql.err.OperationalError:
            if time.monotonic() > deadline:
                raise
            time.sleep(2)

# ======================
# Main Logic
# ======================

def start_mysql(cfg):
    data_dir = os.path.join(BASE_DATA_DIR, CONTAINER_NAME)
    os.makedirs(data_dir, exist_ok=True)

    if not os.path.isdir(INIT_DIR):
        raise RuntimeError(f"Init SQL directory not found: {INIT_DIR}")

    remove_container_if_exists(CONTAINER_NAME)

    run([
        "docker", "run", "-d",
        "--name", CONTAINER_NAME,
        "-e", f"MYSQL_ROOT_PASSWORD={cfg.mysql_password}",
        "-p", f"{cfg.mysql_port}:3306",
        "-v", f"{os.path.abspath(data_dir)}:/var/lib/mysql",
        "-v", f"{os.path.abspath(INIT_DIR)}:/docker-entrypoint-initdb.d",
        MYSQL_IMAGE
    ])

    print(f"✅ {CONTAINER_NAME} started at localhost:{cfg.mysql_port}")


def main():
    cfg = get_config()
    setup_logging(cfg)

    start_mysql(cfg)

    # init SQL only creates `dlock`; a custom DLOCK_SCHEMA_NAME needs its own table
    conn = wait_until_ready(cfg)
    try:
        install_schema(conn, cfg)
    finally:
        conn.close()

    print(f"\n🎉 Lock table ready: `{cfg.schema_name}`.`lock`")


if __name__ == "__main__":
    main()
