"""Checks run from the configuration screen, outside of any build."""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Literal
from urllib.parse import urlsplit

from sqlalchemy import URL, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from itest_runner.models.config import (
    DEFAULT_CLI_EXECUTABLE,
    DEFAULT_RT_EXECUTABLE,
    GlobalConfig,
)

log = logging.getLogger(__name__)

DEFAULT_LICENSE_SERVER_PORT = 27000
DEFAULT_DATABASE_PORTS = {"mysql": 3306, "postgresql": 5432}
DATABASE_TYPES = ("MySQL", "PostgreSQL")
DATABASE_DRIVERS = {"mysql": "mysql+pymysql", "postgresql": "postgresql+psycopg"}
CONNECT_TIMEOUT = 1.0
DATABASE_CONNECT_TIMEOUT = 5.0

type CheckStatus = Literal["ok", "error"]


@dataclass(frozen=True, kw_only=True)
class CheckResult:
    """Outcome of a configuration check, shown next to the checked fields."""

    status: CheckStatus
    message: str

    @property
    def ok(self) -> bool:
        """Whether the check passed."""
        return self.status == "ok"


def _ok(message: str) -> CheckResult:
    return CheckResult(status="ok", message=message)


def _error(message: str) -> CheckResult:
    return CheckResult(status="error", message=message)


def check_executable_paths(cli_path: str, rt_path: str) -> CheckResult:
    """Check that configured paths point at the iTest executables.

    Empty paths are fine: the executables are then looked up on PATH.
    """
    if cli_path and DEFAULT_CLI_EXECUTABLE not in cli_path:
        return _error("CLI path does not end at executable")
    if rt_path and DEFAULT_RT_EXECUTABLE not in rt_path:
        return _error("RT path does not end at executable")
    return _ok("Success")


async def can_connect(host: str, port: int, timeout: float = CONNECT_TIMEOUT) -> bool:
    """Whether a TCP connection to ``host:port`` opens within the timeout."""
    try:
        async with asyncio.timeout(timeout):
            _, writer = await asyncio.open_connection(host, port)
    except (OSError, TimeoutError) as exc:
        log.info("Cannot connect to %s:%s: %s", host, port, exc)
        return False

    writer.close()
    await writer.wait_closed()
    return True


async def check_license_server(
    host: str, port: str, timeout: float = CONNECT_TIMEOUT
) -> CheckResult:
    """Check that the license server accepts connections."""
    if not host:
        return _error("Must specify license server")

    try:
        port_number = int(port) if port else DEFAULT_LICENSE_SERVER_PORT
    except ValueError:
        return _error(f"Invalid license server port: {port}")

    if await can_connect(host, port_number, timeout):
        return _ok("Connected to license server")
    return _error("Cannot reach license server")


def parse_database_kind(value: str) -> str:
    """Database kind named by a type or URI; PostgreSQL unless MySQL is named."""
    return "mysql" if "mysql" in value.lower() else "postgresql"


def build_database_url(name: str, db_type: str, host: str, port: str) -> str:
    """JDBC-style URL from the discrete database fields."""
    return f"jdbc:{db_type.lower()}://{host}:{port}/{name}"


def database_address(url: str, kind: str) -> tuple[str, int] | None:
    """Host and port a database URL points at, or None if it names no host."""
    parts = urlsplit(url.removeprefix("jdbc:"))
    try:
        port = parts.port
    except ValueError:
        return None
    if not parts.hostname:
        return None
    return parts.hostname, port or DEFAULT_DATABASE_PORTS[kind]


def engine_url(url: str, kind: str, username: str, password: str) -> URL | None:
    """SQLAlchemy URL logging in to the database a JDBC-style URL names."""
    address = database_address(url, kind)
    if address is None:
        return None
    host, port = address
    database = urlsplit(url.removeprefix("jdbc:")).path.lstrip("/")
    return URL.create(
        drivername=DATABASE_DRIVERS[kind],
        username=username,
        password=password,
        host=host,
        port=port,
        database=database or None,
    )


def login(url: URL, timeout: float = DATABASE_CONNECT_TIMEOUT) -> None:
    """Open and close one connection to the database.

    Raises:
        SQLAlchemyError: If the server is unreachable or rejects the login

    """
    engine = create_engine(
        url,
        poolclass=NullPool,
        connect_args={"connect_timeout": max(1, math.ceil(timeout))},
    )
    try:
        with engine.connect():
            pass
    finally:
        engine.dispose()


async def check_database(
    *,
    name: str,
    db_type: str,
    uri: str,
    host: str,
    port: str,
    username: str,
    password: str,
    timeout: float = DATABASE_CONNECT_TIMEOUT,
) -> CheckResult:
    """Check the report database settings by logging in to the database.

    A URI replaces the discrete name, type, host and port fields. Credentials
    are required either way.
    """
    if uri:
        url = uri
    else:
        if not all((name, db_type, host, port, username, password)):
            return _error("Missing required field")
        url = build_database_url(name, db_type, host, port)

    if not username or not password:
        return _error("Please specify username and password")

    if db_type and db_type.lower() not in {t.lower() for t in DATABASE_TYPES}:
        return _error(f"Unsupported database type: {db_type}")

    kind = parse_database_kind(db_type or url)
    target = engine_url(url, kind, username, password)
    if target is None:
        return _error(f"Invalid database URI: {url}")

    try:
        await asyncio.to_thread(login, target, timeout)
    except SQLAlchemyError as exc:
        log.info("Cannot log in to %s: %s", target.render_as_string(), exc)
        return _error("Please check database credentials")
    return _ok("Success")


async def check_settings_database(
    settings: GlobalConfig, timeout: float = DATABASE_CONNECT_TIMEOUT
) -> CheckResult:
    """Run ``check_database`` against stored settings."""
    return await check_database(
        name=settings.db_name,
        db_type=settings.db_type,
        uri=settings.db_uri,
        host=settings.db_host,
        port=settings.db_port,
        username=settings.db_username,
        password=settings.db_password.get_secret_value(),
        timeout=timeout,
    )
