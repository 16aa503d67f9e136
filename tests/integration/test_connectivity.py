"""Integration tests for configuration checks against local servers."""

import asyncio
from collections.abc import AsyncIterator

import pytest
from pydantic import SecretStr

from itest_runner.connectivity import (
    can_connect,
    check_database,
    check_license_server,
    check_settings_database,
)
from itest_runner.testing.factories import GlobalConfigFactory


@pytest.fixture
async def server_port() -> AsyncIterator[int]:
    """Start a TCP server on localhost and return its port."""

    async def _accept(_: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        writer.close()

    server = await asyncio.start_server(_accept, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    yield port
    server.close()
    await server.wait_closed()


@pytest.fixture
async def closed_port() -> int:
    """Return a localhost port nothing listens on."""
    server = await asyncio.start_server(lambda r, w: None, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    server.close()
    await server.wait_closed()
    return port


async def test_can_connect(server_port: int, closed_port: int) -> None:
    """Reports whether a port accepts connections."""
    assert await can_connect("127.0.0.1", server_port)
    assert not await can_connect("127.0.0.1", closed_port)


class TestCheckLicenseServer:
    """Tests for check_license_server."""

    async def test_connected(self, server_port: int) -> None:
        """A listening license server passes."""
        result = await check_license_server("127.0.0.1", str(server_port))

        assert result.ok
        assert result.message == "Connected to license server"

    async def test_unreachable(self, closed_port: int) -> None:
        """A server that refuses connections fails."""
        result = await check_license_server("127.0.0.1", str(closed_port))

        assert result.message == "Cannot reach license server"

    async def test_requires_host(self) -> None:
        """The host is mandatory."""
        result = await check_license_server("", "27000")

        assert not result.ok
        assert result.message == "Must specify license server"

    async def test_rejects_invalid_port(self) -> None:
        """The port must be numeric."""
        result = await check_license_server("127.0.0.1", "abc")

        assert result.message == "Invalid license server port: abc"


class TestCheckDatabase:
    """Tests for check_database."""

    async def test_listener_that_is_not_a_database(self, server_port: int) -> None:
        """An open port alone does not pass the check."""
        result = await check_database(
            name="itest",
            db_type="MySQL",
            uri="",
            host="127.0.0.1",
            port=str(server_port),
            username="ci",
            password="wrong-password",
            timeout=1.0,
        )

        assert result.status == "error"
        assert result.message == "Please check database credentials"

    async def test_uri_listener_that_is_not_a_database(
        self, server_port: int
    ) -> None:
        """A URI is checked by logging in as well."""
        result = await check_database(
            name="",
            db_type="",
            uri=f"jdbc:postgresql://127.0.0.1:{server_port}/itest",
            host="",
            port="",
            username="ci",
            password="pw",
            timeout=1.0,
        )

        assert result.message == "Please check database credentials"

    async def test_unreachable(self, closed_port: int) -> None:
        """A database that refuses connections fails."""
        result = await check_database(
            name="",
            db_type="",
            uri=f"jdbc:mysql://127.0.0.1:{closed_port}/itest",
            host="",
            port="",
            username="ci",
            password="pw",
            timeout=1.0,
        )

        assert result.message == "Please check database credentials"

    async def test_missing_field(self) -> None:
        """All discrete fields are needed without a URI."""
        result = await check_database(
            name="itest",
            db_type="MySQL",
            uri="",
            host="",
            port="3306",
            username="ci",
            password="pw",
        )

        assert result.message == "Missing required field"

    async def test_missing_credentials_with_uri(self) -> None:
        """Credentials are needed with a URI too."""
        result = await check_database(
            name="",
            db_type="",
            uri="jdbc:mysql://db/itest",
            host="",
            port="",
            username="ci",
            password="",
        )

        assert result.message == "Please specify username and password"

    async def test_unsupported_type(self) -> None:
        """Only MySQL and PostgreSQL are supported."""
        result = await check_database(
            name="itest",
            db_type="Oracle",
            uri="",
            host="db",
            port="1521",
            username="ci",
            password="pw",
        )

        assert result.message == "Unsupported database type: Oracle"

    async def test_invalid_uri(self) -> None:
        """A URI without a host is rejected."""
        result = await check_database(
            name="",
            db_type="",
            uri="not a uri",
            host="",
            port="",
            username="ci",
            password="pw",
        )

        assert result.message == "Invalid database URI: not a uri"


async def test_check_settings_database(server_port: int) -> None:
    """Stored settings are checked by logging in."""
    settings = GlobalConfigFactory.build(
        db_username="ci",
        db_password=SecretStr("pw"),
        db_uri=f"jdbc:mysql://127.0.0.1:{server_port}/itest",
    )

    result = await check_settings_database(settings, timeout=1.0)

    assert result.message == "Please check database credentials"
