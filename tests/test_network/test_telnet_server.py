"""Tests for the Telnet server and its session teardown."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
import telnetlib3

from tlnt.commands import HELP_TEXT
from tlnt.network import ResourceRegistry, TelnetServer


@pytest.fixture
def registry() -> ResourceRegistry:
    return ResourceRegistry()


class TestClientHandling:
    """Drive the per-client handler with stream doubles."""

    async def test_session_output_and_teardown(
        self, registry, settings, make_reader, make_writer, written
    ) -> None:
        server = TelnetServer(registry, settings)
        writer = make_writer()

        await server._handle_client(make_reader(b"hi\r"), writer)

        assert written(writer) == b"> hi\r\nUnknown command: hi\r\n> "
        writer.close.assert_called_once()
        assert len(registry) == 0

    async def test_registered_before_first_read(
        self, registry, settings, make_writer
    ) -> None:
        server = TelnetServer(registry, settings)
        seen: list[int] = []

        async def read(_n: int) -> bytes:
            seen.append(len(registry))
            return b""

        reader = MagicMock()
        reader.read = AsyncMock(side_effect=read)

        await server._handle_client(reader, make_writer())

        assert seen == [1]
        assert len(registry) == 0

    async def test_failure_still_releases(
        self, registry, settings, make_reader, make_writer
    ) -> None:
        settings.max_line_length = 2
        server = TelnetServer(registry, settings)
        writer = make_writer()

        await server._handle_client(make_reader(b"abcdef"), writer)

        writer.close.assert_called_once()
        assert len(registry) == 0

    async def test_unexpected_error_is_contained(
        self, registry, settings, make_writer
    ) -> None:
        server = TelnetServer(registry, settings)
        reader = MagicMock()
        reader.read = AsyncMock(side_effect=ValueError("bad stream"))
        writer = make_writer()

        await server._handle_client(reader, writer)

        writer.close.assert_called_once()
        assert len(registry) == 0


class TestServerLifecycle:
    """Start/stop behavior."""

    async def test_invalid_port(self, registry, settings) -> None:
        server = TelnetServer(registry, settings)

        with pytest.raises(ValueError):
            await server.start(port=70000)
        assert not server.is_running

    async def test_stop_when_not_running_is_noop(self, registry, settings) -> None:
        server = TelnetServer(registry, settings)

        await server.stop()

        assert not server.is_running


async def read_until(reader, marker: bytes, timeout: float = 10.0) -> bytes:
    """Read from a telnetlib3 client until ``marker`` shows up."""
    data = b""

    async def _read() -> bytes:
        nonlocal data
        while marker not in data:
            chunk = await reader.read(1024)
            if not chunk:
                break
            data += chunk
        return data

    return await asyncio.wait_for(_read(), timeout=timeout)


class TestLiveServer:
    """Real sockets: telnetlib3 server and client in one event loop."""

    async def test_help_then_forced_shutdown(self, registry, settings) -> None:
        server = TelnetServer(registry, settings)
        await server.start()
        try:
            reader, writer = await telnetlib3.open_connection(
                host="127.0.0.1",
                port=server.port,
                encoding=False,
                connect_minwait=0.05,
                connect_maxwait=1.0,
            )

            await read_until(reader, b"> ")
            assert server.get_connection_count() == 1

            writer.write(b"help\r")
            output = await read_until(reader, HELP_TEXT.encode("ascii") + b"> ")
            assert b"help\r\n" in output

            await server.stop()

            # the forced close reaches the client as end of stream
            rest = await asyncio.wait_for(reader.read(1024), timeout=10.0)
            while rest:
                rest = await asyncio.wait_for(reader.read(1024), timeout=10.0)
            assert len(registry) == 0
            assert not server.is_running
        finally:
            if server.is_running:
                await server.stop()

    async def test_context_manager_closes_live_clients(self, registry, settings) -> None:
        async with TelnetServer(registry, settings) as server:
            assert server.is_running
            reader, _writer = await telnetlib3.open_connection(
                host="127.0.0.1",
                port=server.port,
                encoding=False,
                connect_minwait=0.05,
                connect_maxwait=1.0,
            )
            await read_until(reader, b"> ")
            assert len(registry) == 1

        assert not server.is_running
        assert len(registry) == 0
        rest = await asyncio.wait_for(reader.read(1024), timeout=10.0)
        while rest:
            rest = await asyncio.wait_for(reader.read(1024), timeout=10.0)
