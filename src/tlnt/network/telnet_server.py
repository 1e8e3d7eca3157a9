"""Async Telnet server for tlnt using telnetlib3."""

import asyncio
from typing import Any

import structlog
import telnetlib3

from tlnt.commands import CommandRegistry, default_registry
from tlnt.config import Settings, get_settings
from tlnt.editor import HistoryStore, LineEditor
from tlnt.network.connection import Connection
from tlnt.network.registry import ResourceRegistry
from tlnt.network.session import Session

logger = structlog.get_logger(__name__)


class TelnetServer:
    """
    Async Telnet server running one line-editing session per client.

    Uses telnetlib3 in binary mode for the Telnet protocol. Each client
    task registers its connection in the shared registry for as long as
    it runs; stopping the server force-closes whatever is still
    registered and waits for the sessions to wind down on their own.
    """

    def __init__(
        self,
        registry: ResourceRegistry,
        settings: Settings | None = None,
        commands: CommandRegistry | None = None,
    ) -> None:
        """
        Initialize the Telnet server.

        Args:
            registry: Registry shared by all sessions of this process
            settings: Settings to use (defaults to cached settings)
            commands: Literal command table (defaults to the built-ins)
        """
        self._settings = settings or get_settings()
        self._registry = registry
        self._commands = commands if commands is not None else default_registry()
        self._server: Any = None
        self._tasks: set[asyncio.Task[Any]] = set()
        self._running = False

        logger.info("telnet_server_initialized")

    def _create_session(self, connection: Connection) -> Session:
        editor = LineEditor(
            connection.write,
            prompt=self._settings.prompt_bytes,
            capacity=self._settings.max_line_length,
            history=HistoryStore(limit=self._settings.history_limit),
            responder=self._commands.respond,
        )
        return Session(connection, editor)

    async def _handle_client(
        self,
        reader: telnetlib3.TelnetReader,
        writer: telnetlib3.TelnetWriter,
    ) -> None:
        """
        Handle a new client connection.

        Args:
            reader: Telnetlib3 reader for the connection
            writer: Telnetlib3 writer for the connection
        """
        peername = writer.get_extra_info("peername")
        ip_address = peername[0] if peername else "unknown"

        task = asyncio.current_task()
        if task is not None:
            self._tasks.add(task)

        logger.info(
            "client_connected",
            ip_address=ip_address,
            total_connections=len(self._registry) + 1,
        )

        connection = Connection(reader, writer, ip_address)
        try:
            with self._registry.track(connection):
                connection.negotiate_character_mode()
                session = self._create_session(connection)
                try:
                    await session.run()
                finally:
                    session.end()
        except asyncio.CancelledError:
            logger.info(
                "client_handler_cancelled",
                connection_id=str(connection.id),
            )
            raise
        except Exception as e:
            logger.error(
                "client_handler_error",
                connection_id=str(connection.id),
                error=str(e),
                exc_info=True,
            )
        finally:
            if task is not None:
                self._tasks.discard(task)
            logger.info(
                "client_disconnected",
                connection_id=str(connection.id),
                ip_address=ip_address,
                total_connections=len(self._registry),
            )

    async def start(self, host: str | None = None, port: int | None = None) -> None:
        """
        Start the Telnet server.

        Args:
            host: Host address to bind to (defaults to settings)
            port: Port to listen on (defaults to settings, 0 picks a free port)

        Raises:
            ValueError: If the port is out of range
            OSError: If the socket cannot be bound
        """
        if self._running:
            logger.warning("telnet_server_already_running")
            return

        host = host if host is not None else self._settings.host
        port = port if port is not None else self._settings.telnet_port
        if not 0 <= port <= 65535:
            raise ValueError(f"Invalid port {port}")

        logger.info(
            "telnet_server_starting",
            host=host,
            port=port,
        )

        try:
            self._server = await telnetlib3.create_server(
                host=host,
                port=port,
                shell=self._handle_client,
                encoding=False,
            )
        except OSError as e:
            logger.error(
                "telnet_server_start_failed",
                host=host,
                port=port,
                error=str(e),
            )
            raise

        self._running = True
        logger.info(
            "telnet_server_started",
            host=host,
            port=self.port,
        )

    async def stop(self) -> None:
        """
        Stop the Telnet server gracefully.

        Stops accepting, force-closes every registered connection, then
        waits for each session task to reach its own teardown.
        """
        if not self._running:
            logger.warning("telnet_server_not_running")
            return

        logger.info("telnet_server_stopping", active_sessions=len(self._tasks))

        if self._server is not None:
            self._server.close()

        closed = self._registry.cleanup_all()

        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

        if self._server is not None:
            await self._server.wait_closed()
            self._server = None

        grace = self._settings.shutdown_grace_seconds
        if grace > 0:
            await asyncio.sleep(grace)

        self._running = False
        logger.info("telnet_server_stopped", force_closed=closed)

    @property
    def port(self) -> int | None:
        """Port actually bound (useful when started on port 0)."""
        sockets = getattr(self._server, "sockets", None)
        if not sockets:
            return None
        return sockets[0].getsockname()[1]

    def get_connection_count(self) -> int:
        """
        Get the number of active connections.

        Returns:
            Count of registered connections
        """
        return len(self._registry)

    @property
    def is_running(self) -> bool:
        """Check if the server is running."""
        return self._running

    async def __aenter__(self) -> "TelnetServer":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit."""
        await self.stop()
