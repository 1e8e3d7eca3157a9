"""Byte-level client channel for tlnt."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

import structlog
from telnetlib3.telopt import ECHO, SGA, WILL

from tlnt.exceptions import SendFailedError

if TYPE_CHECKING:
    from telnetlib3 import TelnetReader, TelnetWriter

logger = structlog.get_logger(__name__)


class Connection:
    """
    Represents a client connection to the server.

    Wraps a binary-mode telnetlib3 reader/writer and exposes the
    byte-at-a-time reads and raw writes the line editor needs.
    Closing is idempotent.
    """

    def __init__(
        self,
        reader: "TelnetReader",
        writer: "TelnetWriter",
        ip_address: str,
    ) -> None:
        """
        Initialize a new connection.

        Args:
            reader: Telnetlib3 reader (binary mode) for receiving data
            writer: Telnetlib3 writer (binary mode) for sending data
            ip_address: Client IP address
        """
        self.id: UUID = uuid4()
        self.reader = reader
        self.writer = writer
        self.ip_address = ip_address
        self.connected_at = datetime.now(UTC)
        self._closed = False

        logger.info(
            "connection_created",
            connection_id=str(self.id),
            ip_address=self.ip_address,
        )

    def negotiate_character_mode(self) -> None:
        """
        Ask the client to stop echoing locally and to send keystrokes
        as they are typed (server ECHO + SGA).
        """
        try:
            self.writer.iac(WILL, ECHO)
            self.writer.iac(WILL, SGA)
        except (AttributeError, ConnectionError, OSError) as e:
            # Some clients may not support option negotiation
            logger.debug(
                "negotiation_skipped",
                connection_id=str(self.id),
                error=str(e),
            )

    async def read_byte(self) -> int | None:
        """
        Read a single byte from the client.

        Returns:
            The byte value, or None at end of input (peer closed, the
            connection was force-closed, or the read failed)
        """
        if self._closed:
            return None

        try:
            data = await self.reader.read(1)
        except (ConnectionError, OSError) as e:
            logger.info(
                "read_connection_lost",
                connection_id=str(self.id),
                error=str(e),
            )
            return None

        if not data:
            return None
        return data[0]

    def write(self, data: bytes) -> None:
        """
        Queue bytes for the client.

        Args:
            data: Raw bytes to send

        Raises:
            SendFailedError: If the connection is closed or the write fails
        """
        if self._closed or self._channel_closed():
            raise SendFailedError(f"{self} is closed")

        try:
            self.writer.write(data)
        except (ConnectionError, OSError) as e:
            logger.warning(
                "send_failed",
                connection_id=str(self.id),
                error=str(e),
            )
            raise SendFailedError(str(e)) from e

    async def drain(self) -> None:
        """
        Wait until queued output is flushed.

        Raises:
            SendFailedError: If flushing fails
        """
        if self._closed or self._channel_closed():
            raise SendFailedError(f"{self} is closed")

        try:
            await self.writer.drain()
        except (ConnectionError, OSError) as e:
            logger.warning(
                "drain_failed",
                connection_id=str(self.id),
                error=str(e),
            )
            raise SendFailedError(str(e)) from e

    async def send(self, data: bytes) -> None:
        """Write and flush."""
        self.write(data)
        await self.drain()

    def _channel_closed(self) -> bool:
        if getattr(self.writer, "connection_closed", False) is True:
            return True
        is_closing = getattr(self.writer, "is_closing", None)
        return callable(is_closing) and is_closing() is True

    def close(self) -> None:
        """Close the connection gracefully."""
        if self._closed:
            return
        self._closed = True

        logger.info(
            "connection_closing",
            connection_id=str(self.id),
            ip_address=self.ip_address,
        )

        try:
            self.writer.close()
            # wake a read blocked on this connection
            feed_eof = getattr(self.reader, "feed_eof", None)
            if callable(feed_eof):
                feed_eof()
        except (ConnectionError, OSError, RuntimeError) as e:
            logger.error(
                "connection_close_error",
                connection_id=str(self.id),
                error=str(e),
            )

    @property
    def is_closed(self) -> bool:
        """Check if connection is closed."""
        return self._closed

    def __str__(self) -> str:
        """String representation of connection."""
        return f"Connection({self.id}, {self.ip_address})"

    def __repr__(self) -> str:
        """Detailed representation of connection."""
        return (
            f"Connection(id={self.id}, ip={self.ip_address}, "
            f"connected_at={self.connected_at}, closed={self._closed})"
        )
