"""Session: one connection plus its line editor and driving loop."""

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

import structlog

from tlnt.editor import TERMINATE, FailureKind, LineEditor, Outcome, Status
from tlnt.exceptions import SendFailedError
from tlnt.protocol import describe_byte

if TYPE_CHECKING:
    from tlnt.network.connection import Connection

logger = structlog.get_logger(__name__)


class SessionState(str, Enum):
    """Session state enumeration."""

    CONNECTED = "connected"  # Accepted, prompt not sent yet
    ACTIVE = "active"  # Reading and editing lines
    CLOSED = "closed"  # Loop finished, resources released


class Session:
    """
    Represents one accepted connection and its editing state.

    Owned by the task handling the connection. :meth:`run` feeds bytes
    from the connection into the editor until the editor asks to stop,
    a failure happens, or the input ends.
    """

    def __init__(self, connection: "Connection", editor: LineEditor) -> None:
        """
        Initialize a new session.

        Args:
            connection: The connection this session is bound to
            editor: Line editor writing to that connection
        """
        self.id: UUID = uuid4()
        self.connection = connection
        self.editor = editor
        self.state = SessionState.CONNECTED
        self.created_at = datetime.now(UTC)
        self.outcome: Outcome | None = None
        self.bytes_in = 0

        logger.info(
            "session_created",
            session_id=str(self.id),
            connection_id=str(connection.id),
            ip_address=connection.ip_address,
        )

    def set_state(self, state: SessionState) -> None:
        """
        Update session state.

        Args:
            state: New session state
        """
        old_state = self.state
        self.state = state
        logger.debug(
            "session_state_changed",
            session_id=str(self.id),
            old_state=old_state.value,
            new_state=state.value,
        )

    async def run(self) -> Outcome:
        """
        Drive the editor until the session ends.

        End of input (peer hung up or the connection was force-closed)
        is an ordinary termination.

        Returns:
            The outcome that ended the loop
        """
        self.set_state(SessionState.ACTIVE)

        outcome = await self._flush(self.editor.start())
        while outcome.should_continue:
            byte = await self.connection.read_byte()
            if byte is None:
                logger.debug("session_input_ended", session_id=str(self.id))
                outcome = TERMINATE
                break

            self.bytes_in += 1
            logger.debug(
                "byte_received",
                session_id=str(self.id),
                code=byte,
                symbol=describe_byte(byte),
                state=self.editor.state.value,
            )
            outcome = await self._flush(self.editor.handle(byte))

        self.outcome = outcome
        if outcome.status is Status.FAIL:
            logger.warning(
                "session_failed",
                session_id=str(self.id),
                failure=outcome.failure.value if outcome.failure else None,
            )
        return outcome

    async def _flush(self, outcome: Outcome) -> Outcome:
        if not outcome.should_continue:
            return outcome
        try:
            await self.connection.drain()
        except SendFailedError:
            return Outcome.fail(FailureKind.SEND_FAILED)
        return outcome

    def end(self) -> None:
        """Mark the session closed and log a summary."""
        if self.state is SessionState.CLOSED:
            return
        self.set_state(SessionState.CLOSED)
        duration_ms = int((datetime.now(UTC) - self.created_at).total_seconds() * 1000)
        logger.info(
            "session_ended",
            session_id=str(self.id),
            outcome=str(self.outcome) if self.outcome else None,
            bytes_in=self.bytes_in,
            history_size=len(self.editor.history),
            duration_ms=duration_ms,
        )

    def __str__(self) -> str:
        """String representation of session."""
        return f"Session({self.id}, {self.state.value})"

    def __repr__(self) -> str:
        """Detailed representation of session."""
        return (
            f"Session(id={self.id}, connection_id={self.connection.id}, "
            f"state={self.state.value}, editor_state={self.editor.state.value})"
        )
