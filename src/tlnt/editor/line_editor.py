"""Per-connection line editing state machine."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import structlog

from tlnt.editor.buffer import EditBuffer
from tlnt.editor.escape import ArrowKey, EditorState, EscapeDecoder
from tlnt.editor.history import HistoryStore
from tlnt.exceptions import BufferOverflowError, SendFailedError
from tlnt.protocol import (
    CARRIAGE_RETURN,
    CRLF,
    ERASE_BYTES,
    ERASE_CHAR,
    ERASE_LINE,
    NEWLINE_BYTES,
    TERMINATE_BYTES,
    is_printable,
)

logger = structlog.get_logger(__name__)

Sender = Callable[[bytes], None]
Responder = Callable[[bytes], bytes | None]


class Status(str, Enum):
    """What the driving loop should do after a byte was handled."""

    CONTINUE = "continue"
    TERMINATE = "terminate"
    FAIL = "fail"


class FailureKind(str, Enum):
    """Session-local failure reasons."""

    SEND_FAILED = "send_failed"
    BUFFER_OVERFLOW = "buffer_overflow"
    ALLOCATION_FAILURE = "allocation_failure"


@dataclass(frozen=True)
class Outcome:
    """Result of :meth:`LineEditor.handle`."""

    status: Status
    failure: FailureKind | None = None

    @classmethod
    def fail(cls, kind: FailureKind) -> "Outcome":
        return cls(Status.FAIL, kind)

    @property
    def should_continue(self) -> bool:
        return self.status is Status.CONTINUE

    def __str__(self) -> str:
        if self.failure is not None:
            return f"{self.status.value}({self.failure.value})"
        return self.status.value


CONTINUE = Outcome(Status.CONTINUE)
TERMINATE = Outcome(Status.TERMINATE)


class LineEditor:
    """
    Turns a raw byte stream into edited command lines.

    One instance per session. Output goes through ``send``, which must
    raise :class:`SendFailedError` when the channel cannot take the
    bytes. Nothing here blocks; the caller owns reading and flushing.

    Arrow keys Up/Down browse the session history. Right/Left are
    decoded but do nothing, there is no in-line cursor.
    """

    def __init__(
        self,
        send: Sender,
        *,
        prompt: bytes = b"> ",
        capacity: int = 1024,
        history: HistoryStore | None = None,
        responder: Responder | None = None,
    ) -> None:
        """
        Initialize the editor.

        Args:
            send: Writes bytes to the client; raises SendFailedError on failure
            prompt: Prompt sent on start, after each commit and on redraw
            capacity: Edit buffer capacity in bytes
            history: History store to use (a fresh unbounded one by default)
            responder: Maps a committed line to response bytes (or None)
        """
        self._send = send
        self._prompt = prompt
        self._buffer = EditBuffer(capacity)
        self._history = history if history is not None else HistoryStore()
        self._decoder = EscapeDecoder()
        self._responder = responder

    @property
    def state(self) -> EditorState:
        return self._decoder.state

    @property
    def line(self) -> bytes:
        """Current contents of the edit buffer."""
        return self._buffer.getvalue()

    @property
    def history(self) -> HistoryStore:
        return self._history

    def start(self) -> Outcome:
        """Send the initial prompt."""
        return self._guard(lambda: self._send(self._prompt))

    def handle(self, byte: int) -> Outcome:
        """
        Handle one received byte.

        Args:
            byte: Byte value 0-255

        Returns:
            CONTINUE, TERMINATE or a failure outcome
        """
        return self._guard(lambda: self._dispatch(byte))

    def _guard(self, step: Callable[[], Outcome | None]) -> Outcome:
        try:
            return step() or CONTINUE
        except SendFailedError:
            return Outcome.fail(FailureKind.SEND_FAILED)
        except BufferOverflowError:
            return Outcome.fail(FailureKind.BUFFER_OVERFLOW)
        except MemoryError:
            return Outcome.fail(FailureKind.ALLOCATION_FAILURE)

    def _dispatch(self, byte: int) -> Outcome:
        decoded = self._decoder.feed(byte)
        if decoded.arrow is not None:
            self._navigate(decoded.arrow)
        elif decoded.byte is not None:
            return self._handle_normal(decoded.byte)
        return CONTINUE

    def _handle_normal(self, byte: int) -> Outcome:
        if byte in TERMINATE_BYTES:
            return TERMINATE

        if byte in NEWLINE_BYTES:
            self._commit()
        elif byte in ERASE_BYTES:
            if self._buffer.pop() is not None:
                self._send(ERASE_CHAR)
        elif is_printable(byte):
            self._buffer.append(byte)
            self._send(bytes((byte,)))
        # anything else is dropped
        return CONTINUE

    def _commit(self) -> None:
        self._send(CRLF)
        if self._buffer:
            line = self._buffer.getvalue()
            self._history.commit(line)
            self._buffer.clear()
            logger.debug("line_committed", length=len(line), history_size=len(self._history))
            if self._responder is not None:
                response = self._responder(line)
                if response:
                    self._send(response)
        self._send(self._prompt)

    def _navigate(self, arrow: ArrowKey) -> None:
        if arrow is ArrowKey.UP:
            content = self._history.up(self._buffer.getvalue())
        elif arrow is ArrowKey.DOWN:
            content = self._history.down()
        else:
            return

        if content is None:
            return
        self._buffer.replace(content)
        self._redraw()

    def _redraw(self) -> None:
        self._send(CARRIAGE_RETURN + ERASE_LINE + self._prompt + self._buffer.getvalue())
