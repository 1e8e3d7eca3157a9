"""Tests for session lifecycle and the driving loop."""

from uuid import UUID

from tlnt.commands import HELP_TEXT, default_registry
from tlnt.editor import TERMINATE, FailureKind, LineEditor, Outcome
from tlnt.network import Connection, Session, SessionState


def make_session(reader, writer, **editor_kwargs) -> Session:
    connection = Connection(reader, writer, "127.0.0.1")
    editor = LineEditor(connection.write, **editor_kwargs)
    return Session(connection, editor)


class TestSession:
    """Test cases for Session."""

    def test_session_creation(self, make_reader, make_writer) -> None:
        session = make_session(make_reader(b""), make_writer())

        assert isinstance(session.id, UUID)
        assert session.state == SessionState.CONNECTED
        assert session.outcome is None

    async def test_eof_ends_session_normally(self, make_reader, make_writer, written) -> None:
        writer = make_writer()
        session = make_session(make_reader(b"ls\r"), writer, prompt=b"$ ")

        outcome = await session.run()

        assert outcome == TERMINATE
        assert session.outcome == TERMINATE
        assert session.state == SessionState.ACTIVE
        assert written(writer) == b"$ ls\r\n$ "
        assert session.editor.history.entries == (b"ls",)

    async def test_interrupt_stops_reading(self, make_reader, make_writer) -> None:
        reader = make_reader(b"ab\x03zz")
        session = make_session(reader, make_writer())

        assert await session.run() == TERMINATE
        assert reader.read.await_count == 3
        assert session.bytes_in == 3

    async def test_help_round_trip(self, make_reader, make_writer, written) -> None:
        writer = make_writer()
        reader = make_reader(b"help\r\n\x04")
        connection = Connection(reader, writer, "127.0.0.1")
        editor = LineEditor(connection.write, responder=default_registry().respond)
        session = Session(connection, editor)

        await session.run()

        assert written(writer) == (
            b"> help\r\n" + HELP_TEXT.encode("ascii") + b"> " + b"\r\n> "
        )

    async def test_overflow_fails_session(self, make_reader, make_writer) -> None:
        session = make_session(make_reader(b"abc"), make_writer(), capacity=2)

        outcome = await session.run()

        assert outcome == Outcome.fail(FailureKind.BUFFER_OVERFLOW)
        assert session.editor.line == b"ab"

    async def test_drain_failure_fails_session(self, make_reader, make_writer) -> None:
        writer = make_writer()
        writer.drain.side_effect = ConnectionResetError("reset")
        reader = make_reader(b"abc")
        session = make_session(reader, writer)

        outcome = await session.run()

        assert outcome == Outcome.fail(FailureKind.SEND_FAILED)
        reader.read.assert_not_awaited()

    async def test_forced_close_ends_loop(self, make_reader, make_writer) -> None:
        reader = make_reader(b"abc")
        session = make_session(reader, make_writer())
        session.connection.close()

        outcome = await session.run()

        # the prompt cannot be sent on a closed connection
        assert outcome == Outcome.fail(FailureKind.SEND_FAILED)
        reader.read.assert_not_awaited()

    async def test_end_marks_closed_once(self, make_reader, make_writer) -> None:
        session = make_session(make_reader(b""), make_writer())
        await session.run()

        session.end()
        session.end()

        assert session.state == SessionState.CLOSED

    def test_session_string_representation(self, make_reader, make_writer) -> None:
        session = make_session(make_reader(b""), make_writer())

        assert str(session) == f"Session({session.id}, connected)"
        assert "editor_state=normal" in repr(session)
