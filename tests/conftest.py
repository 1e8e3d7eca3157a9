"""Shared fixtures for all tests."""

from collections.abc import Iterable
from unittest.mock import AsyncMock, MagicMock

import pytest

from tlnt.config import Settings, get_settings
from tlnt.exceptions import SendFailedError


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make sure no test sees settings cached by another."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings for in-process servers: loopback, ephemeral port, no .env."""
    return Settings(_env_file=None, host="127.0.0.1", telnet_port=0)


class Recorder:
    """Collects everything a line editor sends; can be told to start failing."""

    def __init__(self) -> None:
        self.chunks: list[bytes] = []
        self.fail = False

    def __call__(self, data: bytes) -> None:
        if self.fail:
            raise SendFailedError("channel closed")
        self.chunks.append(data)

    @property
    def output(self) -> bytes:
        return b"".join(self.chunks)

    def clear(self) -> None:
        self.chunks.clear()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


def _make_reader(data: Iterable[int] | bytes) -> MagicMock:
    reader = MagicMock()
    chunks = [bytes((b,)) for b in data]
    reader.read = AsyncMock(side_effect=chunks + [b""] * 8)
    return reader


def _make_writer(peer: tuple[str, int] = ("127.0.0.1", 50000)) -> MagicMock:
    writer = MagicMock()
    writer.connection_closed = False
    writer.is_closing.return_value = False
    writer.drain = AsyncMock()
    writer.get_extra_info.return_value = peer
    return writer


def _written(writer: MagicMock) -> bytes:
    return b"".join(call.args[0] for call in writer.write.call_args_list)


@pytest.fixture
def make_reader():
    """Factory for reader doubles returning the given bytes one per read, then EOF."""
    return _make_reader


@pytest.fixture
def make_writer():
    """Factory for writer doubles shaped like a binary-mode telnetlib3 writer."""
    return _make_writer


@pytest.fixture
def written():
    """Returns everything passed to a writer double's ``write`` so far."""
    return _written
