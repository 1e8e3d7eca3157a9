"""Process-wide registry of live connection handles."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol, TypeVar

import structlog

logger = structlog.get_logger(__name__)


class Closeable(Protocol):
    """Anything the registry can release. ``close()`` must be idempotent."""

    def close(self) -> None: ...


HandleT = TypeVar("HandleT", bound=Closeable)


class ResourceRegistry:
    """
    Tracks live handles so shutdown can release whatever sessions still hold.

    Built once at startup and passed to the server. Every operation takes
    one lock for a bounded insert/remove/drain; the lock is never held
    while closing a handle.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._handles: set[Closeable] = set()
        self._lock = threading.Lock()

    def register(self, handle: Closeable) -> None:
        """
        Start tracking a handle.

        Args:
            handle: Handle owned by a newly started session
        """
        with self._lock:
            if handle in self._handles:
                duplicate = True
            else:
                duplicate = False
                self._handles.add(handle)
                live = len(self._handles)

        if duplicate:
            logger.warning("registry_duplicate_register", handle=str(handle))
            return
        logger.debug("registry_registered", handle=str(handle), live=live)

    def unregister(self, handle: Closeable) -> bool:
        """
        Stop tracking a handle.

        Args:
            handle: Handle to remove

        Returns:
            True if the handle was tracked, False if it was not (already
            swept by cleanup_all or never registered)
        """
        with self._lock:
            try:
                self._handles.remove(handle)
            except KeyError:
                return False
            live = len(self._handles)

        logger.debug("registry_unregistered", handle=str(handle), live=live)
        return True

    def cleanup_all(self) -> int:
        """
        Close every tracked handle and empty the registry.

        Handles registered after the snapshot is taken are left to their
        own sessions.

        Returns:
            Number of handles closed
        """
        with self._lock:
            snapshot = list(self._handles)
            self._handles.clear()

        if not snapshot:
            return 0

        logger.info("registry_cleanup_started", count=len(snapshot))
        closed = 0
        for handle in snapshot:
            try:
                handle.close()
                closed += 1
            except Exception as e:
                logger.error(
                    "registry_close_error",
                    handle=str(handle),
                    error=str(e),
                    exc_info=True,
                )
        logger.info("registry_cleanup_finished", closed=closed)
        return closed

    @contextmanager
    def track(self, handle: HandleT) -> Iterator[HandleT]:
        """
        Register a handle for the duration of a ``with`` block.

        On exit, by any path, the handle is unregistered and closed. If
        cleanup_all already swept it, that pass owns the close.
        """
        self.register(handle)
        try:
            yield handle
        finally:
            if self.unregister(handle):
                handle.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)

    def __contains__(self, handle: object) -> bool:
        with self._lock:
            return handle in self._handles
