"""Per-session command history with up/down navigation."""


class HistoryStore:
    """
    Ordered log of committed lines (oldest first) plus a browse cursor.

    The cursor ranges over ``[0, len(self)]``; ``cursor == len(self)``
    means the user is editing the live line rather than browsing. While
    browsing, the live line is kept aside as the draft and handed back
    when the user moves down past the most recent entry. The draft is
    never counted as a committed entry.
    """

    def __init__(self, limit: int | None = None) -> None:
        """
        Initialize an empty history.

        Args:
            limit: Max committed entries to keep (None = unbounded)
        """
        if limit is not None and limit < 1:
            raise ValueError("limit must be at least 1")
        self._entries: list[bytes] = []
        self._limit = limit
        self._cursor = 0
        self._draft: bytes | None = None

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def entries(self) -> tuple[bytes, ...]:
        """Committed entries, oldest first (draft excluded)."""
        return tuple(self._entries)

    @property
    def draft(self) -> bytes | None:
        return self._draft

    def commit(self, line: bytes) -> None:
        """
        Append a committed line and return the cursor to the live position.

        Any pending draft is discarded. No deduplication is done.

        Args:
            line: The line as it was displayed when committed
        """
        self._draft = None
        self._entries.append(bytes(line))
        if self._limit is not None and len(self._entries) > self._limit:
            dropped = len(self._entries) - self._limit
            del self._entries[:dropped]
        self._cursor = len(self._entries)

    def up(self, live: bytes) -> bytes | None:
        """
        Move one entry towards the oldest.

        Args:
            live: Current edit buffer, saved as the draft when leaving the live line

        Returns:
            The entry to display, or None if already at the oldest entry
        """
        if self._cursor == 0:
            return None
        if self._cursor == len(self._entries):
            self._draft = bytes(live)
        self._cursor -= 1
        return self._entries[self._cursor]

    def down(self) -> bytes | None:
        """
        Move one entry towards the live line.

        Returns:
            The entry (or restored draft) to display, or None if already live
        """
        if self._cursor >= len(self._entries):
            return None
        self._cursor += 1
        if self._cursor == len(self._entries):
            # up() stored the draft when the cursor left the live line
            restored, self._draft = self._draft, None
            return restored
        return self._entries[self._cursor]

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"HistoryStore(entries={len(self._entries)}, cursor={self._cursor}, "
            f"draft={self._draft is not None})"
        )
