"""Fixed-capacity edit buffer for a single command line."""

from tlnt.exceptions import BufferOverflowError


class EditBuffer:
    """
    Owned, length-checked byte buffer holding the line being edited.

    Capacity is fixed at construction; appends past capacity raise
    instead of truncating.
    """

    def __init__(self, capacity: int) -> None:
        """
        Initialize an empty buffer.

        Args:
            capacity: Maximum number of bytes the line may hold

        Raises:
            ValueError: If capacity is not positive
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._data = bytearray()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def is_full(self) -> bool:
        return len(self._data) >= self._capacity

    def append(self, byte: int) -> None:
        """
        Append one byte.

        Raises:
            BufferOverflowError: If the buffer is already at capacity
        """
        if self.is_full:
            raise BufferOverflowError(self._capacity)
        self._data.append(byte)

    def pop(self) -> int | None:
        """Remove and return the last byte, or None if empty."""
        if not self._data:
            return None
        return self._data.pop()

    def replace(self, content: bytes) -> None:
        """
        Replace the whole buffer (history recall).

        Raises:
            BufferOverflowError: If content is longer than capacity
        """
        if len(content) > self._capacity:
            raise BufferOverflowError(self._capacity)
        self._data[:] = content

    def clear(self) -> None:
        self._data.clear()

    def getvalue(self) -> bytes:
        """Snapshot of the current contents."""
        return bytes(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)

    def __repr__(self) -> str:
        return f"EditBuffer(len={len(self._data)}, capacity={self._capacity})"
