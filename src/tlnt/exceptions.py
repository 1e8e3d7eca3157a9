"""Exception types shared by the editor and network layers."""


class TlntError(Exception):
    """Base class for tlnt errors."""


class SendFailedError(TlntError):
    """Writing to a client channel failed or the channel is already closed."""


class BufferOverflowError(TlntError):
    """A byte was appended to an edit buffer that is already full."""

    def __init__(self, capacity: int) -> None:
        super().__init__(f"Edit buffer full ({capacity} bytes)")
        self.capacity = capacity
