"""Telnet control bytes and terminal output sequences for tlnt."""

from typing import Final

# Client -> server control bytes
ETX: Final[int] = 0x03  # Ctrl+C
EOT: Final[int] = 0x04  # Ctrl+D
BS: Final[int] = 0x08
LF: Final[int] = 0x0A
CR: Final[int] = 0x0D
ESC: Final[int] = 0x1B
DEL: Final[int] = 0x7F
LEFT_BRACKET: Final[int] = ord("[")

TERMINATE_BYTES: Final[frozenset[int]] = frozenset({ETX, EOT})
NEWLINE_BYTES: Final[frozenset[int]] = frozenset({CR, LF})
ERASE_BYTES: Final[frozenset[int]] = frozenset({BS, DEL})

# Server -> client sequences
CRLF: Final[bytes] = b"\r\n"
ERASE_CHAR: Final[bytes] = b"\b \b"
ERASE_LINE: Final[bytes] = b"\x1b[K"
CARRIAGE_RETURN: Final[bytes] = b"\r"


def is_printable(byte: int) -> bool:
    """
    Check whether a byte is printable ASCII (space through tilde).

    Args:
        byte: Byte value 0-255

    Returns:
        True if the byte should be appended to the edit buffer
    """
    return 0x20 <= byte <= 0x7E


def describe_byte(byte: int) -> str:
    """Printable form of a byte for debug logs."""
    if is_printable(byte):
        return chr(byte)
    return f"0x{byte:02x}"

