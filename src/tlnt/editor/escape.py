"""Decoder for the 3-byte ``ESC [ X`` arrow-key sequences."""

from dataclasses import dataclass
from enum import Enum

from tlnt.protocol import ESC, LEFT_BRACKET


class EditorState(str, Enum):
    """Line editor FSM state."""

    NORMAL = "normal"
    ESCAPE_SEEN = "escape_seen"  # got ESC
    BRACKET_SEEN = "bracket_seen"  # got ESC [


class ArrowKey(str, Enum):
    """Arrow keys carried by ``ESC [ A..D``."""

    UP = "up"
    DOWN = "down"
    RIGHT = "right"
    LEFT = "left"


ARROW_FINAL_BYTES: dict[int, ArrowKey] = {
    ord("A"): ArrowKey.UP,
    ord("B"): ArrowKey.DOWN,
    ord("C"): ArrowKey.RIGHT,
    ord("D"): ArrowKey.LEFT,
}


@dataclass(frozen=True)
class Decoded:
    """
    Result of feeding one byte to the decoder.

    Exactly one of the fields is meaningful: ``pending`` means the byte
    was swallowed as part of a sequence in progress, ``arrow`` carries a
    completed arrow key, ``byte`` is a byte to handle as ordinary input.
    """

    pending: bool = False
    arrow: ArrowKey | None = None
    byte: int | None = None


PENDING = Decoded(pending=True)


class EscapeDecoder:
    """
    Tracks the escape-sequence part of the editor FSM.

    An aborted sequence gives back the byte that broke it so the caller
    can re-dispatch it through the normal input path. The ESC and ``[``
    already consumed are dropped.
    """

    def __init__(self) -> None:
        self.state = EditorState.NORMAL

    def feed(self, byte: int) -> Decoded:
        if self.state is EditorState.NORMAL:
            if byte == ESC:
                self.state = EditorState.ESCAPE_SEEN
                return PENDING
            return Decoded(byte=byte)

        if self.state is EditorState.ESCAPE_SEEN:
            if byte == LEFT_BRACKET:
                self.state = EditorState.BRACKET_SEEN
                return PENDING
            self.state = EditorState.NORMAL
            return self.feed(byte)

        # BRACKET_SEEN
        self.state = EditorState.NORMAL
        arrow = ARROW_FINAL_BYTES.get(byte)
        if arrow is not None:
            return Decoded(arrow=arrow)
        return self.feed(byte)
