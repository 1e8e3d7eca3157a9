"""Line editing core: escape decoding, history and the editor FSM."""

from tlnt.editor.buffer import EditBuffer
from tlnt.editor.escape import ArrowKey, EditorState, EscapeDecoder
from tlnt.editor.history import HistoryStore
from tlnt.editor.line_editor import (
    CONTINUE,
    TERMINATE,
    FailureKind,
    LineEditor,
    Outcome,
    Status,
)

__all__ = [
    "ArrowKey",
    "CONTINUE",
    "EditBuffer",
    "EditorState",
    "EscapeDecoder",
    "FailureKind",
    "HistoryStore",
    "LineEditor",
    "Outcome",
    "Status",
    "TERMINATE",
]
