"""Buffer storage, line indexing, and undo/redo data structures."""

from .buffer import Buffer, BufferDelta, BufferView, Transaction, load
from .document import Document, EditEvent, Mark
from .gap import GapBuffer
from .line_index import LineIndex, LinePosition
from .state import BufferState
from .undo import EditOperation, HistoryManager, UndoEntry
from .validation import ensure_position, ensure_range

__all__ = [
    "Buffer",
    "BufferDelta",
    "BufferState",
    "BufferView",
    "Document",
    "EditEvent",
    "EditOperation",
    "GapBuffer",
    "HistoryManager",
    "LineIndex",
    "LinePosition",
    "Mark",
    "Transaction",
    "UndoEntry",
    "ensure_position",
    "ensure_range",
    "load",
]
