"""UI-agnostic editing core: gap buffer, history, search, and syntax."""

from .buffer import Buffer, load
from .config import EditorSettings
from .errors import (
    CapacityExceeded,
    EngineError,
    InvalidQuery,
    NotFound,
    NothingToRedo,
    NothingToUndo,
    OutOfRange,
)

__all__ = [
    "actions",
    "buffer",
    "runtime",
    "search",
    "syntax",
    "Buffer",
    "CapacityExceeded",
    "EditorSettings",
    "EngineError",
    "InvalidQuery",
    "NotFound",
    "NothingToRedo",
    "NothingToUndo",
    "OutOfRange",
    "load",
]

__version__ = "0.1.0"
