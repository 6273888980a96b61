"""Error kinds raised by the editing core."""

from __future__ import annotations


class EngineError(RuntimeError):
    """Base class for editing-core failures."""

    def __init__(self, message: str, *, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


class OutOfRange(EngineError, IndexError):
    """A position or range falls outside the document."""

    def __init__(
        self,
        message: str,
        *,
        position: int | None = None,
        length: int | None = None,
    ) -> None:
        super().__init__(message, position=position)
        self.length = length


class InvalidQuery(EngineError, ValueError):
    """Search query is empty or not a usable pattern."""

    def __init__(self, message: str, *, query: str = "") -> None:
        super().__init__(message)
        self.query = query


class NotFound(EngineError, LookupError):
    """Search finished without a match."""

    def __init__(self, query: str) -> None:
        super().__init__(f"No match for {query!r}")
        self.query = query


class StaleMatch(EngineError):
    """A match no longer describes the text at its recorded position."""


class NothingToUndo(EngineError):
    """Undo requested with an empty undo stack."""


class NothingToRedo(EngineError):
    """Redo requested with an empty redo stack."""


class CapacityExceeded(EngineError, MemoryError):
    """The gap buffer cannot grow any further. Treated as fatal by hosts."""

    def __init__(self, requested: int, limit: int | None) -> None:
        if limit is None:
            message = f"Unable to allocate buffer capacity of {requested}"
        else:
            message = f"Buffer capacity {requested} exceeds limit {limit}"
        super().__init__(message)
        self.requested = requested
        self.limit = limit


class OperationCancelled(EngineError):
    """Cooperative cancellation was observed at a checkpoint."""


__all__ = [
    "EngineError",
    "OutOfRange",
    "InvalidQuery",
    "NotFound",
    "StaleMatch",
    "NothingToUndo",
    "NothingToRedo",
    "CapacityExceeded",
    "OperationCancelled",
]
