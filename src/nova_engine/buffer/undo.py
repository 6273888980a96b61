"""Undo/redo history for document edits.

Every mutation is recorded as an immutable ``EditOperation`` that knows its
own inverse. Operations are grouped into ``UndoEntry`` units; the manager
keeps an undo stack (newest last) and a redo stack.
"""

from __future__ import annotations

import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Callable, Deque, Iterator, List, Literal, Optional, Tuple

from nova_engine.errors import NothingToRedo, NothingToUndo, StaleMatch
from nova_engine.runtime import telemetry

from .document import Document
from .validation import ensure_position

OperationKind = Literal["insert", "delete"]

DEFAULT_MAX_ENTRIES = 1000
DEFAULT_COALESCE_WINDOW = 1.0


@dataclass(frozen=True, slots=True)
class EditOperation:
    kind: OperationKind
    position: int
    text: str
    timestamp: float = field(default=0.0, compare=False)

    @property
    def end(self) -> int:
        return self.position + len(self.text)

    def inverse(self) -> "EditOperation":
        kind: OperationKind = "delete" if self.kind == "insert" else "insert"
        return EditOperation(kind, self.position, self.text, self.timestamp)

    def apply_to(self, document: Document) -> None:
        if self.kind == "insert":
            document.insert(self.position, self.text)
            return
        current = document.read(self.position, self.end)
        if current != self.text:
            raise StaleMatch(
                f"Expected {self.text!r} at {self.position}, found {current!r}",
                position=self.position,
            )
        document.delete(self.position, self.end)


@dataclass(frozen=True, slots=True)
class UndoEntry:
    label: str
    operations: Tuple[EditOperation, ...]
    coalescible: bool = False

    @property
    def timestamp(self) -> float:
        return self.operations[-1].timestamp

    @property
    def undo_cursor(self) -> int:
        """Cursor offset once every operation has been reverted."""

        first = self.operations[0]
        return first.position if first.kind == "insert" else first.end

    @property
    def redo_cursor(self) -> int:
        last = self.operations[-1]
        return last.end if last.kind == "insert" else last.position


def _merge(previous: EditOperation, op: EditOperation) -> Optional[EditOperation]:
    """Join a single-character edit onto the previous one when they touch."""

    if previous.kind != op.kind or len(op.text) != 1 or op.text == "\n":
        return None
    if previous.text.endswith("\n"):
        return None
    if op.text.isspace() and not previous.text[-1].isspace():
        return None
    if op.kind == "insert":
        if op.position == previous.end:
            return replace(
                previous, text=previous.text + op.text, timestamp=op.timestamp
            )
        return None
    if op.position + 1 == previous.position:
        return replace(op, text=op.text + previous.text)
    if op.position == previous.position:
        return replace(previous, text=previous.text + op.text, timestamp=op.timestamp)
    return None


class HistoryManager:
    """Applies edits to a document while keeping them undoable.

    Adjacent single-character edits made within ``coalesce_window`` seconds
    collapse into one entry, so undo reverts a typed word rather than a
    keystroke. The undo stack holds at most ``max_entries`` entries and
    silently forgets the oldest.
    """

    def __init__(
        self,
        document: Document,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        coalesce_window: float = DEFAULT_COALESCE_WINDOW,
        clock: Callable[[], float] = time.monotonic,
        logger_name: str | None = None,
    ) -> None:
        self.document = document
        self.coalesce_window = coalesce_window
        self._clock = clock
        self._logger_name = logger_name
        self._undo: Deque[UndoEntry] = deque(maxlen=max_entries)
        self._redo: List[UndoEntry] = []
        self._group: Optional[List[EditOperation]] = None
        self._can_coalesce = False
        self.evicted = 0

    @property
    def max_entries(self) -> int:
        return self._undo.maxlen or DEFAULT_MAX_ENTRIES

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    def peek_undo(self) -> Optional[UndoEntry]:
        return self._undo[-1] if self._undo else None

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
        self._can_coalesce = False

    def break_coalescing(self) -> None:
        """Force the next edit into a new entry (e.g. after cursor movement)."""

        self._can_coalesce = False

    # -- recording -----------------------------------------------------

    def insert(self, position: int, text: str) -> EditOperation:
        return self.apply(EditOperation("insert", position, text, self._clock()))

    def delete(self, start: int, end: int) -> EditOperation:
        text = self.document.read(start, end)
        return self.apply(EditOperation("delete", start, text, self._clock()))

    def apply(self, op: EditOperation) -> EditOperation:
        """Execute ``op`` and record it; clears the redo stack."""

        if not op.text:
            ensure_position(len(self.document), op.position)
            return op
        if not op.timestamp:
            op = replace(op, timestamp=self._clock())
        op.apply_to(self.document)
        self._redo.clear()

        if self._group is not None:
            self._group.append(op)
            return op

        top = self.peek_undo()
        if (
            self._can_coalesce
            and top is not None
            and top.coalescible
            and op.timestamp - top.timestamp <= self.coalesce_window
        ):
            merged = _merge(top.operations[0], op)
            if merged is not None:
                self._undo[-1] = replace(top, operations=(merged,))
                return op

        self._push(UndoEntry(op.kind, (op,), coalescible=len(op.text) == 1))
        self._can_coalesce = True
        return op

    @contextmanager
    def group(self, label: str) -> Iterator[List[EditOperation]]:
        """Record every edit made inside the block as a single entry.

        If the block raises, the edits it already applied are reverted and
        nothing is recorded.
        """

        if self._group is not None:
            yield self._group
            return

        collected: List[EditOperation] = []
        saved_redo = list(self._redo)
        self._group = collected
        try:
            yield collected
        except BaseException:
            self._group = None
            for op in reversed(collected):
                op.inverse().apply_to(self.document)
            self._redo = saved_redo
            raise
        finally:
            self._group = None
        if collected:
            self._push(UndoEntry(label, tuple(collected)))
            self._can_coalesce = False

    def _push(self, entry: UndoEntry) -> None:
        if len(self._undo) == self._undo.maxlen:
            self.evicted += 1
            telemetry.record_event(
                "history.evict",
                data={"label": self._undo[0].label, "max_entries": self.max_entries},
                logger_name=self._logger_name,
            )
        self._undo.append(entry)

    # -- undo / redo ---------------------------------------------------

    def undo(self) -> UndoEntry:
        if not self._undo:
            raise NothingToUndo("Nothing to undo")
        entry = self._undo.pop()
        for op in reversed(entry.operations):
            op.inverse().apply_to(self.document)
        self._redo.append(entry)
        self._can_coalesce = False
        return entry

    def redo(self) -> UndoEntry:
        if not self._redo:
            raise NothingToRedo("Nothing to redo")
        entry = self._redo.pop()
        for op in entry.operations:
            op.apply_to(self.document)
        self._undo.append(entry)
        self._can_coalesce = False
        return entry


__all__ = [
    "EditOperation",
    "HistoryManager",
    "OperationKind",
    "UndoEntry",
]
