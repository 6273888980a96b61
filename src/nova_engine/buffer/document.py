"""Document: gap-buffer text plus line index, marks, and edit notifications."""

from __future__ import annotations

import weakref
from dataclasses import dataclass
from typing import Callable, List, Literal, Optional

from .gap import GapBuffer
from .line_index import LineIndex, LinePosition
from .validation import ensure_position, ensure_range

EditKind = Literal["insert", "delete"]


@dataclass(frozen=True, slots=True)
class EditEvent:
    """Dirty range produced by one mutation.

    ``[start, old_end)`` is the replaced region before the edit and
    ``[start, new_end)`` the region after it.
    """

    kind: EditKind
    start: int
    old_end: int
    new_end: int
    text: str
    version: int

    @property
    def delta(self) -> int:
        return self.new_end - self.old_end


EditListener = Callable[[EditEvent], None]


class Mark:
    """A position that follows the text around it as the document changes.

    Inserts at or before the mark push it right, deletes before it pull it
    left, and a delete spanning it collapses it to the delete start.
    """

    __slots__ = ("offset", "__weakref__")

    def __init__(self, offset: int) -> None:
        self.offset = offset

    def __repr__(self) -> str:
        return f"Mark({self.offset})"

    def _on_insert(self, position: int, count: int) -> None:
        if self.offset >= position:
            self.offset += count

    def _on_delete(self, start: int, end: int) -> None:
        if self.offset >= end:
            self.offset -= end - start
        elif self.offset > start:
            self.offset = start


class Document:
    """Editable text owned by a single editing session."""

    def __init__(self, text: str = "", *, max_capacity: Optional[int] = None) -> None:
        self._gap = GapBuffer(text, max_capacity=max_capacity)
        self._lines = LineIndex(self._gap)
        self._marks: "weakref.WeakSet[Mark]" = weakref.WeakSet()
        self._listeners: List[EditListener] = []
        self.version = 0
        self.dirty = False

    @classmethod
    def from_text(cls, text: str, *, max_capacity: Optional[int] = None) -> "Document":
        return cls(text, max_capacity=max_capacity)

    @property
    def storage(self) -> GapBuffer:
        return self._gap

    @property
    def lines(self) -> LineIndex:
        return self._lines

    def __len__(self) -> int:
        return self._gap.logical_length()

    def logical_length(self) -> int:
        return self._gap.logical_length()

    def text(self) -> str:
        return self._gap.text()

    def read(self, start: int, end: int) -> str:
        return self._gap.read(start, end)

    # -- marks and listeners -------------------------------------------

    def mark(self, offset: int) -> Mark:
        ensure_position(len(self), offset)
        created = Mark(offset)
        self._marks.add(created)
        return created

    def release(self, mark: Mark) -> None:
        self._marks.discard(mark)

    def subscribe(self, listener: EditListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: EditListener) -> None:
        self._listeners.remove(listener)

    # -- mutations -----------------------------------------------------

    def insert(self, position: int, text: str) -> None:
        self._gap.insert(position, text)
        if not text:
            return
        for mark in list(self._marks):
            mark._on_insert(position, len(text))
        self._changed("insert", position, position, position + len(text), text)

    def delete(self, start: int, end: int) -> str:
        removed = self._gap.delete(start, end)
        if not removed:
            return removed
        for mark in list(self._marks):
            mark._on_delete(start, end)
        self._changed("delete", start, end, start, removed)
        return removed

    def _changed(
        self, kind: EditKind, start: int, old_end: int, new_end: int, text: str
    ) -> None:
        self.version += 1
        self.dirty = True
        self._lines.invalidate(start)
        event = EditEvent(kind, start, old_end, new_end, text, self.version)
        for listener in list(self._listeners):
            listener(event)

    # -- coordinates ---------------------------------------------------

    def line_of(self, position: int) -> LinePosition:
        return self._lines.line_of(position)

    def position_of(self, line: int, column: int) -> int:
        return self._lines.position_of(line, column)

    def mark_clean(self) -> None:
        self.dirty = False

    def check_range(self, start: int, end: int) -> None:
        ensure_range(len(self), start, end)


__all__ = ["Document", "EditEvent", "EditKind", "EditListener", "Mark"]
