"""Cursor and change tracking state for buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .document import Document, Mark


@dataclass(slots=True)
class BufferState:
    """Cursor mark plus bookkeeping tied to a ``Document`` version."""

    cursor: Mark
    last_change_tick: int = 0
    last_query: Optional[str] = None

    @classmethod
    def for_document(cls, document: Document) -> "BufferState":
        return cls(cursor=document.mark(0))

    @property
    def offset(self) -> int:
        return self.cursor.offset

    def set_cursor(self, offset: int) -> None:
        self.cursor.offset = offset
