"""Gap buffer text storage.

Storage is one list of characters laid out as ``[prefix][gap][suffix]``.
``_gap_start`` is the first free slot and ``_gap_end`` the first slot of the
suffix, so at all times::

    prefix = _gap_start
    gap = _gap_end - _gap_start
    suffix = capacity - _gap_end
    logical_length = capacity - gap

Logical offsets below ``_gap_start`` map to the same physical index; offsets
at or above it map to ``offset + gap``. Nothing outside this module sees
physical indices.
"""

from __future__ import annotations

from typing import Iterator, List, Optional

from nova_engine.errors import CapacityExceeded

from .validation import ensure_position, ensure_range

_EMPTY = ""


class GapBuffer:
    """Mutable character store with a gap that follows the edit point."""

    MIN_GAP_SIZE = 16

    def __init__(self, text: str = "", *, max_capacity: Optional[int] = None) -> None:
        self._max_capacity = max_capacity
        size = len(text)
        capacity = size + max(self.MIN_GAP_SIZE, size // 2)
        if max_capacity is not None:
            if size > max_capacity:
                raise CapacityExceeded(size, max_capacity)
            capacity = min(capacity, max_capacity)
        self._chars: List[str] = list(text)
        self._chars.extend(_EMPTY for _ in range(capacity - size))
        self._gap_start = size
        self._gap_end = capacity
        self.growth_events = 0

    # -- introspection -------------------------------------------------

    @property
    def capacity(self) -> int:
        return len(self._chars)

    @property
    def gap_start(self) -> int:
        return self._gap_start

    @property
    def gap_end(self) -> int:
        return self._gap_end

    @property
    def gap_length(self) -> int:
        return self._gap_end - self._gap_start

    def logical_length(self) -> int:
        return len(self._chars) - self.gap_length

    def __len__(self) -> int:
        return self.logical_length()

    def __str__(self) -> str:
        return self.text()

    # -- reads ---------------------------------------------------------

    def read(self, start: int, end: int) -> str:
        """Return the text in ``[start, end)``."""

        ensure_range(self.logical_length(), start, end)
        gap_start, gap_len = self._gap_start, self.gap_length
        chars = self._chars
        if end <= gap_start:
            return _EMPTY.join(chars[start:end])
        if start >= gap_start:
            return _EMPTY.join(chars[start + gap_len : end + gap_len])
        return _EMPTY.join(chars[start:gap_start]) + _EMPTY.join(
            chars[self._gap_end : end + gap_len]
        )

    def text(self) -> str:
        return _EMPTY.join(self._chars[: self._gap_start]) + _EMPTY.join(
            self._chars[self._gap_end :]
        )

    def char_at(self, position: int) -> str:
        return self.read(position, position + 1)

    def iter_chars(self, start: int = 0) -> Iterator[str]:
        ensure_position(self.logical_length(), start)
        if start < self._gap_start:
            yield from self._chars[start : self._gap_start]
            start = self._gap_start
        yield from self._chars[start + self.gap_length :]

    # -- mutations -----------------------------------------------------

    def insert(self, position: int, text: str) -> None:
        """Insert ``text`` at ``position``, growing storage if needed."""

        ensure_position(self.logical_length(), position)
        if not text:
            return
        count = len(text)
        if count > self.gap_length:
            self._grow(count)
        self._move_gap(position)
        self._chars[self._gap_start : self._gap_start + count] = text
        self._gap_start += count

    def delete(self, start: int, end: int) -> str:
        """Remove ``[start, end)`` and return the removed text."""

        ensure_range(self.logical_length(), start, end)
        if start == end:
            return _EMPTY
        removed = self.read(start, end)
        self._move_gap(start)
        self._gap_end += end - start
        return removed

    # -- gap management ------------------------------------------------

    def _move_gap(self, position: int) -> None:
        chars = self._chars
        if position < self._gap_start:
            count = self._gap_start - position
            chars[self._gap_end - count : self._gap_end] = chars[
                position : self._gap_start
            ]
            self._gap_start = position
            self._gap_end -= count
        elif position > self._gap_start:
            count = position - self._gap_start
            chars[self._gap_start : position] = chars[
                self._gap_end : self._gap_end + count
            ]
            self._gap_start = position
            self._gap_end += count

    def _grow(self, needed: int) -> None:
        length = self.logical_length()
        required = length + needed
        capacity = max(self.capacity * 2, required + self.MIN_GAP_SIZE)
        if self._max_capacity is not None:
            if required > self._max_capacity:
                raise CapacityExceeded(required, self._max_capacity)
            capacity = min(capacity, self._max_capacity)
        try:
            extra = [_EMPTY] * (capacity - self.capacity)
        except MemoryError as exc:
            raise CapacityExceeded(capacity, self._max_capacity) from exc
        self._chars[self._gap_end : self._gap_end] = extra
        self._gap_end += len(extra)
        self.growth_events += 1


__all__ = ["GapBuffer"]
