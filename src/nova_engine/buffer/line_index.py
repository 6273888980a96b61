"""Line-start index mapping offsets to (line, column) pairs."""

from __future__ import annotations

from bisect import bisect_right
from typing import List, NamedTuple

from nova_engine.errors import OutOfRange

from .gap import GapBuffer
from .validation import ensure_position


class LinePosition(NamedTuple):
    line: int
    column: int


class LineIndex:
    """Sorted line-start offsets for a ``GapBuffer``, rebuilt lazily.

    ``invalidate(offset)`` drops every start after ``offset``; the next query
    rescans from the last surviving start instead of the top of the document.
    """

    def __init__(self, source: GapBuffer) -> None:
        self._source = source
        self._starts: List[int] = [0]
        self._stale = True
        self.rescans = 0

    def invalidate(self, offset: int) -> None:
        # A start s only depends on the character at s - 1.
        keep = bisect_right(self._starts, offset)
        del self._starts[max(keep, 1) :]
        self._stale = True

    def _refresh(self) -> None:
        if not self._stale:
            return
        begin = self._starts[-1]
        tail = self._source.read(begin, len(self._source))
        starts = self._starts
        found = tail.find("\n")
        while found != -1:
            starts.append(begin + found + 1)
            found = tail.find("\n", found + 1)
        self._stale = False
        self.rescans += 1

    @property
    def line_count(self) -> int:
        self._refresh()
        return len(self._starts)

    def line_start(self, line: int) -> int:
        self._refresh()
        self._check_line(line)
        return self._starts[line]

    def line_end(self, line: int) -> int:
        """Offset just past the last character of ``line``, newline excluded."""

        self._refresh()
        self._check_line(line)
        if line + 1 < len(self._starts):
            return self._starts[line + 1] - 1
        return len(self._source)

    def line_text(self, line: int) -> str:
        return self._source.read(self.line_start(line), self.line_end(line))

    def line_of(self, position: int) -> LinePosition:
        ensure_position(len(self._source), position)
        self._refresh()
        line = bisect_right(self._starts, position) - 1
        return LinePosition(line, position - self._starts[line])

    def position_of(self, line: int, column: int) -> int:
        """Inverse of ``line_of``; line and column are clamped to the document."""

        if line < 0 or column < 0:
            raise OutOfRange(f"Negative coordinate ({line}, {column})")
        self._refresh()
        line = min(line, len(self._starts) - 1)
        start = self._starts[line]
        return start + min(column, self.line_end(line) - start)

    def _check_line(self, line: int) -> None:
        if line < 0 or line >= len(self._starts):
            raise OutOfRange(
                f"Line {line} outside document with {len(self._starts)} lines",
                position=line,
            )


__all__ = ["LineIndex", "LinePosition"]
