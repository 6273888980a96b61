"""Editing verbs hosts bind to keys.

Each verb works at the buffer cursor unless told otherwise and returns the
``BufferDelta`` of the edit it made.
"""

from __future__ import annotations

from typing import Optional

from nova_engine.buffer import Buffer, BufferDelta
from nova_engine.config import EditorSettings
from nova_engine.syntax.languages import profile_for


def tab_text(settings: EditorSettings, column: int = 0) -> str:
    """Literal text an "insert tab" command expands to at ``column``."""

    if not settings.use_spaces:
        return "\t"
    return " " * (settings.tab_size - column % settings.tab_size)


def _leading_whitespace(line: str) -> str:
    stripped = line.lstrip(" \t")
    return line[: len(line) - len(stripped)]


def _cursor(buffer: Buffer, position: Optional[int]) -> int:
    return buffer.state.offset if position is None else position


def insert_tab(buffer: Buffer, position: Optional[int] = None) -> BufferDelta:
    pos = _cursor(buffer, position)
    column = buffer.line_of(pos).column
    return buffer.insert(pos, tab_text(buffer.settings, column))


def insert_newline(buffer: Buffer, position: Optional[int] = None) -> BufferDelta:
    """Split the line; with auto-indent the new line keeps the old indent."""

    pos = _cursor(buffer, position)
    text = "\n"
    if buffer.settings.auto_indent:
        line = buffer.line_of(pos).line
        start = buffer.document.lines.line_start(line)
        text += _leading_whitespace(buffer.read(start, pos))
    return buffer.insert(pos, text)


def backspace(buffer: Buffer, position: Optional[int] = None) -> BufferDelta:
    pos = _cursor(buffer, position)
    if pos == 0:
        return buffer.noop("backspace")
    return buffer.delete(pos - 1, pos)


def delete_forward(buffer: Buffer, position: Optional[int] = None) -> BufferDelta:
    pos = _cursor(buffer, position)
    if pos >= len(buffer):
        return buffer.noop("delete_forward")
    return buffer.delete(pos, pos + 1)


def delete_line(buffer: Buffer, line: Optional[int] = None) -> BufferDelta:
    """Remove a whole line including its line break."""

    lines = buffer.document.lines
    target = buffer.line_of(buffer.state.offset).line if line is None else line
    start = lines.line_start(target)
    end = lines.line_end(target)
    if target + 1 < lines.line_count:
        end += 1
    elif target > 0:
        start -= 1
    if start == end:
        return buffer.noop("delete_line")
    return buffer.delete(start, end)


def delete_to_line_start(
    buffer: Buffer, position: Optional[int] = None
) -> BufferDelta:
    pos = _cursor(buffer, position)
    line = buffer.line_of(pos).line
    start = buffer.document.lines.line_start(line)
    if start == pos:
        return buffer.noop("delete_to_line_start")
    return buffer.delete(start, pos)


def toggle_comment(buffer: Buffer, line: Optional[int] = None) -> BufferDelta:
    """Add or strip the language's comment prefix after the line's indent."""

    lines = buffer.document.lines
    target = buffer.line_of(buffer.state.offset).line if line is None else line
    text = lines.line_text(target)
    indent = _leading_whitespace(text)
    at = lines.line_start(target) + len(indent)
    prefix = profile_for(buffer.language).comment_prefix
    body = text[len(indent) :]
    if body.startswith(prefix):
        count = len(prefix)
        if body[count : count + 1] == " ":
            count += 1
        return buffer.delete(at, at + count)
    return buffer.insert(at, f"{prefix} ")


def goto_line(buffer: Buffer, line: int) -> int:
    """Move the cursor to the start of ``line`` (clamped); returns the offset."""

    offset = buffer.position_of(max(line, 0), 0)
    buffer.state.set_cursor(offset)
    buffer.history.break_coalescing()
    return offset


__all__ = [
    "backspace",
    "delete_forward",
    "delete_line",
    "delete_to_line_start",
    "goto_line",
    "insert_newline",
    "insert_tab",
    "tab_text",
    "toggle_comment",
]
