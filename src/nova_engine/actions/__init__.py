"""High-level editing verbs built on the buffer surface."""

from .editing import (
    backspace,
    delete_forward,
    delete_line,
    delete_to_line_start,
    goto_line,
    insert_newline,
    insert_tab,
    tab_text,
    toggle_comment,
)

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
