from __future__ import annotations

from nova_engine import Buffer, EditorSettings
from nova_engine.actions import (
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


def make_buffer(
    text: str = "", cursor: int | None = None, **options
) -> Buffer:
    buffer = Buffer.load(text, **options)
    buffer.state.set_cursor(len(text) if cursor is None else cursor)
    return buffer


def test_tab_text_aligns_to_tab_stop() -> None:
    settings = EditorSettings(tab_size=4)

    assert tab_text(settings) == "    "
    assert tab_text(settings, column=1) == "   "
    assert tab_text(settings, column=4) == "    "
    assert tab_text(settings.with_overrides(use_spaces=False), column=3) == "\t"


def test_insert_tab_uses_cursor_column() -> None:
    buffer = make_buffer("ab")

    delta = insert_tab(buffer)

    assert buffer.serialize() == "ab  "
    assert delta.cursor == 4


def test_hard_tabs() -> None:
    buffer = make_buffer("x", settings=EditorSettings(use_spaces=False))

    insert_tab(buffer, 0)

    assert buffer.serialize() == "\tx"


def test_newline_keeps_indent() -> None:
    buffer = make_buffer("    x = 1")

    delta = insert_newline(buffer)

    assert buffer.serialize() == "    x = 1\n    "
    assert delta.cursor == len("    x = 1\n    ")


def test_newline_without_auto_indent() -> None:
    buffer = make_buffer("    x", settings=EditorSettings(auto_indent=False))

    insert_newline(buffer)

    assert buffer.serialize() == "    x\n"


def test_backspace_and_delete_forward() -> None:
    buffer = make_buffer("abc", cursor=2)

    backspace(buffer)
    assert buffer.serialize() == "ac"
    assert buffer.state.offset == 1

    delete_forward(buffer)
    assert buffer.serialize() == "a"


def test_edge_deletes_are_noops() -> None:
    buffer = make_buffer("abc", cursor=0)
    assert backspace(buffer).status == "noop"

    buffer.state.set_cursor(3)
    assert delete_forward(buffer).status == "noop"
    assert buffer.serialize() == "abc"


def test_delete_line() -> None:
    buffer = make_buffer("a\nb\nc", cursor=2)
    delete_line(buffer)
    assert buffer.serialize() == "a\nc"

    buffer = make_buffer("a\nb")
    delete_line(buffer)
    assert buffer.serialize() == "a"

    buffer = make_buffer("only")
    delete_line(buffer)
    assert buffer.serialize() == ""
    assert delete_line(buffer).status == "noop"


def test_delete_to_line_start() -> None:
    buffer = make_buffer("ab\ncdef", cursor=5)

    delete_to_line_start(buffer)

    assert buffer.serialize() == "ab\nef"
    assert delete_to_line_start(buffer).status == "noop"


def test_toggle_comment_round_trip() -> None:
    buffer = make_buffer("    x = 1\ny", cursor=0, language="python")

    toggle_comment(buffer)
    assert buffer.serialize() == "    # x = 1\ny"

    toggle_comment(buffer, 0)
    assert buffer.serialize() == "    x = 1\ny"


def test_toggle_comment_uses_language_prefix() -> None:
    buffer = make_buffer("let a = 1;", cursor=0, language="rust")

    toggle_comment(buffer)

    assert buffer.serialize() == "// let a = 1;"


def test_goto_line_clamps() -> None:
    buffer = make_buffer("a\nb\nc")

    assert goto_line(buffer, 1) == 2
    assert buffer.state.offset == 2
    assert goto_line(buffer, 99) == 4
    assert goto_line(buffer, -3) == 0


def test_goto_line_breaks_typing_run() -> None:
    buffer = make_buffer("", cursor=0)
    buffer.insert(0, "a")
    goto_line(buffer, 0)
    buffer.insert(1, "b")

    assert buffer.history.undo_depth == 2
