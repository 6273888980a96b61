from __future__ import annotations

import pytest

from nova_engine import Buffer, EditorSettings, load
from nova_engine.buffer import Document
from nova_engine.errors import CapacityExceeded, NotFound, OutOfRange
from nova_engine.syntax import TokenCategory


def make_buffer(text: str = "", **options) -> Buffer:
    return Buffer.load(text, **options)


def test_insert_delete_undo_redo_scenario() -> None:
    buffer = make_buffer("hello")

    delta = buffer.insert(5, " world")
    assert buffer.serialize() == "hello world"
    assert delta.cursor == 11
    assert delta.status == "ok"

    delta = buffer.delete(0, 6)
    assert buffer.serialize() == "world"
    assert delta.removed == "hello "
    assert delta.cursor == 0

    buffer.undo()
    assert buffer.serialize() == "hello world"
    assert buffer.state.offset == 6
    buffer.undo()
    assert buffer.serialize() == "hello"
    assert buffer.state.offset == 5
    delta = buffer.redo()
    assert buffer.serialize() == "hello world"
    assert delta.cursor == 11


def test_load_serialize_round_trip() -> None:
    text = "line one\r\n\ttabbed ünïcode\n\nlast"
    buffer = load(text)

    assert buffer.serialize() == text
    assert len(buffer) == len(text)
    assert not buffer.modified


def test_load_detects_language_and_name_from_path() -> None:
    buffer = make_buffer("def f(): pass\n", path="pkg/module.py")

    assert buffer.language == "python"
    assert buffer.name == "module.py"
    assert next(buffer.tokens_in(0, 3)).category is TokenCategory.KEYWORD


def test_undo_with_empty_history_is_noop() -> None:
    buffer = make_buffer("abc")
    version = buffer.document.version

    delta = buffer.undo()

    assert delta.status == "noop"
    assert delta.version == version
    assert buffer.redo().status == "noop"
    assert buffer.serialize() == "abc"


@pytest.mark.parametrize(
    "edit",
    [
        lambda buffer: buffer.insert(99, "x"),
        lambda buffer: buffer.delete(2, 9),
        lambda buffer: buffer.delete(-1, 1),
        lambda buffer: buffer.insert(99, ""),
        lambda buffer: buffer.delete(9, 9),
    ],
)
def test_out_of_range_edit_changes_nothing(edit) -> None:
    buffer = make_buffer("abc")
    buffer.insert(1, "-")
    before = (buffer.serialize(), buffer.document.version, buffer.state.offset)
    depth = buffer.history.undo_depth

    with pytest.raises(OutOfRange):
        edit(buffer)

    after = (buffer.serialize(), buffer.document.version, buffer.state.offset)
    assert after == before
    assert buffer.history.undo_depth == depth


def test_typing_coalesces_through_buffer() -> None:
    buffer = make_buffer()

    for index, char in enumerate("word"):
        buffer.insert(index, char)

    assert buffer.history.undo_depth == 1
    buffer.undo()
    assert buffer.serialize() == ""


def test_transaction_undoes_as_one_entry() -> None:
    buffer = make_buffer("a\nb")

    with buffer.transaction("indent"):
        buffer.insert(0, "  ")
        buffer.insert(buffer.position_of(1, 0), "  ")

    assert buffer.serialize() == "  a\n  b"
    assert buffer.history.undo_depth == 1
    buffer.undo()
    assert buffer.serialize() == "a\nb"


def test_failed_transaction_rolls_back() -> None:
    buffer = make_buffer("abc")
    buffer.state.set_cursor(1)

    with pytest.raises(OutOfRange):
        with buffer.transaction("batch"):
            buffer.insert(0, "x")
            buffer.delete(0, 99)

    assert buffer.serialize() == "abc"
    assert buffer.state.offset == 1
    assert buffer.history.undo_depth == 0


def test_cursor_mark_follows_edits_before_it() -> None:
    buffer = make_buffer("hello world")
    buffer.state.set_cursor(6)

    buffer.document.insert(0, ">> ")
    assert buffer.state.offset == 9

    buffer.document.delete(0, 5)
    assert buffer.state.offset == 4


def test_marks_collapse_into_deleted_range() -> None:
    document = Document("abcdef")
    inside = document.mark(3)
    after = document.mark(6)

    document.delete(1, 5)

    assert inside.offset == 1
    assert after.offset == 2
    document.insert(1, "xy")
    assert inside.offset == 3


def test_modified_flag_tracks_saves() -> None:
    buffer = make_buffer("abc")

    buffer.insert(3, "d")
    assert buffer.modified
    buffer.mark_saved()
    assert not buffer.modified


def test_capacity_limit_surfaces_from_buffer() -> None:
    buffer = make_buffer("abc", settings=EditorSettings(max_capacity=4))
    buffer.insert(3, "d")

    with pytest.raises(CapacityExceeded):
        buffer.insert(4, "e")

    assert buffer.serialize() == "abcd"


def test_find_starts_at_cursor_and_remembers_query() -> None:
    buffer = make_buffer("ab\ncd\nab\n")
    buffer.state.set_cursor(1)

    match = buffer.find("ab")

    assert (match.start, match.end) == (6, 8)
    assert buffer.state.last_query == "ab"
    with pytest.raises(NotFound):
        buffer.find("zz")


def test_replace_and_replace_all_move_cursor() -> None:
    buffer = make_buffer("one two one")

    buffer.replace(buffer.find("two", 0), "2")
    assert buffer.state.offset == 5

    result = buffer.replace_all("one", "1")
    assert result.count == 2
    assert buffer.serialize() == "1 2 1"
    assert buffer.state.offset == 5
    buffer.undo()
    assert buffer.serialize() == "one 2 one"


def test_snapshot_reports_version_and_language() -> None:
    buffer = make_buffer("x", language="rust")
    buffer.insert(1, "y")

    view = buffer.snapshot()

    assert view.text == "xy"
    assert view.cursor == 2
    assert view.language == "rust"
    assert view.version == buffer.document.version


def test_set_language_retokenizes() -> None:
    buffer = make_buffer("fn main")
    assert next(buffer.tokens_in(0, 2)).category is TokenCategory.TEXT

    buffer.set_language("rust")

    assert next(buffer.tokens_in(0, 2)).category is TokenCategory.KEYWORD


def test_settings_shape_history() -> None:
    buffer = make_buffer(settings=EditorSettings(max_undo_entries=2))

    for index in range(4):
        buffer.insert(index, str(index))
        buffer.history.break_coalescing()

    assert buffer.history.undo_depth == 2
    assert buffer.history.max_entries == 2


def test_from_text_coordinates_and_retokenize() -> None:
    buffer = Buffer.from_text("ab\ncd", name="scratch")

    assert buffer.name == "scratch"
    assert buffer.line_of(4) == (1, 1)
    assert buffer.position_of(1, 1) == 4
    start, end = buffer.retokenize(0, len(buffer))
    assert start == 0 and end == len(buffer)
    assert [span.end for span in buffer.tokens_in(0, 5)] == [2, 3, 5]
