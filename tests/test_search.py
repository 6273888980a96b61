from __future__ import annotations

import pytest

from nova_engine.buffer import Document, HistoryManager
from nova_engine.errors import InvalidQuery, NotFound, StaleMatch
from nova_engine.runtime import CancellationToken
from nova_engine.search import Match, SearchEngine, compile_query


def make_engine(text: str) -> tuple[Document, HistoryManager, SearchEngine]:
    document = Document(text)
    history = HistoryManager(document)
    return document, history, SearchEngine(document, history)


def test_repeated_find_advances() -> None:
    _, _, engine = make_engine("ab\ncd\nab\n")

    first = engine.find("ab", 0, "forward", case_sensitive=True)
    second = engine.find("ab", first.end, "forward", case_sensitive=True)

    assert first.start == 0
    assert second.start == 6


def test_forward_find_wraps_around() -> None:
    _, _, engine = make_engine("ab\ncd\nab\n")

    assert engine.find("ab", 1) == Match(6, 8, "ab")
    assert engine.find("ab", 7) == Match(0, 2, "ab")
    assert engine.find("ab", 0) == Match(0, 2, "ab")


def test_backward_find_takes_last_match_before_position() -> None:
    _, _, engine = make_engine("ab\ncd\nab\n")

    assert engine.find("ab", 6, "backward") == Match(0, 2, "ab")
    assert engine.find("ab", 9, "backward") == Match(6, 8, "ab")
    assert engine.find("ab", 0, "backward") == Match(6, 8, "ab")


def test_case_insensitive_find() -> None:
    _, _, engine = make_engine("Hello hello")

    assert engine.find("HELLO", 1, case_sensitive=False) == Match(6, 11, "hello")
    with pytest.raises(NotFound):
        engine.find("HELLO", 0)


def test_regex_find_spans_lines() -> None:
    _, _, engine = make_engine("one\ntwo 22\nthree 333")

    found = engine.find(r"^\w+ \d+$", 0, regex=True)

    assert found == Match(4, 10, "two 22")


@pytest.mark.parametrize(
    "query, regex",
    [("", False), ("", True), ("(unclosed", True), ("x*", True), ("^", True)],
)
def test_unusable_queries_are_rejected(query: str, regex: bool) -> None:
    with pytest.raises(InvalidQuery):
        compile_query(query, regex=regex)


def test_plain_query_escapes_metacharacters() -> None:
    _, _, engine = make_engine("a.b axb")

    assert engine.count("a.b") == 1
    assert engine.count("a.b", regex=True) == 2


def test_not_found_on_empty_document() -> None:
    _, _, engine = make_engine("")

    with pytest.raises(NotFound):
        engine.find("x")


def test_replace_swaps_match_and_undoes_once() -> None:
    document, history, engine = make_engine("one two one")
    match = engine.find("two")

    cursor = engine.replace(match, "2")

    assert document.text() == "one 2 one"
    assert cursor == 5
    assert history.undo_depth == 1
    history.undo()
    assert document.text() == "one two one"


def test_replace_rejects_stale_match() -> None:
    document, _, engine = make_engine("one two")
    match = engine.find("two")
    document.insert(0, "xx")

    with pytest.raises(StaleMatch):
        engine.replace(match, "2")

    assert document.text() == "xxone two"


def test_replace_all_is_one_undo_entry() -> None:
    document, history, engine = make_engine("cat, cat and cat")

    result = engine.replace_all("cat", "dog")

    assert result.count == 3
    assert not result.cancelled
    assert document.text() == "dog, dog and dog"
    assert history.undo_depth == 1
    history.undo()
    assert document.text() == "cat, cat and cat"


def test_replace_all_does_not_rematch_replacement() -> None:
    document, _, engine = make_engine("a a a")

    result = engine.replace_all("a", "aa")

    assert result.count == 3
    assert document.text() == "aa aa aa"
    assert result.cursor == len("aa aa aa")


def test_replace_all_with_shrinking_replacement() -> None:
    document, _, engine = make_engine("xxxx-xxxx")

    result = engine.replace_all("xx", "y")

    assert result.count == 4
    assert document.text() == "yy-yy"


def test_replace_all_without_matches_records_nothing() -> None:
    document, history, engine = make_engine("abc")

    result = engine.replace_all("zzz", "y")

    assert result.count == 0
    assert result.cursor is None
    assert history.undo_depth == 0
    assert document.text() == "abc"


def test_cancelled_replace_all_keeps_prefix() -> None:
    document, history, engine = make_engine("a b a b a b")
    polls = iter([False, False, True])
    token = CancellationToken(poll=lambda: next(polls, True))

    result = engine.replace_all("a", "X", cancel=token)

    assert result.cancelled
    assert result.count == 2
    assert document.text() == "X b X b a b"
    assert token.reason == "polled"
    history.undo()
    assert document.text() == "a b a b a b"


def test_find_all_lists_non_overlapping_matches() -> None:
    _, _, engine = make_engine("aaaa")

    assert list(engine.find_all("aa")) == [Match(0, 2, "aa"), Match(2, 4, "aa")]


def test_replace_all_lookbehind_sees_text_before_the_pass() -> None:
    document, history, engine = make_engine("xaa")

    result = engine.replace_all(r"(?<=x)a", "x", regex=True)

    assert result.count == 1
    assert document.text() == "xxa"
    assert history.undo_depth == 1
