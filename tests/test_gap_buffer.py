from __future__ import annotations

import math
import random

import pytest

from nova_engine.buffer import GapBuffer
from nova_engine.errors import CapacityExceeded, OutOfRange


def assert_layout(buf: GapBuffer) -> None:
    prefix = buf.gap_start
    gap = buf.gap_end - buf.gap_start
    suffix = buf.capacity - buf.gap_end
    assert prefix + gap + suffix == buf.capacity
    assert buf.logical_length() == buf.capacity - gap


def test_insert_then_delete_restores_text() -> None:
    buf = GapBuffer("hello")

    buf.insert(5, " world")
    assert buf.text() == "hello world"

    removed = buf.delete(5, 11)

    assert removed == " world"
    assert buf.text() == "hello"
    assert len(buf) == 5
    assert_layout(buf)


def test_gap_follows_edit_point() -> None:
    buf = GapBuffer("abcdef")

    buf.insert(2, "X")
    assert buf.gap_start == 3
    buf.insert(0, "Y")
    assert buf.gap_start == 1
    buf.insert(len(buf), "Z")

    assert buf.text() == "YabXcdefZ"
    assert buf.gap_start == len(buf)
    assert_layout(buf)


def test_read_spans_the_gap() -> None:
    buf = GapBuffer("0123456789")
    buf.insert(5, "-")

    assert buf.read(3, 8) == "34-56"
    assert buf.read(0, 5) == "01234"
    assert buf.read(6, 11) == "56789"
    assert buf.char_at(5) == "-"
    assert "".join(buf.iter_chars(4)) == "4-56789"


def test_random_edits_match_plain_string_model() -> None:
    rng = random.Random(7)
    buf = GapBuffer("seed text\nwith lines\n")
    model = "seed text\nwith lines\n"

    for _ in range(2000):
        if model and rng.random() < 0.4:
            start = rng.randrange(len(model))
            end = min(len(model), start + rng.randrange(1, 6))
            assert buf.delete(start, end) == model[start:end]
            model = model[:start] + model[end:]
        else:
            pos = rng.randrange(len(model) + 1)
            piece = rng.choice(["a", "bc", "\n", "xyz\n", "é"])
            buf.insert(pos, piece)
            model = model[:pos] + piece + model[pos:]
        assert_layout(buf)

    assert buf.text() == model
    assert len(buf) == len(model)


@pytest.mark.parametrize(
    "call",
    [
        lambda buf: buf.insert(6, "x"),
        lambda buf: buf.insert(-1, "x"),
        lambda buf: buf.delete(3, 2),
        lambda buf: buf.delete(0, 6),
        lambda buf: buf.read(-1, 2),
        lambda buf: buf.read(2, 9),
    ],
)
def test_out_of_range_leaves_buffer_untouched(call) -> None:
    buf = GapBuffer("hello")
    before = (buf.text(), buf.gap_start, buf.gap_end, buf.capacity)

    with pytest.raises(OutOfRange):
        call(buf)

    assert (buf.text(), buf.gap_start, buf.gap_end, buf.capacity) == before


def test_sequential_typing_grows_logarithmically() -> None:
    buf = GapBuffer()
    total = 100_000

    for index in range(total):
        buf.insert(index, "x")

    assert len(buf) == total
    assert buf.growth_events <= math.ceil(math.log2(total)) + 1
    assert_layout(buf)


def test_capacity_limit_rejects_growth_without_mutation() -> None:
    buf = GapBuffer("abc", max_capacity=4)
    buf.insert(3, "d")

    with pytest.raises(CapacityExceeded) as excinfo:
        buf.insert(4, "e")

    assert excinfo.value.limit == 4
    assert buf.text() == "abcd"


def test_empty_edits_are_noops() -> None:
    buf = GapBuffer("abc")

    buf.insert(1, "")
    assert buf.delete(2, 2) == ""

    assert buf.text() == "abc"
    assert buf.growth_events == 0
