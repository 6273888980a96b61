"""Bounds checks shared across buffer services."""

from __future__ import annotations

from nova_engine.errors import OutOfRange


def ensure_position(length: int, position: int) -> int:
    if position < 0 or position > length:
        raise OutOfRange(
            f"Position {position} outside document of length {length}",
            position=position,
            length=length,
        )
    return position


def ensure_range(length: int, start: int, end: int) -> tuple[int, int]:
    if start < 0 or start > end or end > length:
        raise OutOfRange(
            f"Range [{start}, {end}) invalid for document of length {length}",
            position=start,
            length=length,
        )
    return start, end
