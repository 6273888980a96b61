"""Cooperative cancellation for long-running engine work."""

from __future__ import annotations

from typing import Callable, Optional

from nova_engine.errors import OperationCancelled


class CancellationToken:
    """Flag checked between discrete units of work (matches, spans).

    The host sets it from its event loop, e.g. when the user presses an
    abort key. ``poll`` lets the host poll its own input queue instead of
    calling ``cancel`` eagerly.
    """

    def __init__(self, poll: Optional[Callable[[], bool]] = None) -> None:
        self._cancelled = False
        self._reason: Optional[str] = None
        self._poll = poll

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        self._cancelled = True
        self._reason = reason

    def reset(self) -> None:
        self._cancelled = False
        self._reason = None

    @property
    def cancelled(self) -> bool:
        if not self._cancelled and self._poll is not None and self._poll():
            self.cancel("polled")
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelled(self._reason or "cancelled")


def is_cancelled(token: Optional[CancellationToken]) -> bool:
    return token is not None and token.cancelled


__all__ = ["CancellationToken", "is_cancelled"]
