"""Find and replace over a document."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Literal, Optional

from nova_engine.errors import InvalidQuery, NotFound, StaleMatch
from nova_engine.runtime import telemetry
from nova_engine.runtime.cancel import CancellationToken, is_cancelled

if TYPE_CHECKING:
    from nova_engine.buffer.document import Document
    from nova_engine.buffer.undo import HistoryManager

Direction = Literal["forward", "backward"]


@dataclass(frozen=True, slots=True)
class Match:
    start: int
    end: int
    text: str

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class ReplaceAllResult:
    count: int
    cancelled: bool = False
    cursor: Optional[int] = None


def compile_query(
    query: str, *, case_sensitive: bool = True, regex: bool = False
) -> re.Pattern[str]:
    """Turn a plain or regex query into a compiled pattern.

    Patterns that can only match the empty string are rejected, since they
    would produce zero-length matches at every offset.
    """

    if not query:
        raise InvalidQuery("Search query cannot be empty", query=query)
    flags = 0 if case_sensitive else re.IGNORECASE
    if regex:
        flags |= re.MULTILINE
        try:
            pattern = re.compile(query, flags)
        except re.error as exc:
            raise InvalidQuery(
                f"Invalid pattern {query!r}: {exc}", query=query
            ) from exc
        if pattern.fullmatch("") is not None:
            raise InvalidQuery(f"Pattern {query!r} matches empty text", query=query)
        return pattern
    return re.compile(re.escape(query), flags)


def _first_after(
    pattern: re.Pattern[str], text: str, pos: int, limit: int
) -> Optional[re.Match[str]]:
    while pos <= limit:
        found = pattern.search(text, pos)
        if found is None or found.start() >= limit:
            return None
        if found.end() > found.start():
            return found
        pos = found.start() + 1
    return None


def _last_before(
    pattern: re.Pattern[str], text: str, lo: int, hi: int
) -> Optional[re.Match[str]]:
    best = None
    pos = lo
    while True:
        found = _first_after(pattern, text, pos, hi)
        if found is None:
            return best
        best = found
        pos = found.start() + 1


def _to_match(found: re.Match[str]) -> Match:
    return Match(found.start(), found.end(), found.group(0))


class SearchEngine:
    """Search and replace bound to one document and its history.

    Replacements go through ``HistoryManager.group`` so each ``replace`` and
    each ``replace_all`` pass is undone by a single ``undo``.
    """

    def __init__(
        self,
        document: Document,
        history: HistoryManager,
        *,
        logger_name: str | None = None,
    ) -> None:
        self.document = document
        self.history = history
        self._logger_name = logger_name

    def find(
        self,
        query: str,
        from_position: int = 0,
        direction: Direction = "forward",
        case_sensitive: bool = True,
        *,
        regex: bool = False,
    ) -> Match:
        """Return the nearest match from ``from_position``, wrapping around.

        Forward finds the first match starting at or after the position;
        backward finds the last match starting before it.
        """

        pattern = compile_query(query, case_sensitive=case_sensitive, regex=regex)
        text = self.document.text()
        size = len(text)
        self.document.check_range(from_position, from_position)
        if direction == "forward":
            found = _first_after(pattern, text, from_position, size)
            if found is None:
                found = _first_after(pattern, text, 0, from_position)
        elif direction == "backward":
            found = _last_before(pattern, text, 0, from_position)
            if found is None:
                found = _last_before(pattern, text, from_position, size)
        else:
            raise ValueError(f"Unknown direction '{direction}'")
        if found is None:
            raise NotFound(query)
        return _to_match(found)

    def find_all(
        self,
        query: str,
        *,
        case_sensitive: bool = True,
        regex: bool = False,
        cancel: Optional[CancellationToken] = None,
    ) -> Iterator[Match]:
        """Yield non-overlapping matches front to back for the current text."""

        pattern = compile_query(query, case_sensitive=case_sensitive, regex=regex)
        text = self.document.text()
        return self._iter_matches(pattern, text, cancel)

    @staticmethod
    def _iter_matches(
        pattern: re.Pattern[str], text: str, cancel: Optional[CancellationToken]
    ) -> Iterator[Match]:
        pos = 0
        while not is_cancelled(cancel):
            found = _first_after(pattern, text, pos, len(text))
            if found is None:
                return
            yield _to_match(found)
            pos = found.end()

    def count(
        self, query: str, *, case_sensitive: bool = True, regex: bool = False
    ) -> int:
        matches = self.find_all(query, case_sensitive=case_sensitive, regex=regex)
        return sum(1 for _ in matches)

    def _verify(self, match: Match) -> None:
        current = self.document.read(match.start, match.end)
        if current != match.text:
            raise StaleMatch(
                f"Match {match.text!r} at {match.start} no longer present",
                position=match.start,
            )

    def replace(self, match: Match, replacement: str) -> int:
        """Swap ``match`` for ``replacement``; returns the end of the new text."""

        self._verify(match)
        with telemetry.span(
            "search::replace",
            logger_name=self._logger_name,
            component="search",
            metadata={"start": match.start, "length": len(match)},
        ):
            with self.history.group("replace"):
                self.history.delete(match.start, match.end)
                self.history.insert(match.start, replacement)
        return match.start + len(replacement)

    def replace_all(
        self,
        query: str,
        replacement: str,
        *,
        case_sensitive: bool = True,
        regex: bool = False,
        cancel: Optional[CancellationToken] = None,
    ) -> ReplaceAllResult:
        """Replace every match front to back as one undoable entry.

        Matches are located in the text as it was before the pass, so text
        produced by a replacement is never matched again. Each match is
        translated by the running length delta and re-verified against the
        live document before it is replaced. Lookarounds therefore see the
        pre-pass text. A cancelled pass keeps the replacements already made.
        """

        pattern = compile_query(query, case_sensitive=case_sensitive, regex=regex)
        original = self.document.text()
        count = 0
        delta = 0
        cursor: Optional[int] = None
        cancelled = False
        with telemetry.span(
            "search::replace_all",
            logger_name=self._logger_name,
            component="search",
            metadata={"query": query},
        ) as handle:
            with self.history.group("replace_all"):
                for match in self._iter_matches(pattern, original, None):
                    if is_cancelled(cancel):
                        cancelled = True
                        handle.cancel(cancel.reason if cancel else None)
                        break
                    live = Match(match.start + delta, match.end + delta, match.text)
                    self._verify(live)
                    self.history.delete(live.start, live.end)
                    self.history.insert(live.start, replacement)
                    delta += len(replacement) - len(match)
                    cursor = live.start + len(replacement)
                    count += 1
            handle.add_metadata("count", count)
        return ReplaceAllResult(count=count, cancelled=cancelled, cursor=cursor)


__all__ = [
    "Direction",
    "Match",
    "ReplaceAllResult",
    "SearchEngine",
    "compile_query",
]
