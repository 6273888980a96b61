"""Incremental syntax tokenizer.

The scanner carries no state between tokens: scanning from any token
boundary over the same text always yields the same tokens. Incremental
retokenization relies on that. After an edit it restarts at a boundary
before the dirty range and stops at the first new boundary past the edit
that is also an (offset-shifted) old boundary; every span after that point
is reused as is.
"""

from __future__ import annotations

import re
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Protocol,
    Sequence,
    Tuple,
)

from nova_engine.runtime import telemetry
from nova_engine.runtime.cancel import CancellationToken, is_cancelled

from .languages import LanguageProfile, profile_for

if TYPE_CHECKING:
    from nova_engine.buffer.document import Document, EditEvent


class TokenCategory(str, Enum):
    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    STRING = "string"
    COMMENT = "comment"
    NUMBER = "number"
    OPERATOR = "operator"
    PUNCTUATION = "punctuation"
    WHITESPACE = "whitespace"
    TEXT = "text"


@dataclass(frozen=True, slots=True)
class TokenSpan:
    start: int
    end: int
    category: TokenCategory

    def shifted(self, delta: int) -> "TokenSpan":
        if not delta:
            return self
        return TokenSpan(self.start + delta, self.end + delta, self.category)


_NUMBER = re.compile(
    r"0[xX][0-9a-fA-F_]+|0[bB][01_]+|0[oO][0-7_]+"
    r"|(?:\d[\d_]*(?:\.\d[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d+)?"
)
_OPERATORS = frozenset("+-*/%=<>!&|^~?:@")
_PUNCTUATION = frozenset("()[]{},;.")


def _is_word_char(char: str, profile: LanguageProfile) -> bool:
    return char.isalnum() or char == "_" or char in profile.identifier_extras


def _starts_comment(text: str, pos: int, profile: LanguageProfile) -> bool:
    if profile.block_comment and text.startswith(profile.block_comment[0], pos):
        return True
    return any(text.startswith(prefix, pos) for prefix in profile.line_comments)


def _scan_quoted(text: str, pos: int, quote: str, multiline: bool) -> int:
    size = len(text)
    index = pos + len(quote)
    while index < size:
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if text.startswith(quote, index):
            return index + len(quote)
        if char == "\n" and not multiline:
            return index
        index += 1
    return size


def scan_token(
    text: str, pos: int, profile: LanguageProfile
) -> Tuple[int, TokenCategory]:
    """Return ``(end, category)`` of the token starting at ``pos``."""

    size = len(text)
    char = text[pos]

    if char.isspace():
        end = pos + 1
        while end < size and text[end].isspace():
            end += 1
        return end, TokenCategory.WHITESPACE

    if profile.plain:
        end = pos + 1
        while end < size and not text[end].isspace():
            end += 1
        return end, TokenCategory.TEXT

    if profile.block_comment and text.startswith(profile.block_comment[0], pos):
        opener, closer = profile.block_comment
        found = text.find(closer, pos + len(opener))
        return (size if found == -1 else found + len(closer)), TokenCategory.COMMENT

    for prefix in profile.line_comments:
        if text.startswith(prefix, pos):
            found = text.find("\n", pos)
            return (size if found == -1 else found), TokenCategory.COMMENT

    if char in profile.quotes or char in profile.multiline_quotes:
        triple = char * 3
        if profile.triple_quotes and text.startswith(triple, pos):
            return _scan_quoted(text, pos, triple, True), TokenCategory.STRING
        multiline = char in profile.multiline_quotes
        return _scan_quoted(text, pos, char, multiline), TokenCategory.STRING

    if char.isdigit() or (char == "." and pos + 1 < size and text[pos + 1].isdigit()):
        match = _NUMBER.match(text, pos)
        if match and match.end() > pos:
            return match.end(), TokenCategory.NUMBER

    if _is_word_char(char, profile):
        end = pos + 1
        while end < size and _is_word_char(text[end], profile):
            end += 1
        word = text[pos:end]
        if word in profile.keywords:
            return end, TokenCategory.KEYWORD
        return end, TokenCategory.IDENTIFIER

    if char in _OPERATORS:
        end = pos + 1
        while (
            end < size
            and text[end] in _OPERATORS
            and not _starts_comment(text, end, profile)
        ):
            end += 1
        return end, TokenCategory.OPERATOR

    if char in _PUNCTUATION:
        return pos + 1, TokenCategory.PUNCTUATION

    return pos + 1, TokenCategory.TEXT


def _next_span(text: str, pos: int, profile: LanguageProfile) -> TokenSpan:
    end, category = scan_token(text, pos, profile)
    if end <= pos:
        end, category = pos + 1, TokenCategory.TEXT
    return TokenSpan(pos, end, category)


def iter_tokens(
    text: str, profile: LanguageProfile, start: int = 0
) -> Iterator[TokenSpan]:
    pos, size = start, len(text)
    while pos < size:
        span = _next_span(text, pos, profile)
        yield span
        pos = span.end


def tokenize(text: str, profile: LanguageProfile) -> List[TokenSpan]:
    return list(iter_tokens(text, profile))


class TextSource(Protocol):
    def read(self, start: int, end: int) -> str: ...

    def __len__(self) -> int: ...


class _Window:
    """Slice of a text source that widens while a token runs off its end."""

    MIN_SIZE = 1024
    LOOKAHEAD = 8

    def __init__(self, source: str | TextSource, start: int, size: int) -> None:
        self._source = source
        self._length = len(source)
        if isinstance(source, str):
            self.base, self.text = 0, source
        else:
            self.base = start
            self._load(max(size, self.MIN_SIZE))

    def _load(self, size: int) -> None:
        end = min(self._length, self.base + size)
        self.text = self._source.read(self.base, end)  # type: ignore[union-attr]

    @property
    def complete(self) -> bool:
        return self.base + len(self.text) >= self._length

    def _grow(self) -> None:
        self._load(max(len(self.text) * 2, self.MIN_SIZE))

    def span_at(self, pos: int, profile: LanguageProfile) -> TokenSpan:
        while pos - self.base >= len(self.text) and not self.complete:
            self._grow()
        while True:
            span = _next_span(self.text, pos - self.base, profile)
            if self.complete or span.end + self.LOOKAHEAD <= len(self.text):
                return span.shifted(self.base)
            self._grow()


class _Rescan(NamedTuple):
    """``spans[first:tail]`` give way to ``produced``; ``spans[tail:]`` shift."""

    first: int
    tail: int
    produced: List[TokenSpan]
    rescanned: Tuple[int, int]


def _rescan(
    spans: Sequence[TokenSpan],
    text: str | TextSource,
    start: int,
    old_end: int,
    new_end: int,
    profile: LanguageProfile,
) -> _Rescan:
    delta = new_end - old_end
    size = len(text)
    if spans:
        # A token may peek a few characters past its end ("1e+5", '""').
        reach = start - _Window.LOOKAHEAD
        first = max(bisect_left(spans, reach, key=lambda span: span.end) - 1, 0)
        rescan_from = spans[first].start
    else:
        first, rescan_from = 0, 0

    tail = bisect_left(spans, old_end, key=lambda span: span.start)
    window = _Window(text, rescan_from, new_end - rescan_from + _Window.MIN_SIZE)
    produced: List[TokenSpan] = []
    pos = rescan_from
    while pos < size:
        span = window.span_at(pos, profile)
        produced.append(span)
        pos = span.end
        if pos < new_end:
            continue
        while tail < len(spans) and spans[tail].start + delta < pos:
            tail += 1
        if tail < len(spans) and spans[tail].start + delta == pos:
            return _Rescan(first, tail, produced, (rescan_from, pos))
    return _Rescan(first, len(spans), produced, (rescan_from, size))


def retokenize(
    spans: Sequence[TokenSpan],
    text: str | TextSource,
    start: int,
    old_end: int,
    new_end: int,
    profile: LanguageProfile,
) -> Tuple[List[TokenSpan], Tuple[int, int]]:
    """Rebuild ``spans`` after ``[start, old_end)`` became ``[start, new_end)``.

    ``spans`` describes the text before the edit; ``text`` is the text after
    it, either a string or anything with ``read(start, end)`` and ``len``
    (only the region being rescanned is read). Returns a new span list and
    the range that was actually rescanned.
    """

    result = _rescan(spans, text, start, old_end, new_end, profile)
    delta = new_end - old_end
    rebuilt = list(spans[: result.first])
    rebuilt.extend(result.produced)
    rebuilt.extend(span.shifted(delta) for span in spans[result.tail :])
    return rebuilt, result.rescanned


class SyntaxTokenizer:
    """Keeps token spans for a document current as it is edited."""

    def __init__(
        self,
        document: Document,
        profile: LanguageProfile | str = "plaintext",
        *,
        logger_name: str | None = None,
    ) -> None:
        self.document = document
        self.profile = profile_for(profile) if isinstance(profile, str) else profile
        self._logger_name = logger_name
        self._spans: List[TokenSpan] = tokenize(document.text(), self.profile)
        self.last_rescan: Optional[Tuple[int, int]] = None
        self.last_splice: Optional[Tuple[int, int]] = None
        document.subscribe(self._on_edit)

    @property
    def spans(self) -> Tuple[TokenSpan, ...]:
        return tuple(self._spans)

    def detach(self) -> None:
        self.document.unsubscribe(self._on_edit)

    def set_profile(self, profile: LanguageProfile | str) -> None:
        self.profile = profile_for(profile) if isinstance(profile, str) else profile
        self._spans = tokenize(self.document.text(), self.profile)
        self.last_rescan = (0, len(self.document))

    def _on_edit(self, event: EditEvent) -> None:
        self._apply(event.start, event.old_end, event.new_end)

    def _apply(self, start: int, old_end: int, new_end: int) -> Tuple[int, int]:
        result = _rescan(
            self._spans, self.document, start, old_end, new_end, self.profile
        )
        spans = self._spans
        spans[result.first : result.tail] = result.produced
        after = result.first + len(result.produced)
        delta = new_end - old_end
        if delta:
            for index in range(after, len(spans)):
                spans[index] = spans[index].shifted(delta)
        rescanned = result.rescanned
        self.last_rescan = rescanned
        self.last_splice = (result.first, after)
        telemetry.record_event(
            "syntax.retokenize",
            data={
                "start": rescanned[0],
                "end": rescanned[1],
                "spans": len(self._spans),
            },
            logger_name=self._logger_name,
        )
        return rescanned

    def retokenize(self, start: int, end: int) -> Tuple[int, int]:
        """Rescan ``[start, end)`` (e.g. after a profile tweak) in place."""

        self.document.check_range(start, end)
        return self._apply(start, end, end)

    def tokenize_all(self, cancel: Optional[CancellationToken] = None) -> bool:
        """Full rescan; returns ``False`` and keeps old spans if cancelled."""

        fresh: List[TokenSpan] = []
        for span in iter_tokens(self.document.text(), self.profile):
            if is_cancelled(cancel):
                return False
            fresh.append(span)
        self._spans = fresh
        self.last_rescan = (0, len(self.document))
        return True

    def tokens_in(self, start: int, end: int) -> Iterator[TokenSpan]:
        """Yield spans intersecting ``[start, end)`` from left to right."""

        self.document.check_range(start, end)
        return self._walk(self._spans, start, end)

    @staticmethod
    def _walk(spans: List[TokenSpan], start: int, end: int) -> Iterator[TokenSpan]:
        index = bisect_right(spans, start, key=lambda span: span.end)
        while index < len(spans) and spans[index].start < end:
            yield spans[index]
            index += 1

    def category_at(self, position: int) -> Optional[TokenCategory]:
        for span in self.tokens_in(position, min(position + 1, len(self.document))):
            return span.category
        return None


__all__ = [
    "SyntaxTokenizer",
    "TokenCategory",
    "TokenSpan",
    "iter_tokens",
    "retokenize",
    "scan_token",
    "tokenize",
]
