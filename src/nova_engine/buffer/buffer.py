"""High-level buffer facade combining document, history, search, and syntax."""

from __future__ import annotations

from contextlib import AbstractContextManager, ExitStack
from dataclasses import dataclass
from pathlib import PurePath
from typing import Callable, Iterator, Literal, Optional

from nova_engine.config import EditorSettings
from nova_engine.errors import EngineError, NothingToRedo, NothingToUndo
from nova_engine.runtime import telemetry
from nova_engine.runtime.cancel import CancellationToken
from nova_engine.search.engine import Direction, Match, ReplaceAllResult, SearchEngine
from nova_engine.syntax.languages import detect_language
from nova_engine.syntax.tokenizer import SyntaxTokenizer, TokenSpan

from .document import Document
from .line_index import LinePosition
from .state import BufferState
from .undo import HistoryManager, UndoEntry

DeltaStatus = Literal["ok", "noop"]


@dataclass(slots=True)
class BufferView:
    version: int
    text: str
    cursor: int
    language: str


@dataclass(slots=True)
class BufferDelta:
    version: int
    cursor: int
    label: str
    status: DeltaStatus = "ok"
    removed: str = ""


class Buffer:
    """One editing session: the surface hosts call into.

    Hosts hand whole text in through ``load`` and take it back through
    ``serialize``; nothing here touches the filesystem.
    """

    def __init__(
        self,
        *,
        name: str = "default",
        document: Optional[Document] = None,
        settings: Optional[EditorSettings] = None,
        language: str = "plaintext",
        history: Optional[HistoryManager] = None,
    ) -> None:
        self.name = name
        self.settings = settings or EditorSettings()
        self.document = document or Document(max_capacity=self.settings.max_capacity)
        self.history = history or HistoryManager(
            self.document,
            max_entries=self.settings.max_undo_entries,
            coalesce_window=self.settings.coalesce_window,
            logger_name="nova_engine.history",
        )
        self.state = BufferState.for_document(self.document)
        self.search = SearchEngine(
            self.document, self.history, logger_name="nova_engine.search"
        )
        self.language = language
        self.tokenizer = SyntaxTokenizer(
            self.document, language, logger_name="nova_engine.syntax"
        )

    @classmethod
    def load(
        cls,
        text: str,
        *,
        name: str = "default",
        path: str | PurePath | None = None,
        language: Optional[str] = None,
        settings: Optional[EditorSettings] = None,
    ) -> "Buffer":
        """Build a buffer from text read by the host."""

        if language is None:
            language = detect_language(path) if path is not None else "plaintext"
        if path is not None and name == "default":
            name = PurePath(path).name
        resolved = settings or EditorSettings()
        with telemetry.span(
            "buffer::load",
            component="buffer",
            metadata={"buffer": name, "length": len(text), "language": language},
        ):
            document = Document.from_text(text, max_capacity=resolved.max_capacity)
            return cls(
                name=name, document=document, settings=resolved, language=language
            )

    @classmethod
    def from_text(cls, text: str, *, name: str = "default") -> "Buffer":
        return cls.load(text, name=name)

    # -- snapshots -----------------------------------------------------

    def serialize(self) -> str:
        return self.document.text()

    def snapshot(self) -> BufferView:
        return BufferView(
            version=self.document.version,
            text=self.document.text(),
            cursor=self.state.offset,
            language=self.language,
        )

    def __len__(self) -> int:
        return len(self.document)

    @property
    def modified(self) -> bool:
        return self.document.dirty

    def mark_saved(self) -> None:
        self.document.mark_clean()

    def read(self, start: int, end: int) -> str:
        return self.document.read(start, end)

    def set_language(self, language: str) -> None:
        self.language = language
        self.tokenizer.set_profile(language)

    def transaction(self, label: str) -> "Transaction":
        """Group several edits into one undo entry."""

        return Transaction(self, label, atomic=True)

    # -- edits ---------------------------------------------------------

    def insert(self, position: int, text: str) -> BufferDelta:
        with Transaction(self, "insert"):
            self.history.insert(position, text)
            self.state.set_cursor(position + len(text))
        return self._delta("insert")

    def delete(self, start: int, end: int) -> BufferDelta:
        with Transaction(self, "delete"):
            removed = self.history.delete(start, end).text
            self.state.set_cursor(start)
        return self._delta("delete", removed=removed)

    def undo(self) -> BufferDelta:
        return self._step("undo", self.history.undo, NothingToUndo)

    def redo(self) -> BufferDelta:
        return self._step("redo", self.history.redo, NothingToRedo)

    def _step(
        self,
        label: str,
        action: Callable[[], UndoEntry],
        empty_error: type[EngineError],
    ) -> BufferDelta:
        try:
            with telemetry.span(
                f"buffer::{label}",
                component="buffer",
                metadata={"buffer": self.name},
                expected=(empty_error,),
            ):
                entry = action()
        except empty_error:
            telemetry.record_event(f"buffer.{label}.empty", data={"buffer": self.name})
            return self.noop(label)
        cursor = entry.undo_cursor if label == "undo" else entry.redo_cursor
        self.state.set_cursor(cursor)
        return self._delta(label)

    def noop(self, label: str) -> BufferDelta:
        """Report a command that had nothing to do."""

        return self._delta(label, status="noop")

    def _delta(
        self, label: str, *, status: DeltaStatus = "ok", removed: str = ""
    ) -> BufferDelta:
        self.state.last_change_tick = self.document.version
        return BufferDelta(
            version=self.document.version,
            cursor=self.state.offset,
            label=label,
            status=status,
            removed=removed,
        )

    # -- search --------------------------------------------------------

    def find(
        self,
        query: str,
        from_position: Optional[int] = None,
        direction: Direction = "forward",
        case_sensitive: bool = True,
        *,
        regex: bool = False,
    ) -> Match:
        start = self.state.offset if from_position is None else from_position
        self.state.last_query = query
        return self.search.find(query, start, direction, case_sensitive, regex=regex)

    def replace(self, match: Match, replacement: str) -> int:
        cursor = self.search.replace(match, replacement)
        self.state.set_cursor(cursor)
        self.state.last_change_tick = self.document.version
        return cursor

    def replace_all(
        self,
        query: str,
        replacement: str,
        *,
        case_sensitive: bool = True,
        regex: bool = False,
        cancel: Optional[CancellationToken] = None,
    ) -> ReplaceAllResult:
        result = self.search.replace_all(
            query,
            replacement,
            case_sensitive=case_sensitive,
            regex=regex,
            cancel=cancel,
        )
        if result.cursor is not None:
            self.state.set_cursor(result.cursor)
        self.state.last_change_tick = self.document.version
        return result

    # -- coordinates and tokens ----------------------------------------

    def line_of(self, position: int) -> LinePosition:
        return self.document.line_of(position)

    def position_of(self, line: int, column: int) -> int:
        return self.document.position_of(line, column)

    def retokenize(self, start: int, end: int) -> tuple[int, int]:
        return self.tokenizer.retokenize(start, end)

    def tokens_in(self, start: int, end: int) -> Iterator[TokenSpan]:
        return self.tokenizer.tokens_in(start, end)


class Transaction(AbstractContextManager["Transaction"]):
    """Telemetry span around a buffer mutation.

    ``atomic`` transactions also open a history group, so every edit made
    inside them undoes together and a failure rolls all of them back.
    Plain transactions leave history free to coalesce keystrokes.
    """

    def __init__(self, buffer: Buffer, label: str, *, atomic: bool = False) -> None:
        self.buffer = buffer
        self.label = label
        self.atomic = atomic
        self._stack: Optional[ExitStack] = None
        self._cursor_before: int | None = None

    def __enter__(self) -> "Transaction":
        self._cursor_before = self.buffer.state.offset
        stack = ExitStack()
        stack.enter_context(
            telemetry.span(
                f"buffer::{self.label}",
                component="buffer",
                metadata={"buffer": self.buffer.name},
            )
        )
        if self.atomic:
            stack.enter_context(self.buffer.history.group(self.label))
        self._stack = stack
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        stack, self._stack = self._stack, None
        if stack is not None:
            stack.__exit__(exc_type, exc, tb)
        if exc_type is not None and self._cursor_before is not None:
            self.buffer.state.set_cursor(
                min(self._cursor_before, len(self.buffer.document))
            )
        return False


def load(text: str, **options) -> Buffer:
    """Module-level shortcut for ``Buffer.load``."""

    return Buffer.load(text, **options)


__all__ = [
    "Buffer",
    "BufferDelta",
    "BufferView",
    "Transaction",
    "load",
]
