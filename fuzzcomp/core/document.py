"""In-memory documents and the workspace that owns them."""

import logging
from collections.abc import Callable, Iterable

logger = logging.getLogger("fuzzcomp.document")


class Document:
    """Text of one editor buffer plus its word-character classification.

    Change notifications can be paused while a completion session drives
    the buffer; changes made while paused are announced once on resume.
    """

    def __init__(
        self,
        bufnr: int,
        lines: Iterable[str] = ("",),
        filetype: str = "",
        word_chars: str = "",
    ) -> None:
        self.bufnr = bufnr
        self.filetype = filetype
        self.changedtick = 0
        self._lines = list(lines) or [""]
        self._word_chars = frozenset(word_chars)
        self._paused = False
        self._pending_change = False
        self._listeners: list[Callable[["Document"], None]] = []
        self._words: list[str] | None = None

    @property
    def lines(self) -> list[str]:
        return self._lines.copy()

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, index: int) -> str:
        """Return the line at 0-based `index`, or "" when out of range."""
        if 0 <= index < len(self._lines):
            return self._lines[index]
        return ""

    def is_word(self, char: str) -> bool:
        """Whether `char` is a keyword character in this buffer."""
        if len(char) != 1:
            return False
        return char.isalnum() or char == "_" or char in self._word_chars

    def get_word_start(self, line: str, col: int) -> int:
        """Column where the keyword ending at `col` starts."""
        start = min(col, len(line))
        while start > 0 and self.is_word(line[start - 1]):
            start -= 1
        return start

    @property
    def words(self) -> list[str]:
        """Distinct keywords of the buffer, in order of first appearance."""
        if self._words is None:
            seen: dict[str, None] = {}
            for line in self._lines:
                word = ""
                for ch in line:
                    if self.is_word(ch):
                        word += ch
                        continue
                    if word:
                        seen.setdefault(word)
                    word = ""
                if word:
                    seen.setdefault(word)
            self._words = list(seen)
        return self._words

    # Mutation

    def set_line(self, index: int, text: str) -> None:
        self._lines[index] = text
        self._changed()

    def insert_line(self, index: int, text: str) -> None:
        self._lines.insert(index, text)
        self._changed()

    def set_lines(self, lines: Iterable[str]) -> None:
        self._lines = list(lines) or [""]
        self._changed()

    def _changed(self) -> None:
        self.changedtick += 1
        self._words = None
        if self._paused:
            self._pending_change = True
            return
        self._fire_change()

    # Change notifications

    @property
    def paused(self) -> bool:
        return self._paused

    @paused.setter
    def paused(self, value: bool) -> None:
        self._paused = value
        if not value and self._pending_change:
            self._fire_change()

    def on_did_change(self, listener: Callable[["Document"], None]) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def dispose() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return dispose

    def _fire_change(self) -> None:
        self._pending_change = False
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Change listener failed for buffer %d", self.bufnr)


class Workspace:
    """Registry of loaded documents keyed by buffer number."""

    def __init__(self, documents: Iterable[Document] = ()) -> None:
        self._documents: dict[int, Document] = {}
        for document in documents:
            self.add_document(document)

    def add_document(self, document: Document) -> Document:
        self._documents[document.bufnr] = document
        return document

    def remove_document(self, bufnr: int) -> None:
        self._documents.pop(bufnr, None)

    def get_document(self, bufnr: int) -> Document | None:
        return self._documents.get(bufnr)

    @property
    def documents(self) -> list[Document]:
        return list(self._documents.values())
