"""Editor surface used by the completion controller.

`Editor` is the contract a host editor adapter implements. Every awaited
method is a suspension point: other events may be handled before it
returns. `InMemoryEditor` simulates an insert-mode editor with a popup menu
and is used by the playground and the tests.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from .completion.events import EditorEvent, EventKind
from .completion.types import CompleteItem, Cursor
from .document import Document, Workspace

logger = logging.getLogger("fuzzcomp.editor")

DEFAULT_COMPLETEOPT = "menu,preview"

EventHandler = Callable[[EditorEvent], Awaitable[None]]


class Editor(ABC):
    """Abstract base class for editor adapters."""

    @abstractmethod
    async def get_cursor(self) -> Cursor:
        """Return the live cursor position."""
        pass

    @abstractmethod
    async def get_mode(self) -> str:
        """Return the current mode name ("i" for insert mode)."""
        pass

    @abstractmethod
    def set_context(self, col: int, items: list[CompleteItem]) -> None:
        """Stage popup items anchored at `col` (no render)."""
        pass

    @abstractmethod
    async def request_render(self) -> None:
        """Show the staged popup items."""
        pass

    @abstractmethod
    def hide(self) -> None:
        """Hide the popup."""
        pass

    @abstractmethod
    def show_message(self, message: str, level: str = "info") -> None:
        """Show a transient message to the user."""
        pass

    @abstractmethod
    def get_completeopt(self) -> str:
        """Return the popup behaviour options."""
        pass

    @abstractmethod
    def set_completeopt(self, value: str) -> None:
        """Set the popup behaviour options."""
        pass


@dataclass
class PopupState:
    """What the simulated popup currently shows."""

    col: int = 0
    items: list[CompleteItem] = field(default_factory=list)
    visible: bool = False
    # Input used by the native prefix filter, None when unfiltered
    filter_input: str | None = None

    @property
    def visible_items(self) -> list[CompleteItem]:
        if not self.visible:
            return []
        if self.filter_input is None:
            return list(self.items)
        return [item for item in self.items if item.word.startswith(self.filter_input)]


class InMemoryEditor(Editor):
    """Insert-mode editor simulation over a Workspace.

    Keystroke helpers emit the same event sequence a real editor does:
    InsertCharPre before the text changes, then TextChangedP when the popup
    is visible or TextChangedI otherwise.
    """

    def __init__(self, workspace: Workspace, bufnr: int, mode: str = "i") -> None:
        self.workspace = workspace
        self.bufnr = bufnr
        self.mode = mode
        self.cursor = Cursor(bufnr=bufnr, linenr=1, col=0)
        self.popup = PopupState()
        self.completeopt = DEFAULT_COMPLETEOPT
        self.messages: list[tuple[str, str]] = []
        self.render_count = 0
        self._handler: EventHandler | None = None

    def attach(self, handler: EventHandler) -> None:
        """Route emitted events to `handler`."""
        self._handler = handler

    @property
    def document(self) -> Document:
        document = self.workspace.get_document(self.bufnr)
        if document is None:
            raise LookupError(f"No document for buffer {self.bufnr}")
        return document

    # Editor contract

    async def get_cursor(self) -> Cursor:
        return self.cursor

    async def get_mode(self) -> str:
        return self.mode

    def set_context(self, col: int, items: list[CompleteItem]) -> None:
        self.popup.col = col
        self.popup.items = list(items)
        self.popup.filter_input = None

    async def request_render(self) -> None:
        self.render_count += 1
        self.popup.visible = bool(self.popup.items)

    def hide(self) -> None:
        self.popup.visible = False

    def show_message(self, message: str, level: str = "info") -> None:
        logger.debug("[%s] %s", level, message)
        self.messages.append((level, message))

    def get_completeopt(self) -> str:
        return self.completeopt

    def set_completeopt(self, value: str) -> None:
        self.completeopt = value

    # Simulation

    def set_cursor(self, linenr: int, col: int) -> None:
        self.cursor = Cursor(bufnr=self.bufnr, linenr=linenr, col=col)

    async def insert_char(self, character: str) -> None:
        await self._emit(EventKind.CHAR_INSERTED, character=character)
        line = self._current_line()
        col = self.cursor.col
        self.document.set_line(self.cursor.linenr - 1, line[:col] + character + line[col:])
        self.set_cursor(self.cursor.linenr, col + 1)
        await self._emit_text_changed()

    async def backspace(self) -> None:
        col = self.cursor.col
        if col == 0:
            return
        line = self._current_line()
        self.document.set_line(self.cursor.linenr - 1, line[: col - 1] + line[col:])
        self.set_cursor(self.cursor.linenr, col - 1)
        await self._emit_text_changed()

    async def newline(self) -> None:
        self.hide()
        line = self._current_line()
        col = self.cursor.col
        index = self.cursor.linenr - 1
        self.document.set_line(index, line[:col])
        self.document.insert_line(index + 1, line[col:])
        self.set_cursor(self.cursor.linenr + 1, 0)
        await self._emit(EventKind.BUFFER_CHANGED)

    async def accept(self, index: int = 0) -> CompleteItem:
        """Insert a visible popup item and report it as completed."""
        items = self.popup.visible_items
        if not 0 <= index < len(items):
            raise IndexError(f"No popup item at index {index}")
        item = items[index]
        line = self._current_line()
        start = self.popup.col
        self.document.set_line(self.cursor.linenr - 1, line[:start] + item.word + line[self.cursor.col :])
        self.set_cursor(self.cursor.linenr, start + len(item.word))
        self.hide()
        await self._emit(EventKind.COMPLETION_ACCEPTED, item=item)
        return item

    async def leave_insert(self) -> None:
        self.mode = "n"
        self.hide()
        await self._emit(EventKind.INSERT_LEAVE)

    async def enter_insert(self) -> None:
        self.mode = "i"
        await self._emit(EventKind.INSERT_ENTER)

    async def trigger(self) -> None:
        await self._emit(EventKind.TRIGGER)

    def _current_line(self) -> str:
        return self.document.get_line(self.cursor.linenr - 1)

    async def _emit_text_changed(self) -> None:
        if self.popup.visible:
            # Native popup filtering: keep prefix matches of the typed text
            self.popup.filter_input = self._current_line()[self.popup.col : self.cursor.col]
            if not self.popup.visible_items:
                self.popup.visible = False
        kind = EventKind.POPUP_CHANGED if self.popup.visible else EventKind.BUFFER_CHANGED
        await self._emit(kind)

    async def _emit(self, kind: EventKind, character: str = "", item: CompleteItem | None = None) -> None:
        if self._handler is None:
            return
        await self._handler(EditorEvent(kind=kind, bufnr=self.bufnr, character=character, item=item))
