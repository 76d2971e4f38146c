"""Playground session: an in-memory buffer driven through the controller.

This module intentionally contains no terminal output. It returns data to the
caller so the UI layer (prompt_toolkit / rich) can render consistently.
"""

from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from ..core.completion.controller import CompletionController
from ..core.completion.events import EditorEvent
from ..core.config import EDITOR_KEYS, PreferenceStore
from ..core.document import Document, Workspace
from ..core.editor import InMemoryEditor
from ..core.sources import AroundProvider, BufferProvider, ProviderRegistry

PLAYGROUND_BUFNR = 1


class PlaygroundSession:
    """Simulated insert-mode editing with live completion."""

    def __init__(
        self,
        lines: Iterable[str] = ("",),
        filetype: str = "text",
        other_buffers: Iterable[Iterable[str]] = (),
        preferences: PreferenceStore | None = None,
    ) -> None:
        self.preferences = preferences or PreferenceStore()
        self.workspace = Workspace()
        self.document = self.workspace.add_document(Document(PLAYGROUND_BUFNR, lines, filetype))
        for bufnr, buffer_lines in enumerate(other_buffers, start=PLAYGROUND_BUFNR + 1):
            self.workspace.add_document(Document(bufnr, buffer_lines, filetype))
        self.editor = InMemoryEditor(self.workspace, PLAYGROUND_BUFNR)
        self.registry = ProviderRegistry([AroundProvider(), BufferProvider(self.workspace)])
        self.controller = CompletionController(self.editor, self.workspace, self.registry, self.preferences)
        self.editor.attach(self._dispatch)

        last = self.document.line_count
        self.editor.set_cursor(last, len(self.document.get_line(last - 1)))

    async def _dispatch(self, event: EditorEvent) -> None:
        await self.controller.dispatch(event)

    async def start(self) -> None:
        await self.controller.init()

    async def type_text(self, text: str) -> None:
        """Type `text` one character at a time, then let fetches settle."""
        for ch in text:
            await self.editor.insert_char(ch)
        await self.controller.wait_idle()

    async def handle(self, command: str) -> dict[str, Any]:
        """Run one playground line: a slash command or text to type.

        Returns a dict like {"ok": bool, "message": str, "quit": bool}.
        """
        if not command.startswith("/"):
            await self.type_text(command)
            return {"ok": True, "message": ""}

        parts = command.split()
        cmd, args = parts[0].lower(), parts[1:]

        if cmd in ("/quit", "/exit"):
            return {"ok": True, "message": "", "quit": True}
        if cmd == "/help":
            return {"ok": True, "message": "", "help": True}
        if cmd == "/state":
            return {"ok": True, "message": ""}
        if cmd == "/accept":
            index = int(args[0]) if args and args[0].isdigit() else 0
            try:
                item = await self.editor.accept(index)
            except IndexError as e:
                return {"ok": False, "message": str(e)}
            return {"ok": True, "message": f"Accepted {item.word}"}
        if cmd == "/backspace":
            count = int(args[0]) if args and args[0].isdigit() else 1
            for _ in range(count):
                await self.editor.backspace()
            await self.controller.wait_idle()
            return {"ok": True, "message": ""}
        if cmd == "/newline":
            await self.editor.newline()
            await self.controller.wait_idle()
            return {"ok": True, "message": ""}
        if cmd == "/esc":
            await self.editor.leave_insert()
            return {"ok": True, "message": "Left insert mode"}
        if cmd == "/insert":
            await self.editor.enter_insert()
            await self.controller.wait_idle()
            return {"ok": True, "message": "Entered insert mode"}
        if cmd == "/trigger":
            await self.editor.trigger()
            await self.controller.wait_idle()
            return {"ok": True, "message": ""}
        if cmd == "/config":
            return self.set_preference(args)
        return {"ok": False, "message": f"Unknown command: {cmd}"}

    def set_preference(self, args: list[str]) -> dict[str, Any]:
        if not args:
            return {"ok": True, "message": "", "config": self.preferences.get().model_dump()}
        if len(args) < 2:
            return {"ok": False, "message": "Usage: /config <key> <value>"}
        key, value = args[0], " ".join(args[1:])
        try:
            if key in EDITOR_KEYS:
                self.preferences.update_from_editor({key: value})
            else:
                self.preferences.update(**{key: value})
        except (KeyError, ValidationError) as e:
            return {"ok": False, "message": f"Invalid preference: {e}"}
        return {"ok": True, "message": f"Set {key} = {value}"}

    def snapshot(self) -> dict[str, Any]:
        """Current buffer, cursor, session and popup state."""
        cursor = self.editor.cursor
        popup = self.editor.popup
        return {
            "mode": self.editor.mode,
            "line": self.document.get_line(cursor.linenr - 1),
            "cursor": (cursor.linenr, cursor.col),
            "state": self.controller.state.value,
            "input": self.controller.input,
            "popup": [
                {"word": item.word, "menu": item.menu or "", "score": round(item.score, 3)}
                for item in popup.visible_items
            ],
            "messages": [message for _, message in self.editor.messages],
        }

    def close(self) -> None:
        self.controller.dispose()
