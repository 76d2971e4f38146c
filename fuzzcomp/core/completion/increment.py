"""Completion session state."""

import logging
from collections.abc import Callable

from ..editor import Editor

logger = logging.getLogger("fuzzcomp.increment")

SESSION_COMPLETEOPT = "menuone,noinsert"

Hook = Callable[[], None]


class Increment:
    """Owns the "session active" flag and its start/stop hooks.

    While a session is active the editor's popup options are switched to
    SESSION_COMPLETEOPT so the popup never inserts text on its own; the
    previous options are restored on stop.
    """

    def __init__(self, editor: Editor) -> None:
        self._editor = editor
        self._active = False
        self._saved_completeopt: str | None = None
        self._start_hooks: list[Hook] = []
        self._stop_hooks: list[Hook] = []

    @property
    def is_active(self) -> bool:
        return self._active

    def on_start(self, hook: Hook) -> Callable[[], None]:
        return self._register(self._start_hooks, hook)

    def on_stop(self, hook: Hook) -> Callable[[], None]:
        return self._register(self._stop_hooks, hook)

    def start(self, noselect: bool = False) -> None:
        self._active = True
        if self._saved_completeopt is None:
            self._saved_completeopt = self._editor.get_completeopt()
        completeopt = SESSION_COMPLETEOPT + (",noselect" if noselect else "")
        self._editor.set_completeopt(completeopt)
        logger.debug("Session started")
        self._run(self._start_hooks)

    def stop(self) -> None:
        """End the session. Stopping an inactive session does nothing."""
        if not self._active:
            return
        self._active = False
        if self._saved_completeopt is not None:
            self._editor.set_completeopt(self._saved_completeopt)
            self._saved_completeopt = None
        logger.debug("Session stopped")
        self._run(self._stop_hooks)

    def remove_all_hooks(self) -> None:
        self._start_hooks.clear()
        self._stop_hooks.clear()

    @staticmethod
    def _register(hooks: list[Hook], hook: Hook) -> Callable[[], None]:
        hooks.append(hook)

        def dispose() -> None:
            if hook in hooks:
                hooks.remove(hook)

        return dispose

    @staticmethod
    def _run(hooks: list[Hook]) -> None:
        for hook in list(hooks):
            try:
                hook()
            except Exception:
                logger.exception("Session hook %r failed", hook)
