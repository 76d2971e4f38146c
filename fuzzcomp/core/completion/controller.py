"""Completion session controller.

Drives completion sessions from editor events: decides when to trigger,
narrows candidates locally while the user keeps typing, aborts when nothing
matches any more and feeds accepted items back into ranking.

Events may arrive out of keystroke order, so every handler re-derives the
typed input from the live cursor and line instead of trusting the order in
which events were delivered. Anything read before an await is re-checked
after it.
"""

import asyncio
import json
import logging
import time
from collections.abc import Callable

from ..config import CompleteConfig, CompletionPreferences, PreferenceStore
from ..document import Document, Workspace
from ..editor import Editor
from ..sources.registry import ProviderRegistry
from .complete import Complete
from .events import EditorEvent, EventKind
from .fuzzy import fuzzy_match, get_char_codes
from .increment import Increment
from .recent import RecentScoreTable
from .types import (
    FRESH_INSERT_WINDOW_NEOVIM,
    FRESH_INSERT_WINDOW_VIM,
    RECENT_CHANGE_WINDOW,
    SELF_PUSH_SUPPRESSION_WINDOW,
    CompleteItem,
    CompleteOption,
    LastInsert,
    RequestContext,
    SessionState,
    is_own_item,
)

logger = logging.getLogger("fuzzcomp.completion")


class CompletionController:
    """Reacts to editor events and owns the completion session."""

    def __init__(
        self,
        editor: Editor,
        workspace: Workspace,
        registry: ProviderRegistry,
        preferences: PreferenceStore | None = None,
        recent_scores: RecentScoreTable | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.editor = editor
        self.workspace = workspace
        self.registry = registry
        self.recent_scores = recent_scores or RecentScoreTable()
        self.increment = Increment(editor)
        self.insert_mode = False
        self.completing = False
        self.complete: Complete | None = None
        self.complete_items: list[CompleteItem] = []

        self._preference_store = preferences or PreferenceStore()
        self.preferences = self._preference_store.get()
        self._clock = clock
        self._context: RequestContext | None = None
        self._last_insert: LastInsert | None = None
        self._last_changed_i: float | None = None
        self._last_pum_visible: float | None = None
        self._fetch_task: asyncio.Task[None] | None = None
        self._queue: asyncio.Queue[EditorEvent] | None = None

        self._disposables: list[Callable[[], None]] = [
            self._preference_store.on_did_change(self._on_preferences_changed),
            self.increment.on_start(self._on_session_start),
            self.increment.on_stop(self._on_session_stop),
        ]
        self._handlers = {
            EventKind.TRIGGER: lambda event: self.trigger_completion(),
            EventKind.CHAR_INSERTED: lambda event: self.on_insert_char_pre(event.character),
            EventKind.BUFFER_CHANGED: lambda event: self.on_text_changed_i(event.bufnr),
            EventKind.POPUP_CHANGED: lambda event: self.on_text_changed_p(),
            EventKind.INSERT_ENTER: lambda event: self.on_insert_enter(),
            EventKind.INSERT_LEAVE: lambda event: self.on_insert_leave(),
            EventKind.COMPLETION_ACCEPTED: lambda event: self.on_complete_done(event.item),
        }

    async def init(self) -> None:
        """Read the initial editor mode."""
        try:
            mode = await self.editor.get_mode()
        except Exception:
            logger.debug("Unable to read editor mode", exc_info=True)
            return
        self.insert_mode = mode.startswith("i")

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.increment.is_active

    @property
    def state(self) -> SessionState:
        if self.completing:
            return SessionState.FETCHING
        if self.increment.is_active:
            return SessionState.ACTIVE
        return SessionState.IDLE

    @property
    def option(self) -> CompleteOption | None:
        return self._context.option if self._context else None

    @property
    def bufnr(self) -> int | None:
        return self._context.option.bufnr if self._context else None

    @property
    def input(self) -> str | None:
        return self._context.option.input if self._context else None

    def on_session_start(self, hook: Callable[[], None]) -> Callable[[], None]:
        return self.increment.on_start(hook)

    def on_session_stop(self, hook: Callable[[], None]) -> Callable[[], None]:
        return self.increment.on_stop(hook)

    def _on_session_start(self) -> None:
        self.complete_items = []
        if self._context is not None:
            # We drive the buffer until the session stops
            self._context.document.paused = True

    def _on_session_stop(self) -> None:
        if self._context is not None:
            self._context.document.paused = False
        self._context = None

    def _on_preferences_changed(self, preferences: CompletionPreferences) -> None:
        self.preferences = preferences

    @property
    def _is_triggered(self) -> bool:
        """Whether the session was started by a non-keyword trigger character."""
        if self._context is None:
            return False
        trigger = self._context.option.trigger_character
        return bool(trigger) and not self._context.document.is_word(trigger)

    @property
    def has_latest_changed_i(self) -> bool:
        last = self._last_changed_i
        return last is not None and self._clock() - last < RECENT_CHANGE_WINDOW

    @property
    def latest_insert(self) -> LastInsert | None:
        """The last inserted character, if it is still fresh."""
        last = self._last_insert
        window = FRESH_INSERT_WINDOW_VIM if self.preferences.editor == "vim" else FRESH_INSERT_WINDOW_NEOVIM
        if last is None or self._clock() - last.timestamp > window:
            return None
        return last

    @property
    def latest_insert_char(self) -> str:
        latest = self.latest_insert
        return latest.character if latest else ""

    # ------------------------------------------------------------------
    # Event loop
    # ------------------------------------------------------------------

    def post(self, event: EditorEvent) -> None:
        """Queue an event for `run`."""
        if self._queue is None:
            self._queue = asyncio.Queue()
        self._queue.put_nowait(event)

    async def run(self) -> None:
        """Handle queued events one at a time until cancelled."""
        if self._queue is None:
            self._queue = asyncio.Queue()
        queue = self._queue
        while True:
            event = await queue.get()
            try:
                await self.dispatch(event)
            except Exception:
                logger.exception("Error handling %s", event.kind.value)
            finally:
                queue.task_done()

    async def dispatch(self, event: EditorEvent) -> None:
        """Handle a single event."""
        logger.debug("Event %s", event.kind.value)
        result = self._handlers[event.kind](event)
        if asyncio.iscoroutine(result):
            await result

    async def wait_idle(self) -> None:
        """Wait for the in-flight provider fetch, if any."""
        task = self._fetch_task
        if task is not None and not task.done():
            await task

    # ------------------------------------------------------------------
    # Session start
    # ------------------------------------------------------------------

    def _get_complete_config(self) -> CompleteConfig:
        return self.preferences.complete_config()

    async def _build_complete_option(self, trigger_character: str | None = None) -> CompleteOption | None:
        cursor = await self.editor.get_cursor()
        document = self.workspace.get_document(cursor.bufnr)
        if document is None:
            return None
        line = document.get_line(cursor.linenr - 1)
        col = document.get_word_start(line, cursor.col)
        return CompleteOption(
            bufnr=cursor.bufnr,
            linenr=cursor.linenr,
            col=col,
            line=line,
            input=line[col : cursor.col],
            filetype=document.filetype,
            trigger_character=trigger_character,
        )

    async def trigger_completion(self) -> None:
        """Start a session from the live cursor, unless a fetch is running."""
        if self.completing:
            return
        option = await self._build_complete_option()
        if option is not None:
            self.start_completion(option)

    def start_completion(self, option: CompleteOption) -> asyncio.Task[None] | None:
        """Start a session for `option` in the background.

        Returns the fetch task, or None when the trigger was dropped.
        """
        document = self.workspace.get_document(option.bufnr)
        if document is None or self.completing:
            return None
        self.completing = True
        context = RequestContext(option=option, document=document)
        self._fetch_task = asyncio.create_task(self._run_complete(context))
        return self._fetch_task

    async def _run_complete(self, context: RequestContext) -> None:
        try:
            await self._do_complete(context)
        except Exception as e:
            logger.exception("Error happens on complete")
            self.editor.show_message(f"Error happens on complete: {e}", level="error")
            if self._context is context:
                self.increment.stop()
        finally:
            self.completing = False

    async def _do_complete(self, context: RequestContext) -> None:
        option, document = context.option, context.document
        if self.increment.is_active:
            # A new request replaces the bound session
            self.editor.hide()
            self.increment.stop()
        self._context = context
        self.increment.start(noselect=self.preferences.noselect)
        logger.debug("options: %s", json.dumps(option.to_dict()))
        providers = await self.registry.select_active_providers(context)
        logger.debug("Activated providers: %s", ",".join(p.name for p in providers))
        self.complete = Complete(context, self.recent_scores, self._get_complete_config())
        items = await self.complete.do_complete(providers)
        if self._context is not context:
            # Stopped while providers were resolving
            return
        if not items or not self.insert_mode:
            self.increment.stop()
            return
        # The buffer tick can change without the content changing
        if document.get_line(option.linenr - 1) == option.line:
            await self._show_items(option.col, items)
            return
        # Typed ahead while fetching: narrow what we have
        search = await self._get_resume_input()
        if search is None:
            return
        await self.resume_completion(search)

    # ------------------------------------------------------------------
    # Resume
    # ------------------------------------------------------------------

    async def _get_resume_input(self) -> str | None:
        """Text typed since the session column, or None if the session is invalid.

        Stops the session when the cursor left the session line or moved
        before the session column.
        """
        context = self._context
        if context is None:
            return None
        cursor = await self.editor.get_cursor()
        if self._context is not context:
            return None
        option = context.option
        if cursor.bufnr != option.bufnr or cursor.linenr != option.linenr or cursor.col < option.col:
            self.increment.stop()
            return None
        line = context.document.get_line(cursor.linenr - 1)
        return line[option.col : cursor.col]

    async def resume_completion(self, resume_input: str, is_changed_p: bool = False) -> None:
        """Narrow the fetched candidates to `resume_input` and push them."""
        context, complete = self._context, self.complete
        if context is None or complete is None or complete.results is None:
            return
        context.option.input = resume_input
        items = complete.filter_results(resume_input)
        if not self.insert_mode or not items:
            self.editor.hide()
            self.increment.stop()
            return
        if is_changed_p:
            # The popup already narrowed itself; only push when we disagree
            if len(self._filter_items_vim(resume_input)) == len(items):
                return
        await self._show_items(context.option.col, items)

    async def _show_items(self, col: int, items: list[CompleteItem]) -> None:
        self.editor.set_context(col, items)
        self.complete_items = items
        await self.editor.request_render()
        await self._on_pum_visible()

    async def _on_pum_visible(self) -> None:
        self._last_pum_visible = self._clock()
        if not self.complete_items or self.preferences.noselect:
            return
        await self.registry.resolve_detail(self.complete_items[0])

    def _filter_items_vim(self, input: str) -> list[CompleteItem]:
        """Prefix filter, as the editor's popup applies natively."""
        return [item for item in self.complete_items if item.word.startswith(input)]

    def _get_complete_item(self, word: str) -> CompleteItem | None:
        for item in self.complete_items:
            if item.word == word:
                return item
        return None

    # ------------------------------------------------------------------
    # Editor events
    # ------------------------------------------------------------------

    def should_trigger(self, character: str, document: Document) -> bool:
        """Whether typing `character` in `document` starts a session."""
        if not character or character == " ":
            return False
        auto_trigger = self.preferences.auto_trigger
        if auto_trigger == "none":
            return False
        if self.registry.is_trigger_character(character, document.filetype):
            return True
        if document.is_word(character):
            return auto_trigger == "always"
        return False

    def on_insert_char_pre(self, character: str) -> None:
        self._last_insert = LastInsert(character=character, timestamp=self._clock())
        if self.completing or not self.increment.is_active or self._context is None:
            return
        # Hide before the character lands rather than flash stale items
        if not self.has_match(self._context.option.input + character):
            self.editor.hide()
            self.increment.stop()

    async def on_text_changed_i(self, bufnr: int) -> None:
        self._last_changed_i = self._clock()
        if self.completing:
            return
        input = self.input
        latest_insert_char = self.latest_insert_char
        if self.increment.is_active:
            if bufnr != self.bufnr:
                return
            search = await self._get_resume_input()
            if search is None or search == input:
                return
            context = self._context
            if not self.increment.is_active or context is None:
                return
            if not self._is_triggered and not input and context.document.is_word(search[0]):
                # Restart so the new session begins at the keyword start
                self.increment.stop()
            else:
                await self.resume_completion(search)
                return
        if not latest_insert_char:
            return
        document = self.workspace.get_document(bufnr)
        if document is None or not self.should_trigger(latest_insert_char, document):
            return
        option = await self._build_complete_option(trigger_character=latest_insert_char)
        if option is None:
            return
        logger.debug("Trigger completion with %s", option)
        self.start_completion(option)

    async def on_text_changed_p(self) -> None:
        last_pum_visible = self._last_pum_visible
        if last_pum_visible is not None and abs(self._clock() - last_pum_visible) < SELF_PUSH_SUPPRESSION_WINDOW:
            return
        if self.has_latest_changed_i or self.completing or not self.increment.is_active:
            return
        latest_insert = self.latest_insert
        input = self.input
        search = await self._get_resume_input()
        if search is None or search == input:
            return
        if latest_insert:
            await self.resume_completion(search, is_changed_p=True)
            return
        # Selection moved and the editor inserted the selected word
        item = self._get_complete_item(search)
        if item is not None:
            await self.registry.resolve_detail(item)

    async def on_complete_done(self, item: CompleteItem | None) -> None:
        if not is_own_item(item):
            return
        input = self.input
        self.increment.stop()
        self.recent_scores.add(input, item.word)
        try:
            await self.registry.notify_accepted(item)
        except Exception:
            logger.exception("Error on complete done")

    def on_insert_leave(self) -> None:
        self.insert_mode = False
        self.editor.hide()
        self.increment.stop()

    async def on_insert_enter(self) -> None:
        self.insert_mode = True
        if self.preferences.auto_trigger != "always":
            return
        if self.preferences.trigger_after_insert_enter and not self.completing:
            option = await self._build_complete_option()
            if option is not None:
                self.start_completion(option)

    # ------------------------------------------------------------------

    def has_match(self, search: str) -> bool:
        """Whether any current candidate fuzzy-matches `search`."""
        codes = get_char_codes(search)
        return any(fuzzy_match(codes, item.filter_word) for item in self.complete_items)

    def dispose(self) -> None:
        self.increment.stop()
        self.increment.remove_all_hooks()
        for dispose in self._disposables:
            dispose()
        self._disposables.clear()
