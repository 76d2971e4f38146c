"""Incremental fuzzy completion sessions for interactive editors."""

from .core.completion.complete import Complete
from .core.completion.controller import CompletionController
from .core.completion.events import EditorEvent, EventKind
from .core.completion.fuzzy import fuzzy_match, get_char_codes, match_score
from .core.completion.increment import Increment
from .core.completion.recent import RecentScoreTable
from .core.completion.types import (
    CompleteItem,
    CompleteOption,
    CompleteResult,
    Cursor,
    LastInsert,
    RequestContext,
    SessionState,
)
from .core.config import CompleteConfig, CompletionPreferences, PreferenceStore
from .core.document import Document, Workspace
from .core.editor import Editor, InMemoryEditor
from .core.sources import (
    AroundProvider,
    BufferProvider,
    CompletionError,
    CompletionProvider,
    ProviderError,
    ProviderRegistry,
    ProviderTimeoutError,
)

__version__ = "0.1.0"

__all__ = [
    "AroundProvider",
    "BufferProvider",
    "Complete",
    "CompleteConfig",
    "CompleteItem",
    "CompleteOption",
    "CompleteResult",
    "CompletionError",
    "CompletionController",
    "CompletionPreferences",
    "CompletionProvider",
    "Cursor",
    "Document",
    "Editor",
    "EditorEvent",
    "EventKind",
    "InMemoryEditor",
    "Increment",
    "LastInsert",
    "PreferenceStore",
    "ProviderError",
    "ProviderRegistry",
    "ProviderTimeoutError",
    "RecentScoreTable",
    "RequestContext",
    "SessionState",
    "Workspace",
    "fuzzy_match",
    "get_char_codes",
    "match_score",
]
