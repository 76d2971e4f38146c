"""Data types for completion sessions."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..document import Document

# Named timing windows, in seconds of the controller clock.
#
# A buffer change counts as the echo of a recorded keystroke only while the
# keystroke is younger than the fresh-insertion window. Vim delivers its
# events later than Neovim, hence the wider window.
FRESH_INSERT_WINDOW_VIM = 0.1
FRESH_INSERT_WINDOW_NEOVIM = 0.05
# A popup-filter event arriving this soon after a buffer change event defers
# to the buffer change, which already drove the resume.
RECENT_CHANGE_WINDOW = 0.08
# Popup-filter events fired this soon after our own popup push are echoes of
# that push.
SELF_PUSH_SUPPRESSION_WINDOW = 0.01


class SessionState(str, Enum):
    """Observable state of the completion controller."""

    IDLE = "idle"
    FETCHING = "fetching"
    ACTIVE = "active"


@dataclass
class CompleteOption:
    """Request context captured when a completion session is triggered.

    Lines are 1-based, columns are 0-based character offsets. `input` is
    rewritten on every resume step; all other fields are fixed once built.
    """

    bufnr: int
    linenr: int
    col: int
    line: str
    input: str = ""
    filetype: str = ""
    trigger_character: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RequestContext:
    """A serializable request option paired with the document it targets."""

    option: CompleteOption
    document: Document


@dataclass(frozen=True)
class Cursor:
    """Live cursor position reported by the editor."""

    bufnr: int
    linenr: int
    col: int


@dataclass(frozen=True)
class LastInsert:
    """The most recently inserted character and when it was seen."""

    character: str
    timestamp: float


@dataclass(frozen=True)
class CompleteItem:
    """A completion candidate.

    `data` carries provider metadata for resolve/accept hooks and is never
    sent to the popup. `score`, `source` and `priority` are stamped by the
    aggregator.
    """

    word: str
    abbr: str | None = None
    menu: str | None = None
    info: str | None = None
    kind: str | None = None
    filter_text: str | None = None
    dup: bool = False
    user_data: str | None = None
    data: dict[str, Any] = field(default_factory=dict, compare=False)
    score: float = 0.0
    source: str | None = None
    priority: int = 0

    @property
    def filter_word(self) -> str:
        """Text used for matching: the filter text when set, else the word."""
        return self.filter_text or self.word


@dataclass
class CompleteResult:
    """Items returned by one provider for one request."""

    items: list[CompleteItem]
    source: str = ""
    shortcut: str = ""
    priority: int = 0


def parse_user_data(user_data: str | None) -> dict[str, Any] | None:
    """Decode an item's user_data, returning None unless it is a JSON object."""
    if not user_data:
        return None
    try:
        value = json.loads(user_data)
    except ValueError:
        return None
    return value if isinstance(value, dict) else None


def is_own_item(item: CompleteItem | None) -> bool:
    """Whether an accepted item was produced by our aggregator."""
    if item is None:
        return False
    meta = parse_user_data(item.user_data)
    return meta is not None and "cid" in meta
