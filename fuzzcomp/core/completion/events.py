"""Editor events consumed by the completion controller."""

from dataclasses import dataclass
from enum import Enum

from .types import CompleteItem


class EventKind(str, Enum):
    """Editor events, named after the autocommands that raise them."""

    TRIGGER = "Trigger"  # explicit completion request
    CHAR_INSERTED = "InsertCharPre"  # character about to be inserted
    BUFFER_CHANGED = "TextChangedI"  # text changed in insert mode
    POPUP_CHANGED = "TextChangedP"  # text changed while the popup is visible
    INSERT_ENTER = "InsertEnter"
    INSERT_LEAVE = "InsertLeave"
    COMPLETION_ACCEPTED = "CompleteDone"


@dataclass(frozen=True)
class EditorEvent:
    """One editor notification."""

    kind: EventKind
    bufnr: int = 0
    character: str = ""
    item: CompleteItem | None = None
