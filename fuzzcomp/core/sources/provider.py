"""Completion provider abstract base class."""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from ..completion.types import CompleteItem, CompleteResult, RequestContext


class CompletionError(Exception):
    """Base class for completion failures."""


class ProviderError(CompletionError):
    """Raised when a provider fails to produce candidates."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ProviderTimeoutError(ProviderError):
    """Raised when a provider misses the fetch deadline."""


class CompletionProvider(ABC):
    """Abstract base class for completion providers."""

    def __init__(
        self,
        name: str,
        *,
        shortcut: str | None = None,
        priority: int = 0,
        trigger_characters: Iterable[str] = (),
        filetypes: Iterable[str] | None = None,
        enabled: bool = True,
    ) -> None:
        self.name = name
        self.shortcut = shortcut or name[:1].upper()
        self.priority = priority
        self.trigger_characters = frozenset(trigger_characters)
        self.filetypes = frozenset(filetypes) if filetypes is not None else None
        self.enabled = enabled

    def supports_filetype(self, filetype: str) -> bool:
        return self.filetypes is None or filetype in self.filetypes

    def is_trigger_character(self, character: str, filetype: str) -> bool:
        return self.enabled and self.supports_filetype(filetype) and character in self.trigger_characters

    async def should_complete(self, context: RequestContext) -> bool:
        """Whether this provider takes part in the request."""
        return self.enabled and self.supports_filetype(context.option.filetype)

    @abstractmethod
    async def do_complete(self, context: RequestContext) -> CompleteResult | None:
        """Produce candidates for the request."""
        pass

    async def on_complete_resolve(self, item: CompleteItem) -> None:
        """Fill in deferred details of an item about to be shown."""
        return None

    async def on_complete_done(self, item: CompleteItem) -> None:
        """Run side effects of an accepted item."""
        return None
