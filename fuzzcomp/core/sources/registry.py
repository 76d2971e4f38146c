"""Provider registry."""

import logging
from collections.abc import Callable, Iterable

from ..completion.types import CompleteItem, RequestContext, parse_user_data
from .provider import CompletionProvider

logger = logging.getLogger("fuzzcomp.sources")


class ProviderRegistry:
    """Registered completion providers, ordered by priority."""

    def __init__(self, providers: Iterable[CompletionProvider] = ()) -> None:
        self._providers: dict[str, CompletionProvider] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: CompletionProvider) -> Callable[[], None]:
        """Register a provider, replacing any with the same name."""
        self._providers[provider.name] = provider

        def dispose() -> None:
            if self._providers.get(provider.name) is provider:
                del self._providers[provider.name]

        return dispose

    def unregister(self, name: str) -> None:
        self._providers.pop(name, None)

    def get(self, name: str) -> CompletionProvider | None:
        return self._providers.get(name)

    @property
    def providers(self) -> list[CompletionProvider]:
        """All providers, highest priority first."""
        return sorted(self._providers.values(), key=lambda p: p.priority, reverse=True)

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.providers]

    async def select_active_providers(self, context: RequestContext) -> list[CompletionProvider]:
        """Providers that take part in this request, highest priority first."""
        active: list[CompletionProvider] = []
        for provider in self.providers:
            if await provider.should_complete(context):
                active.append(provider)
        return active

    def is_trigger_character(self, character: str, filetype: str) -> bool:
        return any(p.is_trigger_character(character, filetype) for p in self._providers.values())

    def get_provider_by_item(self, item: CompleteItem) -> CompletionProvider | None:
        name = item.source
        if name is None:
            meta = parse_user_data(item.user_data)
            name = meta.get("source") if meta else None
        return self._providers.get(name) if name else None

    async def resolve_detail(self, item: CompleteItem | None) -> None:
        """Ask the item's provider to resolve deferred details.

        Failures are logged, never raised.
        """
        if item is None:
            return
        provider = self.get_provider_by_item(item)
        if provider is None:
            return
        try:
            await provider.on_complete_resolve(item)
        except Exception:
            logger.exception("Error on complete resolve for %s", provider.name)

    async def notify_accepted(self, item: CompleteItem) -> None:
        """Tell the item's provider it was accepted."""
        provider = self.get_provider_by_item(item)
        if provider is None:
            return
        await provider.on_complete_done(item)
