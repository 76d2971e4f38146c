"""Shared test helpers for the fuzzcomp test suite."""

import asyncio
from collections.abc import Iterable

from fuzzcomp.core.completion.types import CompleteItem, CompleteResult, RequestContext
from fuzzcomp.core.sources.provider import CompletionProvider


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StaticProvider(CompletionProvider):
    """Provider returning a fixed candidate list and recording hook calls."""

    def __init__(self, words: Iterable[str | CompleteItem], name: str = "static", **kwargs: object) -> None:
        super().__init__(name, **kwargs)  # type: ignore[arg-type]
        self.items = [w if isinstance(w, CompleteItem) else CompleteItem(word=w) for w in words]
        self.calls = 0
        self.contexts: list[RequestContext] = []
        self.resolved: list[str] = []
        self.accepted: list[str] = []
        self.gate: asyncio.Event | None = None
        self.started = asyncio.Event()
        self.error: Exception | None = None

    async def do_complete(self, context: RequestContext) -> CompleteResult | None:
        self.calls += 1
        self.contexts.append(context)
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return CompleteResult(items=list(self.items))

    async def on_complete_resolve(self, item: CompleteItem) -> None:
        self.resolved.append(item.word)

    async def on_complete_done(self, item: CompleteItem) -> None:
        self.accepted.append(item.word)


def words_of(items: Iterable[CompleteItem]) -> list[str]:
    return [item.word for item in items]
