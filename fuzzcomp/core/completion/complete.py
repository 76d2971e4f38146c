"""Fan-out to completion providers and local re-filtering of their results."""

import asyncio
import itertools
import json
import logging
from dataclasses import replace

from ..config import CompleteConfig
from ..sources.provider import CompletionProvider, ProviderError, ProviderTimeoutError
from .fuzzy import fuzzy_match, get_char_codes, match_score
from .recent import RecentScoreTable
from .types import CompleteItem, CompleteOption, CompleteResult, RequestContext

logger = logging.getLogger("fuzzcomp.complete")

_cids = itertools.count(1)


class Complete:
    """One completion request: the provider fan-out and its result set.

    `do_complete` queries providers once; `filter_results` re-ranks the
    fetched superset for a longer input without querying again.
    """

    def __init__(
        self,
        context: RequestContext,
        recent_scores: RecentScoreTable,
        config: CompleteConfig,
    ) -> None:
        self.context = context
        self.recent_scores = recent_scores
        self.config = config
        self.cid = next(_cids)
        self.results: list[CompleteResult] | None = None
        self.errors: list[ProviderError] = []

    @property
    def option(self) -> CompleteOption:
        return self.context.option

    async def _complete_source(self, provider: CompletionProvider) -> CompleteResult | None:
        timeout = self.config.timeout / 1000
        try:
            result = await asyncio.wait_for(provider.do_complete(self.context), timeout)
        except TimeoutError:
            logger.warning("Source %s timeout after %dms", provider.name, self.config.timeout)
            self.errors.append(ProviderTimeoutError(provider.name, f"timeout after {self.config.timeout}ms"))
            return None
        except Exception as e:
            logger.exception("Complete error on source %s", provider.name)
            self.errors.append(ProviderError(provider.name, str(e)))
            return None
        if result is None:
            return None
        result.source = provider.name
        result.shortcut = provider.shortcut
        result.priority = provider.priority
        return result

    async def do_complete(self, providers: list[CompletionProvider]) -> list[CompleteItem]:
        """Query all providers concurrently and return the filtered items.

        A failing or slow provider contributes nothing. When every provider
        fails, the first failure is raised.

        Raises:
            ProviderError: If no provider produced a result.
        """
        results = await asyncio.gather(*(self._complete_source(p) for p in providers))
        if providers and self.errors and len(self.errors) == len(providers):
            raise self.errors[0]
        self.results = [r for r in results if r is not None and r.items]
        logger.debug(
            "Results from: %s",
            ",".join(f"{r.source}({len(r.items)})" for r in self.results),
        )
        return self.filter_results(self.option.input) or []

    def filter_results(self, input: str) -> list[CompleteItem] | None:
        """Rank the fetched items against `input`.

        Returns None when nothing has been fetched yet.
        """
        if self.results is None:
            return None
        codes = get_char_codes(input)
        filtering = len(input) > 0
        words: set[str] = set()
        items: list[CompleteItem] = []
        user_data_cache: dict[str, str] = {}
        for result in sorted(self.results, key=lambda r: r.priority, reverse=True):
            user_data = user_data_cache.setdefault(
                result.source, json.dumps({"cid": self.cid, "source": result.source})
            )
            for item in result.items:
                filter_word = item.filter_word
                if not item.word:
                    continue
                if filtering and not fuzzy_match(codes, filter_word):
                    continue
                if item.word in words and not item.dup:
                    continue
                words.add(item.word)
                score = 0.0
                if filtering:
                    score = match_score(filter_word, input) + self.recent_scores.get(input, item.word)
                items.append(
                    replace(
                        item,
                        menu=item.menu or f"[{result.shortcut}]",
                        user_data=user_data,
                        score=score,
                        source=result.source,
                        priority=result.priority,
                    )
                )
        items.sort(key=lambda i: (-i.score, -i.priority))
        return items[: self.config.max_item_count]
