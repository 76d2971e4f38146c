"""Words from the current buffer."""

from ..completion.types import CompleteItem, CompleteResult, RequestContext
from .provider import CompletionProvider


class AroundProvider(CompletionProvider):
    """Completes keywords found in the buffer being edited."""

    def __init__(self, **kwargs) -> None:
        kwargs.setdefault("shortcut", "A")
        kwargs.setdefault("priority", 9)
        super().__init__("around", **kwargs)

    async def do_complete(self, context: RequestContext) -> CompleteResult | None:
        input = context.option.input
        if not input:
            return None
        words = [w for w in context.document.words if w != input]
        return CompleteResult(items=[CompleteItem(word=w) for w in words])
