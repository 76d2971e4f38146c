"""Words from the other loaded buffers."""

from ..completion.types import CompleteItem, CompleteResult, RequestContext
from ..document import Workspace
from .provider import CompletionProvider


class BufferProvider(CompletionProvider):
    """Completes keywords found in every loaded buffer except the current one."""

    def __init__(self, workspace: Workspace, **kwargs) -> None:
        kwargs.setdefault("shortcut", "B")
        kwargs.setdefault("priority", 1)
        super().__init__("buffer", **kwargs)
        self.workspace = workspace

    async def do_complete(self, context: RequestContext) -> CompleteResult | None:
        input = context.option.input
        if not input:
            return None
        seen: dict[str, None] = {}
        for document in self.workspace.documents:
            if document.bufnr == context.option.bufnr:
                continue
            for word in document.words:
                if word != input:
                    seen.setdefault(word)
        return CompleteResult(items=[CompleteItem(word=w) for w in seen])
