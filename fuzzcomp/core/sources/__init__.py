# Completion providers

from .around import AroundProvider
from .buffer import BufferProvider
from .provider import CompletionError, CompletionProvider, ProviderError, ProviderTimeoutError
from .registry import ProviderRegistry

__all__ = [
    "AroundProvider",
    "BufferProvider",
    "CompletionError",
    "CompletionProvider",
    "ProviderError",
    "ProviderRegistry",
    "ProviderTimeoutError",
]
