# CLI package for fuzzcomp

from .completer import PlaygroundCompleter
from .console_app import ConsoleApp
from .main import main
from .session_manager import PlaygroundSession

__all__ = [
    "ConsoleApp",
    "PlaygroundCompleter",
    "PlaygroundSession",
    "main",
]
