"""Command auto-completion for the playground prompt."""

from collections.abc import Iterable

from prompt_toolkit.completion import Completer, Completion


class PlaygroundCompleter(Completer):
    """Auto-completer for playground slash commands."""

    def __init__(self):
        self.descriptions = {
            "/accept": "Accept popup item N (default 0)",
            "/backspace": "Delete N characters before the cursor",
            "/newline": "Break the line at the cursor",
            "/esc": "Leave insert mode",
            "/insert": "Enter insert mode",
            "/trigger": "Request completion explicitly",
            "/state": "Show session state",
            "/config": "Show/set a preference",
            "/help": "Show help",
            "/quit": "Exit the playground",
        }
        self.commands = list(self.descriptions)

    def get_completions(self, document, complete_event) -> Iterable[Completion]:
        """Complete slash commands only; any other text is typed into the buffer."""
        text = document.text_before_cursor
        if not text.startswith("/") or " " in text:
            return

        for cmd in self.commands:
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display=cmd,
                    display_meta=self.descriptions[cmd],
                )

    def get_commands(self) -> list[str]:
        """Get the list of available commands."""
        return self.commands.copy()
