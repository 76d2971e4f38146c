"""Interactive completion playground using prompt_toolkit and rich."""

import json
import signal
from pathlib import Path
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.patch_stdout import patch_stdout  # type: ignore
from prompt_toolkit.shortcuts import print_formatted_text
from prompt_toolkit.styles import Style
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.config import PreferenceStore
from .completer import PlaygroundCompleter
from .session_manager import PlaygroundSession


def render_snapshot(console: Console, snapshot: dict[str, Any]) -> None:
    """Print the buffer line with the cursor and the visible popup."""
    linenr, col = snapshot["cursor"]
    line = snapshot["line"]
    text = Text()
    text.append(f"{linenr:>3} ", style="dim")
    text.append(line[:col])
    text.append("│", style="bold magenta")
    text.append(line[col:])
    text.append(f"   [{snapshot['mode']}] {snapshot['state']}", style="dim")
    if snapshot["input"] is not None:
        text.append(f" input={snapshot['input']!r}", style="dim")
    console.print(text)

    if snapshot["popup"]:
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column(style="cyan", justify="right")
        table.add_column(style="bold")
        table.add_column(style="dim")
        table.add_column(style="dim", justify="right")
        for index, item in enumerate(snapshot["popup"]):
            table.add_row(str(index), item["word"], item["menu"], f"{item['score']:.3f}")
        console.print(Panel(table, border_style="blue", expand=False))


class ConsoleApp:
    """Playground console application."""

    def __init__(self, session: PlaygroundSession):
        self.session = session
        self.console = Console()
        self.completer = PlaygroundCompleter()
        self.running = True

        self.prompt_style = Style.from_dict({
            'prompt': 'ansicyan bold',

            # Completion menu base
            "completion-menu": "bg:default",
            "completion-menu.completion": "bg:default fg:#bbbbbb",
            "completion-menu.completion.current": "bg:#5fafff fg:#202020 bold",

            # Help/meta text styling
            "completion-menu.meta": "bg:#202020 fg:#bbbbbb",
            "completion-menu.meta.completion": "bg:#202020 fg:#bbbbbb",
            "completion-menu.meta.completion.current": "bg:#202020 #5fafff",
        })

        self.prompt_session = PromptSession(
            completer=self.completer,
            style=self.prompt_style,
            complete_while_typing=True,
        )

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        """Handle interrupt signals."""
        self.console.print("\n[yellow]Received interrupt signal. Shutting down...[/yellow]")
        self.running = False

    def _print_banner(self):
        """Print the application banner."""
        banner = Text()
        banner.append("fuzzcomp", style="bold white")
        banner.append(" - incremental completion playground", style="dim")
        self.console.print(Panel(banner, border_style="blue", padding=(1, 2)))

        help_text = Text()
        help_text.append("Type text to insert it into the buffer one character at a time.\n", style="white")
        for cmd, desc in self.completer.descriptions.items():
            help_text.append(cmd, style="cyan")
            help_text.append(f" - {desc}\n", style="white")
        self.console.print(Panel(help_text, title="Help", border_style="dim"))
        self.console.print()

    def _print_result(self, result: dict[str, Any]) -> None:
        if result.get("help"):
            self._print_banner()
            return
        if "config" in result:
            self.console.print_json(json.dumps(result["config"]))
            return
        message = result.get("message")
        if message:
            color = "ansigreen" if result.get("ok") else "ansired"
            print_formatted_text(HTML(f"<{color}>{message}</{color}>"))

    async def run(self):
        """Run the playground until /quit."""
        self._print_banner()
        await self.session.start()
        render_snapshot(self.console, self.session.snapshot())

        try:
            with patch_stdout():
                while self.running:
                    try:
                        user_input = await self.prompt_session.prompt_async(
                            HTML("<prompt>› </prompt>"),
                            completer=self.completer,
                        )
                        if not user_input:
                            continue

                        result = await self.session.handle(user_input)
                        if result.get("quit"):
                            break
                        self._print_result(result)
                        render_snapshot(self.console, self.session.snapshot())

                    except KeyboardInterrupt:
                        print_formatted_text(HTML("\n<ansiyellow>Interrupted by user.</ansiyellow>"))
                        break
                    except EOFError:
                        print_formatted_text(HTML("\n<ansiyellow>End of input.</ansiyellow>"))
                        break
        finally:
            self.session.close()
            print_formatted_text(HTML("<ansigreen>Goodbye!</ansigreen>"))


def load_script(path: Path) -> dict[str, Any]:
    """Load a replay script.

    The script is a JSON object with "lines", optional "filetype",
    "buffers" (lines of other buffers), "preferences" (editor-side names)
    and "steps" (playground lines to run in order).
    """
    with path.open("r", encoding="utf-8") as f:
        script = json.load(f)
    if not isinstance(script, dict) or not isinstance(script.get("steps"), list):
        raise ValueError(f"{path}: expected an object with a 'steps' list")
    return script


def session_from_script(script: dict[str, Any], preferences: PreferenceStore) -> PlaygroundSession:
    if script.get("preferences"):
        preferences.update_from_editor(script["preferences"])
    return PlaygroundSession(
        lines=script.get("lines", [""]),
        filetype=script.get("filetype", "text"),
        other_buffers=script.get("buffers", []),
        preferences=preferences,
    )


async def replay(script: dict[str, Any], preferences: PreferenceStore, console: Console) -> list[dict[str, Any]]:
    """Run every step of a script, printing the state after each one."""
    session = session_from_script(script, preferences)
    await session.start()
    snapshots: list[dict[str, Any]] = []
    try:
        for step in script["steps"]:
            console.print(Text(f"» {step}", style="bold cyan"))
            result = await session.handle(str(step))
            if result.get("message"):
                console.print(Text(result["message"], style="green" if result.get("ok") else "red"))
            snapshot = session.snapshot()
            render_snapshot(console, snapshot)
            snapshots.append(snapshot)
            if result.get("quit"):
                break
    finally:
        session.close()
    return snapshots
