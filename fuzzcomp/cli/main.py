#!/usr/bin/env python3
"""Main entry point for the fuzzcomp CLI."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console

from ..core.config import CompletionPreferences, PreferenceStore
from .console_app import ConsoleApp, load_script, replay, session_from_script


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.option('--log-level', help='Logging level (overrides FUZZCOMP_LOG_LEVEL)')
@click.pass_context
def main(ctx: click.Context, log_level: str | None):
    """fuzzcomp - incremental fuzzy completion sessions

    Examples:
        fuzzcomp play                        # Interactive playground
        fuzzcomp play --line "foo for fox"   # Start with some buffer text
        fuzzcomp replay session.json         # Replay a scripted session
    """
    try:
        preferences = CompletionPreferences()
        if log_level:
            preferences = CompletionPreferences(log_level=log_level)
    except ValidationError as e:
        raise click.BadParameter(str(e)) from e
    configure_logging(preferences.log_level)
    ctx.obj = PreferenceStore(preferences)


@main.command()
@click.option('--line', 'lines', multiple=True, help='Initial buffer line (repeatable)')
@click.option('--filetype', default='text', show_default=True, help='Filetype of the buffer')
@click.pass_obj
def play(preferences: PreferenceStore, lines: tuple[str, ...], filetype: str):
    """Type into an in-memory buffer with live completion."""
    script = {"lines": list(lines) or [""], "filetype": filetype, "steps": []}
    session = session_from_script(script, preferences)
    try:
        asyncio.run(ConsoleApp(session).run())
    except KeyboardInterrupt:
        sys.exit(0)


@main.command(name='replay')
@click.argument('script_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def replay_command(preferences: PreferenceStore, script_path: Path):
    """Replay a JSON session script and print the popup after each step."""
    console = Console()
    try:
        script = load_script(script_path)
        asyncio.run(replay(script, preferences, console))
    except (ValueError, KeyError) as e:
        console.print(f"[red]Fatal error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
