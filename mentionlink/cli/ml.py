#!/usr/bin/env python3
"""
Command line host for mentionlink.

Usage:
    ml suggest VAULT "text @que"        - Show candidates for the typed text
    ml link VAULT "text @que" --pick 1  - Insert the chosen link and print the result
    ml check VAULT                      - Validate settings against the vault
    ml import-settings data.json out    - Convert Obsidian plugin settings
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from loguru import logger
from rich.console import Console
from rich.table import Table
from rich.text import Text

from mentionlink.engine.buffer import EditorPosition, TextBuffer
from mentionlink.engine.config import LinkingSettings
from mentionlink.engine.suggest import DisplayFragment, MentionSuggest
from mentionlink.engine.trigger import TriggerWindow
from mentionlink.engine.validation import validate_settings
from mentionlink.engine.vault import FolderVault

console = Console()


class ConsoleNotifier:
    """Prints notices to the terminal."""

    def notify(self, message: str, timeout: Optional[float] = None) -> None:
        style = "red" if timeout == 0 else "yellow"
        console.print(f"[{style}]{message}[/{style}]")


def setup_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level="DEBUG" if verbose else "WARNING",
    )


def load_settings(config_path: Optional[Path]) -> LinkingSettings:
    if config_path is None:
        return LinkingSettings()
    return LinkingSettings.load(config_path)


def simulate_typing(
    suggest: MentionSuggest,
    text: str,
    settings: LinkingSettings,
    source_path: str = "",
) -> Tuple[TextBuffer, Optional[TriggerWindow]]:
    """Type text one character at a time, feeding each keystroke to on_trigger."""
    buffer = TextBuffer("")
    cursor = EditorPosition(0, 0)
    window = None
    for char in text:
        cursor = buffer.insert(char, cursor)
        window = suggest.on_trigger(cursor, buffer, settings, source_path)
    return buffer, window


def render_title(fragment: DisplayFragment) -> Text:
    title = Text(fragment.title)
    for index in fragment.highlights:
        title.stylize("bold yellow", index, index + 1)
    if fragment.has_alias:
        title.append(" ↪", style="dim")
    return title


def print_candidates(suggest: MentionSuggest, limit: int) -> None:
    ranked = suggest.get_candidates()
    if not ranked:
        console.print("[yellow]No matching notes[/yellow]")
        return

    table = Table(title=f"Suggestions for {suggest.context.symbol}{suggest.context.query}")
    table.add_column("#", justify="right")
    table.add_column("Title", style="cyan", no_wrap=False)
    table.add_column("Path", style="magenta")
    table.add_column("Score", justify="right")

    for number, item in enumerate(ranked[:limit], 1):
        fragment = suggest.render_candidate(item)
        score = "" if item.score is None else f"{item.score:.1f}"
        table.add_row(str(number), render_title(fragment), fragment.path, score)

    console.print(table)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def cli(verbose: bool):
    """mentionlink - @ mention linking for markdown vaults."""
    setup_logging(verbose)


@cli.command()
@click.argument("vault", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("text")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--limit", "-l", default=10, help="Max results")
def suggest(vault: Path, text: str, config_path: Optional[Path], limit: int):
    """Show link suggestions for TEXT typed into an empty note."""
    settings = load_settings(config_path)
    engine = MentionSuggest(FolderVault(vault), settings, notifier=ConsoleNotifier())

    _, window = simulate_typing(engine, text, settings)
    if window is None:
        console.print("[yellow]No open mention at the end of the text[/yellow]")
        return

    print_candidates(engine, limit)


@cli.command()
@click.argument("vault", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("text")
@click.option("--pick", "-p", default=1, help="1-based suggestion number to insert")
@click.option("--source", "-s", default="", help="Vault path of the note being edited")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def link(vault: Path, text: str, pick: int, source: str, config_path: Optional[Path]):
    """Type TEXT, insert suggestion number PICK and print the note text."""
    settings = load_settings(config_path)
    engine = MentionSuggest(FolderVault(vault), settings, notifier=ConsoleNotifier())

    buffer, window = simulate_typing(engine, text, settings, source)
    if window is None:
        console.print("[yellow]No open mention at the end of the text[/yellow]")
        sys.exit(1)

    ranked = engine.get_candidates()
    if not 1 <= pick <= len(ranked):
        console.print(f"[red]No suggestion number {pick}[/red] ({len(ranked)} available)")
        sys.exit(1)

    try:
        asyncio.run(engine.commit(ranked[pick - 1]))
    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    click.echo(buffer.text)


@cli.command()
@click.argument("vault", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--fix", is_flag=True, help="Write the corrected settings back to --config")
def check(vault: Path, config_path: Optional[Path], fix: bool):
    """Validate configured folders and templates against VAULT."""
    settings = load_settings(config_path)
    checked = validate_settings(settings, FolderVault(vault), ConsoleNotifier())

    if checked == settings:
        console.print("[green]✓[/green] Settings are valid")
        return

    if fix and config_path is not None:
        checked.save(config_path)
        console.print(f"[green]✓[/green] Wrote corrected settings to {config_path}")
    else:
        console.print("Run with [cyan]--fix --config PATH[/cyan] to save the corrections")


@cli.command(name="import-settings")
@click.argument("data_json", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
def import_settings(data_json: Path, output: Path):
    """Convert the Obsidian plugin's data.json into a YAML config."""
    with open(data_json, "r", encoding="utf-8") as f:
        data = json.load(f)

    settings = LinkingSettings.from_plugin_data(data)
    settings.save(output)
    console.print(f"[green]✓[/green] Imported {len(settings.scope_rules)} folder rules into {output}")


if __name__ == "__main__":
    cli()
