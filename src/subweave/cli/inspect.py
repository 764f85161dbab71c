"""subweave inspect command — show how a subtitle file is parsed."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table
from rich.text import Text

from subweave.cli.utils import read_subtitle
from subweave.core.errors import ParseError
from subweave.core.models import SubtitleFormat
from subweave.subtitles.parser import format_from_path, parse, parse_auto
from subweave.subtitles.placeholders import display_text
from subweave.subtitles.reassembler import self_check
from subweave.utils.console import console


def _timestamp(ms: int) -> str:
    hours, rest = divmod(ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    seconds, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"


def inspect(
    subtitle_file: Annotated[
        Path,
        typer.Argument(help="Path to a subtitle file (SRT, VTT, ASS, SSA)."),
    ],
    fmt: Annotated[
        Optional[SubtitleFormat],
        typer.Option("--format", "-f", help="Declared format (default: from extension/content)."),
    ] = None,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", help="Maximum number of cues to show (0 for all)."),
    ] = 50,
) -> None:
    """Show cues, placeholders and the round-trip check for a subtitle file."""
    if not subtitle_file.is_file():
        console.print(f"[red]File not found:[/red] {subtitle_file}")
        raise typer.Exit(1)

    text = read_subtitle(subtitle_file)
    fmt = fmt or format_from_path(subtitle_file)
    try:
        parsed = parse(text, fmt) if fmt else parse_auto(text)
    except ParseError as e:
        console.print(f"[red]Parse error:[/red] {e}")
        if e.snippet:
            console.print(Text(e.snippet, style="dim"))
        raise typer.Exit(1)

    table = Table(title=f"{subtitle_file.name} ({parsed.format}, {len(parsed.cues)} cues)")
    table.add_column("Id", style="bold cyan", no_wrap=True)
    table.add_column("Start", style="dim")
    table.add_column("End", style="dim")
    table.add_column("Speaker")
    table.add_column("Skeleton", max_width=60)
    table.add_column("Tokens", justify="right")

    shown = parsed.cues if limit <= 0 else parsed.cues[:limit]
    for cue in shown:
        table.add_row(
            cue.id,
            _timestamp(cue.start_ms),
            _timestamp(cue.end_ms),
            Text(cue.speaker or ""),
            Text(display_text(cue.text_skeleton)),
            str(len(cue.placeholders)),
        )
    console.print(table)
    if len(shown) < len(parsed.cues):
        console.print(f"[dim]... {len(parsed.cues) - len(shown)} more cues[/dim]")

    if self_check(parsed, text):
        console.print("[green]Round-trip check passed.[/green]")
    else:
        console.print("[red]Round-trip check failed.[/red]")
        raise typer.Exit(1)
