"""subweave languages command — list supported languages."""

from __future__ import annotations

from rich.table import Table

from subweave.core.languages import AUTO, LANGUAGES
from subweave.utils.console import console


def languages() -> None:
    """List all languages a subtitle can be translated from or to."""
    table = Table(title=f"Supported Languages ({len(LANGUAGES)})")
    table.add_column("Code", style="bold cyan", width=6)
    table.add_column("Language", width=24)

    for code in sorted(LANGUAGES):
        table.add_row(code, LANGUAGES[code])

    console.print(table)
    console.print(f"\n[dim]Use '{AUTO}' as the source language to let the model detect it.[/dim]")
