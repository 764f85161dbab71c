"""SubWeave CLI entry point."""

from typing import Annotated, Optional

import typer
from dotenv import load_dotenv

from subweave import __version__
from subweave.cli.inspect import inspect
from subweave.cli.languages import languages
from subweave.cli.translate import translate

app = typer.Typer(
    name="subweave",
    help="SubWeave — Lossless subtitle translation with LLMs.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"subweave {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """SubWeave — Lossless subtitle translation with LLMs."""
    # Load .env file for API keys (OPENAI_API_KEY, ANTHROPIC_API_KEY, etc.)
    # Does not override existing env vars; shell exports take precedence
    load_dotenv(override=False)


app.command("translate")(translate)
app.command("inspect")(inspect)
app.command("languages")(languages)
