"""subweave translate command — translate subtitle files through an LLM."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table
from rich.text import Text

from subweave.cli.utils import expand_inputs, read_subtitle, write_subtitle
from subweave.core.config import TranslationSettings, load_config
from subweave.core.events import JobEvent
from subweave.core.models import SubtitleFormat
from subweave.utils.console import console


def translate(
    inputs: Annotated[
        list[str],
        typer.Argument(help="Subtitle files, glob patterns, or .txt lists of paths."),
    ],
    to: Annotated[
        Optional[str],
        typer.Option("--to", "-t", help="Target language code (run 'subweave languages' to list)."),
    ] = None,
    source: Annotated[
        Optional[str],
        typer.Option("--from", "-s", help="Source language code, or 'auto'."),
    ] = None,
    model: Annotated[
        Optional[str],
        typer.Option("--model", "-m", help="LiteLLM model string (e.g. ollama_chat/qwen3:8b)."),
    ] = None,
    fmt: Annotated[
        Optional[SubtitleFormat],
        typer.Option("--format", "-f", help="Declared input format (default: detect)."),
    ] = None,
    jobs: Annotated[
        Optional[int],
        typer.Option("--jobs", "-j", min=1, help="Files translated concurrently."),
    ] = None,
    batch_cues: Annotated[
        Optional[int],
        typer.Option("--batch-cues", min=1, help="Maximum cues per request."),
    ] = None,
    batch_chars: Annotated[
        Optional[int],
        typer.Option("--batch-chars", min=1, help="Maximum characters per request."),
    ] = None,
    batch_count: Annotated[
        Optional[int],
        typer.Option("--batch-count", min=1, help="Split each file into this many requests."),
    ] = None,
    output_dir: Annotated[
        Optional[Path],
        typer.Option("--output-dir", "-o", help="Directory for translated files."),
    ] = None,
    no_txt: Annotated[
        bool,
        typer.Option("--no-txt", help="Skip generating plain text file."),
    ] = False,
) -> None:
    """Translate subtitle files, keeping timing and formatting byte-for-byte.

    Each successful translation is written next to its source (or into
    --output-dir) as <name>_<version>.<ext>; existing files are never
    overwritten.
    """
    from subweave.core.jobs import JobQueue, JobRunner, TranslationJob
    from subweave.core.languages import validate_language
    from subweave.core.versions import VersionStore
    from subweave.llm.client import token_counter
    from subweave.llm.protocol import TranslationClient
    from subweave.subtitles.converter import save_plaintext
    from subweave.subtitles.parser import detect_format, format_from_path
    from subweave.utils.paths import versioned_output_path

    overrides: dict[str, object] = {
        "translation.source_language": source,
        "translation.target_language": to,
        "translation.max_cues_per_batch": batch_cues,
        "translation.max_chars_per_batch": batch_chars,
        "translation.batch_count": batch_count,
        "translation.max_concurrent_files": jobs,
        "llm.model": model,
    }
    config = load_config(**overrides)

    try:
        validate_language(config.translation.source_language, allow_auto=True)
        validate_language(config.translation.target_language)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    expanded = expand_inputs(inputs)
    if not expanded:
        console.print("[red]No inputs resolved. Check your paths or patterns.[/red]")
        raise typer.Exit(1)

    # input -> (status, detail)
    results: dict[str, tuple[str, str]] = {}
    pending: list[tuple[Path, TranslationJob]] = []
    seen: set[Path] = set()
    for inp in expanded:
        path = Path(inp)
        if path.resolve() in seen:
            continue
        seen.add(path.resolve())
        if not path.is_file():
            results[str(path)] = ("failed", "file not found")
            continue
        content = read_subtitle(path)
        file_fmt = fmt or format_from_path(path) or detect_format(content)
        if file_fmt is None:
            results[str(path)] = ("failed", "unknown subtitle format")
            continue
        job = TranslationJob(file_id=str(path.resolve()), content=content, format=file_fmt)
        pending.append((path, job))

    settings = TranslationSettings.from_config(config)
    measure = token_counter(config.llm.model) if settings.limits.max_tokens else None

    with Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("[dim]{task.fields[status]}"),
        console=console,
    ) as progress:
        tasks = {
            job.id: progress.add_task(path.name, total=100, status="pending")
            for path, job in pending
        }

        def _on_event(event: JobEvent) -> None:
            progress.update(
                tasks[event.job_id],
                completed=event.progress,
                status=f"{event.status} {event.current_batch}/{event.total_batches}",
            )

        runner = JobRunner(
            TranslationClient(config.llm, config.retry),
            settings,
            store=VersionStore(),
            measure=measure,
            on_event=_on_event,
        )
        queue = JobQueue(runner, max_workers=config.translation.max_concurrent_files)
        try:
            queue.run_all([job for _, job in pending])
        except KeyboardInterrupt:
            console.print("[yellow]Interrupted, cancelled remaining batches.[/yellow]")
            raise typer.Exit(130)

    used: set[str] = set()
    for path, job in pending:
        if job.version is None:
            results[str(path)] = (str(job.status), job.error_message or "")
            for error in job.errors[:10]:
                console.print(Text(f"  {path.name} [{error.cue_id}] {error.type}: {error.message}"))
            continue
        out_path = versioned_output_path(path, job.version.name, output_dir, used)
        write_subtitle(out_path, job.version.content)
        console.print(f"[green]Saved:[/green] {out_path}")
        if not no_txt:
            txt_path = versioned_output_path(path, job.version.name, output_dir, used, ext=".txt")
            save_plaintext(job.version.content, job.format, txt_path)
            console.print(f"[green]Saved:[/green] {txt_path}")
        results[str(path)] = ("success", str(out_path))

    # Summary table
    console.print()
    table = Table(title=f"Translation Results ({len(expanded)} files)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Input", max_width=50, no_wrap=True)
    table.add_column("Status")
    table.add_column("Output", max_width=60, no_wrap=True)

    succeeded = 0
    for i, (inp, (status, detail)) in enumerate(results.items(), 1):
        style = "green" if status == "success" else "red"
        table.add_row(str(i), inp, f"[{style}]{status}[/{style}]", Text(detail))
        if status == "success":
            succeeded += 1

    console.print(table)
    console.print(f"\n[bold]{succeeded}/{len(results)} succeeded[/bold]")
    if succeeded < len(results):
        raise typer.Exit(1)
