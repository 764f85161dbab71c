"""Translation job orchestration.

One ``TranslationJob`` per source file moves through
``pending -> translating -> completed | error | cancelled``. Batches of a
file are sent strictly in order; several files may translate at once through
``JobQueue``. Nothing here touches the filesystem: completed translations
are published to a ``VersionStore`` and the host decides what to write.
"""

from __future__ import annotations

import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable, Protocol

from subweave.core.config import TranslationSettings
from subweave.core.errors import ParseError, ProviderError
from subweave.core.events import EventCallback, JobEvent
from subweave.core.languages import language_name
from subweave.core.models import (
    SubtitleFormat,
    TranslationRequest,
    TranslationResponse,
    ValidationError,
)
from subweave.core.versions import TranslationVersion, VersionStore
from subweave.pipeline.batching import Batch, plan
from subweave.pipeline.validator import validate
from subweave.subtitles.parser import parse
from subweave.subtitles.placeholders import has_translatable_text
from subweave.subtitles.reassembler import reassemble
from subweave.utils.console import console


class JobStatus(StrEnum):
    PENDING = "pending"
    TRANSLATING = "translating"
    COMPLETED = "completed"
    ERROR = "error"
    CANCELLED = "cancelled"


class Translator(Protocol):
    def send(self, request: TranslationRequest) -> TranslationResponse: ...


def _job_id() -> str:
    return f"job_{uuid.uuid4().hex[:12]}"


@dataclass
class TranslationJob:
    """Mutable state of one file's translation run.

    Attributes:
        file_id: Key of the file in the version store.
        content: Raw source text.
        format: Declared subtitle format of ``content``.
        progress: Translated cues over translatable cues, 0 to 100.
        errors: Diagnostics of the failure that ended the job, if any.
        version: The version committed on success.
    """

    file_id: str
    content: str
    format: SubtitleFormat
    id: str = field(default_factory=_job_id)
    status: JobStatus = JobStatus.PENDING
    progress: float = 0.0
    current_batch: int = 0
    total_batches: int = 0
    errors: list[ValidationError] = field(default_factory=list)
    error_message: str | None = None
    version: TranslationVersion | None = None
    _cancel: threading.Event = field(default_factory=threading.Event, repr=False)

    def cancel(self) -> None:
        """Request cancellation; honoured before the next batch is sent."""
        self._cancel.set()

    @property
    def cancel_requested(self) -> bool:
        return self._cancel.is_set()

    @property
    def finished(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.ERROR, JobStatus.CANCELLED)


class JobRunner:
    """Runs translation jobs against a provider client.

    Args:
        client: Anything with ``send(TranslationRequest) -> TranslationResponse``.
        settings: Languages, model, batch limits and validation retries.
        store: Where completed translations are published.
        measure: Token counter for token-budgeted batching.
        on_event: Optional callback for streaming progress events.
    """

    def __init__(
        self,
        client: Translator,
        settings: TranslationSettings,
        store: VersionStore | None = None,
        measure: Callable[[str], int] | None = None,
        on_event: EventCallback | None = None,
    ) -> None:
        self.client = client
        self.settings = settings
        self.store = store if store is not None else VersionStore()
        self.measure = measure
        self.on_event = on_event
        self._active: set[str] = set()
        self._lock = threading.Lock()

    def _emit(self, job: TranslationJob, message: str, data: dict | None = None) -> None:
        if self.on_event:
            self.on_event(
                JobEvent(
                    job_id=job.id,
                    status=str(job.status),
                    progress=job.progress,
                    current_batch=job.current_batch,
                    total_batches=job.total_batches,
                    message=message,
                    data=data,
                )
            )

    def _fail(
        self, job: TranslationJob, message: str, errors: list[ValidationError] | None = None
    ) -> TranslationJob:
        job.status = JobStatus.ERROR
        job.error_message = message
        job.errors = list(errors or [])
        console.print(f"[red]Translation failed ({job.file_id}):[/red] {message}")
        self._emit(job, message, {"errors": [e.to_dict() for e in job.errors]})
        return job

    def _cancelled(self, job: TranslationJob) -> TranslationJob:
        job.status = JobStatus.CANCELLED
        console.print(f"[yellow]Translation cancelled:[/yellow] {job.file_id}")
        self._emit(job, "Cancelled")
        return job

    def _translate_batch(
        self, batch: Batch, job: TranslationJob
    ) -> tuple[dict[str, str] | None, list[ValidationError]]:
        """Send one batch until it validates or retries run out.

        Returns (texts by id, []) on success, (None, errors) when every
        attempt was rejected and (None, []) when cancelled mid-flight.
        """
        request = TranslationRequest.from_cues(
            batch.cues,
            source_lang=language_name(self.settings.source_language),
            target_lang=language_name(self.settings.target_language),
        )
        attempts = self.settings.validation_retries + 1
        errors: list[ValidationError] = []
        for attempt in range(1, attempts + 1):
            response = self.client.send(request)
            if job.cancel_requested:
                return None, []
            result = validate(request, response)
            if result.valid:
                return response.texts_by_id(), []
            errors = list(result.errors)
            if attempt < attempts:
                console.print(
                    f"[yellow]Batch {batch.index + 1} rejected "
                    f"({len(errors)} error(s)), retry {attempt}/{attempts - 1}[/yellow]"
                )
                self._emit(
                    job,
                    f"Batch {batch.index + 1} rejected, retrying",
                    {"errors": [e.to_dict() for e in errors]},
                )
        return None, errors

    def run(self, job: TranslationJob) -> TranslationJob:
        """Run ``job`` to a terminal state and return it.

        Parse errors, provider failures and exhausted validation retries end
        the job in ``error``; no partial translation is ever committed.

        Raises:
            RuntimeError: If another job for the same file is already running.
        """
        with self._lock:
            if job.file_id in self._active:
                raise RuntimeError(f"A translation for {job.file_id} is already running")
            self._active.add(job.file_id)
        try:
            return self._run(job)
        except Exception as e:
            if not job.finished:
                self._fail(job, f"Unexpected error: {e}")
            raise
        finally:
            with self._lock:
                self._active.discard(job.file_id)

    def _run(self, job: TranslationJob) -> TranslationJob:
        if job.cancel_requested:
            return self._cancelled(job)

        job.status = JobStatus.TRANSLATING
        job.progress = 0.0
        self._emit(job, "Parsing subtitles...")

        try:
            parsed = parse(job.content, job.format)
        except ParseError as e:
            return self._fail(job, str(e), [e.to_validation_error()])

        if not parsed.cues:
            return self._fail(job, "No cues found in file")

        cues = [c for c in parsed.cues if has_translatable_text(c.text_skeleton)]
        batches = plan(cues, self.settings.limits, measure=self.measure)
        job.total_batches = len(batches)
        total = len(cues)
        self._emit(job, f"{total} cues in {len(batches)} batches")

        translated: dict[str, str] = {}
        for batch in batches:
            if job.cancel_requested:
                return self._cancelled(job)

            job.current_batch = batch.index + 1
            self._emit(job, f"Translating batch {job.current_batch}/{job.total_batches}...")

            try:
                texts, errors = self._translate_batch(batch, job)
            except ProviderError as e:
                return self._fail(job, f"Provider error in batch {job.current_batch}: {e}")

            if texts is None and not errors:
                return self._cancelled(job)
            if texts is None:
                return self._fail(
                    job,
                    f"Batch {job.current_batch} failed validation "
                    f"after {self.settings.validation_retries + 1} attempts",
                    errors,
                )

            translated.update(texts)
            job.progress = len(translated) / total * 100
            self._emit(job, f"Batch {job.current_batch}/{job.total_batches} done")

        if job.cancel_requested:
            return self._cancelled(job)

        content = reassemble(parsed, translated)
        job.version = self.store.commit(job.file_id, self.settings, content)
        job.progress = 100.0
        job.status = JobStatus.COMPLETED
        self._emit(job, f"Saved {job.version.name}", {"version_id": job.version.id})
        return job


class JobQueue:
    """Runs several files' jobs with a bounded worker pool.

    Each job runs on a single worker, so batches of one file are never sent
    in parallel.
    """

    def __init__(self, runner: JobRunner, max_workers: int = 2) -> None:
        self.runner = runner
        self.max_workers = max_workers
        self._jobs: list[TranslationJob] = []

    def run_all(self, jobs: list[TranslationJob]) -> list[TranslationJob]:
        """Run every job and return them in submission order."""
        from subweave.llm.client import unload_ollama_model

        self._jobs = list(jobs)
        try:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [pool.submit(self.runner.run, job) for job in self._jobs]
                try:
                    for future in futures:
                        future.result()
                except BaseException:
                    # Ctrl-C or a crashed job: stop the others at their next batch.
                    self.cancel_all()
                    raise
        finally:
            unload_ollama_model(self.runner.settings.model)
        return self._jobs

    def cancel_all(self) -> None:
        for job in self._jobs:
            job.cancel()
