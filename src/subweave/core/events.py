"""Job event system for streaming progress to external consumers.

Provides a lightweight callback mechanism that translation jobs emit events
through. Consumers (CLI progress bars, GUI panels) register a callback to
receive updates without touching orchestration logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable


@dataclass
class JobEvent:
    """A progress event emitted while a translation job runs.

    Attributes:
        job_id: Id of the job that emitted the event.
        status: Job status at emission time (pending, translating, ...).
        progress: Completed cues over total cues, 0 to 100.
        current_batch: 1-based number of the batch being processed.
        total_batches: Number of planned batches.
        message: Human-readable status message.
        data: Optional payload (e.g. version id, error list).
    """

    job_id: str
    status: str
    progress: float
    current_batch: int
    total_batches: int
    message: str
    data: dict | None = field(default=None)


EventCallback = Callable[[JobEvent], None]
