"""Tests for the job event system."""

from subweave.core.events import EventCallback, JobEvent


def test_job_event_creation():
    """JobEvent stores status, progress, batch counters and message."""
    event = JobEvent(
        job_id="job_1",
        status="translating",
        progress=50.0,
        current_batch=2,
        total_batches=4,
        message="Translating batch 2/4...",
    )
    assert event.status == "translating"
    assert event.progress == 50.0
    assert (event.current_batch, event.total_batches) == (2, 4)
    assert event.data is None


def test_job_event_with_data():
    """JobEvent accepts optional data payload."""
    event = JobEvent(
        job_id="job_1",
        status="completed",
        progress=100.0,
        current_batch=4,
        total_batches=4,
        message="Saved v1",
        data={"version_id": "ver_abc"},
    )
    assert event.data == {"version_id": "ver_abc"}


def test_event_callback_type():
    """EventCallback is a callable type alias accepting JobEvent."""
    collected: list[JobEvent] = []

    def handler(event: JobEvent) -> None:
        collected.append(event)

    # Type check: handler satisfies EventCallback
    cb: EventCallback = handler
    cb(JobEvent("job_1", "pending", 0.0, 0, 0, "Queued"))
    assert len(collected) == 1
    assert collected[0].status == "pending"
