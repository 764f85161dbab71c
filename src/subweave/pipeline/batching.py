"""Batch planning: split cues into ordered, size-bounded provider requests."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from subweave.core.models import Cue

# Rough per-cue JSON framing cost: {"id": "...", "text": "..."},
CUE_OVERHEAD_CHARS = 24


@dataclass(frozen=True)
class BatchLimits:
    """Per-batch budgets. ``None`` disables a budget.

    Attributes:
        max_cues: Maximum number of cues per batch.
        max_chars: Maximum skeleton characters (plus framing) per batch.
        max_tokens: Maximum tokens per batch, measured with a token counter.
        batch_count: Split the file into this many near-equal batches first.
    """

    max_cues: int | None = 40
    max_chars: int | None = 6000
    max_tokens: int | None = None
    batch_count: int | None = None

    def __post_init__(self) -> None:
        for name in ("max_cues", "max_chars", "max_tokens", "batch_count"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise ValueError(f"{name} must be at least 1, got {value}")


@dataclass(frozen=True)
class Batch:
    index: int  # 0-based emission order
    cues: tuple[Cue, ...]

    @property
    def ids(self) -> list[str]:
        return [c.id for c in self.cues]

    def __len__(self) -> int:
        return len(self.cues)


def approx_tokens(text: str) -> int:
    """Cheap token estimate (~4 characters per token)."""
    return max(1, math.ceil(len(text) / 4))


def _split_even(cues: list[Cue], count: int) -> list[list[Cue]]:
    per_batch = math.ceil(len(cues) / count)
    return [cues[i : i + per_batch] for i in range(0, len(cues), per_batch)]


def plan(
    cues: Sequence[Cue],
    limits: BatchLimits = BatchLimits(),
    measure: Callable[[str], int] | None = None,
) -> list[Batch]:
    """Partition cues into contiguous batches, in file order.

    A cue is never split; a cue that alone exceeds a budget gets a batch of
    its own.

    Args:
        cues: Cues in file order.
        limits: Budgets to respect.
        measure: Token counter used when ``limits.max_tokens`` is set.
            Defaults to ``approx_tokens``.
    """
    cues = list(cues)
    if not cues:
        return []
    measure = measure or approx_tokens

    groups = [cues]
    if limits.batch_count and limits.batch_count > 1:
        groups = _split_even(cues, limits.batch_count)

    planned: list[list[Cue]] = []
    for group in groups:
        current: list[Cue] = []
        chars = tokens = 0
        for cue in group:
            cue_chars = len(cue.text_skeleton) + len(cue.id) + CUE_OVERHEAD_CHARS
            cue_tokens = measure(cue.text_skeleton) if limits.max_tokens else 0
            over = (
                (limits.max_cues is not None and len(current) + 1 > limits.max_cues)
                or (limits.max_chars is not None and chars + cue_chars > limits.max_chars)
                or (limits.max_tokens is not None and tokens + cue_tokens > limits.max_tokens)
            )
            if current and over:
                planned.append(current)
                current, chars, tokens = [], 0, 0
            current.append(cue)
            chars += cue_chars
            tokens += cue_tokens
        if current:
            planned.append(current)

    return [Batch(index=i, cues=tuple(group)) for i, group in enumerate(planned)]
