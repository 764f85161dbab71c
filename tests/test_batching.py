"""Tests for batch planning."""

import pytest

from subweave.core.models import Cue, SubtitleFormat
from subweave.pipeline.batching import CUE_OVERHEAD_CHARS, BatchLimits, approx_tokens, plan


def _make_cues(texts: list[str]) -> list[Cue]:
    return [
        Cue(
            id=str(i + 1),
            start_ms=i * 1000,
            end_ms=i * 1000 + 900,
            text_original=text,
            text_skeleton=text,
            format=SubtitleFormat.SRT,
        )
        for i, text in enumerate(texts)
    ]


def _flatten(batches) -> list[Cue]:
    return [cue for batch in batches for cue in batch.cues]


class TestPlan:
    @pytest.mark.parametrize(
        "limits",
        [
            BatchLimits(),
            BatchLimits(max_cues=1),
            BatchLimits(max_cues=3, max_chars=None),
            BatchLimits(max_cues=None, max_chars=60),
            BatchLimits(batch_count=4),
        ],
        ids=["default", "one-per-batch", "cues-only", "chars-only", "batch-count"],
    )
    def test_concatenation_equals_input(self, limits):
        cues = _make_cues([f"line number {i}" for i in range(10)])
        batches = plan(cues, limits)
        assert _flatten(batches) == cues
        assert [b.index for b in batches] == list(range(len(batches)))

    def test_max_cues(self):
        batches = plan(_make_cues(["a", "b", "c", "d", "e"]), BatchLimits(max_cues=2))
        assert [len(b) for b in batches] == [2, 2, 1]
        assert batches[1].ids == ["3", "4"]

    def test_max_chars(self):
        cost = len("xxxx") + 1 + CUE_OVERHEAD_CHARS
        limits = BatchLimits(max_cues=None, max_chars=cost * 2)
        batches = plan(_make_cues(["xxxx"] * 5), limits)
        assert [len(b) for b in batches] == [2, 2, 1]

    def test_oversized_cue_gets_own_batch(self):
        cues = _make_cues(["short", "x" * 500, "short"])
        batches = plan(cues, BatchLimits(max_cues=None, max_chars=100))
        assert [b.ids for b in batches] == [["1"], ["2"], ["3"]]

    def test_max_tokens_uses_measure(self):
        words = lambda text: len(text.split())  # noqa: E731
        cues = _make_cues(["one two", "three four five", "six", "seven eight"])
        limits = BatchLimits(max_cues=None, max_chars=None, max_tokens=5)
        batches = plan(cues, limits, measure=words)
        assert [b.ids for b in batches] == [["1", "2"], ["3", "4"]]

    def test_batch_count_splits_evenly(self):
        batches = plan(_make_cues(list("abcde")), BatchLimits(batch_count=2))
        assert [len(b) for b in batches] == [3, 2]

    def test_batch_count_then_budgets(self):
        limits = BatchLimits(max_cues=2, batch_count=2)
        batches = plan(_make_cues(list("abcde")), limits)
        assert [b.ids for b in batches] == [["1", "2"], ["3"], ["4", "5"]]

    def test_batch_count_larger_than_cues(self):
        batches = plan(_make_cues(["a", "b"]), BatchLimits(batch_count=5))
        assert [len(b) for b in batches] == [1, 1]

    def test_empty(self):
        assert plan([], BatchLimits()) == []


class TestLimits:
    @pytest.mark.parametrize("field", ["max_cues", "max_chars", "max_tokens", "batch_count"])
    def test_rejects_values_below_one(self, field):
        with pytest.raises(ValueError):
            BatchLimits(**{field: 0})

    def test_approx_tokens(self):
        assert approx_tokens("") == 1
        assert approx_tokens("abcdefgh") == 2
        assert approx_tokens("abcdefghi") == 3
