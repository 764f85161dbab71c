"""Shared test fixtures."""

from pathlib import Path

import pytest

from subweave.core.models import TranslatedCue, TranslationRequest, TranslationResponse

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def read_fixture(name: str) -> str:
    """Read a fixture exactly as stored, line endings included."""
    with open(FIXTURES_DIR / name, encoding="utf-8", newline="") as f:
        return f.read()


def echo_response(request: TranslationRequest, prefix: str = "EN ") -> TranslationResponse:
    """A well-behaved provider: prefixes every cue, keeps every token."""
    return TranslationResponse(
        cues=tuple(TranslatedCue(id=c.id, translated_text=prefix + c.text) for c in request.cues)
    )


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def sample_srt() -> str:
    return read_fixture("sample.srt")


@pytest.fixture
def sample_vtt() -> str:
    return read_fixture("sample.vtt")


@pytest.fixture
def sample_ass() -> str:
    return read_fixture("sample.ass")


@pytest.fixture
def sample_ssa() -> str:
    return read_fixture("sample.ssa")
