"""Shared data models for SubWeave."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class SubtitleFormat(StrEnum):
    """Supported subtitle container formats."""

    SRT = "srt"  # indexed-timestamp blocks
    VTT = "vtt"  # web-native timestamp blocks
    ASS = "ass"  # styled events, V4+ styles
    SSA = "ssa"  # styled events, V4 styles

    @property
    def extension(self) -> str:
        return f".{self.value}"


@dataclass(frozen=True)
class Placeholder:
    """A reversible marker standing in for protected cue content.

    Attributes:
        index: Position within the cue's placeholder sequence.
        token: Opaque marker written into the skeleton text.
        original: Exact substring the token replaces.
    """

    index: int
    token: str
    original: str


@dataclass(frozen=True)
class Cue:
    """One subtitle entry in the format-agnostic representation.

    ``raw_prefix`` and ``raw_suffix`` hold the format material around the
    payload (index and timing lines, dialogue fields, separators) and are
    replayed verbatim on reassembly.
    """

    id: str
    start_ms: int
    end_ms: int
    text_original: str
    format: SubtitleFormat
    index: int | None = None
    raw_prefix: str = ""
    raw_suffix: str = ""
    text_skeleton: str = ""
    placeholders: tuple[Placeholder, ...] = ()
    speaker: str | None = None
    style: str | None = None


@dataclass
class ParsedSubtitle:
    """A subtitle file split into header, cues and footer.

    ``header + Σ(raw_prefix + text_original + raw_suffix) + footer`` is the
    original file. ``styles_section`` and ``events_format`` are copies of
    structural material already contained in ``header`` (ASS/SSA only).
    """

    format: SubtitleFormat
    header: str
    cues: list[Cue]
    footer: str = ""
    styles_section: str | None = None
    events_format: str | None = None

    def cue_by_id(self, cue_id: str) -> Cue | None:
        for cue in self.cues:
            if cue.id == cue_id:
                return cue
        return None


TRANSLATION_RULES: dict[str, object] = {
    "placeholders": "MUST_PRESERVE_EXACTLY",
    "noReordering": True,
    "noMerging": True,
    "noSplitting": True,
}


@dataclass(frozen=True)
class TranslationCue:
    """Text-only view of a cue, the only thing a provider ever sees."""

    id: str
    text: str
    speaker: str | None = None
    style: str | None = None

    def to_payload(self) -> dict[str, str]:
        payload = {"id": self.id}
        if self.speaker:
            payload["speaker"] = self.speaker
        if self.style:
            payload["style"] = self.style
        payload["text"] = self.text
        return payload


@dataclass(frozen=True)
class TranslationRequest:
    """One batch of skeleton cues plus the immutable translation rules."""

    source_lang: str
    target_lang: str
    cues: tuple[TranslationCue, ...]
    rules: dict[str, object] = field(default_factory=lambda: dict(TRANSLATION_RULES))

    @classmethod
    def from_cues(cls, cues: list[Cue] | tuple[Cue, ...], source_lang: str, target_lang: str):
        return cls(
            source_lang=source_lang,
            target_lang=target_lang,
            cues=tuple(
                TranslationCue(id=c.id, text=c.text_skeleton, speaker=c.speaker, style=c.style)
                for c in cues
            ),
        )

    @property
    def ids(self) -> list[str]:
        return [c.id for c in self.cues]

    def to_payload(self) -> dict[str, object]:
        return {
            "sourceLang": self.source_lang,
            "targetLang": self.target_lang,
            "rules": dict(self.rules),
            "cues": [c.to_payload() for c in self.cues],
        }


@dataclass(frozen=True)
class TranslatedCue:
    """A provider's answer for one cue.

    ``timing_echoed`` is set when the provider sent timing fields back,
    which it is never asked to do.
    """

    id: str
    translated_text: str
    timing_echoed: bool = False


@dataclass(frozen=True)
class TranslationResponse:
    cues: tuple[TranslatedCue, ...]

    def texts_by_id(self) -> dict[str, str]:
        return {c.id: c.translated_text for c in self.cues}


class ValidationErrorType(StrEnum):
    MISSING_ID = "missing_id"
    EXTRA_ID = "extra_id"
    PLACEHOLDER_MISMATCH = "placeholder_mismatch"
    PLACEHOLDER_ORDER = "placeholder_order"
    INVALID_TIMING = "invalid_timing"
    PARSE_ERROR = "parse_error"


@dataclass(frozen=True)
class ValidationError:
    """One structural problem found in a provider response or input file."""

    cue_id: str
    type: ValidationErrorType
    message: str
    expected: str | None = None
    received: str | None = None

    def to_dict(self) -> dict[str, str]:
        data = {"cueId": self.cue_id, "type": str(self.type), "message": self.message}
        if self.expected is not None:
            data["expected"] = self.expected
        if self.received is not None:
            data["received"] = self.received
        return data


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple[ValidationError, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors

    def of_type(self, kind: ValidationErrorType) -> list[ValidationError]:
        return [e for e in self.errors if e.type == kind]
