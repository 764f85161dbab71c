"""Format detection and parsing into the unified cue representation.

Every format shares the same ``Cue``/``ParsedSubtitle`` shape; format quirks
live in the per-format decoders (``srt``, ``vtt``, ``ssa``).
"""

from __future__ import annotations

import re
from pathlib import Path

from subweave.core.errors import ParseError
from subweave.core.models import ParsedSubtitle, SubtitleFormat
from subweave.subtitles import srt, ssa, vtt
from subweave.subtitles.lines import strip_bom

_SRT_START_RE = re.compile(r"^\d+[ \t]*(?:\r\n|\r|\n)[ \t]*\d+:\d{2}:\d{2}[,.]\d{1,3}[ \t]*-->")


def detect_format(text: str) -> SubtitleFormat | None:
    """Guess the subtitle format from content.

    Returns None when nothing matches.
    """
    _, body = strip_bom(text)
    stripped = body.lstrip()

    if stripped.startswith("WEBVTT"):
        return SubtitleFormat.VTT
    if "[V4+ Styles]" in body:
        return SubtitleFormat.ASS
    if stripped.startswith("[Script Info]") or "[V4 Styles]" in body:
        return SubtitleFormat.SSA
    if _SRT_START_RE.match(stripped):
        return SubtitleFormat.SRT
    return None


def format_from_path(path: Path) -> SubtitleFormat | None:
    """Map a file extension to a format, or None if unknown."""
    try:
        return SubtitleFormat(Path(path).suffix.lower().lstrip("."))
    except ValueError:
        return None


def parse(text: str, fmt: SubtitleFormat | str) -> ParsedSubtitle:
    """Parse ``text`` as the declared format.

    Raises:
        ParseError: If the text does not match the format's grammar.
    """
    fmt = SubtitleFormat(fmt)
    if fmt is SubtitleFormat.SRT:
        return srt.decode(text)
    if fmt is SubtitleFormat.VTT:
        return vtt.decode(text)
    return ssa.decode(text, fmt)


def parse_auto(text: str) -> ParsedSubtitle:
    """Detect the format of ``text`` and parse it."""
    fmt = detect_format(text)
    if fmt is None:
        raise ParseError("unrecognised subtitle format")
    return parse(text, fmt)
