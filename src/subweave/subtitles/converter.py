"""Plain-text export of translated subtitles.

The translated subtitle file itself is produced by the reassembler, byte for
byte. This module only derives a reading copy (one line per cue, markup
removed) from it using pysubs2.
"""

from __future__ import annotations

from pathlib import Path

import pysubs2

from subweave.core.models import SubtitleFormat


def to_plaintext(content: str, fmt: SubtitleFormat | str) -> str:
    """Render subtitle text as plain text, one cue per line.

    Override tags and HTML-like markup are stripped; ``\\N`` and line breaks
    inside a cue become spaces. Comment events are skipped.
    """
    subs = pysubs2.SSAFile.from_string(content, format_=str(SubtitleFormat(fmt)))
    lines = []
    for event in subs:
        if event.is_comment:
            continue
        text = " ".join(event.plaintext.split())
        if text:
            lines.append(text)
    return "\n".join(lines) + "\n" if lines else ""


def save_plaintext(content: str, fmt: SubtitleFormat | str, path: Path) -> Path:
    """Write the plain-text rendering of ``content`` to ``path``."""
    path.write_text(to_plaintext(content, fmt), encoding="utf-8")
    return path
