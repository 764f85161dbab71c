"""Rebuild subtitle text from parsed cues and translated skeletons."""

from __future__ import annotations

from collections.abc import Mapping

from subweave.core.models import ParsedSubtitle
from subweave.subtitles.placeholders import restore


def reassemble(parsed: ParsedSubtitle, translated_by_id: Mapping[str, str]) -> str:
    """Splice translated text back into the original container.

    Args:
        parsed: The parsed source file.
        translated_by_id: Validated translated skeleton text keyed by cue id.
            Cues without an entry keep their original payload.

    Returns:
        Text in the same format as the source. Prefixes, suffixes, header
        and footer are replayed untouched, so numbering and timing never
        change.
    """
    parts = [parsed.header]
    for cue in parsed.cues:
        translated = translated_by_id.get(cue.id)
        payload = cue.text_original if translated is None else restore(translated, cue.placeholders)
        parts.append(cue.raw_prefix)
        parts.append(payload)
        parts.append(cue.raw_suffix)
    parts.append(parsed.footer)
    return "".join(parts)


def serialize(parsed: ParsedSubtitle) -> str:
    """Serialize a parsed file without any translation applied."""
    return reassemble(parsed, {})


def self_check(parsed: ParsedSubtitle, source: str) -> bool:
    """Reassemble with each cue's own skeleton and compare to the source."""
    skeletons = {cue.id: cue.text_skeleton for cue in parsed.cues}
    return reassemble(parsed, skeletons) == source
