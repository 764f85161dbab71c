"""WebVTT (web-native timestamp block) decoding."""

from __future__ import annotations

import re

from subweave.core.errors import ParseError
from subweave.core.models import Cue, ParsedSubtitle, SubtitleFormat
from subweave.subtitles.lines import (
    IdAllocator,
    Line,
    Partition,
    join_payload,
    split_lines,
    strip_bom,
    timestamp_to_ms,
)
from subweave.subtitles.placeholders import protect_text

_TS = r"(?:(\d{2,}):)?(\d{2}):(\d{2})\.(\d{3})"
TIMING_RE = re.compile(rf"^\s*{_TS}[ \t]+-->[ \t]+{_TS}(?:[ \t]+(?P<settings>.*))?$")
SIGNATURE_RE = re.compile(r"^WEBVTT(?:[ \t].*)?$")
_VOICE_RE = re.compile(r"^<v(?:\.[^\s>]+)?[ \t]+([^>]+)>")

_OPAQUE_BLOCKS = ("NOTE", "STYLE", "REGION")


def _is_opaque_block(first: str) -> bool:
    word = first.split(None, 1)[0] if first.strip() else ""
    return word in _OPAQUE_BLOCKS


def _blocks(lines: list[Line], start: int):
    """Yield (blank_line | None, block_lines) pairs from ``start``."""
    i = start
    while i < len(lines):
        if lines[i].blank:
            yield lines[i], []
            i += 1
            continue
        j = i
        while j < len(lines) and not lines[j].blank:
            j += 1
        yield None, lines[i:j]
        i = j


def decode(text: str) -> ParsedSubtitle:
    """Parse WebVTT text.

    NOTE, STYLE and REGION blocks are carried opaquely in the prefix of the
    cue that follows them (or in the footer).
    """
    bom, body = strip_bom(text)
    lines = split_lines(body)
    if not lines or not SIGNATURE_RE.match(lines[0].content):
        snippet = lines[0].content if lines else ""
        raise ParseError("missing WEBVTT signature", line=1, snippet=snippet)

    partition = Partition(bom)
    # Header block: signature plus any metadata lines up to the first blank.
    i = 0
    while i < len(lines) and not lines[i].blank:
        if "-->" in lines[i].content:
            raise ParseError("cue timing inside the header", line=lines[i].number)
        partition.keep(lines[i].raw)
        i += 1

    ids = IdAllocator()
    cues: list[Cue] = []

    for blank, block in _blocks(lines, i):
        if blank is not None:
            partition.keep(blank.raw)
            continue

        first = block[0]
        if "-->" in first.content:
            identifier, timing_at = None, 0
        elif len(block) > 1 and "-->" in block[1].content:
            identifier, timing_at = first.content.strip(), 1
        elif _is_opaque_block(first.content):
            partition.keep("".join(line.raw for line in block))
            continue
        else:
            raise ParseError("unrecognised block", line=first.number, snippet=first.content)

        timing = block[timing_at]
        match = TIMING_RE.match(timing.content)
        if not match:
            raise ParseError("malformed timing line", line=timing.number, snippet=timing.content)

        payload, suffix = join_payload(block[timing_at + 1 :])
        skeleton, placeholders = protect_text(payload, SubtitleFormat.VTT)
        voice = _VOICE_RE.match(payload)
        position = len(cues)

        cues.append(
            Cue(
                id=ids.allocate(identifier or f"VTT_{position}", first.number),
                index=position,
                start_ms=timestamp_to_ms(*match.group(1, 2, 3, 4)),
                end_ms=timestamp_to_ms(*match.group(5, 6, 7, 8)),
                raw_prefix=partition.flush() + "".join(line.raw for line in block[: timing_at + 1]),
                raw_suffix=suffix,
                text_original=payload,
                text_skeleton=skeleton,
                placeholders=placeholders,
                speaker=voice.group(1).strip() if voice else None,
                format=SubtitleFormat.VTT,
            )
        )

    header, footer = partition.close()
    return ParsedSubtitle(format=SubtitleFormat.VTT, header=header, cues=cues, footer=footer)
