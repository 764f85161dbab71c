"""SubRip (indexed-timestamp block) decoding."""

from __future__ import annotations

import re

from subweave.core.errors import ParseError
from subweave.core.models import Cue, ParsedSubtitle, SubtitleFormat
from subweave.subtitles.lines import (
    IdAllocator,
    Partition,
    join_payload,
    split_lines,
    strip_bom,
    timestamp_to_ms,
)
from subweave.subtitles.placeholders import protect_text

_TS = r"(\d+):(\d{2}):(\d{2})[,.](\d{1,3})"
TIMING_RE = re.compile(rf"^\s*{_TS}\s*-->\s*{_TS}(?:\s.*)?\s*$")


def decode(text: str) -> ParsedSubtitle:
    """Parse SRT text.

    Blocks are separated by blank lines: an index line, a timing line, then
    zero or more payload lines.
    """
    bom, body = strip_bom(text)
    lines = split_lines(body)
    partition = Partition(bom)
    ids = IdAllocator()
    cues: list[Cue] = []

    i = 0
    while i < len(lines):
        line = lines[i]
        if line.blank:
            partition.keep(line.raw)
            i += 1
            continue

        index_text = line.content.strip()
        if not index_text.isdigit():
            raise ParseError("expected a numeric cue index", line=line.number, snippet=line.content)
        if i + 1 >= len(lines) or lines[i + 1].blank:
            raise ParseError(
                "cue index without a timing line", line=line.number, snippet=line.content
            )

        timing = lines[i + 1]
        match = TIMING_RE.match(timing.content)
        if not match:
            raise ParseError("malformed timing line", line=timing.number, snippet=timing.content)

        j = i + 2
        while j < len(lines) and not lines[j].blank:
            j += 1
        payload, suffix = join_payload(lines[i + 2 : j])
        skeleton, placeholders = protect_text(payload, SubtitleFormat.SRT)

        cues.append(
            Cue(
                id=ids.allocate(str(int(index_text)), line.number),
                index=int(index_text),
                start_ms=timestamp_to_ms(*match.group(1, 2, 3, 4)),
                end_ms=timestamp_to_ms(*match.group(5, 6, 7, 8)),
                raw_prefix=partition.flush() + line.raw + timing.raw,
                raw_suffix=suffix,
                text_original=payload,
                text_skeleton=skeleton,
                placeholders=placeholders,
                format=SubtitleFormat.SRT,
            )
        )
        i = j

    header, footer = partition.close()
    return ParsedSubtitle(format=SubtitleFormat.SRT, header=header, cues=cues, footer=footer)
