"""SubStation Alpha / Advanced SubStation Alpha (styled event) decoding."""

from __future__ import annotations

import re

from subweave.core.errors import ParseError
from subweave.core.models import Cue, ParsedSubtitle, SubtitleFormat
from subweave.subtitles.lines import Partition, split_lines, strip_bom, timestamp_to_ms
from subweave.subtitles.placeholders import protect_text

TIMESTAMP_RE = re.compile(r"^(\d+):(\d{2}):(\d{2})\.(\d{1,3})$")
_SECTION_RE = re.compile(r"^\s*\[([^\]]+)\]\s*$")
_DIALOGUE_RE = re.compile(r"^\s*Dialogue:[ \t]*")
_FORMAT_RE = re.compile(r"^\s*Format:[ \t]*", re.IGNORECASE)

_STYLE_SECTIONS = ("v4+ styles", "v4 styles")
_SPEAKER_FIELDS = ("name", "actor")


def _parse_time(value: str, line) -> int:
    match = TIMESTAMP_RE.match(value.strip())
    if not match:
        raise ParseError(f"malformed timestamp {value!r}", line=line.number, snippet=line.content)
    return timestamp_to_ms(*match.groups())


def _field(parts: list[str], fields: list[str], *names: str) -> str | None:
    for name in names:
        if name in fields:
            value = parts[fields.index(name)].strip()
            return value or None
    return None


def decode(text: str, fmt: SubtitleFormat = SubtitleFormat.ASS) -> ParsedSubtitle:
    """Parse ASS/SSA text.

    Only ``Dialogue:`` lines of the ``[Events]`` section become cues; the
    text field (always last) is the payload and everything before it on the
    line is the cue prefix.
    """
    bom, body = strip_bom(text)
    lines = split_lines(body)
    partition = Partition(bom)
    cues: list[Cue] = []

    section: str | None = None
    seen_events = False
    fields: list[str] | None = None
    events_format: str | None = None
    styles: list[str] = []

    for line in lines:
        header = _SECTION_RE.match(line.content)
        if header:
            section = header.group(1).strip().lower()
            seen_events = seen_events or section == "events"
        if section in _STYLE_SECTIONS:
            styles.append(line.raw)

        if header or section != "events":
            partition.keep(line.raw)
            continue

        format_match = _FORMAT_RE.match(line.content)
        if format_match:
            fields = [f.strip().lower() for f in line.content[format_match.end() :].split(",")]
            if fields[-1] != "text":
                raise ParseError(
                    "events Format must end with the Text field",
                    line=line.number,
                    snippet=line.content,
                )
            events_format = line.content
            partition.keep(line.raw)
            continue

        dialogue = _DIALOGUE_RE.match(line.content)
        if not dialogue:
            partition.keep(line.raw)
            continue
        if fields is None:
            raise ParseError("Dialogue line before the events Format line", line=line.number)

        parts = line.content[dialogue.end() :].split(",", len(fields) - 1)
        if len(parts) < len(fields):
            raise ParseError(
                f"expected {len(fields)} dialogue fields, found {len(parts)}",
                line=line.number,
                snippet=line.content,
            )
        payload = parts[-1]
        skeleton, placeholders = protect_text(payload, fmt)
        start = _field(parts, fields, "start") or ""
        end = _field(parts, fields, "end") or ""

        cues.append(
            Cue(
                id=f"{fmt.value.upper()}_{len(cues)}_L{line.number}",
                index=len(cues),
                start_ms=_parse_time(start, line),
                end_ms=_parse_time(end, line),
                raw_prefix=partition.flush() + line.content[: len(line.content) - len(payload)],
                raw_suffix=line.ending,
                text_original=payload,
                text_skeleton=skeleton,
                placeholders=placeholders,
                speaker=_field(parts, fields, *_SPEAKER_FIELDS),
                style=_field(parts, fields, "style"),
                format=fmt,
            )
        )

    if not seen_events:
        raise ParseError("missing [Events] section")
    if fields is None:
        raise ParseError("missing Format line in [Events] section")

    header_text, footer = partition.close()
    return ParsedSubtitle(
        format=fmt,
        header=header_text,
        cues=cues,
        footer=footer,
        styles_section="".join(styles) or None,
        events_format=events_format,
    )
