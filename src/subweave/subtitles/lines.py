"""Line splitting and partition helpers shared by the format parsers.

Parsers never normalise line endings: every line keeps its own terminator
so that the parsed pieces concatenate back to the exact input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from subweave.core.errors import ParseError

BOM = "\ufeff"

_LINE_RE = re.compile(r"([^\r\n]*)(\r\n|\r|\n|\Z)")


@dataclass(frozen=True)
class Line:
    number: int  # 1-based
    content: str
    ending: str

    @property
    def raw(self) -> str:
        return self.content + self.ending

    @property
    def blank(self) -> bool:
        return not self.content.strip()


def split_lines(text: str) -> list[Line]:
    """Split text into lines, keeping CRLF, CR and LF terminators as found."""
    lines: list[Line] = []
    pos = 0
    while pos < len(text):
        match = _LINE_RE.match(text, pos)
        content, ending = match.group(1), match.group(2)
        lines.append(Line(number=len(lines) + 1, content=content, ending=ending))
        pos = match.end()
    return lines


def strip_bom(text: str) -> tuple[str, str]:
    """Return (bom, rest) so the BOM can be kept in the header."""
    if text.startswith(BOM):
        return BOM, text[len(BOM) :]
    return "", text


def join_payload(lines: list[Line]) -> tuple[str, str]:
    """Join payload lines into (payload, suffix).

    Inner line terminators belong to the payload; the last one is the
    cue's suffix.
    """
    if not lines:
        return "", ""
    payload = "".join(line.raw for line in lines[:-1]) + lines[-1].content
    return payload, lines[-1].ending


def timestamp_to_ms(hours: str | None, minutes: str, seconds: str, fraction: str) -> int:
    """Convert timestamp parts to milliseconds.

    The fraction is read as a decimal: "5" and "50" are both 500 ms, so
    ASS centiseconds and SRT/VTT milliseconds share one rule.
    """
    ms = int(fraction.ljust(3, "0")[:3])
    return ((int(hours or 0) * 60 + int(minutes)) * 60 + int(seconds)) * 1000 + ms


class Partition:
    """Collects raw material between cues.

    Whatever is pending when the first cue is emitted becomes the header;
    later flushes are prepended to the next cue's prefix, and whatever is
    left at the end is the footer.
    """

    def __init__(self, lead: str = "") -> None:
        self._pending: list[str] = [lead] if lead else []
        self.header: str | None = None

    def keep(self, raw: str) -> None:
        self._pending.append(raw)

    def flush(self) -> str:
        text = "".join(self._pending)
        self._pending = []
        if self.header is None:
            self.header = text
            return ""
        return text

    def close(self) -> tuple[str, str]:
        rest = "".join(self._pending)
        self._pending = []
        if self.header is None:
            return rest, ""
        return self.header, rest


class IdAllocator:
    """Hands out cue ids, disambiguating collisions with the source line."""

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def allocate(self, candidate: str, line: int) -> str:
        cue_id = candidate
        if cue_id in self._seen:
            cue_id = f"{candidate}@L{line}"
        if cue_id in self._seen:
            raise ParseError(f"duplicate cue id {candidate!r}", line=line)
        self._seen.add(cue_id)
        return cue_id
