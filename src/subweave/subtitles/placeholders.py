"""Placeholder protection for non-translatable cue content.

Inline markup, line breaks and control sequences are swapped for opaque
tokens before text leaves the process. Tokens are delimited by private-use
code points; any private-use character already present in the source is
itself protected, so the delimiters can only ever appear inside tokens.
"""

from __future__ import annotations

import re

from subweave.core.models import Cue, Placeholder, SubtitleFormat

TOKEN_OPEN = "\ue000"
TOKEN_CLOSE = "\ue001"

TOKEN_RE = re.compile(f"{TOKEN_OPEN}([A-Z]+)_(\\d+){TOKEN_CLOSE}")
DELIMITER_RE = re.compile(f"[{TOKEN_OPEN}{TOKEN_CLOSE}]")

_PRIVATE_USE = r"[\ue000-\uf8ff]"

# Group names double as token kinds. Alternatives are tried left to right.
_HTML_LIKE = re.compile(
    "|".join(
        [
            r"(?P<TAG><[/]?[A-Za-z0-9][^<>\r\n]*>|\{\\[^{}\r\n]*\})",
            r"(?P<ENT>&(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);)",
            r"(?P<BR>\r\n|\r|\n)",
            f"(?P<RAW>{_PRIVATE_USE})",
        ]
    )
)

_SSA_OVERRIDES = re.compile(
    "|".join(
        [
            r"(?P<TAG>\{[^{}]*\})",
            r"(?P<BR>\\[Nn])",
            r"(?P<SP>\\h)",
            f"(?P<RAW>{_PRIVATE_USE})",
        ]
    )
)

_PATTERNS = {
    SubtitleFormat.SRT: _HTML_LIKE,
    SubtitleFormat.VTT: _HTML_LIKE,
    SubtitleFormat.ASS: _SSA_OVERRIDES,
    SubtitleFormat.SSA: _SSA_OVERRIDES,
}


def make_token(kind: str, index: int) -> str:
    return f"{TOKEN_OPEN}{kind}_{index}{TOKEN_CLOSE}"


def protect_text(text: str, fmt: SubtitleFormat) -> tuple[str, tuple[Placeholder, ...]]:
    """Replace protected spans of ``text`` with tokens, left to right."""
    placeholders: list[Placeholder] = []

    def _swap(match: re.Match) -> str:
        token = make_token(match.lastgroup, len(placeholders))
        placeholders.append(Placeholder(index=len(placeholders), token=token, original=match[0]))
        return token

    skeleton = _PATTERNS[fmt].sub(_swap, text)
    return skeleton, tuple(placeholders)


def protect(cue: Cue) -> tuple[str, tuple[Placeholder, ...]]:
    """Compute the skeleton text and placeholder list for a cue."""
    return protect_text(cue.text_original, cue.format)


def restore(text: str, placeholders: tuple[Placeholder, ...] | list[Placeholder]) -> str:
    """Substitute tokens back to their original content.

    Matching is by token identity, so a provider that moved tokens around
    still gets each one restored to its own original span.
    """
    originals = {p.token: p.original for p in placeholders}
    return TOKEN_RE.sub(lambda m: originals.get(m[0], m[0]), text)


def find_tokens(text: str) -> list[str]:
    """List the well-formed tokens in ``text`` in textual order."""
    return [m[0] for m in TOKEN_RE.finditer(text)]


def has_stray_delimiters(text: str) -> bool:
    """True if token delimiters appear outside a well-formed token."""
    return bool(DELIMITER_RE.search(TOKEN_RE.sub("", text)))


def strip_tokens(text: str) -> str:
    return TOKEN_RE.sub("", text)


def has_translatable_text(text: str) -> bool:
    """True if the skeleton holds anything besides tokens and whitespace."""
    return bool(strip_tokens(text).strip())


def display_token(token: str) -> str:
    """Render a token with visible brackets for messages and tables."""
    return token.replace(TOKEN_OPEN, "⟦").replace(TOKEN_CLOSE, "⟧")


def display_text(text: str) -> str:
    return TOKEN_RE.sub(lambda m: display_token(m[0]), text)
