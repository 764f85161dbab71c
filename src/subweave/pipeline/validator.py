"""Structural validation of provider responses against their requests.

All problems in a batch are collected rather than raised on the first one,
so a failed batch can be diagnosed in full. Any error rejects the batch.
"""

from __future__ import annotations

import re
from collections import Counter

from subweave.core.models import (
    TranslationRequest,
    TranslationResponse,
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)
from subweave.subtitles.placeholders import (
    display_text,
    display_token,
    find_tokens,
    has_stray_delimiters,
    has_translatable_text,
)

_LINE_BREAK_RE = re.compile(r"[\r\n\u2028\u2029]")


def _describe(tokens: list[str]) -> str:
    return ", ".join(display_token(t) for t in tokens)


def _check_ids(request: TranslationRequest, response: TranslationResponse, errors: list) -> dict:
    expected = set(request.ids)
    matched: dict = {}
    for cue in response.cues:
        if cue.id not in expected:
            errors.append(
                ValidationError(
                    cue_id=cue.id,
                    type=ValidationErrorType.EXTRA_ID,
                    message=f'Cue "{cue.id}" was not in the request',
                )
            )
        elif cue.id in matched:
            errors.append(
                ValidationError(
                    cue_id=cue.id,
                    type=ValidationErrorType.EXTRA_ID,
                    message=f'Cue "{cue.id}" appears more than once in the response',
                )
            )
        else:
            matched[cue.id] = cue

    for cue_id in request.ids:
        if cue_id not in matched:
            errors.append(
                ValidationError(
                    cue_id=cue_id,
                    type=ValidationErrorType.MISSING_ID,
                    message=f'Cue "{cue_id}" is missing from the response',
                )
            )
    return matched


def _check_placeholders(source_text: str, cue, errors: list) -> None:
    want = find_tokens(source_text)
    got = find_tokens(cue.translated_text)
    if Counter(want) == Counter(got):
        return

    missing = list((Counter(want) - Counter(got)).elements())
    unexpected = list((Counter(got) - Counter(want)).elements())
    details = []
    if missing:
        details.append(f"missing {_describe(missing)}")
    if unexpected:
        details.append(f"unexpected {_describe(unexpected)}")
    errors.append(
        ValidationError(
            cue_id=cue.id,
            type=ValidationErrorType.PLACEHOLDER_MISMATCH,
            message=(
                f"Placeholder mismatch: expected {len(want)}, got {len(got)} "
                f"({'; '.join(details)})"
            ),
            expected=_describe(want),
            received=_describe(got),
        )
    )


def _check_structure(source_text: str, cue, errors: list) -> None:
    problems = []
    if has_stray_delimiters(cue.translated_text):
        problems.append("contains a broken placeholder token")
    if _LINE_BREAK_RE.search(cue.translated_text):
        problems.append("contains a raw line break that would split the cue")
    if has_translatable_text(source_text) and not has_translatable_text(cue.translated_text):
        problems.append("lost all of its text, which suggests it was merged into a neighbour")

    for problem in problems:
        errors.append(
            ValidationError(
                cue_id=cue.id,
                type=ValidationErrorType.PLACEHOLDER_ORDER,
                message=f'Cue "{cue.id}" {problem}',
                received=display_text(cue.translated_text),
            )
        )


def validate(request: TranslationRequest, response: TranslationResponse) -> ValidationResult:
    """Check a response against its request.

    Checks, in order: id-set equality, per-cue placeholder multisets (order
    is free, identity and count are not), cue structure (broken tokens, raw
    line breaks, emptied cues), and echoed timing.
    """
    errors: list[ValidationError] = []
    matched = _check_ids(request, response, errors)
    sources = {c.id: c.text for c in request.cues}

    for cue_id, cue in matched.items():
        _check_placeholders(sources[cue_id], cue, errors)
    for cue_id, cue in matched.items():
        _check_structure(sources[cue_id], cue, errors)

    for cue in response.cues:
        if cue.timing_echoed:
            errors.append(
                ValidationError(
                    cue_id=cue.id,
                    type=ValidationErrorType.INVALID_TIMING,
                    message=f'Cue "{cue.id}" echoed timing fields; timing is never sent out',
                )
            )

    return ValidationResult(errors=tuple(errors))
