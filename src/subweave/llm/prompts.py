"""Prompt templates and response parsing for JSON subtitle translation."""

from __future__ import annotations

import json

from subweave.core.models import TranslationRequest
from subweave.subtitles.placeholders import make_token

_EXAMPLE_TAG = make_token("TAG", 0)
_EXAMPLE_BR = make_token("BR", 1)

TRANSLATION_SYSTEM = f"""\
You are an expert subtitle translator. You will receive a JSON object containing \
subtitle cues to translate.

CRITICAL RULES:
1. Return ONLY a valid JSON object with the translated cues
2. NEVER add, remove, or reorder cues - translate exactly what you receive, keeping every "id"
3. PRESERVE ALL PLACEHOLDERS EXACTLY. Placeholders look like {_EXAMPLE_TAG} or {_EXAMPLE_BR} \
(a private-use character, a name, an underscore, a number, a private-use character). \
They stand for formatting and line breaks; copy each one unchanged, exactly once
4. Do NOT merge or split cues, and do NOT insert line breaks of your own
5. Do NOT add timing, explanations, markdown, or any text outside the JSON

TRANSLATION QUALITY:
- Prioritize natural, idiomatic expressions over literal translation
- Adapt dialogue to sound like authentic conversation
- Preserve emotional tone and character speaking styles
- Respect subtitle reading constraints (~40 chars/line, ~21 chars/second)

OUTPUT FORMAT:
{{
  "cues": [
    {{ "id": "original_id", "translatedText": "translated text with placeholders preserved" }}
  ]
}}
"""

TRANSLATION_USER = """\
Translate the following {count} subtitle cues from {source_lang} to {target_lang}. \
Return exactly {count} cues.

{payload}
"""


def build_messages(request: TranslationRequest) -> list[dict[str, str]]:
    """Build the chat messages for one translation request."""
    payload = json.dumps(request.to_payload(), ensure_ascii=False, indent=2)
    return [
        {"role": "system", "content": TRANSLATION_SYSTEM},
        {
            "role": "user",
            "content": TRANSLATION_USER.format(
                count=len(request.cues),
                source_lang=request.source_lang,
                target_lang=request.target_lang,
                payload=payload,
            ),
        },
    ]


def extract_json_object(text: str) -> str | None:
    """Cut the outermost JSON object out of a reply.

    Models sometimes wrap the JSON in prose or markdown fences.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def preview(text: str, limit: int = 300) -> str:
    return text if len(text) <= limit else text[:limit] + "..."
