"""Translation language definitions.

Codes are what users pass on the command line; names are what the provider
sees in the request, since models follow "French" more reliably than "fr".
"""

from __future__ import annotations

AUTO = "auto"

# fmt: off
LANGUAGES: dict[str, str] = {
    "en": "English",     "fr": "French",        "es": "Spanish",
    "de": "German",      "it": "Italian",       "pt": "Portuguese",
    "ru": "Russian",     "ja": "Japanese",      "ko": "Korean",
    "zh": "Chinese (Simplified)",               "zh-TW": "Chinese (Traditional)",
    "ar": "Arabic",      "hi": "Hindi",         "nl": "Dutch",
    "pl": "Polish",      "tr": "Turkish",       "vi": "Vietnamese",
    "th": "Thai",        "id": "Indonesian",    "sv": "Swedish",
    "da": "Danish",      "no": "Norwegian",     "fi": "Finnish",
    "cs": "Czech",       "ro": "Romanian",      "hu": "Hungarian",
    "el": "Greek",       "he": "Hebrew",        "uk": "Ukrainian",
}
# fmt: on


def is_valid_language(code: str, allow_auto: bool = False) -> bool:
    return code in LANGUAGES or (allow_auto and code == AUTO)


def language_name(code: str) -> str:
    """Get the name sent to the provider, or the code itself if unknown."""
    if code == AUTO:
        return "auto-detect"
    return LANGUAGES.get(code, code)


def validate_language(code: str, allow_auto: bool = False) -> str:
    """Validate a language code and return it, raising ValueError if invalid."""
    if not is_valid_language(code, allow_auto=allow_auto):
        raise ValueError(
            f"Unsupported language: '{code}'. "
            f"Run 'subweave languages' to see all {len(LANGUAGES)} supported languages."
        )
    return code
