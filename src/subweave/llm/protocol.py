"""Translation protocol client: ship a request, get a response back.

The client does no structural checking of the content; it only turns the
provider's free-form reply into a ``TranslationResponse`` or raises
``ProviderError``. Retries here are transport-level only.
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as SchemaError

from subweave.core.config import LLMConfig, RetryConfig
from subweave.core.errors import ProviderError
from subweave.core.models import TranslatedCue, TranslationRequest, TranslationResponse
from subweave.llm.client import complete
from subweave.llm.prompts import build_messages, extract_json_object, preview
from subweave.utils.console import console

_TIMING_KEYS = {"time", "times", "timing", "timings", "timestamp", "timestamps", "duration"}


def _is_timing_key(key: str) -> bool:
    # startTime, start_time, end-ms and friends all normalise to start*/end*
    norm = key.replace("_", "").replace("-", "").lower()
    return norm in _TIMING_KEYS or norm.startswith(("start", "end"))


class _CuePayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    translated_text: str = Field(
        validation_alias=AliasChoices("translatedText", "translated_text", "text")
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Models like to turn "12" into 12.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def timing_echoed(self) -> bool:
        extra = self.model_extra or {}
        return any(_is_timing_key(key) for key in extra)


class _ResponsePayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    cues: list[_CuePayload]

    @property
    def timing_echoed(self) -> bool:
        extra = self.model_extra or {}
        return any(_is_timing_key(key) for key in extra)


def parse_response(text: str) -> TranslationResponse:
    """Parse a provider reply into a ``TranslationResponse``.

    Unknown fields are ignored. Anything that is not a JSON object with a
    ``cues`` array of ``{id, translatedText}`` raises a retryable
    ``ProviderError``.
    """
    if not text or not text.strip():
        raise ProviderError("Provider returned an empty response")

    raw = extract_json_object(text)
    if raw is None:
        raise ProviderError(f"No JSON object in provider response: {preview(text)}")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ProviderError(f"Malformed JSON in provider response ({e}): {preview(raw)}") from e

    try:
        payload = _ResponsePayload.model_validate(data)
    except SchemaError as e:
        raise ProviderError(f"Unexpected response shape: {e.error_count()} error(s); {e}") from e

    return TranslationResponse(
        cues=tuple(
            TranslatedCue(
                id=c.id,
                translated_text=c.translated_text,
                timing_echoed=c.timing_echoed or payload.timing_echoed,
            )
            for c in payload.cues
        )
    )


class TranslationClient:
    """Sends translation requests to an LLM provider through LiteLLM.

    Args:
        llm: Provider/model configuration.
        retry: Transport retry policy (attempts and exponential backoff).
        sleep: Injected for tests.
    """

    def __init__(
        self,
        llm: LLMConfig,
        retry: RetryConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.llm = llm
        self.retry = retry or RetryConfig()
        self._sleep = sleep

    def _call(self, request: TranslationRequest) -> TranslationResponse:
        kwargs: dict[str, object] = {}
        if self.llm.json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        text = complete(build_messages(request), self.llm, **kwargs)
        return parse_response(text)

    def send(self, request: TranslationRequest) -> TranslationResponse:
        """Send one request, retrying retryable failures with backoff.

        Raises:
            ProviderError: When the error is not retryable or attempts run out.
        """
        delay = self.retry.initial_delay
        attempts = self.retry.max_attempts
        for attempt in range(1, attempts):
            try:
                return self._call(request)
            except ProviderError as e:
                if not e.retryable:
                    raise
                wait = min(max(delay, e.retry_after or 0.0), self.retry.max_delay)
                console.print(
                    f"[yellow]Provider call failed (attempt {attempt}/{attempts}), "
                    f"retrying in {wait:.1f}s:[/yellow] {e}"
                )
                self._sleep(wait)
                delay *= self.retry.backoff_factor
        return self._call(request)
