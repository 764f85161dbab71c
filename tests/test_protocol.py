"""Tests for the translation protocol client with mocked LLM responses."""

import json
from unittest.mock import MagicMock, patch

import pytest

from subweave.core.config import LLMConfig, RetryConfig
from subweave.core.errors import ProviderError
from subweave.core.models import TranslationCue, TranslationRequest, ValidationErrorType
from subweave.llm.protocol import TranslationClient, parse_response
from subweave.llm.prompts import extract_json_object
from subweave.pipeline.validator import validate

REQUEST = TranslationRequest(
    source_lang="French",
    target_lang="English",
    cues=(TranslationCue(id="1", text="Bonjour"), TranslationCue(id="2", text="Merci")),
)

GOOD_REPLY = json.dumps(
    {"cues": [{"id": "1", "translatedText": "Hello"}, {"id": "2", "translatedText": "Thanks"}]}
)


def _mock_complete(messages, config, **kwargs):
    """Mock LLM that translates the request payload by upper-casing it."""
    payload = json.loads(extract_json_object(messages[-1]["content"]))
    return json.dumps(
        {"cues": [{"id": c["id"], "translatedText": c["text"].upper()} for c in payload["cues"]]}
    )


class TestParseResponse:
    def test_valid(self):
        response = parse_response(GOOD_REPLY)
        assert response.texts_by_id() == {"1": "Hello", "2": "Thanks"}
        assert not any(c.timing_echoed for c in response.cues)

    @pytest.mark.parametrize("key", ["translatedText", "translated_text", "text"])
    def test_text_aliases(self, key):
        response = parse_response(json.dumps({"cues": [{"id": "1", key: "Hello"}]}))
        assert response.cues[0].translated_text == "Hello"

    def test_numeric_id_coerced(self):
        response = parse_response('{"cues": [{"id": 12, "translatedText": "Hi"}]}')
        assert response.cues[0].id == "12"

    def test_extra_fields_ignored(self):
        reply = '{"model": "x", "cues": [{"id": "1", "translatedText": "Hi", "note": "ok"}]}'
        response = parse_response(reply)
        assert response.cues[0].translated_text == "Hi"
        assert not response.cues[0].timing_echoed

    @pytest.mark.parametrize(
        "key",
        [
            "start",
            "endMs",
            "timestamp",
            "startTime",
            "endTime",
            "start_time",
            "end_time",
            "startTimeMs",
            "end-ms",
            "timing",
        ],
    )
    def test_timing_fields_flagged(self, key):
        reply = json.dumps({"cues": [{"id": "1", "translatedText": "Hi", key: "00:00:01"}]})
        assert parse_response(reply).cues[0].timing_echoed

    def test_top_level_timing_flags_every_cue(self):
        reply = json.dumps(
            {
                "startTime": "00:00:01",
                "cues": [{"id": "1", "translatedText": "Hi"}, {"id": "2", "translatedText": "Yo"}],
            }
        )
        assert all(c.timing_echoed for c in parse_response(reply).cues)

    def test_echoed_start_time_fails_validation(self):
        request = TranslationRequest(
            source_lang="French",
            target_lang="English",
            cues=(TranslationCue(id="1", text="Salut"),),
        )
        reply = '{"cues":[{"id":"1","translatedText":"Hello","startTime":"00:00:01,000"}]}'
        result = validate(request, parse_response(reply))
        assert not result.valid
        assert result.of_type(ValidationErrorType.INVALID_TIMING)

    def test_fenced_json(self):
        reply = f"Here you go:\n```json\n{GOOD_REPLY}\n```"
        assert len(parse_response(reply).cues) == 2

    @pytest.mark.parametrize(
        "reply",
        [
            "",
            "   ",
            "I cannot translate this.",
            '{"cues": [{"id": "1", "translatedText": "Hi"}',
            '{"cues": [{"id": "1", "translatedText": "Hi"},]}',
            '{"translations": []}',
            '{"cues": [{"id": "1"}]}',
            '{"cues": "nope"}',
        ],
        ids=[
            "empty",
            "blank",
            "prose",
            "truncated",
            "trailing-comma",
            "no-cues",
            "no-text",
            "wrong-type",
        ],
    )
    def test_malformed_raises_retryable(self, reply):
        with pytest.raises(ProviderError) as exc_info:
            parse_response(reply)
        assert exc_info.value.retryable


class TestTranslationClient:
    @patch("subweave.llm.protocol.complete", side_effect=_mock_complete)
    def test_send(self, mock_complete):
        client = TranslationClient(LLMConfig())
        response = client.send(REQUEST)
        assert response.texts_by_id() == {"1": "BONJOUR", "2": "MERCI"}
        assert mock_complete.call_args.kwargs["response_format"] == {"type": "json_object"}

    @patch("subweave.llm.protocol.complete", side_effect=_mock_complete)
    def test_json_mode_off(self, mock_complete):
        TranslationClient(LLMConfig(json_mode=False)).send(REQUEST)
        assert "response_format" not in mock_complete.call_args.kwargs

    @patch("subweave.llm.protocol.complete", side_effect=_mock_complete)
    def test_request_payload_has_no_timing(self, mock_complete):
        TranslationClient(LLMConfig()).send(REQUEST)
        messages = mock_complete.call_args.args[0]
        payload = json.loads(extract_json_object(messages[-1]["content"]))
        assert payload["sourceLang"] == "French"
        assert payload["rules"]["placeholders"] == "MUST_PRESERVE_EXACTLY"
        assert payload["cues"] == [{"id": "1", "text": "Bonjour"}, {"id": "2", "text": "Merci"}]

    @patch("subweave.llm.protocol.complete")
    def test_retries_retryable_errors(self, mock_complete):
        mock_complete.side_effect = [ProviderError("timeout"), "not json", GOOD_REPLY]
        sleep = MagicMock()
        client = TranslationClient(LLMConfig(), RetryConfig(max_attempts=3), sleep=sleep)

        response = client.send(REQUEST)

        assert response.texts_by_id()["1"] == "Hello"
        assert mock_complete.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]

    @patch("subweave.llm.protocol.complete")
    def test_non_retryable_raised_immediately(self, mock_complete):
        mock_complete.side_effect = ProviderError(
            "quota exceeded", retryable=False, status_code=429
        )
        sleep = MagicMock()
        client = TranslationClient(LLMConfig(), sleep=sleep)

        with pytest.raises(ProviderError, match="quota"):
            client.send(REQUEST)
        assert mock_complete.call_count == 1
        sleep.assert_not_called()

    @patch("subweave.llm.protocol.complete", side_effect=ProviderError("503"))
    def test_gives_up_after_max_attempts(self, mock_complete):
        sleep = MagicMock()
        client = TranslationClient(LLMConfig(), RetryConfig(max_attempts=4), sleep=sleep)

        with pytest.raises(ProviderError):
            client.send(REQUEST)
        assert mock_complete.call_count == 4
        assert sleep.call_count == 3

    @patch("subweave.llm.protocol.complete")
    def test_honours_retry_after_and_max_delay(self, mock_complete):
        mock_complete.side_effect = [
            ProviderError("rate limited", status_code=429, retry_after=5.0),
            ProviderError("rate limited", status_code=429, retry_after=500.0),
            GOOD_REPLY,
        ]
        sleep = MagicMock()
        retry = RetryConfig(max_attempts=3, initial_delay=1.0, max_delay=30.0)
        TranslationClient(LLMConfig(), retry, sleep=sleep).send(REQUEST)
        assert [c.args[0] for c in sleep.call_args_list] == [5.0, 30.0]
