"""Unit tests for the requests-based OpenAI client."""

from __future__ import annotations

import json

import pytest
import requests

from neonbuilder.llm.openai_client import OpenAIChatClient, OpenAIProviderError
from neonbuilder.models.datatypes import Usage


class _MockRequestsResponse:
    """Minimal requests response mock used by client tests."""

    def __init__(self, *, payload: bytes, status_code: int = 200) -> None:
        """Initialize response with payload bytes and status code."""

        self.content = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        """Raise HTTP error when status code indicates failure."""

        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


def _json_bytes(payload: object) -> bytes:
    return json.dumps(payload).encode("utf-8")


def test_chat_completion_returns_text_and_usage(monkeypatch: pytest.MonkeyPatch) -> None:
    """Completion text and token usage should be normalized from the payload."""

    captured: dict[str, object] = {}

    def _fake_post(url: str, **kwargs: object) -> _MockRequestsResponse:
        captured["url"] = url
        captured.update(kwargs)
        return _MockRequestsResponse(
            payload=_json_bytes(
                {
                    "choices": [{"message": {"content": "  Generated copy  "}}],
                    "usage": {"prompt_tokens": 12, "completion_tokens": 30, "total_tokens": 42},
                }
            )
        )

    monkeypatch.setattr("neonbuilder.llm.openai_client.requests.post", _fake_post)
    client = OpenAIChatClient(api_key="sk-test-key")

    completion = client.chat_completion(
        model="gpt-4",
        system_prompt="system",
        user_prompt="user",
        temperature=0.7,
        max_tokens=4000,
    )

    assert completion.text == "  Generated copy  "
    assert completion.usage == Usage(12, 30, 42)
    assert captured["url"] == "https://api.openai.com/v1/chat/completions"
    payload = captured["json"]
    assert isinstance(payload, dict)
    assert payload["max_tokens"] == 4000
    assert payload["messages"][1] == {"role": "user", "content": "user"}


def test_chat_completion_allows_empty_content(monkeypatch: pytest.MonkeyPatch) -> None:
    """Empty content is returned as empty text so the generator can retry."""

    monkeypatch.setattr(
        "neonbuilder.llm.openai_client.requests.post",
        lambda *_args, **_kwargs: _MockRequestsResponse(
            payload=_json_bytes({"choices": [{"message": {"content": None}}]})
        ),
    )

    completion = OpenAIChatClient(api_key="sk-test-key").chat_completion(
        model="gpt-4", system_prompt="s", user_prompt="u", temperature=0.1, max_tokens=10
    )

    assert completion.text == ""
    assert completion.usage == Usage()


@pytest.mark.parametrize(
    ("status_code", "body", "failure_kind"),
    [
        (401, {"error": {"message": "Incorrect API key sk-abcdefghijklmnop"}}, "invalid_api_key"),
        (429, {"error": {"message": "Rate limit reached for requests"}}, "rate_limited"),
        (429, {"error": {"message": "You exceeded your current quota", "code": "insufficient_quota"}}, "rate_limited"),
        (403, {"error": {"message": "You exceeded your current quota", "code": "insufficient_quota"}}, "insufficient_quota"),
        (404, {"error": {"message": "The model `gpt-9` does not exist", "code": "model_not_found"}}, "invalid_model"),
        (500, {"error": {"message": "Internal error"}}, "http_error"),
    ],
)
def test_http_failures_are_classified(
    monkeypatch: pytest.MonkeyPatch, status_code: int, body: dict, failure_kind: str
) -> None:
    """HTTP errors should map to deterministic failure kinds with redacted detail."""

    monkeypatch.setattr(
        "neonbuilder.llm.openai_client.requests.post",
        lambda *_args, **_kwargs: _MockRequestsResponse(
            payload=_json_bytes(body), status_code=status_code
        ),
    )

    with pytest.raises(OpenAIProviderError) as exc_info:
        OpenAIChatClient(api_key="sk-test-key").chat_completion(
            model="gpt-4", system_prompt="s", user_prompt="u", temperature=0.1, max_tokens=10
        )

    assert exc_info.value.failure_kind == failure_kind
    assert exc_info.value.status_code == status_code
    assert "sk-abcdefghijklmnop" not in str(exc_info.value)


def test_transport_timeout_is_classified(monkeypatch: pytest.MonkeyPatch) -> None:
    """Request timeouts should surface as `timeout` failures."""

    def _raise_timeout(*_args: object, **_kwargs: object) -> None:
        raise requests.Timeout("read timed out")

    monkeypatch.setattr("neonbuilder.llm.openai_client.requests.post", _raise_timeout)

    with pytest.raises(OpenAIProviderError) as exc_info:
        OpenAIChatClient(api_key="sk-test-key").chat_completion(
            model="gpt-4", system_prompt="s", user_prompt="u", temperature=0.1, max_tokens=10
        )

    assert exc_info.value.failure_kind == "timeout"


def test_missing_api_key_fails_before_request(monkeypatch: pytest.MonkeyPatch) -> None:
    """A blank key should be rejected without touching the network."""

    def _unexpected_post(*_args: object, **_kwargs: object) -> None:
        raise AssertionError("network should not be used")

    monkeypatch.setattr("neonbuilder.llm.openai_client.requests.post", _unexpected_post)

    with pytest.raises(OpenAIProviderError) as exc_info:
        OpenAIChatClient(api_key="  ").chat_completion(
            model="gpt-4", system_prompt="s", user_prompt="u", temperature=0.1, max_tokens=10
        )

    assert exc_info.value.failure_kind == "invalid_api_key"


def test_list_models_returns_sorted_gpt_ids(monkeypatch: pytest.MonkeyPatch) -> None:
    """Model listing should keep only gpt models in sorted order."""

    monkeypatch.setattr(
        "neonbuilder.llm.openai_client.requests.get",
        lambda *_args, **_kwargs: _MockRequestsResponse(
            payload=_json_bytes(
                {
                    "data": [
                        {"id": "gpt-4o"},
                        {"id": "whisper-1"},
                        {"id": "gpt-3.5-turbo"},
                        {"id": "gpt-4"},
                    ]
                }
            )
        ),
    )

    assert OpenAIChatClient(api_key="sk-test-key").list_models() == [
        "gpt-3.5-turbo",
        "gpt-4",
        "gpt-4o",
    ]


def test_validate_api_key_reports_rejected_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """A 401 from model listing should report an invalid key instead of raising."""

    monkeypatch.setattr(
        "neonbuilder.llm.openai_client.requests.get",
        lambda *_args, **_kwargs: _MockRequestsResponse(payload=b"", status_code=401),
    )

    assert OpenAIChatClient(api_key="sk-test-key").validate_api_key() is False


def test_message_text_keeps_surrounding_whitespace() -> None:
    payload = {"choices": [{"message": {"content": "  Hello\n\n"}}]}

    assert OpenAIChatClient._extract_message_text(payload) == "  Hello\n\n"


def test_every_429_is_classified_as_rate_limited() -> None:
    classify = OpenAIChatClient._classify_http_failure

    assert classify(429, "You exceeded your current quota", "insufficient_quota") == "rate_limited"
    assert classify(429, "Rate limit reached", None) == "rate_limited"
    assert classify(403, "You exceeded your current quota", None) == "insufficient_quota"
