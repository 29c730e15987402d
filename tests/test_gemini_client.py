import asyncio
import json

import httpx
import pytest

import config
from drill.errors import (
    ConfigurationError,
    PreconditionViolation,
    ProviderConnectionError,
    ProviderError,
    ProviderParseError,
    ProviderSchemaError,
)
from drill.gemini_client import (
    GeminiClient,
    create_provider,
    extract_json_from_response,
)
from drill.models import DifficultyTier


def gemini_body(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def batch_payload(word="Yield", count=10):
    return {
        "word": word,
        "examples": [
            {"english": f"Prices yield {i}.", "korean": f"번역 {i}", "meaning": "경제", "grammar": "현재형"}
            for i in range(count)
        ],
    }


def make_client(handler):
    return GeminiClient("test-key", http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def test_fetch_batch_sends_schema_request_and_parses():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=gemini_body(json.dumps(batch_payload())))

    batch = asyncio.run(make_client(handler).fetch_batch("Yield", DifficultyTier.UPPER_INTERMEDIATE))

    assert batch.word == "Yield"
    assert len(batch.slots) == config.BATCH_SIZE
    assert batch.slots[0].reference == "Prices yield 0."

    request = seen[0]
    assert request.headers["x-goog-api-key"] == "test-key"
    assert request.url.path.endswith(f"/models/{config.GEMINI_MODEL}:generateContent")
    body = json.loads(request.content)
    prompt = body["contents"][0]["parts"][0]["text"]
    assert '"Yield"' in prompt
    assert "Upper-Intermediate" in prompt
    assert body["generationConfig"]["responseMimeType"] == "application/json"
    assert body["generationConfig"]["responseSchema"]["required"] == ["word", "examples"]


def test_fetch_batch_accepts_fenced_json():
    text = "Here you go:\n```json\n" + json.dumps(batch_payload()) + "\n```"

    def handler(request):
        return httpx.Response(200, json=gemini_body(text))

    batch = asyncio.run(make_client(handler).fetch_batch("Yield", DifficultyTier.ADVANCED))
    assert batch.word == "Yield"


def test_short_batch_is_a_schema_error():
    def handler(request):
        return httpx.Response(200, json=gemini_body(json.dumps(batch_payload(count=9))))

    with pytest.raises(ProviderSchemaError):
        asyncio.run(make_client(handler).fetch_batch("Yield", DifficultyTier.ADVANCED))


def test_null_field_is_a_schema_error():
    payload = batch_payload()
    payload["examples"][4]["grammar"] = None

    def handler(request):
        return httpx.Response(200, json=gemini_body(json.dumps(payload)))

    with pytest.raises(ProviderSchemaError):
        asyncio.run(make_client(handler).fetch_batch("Yield", DifficultyTier.ADVANCED))


def test_unparseable_text_is_a_parse_error():
    def handler(request):
        return httpx.Response(200, json=gemini_body("Sorry, I can't help with that."))

    with pytest.raises(ProviderParseError):
        asyncio.run(make_client(handler).fetch_batch("Yield", DifficultyTier.ADVANCED))


def test_missing_candidates_is_a_parse_error():
    def handler(request):
        return httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})

    with pytest.raises(ProviderParseError):
        asyncio.run(make_client(handler).fetch_batch("Yield", DifficultyTier.ADVANCED))


def test_non_json_body_is_a_parse_error():
    def handler(request):
        return httpx.Response(200, text="<html>gateway</html>")

    with pytest.raises(ProviderParseError):
        asyncio.run(make_client(handler).fetch_batch("Yield", DifficultyTier.ADVANCED))


def test_http_error_status_is_a_connection_error():
    def handler(request):
        return httpx.Response(503, json={"error": {"message": "overloaded"}})

    with pytest.raises(ProviderConnectionError):
        asyncio.run(make_client(handler).fetch_batch("Yield", DifficultyTier.ADVANCED))


def test_unreachable_service_is_a_connection_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ProviderConnectionError):
        asyncio.run(make_client(handler).fetch_feedback("I go.", "I goes."))


def test_failures_share_the_provider_error_base():
    def handler(request):
        return httpx.Response(500)

    with pytest.raises(ProviderError):
        asyncio.run(make_client(handler).fetch_batch("Yield", DifficultyTier.ADVANCED))


def test_fetch_feedback_returns_critique():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(200, json=gemini_body("  주어와 동사가 일치하지 않아요.\n"))

    feedback = asyncio.run(make_client(handler).fetch_feedback("She goes home.", "She go home."))

    assert feedback == "주어와 동사가 일치하지 않아요."
    prompt = seen[0]["contents"][0]["parts"][0]["text"]
    assert '"She goes home."' in prompt
    assert '"She go home."' in prompt
    assert "generationConfig" not in seen[0]


def test_empty_critique_uses_fallback_text():
    def handler(request):
        return httpx.Response(200, json=gemini_body(""))

    feedback = asyncio.run(make_client(handler).fetch_feedback("She goes home.", "She go"))
    assert feedback == config.FEEDBACK_FALLBACK_TEXT


def test_feedback_requires_learner_text():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=gemini_body("x"))

    with pytest.raises(PreconditionViolation):
        asyncio.run(make_client(handler).fetch_feedback("She goes home.", ""))
    assert calls == []


def test_missing_api_key_is_a_configuration_error(monkeypatch):
    for name in config.API_KEY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    with pytest.raises(ConfigurationError):
        create_provider()
    with pytest.raises(ConfigurationError):
        GeminiClient("")


def test_api_key_is_read_from_environment(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", "from-env")
    assert config.get_api_key() == "from-env"

    client = create_provider()
    assert isinstance(client, GeminiClient)
    asyncio.run(client.aclose())


def test_extract_json_prefers_direct_parse():
    assert extract_json_from_response('{"word": "a"}') == {"word": "a"}
    assert extract_json_from_response('noise {"word": "b"} noise') == {"word": "b"}
    with pytest.raises(ProviderParseError):
        extract_json_from_response("[1, 2, 3]")


def test_top_level_array_is_a_parse_error():
    wrapped = json.dumps([batch_payload()])
    with pytest.raises(ProviderParseError):
        extract_json_from_response(wrapped)

    def handler(request):
        return httpx.Response(200, json=gemini_body(wrapped))

    with pytest.raises(ProviderParseError):
        asyncio.run(make_client(handler).fetch_batch("Yield", DifficultyTier.ADVANCED))


def test_key_that_cannot_be_sent_as_a_header_is_a_connection_error():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=gemini_body(json.dumps(batch_payload())))

    client = GeminiClient("key’", http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    with pytest.raises(ProviderConnectionError):
        asyncio.run(client.fetch_batch("Yield", DifficultyTier.ADVANCED))
    with pytest.raises(ProviderConnectionError):
        asyncio.run(client.fetch_feedback("She goes home.", "She go"))
    assert calls == []
