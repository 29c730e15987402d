"""Gemini REST client for example and feedback generation."""

import json
import re
import time
from typing import Optional

import httpx
from pydantic import ValidationError

import config
from drill.errors import (
    ConfigurationError,
    PreconditionViolation,
    ProviderConnectionError,
    ProviderParseError,
    ProviderSchemaError,
)
from drill.logger import GEMINI_LOGGER, get_logger
from drill.models import DifficultyTier, WordBatch
from drill.provider import ContentProvider

logger = get_logger(GEMINI_LOGGER)

BATCH_PROMPT_TEMPLATE = """English word: "{word}". Difficulty Level: "{difficulty}".
Task: Provide {count} VERY SHORT and CONCISE example sentences (max {max_words} words per sentence).
Output Format: JSON {{ "word": string, "examples": [{{ "english": string, "korean": string, "meaning": string, "grammar": string }}] }}
Guidelines: Use natural daily expressions. Keep 'meaning' (context) and 'grammar' (tip) brief in {language}. Put the {language} translation in 'korean'."""

FEEDBACK_PROMPT_TEMPLATE = """Original English: "{reference}"
User's English: "{learner_text}"
Identify why they are different in 1 very short {language} sentence. Focus on grammar or meaning."""

_EXAMPLE_FIELDS = ["english", "korean", "meaning", "grammar"]

BATCH_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "word": {"type": "STRING"},
        "examples": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {name: {"type": "STRING"} for name in _EXAMPLE_FIELDS},
                "required": _EXAMPLE_FIELDS,
            },
        },
    },
    "required": ["word", "examples"],
}


def extract_json_from_response(content: str) -> dict:
    """
    Extract a JSON object from the model's text.

    The text is usually bare JSON, but may arrive wrapped in a markdown
    code block or surrounded by prose.

    Args:
        content: Raw response text

    Returns:
        Parsed JSON dictionary

    Raises:
        ProviderParseError: If no JSON object can be found
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        pass
    else:
        if not isinstance(data, dict):
            raise ProviderParseError(f"Expected a JSON object, got {type(data).__name__}")
        return data

    # Look for ```json ... ``` blocks
    json_match = re.search(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```", content)
    if json_match:
        try:
            return json.loads(json_match.group(1))
        except json.JSONDecodeError:
            pass

    # Look for raw JSON object
    json_match = re.search(r"\{[\s\S]*\}", content)
    if json_match:
        try:
            return json.loads(json_match.group(0))
        except json.JSONDecodeError:
            pass

    raise ProviderParseError(f"Could not extract JSON from response: {content[:500]}...")


def parse_word_batch(data: dict) -> WordBatch:
    """
    Validate a decoded batch payload.

    Args:
        data: Decoded JSON with "word" and "examples"

    Returns:
        WordBatch with exactly config.BATCH_SIZE slots

    Raises:
        ProviderSchemaError: On missing or null fields, non-string values or wrong arity
    """
    try:
        return WordBatch.model_validate(data)
    except ValidationError as e:
        raise ProviderSchemaError(f"Invalid batch payload: {e}") from e


def extract_candidate_text(payload: dict) -> str:
    """Join the text parts of the first candidate in a generateContent response."""
    try:
        parts = payload["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise ProviderParseError(f"Response has no text candidate: {e!r}") from e


class GeminiClient(ContentProvider):
    """Talks to the Gemini generateContent endpoint over httpx."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = config.GEMINI_MODEL,
        base_url: str = config.GEMINI_API_BASE_URL,
        timeout: Optional[float] = config.PROVIDER_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if not api_key:
            raise ConfigurationError("Gemini API key is not configured")
        self.model = model
        self._api_key = api_key
        self._url = f"{base_url.rstrip('/')}/models/{model}:generateContent"
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def generate(self, prompt: str, response_schema: Optional[dict] = None) -> str:
        """
        Send one prompt and return the text of the first candidate.

        Raises:
            ProviderConnectionError: Transport failure or non-2xx status
            ProviderParseError: Body is not JSON or carries no candidate text
        """
        body: dict = {"contents": [{"parts": [{"text": prompt}]}]}
        if response_schema is not None:
            body["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            }

        logger.debug(f"→ POST {self._url} (model: {self.model})")
        started = time.perf_counter()
        try:
            response = await self._client.post(
                self._url,
                json=body,
                headers={"x-goog-api-key": self._api_key},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderConnectionError(
                f"Gemini returned HTTP {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, UnicodeEncodeError) as e:
            # UnicodeEncodeError: the key holds characters a header cannot carry
            raise ProviderConnectionError(f"Gemini request failed: {e!r}") from e
        duration_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"← Response from {self.model} ({duration_ms:.0f}ms)")

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderParseError(f"Gemini response is not JSON: {e}") from e
        return extract_candidate_text(payload)

    async def fetch_batch(self, word: str, tier: DifficultyTier) -> WordBatch:
        prompt = BATCH_PROMPT_TEMPLATE.format(
            word=word,
            difficulty=tier.value,
            count=config.BATCH_SIZE,
            max_words=config.MAX_SENTENCE_WORDS,
            language=config.TRANSLATION_LANGUAGE,
        )
        text = await self.generate(prompt, response_schema=BATCH_RESPONSE_SCHEMA)
        return parse_word_batch(extract_json_from_response(text))

    async def fetch_feedback(self, reference: str, learner_text: str) -> str:
        if not learner_text:
            raise PreconditionViolation("Feedback requires non-empty learner text")
        prompt = FEEDBACK_PROMPT_TEMPLATE.format(
            reference=reference,
            learner_text=learner_text,
            language=config.TRANSLATION_LANGUAGE,
        )
        text = await self.generate(prompt)
        return text.strip() or config.FEEDBACK_FALLBACK_TEXT

    async def aclose(self) -> None:
        await self._client.aclose()


def create_provider(api_key: Optional[str] = None) -> GeminiClient:
    """
    Build the provider from the environment.

    Raises:
        ConfigurationError: If no API key is configured
    """
    return GeminiClient(api_key if api_key is not None else config.get_api_key())
