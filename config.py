"""Configuration settings for the Daily Word drill."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Base paths
PROJECT_ROOT = Path(__file__).parent
LOGS_DIR = PROJECT_ROOT / "logs"

load_dotenv(PROJECT_ROOT / ".env")

# Provider credentials (checked once at boot)
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")


def get_api_key() -> str | None:
    """Return the first non-empty provider key found in the environment."""
    for name in API_KEY_ENV_VARS:
        value = os.getenv(name)
        if value and value.strip():
            return value.strip()
    return None


# Gemini API settings
GEMINI_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
GEMINI_MODEL = "gemini-3-flash-preview"
PROVIDER_TIMEOUT = None  # seconds; None waits as long as the service takes

# Session settings
BATCH_SIZE = 10
MAX_SENTENCE_WORDS = 10
DEFAULT_DIFFICULTY = "Intermediate"

# Language the translation, context and grammar notes are written in
TRANSLATION_LANGUAGE = "Korean"
FEEDBACK_FALLBACK_TEXT = "분석 불가"

# User-facing notices
PROVIDER_UNAVAILABLE_NOTICE = "API 키가 유효하지 않습니다."
BATCH_FAILED_NOTICE = (
    "문장 생성에 실패했습니다. 단어를 직접 입력해 보거나 잠시 후 다시 시도해 주세요."
)
