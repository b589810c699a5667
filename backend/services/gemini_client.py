"""Google Gemini API wrapper with error handling.

Every call is a blocking request. Failures of any kind are logged and
reported as ``None`` so callers can drop to their rule-based tier.
"""

import json
import logging

from google import genai
from google.genai import types

from config import settings

logger = logging.getLogger(__name__)

_client: genai.Client | None = None


def is_configured() -> bool:
    """True when remote scoring is enabled and an API key is present."""
    return settings.remote_scoring_enabled and bool(settings.gemini_api_key)


def get_client() -> genai.Client | None:
    global _client
    if not is_configured():
        logger.debug("No GEMINI_API_KEY set - Gemini features disabled")
        return None
    if _client is None:
        _client = genai.Client(api_key=settings.gemini_api_key)
    return _client


def _strip_fences(text: str) -> str:
    text = text.strip()
    # Strip markdown code fences if present
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        if text.endswith("```"):
            text = text[:-3]
        text = text.strip()
    return text


def generate_text(
    prompt: str,
    temperature: float = 0.3,
    max_output_tokens: int = 2048,
) -> str | None:
    """Send a prompt to Gemini and return the raw response text."""
    client = get_client()
    if client is None:
        return None

    try:
        response = client.models.generate_content(
            model=settings.gemini_model,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=temperature,
                max_output_tokens=max_output_tokens,
            ),
        )
    except Exception as e:
        logger.error("Gemini API error: %s", e)
        return None

    text = response.text
    if not text or not text.strip():
        logger.error("Gemini returned an empty response")
        return None
    return _strip_fences(text)


def generate_json(prompt: str, temperature: float = 0.3) -> dict | None:
    """Send a prompt to Gemini and parse the JSON response."""
    text = generate_text(prompt, temperature=temperature, max_output_tokens=4096)
    if text is None:
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Failed to parse Gemini response as JSON: %s", e)
        return None

    if not isinstance(data, dict):
        logger.error("Gemini JSON response is not an object")
        return None
    return data
