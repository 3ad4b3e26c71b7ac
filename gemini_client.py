"""
Gemini API Client with retry, timeout, structured logging.
"""

import base64
import time
from typing import Optional

import requests

from config import GEMINI_API_KEY_PLACEHOLDER, config
from exceptions import ConfigurationError, MalformedResponseError, NetworkError
from logging_config import configure_logging

logger = configure_logging(name="ai")

# statuses worth retrying; anything else fails immediately
RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def get_api_key() -> Optional[str]:
    """Configured key, or None when missing or left as the placeholder."""
    key = (config.GEMINI_API_KEY or "").strip()
    if not key or key == GEMINI_API_KEY_PLACEHOLDER:
        return None
    return key


def _response_text(data: dict) -> str:
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        text = None
    if not text:
        raise MalformedResponseError("No response from Gemini model")
    return text


def gemini_generate(prompt: str, file_bytes: bytes, mime_type: str, model: Optional[str] = None) -> str:
    """Send `prompt` plus one inline file to Gemini and return the reply text.

    Retries transport errors and 429/5xx responses up to AI_RETRY_COUNT
    attempts with linear backoff. Raises ConfigurationError without a key,
    NetworkError when every attempt fails.
    """
    key = get_api_key()
    if not key:
        raise ConfigurationError(
            "Gemini API key not configured. Set GEMINI_API_KEY in the environment."
        )

    model = model or config.GEMINI_MODEL
    url = f"{config.GEMINI_URL.rstrip('/')}/{model}:generateContent"

    payload = {
        "contents": [
            {
                "parts": [
                    {"text": prompt},
                    {
                        "inline_data": {
                            "mime_type": mime_type,
                            "data": base64.b64encode(file_bytes).decode("ascii"),
                        }
                    },
                ],
            }
        ],
    }

    attempts = max(1, config.AI_RETRY_COUNT)
    last_error = None

    for attempt in range(1, attempts + 1):
        try:
            logger.info(f"[AI] Attempt {attempt}/{attempts} model={model} bytes={len(file_bytes)} mime={mime_type}")
            start = time.time()
            res = requests.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json", "x-goog-api-key": key},
                timeout=config.AI_TIMEOUT_SECONDS,
            )
            latency = round(time.time() - start, 2)

            if res.status_code == 200:
                logger.info(f"[AI] Success in {latency}s")
                try:
                    data = res.json()
                except ValueError as e:
                    raise MalformedResponseError(f"Gemini returned non-JSON body: {e}") from e
                return _response_text(data)

            logger.warning(f"[AI] Error {res.status_code} after {latency}s: {res.text[:500]}")
            last_error = NetworkError(f"Gemini API error: HTTP {res.status_code}: {res.text[:500]}")
            if res.status_code not in RETRYABLE_STATUS:
                raise last_error

        except requests.RequestException as e:
            logger.error(f"[AI] Exception on attempt {attempt}: {e}")
            last_error = NetworkError(f"Gemini request failed: {e}")

        if attempt < attempts:
            time.sleep(attempt * 1.2)

    raise last_error
